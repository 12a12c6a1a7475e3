"""Node models for the topology canvas."""

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import CamelModel


class NodeKind(str, Enum):
    PC = "PC"
    LAPTOP = "Laptop"
    PRINTER = "Printer"
    SCANNER = "Scanner"
    LAN_SWITCH = "LanSwitch"
    WAN_ROUTER = "WanRouter"
    FIREWALL = "Firewall"
    SERVER = "Server"
    MONITORED_DEVICE = "MonitoredDevice"


class NodeStatus(str, Enum):
    ONLINE = "online"
    IDLE = "idle"
    OFFLINE = "offline"


# Labels used when a palette node is added without one
DEFAULT_LABELS = {
    NodeKind.PC: "PC",
    NodeKind.LAPTOP: "Laptop",
    NodeKind.PRINTER: "Printer",
    NodeKind.SCANNER: "Scanner",
    NodeKind.LAN_SWITCH: "LAN Switch",
    NodeKind.WAN_ROUTER: "WAN Router",
    NodeKind.FIREWALL: "Firewall",
    NodeKind.SERVER: "Server",
    NodeKind.MONITORED_DEVICE: "Device",
}


class Position(CamelModel):
    """Canvas position of a node. Both coordinates must be finite."""

    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


class DeviceInfo(CamelModel):
    """Inventory details carried by nodes placed from a sync candidate."""

    os: Optional[str] = None
    alert_count: int = 0
    app_count: int = 0


class Node(CamelModel):
    """A device box on the canvas."""

    id: str
    kind: NodeKind
    label: str
    position: Position
    status: NodeStatus = NodeStatus.OFFLINE
    device_info: Optional[DeviceInfo] = None
