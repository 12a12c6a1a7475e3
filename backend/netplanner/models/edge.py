"""Edge models for the topology canvas."""

from enum import Enum
from typing import Optional

from .base import CamelModel


class Handle(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


class ConnectionType(str, Enum):
    ETHERNET = "ethernet"
    FIBER = "fiber"
    WIFI = "wifi"
    VPN = "vpn"
    POWER = "power"


class Edge(CamelModel):
    """Typed connection between two node handles."""

    id: str
    source_node_id: str
    target_node_id: str
    source_handle: Handle
    target_handle: Handle
    connection_type: ConnectionType
    label: Optional[str] = None
