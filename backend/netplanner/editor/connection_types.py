"""
Connection Type Registry

Fixed catalog of connection kinds and the stroke profile each one is
drawn with. Edges only ever carry a type that resolves here.
"""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict

from netplanner.errors import UnknownConnectionType
from netplanner.models.base import CamelModel
from netplanner.models.edge import ConnectionType


class ConnectionProfile(CamelModel):
    """Rendering and semantic profile of a connection type."""

    model_config = ConfigDict(frozen=True)

    connection_type: ConnectionType
    display_name: str
    stroke_width: int
    color: str
    dashed: bool = False
    dash_array: str | None = None
    animated: bool = True

    def stroke_style(self) -> dict[str, Any]:
        """Style dict handed to the canvas renderer."""
        style: dict[str, Any] = {
            "strokeWidth": self.stroke_width,
            "stroke": self.color,
            "animated": self.animated,
        }
        if self.dashed and self.dash_array:
            style["strokeDasharray"] = self.dash_array
        return style


CONNECTION_PROFILES: dict[ConnectionType, ConnectionProfile] = {
    ConnectionType.ETHERNET: ConnectionProfile(
        connection_type=ConnectionType.ETHERNET,
        display_name="Ethernet",
        stroke_width=10,
        color="#00ffff",
    ),
    ConnectionType.FIBER: ConnectionProfile(
        connection_type=ConnectionType.FIBER,
        display_name="Fiber Optic",
        stroke_width=12,
        color="#00ff00",
    ),
    ConnectionType.WIFI: ConnectionProfile(
        connection_type=ConnectionType.WIFI,
        display_name="WiFi",
        stroke_width=8,
        color="#ff00ff",
        dashed=True,
        dash_array="15,5",
    ),
    ConnectionType.VPN: ConnectionProfile(
        connection_type=ConnectionType.VPN,
        display_name="VPN",
        stroke_width=10,
        color="#ff0099",
    ),
    ConnectionType.POWER: ConnectionProfile(
        connection_type=ConnectionType.POWER,
        display_name="Power",
        stroke_width=8,
        color="#ffff00",
        dashed=True,
        dash_array="10,3",
    ),
}


def _coerce(connection_type: ConnectionType | str) -> ConnectionType:
    try:
        return ConnectionType(connection_type)
    except (TypeError, ValueError):
        raise UnknownConnectionType(str(connection_type)) from None


def resolve(connection_type: ConnectionType | str) -> ConnectionProfile:
    """Look up the profile for a connection type."""
    profile = CONNECTION_PROFILES.get(_coerce(connection_type))
    if profile is None:
        raise UnknownConnectionType(str(connection_type))
    return profile


def is_known(connection_type: Any) -> bool:
    try:
        resolve(connection_type)
    except UnknownConnectionType:
        return False
    return True


def catalog() -> list[ConnectionProfile]:
    """All profiles in registry order."""
    return list(CONNECTION_PROFILES.values())
