"""Device inventory client and candidate sync."""

from netplanner.inventory.client import InventoryClient, InventoryDevice, parse_devices
from netplanner.inventory.sync import (
    CandidateNode,
    DeviceSyncAdapter,
    derive_status,
    device_node_id,
    to_candidate,
)

__all__ = [
    "InventoryClient",
    "InventoryDevice",
    "parse_devices",
    "CandidateNode",
    "DeviceSyncAdapter",
    "derive_status",
    "device_node_id",
    "to_candidate",
]
