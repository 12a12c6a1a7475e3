"""Test fixtures and configuration."""

from __future__ import annotations

import random
from datetime import datetime, timezone

import httpx
import pytest

from netplanner.config import AppConfig, EditorConfig, InventoryConfig, LayoutConfig
from netplanner.editor.controller import InteractionController
from netplanner.editor.graph import GraphModel
from netplanner.inventory.client import InventoryClient
from netplanner.inventory.sync import DeviceSyncAdapter
from netplanner.models.node import NodeKind, Position
from netplanner.storage.backends import MemoryBackend
from netplanner.storage.snapshots import SnapshotStore

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
INVENTORY_URL = "https://assets.example.com/api"

SAMPLE_DEVICES = [
    {
        "deviceId": "WS-001",
        "hostname": "reception-pc",
        "osName": "Windows 11 Pro",
        "lastSeenTimestamp": "2024-05-01T11:58:00Z",
        "appCount": 42,
    },
    {
        "deviceId": "WS-002",
        "hostname": "build-server",
        "osName": "Ubuntu 22.04",
        "lastSeenTimestamp": "2024-05-01T11:40:00Z",
        "appCount": 12,
    },
    {
        "deviceId": "WS-003",
        "hostname": "old-laptop",
        "osName": "macOS 12",
        "lastSeenTimestamp": "2024-04-28T09:00:00Z",
        "appCount": 7,
    },
]


def make_client_factory(handler):
    """InventoryClient factory routed through an httpx mock transport."""
    transport = httpx.MockTransport(handler)

    def factory(**kwargs):
        return InventoryClient(transport=transport, **kwargs)

    return factory


def json_handler(payload, status_code: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)

    return handler


@pytest.fixture
def inventory_config():
    return InventoryConfig(url=INVENTORY_URL, token="config-token")


@pytest.fixture
def sync_adapter(inventory_config):
    return DeviceSyncAdapter(
        inventory_config,
        client_factory=make_client_factory(json_handler(SAMPLE_DEVICES)),
        clock=lambda: NOW,
    )


@pytest.fixture
def graph():
    return GraphModel()


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return SnapshotStore(backend)


@pytest.fixture
def app_config(inventory_config):
    return AppConfig(
        editor=EditorConfig(),
        layout=LayoutConfig(),
        inventory=inventory_config,
    )


@pytest.fixture
def controller(graph, store, sync_adapter, app_config):
    return InteractionController(
        graph,
        store,
        sync_adapter,
        editor_config=app_config.editor,
        layout_config=app_config.layout,
        rng=random.Random(7),
    )


@pytest.fixture
def two_node_graph(graph):
    """Graph with nodes A and B joined by one ethernet edge."""
    a = graph.add_node(NodeKind.PC, "A", Position(x=0, y=0))
    b = graph.add_node(NodeKind.LAN_SWITCH, "B", Position(x=400, y=0))
    graph.add_edge(a.id, b.id, "right", "left", "ethernet")
    return graph, a, b


@pytest.fixture
def client_factory_for():
    """Build an InventoryClient factory from an httpx request handler."""
    return make_client_factory


@pytest.fixture
def respond_with():
    """Build an httpx handler answering every request with the payload."""
    return json_handler
