"""Tests for the interaction controller."""

import math

import pytest

from netplanner.editor.controller import (
    CANDIDATES_UPDATED,
    GRAPH_CHANGED,
    NODE_POSITION_COMMITTED,
    EditorState,
)
from netplanner.errors import (
    DuplicateNode,
    SnapshotNotFound,
    StorageIOError,
    UnknownCandidate,
    UnknownConnectionType,
    UnknownEdge,
    UnknownNode,
)
from netplanner.models.edge import ConnectionType
from netplanner.models.node import NodeKind, NodeStatus, Position


def _event_types(controller):
    return [e["type"] for e in controller.drain_events()]


class TestPalette:
    def test_random_placement_inside_box(self, controller):
        for _ in range(20):
            node = controller.add_palette_node(NodeKind.LAPTOP)
            assert 100 <= node.position.x <= 500
            assert 100 <= node.position.y <= 400
        assert controller.graph.node_count == 20

    def test_default_label(self, controller):
        assert controller.add_palette_node("LanSwitch").label == "LAN Switch"
        assert controller.add_palette_node(NodeKind.PC, "Desk 4").label == "Desk 4"

    def test_explicit_position(self, controller):
        node = controller.add_palette_node(NodeKind.SERVER, position=Position(x=7, y=9))
        assert node.position == Position(x=7, y=9)
        assert _event_types(controller) == [GRAPH_CHANGED]


class TestCandidates:
    @pytest.mark.asyncio
    async def test_place_candidate(self, controller):
        await controller.refresh_candidates()
        node = controller.place_candidate("WS-001", Position(x=200, y=200))

        assert node.id == "device-WS-001"
        assert node.kind == NodeKind.MONITORED_DEVICE
        assert node.status == NodeStatus.ONLINE
        assert node.device_info.app_count == 42
        assert _event_types(controller) == [CANDIDATES_UPDATED, GRAPH_CHANGED]

    @pytest.mark.asyncio
    async def test_place_twice_rejected(self, controller):
        await controller.refresh_candidates()
        controller.place_candidate("WS-002")
        with pytest.raises(DuplicateNode):
            controller.place_candidate("WS-002")
        assert controller.graph.node_count == 1

    def test_unknown_candidate(self, controller):
        with pytest.raises(UnknownCandidate):
            controller.place_candidate("WS-404")


class TestDragging:
    def test_no_correction_while_dragging(self, controller, two_node_graph):
        graph, a, b = two_node_graph

        assert controller.begin_drag(a.id)
        controller.drag_to(a.id, Position(x=395, y=3))

        assert controller.state == EditorState.DRAGGING
        assert graph.get_node(a.id).position == Position(x=400, y=0)
        assert graph.get_node(b.id).position == Position(x=400, y=0)

    def test_drag_end_settles(self, controller, two_node_graph):
        graph, a, b = two_node_graph
        controller.begin_drag(a.id)
        controller.drag_to(a.id, Position(x=400, y=0))

        corrections = controller.end_drag(a.id)

        assert controller.state == EditorState.IDLE
        assert corrections == {
            a.id: Position(x=475, y=0),
            b.id: Position(x=325, y=0),
        }
        assert graph.get_node(a.id).position == Position(x=475, y=0)
        assert _event_types(controller) == [NODE_POSITION_COMMITTED, GRAPH_CHANGED]

    def test_drop_position_is_snapped(self, controller, two_node_graph):
        graph, a, _ = two_node_graph
        controller.end_drag(a.id, Position(x=11, y=-29))
        assert graph.get_node(a.id).position == Position(x=20, y=-20)

    def test_snapping_disabled(self, controller, two_node_graph):
        graph, a, _ = two_node_graph
        controller.editor_config.snap_to_grid = False
        controller.end_drag(a.id, Position(x=11, y=-29))
        assert graph.get_node(a.id).position == Position(x=11, y=-29)

    def test_drag_end_for_deleted_node(self, controller, two_node_graph):
        _, a, _ = two_node_graph
        controller.begin_drag(a.id)
        controller.remove_node(a.id)
        controller.drain_events()

        assert controller.end_drag(a.id, Position(x=0, y=0)) == {}
        assert controller.drain_events() == []

    def test_drag_drops_edge_selection(self, controller, two_node_graph):
        graph, a, _ = two_node_graph
        controller.select_edge(graph.edges[0].id)

        controller.drag_to(a.id, Position(x=10, y=10))
        controller.end_drag(a.id)

        assert controller.state == EditorState.IDLE
        assert controller.selected_edge_id is None
        assert controller.delete_selected_edge() is False
        assert controller.set_selected_edge_label("x") is None
        assert graph.edge_count == 1

    def test_drag_keeps_node_selection(self, controller, two_node_graph):
        _, a, b = two_node_graph
        controller.select_node(a.id)
        controller.select_node(b.id, additive=True)

        controller.begin_drag(a.id)
        controller.end_drag(a.id, Position(x=0, y=400))

        assert controller.selected_node_ids == [a.id, b.id]

    def test_drag_unknown_node(self, controller):
        assert controller.begin_drag("ghost") is False
        assert controller.drag_to("ghost", Position(x=0, y=0)) is None
        assert controller.state == EditorState.IDLE

    def test_distant_drop_moves_nothing_else(self, controller, two_node_graph):
        graph, a, b = two_node_graph
        assert controller.end_drag(a.id, Position(x=0, y=300)) == {}
        assert graph.get_node(b.id).position == Position(x=400, y=0)


class TestConnecting:
    def test_connection_uses_active_type(self, controller, two_node_graph):
        graph, a, b = two_node_graph
        controller.set_connection_type("wifi")
        controller.begin_connection(b.id, "top")
        assert controller.state == EditorState.CONNECTING

        edge = controller.complete_connection(a.id, "bottom")

        assert edge.connection_type == ConnectionType.WIFI
        assert edge.source_node_id == b.id
        assert controller.state == EditorState.IDLE
        assert graph.edge_count == 2

    def test_release_over_empty_space(self, controller, two_node_graph):
        graph, a, _ = two_node_graph
        controller.begin_connection(a.id, "right")
        assert controller.complete_connection(None) is None
        assert graph.edge_count == 1
        assert controller.state == EditorState.IDLE

    def test_target_deleted_mid_gesture(self, controller, two_node_graph):
        graph, a, b = two_node_graph
        controller.begin_connection(a.id, "right")
        graph.remove_node(b.id)

        with pytest.raises(UnknownNode):
            controller.complete_connection(b.id, "left")
        assert controller.state == EditorState.IDLE
        assert graph.edge_count == 0

    def test_unknown_type_keeps_previous(self, controller):
        with pytest.raises(UnknownConnectionType):
            controller.set_connection_type("carrier-pigeon")
        assert controller.connection_type == ConnectionType.ETHERNET

    def test_begin_on_missing_node(self, controller):
        with pytest.raises(UnknownNode):
            controller.begin_connection("ghost", "left")
        assert controller.state == EditorState.IDLE

    def test_connect_explicit_type_applies_to_one_edge(self, controller, two_node_graph):
        _, a, b = two_node_graph
        edge = controller.connect(a.id, "bottom", b.id, "bottom", "power")
        assert edge.connection_type == ConnectionType.POWER
        assert controller.connection_type == ConnectionType.ETHERNET

        follow_up = controller.connect(b.id, "top", a.id, "top")
        assert follow_up.connection_type == ConnectionType.ETHERNET

    def test_connect_missing_target(self, controller, two_node_graph):
        graph, a, _ = two_node_graph
        with pytest.raises(UnknownNode):
            controller.connect(a.id, "right", "ghost", "left")
        assert graph.edge_count == 1
        assert controller.state == EditorState.IDLE


class TestEdgeSelection:
    def test_label_and_delete(self, controller, two_node_graph):
        graph, _, _ = two_node_graph
        edge_id = graph.edges[0].id

        controller.select_edge(edge_id)
        assert controller.state == EditorState.EDGE_SELECTED

        assert controller.set_selected_edge_label("uplink").label == "uplink"
        assert controller.selected_edge_id == edge_id

        assert controller.delete_selected_edge() is True
        assert graph.edge_count == 0
        assert controller.state == EditorState.IDLE
        assert controller.selected_edge_id is None

    def test_deselect(self, controller, two_node_graph):
        graph, _, _ = two_node_graph
        controller.select_edge(graph.edges[0].id)
        controller.deselect()
        assert controller.state == EditorState.IDLE
        assert controller.delete_selected_edge() is False
        assert graph.edge_count == 1

    def test_unknown_edge(self, controller):
        with pytest.raises(UnknownEdge):
            controller.select_edge("edge-nope")
        assert controller.state == EditorState.IDLE

    def test_deleting_endpoint_clears_selection(self, controller, two_node_graph):
        graph, a, _ = two_node_graph
        edge_id = graph.edges[0].id
        controller.select_edge(edge_id)
        assert controller.remove_node(a.id) == [edge_id]
        assert controller.state == EditorState.IDLE
        assert controller.selected_edge_id is None


class TestNodeSelection:
    def test_additive_toggle(self, controller, two_node_graph):
        _, a, b = two_node_graph
        controller.select_node(a.id)
        assert controller.select_node(b.id, additive=True) == [a.id, b.id]
        assert controller.select_node(a.id, additive=True) == [b.id]
        assert controller.select_node(a.id) == [a.id]

    def test_delete_selected_nodes(self, controller, two_node_graph):
        graph, a, b = two_node_graph
        controller.add_palette_node(NodeKind.PRINTER)
        controller.select_node(a.id)
        controller.select_node(b.id, additive=True)

        assert controller.delete_selected_nodes() == [a.id, b.id]
        assert graph.node_count == 1
        assert graph.edge_count == 0
        assert controller.selected_node_ids == []

    def test_selecting_node_cancels_connection(self, controller, two_node_graph):
        graph, a, b = two_node_graph
        controller.begin_connection(a.id, "right")

        controller.select_node(b.id)

        assert controller.state == EditorState.IDLE
        assert controller.selected_node_ids == [b.id]
        assert controller.complete_connection(b.id, "left") is None
        assert graph.edge_count == 1

    def test_selecting_node_drops_edge_selection(self, controller, two_node_graph):
        graph, a, _ = two_node_graph
        controller.select_edge(graph.edges[0].id)
        controller.select_node(a.id)
        assert controller.state == EditorState.IDLE
        assert controller.selected_edge_id is None

    def test_select_all(self, controller, two_node_graph):
        _, a, b = two_node_graph
        assert controller.select_all_nodes() == [a.id, b.id]


class TestLayout:
    def test_auto_arrange(self, controller, two_node_graph):
        graph, a, b = two_node_graph
        controller.run_layout("auto-arrange")
        assert graph.get_node(a.id).position == Position(x=100, y=100)
        assert graph.get_node(b.id).position == Position(x=350, y=100)

    def test_align_commands(self, controller, two_node_graph):
        graph, a, b = two_node_graph
        graph.update_node_position(b.id, Position(x=400, y=300))

        controller.run_layout("align-horizontal")
        assert {n.position.y for n in graph.nodes} == {150}

        controller.run_layout("align-vertical")
        assert {n.position.x for n in graph.nodes} == {200}

    def test_unknown_command(self, controller):
        with pytest.raises(ValueError):
            controller.run_layout("spiral")

    def test_empty_graph(self, controller):
        assert controller.run_layout("align-vertical") == []


class TestTopologyView:
    def test_edges_carry_stroke_style(self, controller, two_node_graph):
        topology = controller.topology()
        assert topology.node_count == 2
        assert topology.edges[0].style["strokeWidth"] == 10
        assert topology.edges[0].style["stroke"] == "#00ffff"


class TestSnapshots:
    @pytest.mark.asyncio
    async def test_load_replaces_graph(self, controller, two_node_graph):
        graph, a, b = two_node_graph
        saved = await controller.save_snapshot("Office")

        controller.add_palette_node(NodeKind.FIREWALL)
        controller.remove_node(a.id)
        controller.select_node(b.id)

        result = await controller.load_snapshot(saved.id)

        assert result.skipped == []
        assert sorted(n.id for n in graph.nodes) == sorted([a.id, b.id])
        assert graph.edge_count == 1
        assert controller.current_name == "Office"
        assert controller.selected_node_ids == []

    @pytest.mark.asyncio
    async def test_load_missing_keeps_graph(self, controller, two_node_graph):
        graph, _, _ = two_node_graph

        with pytest.raises(SnapshotNotFound):
            await controller.load_snapshot("nope")
        assert graph.node_count == 2

    @pytest.mark.asyncio
    async def test_failed_save_leaves_graph(self, controller, two_node_graph, monkeypatch):
        graph, _, _ = two_node_graph

        async def broken(records):
            raise StorageIOError("disk full")

        monkeypatch.setattr(controller.store._backend, "write_all", broken)
        with pytest.raises(StorageIOError):
            await controller.save_snapshot("Office")
        assert graph.node_count == 2
        assert graph.edge_count == 1

    @pytest.mark.asyncio
    async def test_autosave_only_when_dirty(self, controller, two_node_graph):
        graph, a, _ = two_node_graph
        assert await controller.autosave_if_dirty() is True
        assert await controller.autosave_if_dirty() is False

        graph.update_node_position(a.id, Position(x=-300, y=0))
        assert await controller.autosave_if_dirty() is True

        controller.remove_node(a.id)
        result_before = await controller.autosave_if_dirty()
        assert result_before is True

        loaded = await controller.load_autosave()
        assert [n.id for n in loaded.nodes] == [n.id for n in graph.nodes]

    @pytest.mark.asyncio
    async def test_empty_graph_not_autosaved(self, controller):
        assert await controller.autosave_if_dirty() is False

    @pytest.mark.asyncio
    async def test_delete_snapshot(self, controller):
        saved = await controller.save_snapshot(None)
        assert saved.name.startswith("Topology ")
        assert await controller.delete_snapshot(saved.id) is True
        assert await controller.delete_snapshot(saved.id) is False
        assert await controller.list_snapshots() == []


def test_settled_positions_are_finite(controller):
    for _ in range(4):
        controller.add_palette_node(NodeKind.PC, position=Position(x=0, y=0))
    controller.settle()
    for node in controller.graph.nodes:
        assert math.isfinite(node.position.x)
        assert math.isfinite(node.position.y)
