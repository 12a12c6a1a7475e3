"""
Layout Commands

Deterministic bulk repositioning. Grid arrangement keeps nodes apart by
construction, so these commands skip collision correction.
"""

from __future__ import annotations

from typing import Sequence

from netplanner.models.node import Node, Position


def _moved(node: Node, x: float, y: float) -> Node:
    return node.model_copy(update={"position": Position(x=x, y=y)})


def auto_arrange(
    nodes: Sequence[Node],
    columns: int = 4,
    column_spacing: float = 250.0,
    row_spacing: float = 200.0,
    x_offset: float = 100.0,
    y_offset: float = 100.0,
) -> list[Node]:
    """Lay nodes out left to right, top to bottom in a fixed-column grid."""
    if columns < 1:
        raise ValueError("columns must be at least 1")

    arranged = []
    for index, node in enumerate(nodes):
        row, col = divmod(index, columns)
        arranged.append(
            _moved(node, col * column_spacing + x_offset, row * row_spacing + y_offset)
        )
    return arranged


def align_horizontally(nodes: Sequence[Node]) -> list[Node]:
    """Put every node on the mean y; x is unchanged."""
    if not nodes:
        return []
    avg_y = sum(n.position.y for n in nodes) / len(nodes)
    return [_moved(n, n.position.x, avg_y) for n in nodes]


def align_vertically(nodes: Sequence[Node]) -> list[Node]:
    """Put every node on the mean x; y is unchanged."""
    if not nodes:
        return []
    avg_x = sum(n.position.x for n in nodes) / len(nodes)
    return [_moved(n, avg_x, n.position.y) for n in nodes]


def snap_to_grid(position: Position, grid: tuple[float, float] = (20.0, 20.0)) -> Position:
    """Round a position to the nearest grid point."""
    gx, gy = grid
    x = round(position.x / gx) * gx if gx > 0 else position.x
    y = round(position.y / gy) * gy if gy > 0 else position.y
    return Position(x=x, y=y)

