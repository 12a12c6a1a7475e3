"""
Collision-Avoidance Engine

Pushes nodes that sit closer than the minimum separation apart. Runs on
drag end only, never while a node is being dragged.

A settle pass walks every unordered pair once, in node order, updating
positions as it goes. One pass does not always resolve clusters of three
or more mutually close nodes; that residue is the reference behavior and
existing snapshots depend on it, so extra passes are opt-in.
"""

from __future__ import annotations

import math
from typing import Iterable

from netplanner.models.node import Node, Position

MIN_DISTANCE = 150.0


def _push(
    ax: float, ay: float, bx: float, by: float, min_distance: float
) -> tuple[float, float, float, float] | None:
    """Corrected coordinates for one pair, or None when far enough apart."""
    dx = ax - bx
    dy = ay - by
    distance = math.hypot(dx, dy)
    if distance >= min_distance:
        return None

    if distance == 0:
        # Coincident nodes have no direction; push along +x
        ux, uy = 1.0, 0.0
    else:
        angle = math.atan2(dy, dx)
        ux, uy = math.cos(angle), math.sin(angle)

    push = (min_distance - distance) / 2
    return (
        ax + ux * push,
        ay + uy * push,
        bx - ux * push,
        by - uy * push,
    )


def settle(
    nodes: Iterable[Node],
    min_distance: float = MIN_DISTANCE,
    passes: int = 1,
) -> dict[str, Position]:
    """
    Run the pairwise correction over the given nodes.

    Returns the new position of every node that moved, keyed by node id.
    The input nodes are not modified.
    """
    ids: list[str] = []
    coords: list[list[float]] = []
    for node in nodes:
        ids.append(node.id)
        coords.append([node.position.x, node.position.y])

    moved: set[int] = set()
    for _ in range(max(passes, 1)):
        changed = False
        for i in range(len(coords)):
            for j in range(i + 1, len(coords)):
                a, b = coords[i], coords[j]
                result = _push(a[0], a[1], b[0], b[1], min_distance)
                if result is None:
                    continue
                a[0], a[1], b[0], b[1] = result
                moved.update((i, j))
                changed = True
        if not changed:
            break

    return {ids[i]: Position(x=coords[i][0], y=coords[i][1]) for i in sorted(moved)}


def find_overlaps(
    nodes: Iterable[Node], min_distance: float = MIN_DISTANCE
) -> list[tuple[str, str, float]]:
    """Pairs of nodes currently closer than min_distance, with their distance."""
    node_list = list(nodes)
    overlaps = []
    for i, a in enumerate(node_list):
        for b in node_list[i + 1:]:
            distance = math.hypot(
                a.position.x - b.position.x, a.position.y - b.position.y
            )
            if distance < min_distance:
                overlaps.append((a.id, b.id, distance))
    return overlaps
