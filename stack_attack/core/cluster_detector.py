"""
Cluster Detector
================

Finds same-color connected groups of blocks for detonation.

Adjacency is 4-directional (shared edge). Blocks already flagged as clearing
neither join nor bridge clusters. The result depends only on the grid state
(column, row, color, clearing), never on the order blocks are supplied in.

The color-wide selection used by the sum-all rule lives here too but is a
separate function: it ignores adjacency entirely.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Set, Tuple

from stack_attack.core.entities import Block
from stack_attack.core.palette import ColorTag

Position = Tuple[int, int]

_NEIGHBOR_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1))


def _index_by_position(blocks: Iterable[Block]) -> Dict[Position, Block]:
    return {(b.column, b.row): b for b in blocks}


def connected_components(blocks: Iterable[Block], color: ColorTag) -> List[Set[int]]:
    """
    All connected components of non-clearing blocks of ``color``.

    Args:
        blocks: Grid blocks in any order.
        color: Color tag to group.

    Returns:
        List of uid sets, one per component (including singletons).
    """
    grid = _index_by_position(blocks)
    candidates = sorted(
        (b for b in grid.values() if b.color == color and not b.clearing),
        key=lambda b: (b.column, b.row)
    )

    visited: Set[int] = set()
    components: List[Set[int]] = []

    for seed in candidates:
        if seed.uid in visited:
            continue

        component = {seed.uid}
        visited.add(seed.uid)
        queue = deque([seed])

        while queue:
            current = queue.popleft()
            for dc, dr in _NEIGHBOR_OFFSETS:
                neighbor = grid.get((current.column + dc, current.row + dr))
                if neighbor is None or neighbor.uid in visited:
                    continue
                if neighbor.color != color or neighbor.clearing:
                    continue
                visited.add(neighbor.uid)
                component.add(neighbor.uid)
                queue.append(neighbor)

        components.append(component)

    return components


def find_cluster(
    blocks: Iterable[Block],
    seed_color: ColorTag,
    min_size: int = 2
) -> Set[int]:
    """
    Union of every qualifying cluster of ``seed_color`` across the grid.

    A component qualifies when it holds at least ``min_size`` blocks; a lone
    matching block never detonates.

    Args:
        blocks: Grid blocks in any order.
        seed_color: Color of the matched falling item.
        min_size: Minimum component size to detonate.

    Returns:
        Set of block uids to detonate (empty if none qualify).
    """
    targets: Set[int] = set()
    for component in connected_components(blocks, seed_color):
        if len(component) >= min_size:
            targets |= component
    return targets


def blocks_of_colors(blocks: Iterable[Block], colors: Iterable[ColorTag]) -> Set[int]:
    """
    Every block whose color is in ``colors``, regardless of adjacency.

    Used by the sum-all rule.
    """
    color_set = set(colors)
    return {b.uid for b in blocks if b.color in color_set}
