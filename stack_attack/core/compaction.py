"""
Compaction Engine
=================

Removes detonated blocks and re-settles what remains under gravity.

Columns are processed independently: the surviving blocks of a column are
sorted by row and renumbered 0..n-1, which closes every gap. Blocks whose row
changed are stamped with the current time (they "fell").
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Set

from stack_attack.core.entities import Block

logger = logging.getLogger(__name__)


@dataclass
class CompactionResult:
    """Outcome of a remove-and-settle pass."""
    blocks: List[Block]
    removed: List[Block]
    moved_uids: Set[int]

    @property
    def removed_count(self) -> int:
        return len(self.removed)


def remove_and_settle(
    blocks: Iterable[Block],
    ids_to_remove: Iterable[int],
    now_ms: float = 0.0
) -> CompactionResult:
    """
    Remove flagged blocks and close gaps in every column.

    Input blocks are not mutated; the result holds fresh Block objects for
    the survivors, ordered by column then row.

    Args:
        blocks: Current grid blocks.
        ids_to_remove: uids to remove. Unknown uids are ignored.
        now_ms: Timestamp for blocks that fell.

    Returns:
        CompactionResult with the settled blocks and the removed ones.
    """
    remove_set = set(ids_to_remove)
    by_column: Dict[int, List[Block]] = {}
    removed: List[Block] = []

    for block in blocks:
        if block.uid in remove_set:
            removed.append(block)
            continue
        by_column.setdefault(block.column, []).append(block)

    settled: List[Block] = []
    moved: Set[int] = set()

    for column in sorted(by_column):
        column_blocks = sorted(by_column[column], key=lambda b: b.row)
        for index, block in enumerate(column_blocks):
            if block.row != index:
                moved.add(block.uid)
                settled.append(replace(block, row=index, last_settled_at=now_ms))
            else:
                settled.append(replace(block))

    if removed:
        logger.debug("Compaction removed %d blocks, %d fell", len(removed), len(moved))

    return CompactionResult(blocks=settled, removed=removed, moved_uids=moved)


def is_compact(blocks: Iterable[Block]) -> bool:
    """True if every column's rows form exactly 0..count-1."""
    rows_by_column: Dict[int, List[int]] = {}
    for block in blocks:
        rows_by_column.setdefault(block.column, []).append(block.row)
    return all(
        sorted(rows) == list(range(len(rows)))
        for rows in rows_by_column.values()
    )
