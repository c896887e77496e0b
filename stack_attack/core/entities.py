"""
Entity Store
============

Holds falling items and settled grid blocks.

The store is pure data plus bookkeeping: it assigns identifiers from a
monotonic counter and answers occupancy queries, but it never applies game
rules itself. Physics, compaction and the answer resolver mutate it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from stack_attack.core.palette import ColorTag


@dataclass
class FallingItem:
    """
    An airborne arithmetic expression.

    ``y`` is continuous: negative above the visible area, 0..100 visible.
    The column never changes during the item's lifetime.
    """
    uid: int
    column: int
    y: float
    expression: str
    answer: int
    speed: float
    color: ColorTag


@dataclass
class Block:
    """A settled, grid-resident candy. Row 0 is the floor."""
    uid: int
    column: int
    row: int
    color: ColorTag
    last_settled_at: float
    clearing: bool = False


class EntityStore:
    """
    Owns every FallingItem and Block of one game instance.

    Items and blocks are kept in insertion-ordered dicts keyed by uid.
    """

    def __init__(self, columns: int):
        """
        Initialize an empty store.

        Args:
            columns: Number of grid columns (COLUMNS).
        """
        self._columns = columns
        self._items: Dict[int, FallingItem] = {}
        self._blocks: Dict[int, Block] = {}
        self._next_uid = 0

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def items(self) -> List[FallingItem]:
        """Falling items in spawn order."""
        return list(self._items.values())

    @property
    def blocks(self) -> List[Block]:
        """Settled blocks in creation order."""
        return list(self._blocks.values())

    @property
    def item_count(self) -> int:
        return len(self._items)

    @property
    def block_count(self) -> int:
        return len(self._blocks)

    def next_uid(self) -> int:
        """Allocate a fresh identifier shared by items and blocks."""
        uid = self._next_uid
        self._next_uid += 1
        return uid

    def clear(self) -> None:
        """Remove all entities. Identifiers keep increasing."""
        self._items.clear()
        self._blocks.clear()

    # ------------------------------------------------------------------
    # Falling items
    # ------------------------------------------------------------------

    def spawn_item(
        self,
        column: int,
        y: float,
        expression: str,
        answer: int,
        speed: float,
        color: ColorTag
    ) -> FallingItem:
        """Create and store a new falling item."""
        if not 0 <= column < self._columns:
            raise ValueError(f"Column {column} out of range [0, {self._columns})")
        item = FallingItem(
            uid=self.next_uid(),
            column=column,
            y=y,
            expression=expression,
            answer=answer,
            speed=speed,
            color=color
        )
        self._items[item.uid] = item
        return item

    def get_item(self, uid: int) -> Optional[FallingItem]:
        return self._items.get(uid)

    def remove_item(self, uid: int) -> FallingItem:
        """Remove a falling item. Raises KeyError if unknown."""
        return self._items.pop(uid)

    def clear_items(self) -> List[FallingItem]:
        """Remove and return every falling item."""
        removed = list(self._items.values())
        self._items.clear()
        return removed

    def set_items(self, items: Iterable[FallingItem]) -> None:
        """Replace the falling set (used after a physics step)."""
        self._items = {item.uid: item for item in items}

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def add_block(self, block: Block) -> None:
        if block.uid in self._blocks:
            raise ValueError(f"Duplicate block uid: {block.uid}")
        self._blocks[block.uid] = block

    def get_block(self, uid: int) -> Optional[Block]:
        return self._blocks.get(uid)

    def set_blocks(self, blocks: Iterable[Block]) -> None:
        """Replace the block set (used after compaction)."""
        self._blocks = {block.uid: block for block in blocks}

    def blocks_by_column(self) -> Dict[int, List[Block]]:
        """Every column (including empty ones) mapped to its blocks by row."""
        by_column: Dict[int, List[Block]] = {c: [] for c in range(self._columns)}
        for block in self._blocks.values():
            by_column[block.column].append(block)
        for column_blocks in by_column.values():
            column_blocks.sort(key=lambda b: b.row)
        return by_column

    def column_counts(self) -> List[int]:
        counts = [0] * self._columns
        for block in self._blocks.values():
            counts[block.column] += 1
        return counts

    def mark_clearing(self, uids: Iterable[int]) -> int:
        """
        Flag blocks as mid-clear.

        Returns:
            Number of blocks that exist and were flagged.
        """
        flagged = 0
        for uid in uids:
            block = self._blocks.get(uid)
            if block is not None:
                block.clearing = True
                flagged += 1
        return flagged
