"""
Physics Stepper
===============

Advances falling items by elapsed time, detects floor collisions and converts
landed items into grid blocks.

Positions are percentages of board height. Speeds are expressed per reference
tick (16 ms by default) so different frame rates integrate consistently.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional

from stack_attack.core.config_loader import GameConfig, get_config
from stack_attack.core.entities import Block, FallingItem

logger = logging.getLogger(__name__)


def _uid_counter_after(
    items: List[FallingItem],
    blocks_by_column: Dict[int, List[Block]]
) -> Callable[[], int]:
    """Allocator yielding uids above every uid already in use."""
    used = [item.uid for item in items]
    for column_blocks in blocks_by_column.values():
        used.extend(block.uid for block in column_blocks)
    return itertools.count(max(used, default=-1) + 1).__next__


@dataclass
class PhysicsResult:
    """Result of a single physics step."""
    surviving_items: List[FallingItem]
    newly_landed: List[Block]
    column_overflow: bool
    overflow_columns: List[int] = field(default_factory=list)


class PhysicsStepper:
    """
    Discrete-time integrator for falling items.

    Each column has a floor line at ``100 - (occupied + 1) * row_height``.
    An item whose position reaches that line lands on top of the stack.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize stepper.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._max_rows = config.board.max_rows
        self._row_height = config.row_height_percent
        self._reference_tick_ms = config.physics.reference_tick_ms

    @property
    def row_height_percent(self) -> float:
        return self._row_height

    def floor_line(self, occupied: int) -> float:
        """
        Vertical position at which an item lands in a column.

        Args:
            occupied: Number of blocks already in the column.
        """
        return 100.0 - (occupied + 1) * self._row_height

    def displacement(self, speed: float, elapsed_ms: float, speed_multiplier: float = 1.0) -> float:
        """Distance travelled in ``elapsed_ms`` at ``speed`` per reference tick."""
        return speed * speed_multiplier * (elapsed_ms / self._reference_tick_ms)

    def step(
        self,
        items: List[FallingItem],
        blocks_by_column: Dict[int, List[Block]],
        elapsed_ms: float,
        speed_multiplier: float = 1.0,
        now_ms: float = 0.0,
        next_uid: Optional[Callable[[], int]] = None
    ) -> PhysicsResult:
        """
        Advance all items and land the ones that reach their floor.

        ``blocks_by_column`` is updated in place: landed blocks are appended
        to their column and every block in a column that received a landing
        gets ``last_settled_at = now_ms``.

        Args:
            items: Falling items. Not mutated; survivors are new objects.
            blocks_by_column: Column index to that column's blocks.
            elapsed_ms: Time since the previous step.
            speed_multiplier: Global multiplier on every item's speed.
            now_ms: Timestamp stamped on landings.
            next_uid: Identifier allocator for new blocks. Defaults to
                counting up from the largest uid among ``items`` and
                ``blocks_by_column``.

        Returns:
            PhysicsResult with survivors, new blocks and overflow status.
        """
        if elapsed_ms < 0:
            raise ValueError(f"elapsed_ms must be non-negative, got {elapsed_ms}")
        if next_uid is None:
            next_uid = _uid_counter_after(items, blocks_by_column)

        surviving: List[FallingItem] = []
        landed: List[Block] = []
        overflow_columns: List[int] = []

        for item in items:
            next_y = item.y + self.displacement(item.speed, elapsed_ms, speed_multiplier)
            column_blocks = blocks_by_column.setdefault(item.column, [])
            occupied = len(column_blocks)

            if next_y < self.floor_line(occupied):
                surviving.append(replace(item, y=next_y))
                continue

            block = Block(
                uid=next_uid(),
                column=item.column,
                row=occupied,
                color=item.color,
                last_settled_at=now_ms
            )
            # Impact refreshes the whole column
            for other in column_blocks:
                other.last_settled_at = now_ms
            column_blocks.append(block)
            landed.append(block)
            logger.debug(
                "Item %d (%s) landed in column %d at row %d",
                item.uid, item.expression, item.column, block.row
            )

            if occupied + 1 >= self._max_rows and item.column not in overflow_columns:
                overflow_columns.append(item.column)

        return PhysicsResult(
            surviving_items=surviving,
            newly_landed=landed,
            column_overflow=bool(overflow_columns),
            overflow_columns=overflow_columns
        )
