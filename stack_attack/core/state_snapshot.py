"""
State Snapshot
==============

Packs engine state into an immutable snapshot for renderers.

Entities are exposed as frozen views; the grid is also packed into fixed-size
numpy arrays (row 0 = floor) for renderers and analysis tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np

from stack_attack.core.config_loader import GameConfig, get_config
from stack_attack.core.entities import Block, FallingItem

EMPTY_CELL = -1


@dataclass(frozen=True)
class FallingItemView:
    uid: int
    column: int
    y: float
    expression: str
    answer: int
    speed: float
    color: int


@dataclass(frozen=True)
class BlockView:
    uid: int
    column: int
    row: int
    color: int
    last_settled_at: float
    clearing: bool


@dataclass(frozen=True)
class GameSnapshot:
    """
    Complete, read-only engine state for one tick.

    Arrays are copies owned by the snapshot.
    """
    # Core state
    status: str
    score: int
    level: int
    solved_count: int
    fall_speed: float
    spawn_interval_ms: float
    current_input: str
    clock_ms: float

    # Cosmetic flags
    shaking: bool
    flashing: bool

    # Board info (for normalization)
    columns: int
    max_rows: int
    row_height_percent: float

    # Entities
    falling_items: Tuple[FallingItemView, ...]
    blocks: Tuple[BlockView, ...]

    # Grid arrays
    color_grid: np.ndarray       # (max_rows, columns) int8, EMPTY_CELL when free
    clearing_mask: np.ndarray    # (max_rows, columns) bool
    column_heights: np.ndarray   # (columns,) int16

    @property
    def is_over(self) -> bool:
        return self.status == "gameover"

    @property
    def danger_level(self) -> float:
        """Tallest column relative to ``max_rows`` (0-1)."""
        if self.column_heights.size == 0:
            return 0.0
        return float(self.column_heights.max()) / self.max_rows

    def to_dict(self) -> Dict[str, Any]:
        """Flatten to plain Python types for renderers."""
        return {
            "status": self.status,
            "score": self.score,
            "level": self.level,
            "solved_count": self.solved_count,
            "fall_speed": self.fall_speed,
            "spawn_interval_ms": self.spawn_interval_ms,
            "current_input": self.current_input,
            "clock_ms": self.clock_ms,
            "shaking": self.shaking,
            "flashing": self.flashing,
            "columns": self.columns,
            "max_rows": self.max_rows,
            "row_height_percent": self.row_height_percent,
            "falling_items": [
                {
                    "uid": item.uid,
                    "column": item.column,
                    "y": item.y,
                    "expression": item.expression,
                    "color": item.color,
                }
                for item in self.falling_items
            ],
            "blocks": [
                {
                    "uid": block.uid,
                    "column": block.column,
                    "row": block.row,
                    "color": block.color,
                    "last_settled_at": block.last_settled_at,
                    "clearing": block.clearing,
                }
                for block in self.blocks
            ],
            "column_heights": self.column_heights.tolist(),
        }


class SnapshotBuilder:
    """Builds game state snapshots with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._columns = config.board.columns
        self._max_rows = config.board.max_rows
        self._row_height = config.row_height_percent

        # Pre-allocate arrays
        self._color_grid = np.full((self._max_rows, self._columns), EMPTY_CELL, dtype=np.int8)
        self._clearing_mask = np.zeros((self._max_rows, self._columns), dtype=bool)
        self._column_heights = np.zeros(self._columns, dtype=np.int16)

    def build(
        self,
        status: str,
        score: int,
        level: int,
        solved_count: int,
        fall_speed: float,
        spawn_interval_ms: float,
        current_input: str,
        clock_ms: float,
        shaking: bool,
        flashing: bool,
        items: Iterable[FallingItem],
        blocks: Iterable[Block]
    ) -> GameSnapshot:
        """Build a snapshot from current game state."""
        self._color_grid.fill(EMPTY_CELL)
        self._clearing_mask.fill(False)
        self._column_heights.fill(0)

        block_views = []
        for block in blocks:
            block_views.append(BlockView(
                uid=block.uid,
                column=block.column,
                row=block.row,
                color=block.color,
                last_settled_at=block.last_settled_at,
                clearing=block.clearing
            ))
            self._column_heights[block.column] += 1
            if 0 <= block.row < self._max_rows:
                self._color_grid[block.row, block.column] = block.color
                self._clearing_mask[block.row, block.column] = block.clearing

        item_views = tuple(
            FallingItemView(
                uid=item.uid,
                column=item.column,
                y=item.y,
                expression=item.expression,
                answer=item.answer,
                speed=item.speed,
                color=item.color
            )
            for item in items
        )

        return GameSnapshot(
            status=status,
            score=score,
            level=level,
            solved_count=solved_count,
            fall_speed=fall_speed,
            spawn_interval_ms=spawn_interval_ms,
            current_input=current_input,
            clock_ms=clock_ms,
            shaking=shaking,
            flashing=flashing,
            columns=self._columns,
            max_rows=self._max_rows,
            row_height_percent=self._row_height,
            falling_items=item_views,
            blocks=tuple(sorted(block_views, key=lambda b: (b.column, b.row))),
            color_grid=self._color_grid.copy(),
            clearing_mask=self._clearing_mask.copy(),
            column_heights=self._column_heights.copy()
        )
