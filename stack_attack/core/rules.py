"""
Game Rules
==========

Handles spawn placement and the termination condition.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from stack_attack.core.config_loader import GameConfig, get_config
from stack_attack.core.palette import ColorTag


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    reason: str
    columns: List[int]

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, "", [])

    @staticmethod
    def game_over(reason: str, columns: Sequence[int] = ()) -> "TerminationResult":
        return TerminationResult(True, reason, list(columns))


@dataclass(frozen=True)
class SpawnPlan:
    """Where and how the next falling item appears."""
    column: int
    y: float
    speed: float
    color: ColorTag


class SpawnRules:
    """
    Chooses column, color and speed for new falling items.

    A spawn aimed at a full column is skipped rather than retried.
    """

    def __init__(self, config: Optional[GameConfig] = None, seed: Optional[int] = None):
        """
        Initialize spawn rules.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = random.Random(seed)
        self._columns = config.board.columns
        self._max_rows = config.board.max_rows
        self._spawn_y = config.board.spawn_y
        self._jitter_min = config.physics.speed_jitter_min
        self._jitter_max = config.physics.speed_jitter_max
        self._num_colors = config.num_colors

    @property
    def spawn_y(self) -> float:
        return self._spawn_y

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self._rng = random.Random(seed)

    def plan(self, column_counts: Sequence[int], fall_speed: float) -> Optional[SpawnPlan]:
        """
        Pick a spawn for the current board.

        Args:
            column_counts: Occupied rows per column.
            fall_speed: Current base fall speed.

        Returns:
            SpawnPlan, or None if the chosen column is already full.
        """
        column = self._rng.randint(0, self._columns - 1)
        if column_counts[column] >= self._max_rows:
            return None

        jitter = self._rng.randint(self._jitter_min, self._jitter_max) / 100.0
        color = self._rng.randint(0, self._num_colors - 1)
        return SpawnPlan(column=column, y=self._spawn_y, speed=fall_speed * jitter, color=color)


class TerminationRules:
    """
    Handles game termination.

    The first column whose block count reaches ``max_rows`` ends the run.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._max_rows = config.board.max_rows

    @property
    def max_rows(self) -> int:
        return self._max_rows

    def check_termination(self, column_counts: Sequence[int]) -> TerminationResult:
        """
        Check the stack overflow condition.

        Args:
            column_counts: Occupied rows per column.
        """
        full = [c for c, count in enumerate(column_counts) if count >= self._max_rows]
        if full:
            return TerminationResult.game_over("stack_overflow", full)
        return TerminationResult.none()


class GameRules:
    """Combined interface for all game rules."""

    def __init__(self, config: Optional[GameConfig] = None, seed: Optional[int] = None):
        if config is None:
            config = get_config()

        self.spawn = SpawnRules(config, seed)
        self.termination = TerminationRules(config)

    def reset(self, seed: Optional[int] = None) -> None:
        self.spawn.reset(seed)
