"""
Difficulty Controller
=====================

Tracks level, fall speed and spawn cadence as a function of solved items.

Difficulty only ever increases: every ``level_threshold`` solves the level
goes up by one, fall speed grows by ``speed_inc`` and the spawn interval
shrinks by ``spawn_dec``, floored at ``min_interval_ms``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from stack_attack.core.config_loader import GameConfig, get_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DifficultyState:
    """Immutable view of the difficulty tunables."""
    level: int
    fall_speed: float
    spawn_interval_ms: float
    solved_count: int


class DifficultyController:
    """Owns the difficulty tunables consumed by spawning and physics."""

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize controller at level 1.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._threshold = config.difficulty.level_threshold
        self._speed_inc = config.difficulty.speed_inc
        self._spawn_dec = config.difficulty.spawn_dec
        self._min_spawn = config.spawn.min_interval_ms
        self.reset()

    def reset(self) -> None:
        """Return to the initial difficulty."""
        self._level = 1
        self._fall_speed = self._config.physics.base_speed
        self._spawn_interval_ms = self._config.spawn.initial_interval_ms
        self._solved_count = 0

    @property
    def level(self) -> int:
        return self._level

    @property
    def fall_speed(self) -> float:
        """Base speed given to newly spawned items."""
        return self._fall_speed

    @property
    def spawn_interval_ms(self) -> float:
        return self._spawn_interval_ms

    @property
    def solved_count(self) -> int:
        return self._solved_count

    @property
    def state(self) -> DifficultyState:
        return DifficultyState(
            level=self._level,
            fall_speed=self._fall_speed,
            spawn_interval_ms=self._spawn_interval_ms,
            solved_count=self._solved_count
        )

    def record_solve(self) -> bool:
        """
        Count one solved item and level up on each threshold crossing.

        Returns:
            True if this solve raised the level.
        """
        self._solved_count += 1
        if self._solved_count % self._threshold != 0:
            return False

        self._level += 1
        self._fall_speed += self._speed_inc
        self._spawn_interval_ms = max(self._min_spawn, self._spawn_interval_ms - self._spawn_dec)
        logger.info(
            "Level up to %d (speed=%.3f, spawn interval=%.0fms)",
            self._level, self._fall_speed, self._spawn_interval_ms
        )
        return True
