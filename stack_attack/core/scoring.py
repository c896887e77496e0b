"""
Scoring System
==============

Applies match and detonation scores based on game configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from stack_attack.core.config_loader import GameConfig, get_config


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    reason: str           # "match", "cluster" or "sum_all"
    block_count: int = 0
    item_count: int = 0
    is_combo: bool = False

    def __repr__(self) -> str:
        if self.is_combo:
            return f"ScoreEvent(combo x{self.block_count}={self.points})"
        return f"ScoreEvent({self.reason}={self.points})"


class ScoreTracker:
    """
    Tracks game score.

    - Single match: ``match_base + level``
    - Cluster clear: ``cluster_block`` per removed block, plus ``combo_bonus``
      when the cluster is larger than ``combo_threshold``
    - Sum-all: ``sum_all_base + sum_all_per_item * items + sum_all_per_block * blocks``
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._scoring = config.scoring
        self._score: int = 0
        self._history: List[ScoreEvent] = []

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def history(self) -> List[ScoreEvent]:
        """All scoring events since the last reset."""
        return list(self._history)

    def is_combo(self, cluster_size: int) -> bool:
        return cluster_size > self._scoring.combo_threshold

    def _record(self, event: ScoreEvent) -> ScoreEvent:
        self._score += event.points
        self._history.append(event)
        return event

    def apply_match(self, level: int) -> ScoreEvent:
        """Award the flat bonus for solving a single item."""
        return self._record(ScoreEvent(
            points=self._scoring.match_base + level,
            reason="match",
            item_count=1
        ))

    def apply_cluster_clear(self, removed_count: int, cluster_size: int) -> ScoreEvent:
        """
        Award points for a detonated cluster.

        Args:
            removed_count: Blocks actually removed by compaction.
            cluster_size: Size of the cluster when it was flagged.
        """
        combo = self.is_combo(cluster_size)
        points = removed_count * self._scoring.cluster_block
        if combo:
            points += self._scoring.combo_bonus
        return self._record(ScoreEvent(
            points=points,
            reason="cluster",
            block_count=removed_count,
            is_combo=combo
        ))

    def apply_sum_all(self, item_count: int, block_count: int) -> ScoreEvent:
        """Award points for clearing every falling item at once."""
        points = (
            self._scoring.sum_all_base
            + self._scoring.sum_all_per_item * item_count
            + self._scoring.sum_all_per_block * block_count
        )
        return self._record(ScoreEvent(
            points=points,
            reason="sum_all",
            block_count=block_count,
            item_count=item_count
        ))

    def reset(self) -> None:
        """Reset score to zero."""
        self._score = 0
        self._history.clear()
