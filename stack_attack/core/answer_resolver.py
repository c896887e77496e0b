"""
Answer Resolver
===============

Matches player input against falling items and applies the consequences.

Two rules, checked in this order:

1. Sum-all: with at least two items falling, an input equal to the sum of
   every answer clears all of them and detonates every block sharing a color
   with any of them (adjacency is ignored).
2. Single item: the lowest falling item (largest ``y``) whose answer equals
   the input is removed and same-color clusters of the grid are detonated.

Detonated blocks are flagged as clearing immediately; their removal and
compaction run from the delayed action queue after the clear delay.
Unmatched input longer than the length guard is rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Set, Tuple

from stack_attack.core.cluster_detector import blocks_of_colors, find_cluster
from stack_attack.core.compaction import remove_and_settle
from stack_attack.core.config_loader import GameConfig, get_config
from stack_attack.core.difficulty import DifficultyController
from stack_attack.core.entities import EntityStore, FallingItem
from stack_attack.core.events import EventKind, EventLog, GameEvent
from stack_attack.core.scheduler import DelayedActionQueue, EffectTimers
from stack_attack.core.scoring import ScoreTracker

logger = logging.getLogger(__name__)

EFFECT_SHAKE = "shake"
EFFECT_FLASH = "flash"


class MatchKind(str, Enum):
    IGNORED = "ignored"      # Not a number, or the game is not running
    PENDING = "pending"      # No match yet, input kept
    SINGLE = "single"
    SUM_ALL = "sum_all"
    REJECTED = "rejected"    # Wrong answer, input cleared


@dataclass
class MatchOutcome:
    """Result of submitting one input string."""
    kind: MatchKind
    value: Optional[int] = None
    matched_item_uids: Tuple[int, ...] = ()
    target_block_uids: FrozenSet[int] = frozenset()
    points: int = 0
    level_up: bool = False
    events: List[GameEvent] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return self.kind in (MatchKind.SINGLE, MatchKind.SUM_ALL)

    @property
    def clears_input(self) -> bool:
        return self.kind in (MatchKind.SINGLE, MatchKind.SUM_ALL, MatchKind.REJECTED)


def is_digit_string(text: str) -> bool:
    """True for a non-empty string of ASCII digits 0-9 only."""
    return bool(text) and text.isascii() and text.isdigit()


def parse_answer(text: str) -> Optional[int]:
    """Parse a digit string. Returns None for anything non-numeric."""
    if not is_digit_string(text):
        return None
    return int(text)


def order_by_proximity(items: List[FallingItem]) -> List[FallingItem]:
    """Items closest to landing first; equal heights keep spawn order."""
    return sorted(items, key=lambda item: -item.y)


class AnswerResolver:
    """
    The input-driven half of the engine's state machine.

    Every rule is applied to the entity store in full before control returns,
    so no caller ever observes a partially applied match.
    """

    def __init__(
        self,
        store: EntityStore,
        scorer: ScoreTracker,
        difficulty: DifficultyController,
        scheduler: DelayedActionQueue,
        effects: EffectTimers,
        events: EventLog,
        clock: Callable[[], float],
        config: Optional[GameConfig] = None
    ):
        """
        Initialize resolver.

        Args:
            store: Entity store to mutate.
            scorer: Score tracker.
            difficulty: Level/speed controller.
            scheduler: Queue for deferred compaction.
            effects: Cosmetic flag timers.
            events: Event sink.
            clock: Returns the current engine time in ms.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._store = store
        self._scorer = scorer
        self._difficulty = difficulty
        self._scheduler = scheduler
        self._effects = effects
        self._events = events
        self._clock = clock
        self._scoring = config.scoring
        self._effects_config = config.effects
        self._max_length = config.input.max_length

    def resolve(self, text: str) -> MatchOutcome:
        """
        Evaluate ``text`` against the falling items.

        Args:
            text: Raw input buffer contents.

        Returns:
            MatchOutcome describing what happened. Events are left in the
            event log for the caller to collect.
        """
        value = parse_answer(text)
        if value is None:
            return MatchOutcome(MatchKind.IGNORED)

        items = self._store.items

        if len(items) >= 2 and value == sum(item.answer for item in items):
            return self._apply_sum_all(value, items)

        for item in order_by_proximity(items):
            if item.answer == value:
                return self._apply_single(value, item)

        if len(text) > self._max_length:
            self._events.emit(EventKind.WRONG_INPUT, self._clock(), input=text)
            return MatchOutcome(MatchKind.REJECTED, value=value)

        return MatchOutcome(MatchKind.PENDING, value=value)

    # ------------------------------------------------------------------
    # Sum-all rule
    # ------------------------------------------------------------------

    def _apply_sum_all(self, value: int, items: List[FallingItem]) -> MatchOutcome:
        now = self._clock()
        self._store.clear_items()
        colors = {item.color for item in items}
        targets = blocks_of_colors(self._store.blocks, colors)

        self._effects.trigger(EFFECT_FLASH, self._effects_config.flash_sum_ms, now)
        self._events.emit(
            EventKind.MATCHED, now,
            mode="sum", item_count=len(items), colors=sorted(colors)
        )

        if targets:
            self._store.mark_clearing(targets)
            self._scheduler.schedule(
                now + self._effects_config.clear_delay_ms,
                lambda: self._detonate_colors(targets),
                label="sum_all_clear"
            )

        event = self._scorer.apply_sum_all(len(items), len(targets))
        logger.debug(
            "Sum-all %d cleared %d items, %d blocks targeted (+%d)",
            value, len(items), len(targets), event.points
        )
        return MatchOutcome(
            MatchKind.SUM_ALL,
            value=value,
            matched_item_uids=tuple(item.uid for item in items),
            target_block_uids=frozenset(targets),
            points=event.points
        )

    def _detonate_colors(self, targets: Set[int]) -> None:
        now = self._clock()
        result = remove_and_settle(self._store.blocks, targets, now)
        self._store.set_blocks(result.blocks)
        if result.removed_count:
            self._events.emit(
                EventKind.CLUSTER_CLEARED, now,
                size=result.removed_count, mode="sum"
            )

    # ------------------------------------------------------------------
    # Single-item rule
    # ------------------------------------------------------------------

    def _apply_single(self, value: int, item: FallingItem) -> MatchOutcome:
        now = self._clock()
        level = self._difficulty.level
        self._store.remove_item(item.uid)
        self._events.emit(
            EventKind.MATCHED, now,
            mode="single", item_uid=item.uid, color=item.color
        )

        targets = find_cluster(self._store.blocks, item.color, self._scoring.min_cluster_size)
        if targets:
            self._store.mark_clearing(targets)
            if len(targets) >= self._effects_config.shake_min_cluster:
                self._effects.trigger(EFFECT_SHAKE, self._effects_config.shake_ms, now)
            cluster_size = len(targets)
            self._scheduler.schedule(
                now + self._effects_config.clear_delay_ms,
                lambda: self._detonate_cluster(targets, cluster_size),
                label="cluster_clear"
            )

        event = self._scorer.apply_match(level)
        leveled = self._difficulty.record_solve()
        if leveled:
            self._events.emit(EventKind.LEVEL_UP, now, level=self._difficulty.level)

        return MatchOutcome(
            MatchKind.SINGLE,
            value=value,
            matched_item_uids=(item.uid,),
            target_block_uids=frozenset(targets),
            points=event.points,
            level_up=leveled
        )

    def _detonate_cluster(self, targets: Set[int], cluster_size: int) -> None:
        now = self._clock()
        result = remove_and_settle(self._store.blocks, targets, now)
        self._store.set_blocks(result.blocks)
        if not result.removed_count:
            return

        event = self._scorer.apply_cluster_clear(result.removed_count, cluster_size)
        self._events.emit(
            EventKind.CLUSTER_CLEARED, now,
            size=result.removed_count, points=event.points
        )
        if event.is_combo:
            self._effects.trigger(EFFECT_FLASH, self._effects_config.flash_combo_ms, now)
            self._events.emit(EventKind.COMBO_CLEARED, now, size=cluster_size)
