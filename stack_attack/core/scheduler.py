"""
Deferred Actions and Effect Timers
==================================

Engine-clock replacements for platform timers.

DelayedActionQueue holds (deadline, action) pairs that the step loop drains.
EffectTimers holds time-boxed cosmetic flags such as screen shake and flash.
Both are driven only by the engine clock, so behaviour is deterministic.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple


@dataclass(order=True)
class ScheduledAction:
    """A callable due at ``deadline``. Ordered by deadline, then insertion."""
    deadline: float
    sequence: int
    action: Callable[[], None] = field(compare=False)
    label: str = field(default="", compare=False)


class DelayedActionQueue:
    """Min-heap of scheduled actions keyed by engine-clock deadline."""

    def __init__(self):
        self._heap: List[ScheduledAction] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    @property
    def pending_count(self) -> int:
        return len(self._heap)

    @property
    def next_deadline(self):
        """Earliest deadline, or None if empty."""
        return self._heap[0].deadline if self._heap else None

    def schedule(self, deadline: float, action: Callable[[], None], label: str = "") -> ScheduledAction:
        """Queue ``action`` to run once the clock reaches ``deadline``."""
        entry = ScheduledAction(deadline, next(self._counter), action, label)
        heapq.heappush(self._heap, entry)
        return entry

    def drain(self, now: float) -> int:
        """
        Run every action whose deadline is at or before ``now``.

        Actions scheduled while draining run in the same call if already due.

        Returns:
            Number of actions executed.
        """
        executed = 0
        while self._heap and self._heap[0].deadline <= now:
            entry = heapq.heappop(self._heap)
            entry.action()
            executed += 1
        return executed

    def cancel_all(self) -> int:
        """Drop every pending action. Returns how many were dropped."""
        dropped = len(self._heap)
        self._heap.clear()
        return dropped


class EffectTimers:
    """Named boolean flags that switch off at an engine-clock deadline."""

    def __init__(self):
        self._until: Dict[str, float] = {}

    def trigger(self, name: str, duration: float, now: float) -> None:
        """Turn ``name`` on until ``now + duration`` (extends, never shortens)."""
        until = now + duration
        self._until[name] = max(until, self._until.get(name, until))

    def is_active(self, name: str, now: float) -> bool:
        return self._until.get(name, float("-inf")) > now

    def expire(self, now: float) -> List[str]:
        """Forget flags whose deadline has passed. Returns their names."""
        expired = [name for name, until in self._until.items() if until <= now]
        for name in expired:
            del self._until[name]
        return expired

    def active(self, now: float) -> Tuple[str, ...]:
        return tuple(sorted(name for name in self._until if self.is_active(name, now)))

    def clear(self) -> None:
        self._until.clear()
