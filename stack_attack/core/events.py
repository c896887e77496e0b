"""
Game Events
===========

Tagged notifications emitted by the engine for audio/FX collaborators.

The engine never calls into audio or rendering code. Each public call
(``step``, ``submit_input``) returns the events it produced, in order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class EventKind(str, Enum):
    LANDED = "landed"
    MATCHED = "matched"
    CLUSTER_CLEARED = "cluster_cleared"
    COMBO_CLEARED = "combo_cleared"
    WRONG_INPUT = "wrong_input"
    LEVEL_UP = "level_up"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class GameEvent:
    """A single engine notification."""
    kind: EventKind
    time_ms: float
    data: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        if self.data:
            return f"GameEvent({self.kind.value}, {self.data})"
        return f"GameEvent({self.kind.value})"


class EventLog:
    """Collects events until the current public call hands them out."""

    def __init__(self):
        self._pending: List[GameEvent] = []

    def emit(self, kind: EventKind, time_ms: float, **data: Any) -> GameEvent:
        event = GameEvent(kind, time_ms, dict(data))
        self._pending.append(event)
        return event

    def take(self) -> List[GameEvent]:
        """Return and forget all pending events."""
        events = self._pending
        self._pending = []
        return events

    def clear(self) -> None:
        self._pending.clear()
