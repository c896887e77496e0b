"""
Core Game
=========

Main game orchestrator combining spawning, physics, answer resolution,
scoring, difficulty and rules.

Lifecycle::

    game = StackAttackGame(config, seed=42)
    game.start()
    while not game.is_over:
        result = game.step(16)          # driven by an external frame loop
        game.press_digit("7")           # driven by an input source
    game.dispose()

The engine never runs on its own: nothing happens between calls, and every
call runs to completion before returning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from stack_attack.core.answer_resolver import (
    EFFECT_FLASH,
    EFFECT_SHAKE,
    AnswerResolver,
    MatchKind,
    MatchOutcome,
    is_digit_string,
)
from stack_attack.core.config_loader import GameConfig, get_config
from stack_attack.core.difficulty import DifficultyController
from stack_attack.core.entities import Block, EntityStore, FallingItem
from stack_attack.core.events import EventKind, EventLog, GameEvent
from stack_attack.core.palette import Palette
from stack_attack.core.physics_stepper import PhysicsStepper
from stack_attack.core.problem_generator import ProblemGenerator
from stack_attack.core.rules import GameRules, TerminationResult
from stack_attack.core.scheduler import DelayedActionQueue, EffectTimers
from stack_attack.core.scoring import ScoreTracker
from stack_attack.core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


class GameStatus(str, Enum):
    MENU = "menu"
    PLAYING = "playing"
    GAMEOVER = "gameover"


@dataclass
class StepResult:
    """Result of a single engine tick."""
    snapshot: GameSnapshot
    events: List[GameEvent]
    landed: List[Block] = field(default_factory=list)
    spawned: Optional[FallingItem] = None
    delta_score: int = 0
    game_over: bool = False
    termination_reason: str = ""


class StackAttackGame:
    """
    Main game simulation class.

    Orchestrates:
    - Problem generation and spawning
    - Physics stepping and landing
    - Answer resolution (sum-all and single-item rules)
    - Deferred detonation queue and cosmetic timers
    - Scoring and difficulty
    - Termination
    - State snapshots

    One instance is one independent game; instances share nothing.
    """

    def __init__(self, config: Optional[GameConfig] = None, seed: Optional[int] = None):
        """
        Initialize game in the menu state.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed

        # Initialize subsystems
        self._palette = Palette(config)
        self._store = EntityStore(config.board.columns)
        self._physics = PhysicsStepper(config)
        self._scorer = ScoreTracker(config)
        self._difficulty = DifficultyController(config)
        self._problems = ProblemGenerator(seed)
        self._rules = GameRules(config, self._derived_seed(seed, 1))
        self._scheduler = DelayedActionQueue()
        self._effects = EffectTimers()
        self._events = EventLog()
        self._snapshot_builder = SnapshotBuilder(config)
        self._resolver = AnswerResolver(
            store=self._store,
            scorer=self._scorer,
            difficulty=self._difficulty,
            scheduler=self._scheduler,
            effects=self._effects,
            events=self._events,
            clock=lambda: self._clock_ms,
            config=config
        )

        # Game state
        self._status = GameStatus.MENU
        self._clock_ms: float = 0.0
        self._last_spawn_ms: float = float("-inf")
        self._input: str = ""
        self._termination_reason: str = ""
        self._disposed = False

    @staticmethod
    def _derived_seed(seed: Optional[int], offset: int) -> Optional[int]:
        return None if seed is None else seed + offset

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def palette(self) -> Palette:
        return self._palette

    @property
    def store(self) -> EntityStore:
        """Entity store (for tools and tests)."""
        return self._store

    @property
    def physics(self) -> PhysicsStepper:
        return self._physics

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def is_playing(self) -> bool:
        return self._status == GameStatus.PLAYING

    @property
    def is_over(self) -> bool:
        return self._status == GameStatus.GAMEOVER

    @property
    def score(self) -> int:
        return self._scorer.score

    @property
    def level(self) -> int:
        return self._difficulty.level

    @property
    def difficulty(self) -> DifficultyController:
        return self._difficulty

    @property
    def clock_ms(self) -> float:
        """Engine time: the sum of all elapsed time passed to ``step``."""
        return self._clock_ms

    @property
    def current_input(self) -> str:
        return self._input

    @property
    def pending_actions(self) -> int:
        """Deferred detonations not yet applied."""
        return self._scheduler.pending_count

    @property
    def termination_reason(self) -> str:
        return self._termination_reason

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _check_alive(self) -> None:
        if self._disposed:
            raise RuntimeError("Game instance has been disposed")

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Reset to a fresh game and start playing.

        Args:
            seed: New random seed. Uses previous if None.

        Returns:
            Initial game snapshot.
        """
        self._check_alive()
        if seed is not None:
            self._seed = seed

        self._store.clear()
        self._scorer.reset()
        self._difficulty.reset()
        self._problems.reset(self._seed)
        self._rules.reset(self._derived_seed(self._seed, 1))
        self._scheduler.cancel_all()
        self._effects.clear()
        self._events.clear()

        self._clock_ms = 0.0
        self._last_spawn_ms = float("-inf")
        self._input = ""
        self._termination_reason = ""
        self._status = GameStatus.PLAYING

        logger.info("Game started (seed=%s)", self._seed)
        return self.snapshot()

    def start(self, seed: Optional[int] = None) -> GameSnapshot:
        """Alias of ``reset`` used by front ends."""
        return self.reset(seed)

    def stop(self) -> None:
        """
        Leave the playing state without ending the run.

        Pending detonations are cancelled and further steps do nothing.
        """
        self._check_alive()
        if self._status == GameStatus.PLAYING:
            self._status = GameStatus.MENU
        dropped = self._scheduler.cancel_all()
        self._effects.clear()
        if dropped:
            logger.debug("Stop cancelled %d pending actions", dropped)

    def dispose(self) -> None:
        """Release all state. The instance cannot be used afterwards."""
        if self._disposed:
            return
        self._scheduler.cancel_all()
        self._effects.clear()
        self._events.clear()
        self._store.clear()
        self._status = GameStatus.MENU
        self._disposed = True

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def step(self, elapsed_ms: float) -> StepResult:
        """
        Advance the simulation by ``elapsed_ms``.

        Order: clock, deferred actions, spawning, physics, cosmetic timers,
        termination. A no-op unless the game is playing.

        Args:
            elapsed_ms: Time since the previous step.

        Returns:
            StepResult with snapshot and the events of this tick.
        """
        self._check_alive()
        if elapsed_ms < 0:
            raise ValueError(f"elapsed_ms must be non-negative, got {elapsed_ms}")

        if self._status != GameStatus.PLAYING:
            return StepResult(
                snapshot=self.snapshot(),
                events=[],
                game_over=self.is_over,
                termination_reason=self._termination_reason
            )

        score_before = self._scorer.score
        self._clock_ms += elapsed_ms

        self._scheduler.drain(self._clock_ms)

        spawned = None
        if self._clock_ms - self._last_spawn_ms >= self._difficulty.spawn_interval_ms:
            spawned = self._spawn()
            self._last_spawn_ms = self._clock_ms

        physics_result = self._physics.step(
            self._store.items,
            self._store.blocks_by_column(),
            elapsed_ms,
            speed_multiplier=self._config.physics.time_scale,
            now_ms=self._clock_ms,
            next_uid=self._store.next_uid
        )
        self._store.set_items(physics_result.surviving_items)
        for block in physics_result.newly_landed:
            self._store.add_block(block)
            self._events.emit(
                EventKind.LANDED, self._clock_ms,
                column=block.column, row=block.row, block_uid=block.uid
            )

        self._effects.expire(self._clock_ms)

        if physics_result.column_overflow:
            self._end_game(self._rules.termination.check_termination(self._store.column_counts()))

        return StepResult(
            snapshot=self.snapshot(),
            events=self._events.take(),
            landed=physics_result.newly_landed,
            spawned=spawned,
            delta_score=self._scorer.score - score_before,
            game_over=self.is_over,
            termination_reason=self._termination_reason
        )

    def _spawn(self) -> Optional[FallingItem]:
        """Spawn one falling item, unless the chosen column is full."""
        plan = self._rules.spawn.plan(self._store.column_counts(), self._difficulty.fall_speed)
        if plan is None:
            return None

        problem = self._problems.generate(self._difficulty.level)
        item = self._store.spawn_item(
            column=plan.column,
            y=plan.y,
            expression=problem.expression,
            answer=problem.answer,
            speed=plan.speed,
            color=plan.color
        )
        logger.debug("Spawned %r in column %d", item.expression, item.column)
        return item

    def _end_game(self, termination: TerminationResult) -> None:
        if self._status == GameStatus.GAMEOVER:
            return
        self._status = GameStatus.GAMEOVER
        self._termination_reason = termination.reason or "stack_overflow"
        self._scheduler.cancel_all()
        self._events.emit(
            EventKind.GAME_OVER, self._clock_ms,
            score=self._scorer.score, columns=termination.columns
        )
        logger.info("Game over (%s) - score %d", self._termination_reason, self._scorer.score)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def submit_input(self, text: str) -> MatchOutcome:
        """
        Evaluate a raw numeric string against the falling items.

        The engine's input buffer is cleared on a match or a rejection.

        Args:
            text: Current input string.

        Returns:
            MatchOutcome, including the events this input produced.
        """
        self._check_alive()
        if self._status != GameStatus.PLAYING:
            return MatchOutcome(MatchKind.IGNORED)

        outcome = self._resolver.resolve(text)
        if outcome.clears_input:
            self._input = ""
        outcome.events = self._events.take()
        return outcome

    def press_digit(self, digit: Union[str, int]) -> MatchOutcome:
        """Append one digit to the input buffer and evaluate it."""
        self._check_alive()
        digit = str(digit)
        if len(digit) != 1 or not is_digit_string(digit):
            raise ValueError(f"Expected a single digit, got {digit!r}")
        if self._status != GameStatus.PLAYING:
            return MatchOutcome(MatchKind.IGNORED)

        self._input += digit
        return self.submit_input(self._input)

    def delete_digit(self) -> str:
        """Remove the last input digit. Returns the new buffer."""
        self._check_alive()
        self._input = self._input[:-1]
        return self._input

    def clear_input(self) -> None:
        self._check_alive()
        self._input = ""

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def snapshot(self) -> GameSnapshot:
        """Build an immutable snapshot of the current state."""
        return self._snapshot_builder.build(
            status=self._status.value,
            score=self._scorer.score,
            level=self._difficulty.level,
            solved_count=self._difficulty.solved_count,
            fall_speed=self._difficulty.fall_speed,
            spawn_interval_ms=self._difficulty.spawn_interval_ms,
            current_input=self._input,
            clock_ms=self._clock_ms,
            shaking=self._effects.is_active(EFFECT_SHAKE, self._clock_ms),
            flashing=self._effects.is_active(EFFECT_FLASH, self._clock_ms),
            items=self._store.items,
            blocks=self._store.blocks
        )

    def get_info(self) -> Dict[str, Any]:
        """Summary counters for tools and logging."""
        return {
            "status": self._status.value,
            "score": self._scorer.score,
            "level": self._difficulty.level,
            "solved_count": self._difficulty.solved_count,
            "falling_count": self._store.item_count,
            "block_count": self._store.block_count,
            "pending_actions": self._scheduler.pending_count,
            "clock_ms": self._clock_ms,
            "terminated_reason": self._termination_reason,
        }
