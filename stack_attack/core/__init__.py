"""
Stack Attack Core - The game simulation engine.

Provides the frame-driven simulation and all supporting systems (problem
generation, physics, clustering, compaction, answer resolution, scoring,
difficulty). Rendering, audio and input capture are external collaborators
that read snapshots, consume events and call the input surface.

Main exports:
- StackAttackGame: Engine instance (create, step/submit_input, dispose)
- GameConfig: Configuration loaded from game_config.yaml
- GameSnapshot: Immutable state handed to renderers
- GameEvent / EventKind: Notifications for audio/FX collaborators
- MatchOutcome / MatchKind: Result of submitting an answer
"""

from stack_attack.core.config_loader import GameConfig, load_config, get_config
from stack_attack.core.palette import Palette, CandyColor, ColorTag
from stack_attack.core.entities import Block, EntityStore, FallingItem
from stack_attack.core.problem_generator import Problem, ProblemGenerator
from stack_attack.core.physics_stepper import PhysicsStepper, PhysicsResult
from stack_attack.core.cluster_detector import find_cluster, blocks_of_colors
from stack_attack.core.compaction import remove_and_settle, CompactionResult
from stack_attack.core.difficulty import DifficultyController, DifficultyState
from stack_attack.core.events import EventKind, GameEvent
from stack_attack.core.answer_resolver import MatchKind, MatchOutcome
from stack_attack.core.state_snapshot import GameSnapshot
from stack_attack.core.game import GameStatus, StackAttackGame, StepResult

__all__ = [
    "GameConfig",
    "load_config",
    "get_config",
    "Palette",
    "CandyColor",
    "ColorTag",
    "Block",
    "EntityStore",
    "FallingItem",
    "Problem",
    "ProblemGenerator",
    "PhysicsStepper",
    "PhysicsResult",
    "find_cluster",
    "blocks_of_colors",
    "remove_and_settle",
    "CompactionResult",
    "DifficultyController",
    "DifficultyState",
    "EventKind",
    "GameEvent",
    "MatchKind",
    "MatchOutcome",
    "GameSnapshot",
    "GameStatus",
    "StackAttackGame",
    "StepResult",
]
