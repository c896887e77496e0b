"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all tunables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml


@dataclass(frozen=True)
class BoardConfig:
    """Grid geometry."""
    columns: int        # COLUMNS
    max_rows: int       # MAX_ROWS
    spawn_y: float      # Vertical position where items appear (percent)


@dataclass(frozen=True)
class PhysicsConfig:
    """Falling item integration parameters."""
    base_speed: float          # BASE_SPEED, percent per reference tick
    reference_tick_ms: float   # Speeds are normalized to this tick length
    speed_jitter_min: int      # Per-item speed variation (percent)
    speed_jitter_max: int
    time_scale: float          # Global multiplier passed to the stepper


@dataclass(frozen=True)
class SpawnConfig:
    """Spawn cadence."""
    initial_interval_ms: float  # SPAWN_RATE_INITIAL
    min_interval_ms: float      # MIN_SPAWN


@dataclass(frozen=True)
class DifficultyConfig:
    """Level progression."""
    level_threshold: int   # LEVEL_THRESHOLD
    speed_inc: float       # SPEED_INC
    spawn_dec: float       # SPAWN_DEC


@dataclass(frozen=True)
class ScoringConfig:
    """Point values."""
    match_base: int
    cluster_block: int
    combo_bonus: int
    combo_threshold: int
    min_cluster_size: int
    sum_all_base: int
    sum_all_per_item: int
    sum_all_per_block: int


@dataclass(frozen=True)
class InputConfig:
    """Answer input guard."""
    max_length: int


@dataclass(frozen=True)
class EffectsConfig:
    """Deferred clear delay and cosmetic flag durations."""
    clear_delay_ms: float
    shake_ms: float
    shake_min_cluster: int
    flash_sum_ms: float
    flash_combo_ms: float


@dataclass(frozen=True)
class ColorConfig:
    """A single palette entry."""
    id: int
    name: str
    rgb: Tuple[int, int, int]


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    physics: PhysicsConfig
    spawn: SpawnConfig
    difficulty: DifficultyConfig
    scoring: ScoringConfig
    input: InputConfig
    effects: EffectsConfig
    palette: Tuple[ColorConfig, ...]

    @property
    def row_height_percent(self) -> float:
        """Height of one grid row as a percentage of the board."""
        return 100.0 / self.board.max_rows

    @property
    def num_colors(self) -> int:
        """Number of palette entries."""
        return len(self.palette)

    def get_color(self, color_id: int) -> ColorConfig:
        """Get palette entry by ID."""
        if 0 <= color_id < len(self.palette):
            return self.palette[color_id]
        raise ValueError(f"Invalid color ID: {color_id}")


def _parse_rgb(rgb_data: list) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(rgb_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {rgb_data}")
    return (int(rgb_data[0]), int(rgb_data[1]), int(rgb_data[2]))


def _parse_color(color_data: dict) -> ColorConfig:
    """Parse a single palette entry from YAML."""
    return ColorConfig(
        id=int(color_data["id"]),
        name=str(color_data["name"]),
        rgb=_parse_rgb(color_data["rgb"])
    )


def validate_config(config: GameConfig) -> None:
    """
    Validate configuration consistency.

    Raises:
        ValueError: On the first inconsistent value found.
    """
    if config.board.columns < 1:
        raise ValueError(f"board.columns must be positive, got {config.board.columns}")
    if config.board.max_rows < 1:
        raise ValueError(f"board.max_rows must be positive, got {config.board.max_rows}")

    if not config.palette:
        raise ValueError("palette must contain at least one color")
    for i, color in enumerate(config.palette):
        if color.id != i:
            raise ValueError(f"Color ID mismatch: expected {i}, got {color.id}")

    if config.physics.reference_tick_ms <= 0:
        raise ValueError("physics.reference_tick_ms must be positive")
    if config.physics.speed_jitter_min > config.physics.speed_jitter_max:
        raise ValueError(
            f"physics.speed_jitter_min ({config.physics.speed_jitter_min}) exceeds "
            f"speed_jitter_max ({config.physics.speed_jitter_max})"
        )

    if config.spawn.min_interval_ms > config.spawn.initial_interval_ms:
        raise ValueError(
            f"spawn.min_interval_ms ({config.spawn.min_interval_ms}) exceeds "
            f"initial_interval_ms ({config.spawn.initial_interval_ms})"
        )

    if config.difficulty.level_threshold < 1:
        raise ValueError("difficulty.level_threshold must be at least 1")
    if config.scoring.min_cluster_size < 1:
        raise ValueError("scoring.min_cluster_size must be at least 1")
    if config.input.max_length < 1:
        raise ValueError("input.max_length must be at least 1")


def parse_config(raw: dict) -> GameConfig:
    """
    Build a validated GameConfig from an already-parsed YAML mapping.

    Args:
        raw: Mapping with the same structure as game_config.yaml.

    Returns:
        Validated GameConfig instance.
    """
    board_data = raw["board"]
    board = BoardConfig(
        columns=int(board_data["columns"]),
        max_rows=int(board_data["max_rows"]),
        spawn_y=float(board_data.get("spawn_y", -15.0))
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        base_speed=float(physics_data["base_speed"]),
        reference_tick_ms=float(physics_data.get("reference_tick_ms", 16.0)),
        speed_jitter_min=int(physics_data.get("speed_jitter_min", 90)),
        speed_jitter_max=int(physics_data.get("speed_jitter_max", 110)),
        time_scale=float(physics_data.get("time_scale", 1.0))
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        initial_interval_ms=float(spawn_data["initial_interval_ms"]),
        min_interval_ms=float(spawn_data.get("min_interval_ms", 500))
    )

    difficulty_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        level_threshold=int(difficulty_data["level_threshold"]),
        speed_inc=float(difficulty_data["speed_inc"]),
        spawn_dec=float(difficulty_data["spawn_dec"])
    )

    scoring_data = raw.get("scoring", {})
    scoring = ScoringConfig(
        match_base=int(scoring_data.get("match_base", 10)),
        cluster_block=int(scoring_data.get("cluster_block", 30)),
        combo_bonus=int(scoring_data.get("combo_bonus", 100)),
        combo_threshold=int(scoring_data.get("combo_threshold", 4)),
        min_cluster_size=int(scoring_data.get("min_cluster_size", 2)),
        sum_all_base=int(scoring_data.get("sum_all_base", 100)),
        sum_all_per_item=int(scoring_data.get("sum_all_per_item", 50)),
        sum_all_per_block=int(scoring_data.get("sum_all_per_block", 20))
    )

    input_data = raw.get("input", {})
    input_config = InputConfig(
        max_length=int(input_data.get("max_length", 3))
    )

    effects_data = raw.get("effects", {})
    effects = EffectsConfig(
        clear_delay_ms=float(effects_data.get("clear_delay_ms", 500)),
        shake_ms=float(effects_data.get("shake_ms", 400)),
        shake_min_cluster=int(effects_data.get("shake_min_cluster", 3)),
        flash_sum_ms=float(effects_data.get("flash_sum_ms", 300)),
        flash_combo_ms=float(effects_data.get("flash_combo_ms", 200))
    )

    palette = tuple(_parse_color(c) for c in raw["palette"])

    config = GameConfig(
        board=board,
        physics=physics,
        spawn=spawn,
        difficulty=difficulty,
        scoring=scoring,
        input=input_config,
        effects=effects,
        palette=palette
    )

    validate_config(config)
    return config


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    return parse_config(raw)


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
