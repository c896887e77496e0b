"""
Tests for configuration loading and validation.
"""

import copy

import pytest
import yaml

from stack_attack.core.config_loader import load_config, parse_config, get_config, reload_config


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def raw_config():
    """The default YAML as a plain mapping, for mutation."""
    import os
    path = os.path.join(os.path.dirname(__file__), "..", "stack_attack", "game_config.yaml")
    with open(path) as f:
        return yaml.safe_load(f)


class TestDefaultConfig:
    """The shipped game_config.yaml."""

    def test_named_tunables(self, config):
        assert config.board.columns == 5
        assert config.board.max_rows == 12
        assert config.physics.base_speed == pytest.approx(0.15)
        assert config.spawn.initial_interval_ms == 2500
        assert config.spawn.min_interval_ms == 500
        assert config.difficulty.level_threshold == 5
        assert config.difficulty.speed_inc == pytest.approx(0.01)
        assert config.difficulty.spawn_dec == 50

    def test_row_height_percent(self, config):
        assert config.row_height_percent == pytest.approx(100 / 12)

    def test_palette_has_five_colors(self, config):
        assert config.num_colors == 5
        assert [c.id for c in config.palette] == [0, 1, 2, 3, 4]
        for color in config.palette:
            assert len(color.rgb) == 3
            assert all(0 <= v <= 255 for v in color.rgb)

    def test_get_color_out_of_range(self, config):
        with pytest.raises(ValueError):
            config.get_color(99)

    def test_config_is_immutable(self, config):
        with pytest.raises(Exception):
            config.board.columns = 7

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reload_config_replaces_cache(self, tmp_path, raw_config):
        raw = copy.deepcopy(raw_config)
        raw["board"]["max_rows"] = 8
        path = tmp_path / "reload.yaml"
        path.write_text(yaml.safe_dump(raw))

        try:
            reloaded = reload_config(str(path))
            assert get_config() is reloaded
            assert get_config().board.max_rows == 8
        finally:
            reload_config()

        assert get_config().board.max_rows == 12


class TestValidation:
    """Inconsistent configurations are refused at load time."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_load_from_path(self, tmp_path, raw_config):
        raw = copy.deepcopy(raw_config)
        raw["board"]["columns"] = 7
        path = tmp_path / "custom.yaml"
        path.write_text(yaml.safe_dump(raw))

        config = load_config(str(path))
        assert config.board.columns == 7

    def test_palette_ids_must_be_sequential(self, raw_config):
        raw = copy.deepcopy(raw_config)
        raw["palette"][1]["id"] = 3
        with pytest.raises(ValueError):
            parse_config(raw)

    def test_min_spawn_above_initial(self, raw_config):
        raw = copy.deepcopy(raw_config)
        raw["spawn"]["min_interval_ms"] = 5000
        with pytest.raises(ValueError):
            parse_config(raw)

    def test_zero_level_threshold(self, raw_config):
        raw = copy.deepcopy(raw_config)
        raw["difficulty"]["level_threshold"] = 0
        with pytest.raises(ValueError):
            parse_config(raw)

    def test_bad_rgb(self, raw_config):
        raw = copy.deepcopy(raw_config)
        raw["palette"][0]["rgb"] = [1, 2]
        with pytest.raises(ValueError):
            parse_config(raw)

    def test_optional_sections_default(self, raw_config):
        raw = copy.deepcopy(raw_config)
        del raw["effects"]
        del raw["input"]
        config = parse_config(raw)
        assert config.effects.clear_delay_ms == 500
        assert config.input.max_length == 3
