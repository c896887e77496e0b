"""
Tests for difficulty progression and scoring formulas.
"""

from dataclasses import replace

import pytest

from stack_attack.core.config_loader import load_config
from stack_attack.core.difficulty import DifficultyController
from stack_attack.core.scoring import ScoreTracker


@pytest.fixture
def config():
    return load_config()


class TestDifficultyController:

    def test_initial_state(self, config):
        controller = DifficultyController(config)
        state = controller.state
        assert state.level == 1
        assert state.fall_speed == pytest.approx(0.15)
        assert state.spawn_interval_ms == 2500
        assert state.solved_count == 0

    def test_level_up_every_threshold(self, config):
        controller = DifficultyController(config)

        results = [controller.record_solve() for _ in range(10)]

        assert results == [False] * 4 + [True] + [False] * 4 + [True]
        assert controller.level == 3
        assert controller.fall_speed == pytest.approx(0.17)
        assert controller.spawn_interval_ms == 2400

    def test_spawn_interval_floor(self, config):
        controller = DifficultyController(config)

        for _ in range(5 * 100):
            controller.record_solve()

        assert controller.level == 101
        assert controller.spawn_interval_ms == 500

    def test_monotonic(self, config):
        fast = replace(config, difficulty=replace(config.difficulty, level_threshold=1))
        controller = DifficultyController(fast)
        previous = controller.state
        for _ in range(60):
            controller.record_solve()
            current = controller.state
            assert current.level >= previous.level
            assert current.fall_speed >= previous.fall_speed
            assert current.spawn_interval_ms <= previous.spawn_interval_ms
            previous = current

    def test_reset(self, config):
        controller = DifficultyController(config)
        for _ in range(7):
            controller.record_solve()
        controller.reset()
        assert controller.level == 1
        assert controller.solved_count == 0


class TestScoreTracker:

    def test_match_award(self, config):
        scorer = ScoreTracker(config)
        assert scorer.apply_match(3).points == 13

    def test_cluster_award(self, config):
        scorer = ScoreTracker(config)
        assert scorer.apply_cluster_clear(3, 3).points == 90
        assert not scorer.is_combo(4)
        assert scorer.is_combo(5)
        assert scorer.apply_cluster_clear(5, 5).points == 250

    def test_sum_all_award(self, config):
        scorer = ScoreTracker(config)
        assert scorer.apply_sum_all(2, 0).points == 200

    def test_history_and_reset(self, config):
        scorer = ScoreTracker(config)
        scorer.apply_match(1)
        scorer.apply_sum_all(3, 1)
        assert scorer.score == 11 + 270
        assert [e.reason for e in scorer.history] == ["match", "sum_all"]
        scorer.reset()
        assert scorer.score == 0
        assert scorer.history == []
