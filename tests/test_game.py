"""
Tests for the game lifecycle and the step loop.
"""

from dataclasses import replace

import numpy as np
import pytest

from stack_attack.core.answer_resolver import MatchKind
from stack_attack.core.config_loader import load_config
from stack_attack.core.entities import Block
from stack_attack.core.events import EventKind
from stack_attack.core.game import GameStatus, StackAttackGame


@pytest.fixture
def config():
    return load_config()


def quiet_game(config, seed=42):
    """
    A started game whose opening spawn has been discarded.

    The next random spawn is a full spawn interval away, so tests can place
    entities by hand without interference.
    """
    game = StackAttackGame(config, seed=seed)
    game.start()
    game.step(0)
    game.store.clear_items()
    return game


def place_block(game, column, row, color, clearing=False):
    block = Block(uid=game.store.next_uid(), column=column, row=row, color=color,
                  last_settled_at=game.clock_ms, clearing=clearing)
    game.store.add_block(block)
    return block


def place_item(game, answer, column=0, y=10.0, color=0):
    return game.store.spawn_item(column, y, f"{answer} + 0", answer, 0.15, color)


class TestLifecycle:

    def test_starts_in_menu(self, config):
        game = StackAttackGame(config, seed=1)
        assert game.status == GameStatus.MENU

        result = game.step(1000)

        assert result.events == []
        assert game.clock_ms == 0
        assert game.submit_input("5").kind == MatchKind.IGNORED

    def test_start_resets_state(self, config):
        game = quiet_game(config)
        place_block(game, 0, 0, 1)
        game.press_digit("4")

        snapshot = game.start()

        assert snapshot.status == "playing"
        assert snapshot.score == 0
        assert snapshot.level == 1
        assert snapshot.current_input == ""
        assert game.store.block_count == 0
        assert game.clock_ms == 0

    def test_negative_elapsed_rejected(self, config):
        game = quiet_game(config)
        with pytest.raises(ValueError):
            game.step(-16)

    def test_dispose(self, config):
        game = quiet_game(config)
        game.dispose()
        with pytest.raises(RuntimeError):
            game.step(16)
        with pytest.raises(RuntimeError):
            game.submit_input("3")
        with pytest.raises(RuntimeError):
            game.start()

    def test_instances_independent(self, config):
        first = quiet_game(config, seed=1)
        second = quiet_game(config, seed=1)
        place_item(first, 7)

        first.submit_input("7")

        assert first.score == 11
        assert second.score == 0


class TestSpawning:

    def test_first_step_spawns(self, config):
        game = StackAttackGame(config, seed=5)
        game.start()

        result = game.step(16)

        assert result.spawned is not None
        assert game.store.item_count == 1
        assert result.spawned.speed == pytest.approx(0.15, rel=0.11)

    def test_spawn_cadence(self, config):
        game = StackAttackGame(config, seed=5)
        game.start()

        spawned = sum(1 for _ in range(100) if game.step(100).spawned is not None)

        # clock 100, 2600, 5100, 7600
        assert spawned == 4

    def test_spawned_expression_matches_answer(self, config):
        game = StackAttackGame(config, seed=9)
        game.start()
        item = game.step(16).spawned
        left, op, right = item.expression.split()
        expected = int(left) + int(right) if op == "+" else int(left) - int(right)
        assert item.answer == expected

    def test_same_seed_same_run(self, config):
        runs = []
        for _ in range(2):
            game = StackAttackGame(config, seed=11)
            game.start()
            for _ in range(2000):
                game.step(16)
            runs.append(game.snapshot().to_dict())
        assert runs[0] == runs[1]


class TestLanding:

    def test_landing_event(self, config):
        game = quiet_game(config)
        place_item(game, 3, column=2, y=game.physics.floor_line(0) - 0.01, color=4)

        result = game.step(16)

        assert [b.column for b in result.landed] == [2]
        assert [e.kind for e in result.events] == [EventKind.LANDED]
        assert game.store.item_count == 0
        assert game.store.blocks[0].color == 4

    def test_time_scale(self, config):
        fast = replace(config, physics=replace(config.physics, time_scale=2.0))
        game = quiet_game(fast)
        item = place_item(game, 3, y=0.0)

        game.step(16)

        assert game.store.get_item(item.uid).y == pytest.approx(0.3)


class TestGameOver:
    """A column reaching max_rows ends the run exactly once."""

    @pytest.fixture
    def short_config(self, config):
        return replace(config, board=replace(config.board, max_rows=2))

    def test_overflow_ends_game(self, short_config):
        game = quiet_game(short_config)
        place_block(game, 0, 0, 1)
        place_item(game, 3, column=0, y=game.physics.floor_line(1) - 0.01)

        result = game.step(16)

        assert result.game_over
        assert result.termination_reason == "stack_overflow"
        assert game.status == GameStatus.GAMEOVER
        assert result.snapshot.is_over
        game_over_events = [e for e in result.events if e.kind == EventKind.GAME_OVER]
        assert len(game_over_events) == 1
        assert game_over_events[0].data["columns"] == [0]

    def test_no_mutation_after_game_over(self, short_config):
        game = quiet_game(short_config)
        place_block(game, 0, 0, 1)
        place_item(game, 3, column=0, y=-0.01)
        place_item(game, 9, column=3, y=5.0)
        game.step(16)
        before = game.snapshot().to_dict()

        result = game.step(1000)

        assert result.events == []
        assert result.game_over
        assert game.snapshot().to_dict() == before
        assert game.submit_input("9").kind == MatchKind.IGNORED
        assert game.press_digit(9).kind == MatchKind.IGNORED

    def test_pending_clears_cancelled(self, short_config):
        game = quiet_game(short_config)
        place_block(game, 1, 0, 2)
        place_block(game, 2, 0, 2)
        place_item(game, 6, column=3, color=2)
        game.submit_input("6")
        assert game.pending_actions == 1

        place_block(game, 0, 0, 1)
        place_item(game, 3, column=0, y=-0.01)
        game.step(16)

        assert game.is_over
        assert game.pending_actions == 0

    def test_restart_after_game_over(self, short_config):
        game = quiet_game(short_config)
        place_block(game, 0, 0, 1)
        place_item(game, 3, column=0, y=-0.01)
        game.step(16)

        game.start()

        assert game.is_playing
        assert game.store.block_count == 0
        assert game.termination_reason == ""


class TestInput:

    def test_buffer_cleared_on_match(self, config):
        game = quiet_game(config)
        place_item(game, 55)

        assert game.press_digit("5").kind == MatchKind.PENDING
        assert game.current_input == "5"

        outcome = game.press_digit("5")

        assert outcome.kind == MatchKind.SINGLE
        assert game.current_input == ""
        assert [e.kind for e in outcome.events] == [EventKind.MATCHED]

    def test_buffer_cleared_on_rejection(self, config):
        game = quiet_game(config)
        place_item(game, 5)

        for digit in "123":
            assert game.press_digit(digit).kind == MatchKind.PENDING
        outcome = game.press_digit("4")

        assert outcome.kind == MatchKind.REJECTED
        assert game.current_input == ""
        assert [e.kind for e in outcome.events] == [EventKind.WRONG_INPUT]

    @pytest.mark.parametrize("bad", ["a", "12", "", -1, "\u00b2", "\u2460"])
    def test_press_digit_validates(self, config, bad):
        game = quiet_game(config)
        with pytest.raises(ValueError):
            game.press_digit(bad)

    @pytest.mark.parametrize("text", ["\u00b2", "1\u00b2", "\u2460"])
    def test_unicode_digits_ignored(self, config, text):
        """Only ASCII 0-9 count as an answer."""
        game = quiet_game(config)
        place_item(game, 1)

        outcome = game.submit_input(text)

        assert outcome.kind == MatchKind.IGNORED
        assert game.store.item_count == 1
        assert game.score == 0

    def test_delete_and_clear(self, config):
        game = quiet_game(config)
        place_item(game, 99)
        game.press_digit(1)
        game.press_digit(2)

        assert game.delete_digit() == "1"
        game.clear_input()
        assert game.current_input == ""
        assert game.delete_digit() == ""

    def test_sum_all_through_engine(self, config):
        game = quiet_game(config)
        for column, answer in enumerate((3, 4, 5)):
            place_item(game, answer, column=column, color=column)

        game.press_digit("1")
        outcome = game.press_digit("2")

        assert outcome.kind == MatchKind.SUM_ALL
        assert game.score == 250
        assert game.snapshot().flashing


class TestDeferredClearThroughStep:

    def test_clear_applied_by_step(self, config):
        game = quiet_game(config)
        place_block(game, 0, 0, 2)
        place_block(game, 1, 0, 2)
        place_item(game, 8, column=3, color=2)

        game.submit_input("8")
        assert game.snapshot().clearing_mask[0, :2].all()

        result = game.step(499)
        assert game.store.block_count == 2
        assert result.delta_score == 0

        result = game.step(1)
        assert game.store.block_count == 0
        assert result.delta_score == 60
        assert EventKind.CLUSTER_CLEARED in [e.kind for e in result.events]

    def test_stop_cancels_pending(self, config):
        game = quiet_game(config)
        place_block(game, 0, 0, 2)
        place_block(game, 1, 0, 2)
        place_item(game, 8, column=3, color=2)
        game.submit_input("8")

        game.stop()
        game.step(1000)

        assert game.status == GameStatus.MENU
        assert game.pending_actions == 0
        assert game.store.block_count == 2


class TestSnapshot:

    def test_grid_arrays(self, config):
        game = quiet_game(config)
        place_block(game, 0, 0, 3)
        place_block(game, 0, 1, 1, clearing=True)
        place_block(game, 4, 0, 0)

        snapshot = game.snapshot()

        assert snapshot.color_grid.shape == (12, 5)
        assert snapshot.color_grid[0, 0] == 3
        assert snapshot.color_grid[1, 0] == 1
        assert snapshot.color_grid[0, 1] == -1
        assert snapshot.clearing_mask[1, 0]
        assert not snapshot.clearing_mask[0, 0]
        np.testing.assert_array_equal(snapshot.column_heights, [2, 0, 0, 0, 1])
        assert snapshot.danger_level == pytest.approx(2 / 12)

    def test_snapshot_is_detached(self, config):
        game = quiet_game(config)
        place_block(game, 0, 0, 3)
        snapshot = game.snapshot()

        place_block(game, 1, 0, 2)
        game.snapshot()

        assert snapshot.color_grid[0, 1] == -1
        assert len(snapshot.blocks) == 1

    def test_info(self, config):
        game = quiet_game(config)
        place_item(game, 4)
        info = game.get_info()
        assert info["status"] == "playing"
        assert info["falling_count"] == 1
        assert info["block_count"] == 0
