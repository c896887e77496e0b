"""
Human Play Mode
================

Play Stack Attack interactively: solve the falling sums before the candy
stacks reach the top.

Controls:
    - 0-9: Type an answer (matched as you type)
    - Backspace: Delete last digit
    - Delete: Clear input
    - Enter/Space: Start from the menu
    - R: Restart game
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import random
import sys
from typing import List, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from stack_attack.core.config_loader import load_config, GameConfig
from stack_attack.core.events import EventKind, GameEvent
from stack_attack.core.game import StackAttackGame
from stack_attack.core.palette import Palette
from stack_attack.core.state_snapshot import GameSnapshot

# Longest frame fed to the engine; stalls (window drag) are clipped
MAX_FRAME_MS = 100

_DIGIT_KEYS = {}
if PYGAME_AVAILABLE:
    for _d in range(10):
        _DIGIT_KEYS[getattr(pygame, f"K_{_d}")] = str(_d)
        _keypad = getattr(pygame, f"K_KP{_d}", None)
        if _keypad is not None:
            _DIGIT_KEYS[_keypad] = str(_d)


class StackAttackRenderer:
    """
    Candy-shop renderer for human play mode.
    Draws the column board, settled candies, falling sums and the HUD.
    """

    def __init__(self, config: GameConfig, window_width: int, window_height: int):
        """Initialize renderer."""
        self._config = config
        self._palette = Palette(config)
        self._window_width = window_width
        self._window_height = window_height
        self._shake_rng = random.Random()

        # Colors
        self._bg_gradient_top = (255, 228, 240)
        self._bg_gradient_bottom = (240, 200, 230)
        self._box_fill = (255, 250, 252)
        self._box_border = (190, 120, 160)
        self._box_shadow = (170, 100, 140)
        self._column_line = (240, 220, 232)
        self._text_dark = (80, 40, 70)
        self._text_light = (150, 100, 130)
        self._danger = (230, 70, 90)

        # Fonts
        pygame.font.init()
        self._font_huge = pygame.font.Font(None, 56)
        self._font_large = pygame.font.Font(None, 42)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 20)

        self._bg_surface = self._create_gradient_background()
        self._calculate_layout()

    def _create_gradient_background(self) -> pygame.Surface:
        surface = pygame.Surface((self._window_width, self._window_height))
        for y in range(self._window_height):
            t = y / self._window_height
            color = tuple(
                int(top * (1 - t) + bottom * t)
                for top, bottom in zip(self._bg_gradient_top, self._bg_gradient_bottom)
            )
            pygame.draw.line(surface, color, (0, y), (self._window_width, y))
        return surface

    def _calculate_layout(self) -> None:
        """Fit the board between the HUD and the controls bar."""
        self._top_ui_height = 90
        self._bottom_ui_height = 50

        available_height = self._window_height - self._top_ui_height - self._bottom_ui_height - 20
        available_width = self._window_width - 40

        columns = self._config.board.columns
        max_rows = self._config.board.max_rows
        # Square cells
        self._cell = max(8, min(available_width // columns, available_height // max_rows))

        self._board_render_width = self._cell * columns
        self._board_render_height = self._cell * max_rows
        self._board_x = (self._window_width - self._board_render_width) // 2
        self._board_y = self._top_ui_height + (available_height - self._board_render_height) // 2

    def render(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        """Render the complete scene for one snapshot."""
        screen.blit(self._bg_surface, (0, 0))

        offset = (0, 0)
        if snapshot.shaking:
            offset = (self._shake_rng.randint(-4, 4), self._shake_rng.randint(-4, 4))

        self._draw_board(screen, snapshot, offset)
        self._draw_blocks(screen, snapshot, offset)
        self._draw_falling(screen, snapshot, offset)
        self._draw_hud(screen, snapshot)
        self._draw_controls_ui(screen)

        if snapshot.flashing:
            flash = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
            flash.fill((255, 255, 255, 110))
            screen.blit(flash, (0, 0))

        if snapshot.status == "menu":
            self._draw_banner(screen, "STACK ATTACK", "Press Enter to start")
        elif snapshot.is_over:
            self._draw_banner(screen, "GAME OVER", f"Score: {snapshot.score:,}", "Press R to restart")

    def _draw_board(self, screen: pygame.Surface, snapshot: GameSnapshot, offset: Tuple[int, int]) -> None:
        x = self._board_x + offset[0]
        y = self._board_y + offset[1]

        pygame.draw.rect(
            screen, self._box_shadow,
            (x + 4, y + 4, self._board_render_width, self._board_render_height),
            border_radius=8
        )
        pygame.draw.rect(
            screen, self._box_border,
            (x - 4, y - 4, self._board_render_width + 8, self._board_render_height + 8),
            border_radius=10
        )
        pygame.draw.rect(screen, self._box_fill, (x, y, self._board_render_width, self._board_render_height))

        for column in range(1, snapshot.columns):
            cx = x + column * self._cell
            pygame.draw.line(screen, self._column_line, (cx, y), (cx, y + self._board_render_height), 1)

        # Top row warning once any stack is close
        if snapshot.danger_level >= 0.75:
            pygame.draw.line(
                screen, self._danger,
                (x, y + self._cell), (x + self._board_render_width, y + self._cell), 2
            )

    def _draw_blocks(self, screen: pygame.Surface, snapshot: GameSnapshot, offset: Tuple[int, int]) -> None:
        for block in snapshot.blocks:
            rect = pygame.Rect(
                self._board_x + offset[0] + block.column * self._cell + 2,
                self._board_y + offset[1] + (snapshot.max_rows - 1 - block.row) * self._cell + 2,
                self._cell - 4,
                self._cell - 4
            )
            candy = self._palette[block.color]
            if block.clearing:
                pygame.draw.rect(screen, (255, 255, 255), rect, border_radius=8)
                pygame.draw.rect(screen, candy.rgb, rect, 3, border_radius=8)
                continue
            pygame.draw.rect(screen, candy.shadow, rect, border_radius=8)
            inner = rect.inflate(-6, -6)
            pygame.draw.rect(screen, candy.rgb, inner, border_radius=6)
            pygame.draw.circle(screen, candy.highlight, (inner.x + inner.w // 4, inner.y + inner.h // 4), max(2, inner.w // 8))

    def _draw_falling(self, screen: pygame.Surface, snapshot: GameSnapshot, offset: Tuple[int, int]) -> None:
        """Falling sums are drawn as candy wrappers with their expression."""
        for item in snapshot.falling_items:
            cx = self._board_x + offset[0] + item.column * self._cell + self._cell // 2
            top = self._board_y + offset[1] + int(item.y / 100.0 * self._board_render_height)
            if top + self._cell < self._board_y:
                continue

            candy = self._palette[item.color]
            rect = pygame.Rect(0, 0, self._cell - 6, int(self._cell * 0.7))
            rect.midtop = (cx, top)
            pygame.draw.rect(screen, candy.rgb, rect, border_radius=10)
            pygame.draw.rect(screen, candy.shadow, rect, 2, border_radius=10)

            text = self._font_medium.render(item.expression, True, self._text_dark)
            if text.get_width() > rect.w - 4:
                text = self._font_small.render(item.expression, True, self._text_dark)
            screen.blit(text, text.get_rect(center=rect.center))

    def _draw_hud(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        """Score and level on the left, the answer being typed on the right."""
        score_label = self._font_medium.render("SCORE", True, self._text_light)
        screen.blit(score_label, (20, 12))
        score_value = self._font_huge.render(f"{snapshot.score:,}", True, self._text_dark)
        screen.blit(score_value, (20, 35))

        level = self._font_small.render(
            f"LEVEL {snapshot.level}   solved {snapshot.solved_count}", True, self._text_light
        )
        screen.blit(level, (20, 72))

        box_w = 140
        box_x = self._window_width - box_w - 20
        pygame.draw.rect(screen, self._box_fill, (box_x, 15, box_w, 60), border_radius=8)
        pygame.draw.rect(screen, self._box_border, (box_x, 15, box_w, 60), 2, border_radius=8)
        label = self._font_small.render("ANSWER", True, self._text_light)
        screen.blit(label, (box_x + 10, 20))
        typed = self._font_large.render(snapshot.current_input or "_", True, self._text_dark)
        screen.blit(typed, (box_x + 10, 40))

    def _draw_controls_ui(self, screen: pygame.Surface) -> None:
        y = self._window_height - self._bottom_ui_height + 10

        controls = [
            ("0-9", "Answer"),
            ("Bksp", "Delete"),
            ("R", "Restart"),
            ("ESC", "Quit")
        ]

        x = 20
        for key, action in controls:
            key_text = self._font_small.render(key, True, self._text_dark)
            box_width = key_text.get_width() + 12
            pygame.draw.rect(screen, self._box_fill, (x, y, box_width, 24), border_radius=4)
            pygame.draw.rect(screen, self._box_border, (x, y, box_width, 24), 1, border_radius=4)
            screen.blit(key_text, (x + 6, y + 4))

            action_text = self._font_small.render(action, True, self._text_light)
            screen.blit(action_text, (x + box_width + 8, y + 4))

            x += box_width + action_text.get_width() + 25

    def _draw_banner(self, screen: pygame.Surface, title: str, *lines: str) -> None:
        """Centered overlay box used by the menu and game over screens."""
        overlay = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        screen.blit(overlay, (0, 0))

        box_w, box_h = 320, 110 + 45 * len(lines)
        box_x = (self._window_width - box_w) // 2
        box_y = (self._window_height - box_h) // 2

        pygame.draw.rect(screen, self._box_fill, (box_x, box_y, box_w, box_h), border_radius=16)
        pygame.draw.rect(screen, self._box_border, (box_x, box_y, box_w, box_h), 3, border_radius=16)

        title_surface = self._font_huge.render(title, True, self._text_dark)
        screen.blit(title_surface, (box_x + (box_w - title_surface.get_width()) // 2, box_y + 25))

        for i, line in enumerate(lines):
            font = self._font_large if i == 0 and len(lines) > 1 else self._font_medium
            surface = font.render(line, True, self._text_dark if font is self._font_large else self._text_light)
            screen.blit(surface, (box_x + (box_w - surface.get_width()) // 2, box_y + 90 + i * 45))


class HumanPlayer:
    """
    Human-playable Stack Attack driven by the pygame frame clock.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        window_width: int = 520,
        window_height: int = 800,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._seed = seed
        self._target_fps = target_fps

        self._game = StackAttackGame(config=config, seed=seed)

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height))
        pygame.display.set_caption("Stack Attack")
        self._clock = pygame.time.Clock()

        self._renderer = StackAttackRenderer(config, window_width, window_height)
        self._running = True

    def run(self) -> int:
        """Run the game loop. Returns final score."""
        print("=== Stack Attack ===")
        print("Type the answer of a falling sum to pop it.")
        print("Enter to start, R to restart, ESC to quit")
        print()

        try:
            while self._running:
                self._handle_events()

                elapsed = min(self._clock.tick(self._target_fps), MAX_FRAME_MS)
                if self._game.is_playing:
                    result = self._game.step(elapsed)
                    self._report(result.events)

                self._renderer.render(self._screen, self._game.snapshot())
                pygame.display.flip()
            return self._game.score
        finally:
            self._game.dispose()
            pygame.quit()

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_r:
                    self._restart()
                elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                    if not self._game.is_playing and not self._game.is_over:
                        self._restart()
                elif not self._game.is_playing:
                    continue
                elif event.key in _DIGIT_KEYS:
                    outcome = self._game.press_digit(_DIGIT_KEYS[event.key])
                    self._report(outcome.events)
                elif event.key == pygame.K_BACKSPACE:
                    self._game.delete_digit()
                elif event.key == pygame.K_DELETE:
                    self._game.clear_input()

    def _report(self, events: List[GameEvent]) -> None:
        """Print the interesting events of one call."""
        for event in events:
            if event.kind == EventKind.CLUSTER_CLEARED:
                print(f"  Cleared {event.data['size']} blocks (Total: {self._game.score})")
            elif event.kind == EventKind.COMBO_CLEARED:
                print(f"  COMBO x{event.data['size']}!")
            elif event.kind == EventKind.LEVEL_UP:
                print(f"  Level {event.data['level']}")
            elif event.kind == EventKind.WRONG_INPUT:
                print(f"  Wrong: {event.data['input']}")
            elif event.kind == EventKind.GAME_OVER:
                print(f"\nGAME OVER - Score: {event.data['score']}")

    def _restart(self) -> None:
        self._game.reset(seed=self._seed)
        print("\n=== Game Started ===\n")


def main():
    parser = argparse.ArgumentParser(description="Play Stack Attack interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=520, help="Window width (default: 520)")
    parser.add_argument("--height", type=int, default=800, help="Window height (default: 800)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")

    args = parser.parse_args()

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            window_width=args.width,
            window_height=args.height,
            target_fps=args.fps
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
