"""
Human Play Mode
================

Play Drop Rush interactively with the mouse.

Controls:
    - Click: Catch a drop / press a button
    - S: Start round
    - R: Reset round
    - 1 / 2 / 3: Select difficulty (ignored while a round is running)
    - M: Mute / unmute
    - ESC: Quit

Usage:
    python -m tools.play_human [--difficulty NAME] [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import sys
import webbrowser
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from drop_rush.core.config_loader import GameConfig, load_config
from drop_rush.core.feedback import FeedbackFanout
from drop_rush.core.game import RoundController


class HumanPlayer:
    """
    Wires the round controller to a pygame window.

    The frame clock feeds the controller's virtual scheduler, so countdown,
    spawning and expiry follow real time while the core stays headless.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        difficulty: Optional[str] = None,
        seed: Optional[int] = None,
        window_width: int = 600,
        window_height: int = 690,
        target_fps: int = 60,
        muted: bool = False
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        # Renderer/audio import pygame at module level
        from drop_rush.core.audio import PygameAudio
        from drop_rush.core.render_pygame import PygameRenderer

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps

        pygame.init()
        self._clock = pygame.time.Clock()

        self._sink = FeedbackFanout()
        self._controller = RoundController(
            config=config,
            difficulty=difficulty,
            seed=seed,
            feedback=self._sink
        )
        self._renderer = PygameRenderer(
            clock=lambda: self._controller.now_ms,
            config=config,
            width=window_width,
            height=window_height
        )
        self._audio = PygameAudio(config, muted=muted)
        self._sink.add(self._renderer)
        self._sink.add(self._audio)

        container = self._renderer.container_rect
        self._controller.container_width = container.width
        self._controller.container_height = container.height

        self._running = True

    def run(self) -> int:
        """Run the game loop. Returns the last score."""
        print("=== Drop Rush ===")
        print("Catch the clean drops, avoid the dirty ones.")
        print("S to start, R to reset, 1-3 difficulty, M mute, ESC quit")
        print()

        while self._running:
            self._handle_events()
            self._controller.advance(self._clock.get_time())
            self._renderer.render_to_screen(self._controller.get_render_data())
            self._clock.tick(self._target_fps)

        self._renderer.close()
        pygame.quit()
        return self._controller.score

    def _handle_events(self) -> None:
        """Process pygame events."""
        names = self._controller.difficulties.names
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_s:
                    self._start()
                elif event.key == pygame.K_r:
                    self._controller.reset()
                elif event.key == pygame.K_m:
                    self._audio.toggle_mute()
                elif pygame.K_1 <= event.key <= pygame.K_9:
                    index = event.key - pygame.K_1
                    if index < len(names):
                        self._select_difficulty(names[index])

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._click(event.pos)

    def _click(self, pos) -> None:
        button = self._renderer.button_at(pos)
        if button is not None:
            self._press(button)
            return

        x, y = self._renderer.to_container(pos)
        event = self._controller.click_at(x, y)
        if event is not None:
            print(f"  {event.delta:+d} (Total: {event.score})")

    def _press(self, button: str) -> None:
        """Dispatch a UI button."""
        if button == "start":
            self._start()
        elif button == "reset":
            self._controller.reset()
        elif button == "play_again":
            self._controller.play_again()
        elif button == "share":
            result = self._controller.last_result
            if result is not None:
                webbrowser.open(self._controller.resolver.share_url(result))
        elif button == "donate":
            webbrowser.open(self._controller.resolver.donate_url)

    def _start(self) -> None:
        # An ended round has to go through reset first
        if self._controller.last_result is not None:
            self._controller.play_again()
        else:
            self._controller.start()

    def _select_difficulty(self, name: str) -> None:
        if self._controller.set_difficulty(name):
            print(f"Difficulty: {self._controller.difficulty} "
                  f"(target {self._controller.target_score}, {self._controller.time_left}s)")


def main():
    parser = argparse.ArgumentParser(description="Play Drop Rush interactively")
    parser.add_argument("--difficulty", type=str, default=None, help="Difficulty preset")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=600, help="Window width (default: 600)")
    parser.add_argument("--height", type=int, default=690, help="Window height (default: 690)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--mute", action="store_true", help="Start muted")

    args = parser.parse_args()

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            difficulty=args.difficulty,
            seed=args.seed,
            window_width=args.width,
            window_height=args.height,
            target_fps=args.fps,
            muted=args.mute
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
