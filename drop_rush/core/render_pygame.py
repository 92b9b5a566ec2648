"""
Pygame Renderer
===============

Presentation layer for the round core. Consumes render commands to keep
short-lived effects (explosions, particles, confetti, toasts, the result
panel) and draws them together with the live drops and the HUD.
Supports both display mode (human play) and headless RGB output.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

import numpy as np

from drop_rush.core.config_loader import GameConfig, get_config
from drop_rush.core.feedback import (
    AddDrop,
    ConfettiPiece,
    FeedbackSink,
    ParticleBurst,
    RemoveDrop,
    RenderCommand,
    RoundMessage,
    Toast,
)

HUD_HEIGHT = 90
BUTTON_HEIGHT = 36
BOUNCE_SCALE = 0.2


@dataclass
class _Effect:
    """A render command kept alive until born_ms + lifetime_ms."""
    command: Any
    born_ms: int
    lifetime_ms: int

    def age(self, now_ms: int) -> float:
        if self.lifetime_ms <= 0:
            return 1.0
        return max(0.0, min(1.0, (now_ms - self.born_ms) / self.lifetime_ms))

    def expired(self, now_ms: int) -> bool:
        return now_ms - self.born_ms >= self.lifetime_ms


@dataclass
class _Lingering:
    """A resolved drop playing its explode animation."""
    x: float
    y: float
    size: float
    kind: str
    born_ms: int
    lifetime_ms: int


class PygameRenderer(FeedbackSink):
    """
    Full-featured renderer using pygame.

    Supports:
    - Teardrop-shaped good/bad drops
    - Explode animation for clicked drops
    - Particle bursts, confetti and milestone toasts
    - HUD with score, time, target and Start/Reset buttons
    - End-of-round panel with Share/Donate/Play Again buttons
    - RGB array output for bots and tests
    """

    def __init__(
        self,
        clock: Callable[[], int],
        config: Optional[GameConfig] = None,
        width: int = 600,
        height: int = 690
    ):
        """
        Initialize renderer.

        Args:
            clock: Returns the round clock in ms (RoundController.now_ms).
            config: Game configuration.
            width: Window width.
            height: Window height (HUD included).
        """
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for PygameRenderer")

        if config is None:
            config = get_config()

        self._config = config
        self._clock = clock
        self._width = width
        self._height = height

        if not pygame.get_init():
            pygame.init()

        # Display surface (created on demand)
        self._screen: Optional[pygame.Surface] = None

        # Fonts
        pygame.font.init()
        self._font = pygame.font.Font(None, 28)
        self._font_large = pygame.font.Font(None, 44)
        self._font_small = pygame.font.Font(None, 22)

        # Colors
        self._bg_color = (255, 244, 214)
        self._container_color = (234, 246, 255)
        self._border_color = (46, 157, 247)
        self._text_color = (30, 42, 60)
        self._muted_text = (110, 120, 135)
        self._good_color = (46, 157, 247)
        self._good_highlight = (139, 209, 203)
        self._bad_color = (110, 84, 60)
        self._bad_highlight = (160, 130, 90)
        self._button_color = (255, 201, 7)
        self._button_text = (30, 30, 30)
        self._panel_color = (255, 255, 255)

        # Effect state
        self._drops: Dict[int, Tuple[AddDrop, int]] = {}
        self._lingering: List[_Lingering] = []
        self._particles: List[_Effect] = []
        self._confetti: List[_Effect] = []
        self._toasts: List[_Effect] = []
        self._message = RoundMessage("")

        # Clickable button areas, rebuilt every frame
        self._buttons: Dict[str, pygame.Rect] = {}

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    @property
    def container_rect(self) -> "pygame.Rect":
        """Screen area of the drop container."""
        return pygame.Rect(0, HUD_HEIGHT, self._width, self._height - HUD_HEIGHT)

    def to_container(self, pos: Tuple[int, int]) -> Tuple[float, float]:
        """Convert screen coordinates to container coordinates."""
        rect = self.container_rect
        return (pos[0] - rect.x, pos[1] - rect.y)

    def button_at(self, pos: Tuple[int, int]) -> Optional[str]:
        """Name of the button under a screen position, or None."""
        for name, rect in self._buttons.items():
            if rect.collidepoint(pos):
                return name
        return None

    # ------------------------------------------------------------------
    # FeedbackSink
    # ------------------------------------------------------------------

    def render(self, command: RenderCommand) -> None:
        now = self._clock()

        if isinstance(command, AddDrop):
            self._drops[command.uid] = (command, now)
        elif isinstance(command, RemoveDrop):
            entry = self._drops.pop(command.uid, None)
            if entry is not None and command.linger_ms > 0:
                add, born = entry
                progress = min(1.0, (now - born) / add.lifetime_ms) if add.lifetime_ms else 1.0
                height = self.container_rect.height
                y = -add.size + progress * (height + add.size)
                self._lingering.append(_Lingering(
                    x=add.x, y=y, size=add.size, kind=add.kind,
                    born_ms=now, lifetime_ms=command.linger_ms
                ))
        elif isinstance(command, ParticleBurst):
            self._particles.append(_Effect(command, now, command.lifetime_ms))
        elif isinstance(command, ConfettiPiece):
            self._confetti.append(_Effect(command, now, command.lifetime_ms))
        elif isinstance(command, Toast):
            self._toasts.append(_Effect(command, now, command.lifetime_ms))
        elif isinstance(command, RoundMessage):
            self._message = command

    def _expire_effects(self, now_ms: int) -> None:
        self._lingering = [e for e in self._lingering if now_ms - e.born_ms < e.lifetime_ms]
        self._particles = [e for e in self._particles if not e.expired(now_ms)]
        self._confetti = [e for e in self._confetti if not e.expired(now_ms)]
        self._toasts = [e for e in self._toasts if not e.expired(now_ms)]

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render_to_screen(self, render_data: Dict[str, Any]) -> None:
        """Render to the pygame window and flip."""
        if self._screen is None:
            self._screen = pygame.display.set_mode((self._width, self._height))
            pygame.display.set_caption("Drop Rush")

        self._render_to_surface(self._screen, render_data)
        pygame.display.flip()

    def render_array(self, render_data: Dict[str, Any]) -> np.ndarray:
        """
        Render to RGB array.

        Returns:
            (height, width, 3) uint8 array.
        """
        surface = pygame.Surface((self._width, self._height))
        self._render_to_surface(surface, render_data)
        array = pygame.surfarray.array3d(surface)
        return np.transpose(array, (1, 0, 2))

    def _render_to_surface(self, surface: "pygame.Surface", render_data: Dict[str, Any]) -> None:
        now = self._clock()
        self._expire_effects(now)
        self._buttons = {}

        surface.fill(self._bg_color)
        rect = self.container_rect
        pygame.draw.rect(surface, self._container_color, rect)
        pygame.draw.rect(surface, self._border_color, rect, 3)

        # Clip drawing to the container so drops enter from above it
        surface.set_clip(rect)
        for drop in render_data["drops"]:
            self._draw_drop(surface, rect, drop["x"], drop["y"], drop["size"], drop["kind"])
        for item in self._lingering:
            self._draw_explode(surface, rect, item, now)
        for effect in self._particles:
            self._draw_burst(surface, rect, effect, now)
        for effect in self._confetti:
            self._draw_confetti(surface, rect, effect, now)
        surface.set_clip(None)

        self._draw_hud(surface, render_data)
        self._draw_toasts(surface, rect, now)
        if self._message.visible:
            self._draw_message(surface, rect)

    def _draw_drop(
        self,
        surface: "pygame.Surface",
        rect: "pygame.Rect",
        x: float,
        y: float,
        size: float,
        kind: str,
        alpha: int = 255
    ) -> None:
        """Draw a teardrop: circle body with a pointed top."""
        radius = max(2, int(size / 2))
        cx = int(rect.x + x + size / 2)
        cy = int(rect.y + y + size / 2)
        body = self._bad_color if kind == "bad" else self._good_color
        shine = self._bad_highlight if kind == "bad" else self._good_highlight

        drop_surface = pygame.Surface((radius * 2, radius * 3), pygame.SRCALPHA)
        center = (radius, radius * 2)
        pygame.draw.circle(drop_surface, (*body, alpha), center, radius)
        pygame.draw.polygon(drop_surface, (*body, alpha), [
            (radius, 0),
            (radius - int(radius * 0.85), int(radius * 1.6)),
            (radius + int(radius * 0.85), int(radius * 1.6)),
        ])
        pygame.draw.circle(
            drop_surface, (*shine, alpha),
            (radius - radius // 3, radius * 2 - radius // 3), max(1, radius // 4)
        )
        surface.blit(drop_surface, (cx - radius, cy - radius * 2))

    def explode_footprint(self, item: _Lingering, now_ms: int) -> Tuple[float, float, float, int]:
        """
        Drawn (x, y, size, alpha) of a resolved drop.

        Caught drops pulse for ``bounce_ms`` at full opacity first; every
        resolved drop then grows and fades over its linger time.
        """
        elapsed = max(0, now_ms - item.born_ms)
        bounce_ms = self._config.effects.bounce_ms
        if item.kind == "good" and elapsed < bounce_ms:
            size = item.size * (1.0 + BOUNCE_SCALE * math.sin(math.pi * elapsed / bounce_ms))
            alpha = 255
        else:
            t = min(1.0, elapsed / item.lifetime_ms) if item.lifetime_ms > 0 else 1.0
            size = item.size * (1.0 + 0.6 * t)
            alpha = int(255 * (1.0 - t))
        offset = (size - item.size) / 2
        return (item.x - offset, item.y - offset, size, alpha)

    def _draw_explode(self, surface, rect, item: _Lingering, now_ms: int) -> None:
        x, y, size, alpha = self.explode_footprint(item, now_ms)
        self._draw_drop(surface, rect, x, y, size, item.kind, alpha)

    def _draw_burst(self, surface, rect, effect: _Effect, now_ms: int) -> None:
        burst: ParticleBurst = effect.command
        t = effect.age(now_ms)
        alpha = int(255 * (1.0 - t))
        for p in burst.particles:
            px = rect.x + burst.x + p.offset_x + p.dx * t
            py = rect.y + burst.y + p.offset_y + p.dy * t
            dot = pygame.Surface((8, 8), pygame.SRCALPHA)
            pygame.draw.rect(dot, (*p.color, alpha), dot.get_rect(), border_radius=2)
            if p.rotation:
                dot = pygame.transform.rotate(dot, p.rotation * t)
            surface.blit(dot, (int(px - 4), int(py - 4)))

    def _draw_confetti(self, surface, rect, effect: _Effect, now_ms: int) -> None:
        piece: ConfettiPiece = effect.command
        t = effect.age(now_ms)
        y = rect.y - 30 + t * (rect.height + 30)
        width = int(self._config.effects.confetti_width)
        pygame.draw.rect(surface, piece.color, pygame.Rect(int(rect.x + piece.x), int(y), width, width // 2 + 2))

    def _draw_hud(self, surface, render_data: Dict[str, Any]) -> None:
        score = self._font_large.render(f"Score: {render_data['score']}", True, self._text_color)
        surface.blit(score, (16, 10))

        details = (
            f"Time: {render_data['time_left']}s   "
            f"Target: {render_data['target_score']}   "
            f"Mode: {render_data['difficulty']}"
        )
        surface.blit(self._font_small.render(details, True, self._muted_text), (16, 52))

        running = render_data["phase"] == "running"
        if not running and not self._message.visible:
            self._button(surface, "start", "Start", self._width - 200, 14)
        self._button(surface, "reset", "Reset", self._width - 100, 14)

    def _draw_toasts(self, surface, rect, now_ms: int) -> None:
        y = rect.y + 12
        for effect in self._toasts:
            toast: Toast = effect.command
            alpha = int(255 * (1.0 - effect.age(now_ms) ** 3))
            text = self._font.render(toast.message, True, self._text_color)
            box = pygame.Surface((text.get_width() + 24, text.get_height() + 14), pygame.SRCALPHA)
            box.fill((*self._button_color, int(alpha * 0.9)))
            text.set_alpha(alpha)
            box.blit(text, (12, 7))
            surface.blit(box, (rect.centerx - box.get_width() // 2, y))
            y += box.get_height() + 6

    def _draw_message(self, surface, rect) -> None:
        panel = pygame.Rect(0, 0, int(rect.width * 0.86), 230)
        panel.center = rect.center
        pygame.draw.rect(surface, self._panel_color, panel, border_radius=12)
        pygame.draw.rect(surface, self._border_color, panel, 3, border_radius=12)

        title = self._font.render(_drawable(self._message.text), True, self._text_color)
        surface.blit(title, (panel.centerx - title.get_width() // 2, panel.y + 18))

        y = panel.y + 60
        for line in _wrap(self._message.fact, self._font_small, panel.width - 40):
            rendered = self._font_small.render(line, True, self._muted_text)
            surface.blit(rendered, (panel.centerx - rendered.get_width() // 2, y))
            y += rendered.get_height() + 4

        labels = {"share": "Share", "donate": "Donate", "play_again": "Play Again"}
        actions = [a for a in self._message.actions if a in labels]
        if actions:
            button_w = 120
            gap = 12
            total = len(actions) * button_w + (len(actions) - 1) * gap
            x = panel.centerx - total // 2
            for action in actions:
                self._button(surface, action, labels[action], x, panel.bottom - BUTTON_HEIGHT - 18, button_w)
                x += button_w + gap

    def _button(self, surface, name: str, label: str, x: int, y: int, width: int = 88) -> None:
        rect = pygame.Rect(x, y, width, BUTTON_HEIGHT)
        pygame.draw.rect(surface, self._button_color, rect, border_radius=8)
        text = self._font_small.render(label, True, self._button_text)
        surface.blit(text, (rect.centerx - text.get_width() // 2, rect.centery - text.get_height() // 2))
        self._buttons[name] = rect

    def close(self) -> None:
        """Clean up pygame resources."""
        self._drops.clear()
        self._lingering.clear()
        self._particles.clear()
        self._confetti.clear()
        self._toasts.clear()
        if self._screen is not None:
            self._screen = None


def _drawable(text: str) -> str:
    """Drop characters outside the Basic Multilingual Plane (emoji) the default font cannot draw."""
    return "".join(ch for ch in text if ord(ch) <= 0xFFFF).strip()


def _wrap(text: str, font, max_width: int) -> List[str]:
    """Greedy word wrap for a pygame font."""
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}".strip()
        if font.size(candidate)[0] <= max_width or not current:
            current = candidate
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines
