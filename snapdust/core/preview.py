"""
Real-Time Snap Preview

Interactive window to try the effect on a sprite.

Controls:
    CLICK / SPACE  - Snap (or bring back once gone)
    R              - Reset
    +/-            - Zoom in/out
    ESC/Q          - Quit

Requires: pygame (pip install pygame)
"""

import logging

import numpy as np
from typing import Any, Optional, Tuple
from dataclasses import dataclass

from .errors import CaptureNotReadyError
from .snappable import Snappable

logger = logging.getLogger(__name__)

# Try to import pygame
try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False
    pygame = None

Surface = Any


@dataclass
class PreviewConfig:
    """Configuration for the preview window"""
    window_width: int = 800
    window_height: int = 600
    window_title: str = "SnapDust Preview"
    background_color: Tuple[int, int, int] = (40, 40, 40)
    fps: int = 60
    zoom: float = 2.0
    min_zoom: float = 1.0
    max_zoom: float = 8.0
    zoom_step: float = 1.5
    show_info: bool = True


def check_pygame_available() -> bool:
    """Check if pygame is installed"""
    return PYGAME_AVAILABLE


def array_to_surface(array: np.ndarray) -> Surface:
    """Convert RGBA numpy array to pygame surface"""
    h, w = array.shape[:2]
    surf = pygame.Surface((w, h), pygame.SRCALPHA)
    # Pygame is (width, height), numpy is (height, width)
    pygame.surfarray.pixels3d(surf)[:] = array[:, :, :3].swapaxes(0, 1)
    pygame.surfarray.pixels_alpha(surf)[:] = array[:, :, 3].swapaxes(0, 1)
    return surf


class SnapPreviewWindow:
    """
    Window that drives a Snappable with the pygame clock.

    Example:
        effect = Snappable(config, SpriteParser.capture_file("card.png"))
        SnapPreviewWindow(effect).run()
    """

    def __init__(self, effect: Snappable, config: Optional[PreviewConfig] = None):
        if not PYGAME_AVAILABLE:
            raise ImportError(
                "pygame is required for preview. Install with: pip install pygame"
            )

        self.effect = effect
        self.config = config or PreviewConfig()
        self.zoom = self.config.zoom
        self.message = ""

        pygame.init()
        pygame.display.set_caption(self.config.window_title)
        self.screen = pygame.display.set_mode(
            (self.config.window_width, self.config.window_height),
            pygame.RESIZABLE
        )
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 20)

    def toggle(self) -> None:
        """Same gesture as the demo button: reset when gone, otherwise snap"""
        try:
            if self.effect.config.snap_on_tap:
                self.effect.tap()
            elif self.effect.is_gone:
                self.effect.reset()
            else:
                self.effect.snap()
            self.message = ""
        except CaptureNotReadyError as e:
            logger.warning("Snap not ready: %s", e)
            self.message = "Subject not ready, try again"

    def run(self) -> None:
        """Run the preview main loop"""
        running = True

        while running:
            dt_ms = self.clock.tick(self.config.fps)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    self.toggle()
                elif event.type == pygame.KEYDOWN:
                    running = self._handle_key(event.key)
                elif event.type == pygame.VIDEORESIZE:
                    self.screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)

            self.effect.tick(dt_ms)
            self._render()
            pygame.display.flip()

        pygame.quit()

    def _handle_key(self, key: int) -> bool:
        """Handle keyboard input. Returns False to quit."""
        if key in (pygame.K_ESCAPE, pygame.K_q):
            return False
        if key == pygame.K_SPACE:
            self.toggle()
        elif key == pygame.K_r:
            self.effect.reset()
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self.zoom = min(self.config.max_zoom, self.zoom * self.config.zoom_step)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self.zoom = max(self.config.min_zoom, self.zoom / self.config.zoom_step)
        return True

    def frame(self) -> Optional[np.ndarray]:
        """Current effect frame, or None while the subject cannot be captured"""
        try:
            return self.effect.render_frame()
        except CaptureNotReadyError as e:
            logger.debug("Nothing to draw yet: %s", e)
            self.message = "Waiting for the subject..."
            return None

    def _render(self) -> None:
        self.screen.fill(self.config.background_color)

        frame = self.frame()
        if frame is not None:
            surf = array_to_surface(frame)
            w, h = surf.get_size()
            scaled = pygame.transform.scale(surf, (int(w * self.zoom), int(h * self.zoom)))
            sw, sh = self.screen.get_size()
            self.screen.blit(scaled, ((sw - scaled.get_width()) // 2, (sh - scaled.get_height()) // 2))

        if self.config.show_info:
            status = "preparing" if self.effect.is_preparing else self.effect.status.value
            lines = [
                f"{status}  t={self.effect.animator.value:.2f}  zoom={self.zoom:.1f}x",
                "click/space: snap   r: reset   esc: quit",
            ]
            if self.message:
                lines.append(self.message)
            for i, line in enumerate(lines):
                text = self.font.render(line, True, (220, 220, 220))
                self.screen.blit(text, (10, 10 + i * 20))


def preview_snap(effect: Snappable, zoom: float = 2.0, title: Optional[str] = None) -> None:
    """Open a preview window for an effect and block until it is closed"""
    config = PreviewConfig(zoom=zoom)
    if title:
        config.window_title = title
    SnapPreviewWindow(effect, config).run()
