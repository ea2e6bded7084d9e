"""
Layer Compositor - Reference renderer for the snap render contract

While idle the original sprite is drawn; once the snap runs the original is
replaced by the layer stack, each layer translated and faded by its state.

CRITICAL: blending happens in float premultiplied alpha to avoid uint8 wrap.
"""

import logging
import math

import numpy as np
from typing import Optional, Sequence, Tuple

from .animator import LayerState
from .utils import Vec2

logger = logging.getLogger(__name__)

Margin = Tuple[int, int, int, int]  # left, top, right, bottom


def canvas_margin(max_reach: Vec2) -> Margin:
    """Border around the sprite wide enough for the farthest layer offset"""
    mx = int(math.ceil(abs(max_reach.x)))
    my = int(math.ceil(abs(max_reach.y)))
    return (mx, my, mx, my)


def _to_premultiplied(pixels: np.ndarray, opacity: float = 1.0) -> np.ndarray:
    """RGBA uint8 -> float premultiplied with extra opacity applied"""
    result = pixels.astype(np.float64) / 255.0
    result[:, :, 3] *= opacity
    result[:, :, :3] *= result[:, :, 3:4]
    return result


def _from_premultiplied(premul: np.ndarray) -> np.ndarray:
    """Float premultiplied -> RGBA uint8"""
    alpha = premul[:, :, 3:4]
    safe_alpha = np.where(alpha > 1e-10, alpha, 1.0)
    rgb = np.where(alpha > 1e-10, premul[:, :, :3] / safe_alpha, 0.0)
    out = np.concatenate([rgb, alpha], axis=2)
    return np.rint(np.clip(out, 0.0, 1.0) * 255.0).astype(np.uint8)


def _over(canvas: np.ndarray, layer: np.ndarray, x: int, y: int) -> None:
    """Porter-Duff over of a premultiplied layer onto the canvas at (x, y), clipped"""
    ch, cw = canvas.shape[:2]
    lh, lw = layer.shape[:2]

    x0, y0 = max(x, 0), max(y, 0)
    x1, y1 = min(x + lw, cw), min(y + lh, ch)
    if x0 >= x1 or y0 >= y1:
        return

    src = layer[y0 - y:y1 - y, x0 - x:x1 - x]
    dst = canvas[y0:y1, x0:x1]
    canvas[y0:y1, x0:x1] = src + dst * (1.0 - src[:, :, 3:4])


def render_frame(
    width: int,
    height: int,
    states: Sequence[LayerState],
    original: Optional[np.ndarray] = None,
    margin: Margin = (0, 0, 0, 0),
    background: Optional[Tuple[int, int, int, int]] = None
) -> np.ndarray:
    """
    Draw one frame of the effect.

    Args:
        width, height: Size of the captured sprite
        states: Current layer states (empty while idle)
        original: Sprite pixels, drawn when there are no states
        margin: Extra canvas around the sprite (left, top, right, bottom)
        background: Optional opaque RGBA fill behind everything

    Returns:
        RGBA uint8 array of (height + top + bottom, width + left + right)
    """
    left, top, right, bottom = margin
    canvas = np.zeros((height + top + bottom, width + left + right, 4), dtype=np.float64)

    if background is not None:
        canvas[:, :] = _to_premultiplied(np.array([[background]], dtype=np.uint8))[0, 0]

    if not states:
        if original is not None:
            _over(canvas, _to_premultiplied(original), left, top)
        return _from_premultiplied(canvas)

    # Index order, bottom to top
    for state in sorted(states, key=lambda s: s.index):
        if state.opacity <= 0.0:
            continue
        dx, dy = state.translation.to_int_tuple()
        _over(canvas, _to_premultiplied(state.image, state.opacity), left + dx, top + dy)

    return _from_premultiplied(canvas)
