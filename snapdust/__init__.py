"""
SnapDust - Make any sprite crumble into dust
"""

import logging

from .core import (
    Vec2, Sprite, SpriteParser, SpriteExporter,
    SnapConfig, Snappable, LayerAnimator, SnapDecomposer, LayerSet,
    get_preset, CaptureNotReadyError, SnapConfigError,
)

__version__ = "0.1.0"
__all__ = [
    'Vec2',
    'Sprite',
    'SpriteParser',
    'SpriteExporter',
    'SnapConfig',
    'Snappable',
    'LayerAnimator',
    'SnapDecomposer',
    'LayerSet',
    'render_snap',
    'snap',
]

logger = logging.getLogger(__name__)

FORMATS = ('gif', 'spritesheet', 'frames', 'layers')


def render_snap(effect: Snappable, fps: int = 30, timeout: float = None) -> list:
    """
    Run a whole snap cycle offline and collect every rendered frame.

    Args:
        effect: Idle snappable to run
        fps: Frames per second of the rendered sequence
        timeout: Seconds to wait for the background decomposition

    Returns:
        List of RGBA frames, from the intact subject until fully gone
    """
    if fps <= 0:
        raise SnapConfigError(f"fps must be positive, got {fps}")
    if effect.snap() is None:
        raise RuntimeError("Effect is busy; reset() it before rendering")
    if not effect.wait_until_ready(timeout):
        raise RuntimeError("Snap was reset before its layers were ready")

    frame_ms = 1000.0 / fps
    frames = [effect.render_frame()]
    while not effect.is_gone:
        effect.tick(frame_ms)
        frames.append(effect.render_frame())

    logger.debug("Rendered %d frames at %d fps", len(frames), fps)
    return frames


def snap(
    image_path: str,
    output_path: str = None,
    format: str = 'gif',
    preset: str = 'thanos',
    fps: int = None,
    seed: int = None,
    bucket_count: int = None,
    duration_ms: float = None,
    easing: str = None,
    offset: Vec2 = None,
    random_dislocation: Vec2 = None,
    remove_background: bool = False,
    on_snapped=None,
):
    """
    Snap a sprite image and export the animation.

    Args:
        image_path: Path to the sprite image
        output_path: Output path (auto-generated if None)
        format: 'gif', 'spritesheet', 'frames' or 'layers'
        preset: Preset name providing the defaults
        fps: Output frame rate (preset default if None)
        seed: Seed for reproducible dust
        bucket_count, duration_ms, easing, offset, random_dislocation: Override the preset
        remove_background: Auto-remove a flat background before snapping
        on_snapped: Called when the animation completes

    Returns:
        Path to the output file (or list of paths for 'frames' / 'layers')
    """
    from pathlib import Path

    if format not in FORMATS:
        raise ValueError(f"Unknown format: {format}")

    chosen = get_preset(preset)
    if chosen is None:
        raise SnapConfigError(f"Unknown preset: {preset}")

    config = chosen.to_config(
        on_snapped=on_snapped or (lambda: None),
        seed=seed,
        bucket_count=bucket_count,
        duration_ms=duration_ms,
        easing=easing,
        offset=offset,
        random_dislocation=random_dislocation,
    )
    fps = fps if fps is not None else chosen.fps

    if output_path is None:
        input_path = Path(image_path)
        suffix = {'gif': '.gif', 'spritesheet': '.png'}.get(format, '')
        output_path = input_path.parent / f"{input_path.stem}_snap{suffix}"

    capture = SpriteParser.capture_file(image_path, remove_background=remove_background)
    with Snappable(config, capture) as effect:
        frames = render_snap(effect, fps=fps)

        if format == 'gif':
            return SpriteExporter.to_gif(frames, output_path, duration=int(round(1000 / fps)))
        elif format == 'spritesheet':
            path, meta = SpriteExporter.to_spritesheet(frames, output_path)
            return path
        elif format == 'frames':
            return SpriteExporter.to_frames(frames, output_path)
        return SpriteExporter.export_layers(effect.animator.layer_set, output_path)
