"""
Sprite Exporter - Encodes dust layers and exports rendered snap animations
"""

from PIL import Image
import io
import json
import logging
import numpy as np
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .decompose import LayerSet

logger = logging.getLogger(__name__)


class SpriteExporter:
    """Exports layers and animation frames to various formats"""

    @staticmethod
    def encode_png(pixels: np.ndarray) -> bytes:
        """Encode an RGBA array as PNG bytes (lossless)"""
        buffer = io.BytesIO()
        Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8), 'RGBA').save(buffer, 'PNG')
        return buffer.getvalue()

    @classmethod
    def encode_layers(cls, layer_set: LayerSet) -> List[bytes]:
        """
        Encode every layer to PNG.

        This is slow for big sprites and many layers; run it off the render path.
        Zero-area layers cannot be written as PNG and encode to empty bytes.
        """
        if layer_set.is_empty:
            return [b''] * len(layer_set)
        return [cls.encode_png(layer.pixels) for layer in layer_set]

    @classmethod
    def to_png(cls, pixels: np.ndarray, path: str | Path) -> Path:
        """Export a single frame to PNG"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        img = Image.fromarray(pixels.astype(np.uint8), 'RGBA')
        img.save(path, 'PNG')

        return path

    @classmethod
    def to_gif(
        cls,
        frames: Sequence[np.ndarray],
        path: str | Path,
        duration: int = 33,
        loop: int = 0
    ) -> Path:
        """Export animation frames to GIF"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if not frames:
            raise ValueError("No frames to export")

        images = []
        for frame in frames:
            img = Image.fromarray(frame.astype(np.uint8), 'RGBA')
            # Extract alpha channel to create proper transparency mask
            alpha = img.split()[3]
            mask = Image.eval(alpha, lambda a: 255 if a < 128 else 0)
            # Convert to palette mode with transparency support
            img_p = img.convert('RGB').convert('P', palette=Image.Palette.ADAPTIVE, colors=255)
            img_p.paste(255, mask)
            images.append(img_p)

        images[0].save(
            path,
            save_all=True,
            append_images=images[1:],
            duration=duration,
            loop=loop,
            transparency=255,
            disposal=2
        )
        logger.debug("Wrote %d GIF frames to %s", len(images), path)

        return path

    @classmethod
    def to_spritesheet(
        cls,
        frames: Sequence[np.ndarray],
        path: str | Path,
        columns: Optional[int] = None,
        padding: int = 0
    ) -> Tuple[Path, dict]:
        """Export frames to a spritesheet PNG with JSON metadata alongside"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if not frames:
            raise ValueError("No frames to export")

        frame_count = len(frames)
        frame_height, frame_width = frames[0].shape[:2]

        if columns is None:
            columns = min(frame_count, 8)
        rows = (frame_count + columns - 1) // columns

        sheet_width = columns * (frame_width + padding) - padding
        sheet_height = rows * (frame_height + padding) - padding

        sheet = np.zeros((sheet_height, sheet_width, 4), dtype=np.uint8)

        for i, frame in enumerate(frames):
            row = i // columns
            col = i % columns
            x = col * (frame_width + padding)
            y = row * (frame_height + padding)
            sheet[y:y+frame_height, x:x+frame_width] = frame

        Image.fromarray(sheet, 'RGBA').save(path, 'PNG')

        metadata = {
            'frames': frame_count,
            'frame_width': frame_width,
            'frame_height': frame_height,
            'columns': columns,
            'rows': rows,
            'padding': padding,
            'sheet_width': sheet_width,
            'sheet_height': sheet_height
        }

        meta_path = path.with_suffix('.json')
        with open(meta_path, 'w') as f:
            json.dump(metadata, f, indent=2)

        return path, metadata

    @classmethod
    def to_frames(
        cls,
        frames: Sequence[np.ndarray],
        directory: str | Path,
        prefix: str = "frame"
    ) -> List[Path]:
        """Export animation frames as individual PNGs"""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        paths = []
        for i, frame in enumerate(frames):
            frame_path = directory / f"{prefix}_{i:04d}.png"
            cls.to_png(frame, frame_path)
            paths.append(frame_path)

        return paths

    @classmethod
    def export_layers(cls, layer_set: LayerSet, directory: str | Path,
                      prefix: str = "layer") -> List[Path]:
        """Write every dust layer as its own PNG (reuses encoded bytes when present)"""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        paths = []
        if layer_set.is_empty:
            logger.warning("Nothing to export: layers have zero area")
            return paths

        for layer in layer_set:
            layer_path = directory / f"{prefix}_{layer.index:02d}.png"
            if layer.encoded:
                layer_path.write_bytes(layer.encoded)
            else:
                cls.to_png(layer.pixels, layer_path)
            paths.append(layer_path)

        return paths
