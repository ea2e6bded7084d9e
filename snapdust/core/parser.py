"""
Sprite Parser - Turns captured subjects into RGBA sprites
Supports: image files (PNG, GIF, ...), encoded bytes, numpy arrays and raw capture buffers
"""

from PIL import Image
import numpy as np
import io
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from .errors import CaptureNotReadyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sprite:
    """A captured subject: immutable RGBA pixel grid"""
    width: int
    height: int
    pixels: np.ndarray  # (H, W, 4) uint8 RGBA
    name: str = "sprite"
    source_path: Optional[Path] = None

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def area(self) -> int:
        return self.width * self.height


Capture = Callable[[], Any]


class SpriteParser:
    """Parses image files, buffers and capture results into Sprite objects"""

    SUPPORTED_FORMATS = {'.png', '.gif', '.jpg', '.jpeg', '.bmp', '.webp'}

    # Conservative so the edge of the subject is not eaten
    DEFAULT_BG_TOLERANCE = 15

    @classmethod
    def parse(cls, path: str | Path, remove_background: bool = False,
              bg_tolerance: int = None) -> Sprite:
        """Parse an image file into a Sprite object

        Args:
            path: Path to the image file
            remove_background: Detect and remove a flat background (default: False)
            bg_tolerance: Color tolerance for background detection (default: 15)
        """
        path = Path(path)

        if bg_tolerance is None:
            bg_tolerance = cls.DEFAULT_BG_TOLERANCE

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        suffix = path.suffix.lower()
        if suffix not in cls.SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported format: {suffix}")

        with Image.open(path) as img:
            pixels = np.array(img.convert('RGBA'))
        pixels.setflags(write=False)

        sprite = Sprite(
            width=pixels.shape[1],
            height=pixels.shape[0],
            pixels=pixels,
            name=path.stem,
            source_path=path
        )

        if remove_background:
            sprite = cls._remove_background(sprite, bg_tolerance)

        return sprite

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "sprite") -> Sprite:
        """Decode an encoded image (PNG, ...) into a Sprite"""
        with Image.open(io.BytesIO(data)) as img:
            pixels = np.array(img.convert('RGBA'))
        return cls.from_array(pixels, name=name)

    @classmethod
    def from_array(cls, pixels: np.ndarray, name: str = "sprite") -> Sprite:
        """Create a Sprite from a numpy array"""
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ValueError("Pixels must be HxWx3 or HxWx4 array")

        pixels = pixels.astype(np.uint8, copy=True)

        # Ensure RGBA
        if pixels.shape[2] == 3:
            alpha = np.full((*pixels.shape[:2], 1), 255, dtype=np.uint8)
            pixels = np.concatenate([pixels, alpha], axis=2)

        pixels.setflags(write=False)
        return Sprite(
            width=pixels.shape[1],
            height=pixels.shape[0],
            pixels=pixels,
            name=name
        )

    @classmethod
    def from_buffer(cls, buffer: Any, width: int, height: int,
                    name: str = "sprite") -> Sprite:
        """Create a Sprite from a flat RGBA buffer of width*height*4 bytes"""
        flat = np.frombuffer(bytes(buffer), dtype=np.uint8) if not isinstance(buffer, np.ndarray) \
            else buffer.astype(np.uint8).ravel()
        expected = width * height * 4
        if flat.size != expected:
            raise ValueError(
                f"Buffer holds {flat.size} bytes, expected {expected} for {width}x{height} RGBA"
            )
        return cls.from_array(flat.reshape(height, width, 4), name=name)

    @classmethod
    def from_capture(cls, result: Any) -> Sprite:
        """Normalize whatever a capture callable returned into a Sprite

        Accepts a Sprite, encoded image bytes, an HxWx3/4 array or a
        (pixels, width, height) tuple. None means the subject is not laid out yet.
        """
        if result is None:
            raise CaptureNotReadyError("Capture returned no image; subject is not ready")
        if isinstance(result, Sprite):
            return result
        if isinstance(result, (bytes, bytearray)):
            return cls.from_bytes(bytes(result))
        if isinstance(result, np.ndarray):
            if result.ndim == 3:
                return cls.from_array(result)
            raise ValueError("Captured arrays must be HxWx3 or HxWx4")
        if isinstance(result, tuple) and len(result) == 3:
            pixels, width, height = result
            return cls.from_buffer(pixels, int(width), int(height))
        raise TypeError(f"Unsupported capture result: {type(result).__name__}")

    @classmethod
    def capture(cls, capture: Capture) -> Sprite:
        """Invoke a capture callable once and return its Sprite

        Any failure of the collaborator surfaces as CaptureNotReadyError.
        """
        try:
            result = capture()
        except CaptureNotReadyError:
            raise
        except Exception as exc:
            raise CaptureNotReadyError(f"Capture failed: {exc}") from exc

        try:
            return cls.from_capture(result)
        except (TypeError, ValueError, OSError) as exc:
            raise CaptureNotReadyError(f"Capture produced an unusable image: {exc}") from exc

    @classmethod
    def capture_file(cls, path: str | Path, remove_background: bool = False,
                     bg_tolerance: int = None) -> Capture:
        """Build a capture callable that reads the subject from an image file"""
        def _capture() -> Sprite:
            return cls.parse(path, remove_background=remove_background,
                             bg_tolerance=bg_tolerance)
        return _capture

    @classmethod
    def capture_array(cls, pixels: np.ndarray, name: str = "sprite") -> Capture:
        """Build a capture callable returning a fixed array"""
        sprite = cls.from_array(pixels, name=name)
        return lambda: sprite

    @classmethod
    def _remove_background(cls, sprite: Sprite, tolerance: int = 30) -> Sprite:
        """Fast background removal - detects edge color and removes matching pixels."""
        arr = sprite.pixels.copy()
        h, w = arr.shape[:2]

        if h < 3 or w < 3:
            return sprite

        # Get background color from corners
        corners = [arr[0, 0, :3], arr[0, -1, :3], arr[-1, 0, :3], arr[-1, -1, :3]]
        bg_color = np.mean(corners, axis=0).astype(np.float32)

        rgb = arr[:, :, :3].astype(np.float32)
        distance = np.sqrt(np.sum((rgb - bg_color) ** 2, axis=2))

        to_remove = distance < tolerance
        arr[to_remove, 3] = 0
        logger.debug("Removed %d background pixels from %s", int(to_remove.sum()), sprite.name)

        arr.setflags(write=False)
        return Sprite(
            width=sprite.width,
            height=sprite.height,
            pixels=arr,
            name=sprite.name,
            source_path=sprite.source_path
        )
