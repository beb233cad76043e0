"""
Sheet Parser - Reads sprite-sheet images into RGBA pixel data
Supports anything Pillow can decode: PNG, GIF, JPEG, BMP, WEBP, ...
"""

from PIL import Image, UnidentifiedImageError
import numpy as np
from pathlib import Path
from dataclasses import dataclass
from typing import Optional
import io
import logging

from .errors import ImageDecodeError


logger = logging.getLogger(__name__)


@dataclass
class SpriteSheet:
    """A decoded source image the grid is laid over"""
    width: int
    height: int
    pixels: np.ndarray  # RGBA numpy array, shape (height, width, 4)
    name: str = "sheet"
    source_path: Optional[Path] = None

    @property
    def size(self):
        return (self.width, self.height)

    def region(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        """
        Copy a rectangle out of the sheet.

        Parts of the rectangle that fall outside the sheet come back fully
        transparent, so the result is always (height, width, 4).
        """
        out = np.zeros((height, width, 4), dtype=np.uint8)

        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + width, self.width), min(y + height, self.height)
        if x1 <= x0 or y1 <= y0:
            return out

        out[y0 - y:y1 - y, x0 - x:x1 - x] = self.pixels[y0:y1, x0:x1]
        return out


class SheetParser:
    """Parses image files, bytes and arrays into SpriteSheet objects"""

    SUPPORTED_FORMATS = {'.png', '.gif', '.jpg', '.jpeg', '.bmp', '.webp'}

    @classmethod
    def parse(cls, path: str | Path) -> SpriteSheet:
        """Parse an image file into a SpriteSheet"""
        path = Path(path)

        if not path.exists():
            raise ImageDecodeError(f"File not found: {path}")

        suffix = path.suffix.lower()
        if suffix not in cls.SUPPORTED_FORMATS:
            logger.debug("Unknown extension %s, letting Pillow sniff %s", suffix, path)

        try:
            with Image.open(path) as img:
                sheet = cls._from_image(img, name=path.stem)
        except (UnidentifiedImageError, OSError) as e:
            raise ImageDecodeError(f"Could not decode {path}: {e}") from e

        sheet.source_path = path
        return sheet

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "sheet") -> SpriteSheet:
        """Decode an in-memory image (e.g. an upload)"""
        try:
            with Image.open(io.BytesIO(data)) as img:
                return cls._from_image(img, name=name)
        except (UnidentifiedImageError, OSError) as e:
            raise ImageDecodeError(f"Could not decode image '{name}': {e}") from e

    @classmethod
    def from_array(cls, pixels: np.ndarray, name: str = "sheet") -> SpriteSheet:
        """Create a SpriteSheet from a numpy array"""
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ImageDecodeError("Pixels must be HxWx3 or HxWx4 array")

        # Ensure RGBA
        if pixels.shape[2] == 3:
            alpha = np.full((*pixels.shape[:2], 1), 255, dtype=pixels.dtype)
            pixels = np.concatenate([pixels, alpha], axis=2)

        return SpriteSheet(
            width=pixels.shape[1],
            height=pixels.shape[0],
            pixels=pixels.astype(np.uint8),
            name=name
        )

    @classmethod
    def _from_image(cls, img: Image.Image, name: str) -> SpriteSheet:
        # Animated inputs contribute their first frame only
        img.seek(0)
        if img.mode != 'RGBA':
            img = img.convert('RGBA')

        pixels = np.array(img)
        if img.width <= 0 or img.height <= 0:
            raise ImageDecodeError(f"Image '{name}' has no pixels")

        return SpriteSheet(
            width=img.width,
            height=img.height,
            pixels=pixels,
            name=name
        )
