"""Pixel sinks backed by numpy rasters."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import PIL.Image

from .config import RasterDimensions
from .renderer import Color

__all__ = ["ArrayPixelSink", "pil_format_name"]

logger = logging.getLogger(__name__)

_LEVELS = {Color.BLACK: 0, Color.WHITE: 255}


def pil_format_name(ext: str) -> str:
    upper = ext.upper().lstrip(".")
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


class ArrayPixelSink:
    """Binary raster stored as a ``(height, width)`` ``uint8`` array.

    Black pixels hold ``0`` and white pixels ``255``. Writes outside the
    raster are logged and dropped.
    """

    def __init__(self, width: int, height: int) -> None:
        self.dimensions = RasterDimensions(width, height)
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width), dtype=np.uint8)
        self.dropped = 0

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        if not self.dimensions.contains(x, y):
            self.dropped += 1
            logger.warning("Attempted to draw pixel (%s, %s) outside the %dx%d raster.", x, y, self.width, self.height)
            return
        self.pixels[y, x] = _LEVELS[Color(color)]

    def snapshot(self) -> np.ndarray:
        return self.pixels.copy()

    def to_image(self) -> PIL.Image.Image:
        return PIL.Image.fromarray(self.pixels)

    def save(self, path: str | Path, image_format: str = "png") -> Path:
        """Write the raster to ``path`` using a Pillow format name or file extension."""
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.to_image().save(str(output_path), format=pil_format_name(image_format))
        return output_path
