"""Mapping between raster pixels and the continuous mapped plane."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Optional, Tuple

from .config import ConfigurationError, Range, RasterDimensions

__all__ = ["CoordinateMapper", "SamplePoint"]


class SamplePoint(NamedTuple):
    pixel_x: int
    pixel_y: int
    mapped_x: float
    mapped_y: float


@dataclass(frozen=True)
class CoordinateMapper:
    """Map a ``width x height`` raster onto a rectangle of the mapped plane.

    Pixel ``(0, 0)`` lands on ``(width_range.min, height_range.min)`` and
    pixel ``(width - 1, height - 1)`` on ``(width_range.max,
    height_range.max)``. Both axes need at least two pixels.
    """

    width: int
    height: int
    width_range: Range
    height_range: Range
    x_step: float = field(init=False)
    y_step: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "width_range", Range.coerce(self.width_range))
        object.__setattr__(self, "height_range", Range.coerce(self.height_range))
        width, height = self.dimensions.width, self.dimensions.height
        if width <= 1 or height <= 1:
            raise ConfigurationError(
                f"Mapping needs at least 2 pixels along each axis, got {width}x{height}"
            )
        object.__setattr__(self, "x_step", self.width_range.span / (width - 1))
        object.__setattr__(self, "y_step", self.height_range.span / (height - 1))

    @property
    def dimensions(self) -> RasterDimensions:
        return RasterDimensions(self.width, self.height)

    @property
    def step_sizes(self) -> Tuple[float, float]:
        return self.x_step, self.y_step

    def __len__(self) -> int:
        return self.dimensions.pixel_count

    def __iter__(self) -> Iterator[SamplePoint]:
        return self.samples()

    def samples(self, rows: Optional[range] = None) -> Iterator[SamplePoint]:
        """Yield one :class:`SamplePoint` per pixel in row-major order.

        Mapped coordinates are accumulated step by step rather than
        multiplied out, so they can drift from :meth:`pixel_to_mapped` in
        the last bits. ``rows`` restricts the pass to a contiguous row
        range; its samples are identical to those of a full pass.
        """
        height = self.height
        rows = range(height) if rows is None else rows
        if rows.step != 1 or rows.start < 0 or rows.stop > height:
            raise ConfigurationError(f"Row range {rows!r} is not a contiguous slice of 0..{height}")
        return self._walk(rows)

    def _walk(self, rows: range) -> Iterator[SamplePoint]:
        width = self.width
        cur_y = self.height_range.min
        for _ in range(rows.start):
            cur_y += self.y_step

        for y in rows:
            cur_x = self.width_range.min
            for x in range(width):
                yield SamplePoint(x, y, cur_x, cur_y)
                cur_x += self.x_step
            cur_y += self.y_step

    def partition_rows(self, parts: int) -> List[range]:
        """Split the raster rows into at most ``parts`` disjoint contiguous ranges."""
        if parts <= 0:
            raise ConfigurationError(f"parts must be positive, got {parts}")
        height = self.height
        parts = min(parts, height)
        base, extra = divmod(height, parts)
        ranges = []
        start = 0
        for index in range(parts):
            stop = start + base + (1 if index < extra else 0)
            ranges.append(range(start, stop))
            start = stop
        return ranges

    def pixel_to_mapped(self, pixel_x: float, pixel_y: float) -> Tuple[float, float]:
        x = self.width_range.min + pixel_x * self.x_step
        y = self.height_range.min + pixel_y * self.y_step
        return x, y

    def mapped_to_pixel(self, mapped_x: float, mapped_y: float) -> Optional[Tuple[int, int]]:
        """Return the pixel nearest to a mapped point, or ``None`` off the raster."""
        if not (math.isfinite(mapped_x) and math.isfinite(mapped_y)):
            return None
        col = int(round((mapped_x - self.width_range.min) / self.x_step))
        row = int(round((mapped_y - self.height_range.min) / self.y_step))
        if not self.dimensions.contains(col, row):
            return None
        return col, row
