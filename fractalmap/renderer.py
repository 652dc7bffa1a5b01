"""Drive a classifier over a raster and paint the result into a pixel sink."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional, Protocol, runtime_checkable

from .config import ConfigurationError, FractalMapOptions, RangeLike, Range
from .mapper import CoordinateMapper

__all__ = ["Classifier", "Color", "PixelSink", "RasterRenderer"]

logger = logging.getLogger(__name__)

Classifier = Callable[[float, float], bool]


class Color(str, Enum):
    BLACK = "#000000"
    WHITE = "#ffffff"


@runtime_checkable
class PixelSink(Protocol):
    """Surface receiving one binary color per pixel.

    Implementations drop writes outside ``[0, width) x [0, height)`` with a
    logged warning instead of raising.
    """

    width: int
    height: int

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        ...


class RasterRenderer:
    """Paint ``classifier`` over the mapped rectangle into ``sink``.

    The sink's dimensions are read once here. Constructing a renderer
    validates the configuration but does not draw, so callers must call
    :meth:`draw` once to paint the first frame. :meth:`configure` and
    :meth:`set_boundaries` redraw immediately.
    """

    def __init__(
        self,
        sink: PixelSink,
        width_range: RangeLike = (-1.0, 1.0),
        height_range: RangeLike = (-1.0, 1.0),
        classifier: Optional[Classifier] = None,
    ) -> None:
        self.sink = sink
        self.width = int(sink.width)
        self.height = int(sink.height)
        self.draw_count = 0
        self._lock = threading.RLock()

        options = FractalMapOptions(map_width=width_range, map_height=height_range, classifier=classifier)
        self._mapper = self._build_mapper(options.map_width, options.map_height)
        self._classifier: Classifier = options.classifier

    @classmethod
    def from_options(cls, sink: PixelSink, options: FractalMapOptions) -> RasterRenderer:
        return cls(sink, options.map_width, options.map_height, options.classifier)

    @property
    def width_range(self) -> Range:
        return self._mapper.width_range

    @property
    def height_range(self) -> Range:
        return self._mapper.height_range

    @property
    def classifier(self) -> Classifier:
        return self._classifier

    @property
    def mapper(self) -> CoordinateMapper:
        return self._mapper

    def _build_mapper(self, width_range: RangeLike, height_range: RangeLike) -> CoordinateMapper:
        return CoordinateMapper(self.width, self.height, Range.coerce(width_range), Range.coerce(height_range))

    def configure(self, width_range: RangeLike, height_range: RangeLike, classifier: Classifier) -> None:
        """Replace both ranges and the classifier, then redraw."""
        if not callable(classifier):
            raise ConfigurationError(f"classifier must be callable, got {classifier!r}")
        with self._lock:
            self._mapper = self._build_mapper(width_range, height_range)
            self._classifier = classifier
            self.draw()

    def set_boundaries(
        self,
        width_range: Optional[RangeLike] = None,
        height_range: Optional[RangeLike] = None,
    ) -> None:
        """Update either range; any range passed in triggers a redraw."""
        if width_range is None and height_range is None:
            return
        with self._lock:
            mapper = self._build_mapper(
                self._mapper.width_range if width_range is None else width_range,
                self._mapper.height_range if height_range is None else height_range,
            )
            logger.debug(
                "Boundaries set to x=%s y=%s",
                mapper.width_range.as_tuple(),
                mapper.height_range.as_tuple(),
            )
            self._mapper = mapper
            self.draw()

    def draw(self) -> None:
        """Classify every pixel and write white (inside) or black (outside)."""
        with self._lock:
            mapper = self._mapper
            classifier = self._classifier
            set_pixel = self.sink.set_pixel
            logger.debug("Drawing %dx%d raster", self.width, self.height)
            for px, py, mx, my in mapper.samples():
                set_pixel(px, py, Color.WHITE if classifier(mx, my) else Color.BLACK)
            self.draw_count += 1
            logger.debug("Draw %d finished", self.draw_count)
