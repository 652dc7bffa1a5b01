"""Utilities for rendering zoom sequences over a fractal map."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

import numpy as np

from .config import ConfigurationError, Range
from .renderer import RasterRenderer

__all__ = ["ZoomPlanner", "apply_zoom", "compute_zoom_factors", "range_center", "render_zoom_sequence"]

logger = logging.getLogger(__name__)


def _smoothstep(t: np.ndarray) -> np.ndarray:
    return t * t * (3.0 - 2.0 * t)


_EASINGS = {
    "linear": lambda t: t,
    "ease": _smoothstep,
}


def compute_zoom_factors(frames: int, zoom_factor: float, *, final_zoom: float | None = None, easing: str = "ease") -> np.ndarray:
    """Per-frame window multipliers for a zoom sequence.

    Without ``final_zoom`` every frame scales by ``zoom_factor``. With it,
    the curve ``easing`` places frame ``k`` at ``final_zoom ** curve(k / (frames - 1))``
    and each factor is the ratio to the previous frame, so the factors
    multiply out to ``final_zoom``. A single frame jumps straight there.
    """
    if frames <= 0:
        return np.empty(0, dtype=np.float64)
    if final_zoom is None:
        return np.full(frames, zoom_factor, dtype=np.float64)

    curve = _EASINGS.get(easing.lower())
    if curve is None:
        raise ConfigurationError(f"Unknown easing '{easing}'. Valid choices: {', '.join(sorted(_EASINGS))}.")
    if not final_zoom > 0:
        raise ConfigurationError(f"final_zoom must be positive, got {final_zoom}")

    progress = np.ones(1) if frames == 1 else curve(np.linspace(0.0, 1.0, frames))
    log_scale = np.log(final_zoom) * np.clip(progress, 0.0, 1.0)
    return np.exp(np.diff(log_scale, prepend=0.0))


def range_center(width_range: Range, height_range: Range) -> Tuple[float, float]:
    return (
        float((np.float64(width_range.min) + np.float64(width_range.max)) / 2.0),
        float((np.float64(height_range.min) + np.float64(height_range.max)) / 2.0),
    )


def apply_zoom(
    width_range: Range,
    height_range: Range,
    zoom_factor: float,
    center: Optional[Tuple[float, float]] = None,
) -> Tuple[Range, Range]:
    """Scale both ranges by ``zoom_factor`` about ``center``.

    Factors below one zoom in, factors above one zoom out. ``center``
    defaults to the middle of the current rectangle.
    """
    if not zoom_factor > 0:
        raise ConfigurationError(f"zoom_factor must be positive, got {zoom_factor}")
    c_x, c_y = center if center is not None else range_center(width_range, height_range)
    half_x = np.float64(width_range.span) * np.float64(zoom_factor) / 2.0
    half_y = np.float64(height_range.span) * np.float64(zoom_factor) / 2.0
    return (
        Range(float(c_x - half_x), float(c_x + half_x)),
        Range(float(c_y - half_y), float(c_y + half_y)),
    )


@dataclass(frozen=True)
class ZoomPlanner:
    """Maintain the boundary updates for a zoom sequence around a fixed focus."""

    center: Optional[Tuple[float, float]] = None

    def focus(self, renderer: RasterRenderer) -> Tuple[float, float]:
        if self.center is not None:
            return self.center
        return range_center(renderer.width_range, renderer.height_range)

    def update_after_frame(self, renderer: RasterRenderer, zoom_factor: float) -> None:
        width_range, height_range = apply_zoom(
            renderer.width_range,
            renderer.height_range,
            zoom_factor,
            self.focus(renderer),
        )
        renderer.set_boundaries(width_range, height_range)


def render_zoom_sequence(
    renderer: RasterRenderer,
    factors: Iterable[float],
    center: Optional[Tuple[float, float]] = None,
) -> Iterator[np.ndarray]:
    """Yield one raster per zoom factor.

    Each factor is applied to the renderer's current boundaries before its
    frame is drawn, so the first frame is already zoomed once. The focus
    is fixed when the sequence starts. Frames are snapshots of
    ``renderer.sink``, which must offer ``snapshot()`` the way
    :class:`~fractalmap.sinks.ArrayPixelSink` does.
    """
    sink = renderer.sink
    if not callable(getattr(sink, "snapshot", None)):
        raise ConfigurationError(f"{type(sink).__name__} cannot snapshot its raster")
    planner = ZoomPlanner(center if center is not None else range_center(renderer.width_range, renderer.height_range))
    for index, factor in enumerate(factors):
        planner.update_after_frame(renderer, float(factor))
        logger.debug(
            "Zoom frame %d: x=%s y=%s",
            index,
            renderer.width_range.as_tuple(),
            renderer.height_range.as_tuple(),
        )
        yield sink.snapshot()
