"""Configuration objects for fractal maps."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Optional, Sequence, Tuple, Union

__all__ = [
    "ConfigurationError",
    "FractalMapOptions",
    "RasterDimensions",
    "Range",
    "parse_range",
]


class ConfigurationError(ValueError):
    """Raised when a map, raster or classifier is configured inconsistently."""


@dataclass(frozen=True)
class Range:
    """Boundaries of one axis of the mapped space."""

    min: float
    max: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise ConfigurationError(f"Range bounds must be finite, got [{self.min}, {self.max}]")
        if self.max <= self.min:
            raise ConfigurationError(f"Range max must be greater than min, got [{self.min}, {self.max}]")

    @classmethod
    def coerce(cls, value: RangeLike) -> Range:
        if isinstance(value, Range):
            return value
        try:
            low, high = value
            return cls(float(low), float(high))
        except (TypeError, ValueError) as exc:
            if isinstance(exc, ConfigurationError):
                raise
            raise ConfigurationError(f"Expected a (min, max) pair, got {value!r}") from exc

    @property
    def span(self) -> float:
        return self.max - self.min

    def as_tuple(self) -> Tuple[float, float]:
        return self.min, self.max


RangeLike = Union[Range, Sequence[float]]


@dataclass(frozen=True)
class RasterDimensions:
    """Pixel dimensions of a render target."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"Raster dimensions must be positive, got {self.width}x{self.height}")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height


def _default_classifier() -> Callable[[float, float], bool]:
    from .classifiers import BuggyVariant

    return BuggyVariant()


@dataclass(frozen=True)
class FractalMapOptions:
    """Every option a fractal map recognises, with its default."""

    map_width: Range = Range(-1.0, 1.0)
    map_height: Range = Range(-1.0, 1.0)
    classifier: Optional[Callable[[float, float], bool]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "map_width", Range.coerce(self.map_width))
        object.__setattr__(self, "map_height", Range.coerce(self.map_height))
        if self.classifier is None:
            object.__setattr__(self, "classifier", _default_classifier())
        elif not callable(self.classifier):
            raise ConfigurationError(f"classifier must be callable, got {self.classifier!r}")

    def merge(self, **overrides: Any) -> FractalMapOptions:
        """Return a copy with ``overrides`` applied field by field."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown option(s) {', '.join(unknown)}. Valid options: {', '.join(sorted(known))}."
            )
        return replace(self, **overrides)


def parse_range(text: str) -> Range:
    """Parse a ``min:max`` string into a :class:`Range`."""
    parts = text.split(":")
    if len(parts) != 2:
        raise ConfigurationError(f"Expected 'min:max', got {text!r}")
    try:
        low, high = map(float, parts)
    except ValueError as exc:
        raise ConfigurationError(f"Range bounds must be numbers, got {text!r}") from exc
    return Range(low, high)
