"""Public API for fractal map rendering."""

from .classifiers import (
    BuggyVariant,
    ClassifierKind,
    ConvergenceTest,
    Multispiral,
    PolkaDots,
    WavySpiral,
    buggy_variant,
    classifier_names,
    convergence_test,
    make_classifier,
    multispiral,
    polka_dots,
    wavy_spiral,
)
from .complex_number import Complex
from .config import ConfigurationError, FractalMapOptions, Range, RasterDimensions, parse_range
from .generator import ZoomPlanner, apply_zoom, compute_zoom_factors, render_zoom_sequence
from .mapper import CoordinateMapper, SamplePoint
from .renderer import Color, PixelSink, RasterRenderer
from .sinks import ArrayPixelSink

__all__ = [
    "ArrayPixelSink",
    "BuggyVariant",
    "ClassifierKind",
    "Color",
    "Complex",
    "ConfigurationError",
    "ConvergenceTest",
    "CoordinateMapper",
    "FractalMapOptions",
    "Multispiral",
    "PixelSink",
    "PolkaDots",
    "Range",
    "RasterDimensions",
    "RasterRenderer",
    "SamplePoint",
    "WavySpiral",
    "ZoomPlanner",
    "apply_zoom",
    "buggy_variant",
    "classifier_names",
    "compute_zoom_factors",
    "convergence_test",
    "make_classifier",
    "multispiral",
    "parse_range",
    "polka_dots",
    "render_zoom_sequence",
    "wavy_spiral",
]
