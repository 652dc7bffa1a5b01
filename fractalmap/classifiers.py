"""Point classifiers evaluated over the mapped plane.

Every classifier maps a point ``(x, y)`` to a boolean and never raises on
float input: NaN and infinities flow through IEEE-754 arithmetic and any
comparison against NaN is simply ``False``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Type

import numpy as np

from .complex_number import Complex
from .config import ConfigurationError

__all__ = [
    "BuggyVariant",
    "ClassifierKind",
    "ConvergenceTest",
    "Multispiral",
    "PolkaDots",
    "WavySpiral",
    "buggy_variant",
    "classifier_names",
    "convergence_test",
    "make_classifier",
    "multispiral",
    "polka_dots",
    "wavy_spiral",
]

TWO_PI = 2 * math.pi

# Band accepted by multispiral, as a fraction of one spiral turn.
SPIRAL_DELTA = 0.25
SPIRAL_BOUND = 0.9


def convergence_test(
    x: float,
    y: float,
    zr: float = 0.0,
    zi: float = 0.0,
    precision: int = 20,
    bound: float = 2.0,
) -> bool:
    """Check whether ``c = x + yi`` stays bounded under ``z -> z^2 + c``.

    Starting from ``z0 = zr + zi*i`` the map is applied once and then
    ``precision`` more times. With ``z0 = 0`` this is Mandelbrot set
    membership; any other ``z0`` samples a Julia-like set instead.
    """
    z = Complex(zr, zi).squared().add(x, y)
    for _ in range(precision):
        z = z.squared().add(x, y)
    return z.magnitude() <= bound


def _log_hypot(a: float, b: float) -> float:
    """``log(|a + bi|)``, halving both parts first when they are large."""
    if a == 0:
        return float(np.log(abs(b)))
    if b == 0:
        return float(np.log(abs(a)))
    if abs(a) < 3000 and abs(b) < 3000:
        return 0.5 * float(np.log(a * a + b * b))
    a, b = a / 2, b / 2
    return 0.5 * float(np.log(a * a + b * b)) + math.log(2)


def _polar_square(v: Complex) -> Complex:
    """Square ``v`` the way a general complex power with exponent 2 does.

    Positive real and purely imaginary bases take exact shortcuts. Every
    other base is squared in polar form, so results carry the rounding of
    ``exp``/``cos``/``sin`` instead of the exact product.
    """
    a, b = v.re, v.im
    if a == 0 and b == 0:
        return Complex(0.0, 0.0)
    if b == 0 and a > 0:
        return Complex(a * a, 0.0)
    if a == 0:
        return Complex(-(b * b), 0.0)
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        angle = 2 * math.atan2(b, a)
        modulus = np.exp(2 * _log_hypot(a, b))
        return Complex(float(modulus * np.cos(angle)), float(modulus * np.sin(angle)))


def buggy_variant(
    x: float,
    y: float,
    z: float = 0.0,
    precision: int = 7,
    bound: float = 2.0,
) -> bool:
    """Zebra-striped sibling of :func:`convergence_test`.

    The orbit starts at ``c`` itself. Each step squares it in polar form
    and then adds ``x + n*i``, where ``n`` is the step index rather than
    ``y``. Only the real part is compared against ``bound``. ``z`` is
    accepted and ignored.
    """
    v = Complex(x, y)
    for n in range(precision):
        v = _polar_square(v).add(x, n)
    return bool(v.re <= bound)


def polka_dots(x: float, y: float, zoom: float = 10, bound: float = 1) -> bool:
    """Polka dot pattern: ``sin(x*pi*zoom) + cos(y*pi*zoom) >= bound``."""
    with np.errstate(invalid="ignore"):
        u = np.sin(x * math.pi * zoom)
        v = np.cos(y * math.pi * zoom)
        return bool(u + v >= bound)


def multispiral(
    x: float,
    y: float,
    c_x: float = 0.0,
    c_y: float = 0.0,
    radius: float = 1.0,
    growth_rate: float = 0.3,
) -> bool:
    """Several adjacent spirals wound around ``(c_x, c_y)``.

    ``growth_rate`` is part of the signature but does not take part in the
    formula.
    """
    d_x = x - c_x
    d_y = y - c_y
    dist = math.hypot(d_x, d_y)
    angle = math.atan2(d_y, d_x)
    if angle <= 0:
        angle += TWO_PI
    with np.errstate(divide="ignore", invalid="ignore"):
        v = np.fmod(np.float64(dist) / (radius * angle / TWO_PI), 1.0)
        in_band = SPIRAL_BOUND - SPIRAL_DELTA <= v <= SPIRAL_BOUND + SPIRAL_DELTA
        return bool(in_band or v <= SPIRAL_DELTA)


def wavy_spiral(x: float, y: float, c_x: float = 0.0, c_y: float = 0.0, radius: float = 0.1) -> bool:
    """Wavy spiral around ``(c_x, c_y)``.

    Holds only where the distance modulo ``radius`` lands exactly on the
    spiral offset for the point's angle, so almost every point is false.
    """
    angle = math.atan2(y - c_y, x - c_x)
    if angle < 0:
        angle += TWO_PI
    dist = math.hypot(c_x - x, c_y - y)
    a = radius * angle / TWO_PI
    with np.errstate(invalid="ignore"):
        remainder = np.fmod(np.float64(dist), radius)
        return bool(a <= remainder <= a)


class ClassifierKind(str, Enum):
    CONVERGENCE_TEST = "convergence_test"
    BUGGY_VARIANT = "buggy_variant"
    POLKA_DOTS = "polka_dots"
    MULTISPIRAL = "multispiral"
    WAVY_SPIRAL = "wavy_spiral"


@dataclass(frozen=True)
class ConvergenceTest:
    zr: float = 0.0
    zi: float = 0.0
    precision: int = 20
    bound: float = 2.0

    kind: ClassVar[ClassifierKind] = ClassifierKind.CONVERGENCE_TEST

    def __call__(self, x: float, y: float) -> bool:
        return convergence_test(x, y, self.zr, self.zi, self.precision, self.bound)


@dataclass(frozen=True)
class BuggyVariant:
    z: float = 0.0
    precision: int = 7
    bound: float = 2.0

    kind: ClassVar[ClassifierKind] = ClassifierKind.BUGGY_VARIANT

    def __call__(self, x: float, y: float) -> bool:
        return buggy_variant(x, y, self.z, self.precision, self.bound)


@dataclass(frozen=True)
class PolkaDots:
    zoom: float = 10.0
    bound: float = 1.0

    kind: ClassVar[ClassifierKind] = ClassifierKind.POLKA_DOTS

    def __call__(self, x: float, y: float) -> bool:
        return polka_dots(x, y, self.zoom, self.bound)


@dataclass(frozen=True)
class Multispiral:
    c_x: float = 0.0
    c_y: float = 0.0
    radius: float = 1.0
    growth_rate: float = 0.3

    kind: ClassVar[ClassifierKind] = ClassifierKind.MULTISPIRAL

    def __call__(self, x: float, y: float) -> bool:
        return multispiral(x, y, self.c_x, self.c_y, self.radius, self.growth_rate)


@dataclass(frozen=True)
class WavySpiral:
    c_x: float = 0.0
    c_y: float = 0.0
    radius: float = 0.1

    kind: ClassVar[ClassifierKind] = ClassifierKind.WAVY_SPIRAL

    def __call__(self, x: float, y: float) -> bool:
        return wavy_spiral(x, y, self.c_x, self.c_y, self.radius)


_CLASSIFIERS: Dict[ClassifierKind, Type[Any]] = {
    cls.kind: cls for cls in (ConvergenceTest, BuggyVariant, PolkaDots, Multispiral, WavySpiral)
}

_ALIASES: Dict[str, ClassifierKind] = {
    "mandelbrot": ClassifierKind.CONVERGENCE_TEST,
    "convergenceTest": ClassifierKind.CONVERGENCE_TEST,
    "mandelNOT": ClassifierKind.BUGGY_VARIANT,
    "buggyVariant": ClassifierKind.BUGGY_VARIANT,
    "polkaDots": ClassifierKind.POLKA_DOTS,
    "wavySpiral": ClassifierKind.WAVY_SPIRAL,
}


def classifier_names() -> list[str]:
    return [kind.value for kind in ClassifierKind]


def _resolve_kind(name: ClassifierKind | str) -> ClassifierKind:
    if isinstance(name, ClassifierKind):
        return name
    if name in _ALIASES:
        return _ALIASES[name]
    try:
        return ClassifierKind(name)
    except ValueError:
        raise ConfigurationError(
            f"Unknown classifier '{name}'. Valid choices: {', '.join(classifier_names())}."
        ) from None


def make_classifier(name: ClassifierKind | str, **params: Any):
    """Build the classifier called ``name`` with ``params`` overriding its defaults.

    String values (as they arrive from the command line) are converted to
    the type of the parameter's default.
    """
    cls = _CLASSIFIERS[_resolve_kind(name)]
    defaults = {f.name: f.default for f in fields(cls)}
    unknown = sorted(set(params) - set(defaults))
    if unknown:
        raise ConfigurationError(
            f"Unknown parameter(s) {', '.join(unknown)} for {cls.kind.value}. "
            f"Valid parameters: {', '.join(defaults)}."
        )

    values = {}
    for key, value in params.items():
        target = type(defaults[key])
        try:
            values[key] = target(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Parameter {key}={value!r} for {cls.kind.value} is not a valid {target.__name__}"
            ) from exc
    return cls(**values)
