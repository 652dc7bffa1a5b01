"""Minimal complex number value type used by the convergence classifiers."""

from __future__ import annotations

import math
from dataclasses import dataclass

__all__ = ["Complex"]


@dataclass(frozen=True)
class Complex:
    """An immutable complex number ``re + im*i``.

    Arithmetic is plain float arithmetic, so overflow saturates to
    infinity instead of raising.
    """

    re: float
    im: float

    def magnitude(self) -> float:
        return math.sqrt(self.re * self.re + self.im * self.im)

    def add(self, dr: float, di: float) -> Complex:
        return Complex(self.re + dr, self.im + di)

    def squared(self) -> Complex:
        """Return the algebraic square ``(re^2 - im^2) + (2*re*im)i``."""
        return Complex(self.re * self.re - self.im * self.im, 2 * self.re * self.im)
