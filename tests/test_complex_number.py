import dataclasses
import math

import pytest

from fractalmap import Complex


def test_magnitude_is_euclidean_norm() -> None:
    assert Complex(3.0, 4.0).magnitude() == pytest.approx(5.0)
    assert Complex(0.0, 0.0).magnitude() == 0.0


def test_add_offsets_both_components() -> None:
    assert Complex(1.0, -2.0).add(0.5, 3.0) == Complex(1.5, 1.0)


def test_squared_is_algebraic_square() -> None:
    assert Complex(1.0, 2.0).squared() == Complex(-3.0, 4.0)
    # i^2 == -1, not (0, 1) as a component-wise square would give
    assert Complex(0.0, 1.0).squared() == Complex(-1.0, 0.0)


def test_operations_return_new_values() -> None:
    z = Complex(1.0, 1.0)
    z.add(1.0, 1.0)
    z.squared()
    assert z == Complex(1.0, 1.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        z.re = 2.0  # type: ignore[misc]


def test_overflow_saturates_to_infinity() -> None:
    big = Complex(1e200, 1e200)
    assert big.magnitude() == math.inf
    squared = big.squared()
    assert math.isnan(squared.re)
    assert squared.im == math.inf
