import dataclasses

import numpy as np
import pytest

from ifs_explorer.core.affine import AffineTransform, InvalidSystemError


def test_apply_computes_matrix_times_point_plus_translation():
    t = AffineTransform(((2.0, 1.0), (0.0, 3.0)), (1.0, -1.0))
    assert t.apply((1.0, 2.0)) == (5.0, 5.0)


def test_apply_is_total_for_any_real_input():
    t = AffineTransform.from_coefficients(0.85, 0.04, -0.04, 0.85, 0.0, 1.6)
    x, y = t.apply((-1e12, 3e15))
    assert np.isfinite(x) and np.isfinite(y)


def test_from_coefficients_matches_table_layout():
    t = AffineTransform.from_coefficients(1, 2, 3, 4, 5, 6, weight=0.5, hue=0.25)
    assert t.matrix == ((1.0, 2.0), (3.0, 4.0))
    assert t.translation == (5.0, 6.0)
    assert t.coefficients == (1.0, 2.0, 3.0, 4.0, 5.0, 6.0)
    assert t.weight == 0.5
    assert t.hue == 0.25


def test_apply_uses_table_coefficients():
    t = AffineTransform.from_coefficients(0.2, -0.26, 0.23, 0.22, 0.0, 1.6)
    x, y = t.apply((1.0, 2.0))
    assert x == pytest.approx(0.2 - 0.52)
    assert y == pytest.approx(0.23 + 0.44 + 1.6)


def test_value_equality_and_hash():
    a = AffineTransform.from_coefficients(0.5, 0, 0, 0.5, 0.25, 0.5, weight=1, hue=0.5)
    b = AffineTransform(((0.5, 0.0), (0.0, 0.5)), (0.25, 0.5), 1.0, 0.5)
    assert a == b
    assert hash(a) == hash(b)
    assert a != AffineTransform(((0.5, 0.0), (0.0, 0.5)), (0.25, 0.5), 2.0, 0.5)


def test_transform_is_immutable():
    t = AffineTransform(((1.0, 0.0), (0.0, 1.0)))
    with pytest.raises(dataclasses.FrozenInstanceError):
        t.weight = 3.0


@pytest.mark.parametrize("kwargs", [
    {'weight': -0.1},
    {'weight': float('inf')},
    {'hue': 1.5},
    {'hue': -0.01},
])
def test_invalid_weight_or_hue_rejected(kwargs):
    with pytest.raises(InvalidSystemError):
        AffineTransform(((1.0, 0.0), (0.0, 1.0)), (0.0, 0.0), **kwargs)


def test_invalid_shapes_rejected():
    with pytest.raises(InvalidSystemError):
        AffineTransform(((1.0, 0.0, 0.0), (0.0, 1.0, 0.0)))
    with pytest.raises(InvalidSystemError):
        AffineTransform(((1.0, 0.0), (0.0, 1.0)), (0.0, 0.0, 0.0))


def test_invalid_system_error_is_value_error():
    assert issubclass(InvalidSystemError, ValueError)
