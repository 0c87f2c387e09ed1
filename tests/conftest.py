import math

import numpy as np
import pytest

from ifs_explorer.core.affine import AffineTransform
from ifs_explorer.core.fractal_systems import FractalSystem


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def triangle():
    """Sierpinski triangle with three equally weighted maps."""
    return FractalSystem.from_table('triangle', [
        (0.5, 0.0, 0.0, 0.5, 0.0, 0.0, 1.0),
        (0.5, 0.0, 0.0, 0.5, 0.5, 0.0, 1.0),
        (0.5, 0.0, 0.0, 0.5, 0.25, math.sqrt(3) / 4, 1.0),
    ])


@pytest.fixture
def constant_maps():
    """Maps that send every point to a fixed location, one per hue."""
    return FractalSystem('constants', [
        AffineTransform(((0.0, 0.0), (0.0, 0.0)), (1.0, 2.0), weight=1.0, hue=0.1),
        AffineTransform(((0.0, 0.0), (0.0, 0.0)), (-3.0, 4.0), weight=2.0, hue=0.5),
        AffineTransform(((0.0, 0.0), (0.0, 0.0)), (5.0, -6.0), weight=0.0, hue=0.9),
    ])
