"""
Chaos-game point generation for iterated function systems.

This module turns a FractalSystem into a colored point cloud by repeatedly
applying randomly chosen, weighted transforms to a running orbit point.
"""

import numbers
import numpy as np
from typing import Iterator, NamedTuple, Optional, Tuple, Union
import logging

from numba import jit

from .fractal_systems import FractalSystem

logger = logging.getLogger(__name__)

DEFAULT_BURN_IN = 20

VERTEX_DTYPE = np.dtype([('position', np.float32, (2,)), ('hue', np.float32)])


class Point(NamedTuple):
    """A generated point and the hue of the transform that produced it."""
    x: float
    y: float
    hue: float


class PointCloud:
    """Output of one generation pass: positions and per-point hues."""

    def __init__(self, positions: np.ndarray, hues: np.ndarray, system_name: str = ""):
        """
        Initialize point cloud.

        Args:
            positions: Array of shape (N, 2)
            hues: Array of shape (N,)
            system_name: Name of the system that produced the points
        """
        positions = np.asarray(positions, dtype=np.float32).reshape(-1, 2)
        hues = np.asarray(hues, dtype=np.float32).reshape(-1)
        if positions.shape[0] != hues.shape[0]:
            raise ValueError(f"positions ({positions.shape[0]}) and hues ({hues.shape[0]}) "
                             "must have the same length")
        self.positions = positions
        self.hues = hues
        self.system_name = system_name

    def __len__(self) -> int:
        return self.positions.shape[0]

    def __iter__(self) -> Iterator[Point]:
        for (x, y), hue in zip(self.positions.tolist(), self.hues.tolist()):
            yield Point(x, y, hue)

    def __getitem__(self, index: int) -> Point:
        x, y = self.positions[index]
        return Point(float(x), float(y), float(self.hues[index]))

    def to_vertex_array(self) -> np.ndarray:
        """Pack points into the (position, hue) vertex layout used by renderers."""
        vertices = np.empty(len(self), dtype=VERTEX_DTYPE)
        vertices['position'] = self.positions
        vertices['hue'] = self.hues
        return vertices

    def bounds(self) -> Tuple[float, float, float, float]:
        """Bounding box (xmin, xmax, ymin, ymax) of the cloud."""
        if len(self) == 0:
            raise ValueError("Empty point cloud has no bounds")
        xmin, ymin = self.positions.min(axis=0)
        xmax, ymax = self.positions.max(axis=0)
        return (float(xmin), float(xmax), float(ymin), float(ymax))

    def __repr__(self) -> str:
        return f"PointCloud(system={self.system_name!r}, points={len(self)})"


RandomSource = Union[np.random.Generator, None]


def check_count(value, name: str = "count") -> int:
    """
    Validate a point or iteration count.

    Integers and integral floats such as ``200.0`` are accepted; fractional,
    non-finite and negative values raise ``ValueError``.
    """
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    if isinstance(value, numbers.Integral):
        n = int(value)
    elif isinstance(value, numbers.Real) and float(value).is_integer():
        n = int(value)
    else:
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    if n < 0:
        raise ValueError(f"{name} must be >= 0, got {n}")
    return n


@jit(nopython=True, cache=True)
def orbit_kernel(table, indices, burn_in):
    """
    JIT-compiled chaos-game orbit.

    Args:
        table: (k, 6) float64 coefficients (a, b, c, d, e, f) per transform
        indices: Selected transform index for every iteration
        burn_in: Leading iterations that are applied but not recorded

    Returns:
        (len(indices) - burn_in, 2) float64 positions
    """
    n = indices.shape[0]
    positions = np.empty((n - burn_in, 2), dtype=np.float64)
    x = 0.0
    y = 0.0
    for i in range(n):
        k = indices[i]
        nx = table[k, 0] * x + table[k, 1] * y + table[k, 4]
        ny = table[k, 2] * x + table[k, 3] * y + table[k, 5]
        x = nx
        y = ny
        if i >= burn_in:
            positions[i - burn_in, 0] = x
            positions[i - burn_in, 1] = y
    return positions


def generate(system: FractalSystem, count: int, rng: RandomSource = None,
             burn_in: int = DEFAULT_BURN_IN, seed: Optional[int] = None) -> PointCloud:
    """
    Run the chaos game for one system.

    The orbit starts at the origin, runs ``burn_in`` unrecorded iterations so
    it settles onto the attractor, then records ``count`` points, each tagged
    with the hue of the transform that produced it.

    Args:
        system: Fractal system to sample
        count: Number of points to emit (0 yields an empty cloud)
        rng: Random generator; a fresh one from ``seed`` is used if None
        burn_in: Iterations discarded before recording
        seed: Seed for the generator when ``rng`` is None

    Returns:
        PointCloud with exactly ``count`` points
    """
    count = check_count(count, "count")
    burn_in = check_count(burn_in, "burn_in")

    if count == 0:
        return PointCloud(np.empty((0, 2)), np.empty(0), system.name)

    if rng is None:
        rng = np.random.default_rng(seed)

    logger.debug(f"Generating {count} points for {system.name} (burn-in {burn_in})")

    # One uniform per iteration, drawn up front so a seeded stream is reproducible.
    draws = rng.random(burn_in + count)
    indices = system.select_indices(draws).astype(np.int64)
    positions = orbit_kernel(system.coefficient_table, indices, burn_in)

    return PointCloud(positions, system.hues[indices[burn_in:]], system.name)


class ChaosGameGenerator:
    """Stateless chaos-game generator with a fixed burn-in."""

    def __init__(self, burn_in: int = DEFAULT_BURN_IN):
        self.burn_in = check_count(burn_in, "burn_in")

    def generate(self, system: FractalSystem, count: int,
                 rng: RandomSource = None) -> PointCloud:
        """Generate ``count`` points for ``system``; see :func:`generate`."""
        return generate(system, count, rng=rng, burn_in=self.burn_in)

    def __repr__(self) -> str:
        return f"ChaosGameGenerator(burn_in={self.burn_in})"
