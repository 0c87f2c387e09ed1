"""
Affine map definitions for iterated function systems.

This module provides the weighted 2D affine transform that every fractal
system is built from. A transform maps ``p`` to ``M @ p + t`` and carries a
selection weight and a hue tag used only for coloring.
"""

import math
from typing import Tuple, Sequence
from dataclasses import dataclass

Vec2 = Tuple[float, float]
Matrix2 = Tuple[Tuple[float, float], Tuple[float, float]]


class InvalidSystemError(ValueError):
    """Raised when a transform or fractal system definition is unusable."""


def _as_matrix(matrix: Sequence[Sequence[float]]) -> Matrix2:
    rows = tuple(tuple(float(v) for v in row) for row in matrix)
    if len(rows) != 2 or any(len(row) != 2 for row in rows):
        raise InvalidSystemError(f"matrix must be 2x2, got {matrix!r}")
    return rows


def _as_vector(vector: Sequence[float]) -> Vec2:
    values = tuple(float(v) for v in vector)
    if len(values) != 2:
        raise InvalidSystemError(f"translation must have 2 components, got {vector!r}")
    return values


@dataclass(frozen=True)
class AffineTransform:
    """Weighted 2D affine map: p' = matrix @ p + translation."""

    matrix: Matrix2
    translation: Vec2 = (0.0, 0.0)
    weight: float = 1.0
    hue: float = 0.0

    def __post_init__(self):
        """Normalize coefficients and validate the weight and hue."""
        object.__setattr__(self, 'matrix', _as_matrix(self.matrix))
        object.__setattr__(self, 'translation', _as_vector(self.translation))
        object.__setattr__(self, 'weight', float(self.weight))
        object.__setattr__(self, 'hue', float(self.hue))

        if not math.isfinite(self.weight) or self.weight < 0:
            raise InvalidSystemError(f"weight must be a finite value >= 0, got {self.weight}")
        if not 0.0 <= self.hue <= 1.0:
            raise InvalidSystemError(f"hue must be between 0 and 1, got {self.hue}")
        if not all(math.isfinite(v) for row in self.matrix for v in row):
            raise InvalidSystemError("matrix coefficients must be finite")
        if not all(math.isfinite(v) for v in self.translation):
            raise InvalidSystemError("translation must be finite")

    @classmethod
    def from_coefficients(cls, a: float, b: float, c: float, d: float,
                          e: float, f: float, weight: float = 1.0,
                          hue: float = 0.0) -> 'AffineTransform':
        """
        Create a transform from the classic IFS table layout.

        The map is x' = a*x + b*y + e, y' = c*x + d*y + f.
        """
        return cls(((a, b), (c, d)), (e, f), weight, hue)

    @property
    def coefficients(self) -> Tuple[float, float, float, float, float, float]:
        """Coefficients as (a, b, c, d, e, f)."""
        (a, b), (c, d) = self.matrix
        e, f = self.translation
        return (a, b, c, d, e, f)

    def apply(self, point: Vec2) -> Vec2:
        """Apply the map to a single point."""
        x, y = point
        a, b, c, d, e, f = self.coefficients
        return (a * x + b * y + e, c * x + d * y + f)
