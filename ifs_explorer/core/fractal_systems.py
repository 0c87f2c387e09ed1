"""
Fractal system definitions and the built-in catalog.

A FractalSystem is an immutable, validated collection of weighted affine
maps. The SystemCatalog is a read-only, name-addressed collection of systems
used to populate selection controls.
"""

import math
import numpy as np
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple
import logging

from .affine import AffineTransform, InvalidSystemError

logger = logging.getLogger(__name__)

Bounds = Tuple[float, float, float, float]


class UnknownSystemError(ValueError):
    """Raised when a catalog name does not exist."""


class FractalSystem:
    """An ordered, validated set of weighted affine transforms."""

    def __init__(self, name: str, transforms: Sequence[AffineTransform],
                 description: str = "",
                 recommended_bounds: Optional[Bounds] = None):
        """
        Initialize and validate a fractal system.

        Args:
            name: Identifier of the system
            transforms: Ordered affine maps; at least one with positive weight
            description: Human-readable description
            recommended_bounds: Viewing bounds (xmin, xmax, ymin, ymax)

        Raises:
            InvalidSystemError: If the transform list is empty, all weights are zero
                or the weights do not sum to a finite total
        """
        transforms = tuple(transforms)
        if not transforms:
            raise InvalidSystemError(f"System '{name}' has no transforms")
        for transform in transforms:
            if not isinstance(transform, AffineTransform):
                raise InvalidSystemError(
                    f"System '{name}' contains a non-transform entry: {transform!r}")

        weights = np.array([t.weight for t in transforms], dtype=np.float64)
        cumulative = np.cumsum(weights)
        total = float(cumulative[-1])
        if not math.isfinite(total):
            raise InvalidSystemError(f"System '{name}' has weights whose sum overflows")
        if total <= 0:
            raise InvalidSystemError(f"System '{name}' has no transform with positive weight")

        if recommended_bounds is not None:
            recommended_bounds = tuple(float(v) for v in recommended_bounds)
            if len(recommended_bounds) != 4:
                raise InvalidSystemError("recommended_bounds must be (xmin, xmax, ymin, ymax)")
            xmin, xmax, ymin, ymax = recommended_bounds
            if xmin >= xmax or ymin >= ymax:
                raise InvalidSystemError("Invalid bounds: min values must be less than max")

        self._name = name
        self._transforms = transforms
        self._description = description
        self._recommended_bounds = recommended_bounds
        self._weights = weights
        self._cumulative = cumulative
        self._total = total
        self._hues = np.array([t.hue for t in transforms], dtype=np.float32)
        self._table = np.array([t.coefficients for t in transforms], dtype=np.float64)
        # Highest index with positive weight; guards draws that round up to the total.
        self._last_selectable = int(np.flatnonzero(weights > 0)[-1])

        self._weights.setflags(write=False)
        self._cumulative.setflags(write=False)
        self._hues.setflags(write=False)
        self._table.setflags(write=False)

    @classmethod
    def from_table(cls, name: str, rows: Iterable[Sequence[float]],
                   hues: Optional[Sequence[float]] = None, **kwargs) -> 'FractalSystem':
        """
        Create a system from rows of (a, b, c, d, e, f, weight).

        Hues default to evenly spaced tags i / n so every map gets a distinct color.
        """
        rows = [tuple(row) for row in rows]
        if hues is None:
            hues = [i / len(rows) for i in range(len(rows))] if rows else []
        if len(hues) != len(rows):
            raise InvalidSystemError("hues must have one entry per transform row")
        transforms = []
        for row, hue in zip(rows, hues):
            if len(row) != 7:
                raise InvalidSystemError(f"Expected (a, b, c, d, e, f, weight), got {row!r}")
            transforms.append(AffineTransform.from_coefficients(*row, hue=hue))
        return cls(name, transforms, **kwargs)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description or f"{self._name} ({len(self)} maps)"

    @property
    def recommended_bounds(self) -> Optional[Bounds]:
        return self._recommended_bounds

    @property
    def transforms(self) -> Tuple[AffineTransform, ...]:
        return self._transforms

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    @property
    def cumulative_weights(self) -> np.ndarray:
        """Prefix sums of the weights, used for weighted selection."""
        return self._cumulative

    @property
    def total_weight(self) -> float:
        return self._total

    @property
    def hues(self) -> np.ndarray:
        return self._hues

    @property
    def coefficient_table(self) -> np.ndarray:
        """(k, 6) array of (a, b, c, d, e, f) rows, one per transform."""
        return self._table

    @property
    def probabilities(self) -> np.ndarray:
        """Selection probability of each transform."""
        return self._weights / self._total

    def select_index(self, u: float) -> int:
        """
        Pick a transform index for a uniform draw in [0, 1).

        The draw is scaled by the total weight and located in the
        cumulative-weight table; zero-weight transforms are never picked.
        """
        index = int(np.searchsorted(self._cumulative, u * self._total, side='right'))
        return min(index, self._last_selectable)

    def select_indices(self, u: np.ndarray) -> np.ndarray:
        """Vectorized select_index for an array of uniform draws."""
        indices = np.searchsorted(self._cumulative, np.asarray(u) * self._total, side='right')
        return np.minimum(indices, self._last_selectable)

    def __len__(self) -> int:
        return len(self._transforms)

    def __iter__(self) -> Iterator[AffineTransform]:
        return iter(self._transforms)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FractalSystem):
            return NotImplemented
        return (self._name == other._name
                and self._transforms == other._transforms
                and self._recommended_bounds == other._recommended_bounds)

    def __hash__(self) -> int:
        return hash((self._name, self._transforms))

    def __repr__(self) -> str:
        return f"FractalSystem(name={self._name!r}, transforms={len(self)})"


class SystemCatalog:
    """Read-only, ordered collection of named fractal systems."""

    def __init__(self, systems: Iterable[FractalSystem] = ()):
        self._systems: Dict[str, FractalSystem] = {}
        for system in systems:
            self._register(system)

    def _register(self, system: FractalSystem) -> None:
        if not isinstance(system, FractalSystem):
            raise InvalidSystemError(f"Catalog entries must be FractalSystem, got {system!r}")
        key = system.name.lower()
        if key in self._systems:
            raise InvalidSystemError(f"Duplicate system name '{system.name}'")
        self._systems[key] = system
        logger.debug(f"Registered fractal system: {system.name}")

    def names(self) -> List[str]:
        """Names in catalog order."""
        return [system.name for system in self._systems.values()]

    def get(self, name: str) -> FractalSystem:
        """
        Get a system by name (case-insensitive).

        Raises:
            UnknownSystemError: If no system has that name
        """
        system = self._systems.get(str(name).lower())
        if system is None:
            available = ', '.join(self.names())
            raise UnknownSystemError(f"Unknown fractal system '{name}'. Available: {available}")
        return system

    def index_of(self, name: str) -> int:
        """Stable position of a system, for index-based selection controls."""
        return self.names().index(self.get(name).name)

    def describe(self) -> Dict[str, str]:
        """Map of name to description."""
        return {system.name: system.description for system in self._systems.values()}

    def __getitem__(self, name: str) -> FractalSystem:
        return self.get(name)

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.lower() in self._systems

    def __iter__(self) -> Iterator[FractalSystem]:
        return iter(self._systems.values())

    def __len__(self) -> int:
        return len(self._systems)


# Canonical coefficient tables, rows of (a, b, c, d, e, f, weight).

SIERPINSKI_TABLE = [
    (0.5, 0.0, 0.0, 0.5, 0.0, 0.0, 1.0),
    (0.5, 0.0, 0.0, 0.5, 0.5, 0.0, 1.0),
    (0.5, 0.0, 0.0, 0.5, 0.25, math.sqrt(3) / 4, 1.0),
]

BARNSLEY_FERN_TABLE = [
    (0.0, 0.0, 0.0, 0.16, 0.0, 0.0, 0.01),
    (0.85, 0.04, -0.04, 0.85, 0.0, 1.6, 0.85),
    (0.20, -0.26, 0.23, 0.22, 0.0, 1.6, 0.07),
    (-0.15, 0.28, 0.26, 0.24, 0.0, 0.44, 0.07),
]

HEIGHWAY_DRAGON_TABLE = [
    (0.5, -0.5, 0.5, 0.5, 0.0, 0.0, 1.0),
    (-0.5, -0.5, 0.5, -0.5, 1.0, 0.0, 1.0),
]

LEVY_C_TABLE = [
    (0.5, -0.5, 0.5, 0.5, 0.0, 0.0, 1.0),
    (0.5, 0.5, -0.5, 0.5, 0.5, 0.5, 1.0),
]

MAPLE_LEAF_TABLE = [
    (0.14, 0.01, 0.00, 0.51, -0.08, -1.31, 0.10),
    (0.43, 0.52, -0.45, 0.50, 1.49, -0.75, 0.35),
    (0.45, -0.49, 0.47, 0.47, -1.62, -0.74, 0.35),
    (0.49, 0.00, 0.00, 0.51, 0.02, 1.62, 0.20),
]


def build_builtin_systems() -> List[FractalSystem]:
    """Construct fresh instances of every built-in system."""
    return [
        FractalSystem.from_table(
            'sierpinski', SIERPINSKI_TABLE,
            description="Sierpinski triangle: three half-scale copies at the corners",
            recommended_bounds=(-0.05, 1.05, -0.1, 0.95)),
        FractalSystem.from_table(
            'barnsley_fern', BARNSLEY_FERN_TABLE,
            description="Barnsley fern: stem, successive leaflets, left and right fronds",
            recommended_bounds=(-2.75, 2.75, -0.25, 10.25)),
        FractalSystem.from_table(
            'heighway_dragon', HEIGHWAY_DRAGON_TABLE,
            description="Heighway dragon: two 45 degree rotations scaled by 1/sqrt(2)",
            recommended_bounds=(-0.5, 1.3, -0.5, 0.9)),
        FractalSystem.from_table(
            'levy_c', LEVY_C_TABLE,
            description="Levy C curve: two 45 degree rotations folding the same way",
            recommended_bounds=(-0.6, 1.6, -0.35, 1.1)),
        FractalSystem.from_table(
            'maple_leaf', MAPLE_LEAF_TABLE,
            description="Maple leaf: four maps with a stem of weight 0.1"),
    ]


BUILTIN_CATALOG = SystemCatalog(build_builtin_systems())
