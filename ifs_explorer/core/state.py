"""
Session state for interactive generation.

GenerationState holds the user's current system selection and point count
and runs a fresh chaos-game pass on every regenerate() call.
"""

import numpy as np
from typing import Optional
from dataclasses import dataclass
import logging

from .chaos_game import ChaosGameGenerator, PointCloud, DEFAULT_BURN_IN, check_count
from .fractal_systems import BUILTIN_CATALOG, FractalSystem, SystemCatalog

logger = logging.getLogger(__name__)


@dataclass
class GenerationConfig:
    """Configuration for point generation."""

    system: str = 'sierpinski'
    num_points: int = 10000
    burn_in: int = DEFAULT_BURN_IN
    seed: Optional[int] = None

    def validate(self):
        """Validate configuration parameters."""
        if not isinstance(self.system, str) or not self.system:
            raise ValueError("system must be a non-empty name")

        check_count(self.num_points, "num_points")
        check_count(self.burn_in, "burn_in")

        if self.seed is not None and self.seed < 0:
            raise ValueError("seed must be >= 0")


class GenerationState:
    """Current selection and point count for one interactive session."""

    def __init__(self, catalog: SystemCatalog = BUILTIN_CATALOG,
                 system: Optional[str] = None, num_points: int = 10000,
                 burn_in: int = DEFAULT_BURN_IN,
                 rng: Optional[np.random.Generator] = None):
        """
        Initialize generation state.

        Args:
            catalog: Catalog to select systems from
            system: Initially selected system name (first catalog entry if None)
            num_points: Initial point count
            burn_in: Burn-in iterations per pass
            rng: Random generator shared by every pass (unseeded if None)
        """
        if len(catalog) == 0:
            raise ValueError("Catalog must contain at least one system")
        self.catalog = catalog
        self.generator = ChaosGameGenerator(burn_in)
        self.rng = rng if rng is not None else np.random.default_rng()
        self._system = catalog.get(system) if system is not None else next(iter(catalog))
        self._num_points = 0
        self.set_count(num_points)

    @classmethod
    def from_config(cls, config: GenerationConfig,
                    catalog: SystemCatalog = BUILTIN_CATALOG) -> 'GenerationState':
        """Create a state from a validated configuration."""
        config.validate()
        return cls(catalog, config.system, config.num_points, config.burn_in,
                   np.random.default_rng(config.seed))

    @property
    def system(self) -> FractalSystem:
        return self._system

    @property
    def num_points(self) -> int:
        return self._num_points

    @property
    def config(self) -> GenerationConfig:
        """Current settings as a configuration object."""
        return GenerationConfig(self._system.name, self._num_points, self.generator.burn_in)

    def select(self, name: str) -> FractalSystem:
        """
        Switch the active system for the next regenerate() call.

        Raises:
            UnknownSystemError: If the name is not in the catalog; state is unchanged
        """
        system = self.catalog.get(name)
        if system is not self._system:
            logger.info(f"Selected fractal system: {system.name}")
        self._system = system
        return system

    def set_count(self, n: int) -> None:
        """
        Set the point count for the next regenerate() call.

        Raises:
            ValueError: If n is negative or not a whole number; the count is unchanged
        """
        self._num_points = check_count(n, "Point count")

    def regenerate(self) -> PointCloud:
        """Run a fresh, independent chaos-game pass with the current settings."""
        return self.generator.generate(self._system, self._num_points, self.rng)

    def __repr__(self) -> str:
        return (f"GenerationState(system={self._system.name!r}, "
                f"num_points={self._num_points}, burn_in={self.generator.burn_in})")
