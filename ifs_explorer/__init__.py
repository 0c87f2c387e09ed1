"""
Interactive iterated function system (IFS) fractal explorer.

This library samples IFS attractors with the chaos game: weighted affine
maps are applied at random to a running point, and every emitted point is
tagged with the hue of the map that produced it.

Key Features:
- Validated, immutable fractal system definitions and a built-in catalog
- Weighted transform selection from precomputed cumulative weights
- Burn-in handling and reproducible output under a seeded generator
- Viewport pan/zoom, hue coloring, image and point cloud export

Example usage:
    >>> from ifs_explorer import GenerationState
    >>> state = GenerationState(system='barnsley_fern', num_points=50000)
    >>> cloud = state.regenerate()
    >>> vertices = cloud.to_vertex_array()
"""

__version__ = "1.0.0"
__author__ = "IFS Explorer Team"

from ifs_explorer.core.affine import AffineTransform, InvalidSystemError
from ifs_explorer.core.fractal_systems import (
    BUILTIN_CATALOG, FractalSystem, SystemCatalog, UnknownSystemError,
)
from ifs_explorer.core.chaos_game import ChaosGameGenerator, Point, PointCloud, generate
from ifs_explorer.core.state import GenerationConfig, GenerationState
from ifs_explorer.core.viewport import Viewport

# Main API classes
from ifs_explorer.api import FractalExplorer, RenderConfig

__all__ = [
    "AffineTransform",
    "InvalidSystemError",
    "FractalSystem",
    "SystemCatalog",
    "UnknownSystemError",
    "BUILTIN_CATALOG",
    "ChaosGameGenerator",
    "Point",
    "PointCloud",
    "generate",
    "GenerationConfig",
    "GenerationState",
    "Viewport",
    "FractalExplorer",
    "RenderConfig",
]
