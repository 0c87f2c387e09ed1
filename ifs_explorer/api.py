"""
Main API classes for interactive IFS exploration.

This module provides the high-level interface used by presentation layers:
it combines the generation state, viewport and coloring into a per-frame
vertex buffer or a rasterized image.
"""

import numpy as np
from typing import Optional, Dict, Any
from dataclasses import dataclass
from pathlib import Path
import logging
import time

from .core.chaos_game import PointCloud, VERTEX_DTYPE
from .core.fractal_systems import BUILTIN_CATALOG, SystemCatalog
from .core.state import GenerationConfig, GenerationState
from .core.viewport import Viewport
from .rendering.coloring import ColorRGB, colorize
from .rendering.image_output import ImageExporter, RenderMetadata, rasterize

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Configuration for rasterized output."""

    width: int = 800
    height: int = 800
    background: str = 'black'
    jpeg_quality: int = 95
    save_metadata: bool = True

    def validate(self):
        """Validate configuration parameters."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Width and height must be positive")

        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError("jpeg_quality must be between 1 and 100")

        ColorRGB.parse(self.background)


class FractalExplorer:
    """Interactive IFS exploration: selection, point count and viewport."""

    def __init__(self, config: Optional[GenerationConfig] = None,
                 render_config: Optional[RenderConfig] = None,
                 catalog: SystemCatalog = BUILTIN_CATALOG):
        """
        Initialize explorer.

        Args:
            config: Generation configuration (uses defaults if None)
            render_config: Raster configuration (uses defaults if None)
            catalog: Catalog of selectable systems
        """
        self.generation_config = config or GenerationConfig()
        self.render_config = render_config or RenderConfig()
        self.render_config.validate()

        self.state = GenerationState.from_config(self.generation_config, catalog)
        self.viewport = Viewport()
        self.image_exporter = ImageExporter()
        self.current_cloud: Optional[PointCloud] = None
        self.reset_view()

        logger.info(f"FractalExplorer initialized: {self.state.system.name}, "
                    f"{self.state.num_points} points")

    @property
    def catalog(self) -> SystemCatalog:
        return self.state.catalog

    def select(self, name: str) -> None:
        """Select a system and fit the view to it."""
        self.state.select(name)
        self.reset_view()

    def set_count(self, n: int) -> None:
        self.state.set_count(n)

    def handle_key(self, key: str) -> bool:
        """Apply a viewport key binding; returns True if the view changed."""
        return self.viewport.handle_key(key)

    def reset_view(self) -> None:
        """Fit the viewport to the current system's recommended bounds."""
        bounds = self.state.system.recommended_bounds
        if bounds is None:
            sample = GenerationState(self.catalog, self.state.system.name, 2000,
                                     self.state.generator.burn_in,
                                     np.random.default_rng(0)).regenerate()
            bounds = sample.bounds()
        self.viewport.fit(bounds)

    def frame(self) -> np.ndarray:
        """
        Regenerate and return the vertex buffer for one frame.

        Positions are mapped through the viewport into device coordinates.
        """
        self.current_cloud = self.state.regenerate()
        vertices = np.empty(len(self.current_cloud), dtype=VERTEX_DTYPE)
        vertices['position'] = self.viewport.to_device(self.current_cloud.positions)
        vertices['hue'] = self.current_cloud.hues
        return vertices

    def render_image(self, width: Optional[int] = None,
                     height: Optional[int] = None) -> np.ndarray:
        """
        Regenerate and rasterize one frame.

        Returns:
            RGB image array (height, width, 3) with values 0-1
        """
        width = width or self.render_config.width
        height = height or self.render_config.height
        vertices = self.frame()
        colors = colorize(self.current_cloud)
        background = ColorRGB.parse(self.render_config.background).to_tuple()
        return rasterize(vertices['position'], colors, width, height, background)

    def render_to_file(self, output_path: Path) -> np.ndarray:
        """Render one frame and save it with metadata."""
        start_time = time.time()
        image = self.render_image()
        metadata = None
        if self.render_config.save_metadata:
            metadata = self.build_metadata(time.time() - start_time)
        self.image_exporter.save_image(image, Path(output_path), metadata,
                                       self.render_config.jpeg_quality)
        return image

    def build_metadata(self, render_time: float = 0.0) -> RenderMetadata:
        """Describe the current frame for embedding in exported images."""
        system = self.state.system
        return RenderMetadata(
            system=system.name,
            num_points=self.state.num_points,
            burn_in=self.state.generator.burn_in,
            resolution=(self.render_config.width, self.render_config.height),
            viewport=(self.viewport.scale, self.viewport.x, self.viewport.y),
            seed=self.generation_config.seed,
            render_time_seconds=render_time,
            transforms=[list(t.coefficients) + [t.weight, t.hue] for t in system.transforms],
        )

    def get_exploration_info(self) -> Dict[str, Any]:
        """Get current exploration state information."""
        return {
            'system': self.state.system.name,
            'num_points': self.state.num_points,
            'burn_in': self.state.generator.burn_in,
            'scale': self.viewport.scale,
            'center': (self.viewport.x, self.viewport.y),
            'last_frame_points': len(self.current_cloud) if self.current_cloud is not None else 0,
        }


def generate_points(system: str, num_points: int,
                    seed: Optional[int] = None,
                    catalog: SystemCatalog = BUILTIN_CATALOG,
                    **kwargs) -> PointCloud:
    """Convenience wrapper: one chaos-game pass for a catalog system."""
    config = GenerationConfig(system=system, num_points=num_points, seed=seed, **kwargs)
    return GenerationState.from_config(config, catalog).regenerate()
