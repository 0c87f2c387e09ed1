"""
Viewport state: pan and zoom applied to generated points before drawing.
"""

import numpy as np
from typing import Dict, Tuple, Callable
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

PAN_STEP = 0.05
ZOOM_IN_FACTOR = 1.10
ZOOM_OUT_FACTOR = 0.9


@dataclass
class Viewport:
    """Scale and center of the visible region, in fractal coordinates."""

    scale: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def __post_init__(self):
        if self.scale <= 0:
            raise ValueError("scale must be positive")

    def pan(self, dx: float, dy: float) -> None:
        """
        Move the center by a number of pan steps.

        Steps are divided by the scale so movement feels uniform at every zoom.
        """
        self.x += PAN_STEP * dx / self.scale
        self.y += PAN_STEP * dy / self.scale

    def zoom_in(self) -> None:
        self.scale *= ZOOM_IN_FACTOR

    def zoom_out(self) -> None:
        self.scale *= ZOOM_OUT_FACTOR

    def fit(self, bounds: Tuple[float, float, float, float], margin: float = 0.05) -> None:
        """Center on bounds (xmin, xmax, ymin, ymax) and scale them into [-1, 1]."""
        xmin, xmax, ymin, ymax = bounds
        if xmin > xmax or ymin > ymax:
            raise ValueError("Invalid bounds: min values must not exceed max")
        extent = max(xmax - xmin, ymax - ymin, 1e-12)
        self.x = (xmin + xmax) / 2
        self.y = (ymin + ymax) / 2
        self.scale = 2.0 / (extent * (1.0 + margin))
        logger.debug(f"Viewport fit: center=({self.x:.4g}, {self.y:.4g}), scale={self.scale:.4g}")

    def reset(self) -> None:
        self.scale, self.x, self.y = 1.0, 0.0, 0.0

    def matrix(self) -> np.ndarray:
        """Homogeneous 3x3 transform from fractal coordinates to device coordinates."""
        s = self.scale
        return np.array([[s, 0.0, -self.x * s],
                         [0.0, s, -self.y * s],
                         [0.0, 0.0, 1.0]], dtype=np.float32)

    def to_device(self, positions: np.ndarray) -> np.ndarray:
        """Map an (N, 2) array of points into normalized device coordinates."""
        positions = np.asarray(positions, dtype=np.float32)
        return (positions - np.array([self.x, self.y], dtype=np.float32)) * np.float32(self.scale)

    def handle_key(self, key: str) -> bool:
        """
        Apply a keyboard binding.

        Returns:
            True if the key is bound and the viewport changed
        """
        action = KEY_BINDINGS.get(key)
        if action is None:
            action = KEY_BINDINGS.get(key.lower())
        if action is None:
            return False
        action(self)
        return True


KEY_BINDINGS: Dict[str, Callable[[Viewport], None]] = {
    'Up': lambda v: v.pan(0, 1),
    'Down': lambda v: v.pan(0, -1),
    'Right': lambda v: v.pan(1, 0),
    'Left': lambda v: v.pan(-1, 0),
    'q': Viewport.zoom_in,
    'z': Viewport.zoom_out,
}
