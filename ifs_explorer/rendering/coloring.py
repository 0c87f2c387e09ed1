"""
Hue-based coloring for generated point clouds.

Each point carries the hue tag of the transform that produced it. Hues are
turned into RGB with a fixed saturation and value, reversing the hue wheel so
tag 0 renders red and increasing tags sweep through magenta and blue.
"""

import numpy as np
from typing import Tuple, Union
from dataclasses import dataclass
import logging

import matplotlib.colors as mcolors

from ..core.chaos_game import PointCloud

logger = logging.getLogger(__name__)

SATURATION = 0.8
VALUE = 0.8


@dataclass
class ColorRGB:
    """RGB color representation."""
    r: float
    g: float
    b: float

    def __post_init__(self):
        """Validate RGB values."""
        for component in [self.r, self.g, self.b]:
            if not 0 <= component <= 1:
                raise ValueError("RGB components must be between 0 and 1")

    @classmethod
    def parse(cls, value: str) -> 'ColorRGB':
        """Parse any matplotlib color string, e.g. 'black', '#102030' or 'C1'."""
        try:
            return cls(*mcolors.to_rgb(value))
        except ValueError as e:
            raise ValueError(f"Invalid color '{value}': {e}") from e

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)


def hue_to_rgb(hues: Union[float, np.ndarray],
               saturation: float = SATURATION, value: float = VALUE) -> np.ndarray:
    """
    Convert hue tags in [0, 1] to RGB colors.

    Args:
        hues: Scalar hue or array of hues
        saturation: HSV saturation
        value: HSV value

    Returns:
        Array of shape hues.shape + (3,) with components in [0, 1]
    """
    hues = np.asarray(hues, dtype=np.float64)
    hsv = np.empty(hues.shape + (3,), dtype=np.float64)
    hsv[..., 0] = np.mod(1.0 - hues, 1.0)
    hsv[..., 1] = saturation
    hsv[..., 2] = value
    return mcolors.hsv_to_rgb(hsv)


def colorize(cloud: PointCloud, saturation: float = SATURATION,
             value: float = VALUE) -> np.ndarray:
    """Per-point RGB colors (N, 3) for a point cloud."""
    if len(cloud) == 0:
        return np.empty((0, 3), dtype=np.float64)
    return hue_to_rgb(cloud.hues, saturation, value)
