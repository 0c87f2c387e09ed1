"""
Rasterization and export of generated point clouds.

This module plots device-coordinate points into RGB images and writes them
(PNG, TIFF, JPEG) with embedded render metadata. Raw point clouds can be
written as NumPy arrays or CSV.
"""

import numpy as np
from typing import Dict, Any, Optional, Tuple
from pathlib import Path
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, PngImagePlugin

from .. import __version__
from ..core.chaos_game import PointCloud

logger = logging.getLogger(__name__)

METADATA_KEY = "IFSMetadata"


@dataclass
class RenderMetadata:
    """Metadata for point cloud renders."""

    system: str
    num_points: int
    burn_in: int
    resolution: Tuple[int, int]  # width, height
    viewport: Tuple[float, float, float]  # scale, x, y
    seed: Optional[int] = None
    render_time_seconds: float = 0.0
    timestamp: str = ""
    software_version: str = __version__
    transforms: list = field(default_factory=list)

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        """Create metadata from dictionary."""
        data = dict(data)
        data['resolution'] = tuple(data['resolution'])
        data['viewport'] = tuple(data['viewport'])
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        """Create metadata from JSON string."""
        return cls.from_dict(json.loads(json_str))


def rasterize(positions: np.ndarray, colors: np.ndarray, width: int, height: int,
              background: Tuple[float, float, float] = (0.0, 0.0, 0.0)) -> np.ndarray:
    """
    Plot device-coordinate points into an RGB image.

    Device coordinates span [-1, 1] on both axes with y pointing up; points
    outside that square are clipped.

    Args:
        positions: (N, 2) array in device coordinates
        colors: (N, 3) array of RGB colors in [0, 1]
        width, height: Image size in pixels
        background: Background RGB color

    Returns:
        RGB image array (height, width, 3) with values 0-1
    """
    if width <= 0 or height <= 0:
        raise ValueError("Width and height must be positive")
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
    colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
    if positions.shape[0] != colors.shape[0]:
        raise ValueError("positions and colors must have the same length")

    image = np.empty((height, width, 3), dtype=np.float64)
    image[:, :] = background

    px = np.floor((positions[:, 0] + 1.0) * 0.5 * width).astype(np.int64)
    py = np.floor((1.0 - positions[:, 1]) * 0.5 * height).astype(np.int64)
    visible = (px >= 0) & (px < width) & (py >= 0) & (py < height)
    image[py[visible], px[visible]] = colors[visible]
    return image


def to_rgb8(image_array: np.ndarray) -> np.ndarray:
    """
    Convert an (H, W, 3) raster to 8-bit RGB.

    Float rasters are read as 0-1 intensities; integer rasters are clipped
    to 0-255.
    """
    image_array = np.asarray(image_array)
    if image_array.ndim != 3 or image_array.shape[2] != 3:
        raise ValueError(f"Expected RGB image array (H, W, 3), got {image_array.shape}")
    if image_array.dtype == np.uint8:
        return image_array
    if np.issubdtype(image_array.dtype, np.floating):
        return np.rint(np.clip(image_array, 0.0, 1.0) * 255).astype(np.uint8)
    return np.clip(image_array, 0, 255).astype(np.uint8)


class ImageExporter:
    """Writes rasters and point clouds; reads back embedded render metadata."""

    image_formats = {
        '.png': 'PNG',
        '.tiff': 'TIFF',
        '.tif': 'TIFF',
        '.jpg': 'JPEG',
        '.jpeg': 'JPEG',
    }

    def __init__(self):
        self.point_formats = {
            '.npy': self._save_points_npy,
            '.csv': self._save_points_csv,
        }

    def save_image(self, image_array: np.ndarray, filepath: Path,
                   metadata: Optional[RenderMetadata] = None,
                   quality: int = 95) -> None:
        """
        Write an RGB raster as PNG, TIFF or JPEG.

        PNG keeps the metadata JSON in an ``IFSMetadata`` text chunk and TIFF
        in its ImageDescription tag. JPEG has no such slot, so the JSON goes
        to a ``.json`` file beside the image.
        """
        filepath = Path(filepath)
        image_format = self.image_formats.get(filepath.suffix.lower())
        if image_format is None:
            supported = ', '.join(self.image_formats)
            raise ValueError(f"Unsupported format '{filepath.suffix}'. Supported: {supported}")

        pil_image = Image.fromarray(to_rgb8(image_array))
        document = metadata.to_json() if metadata else None

        if image_format == 'PNG':
            pnginfo = PngImagePlugin.PngInfo()
            if document:
                pnginfo.add_text("Title", f"IFS: {metadata.system}")
                pnginfo.add_text("Software", f"IFS Explorer v{metadata.software_version}")
                pnginfo.add_text(METADATA_KEY, document)
            pil_image.save(filepath, image_format, pnginfo=pnginfo)
        elif image_format == 'TIFF':
            extra = {'description': document} if document else {}
            pil_image.save(filepath, image_format, compression='tiff_lzw', **extra)
        else:
            pil_image.save(filepath, image_format, quality=quality)
            if document:
                sidecar = filepath.with_suffix('.json')
                sidecar.write_text(document)
                logger.info(f"Saved metadata: {sidecar}")

        logger.info(f"Saved {image_format} image: {filepath} "
                    f"({pil_image.size[0]}x{pil_image.size[1]})")

    def extract_metadata(self, filepath: Path) -> Optional[RenderMetadata]:
        """
        Extract render metadata from a saved image.

        Returns:
            Extracted metadata or None if the image carries none
        """
        filepath = Path(filepath)

        if filepath.suffix.lower() in ['.jpg', '.jpeg']:
            json_path = filepath.with_suffix('.json')
            if json_path.exists():
                with open(json_path, 'r') as f:
                    return RenderMetadata.from_json(f.read())
            return None

        with Image.open(filepath) as img:
            if METADATA_KEY in getattr(img, 'text', {}):
                return RenderMetadata.from_json(img.text[METADATA_KEY])
            description = getattr(img, 'tag_v2', {}).get(270)
            if description:
                return RenderMetadata.from_json(description)
        return None

    def save_points(self, cloud: PointCloud, filepath: Path) -> None:
        """
        Save a point cloud as .npy (structured vertex array) or .csv (x, y, hue).

        Args:
            cloud: Point cloud to save
            filepath: Output file path
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.point_formats:
            supported = ', '.join(self.point_formats.keys())
            raise ValueError(f"Unsupported point format '{suffix}'. Supported: {supported}")

        self.point_formats[suffix](cloud, filepath)
        logger.info(f"Saved {len(cloud)} points: {filepath}")

    def _save_points_npy(self, cloud: PointCloud, filepath: Path) -> None:
        np.save(filepath, cloud.to_vertex_array())

    def _save_points_csv(self, cloud: PointCloud, filepath: Path) -> None:
        table = np.column_stack([cloud.positions, cloud.hues]) if len(cloud) else np.empty((0, 3))
        np.savetxt(filepath, table, delimiter=',', header='x,y,hue', comments='', fmt='%.8g')

    def load_points(self, filepath: Path) -> PointCloud:
        """Load a point cloud saved by save_points()."""
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()
        if suffix == '.npy':
            vertices = np.load(filepath)
            return PointCloud(vertices['position'], vertices['hue'])
        if suffix == '.csv':
            table = np.loadtxt(filepath, delimiter=',', skiprows=1, ndmin=2)
            if table.size == 0:
                return PointCloud(np.empty((0, 2)), np.empty(0))
            return PointCloud(table[:, :2], table[:, 2])
        raise ValueError(f"Unsupported point format '{suffix}'")
