import json

import numpy as np
import pytest
from PIL import Image

from ifs_explorer.core.chaos_game import PointCloud, generate
from ifs_explorer.core.fractal_systems import BUILTIN_CATALOG
from ifs_explorer.rendering.coloring import ColorRGB, colorize, hue_to_rgb
from ifs_explorer.rendering.image_output import ImageExporter, RenderMetadata, rasterize, to_rgb8


def test_hue_zero_is_red():
    np.testing.assert_allclose(hue_to_rgb(0.0), [0.8, 0.16, 0.16])


def test_hue_wheel_is_reversed():
    np.testing.assert_allclose(hue_to_rgb(1.0), hue_to_rgb(0.0), atol=1e-12)
    np.testing.assert_allclose(hue_to_rgb(1 / 3), [0.16, 0.16, 0.8], atol=1e-9)
    np.testing.assert_allclose(hue_to_rgb(2 / 3), [0.16, 0.8, 0.16], atol=1e-9)


def test_hue_to_rgb_keeps_shape():
    assert hue_to_rgb(np.zeros((4, 5))).shape == (4, 5, 3)


def test_colorize_matches_hues(rng):
    cloud = generate(BUILTIN_CATALOG.get('sierpinski'), 200, rng=rng)
    colors = colorize(cloud)
    assert colors.shape == (200, 3)
    assert len({tuple(c) for c in np.round(colors, 6)}) <= 3
    assert colorize(PointCloud(np.empty((0, 2)), np.empty(0))).shape == (0, 3)


def test_color_parse():
    assert ColorRGB.parse('black').to_tuple() == (0.0, 0.0, 0.0)
    assert ColorRGB.parse('#ffffff').to_tuple() == (1.0, 1.0, 1.0)
    with pytest.raises(ValueError):
        ColorRGB.parse('not-a-colour')
    with pytest.raises(ValueError):
        ColorRGB(1.5, 0.0, 0.0)


def test_rasterize_places_points_with_y_up():
    positions = np.array([[0.0, 0.0], [-1.0, 1.0], [1.0, -1.0]])
    colors = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    image = rasterize(positions, colors, 4, 4, background=(0.1, 0.1, 0.1))
    assert image.shape == (4, 4, 3)
    np.testing.assert_allclose(image[2, 2], [1.0, 0.0, 0.0])
    np.testing.assert_allclose(image[0, 0], [0.0, 1.0, 0.0])
    # (1, -1) falls just outside the last pixel and is clipped
    assert not np.any(np.all(image == [0.0, 0.0, 1.0], axis=-1))
    assert np.sum(np.all(image == [0.1, 0.1, 0.1], axis=-1)) == 14


def test_rasterize_validates_input():
    with pytest.raises(ValueError):
        rasterize(np.zeros((2, 2)), np.zeros((2, 3)), 0, 10)
    with pytest.raises(ValueError):
        rasterize(np.zeros((2, 2)), np.zeros((3, 3)), 10, 10)


def _metadata():
    return RenderMetadata(system='sierpinski', num_points=100, burn_in=20,
                          resolution=(8, 6), viewport=(1.0, 0.5, 0.4), seed=3,
                          transforms=[[0.5, 0, 0, 0.5, 0, 0, 1.0, 0.0]])


def test_png_export_embeds_metadata(tmp_path):
    exporter = ImageExporter()
    path = tmp_path / 'out.png'
    exporter.save_image(np.full((6, 8, 3), 0.5), path, _metadata())

    with Image.open(path) as img:
        assert img.size == (8, 6)
        assert img.mode == 'RGB'
    restored = exporter.extract_metadata(path)
    assert restored == _metadata_with_timestamp(restored)


def _metadata_with_timestamp(other):
    expected = _metadata()
    expected.timestamp = other.timestamp
    return expected


def test_jpeg_export_writes_companion_json(tmp_path):
    exporter = ImageExporter()
    path = tmp_path / 'out.jpg'
    exporter.save_image(np.zeros((4, 4, 3)), path, _metadata())
    assert path.exists()
    data = json.loads((tmp_path / 'out.json').read_text())
    assert data['system'] == 'sierpinski'
    assert exporter.extract_metadata(path).num_points == 100


def test_tiff_export_keeps_metadata_in_description(tmp_path):
    exporter = ImageExporter()
    path = tmp_path / 'out.tif'
    exporter.save_image(np.full((5, 7, 3), 0.25), path, _metadata())
    with Image.open(path) as img:
        assert img.size == (7, 5)
    assert exporter.extract_metadata(path).resolution == (8, 6)


def test_to_rgb8_scales_and_clips():
    image = np.array([[[0.0, 0.5, 1.0], [-0.2, 1.7, 0.25]]])
    np.testing.assert_array_equal(to_rgb8(image), [[[0, 128, 255], [0, 255, 64]]])
    assert to_rgb8(np.array([[[300, -4, 9]]])).tolist() == [[[255, 0, 9]]]
    assert to_rgb8(np.zeros((1, 1, 3), dtype=np.uint8)).dtype == np.uint8
    with pytest.raises(ValueError):
        to_rgb8(np.zeros((2, 2)))


def test_png_without_metadata(tmp_path):
    exporter = ImageExporter()
    path = tmp_path / 'plain.png'
    exporter.save_image(np.zeros((4, 4, 3), dtype=np.uint8), path)
    assert exporter.extract_metadata(path) is None


def test_unsupported_formats_rejected(tmp_path):
    exporter = ImageExporter()
    with pytest.raises(ValueError):
        exporter.save_image(np.zeros((4, 4, 3)), tmp_path / 'out.gif')
    with pytest.raises(ValueError):
        exporter.save_image(np.zeros((4, 4)), tmp_path / 'out.png')
    with pytest.raises(ValueError):
        exporter.save_points(PointCloud(np.zeros((1, 2)), np.zeros(1)), tmp_path / 'p.txt')


def test_point_export_npy_and_csv(tmp_path, rng):
    exporter = ImageExporter()
    cloud = generate(BUILTIN_CATALOG.get('barnsley_fern'), 300, rng=rng)

    exporter.save_points(cloud, tmp_path / 'points.npy')
    loaded = exporter.load_points(tmp_path / 'points.npy')
    np.testing.assert_array_equal(loaded.positions, cloud.positions)
    np.testing.assert_array_equal(loaded.hues, cloud.hues)

    exporter.save_points(cloud, tmp_path / 'points.csv')
    lines = (tmp_path / 'points.csv').read_text().splitlines()
    assert lines[0] == 'x,y,hue'
    assert len(lines) == 301
    loaded = exporter.load_points(tmp_path / 'points.csv')
    np.testing.assert_allclose(loaded.positions, cloud.positions, rtol=1e-6, atol=1e-6)
