import numpy as np
import pytest

from ifs_explorer.api import FractalExplorer, RenderConfig, generate_points
from ifs_explorer.core.chaos_game import VERTEX_DTYPE
from ifs_explorer.core.fractal_systems import UnknownSystemError
from ifs_explorer.core.state import GenerationConfig


@pytest.fixture
def explorer():
    return FractalExplorer(GenerationConfig(system='barnsley_fern', num_points=2000, seed=4),
                           RenderConfig(width=64, height=48))


def test_frame_returns_device_vertices(explorer):
    vertices = explorer.frame()
    assert vertices.dtype == VERTEX_DTYPE
    assert len(vertices) == 2000
    # View is fitted to the recommended bounds, so the whole fern is on screen.
    assert np.abs(vertices['position']).max() <= 1.0
    assert explorer.get_exploration_info()['last_frame_points'] == 2000


def test_frames_are_regenerated(explorer):
    first = explorer.frame()
    explorer.set_count(10)
    second = explorer.frame()
    assert len(first) == 2000
    assert len(second) == 10


def test_render_image_shape(explorer):
    image = explorer.render_image()
    assert image.shape == (48, 64, 3)
    assert image.max() > 0.0
    assert explorer.render_image(16, 8).shape == (8, 16, 3)


def test_select_fits_new_system(explorer):
    explorer.select('levy_c')
    xmin, xmax, ymin, ymax = explorer.state.system.recommended_bounds
    assert explorer.viewport.x == pytest.approx((xmin + xmax) / 2)
    assert explorer.viewport.y == pytest.approx((ymin + ymax) / 2)
    with pytest.raises(UnknownSystemError):
        explorer.select('nope')
    assert explorer.state.system.name == 'levy_c'


def test_reset_view_without_recommended_bounds(explorer):
    explorer.select('maple_leaf')
    assert explorer.state.system.recommended_bounds is None
    vertices = explorer.frame()
    assert np.abs(vertices['position']).max() < 1.2


def test_keys_change_viewport_and_reset_restores(explorer):
    before = (explorer.viewport.scale, explorer.viewport.x, explorer.viewport.y)
    assert explorer.handle_key('Right')
    assert explorer.handle_key('q')
    assert (explorer.viewport.scale, explorer.viewport.x, explorer.viewport.y) != before
    explorer.reset_view()
    assert (explorer.viewport.scale, explorer.viewport.x, explorer.viewport.y) == pytest.approx(before)


def test_render_to_file_with_metadata(explorer, tmp_path):
    path = tmp_path / 'fern.png'
    explorer.render_to_file(path)
    metadata = explorer.image_exporter.extract_metadata(path)
    assert metadata.system == 'barnsley_fern'
    assert metadata.num_points == 2000
    assert metadata.seed == 4
    assert len(metadata.transforms) == 4


def test_render_config_validation():
    with pytest.raises(ValueError):
        RenderConfig(width=0).validate()
    with pytest.raises(ValueError):
        RenderConfig(jpeg_quality=0).validate()
    with pytest.raises(ValueError):
        RenderConfig(background='blurple').validate()


def test_generate_points_is_seedable():
    a = generate_points('heighway_dragon', 500, seed=9)
    b = generate_points('heighway_dragon', 500, seed=9)
    assert len(a) == 500
    np.testing.assert_array_equal(a.positions, b.positions)
