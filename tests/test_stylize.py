"""
Tests for the artistic renderers.
"""

import numpy as np
import pytest

from rasterfx.filters.stylize import RENDERERS, ArtisticParams, render
from rasterfx.filters.texture import shape_rng


@pytest.fixture
def params():
    return ArtisticParams(intensity=0.7, saturation=0.6, brush_size=30, stroke_density=50)


class TestRenderers:
    """Every renderer keeps the size and alpha of its input."""

    @pytest.mark.parametrize("name", sorted(RENDERERS))
    def test_shape_and_alpha(self, gradient_rgba, params, name):
        result = render(gradient_rgba, name, params, shape_rng(gradient_rgba))
        assert result.shape == gradient_rgba.shape
        assert result.dtype == np.uint8
        np.testing.assert_array_equal(result[:, :, 3], gradient_rgba[:, :, 3])

    @pytest.mark.parametrize("name", sorted(RENDERERS))
    def test_repeatable(self, gradient_rgba, params, name):
        a = render(gradient_rgba, name, params, shape_rng(gradient_rgba))
        b = render(gradient_rgba, name, params, shape_rng(gradient_rgba))
        np.testing.assert_array_equal(a, b)

    def test_unknown(self, gradient_rgba, params):
        with pytest.raises(ValueError):
            render(gradient_rgba, "mosaic", params)

    def test_brush_radius(self):
        assert ArtisticParams(brush_size=5).brush_radius == 1
        assert ArtisticParams(brush_size=45).brush_radius == 4


class TestOilPaint:

    def test_flat_gray_unchanged(self, gray_rgba, params):
        np.testing.assert_array_equal(render(gray_rgba, "oil", params), gray_rgba)

    def test_reduces_detail(self):
        """Within a window, the fuller bin wins, flattening fine patterns."""
        fine = np.zeros((20, 20, 3), dtype=np.uint8)
        fine[::2, ::2] = 255
        result = render(fine, "oil", ArtisticParams(brush_size=20, saturation=0.0))
        assert result.astype(float).std() < fine.astype(float).std()


class TestSketch:

    def test_strong_sketch_of_flat_image_is_white(self, gray_rgba):
        result = render(gray_rgba, "sketch", ArtisticParams(intensity=0.9))
        assert (result[:, :, :3] == 255).all()

    def test_output_is_gray(self, gradient_rgba):
        result = render(gradient_rgba, "sketch", ArtisticParams(intensity=0.5))
        np.testing.assert_array_equal(result[:, :, 0], result[:, :, 1])


class TestPointillism:

    def test_white_canvas_between_dots(self):
        """Sparse dots leave white canvas behind."""
        img = np.full((40, 40, 3), 60, dtype=np.uint8)
        result = render(img, "pointillism", ArtisticParams(brush_size=5, stroke_density=1), shape_rng(img))
        assert (result == 255).all(axis=2).any()
        assert (result < 255).any()
