"""
Tests for median filtering, scratch detection and inpainting.
"""

import numpy as np
import pytest

from rasterfx.filters.repair import (
    content_aware_repair,
    count_defects,
    edge_preserving_filter,
    inpaint_scratches,
    is_likely_scratch,
    median_filter,
    preserve_details,
    scratch_mask,
)


def create_scratched_image(size=20, column=10, background=80, line=200):
    """Flat opaque RGBA image with one bright vertical scratch."""
    img = np.full((size, size, 4), 255, dtype=np.uint8)
    img[:, :, :3] = background
    img[:, column, :3] = line
    return img


class TestMedianFilter:
    """Tests for median_filter()."""

    def test_removes_outlier(self):
        img = np.full((9, 9, 3), 100, dtype=np.uint8)
        img[4, 4] = 255
        result = median_filter(img, 1)
        assert (result == 100).all()

    def test_zero_radius(self, gradient_rgba):
        np.testing.assert_array_equal(median_filter(gradient_rgba, 0), gradient_rgba)

    def test_alpha_untouched(self, gradient_rgba):
        pixels = gradient_rgba.copy()
        pixels[0, 0, 3] = 3
        result = median_filter(pixels, 2)
        np.testing.assert_array_equal(result[:, :, 3], pixels[:, :, 3])

    def test_input_not_modified(self):
        img = create_scratched_image()
        before = img.copy()
        median_filter(img, 1)
        np.testing.assert_array_equal(img, before)


class TestScratchDetection:
    """Tests for the 1.3x neighbor brightness rule."""

    def test_line_is_flagged(self):
        mask = scratch_mask(create_scratched_image())
        assert mask[:, 10].all()
        assert not mask[:, :10].any()
        assert not mask[:, 11:].any()

    def test_single_pixel_check_matches_mask(self):
        img = create_scratched_image()
        mask = scratch_mask(img)
        for x, y in ((10, 0), (10, 7), (9, 7), (0, 0)):
            assert is_likely_scratch(img, x, y) == bool(mask[y, x])

    def test_flat_image_has_no_defects(self, gray_rgba):
        assert count_defects(gray_rgba) == 0

    def test_count_defects(self):
        img = create_scratched_image()
        assert count_defects(img) == 1
        img[5, 3, :3] = 220
        assert count_defects(img) == 2

    def test_slightly_darker_line_not_flagged(self):
        assert count_defects(create_scratched_image(line=60)) == 0


class TestInpainting:
    """Tests for scratch inpainting and the related repair filters."""

    def test_full_strength_restores_interior(self):
        img = create_scratched_image()
        result = inpaint_scratches(img, 1.0)
        assert (result[2:18, 10, :3] == 80).all()
        # Rows within the radius of the border are not touched
        assert (result[0, 10, :3] == 200).all()

    def test_zero_strength(self):
        img = create_scratched_image()
        np.testing.assert_array_equal(inpaint_scratches(img, 0.0), img)

    def test_partial_strength(self):
        result = inpaint_scratches(create_scratched_image(), 0.5)
        assert result[8, 10, 0] == 140

    def test_tiny_image_unchanged(self):
        img = create_scratched_image(size=4, column=2)
        np.testing.assert_array_equal(inpaint_scratches(img, 1.0), img)

    def test_edge_preserving_zero_strength(self, gradient_rgba):
        np.testing.assert_array_equal(edge_preserving_filter(gradient_rgba, 0.0), gradient_rgba)

    def test_content_aware_reduces_scratch(self):
        img = create_scratched_image()
        result = content_aware_repair(img, 1.0)
        assert result[8, 10, 0] < 200

    def test_preserve_details_flat(self, gray_rgba):
        np.testing.assert_array_equal(preserve_details(gray_rgba), gray_rgba)

    def test_preserve_details_boosts_edges(self):
        img = create_scratched_image()
        result = preserve_details(img, 1.0)
        assert result[8, 10, 0] == 255
        assert result[8, 9, 0] < 80


@pytest.mark.parametrize("radius", [1, 2, 3])
def test_median_keeps_shape(radius, checkerboard_rgb):
    assert median_filter(checkerboard_rgb, radius).shape == checkerboard_rgb.shape
