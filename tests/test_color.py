"""
Tests for color transforms: channel mixing, saturation, hue and toning.
"""

import numpy as np
import pytest

from rasterfx.filters.color import (
    FILM_PROFILES,
    TONING_COLORS,
    apply_toning,
    auto_white_balance,
    channel_mix,
    film_grayscale,
    hue_rotate,
    offset_channels,
    saturation,
    sepia,
    shift_temperature,
    shift_tint,
    temperature_tint_scale,
    vibrance,
    vibrance_toward_max,
)


def solid_color(r, g, b, size=6):
    """Opaque RGBA image of a single color."""
    img = np.empty((size, size, 4), dtype=np.uint8)
    img[:, :] = (r, g, b, 255)
    return img


def compute_channel_averages(img):
    """Average of each RGB channel."""
    return tuple(float(img[:, :, c].mean()) for c in range(3))


class TestChannelMix:
    """Tests for weighted grayscale conversion."""

    def test_output_is_gray(self, gradient_rgba):
        result = channel_mix(gradient_rgba)
        np.testing.assert_array_equal(result[:, :, 0], result[:, :, 1])
        np.testing.assert_array_equal(result[:, :, 1], result[:, :, 2])

    def test_weights_are_scale_invariant(self, gradient_rgba):
        a = channel_mix(gradient_rgba, (30, 59, 11))
        b = channel_mix(gradient_rgba, (60, 118, 22))
        np.testing.assert_array_equal(a, b)

    def test_red_only(self):
        result = channel_mix(solid_color(200, 40, 10), (1, 0, 0))
        assert result[0, 0, 0] == 200

    def test_film_profiles(self, gradient_rgba):
        for name in FILM_PROFILES:
            assert film_grayscale(gradient_rgba, name).shape == gradient_rgba.shape

    def test_unknown_film(self, gradient_rgba):
        with pytest.raises(ValueError):
            film_grayscale(gradient_rgba, "portra")


class TestSaturation:
    """Tests for saturation and the two vibrance forms."""

    def test_zero_identity(self, gradient_rgba):
        np.testing.assert_array_equal(saturation(gradient_rgba, 0.0), gradient_rgba)
        np.testing.assert_array_equal(vibrance(gradient_rgba, 0.0), gradient_rgba)
        np.testing.assert_array_equal(vibrance_toward_max(gradient_rgba, 0.0), gradient_rgba)

    def test_full_desaturation(self):
        result = saturation(solid_color(200, 100, 50), -1.0)
        r, g, b = compute_channel_averages(result)
        assert r == g == b

    def test_boost_spreads_channels(self):
        result = saturation(solid_color(150, 120, 100), 0.5)
        assert result[0, 0, 0] > 150
        assert result[0, 0, 2] < 100

    def test_vibrance_favors_muted_pixels(self):
        muted = solid_color(140, 120, 110)
        vivid = solid_color(250, 20, 20)
        muted_gain = int(vibrance(muted, 0.5)[0, 0, 0]) - 140
        vivid_gain = int(vibrance(vivid, 0.5)[0, 0, 0]) - 250
        assert muted_gain > 0
        assert vivid_gain <= muted_gain


class TestHueRotate:
    """Tests for HSL hue rotation."""

    def test_red_to_green(self):
        result = hue_rotate(solid_color(255, 0, 0), 120)
        np.testing.assert_array_equal(result[0, 0], [0, 255, 0, 255])

    def test_red_to_blue(self):
        result = hue_rotate(solid_color(255, 0, 0), -120)
        np.testing.assert_array_equal(result[0, 0], [0, 0, 255, 255])

    def test_full_turn_identity(self, gradient_rgba):
        np.testing.assert_array_equal(hue_rotate(gradient_rgba, 360), gradient_rgba)

    def test_gray_unaffected(self, gray_rgba):
        np.testing.assert_array_equal(hue_rotate(gray_rgba, 90), gray_rgba)


class TestWhiteBalance:
    """Tests for temperature, tint and auto white balance."""

    def test_scale_identity_at_zero(self, gradient_rgba):
        np.testing.assert_array_equal(temperature_tint_scale(gradient_rgba, 0, 0), gradient_rgba)

    def test_warm_scale(self):
        result = temperature_tint_scale(solid_color(100, 100, 100), 1.0, 0.0)
        assert result[0, 0, 0] == 120
        assert result[0, 0, 2] == 90

    def test_additive_temperature(self):
        warm = shift_temperature(solid_color(100, 100, 100), 0.5, 40, 20, 40)
        np.testing.assert_array_equal(warm[0, 0, :3], [120, 110, 100])
        cool = shift_temperature(solid_color(100, 100, 100), -0.5, 40, 20, 40)
        np.testing.assert_array_equal(cool[0, 0, :3], [100, 100, 120])

    def test_additive_tint(self):
        magenta = shift_tint(solid_color(100, 100, 100), 1.0, 25)
        np.testing.assert_array_equal(magenta[0, 0, :3], [125, 100, 125])
        green = shift_tint(solid_color(100, 100, 100), -1.0, 25)
        np.testing.assert_array_equal(green[0, 0, :3], [100, 125, 100])

    def test_auto_white_balance_equalizes_means(self):
        result = auto_white_balance(solid_color(200, 100, 50))
        r, g, b = compute_channel_averages(result)
        assert r == g == b

    def test_offsets(self):
        result = offset_channels(solid_color(100, 100, 100), 10, -10, 200)
        np.testing.assert_array_equal(result[0, 0, :3], [110, 90, 255])


class TestSepiaToning:
    """Tests for the sepia matrix and monochrome toning."""

    def test_sepia_white(self):
        result = sepia(solid_color(255, 255, 255))
        np.testing.assert_array_equal(result[0, 0, :3], [255, 255, 239])

    def test_toning_none(self, gradient_rgba):
        np.testing.assert_array_equal(apply_toning(gradient_rgba, "none", 1.0), gradient_rgba)

    def test_full_toning_is_solid(self, gradient_rgba):
        for name, rgb in TONING_COLORS.items():
            result = apply_toning(gradient_rgba, name, 1.0)
            np.testing.assert_array_equal(result[3, 3, :3], rgb)

    def test_unknown_toning(self, gradient_rgba):
        with pytest.raises(ValueError):
            apply_toning(gradient_rgba, "gold", 0.5)
