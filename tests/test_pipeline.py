"""
Tests for the per-family effect pipelines.

Pipelines are checked on small synthetic images: output geometry, alpha
handling, applied-stage details and repeatability.
"""

import numpy as np
import pytest

from rasterfx.effects import PIPELINES, EffectResult, run_pipeline, validate_request
from rasterfx.effects.options import FAMILIES
from rasterfx.pixel_buffer import PixelBuffer

# Minimal valid options per family
MINIMAL_OPTIONS = {family: {} for family in FAMILIES}
MINIMAL_OPTIONS["resize"] = {"width": 24}


def run(buffer, family, options=None, rng=None):
    return run_pipeline(buffer, validate_request(family, options or {}), rng)


@pytest.fixture
def gradient(gradient_rgba):
    return PixelBuffer.from_array(gradient_rgba)


@pytest.fixture
def gray(gray_rgba):
    return PixelBuffer.from_array(gray_rgba)


def create_scratched_buffer(size=24):
    img = np.full((size, size, 4), 255, dtype=np.uint8)
    img[:, :, :3] = 80
    img[:, size // 2, :3] = 200
    return PixelBuffer.from_array(img)


class TestDispatch:
    """Tests for the pipeline registry."""

    def test_every_family_has_a_pipeline(self):
        assert set(PIPELINES) == set(FAMILIES)

    @pytest.mark.parametrize("family", FAMILIES)
    def test_rgba_input(self, gradient, family):
        result = run(gradient, family, MINIMAL_OPTIONS[family], np.random.default_rng(0))
        assert isinstance(result, EffectResult)
        assert result.buffer.channels == 4
        result.buffer.check()

    @pytest.mark.parametrize("family", FAMILIES)
    def test_rgb_input(self, checkerboard_rgb, family):
        buffer = PixelBuffer.from_array(checkerboard_rgb)
        result = run(buffer, family, MINIMAL_OPTIONS[family], np.random.default_rng(0))
        assert result.buffer.channels == 3

    def test_input_buffer_untouched(self, gradient_rgba):
        buffer = PixelBuffer.from_array(gradient_rgba.copy())
        run(buffer, "hdr", {"effectType": "surreal", "clarity": 50, "glow": 40})
        np.testing.assert_array_equal(buffer.samples, gradient_rgba)


class TestToneFamilies:
    """Tests for hdr, color balance and brightness/contrast."""

    def test_hdr_details(self, gradient):
        result = run(gradient, "hdr", {"toneMapping": "aces", "effectType": "cinematic"})
        assert result.details == ["Style cinematic", "Tone mapping aces"]
        np.testing.assert_array_equal(result.buffer.samples[:, :, 3], 255)

    @pytest.mark.parametrize(
        "style", ["natural", "dramatic", "cinematic", "surreal", "vivid", "moody", "landscape", "custom"]
    )
    def test_hdr_styles_run(self, gradient, style):
        result = run(gradient, "hdr", {"effectType": style, "colorGrading": True, "colorTemperature": 30})
        assert result.buffer.dimensions == gradient.dimensions

    def test_brightness(self, gray):
        result = run(gray, "brightness_contrast", {"brightness": 10})
        assert result.buffer.samples[0, 0, 0] == 154
        assert result.details == ["Brightness +10"]

    def test_brightness_contrast_details(self, gradient):
        result = run(
            gradient,
            "brightness_contrast",
            {"gamma": 1.2, "exposure": 1.0, "autoLevels": True},
        )
        assert result.details == ["Auto levels", "Gamma 1.20", "Exposure +1.0EV"]

    def test_brightness_contrast_defaults_identity(self, gradient):
        result = run(gradient, "brightness_contrast")
        np.testing.assert_array_equal(result.buffer.samples, gradient.samples)
        assert result.details == []

    def test_color_balance_details(self, gradient):
        result = run(gradient, "color_balance", {"hue": 30, "temperature": 20, "redBalance": -10})
        assert result.details == ["Temperature +20", "Hue +30°", "Red -10"]

    def test_color_balance_alpha(self, gradient_rgba):
        pixels = gradient_rgba.copy()
        pixels[:, :, 3] = 77
        result = run(PixelBuffer.from_array(pixels), "color_balance", {"saturation": 50, "tint": 40})
        assert (result.buffer.samples[:, :, 3] == 77).all()


class TestVintage:
    """Tests for the vintage pipeline."""

    def test_repeatable_without_grain(self, gradient):
        options = {"filmGrain": 0, "lightLeak": True, "lightLeakType": "random", "scratches": True}
        a = run(gradient, "vintage", options)
        b = run(gradient, "vintage", options)
        np.testing.assert_array_equal(a.buffer.samples, b.buffer.samples)

    def test_seeded_grain(self, gradient):
        a = run(gradient, "vintage", {"filmGrain": 80}, np.random.default_rng(5))
        b = run(gradient, "vintage", {"filmGrain": 80}, np.random.default_rng(5))
        np.testing.assert_array_equal(a.buffer.samples, b.buffer.samples)

    def test_polaroid_border(self, gradient):
        result = run(gradient, "vintage", {"border": "polaroid", "borderWidth": 10})
        assert result.buffer.dimensions == (48 + 20, 32 + 10 + 30)
        assert "Border polaroid" in result.details

    def test_details_order(self, gradient):
        result = run(gradient, "vintage", {"vintageStyle": "noir", "scratches": True})
        assert result.details == ["Style noir", "Vignette", "Film grain", "Scratches"]

    @pytest.mark.parametrize(
        "style", ["classic", "sepia", "noir", "faded", "technicolor", "polaroid", "cinematic", "retro", "custom"]
    )
    def test_styles_run(self, gradient, style):
        options = {"vintageStyle": style, "filmGrain": 0, "colorShift": 40, "colorBalance": {"red": 10}}
        result = run(gradient, "vintage", options)
        assert result.buffer.dimensions == gradient.dimensions


class TestBlackAndWhite:

    def test_simple_is_gray(self, gradient):
        samples = run(gradient, "black_and_white").buffer.samples
        np.testing.assert_array_equal(samples[:, :, 0], samples[:, :, 1])
        np.testing.assert_array_equal(samples[:, :, 1], samples[:, :, 2])

    def test_toning_detail(self, gradient):
        result = run(gradient, "black_and_white", {"conversionMode": "film", "toning": "sepia", "contrast": 20})
        assert result.details == ["Mode film", "Contrast +20", "Toning sepia"]


class TestFilters:
    """Tests for sharpen/blur, artistic and scratch removal."""

    def test_sharpen_blur_defaults_identity(self, gradient):
        result = run(gradient, "sharpen_blur")
        np.testing.assert_array_equal(result.buffer.samples, gradient.samples)
        assert result.details == []

    @pytest.mark.parametrize("blur_type", ["gaussian", "motion", "radial", "surface"])
    def test_blur_types(self, gradient, blur_type):
        result = run(gradient, "sharpen_blur", {"blurAmount": 50, "blurType": blur_type})
        assert result.details == [f"Blur {blur_type} 50"]

    def test_artistic_border(self, gradient):
        result = run(gradient, "artistic", {"filterType": "comic", "borderStyle": "frame", "borderWidth": 5})
        assert result.buffer.dimensions == (58, 42)
        assert result.details == ["Filter comic", "Border frame"]

    def test_artistic_repeatable(self, gradient):
        options = {"filterType": "impressionist", "backgroundTexture": "paper"}
        a = run(gradient, "artistic", options)
        b = run(gradient, "artistic", options)
        np.testing.assert_array_equal(a.buffer.samples, b.buffer.samples)

    def test_scratch_removal_details(self):
        result = run(create_scratched_buffer(), "scratch_removal", {"preserveDetails": False, "dustSize": 0})
        assert result.details == ["Scratch removal (auto)", "Defects detected: 1"]

    def test_aggressive_removes_scratch(self):
        buffer = create_scratched_buffer()
        result = run(buffer, "scratch_removal", {"detectionMode": "aggressive", "intensity": 100})
        assert result.buffer.samples[12, 12, 0] < 200


class TestRestore:

    def test_colorize_warms_gray(self, gray):
        result = run(gray, "restore", {"enhanceMode": "colorize", "colorizeStrength": 100})
        r, g, b = result.buffer.samples[50, 50, :3].astype(int)
        assert r > g > b
        assert result.details == ["Colorization"]

    def test_stage_details(self, gradient):
        result = run(gradient, "restore", {"enhanceMode": "enhance", "enhanceDetails": True, "removeNoise": True})
        assert result.details == ["Detail enhancement", "Noise reduction"]


class TestGeometry:
    """Tests for perspective and resize."""

    def test_perspective_identity(self, gradient):
        result = run(gradient, "perspective")
        np.testing.assert_array_equal(result.buffer.samples, gradient.samples)
        assert result.details == ["Rotation 0.00°", "Keystone 0.00"]

    def test_perspective_output_size(self, gradient):
        result = run(gradient, "perspective", {"outputWidth": 30, "outputHeight": 20, "gridOverlay": True})
        assert result.buffer.dimensions == (30, 20)
        assert "Grid overlay" in result.details

    def test_resize(self, gradient):
        result = run(gradient, "resize", {"width": 24})
        assert result.buffer.dimensions == (24, 16)
        assert result.details == ["Resize 48x32 -> 24x16 (fit)"]

    def test_resize_cover(self, gradient):
        result = run(gradient, "resize", {"width": 20, "height": 20, "resizeMode": "cover"})
        assert result.buffer.dimensions == (20, 20)
