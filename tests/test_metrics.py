"""
Tests for derived metrics.
"""

import pytest

from rasterfx.effects import derive_metrics, validate_request
from rasterfx.effects.metrics import MAX_SCORE, METRICS, restore_stages
from rasterfx.effects.options import FAMILIES


def metrics(family, options=None, size=None):
    return derive_metrics(validate_request(family, options or {}), size)


class TestScores:
    """Tests for the bounded heuristic scores."""

    def test_every_family_has_metrics(self):
        assert set(METRICS) == set(FAMILIES)

    def test_hdr_default(self):
        assert metrics("hdr") == {"dynamic_range_score": 6.7}

    def test_hdr_capped(self):
        score = metrics("hdr", {
            "dynamicRange": 100, "effectType": "surreal", "toneMapping": "aces",
            "shadowRecovery": 100, "highlightRecovery": 100, "intensity": 100,
        })["dynamic_range_score"]
        assert score == MAX_SCORE

    def test_artistic(self):
        result = metrics("artistic")
        assert result["effect_intensity"] == 70.0
        assert result["artistic_score"] == pytest.approx(8.9)

    def test_scratch_removal(self):
        result = metrics("scratch_removal", {"detectionMode": "aggressive", "intensity": 100})
        assert result == {"repair_score": 8.8}

    def test_restore_colorize(self):
        assert metrics("restore", {"enhanceMode": "colorize"}) == {"restoration_score": 8.8}

    def test_restore_capped(self):
        options = {
            "enhanceMode": "auto", "enhanceDetails": True, "repairDamage": True,
            "removeNoise": True, "sharpenImage": True, "enhanceContrast": True,
        }
        assert metrics("restore", options) == {"restoration_score": 10.0}

    def test_no_metrics_for_color_families(self):
        assert metrics("color_balance") == {}
        assert metrics("brightness_contrast") == {}

    def test_passthrough_values(self):
        assert metrics("vintage", {"filmGrain": 12, "colorShift": -5}) == {
            "film_grain": 12.0, "color_shift": -5.0, "effect_intensity": 70.0,
        }
        assert metrics("black_and_white", {"grain": 3}) == {"grain": 3.0, "vignette": 0.0}
        assert metrics("sharpen_blur", {"sharpenAmount": 20}) == {
            "sharpen_amount": 20.0, "blur_amount": 0.0,
        }


class TestGeometryMetrics:
    """Tests for metrics that need the source image size."""

    def test_resize_compression_ratio(self):
        assert metrics("resize", {"width": 50}, (100, 100)) == {"compression_ratio": 4.0}

    def test_resize_over_limit_does_not_raise(self):
        assert metrics("resize", {"width": 2000}, (100, 100)) == {"compression_ratio": 0.0}

    def test_resize_without_size(self):
        assert metrics("resize", {"width": 50}) == {}

    def test_perspective(self):
        corners = {
            "topLeft": {"x": 0, "y": 0},
            "topRight": {"x": 100, "y": 0},
            "bottomLeft": {"x": 10, "y": 50},
            "bottomRight": {"x": 90, "y": 50},
        }
        result = metrics("perspective", {"corners": corners}, (200, 100))
        assert result == {"correction_angle": 0.0, "keystone_correction": 0.1}

    def test_perspective_auto_detect(self):
        result = metrics("perspective", {"autoDetect": True}, (200, 100))
        assert result == {"correction_angle": 0.0, "keystone_correction": 0.0}


class TestRestoreStages:

    def test_duplicates_collapse(self):
        options = validate_request("restore", {"enhanceMode": "repair", "repairDamage": True, "sharpenImage": True})
        assert restore_stages(options) == ["Damage repair", "Image sharpening"]
