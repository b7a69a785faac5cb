"""
Tests for effect option models and request validation.
"""

import pytest
from pydantic import ValidationError

from rasterfx.effects.options import (
    FAMILIES,
    FAMILY_MODELS,
    HdrOptions,
    PerspectiveOptions,
    ResizeOptions,
    VintageOptions,
    parse_request,
    validate_request,
)
from rasterfx.exceptions import InvalidParameters


class TestFamilies:
    """Tests for the family registry."""

    def test_all_families_registered(self):
        assert set(FAMILIES) == {
            "hdr", "vintage", "black_and_white", "sharpen_blur", "artistic",
            "color_balance", "brightness_contrast", "scratch_removal", "restore",
            "perspective", "resize",
        }

    def test_family_literal_matches_key(self):
        for family, model in FAMILY_MODELS.items():
            assert model.model_fields["family"].default == family

    def test_unknown_family(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("posterize", {})
        assert exc_info.value.field == "family"


class TestDefaults:
    """Tests for default option values."""

    def test_hdr_defaults(self):
        options = validate_request("hdr")
        assert options.style == "natural"
        assert options.intensity == 50
        assert options.tone_mapping == "reinhard"
        assert options.output_format == "png"
        assert options.quality == 95

    def test_vintage_defaults(self):
        options = validate_request("vintage", {})
        assert options.style == "classic"
        assert options.intensity == 70
        assert options.film_grain == 30
        assert options.vignette is True
        assert options.quality == 90

    def test_models_are_frozen(self):
        options = validate_request("hdr", {})
        with pytest.raises(ValidationError):
            options.intensity = 10


class TestAliases:
    """Fields accept snake_case names and camelCase aliases."""

    def test_camel_case(self):
        options = validate_request("hdr", {"effectType": "dramatic", "toneMapping": "aces"})
        assert options.style == "dramatic"
        assert options.tone_mapping == "aces"

    def test_snake_case(self):
        options = validate_request("sharpen_blur", {"blur_amount": 40, "blur_type": "motion"})
        assert options.blur_amount == 40
        assert options.blur_type == "motion"

    def test_nested_alias(self):
        options = validate_request(
            "perspective", {"corners": {"topRight": {"x": 10, "y": 2}}}
        )
        assert options.corners.top_right.x == 10

    def test_unknown_keys_ignored(self):
        options = validate_request("restore", {"enhanceMode": "colorize", "sepiaLevel": 3})
        assert options.mode == "colorize"

    def test_style_label(self):
        assert validate_request("artistic", {"filterType": "sketch"}).style_label == "sketch"
        assert validate_request("color_balance", {}).style_label == "color_balance"


class TestRanges:
    """Out-of-range values are rejected, never clamped."""

    @pytest.mark.parametrize("family", ["hdr", "vintage", "artistic", "scratch_removal"])
    def test_intensity_bounds(self, family):
        for value in (0, 101):
            with pytest.raises(InvalidParameters) as exc_info:
                validate_request(family, {"intensity": value})
            assert exc_info.value.field == "intensity"
            assert exc_info.value.accepted == "in [1, 100]"
        for value in (1, 100):
            assert validate_request(family, {"intensity": value}).intensity == value

    def test_message(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("hdr", {"intensity": 101})
        assert str(exc_info.value) == "intensity must be in [1, 100]"

    def test_alias_error_reports_field_name(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("sharpen_blur", {"blurAmount": 150})
        assert exc_info.value.field == "blur_amount"
        assert exc_info.value.accepted == "in [0, 100]"

    def test_float_bounds_formatting(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("brightness_contrast", {"gamma": 5})
        assert exc_info.value.accepted == "in [0.1, 3]"

    def test_literal(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("hdr", {"toneMapping": "hable"})
        assert exc_info.value.field == "tone_mapping"
        assert exc_info.value.accepted.startswith("one of reinhard")

    def test_nested_field(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("perspective", {"corners": {"top_left": {"x": -1}}})
        assert exc_info.value.field == "corners.top_left.x"
        assert exc_info.value.accepted == ">= 0"

    def test_hex_color(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("artistic", {"borderColor": "white"})
        assert exc_info.value.field == "border_color"
        assert exc_info.value.accepted == "a #rrggbb hex color"

    def test_quality(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("vintage", {"quality": 0})
        assert exc_info.value.field == "quality"

    def test_output_format(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("hdr", {"outputFormat": "tiff"})
        assert exc_info.value.field == "output_format"


class TestResizeOptions:

    def test_requires_a_dimension(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("resize", {})
        assert exc_info.value.field == "width"

    def test_one_dimension_is_enough(self):
        assert validate_request("resize", {"height": 100}).height == 100

    def test_dimension_limit(self):
        with pytest.raises(InvalidParameters) as exc_info:
            validate_request("resize", {"width": 10001})
        assert exc_info.value.accepted == "in [1, 10000]"


class TestParseRequest:
    """Tests for the discriminated union entry point."""

    def test_selects_variant(self):
        assert isinstance(parse_request({"family": "hdr"}), HdrOptions)
        assert isinstance(parse_request({"family": "vintage", "vintageStyle": "noir"}), VintageOptions)
        assert isinstance(parse_request({"family": "resize", "width": 5}), ResizeOptions)
        assert isinstance(parse_request({"family": "perspective"}), PerspectiveOptions)

    def test_unknown_family(self):
        with pytest.raises(InvalidParameters):
            parse_request({"family": "nope"})

    def test_error_field_without_tag(self):
        with pytest.raises(InvalidParameters) as exc_info:
            parse_request({"family": "hdr", "intensity": 0})
        assert exc_info.value.field == "intensity"
