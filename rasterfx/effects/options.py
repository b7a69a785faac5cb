"""
Effect option models, one per effect family.

Each family is a frozen Pydantic v2 model carrying a ``family`` literal used
as the discriminator of the :data:`EffectRequest` union. Fields accept both
snake_case names and the camelCase aliases used by JSON clients, e.g.
``blur_amount`` or ``blurAmount``. Unknown keys are ignored.

Every numeric field declares its closed range; values outside it are
rejected, never clamped. :func:`validate_request` turns the first
validation failure into :class:`~rasterfx.exceptions.InvalidParameters`
naming the field and its accepted range:

    >>> validate_request("hdr", {"intensity": 101})
    Traceback (most recent call last):
    ...
    InvalidParameters: intensity must be in [1, 100]
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from annotated_types import Ge, Le
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator
from pydantic_core import PydanticCustomError

from ..exceptions import InvalidParameters

OutputFormat = Literal["png", "jpg", "jpeg", "webp"]
HexColor = Annotated[str, Field(pattern=r"^#[0-9a-fA-F]{6}$")]


class EffectOptions(BaseModel):
    """Fields shared by every effect family."""

    model_config = ConfigDict(
        # Accept snake_case and camelCase input
        populate_by_name=True,
        frozen=True,
        extra='ignore',
    )

    # Option naming the selected style, mode or filter, if the family has one
    STYLE_FIELD: ClassVar[Optional[str]] = None

    output_format: OutputFormat = Field(default="png", alias='outputFormat')
    quality: int = Field(default=95, ge=1, le=100)

    @property
    def style_label(self) -> str:
        """Selected style, mode or filter; the family name when there is none."""
        if self.STYLE_FIELD is None:
            return self.family
        return str(getattr(self, self.STYLE_FIELD))


# ============================================================================
# Tone / color families
# ============================================================================

class HdrOptions(EffectOptions):
    """HDR tone mapping and styling."""

    STYLE_FIELD: ClassVar[Optional[str]] = "style"

    family: Literal["hdr"] = "hdr"
    style: Literal[
        "natural", "dramatic", "cinematic", "surreal", "vivid", "moody", "landscape", "custom"
    ] = Field(default="natural", alias='effectType')
    intensity: float = Field(default=50, ge=1, le=100)
    dynamic_range: float = Field(default=50, ge=1, le=100, alias='dynamicRange')
    shadow_recovery: float = Field(default=50, ge=0, le=100, alias='shadowRecovery')
    highlight_recovery: float = Field(default=50, ge=0, le=100, alias='highlightRecovery')
    contrast: float = Field(default=0, ge=-100, le=100)
    saturation: float = Field(default=0, ge=-100, le=100)
    vibrance: float = Field(default=0, ge=0, le=100)
    clarity: float = Field(default=0, ge=0, le=100)
    glow: float = Field(default=0, ge=0, le=100)
    tone_mapping: Literal["reinhard", "filmic", "aces", "uncharted2"] = Field(
        default="reinhard", alias='toneMapping'
    )
    color_grading: bool = Field(default=False, alias='colorGrading')
    color_temperature: float = Field(default=0, ge=-100, le=100, alias='colorTemperature')
    color_tint: float = Field(default=0, ge=-100, le=100, alias='colorTint')


class ChannelOffsets(BaseModel):
    """Per-channel offsets for the custom vintage style."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    red: float = Field(default=0, ge=-100, le=100)
    green: float = Field(default=0, ge=-100, le=100)
    blue: float = Field(default=0, ge=-100, le=100)


class VintageOptions(EffectOptions):
    """Vintage film looks with grain, vignette, light leaks and borders."""

    STYLE_FIELD: ClassVar[Optional[str]] = "style"

    family: Literal["vintage"] = "vintage"
    quality: int = Field(default=90, ge=1, le=100)
    style: Literal[
        "classic", "sepia", "noir", "faded", "technicolor", "polaroid", "cinematic", "retro", "custom"
    ] = Field(default="classic", alias='vintageStyle')
    intensity: float = Field(default=70, ge=1, le=100)
    film_grain: float = Field(default=30, ge=0, le=100, alias='filmGrain')
    color_shift: float = Field(default=0, ge=-100, le=100, alias='colorShift')
    vignette: bool = True
    vignette_intensity: float = Field(default=50, ge=0, le=100, alias='vignetteIntensity')
    light_leak: bool = Field(default=False, alias='lightLeak')
    light_leak_type: Literal["none", "soft", "harsh", "random"] = Field(
        default="none", alias='lightLeakType'
    )
    scratches: bool = False
    color_balance: ChannelOffsets = Field(default_factory=ChannelOffsets, alias='colorBalance')
    contrast: float = Field(default=0, ge=-100, le=100)
    brightness: float = Field(default=0, ge=-100, le=100)
    saturation: float = Field(default=0, ge=-100, le=100)
    border: Literal["none", "white", "black", "film", "polaroid"] = "none"
    border_width: int = Field(default=20, ge=1, le=100, alias='borderWidth')


class BlackAndWhiteOptions(EffectOptions):
    """Monochrome conversion, film emulation and toning."""

    STYLE_FIELD: ClassVar[Optional[str]] = "mode"

    family: Literal["black_and_white"] = "black_and_white"
    mode: Literal["simple", "channel-mix", "tonal", "film", "custom"] = Field(
        default="simple", alias='conversionMode'
    )
    red_channel: float = Field(default=30, ge=-200, le=300, alias='redChannel')
    green_channel: float = Field(default=59, ge=-200, le=300, alias='greenChannel')
    blue_channel: float = Field(default=11, ge=-200, le=300, alias='blueChannel')
    contrast: float = Field(default=0, ge=-100, le=100)
    brightness: float = Field(default=0, ge=-100, le=100)
    highlights: float = Field(default=0, ge=-100, le=100)
    shadows: float = Field(default=0, ge=-100, le=100)
    grain: float = Field(default=0, ge=0, le=100)
    toning: Literal["none", "sepia", "selenium", "cyanotype", "platinum"] = "none"
    toning_intensity: float = Field(default=50, ge=0, le=100, alias='toningIntensity')
    vignette: float = Field(default=0, ge=0, le=100)
    film_type: Literal["tri-x", "hp5", "acros", "t-max", "delta"] = Field(
        default="tri-x", alias='filmType'
    )


class ColorBalanceOptions(EffectOptions):
    """Temperature, tint, hue, saturation and per-channel balance."""

    family: Literal["color_balance"] = "color_balance"
    temperature: float = Field(default=0, ge=-100, le=100)
    tint: float = Field(default=0, ge=-100, le=100)
    saturation: float = Field(default=0, ge=-100, le=100)
    vibrance: float = Field(default=0, ge=-100, le=100)
    hue: float = Field(default=0, ge=-180, le=180)
    red_balance: float = Field(default=0, ge=-100, le=100, alias='redBalance')
    green_balance: float = Field(default=0, ge=-100, le=100, alias='greenBalance')
    blue_balance: float = Field(default=0, ge=-100, le=100, alias='blueBalance')
    auto_white_balance: bool = Field(default=False, alias='autoWhiteBalance')
    auto_color_correction: bool = Field(default=False, alias='autoColorCorrection')


class BrightnessContrastOptions(EffectOptions):
    """Exposure and tonal adjustments."""

    family: Literal["brightness_contrast"] = "brightness_contrast"
    brightness: float = Field(default=0, ge=-100, le=100)
    contrast: float = Field(default=0, ge=-100, le=100)
    exposure: float = Field(default=0, ge=-2, le=2)
    highlights: float = Field(default=0, ge=-100, le=100)
    shadows: float = Field(default=0, ge=-100, le=100)
    gamma: float = Field(default=1.0, ge=0.1, le=3.0)
    saturation: float = Field(default=0, ge=-100, le=100)
    vibrance: float = Field(default=0, ge=-100, le=100)
    temperature: float = Field(default=0, ge=-100, le=100)
    tint: float = Field(default=0, ge=-100, le=100)
    auto_levels: bool = Field(default=False, alias='autoLevels')
    auto_contrast: bool = Field(default=False, alias='autoContrast')
    auto_color: bool = Field(default=False, alias='autoColor')


# ============================================================================
# Filter families
# ============================================================================

class SharpenBlurOptions(EffectOptions):
    """Sharpening, blur, edge enhancement and noise reduction."""

    STYLE_FIELD: ClassVar[Optional[str]] = "blur_type"

    family: Literal["sharpen_blur"] = "sharpen_blur"
    sharpen_amount: float = Field(default=0, ge=0, le=100, alias='sharpenAmount')
    sharpen_radius: float = Field(default=1.0, ge=0.1, le=5.0, alias='sharpenRadius')
    sharpen_threshold: float = Field(default=0, ge=0, le=255, alias='sharpenThreshold')
    blur_amount: float = Field(default=0, ge=0, le=100, alias='blurAmount')
    blur_type: Literal["gaussian", "motion", "radial", "surface"] = Field(
        default="gaussian", alias='blurType'
    )
    motion_angle: float = Field(default=0, ge=0, le=360, alias='motionAngle')
    motion_distance: float = Field(default=10, ge=1, le=50, alias='motionDistance')
    radial_center_x: float = Field(default=50, ge=0, le=100, alias='radialCenterX')
    radial_center_y: float = Field(default=50, ge=0, le=100, alias='radialCenterY')
    unsharp_mask: bool = Field(default=False, alias='unsharpMask')
    edge_enhancement: float = Field(default=0, ge=0, le=100, alias='edgeEnhancement')
    noise_reduction: float = Field(default=0, ge=0, le=100, alias='noiseReduction')
    preserve_details: bool = Field(default=False, alias='preserveDetails')
    smart_sharpen: bool = Field(default=False, alias='smartSharpen')


class ArtisticFilterOptions(EffectOptions):
    """Painterly renderers with optional texture and border."""

    STYLE_FIELD: ClassVar[Optional[str]] = "filter"

    family: Literal["artistic"] = "artistic"
    filter: Literal["oil", "watercolor", "sketch", "comic", "pointillism", "impressionist"] = Field(
        default="oil", alias='filterType'
    )
    intensity: float = Field(default=70, ge=1, le=100)
    detail_level: float = Field(default=50, ge=1, le=100, alias='detailLevel')
    color_saturation: float = Field(default=60, ge=1, le=100, alias='colorSaturation')
    brush_size: int = Field(default=30, ge=1, le=100, alias='brushSize')
    stroke_density: int = Field(default=50, ge=1, le=100, alias='strokeDensity')
    preserve_details: bool = Field(default=False, alias='preserveDetails')
    enhance_contrast: bool = Field(default=False, alias='enhanceContrast')
    border_style: Literal["none", "simple", "artistic", "frame"] = Field(
        default="none", alias='borderStyle'
    )
    border_color: HexColor = Field(default="#ffffff", alias='borderColor')
    border_width: int = Field(default=20, ge=1, le=100, alias='borderWidth')
    background_texture: Literal["none", "canvas", "paper", "rough"] = Field(
        default="none", alias='backgroundTexture'
    )


class ScratchRemovalOptions(EffectOptions):
    """Scratch and dust removal."""

    STYLE_FIELD: ClassVar[Optional[str]] = "mode"

    family: Literal["scratch_removal"] = "scratch_removal"
    mode: Literal["auto", "aggressive", "conservative", "manual"] = Field(
        default="auto", alias='detectionMode'
    )
    intensity: float = Field(default=50, ge=1, le=100)
    scratch_thickness: float = Field(default=3, ge=1, le=10, alias='scratchThickness')
    dust_size: float = Field(default=2, ge=0, le=10, alias='dustSize')
    preserve_details: bool = Field(default=True, alias='preserveDetails')
    enhance_texture: bool = Field(default=False, alias='enhanceTexture')
    reduce_noise: bool = Field(default=False, alias='reduceNoise')


class RestoreOptions(EffectOptions):
    """Old photo restoration."""

    STYLE_FIELD: ClassVar[Optional[str]] = "mode"

    family: Literal["restore"] = "restore"
    mode: Literal["auto", "colorize", "enhance", "repair"] = Field(default="auto", alias='enhanceMode')
    colorize_strength: float = Field(default=50, ge=1, le=100, alias='colorizeStrength')
    enhance_details: bool = Field(default=False, alias='enhanceDetails')
    repair_damage: bool = Field(default=False, alias='repairDamage')
    remove_noise: bool = Field(default=False, alias='removeNoise')
    sharpen_image: bool = Field(default=False, alias='sharpenImage')
    enhance_contrast: bool = Field(default=False, alias='enhanceContrast')


# ============================================================================
# Geometry families
# ============================================================================

class Point(BaseModel):
    """Corner position in source pixels."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    x: float = Field(default=0, ge=0)
    y: float = Field(default=0, ge=0)


class Corners(BaseModel):
    """The four marked corners of the distorted quadrilateral."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra='ignore')

    top_left: Point = Field(default_factory=Point, alias='topLeft')
    top_right: Point = Field(default_factory=Point, alias='topRight')
    bottom_left: Point = Field(default_factory=Point, alias='bottomLeft')
    bottom_right: Point = Field(default_factory=Point, alias='bottomRight')


class PerspectiveOptions(EffectOptions):
    """Perspective (tilt and keystone) correction."""

    STYLE_FIELD: ClassVar[Optional[str]] = "interpolation"

    family: Literal["perspective"] = "perspective"
    corners: Corners = Field(default_factory=Corners)
    output_width: Optional[int] = Field(default=None, ge=1, le=10000, alias='outputWidth')
    output_height: Optional[int] = Field(default=None, ge=1, le=10000, alias='outputHeight')
    auto_detect: bool = Field(default=False, alias='autoDetect')
    grid_overlay: bool = Field(default=False, alias='gridOverlay')
    interpolation: Literal["bilinear", "bicubic", "nearest"] = "bilinear"


class ResizeOptions(EffectOptions):
    """Resize with fit/fill/cover/contain/stretch modes."""

    STYLE_FIELD: ClassVar[Optional[str]] = "resize_mode"

    family: Literal["resize"] = "resize"
    quality: int = Field(default=90, ge=1, le=100)
    width: Optional[int] = Field(default=None, ge=1, le=10000)
    height: Optional[int] = Field(default=None, ge=1, le=10000)
    maintain_aspect_ratio: bool = Field(default=True, alias='maintainAspectRatio')
    resize_mode: Literal["fit", "fill", "cover", "contain", "stretch"] = Field(
        default="fit", alias='resizeMode'
    )
    ai_upscaling: bool = Field(default=False, alias='aiUpscaling')
    upscale_algorithm: Literal["lanczos", "cubic", "linear", "nearest"] = Field(
        default="lanczos", alias='upscaleAlgorithm'
    )
    sharpen_amount: float = Field(default=0, ge=0, le=10, alias='sharpenAmount')
    noise_reduction: bool = Field(default=False, alias='noiseReduction')

    @model_validator(mode='after')
    def _require_dimension(self) -> "ResizeOptions":
        if self.width is None and self.height is None:
            raise PydanticCustomError(
                'missing_dimension',
                'width or height is required',
                {'field': 'width', 'accepted': 'given when height is not'},
            )
        return self


# ============================================================================
# Request union and validation
# ============================================================================

EffectRequest = Annotated[
    Union[
        HdrOptions,
        VintageOptions,
        BlackAndWhiteOptions,
        SharpenBlurOptions,
        ArtisticFilterOptions,
        ColorBalanceOptions,
        BrightnessContrastOptions,
        ScratchRemovalOptions,
        RestoreOptions,
        PerspectiveOptions,
        ResizeOptions,
    ],
    Field(discriminator="family"),
]

FAMILY_MODELS: dict[str, type[EffectOptions]] = {
    model.model_fields["family"].default: model
    for model in (
        HdrOptions,
        VintageOptions,
        BlackAndWhiteOptions,
        SharpenBlurOptions,
        ArtisticFilterOptions,
        ColorBalanceOptions,
        BrightnessContrastOptions,
        ScratchRemovalOptions,
        RestoreOptions,
        PerspectiveOptions,
        ResizeOptions,
    )
}

FAMILIES = tuple(FAMILY_MODELS)

_request_adapter = TypeAdapter(EffectRequest)


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _field_info(model: type[BaseModel], loc: tuple) -> tuple[str, Any]:
    """Resolve an error location to (dotted field name, FieldInfo or None)."""
    names = []
    info = None
    current: Any = model
    for part in loc:
        if not isinstance(part, str):
            continue
        fields = getattr(current, "model_fields", None)
        if not fields:
            break
        key = part
        if key not in fields:
            key = next((n for n, f in fields.items() if f.alias == part), part)
        info = fields.get(key)
        names.append(key)
        if info is None:
            break
        current = info.annotation
    return ".".join(names), info


def describe_accepted(info: Any) -> str:
    """Human-readable accepted values for a model field."""
    if info is None:
        return "valid"
    lo = hi = None
    for meta in info.metadata:
        if isinstance(meta, Ge):
            lo = meta.ge
        elif isinstance(meta, Le):
            hi = meta.le
    if lo is not None and hi is not None:
        return f"in [{_format_number(lo)}, {_format_number(hi)}]"
    if lo is not None:
        return f">= {_format_number(lo)}"
    annotation = info.annotation
    args = getattr(annotation, "__args__", ())
    if getattr(annotation, "__origin__", None) is Literal:
        return "one of " + ", ".join(str(a) for a in args)
    if annotation is bool:
        return "a boolean"
    if any(getattr(m, "pattern", None) for m in info.metadata):
        return "a #rrggbb hex color"
    return "valid"


def _to_invalid_parameters(model: type[BaseModel], exc: ValidationError, skip: int = 0) -> InvalidParameters:
    error = exc.errors()[0]
    ctx = error.get("ctx") or {}
    if "field" in ctx:
        return InvalidParameters(ctx["field"], ctx["accepted"], error["msg"])
    field, info = _field_info(model, tuple(error["loc"])[skip:])
    return InvalidParameters(field or "options", describe_accepted(info))


def validate_request(family: str, data: Optional[dict[str, Any]] = None) -> EffectOptions:
    """Validate raw options for a family.

    Args:
        family: Effect family name, e.g. ``"hdr"`` or ``"resize"``
        data: Option values by snake_case name or camelCase alias

    Returns:
        The frozen options model for the family

    Raises:
        InvalidParameters: For an unknown family or the first invalid option
    """
    model = FAMILY_MODELS.get(family)
    if model is None:
        raise InvalidParameters("family", "one of " + ", ".join(FAMILIES))
    payload = dict(data or {})
    payload["family"] = family
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise _to_invalid_parameters(model, e) from e


def parse_request(data: dict[str, Any]) -> EffectOptions:
    """Validate a request whose ``family`` key selects the variant."""
    family = data.get("family")
    if family not in FAMILY_MODELS:
        raise InvalidParameters("family", "one of " + ", ".join(FAMILIES))
    try:
        return _request_adapter.validate_python(data)
    except ValidationError as e:
        # Union errors are located under the discriminator tag first
        raise _to_invalid_parameters(FAMILY_MODELS[family], e, skip=1) from e
