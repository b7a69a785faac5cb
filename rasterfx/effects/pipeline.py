"""Per-family effect pipelines for the software backend.

Each family is a function ``(buffer, options, rng) -> EffectResult`` built
from the filters in :mod:`rasterfx.filters`. Per-style differences come from
the tables in :mod:`rasterfx.effects.styles`; the functions here contain the
generic composition only.

Pipelines have no hidden state. Identical inputs give identical outputs, with
one exception: grain is drawn from ``rng``, which is unseeded unless the
caller passes one. Every other random placement (light-leak corner, overlay
scratches, brush strokes, dots, textures) uses a generator seeded from the
image shape.

Usage:
    from rasterfx.effects.pipeline import run_pipeline
    from rasterfx.effects.options import validate_request

    options = validate_request("vintage", {"vintageStyle": "sepia"})
    result = run_pipeline(buffer, options)
    result.buffer, result.details
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from ..filters import blur, color, geometry, repair, stylize, texture, tone
from ..filters.channels import LUMA_WEIGHTS, luminance, merge_alpha, split_alpha
from ..filters.kernels import EDGE, SHARPEN, UNSHARP, convolve, sharpen_kernel
from ..pixel_buffer import PixelBuffer
from .metrics import restore_stages
from .options import (
    FAMILY_MODELS,
    ArtisticFilterOptions,
    BlackAndWhiteOptions,
    BrightnessContrastOptions,
    ColorBalanceOptions,
    EffectOptions,
    HdrOptions,
    PerspectiveOptions,
    ResizeOptions,
    RestoreOptions,
    ScratchRemovalOptions,
    SharpenBlurOptions,
    VintageOptions,
)
from .styles import (
    BW_MODES,
    COLORIZE_OFFSETS,
    FILM_FALLBACK_WEIGHTS,
    GRADE_DIVISORS,
    HDR_STYLES,
    RESTORE_FLAGS,
    SCRATCH_MODES,
    VINTAGE_BORDERS,
    VINTAGE_STYLES,
    VintageStep,
)

logger = logging.getLogger(__name__)


@dataclass
class EffectResult:
    """Processed buffer plus human-readable notes about what was applied."""

    buffer: PixelBuffer
    details: list[str] = field(default_factory=list)


def _round(value: float) -> int:
    """Round half up, matching pixel-grid rounding elsewhere."""
    return int(math.floor(value + 0.5))


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def _signed(value: float) -> str:
    return f"{value:+g}"


# ============================================================================
# HDR
# ============================================================================

def _grade(image: np.ndarray, divisors: tuple) -> np.ndarray:
    """Split-tone: push shadows toward blue/green and highlights toward red."""
    shadow_blue, shadow_green, highlight_red = divisors
    rgb, alpha = split_alpha(image)
    lum = luminance(rgb)
    shadows = lum < 128
    highlights = lum > 128
    rgb[:, :, 2] += np.where(shadows, (128.0 - lum) / shadow_blue, 0.0)
    if shadow_green:
        rgb[:, :, 1] += np.where(shadows, (128.0 - lum) / shadow_green, 0.0)
    rgb[:, :, 0] += np.where(highlights, (lum - 128.0) / highlight_red, 0.0)
    return merge_alpha(rgb, alpha)


def _boost_dominant(image: np.ndarray, factor: float = 1.1) -> np.ndarray:
    """Scale the blue or green channel of pixels where it dominates."""
    rgb, alpha = split_alpha(image)
    r, g, b = rgb[:, :, 0], rgb[:, :, 1], rgb[:, :, 2]
    blue_wins = (b > r) & (b > g)
    green_wins = (g > r) & (g > b)
    rgb[:, :, 2] = np.where(blue_wins, b * factor, b)
    rgb[:, :, 1] = np.where(green_wins, g * factor, g)
    return merge_alpha(rgb, alpha)


def _hdr_extra(image: np.ndarray, extra: Optional[str], options: HdrOptions) -> np.ndarray:
    if extra is None:
        return image
    if extra in GRADE_DIVISORS:
        return _grade(image, GRADE_DIVISORS[extra])
    if extra == "surreal":
        return tone.scale_channels(image, 1.1, 1.0, 1.1)
    if extra == "vibrance":
        return color.vibrance(image, options.vibrance / 100)
    if extra == "landscape":
        return _boost_dominant(image)
    if extra == "custom":
        image = color.vibrance(image, options.vibrance / 100)
        return color.temperature_tint_scale(
            image, options.color_temperature / 100, options.color_tint / 100
        )
    raise ValueError(f"Unknown HDR grade: {extra}")


def hdr_pipeline(buffer: PixelBuffer, options: HdrOptions, rng=None) -> EffectResult:
    style = HDR_STYLES[options.style]
    intensity = options.intensity / 100
    img = tone.tone_map(buffer.samples, options.tone_mapping, options.dynamic_range / 100)
    img = tone.recover_shadows_highlights(
        img,
        options.shadow_recovery / 100,
        options.highlight_recovery / 100,
        intensity,
        style.shadow_mult,
        style.highlight_mult,
    )
    img = tone.scale_contrast(img, style.contrast(options.contrast))
    img = color.saturation(img, style.saturation(options.saturation) - 1.0)
    img = _hdr_extra(img, style.extra, options)
    if options.color_grading:
        img = color.temperature_tint_scale(
            img, options.color_temperature / 100, options.color_tint / 100
        )
    if options.clarity > 0:
        img = convolve(img, UNSHARP, options.clarity / 100 * 0.5)
    if options.glow > 0:
        img = texture.glow(img, options.glow / 100)
    details = [f"Style {options.style}", f"Tone mapping {options.tone_mapping}"]
    return EffectResult(buffer.replace(img), details)


# ============================================================================
# Vintage
# ============================================================================

def _vintage_step(image: np.ndarray, step: VintageStep) -> np.ndarray:
    if step.op == "sepia":
        return color.sepia(image, step.value)
    if step.op == "gray":
        return color.channel_mix(image, LUMA_WEIGHTS)
    if step.op == "saturation":
        return color.saturation(image, step.value[0] - 1.0)
    if step.op == "scale":
        return tone.scale_channels(image, *step.value)
    if step.op == "contrast":
        return tone.scale_contrast(image, step.value[0])
    if step.op == "offset":
        return color.offset_channels(image, *step.value)
    if step.op == "split_scale":
        rgb, alpha = split_alpha(image)
        bright = (luminance(rgb) > 128)[:, :, None]
        factors = np.where(
            bright,
            np.array(step.value, dtype=np.float32),
            np.array(step.alt, dtype=np.float32),
        )
        return merge_alpha(rgb * factors, alpha)
    raise ValueError(f"Unknown vintage step: {step.op}")


def _custom_vintage(image: np.ndarray, options: VintageOptions) -> np.ndarray:
    img = color.saturation(image, options.saturation / 100)
    img = color.offset_channels(img, *([255 * options.brightness / 100] * 3))
    img = tone.scale_contrast(img, 1 + options.contrast / 100)
    balance = options.color_balance
    img = color.offset_channels(img, balance.red, balance.green, balance.blue)
    shift = options.color_shift / 100
    return tone.scale_channels(img, 1 + 0.2 * shift, 1.0, 1 - 0.2 * shift)


def vintage_pipeline(buffer: PixelBuffer, options: VintageOptions, rng=None) -> EffectResult:
    original = buffer.samples
    if options.style == "custom":
        styled = _custom_vintage(original, options)
    else:
        styled = original
        for step in VINTAGE_STYLES[options.style]:
            styled = _vintage_step(styled, step)

    amount = options.intensity / 100
    rgb, alpha = split_alpha(original)
    styled_rgb, _ = split_alpha(styled)
    img = merge_alpha(rgb * (1 - amount) + styled_rgb * amount, alpha)
    details = [f"Style {options.style}"]

    if options.vignette:
        img = texture.film_vignette(img, options.vignette_intensity)
        details.append("Vignette")
    if options.film_grain > 0:
        img = texture.film_grain(img, options.film_grain / 100, rng)
        details.append("Film grain")
    if options.light_leak and options.light_leak_type != "none":
        img = texture.light_leak(img, options.light_leak_type, texture.shape_rng(img, 3))
        details.append(f"Light leak {options.light_leak_type}")
    if options.scratches:
        img = texture.scratch_overlay(img, texture.shape_rng(img, 2))
        details.append("Scratches")
    if options.border != "none":
        fill, bottom_mult = VINTAGE_BORDERS[options.border]
        width = options.border_width
        img = texture.add_border(img, width, fill, bottom=width * bottom_mult)
        details.append(f"Border {options.border}")
    return EffectResult(buffer.replace(img), details)


# ============================================================================
# Black & white
# ============================================================================

def _bw_weights(options: BlackAndWhiteOptions) -> tuple[float, float, float]:
    source = BW_MODES[options.mode].weights
    if source == "options":
        return options.red_channel, options.green_channel, options.blue_channel
    if source == "film":
        return color.FILM_PROFILES.get(options.film_type, FILM_FALLBACK_WEIGHTS)
    return LUMA_WEIGHTS


def black_and_white_pipeline(buffer: PixelBuffer, options: BlackAndWhiteOptions, rng=None) -> EffectResult:
    img = color.channel_mix(buffer.samples, _bw_weights(options))
    details = [f"Mode {options.mode}"]
    for adjustment in BW_MODES[options.mode].adjustments:
        if adjustment == "contrast" and options.contrast:
            img = tone.contrast(img, options.contrast)
            details.append(f"Contrast {_signed(options.contrast)}")
        elif adjustment == "brightness" and options.brightness:
            img = tone.brightness(img, options.brightness)
            details.append(f"Brightness {_signed(options.brightness)}")
        elif adjustment == "tonal" and (options.shadows or options.highlights):
            img = tone.shadows_highlights(img, options.shadows, options.highlights)
            details.append("Tonal adjustment")
    if options.vignette > 0:
        img = texture.soft_vignette(img, options.vignette)
    if options.grain > 0:
        img = texture.mono_grain(img, options.grain / 100, rng)
    if options.toning != "none":
        img = color.apply_toning(img, options.toning, options.toning_intensity / 100)
        details.append(f"Toning {options.toning}")
    return EffectResult(buffer.replace(img), details)


# ============================================================================
# Sharpen / Blur
# ============================================================================

def sharpen_blur_pipeline(buffer: PixelBuffer, options: SharpenBlurOptions, rng=None) -> EffectResult:
    img = buffer.samples
    details = []
    if options.sharpen_amount > 0:
        kernel = UNSHARP if options.unsharp_mask else SHARPEN
        img = convolve(img, kernel, options.sharpen_amount / 100)
        details.append(f"Sharpen {options.sharpen_amount:g}")

    radius = _round(options.blur_amount / 100 * 10)
    if radius > 0:
        if options.blur_type == "gaussian":
            img = blur.gaussian_blur(img, radius)
        elif options.blur_type == "motion":
            img = blur.motion_blur(img, options.motion_angle, options.motion_distance)
        elif options.blur_type == "radial":
            img = blur.radial_blur(img, radius, options.radial_center_x, options.radial_center_y)
        else:
            img = blur.surface_blur(img, radius)
        details.append(f"Blur {options.blur_type} {options.blur_amount:g}")

    if options.edge_enhancement > 0:
        img = convolve(img, EDGE, options.edge_enhancement / 100)
        details.append(f"Edge enhancement {options.edge_enhancement:g}")
    median_radius = _round(options.noise_reduction / 100 * 3)
    if median_radius > 0:
        img = repair.median_filter(img, median_radius)
        details.append(f"Noise reduction {options.noise_reduction:g}")
    if options.preserve_details:
        img = repair.preserve_details(img)
        details.append("Detail preservation")
    return EffectResult(buffer.replace(img), details)


# ============================================================================
# Artistic
# ============================================================================

def artistic_pipeline(buffer: PixelBuffer, options: ArtisticFilterOptions, rng=None) -> EffectResult:
    params = stylize.ArtisticParams(
        intensity=options.intensity / 100,
        saturation=options.color_saturation / 100,
        brush_size=options.brush_size,
        stroke_density=options.stroke_density,
    )
    img = stylize.render(buffer.samples, options.filter, params, texture.shape_rng(buffer.samples))
    details = [f"Filter {options.filter}"]
    if options.preserve_details:
        img = repair.preserve_details(img)
        details.append("Detail preservation")
    if options.enhance_contrast:
        img = tone.scale_contrast(img, 1.2)
        details.append("Contrast enhancement")
    if options.background_texture != "none":
        img = texture.background_texture(img, options.background_texture, texture.shape_rng(img, 1))
        details.append(f"Texture {options.background_texture}")
    if options.border_style != "none":
        border_color = texture.parse_hex_color(options.border_color)
        img = texture.styled_border(img, options.border_style, options.border_width, border_color)
        details.append(f"Border {options.border_style}")
    return EffectResult(buffer.replace(img), details)


# ============================================================================
# Color balance / Brightness & contrast
# ============================================================================

def color_balance_pipeline(buffer: PixelBuffer, options: ColorBalanceOptions, rng=None) -> EffectResult:
    img = buffer.samples
    details = []
    if options.auto_white_balance:
        img = color.auto_white_balance(img)
        details.append("Auto white balance")
    if options.temperature:
        img = color.shift_temperature(img, options.temperature / 100, 40, 20, 40)
        details.append(f"Temperature {_signed(options.temperature)}")
    if options.tint:
        img = color.shift_tint(img, options.tint / 100, 25)
        details.append(f"Tint {_signed(options.tint)}")
    if options.hue:
        img = color.hue_rotate(img, options.hue)
        details.append(f"Hue {_signed(options.hue)}°")
    if options.saturation:
        img = color.saturation(img, options.saturation / 100)
        details.append(f"Saturation {_signed(options.saturation)}")
    if options.vibrance:
        img = color.vibrance_toward_max(img, options.vibrance / 100)
        details.append(f"Vibrance {_signed(options.vibrance)}")
    balance = (options.red_balance, options.green_balance, options.blue_balance)
    if any(balance):
        img = color.offset_channels(img, *(b / 100 * 50 for b in balance))
        for name, value in zip(("Red", "Green", "Blue"), balance):
            if value:
                details.append(f"{name} {_signed(value)}")
    if options.auto_color_correction:
        img = tone.scale_contrast(img, 1.1)
        img = color.saturation(img, 0.1)
        details.append("Auto color correction")
    return EffectResult(buffer.replace(img), details)


def brightness_contrast_pipeline(buffer: PixelBuffer, options: BrightnessContrastOptions, rng=None) -> EffectResult:
    img = buffer.samples
    details = []
    if options.auto_levels:
        img = tone.auto_levels(img)
        details.append("Auto levels")
    if options.auto_contrast:
        img = tone.auto_contrast(img)
        details.append("Auto contrast")
    if options.auto_color:
        img = color.auto_white_balance(img)
        details.append("Auto color")
    if options.brightness:
        img = tone.brightness(img, options.brightness)
        details.append(f"Brightness {_signed(options.brightness)}")
    if options.contrast:
        img = tone.contrast(img, options.contrast)
        details.append(f"Contrast {_signed(options.contrast)}")
    if options.gamma != 1.0:
        img = tone.gamma(img, options.gamma)
        details.append(f"Gamma {options.gamma:.2f}")
    if options.exposure:
        img = tone.exposure(img, options.exposure)
        details.append(f"Exposure {options.exposure:+.1f}EV")
    if options.highlights or options.shadows:
        img = tone.shadows_highlights(img, options.shadows, options.highlights)
        if options.highlights:
            details.append(f"Highlights {_signed(options.highlights)}")
        if options.shadows:
            details.append(f"Shadows {_signed(options.shadows)}")
    if options.saturation:
        img = color.saturation(img, options.saturation / 100)
        details.append(f"Saturation {_signed(options.saturation)}")
    if options.vibrance:
        img = color.vibrance(img, options.vibrance / 100)
        details.append(f"Vibrance {_signed(options.vibrance)}")
    if options.temperature:
        img = color.shift_temperature(img, options.temperature / 100, 30, 15, 30)
        details.append(f"Temperature {_signed(options.temperature)}")
    if options.tint:
        img = color.shift_tint(img, options.tint / 100, 20)
        details.append(f"Tint {_signed(options.tint)}")
    return EffectResult(buffer.replace(img), details)


# ============================================================================
# Scratch removal / Restore
# ============================================================================

def scratch_removal_pipeline(buffer: PixelBuffer, options: ScratchRemovalOptions, rng=None) -> EffectResult:
    mode = SCRATCH_MODES[options.mode]
    strength = options.intensity / 100
    defects = repair.count_defects(buffer.samples)

    radius = _clamp(_round(options.scratch_thickness * mode.scale), mode.lo, mode.hi)
    img = repair.median_filter(buffer.samples, radius)
    if mode.follow_up == "inpaint":
        img = repair.inpaint_scratches(img, strength)
    elif mode.follow_up == "edge_preserve":
        img = repair.edge_preserving_filter(img, strength)
    elif mode.follow_up == "contrast":
        img = tone.scale_contrast(img, 1 + 0.2 * strength)
    else:
        img = repair.content_aware_repair(img, strength)
    details = [f"Scratch removal ({options.mode})", f"Defects detected: {defects}"]

    if options.dust_size > 0:
        img = repair.median_filter(img, _clamp(_round(options.dust_size * 0.5), 1, 3))
        details.append("Dust removal")
    if options.preserve_details:
        img = repair.preserve_details(img)
        details.append("Detail preservation")
    if options.enhance_texture:
        img = convolve(img, SHARPEN, 0.7)
        details.append("Texture enhancement")
    if options.reduce_noise:
        img = repair.median_filter(img, 1)
        details.append("Noise reduction")
    return EffectResult(buffer.replace(img), details)


def _colorize(image: np.ndarray, strength: float) -> np.ndarray:
    rgb, alpha = split_alpha(image)
    gray = luminance(rgb)[:, :, None]
    offsets = np.array(COLORIZE_OFFSETS, dtype=np.float32) * strength
    return merge_alpha(gray + offsets, alpha)


_RESTORE_MODES: dict[str, Callable[[np.ndarray, RestoreOptions], np.ndarray]] = {
    "colorize": lambda img, o: _colorize(img, o.colorize_strength / 100),
    "enhance": lambda img, o: convolve(img, UNSHARP),
    "repair": lambda img, o: repair.median_filter(img, 1),
    "auto": lambda img, o: convolve(tone.auto_levels(img), sharpen_kernel(0.5)),
}

_RESTORE_FLAG_STAGES: dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "enhance_details": repair.preserve_details,
    "repair_damage": lambda img: repair.inpaint_scratches(img, 0.8),
    "remove_noise": lambda img: repair.median_filter(img, 1),
    "sharpen_image": lambda img: convolve(img, sharpen_kernel(1.0), 0.5),
    "enhance_contrast": lambda img: tone.scale_contrast(img, 1.2, pivot=None),
}


def restore_pipeline(buffer: PixelBuffer, options: RestoreOptions, rng=None) -> EffectResult:
    img = _RESTORE_MODES[options.mode](buffer.samples, options)
    for flag, _label in RESTORE_FLAGS:
        if getattr(options, flag):
            img = _RESTORE_FLAG_STAGES[flag](img)
    return EffectResult(buffer.replace(img), restore_stages(options))


# ============================================================================
# Geometry
# ============================================================================

def perspective_pipeline(buffer: PixelBuffer, options: PerspectiveOptions, rng=None) -> EffectResult:
    w, h = buffer.dimensions
    if options.auto_detect:
        angle, keystone = 0.0, 0.0
    else:
        c = options.corners
        tl, tr = (c.top_left.x, c.top_left.y), (c.top_right.x, c.top_right.y)
        bl, br = (c.bottom_left.x, c.bottom_left.y), (c.bottom_right.x, c.bottom_right.y)
        angle = geometry.estimate_angle(tl, tr)
        keystone = geometry.estimate_keystone(tl, tr, bl, br, w)
    img = geometry.perspective_correct(
        buffer.samples, angle, keystone,
        options.output_width, options.output_height, options.interpolation,
    )
    details = [f"Rotation {angle:.2f}°", f"Keystone {keystone:.2f}"]
    if options.grid_overlay:
        img = geometry.grid_overlay(img)
        details.append("Grid overlay")
    return EffectResult(buffer.replace(img), details)


def resize_pipeline(buffer: PixelBuffer, options: ResizeOptions, rng=None) -> EffectResult:
    w, h = buffer.dimensions
    plan = geometry.plan_resize(
        w, h, options.width, options.height, options.maintain_aspect_ratio, options.resize_mode
    )
    img = geometry.render_resize(buffer.samples, plan, options.upscale_algorithm)
    details = [f"Resize {w}x{h} -> {plan.canvas_width}x{plan.canvas_height} ({plan.mode})"]
    scale = max(plan.scaled_width / w, plan.scaled_height / h)
    if options.ai_upscaling and scale > 1.5:
        img = convolve(img, SHARPEN, 0.3)
        details.append("Upscale sharpening")
    if options.sharpen_amount > 0:
        img = convolve(img, SHARPEN, options.sharpen_amount / 10)
        details.append(f"Sharpen {options.sharpen_amount:g}")
    if options.noise_reduction:
        img = repair.median_filter(img, 1)
        details.append("Noise reduction")
    return EffectResult(buffer.replace(img), details)


# ============================================================================
# Dispatch
# ============================================================================

PIPELINES: dict[str, Callable[..., EffectResult]] = {
    "hdr": hdr_pipeline,
    "vintage": vintage_pipeline,
    "black_and_white": black_and_white_pipeline,
    "sharpen_blur": sharpen_blur_pipeline,
    "artistic": artistic_pipeline,
    "color_balance": color_balance_pipeline,
    "brightness_contrast": brightness_contrast_pipeline,
    "scratch_removal": scratch_removal_pipeline,
    "restore": restore_pipeline,
    "perspective": perspective_pipeline,
    "resize": resize_pipeline,
}

_unmapped = set(FAMILY_MODELS) ^ set(PIPELINES)
if _unmapped:
    raise RuntimeError(f"Effect families without a pipeline: {sorted(_unmapped)}")


def run_pipeline(
    buffer: PixelBuffer,
    options: EffectOptions,
    rng: Optional[np.random.Generator] = None,
) -> EffectResult:
    """Run the pipeline for ``options.family`` on a buffer.

    Args:
        buffer: Decoded source image
        options: Validated effect options
        rng: Generator for grain; a fresh unseeded one when omitted

    Returns:
        EffectResult with the new buffer and applied-stage notes
    """
    start = time.perf_counter()
    result = PIPELINES[options.family](buffer, options, rng)
    elapsed = (time.perf_counter() - start) * 1000
    logger.debug(
        f"{options.family} pipeline on {buffer.width}x{buffer.height}: "
        f"{elapsed:.1f}ms -> {result.buffer.width}x{result.buffer.height}"
    )
    return result
