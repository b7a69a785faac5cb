"""Informational metrics derived from an effect request.

Metrics are pure functions of the validated options (plus the probed source
size for the geometry families). They never feed back into processing and
carry no ground truth; scores are bounded heuristics capped at 10.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..filters.geometry import estimate_angle, estimate_keystone, plan_resize
from .options import (
    ArtisticFilterOptions,
    BlackAndWhiteOptions,
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
    ARTISTIC_FILTERS,
    HDR_STYLES,
    RESTORE_FLAGS,
    RESTORE_MODES,
    RESTORE_STAGE_SCORES,
    SCRATCH_MODES,
    TONE_MAPPING_BONUS,
)

MAX_SCORE = 10.0

Size = Optional[tuple[int, int]]


def _score(value: float) -> float:
    return min(MAX_SCORE, round(value, 1))


def hdr_metrics(options: HdrOptions, size: Size = None) -> dict[str, float]:
    score = options.dynamic_range / 10
    score += HDR_STYLES[options.style].score_bonus
    score += TONE_MAPPING_BONUS[options.tone_mapping]
    score += (options.shadow_recovery + options.highlight_recovery) / 200
    score += options.intensity / 100
    return {"dynamic_range_score": _score(score)}


def vintage_metrics(options: VintageOptions, size: Size = None) -> dict[str, float]:
    return {
        "film_grain": float(options.film_grain),
        "color_shift": float(options.color_shift),
        "effect_intensity": float(options.intensity),
    }


def black_and_white_metrics(options: BlackAndWhiteOptions, size: Size = None) -> dict[str, float]:
    return {"grain": float(options.grain), "vignette": float(options.vignette)}


def sharpen_blur_metrics(options: SharpenBlurOptions, size: Size = None) -> dict[str, float]:
    return {
        "sharpen_amount": float(options.sharpen_amount),
        "blur_amount": float(options.blur_amount),
    }


def artistic_metrics(options: ArtisticFilterOptions, size: Size = None) -> dict[str, float]:
    score = 7.5 + ARTISTIC_FILTERS[options.filter]
    score += options.intensity / 100 * 0.5
    score += options.detail_level / 100 * 0.3
    score += options.color_saturation / 100 * 0.2
    if options.border_style != "none":
        score += 0.2
    if options.background_texture != "none":
        score += 0.2
    return {"artistic_score": _score(score), "effect_intensity": float(options.intensity)}


def no_metrics(options: EffectOptions, size: Size = None) -> dict[str, float]:
    return {}


def scratch_removal_metrics(options: ScratchRemovalOptions, size: Size = None) -> dict[str, float]:
    score = 7.0 + SCRATCH_MODES[options.mode].score_bonus
    if options.preserve_details:
        score += 0.5
    if options.enhance_texture:
        score += 0.3
    if options.reduce_noise:
        score += 0.2
    score += options.intensity / 100 * 0.5
    return {"repair_score": _score(score)}


def restore_stages(options: RestoreOptions) -> list[str]:
    """Distinct stage labels a restore request applies, in order."""
    stages = [RESTORE_MODES[options.mode][0]]
    for flag, label in RESTORE_FLAGS:
        if getattr(options, flag) and label not in stages:
            stages.append(label)
    return stages


def restore_metrics(options: RestoreOptions, size: Size = None) -> dict[str, float]:
    score = 7.5 + sum(RESTORE_STAGE_SCORES[s] for s in restore_stages(options))
    score += RESTORE_MODES[options.mode][1]
    return {"restoration_score": _score(score)}


def perspective_metrics(options: PerspectiveOptions, size: Size = None) -> dict[str, float]:
    if options.auto_detect or size is None:
        return {"correction_angle": 0.0, "keystone_correction": 0.0}
    c = options.corners
    angle = estimate_angle((c.top_left.x, c.top_left.y), (c.top_right.x, c.top_right.y))
    keystone = estimate_keystone(
        (c.top_left.x, c.top_left.y),
        (c.top_right.x, c.top_right.y),
        (c.bottom_left.x, c.bottom_left.y),
        (c.bottom_right.x, c.bottom_right.y),
        size[0],
    )
    return {"correction_angle": round(angle, 2), "keystone_correction": round(keystone, 2)}


def resize_metrics(options: ResizeOptions, size: Size = None) -> dict[str, float]:
    if size is None:
        return {}
    plan = plan_resize(
        size[0], size[1], options.width, options.height,
        options.maintain_aspect_ratio, options.resize_mode, enforce_limit=False,
    )
    output_pixels = plan.canvas_width * plan.canvas_height
    return {"compression_ratio": round(size[0] * size[1] / output_pixels, 2)}


METRICS: dict[str, Callable[..., dict[str, float]]] = {
    "hdr": hdr_metrics,
    "vintage": vintage_metrics,
    "black_and_white": black_and_white_metrics,
    "sharpen_blur": sharpen_blur_metrics,
    "artistic": artistic_metrics,
    "color_balance": no_metrics,
    "brightness_contrast": no_metrics,
    "scratch_removal": scratch_removal_metrics,
    "restore": restore_metrics,
    "perspective": perspective_metrics,
    "resize": resize_metrics,
}


def derive_metrics(options: EffectOptions, size: Size = None) -> dict[str, float]:
    """Metrics for a validated request.

    Args:
        options: Validated effect options
        size: Probed (width, height) of the source, needed by the geometry
            families

    Returns:
        Mapping of metric name to value
    """
    return METRICS[options.family](options, size)
