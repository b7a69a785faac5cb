"""Tone mapping and tonal adjustments.

This module provides:
- Tone-mapping operators (Reinhard, Filmic, ACES, Uncharted2)
- Brightness, Contrast, Gamma, Exposure
- Shadow/highlight adjustments (tonal and HDR recovery forms)
- Auto levels and auto contrast
- Histogram

## Tone Operators

Operators are pure functions of a float (or numpy array) in [0, 1]:

| Operator | Formula |
|----------|---------|
| reinhard | x / (x + k) |
| filmic | f(x) / f(1.0) |
| aces | x(ax + c) / (x(ax + d) + e*f) |
| uncharted2 | f(x) / f(11.2) |

where ``f(x) = (x(Ax + CB) + DE) / (x(Ax + B) + DF) - E/F``.

## Input Format

Image functions accept numpy uint8 arrays shaped (H, W, 3) or (H, W, 4) and
return uint8 arrays of the same shape with alpha unchanged.

Usage:
    from rasterfx.filters.tone import tone_map, contrast, auto_levels

    result = tone_map(rgba_image, "aces")
    result = contrast(rgba_image, 25)
"""
from __future__ import annotations

import numpy as np
from skimage import exposure as sk_exposure

from .channels import check_image, luminance, merge_alpha, split_alpha, to_uint8

# Filmic curve constants
FILMIC_A = 0.15  # Shoulder strength
FILMIC_B = 0.50  # Linear strength
FILMIC_C = 0.10  # Linear angle
FILMIC_D = 0.20  # Toe strength
FILMIC_E = 0.02  # Toe numerator
FILMIC_F = 0.30  # Toe denominator

# ACES approximation constants
ACES_A = 2.51
ACES_C = 1.43
ACES_D = 0.94
ACES_E = 0.59
ACES_F = 0.14

UNCHARTED2_WHITE = 11.2


# ============================================================================
# Tone Operators
# ============================================================================

def reinhard(x, k: float = 1.0):
    """Reinhard operator x / (x + k)."""
    return x / (x + k)


def filmic_curve(x):
    """Hable filmic rational curve."""
    a, b, c, d, e, f = FILMIC_A, FILMIC_B, FILMIC_C, FILMIC_D, FILMIC_E, FILMIC_F
    return (x * (a * x + c * b) + d * e) / (x * (a * x + b) + d * f) - e / f


def filmic(x):
    """Filmic curve normalized by its value at white point 1.0."""
    return filmic_curve(x) / filmic_curve(1.0)


def aces(x):
    """ACES-style rational approximation."""
    return (x * (ACES_A * x + ACES_C)) / (x * (ACES_A * x + ACES_D) + ACES_E * ACES_F)


def uncharted2(x):
    """Filmic curve normalized at white point W = 11.2."""
    return filmic_curve(x) / filmic_curve(UNCHARTED2_WHITE)


TONE_OPERATORS = {
    "reinhard": reinhard,
    "filmic": filmic,
    "aces": aces,
    "uncharted2": uncharted2,
}


def tone_map(image: np.ndarray, operator: str = "reinhard", k: float = 1.0) -> np.ndarray:
    """Apply a tone-mapping operator per color channel.

    Args:
        image: RGB/RGBA uint8 array
        operator: reinhard, filmic, aces or uncharted2
        k: Reinhard key (ignored by the other operators)

    Returns:
        Tone-mapped uint8 array
    """
    if operator not in TONE_OPERATORS:
        raise ValueError(f"Unknown tone operator: {operator}")
    rgb, alpha = split_alpha(image)
    x = rgb / 255.0
    if operator == "reinhard":
        mapped = reinhard(x, k)
    else:
        mapped = TONE_OPERATORS[operator](x)
    return merge_alpha(np.clip(mapped, 0.0, 1.0) * 255.0, alpha)


# ============================================================================
# Brightness / Contrast / Gamma / Exposure
# ============================================================================

def brightness(image: np.ndarray, amount: float) -> np.ndarray:
    """Shift brightness by ``amount * 2.55`` levels.

    Args:
        image: RGB/RGBA uint8 array
        amount: -100 to 100, 0 = no change
    """
    rgb, alpha = split_alpha(image)
    return merge_alpha(rgb + amount * 2.55, alpha)


def contrast_factor_255(amount: float) -> float:
    """Classic 259-based contrast factor for ``amount`` in [-255, 255]."""
    return (259.0 * (amount + 255.0)) / (255.0 * (259.0 - amount))


def contrast(image: np.ndarray, amount: float) -> np.ndarray:
    """Adjust contrast around 128 using the 259 formula.

    Args:
        image: RGB/RGBA uint8 array
        amount: -100 to 100, 0 = no change
    """
    return scale_contrast(image, contrast_factor_255(amount))


def scale_contrast(image: np.ndarray, factor: float, pivot: float | None = 128.0) -> np.ndarray:
    """Scale each channel's distance from a pivot.

    Args:
        image: RGB/RGBA uint8 array
        factor: Multiplier, 1.0 = no change
        pivot: Pivot level; None uses the image's mean luminance
    """
    rgb, alpha = split_alpha(image)
    if pivot is None:
        pivot = float(luminance(rgb).mean())
    return merge_alpha(pivot + (rgb - pivot) * factor, alpha)


def gamma(image: np.ndarray, value: float) -> np.ndarray:
    """Gamma correction ``255 * (v / 255) ** (1 / value)``."""
    if value <= 0:
        raise ValueError(f"gamma must be positive, got {value}")
    rgb, alpha = split_alpha(image)
    return merge_alpha(np.power(rgb / 255.0, 1.0 / value) * 255.0, alpha)


def exposure(image: np.ndarray, ev: float) -> np.ndarray:
    """Multiply by ``2 ** ev``."""
    rgb, alpha = split_alpha(image)
    return merge_alpha(rgb * (2.0 ** ev), alpha)


def scale_channels(image: np.ndarray, r: float, g: float, b: float, offset: float = 0.0) -> np.ndarray:
    """Multiply each color channel and add a constant offset."""
    rgb, alpha = split_alpha(image)
    return merge_alpha(rgb * np.array([r, g, b], dtype=np.float32) + offset, alpha)


# ============================================================================
# Shadows / Highlights
# ============================================================================

def shadows_highlights(image: np.ndarray, shadows: float = 0.0, highlights: float = 0.0) -> np.ndarray:
    """Push values away from (or toward) mid-gray per channel.

    Values above 128 move by ``(v - 128) * highlights / 100``; values below
    128 move by ``(128 - v) * shadows / 100``.

    Args:
        image: RGB/RGBA uint8 array
        shadows: -100 to 100
        highlights: -100 to 100
    """
    rgb, alpha = split_alpha(image)
    out = rgb.copy()
    high = rgb > 128
    low = rgb < 128
    out[high] = rgb[high] + (rgb[high] - 128.0) * (highlights / 100.0)
    out[low] = rgb[low] + (128.0 - rgb[low]) * (shadows / 100.0)
    return merge_alpha(out, alpha)


def recover_shadows_highlights(
    image: np.ndarray,
    shadow_recovery: float,
    highlight_recovery: float,
    intensity: float,
    shadow_mult: float = 1.0,
    highlight_mult: float = 1.0,
) -> np.ndarray:
    """HDR-style shadow lift and highlight compression driven by luminance.

    Args:
        image: RGB/RGBA uint8 array
        shadow_recovery: 0.0-1.0
        highlight_recovery: 0.0-1.0
        intensity: 0.0-1.0 overall strength
        shadow_mult: Style multiplier for the shadow boost
        highlight_mult: Style multiplier for the highlight compression

    Returns:
        Adjusted uint8 array
    """
    rgb, alpha = split_alpha(image)
    lum = luminance(rgb)[:, :, None]
    out = rgb.copy()

    boost = shadow_recovery * (1.0 - lum / 128.0) * shadow_mult
    shadows = np.broadcast_to(lum < 128, rgb.shape)
    lifted = rgb + rgb * boost * intensity
    out[shadows] = lifted[shadows]

    hf = 1.0 - highlight_recovery * ((lum - 128.0) / 128.0) * intensity * highlight_mult
    highlights = np.broadcast_to(lum > 128, rgb.shape)
    compressed = rgb * hf + (255.0 - (255.0 - rgb) * hf)
    out[highlights] = compressed[highlights]
    return merge_alpha(out, alpha)


# ============================================================================
# Auto corrections
# ============================================================================

def auto_levels(image: np.ndarray) -> np.ndarray:
    """Stretch each color channel to the full 0-255 range.

    Flat channels (min == max) are left unchanged.
    """
    rgb, alpha = split_alpha(image)
    out = rgb.copy()
    for c in range(3):
        lo, hi = float(rgb[:, :, c].min()), float(rgb[:, :, c].max())
        if hi > lo:
            out[:, :, c] = sk_exposure.rescale_intensity(
                rgb[:, :, c], in_range=(lo, hi), out_range=(0.0, 255.0)
            )
    return merge_alpha(out, alpha)


def auto_contrast(image: np.ndarray, low_percent: float = 1.0, high_percent: float = 99.0) -> np.ndarray:
    """Stretch all channels using luminance percentiles.

    Args:
        image: RGB/RGBA uint8 array
        low_percent: Lower cumulative percentile mapped to 0
        high_percent: Upper cumulative percentile mapped to 255
    """
    rgb, alpha = split_alpha(image)
    lum = np.rint(luminance(rgb)).astype(np.intp)
    hist = np.bincount(lum.ravel(), minlength=256)
    cumulative = np.cumsum(hist)
    total = lum.size
    min_level = int(np.searchsorted(cumulative, total * low_percent / 100.0))
    max_level = int(np.searchsorted(cumulative, total * high_percent / 100.0))
    if max_level <= min_level:
        return image.copy()
    stretched = sk_exposure.rescale_intensity(
        rgb, in_range=(float(min_level), float(max_level)), out_range=(0.0, 255.0)
    )
    return merge_alpha(stretched, alpha)


# ============================================================================
# Histogram
# ============================================================================

def histogram(image: np.ndarray) -> dict[str, list[int]]:
    """256-bin histograms for red, green, blue and luminance."""
    check_image(image)
    rgb = image[:, :, :3]
    lum = to_uint8(luminance(rgb.astype(np.float32)))
    return {
        "red": np.bincount(rgb[:, :, 0].ravel(), minlength=256).tolist(),
        "green": np.bincount(rgb[:, :, 1].ravel(), minlength=256).tolist(),
        "blue": np.bincount(rgb[:, :, 2].ravel(), minlength=256).tolist(),
        "luminance": np.bincount(lum.ravel(), minlength=256).tolist(),
    }
