"""Color transforms: channel mixing, saturation, hue and white balance.

This module provides:
- Channel mixer grayscale and film-stock profiles
- Saturation and two vibrance variants
- HSL hue rotation
- Temperature / tint shifts (multiplicative and additive forms)
- Auto white balance
- Sepia matrix and monochrome toning

## Input Format

All functions accept numpy uint8 arrays shaped (H, W, 3) or (H, W, 4) and
return uint8 arrays of the same shape. Alpha is never modified.

## Film Profiles

| Profile | R | G | B |
|---------|---|---|---|
| default | 0.299 | 0.587 | 0.114 |
| tri-x | 0.25 | 0.70 | 0.05 |
| hp5 | 0.33 | 0.50 | 0.17 |
| acros | 0.30 | 0.55 | 0.15 |
| t-max | 0.28 | 0.60 | 0.12 |
| delta | 0.35 | 0.45 | 0.20 |

Usage:
    from rasterfx.filters.color import channel_mix, hue_rotate, saturation

    gray = channel_mix(rgba_image, (0.299, 0.587, 0.114))
    shifted = hue_rotate(rgba_image, 120)
"""
from __future__ import annotations

import numpy as np

from .channels import LUMA_WEIGHTS, luminance, merge_alpha, split_alpha

FILM_PROFILES: dict[str, tuple[float, float, float]] = {
    "default": LUMA_WEIGHTS,
    "tri-x": (0.25, 0.70, 0.05),
    "hp5": (0.33, 0.50, 0.17),
    "acros": (0.30, 0.55, 0.15),
    "t-max": (0.28, 0.60, 0.12),
    "delta": (0.35, 0.45, 0.20),
}

TONING_COLORS: dict[str, tuple[int, int, int]] = {
    "sepia": (112, 66, 20),
    "selenium": (90, 45, 90),
    "cyanotype": (18, 78, 120),
    "platinum": (85, 85, 95),
}

SEPIA_MATRIX = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ],
    dtype=np.float32,
)


# ============================================================================
# Channel mixing
# ============================================================================

def normalize_weights(r: float, g: float, b: float) -> tuple[float, float, float]:
    """Scale weights so their absolute values sum to one."""
    total = abs(r) + abs(g) + abs(b)
    if total == 0:
        total = 1.0
    return r / total, g / total, b / total


def mix_gray(rgb: np.ndarray, weights: tuple[float, float, float]) -> np.ndarray:
    """Weighted gray plane (H, W) from float RGB."""
    wr, wg, wb = weights
    return rgb[:, :, 0] * wr + rgb[:, :, 1] * wg + rgb[:, :, 2] * wb


def channel_mix(image: np.ndarray, weights: tuple[float, float, float] = LUMA_WEIGHTS) -> np.ndarray:
    """Convert to grayscale with a weighted channel sum.

    Weights are normalized by the sum of their absolute values, so any
    scaled version of a weight triple gives the same result.

    Args:
        image: RGB/RGBA uint8 array
        weights: (wR, wG, wB), may be negative

    Returns:
        uint8 array with R = G = B = mixed gray
    """
    rgb, alpha = split_alpha(image)
    gray = mix_gray(rgb, normalize_weights(*weights))
    return merge_alpha(np.repeat(gray[:, :, None], 3, axis=2), alpha)


def film_grayscale(image: np.ndarray, film_type: str) -> np.ndarray:
    """Grayscale using a named film-stock profile."""
    if film_type not in FILM_PROFILES:
        raise ValueError(f"Unknown film profile: {film_type}")
    return channel_mix(image, FILM_PROFILES[film_type])


# ============================================================================
# Saturation / Vibrance
# ============================================================================

def saturation(image: np.ndarray, amount: float) -> np.ndarray:
    """Scale each pixel's deviation from its luma by ``1 + amount``.

    Args:
        image: RGB/RGBA uint8 array
        amount: -1.0 (gray) upward, 0.0 = no change
    """
    rgb, alpha = split_alpha(image)
    gray = luminance(rgb)[:, :, None]
    return merge_alpha(gray + (rgb - gray) * (1.0 + amount), alpha)


def vibrance(image: np.ndarray, amount: float) -> np.ndarray:
    """Saturate low-saturation pixels more than saturated ones.

    The per-pixel boost is ``1 + (1 - s) * amount`` with
    ``s = (max - min) / (max + 0.001)``.
    """
    rgb, alpha = split_alpha(image)
    mx = rgb.max(axis=2, keepdims=True)
    mn = rgb.min(axis=2, keepdims=True)
    sat = (mx - mn) / (mx + 0.001)
    boost = 1.0 + (1.0 - sat) * amount
    gray = luminance(rgb)[:, :, None]
    return merge_alpha(gray + (rgb - gray) * boost, alpha)


def vibrance_toward_max(image: np.ndarray, amount: float) -> np.ndarray:
    """Pull non-dominant channels toward the dominant one.

    ``amt = (|max - avg| * 2 / 255) * amount / 3``; every channel below the
    maximum moves by ``(max - c) * amt``.

    Args:
        image: RGB/RGBA uint8 array
        amount: -1.0 to 1.0
    """
    rgb, alpha = split_alpha(image)
    mx = rgb.max(axis=2, keepdims=True)
    avg = rgb.mean(axis=2, keepdims=True)
    amt = (np.abs(mx - avg) * 2.0 / 255.0) * amount / 3.0
    out = rgb + (mx - rgb) * amt
    return merge_alpha(out, alpha)


# ============================================================================
# Hue rotation (HSL)
# ============================================================================

def rgb_to_hsl(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Float RGB in 0-255 to (hue degrees, saturation, lightness)."""
    norm = rgb / 255.0
    r, g, b = norm[:, :, 0], norm[:, :, 1], norm[:, :, 2]
    mx = norm.max(axis=2)
    mn = norm.min(axis=2)
    delta = mx - mn
    lightness = (mx + mn) / 2.0

    safe_delta = np.where(delta == 0, 1.0, delta)
    hue = np.zeros_like(mx)
    is_r = (mx == r) & (delta != 0)
    is_g = (mx == g) & (delta != 0) & ~is_r
    is_b = (delta != 0) & ~is_r & ~is_g
    hue = np.where(is_r, np.mod((g - b) / safe_delta, 6.0), hue)
    hue = np.where(is_g, (b - r) / safe_delta + 2.0, hue)
    hue = np.where(is_b, (r - g) / safe_delta + 4.0, hue)
    hue = hue * 60.0

    denom = 1.0 - np.abs(2.0 * lightness - 1.0)
    sat = np.where(delta == 0, 0.0, delta / np.where(denom == 0, 1.0, denom))
    return hue, sat, lightness


def hsl_to_rgb(hue: np.ndarray, sat: np.ndarray, lightness: np.ndarray) -> np.ndarray:
    """(hue degrees, saturation, lightness) to float RGB in 0-255."""
    hue = np.mod(hue, 360.0)
    chroma = (1.0 - np.abs(2.0 * lightness - 1.0)) * sat
    x = chroma * (1.0 - np.abs(np.mod(hue / 60.0, 2.0) - 1.0))
    m = lightness - chroma / 2.0
    zero = np.zeros_like(chroma)

    sector = np.minimum((hue // 60.0).astype(np.intp), 5)
    r = np.choose(sector, [chroma, x, zero, zero, x, chroma])
    g = np.choose(sector, [x, chroma, chroma, x, zero, zero])
    b = np.choose(sector, [zero, zero, x, chroma, chroma, x])
    return np.stack([r + m, g + m, b + m], axis=2) * 255.0


def hue_rotate(image: np.ndarray, degrees: float) -> np.ndarray:
    """Rotate hue in HSL space by ``degrees`` (mod 360).

    Args:
        image: RGB/RGBA uint8 array
        degrees: Hue shift, e.g. -180 to 180

    Returns:
        Hue-shifted uint8 array
    """
    rgb, alpha = split_alpha(image)
    if degrees % 360 == 0:
        return merge_alpha(rgb, alpha)
    hue, sat, lightness = rgb_to_hsl(rgb)
    return merge_alpha(hsl_to_rgb(hue + degrees, sat, lightness), alpha)


# ============================================================================
# White balance
# ============================================================================

def temperature_tint_scale(image: np.ndarray, temperature: float, tint: float) -> np.ndarray:
    """Multiplicative warm/cool and magenta/green shift.

    Args:
        image: RGB/RGBA uint8 array
        temperature: -1.0 (cool) to 1.0 (warm)
        tint: -1.0 (green) to 1.0 (magenta)
    """
    rgb, alpha = split_alpha(image)
    t, k = temperature, tint
    if t > 0:
        temp = (1 + 0.2 * t, 1 + 0.05 * t, 1 - 0.1 * t)
    else:
        temp = (1 + 0.1 * t, 1 + 0.05 * t, 1 - 0.2 * t)
    if k > 0:
        tnt = (1 + 0.1 * k, 1 - 0.1 * k, 1 + 0.1 * k)
    else:
        tnt = (1 + 0.1 * k, 1 - 0.2 * k, 1 + 0.1 * k)
    factors = np.array(temp, dtype=np.float32) * np.array(tnt, dtype=np.float32)
    return merge_alpha(rgb * factors, alpha)


def shift_temperature(image: np.ndarray, temperature: float, warm_red: float, warm_green: float, cool_blue: float) -> np.ndarray:
    """Additive temperature shift.

    Warm (t > 0) adds ``t * warm_red`` to red and ``t * warm_green`` to
    green; cool (t < 0) adds ``-t * cool_blue`` to blue.

    Args:
        image: RGB/RGBA uint8 array
        temperature: -1.0 to 1.0
    """
    rgb, alpha = split_alpha(image)
    if temperature > 0:
        rgb[:, :, 0] += temperature * warm_red
        rgb[:, :, 1] += temperature * warm_green
    elif temperature < 0:
        rgb[:, :, 2] -= temperature * cool_blue
    return merge_alpha(rgb, alpha)


def shift_tint(image: np.ndarray, tint: float, amount: float) -> np.ndarray:
    """Additive tint: magenta adds to red and blue, green adds to green."""
    rgb, alpha = split_alpha(image)
    if tint > 0:
        rgb[:, :, 0] += tint * amount
        rgb[:, :, 2] += tint * amount
    elif tint < 0:
        rgb[:, :, 1] -= tint * amount
    return merge_alpha(rgb, alpha)


def auto_white_balance(image: np.ndarray) -> np.ndarray:
    """Gray-world white balance: scale channels so their means match."""
    rgb, alpha = split_alpha(image)
    means = rgb.reshape(-1, 3).mean(axis=0)
    gray = means.mean()
    factors = np.where(means > 0, gray / np.where(means > 0, means, 1.0), 1.0)
    return merge_alpha(rgb * factors.astype(np.float32), alpha)


def offset_channels(image: np.ndarray, red: float, green: float, blue: float) -> np.ndarray:
    """Add a constant to each color channel."""
    rgb, alpha = split_alpha(image)
    return merge_alpha(rgb + np.array([red, green, blue], dtype=np.float32), alpha)


# ============================================================================
# Sepia / Toning
# ============================================================================

def sepia(image: np.ndarray, scale: tuple[float, float, float] = (1.0, 1.0, 1.0)) -> np.ndarray:
    """Sepia matrix with per-output-channel scale factors."""
    rgb, alpha = split_alpha(image)
    out = rgb @ SEPIA_MATRIX.T
    out = out * np.array(scale, dtype=np.float32)
    return merge_alpha(out, alpha)


def blend_color(image: np.ndarray, color: tuple[int, int, int], amount: float) -> np.ndarray:
    """Linearly mix each pixel toward a solid color by ``amount`` (0-1)."""
    rgb, alpha = split_alpha(image)
    target = np.array(color, dtype=np.float32)
    return merge_alpha(rgb * (1.0 - amount) + target * amount, alpha)


def apply_toning(image: np.ndarray, toning: str, intensity: float) -> np.ndarray:
    """Tint a (usually monochrome) image toward a named toning color.

    Args:
        image: RGB/RGBA uint8 array
        toning: none, sepia, selenium, cyanotype or platinum
        intensity: 0.0-1.0
    """
    if toning == "none" or intensity <= 0:
        return image.copy()
    if toning not in TONING_COLORS:
        raise ValueError(f"Unknown toning: {toning}")
    return blend_color(image, TONING_COLORS[toning], intensity)
