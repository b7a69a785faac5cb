"""Blur filters implemented by repeated sampling.

This module provides the software blur family:
- Box blur (separable, uniform weights)
- Gaussian blur (separable, sigma = radius / 3)
- Motion blur (samples along a line)
- Radial blur (samples along an arc around a center)
- Surface blur (edge-preserving average of similar neighbors)

## Input Format

All filters accept numpy uint8 arrays shaped (H, W, 3) or (H, W, 4). Only the
color channels are blurred; alpha is returned unchanged. Each filter is a
no-op (returns a copy) when its radius or distance is zero.

## Edge Handling

Box and gaussian passes clamp to the edge. Motion and radial blur average
only the samples that fall inside the image. Surface blur leaves pixels
closer than ``radius`` to the border unchanged.

Usage:
    from rasterfx.filters.blur import gaussian_blur, motion_blur

    result = gaussian_blur(rgba_image, radius=5)
    result = motion_blur(rgba_image, angle=30.0, distance=20)
"""
import math

import numpy as np
from scipy import ndimage

from .channels import check_image, merge_alpha, round_half_up, split_alpha

SURFACE_THRESHOLD = 30


# ============================================================================
# Separable blurs
# ============================================================================

def gaussian_weights(radius: int) -> np.ndarray:
    """Normalized 1D gaussian weights over 2*radius+1 taps, sigma = radius/3."""
    sigma = radius / 3.0
    offsets = np.arange(-radius, radius + 1, dtype=np.float64)
    weights = np.exp(-(offsets ** 2) / (2.0 * sigma * sigma))
    return (weights / weights.sum()).astype(np.float32)


def box_weights(radius: int) -> np.ndarray:
    size = 2 * radius + 1
    return np.full(size, 1.0 / size, dtype=np.float32)


def separable_blur(image: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Horizontal then vertical pass with the given 1D weights."""
    rgb, alpha = split_alpha(image)
    rgb = ndimage.correlate1d(rgb, weights, axis=1, mode="nearest")
    rgb = ndimage.correlate1d(rgb, weights, axis=0, mode="nearest")
    return merge_alpha(rgb, alpha)


def box_blur(image: np.ndarray, radius: int) -> np.ndarray:
    """Uniform blur over a (2r+1)x(2r+1) window.

    Args:
        image: RGB/RGBA uint8 array
        radius: Window radius in pixels, 0 = no-op

    Returns:
        Blurred uint8 array
    """
    check_image(image)
    radius = int(radius)
    if radius <= 0:
        return image.copy()
    return separable_blur(image, box_weights(radius))


def gaussian_blur(image: np.ndarray, radius: int) -> np.ndarray:
    """Gaussian blur with sigma = radius / 3.

    Args:
        image: RGB/RGBA uint8 array
        radius: Kernel radius in pixels, 0 = no-op

    Returns:
        Blurred uint8 array
    """
    check_image(image)
    radius = int(radius)
    if radius <= 0:
        return image.copy()
    return separable_blur(image, gaussian_weights(radius))


# ============================================================================
# Directional blurs
# ============================================================================

def _average_samples(rgb: np.ndarray, coords) -> tuple[np.ndarray, np.ndarray]:
    """Accumulate in-bounds samples for a sequence of (px, py) index grids."""
    h, w = rgb.shape[:2]
    acc = np.zeros_like(rgb)
    count = np.zeros((h, w), dtype=np.float32)
    for px, py in coords:
        valid = (px >= 0) & (px < w) & (py >= 0) & (py < h)
        acc[valid] += rgb[py[valid], px[valid]]
        count[valid] += 1
    return acc, count


def motion_blur(image: np.ndarray, angle: float, distance: float) -> np.ndarray:
    """Average 2N+1 samples along a line through each pixel.

    The step between samples is ``distance / 10`` pixels in the direction of
    ``angle``; N = max(1, round(distance / 2)).

    Args:
        image: RGB/RGBA uint8 array
        angle: Direction in degrees
        distance: Blur distance, 0 = no-op

    Returns:
        Blurred uint8 array
    """
    check_image(image)
    if distance <= 0:
        return image.copy()

    rgb, alpha = split_alpha(image)
    h, w = rgb.shape[:2]
    rad = math.radians(angle)
    dx = math.cos(rad) * distance / 10.0
    dy = math.sin(rad) * distance / 10.0
    samples = max(1, int(math.floor(distance / 2.0 + 0.5)))

    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    coords = (
        (round_half_up(xs + dx * i), round_half_up(ys + dy * i))
        for i in range(-samples, samples + 1)
    )
    acc, count = _average_samples(rgb, coords)
    # The i=0 sample is always in bounds
    return merge_alpha(acc / count[:, :, None], alpha)


def radial_blur(
    image: np.ndarray,
    radius: int,
    center_x: float = 50.0,
    center_y: float = 50.0,
) -> np.ndarray:
    """Blur along arcs around a center point.

    Each pixel averages ``max(1, round(radius / 2))`` samples at its own
    distance from the center, spaced 0.1 radians apart.

    Args:
        image: RGB/RGBA uint8 array
        radius: Blur strength, 0 = no-op
        center_x: Center as percentage of width (0-100)
        center_y: Center as percentage of height (0-100)

    Returns:
        Blurred uint8 array
    """
    check_image(image)
    radius = int(radius)
    if radius <= 0:
        return image.copy()

    rgb, alpha = split_alpha(image)
    h, w = rgb.shape[:2]
    cx = center_x / 100.0 * w
    cy = center_y / 100.0 * h
    samples = max(1, int(math.floor(radius / 2.0 + 0.5)))

    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    dist = np.hypot(xs - cx, ys - cy)
    theta = np.arctan2(ys - cy, xs - cx)

    def arc_points():
        for i in range(samples):
            sample_angle = theta + (i - samples / 2.0) * 0.1
            yield (
                round_half_up(cx + np.cos(sample_angle) * dist),
                round_half_up(cy + np.sin(sample_angle) * dist),
            )

    acc, count = _average_samples(rgb, arc_points())
    out = rgb.copy()
    hit = count > 0
    out[hit] = acc[hit] / count[hit][:, None]
    return merge_alpha(out, alpha)


# ============================================================================
# Edge-preserving average
# ============================================================================

def similar_neighbor_average(
    rgb: np.ndarray,
    radius: int,
    threshold: float = SURFACE_THRESHOLD,
) -> np.ndarray:
    """Average each interior pixel with neighbors of similar color.

    A neighbor counts when the summed absolute RGB difference to the center
    is below ``threshold``. Pixels within ``radius`` of the border are
    returned unchanged.

    Args:
        rgb: Float RGB array (H, W, 3)
        radius: Window radius
        threshold: Color distance threshold

    Returns:
        Float RGB array of the same shape
    """
    h, w = rgb.shape[:2]
    out = rgb.copy()
    if radius <= 0 or h <= 2 * radius or w <= 2 * radius:
        return out

    center = rgb[radius:h - radius, radius:w - radius]
    acc = np.zeros_like(center)
    count = np.zeros(center.shape[:2], dtype=np.float32)
    for ky in range(-radius, radius + 1):
        for kx in range(-radius, radius + 1):
            neighbor = rgb[radius + ky:h - radius + ky, radius + kx:w - radius + kx]
            similar = np.abs(neighbor - center).sum(axis=2) < threshold
            acc += neighbor * similar[:, :, None]
            count += similar
    # The center itself always qualifies, so count >= 1
    out[radius:h - radius, radius:w - radius] = acc / count[:, :, None]
    return out


def surface_blur(image: np.ndarray, radius: int, threshold: float = SURFACE_THRESHOLD) -> np.ndarray:
    """Edge-preserving blur averaging only similar neighbors.

    Args:
        image: RGB/RGBA uint8 array
        radius: Window radius, 0 = no-op
        threshold: Max summed absolute RGB difference (default 30)

    Returns:
        Blurred uint8 array
    """
    check_image(image)
    radius = int(radius)
    if radius <= 0:
        return image.copy()
    rgb, alpha = split_alpha(image)
    return merge_alpha(similar_neighbor_average(rgb, radius, threshold), alpha)


BLUR_TYPES = ("gaussian", "motion", "radial", "surface")
