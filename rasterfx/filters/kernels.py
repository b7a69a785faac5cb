"""Convolution kernels and clamp-to-edge convolution.

A :class:`Kernel` is an immutable odd-sized square weight matrix with a blend
factor. :func:`convolve` applies it to the RGB planes of an image:

    out = clamp(original + (convolved - original) * blend, 0, 255)

With ``blend=1`` this is the plain convolution result (blur and edge
kernels); sharpen kernels carry a smaller blend factor, and ``blend=0`` is an
exact no-op for every kernel.

Out-of-bounds taps read the nearest border pixel (clamp-to-edge).

## Named Kernels

| Name | Weights |
|------|---------|
| SHARPEN | [0,-1,0, -1,5,-1, 0,-1,0] |
| UNSHARP | [-1,-1,-1, -1,9,-1, -1,-1,-1] |
| EDGE | [-1,-1,-1, -1,8,-1, -1,-1,-1] |
| SMOOTH | [1,2,1, 2,4,2, 1,2,1] / 16 |

Usage:
    from rasterfx.filters.kernels import convolve, SHARPEN, sharpen_kernel

    result = convolve(rgba_image, SHARPEN, blend=0.5)
    result = convolve(rgba_image, sharpen_kernel(0.5))
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
from scipy import ndimage

from .channels import check_image, merge_alpha, split_alpha


@dataclass(frozen=True, eq=False)
class Kernel:
    """Square convolution kernel with a default blend factor."""

    weights: np.ndarray
    blend: float = 1.0
    name: str = field(default="custom")

    def __post_init__(self):
        weights = np.array(self.weights, dtype=np.float32)
        if weights.ndim == 1:
            side = math.isqrt(weights.size)
            if side * side != weights.size:
                raise ValueError(f"Kernel with {weights.size} weights is not square")
            weights = weights.reshape(side, side)
        if weights.ndim != 2 or weights.shape[0] != weights.shape[1]:
            raise ValueError(f"Kernel must be square, got shape {weights.shape}")
        if weights.shape[0] % 2 == 0:
            raise ValueError(f"Kernel side must be odd, got {weights.shape[0]}")
        weights.setflags(write=False)
        object.__setattr__(self, "weights", weights)

    @property
    def size(self) -> int:
        return self.weights.shape[0]


SHARPEN = Kernel([0, -1, 0, -1, 5, -1, 0, -1, 0], name="sharpen")
UNSHARP = Kernel([-1, -1, -1, -1, 9, -1, -1, -1, -1], name="unsharp")
EDGE = Kernel([-1, -1, -1, -1, 8, -1, -1, -1, -1], name="edge")
SMOOTH = Kernel(np.array([1, 2, 1, 2, 4, 2, 1, 2, 1]) / 16.0, name="smooth")
IDENTITY = Kernel([1], name="identity")

NAMED_KERNELS = {k.name: k for k in (SHARPEN, UNSHARP, EDGE, SMOOTH, IDENTITY)}


def sharpen_kernel(strength: float) -> Kernel:
    """3x3 sharpen kernel with center 1+8s and ring -s."""
    s = float(strength)
    return Kernel([-s, -s, -s, -s, 1 + 8 * s, -s, -s, -s, -s], name="sharpen_strength")


def correlate_rgb(rgb: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Apply a 2D kernel to each float RGB plane with clamp-to-edge."""
    out = np.empty_like(rgb)
    for c in range(rgb.shape[2]):
        out[:, :, c] = ndimage.correlate(rgb[:, :, c], weights, mode="nearest")
    return out


def convolve(image: np.ndarray, kernel: Kernel, blend: float | None = None) -> np.ndarray:
    """Convolve the color channels of an image.

    Args:
        image: RGB/RGBA uint8 array (H, W, 3|4)
        kernel: Kernel to apply
        blend: Blend factor overriding the kernel's own (0 = no-op)

    Returns:
        uint8 array of identical shape, alpha unchanged
    """
    check_image(image)
    factor = kernel.blend if blend is None else float(blend)
    if factor == 0:
        return image.copy()
    rgb, alpha = split_alpha(image)
    convolved = correlate_rgb(rgb, kernel.weights)
    return merge_alpha(rgb + (convolved - rgb) * factor, alpha)
