"""Channel helpers shared by the software filters.

All filters accept numpy uint8 arrays shaped (H, W, 3) or (H, W, 4). Color
math runs in float32 on the RGB planes; alpha is carried through untouched
unless a filter documents otherwise.
"""
from __future__ import annotations

import numpy as np

# ITU-R BT.601 luma weights, used for all brightness decisions
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def check_image(image: np.ndarray) -> None:
    """Validate an RGB/RGBA uint8 array.

    Raises:
        ValueError: If shape or dtype is unsupported
    """
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected image (H, W, 3|4), got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected uint8 dtype, got {image.dtype}")


def split_alpha(image: np.ndarray) -> tuple[np.ndarray, np.ndarray | None]:
    """Split into float32 RGB planes and the (untouched) alpha plane.

    Returns:
        Tuple of (rgb float32 (H, W, 3), alpha uint8 (H, W, 1) or None)
    """
    check_image(image)
    rgb = image[:, :, :3].astype(np.float32)
    alpha = image[:, :, 3:4].copy() if image.shape[2] == 4 else None
    return rgb, alpha


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round and clamp float values into uint8."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def merge_alpha(rgb: np.ndarray, alpha: np.ndarray | None) -> np.ndarray:
    """Clamp RGB back to uint8 and reattach alpha if present."""
    out = to_uint8(rgb)
    if alpha is None:
        return out
    return np.concatenate([out, alpha], axis=2)


def luminance(rgb: np.ndarray) -> np.ndarray:
    """Per-pixel luma of a float RGB array, shape (H, W)."""
    wr, wg, wb = LUMA_WEIGHTS
    return rgb[:, :, 0] * wr + rgb[:, :, 1] * wg + rgb[:, :, 2] * wb


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round .5 away from zero for positive values, as integer indices."""
    return np.floor(values + 0.5).astype(np.intp)
