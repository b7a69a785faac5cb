"""Geometry: resizing, canvas fitting and perspective correction.

This module provides:
- Resize target planning for the fit, fill, cover, contain and stretch modes
- Array resizing (spline interpolation via scikit-image)
- Cover crop and contain letterbox onto an exact canvas
- Perspective angle and keystone estimation from four corners
- Rotation + scale perspective approximation (scipy affine transform)
- Grid overlay

## Resize Modes

| Mode | With aspect ratio kept | Output size |
|------|------------------------|-------------|
| fit | min(width ratio, height ratio) | scaled size |
| contain | min ratio, centered on a blank canvas | requested box |
| cover | max ratio, centered crop | requested box |
| fill / stretch | exact size | requested box |

When only one of width and height is given the other follows the aspect
ratio, whatever the mode.

## Input Format

numpy uint8 arrays shaped (H, W, 3) or (H, W, 4). Resampling covers alpha too.

Usage:
    from rasterfx.filters.geometry import plan_resize, render_resize

    plan = plan_resize(800, 600, width=400, height=400, mode="cover")
    thumb = render_resize(rgba_image, plan, "lanczos")
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy import ndimage
from skimage import transform as sk_transform

from ..exceptions import InvalidParameters
from .channels import check_image

MAX_SCALE = 10
GRID_DIVISIONS = 10
GRID_COLOR = (200, 200, 200)

# Spline orders; lanczos has no spline equivalent and maps to cubic
INTERPOLATION_ORDERS = {
    "nearest": 0,
    "linear": 1,
    "bilinear": 1,
    "cubic": 3,
    "bicubic": 3,
    "lanczos": 3,
}

RESIZE_MODES = ("fit", "fill", "cover", "contain", "stretch")


@dataclass(frozen=True)
class ResizePlan:
    """Scaled image size and the canvas it is placed on.

    For ``fit``, ``fill`` and ``stretch`` the two sizes match. ``cover``
    scales past the canvas and crops; ``contain`` scales inside it and pads.
    """

    scaled_width: int
    scaled_height: int
    canvas_width: int
    canvas_height: int
    mode: str = "fit"

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self.canvas_width, self.canvas_height


def plan_resize(
    original_width: int,
    original_height: int,
    width: Optional[int] = None,
    height: Optional[int] = None,
    maintain_aspect_ratio: bool = True,
    mode: str = "fit",
    enforce_limit: bool = True,
) -> ResizePlan:
    """Compute the scaled and canvas sizes for a resize request.

    Args:
        enforce_limit: Reject canvases larger than 10x the original. Callers
            working from an already accepted request may skip the check.

    Raises:
        InvalidParameters: If neither dimension is given, the mode is
            unknown, or the result exceeds 10x the original on either axis
    """
    if mode not in RESIZE_MODES:
        raise InvalidParameters("resize_mode", f"one of {', '.join(RESIZE_MODES)}")
    if not width and not height:
        raise InvalidParameters("width", "given (width or height is required)")

    ow, oh = original_width, original_height
    if width and not height:
        plan = _exact(width, max(1, round(width * oh / ow)), mode)
    elif height and not width:
        plan = _exact(max(1, round(height * ow / oh)), height, mode)
    elif not maintain_aspect_ratio or mode in ("fill", "stretch"):
        plan = _exact(width, height, mode)
    else:
        ratio_w, ratio_h = width / ow, height / oh
        ratio = max(ratio_w, ratio_h) if mode == "cover" else min(ratio_w, ratio_h)
        sw, sh = max(1, round(ow * ratio)), max(1, round(oh * ratio))
        if mode == "fit":
            plan = ResizePlan(sw, sh, sw, sh, mode)
        else:
            plan = ResizePlan(sw, sh, width, height, mode)

    if enforce_limit:
        check_resize_limit(plan, ow, oh)
    return plan


def check_resize_limit(plan: ResizePlan, original_width: int, original_height: int) -> None:
    """Raise InvalidParameters if the canvas exceeds 10x the original."""
    ow, oh = original_width, original_height
    if plan.canvas_width > ow * MAX_SCALE or plan.canvas_height > oh * MAX_SCALE:
        raise InvalidParameters(
            "width" if plan.canvas_width > ow * MAX_SCALE else "height",
            f"at most {MAX_SCALE}x the original size ({ow}x{oh})",
        )


def _exact(width: int, height: int, mode: str) -> ResizePlan:
    return ResizePlan(width, height, width, height, mode)


# ============================================================================
# Resampling
# ============================================================================

def resize(image: np.ndarray, width: int, height: int, interpolation: str = "lanczos") -> np.ndarray:
    """Resample an image to (width, height).

    Args:
        image: RGB/RGBA uint8 array
        width: Target width in pixels
        height: Target height in pixels
        interpolation: nearest, linear/bilinear, cubic/bicubic or lanczos

    Returns:
        uint8 array shaped (height, width, C)
    """
    check_image(image)
    if interpolation not in INTERPOLATION_ORDERS:
        raise ValueError(f"Unknown interpolation: {interpolation}")
    h, w, c = image.shape
    if (w, h) == (width, height):
        return image.copy()
    order = INTERPOLATION_ORDERS[interpolation]
    downscale = width < w or height < h
    resized = sk_transform.resize(
        image,
        (height, width, c),
        order=order,
        mode="edge",
        anti_aliasing=downscale and order > 0,
        preserve_range=True,
    )
    return np.clip(np.rint(resized), 0, 255).astype(np.uint8)


def blank_canvas(width: int, height: int, channels: int) -> np.ndarray:
    """Transparent canvas for RGBA, white for RGB."""
    if channels == 4:
        return np.zeros((height, width, 4), dtype=np.uint8)
    return np.full((height, width, channels), 255, dtype=np.uint8)


def center_crop(image: np.ndarray, width: int, height: int) -> np.ndarray:
    h, w = image.shape[:2]
    top = max(0, (h - height) // 2)
    left = max(0, (w - width) // 2)
    return image[top:top + height, left:left + width].copy()


def center_paste(image: np.ndarray, width: int, height: int) -> np.ndarray:
    h, w, c = image.shape
    canvas = blank_canvas(width, height, c)
    top = (height - h) // 2
    left = (width - w) // 2
    canvas[top:top + h, left:left + w] = image
    return canvas


def render_resize(image: np.ndarray, plan: ResizePlan, interpolation: str = "lanczos") -> np.ndarray:
    """Resample to the plan's scaled size, then crop or pad to its canvas."""
    scaled = resize(image, plan.scaled_width, plan.scaled_height, interpolation)
    if plan.mode == "cover":
        return center_crop(scaled, plan.canvas_width, plan.canvas_height)
    if plan.mode == "contain":
        return center_paste(scaled, plan.canvas_width, plan.canvas_height)
    return scaled


# ============================================================================
# Perspective
# ============================================================================

def estimate_angle(top_left: tuple[float, float], top_right: tuple[float, float]) -> float:
    """Tilt of the top edge in degrees."""
    return math.degrees(math.atan2(top_right[1] - top_left[1], top_right[0] - top_left[0]))


def estimate_keystone(
    top_left: tuple[float, float],
    top_right: tuple[float, float],
    bottom_left: tuple[float, float],
    bottom_right: tuple[float, float],
    image_width: float,
) -> float:
    """``(top_width - bottom_width) / image_width``."""
    if image_width <= 0:
        return 0.0
    top_width = math.hypot(top_right[0] - top_left[0], top_right[1] - top_left[1])
    bottom_width = math.hypot(bottom_right[0] - bottom_left[0], bottom_right[1] - bottom_left[1])
    return (top_width - bottom_width) / image_width


def perspective_correct(
    image: np.ndarray,
    angle: float,
    keystone: float,
    output_width: Optional[int] = None,
    output_height: Optional[int] = None,
    interpolation: str = "bilinear",
) -> np.ndarray:
    """Rotate by ``-angle`` and scale by ``(1 - |k| * 0.1, 1 + |k| * 0.1)``.

    The source is centered on a white canvas of the output size (the source
    size by default). Uncovered canvas pixels stay white and opaque.

    Args:
        image: RGB/RGBA uint8 array
        angle: Estimated tilt in degrees
        keystone: Estimated keystone ratio
        output_width: Canvas width, defaults to the image width
        output_height: Canvas height, defaults to the image height
        interpolation: nearest, bilinear or bicubic

    Returns:
        uint8 array shaped (output_height, output_width, C)
    """
    check_image(image)
    if interpolation not in INTERPOLATION_ORDERS:
        raise ValueError(f"Unknown interpolation: {interpolation}")
    h, w, c = image.shape
    out_w = output_width or w
    out_h = output_height or h

    theta = math.radians(angle)
    sx = 1.0 - abs(keystone) * 0.1
    sy = 1.0 + abs(keystone) * 0.1
    cos_t, sin_t = math.cos(theta), math.sin(theta)

    # Maps output (row, col) to input (row, col)
    matrix = np.array([[cos_t / sy, sin_t / sy], [-sin_t / sx, cos_t / sx]])
    center_in = np.array([(h - 1) / 2.0, (w - 1) / 2.0])
    center_out = np.array([(out_h - 1) / 2.0, (out_w - 1) / 2.0])
    offset = center_in - matrix @ center_out

    order = INTERPOLATION_ORDERS[interpolation]
    planes = [
        ndimage.affine_transform(
            image[:, :, ch].astype(np.float32),
            matrix,
            offset=offset,
            output_shape=(out_h, out_w),
            order=order,
            mode="constant",
            cval=255.0,
        )
        for ch in range(c)
    ]
    return np.clip(np.rint(np.stack(planes, axis=2)), 0, 255).astype(np.uint8)


def grid_overlay(image: np.ndarray, divisions: int = GRID_DIVISIONS, opacity: float = 0.5) -> np.ndarray:
    """Draw light gray guide lines every ``1 / divisions`` of the size."""
    check_image(image)
    h, w = image.shape[:2]
    out = image.copy()
    rgb = out[:, :, :3].astype(np.float32)
    color = np.array(GRID_COLOR, dtype=np.float32)
    rows = sorted({min(h - 1, round(h * i / divisions)) for i in range(1, divisions)})
    cols = sorted({min(w - 1, round(w * i / divisions)) for i in range(1, divisions)})
    rgb[rows, :] = rgb[rows, :] * (1.0 - opacity) + color * opacity
    rgb[:, cols] = rgb[:, cols] * (1.0 - opacity) + color * opacity
    out[:, :, :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    return out
