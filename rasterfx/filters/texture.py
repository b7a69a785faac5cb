"""Texture overlays: vignettes, grain, light leaks, scratches, glow, borders.

This module provides:
- Canvas-style blend modes (multiply, screen, overlay) with per-pixel alpha
- Linear and radial gradient layers built from color stops
- Film vignette (vintage form) and soft vignette (monochrome form)
- Overlay film grain and additive monochrome grain
- Light leaks (soft, harsh, random) and scratch lines
- Glow (blurred screen layer)
- Borders (solid, polaroid-style bottom, artistic line, bevel frame)
- Background textures (canvas weave, paper fibers, rough noise)

## Gradient Stops

A gradient is a list of ``(offset, (r, g, b), alpha)`` stops with offsets in
[0, 1]. Positions before the first stop or after the last one take the
nearest stop's value, like a 2D canvas gradient.

## Randomness

Every randomized overlay takes a ``numpy.random.Generator``. Pipelines pass
one from :func:`shape_rng` so repeated runs on the same image agree. Grain
falls back to an unseeded generator when none is given.

## Input Format

All functions accept numpy uint8 arrays shaped (H, W, 3) or (H, W, 4). Only
the border functions change the image size; alpha of the original area is
never modified.

Usage:
    from rasterfx.filters.texture import film_vignette, light_leak, shape_rng

    result = film_vignette(rgba_image, intensity=60)
    result = light_leak(result, "soft", shape_rng(result))
"""
from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from PIL import Image as PILImage
from PIL import ImageDraw

from .blur import box_weights, gaussian_blur, separable_blur
from .channels import check_image, merge_alpha, split_alpha

Stop = tuple[float, tuple[int, int, int], float]

TEXTURE_OPACITY = 0.15
SCRATCH_OPACITY = 0.1

LIGHT_LEAK_STOPS: dict[str, list[Stop]] = {
    "soft": [(0.0, (255, 200, 100), 0.2), (1.0, (255, 200, 100), 0.0)],
    "harsh": [
        (0.0, (255, 100, 50), 0.3),
        (0.2, (255, 200, 100), 0.2),
        (1.0, (255, 200, 100), 0.0),
    ],
    "random": [
        (0.0, (255, 150, 50), 0.3),
        (0.5, (255, 200, 100), 0.1),
        (1.0, (255, 200, 100), 0.0),
    ],
}


def shape_rng(image: np.ndarray, salt: int = 0) -> np.random.Generator:
    """Generator seeded from the image shape, for repeatable overlays."""
    h, w = image.shape[:2]
    channels = image.shape[2] if image.ndim == 3 else 1
    return np.random.default_rng([h, w, channels, salt])


# ============================================================================
# Blend modes
# ============================================================================

def blend(base: np.ndarray, layer: np.ndarray, alpha, mode: str = "normal") -> np.ndarray:
    """Composite a color layer over float RGB with canvas blend semantics.

    Args:
        base: Float RGB array (H, W, 3) in 0-255
        layer: Float RGB layer broadcastable to ``base``
        alpha: Layer opacity 0.0-1.0, scalar or (H, W) array
        mode: normal, multiply, screen or overlay

    Returns:
        Float RGB array (H, W, 3)
    """
    layer = np.broadcast_to(np.asarray(layer, dtype=np.float32), base.shape)
    if mode == "normal":
        mixed = layer
    elif mode == "multiply":
        mixed = base * layer / 255.0
    elif mode == "screen":
        mixed = 255.0 - (255.0 - base) * (255.0 - layer) / 255.0
    elif mode == "overlay":
        mixed = np.where(
            base < 128.0,
            2.0 * base * layer / 255.0,
            255.0 - 2.0 * (255.0 - base) * (255.0 - layer) / 255.0,
        )
    else:
        raise ValueError(f"Unknown blend mode: {mode}")
    a = np.asarray(alpha, dtype=np.float32)
    if a.ndim == 2:
        a = a[:, :, None]
    return base * (1.0 - a) + mixed * a


# ============================================================================
# Gradients
# ============================================================================

def gradient_layer(t: np.ndarray, stops: Sequence[Stop]) -> tuple[np.ndarray, np.ndarray]:
    """Evaluate color stops at positions ``t``.

    Returns:
        Tuple of (rgb float32 (H, W, 3), alpha float32 (H, W))
    """
    offsets = [s[0] for s in stops]
    t = np.clip(t, 0.0, 1.0)
    rgb = np.stack(
        [np.interp(t, offsets, [s[1][c] for s in stops]) for c in range(3)],
        axis=-1,
    ).astype(np.float32)
    alpha = np.interp(t, offsets, [s[2] for s in stops]).astype(np.float32)
    return rgb, alpha


def radial_positions(h: int, w: int, cx: float, cy: float, r0: float, r1: float) -> np.ndarray:
    """Gradient position of each pixel center between two concentric circles."""
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    dist = np.hypot(xs + 0.5 - cx, ys + 0.5 - cy)
    span = max(r1 - r0, 1e-6)
    return (dist - r0) / span


def linear_positions(h: int, w: int, x0: float, y0: float, x1: float, y1: float) -> np.ndarray:
    """Gradient position of each pixel center projected onto a line."""
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    dx, dy = x1 - x0, y1 - y0
    length_sq = max(dx * dx + dy * dy, 1e-6)
    return ((xs + 0.5 - x0) * dx + (ys + 0.5 - y0) * dy) / length_sq


def _apply_gradient(image: np.ndarray, t: np.ndarray, stops: Sequence[Stop], mode: str) -> np.ndarray:
    rgb, alpha = split_alpha(image)
    layer, opacity = gradient_layer(t, stops)
    return merge_alpha(blend(rgb, layer, opacity, mode), alpha)


# ============================================================================
# Vignettes
# ============================================================================

def film_vignette(image: np.ndarray, intensity: float = 50.0) -> np.ndarray:
    """Darken toward the edges with a multiply-blended black radial layer.

    The gradient runs from ``0.3 * radius`` to ``radius = 0.7 * min(w, h)``
    around the image center; opacity reaches ``0.7 * intensity / 100`` at
    the outer circle and half of that at 70% of the way.

    Args:
        image: RGB/RGBA uint8 array
        intensity: 0-100

    Returns:
        Vignetted uint8 array
    """
    check_image(image)
    h, w = image.shape[:2]
    strength = intensity / 100.0 * 0.7
    radius = 0.7 * min(w, h)
    t = radial_positions(h, w, w / 2.0, h / 2.0, radius * 0.3, radius)
    stops = [(0.0, (0, 0, 0), 0.0), (0.7, (0, 0, 0), strength * 0.5), (1.0, (0, 0, 0), strength)]
    return _apply_gradient(image, t, stops, "multiply")


def soft_vignette(image: np.ndarray, amount: float) -> np.ndarray:
    """Monochrome vignette: clear to half the diagonal radius, then darkening.

    Args:
        image: RGB/RGBA uint8 array
        amount: 0-100, edge opacity is ``0.8 * amount / 100``
    """
    check_image(image)
    if amount <= 0:
        return image.copy()
    h, w = image.shape[:2]
    radius = math.sqrt(w * w + h * h) / 2.0
    t = radial_positions(h, w, w / 2.0, h / 2.0, 0.0, radius)
    stops = [(0.0, (0, 0, 0), 0.0), (0.5, (0, 0, 0), 0.0), (1.0, (0, 0, 0), 0.8 * amount / 100.0)]
    return _apply_gradient(image, t, stops, "multiply")


# ============================================================================
# Grain
# ============================================================================

def film_grain(image: np.ndarray, grain: float, rng: np.random.Generator | None = None) -> np.ndarray:
    """Overlay a gray noise layer ``128 + (u - 0.5) * 256 * g``.

    Args:
        image: RGB/RGBA uint8 array
        grain: 0.0-1.0, also sets the layer opacity ``50 * grain / 255``
        rng: Random generator, a fresh unseeded one when omitted

    Returns:
        Grainy uint8 array
    """
    check_image(image)
    if grain <= 0:
        return image.copy()
    rng = rng if rng is not None else np.random.default_rng()
    rgb, alpha = split_alpha(image)
    h, w = rgb.shape[:2]
    noise = 128.0 + (rng.random((h, w), dtype=np.float32) - 0.5) * 256.0 * grain
    noise = np.clip(np.floor(noise), 0.0, 255.0)
    return merge_alpha(blend(rgb, noise[:, :, None], 50.0 * grain / 255.0, "overlay"), alpha)


def mono_grain(image: np.ndarray, grain: float, rng: np.random.Generator | None = None) -> np.ndarray:
    """Add ``(u - 0.5) * grain * 50`` to every channel of visible pixels.

    Pixels with alpha 0 are left untouched.
    """
    check_image(image)
    if grain <= 0:
        return image.copy()
    rng = rng if rng is not None else np.random.default_rng()
    rgb, alpha = split_alpha(image)
    h, w = rgb.shape[:2]
    noise = (rng.random((h, w), dtype=np.float32) - 0.5) * grain * 50.0
    if alpha is not None:
        noise = np.where(alpha[:, :, 0] > 0, noise, 0.0)
    return merge_alpha(rgb + noise[:, :, None], alpha)


# ============================================================================
# Light leaks / Scratches
# ============================================================================

def light_leak(image: np.ndarray, kind: str, rng: np.random.Generator | None = None) -> np.ndarray:
    """Screen a warm gradient over the image.

    Args:
        image: RGB/RGBA uint8 array
        kind: soft (diagonal), harsh (horizontal), random (corner glow) or none
        rng: Generator choosing the corner for ``random``

    Returns:
        uint8 array with the light leak applied
    """
    check_image(image)
    if kind == "none":
        return image.copy()
    if kind not in LIGHT_LEAK_STOPS:
        raise ValueError(f"Unknown light leak type: {kind}")
    h, w = image.shape[:2]
    if kind == "soft":
        t = linear_positions(h, w, 0.0, 0.0, w, h)
    elif kind == "harsh":
        t = linear_positions(h, w, 0.0, 0.0, w, 0.0)
    else:
        rng = rng if rng is not None else shape_rng(image)
        cx = w if rng.random() > 0.5 else 0.0
        cy = h if rng.random() > 0.5 else 0.0
        t = radial_positions(h, w, cx, cy, 0.0, w / 2.0)
    return _apply_gradient(image, t, LIGHT_LEAK_STOPS[kind], "screen")


def scratch_overlay(image: np.ndarray, rng: np.random.Generator | None = None) -> np.ndarray:
    """Screen 5-9 faint near-vertical white lines across the image."""
    check_image(image)
    rng = rng if rng is not None else shape_rng(image)
    h, w = image.shape[:2]
    mask = PILImage.new("L", (w, h), 0)
    draw = ImageDraw.Draw(mask)
    for _ in range(5 + int(rng.integers(0, 5))):
        x1 = float(rng.random()) * w
        x2 = x1 + float(rng.random()) * 100.0 - 50.0
        draw.line([(x1, 0), (x2, h)], fill=255, width=1)
    opacity = np.asarray(mask, dtype=np.float32) / 255.0 * SCRATCH_OPACITY
    rgb, alpha = split_alpha(image)
    return merge_alpha(blend(rgb, 255.0, opacity, "screen"), alpha)


# ============================================================================
# Glow
# ============================================================================

def glow(image: np.ndarray, amount: float) -> np.ndarray:
    """Screen a gaussian-blurred copy at opacity ``0.3 + 0.4 * amount``.

    Args:
        image: RGB/RGBA uint8 array
        amount: 0.0-1.0, blur radius is ``round(10 * amount)``
    """
    check_image(image)
    if amount <= 0:
        return image.copy()
    blurred, _ = split_alpha(gaussian_blur(image, int(round(10 * amount))))
    rgb, alpha = split_alpha(image)
    return merge_alpha(blend(rgb, blurred, 0.3 + 0.4 * amount, "screen"), alpha)


# ============================================================================
# Borders
# ============================================================================

def parse_hex_color(value: str) -> tuple[int, int, int]:
    """Parse ``#rrggbb`` into an RGB tuple."""
    value = value.strip()
    if len(value) != 7 or not value.startswith("#"):
        raise ValueError(f"Expected #rrggbb color, got {value!r}")
    return int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16)


def add_border(
    image: np.ndarray,
    width: int,
    color: tuple[int, int, int] = (255, 255, 255),
    bottom: int | None = None,
) -> np.ndarray:
    """Extend the canvas with a solid border.

    Args:
        image: RGB/RGBA uint8 array
        width: Border width on the top, left and right
        color: Border RGB color (opaque)
        bottom: Bottom border width, defaults to ``width``

    Returns:
        New uint8 array of shape (h + width + bottom, w + 2 * width, C)
    """
    check_image(image)
    bottom = width if bottom is None else bottom
    h, w, c = image.shape
    fill = list(color) + [255] * (c - 3)
    canvas = np.empty((h + width + bottom, w + 2 * width, c), dtype=np.uint8)
    canvas[:, :] = np.array(fill, dtype=np.uint8)
    canvas[width:width + h, width:width + w] = image
    return canvas


def artistic_border(image: np.ndarray, width: int, color: tuple[int, int, int]) -> np.ndarray:
    """Solid border with a 2px darker line hugging the image."""
    framed = add_border(image, width, color)
    h, w = image.shape[:2]
    darker = tuple(int(v * 0.6) for v in color)
    line = max(0, width - 2)
    framed[line:width, line:width + w + 2] = _fill_value(framed, darker)
    framed[width + h:width + h + 2, line:width + w + 2] = _fill_value(framed, darker)
    framed[line:width + h + 2, line:width] = _fill_value(framed, darker)
    framed[line:width + h + 2, width + w:width + w + 2] = _fill_value(framed, darker)
    return framed


def frame_border(image: np.ndarray, width: int, color: tuple[int, int, int]) -> np.ndarray:
    """Solid border shaded from light at the outer edge to dark at the image."""
    framed = add_border(image, width, color)
    fh, fw = framed.shape[:2]
    ys, xs = np.mgrid[0:fh, 0:fw]
    depth = np.minimum(np.minimum(xs, ys), np.minimum(fw - 1 - xs, fh - 1 - ys))
    shade = 1.15 - 0.4 * np.clip(depth / max(width, 1), 0.0, 1.0)
    in_border = depth < width
    rgb = framed[:, :, :3].astype(np.float32)
    shaded = np.clip(np.rint(rgb * shade[:, :, None]), 0, 255).astype(np.uint8)
    framed[:, :, :3] = np.where(in_border[:, :, None], shaded, framed[:, :, :3])
    return framed


def _fill_value(canvas: np.ndarray, color: tuple[int, int, int]) -> np.ndarray:
    return np.array(list(color) + [255] * (canvas.shape[2] - 3), dtype=np.uint8)


def styled_border(image: np.ndarray, style: str, width: int, color: tuple[int, int, int]) -> np.ndarray:
    """Dispatch to the border renderer for ``style``."""
    if style == "none":
        return image.copy()
    if style == "simple":
        return add_border(image, width, color)
    if style == "artistic":
        return artistic_border(image, width, color)
    if style == "frame":
        return frame_border(image, width, color)
    raise ValueError(f"Unknown border style: {style}")


# ============================================================================
# Background textures
# ============================================================================

def texture_pattern(h: int, w: int, kind: str, rng: np.random.Generator) -> np.ndarray:
    """Gray texture plane (H, W) in 0-255 for canvas, paper or rough."""
    if kind == "canvas":
        ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
        weave = np.sin(xs * math.pi / 2.0) * np.sin(ys * math.pi / 2.0)
        noise = rng.normal(0.0, 8.0, (h, w))
        return np.clip(200.0 + 40.0 * weave + noise, 0.0, 255.0)
    if kind == "paper":
        fibers = rng.normal(0.0, 30.0, (h, w, 1)).astype(np.float32)
        # Soften the noise into fibers
        streaked = separable_blur(
            np.clip(fibers + 128.0, 0, 255).astype(np.uint8).repeat(3, axis=2),
            box_weights(2),
        )[:, :, 0].astype(np.float32)
        return np.clip(110.0 + streaked, 0.0, 255.0)
    if kind == "rough":
        return np.clip(rng.normal(210.0, 35.0, (h, w)), 0.0, 255.0)
    raise ValueError(f"Unknown background texture: {kind}")


def background_texture(image: np.ndarray, kind: str, rng: np.random.Generator | None = None) -> np.ndarray:
    """Multiply a seeded gray texture over the image at 15% opacity.

    Args:
        image: RGB/RGBA uint8 array
        kind: none, canvas, paper or rough
        rng: Generator for the texture, seeded from the shape when omitted
    """
    check_image(image)
    if kind == "none":
        return image.copy()
    rng = rng if rng is not None else shape_rng(image, salt=1)
    rgb, alpha = split_alpha(image)
    h, w = rgb.shape[:2]
    pattern = texture_pattern(h, w, kind, rng).astype(np.float32)
    return merge_alpha(blend(rgb, pattern[:, :, None], TEXTURE_OPACITY, "multiply"), alpha)
