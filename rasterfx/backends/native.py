"""Native backend built on Pillow and OpenCV.

Covers the operations those libraries implement directly: resampling,
gaussian blur, kernel sharpening, saturation modulation, linear level
tables (brightness, contrast, gamma, exposure, temperature, tint), median
filtering and canvas compositing. Anything else raises
:class:`~rasterfx.exceptions.UnsupportedOperation` so the selector falls
back to the software backend.

Alpha is split off before color operations and reattached unchanged;
resampling works on all channels.
"""

from __future__ import annotations

import io
import logging
from typing import Callable, Optional

import cv2
import numpy as np
from PIL import Image as PILImage
from PIL import ImageEnhance, ImageFilter

from ..codec import encode_pil
from ..effects.metrics import derive_metrics
from ..effects.options import (
    BlackAndWhiteOptions,
    BrightnessContrastOptions,
    ColorBalanceOptions,
    EffectOptions,
    ResizeOptions,
    SharpenBlurOptions,
)
from ..exceptions import InvalidInput, UnsupportedOperation
from ..filters.geometry import center_crop, center_paste, plan_resize
from ..filters.kernels import SHARPEN, UNSHARP, Kernel
from ..filters.tone import contrast_factor_255
from .base import Backend, ProcessingOutcome

logger = logging.getLogger(__name__)

RESAMPLING = {
    "nearest": PILImage.Resampling.NEAREST,
    "linear": PILImage.Resampling.BILINEAR,
    "cubic": PILImage.Resampling.BICUBIC,
    "lanczos": PILImage.Resampling.LANCZOS,
}

Handler = Callable[[PILImage.Image, EffectOptions], tuple[PILImage.Image, list[str]]]


# ============================================================================
# Helpers
# ============================================================================

def _open(data: bytes) -> PILImage.Image:
    try:
        image = PILImage.open(io.BytesIO(data))
        image.load()
    except Exception as e:
        raise InvalidInput(f"Could not decode image: {e}") from e
    has_alpha = image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")


def _split(image: PILImage.Image) -> tuple[PILImage.Image, Optional[PILImage.Image]]:
    if image.mode == "RGBA":
        return image.convert("RGB"), image.getchannel("A")
    return image, None


def _merge(rgb: PILImage.Image, alpha: Optional[PILImage.Image]) -> PILImage.Image:
    if alpha is None:
        return rgb
    merged = rgb.convert("RGBA")
    merged.putalpha(alpha)
    return merged


def _table(fn: Callable[[np.ndarray], np.ndarray]) -> list[int]:
    levels = np.arange(256, dtype=np.float64)
    return np.clip(np.floor(fn(levels) + 0.5), 0, 255).astype(np.uint8).tolist()


def _levels(rgb: PILImage.Image, red, green, blue) -> PILImage.Image:
    """Apply one level mapping per channel through a lookup table."""
    return rgb.point(_table(red) + _table(green) + _table(blue))


def _uniform_levels(rgb: PILImage.Image, fn) -> PILImage.Image:
    return _levels(rgb, fn, fn, fn)


def _offsets(rgb: PILImage.Image, red: float, green: float, blue: float) -> PILImage.Image:
    return _levels(rgb, lambda v: v + red, lambda v: v + green, lambda v: v + blue)


def _cv(rgb: PILImage.Image, fn: Callable[[np.ndarray], np.ndarray]) -> PILImage.Image:
    return PILImage.fromarray(fn(np.asarray(rgb)))


def _filter_kernel(rgb: PILImage.Image, kernel: Kernel, blend: float) -> PILImage.Image:
    """Blended 3x3 convolution as a single cv2.filter2D pass."""
    weights = kernel.weights.astype(np.float32) * blend
    center = kernel.size // 2
    weights[center, center] += 1.0 - blend
    return _cv(rgb, lambda a: cv2.filter2D(a, -1, weights, borderType=cv2.BORDER_REPLICATE))


def _median(rgb: PILImage.Image, radius: int) -> PILImage.Image:
    return _cv(rgb, lambda a: cv2.medianBlur(a, 2 * radius + 1))


def _gaussian(rgb: PILImage.Image, radius: int) -> PILImage.Image:
    size = 2 * radius + 1
    return _cv(
        rgb,
        lambda a: cv2.GaussianBlur(a, (size, size), radius / 3.0, borderType=cv2.BORDER_REPLICATE),
    )


def _unsupported(options: EffectOptions, reason: str):
    raise UnsupportedOperation(NativeBackend.name, f"{options.family}: {reason}")


def _signed(value: float) -> str:
    return f"{value:+g}"


# ============================================================================
# Family handlers
# ============================================================================

def _brightness_contrast(image: PILImage.Image, o: BrightnessContrastOptions):
    if o.auto_color or o.auto_contrast or o.highlights or o.shadows or o.vibrance:
        _unsupported(o, "auto color, percentile contrast, tonal and vibrance adjustments")
    rgb, alpha = _split(image)
    details = []
    if o.auto_levels:
        rgb = _per_channel_stretch(rgb)
        details.append("Auto levels")
    if o.brightness:
        rgb = _uniform_levels(rgb, lambda v: v + o.brightness * 2.55)
        details.append(f"Brightness {_signed(o.brightness)}")
    if o.contrast:
        factor = contrast_factor_255(o.contrast)
        rgb = _uniform_levels(rgb, lambda v: 128.0 + (v - 128.0) * factor)
        details.append(f"Contrast {_signed(o.contrast)}")
    if o.gamma != 1.0:
        rgb = _uniform_levels(rgb, lambda v: np.power(v / 255.0, 1.0 / o.gamma) * 255.0)
        details.append(f"Gamma {o.gamma:.2f}")
    if o.exposure:
        rgb = _uniform_levels(rgb, lambda v: v * 2.0 ** o.exposure)
        details.append(f"Exposure {o.exposure:+.1f}EV")
    if o.saturation:
        rgb = ImageEnhance.Color(rgb).enhance(1 + o.saturation / 100)
        details.append(f"Saturation {_signed(o.saturation)}")
    rgb = _temperature_tint(rgb, o.temperature / 100, o.tint / 100, (30, 15, 30), 20, details)
    return _merge(rgb, alpha), details


def _per_channel_stretch(rgb: PILImage.Image) -> PILImage.Image:
    extrema = rgb.getextrema()
    tables = []
    for lo, hi in extrema:
        if hi > lo:
            tables.append(lambda v, lo=lo, hi=hi: (v - lo) * 255.0 / (hi - lo))
        else:
            tables.append(lambda v: v)
    return _levels(rgb, *tables)


def _temperature_tint(rgb, t: float, k: float, temp_amounts, tint_amount, details):
    warm_red, warm_green, cool_blue = temp_amounts
    if t > 0:
        rgb = _offsets(rgb, t * warm_red, t * warm_green, 0)
    elif t < 0:
        rgb = _offsets(rgb, 0, 0, -t * cool_blue)
    if t:
        details.append(f"Temperature {_signed(round(t * 100))}")
    if k > 0:
        rgb = _offsets(rgb, k * tint_amount, 0, k * tint_amount)
    elif k < 0:
        rgb = _offsets(rgb, 0, -k * tint_amount, 0)
    if k:
        details.append(f"Tint {_signed(round(k * 100))}")
    return rgb


def _color_balance(image: PILImage.Image, o: ColorBalanceOptions):
    if o.auto_white_balance or o.auto_color_correction or o.hue or o.vibrance:
        _unsupported(o, "auto corrections, hue rotation and vibrance")
    rgb, alpha = _split(image)
    details = []
    rgb = _temperature_tint(rgb, o.temperature / 100, o.tint / 100, (40, 20, 40), 25, details)
    if o.saturation:
        rgb = ImageEnhance.Color(rgb).enhance(1 + o.saturation / 100)
        details.append(f"Saturation {_signed(o.saturation)}")
    balance = (o.red_balance, o.green_balance, o.blue_balance)
    if any(balance):
        rgb = _offsets(rgb, *(b / 100 * 50 for b in balance))
        for name, value in zip(("Red", "Green", "Blue"), balance):
            if value:
                details.append(f"{name} {_signed(value)}")
    return _merge(rgb, alpha), details


def _black_and_white(image: PILImage.Image, o: BlackAndWhiteOptions):
    if o.mode != "simple" or o.grain or o.vignette or o.toning != "none":
        _unsupported(o, f"mode {o.mode} with grain, vignette or toning")
    rgb, alpha = _split(image)
    # Pillow's L conversion uses the same 0.299/0.587/0.114 weights
    gray = rgb.convert("L").convert("RGB")
    return _merge(gray, alpha), [f"Mode {o.mode}"]


def _sharpen_blur(image: PILImage.Image, o: SharpenBlurOptions):
    if o.edge_enhancement or o.preserve_details:
        _unsupported(o, "edge enhancement and detail preservation")
    radius = int(np.floor(o.blur_amount / 100 * 10 + 0.5))
    if radius > 0 and o.blur_type != "gaussian":
        _unsupported(o, f"{o.blur_type} blur")
    rgb, alpha = _split(image)
    details = []
    if o.sharpen_amount > 0:
        if o.smart_sharpen:
            rgb = rgb.filter(ImageFilter.UnsharpMask(
                radius=o.sharpen_radius,
                percent=int(o.sharpen_amount * 2),
                threshold=int(o.sharpen_threshold),
            ))
        else:
            kernel = UNSHARP if o.unsharp_mask else SHARPEN
            rgb = _filter_kernel(rgb, kernel, o.sharpen_amount / 100)
        details.append(f"Sharpen {o.sharpen_amount:g}")
    if radius > 0:
        rgb = _gaussian(rgb, radius)
        details.append(f"Blur {o.blur_type} {o.blur_amount:g}")
    median_radius = int(np.floor(o.noise_reduction / 100 * 3 + 0.5))
    if median_radius > 0:
        rgb = _median(rgb, median_radius)
        details.append(f"Noise reduction {o.noise_reduction:g}")
    return _merge(rgb, alpha), details


def _resize(image: PILImage.Image, o: ResizeOptions):
    w, h = image.size
    plan = plan_resize(w, h, o.width, o.height, o.maintain_aspect_ratio, o.resize_mode)
    scaled = image.resize((plan.scaled_width, plan.scaled_height), RESAMPLING[o.upscale_algorithm])
    pixels = np.asarray(scaled)
    if plan.mode == "cover":
        pixels = center_crop(pixels, plan.canvas_width, plan.canvas_height)
    elif plan.mode == "contain":
        pixels = center_paste(pixels, plan.canvas_width, plan.canvas_height)
    resized = PILImage.fromarray(pixels)
    details = [f"Resize {w}x{h} -> {plan.canvas_width}x{plan.canvas_height} ({plan.mode})"]

    rgb, alpha = _split(resized)
    scale = max(plan.scaled_width / w, plan.scaled_height / h)
    if o.ai_upscaling and scale > 1.5:
        rgb = _filter_kernel(rgb, SHARPEN, 0.3)
        details.append("Upscale sharpening")
    if o.sharpen_amount > 0:
        rgb = _filter_kernel(rgb, SHARPEN, o.sharpen_amount / 10)
        details.append(f"Sharpen {o.sharpen_amount:g}")
    if o.noise_reduction:
        rgb = _median(rgb, 1)
        details.append("Noise reduction")
    return _merge(rgb, alpha), details


HANDLERS: dict[str, Handler] = {
    "brightness_contrast": _brightness_contrast,
    "color_balance": _color_balance,
    "black_and_white": _black_and_white,
    "sharpen_blur": _sharpen_blur,
    "resize": _resize,
}


# ============================================================================
# Backend
# ============================================================================

class NativeBackend(Backend):
    """Pillow/OpenCV implementation of the natively expressible families."""

    name = "native"

    def attempt(
        self,
        data: bytes,
        request: EffectOptions,
        size: Optional[tuple[int, int]] = None,
    ) -> ProcessingOutcome:
        handler = HANDLERS.get(request.family)
        if handler is None:
            _unsupported(request, "no native implementation")
        image = _open(data)
        if size is None:
            size = image.size
        result, details = handler(image, request)
        logger.debug(f"native {request.family}: {image.size} -> {result.size}")
        return ProcessingOutcome(
            encoded_bytes=encode_pil(result, request.output_format, request.quality),
            dimensions=result.size,
            derived_metrics=derive_metrics(request, size),
            details=details,
        )
