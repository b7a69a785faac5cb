"""Decode and encode images between bytes and :class:`PixelBuffer`.

Decoding always yields RGB or RGBA 8-bit samples. Encoding supports PNG,
JPEG and WebP. Quality (1-100) applies to the lossy formats only; JPEG has
no alpha channel so transparent images are flattened onto white.

Usage:
    from rasterfx.codec import decode, encode

    buf = decode(data)
    png = encode(buf, "png")
    jpg = encode(buf, "jpg", quality=85)
"""

from __future__ import annotations

import io

import numpy as np
from PIL import Image as PILImage

from .exceptions import InvalidInput
from .pixel_buffer import PixelBuffer

OUTPUT_FORMATS = {"png": "png", "jpg": "jpeg", "jpeg": "jpeg", "webp": "webp"}
LOSSY_FORMATS = frozenset({"jpeg", "webp"})

MIME_TYPES = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "gif": "image/gif",
}

EXTENSIONS = {"png": "png", "jpeg": "jpg", "webp": "webp", "gif": "gif"}

_ALPHA_MODES = {"RGBA", "LA", "PA", "RGBa", "La"}


def normalize_format(fmt: str) -> str:
    """Map an output format name (png, jpg, jpeg, webp) to its canonical form."""
    key = fmt.lstrip(".").lower()
    if key not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format: {fmt}")
    return OUTPUT_FORMATS[key]


def decode(data: bytes) -> PixelBuffer:
    """Decode encoded image bytes into a pixel buffer.

    Raises:
        InvalidInput: If the data is empty or cannot be decoded
    """
    if not data:
        raise InvalidInput("Empty image data")
    try:
        with PILImage.open(io.BytesIO(data)) as img:
            img.load()
            has_alpha = img.mode in _ALPHA_MODES or "transparency" in img.info
            converted = img.convert("RGBA" if has_alpha else "RGB")
    except Exception as e:
        raise InvalidInput(f"Could not decode image: {e}") from e
    return PixelBuffer.from_array(np.asarray(converted, dtype=np.uint8).copy())


def to_pil(buffer: PixelBuffer) -> PILImage.Image:
    return PILImage.fromarray(buffer.samples)


def encode_pil(image: PILImage.Image, fmt: str = "png", quality: int = 90) -> bytes:
    """Encode a PIL image to bytes in the requested output format."""
    filetype = normalize_format(fmt)
    if not 1 <= quality <= 100:
        raise ValueError(f"quality must be in [1, 100], got {quality}")

    parameters = {}
    if filetype == "jpeg":
        if image.mode != "RGB":
            # Flatten transparency onto a white background
            background = PILImage.new("RGB", image.size, (255, 255, 255))
            rgba = image.convert("RGBA")
            background.paste(rgba, (0, 0), rgba)
            image = background
        parameters["quality"] = quality
        parameters["progressive"] = True
    elif filetype == "webp":
        parameters["quality"] = quality
    else:
        parameters["optimize"] = True

    output_stream = io.BytesIO()
    image.save(output_stream, format=filetype, **parameters)
    return output_stream.getvalue()


def encode(buffer: PixelBuffer, fmt: str = "png", quality: int = 90) -> bytes:
    """Encode a pixel buffer.

    Args:
        buffer: Image to encode
        fmt: png, jpg, jpeg or webp
        quality: 1-100, used by jpeg and webp only

    Returns:
        Encoded image bytes
    """
    buffer.check()
    return encode_pil(to_pil(buffer), fmt, quality)
