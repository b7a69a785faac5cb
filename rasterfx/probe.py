"""Dimension prober reading width/height from encoded image headers.

Supported header layouts:

| Format | Signature | Width | Height |
|--------|-----------|-------|--------|
| PNG | ``89 50 4E 47 0D 0A 1A 0A`` | BE u32 @16 | BE u32 @20 |
| GIF | ``GIF87a`` / ``GIF89a`` | LE u16 @6 | LE u16 @8 |
| WebP (lossy) | ``RIFF....WEBPVP8 `` | LE u16 @26 & 0x3fff | LE u16 @28 & 0x3fff |
| JPEG | ``FF D8 FF`` | SOFn: BE u16 @seg+7 | SOFn: BE u16 @seg+5 |

Anything else (or a header that is too short or inconsistent) falls back to
a full decode with Pillow. Malformed input never raises anything except
:class:`~rasterfx.exceptions.UnreadableImage`.

Usage:
    from rasterfx.probe import probe, sniff_format

    width, height = probe(data)
    fmt = sniff_format(data)  # "png", "jpeg", "gif", "webp" or None
"""

from __future__ import annotations

import io
import logging
import struct
from typing import Optional

from PIL import Image as PILImage

from .exceptions import UnreadableImage

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"
GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
RIFF_SIGNATURE = b"RIFF"
VP8L_SIGNATURE = 0x2F

# SOF0-3, SOF5-7, SOF9-11, SOF13-15. C4 (DHT), C8 (JPG) and CC (DAC) are not frames.
JPEG_SOF_MARKERS = frozenset(
    [0xC0, 0xC1, 0xC2, 0xC3, 0xC5, 0xC6, 0xC7, 0xC9, 0xCA, 0xCB, 0xCD, 0xCE, 0xCF]
)
# Markers without a length field
JPEG_STANDALONE_MARKERS = frozenset([0x01, 0xD8] + list(range(0xD0, 0xD8)))
JPEG_EOI = 0xD9


def sniff_format(data: bytes) -> Optional[str]:
    """Identify an image format from its leading signature bytes."""
    if data.startswith(PNG_SIGNATURE):
        return "png"
    if data.startswith(JPEG_SIGNATURE):
        return "jpeg"
    if data[:6] in GIF_SIGNATURES:
        return "gif"
    if data.startswith(RIFF_SIGNATURE) and data[8:12] == b"WEBP":
        return "webp"
    return None


# ============================================================================
# Header readers
# ============================================================================

def _probe_png(data: bytes) -> Optional[tuple[int, int]]:
    if len(data) < 24:
        return None
    width, height = struct.unpack(">II", data[16:24])
    return width, height


def _probe_gif(data: bytes) -> Optional[tuple[int, int]]:
    if len(data) < 10:
        return None
    width, height = struct.unpack("<HH", data[6:10])
    return width, height


def _probe_webp(data: bytes) -> Optional[tuple[int, int]]:
    """Read the first chunk: lossy (VP8), lossless (VP8L) or extended (VP8X)."""
    chunk = data[12:16]
    if chunk == b"VP8 ":
        if len(data) < 30:
            return None
        width, height = struct.unpack("<HH", data[26:30])
        return width & 0x3FFF, height & 0x3FFF
    if chunk == b"VP8L":
        if len(data) < 25 or data[20] != VP8L_SIGNATURE:
            return None
        # 14 bits each of width-1 and height-1
        (bits,) = struct.unpack("<I", data[21:25])
        return (bits & 0x3FFF) + 1, ((bits >> 14) & 0x3FFF) + 1
    if chunk == b"VP8X":
        if len(data) < 30:
            return None
        # 24-bit canvas width-1 and height-1
        width = int.from_bytes(data[24:27], "little") + 1
        height = int.from_bytes(data[27:30], "little") + 1
        return width, height
    return None


def _probe_jpeg(data: bytes) -> Optional[tuple[int, int]]:
    """Walk JPEG marker segments until the first frame header."""
    size = len(data)
    pos = 2
    while pos + 4 <= size:
        if data[pos] != 0xFF:
            return None
        marker = data[pos + 1]
        if marker == 0xFF:
            # Fill byte before the actual marker
            pos += 1
            continue
        if marker in JPEG_STANDALONE_MARKERS:
            pos += 2
            continue
        if marker == JPEG_EOI:
            return None
        (segment_length,) = struct.unpack(">H", data[pos + 2:pos + 4])
        if marker in JPEG_SOF_MARKERS:
            if pos + 9 > size:
                return None
            height, width = struct.unpack(">HH", data[pos + 5:pos + 9])
            return width, height
        if segment_length < 2:
            return None
        pos += 2 + segment_length
    return None


_HEADER_READERS = {
    "png": _probe_png,
    "gif": _probe_gif,
    "webp": _probe_webp,
    "jpeg": _probe_jpeg,
}


def probe_header(data: bytes) -> Optional[tuple[int, int]]:
    """Read dimensions from the header only.

    Returns:
        (width, height), or None if the header is unknown or unusable
    """
    fmt = sniff_format(data)
    if fmt is None:
        return None
    dims = _HEADER_READERS[fmt](data)
    if dims is None or dims[0] <= 0 or dims[1] <= 0:
        return None
    return dims


def probe_decode(data: bytes) -> tuple[int, int]:
    """Determine dimensions with a full Pillow decode.

    Raises:
        UnreadableImage: If Pillow cannot decode the data
    """
    if not data:
        raise UnreadableImage("Empty image data")
    try:
        with PILImage.open(io.BytesIO(data)) as img:
            img.load()
            return img.size
    except Exception as e:
        raise UnreadableImage(f"Could not decode image: {e}") from e


def probe(data: bytes) -> tuple[int, int]:
    """Return (width, height) of encoded image bytes.

    Header tables are tried first; a full decode is the fallback.

    Args:
        data: Encoded image bytes

    Returns:
        (width, height) tuple

    Raises:
        UnreadableImage: If neither the header nor a decode yields a size
    """
    dims = probe_header(data)
    if dims is not None:
        return dims
    logger.debug(f"Header probe failed for {len(data)} bytes, falling back to decode")
    return probe_decode(data)
