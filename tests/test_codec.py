"""
Tests for decoding and encoding pixel buffers.
"""

import numpy as np
import pytest

from rasterfx.codec import decode, encode, normalize_format
from rasterfx.exceptions import InvalidInput
from rasterfx.pixel_buffer import PixelBuffer
from rasterfx.probe import sniff_format


class TestDecode:
    """Tests for decode()."""

    def test_png_keeps_alpha(self, png_bytes, gradient_rgba):
        buf = decode(png_bytes)
        assert buf.channels == 4
        np.testing.assert_array_equal(buf.samples, gradient_rgba)

    def test_jpeg_is_rgb(self, jpeg_bytes):
        buf = decode(jpeg_bytes)
        assert buf.channels == 3
        assert buf.dimensions == (48, 32)

    def test_gif_decodes(self, gif_bytes):
        assert decode(gif_bytes).dimensions == (48, 32)

    def test_empty(self):
        with pytest.raises(InvalidInput):
            decode(b"")

    def test_corrupt(self):
        with pytest.raises(InvalidInput):
            decode(b"\x89PNG\r\n\x1a\n" + b"\x00" * 40)


class TestEncode:
    """Tests for encode()."""

    def test_png_lossless(self, gradient_rgba):
        buf = PixelBuffer.from_array(gradient_rgba)
        data = encode(buf, "png")
        assert sniff_format(data) == "png"
        np.testing.assert_array_equal(decode(data).samples, gradient_rgba)

    def test_jpeg_flattens_alpha(self, gradient_rgba):
        """Transparent pixels end up on white in JPEG output."""
        pixels = gradient_rgba.copy()
        pixels[:, :, 3] = 0
        data = encode(PixelBuffer.from_array(pixels), "jpg", quality=95)
        assert sniff_format(data) == "jpeg"
        decoded = decode(data)
        assert decoded.channels == 3
        assert decoded.samples.mean() > 245

    def test_webp(self, gradient_rgba):
        data = encode(PixelBuffer.from_array(gradient_rgba), "webp", quality=80)
        assert sniff_format(data) == "webp"

    def test_quality_changes_size(self, gradient_rgba):
        buf = PixelBuffer.from_array(np.ascontiguousarray(gradient_rgba[:, :, :3]))
        assert len(encode(buf, "jpeg", quality=10)) < len(encode(buf, "jpeg", quality=100))

    def test_invalid_quality(self, gradient_rgba):
        with pytest.raises(ValueError):
            encode(PixelBuffer.from_array(gradient_rgba), "jpeg", quality=0)

    def test_unknown_format(self, gradient_rgba):
        with pytest.raises(ValueError):
            encode(PixelBuffer.from_array(gradient_rgba), "bmp")


class TestNormalizeFormat:

    def test_aliases(self):
        assert normalize_format("JPG") == "jpeg"
        assert normalize_format(".png") == "png"
        assert normalize_format("webp") == "webp"
