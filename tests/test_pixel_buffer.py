"""
Tests for PixelBuffer construction and the sample length invariant.
"""

import numpy as np
import pytest

from rasterfx.exceptions import InvalidInput
from rasterfx.pixel_buffer import PixelBuffer


class TestConstruction:
    """Tests for building buffers from arrays and raw bytes."""

    def test_from_array_rgba(self, gradient_rgba):
        """Dimensions follow the array shape."""
        buf = PixelBuffer.from_array(gradient_rgba)
        assert buf.dimensions == (48, 32)
        assert buf.channels == 4
        assert buf.has_alpha

    def test_from_array_rejects_gray(self):
        """Single channel arrays are not supported."""
        with pytest.raises(ValueError):
            PixelBuffer.from_array(np.zeros((4, 4), dtype=np.uint8))

    def test_from_array_rejects_float(self):
        """Only uint8 samples are accepted."""
        with pytest.raises(ValueError):
            PixelBuffer.from_array(np.zeros((4, 4, 3), dtype=np.float32))

    def test_from_bytes(self):
        """Raw interleaved bytes are reshaped to (H, W, C)."""
        raw = bytes(range(2 * 3 * 3))
        buf = PixelBuffer.from_bytes(3, 2, 3, raw)
        assert buf.samples.shape == (2, 3, 3)
        assert buf.samples[1, 0, 0] == 9
        assert buf.to_bytes() == raw

    def test_from_bytes_length_mismatch(self):
        """A short buffer violates the length invariant."""
        with pytest.raises(InvalidInput):
            PixelBuffer.from_bytes(3, 2, 4, b"\x00" * 10)

    def test_blank(self):
        """Blank buffers are filled with the given color."""
        buf = PixelBuffer.blank(5, 4, 4, (10, 20, 30, 255))
        assert buf.samples.shape == (4, 5, 4)
        np.testing.assert_array_equal(buf.samples[2, 2], [10, 20, 30, 255])


class TestInvariant:
    """Tests for the width * height * channels check."""

    def test_mismatched_metadata(self):
        """Metadata that disagrees with the samples is rejected."""
        samples = np.zeros((4, 4, 3), dtype=np.uint8)
        with pytest.raises(InvalidInput):
            PixelBuffer(width=5, height=4, channels=3, samples=samples)

    def test_unsupported_channels(self):
        with pytest.raises(InvalidInput):
            PixelBuffer(width=2, height=2, channels=2, samples=np.zeros((2, 2, 2), dtype=np.uint8))

    def test_replace_reallocates(self, gradient_rgba):
        """Replacing with a larger array produces a new, consistent buffer."""
        buf = PixelBuffer.from_array(gradient_rgba)
        bigger = buf.replace(np.pad(buf.samples, ((2, 2), (3, 3), (0, 0))))
        assert bigger.dimensions == (54, 36)
        assert buf.dimensions == (48, 32)
        bigger.check()


class TestAlpha:
    """Tests for adding and dropping the alpha channel."""

    def test_with_alpha_adds_opaque(self, checkerboard_rgb):
        buf = PixelBuffer.from_array(checkerboard_rgb).with_alpha()
        assert buf.channels == 4
        assert (buf.samples[:, :, 3] == 255).all()

    def test_without_alpha(self, gradient_rgba):
        buf = PixelBuffer.from_array(gradient_rgba).without_alpha()
        assert buf.channels == 3
        np.testing.assert_array_equal(buf.samples, gradient_rgba[:, :, :3])

    def test_copy_is_independent(self, gradient_rgba):
        buf = PixelBuffer.from_array(gradient_rgba.copy())
        clone = buf.copy()
        clone.samples[0, 0, 0] = 7
        assert buf.samples[0, 0, 0] == 0
