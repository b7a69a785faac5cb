"""Pixel buffer holding 8-bit interleaved samples.

A :class:`PixelBuffer` owns a ``(height, width, channels)`` uint8 numpy array
plus its dimension metadata. Only RGB (3 channels) and RGBA (4 channels) are
supported.

The length invariant ``samples.size == width * height * channels`` is checked
whenever a buffer is created or reallocated. Stages that change dimensions
(border extension, perspective, resize) never resize an array in place; they
produce a replacement buffer through :meth:`PixelBuffer.replace`.

Usage:
    from rasterfx.pixel_buffer import PixelBuffer

    buf = PixelBuffer.from_array(rgba_array)
    bigger = buf.replace(np.pad(buf.samples, ((10, 10), (10, 10), (0, 0))))
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .exceptions import InvalidInput

SUPPORTED_CHANNELS = (3, 4)


@dataclass(eq=False)
class PixelBuffer:
    """Width x height x channels array of 8-bit samples."""

    width: int
    height: int
    channels: int
    samples: np.ndarray

    def __post_init__(self):
        self.check()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Wrap an (H, W, 3|4) uint8 array.

        Args:
            array: RGB or RGBA uint8 array

        Returns:
            PixelBuffer owning a C-contiguous copy of the array if needed
        """
        if array.ndim != 3 or array.shape[2] not in SUPPORTED_CHANNELS:
            raise ValueError(f"Expected image (H, W, 3|4), got shape {array.shape}")
        if array.dtype != np.uint8:
            raise ValueError(f"Expected uint8 dtype, got {array.dtype}")
        samples = np.ascontiguousarray(array)
        h, w, c = samples.shape
        return cls(width=w, height=h, channels=c, samples=samples)

    @classmethod
    def from_bytes(cls, width: int, height: int, channels: int, raw: bytes) -> "PixelBuffer":
        """Build a buffer from raw interleaved bytes.

        Raises:
            InvalidInput: If the byte length does not match the dimensions
        """
        if channels not in SUPPORTED_CHANNELS:
            raise InvalidInput(f"Unsupported channel count: {channels}")
        expected = width * height * channels
        if len(raw) != expected:
            raise InvalidInput(
                f"Raw buffer length {len(raw)} does not match "
                f"{width}x{height}x{channels} ({expected} bytes)"
            )
        samples = np.frombuffer(raw, dtype=np.uint8).reshape(height, width, channels).copy()
        return cls(width=width, height=height, channels=channels, samples=samples)

    @classmethod
    def blank(cls, width: int, height: int, channels: int = 4, fill: int | tuple = 255) -> "PixelBuffer":
        """Create a buffer filled with a constant value or color."""
        samples = np.empty((height, width, channels), dtype=np.uint8)
        samples[:] = fill
        return cls(width=width, height=height, channels=channels, samples=samples)

    # ------------------------------------------------------------------
    # Invariant
    # ------------------------------------------------------------------

    def check(self) -> None:
        """Verify the length invariant and array layout.

        Raises:
            InvalidInput: If samples and metadata disagree
        """
        if self.channels not in SUPPORTED_CHANNELS:
            raise InvalidInput(f"Unsupported channel count: {self.channels}")
        if self.samples.dtype != np.uint8:
            raise InvalidInput(f"Expected uint8 samples, got {self.samples.dtype}")
        expected = self.width * self.height * self.channels
        if self.samples.size != expected:
            raise InvalidInput(
                f"Sample count {self.samples.size} does not match "
                f"{self.width}x{self.height}x{self.channels}"
            )
        if self.samples.shape != (self.height, self.width, self.channels):
            raise InvalidInput(
                f"Sample shape {self.samples.shape} does not match "
                f"({self.height}, {self.width}, {self.channels})"
            )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    def replace(self, array: np.ndarray) -> "PixelBuffer":
        """Return a new buffer for a stage result, possibly of new size."""
        return PixelBuffer.from_array(array)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer.from_array(self.samples.copy())

    def with_alpha(self) -> "PixelBuffer":
        """Return an RGBA version of this buffer (opaque alpha if added)."""
        if self.channels == 4:
            return self
        alpha = np.full((self.height, self.width, 1), 255, dtype=np.uint8)
        return self.replace(np.concatenate([self.samples, alpha], axis=2))

    def without_alpha(self) -> "PixelBuffer":
        if self.channels == 3:
            return self
        return self.replace(self.samples[:, :, :3].copy())

    def to_bytes(self) -> bytes:
        return self.samples.tobytes()

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height}x{self.channels})"
