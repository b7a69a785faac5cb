"""
Pytest fixtures for rasterfx tests
"""

import io

import numpy as np
import pytest
from PIL import Image as PILImage


def encode_array(pixels: np.ndarray, fmt: str, **params) -> bytes:
    """Encode an RGB/RGBA array with Pillow."""
    buffer = io.BytesIO()
    PILImage.fromarray(pixels).save(buffer, format=fmt, **params)
    return buffer.getvalue()


@pytest.fixture(scope="module")
def gradient_rgba() -> np.ndarray:
    """
    Returns a 48x32 opaque RGBA image with a red gradient along x and a green
    gradient along y.
    :return: uint8 array (32, 48, 4)
    """
    h, w = 32, 48
    pixels = np.zeros((h, w, 4), dtype=np.uint8)
    pixels[:, :, 0] = np.linspace(0, 255, w, dtype=np.uint8)[None, :]
    pixels[:, :, 1] = np.linspace(0, 255, h, dtype=np.uint8)[:, None]
    pixels[:, :, 2] = 96
    pixels[:, :, 3] = 255
    return pixels


@pytest.fixture(scope="module")
def gray_rgba() -> np.ndarray:
    """
    Returns a 100x100 RGBA image filled with (128, 128, 128, 255).
    """
    return np.full((100, 100, 4), (128, 128, 128, 255), dtype=np.uint8)


@pytest.fixture(scope="module")
def checkerboard_rgb() -> np.ndarray:
    """
    Returns a 40x40 RGB checkerboard of 8px black and white squares.
    """
    ys, xs = np.mgrid[0:40, 0:40]
    on = ((xs // 8) + (ys // 8)) % 2 == 0
    pixels = np.zeros((40, 40, 3), dtype=np.uint8)
    pixels[on] = 255
    return pixels


@pytest.fixture(scope="module")
def png_bytes(gradient_rgba) -> bytes:
    """
    Returns the gradient encoded as RGBA PNG.
    """
    return encode_array(gradient_rgba, "PNG")


@pytest.fixture(scope="module")
def jpeg_bytes(gradient_rgba) -> bytes:
    """
    Returns the gradient encoded as JPEG.
    """
    return encode_array(np.ascontiguousarray(gradient_rgba[:, :, :3]), "JPEG", quality=90)


@pytest.fixture(scope="module")
def gif_bytes(gradient_rgba) -> bytes:
    """
    Returns the gradient encoded as GIF.
    """
    return encode_array(np.ascontiguousarray(gradient_rgba[:, :, :3]), "GIF")


@pytest.fixture(scope="module")
def webp_bytes(gradient_rgba) -> bytes:
    """
    Returns the gradient encoded as lossy WebP.
    """
    return encode_array(np.ascontiguousarray(gradient_rgba[:, :, :3]), "WEBP", quality=80)
