from io import BytesIO

import numpy as np
import pytest
from PIL import Image


def encode(image: Image.Image, fmt: str = "PNG", **kwargs) -> bytes:
    buf = BytesIO()
    image.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


def wave_image(width: int = 256, height: int = 256, mirror: bool = False) -> Image.Image:
    """Grayscale pattern: one horizontal sine period plus a vertical cosine."""
    x = (np.arange(width) + 0.5) / width
    y = (np.arange(height) + 0.5) / height
    if mirror:
        x = x[::-1]
    values = 128 + 60 * np.sin(2 * np.pi * x + 0.3)[None, :] + 60 * np.cos(2 * np.pi * y)[:, None]
    return Image.fromarray(np.clip(values, 0, 255).astype(np.uint8))


def ramp_image(width: int = 256, height: int = 64, descending: bool = False) -> Image.Image:
    row = np.linspace(0, 255, width)
    if descending:
        row = row[::-1]
    values = np.tile(row, (height, 1))
    return Image.fromarray(values.astype(np.uint8))


@pytest.fixture
def red_png() -> bytes:
    return encode(Image.new("RGB", (100, 100), (255, 0, 0)))


@pytest.fixture
def checkerboard_png() -> bytes:
    pixels = np.array([[0, 255], [255, 0]], dtype=np.uint8)
    return encode(Image.fromarray(pixels))


@pytest.fixture
def wave_png() -> bytes:
    return encode(wave_image())


@pytest.fixture
def rgba_png() -> bytes:
    return encode(Image.new("RGBA", (40, 30), (10, 200, 30, 0)))


def ramp_image_16bit(width: int = 256, height: int = 64, descending: bool = False) -> Image.Image:
    """Full 0..65535 range, saved as a 16-bit grayscale PNG."""
    row = np.linspace(0, 65535, width)
    if descending:
        row = row[::-1]
    values = np.tile(row, (height, 1))
    return Image.fromarray(values.astype(np.uint16))
