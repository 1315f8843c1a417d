"""
Image Decoding and Normalization
Turns raw upload / object-store bytes into a canonical RGB image, and shrinks
that image to the small luminance grid the hash algorithms work on.

The resampling filter is pinned to Lanczos: a different filter gives a
different hash for the same source image.
"""
from dataclasses import dataclass
from io import BytesIO
from typing import Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from app_utils.constants import SUPPORTED_FORMATS
from app_utils.errors import DecodeError, UnsupportedFormatError

RESAMPLE_FILTER = Image.Resampling.LANCZOS

# Modes Pillow uses for 16-bit grayscale (PNG, some BMPs)
HIGH_DEPTH_MODES = {"I;16", "I;16B", "I;16L", "I;16N", "I"}


def _scale_to_8bit(samples: np.ndarray) -> np.ndarray:
    return (samples.astype(np.int64) >> 8).clip(0, 255).astype(np.uint8)


@dataclass(frozen=True)
class DecodedImage:
    image: Image.Image  # always RGB
    width: int
    height: int
    image_format: str

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


def decode_image(image_bytes: bytes) -> DecodedImage:
    """
    Decode image bytes. The format is guessed from the header bytes.

    Raises:
        UnsupportedFormatError: Pillow recognised the data, but it is not PNG/JPEG/GIF/BMP/WebP
        DecodeError: unknown format, truncated or corrupt data, or empty image
    """
    if not image_bytes:
        raise DecodeError("empty image data")

    try:
        img = Image.open(BytesIO(image_bytes))
    except UnidentifiedImageError:
        raise DecodeError("cannot identify image format") from None
    except (OSError, EOFError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(str(e)) from e

    image_format = img.format or "unknown"
    if image_format not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError("format is not supported", image_format)

    try:
        # Force full decode; Image.open only reads the header
        img.load()
        width, height = img.size
        if width <= 0 or height <= 0:
            raise DecodeError(f"invalid dimensions {width}x{height}", image_format)

        # 16-bit samples are scaled down, convert() would clip them at 255
        if img.mode in HIGH_DEPTH_MODES:
            img = Image.fromarray(_scale_to_8bit(np.asarray(img)))

        # Canonical pixel grid, alpha discarded
        if img.mode != "RGB":
            img = img.convert("RGB")
    except (OSError, EOFError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(str(e), image_format) from e

    return DecodedImage(image=img, width=width, height=height, image_format=image_format)


def to_luminance_grid(decoded: DecodedImage, size: Tuple[int, int]) -> np.ndarray:
    """
    Resize to `size` (width, height) with Lanczos, then reduce to luma
    (ITU-R 601-2: L = R*299/1000 + G*587/1000 + B*114/1000).

    Returns a float array of shape (height, width).
    """
    resized = decoded.image.resize(size, RESAMPLE_FILTER)
    gray = resized.convert("L")
    return np.asarray(gray, dtype=np.float64)
