"""
Image Hashing Utilities
Computes perceptual hashes from raw image bytes and compares them.

Pipeline: decode -> resize + luma -> algorithm transform -> pack + base64.
Visually similar images give hashes with a small Hamming distance.

Bits are packed row-major, least significant bit first within each byte,
and the last byte is zero-padded. The base64 string uses the standard
RFC 4648 alphabet with padding.
"""
import base64
import binascii
import logging
import math
import time
from dataclasses import dataclass
from typing import Tuple

import imagehash
import numpy as np

from app_utils.constants import DEFAULT_HASH_SIZE
from app_utils.errors import HashMismatchError
from app_utils.hash_algorithms import HashAlgorithm, compute_bits
from app_utils.image_decode import decode_image, to_luminance_grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HashResult:
    bits: imagehash.ImageHash
    hash_base64: str
    algo: HashAlgorithm
    image_size: Tuple[int, int]
    time_elapsed: float  # seconds spent in the transform only

    @property
    def hash_hex(self) -> str:
        return str(self.bits)

    @property
    def bit_length(self) -> int:
        return self.bits.hash.size


# ---------------- Encoder ----------------
def encode_bits(bits: np.ndarray) -> str:
    """
    Pack a bit vector and render it as base64.

    Args:
        bits: Flat boolean array

    Returns:
        Base64 string of the packed bytes
    """
    packed = np.packbits(np.asarray(bits, dtype=bool), bitorder="little")
    return base64.b64encode(packed.tobytes()).decode("ascii")


def decode_bits(hash_base64: str, bit_length: int) -> np.ndarray:
    """
    Inverse of `encode_bits`.

    Raises:
        HashMismatchError: malformed base64, byte count does not fit `bit_length`,
            or nonzero padding bits
    """
    try:
        raw = base64.b64decode(hash_base64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise HashMismatchError(f"invalid base64 hash: {e}") from e

    expected = math.ceil(bit_length / 8)
    if len(raw) != expected:
        raise HashMismatchError(
            f"hash has {len(raw)} bytes, expected {expected} for {bit_length} bits"
        )
    packed = np.frombuffer(raw, dtype=np.uint8)
    bits = np.unpackbits(packed, bitorder="little").astype(bool)
    # Padding must be zero, otherwise one bit vector has several encodings
    if bits[bit_length:].any():
        raise HashMismatchError("hash has nonzero padding bits")
    return bits[:bit_length]


# ---------------- Pipeline ----------------
def compute_image_hash(
    image_bytes: bytes,
    algo: HashAlgorithm = HashAlgorithm.GRADIENT,
    hash_size: Tuple[int, int] = (DEFAULT_HASH_SIZE, DEFAULT_HASH_SIZE),
) -> HashResult:
    """
    Calculate the perceptual hash of an image.

    Args:
        image_bytes: Encoded image (PNG, JPEG, GIF, BMP or WebP)
        algo: Hash algorithm
        hash_size: (width, height) of the hash in bits

    Returns:
        HashResult. `time_elapsed` covers the transform step only, so it stays
        comparable across algorithms regardless of decode cost.

    Raises:
        DecodeError: bytes are not a supported, valid image
    """
    decoded = decode_image(image_bytes)
    grid = to_luminance_grid(decoded, algo.working_size(hash_size))

    start = time.perf_counter()
    bits = compute_bits(algo, grid, hash_size)
    elapsed = time.perf_counter() - start

    logger.debug(
        "hashed %s image %dx%d with %s in %.6fs",
        decoded.image_format, decoded.width, decoded.height, algo.value, elapsed,
    )

    return HashResult(
        bits=imagehash.ImageHash(bits.reshape(1, -1)),
        hash_base64=encode_bits(bits),
        algo=algo,
        image_size=decoded.size,
        time_elapsed=elapsed,
    )


def hash_distance(a: HashResult, b: HashResult) -> int:
    """Hamming distance between two results of the same algorithm and size."""
    if a.algo is not b.algo or a.bit_length != b.bit_length:
        raise HashMismatchError(
            f"cannot compare {a.algo.value}/{a.bit_length} bits with {b.algo.value}/{b.bit_length} bits"
        )
    return int(a.bits - b.bits)


def compare_image_hashes(
    hash_a: str,
    hash_b: str,
    algo: HashAlgorithm,
    hash_size: Tuple[int, int] = (DEFAULT_HASH_SIZE, DEFAULT_HASH_SIZE),
) -> int:
    """
    Hamming distance between two base64 hashes produced with `algo`.

    Args:
        hash_a: First hash (base64)
        hash_b: Second hash (base64)
        algo: Algorithm both hashes were produced with
        hash_size: Hash size both hashes were produced with

    Returns:
        Number of differing bits

    Raises:
        HashMismatchError: a hash does not decode to the algorithm's bit length
    """
    bit_length = algo.bit_length(hash_size)
    h1 = imagehash.ImageHash(decode_bits(hash_a, bit_length).reshape(1, -1))
    h2 = imagehash.ImageHash(decode_bits(hash_b, bit_length).reshape(1, -1))
    return int(h1 - h2)
