"""
Hash Algorithms
Each algorithm consumes a luminance grid (float array, rows x cols) and
returns a flat boolean bit vector in row-major order.

For a hash size of (w, h):

    Algorithm       working grid        bits
    Mean            w x h               w*h
    Median          w x h               w*h
    Gradient        (w+1) x h           w*h
    VertGradient    w x (h+1)           w*h
    DoubleGradient  (w/2+1) x (h/2+1)   (w/2)(h/2+1) + (w/2+1)(h/2)
    BlockMean       4w x 4h             w*h
    Blockhash       4w x 4h             w*h
    DCT             4w x 4h             w*h

Bits from different algorithms (or hash sizes) must never be compared.
"""
from enum import Enum
from typing import Optional, Tuple

import numpy as np
from scipy.fftpack import dct

from app_utils.constants import ALGORITHM_ALIASES, BLOCK_SCALE, BLOCKHASH_BANDS, DEFAULT_ALGORITHM
from app_utils.errors import UnsupportedAlgorithm


class HashAlgorithm(str, Enum):
    MEAN = "Mean"
    GRADIENT = "Gradient"
    VERT_GRADIENT = "VertGradient"
    DOUBLE_GRADIENT = "DoubleGradient"
    BLOCK_MEAN = "BlockMean"
    MEDIAN = "Median"
    BLOCKHASH = "Blockhash"
    DCT = "DCT"

    def working_size(self, hash_size: Tuple[int, int]) -> Tuple[int, int]:
        """(width, height) the source image is resized to."""
        w, h = hash_size
        if self in (HashAlgorithm.MEAN, HashAlgorithm.MEDIAN):
            return w, h
        if self is HashAlgorithm.GRADIENT:
            return w + 1, h
        if self is HashAlgorithm.VERT_GRADIENT:
            return w, h + 1
        if self is HashAlgorithm.DOUBLE_GRADIENT:
            return w // 2 + 1, h // 2 + 1
        return w * BLOCK_SCALE, h * BLOCK_SCALE

    def bit_length(self, hash_size: Tuple[int, int]) -> int:
        w, h = hash_size
        if self is HashAlgorithm.DOUBLE_GRADIENT:
            half_w, half_h = w // 2, h // 2
            return half_w * (half_h + 1) + (half_w + 1) * half_h
        return w * h


def parse_algorithm(selector: Optional[str], default: str = DEFAULT_ALGORITHM) -> HashAlgorithm:
    """
    Resolve a request selector (case-insensitive, "-", "_" and spaces ignored).
    An empty or missing selector resolves to `default`.
    """
    if isinstance(selector, HashAlgorithm):
        return selector
    if selector is None or not selector.strip():
        selector = default

    normalized = selector.strip().lower().replace(" ", "").replace("-", "").replace("_", "")
    name = ALGORITHM_ALIASES.get(normalized)
    if name is None:
        raise UnsupportedAlgorithm(selector)
    return HashAlgorithm(name)


# ---------------- Transforms ----------------
def mean_bits(grid: np.ndarray) -> np.ndarray:
    # Pixels equal to the mean count as set
    return (grid >= grid.mean()).flatten()


def median_bits(grid: np.ndarray) -> np.ndarray:
    return (grid >= np.median(grid)).flatten()


def gradient_bits(grid: np.ndarray) -> np.ndarray:
    """Left to right per row: bit set when the right neighbour is not darker."""
    return (grid[:, 1:] >= grid[:, :-1]).flatten()


def vert_gradient_bits(grid: np.ndarray) -> np.ndarray:
    return (grid[1:, :] >= grid[:-1, :]).flatten()


def double_gradient_bits(grid: np.ndarray) -> np.ndarray:
    return np.concatenate([gradient_bits(grid), vert_gradient_bits(grid)])


def _blocks(grid: np.ndarray, hash_size: Tuple[int, int]) -> np.ndarray:
    w, h = hash_size
    return grid.reshape(h, BLOCK_SCALE, w, BLOCK_SCALE)


def block_mean_bits(grid: np.ndarray, hash_size: Tuple[int, int]) -> np.ndarray:
    block_means = _blocks(grid, hash_size).mean(axis=(1, 3))
    return (block_means >= grid.mean()).flatten()


def blockhash_bits(grid: np.ndarray, hash_size: Tuple[int, int]) -> np.ndarray:
    """
    Block sums compared against the median of their horizontal band
    (blockhash style), which keeps one bright region from flooding the hash.
    """
    sums = _blocks(grid, hash_size).sum(axis=(1, 3))
    bands = np.array_split(sums, min(BLOCKHASH_BANDS, sums.shape[0]), axis=0)
    return np.concatenate([(band > np.median(band)).flatten() for band in bands])


def dct_bits(grid: np.ndarray, hash_size: Tuple[int, int]) -> np.ndarray:
    w, h = hash_size
    coeffs = dct(dct(grid, axis=0, norm="ortho"), axis=1, norm="ortho")
    low_freq = coeffs[:h, :w]
    return (low_freq > np.median(low_freq)).flatten()


def compute_bits(algo: HashAlgorithm, grid: np.ndarray, hash_size: Tuple[int, int]) -> np.ndarray:
    """Run the transform for `algo` on a grid already sized by `algo.working_size`."""
    if algo is HashAlgorithm.MEAN:
        bits = mean_bits(grid)
    elif algo is HashAlgorithm.MEDIAN:
        bits = median_bits(grid)
    elif algo is HashAlgorithm.GRADIENT:
        bits = gradient_bits(grid)
    elif algo is HashAlgorithm.VERT_GRADIENT:
        bits = vert_gradient_bits(grid)
    elif algo is HashAlgorithm.DOUBLE_GRADIENT:
        bits = double_gradient_bits(grid)
    elif algo is HashAlgorithm.BLOCK_MEAN:
        bits = block_mean_bits(grid, hash_size)
    elif algo is HashAlgorithm.BLOCKHASH:
        bits = blockhash_bits(grid, hash_size)
    elif algo is HashAlgorithm.DCT:
        bits = dct_bits(grid, hash_size)
    else:
        raise UnsupportedAlgorithm(algo)
    return bits.astype(bool)
