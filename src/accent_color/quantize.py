"""Coarse 9-bit color quantization (3 bits per channel).

A bin index packs the top three bits of R, G and B as ``rrrgggbbb``.
Decoding returns the low edge of the bin, not its center.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

CHANNEL_SHIFT = 5
CHANNEL_MASK = 0x7
NUM_BINS = 512


def quantize(pixel: Sequence[int]) -> int:
    """Map an RGB(A) pixel to its bin index. Alpha is ignored."""
    r, g, b = int(pixel[0]), int(pixel[1]), int(pixel[2])
    return ((r >> CHANNEL_SHIFT) << 6) | ((g >> CHANNEL_SHIFT) << 3) | (b >> CHANNEL_SHIFT)


def decode(bin_index: int) -> tuple[int, int, int]:
    r = ((bin_index >> 6) & CHANNEL_MASK) << CHANNEL_SHIFT
    g = ((bin_index >> 3) & CHANNEL_MASK) << CHANNEL_SHIFT
    b = (bin_index & CHANNEL_MASK) << CHANNEL_SHIFT
    return r, g, b


def brightness(bin_index: int) -> int:
    """Additive brightness of a decoded bin (R + G + B)."""
    return sum(decode(bin_index))


def quantize_array(pixels: np.ndarray) -> np.ndarray:
    """Vectorized ``quantize`` over an ``(N, >=3)`` uint8 array."""
    channels = pixels[:, :3].astype(np.intp) >> CHANNEL_SHIFT
    return (channels[:, 0] << 6) | (channels[:, 1] << 3) | channels[:, 2]
