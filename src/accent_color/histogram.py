"""Parallel 512-bin color histogram.

The pixel buffer is split into contiguous chunks; each worker counts its
chunk into a private histogram and the calling thread sums the results.
Workers never write to shared counters.
"""
from __future__ import annotations

import logging
import math
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from accent_color.config import DEFAULT_WORKER_FRACTION
from accent_color.errors import invalid_input
from accent_color.quantize import NUM_BINS, quantize_array
from accent_color.types import PixelBuffer, check_pixel_values

logger = logging.getLogger(__name__)


def default_concurrency_hint(
    available: int | None = None,
    fraction: float = DEFAULT_WORKER_FRACTION,
) -> int:
    """Worker count leaving headroom for other work: ``round(fraction * available)``."""
    if available is None:
        available = os.cpu_count() or 1
    # Round half up: 2 CPUs -> 2 workers, 6 CPUs -> 5.
    return max(1, int(math.floor(fraction * available + 0.5)))


def chunk_ranges(total: int, concurrency_hint: int) -> list[tuple[int, int]]:
    """Split ``[0, total)`` into ``concurrency_hint`` contiguous ranges.

    The last range absorbs the remainder; ranges past the end are empty.
    """
    concurrency_hint = max(concurrency_hint, 1)
    chunk_size = max(1, total // concurrency_hint)
    ranges = []
    for index in range(concurrency_hint):
        start = min(chunk_size * index, total)
        end = total if index == concurrency_hint - 1 else min(chunk_size * (index + 1), total)
        ranges.append((start, end))
    return ranges


def sampled_count(total: int, downsample_factor: int, concurrency_hint: int) -> int:
    """Number of pixels ``build_histogram`` samples for the given layout."""
    stride = max(downsample_factor, 1)
    return sum(-(-(end - start) // stride) for start, end in chunk_ranges(total, concurrency_hint))


def _local_histogram(pixels: np.ndarray, start: int, end: int, stride: int) -> np.ndarray:
    bins = quantize_array(pixels[start:end:stride])
    return np.bincount(bins, minlength=NUM_BINS).astype(np.int64)


def _as_pixel_array(pixels: PixelBuffer | np.ndarray) -> np.ndarray:
    if pixels is None:
        raise invalid_input("Pixel buffer is missing.")
    if isinstance(pixels, PixelBuffer):
        return pixels.pixels
    array = np.asarray(pixels)
    if array.ndim == 3:
        array = array.reshape(-1, array.shape[-1])
    if array.ndim != 2 or array.shape[1] != 4:
        raise invalid_input(f"Pixel array must have shape (N, 4), got {array.shape}")
    check_pixel_values(array)
    return array


def build_histogram(
    pixels: PixelBuffer | np.ndarray,
    downsample_factor: int = 1,
    concurrency_hint: int = 1,
) -> np.ndarray:
    array = _as_pixel_array(pixels)
    total = int(array.shape[0])
    if total == 0:
        raise invalid_input("Pixel buffer is empty.")
    stride = max(int(downsample_factor), 1)
    ranges = [r for r in chunk_ranges(total, int(concurrency_hint)) if r[1] > r[0]]

    histogram = np.zeros(NUM_BINS, dtype=np.int64)
    if len(ranges) == 1:
        start, end = ranges[0]
        local_histograms = [_local_histogram(array, start, end, stride)]
    else:
        with ThreadPoolExecutor(max_workers=len(ranges)) as executor:
            futures = [
                executor.submit(_local_histogram, array, start, end, stride)
                for start, end in ranges
            ]
            local_histograms = [future.result() for future in futures]

    for local in local_histograms:
        populated = np.flatnonzero(local)
        histogram[populated] += local[populated]

    logger.debug(
        "Histogram built: %d pixels, stride %d, %d chunks, %d sampled, %d bins populated",
        total,
        stride,
        len(ranges),
        int(histogram.sum()),
        int(np.count_nonzero(histogram)),
    )
    return histogram
