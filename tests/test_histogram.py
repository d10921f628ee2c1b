from __future__ import annotations

import numpy as np
import pytest

from accent_color.errors import InvalidInputError
from accent_color.histogram import (
    build_histogram,
    chunk_ranges,
    default_concurrency_hint,
    sampled_count,
)
from accent_color.quantize import NUM_BINS, quantize
from accent_color.types import PixelBuffer


def _random_pixels(count: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(count, 4), dtype=np.uint8)


def test_chunk_ranges_last_chunk_absorbs_remainder() -> None:
    assert chunk_ranges(10, 3) == [(0, 3), (3, 6), (6, 10)]
    assert chunk_ranges(10, 1) == [(0, 10)]


def test_chunk_ranges_more_chunks_than_pixels() -> None:
    ranges = chunk_ranges(3, 5)
    assert ranges[:3] == [(0, 1), (1, 2), (2, 3)]
    assert ranges[3:] == [(3, 3), (3, 3)]


def test_histogram_counts_every_pixel_at_stride_one() -> None:
    pixels = _random_pixels(1000)
    histogram = build_histogram(pixels, 1, 4)
    assert histogram.shape == (NUM_BINS,)
    assert int(histogram.sum()) == 1000
    expected = np.zeros(NUM_BINS, dtype=np.int64)
    for pixel in pixels:
        expected[quantize(pixel)] += 1
    assert np.array_equal(histogram, expected)


@pytest.mark.parametrize(
    ("total", "stride", "hint"),
    [(10, 2, 3), (1000, 3, 4), (1001, 7, 6), (5, 10, 2), (17, 4, 17)],
)
def test_histogram_conservation(total: int, stride: int, hint: int) -> None:
    pixels = _random_pixels(total, seed=total)
    histogram = build_histogram(pixels, stride, hint)
    expected = sum(-(-(end - start) // stride) for start, end in chunk_ranges(total, hint))
    assert int(histogram.sum()) == expected == sampled_count(total, stride, hint)
    assert int(histogram.sum()) <= total


def test_stride_is_relative_to_chunk_start() -> None:
    # Two chunks of 5: indices 0, 3 and 5, 8 are sampled.
    pixels = np.zeros((10, 4), dtype=np.uint8)
    pixels[5] = (255, 0, 0, 255)
    histogram = build_histogram(pixels, 3, 2)
    assert histogram[448] == 1
    assert histogram[0] == 3


@pytest.mark.parametrize("hint", [2, 3, 7, 16, 64])
def test_histogram_independent_of_worker_count(hint: int) -> None:
    pixels = _random_pixels(997, seed=3)
    single = build_histogram(pixels, 1, 1)
    parallel = build_histogram(pixels, 1, hint)
    assert np.array_equal(single, parallel)


def test_histogram_independent_of_worker_count_with_aligned_stride() -> None:
    pixels = _random_pixels(1200, seed=5)
    assert np.array_equal(build_histogram(pixels, 2, 1), build_histogram(pixels, 2, 3))


def test_non_positive_stride_and_hint_are_clamped() -> None:
    pixels = _random_pixels(50)
    baseline = build_histogram(pixels, 1, 1)
    assert np.array_equal(build_histogram(pixels, 0, 1), baseline)
    assert np.array_equal(build_histogram(pixels, -4, 0), baseline)


def test_histogram_accepts_pixel_buffer() -> None:
    image = np.full((4, 4, 4), (255, 0, 0, 255), dtype=np.uint8)
    histogram = build_histogram(PixelBuffer.from_array(image), 1, 2)
    assert histogram[448] == 16
    assert int(np.count_nonzero(histogram)) == 1


def test_empty_pixels_rejected() -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        build_histogram(np.zeros((0, 4), dtype=np.uint8))
    assert excinfo.value.code == "E1001_INVALID_INPUT"


def test_missing_pixels_rejected() -> None:
    with pytest.raises(InvalidInputError):
        build_histogram(None)


def test_default_concurrency_hint() -> None:
    assert default_concurrency_hint(1) == 1
    assert default_concurrency_hint(2) == 2
    assert default_concurrency_hint(4) == 3
    assert default_concurrency_hint(8) == 6
    assert default_concurrency_hint(0) == 1
    assert default_concurrency_hint(8, fraction=0.5) == 4
    assert default_concurrency_hint() >= 1


@pytest.mark.parametrize(
    "pixels",
    [
        np.array([[300, 0, 0, 255]] * 4, dtype=np.int64),
        np.array([[-1, 0, 0, 255]] * 4, dtype=np.int64),
        np.array([[0.5, 0.5, 0.5, 1.0]] * 4, dtype=np.float64),
        np.zeros((4, 3), dtype=np.uint8),
        np.zeros((4, 5), dtype=np.uint8),
    ],
)
def test_malformed_pixel_arrays_rejected(pixels: np.ndarray) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        build_histogram(pixels, 1, 2)
    assert excinfo.value.code == "E1001_INVALID_INPUT"
