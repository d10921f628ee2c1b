"""Accent selection over a 512-bin histogram.

Bins are ranked by frequency, the most popular fifth is kept, and that
subset is re-ranked by brightness. The pick sits a quarter of the way down
the brightness ranking, which skips near-white tones without falling back
to the single most frequent (often background) bin.
"""
from __future__ import annotations

import math
from fractions import Fraction
from typing import Sequence

import numpy as np

from accent_color.errors import DegenerateHistogramError
from accent_color.quantize import brightness, decode
from accent_color.types import Color

POPULAR_FRACTION = Fraction(1, 5)
BRIGHTNESS_PICK_FRACTION = Fraction(1, 4)

BinCount = tuple[int, int]


def rank_bins(histogram: Sequence[int] | np.ndarray) -> list[BinCount]:
    """Populated bins by count descending; ties by ascending bin index."""
    counts = np.asarray(histogram)
    pairs = [(int(index), int(counts[index])) for index in np.flatnonzero(counts > 0)]
    pairs.sort(key=lambda pair: (-pair[1], pair[0]))
    return pairs


def popular_bins(ranked: list[BinCount]) -> list[BinCount]:
    size = len(ranked)
    keep = min(max(math.ceil(size * POPULAR_FRACTION), 1), size)
    return ranked[:keep]


def rank_by_brightness(pairs: list[BinCount]) -> list[BinCount]:
    # Stable: equal brightness keeps frequency order.
    return sorted(pairs, key=lambda pair: -brightness(pair[0]))


def pick_index(size: int) -> int:
    return min(max(math.floor(size * BRIGHTNESS_PICK_FRACTION), 0), size - 1)


def select_accent(histogram: Sequence[int] | np.ndarray) -> Color:
    ranked = rank_bins(histogram)
    if not ranked:
        raise DegenerateHistogramError(
            code="E2001_DEGENERATE_HISTOGRAM",
            message="Histogram has no populated bins.",
            hint="Lower the downsample factor or check that the image has pixels.",
        )
    candidates = rank_by_brightness(popular_bins(ranked))
    final_bin = candidates[pick_index(len(candidates))][0]
    r, g, b = decode(final_bin)
    return Color(r=r, g=g, b=b, a=255)
