from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable

import numpy as np

from accent_color.config import AccentConfig, load_config
from accent_color.errors import AccentColorError, invalid_input
from accent_color.histogram import build_histogram, default_concurrency_hint
from accent_color.selector import select_accent
from accent_color.types import AccentResult, Color, PixelBuffer
from common.png_utils import load_pixel_buffer

logger = logging.getLogger(__name__)

_ASYNC_EXECUTOR: ThreadPoolExecutor | None = None
_ASYNC_EXECUTOR_LOCK = threading.Lock()


def _coerce_buffer(buffer: PixelBuffer | np.ndarray | None) -> PixelBuffer:
    if buffer is None:
        raise invalid_input("No pixel buffer was provided.")
    if isinstance(buffer, PixelBuffer):
        return buffer
    return PixelBuffer.from_array(buffer)


def _resolve_concurrency(concurrency_hint: int | None, config: AccentConfig | None) -> int:
    if concurrency_hint is not None:
        return max(int(concurrency_hint), 1)
    if config.max_workers is not None:
        return config.max_workers
    return default_concurrency_hint(fraction=config.worker_fraction)


def extract_accent(
    buffer: PixelBuffer | np.ndarray | None,
    downsample_factor: int | None = None,
    concurrency_hint: int | None = None,
    config: AccentConfig | None = None,
) -> Color:
    """Return the accent color of ``buffer``.

    Raises ``InvalidInputError`` for missing or empty pixels and
    ``DegenerateHistogramError`` when sampling leaves every bin empty.
    ``None`` for the stride or the hint takes the configured value; the
    config file is only read when one of them is needed.
    """
    pixels = _coerce_buffer(buffer)
    if config is None and (downsample_factor is None or concurrency_hint is None):
        config = load_config()
    if downsample_factor is None:
        stride = config.downsample_factor
    else:
        stride = max(int(downsample_factor), 1)
    workers = _resolve_concurrency(concurrency_hint, config)
    logger.debug(
        "Extracting accent from %dx%d buffer (stride %d, %d workers)",
        pixels.width,
        pixels.height,
        stride,
        workers,
    )
    histogram = build_histogram(pixels, stride, workers)
    color = select_accent(histogram)
    logger.debug("Accent color %s", color.to_hex())
    return color


def get_accent_color(
    buffer: PixelBuffer | np.ndarray | None,
    downsample_factor: int | None = None,
    concurrency_hint: int | None = None,
    config: AccentConfig | None = None,
) -> AccentResult:
    """Like ``extract_accent`` but reports failures as a tagged result."""
    try:
        color = extract_accent(buffer, downsample_factor, concurrency_hint, config)
    except AccentColorError as exc:
        logger.info("Accent extraction failed: %s %s", exc.code, exc.message)
        return AccentResult.failure(exc)
    return AccentResult.success(color)


def _default_executor() -> ThreadPoolExecutor:
    global _ASYNC_EXECUTOR
    with _ASYNC_EXECUTOR_LOCK:
        if _ASYNC_EXECUTOR is None:
            _ASYNC_EXECUTOR = ThreadPoolExecutor(max_workers=1, thread_name_prefix="accent-color")
    return _ASYNC_EXECUTOR


def get_accent_color_async(
    buffer: PixelBuffer | np.ndarray | None,
    downsample_factor: int | None = None,
    *,
    concurrency_hint: int | None = None,
    config: AccentConfig | None = None,
    executor: Executor | None = None,
    on_success: Callable[[Color], None] | None = None,
    on_failure: Callable[[AccentColorError], None] | None = None,
) -> Future[AccentResult]:
    """Run ``get_accent_color`` on ``executor`` and notify the callbacks.

    Callbacks run on the worker thread once the result is known; an
    exception from a callback is logged and the future still holds the
    result. Cancelling the returned future only stops a call that has not
    started yet.
    """

    def _run() -> AccentResult:
        result = get_accent_color(buffer, downsample_factor, concurrency_hint, config)
        try:
            if result.ok and on_success is not None:
                on_success(result.color)
            elif not result.ok and on_failure is not None:
                on_failure(result.error)
        except Exception:
            logger.exception("Accent color callback raised")
        return result

    return (executor or _default_executor()).submit(_run)


def accent_from_image(
    path: Path,
    downsample_factor: int | None = None,
    concurrency_hint: int | None = None,
    config: AccentConfig | None = None,
) -> Color:
    return extract_accent(load_pixel_buffer(path), downsample_factor, concurrency_hint, config)
