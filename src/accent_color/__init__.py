"""accent_color library package."""

from .errors import AccentColorError, DegenerateHistogramError, InvalidInputError
from .types import AccentResult, Color, PixelBuffer
from .quantize import decode, quantize
from .histogram import build_histogram
from .selector import select_accent
from .extract import accent_from_image, extract_accent, get_accent_color, get_accent_color_async

__all__ = [
    "AccentColorError",
    "AccentResult",
    "Color",
    "DegenerateHistogramError",
    "InvalidInputError",
    "PixelBuffer",
    "accent_from_image",
    "build_histogram",
    "decode",
    "extract_accent",
    "get_accent_color",
    "get_accent_color_async",
    "quantize",
    "select_accent",
]
