from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from accent_color.errors import InvalidInputError
from accent_color.types import PixelBuffer


def load_pixel_buffer(path: Path) -> PixelBuffer:
    """Decode an image file into an RGBA8 ``PixelBuffer``."""
    try:
        with Image.open(path) as image:
            rgba = np.array(image.convert("RGBA"), dtype=np.uint8)
    except (OSError, UnidentifiedImageError) as exc:
        raise InvalidInputError(
            code="E1002_IMAGE_UNREADABLE",
            message=f"Unable to read image: {path}",
            hint="Ensure the path exists and points to an image Pillow can decode.",
        ) from exc
    return PixelBuffer.from_array(rgba)
