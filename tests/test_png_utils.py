from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from accent_color.errors import InvalidInputError
from common.png_utils import load_pixel_buffer


def test_load_pixel_buffer_converts_to_rgba(tmp_path: Path) -> None:
    path = tmp_path / "rgb.png"
    image = Image.new("RGB", (5, 3), color=(10, 20, 30))
    image.putpixel((4, 0), (200, 100, 50))
    image.save(path, format="PNG")

    buffer = load_pixel_buffer(path)

    assert (buffer.width, buffer.height) == (5, 3)
    assert buffer.pixels[0].tolist() == [10, 20, 30, 255]
    # Row-major, top-left origin.
    assert buffer.pixels[4].tolist() == [200, 100, 50, 255]


def test_load_pixel_buffer_rejects_non_image(tmp_path: Path) -> None:
    path = tmp_path / "bad.png"
    path.write_text("not an image")
    with pytest.raises(InvalidInputError) as excinfo:
        load_pixel_buffer(path)
    assert excinfo.value.code == "E1002_IMAGE_UNREADABLE"


def test_load_pixel_buffer_rejects_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InvalidInputError):
        load_pixel_buffer(tmp_path / "missing.png")
