from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from accent_color.errors import AccentColorError, invalid_input

CHANNEL_ORDERS = {"RGBA": (0, 1, 2, 3), "BGRA": (2, 1, 0, 3)}


def check_pixel_values(array: np.ndarray) -> None:
    """Reject non-integer pixels and channel values outside [0, 255]."""
    if array.size == 0:
        return
    if not np.issubdtype(array.dtype, np.integer):
        raise invalid_input(
            f"Pixel array must hold 8-bit integer channels, got dtype {array.dtype}",
            hint="Scale float images to 0-255 and convert to uint8 first.",
        )
    if array.dtype != np.uint8 and (int(array.min()) < 0 or int(array.max()) > 255):
        raise invalid_input(
            f"Pixel channel values must be within [0, 255], got [{int(array.min())}, {int(array.max())}]",
            hint="Clip or rescale channel values to 0-255.",
        )


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: int = 255

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def to_dict(self) -> dict[str, Any]:
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a, "hex": self.to_hex()}


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Read-only RGBA8 pixels in top-left-origin, row-major order.

    ``pixels`` always has shape ``(width * height, 4)`` and dtype uint8.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise invalid_input(
                f"Pixel buffer has zero dimension: {self.width}x{self.height}",
                hint="Width and height must both be positive.",
            )
        if self.pixels.ndim != 2 or self.pixels.shape[1] != 4:
            raise invalid_input(
                f"Pixel array must have shape (N, 4), got {self.pixels.shape}",
            )
        if self.pixels.shape[0] != self.width * self.height:
            raise invalid_input(
                f"Pixel count {self.pixels.shape[0]} does not match {self.width}x{self.height}",
                hint="Check the width and height passed with the buffer.",
            )
        check_pixel_values(self.pixels)
        if self.pixels.dtype != np.uint8:
            object.__setattr__(self, "pixels", self.pixels.astype(np.uint8))
        if self.pixels.flags.writeable:
            view = self.pixels.view()
            view.flags.writeable = False
            object.__setattr__(self, "pixels", view)

    def __len__(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        width: int | None = None,
        height: int | None = None,
    ) -> "PixelBuffer":
        array = np.asarray(array)
        if array.size == 0:
            raise invalid_input("Pixel array is empty.")
        if array.ndim == 3:
            if array.shape[2] != 4:
                raise invalid_input(f"Expected 4 channels, got {array.shape[2]}")
            rows, cols = array.shape[:2]
            return cls(width=int(cols), height=int(rows), pixels=array.reshape(-1, 4))
        if array.ndim == 2:
            if width is None or height is None:
                raise invalid_input(
                    "Flat pixel arrays need an explicit width and height.",
                    hint="Pass width= and height= or an (H, W, 4) array.",
                )
            return cls(width=int(width), height=int(height), pixels=array)
        raise invalid_input(f"Unsupported pixel array shape: {array.shape}")

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        width: int,
        height: int,
        channel_order: str = "RGBA",
    ) -> "PixelBuffer":
        order = CHANNEL_ORDERS.get(channel_order.upper())
        if order is None:
            raise invalid_input(
                f"Unknown channel order: {channel_order}",
                hint=f"Use one of: {', '.join(sorted(CHANNEL_ORDERS))}.",
            )
        if not data:
            raise invalid_input("Pixel data is empty.")
        if len(data) != width * height * 4:
            raise invalid_input(
                f"Pixel data is {len(data)} bytes, expected {width * height * 4} for {width}x{height}",
            )
        raw = np.frombuffer(data, dtype=np.uint8).reshape(-1, 4)
        if order != CHANNEL_ORDERS["RGBA"]:
            raw = raw[:, list(order)]
        return cls(width=width, height=height, pixels=raw)


@dataclass(frozen=True)
class AccentResult:
    """Either a color (``ok``) or the error that prevented one."""

    ok: bool
    color: Color | None = None
    error: AccentColorError | None = None

    @classmethod
    def success(cls, color: Color) -> "AccentResult":
        return cls(ok=True, color=color)

    @classmethod
    def failure(cls, error: AccentColorError) -> "AccentResult":
        return cls(ok=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        if self.ok and self.color is not None:
            return {"status": "ok", "color": self.color.to_dict()}
        payload: dict[str, Any] = {"status": "error"}
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        return payload
