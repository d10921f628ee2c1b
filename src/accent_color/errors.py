from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AccentColorError(Exception):
    code: str
    message: str
    hint: str

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "hint": self.hint}


class InvalidInputError(AccentColorError):
    """Null, empty, zero-dimension, or malformed pixel input."""


class DegenerateHistogramError(AccentColorError):
    """Histogram has no populated bin, so there is nothing to select from."""


def invalid_input(message: str, hint: str = "Provide a non-empty RGBA8 pixel buffer.") -> InvalidInputError:
    return InvalidInputError(code="E1001_INVALID_INPUT", message=message, hint=hint)
