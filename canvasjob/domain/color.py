# canvasjob/domain/color.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Union
import string

TRANSPARENT = "transparent"
ALPHA = "alpha"  # alias for transparent

_HEX_DIGITS = set(string.hexdigits)


@dataclass(frozen=True)
class Alpha:
    """Fully transparent fill."""

    def rgba(self) -> Tuple[int, int, int, int]:
        return (0, 0, 0, 0)


@dataclass(frozen=True)
class RGB:
    r: int
    g: int
    b: int

    def rgba(self) -> Tuple[int, int, int, int]:
        return (self.r, self.g, self.b, 255)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


ColorSpec = Union[Alpha, RGB]

WHITE = RGB(255, 255, 255)


def parse_color(token: str) -> ColorSpec:
    """
    Turn a color token into a ColorSpec. Never raises.

    "transparent" / "alpha" (any case) give Alpha. Otherwise one leading '#'
    is dropped, 3-digit shorthand is expanded ("f0a" -> "ff00aa") and six hex
    digits are read as RGB. Anything else falls back to opaque white.
    """
    value = (token or "").strip().lower()
    if value in (TRANSPARENT, ALPHA):
        return Alpha()
    if value.startswith("#"):
        value = value[1:]
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6 or not set(value) <= _HEX_DIGITS:
        return WHITE
    return RGB(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


def parse_rgb(token: str) -> RGB:
    """Like parse_color, for places that cannot paint transparency (text)."""
    color = parse_color(token)
    if isinstance(color, Alpha):
        return WHITE
    return color
