# canvasjob/domain/geometry.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Type, TypeVar
import math

from canvasjob.domain.color import TRANSPARENT
from canvasjob.errors import ConfigurationError


class ResizeMethod(str, Enum):
    FIT = "fit"
    CROP = "crop"
    SCALE = "scale"


class Align(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VerticalAlign(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


E = TypeVar("E", bound=Enum)


def coerce(enum_cls: Type[E], value, default: E) -> E:
    """Lenient enum lookup: unknown or empty values give the default."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip().lower())
    except ValueError:
        return default


@dataclass(frozen=True)
class ResizeSpec:
    width: Optional[int] = None
    height: Optional[int] = None
    method: ResizeMethod = ResizeMethod.FIT
    align: Align = Align.CENTER
    vertical_align: VerticalAlign = VerticalAlign.MIDDLE
    background: str = TRANSPARENT

    @property
    def has_target(self) -> bool:
        return bool(self.width) or bool(self.height)


@dataclass(frozen=True)
class Layout:
    canvas_width: int
    canvas_height: int
    content_width: int
    content_height: int
    offset_x: int
    offset_y: int


def round_half_away(value: float) -> int:
    """Round to nearest, ties away from zero (2.5 -> 3, -0.5 -> -1)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _check_target(name: str, value: Optional[int]) -> None:
    if value is not None and value < 0:
        raise ConfigurationError(f"Target {name} must be positive, got {value}.")


def compute_layout(source_width: int, source_height: int, spec: ResizeSpec) -> Layout:
    """
    Work out the canvas size and where the resampled source goes on it.

    A missing target dimension is derived from the source aspect ratio. When
    the canvas is larger than the source on both axes the source keeps its
    native size and is only positioned. Otherwise FIT letterboxes, CROP covers
    the canvas and lets it clip the overflow, SCALE stretches.
    """
    if source_width < 1 or source_height < 1:
        raise ConfigurationError(f"Invalid source size {source_width}x{source_height}.")
    _check_target("width", spec.width)
    _check_target("height", spec.height)
    if not spec.has_target:
        raise ConfigurationError("Please define correct image size.")

    canvas_w = spec.width or 0
    canvas_h = spec.height or 0
    if not canvas_h:
        canvas_h = math.ceil(canvas_w / source_width * source_height)
    elif not canvas_w:
        canvas_w = math.ceil(canvas_h / source_height * source_width)

    if canvas_w > source_width and canvas_h > source_height:
        content_w, content_h = source_width, source_height
    else:
        content_w, content_h = canvas_w, canvas_h

        fits_width = (source_width / canvas_w * canvas_h) >= source_height
        fits_height = (source_height / canvas_h * canvas_w) >= source_width

        if spec.method == ResizeMethod.CROP:
            if fits_width:
                content_w = math.ceil(canvas_h / source_height * source_width)
            elif fits_height:
                content_h = math.ceil(canvas_w / source_width * source_height)
        elif spec.method == ResizeMethod.FIT:
            if fits_width:
                content_h = math.ceil(canvas_w / source_width * source_height)
            elif fits_height:
                content_w = math.ceil(canvas_h / source_height * source_width)

    if spec.align == Align.LEFT:
        offset_x = 0
    elif spec.align == Align.RIGHT:
        offset_x = canvas_w - content_w
    else:
        offset_x = round_half_away(canvas_w / 2 - content_w / 2)

    if spec.vertical_align == VerticalAlign.TOP:
        offset_y = 0
    elif spec.vertical_align == VerticalAlign.BOTTOM:
        offset_y = canvas_h - content_h
    else:
        offset_y = round_half_away(canvas_h / 2 - content_h / 2)

    return Layout(canvas_w, canvas_h, content_w, content_h, offset_x, offset_y)
