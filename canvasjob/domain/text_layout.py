# canvasjob/domain/text_layout.py
from __future__ import annotations
import math
from dataclasses import dataclass, astuple
from typing import Callable, List, Optional, Tuple, Union

from canvasjob.domain.geometry import Align, VerticalAlign

AUTO = "auto"

BlockWidth = Union[int, str, None]


@dataclass(frozen=True)
class BBox:
    width: float
    height: float


@dataclass(frozen=True)
class TextJob:
    """Everything needed to lay out and draw one text block."""
    content: str
    font_size: int = 12
    font_name: str = "arial.ttf"
    color: str = "000000"
    line_height: Optional[float] = None
    block_width: BlockWidth = None
    position_x: int = 0
    position_y: int = 0
    align: Align = Align.LEFT
    vertical_align: VerticalAlign = VerticalAlign.TOP

    @property
    def key(self) -> str:
        # every parameter takes part so distinct calls never collapse
        return "write_text:" + "|".join(str(v) for v in astuple(self))

    @property
    def is_auto(self) -> bool:
        return isinstance(self.block_width, str) and self.block_width.lower() == AUTO

    def resolved_line_height(self) -> float:
        if self.line_height:
            return self.line_height
        return abs(7 * (self.font_size / 10))


@dataclass(frozen=True)
class Placement:
    word: str
    x: float
    y: float


@dataclass
class TextBlock:
    words: List[str]
    metrics: List[BBox]
    space_width: float
    box_width: float
    box_height: float


Measure = Callable[[str], BBox]
Size = Tuple[int, int]


def measure_text_block(job: TextJob, measure: Measure, canvas_size: Size) -> Optional[TextBlock]:
    """
    First pass: measure the space and every word.

    Returns None when the trimmed content is empty. Words come from splitting
    on single spaces, so runs of spaces keep their empty words. In auto mode
    the box width is the sum of word widths plus one space between words. The
    box height is whatever the last measured word reported.
    """
    content = job.content.strip()
    if not content:
        return None
    words = content.split(" ")
    space_width = measure(" ").width

    if job.is_auto:
        box_width: float = 0
    elif job.block_width:
        box_width = float(job.block_width)
    else:
        box_width = canvas_size[0]

    metrics: List[BBox] = []
    box_height: float = 0
    for i, word in enumerate(words):
        bbox = measure(word)
        metrics.append(bbox)
        if job.is_auto:
            box_width += bbox.width
            if i + 1 < len(words):
                box_width += space_width
        box_height = bbox.height
    return TextBlock(words, metrics, space_width, box_width, box_height)


def auto_canvas_size(block: TextBlock, line_height: float, canvas_height: int) -> Size:
    """Smallest whole-pixel canvas that holds an auto-width block."""
    height = block.box_height
    if height > canvas_height:
        height += line_height
    return math.ceil(block.box_width + block.space_width), math.ceil(height)


def anchor_for(block: TextBlock, job: TextJob, canvas_size: Size) -> Tuple[float, float]:
    canvas_w, canvas_h = canvas_size
    if job.align == Align.RIGHT:
        x = canvas_w - block.box_width - job.position_x - block.space_width
    elif job.align == Align.CENTER:
        x = canvas_w / 2 - block.box_width / 2 - job.position_x
    else:
        x = job.position_x + block.space_width

    if job.vertical_align == VerticalAlign.BOTTOM:
        y = canvas_h - block.box_height
    elif job.vertical_align == VerticalAlign.MIDDLE:
        y = canvas_h / 2 - block.box_height / 2 + job.font_size
    else:
        y = job.position_y + job.font_size
    return x, y


def place_words(block: TextBlock, job: TextJob, canvas_size: Size) -> List[Placement]:
    """
    Second pass: greedy wrapping.

    After placing a word the cursor moves past it (and past a space when
    another word follows). The wrap test looks ahead at the next word: if it
    would overflow the box, the cursor returns to the anchor column and drops
    by that next word's height plus the line height.
    """
    line_height = job.resolved_line_height()
    anchor_x, anchor_y = anchor_for(block, job, canvas_size)
    relative_x: float = 0
    placements: List[Placement] = []
    count = len(block.words)
    for i, word in enumerate(block.words):
        placements.append(Placement(word, anchor_x + relative_x, anchor_y))
        relative_x += block.metrics[i].width
        if i + 1 >= count:
            break
        nxt = block.metrics[i + 1]
        relative_x += block.space_width
        if relative_x + nxt.width > block.box_width:
            relative_x = 0
            anchor_y += nxt.height + line_height
    return placements


def layout_text(job: TextJob,
                measure: Measure,
                canvas_size: Size,
                on_resize: Optional[Callable[[int, int], Size]] = None) -> List[Placement]:
    """
    Lay out a text job against a canvas.

    In auto mode `on_resize(width, height)` is called with the size that fits
    the block; it must resize the canvas (stretching, SCALE) and return the
    new canvas size, which is then used for anchoring.
    """
    block = measure_text_block(job, measure, canvas_size)
    if block is None:
        return []
    if job.is_auto and on_resize is not None:
        width, height = auto_canvas_size(block, job.resolved_line_height(), canvas_size[1])
        canvas_size = on_resize(width, height)
    return place_words(block, job, canvas_size)
