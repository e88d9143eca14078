import pytest

from canvasjob.domain.geometry import Align, VerticalAlign
from canvasjob.domain.text_layout import (
    BBox, TextJob, auto_canvas_size, layout_text, measure_text_block, place_words,
)

SPACE = 4
WORD_H = 12


def measure(word):
    """Space is 4 wide, every other character 10 wide; words are 12 tall."""
    if word == " ":
        return BBox(SPACE, 3)
    if not word:
        return BBox(0, 0)
    return BBox(10 * len(word), WORD_H)


def test_empty_content_is_a_noop():
    assert layout_text(TextJob("   "), measure, (200, 100)) == []
    assert measure_text_block(TextJob(""), measure, (200, 100)) is None


def test_wraps_after_every_second_word():
    w = 20
    job = TextJob("aa bb cc", font_size=10, block_width=2 * w + SPACE)
    placements = layout_text(job, measure, (500, 500))
    line_height = abs(7 * 10 / 10)

    assert [p.word for p in placements] == ["aa", "bb", "cc"]
    ys = sorted({p.y for p in placements})
    assert len(ys) == 2
    y0 = 0 + 10  # position_y + font_size
    assert ys == [y0, y0 + line_height + WORD_H]
    x0 = 0 + SPACE  # LEFT anchor
    assert placements[0].x == x0
    assert placements[1].x == x0 + w + SPACE
    assert placements[2].x == x0


def test_consecutive_spaces_keep_empty_words():
    block = measure_text_block(TextJob("a  b"), measure, (100, 100))
    assert block.words == ["a", "", "b"]
    assert len(block.metrics) == 3


def test_fixed_width_defaults_to_canvas_width():
    block = measure_text_block(TextJob("hello"), measure, (321, 100))
    assert block.box_width == 321


def test_box_height_is_last_measured_word_not_max():
    def tall_first(word):
        if word == "big":
            return BBox(30, 40)
        return measure(word)

    block = measure_text_block(TextJob("big x", block_width="auto"), tall_first, (100, 100))
    assert block.box_height == WORD_H


def test_auto_width_accumulates_words_and_inner_spaces():
    block = measure_text_block(TextJob("ab cde f", block_width="auto"), measure, (1, 1))
    assert block.box_width == 20 + SPACE + 30 + SPACE + 10


def test_auto_canvas_size_adds_line_height_only_when_taller_than_canvas():
    block = measure_text_block(TextJob("ab", block_width="auto"), measure, (1, 1))
    assert auto_canvas_size(block, 8.4, canvas_height=1) == (20 + SPACE, 21)
    assert auto_canvas_size(block, 8.4, canvas_height=50) == (20 + SPACE, WORD_H)


def test_auto_canvas_size_rounds_fractional_advances_up():
    def fractional(word):
        if word == " ":
            return BBox(3.25, 3)
        return BBox(10.4 * len(word), 11.5)

    block = measure_text_block(TextJob("ab cd", block_width="auto"), fractional, (1, 100))
    # 20.8 + 3.25 + 20.8 + 3.25 = 48.1
    assert auto_canvas_size(block, 7, canvas_height=100) == (49, 12)


def test_auto_mode_resizes_before_placing():
    calls = []

    def on_resize(width, height):
        calls.append((width, height))
        return width, height

    job = TextJob("ab cd", font_size=10, block_width="auto")
    placements = layout_text(job, measure, (1, 1), on_resize=on_resize)
    box = 20 + SPACE + 20
    assert calls == [(box + SPACE, int(WORD_H + 7))]
    # whole block fits on one line
    assert {p.y for p in placements} == {10}
    assert placements[1].x == SPACE + 20 + SPACE


def test_auto_mode_without_callback_keeps_canvas():
    placements = layout_text(TextJob("ab cd", block_width="AUTO"), measure, (100, 100))
    assert len(placements) == 2


def test_line_height_override():
    job = TextJob("aa bb", font_size=10, block_width=25, line_height=5)
    placements = layout_text(job, measure, (100, 100))
    assert placements[1].y - placements[0].y == WORD_H + 5


def test_wrap_uses_next_word_metrics():
    def varied(word):
        if word == "tall":
            return BBox(40, 30)
        return measure(word)

    job = TextJob("a tall", font_size=10, block_width=30, line_height=1)
    placements = layout_text(job, varied, (100, 100))
    # after "a" the look-ahead sees "tall" (40 wide, 30 high) and wraps by its height
    assert placements[1].y == placements[0].y + 30 + 1
    assert placements[1].x == placements[0].x


@pytest.mark.parametrize("align,expected", [
    (Align.LEFT, 5 + SPACE),
    (Align.RIGHT, 200 - 100 - 5 - SPACE),
    (Align.CENTER, 200 / 2 - 100 / 2 - 5),
])
def test_horizontal_anchor(align, expected):
    job = TextJob("ab", block_width=100, position_x=5, align=align)
    block = measure_text_block(job, measure, (200, 80))
    assert place_words(block, job, (200, 80))[0].x == expected


@pytest.mark.parametrize("valign,expected", [
    (VerticalAlign.TOP, 7 + 12),
    (VerticalAlign.BOTTOM, 80 - WORD_H),
    (VerticalAlign.MIDDLE, 80 / 2 - WORD_H / 2 + 12),
])
def test_vertical_anchor(valign, expected):
    job = TextJob("ab", font_size=12, position_y=7, vertical_align=valign)
    block = measure_text_block(job, measure, (200, 80))
    assert place_words(block, job, (200, 80))[0].y == expected


def test_key_includes_every_parameter():
    a = TextJob("hi", position_x=1)
    b = TextJob("hi", position_x=2)
    assert a.key != b.key
    assert a.key == TextJob("hi", position_x=1).key


def test_default_line_height():
    assert TextJob("x", font_size=12).resolved_line_height() == pytest.approx(8.4)
