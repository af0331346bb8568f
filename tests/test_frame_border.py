import numpy as np
import pytest

from DrawSurface import DrawSurface
from FrameBorder import BORDER_STYLES, draw_border, frame_rects, pick_border_style
from StampSeed import StampRandom


def _render(style, plate_mode=False):
    s = DrawSurface.blank(300, 360, 248)
    draw_border(s, 20, 20, 260, 320, style, frame_pad=12, inner_inset=5, plate_mode=plate_mode)
    return s.image


def test_frame_rects():
    outer, inner = frame_rects(0, 0, 200, 300, frame_pad=12, inner_inset=5)
    assert outer == (12, 12, 176, 276)
    assert inner == (22, 22, 156, 256)


@pytest.mark.parametrize("style", BORDER_STYLES)
def test_every_style_draws_a_frame(style):
    img = _render(style)
    blank = DrawSurface.blank(300, 360, 248).image
    assert img.tobytes() != blank.tobytes()
    # frame lines are solid ink
    assert (np.asarray(img).sum(axis=2) == 0).any()


def test_styles_differ_from_each_other():
    images = {style: _render(style).tobytes() for style in BORDER_STYLES}
    assert len(set(images.values())) == len(BORDER_STYLES)


def test_unknown_style_raises():
    s = DrawSurface.blank(100, 100)
    with pytest.raises(ValueError):
        draw_border(s, 0, 0, 100, 100, "wavy")


def test_scalloped_differs_between_plate_and_direct():
    assert _render("scalloped", plate_mode=True).tobytes() != _render("scalloped").tobytes()


@pytest.mark.parametrize("style", ["perforated", "zigzag", "ticket"])
def test_plate_mode_only_changes_scalloped(style):
    assert _render(style, plate_mode=True).tobytes() == _render(style).tobytes()


def test_pick_is_one_draw_from_the_stream():
    a = StampRandom(99)
    b = StampRandom(99)
    assert pick_border_style(a) == BORDER_STYLES[b.pick_index(4)]
    assert a.random() == b.random()


def test_pick_covers_all_styles():
    rnd = StampRandom(5)
    seen = {pick_border_style(rnd) for _ in range(200)}
    assert seen == set(BORDER_STYLES)
