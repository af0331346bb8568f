# StampComposer.py
# Lost Circuits: one stamp per grid cell
#
# Layering order is part of the contract (do not reorder):
#   panel -> traces -> photo -> border -> price -> stars -> badge -> text
#
# The border pick is the first random draw after the traces, so the direct
# and the plate renders of the same seed agree. Trace paths are always drawn
# from the stream, even when traces are hidden.

from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence, Tuple

from PIL import Image

from DeviceRecords import DeviceRecord, format_price, origin_label, rarity_stars, year_range_label
from FrameBorder import draw_border, frame_rects, pick_border_style
from GridLayout import GridLayout
from StampSeed import StampRandom
from TextWrap import wrap_lines, wrap_title


Point = Tuple[float, float]
Rect = Tuple[float, float, float, float]

TRACE_COLOR = (0, 50)
STAR_COLOR = (220, 180, 50)
BADGE_BG = 250

BADGE_KINDS = ("audio", "storage", "gaming", "computing", "camera", "mobile", "other")


# ==========================================================
# Sheets
# ==========================================================

def total_sheets(record_count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size debe ser >= 1")
    return max(1, math.ceil(record_count / page_size))


def sheet_range(record_count: int, page_size: int, sheet_index: int) -> range:
    start = sheet_index * page_size
    end = min(start + page_size, record_count)
    return range(start, max(start, end))


# ==========================================================
# Geometry helpers
# ==========================================================

def inner_frame(x: float, y: float, w: float, h: float, stamp_cfg: dict) -> Rect:
    return frame_rects(
        x, y, w, h,
        frame_pad=stamp_cfg["frame_pad"],
        inner_inset=stamp_cfg["inner_inset"],
    )[1]


def image_box(x: float, y: float, w: float, h: float, stamp_cfg: dict) -> Rect:
    k = stamp_cfg["inset"] + stamp_cfg["image_margin"]
    return (x + k, y + k, w - k * 2, h - k * 2 - stamp_cfg["text_reserve"])


def trace_count(release_year: Optional[int], traces_cfg: dict) -> int:
    """Linear from count_at_min (year_min) down to count_at_max (year_max)."""
    y0, y1 = traces_cfg["year_min"], traces_cfg["year_max"]
    yr = traces_cfg["unknown_year"] if release_year is None else release_year
    yr = min(max(yr, y0), y1)
    t = (yr - y0) / float(y1 - y0)
    c0, c1 = traces_cfg["count_at_min"], traces_cfg["count_at_max"]
    return int(math.floor(c0 + (c1 - c0) * t))


def circuit_paths(
    record: DeviceRecord,
    frame: Rect,
    rnd: StampRandom,
    traces_cfg: dict,
    footer: float,
) -> list[list[Point]]:
    """
    Random-walk polylines inside the frame, kept above the footer strip.

    Draw order per trace: start x, start y, then per step (length, direction).
    """
    fx, fy, fw, fh = frame
    x0, x1 = fx, fx + fw
    y0 = fy
    y1 = max(fy, fy + fh - footer)

    def clamp(v, lo, hi):
        return min(max(v, lo), hi)

    paths = []
    for _ in range(trace_count(record.release_year, traces_cfg)):
        px = rnd.uniform(x0, x1)
        py = rnd.uniform(y0, y1)
        pts = [(px, py)]
        for _s in range(traces_cfg["steps"]):
            step = rnd.uniform(traces_cfg["step_min"], traces_cfg["step_max"])
            d = rnd.pick_index(4)
            if d == 0:
                px += step
            elif d == 1:
                px -= step
            elif d == 2:
                py += step
            else:
                py -= step
            px = clamp(px, x0, x1)
            py = clamp(py, y0, y1)
            pts.append((px, py))
        paths.append(pts)
    return paths


def badge_kind(category: str | None) -> str:
    cat = (category or "").split("/")[0].strip().lower()
    if "audio" in cat:
        return "audio"
    if "storage" in cat:
        return "storage"
    if "gaming" in cat:
        return "gaming"
    if "computing" in cat or "computer" in cat or "laptop" in cat:
        return "computing"
    if "camera" in cat:
        return "camera"
    if "mobile" in cat or "phone" in cat:
        return "mobile"
    return "other"


# ==========================================================
# Stamp layers
# ==========================================================

def _draw_panel(surface, x, y, w, h, cfg):
    k = cfg["inset"]
    with surface.style():
        surface.fill(cfg["paper_tone"])
        surface.no_stroke()
        surface.rect(x + k, y + k, w - k * 2, h - k * 2)


def _draw_traces(surface, paths: Sequence[Sequence[Point]]):
    with surface.style():
        surface.no_fill()
        surface.stroke(TRACE_COLOR)
        surface.stroke_weight(1.5)
        for pts in paths:
            surface.polyline(pts)


def _draw_photo(target, image, x, y, w, h, cfg):
    box = image_box(x, y, w, h, cfg)
    with target.marks.style():
        target.marks.fill(cfg["paper_tone"])
        target.marks.no_stroke()
        target.marks.rect(*box)

    if image is not None and image.width > 0 and image.height > 0:
        target.place_photo(image, box)


def _draw_price(surface, record: DeviceRecord, frame: Rect, cfg):
    if record.price_value == 0:
        return

    ix, iy, iw, _ih = frame
    d = cfg["price_diameter"]
    cx = ix + iw - d / 2
    cy = iy + d / 2

    with surface.style():
        surface.fill(255)
        surface.stroke(0)
        surface.stroke_weight(3)
        surface.circle(cx, cy, d)
        surface.no_fill()
        surface.stroke_weight(1)
        surface.stroke((0, 150))
        surface.circle(cx, cy, d - 8)

    with surface.style():
        surface.fill(0)
        surface.no_stroke()
        surface.text_size(16)
        surface.text_style("bold")
        surface.text(format_price(record.original_price), cx, cy - 3)
        if record.release_year is not None:
            surface.text_size(8)
            surface.text_style("normal")
            surface.fill((0, 200))
            surface.text(str(record.release_year), cx, cy + 9)


def _draw_stars(surface, record: DeviceRecord, frame: Rect, cfg):
    stars = rarity_stars(record.availability_today)
    if stars == 0:
        return

    ix, iy, iw, _ih = frame
    star_size, spacing = 10, 12
    start_x = ix + iw - 30 - stars * spacing
    start_y = iy + cfg["star_y_offset"]

    with surface.style():
        surface.fill(STAR_COLOR)
        surface.no_stroke()
        for i in range(stars):
            surface.star(start_x + i * spacing, start_y, star_size * 0.5, star_size * 0.2, 5)


def _draw_badge(surface, record: DeviceRecord, frame: Rect, cfg):
    ix, iy, iw, ih = frame
    size = cfg["badge_size"]
    bx = ix + iw - size
    by = iy + ih - size

    with surface.style():
        surface.fill(BADGE_BG)
        surface.no_stroke()
        surface.rect(bx - 6, by - 6, size + 12, size + 12, 8)

    kind = badge_kind(record.category)
    with surface.style():
        surface.translate(bx + size / 2, by + size / 2)
        surface.no_fill()
        surface.stroke(0)
        surface.stroke_weight(2.5)

        if kind == "audio":
            surface.circle(0, 0, 22)
            surface.line(-10, 0, 10, 0)
        elif kind == "storage":
            surface.rect_centered(0, 0, 22, 22, 2)
        elif kind == "gaming":
            surface.regular_polygon(0, 0, 11, 5)
        elif kind == "computing":
            surface.regular_polygon(0, 0, 11, 6)
        elif kind == "camera":
            surface.circle(0, 0, 20)
            surface.circle(0, 0, 12)
        elif kind == "mobile":
            surface.rect_centered(0, 0, 14, 24, 3)
        else:
            surface.circle(0, 0, 20)


def _draw_text(surface, record: DeviceRecord, x, y, w, h):
    cx = x + w / 2
    base_y = y + h - 130
    max_width = w - 70

    with surface.style():
        surface.no_stroke()

        # name
        surface.fill(0)
        surface.text_style("bold")
        surface.text_size(18)
        name_lines = wrap_title(record.name, max_width, surface.text_width)
        surface.text(name_lines[0], cx, base_y)
        if len(name_lines) > 1:
            surface.text_size(16)
            surface.text(name_lines[1], cx, base_y + 20)

        # years
        surface.text_style("normal")
        surface.text_size(14)
        surface.text(year_range_label(record), cx, base_y + 42)

        # region • manufacturer
        surface.text_size(11)
        surface.fill(70)
        surface.text(origin_label(record), cx, base_y + 60)

        # form factor
        if record.form_factor:
            surface.text_size(10)
            surface.text_style("italic")
            surface.fill(100)
            surface.text(record.form_factor, cx, base_y + 76)

        # reason (1-3 lines, centred)
        if record.reason_for_obsolescence:
            surface.text_style("normal")
            surface.text_size(9)
            surface.fill(130)
            lines = wrap_lines(record.reason_for_obsolescence.strip(), max_width, surface.text_width, max_lines=3)
            for i, line in enumerate(lines):
                surface.text(line, cx, base_y + 92 + i * 11, valign="top")


# ==========================================================
# Compose
# ==========================================================

def compose_stamp(
    target,
    record: DeviceRecord,
    x: float,
    y: float,
    w: float,
    h: float,
    rnd: StampRandom,
    *,
    settings: dict,
    image: Image.Image | None = None,
    show_traces: bool = True,
) -> str:
    """Draws one stamp on the target. Returns the border style used."""
    cfg = settings["stamp"]
    frame = inner_frame(x, y, w, h, cfg)

    # 1) paper panel (preview layer only on plates)
    _draw_panel(target.paper, x, y, w, h, cfg)

    target.begin_stamp(x, y, w, h)
    try:
        marks = target.marks

        # 2) circuits
        paths = circuit_paths(record, frame, rnd, settings["traces"], cfg["trace_footer"])
        if show_traces:
            _draw_traces(marks, paths)

        # 3) photo
        _draw_photo(target, image, x, y, w, h, cfg)

        # 4) border (next random draw)
        style = pick_border_style(rnd)
        draw_border(
            marks, x, y, w, h, style,
            frame_pad=cfg["frame_pad"],
            inner_inset=cfg["inner_inset"],
            plate_mode=target.plate_mode,
        )

        # 5-8) marks
        _draw_price(marks, record, frame, cfg)
        _draw_stars(marks, record, frame, cfg)
        _draw_badge(marks, record, frame, cfg)
        _draw_text(marks, record, x, y, w, h)
    finally:
        target.end_stamp()

    return style


def compose_sheet(
    target,
    records: Sequence[DeviceRecord],
    grid: GridLayout,
    *,
    run_seed: int,
    sheet_index: int,
    settings: dict,
    images: Mapping[str, Image.Image] | None = None,
    show_traces: bool = True,
) -> list[str]:
    """Composes every stamp of one sheet. Returns the border style per stamp."""
    images = images or {}
    page = grid.cell_count()
    styles = []

    for i in sheet_range(len(records), page, sheet_index):
        rec = records[i]
        idx = i - sheet_index * page
        cell = grid.get_cell(idx % grid.cols, idx // grid.cols)
        if cell is None:
            continue

        rnd = StampRandom.for_record(run_seed, rec.id)
        img = images.get(rec.image_path) if rec.image_path else None
        styles.append(
            compose_stamp(
                target, rec, cell.x, cell.y, cell.width, cell.height, rnd,
                settings=settings,
                image=img,
                show_traces=show_traces,
            )
        )
    return styles


def draw_placeholder(surface, message: str = "Loading...") -> None:
    surface.background(255)
    with surface.style():
        surface.fill(0)
        surface.no_stroke()
        surface.text_size(20)
        surface.text(message, surface.width / 2, surface.height / 2)
