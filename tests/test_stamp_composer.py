import numpy as np
import pytest

from DrawSurface import DrawSurface
from GridLayout import GridLayout
from InkPlates import DirectTarget, InkPlateSet, PlateTarget
from SheetSettings import validate_settings
from StampComposer import (
    badge_kind,
    circuit_paths,
    compose_sheet,
    compose_stamp,
    image_box,
    inner_frame,
    sheet_range,
    total_sheets,
    trace_count,
)
from StampSeed import StampRandom


@pytest.fixture
def small_settings():
    return validate_settings({"canvas": {"width": 1200, "height": 1500, "cols": 3, "rows": 2}})


def _cell(settings, index=0):
    return GridLayout.from_settings(settings).get_cell_by_index(index)


def _plate_target(settings):
    c = settings["canvas"]
    plates = InkPlateSet(settings["plates"])
    plates.ensure(c["width"], c["height"])
    return PlateTarget(DrawSurface.blank(c["width"], c["height"]), plates, settings["separation"]), plates


# ----------------------------------------------------------
# Pure helpers
# ----------------------------------------------------------

@pytest.mark.parametrize(
    "year,count",
    [(1960, 25), (2020, 8), (None, 16), (1990, 16), (1900, 25), (2050, 8)],
)
def test_trace_count(settings, year, count):
    assert trace_count(year, settings["traces"]) == count


def test_trace_count_never_increases_with_year(settings):
    counts = [trace_count(y, settings["traces"]) for y in range(1950, 2031)]
    assert counts == sorted(counts, reverse=True)


def test_circuit_paths_stay_in_frame(settings, make_records):
    rec = make_records(1)[0]
    frame = inner_frame(100, 100, 392, 655, settings["stamp"])
    footer = settings["stamp"]["trace_footer"]
    paths = circuit_paths(rec, frame, StampRandom(1), settings["traces"], footer)

    fx, fy, fw, fh = frame
    assert len(paths) == trace_count(rec.release_year, settings["traces"])
    for pts in paths:
        assert len(pts) == settings["traces"]["steps"] + 1
        for px, py in pts:
            assert fx <= px <= fx + fw
            assert fy <= py <= fy + fh - footer
        for (ax, ay), (bx, by) in zip(pts, pts[1:]):
            # orthogonal steps only
            assert ax == bx or ay == by


def test_circuit_paths_are_reproducible(settings, make_records):
    rec = make_records(1)[0]
    frame = inner_frame(0, 0, 392, 655, settings["stamp"])
    a = circuit_paths(rec, frame, StampRandom.for_record(7, rec.id), settings["traces"], 140)
    b = circuit_paths(rec, frame, StampRandom.for_record(7, rec.id), settings["traces"], 140)
    assert a == b


@pytest.mark.parametrize(
    "category,kind",
    [
        ("Audio / Portable", "audio"),
        ("Storage", "storage"),
        ("Gaming Handheld", "gaming"),
        ("Home Computer", "computing"),
        ("Laptop", "computing"),
        ("Camera / Film", "camera"),
        ("Mobile Phone", "mobile"),
        ("Kitchen", "other"),
        ("", "other"),
        (None, "other"),
        ("Accessory / Audio", "other"),
    ],
)
def test_badge_kind(category, kind):
    assert badge_kind(category) == kind


def test_sheet_paging():
    assert total_sheets(23, 20) == 2
    assert total_sheets(20, 20) == 1
    assert total_sheets(0, 20) == 1
    assert list(sheet_range(23, 20, 0)) == list(range(20))
    assert list(sheet_range(23, 20, 1)) == [20, 21, 22]
    assert list(sheet_range(23, 20, 2)) == []
    with pytest.raises(ValueError):
        total_sheets(5, 0)


# ----------------------------------------------------------
# Direct colour
# ----------------------------------------------------------

def test_border_does_not_depend_on_trace_toggle(small_settings, make_records):
    cell = _cell(small_settings)
    for rec in make_records(12):
        styles = []
        for show in (True, False):
            target = DirectTarget(DrawSurface.blank(1200, 1500))
            styles.append(
                compose_stamp(
                    target, rec, cell.x, cell.y, cell.width, cell.height,
                    StampRandom.for_record(1337, rec.id),
                    settings=small_settings,
                    show_traces=show,
                )
            )
        assert styles[0] == styles[1]


def test_stamp_is_pure_function_of_seed_and_id(small_settings, make_records, photo):
    rec = make_records(2)[1]
    cell = _cell(small_settings)

    def render():
        target = DirectTarget(DrawSurface.blank(1200, 1500))
        compose_stamp(
            target, rec, cell.x, cell.y, cell.width, cell.height,
            StampRandom.for_record(42, rec.id),
            settings=small_settings,
            image=photo,
        )
        return target.finish().tobytes()

    assert render() == render()


def test_direct_photo_is_placed_in_image_box(small_settings, make_records, photo):
    rec = make_records(2)[1]
    cell = _cell(small_settings)
    target = DirectTarget(DrawSurface.blank(1200, 1500))
    compose_stamp(
        target, rec, cell.x, cell.y, cell.width, cell.height, StampRandom(3),
        settings=small_settings, image=photo, show_traces=False,
    )
    bx, by, bw, bh = image_box(cell.x, cell.y, cell.width, cell.height, small_settings["stamp"])
    # right end of the gradient is bright red/green, never the paper tone
    px = target.finish().getpixel((int(bx + bw - 3), int(by + bh / 2)))
    assert px != (248, 248, 248)


def test_compose_sheet_one_style_per_stamp(small_settings, make_records):
    records = make_records(8)
    grid = GridLayout.from_settings(small_settings)
    target = DirectTarget(DrawSurface.blank(1200, 1500))
    styles = compose_sheet(target, records, grid, run_seed=1, sheet_index=1, settings=small_settings)
    assert len(styles) == 2


# ----------------------------------------------------------
# Ink plates
# ----------------------------------------------------------

def test_plate_panel_is_preview_only(small_settings, make_records):
    rec = make_records(1)[0]
    cell = _cell(small_settings)
    target, plates = _plate_target(small_settings)
    compose_stamp(
        target, rec, cell.x, cell.y, cell.width, cell.height, StampRandom(11),
        settings=small_settings,
    )
    preview = target.finish()

    probe = (int(cell.x + 19), int(cell.y + cell.height / 2))
    assert preview.getpixel(probe) == (248, 248, 248)
    assert plates.primary.image.getpixel(probe) == 255
    assert plates.secondary.image.getpixel(probe) == 255


def test_plate_marks_and_halftone(small_settings, make_records, photo):
    rec = make_records(2)[1]
    cell = _cell(small_settings)
    target, plates = _plate_target(small_settings)
    compose_stamp(
        target, rec, cell.x, cell.y, cell.width, cell.height, StampRandom(11),
        settings=small_settings, image=photo,
    )
    preview = target.finish()
    assert preview.mode == "RGB"

    primary = np.asarray(plates.primary.image)
    secondary = np.asarray(plates.secondary.image)
    assert primary.min() == 0
    assert set(np.unique(secondary).tolist()) == {0, 255}

    # halftone stays inside the image box
    bx, by, bw, bh = image_box(cell.x, cell.y, cell.width, cell.height, small_settings["stamp"])
    ys, xs = np.nonzero(secondary == 0)
    assert xs.min() >= int(bx) and xs.max() <= int(bx + bw)
    assert ys.min() >= int(by) and ys.max() <= int(by + bh)


def test_plate_and_direct_pick_the_same_borders(small_settings, make_records):
    records = make_records(6)
    grid = GridLayout.from_settings(small_settings)
    direct = compose_sheet(
        DirectTarget(DrawSurface.blank(1200, 1500)), records, grid,
        run_seed=5, sheet_index=0, settings=small_settings,
    )
    target, _plates = _plate_target(small_settings)
    plate = compose_sheet(target, records, grid, run_seed=5, sheet_index=0, settings=small_settings)
    assert direct == plate
