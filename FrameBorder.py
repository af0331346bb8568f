import math

from DrawSurface import HALF_PI, TWO_PI, iter_steps


BORDER_STYLES = ("perforated", "scalloped", "zigzag", "ticket")

# Paper/background colour used to "punch" the frame
_BG = 255
_INK = 0


def pick_border_style(rnd) -> str:
    """Uniform pick from the stamp's random stream (one draw)."""
    return BORDER_STYLES[rnd.pick_index(len(BORDER_STYLES))]


def frame_rects(x: float, y: float, w: float, h: float, *, frame_pad: float, inner_inset: float):
    """
    Outer frame (stamp rect inset by frame_pad) and inner frame
    (outer inset by inner_inset + 5).

    Returns ((bx, by, bw, bh), (ix, iy, iw, ih)).
    """
    bx = x + frame_pad
    by = y + frame_pad
    bw = w - frame_pad * 2
    bh = h - frame_pad * 2
    k = inner_inset + 5
    return (bx, by, bw, bh), (bx + k, by + k, bw - k * 2, bh - k * 2)


def draw_border(
    surface,
    x: float,
    y: float,
    w: float,
    h: float,
    style: str = "perforated",
    *,
    frame_pad: float = 12,
    inner_inset: float = 5,
    plate_mode: bool = False,
) -> None:
    """
    Marco doble + borde decorativo + marcas de esquina.

    style:
        'perforated' | 'scalloped' | 'zigzag' | 'ticket'

    plate_mode:
        scalloped edges are filled paper dots on ink plates and stroked bumps
        on the direct colour surface.
    """
    if style not in BORDER_STYLES:
        raise ValueError(f"Estilo de borde no soportado: {style}")

    (bx, by, bw, bh), (ix, iy, iw, ih) = frame_rects(
        x, y, w, h, frame_pad=frame_pad, inner_inset=inner_inset
    )

    # outer frame
    with surface.style():
        surface.no_fill()
        surface.stroke(_INK)
        surface.stroke_weight(3)
        surface.rect(bx, by, bw, bh, 3)

    # inner frame
    with surface.style():
        surface.no_fill()
        surface.stroke(_INK)
        surface.stroke_weight(1.5)
        surface.rect(ix, iy, iw, ih, 3)

    if style == "perforated":
        _edge_perforated(surface, bx, by, bw, bh)
    elif style == "scalloped":
        if plate_mode:
            _edge_scalloped_dots(surface, bx, by, bw, bh)
        else:
            _edge_scalloped_bumps(surface, bx, by, bw, bh)
    elif style == "zigzag":
        _edge_zigzag(surface, bx, by, bw, bh)
    else:
        _edge_ticket(surface, bx, by, bw, bh)

    _corner_ticks(surface, bx, by, bw, bh)


# ==========================================================
# Decorative edges
# ==========================================================

def _edge_perforated(surface, bx, by, bw, bh, step=16, r=7, inset=5):
    with surface.style():
        surface.no_fill()
        surface.stroke(_BG)
        surface.stroke_weight(8)
        for px in iter_steps(bx + step, bx + bw, step):
            surface.arc(px, by + inset, r * 2, r * 2, math.pi, TWO_PI)
            surface.arc(px, by + bh - inset, r * 2, r * 2, 0, math.pi)
        for py in iter_steps(by + step, by + bh, step):
            surface.arc(bx + inset, py, r * 2, r * 2, HALF_PI, 3 * HALF_PI)
            surface.arc(bx + bw - inset, py, r * 2, r * 2, -HALF_PI, HALF_PI)


def _edge_scalloped_bumps(surface, bx, by, bw, bh, step=18, r=6):
    # outward half-circle outlines
    with surface.style():
        surface.no_fill()
        surface.stroke(_INK)
        surface.stroke_weight(1.5)
        for px in iter_steps(bx, bx + bw, step, inclusive=True):
            surface.arc(px, by, r * 2, r * 2, math.pi, TWO_PI)
            surface.arc(px, by + bh, r * 2, r * 2, 0, math.pi)
        for py in iter_steps(by, by + bh, step, inclusive=True):
            surface.arc(bx, py, r * 2, r * 2, HALF_PI, 3 * HALF_PI)
            surface.arc(bx + bw, py, r * 2, r * 2, -HALF_PI, HALF_PI)


def _edge_scalloped_dots(surface, bx, by, bw, bh, step=18, r=6):
    with surface.style():
        surface.no_stroke()
        surface.fill(_BG)
        for px in iter_steps(bx, bx + bw, step, inclusive=True):
            surface.circle(px, by, r * 2)
            surface.circle(px, by + bh, r * 2)
        for py in iter_steps(by, by + bh, step, inclusive=True):
            surface.circle(bx, py, r * 2)
            surface.circle(bx + bw, py, r * 2)


def _edge_zigzag(surface, bx, by, bw, bh, step=14, tri=6):
    with surface.style():
        surface.no_stroke()
        surface.fill(_INK)
        for px in iter_steps(bx, bx + bw, step):
            surface.triangle(px, by, px + step / 2, by - tri, px + step, by)
            surface.triangle(px, by + bh, px + step / 2, by + bh + tri, px + step, by + bh)
        for py in iter_steps(by, by + bh, step):
            surface.triangle(bx, py, bx - tri, py + step / 2, bx, py + step)
            surface.triangle(bx + bw, py, bx + bw + tri, py + step / 2, bx + bw, py + step)


def _edge_ticket(surface, bx, by, bw, bh, notch=14):
    with surface.style():
        surface.no_fill()
        surface.stroke(_BG)
        surface.stroke_weight(10)
        surface.arc(bx, by + bh / 2, notch * 2, notch * 2, -HALF_PI, HALF_PI)
        surface.arc(bx + bw, by + bh / 2, notch * 2, notch * 2, HALF_PI, -HALF_PI)
        surface.arc(bx + bw / 2, by, notch * 2, notch * 2, 0, math.pi)
        surface.arc(bx + bw / 2, by + bh, notch * 2, notch * 2, math.pi, 0)


def _corner_ticks(surface, bx, by, bw, bh, tick=18):
    with surface.style():
        surface.stroke(_INK)
        surface.stroke_weight(1.5)
        surface.line(bx, by, bx + tick, by)
        surface.line(bx, by, bx, by + tick)
        surface.line(bx + bw, by, bx + bw - tick, by)
        surface.line(bx + bw, by, bx + bw, by + tick)
        surface.line(bx, by + bh, bx + tick, by + bh)
        surface.line(bx, by + bh, bx, by + bh - tick)
        surface.line(bx + bw, by + bh, bx + bw - tick, by + bh)
        surface.line(bx + bw, by + bh, bx + bw, by + bh - tick)
