# DrawSurface.py
# Lost Circuits: immediate-mode 2D surface over Pillow
#
# - p5-like state: fill / stroke / stroke weight / text size+style / translate
# - push/pop via `with surface.style():`
# - Strokes are centred on the geometry (Pillow draws outlines inward, so the
#   bbox is grown by half the weight)
# - Optional tone_map: every colour goes through it (ink plates use it to turn
#   colours into single-ink tones)

from __future__ import annotations

import copy
import math
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from paths import get_fonts_dir


RGBA = Tuple[int, int, int, int]

TWO_PI = math.pi * 2.0
HALF_PI = math.pi / 2.0


# ==========================================================
# Fonts (cached, PyInstaller-friendly)
# ==========================================================

_FONT_FILES = {
    "normal": ("DejaVuSans.ttf",),
    "bold": ("DejaVuSans-Bold.ttf",),
    "italic": ("DejaVuSans-Oblique.ttf",),
}

_SYSTEM_FONT_DIRS = (
    Path("/usr/share/fonts/truetype/dejavu"),
    Path("/usr/share/fonts/dejavu"),
    Path("/Library/Fonts"),
    Path("C:/Windows/Fonts"),
)

_FONT_CACHE: dict[tuple, ImageFont.ImageFont | ImageFont.FreeTypeFont] = {}


def _font_candidates(style: str):
    for name in _FONT_FILES.get(style, _FONT_FILES["normal"]):
        yield get_fonts_dir() / name
        for d in _SYSTEM_FONT_DIRS:
            yield d / name


def load_font(size: int, style: str = "normal"):
    key = (int(size), style)
    hit = _FONT_CACHE.get(key)
    if hit is not None:
        return hit

    font = None
    for p in _font_candidates(style):
        if p.exists():
            try:
                font = ImageFont.truetype(str(p), int(size))
                break
            except OSError:
                continue
    if font is None:
        font = ImageFont.load_default(size=int(size))

    _FONT_CACHE[key] = font
    return font


# ==========================================================
# Style state
# ==========================================================

@dataclass
class DrawStyle:
    fill: Optional[RGBA] = (255, 255, 255, 255)
    stroke: Optional[RGBA] = (0, 0, 0, 255)
    weight: float = 1.0
    text_size: int = 12
    text_style: str = "normal"  # normal | bold | italic
    tx: float = 0.0
    ty: float = 0.0


def to_rgba(c) -> RGBA:
    """
    Accepts p5-style colours:
      g | (g,) | (g, a) | (r, g, b) | (r, g, b, a)
    """
    if isinstance(c, (int, float)):
        g = int(c)
        return (g, g, g, 255)
    c = tuple(int(v) for v in c)
    if len(c) == 1:
        return (c[0], c[0], c[0], 255)
    if len(c) == 2:
        return (c[0], c[0], c[0], c[1])
    if len(c) == 3:
        return (c[0], c[1], c[2], 255)
    if len(c) == 4:
        return c  # type: ignore[return-value]
    raise ValueError(f"Color inválido: {c!r}")


class DrawSurface:
    """Drawing commands issued against one Pillow RGB image."""

    def __init__(
        self,
        image: Image.Image,
        *,
        tone_map: Callable[[RGBA], RGBA] | None = None,
    ):
        if image.mode != "RGB":
            raise ValueError(f"DrawSurface requiere imagen RGB (mode={image.mode})")
        self.image = image
        self.tone_map = tone_map
        self._draw = ImageDraw.Draw(image, "RGBA")
        self._style = DrawStyle()
        self._stack: list[DrawStyle] = []

    @classmethod
    def blank(cls, width: int, height: int, background=255, **kw) -> "DrawSurface":
        bg = to_rgba(background)
        if kw.get("tone_map") is not None:
            bg = kw["tone_map"](bg)
        return cls(Image.new("RGB", (int(width), int(height)), bg[:3]), **kw)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    # ------------------------------------------------------
    # Style stack
    # ------------------------------------------------------

    def push(self) -> None:
        self._stack.append(copy.copy(self._style))

    def pop(self) -> None:
        if not self._stack:
            raise RuntimeError("pop() sin push()")
        self._style = self._stack.pop()

    @contextmanager
    def style(self):
        self.push()
        try:
            yield self
        finally:
            self.pop()

    def _tone(self, c) -> RGBA:
        rgba = to_rgba(c)
        if self.tone_map is not None:
            rgba = self.tone_map(rgba)
        return rgba

    def fill(self, c) -> None:
        self._style.fill = self._tone(c)

    def no_fill(self) -> None:
        self._style.fill = None

    def stroke(self, c) -> None:
        self._style.stroke = self._tone(c)

    def no_stroke(self) -> None:
        self._style.stroke = None

    def stroke_weight(self, w: float) -> None:
        self._style.weight = float(w)

    def text_size(self, size: float) -> None:
        self._style.text_size = max(1, int(round(size)))

    def text_style(self, style: str) -> None:
        if style not in _FONT_FILES:
            raise ValueError(f"text_style inválido: {style}")
        self._style.text_style = style

    def translate(self, dx: float, dy: float) -> None:
        self._style.tx += dx
        self._style.ty += dy

    def background(self, c) -> None:
        rgba = self._tone(c)
        self._draw.rectangle((0, 0, self.width, self.height), fill=rgba[:3])

    # ------------------------------------------------------
    # Helpers
    # ------------------------------------------------------

    def _pt(self, x: float, y: float) -> Tuple[float, float]:
        return x + self._style.tx, y + self._style.ty

    def _stroke_px(self) -> int:
        return max(1, int(round(self._style.weight)))

    def _half(self) -> float:
        return self._stroke_px() / 2.0

    # ------------------------------------------------------
    # Primitives
    # ------------------------------------------------------

    def rect(self, x: float, y: float, w: float, h: float, radius: float = 0) -> None:
        x0, y0 = self._pt(x, y)
        x1, y1 = x0 + w, y0 + h
        if x1 < x0:
            x0, x1 = x1, x0
        if y1 < y0:
            y0, y1 = y1, y0
        r = max(0.0, min(float(radius), (x1 - x0) / 2.0, (y1 - y0) / 2.0))

        st = self._style
        if st.fill is not None:
            if r > 0:
                self._draw.rounded_rectangle((x0, y0, x1, y1), radius=r, fill=st.fill)
            else:
                self._draw.rectangle((x0, y0, x1, y1), fill=st.fill)
        if st.stroke is not None:
            hw = self._half()
            box = (x0 - hw, y0 - hw, x1 + hw, y1 + hw)
            if r > 0:
                self._draw.rounded_rectangle(box, radius=r + hw, outline=st.stroke, width=self._stroke_px())
            else:
                self._draw.rectangle(box, outline=st.stroke, width=self._stroke_px())

    def rect_centered(self, cx: float, cy: float, w: float, h: float, radius: float = 0) -> None:
        self.rect(cx - w / 2.0, cy - h / 2.0, w, h, radius)

    def circle(self, cx: float, cy: float, d: float) -> None:
        x, y = self._pt(cx, cy)
        r = d / 2.0
        st = self._style
        if st.fill is not None:
            self._draw.ellipse((x - r, y - r, x + r, y + r), fill=st.fill)
        if st.stroke is not None:
            hw = self._half()
            self._draw.ellipse(
                (x - r - hw, y - r - hw, x + r + hw, y + r + hw),
                outline=st.stroke,
                width=self._stroke_px(),
            )

    def arc(self, cx: float, cy: float, w: float, h: float, start: float, stop: float) -> None:
        """Open stroked arc. Angles in radians, clockwise from +x (screen space)."""
        st = self._style
        if st.stroke is None:
            return
        while stop < start:
            stop += TWO_PI
        x, y = self._pt(cx, cy)
        hw = self._half()
        rx, ry = w / 2.0 + hw, h / 2.0 + hw
        self._draw.arc(
            (x - rx, y - ry, x + rx, y + ry),
            math.degrees(start),
            math.degrees(stop),
            fill=st.stroke,
            width=self._stroke_px(),
        )

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        st = self._style
        if st.stroke is None:
            return
        self._draw.line([self._pt(x1, y1), self._pt(x2, y2)], fill=st.stroke, width=self._stroke_px())

    def polygon(self, points: Sequence[Tuple[float, float]], close: bool = True) -> None:
        pts = [self._pt(px, py) for px, py in points]
        if len(pts) < 2:
            return
        st = self._style
        if close:
            if st.fill is not None and len(pts) >= 3:
                self._draw.polygon(pts, fill=st.fill)
            if st.stroke is not None:
                self._draw.line(pts + [pts[0]], fill=st.stroke, width=self._stroke_px(), joint="curve")
        elif st.stroke is not None:
            self._draw.line(pts, fill=st.stroke, width=self._stroke_px(), joint="curve")

    def polyline(self, points: Sequence[Tuple[float, float]]) -> None:
        self.polygon(points, close=False)

    def triangle(self, x1, y1, x2, y2, x3, y3) -> None:
        self.polygon([(x1, y1), (x2, y2), (x3, y3)], close=True)

    def regular_polygon(self, cx: float, cy: float, r: float, n: int) -> None:
        pts = []
        for i in range(n):
            a = -HALF_PI + TWO_PI * (i / n)
            pts.append((cx + math.cos(a) * r, cy + math.sin(a) * r))
        self.polygon(pts, close=True)

    def star(self, cx: float, cy: float, r1: float, r2: float, n: int) -> None:
        pts = []
        for i in range(n * 2):
            a = (TWO_PI / (n * 2)) * i - HALF_PI
            r = r1 if i % 2 == 0 else r2
            pts.append((cx + math.cos(a) * r, cy + math.sin(a) * r))
        self.polygon(pts, close=True)

    # ------------------------------------------------------
    # Text
    # ------------------------------------------------------

    def _font(self):
        return load_font(self._style.text_size, self._style.text_style)

    def text_width(self, s: str) -> float:
        if not s:
            return 0.0
        return float(self._font().getlength(s))

    def text(self, s: str, x: float, y: float, *, align: str = "center", valign: str = "center") -> None:
        st = self._style
        if not s or st.fill is None:
            return
        h = {"center": "m", "left": "l", "right": "r"}[align]
        v = {"center": "m", "top": "t", "baseline": "s"}[valign]
        self._draw.text(self._pt(x, y), s, fill=st.fill, font=self._font(), anchor=h + v)

    # ------------------------------------------------------
    # Raster
    # ------------------------------------------------------

    def paste_image(self, img: Image.Image, x: float, y: float, w: float, h: float) -> None:
        """Alpha-composited raster draw, resized to (w, h), snapped to pixels."""
        dw, dh = int(round(w)), int(round(h))
        if dw <= 0 or dh <= 0:
            return
        src = img.convert("RGBA")
        if src.size != (dw, dh):
            src = src.resize((dw, dh), Image.BILINEAR)
        px, py = self._pt(x, y)
        self.image.paste(src, (int(round(px)), int(round(py))), src)


def iter_steps(start: float, stop: float, step: float, *, inclusive: bool = False) -> Iterable[float]:
    """Float range used by the edge decorations (start, start+step, ...)."""
    v = start
    while v < stop or (inclusive and v <= stop):
        yield v
        v += step
