# InkPlates.py
# Lost Circuits: output targets for the stamp composer
#
# DirectTarget:  everything on one full-colour surface.
# PlateTarget:   two-ink separation for duplicator printing.
#   - paper panels  -> preview layer only (never on a plate)
#   - monochrome marks -> per-stamp buffer -> "darken" onto the primary plate
#   - product photo -> auto-levels + Bayer -> secondary plate
#
# Plates are "L" images: 255 = paper, 0 = full ink.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageChops

from DrawSurface import DrawSurface, RGBA
from ImageSeparation import fit_and_resize, separate_for_plate


PAPER = 255
# Tones at or above this luminance are paper (no ink) on a plate
PAPER_THRESHOLD = 240

# Stamp buffers are grown by this much around the cell (stroke overhang)
_BUFFER_PAD = 8


def plate_tone(rgba: RGBA) -> RGBA:
    """Colour -> single-ink tone (gray by luminance, light tones become paper)."""
    r, g, b, a = rgba
    lum = 0.2126 * r + 0.7152 * g + 0.0722 * b
    t = PAPER if lum >= PAPER_THRESHOLD else int(round(lum))
    return (t, t, t, a)


# ==========================================================
# Plates
# ==========================================================

@dataclass
class InkPlate:
    name: str
    color: Tuple[int, int, int]
    image: Image.Image

    @classmethod
    def blank(cls, name: str, color, width: int, height: int) -> "InkPlate":
        return cls(name, tuple(int(c) for c in color), Image.new("L", (int(width), int(height)), PAPER))

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def clear(self) -> None:
        self.image.paste(PAPER, (0, 0, self.image.width, self.image.height))

    def darken(self, tones: Image.Image, pos: Tuple[int, int]) -> None:
        """Composite an "L" raster at pos keeping the darker (more ink) value."""
        x, y = int(pos[0]), int(pos[1])
        box = (x, y, x + tones.width, y + tones.height)
        # clip to the plate
        cx0, cy0 = max(0, box[0]), max(0, box[1])
        cx1, cy1 = min(self.image.width, box[2]), min(self.image.height, box[3])
        if cx1 <= cx0 or cy1 <= cy0:
            return
        src = tones.crop((cx0 - x, cy0 - y, cx1 - x, cy1 - y))
        dst = self.image.crop((cx0, cy0, cx1, cy1))
        self.image.paste(ImageChops.darker(dst, src), (cx0, cy0))

    def tinted(self) -> Image.Image:
        """RGB rendering of the plate printed in its ink on white paper."""
        t = np.asarray(self.image, dtype=np.float32)
        k = (PAPER - t) / 255.0
        ink = np.array(self.color, dtype=np.float32)
        rgb = 255.0 - k[..., None] * (255.0 - ink[None, None, :])
        return Image.fromarray(np.clip(np.rint(rgb), 0, 255).astype(np.uint8))


class InkPlateSet:
    """
    Two plates owned by the rendering session.

    Created lazily on first print-mode render, reused across sheets, cleared
    at the start of every sheet render.
    """

    def __init__(self, plates_cfg: dict):
        self.enabled = bool(plates_cfg.get("enabled", True))
        self._cfg = plates_cfg
        self.primary: Optional[InkPlate] = None
        self.secondary: Optional[InkPlate] = None

    @property
    def available(self) -> bool:
        return self.enabled

    def ensure(self, width: int, height: int) -> None:
        if not self.available:
            raise RuntimeError("Ink plates no disponibles")
        if self.primary is None or self.primary.size != (width, height):
            p = self._cfg["primary"]
            self.primary = InkPlate.blank(p["name"], p["color"], width, height)
        if self.secondary is None or self.secondary.size != (width, height):
            s = self._cfg["secondary"]
            self.secondary = InkPlate.blank(s["name"], s["color"], width, height)

    def clear(self) -> None:
        for plate in (self.primary, self.secondary):
            if plate is not None:
                plate.clear()

    def plates(self) -> list[InkPlate]:
        return [p for p in (self.primary, self.secondary) if p is not None]


# ==========================================================
# Targets
# ==========================================================

class DirectTarget:
    ink_only = False
    accepts_halftone = False
    plate_mode = False

    def __init__(self, surface: DrawSurface):
        self.surface = surface
        self.paper = surface
        self.marks = surface

    def begin_stamp(self, x: float, y: float, w: float, h: float) -> None:
        return None

    def end_stamp(self) -> None:
        return None

    def place_photo(self, image: Image.Image, box: Tuple[float, float, float, float]) -> None:
        fitted, pos = fit_and_resize(image, box)
        if fitted is None:
            return
        self.surface.image.paste(fitted, pos, fitted)

    def finish(self) -> Image.Image:
        return self.surface.image


class PlateTarget:
    ink_only = True
    accepts_halftone = True
    plate_mode = True

    def __init__(self, preview: DrawSurface, plates: InkPlateSet, separation: dict):
        if plates.primary is None or plates.secondary is None:
            raise RuntimeError("PlateTarget requiere plates inicializados (ensure())")
        self.paper = preview
        self.plates = plates
        self.separation = separation
        self.marks: Optional[DrawSurface] = None
        self._origin: Tuple[int, int] = (0, 0)

    def begin_stamp(self, x: float, y: float, w: float, h: float) -> None:
        ox = int(np.floor(x)) - _BUFFER_PAD
        oy = int(np.floor(y)) - _BUFFER_PAD
        bw = int(np.ceil(w)) + _BUFFER_PAD * 2 + 1
        bh = int(np.ceil(h)) + _BUFFER_PAD * 2 + 1
        buf = DrawSurface.blank(bw, bh, PAPER, tone_map=plate_tone)
        # keep sheet coordinates
        buf.translate(-ox, -oy)
        self.marks = buf
        self._origin = (ox, oy)

    def end_stamp(self) -> None:
        if self.marks is None:
            return
        self.plates.primary.darken(self.marks.image.convert("L"), self._origin)
        self.marks = None

    def place_photo(self, image: Image.Image, box: Tuple[float, float, float, float]) -> None:
        halftone, pos = separate_for_plate(image, box, self.separation)
        if halftone is None:
            return
        arr = np.asarray(halftone, dtype=np.uint8)
        ink = (arr[..., 0] == 0) & (arr[..., 3] >= 128)
        tones = np.where(ink, 0, PAPER).astype(np.uint8)
        self.plates.secondary.darken(Image.fromarray(tones), pos)

    def finish(self) -> Image.Image:
        """Preview: paper layer multiplied by both tinted plates."""
        out = self.paper.image
        for plate in self.plates.plates():
            out = ImageChops.multiply(out, plate.tinted())
        return out
