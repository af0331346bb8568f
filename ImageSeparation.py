"""ImageSeparation

Lost Circuits: photo -> 1-bit halftone for the secondary ink plate.

Stages (each one full raster in, same-size raster out, alpha untouched)
-----------------------------------------------------------------------
1. fit_rect() / fit_and_resize(): letterbox the photo into its target box
   (same centring as the direct colour draw), snapped to whole pixels.
2. auto_levels(): percentile clip on the luminance histogram + gamma.
3. bayer_dither(): ordered dithering against a fixed Bayer screen.

Ordered dithering (not error diffusion) keeps the dot pattern spatially local
and independent of the stamp seed: the same photo always gets the same screen.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from PIL import Image

from Dithering import bayer_dither


# Rec. 709 luma weights
_LUMA = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)


def luminance(rgb: np.ndarray) -> np.ndarray:
    """(…, 3|4) uint8/float -> (…) float64 in [0, 255]."""
    return rgb[..., :3].astype(np.float64) @ _LUMA


def _percentile_cutoffs(lum: np.ndarray, clip_low: float, clip_high: float) -> Tuple[int, int]:
    bins = np.clip(np.rint(lum), 0, 255).astype(np.int64).reshape(-1)
    total = int(bins.size)
    if total == 0:
        return 0, 255

    hist = np.bincount(bins, minlength=256)
    cdf = np.cumsum(hist)

    # low: lowest bin whose cumulative count exceeds clip_low * N
    lo_idx = np.nonzero(cdf > clip_low * total)[0]
    lo = int(lo_idx[0]) if lo_idx.size else 0

    # high: bin where the cumulative count first reaches clip_high * N
    hi_idx = np.nonzero(cdf >= clip_high * total)[0]
    hi = int(hi_idx[0]) if hi_idx.size else 255

    if hi <= lo:
        # near-uniform image: keep the full range
        return 0, 255
    return lo, hi


def auto_levels(
    img_rgba: np.ndarray,
    *,
    clip_low: float = 0.01,
    clip_high: float = 0.99,
    gamma: float = 1.0,
) -> np.ndarray:
    """
    Percentile auto-levels + gamma.

    img_rgba:
        np.ndarray (H, W, 4) uint8

    Returns (H, W, 4) uint8 grayscale (R=G=B) with the source alpha.
    """
    if img_rgba.ndim != 3 or img_rgba.shape[2] != 4:
        raise ValueError("img_rgba debe ser (H, W, 4)")

    lum = luminance(img_rgba)
    lo, hi = _percentile_cutoffs(lum, float(clip_low), float(clip_high))

    v = (lum - lo) * (255.0 / float(hi - lo))
    v = np.clip(v, 0.0, 255.0)

    g = float(gamma)
    if g != 1.0:
        v = 255.0 * np.power(v / 255.0, g)

    gray = np.clip(np.rint(v), 0, 255).astype(np.uint8)

    out = np.empty_like(img_rgba, dtype=np.uint8)
    out[..., 0] = gray
    out[..., 1] = gray
    out[..., 2] = gray
    out[..., 3] = img_rgba[..., 3]
    return out


# ==========================================================
# Fit-and-place
# ==========================================================

def fit_rect(
    src_w: float,
    src_h: float,
    box_x: float,
    box_y: float,
    box_w: float,
    box_h: float,
) -> Tuple[float, float, float, float]:
    """Aspect-preserving letterbox of (src_w, src_h) centred in the box."""
    if src_w <= 0 or src_h <= 0 or box_w <= 0 or box_h <= 0:
        return box_x, box_y, 0.0, 0.0

    img_ratio = src_w / src_h
    box_ratio = box_w / box_h
    if img_ratio > box_ratio:
        draw_w = box_w
        draw_h = box_w / img_ratio
    else:
        draw_h = box_h
        draw_w = box_h * img_ratio

    return box_x + (box_w - draw_w) / 2, box_y + (box_h - draw_h) / 2, draw_w, draw_h


def fit_and_resize(
    image: Image.Image,
    box: Tuple[float, float, float, float],
) -> Tuple[Image.Image | None, Tuple[int, int]]:
    """
    Letterbox + resize snapped to whole pixels.

    Returns (RGBA image or None if it collapses to nothing, (x, y) placement).
    """
    x, y, w, h = fit_rect(image.width, image.height, *box)
    px, py = int(round(x)), int(round(y))
    dw, dh = int(round(w)), int(round(h))
    if dw <= 0 or dh <= 0:
        return None, (px, py)

    img = image.convert("RGBA")
    if img.size != (dw, dh):
        img = img.resize((dw, dh), Image.BILINEAR)
    return img, (px, py)


def separate_for_plate(
    image: Image.Image,
    box: Tuple[float, float, float, float],
    separation: dict,
) -> Tuple[Image.Image | None, Tuple[int, int]]:
    """
    Full pipeline for one stamp photo.

    separation: settings["separation"] (clip_low, clip_high, gamma, gain, bias, bayer)
    Returns (1-bit RGBA halftone or None, (x, y) placement on the plate).
    """
    fitted, pos = fit_and_resize(image, box)
    if fitted is None:
        return None, pos

    arr = np.array(fitted, dtype=np.uint8)
    leveled = auto_levels(
        arr,
        clip_low=separation.get("clip_low", 0.01),
        clip_high=separation.get("clip_high", 0.99),
        gamma=separation.get("gamma", 1.0),
    )
    dithered = bayer_dither(
        leveled,
        gain=separation.get("gain", 1.0),
        bias=separation.get("bias", 0.0),
        matrix_size=separation.get("bayer", 8),
    )
    return Image.fromarray(dithered), pos
