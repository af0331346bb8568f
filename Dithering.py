import numpy as np

# ==========================================================
# Bayer 4×4 (canonical 0..15)
# ==========================================================

_BAYER_4x4 = np.array(
    [
        [0, 8, 2, 10],
        [12, 4, 14, 6],
        [3, 11, 1, 9],
        [15, 7, 13, 5],
    ],
    dtype=np.int32,
)

# ==========================================================
# Bayer 8×8 (canonical 0..63)
# ==========================================================

_BAYER_8x8 = np.array(
    [
        [0, 32, 8, 40, 2, 34, 10, 42],
        [48, 16, 56, 24, 50, 18, 58, 26],
        [12, 44, 4, 36, 14, 46, 6, 38],
        [60, 28, 52, 20, 62, 30, 54, 22],
        [3, 35, 11, 43, 1, 33, 9, 41],
        [51, 19, 59, 27, 49, 17, 57, 25],
        [15, 47, 7, 39, 13, 45, 5, 37],
        [63, 31, 55, 23, 61, 29, 53, 21],
    ],
    dtype=np.int32,
)

_MATRICES = {4: _BAYER_4x4, 8: _BAYER_8x8}


def bayer_matrix(size: int) -> np.ndarray:
    m = _MATRICES.get(int(size))
    if m is None:
        raise ValueError(f"Matriz Bayer no soportada: {size} (usa 4 u 8)")
    return m


def bayer_threshold_map(height: int, width: int, size: int = 8) -> np.ndarray:
    """
    Per-pixel threshold (float32, H×W) in (0, 255), tiled by modulo indexing.

    Threshold = (b + 0.5) / n² · 255, so pure black never turns white and pure
    white never turns black.
    """
    m = bayer_matrix(size)
    n = m.shape[0]
    levels = float(n * n)

    ys = np.arange(height) % n
    xs = np.arange(width) % n
    tile = m[ys[:, None], xs[None, :]].astype(np.float32)
    return (tile + 0.5) / levels * 255.0


def ordered_dither_gray(
    gray: np.ndarray,
    *,
    gain: float = 1.0,
    bias: float = 0.0,
    matrix_size: int = 8,
) -> np.ndarray:
    """
    gray: (H, W) values in [0, 255] (any numeric dtype).
    Returns uint8 (H, W) with only 0 and 255.
    """
    if gray.ndim != 2:
        raise ValueError("gray debe ser (H, W)")

    h, w = gray.shape
    v = gray.astype(np.float32) * float(gain) + float(bias)
    v = np.clip(v, 0.0, 255.0)

    thr = bayer_threshold_map(h, w, matrix_size)
    return np.where(v > thr, 255, 0).astype(np.uint8)


def bayer_dither(
    img_rgba: np.ndarray,
    *,
    gain: float = 1.0,
    bias: float = 0.0,
    matrix_size: int = 8,
) -> np.ndarray:
    """
    Ordered dithering (Bayer) of a leveled grayscale RGBA raster.

    img_rgba:
        np.ndarray (H, W, 4) uint8, R=G=B (output of auto_levels)

    Returns (H, W, 4) uint8: RGB strictly 0 or 255, alpha copied unchanged so
    transparent areas of the photo stay unprinted.
    """
    if img_rgba.ndim != 3 or img_rgba.shape[2] != 4:
        raise ValueError("img_rgba debe ser (H, W, 4)")

    bw = ordered_dither_gray(
        img_rgba[..., 0],
        gain=gain,
        bias=bias,
        matrix_size=matrix_size,
    )
    out = np.empty_like(img_rgba, dtype=np.uint8)
    out[..., 0] = bw
    out[..., 1] = bw
    out[..., 2] = bw
    out[..., 3] = img_rgba[..., 3]
    return out
