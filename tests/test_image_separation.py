import numpy as np
import pytest
from PIL import Image

from ImageSeparation import auto_levels, fit_and_resize, fit_rect, luminance, separate_for_plate


def _gray_rgba(values: np.ndarray) -> np.ndarray:
    v = values.astype(np.uint8)
    a = np.full_like(v, 255)
    return np.stack([v, v, v, a], axis=-1)


def test_full_ramp_is_left_untouched():
    ramp = np.tile(np.arange(256, dtype=np.uint8), (4, 1))
    out = auto_levels(_gray_rgba(ramp), clip_low=0.0, clip_high=1.0, gamma=1.0)
    assert np.array_equal(out[..., 0], ramp)


def test_uniform_image_falls_back_to_full_range():
    flat = np.full((10, 10), 90, dtype=np.uint8)
    out = auto_levels(_gray_rgba(flat), clip_low=0.01, clip_high=0.99, gamma=1.0)
    assert (out[..., 0] == 90).all()


def test_narrow_range_is_stretched():
    vals = np.tile(np.linspace(100, 150, 51).astype(np.uint8), (2, 1))
    out = auto_levels(_gray_rgba(vals), clip_low=0.0, clip_high=1.0, gamma=1.0)
    assert out[..., 0].min() == 0
    assert out[..., 0].max() == 255


def test_levels_keep_alpha_and_gray(make_photo):
    img = np.array(make_photo(alpha=77), dtype=np.uint8)
    out = auto_levels(img, gamma=0.9)
    assert np.array_equal(out[..., 3], img[..., 3])
    assert np.array_equal(out[..., 0], out[..., 1])
    assert np.array_equal(out[..., 1], out[..., 2])


def test_luminance_weights():
    px = np.array([[[255, 255, 255], [0, 0, 0]]], dtype=np.uint8)
    assert luminance(px)[0].tolist() == pytest.approx([255.0, 0.0])


def test_fit_rect_letterbox():
    # wide image in a square box: full width, centred vertically
    assert fit_rect(200, 100, 0, 0, 100, 100) == (0, 25, 100, 50)
    # tall image: full height, centred horizontally
    assert fit_rect(100, 200, 10, 10, 100, 100) == (35, 10, 50, 100)
    assert fit_rect(0, 10, 5, 5, 100, 100) == (5, 5, 0.0, 0.0)


def test_fit_and_resize_snaps_to_pixels():
    img = Image.new("RGB", (300, 200), (10, 20, 30))
    fitted, pos = fit_and_resize(img, (10.4, 20.6, 150, 150))
    assert fitted.mode == "RGBA"
    assert fitted.size == (150, 100)
    assert pos == (10, 46)


def test_separation_is_one_bit(photo):
    sep = {"clip_low": 0.01, "clip_high": 0.99, "gamma": 0.9, "gain": 1.1, "bias": 0, "bayer": 8}
    halftone, pos = separate_for_plate(photo, (0, 0, 64, 64), sep)
    arr = np.asarray(halftone)
    assert arr.shape == (48, 64, 4)
    assert pos == (0, 8)
    assert set(np.unique(arr[..., :3]).tolist()) == {0, 255}


def test_separation_degenerate_box(photo):
    halftone, _pos = separate_for_plate(photo, (0, 0, 0, 10), {})
    assert halftone is None
