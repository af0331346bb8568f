# tests/conftest.py
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Add project root to sys.path so the top-level modules import without install
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from DeviceRecords import DeviceRecord, records_from_rows  # noqa: E402
from SheetSettings import default_settings  # noqa: E402


@pytest.fixture
def settings():
    return default_settings()


def make_rows(n: int):
    cats = ["Audio / Portable", "Storage", "Gaming", "Computing", "Camera", "Mobile Phone", "Kitchen"]
    avail = ["Very Rare", "Rare item", "Uncommon", "Common", ""]
    rows = []
    for i in range(n):
        rows.append(
            {
                "name": f"Device Model {i}",
                "manufacturer": "Acme",
                "years_active": f"{1960 + i * 2}-{1965 + i * 2}",
                "original_price": "$1,299" if i % 3 else "",
                "units_sold": "2,000,000",
                "region": "Japan" if i % 2 else "",
                "category": cats[i % len(cats)],
                "form_factor": "Handheld" if i % 2 else "",
                "availability_today": avail[i % len(avail)],
                "connectivity": "None",
                "reason_for_obsolescence": "Replaced by smartphones that did everything better and cheaper",
                "image_path": f"img_{i}.png" if i % 4 else "",
            }
        )
    return rows


@pytest.fixture
def make_records():
    def _make(n: int) -> list[DeviceRecord]:
        return records_from_rows(make_rows(n))
    return _make


def gradient_rgba(w: int = 64, h: int = 48, alpha: int = 255) -> Image.Image:
    xs = np.linspace(0, 255, w, dtype=np.float32)
    ys = np.linspace(0, 255, h, dtype=np.float32)
    r = np.tile(xs, (h, 1))
    g = np.tile(ys[:, None], (1, w))
    b = (r + g) / 2.0
    a = np.full((h, w), alpha, dtype=np.float32)
    arr = np.stack([r, g, b, a], axis=-1).astype(np.uint8)
    return Image.fromarray(arr)


@pytest.fixture
def photo():
    return gradient_rgba()


@pytest.fixture
def make_photo():
    return gradient_rgba
