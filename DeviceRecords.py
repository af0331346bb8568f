# DeviceRecords.py
# Lost Circuits: device catalogue ingestion
#
# CSV (header row) -> immutable DeviceRecord list.
# Unparseable numbers/years never raise: years become None ("unknown"),
# price/units become 0. Consumers treat those as "skip".

from __future__ import annotations

import csv
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional, Tuple


CSV_COLUMNS = (
    "name",
    "manufacturer",
    "years_active",
    "original_price",
    "units_sold",
    "region",
    "category",
    "form_factor",
    "availability_today",
    "connectivity",
    "reason_for_obsolescence",
    "image_path",
)

_RE_DASHES = re.compile(r"[—–]")
_RE_SPACES = re.compile(r"\s+")
_RE_YEAR_RANGE = re.compile(r"(\d{4})\s*-\s*(\d{4}|present)")
_RE_YEAR = re.compile(r"\d{4}")
_RE_NUMBER = re.compile(r"[\d,]+")
_RE_PRICE_DISPLAY = re.compile(r"(\D*)(\d+(?:[,\d]*)?)")


@dataclass(frozen=True)
class DeviceRecord:
    id: str
    name: str
    category: str = ""
    region: str = ""
    manufacturer: str = ""
    original_price: str = ""
    price_value: float = 0.0
    units_sold_raw: str = ""
    units_sold: int = 0
    availability_today: str = ""
    connectivity: str = ""
    form_factor: str = ""
    reason_for_obsolescence: str = ""
    release_year: Optional[int] = None
    discontinued: Optional[int] = None
    image_path: str = ""


# ==========================================================
# Field parsing
# ==========================================================

def parse_years(raw: str | None) -> Tuple[Optional[int], Optional[int]]:
    """
    "1998-2005" -> (1998, 2005)
    "1998 – present" -> (1998, 1998)   ('present' mirrors the release year)
    "circa 1979" -> (1979, 1979)
    "" -> (None, None)
    """
    yrs = (raw or "").lower().strip()
    yrs = _RE_DASHES.sub("-", yrs)
    yrs = _RE_SPACES.sub(" ", yrs)

    release: Optional[int] = None
    discontinued: Optional[int] = None

    m = _RE_YEAR_RANGE.search(yrs)
    if m:
        release = int(m.group(1))
        discontinued = release if m.group(2) == "present" else int(m.group(2))
    else:
        found = _RE_YEAR.findall(yrs)
        if found:
            release = int(found[0])
        if len(found) > 1:
            discontinued = int(found[1])

    if release is not None and discontinued is None:
        discontinued = release
    return release, discontinued


def parse_price_value(raw: str | None) -> float:
    m = _RE_NUMBER.search(raw or "")
    if not m:
        return 0.0
    digits = m.group(0).replace(",", "")
    if not digits:
        return 0.0
    return float(digits)


def parse_units(raw: str | None) -> int:
    m = _RE_NUMBER.search(raw or "")
    if not m:
        return 0
    digits = m.group(0).replace(",", "")
    if not digits:
        return 0
    return int(digits)


def format_price(raw: str | None) -> str:
    """Medallion label: currency prefix + amount, >= 1000 as '{c}{k:.1f}K'."""
    m = _RE_PRICE_DISPLAY.search(raw or "")
    if not m:
        return "$?"
    currency = (m.group(1) or "$").strip() or "$"
    amount = int(m.group(2).replace(",", ""))
    if amount >= 1000:
        return f"{currency}{amount / 1000:.1f}K"
    return f"{currency}{amount}"


def year_range_label(record: DeviceRecord) -> str:
    if record.release_year is not None and record.discontinued is not None:
        return f"{record.release_year}–{record.discontinued}"
    if record.release_year is not None:
        return str(record.release_year)
    return ""


def origin_label(record: DeviceRecord) -> str:
    region = record.region or ""
    mfg = record.manufacturer or ""
    if region and mfg:
        return f"{region} • {mfg}"
    return region or mfg


def rarity_stars(availability: str | None) -> int:
    """0 means: draw nothing."""
    if not availability:
        return 0
    avail = availability.lower()
    if "very rare" in avail:
        return 5
    if "rare" in avail:
        return 4
    if "uncommon" in avail:
        return 3
    return 2


# ==========================================================
# Records
# ==========================================================

def record_from_row(row: Mapping[str, str | None], row_number: int) -> DeviceRecord:
    """row_number is 1-based (used for the id/name fallback)."""

    def get(key: str) -> str:
        v = row.get(key)
        return v if isinstance(v, str) else ""

    name = get("name")
    release, discontinued = parse_years(get("years_active"))
    price_raw = get("original_price")
    units_raw = get("units_sold")

    return DeviceRecord(
        id=name or str(row_number),
        name=name or f"Device {row_number}",
        category=get("category"),
        region=get("region"),
        manufacturer=get("manufacturer"),
        original_price=price_raw,
        price_value=parse_price_value(price_raw),
        units_sold_raw=units_raw,
        units_sold=parse_units(units_raw),
        availability_today=get("availability_today"),
        connectivity=get("connectivity"),
        form_factor=get("form_factor"),
        reason_for_obsolescence=get("reason_for_obsolescence"),
        release_year=release,
        discontinued=discontinued,
        image_path=get("image_path").strip(),
    )


def records_from_rows(rows: Iterable[Mapping[str, str | None]]) -> list[DeviceRecord]:
    return [record_from_row(row, i + 1) for i, row in enumerate(rows)]


def load_device_records(csv_path: Path) -> list[DeviceRecord]:
    """
    Lee el CSV de dispositivos.

    A missing or unreadable file yields an empty list (the sheet then shows
    its placeholder instead of stamps).
    """
    csv_path = Path(csv_path)
    try:
        with csv_path.open("r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            records = records_from_rows(reader)
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        print(f"[WARN] CSV missing or unreadable: {csv_path} ({e})")
        return []

    if not records:
        print(f"[WARN] CSV missing or empty: {csv_path}")
    return records
