import pytest

from DeviceRecords import (
    format_price,
    load_device_records,
    origin_label,
    parse_price_value,
    parse_units,
    parse_years,
    rarity_stars,
    record_from_row,
    year_range_label,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("1998-2005", (1998, 2005)),
        ("1998 – 2005", (1998, 2005)),
        ("1979—present", (1979, 1979)),
        ("circa 1979", (1979, 1979)),
        ("1985 to 1990", (1985, 1990)),
        ("", (None, None)),
        ("unknown", (None, None)),
    ],
)
def test_parse_years(raw, expected):
    assert parse_years(raw) == expected


def test_price_and_units():
    assert parse_price_value("$1,299") == 1299.0
    assert parse_price_value("n/a") == 0.0
    assert parse_units("2,000,000 units") == 2_000_000
    assert parse_units("") == 0


@pytest.mark.parametrize(
    "raw,label",
    [
        ("$199", "$199"),
        ("$1,299", "$1.3K"),
        ("¥25000", "¥25.0K"),
        ("350", "$350"),
        ("free", "$?"),
    ],
)
def test_format_price(raw, label):
    assert format_price(raw) == label


@pytest.mark.parametrize(
    "avail,stars",
    [("Very Rare", 5), ("rare", 4), ("Uncommon", 3), ("Common", 2), ("", 0), (None, 0)],
)
def test_rarity_stars(avail, stars):
    assert rarity_stars(avail) == stars


def test_record_fallbacks():
    rec = record_from_row({"name": "", "years_active": "nope"}, 7)
    assert rec.id == "7"
    assert rec.name == "Device 7"
    assert rec.release_year is None
    assert rec.price_value == 0
    assert year_range_label(rec) == ""


def test_labels():
    rec = record_from_row(
        {"name": "Walkman", "region": "Japan", "manufacturer": "Sony", "years_active": "1979-1990"}, 1
    )
    assert rec.id == "Walkman"
    assert origin_label(rec) == "Japan • Sony"
    assert year_range_label(rec) == "1979–1990"


def test_load_csv(tmp_path):
    p = tmp_path / "devices.csv"
    p.write_text(
        "\ufeffname,manufacturer,years_active,original_price,image_path\n"
        "Game Boy,Nintendo,1989-2003,$89.99,img/gb.png\n"
        "Zip Drive,Iomega,1994-2003,,\n",
        encoding="utf-8",
    )
    records = load_device_records(p)
    assert [r.name for r in records] == ["Game Boy", "Zip Drive"]
    assert records[0].image_path == "img/gb.png"
    assert records[0].price_value == 89.0
    assert records[1].price_value == 0


def test_missing_csv_is_empty(tmp_path, capsys):
    assert load_device_records(tmp_path / "nope.csv") == []
    assert "[WARN]" in capsys.readouterr().out
