import json

import pytest
from PIL import Image

import tools_render_sheet


@pytest.fixture
def workdir(tmp_path):
    Image.new("RGB", (40, 30), (30, 90, 200)).save(tmp_path / "gb.png")
    (tmp_path / "devices.csv").write_text(
        "name,manufacturer,years_active,original_price,category,availability_today,image_path\n"
        "Game Boy,Nintendo,1989-2003,$89,Gaming,Common,gb.png\n"
        "Zip Drive,Iomega,1994-2003,$199,Storage,Rare,\n"
        "Broken,Acme,1970,$5,Kitchen,,missing.png\n",
        encoding="utf-8",
    )
    (tmp_path / "settings.json").write_text(
        json.dumps({"canvas": {"width": 800, "height": 1200, "cols": 2, "rows": 1, "margin": 40, "gutter": 20}}),
        encoding="utf-8",
    )
    return tmp_path


def _args(workdir, *extra):
    return [
        str(workdir / "devices.csv"),
        "--out", str(workdir / "out"),
        "--settings", str(workdir / "settings.json"),
        *extra,
    ]


def test_renders_every_sheet(workdir, capsys):
    assert tools_render_sheet.main(_args(workdir, "--seed", "7")) == 0
    out = workdir / "out"
    assert (out / "lost_circuits_sheet_1.png").exists()
    assert (out / "lost_circuits_sheet_2.png").exists()
    assert capsys.readouterr().out.count("OK: sheet") == 2


def test_single_sheet_with_plates(workdir):
    assert tools_render_sheet.main(_args(workdir, "--sheet", "2", "--print-plates", "--no-traces")) == 0
    out = workdir / "out"
    assert not (out / "lost_circuits_sheet_1.png").exists()
    assert (out / "lost_circuits_sheet_2_blue.png").exists()
    assert (out / "lost_circuits_sheet_2_fluorescentpink.png").exists()


def test_sheet_out_of_range(workdir):
    with pytest.raises(SystemExit):
        tools_render_sheet.main(_args(workdir, "--sheet", "9"))
