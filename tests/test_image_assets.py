from pathlib import Path

from PIL import Image

from ImageAssets import AssetLibrary


def test_load_from_disk(tmp_path):
    Image.new("RGB", (8, 6), (200, 10, 10)).save(tmp_path / "a.png")
    lib = AssetLibrary(tmp_path)
    lib.request_all(["a.png", "a.png", "", "missing.png"])
    assert lib.requested_count == 2
    assert lib.pending_count == 2

    assert lib.load_all() == 2
    assert lib.all_settled()
    assert lib.images["a.png"].mode == "RGBA"
    assert lib.images["a.png"].size == (8, 6)
    assert "missing.png" in lib.failed


def test_failed_load_still_settles(capsys):
    seen = []

    def loader(path: Path):
        if path.name == "broken.png":
            raise OSError("cannot identify image file")
        return Image.new("RGBA", (4, 4))

    lib = AssetLibrary(Path("/data"), loader=loader, on_settled=lambda p, ok: seen.append((p, ok)))
    lib.request_all(["ok.png", "broken.png"])

    assert lib.pump() == 1
    assert not lib.all_settled()
    assert lib.pump() == 1
    assert lib.all_settled()
    assert lib.settled_count == 2
    assert seen == [("ok.png", True), ("broken.png", False)]
    assert "broken.png" not in lib.images
    assert "Image load failed" in capsys.readouterr().out


def test_pump_on_empty_queue():
    lib = AssetLibrary()
    assert lib.pump(5) == 0
    assert lib.all_settled()


def test_oversized_image_counts_as_failed_and_settles(tmp_path, monkeypatch, capsys):
    Image.new("RGB", (64, 64), (0, 0, 0)).save(tmp_path / "big.png")
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    seen = []
    lib = AssetLibrary(tmp_path, on_settled=lambda p, ok: seen.append((p, ok)))
    lib.request("big.png")

    assert lib.pump() == 1
    assert lib.all_settled()
    assert "big.png" in lib.failed
    assert "big.png" not in lib.images
    assert seen == [("big.png", False)]
    assert "Image load failed" in capsys.readouterr().out
