import sys
from pathlib import Path


def get_app_root() -> Path:
    if getattr(sys, "frozen", False):
        # PyInstaller
        return Path(sys._MEIPASS)
    else:
        # Modo desarrollo
        return Path(__file__).resolve().parent


def get_assets_dir() -> Path:
    return get_app_root() / "assets"


def get_fonts_dir() -> Path:
    return get_assets_dir() / "fonts"


def resolve_data_path(p: str | Path, base_dir: Path | None = None) -> Path:
    """Relative paths in the CSV are resolved against the CSV folder (or app root)."""
    p = Path(p)
    if p.is_absolute():
        return p
    return (base_dir or get_app_root()) / p
