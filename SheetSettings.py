# SheetSettings.py
# Lost Circuits: settings.json (robust + validation)
#
# - Defaults live in _SETTINGS_DEFAULT (one place, no scattered constants)
# - A user JSON file is deep-merged over the defaults
# - Invalid entries fall back to the default value, never raise
# - Env overrides: LC_SETTINGS (path), LC_RUN_SEED (int)

from __future__ import annotations

import copy
import json
import os
from pathlib import Path

from paths import get_app_root


_SETTINGS_DEFAULT = {
    "version": 1,
    # 8x10" @ 300ppi
    "canvas": {
        "width": 2400,
        "height": 3000,
        "margin": 100,
        "gutter": 60,
        "cols": 5,
        "rows": 4,
        "background": 255,
    },
    "stamp": {
        "inset": 18,            # cell edge -> paper panel
        "paper_tone": 248,      # panel + image box
        "frame_pad": 12,        # stamp edge -> outer frame
        "inner_inset": 5,       # outer -> inner frame (+5 fixed)
        "price_diameter": 50,
        "badge_size": 32,
        "star_y_offset": 70,    # below inner top
        "image_margin": 45,
        "text_reserve": 150,    # strip under the image box for the text block
        "trace_footer": 140,    # traces stay above this strip
    },
    "traces": {
        "year_min": 1960,
        "year_max": 2020,
        "unknown_year": 1990,
        "count_at_min": 25,
        "count_at_max": 8,
        "steps": 4,
        "step_min": 20,
        "step_max": 45,
    },
    "separation": {
        "clip_low": 0.01,
        "clip_high": 0.99,
        "gamma": 0.9,
        "gain": 1.1,
        "bias": 0.0,
        "bayer": 8,            # 4 | 8
    },
    "plates": {
        "enabled": True,
        "primary": {"name": "blue", "color": [0, 120, 191]},
        "secondary": {"name": "fluorescentpink", "color": [255, 72, 176]},
    },
    "session": {
        "run_seed": 1337,
        "show_traces": True,
    },
    "export": {
        "prefix": "lost_circuits_sheet",
    },
}


def _deep_merge(a, b):
    if not isinstance(a, dict) or not isinstance(b, dict):
        return b
    out = dict(a)
    for k, v in b.items():
        if k in out and isinstance(out.get(k), dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _read_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return None


def _validate_int(v, default: int, lo=None, hi=None) -> int:
    if isinstance(v, bool):
        return default
    try:
        iv = int(v)
    except Exception:
        return default
    if lo is not None and iv < lo:
        return default
    if hi is not None and iv > hi:
        return default
    return iv


def _validate_float(v, default: float, lo=None, hi=None) -> float:
    if isinstance(v, bool):
        return default
    try:
        fv = float(v)
    except Exception:
        return default
    if fv != fv:  # NaN
        return default
    if lo is not None and fv < lo:
        return default
    if hi is not None and fv > hi:
        return default
    return fv


def _validate_bool(v, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    return default


def _validate_rgb(v, default: list) -> list:
    if isinstance(v, (list, tuple)) and len(v) == 3:
        try:
            return [max(0, min(255, int(c))) for c in v]
        except Exception:
            return list(default)
    return list(default)


def _validate_section_ints(s: dict, name: str, *, lo=0) -> None:
    d = s.get(name) or {}
    base = _SETTINGS_DEFAULT[name]
    for k, dv in base.items():
        if isinstance(dv, int) and not isinstance(dv, bool):
            d[k] = _validate_int(d.get(k), dv, lo=lo)
    s[name] = d


def validate_settings(raw: dict | None) -> dict:
    s = _deep_merge(copy.deepcopy(_SETTINGS_DEFAULT), raw if isinstance(raw, dict) else {})
    s["version"] = 1

    _validate_section_ints(s, "canvas")
    c = s["canvas"]
    c["cols"] = max(1, c["cols"])
    c["rows"] = max(1, c["rows"])
    c["width"] = max(1, c["width"])
    c["height"] = max(1, c["height"])
    c["background"] = min(255, c["background"])

    _validate_section_ints(s, "stamp")
    s["stamp"]["paper_tone"] = min(255, s["stamp"]["paper_tone"])

    _validate_section_ints(s, "traces")
    t = s["traces"]
    if t["year_max"] <= t["year_min"]:
        t["year_min"] = _SETTINGS_DEFAULT["traces"]["year_min"]
        t["year_max"] = _SETTINGS_DEFAULT["traces"]["year_max"]
    if t["step_max"] < t["step_min"]:
        t["step_max"] = t["step_min"]

    sep_default = _SETTINGS_DEFAULT["separation"]
    sep = s.get("separation") or {}
    sep["clip_low"] = _validate_float(sep.get("clip_low"), sep_default["clip_low"], 0.0, 1.0)
    sep["clip_high"] = _validate_float(sep.get("clip_high"), sep_default["clip_high"], 0.0, 1.0)
    sep["gamma"] = _validate_float(sep.get("gamma"), sep_default["gamma"], 0.05, 10.0)
    sep["gain"] = _validate_float(sep.get("gain"), sep_default["gain"], 0.0, 16.0)
    sep["bias"] = _validate_float(sep.get("bias"), sep_default["bias"], -255.0, 255.0)
    bayer = _validate_int(sep.get("bayer"), sep_default["bayer"])
    sep["bayer"] = bayer if bayer in (4, 8) else sep_default["bayer"]
    s["separation"] = sep

    p = s.get("plates") or {}
    p["enabled"] = _validate_bool(p.get("enabled"), True)
    for key in ("primary", "secondary"):
        ink_default = _SETTINGS_DEFAULT["plates"][key]
        ink = p.get(key) if isinstance(p.get(key), dict) else {}
        name = ink.get("name")
        ink["name"] = name.strip() if isinstance(name, str) and name.strip() else ink_default["name"]
        ink["color"] = _validate_rgb(ink.get("color"), ink_default["color"])
        p[key] = ink
    s["plates"] = p

    ses = s.get("session") or {}
    ses["run_seed"] = _validate_int(ses.get("run_seed"), _SETTINGS_DEFAULT["session"]["run_seed"], lo=0)
    ses["show_traces"] = _validate_bool(ses.get("show_traces"), True)
    s["session"] = ses

    ex = s.get("export") or {}
    prefix = ex.get("prefix")
    ex["prefix"] = prefix if isinstance(prefix, str) and prefix else _SETTINGS_DEFAULT["export"]["prefix"]
    s["export"] = ex

    return s


def load_settings(path: Path | None = None) -> dict:
    """Load settings: explicit path > $LC_SETTINGS > <app_root>/settings.json > defaults."""
    if path is None:
        env_path = os.environ.get("LC_SETTINGS")
        path = Path(env_path) if env_path else get_app_root() / "settings.json"

    raw = None
    path = Path(path)
    if path.exists():
        raw = _read_json(path)
        if raw is None:
            print(f"[WARN] settings ilegible, usando defaults: {path}")

    s = validate_settings(raw)

    env_seed = os.environ.get("LC_RUN_SEED")
    if env_seed is not None:
        s["session"]["run_seed"] = _validate_int(env_seed, s["session"]["run_seed"], lo=0)

    return s


def default_settings() -> dict:
    return validate_settings({})
