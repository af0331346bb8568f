from __future__ import annotations

import argparse
import sys
from pathlib import Path

from DeviceRecords import load_device_records
from DrawSurface import DrawSurface
from ImageAssets import AssetLibrary
from SheetController import SheetController
from SheetSettings import load_settings


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Render Lost Circuits stamp sheets to PNG (headless).")
    ap.add_argument("csv", type=str, help="devices.csv")
    ap.add_argument("--out", type=str, default="out", help="Output folder")
    ap.add_argument("--sheet", type=str, default="all", help="Sheet number (1-based) or 'all'")
    ap.add_argument("--seed", type=int, default=None, help="Run seed (default: settings/LC_RUN_SEED)")
    ap.add_argument("--settings", type=str, default="", help="settings.json")
    ap.add_argument("--print-plates", action="store_true", help="Also export the two ink plates")
    ap.add_argument("--no-traces", action="store_true", help="Hide circuit traces")
    ap.add_argument("--debug-grid", action="store_true", help="Overlay the grid modules on the exported sheet")
    args = ap.parse_args(argv)

    settings = load_settings(Path(args.settings) if args.settings else None)
    if args.seed is not None:
        settings["session"]["run_seed"] = int(args.seed)
    if args.no_traces:
        settings["session"]["show_traces"] = False

    csv_path = Path(args.csv)
    records = load_device_records(csv_path)
    if not records:
        print(f"[WARN] No records in {csv_path}: rendering placeholder only", file=sys.stderr)

    ctrl = SheetController(
        records,
        settings,
        assets=AssetLibrary(base_dir=csv_path.resolve().parent),
        out_dir=Path(args.out),
    )
    ctrl.assets.load_all()

    if args.print_plates:
        ctrl.dispatch("toggle_print_mode")

    if args.sheet == "all":
        sheets = list(range(ctrl.sheet_count))
    else:
        try:
            n = int(args.sheet)
        except ValueError:
            ap.error(f"--sheet inválido: {args.sheet}")
        if n < 1 or n > ctrl.sheet_count:
            ap.error(f"--sheet fuera de rango (1..{ctrl.sheet_count})")
        sheets = [n - 1]

    for idx in sheets:
        ctrl.goto_sheet(idx)
        ctrl.render()
        if args.debug_grid:
            ctrl.grid.draw_debug(DrawSurface(ctrl.preview), show_labels=True)
        path = ctrl.export_sheet()
        print(f"OK: sheet {idx + 1}/{ctrl.sheet_count} -> {path}")
        if ctrl.state.print_mode:
            for p in ctrl.export_plates():
                print(f"OK: plate -> {p}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
