import argparse
import tkinter as tk
from tkinter import ttk
from pathlib import Path

from PIL import Image, ImageTk

from DeviceRecords import load_device_records
from ImageAssets import AssetLibrary
from SheetController import SheetController
from SheetSettings import load_settings


# key -> command (keysym)
KEYMAP = {
    "r": "reseed",
    "R": "reseed",
    "t": "toggle_traces",
    "T": "toggle_traces",
    "Right": "next_sheet",
    "Left": "prev_sheet",
    "s": "export_sheet",
    "S": "export_sheet",
    "p": "toggle_print_mode",
    "P": "toggle_print_mode",
    "e": "export_plates",
    "E": "export_plates",
}

HELP_TEXT = "r reseed · t traces · ←/→ sheet · s save PNG · p print plates · e export plates"


class SheetViewer(tk.Tk):
    def __init__(self, controller: SheetController):
        super().__init__()
        self.controller = controller
        self.title("Lost Circuits: stamp sheets")
        self.geometry("900x1050")

        self._photo = None
        self._draw_job = None
        self._pump_job = None

        self.preview_canvas = tk.Canvas(self, background="#6d6e71", highlightthickness=0)
        self.preview_canvas.pack(fill=tk.BOTH, expand=True)

        bar = ttk.Frame(self)
        bar.pack(fill=tk.X)
        self.status_var = tk.StringVar(value="")
        ttk.Label(bar, textvariable=self.status_var, anchor="w").pack(side=tk.LEFT, fill=tk.X, expand=True, padx=6)
        ttk.Label(bar, text=HELP_TEXT, anchor="e").pack(side=tk.RIGHT, padx=6)

        self.bind("<KeyPress>", self._on_key)
        self.preview_canvas.bind("<Configure>", lambda _e: self._schedule_draw())

        self.controller.render()
        self._update_status()
        self._schedule_draw()
        self._pump_job = self.after(10, self._pump_assets)

    # ======================================================
    # Assets (cooperative loading, one per tick)
    # ======================================================

    def _pump_assets(self):
        self._pump_job = None
        assets = self.controller.assets
        if assets.pending_count == 0:
            return
        if self.controller.pump_assets(max_items=1):
            self._schedule_draw()
        self._set_status(f"Loading images {assets.settled_count}/{assets.requested_count}", kind="info")
        if assets.pending_count:
            self._pump_job = self.after(10, self._pump_assets)
        else:
            self._update_status()

    # ======================================================
    # Commands
    # ======================================================

    def _on_key(self, event):
        command = KEYMAP.get(event.keysym)
        if command is None:
            return
        result = self.controller.dispatch(command)
        if result.warning:
            self._set_status(result.warning, kind="warn")
        elif result.action == "export_sheet":
            self._set_status(f"Saved sheet {self.controller.state.sheet_index + 1}", kind="info")
        elif result.action == "export_plates":
            self._set_status("Saved ink plates", kind="info")
        else:
            self._update_status()
        if result.rerender:
            self._schedule_draw()

    def _update_status(self):
        st = self.controller.state
        mode = "print plates" if st.print_mode else "direct colour"
        traces = "on" if st.show_traces else "off"
        self._set_status(
            f"Sheet {st.sheet_index + 1}/{self.controller.sheet_count} · seed {st.run_seed} · traces {traces} · {mode}",
            kind="info",
        )

    def _set_status(self, text: str, kind: str = "info"):
        prefix = "⚠ " if kind == "warn" else ""
        self.status_var.set(prefix + text)

    # ======================================================
    # Preview
    # ======================================================

    def _schedule_draw(self):
        if self._draw_job is not None:
            try:
                self.after_cancel(self._draw_job)
            except tk.TclError:
                pass
        self._draw_job = self.after(25, self._draw_preview_to_canvas)

    def _draw_preview_to_canvas(self):
        self._draw_job = None
        self.preview_canvas.delete("all")

        img = self.controller.preview
        if img is None:
            return

        cw = self.preview_canvas.winfo_width()
        ch = self.preview_canvas.winfo_height()
        if cw <= 1 or ch <= 1:
            return

        base_w, base_h = img.size
        scale = min(cw / base_w, ch / base_h, 1.0)
        draw_w = max(1, int(base_w * scale))
        draw_h = max(1, int(base_h * scale))
        if img.size != (draw_w, draw_h):
            img = img.resize((draw_w, draw_h), Image.BILINEAR)

        self._photo = ImageTk.PhotoImage(img)
        self.preview_canvas.create_image(cw // 2, ch // 2, image=self._photo, anchor="center")


def main() -> int:
    ap = argparse.ArgumentParser(description="Lost Circuits stamp sheet viewer")
    ap.add_argument("csv", type=str, nargs="?", default="devices.csv", help="devices.csv")
    ap.add_argument("--out", type=str, default=".", help="Export folder")
    ap.add_argument("--settings", type=str, default="", help="settings.json")
    args = ap.parse_args()

    settings = load_settings(Path(args.settings) if args.settings else None)
    csv_path = Path(args.csv)
    records = load_device_records(csv_path)

    controller = SheetController(
        records,
        settings,
        assets=AssetLibrary(base_dir=csv_path.resolve().parent),
        out_dir=Path(args.out),
    )
    SheetViewer(controller).mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
