# SheetController.py
# Lost Circuits: rendering session + commands
#
# - SessionState is immutable; commands are pure (state, command) -> state'
# - The controller applies a command, then renders / exports as asked
# - No hidden side-effects: rendering never mutates the session state

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
from PIL import Image

from DeviceRecords import DeviceRecord
from DrawSurface import DrawSurface
from GridLayout import GridLayout
from ImageAssets import AssetLibrary
from InkPlates import DirectTarget, InkPlateSet, PlateTarget
from StampComposer import compose_sheet, draw_placeholder, sheet_range, total_sheets


COMMANDS = (
    "reseed",
    "toggle_traces",
    "next_sheet",
    "prev_sheet",
    "export_sheet",
    "toggle_print_mode",
    "export_plates",
)

WARN_PLATES_UNAVAILABLE = "Print plates unavailable: staying in direct colour mode"
WARN_EXPORT_NEEDS_PRINT_MODE = "Plate export needs print-separation mode (toggle it first)"

# new run seeds are drawn from [0, RESEED_MAX)
RESEED_MAX = 1_000_000_000


# ======================================================
# SessionState (explicit, no dynamic attributes)
# ======================================================

@dataclass(frozen=True)
class SessionState:
    run_seed: int = 1337
    sheet_index: int = 0
    show_traces: bool = True
    print_mode: bool = False


@dataclass(frozen=True)
class CommandResult:
    state: SessionState
    rerender: bool = False
    action: Optional[str] = None     # export_sheet | export_plates
    warning: Optional[str] = None


def apply_command(
    state: SessionState,
    command: str,
    *,
    sheet_count: int,
    plates_available: bool,
    new_seed: Optional[int] = None,
) -> CommandResult:
    """Pure state transition. Never raises for user-level conditions (only for unknown commands)."""
    if command not in COMMANDS:
        raise ValueError(f"Comando desconocido: {command}")

    total = max(1, int(sheet_count))

    if command == "reseed":
        if new_seed is None:
            raise ValueError("reseed requiere new_seed")
        return CommandResult(replace(state, run_seed=int(new_seed)), rerender=True)

    if command == "toggle_traces":
        return CommandResult(replace(state, show_traces=not state.show_traces), rerender=True)

    if command == "next_sheet":
        return CommandResult(replace(state, sheet_index=(state.sheet_index + 1) % total), rerender=True)

    if command == "prev_sheet":
        return CommandResult(replace(state, sheet_index=(state.sheet_index - 1 + total) % total), rerender=True)

    if command == "export_sheet":
        return CommandResult(state, action="export_sheet")

    if command == "toggle_print_mode":
        if not plates_available:
            return CommandResult(state, warning=WARN_PLATES_UNAVAILABLE)
        return CommandResult(replace(state, print_mode=not state.print_mode), rerender=True)

    # export_plates
    if not plates_available:
        return CommandResult(state, warning=WARN_PLATES_UNAVAILABLE)
    if not state.print_mode:
        return CommandResult(state, warning=WARN_EXPORT_NEEDS_PRINT_MODE)
    return CommandResult(state, action="export_plates")


# ======================================================
# SheetController
# ======================================================

class SheetController:
    """
    Controller: holds the session, renders sheets, exports.

    records may be empty: the sheet then renders the "Loading..." placeholder
    and never draws stamps.
    """

    def __init__(
        self,
        records: Sequence[DeviceRecord],
        settings: dict,
        *,
        assets: AssetLibrary | None = None,
        out_dir: Path | None = None,
        reseed_seed: int | None = None,
    ):
        self.records = list(records)
        self.settings = settings
        self.grid = GridLayout.from_settings(settings)
        self.out_dir = Path(out_dir) if out_dir is not None else Path.cwd()

        ses = settings["session"]
        self.state = SessionState(run_seed=ses["run_seed"], show_traces=ses["show_traces"])

        self.assets = assets if assets is not None else AssetLibrary()
        self.assets.request_all(r.image_path for r in self.records)

        # Created lazily on the first print-mode render
        self.plates = InkPlateSet(settings["plates"])

        self._reseed_rng = np.random.default_rng(reseed_seed)
        self.preview: Optional[Image.Image] = None

    # --------------------------------------------------
    # Sheets
    # --------------------------------------------------

    @property
    def page_size(self) -> int:
        return self.grid.cell_count()

    @property
    def sheet_count(self) -> int:
        return total_sheets(len(self.records), self.page_size)

    def goto_sheet(self, sheet_index: int) -> None:
        """Jump without rendering (wraps like next/prev)."""
        self.state = replace(self.state, sheet_index=int(sheet_index) % self.sheet_count)
        # the cached preview belongs to the previous sheet
        self.preview = None

    def sheet_records(self, sheet_index: int | None = None) -> list[DeviceRecord]:
        idx = self.state.sheet_index if sheet_index is None else sheet_index
        return [self.records[i] for i in sheet_range(len(self.records), self.page_size, idx)]

    # --------------------------------------------------
    # Render
    # --------------------------------------------------

    def render(self) -> Image.Image:
        c = self.settings["canvas"]
        w, h = c["width"], c["height"]
        st = self.state

        if not self.records:
            surface = DrawSurface.blank(w, h, c["background"])
            draw_placeholder(surface)
            self.preview = surface.image
            return self.preview

        if st.print_mode and self.plates.available:
            self.plates.ensure(w, h)
            self.plates.clear()
            target = PlateTarget(DrawSurface.blank(w, h, c["background"]), self.plates, self.settings["separation"])
        else:
            target = DirectTarget(DrawSurface.blank(w, h, c["background"]))

        compose_sheet(
            target,
            self.records,
            self.grid,
            run_seed=st.run_seed,
            sheet_index=st.sheet_index,
            settings=self.settings,
            images=self.assets.images,
            show_traces=st.show_traces,
        )
        self.preview = target.finish()
        return self.preview

    def pump_assets(self, max_items: int = 1) -> bool:
        """
        Cooperative asset step. Re-renders the whole sheet once every
        requested photo has settled. Returns True when it re-rendered.
        """
        if self.assets.pending_count == 0:
            return False
        self.assets.pump(max_items)
        if self.assets.all_settled():
            self.render()
            return True
        return False

    # --------------------------------------------------
    # Commands
    # --------------------------------------------------

    def dispatch(self, command: str) -> CommandResult:
        new_seed = None
        if command == "reseed":
            new_seed = int(self._reseed_rng.integers(0, RESEED_MAX))

        result = apply_command(
            self.state,
            command,
            sheet_count=self.sheet_count,
            plates_available=self.plates.available,
            new_seed=new_seed,
        )
        if result.warning:
            print(f"[WARN] {result.warning}")

        self.state = result.state
        if result.rerender:
            self.render()

        if result.action == "export_sheet":
            self.export_sheet()
        elif result.action == "export_plates":
            self.export_plates()
        return result

    # --------------------------------------------------
    # Export
    # --------------------------------------------------

    def _sheet_stem(self) -> str:
        return f"{self.settings['export']['prefix']}_{self.state.sheet_index + 1}"

    def export_sheet(self) -> Path:
        if self.preview is None:
            self.render()
        self.out_dir.mkdir(parents=True, exist_ok=True)
        path = self.out_dir / f"{self._sheet_stem()}.png"
        self.preview.save(path)
        return path

    def export_plates(self) -> list[Path]:
        if not (self.state.print_mode and self.plates.available):
            print(f"[WARN] {WARN_EXPORT_NEEDS_PRINT_MODE}")
            return []
        if self.plates.primary is None:
            self.render()

        self.out_dir.mkdir(parents=True, exist_ok=True)
        paths = []
        for plate in self.plates.plates():
            path = self.out_dir / f"{self._sheet_stem()}_{plate.name}.png"
            plate.image.save(path)
            paths.append(path)
        return paths
