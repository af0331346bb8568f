# GridLayout.py
# Lost Circuits: modular grid with gutters
#
# Pure geometry. All cells are computed once at construction (row-major) and
# the grid is never mutated afterwards.

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GridCell:
    x: float
    y: float
    width: float
    height: float
    col: int
    row: int
    index: int


class GridLayout:
    """
    Grid of cols x rows equally sized modules separated by gutters.

        module_width  = (width  - gutter_x * (cols - 1)) / cols
        module_height = (height - gutter_y * (rows - 1)) / rows

    Lookups outside the grid return None (no cell) and print a [WARN];
    callers are expected to skip that stamp.
    """

    def __init__(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        cols: int,
        rows: int,
        gutter_x: float = 0,
        gutter_y: float = 0,
    ):
        if int(cols) < 1 or int(rows) < 1:
            raise ValueError(f"cols/rows deben ser >= 1 (cols={cols}, rows={rows})")
        if gutter_x < 0 or gutter_y < 0:
            raise ValueError(f"gutters deben ser >= 0 (gutter_x={gutter_x}, gutter_y={gutter_y})")

        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.cols = int(cols)
        self.rows = int(rows)
        self.gutter_x = gutter_x
        self.gutter_y = gutter_y

        total_gutter_w = self.gutter_x * (self.cols - 1)
        total_gutter_h = self.gutter_y * (self.rows - 1)

        self.module_width = (self.width - total_gutter_w) / self.cols
        self.module_height = (self.height - total_gutter_h) / self.rows

        cells = []
        for row in range(self.rows):
            for col in range(self.cols):
                cells.append(
                    GridCell(
                        x=self.x + col * (self.module_width + self.gutter_x),
                        y=self.y + row * (self.module_height + self.gutter_y),
                        width=self.module_width,
                        height=self.module_height,
                        col=col,
                        row=row,
                        index=row * self.cols + col,
                    )
                )
        self._cells: tuple[GridCell, ...] = tuple(cells)

    @classmethod
    def from_settings(cls, settings: dict) -> "GridLayout":
        c = settings["canvas"]
        margin = c["margin"]
        return cls(
            margin,
            margin,
            c["width"] - margin * 2,
            c["height"] - margin * 2,
            c["cols"],
            c["rows"],
            c["gutter"],
            c["gutter"],
        )

    # ------------------------------------------------------
    # Lookups
    # ------------------------------------------------------

    def get_cell(self, col: int, row: int) -> GridCell | None:
        if col < 0 or col >= self.cols or row < 0 or row >= self.rows:
            print(f"[WARN] Module ({col}, {row}) is out of bounds")
            return None
        return self._cells[row * self.cols + col]

    def get_cell_by_index(self, index: int) -> GridCell | None:
        if index < 0 or index >= len(self._cells):
            print(f"[WARN] Module index {index} is out of bounds")
            return None
        return self._cells[index]

    def all_cells(self) -> list[GridCell]:
        return list(self._cells)

    def cell_count(self) -> int:
        return len(self._cells)

    def info(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "cols": self.cols,
            "rows": self.rows,
            "gutter_x": self.gutter_x,
            "gutter_y": self.gutter_y,
            "module_width": self.module_width,
            "module_height": self.module_height,
            "module_count": len(self._cells),
        }

    # ------------------------------------------------------
    # Debug overlay
    # ------------------------------------------------------

    def draw_debug(
        self,
        surface,
        *,
        show_modules: bool = True,
        show_gutters: bool = True,
        show_labels: bool = False,
        show_boundary: bool = True,
        module_color=(200, 200, 255, 100),
        gutter_color=(255, 200, 200, 100),
        stroke_color=(100, 100, 150),
    ) -> None:
        with surface.style():
            if show_gutters and (self.gutter_x > 0 or self.gutter_y > 0):
                surface.no_stroke()
                surface.fill(gutter_color)
                for col in range(self.cols - 1):
                    gx = self.x + (col + 1) * self.module_width + col * self.gutter_x
                    surface.rect(gx, self.y, self.gutter_x, self.height)
                for row in range(self.rows - 1):
                    gy = self.y + (row + 1) * self.module_height + row * self.gutter_y
                    surface.rect(self.x, gy, self.width, self.gutter_y)

            if show_modules:
                for cell in self._cells:
                    surface.stroke(stroke_color)
                    surface.stroke_weight(1)
                    surface.fill(module_color)
                    surface.rect(cell.x, cell.y, cell.width, cell.height)

                    if show_labels:
                        surface.no_stroke()
                        surface.fill(0)
                        surface.text_size(10)
                        surface.text(
                            f"{cell.col},{cell.row}",
                            cell.x + cell.width / 2,
                            cell.y + cell.height / 2,
                            align="center",
                        )

            if show_boundary:
                surface.no_fill()
                surface.stroke(stroke_color)
                surface.stroke_weight(2)
                surface.rect(self.x, self.y, self.width, self.height)
