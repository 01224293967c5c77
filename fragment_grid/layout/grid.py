"""Occupancy grid — marks cells taken by placed cards and their spacing halo.

Each card reserves its own rectangle plus a one-cell halo: the column
to its right, the row below it and the bottom-right corner cell.  The
halo is what keeps cards visually apart, so no separate spacing pass is
needed.  A grid is created fresh for every layout computation.
"""

from __future__ import annotations

from typing import Iterator

from fragment_grid.config import LayoutRules, LAYOUT_RULES

from .models import FragmentSize, GridPosition


class OccupancyGrid:
    """A ``rows × cols`` boolean matrix of taken cells.

    Row 0 / column 0 is the top-left corner of the container.
    """

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = rows
        self.cols = cols
        self._cells = bytearray(rows * cols)

    @classmethod
    def for_rules(cls, rules: LayoutRules = LAYOUT_RULES) -> OccupancyGrid:
        return cls(rules.grid_rows, rules.grid_cols)

    # ── Cell queries ───────────────────────────────────────────────

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_cell_occupied(self, row: int, col: int) -> bool:
        if not self.in_bounds(row, col):
            return True
        return self._cells[row * self.cols + col] != 0

    def occupied_count(self) -> int:
        return sum(1 for v in self._cells if v)

    # ── Footprints ─────────────────────────────────────────────────

    def fits(self, position: GridPosition, size: FragmentSize) -> bool:
        """True when the rectangle stays strictly inside the grid extent.

        The far edge must be *below* the extent, so the last row and
        column are only ever used as halo.
        """
        return (
            position.row >= 0
            and position.col >= 0
            and position.row + size.height < self.rows
            and position.col + size.width < self.cols
        )

    def footprint_cells(
        self, position: GridPosition, size: FragmentSize,
    ) -> Iterator[tuple[int, int]]:
        """Yield in-bounds (row, col) cells of the rectangle plus its halo."""
        end_row = position.row + size.height
        end_col = position.col + size.width

        for r in range(position.row, end_row):
            for c in range(position.col, end_col):
                if self.in_bounds(r, c):
                    yield (r, c)

        # Right halo
        if end_col < self.cols:
            for r in range(position.row, end_row):
                if self.in_bounds(r, end_col):
                    yield (r, end_col)

        # Bottom halo
        if end_row < self.rows:
            for c in range(position.col, end_col):
                if self.in_bounds(end_row, c):
                    yield (end_row, c)

        # Corner
        if self.in_bounds(end_row, end_col):
            yield (end_row, end_col)

    def is_occupied(self, position: GridPosition, size: FragmentSize) -> bool:
        """True if the footprint is out of bounds or touches a taken cell."""
        if not self.fits(position, size):
            return True
        return any(self._cells[r * self.cols + c] for r, c in self.footprint_cells(position, size))

    def mark_occupied(self, position: GridPosition, size: FragmentSize) -> None:
        """Take every in-bounds cell of the footprint.  Never writes outside."""
        for r, c in self.footprint_cells(position, size):
            self._cells[r * self.cols + c] = 1
