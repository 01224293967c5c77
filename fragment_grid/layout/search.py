"""First-fit placement search over the occupancy grid.

Scan order (first free footprint wins):

  1. rows 1.., columns 1..: the main body of the grid
  2. row 0, columns 1..: the top edge, minus the origin
  3. column 0, rows 1..: the left edge, minus the origin

Starting every pass at 1 means the origin is never returned.
"""

from __future__ import annotations

from fragment_grid.config import LayoutRules, LAYOUT_RULES

from .grid import OccupancyGrid
from .models import FragmentSize, GridPosition


def find_placement_position(
    grid: OccupancyGrid,
    size: FragmentSize,
    rules: LayoutRules = LAYOUT_RULES,
) -> GridPosition | None:
    """Return the first free position for *size*, or None if the grid is full."""
    container_cols = rules.container_cols
    max_cols = min(grid.cols, container_cols)

    for r in range(1, grid.rows):
        for c in range(1, max_cols):
            if c + size.width > container_cols:
                continue
            position = GridPosition(r, c)
            if not grid.is_occupied(position, size):
                return position

    for c in range(1, max_cols):
        if c + size.width > container_cols:
            continue
        position = GridPosition(0, c)
        if not grid.is_occupied(position, size):
            return position

    # Left edge: only the total width is checked against the container.
    if size.width <= container_cols:
        for r in range(1, grid.rows):
            position = GridPosition(r, 0)
            if not grid.is_occupied(position, size):
                return position

    return None
