"""Grid <-> pixel coordinate conversion for rendering and drag handling."""

from __future__ import annotations

import math

from fragment_grid.config import LayoutRules, LAYOUT_RULES

from .models import GridPosition


def grid_to_pixel(
    position: GridPosition, rules: LayoutRules = LAYOUT_RULES,
) -> tuple[int, int]:
    """Convert a grid position to pixel ``(top, left)``."""
    return (position.row * rules.grid_size, position.col * rules.grid_size)


def pixel_to_grid(
    top: float, left: float, rules: LayoutRules = LAYOUT_RULES,
) -> GridPosition:
    """Snap pixel ``(top, left)`` to the nearest grid cell, clamped at 0.

    Halves round up, so a card dropped half a cell past a line snaps
    forward.
    """
    return GridPosition(
        row=max(0, math.floor(top / rules.grid_size + 0.5)),
        col=max(0, math.floor(left / rules.grid_size + 0.5)),
    )
