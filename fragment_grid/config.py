"""Shared layout constants for the fragment grid.

These values describe the grid cell size, the visible container and the
bounds a card may take.  The size estimator, the occupancy grid and the
placement search all derive their parameters from this single source of
truth.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LayoutRules:
    """Geometry rules for laying out fragment cards.

    Pixel values are in CSS pixels; everything else is in grid cells.
    """

    grid_size: int = 20
    """Pixel length of one grid cell (rows and columns are square)."""

    container_width: int = 1200
    """Pixel width of the visible container.  Cards never extend past it."""

    grid_rows: int = 200
    grid_cols: int = 200

    max_content_length: int = 100
    """Content text is truncated to this many characters before sizing."""

    max_note_length: int = 50
    """First-note text is truncated to this many characters before sizing."""

    min_card_width: int = 5
    max_card_width: int = 15
    min_card_height: int = 4
    max_card_height: int = 12

    base_font_size: int = 14
    """Font size at which the size estimator's font factor is 1."""

    # ── Derived helpers ────────────────────────────────────────────

    @property
    def container_cols(self) -> int:
        """Number of whole grid columns that fit in the container."""
        return self.container_width // self.grid_size


# Module-level singleton, importable everywhere.
LAYOUT_RULES = LayoutRules()
