"""Layout validation — check a LayoutResult against the grid invariants."""

from __future__ import annotations

from shapely.geometry import box as shapely_box

from fragment_grid.config import LayoutRules, LAYOUT_RULES

from .models import GridFragment, LayoutResult


def halo_box(gf: GridFragment):
    """Shapely box covering the card's cells plus its one-cell halo."""
    p, s = gf.position, gf.size
    return shapely_box(p.col, p.row, p.col + s.width + 1, p.row + s.height + 1)


def find_overlaps(placed: list[GridFragment]) -> list[tuple[str, str]]:
    """Return id pairs whose footprints-plus-halo share at least one cell."""
    boxes = [(gf.id, halo_box(gf)) for gf in placed]
    overlaps: list[tuple[str, str]] = []
    for i, (id_a, a) in enumerate(boxes):
        for id_b, b in boxes[i + 1:]:
            if a.intersection(b).area > 0:
                overlaps.append((id_a, id_b))
    return overlaps


def validate_layout(
    result: LayoutResult, rules: LayoutRules = LAYOUT_RULES,
) -> list[str]:
    """Validate a layout. Returns error messages (empty = valid)."""
    errors: list[str] = []
    container_cols = rules.container_cols

    for gf in result.placed:
        p, s = gf.position, gf.size

        # ── Origin / negative ──
        if p.is_problematic:
            errors.append(f"Fragment '{gf.id}': problematic position ({p.row}, {p.col})")

        # ── Container and grid bounds ──
        if p.col + s.width > container_cols:
            errors.append(
                f"Fragment '{gf.id}': right edge {p.col + s.width} exceeds "
                f"container ({container_cols} cols)"
            )
        if p.row + s.height >= rules.grid_rows or p.col + s.width >= rules.grid_cols:
            errors.append(f"Fragment '{gf.id}': footprint leaves the grid")

        # ── Patch consistency ──
        patched = result.position_patch.get(gf.id)
        if patched is not None and patched != p:
            errors.append(f"Fragment '{gf.id}': patch {patched} disagrees with {p}")

    for id_a, id_b in find_overlaps(result.placed):
        errors.append(f"Fragments '{id_a}' and '{id_b}' overlap (including spacing)")

    return errors
