"""Main layout engine — sizes every fragment and reconciles positions.

Algorithm:
  1. Resolve each fragment's reading direction, font size and card size.
  2. Pass A: fragments with a stored position, in input order:
       - problematic (origin / negative) positions are re-searched
       - positions overflowing the container are clipped back inside
       - free positions are kept; taken ones fall back to a fresh search
  3. Pass B: fragments without a stored position, in input order,
     each placed at the first free position of the scan.

Fragments that cannot be placed are omitted from the layout and listed
in ``LayoutResult.unplaced`` with the reason.  Nothing here raises for
a full container.
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from fragment_grid.config import LayoutRules, LAYOUT_RULES

from .direction import DirectionDecider, assign_direction, make_decider
from .grid import OccupancyGrid
from .models import (
    Direction, Fragment, FragmentSize, GridFragment, GridPosition,
    LayoutResult, UnplacedFragment, UnplacedReason,
)
from .search import find_placement_position
from .sizing import calculate_font_size, calculate_fragment_size


log = logging.getLogger(__name__)


def _drop(
    result: LayoutResult,
    fragment: Fragment,
    size: FragmentSize,
    stored: GridPosition | None,
    reason: UnplacedReason,
) -> None:
    log.error("Fragment %s (%dx%d) unplaceable: %s",
              fragment.id, size.width, size.height, reason.value)
    result.unplaced.append(UnplacedFragment(
        id=fragment.id, reason=reason, size=size, stored_position=stored,
    ))


def compute_layout(
    fragments: Sequence[Fragment],
    stored_positions: Mapping[str, GridPosition] | None = None,
    direction_hints: Mapping[str, Direction] | None = None,
    *,
    decide: DirectionDecider | None = None,
    relevance: Mapping[str, float] | None = None,
    rules: LayoutRules = LAYOUT_RULES,
) -> LayoutResult:
    """Lay out *fragments* on a fresh occupancy grid.

    Parameters
    ----------
    fragments : sequence of Fragment
        Cards to lay out.  Input order decides placement priority.
    stored_positions : mapping id -> GridPosition
        Previously saved positions.  Entries for unknown ids are ignored.
    direction_hints : mapping id -> Direction
        Cached directions used when a fragment has no explicit one.
    decide : callable
        Direction fallback for fragments with neither; defaults to the
        randomized text heuristic.
    relevance : mapping id -> float
        Relevance scores handed to the font-size hook.
    rules : LayoutRules
        Grid and container geometry.

    Returns
    -------
    LayoutResult
        Placed fragments, the position patch and the repair report.
    """
    stored_positions = stored_positions or {}
    direction_hints = direction_hints or {}
    relevance = relevance or {}
    if decide is None:
        decide = make_decider(randomize=True)

    grid = OccupancyGrid.for_rules(rules)
    container_cols = rules.container_cols

    log.info("Layout: %d fragments, %d stored positions, grid=%dx%d, container=%d cols",
             len(fragments), len(stored_positions), grid.rows, grid.cols, container_cols)

    sized: list[tuple[Fragment, Direction, float, FragmentSize]] = []
    for frag in fragments:
        direction = assign_direction(frag, direction_hints, decide)
        font_size = calculate_font_size(relevance.get(frag.id, 0.0), rules)
        size = calculate_fragment_size(frag, direction, font_size, rules)
        sized.append((frag, direction, font_size, size))

    result = LayoutResult(placed=[], position_patch={})

    def accept(frag: Fragment, direction: Direction, font_size: float,
               size: FragmentSize, position: GridPosition) -> None:
        grid.mark_occupied(position, size)
        result.placed.append(GridFragment(
            fragment=frag,
            direction=direction,
            font_size=font_size,
            size=size,
            position=position,
        ))

    # ── Pass A: fragments with a stored position ───────────────────

    for frag, direction, font_size, size in sized:
        stored = stored_positions.get(frag.id)
        if stored is None:
            continue
        position = stored

        if stored.is_problematic:
            log.warning("Fragment %s has problematic position (%d, %d), searching",
                        frag.id, stored.row, stored.col)
            found = find_placement_position(grid, size, rules)
            if found is None:
                _drop(result, frag, size, stored, UnplacedReason.PROBLEMATIC_UNRESOLVED)
                continue
            position = found
            result.repaired.append(frag.id)

        if position.col + size.width > container_cols:
            position = GridPosition(position.row, max(1, container_cols - size.width))
            result.clipped.append(frag.id)

        # A card wider than the container still overflows after clipping.
        if grid.is_occupied(position, size) or position.col + size.width > container_cols:
            log.warning("Fragment %s conflicts at (%d, %d), searching fallback",
                        frag.id, position.row, position.col)
            fallback = find_placement_position(grid, size, rules)
            if fallback is None:
                _drop(result, frag, size, stored, UnplacedReason.CONFLICT_UNRESOLVED)
                continue
            position = fallback
            result.relocated.append(frag.id)

        accept(frag, direction, font_size, size, position)
        if position != stored:
            result.position_patch[frag.id] = position

    # ── Pass B: new fragments ──────────────────────────────────────

    for frag, direction, font_size, size in sized:
        if stored_positions.get(frag.id) is not None:
            continue

        position = find_placement_position(grid, size, rules)
        if position is None or position.is_problematic:
            _drop(result, frag, size, None, UnplacedReason.NO_SPACE)
            continue

        accept(frag, direction, font_size, size, position)
        result.position_patch[frag.id] = position
        log.debug("Placed new fragment %s at (%d, %d) size %dx%d",
                  frag.id, position.row, position.col, size.width, size.height)

    log.info("Layout done: %d placed, %d patched, %d repaired, %d clipped, "
             "%d relocated, %d unplaceable",
             len(result.placed), len(result.position_patch), len(result.repaired),
             len(result.clipped), len(result.relocated), len(result.unplaced))
    return result
