"""Caller-side memoization for layout computations.

The engine itself is a plain function.  ``LayoutMemo`` remembers the
last inputs and result and only recomputes, from scratch, when the
fragments, stored positions, direction hints or rules change by value.
A memo may be shared between threads (the web server does this).
"""

from __future__ import annotations

import threading
from typing import Hashable, Mapping, Sequence

from fragment_grid.config import LayoutRules, LAYOUT_RULES

from .direction import DirectionDecider
from .engine import compute_layout
from .models import Direction, Fragment, GridPosition, LayoutResult


def layout_key(
    fragments: Sequence[Fragment],
    stored_positions: Mapping[str, GridPosition],
    direction_hints: Mapping[str, Direction],
    rules: LayoutRules = LAYOUT_RULES,
) -> Hashable:
    """Value fingerprint of one set of layout inputs."""
    return (
        tuple(fragments),
        tuple(sorted(stored_positions.items())),
        tuple(sorted((k, Direction(v).value) for k, v in direction_hints.items())),
        rules,
    )


class LayoutMemo:
    """Single-entry layout cache."""

    def __init__(
        self,
        rules: LayoutRules = LAYOUT_RULES,
        decide: DirectionDecider | None = None,
    ) -> None:
        self.rules = rules
        self.decide = decide
        self.computations = 0
        self._lock = threading.Lock()
        # (key, result) of the last computation, replaced as one value
        self._entry: tuple[Hashable, LayoutResult] | None = None

    def compute(
        self,
        fragments: Sequence[Fragment],
        stored_positions: Mapping[str, GridPosition] | None = None,
        direction_hints: Mapping[str, Direction] | None = None,
    ) -> LayoutResult:
        stored_positions = stored_positions or {}
        direction_hints = direction_hints or {}
        key = layout_key(fragments, stored_positions, direction_hints, self.rules)

        with self._lock:
            if self._entry is not None and self._entry[0] == key:
                return self._entry[1]

            result = compute_layout(
                fragments, stored_positions, direction_hints,
                decide=self.decide, rules=self.rules,
            )
            self._entry = (key, result)
            self.computations += 1
            return result

    def clear(self) -> None:
        with self._lock:
            self._entry = None
