"""Reading-direction assignment.

Explicit fragment direction wins, then a cached hint for the id, then
the injectable decision function.  The default decider is randomized;
pass a seeded ``random.Random`` (or any callable) to make it
deterministic.
"""

from __future__ import annotations

import random
from typing import Callable, Iterable, Mapping

from .models import Direction, Fragment
from .text import decide_direction


DirectionDecider = Callable[[str, "str | None"], Direction]


def make_decider(
    randomize: bool = True,
    rng: random.Random | None = None,
) -> DirectionDecider:
    """Bind the text heuristic to a randomness policy."""

    def decide(content: str, note: str | None = None) -> Direction:
        return decide_direction(content, note, randomize=randomize, rng=rng)

    return decide


def assign_direction(
    fragment: Fragment,
    hints: Mapping[str, Direction],
    decide: DirectionDecider,
) -> Direction:
    if fragment.direction is not None:
        return fragment.direction
    hinted = hints.get(fragment.id)
    if hinted is not None:
        return hinted
    return decide(fragment.content, fragment.note_text or None)


def create_direction_map(
    fragments: Iterable[Fragment],
    decide: DirectionDecider | None = None,
) -> dict[str, Direction]:
    """Build an id -> direction map suitable for caching as layout hints.

    Cached hints are ignored here: every fragment without an explicit
    direction gets a fresh decision.
    """
    decide = decide or make_decider(randomize=True)
    return {
        frag.id: frag.direction if frag.direction is not None
        else decide(frag.content, frag.note_text or None)
        for frag in fragments
    }
