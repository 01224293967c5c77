"""Text helpers consumed by the layout engine — truncation and the
reading-direction heuristic."""

from __future__ import annotations

import random
import re

from .models import Direction


ELLIPSIS = "…"

# Han, kana and CJK compatibility ideographs read naturally top-to-bottom.
_CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]")

VERTICAL_MIN_CJK_RATIO = 0.5
VERTICAL_MAX_CHARS = 60
VERTICAL_PROBABILITY = 0.5

_default_rng = random.Random()


def truncate_text(text: str | None, max_len: int) -> str:
    """Cut *text* to at most *max_len* characters, ending in an ellipsis."""
    if not text:
        return ""
    if max_len <= 0:
        return ""
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + ELLIPSIS


def decide_direction(
    content: str | None,
    note: str | None = None,
    randomize: bool = False,
    rng: random.Random | None = None,
) -> Direction:
    """Pick a reading direction from the card text.

    Short, mostly-CJK text is eligible for vertical layout.  With
    *randomize* set, eligible cards go vertical with probability
    ``VERTICAL_PROBABILITY`` drawn from *rng*; everything else is
    horizontal.
    """
    chars = [ch for ch in (content or "") + (note or "") if not ch.isspace()]
    if not chars or len(chars) > VERTICAL_MAX_CHARS:
        return Direction.HORIZONTAL

    cjk = sum(1 for ch in chars if _CJK_RE.match(ch))
    if cjk / len(chars) < VERTICAL_MIN_CJK_RATIO:
        return Direction.HORIZONTAL

    if randomize:
        draw = (rng or _default_rng).random()
        return Direction.VERTICAL if draw < VERTICAL_PROBABILITY else Direction.HORIZONTAL
    return Direction.VERTICAL
