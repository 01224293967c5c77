"""Content-driven card sizing.

Card size is estimated from the (truncated) content and first-note
length, the number of tags, the reading direction and the font size.
Horizontal cards grow downwards line by line; vertical cards grow
sideways column by column.  The two formulas use different scaling
constants on purpose and are not transposes of each other.
"""

from __future__ import annotations

import math

from fragment_grid.config import LayoutRules, LAYOUT_RULES

from .models import (
    Direction, Fragment, FragmentSize,
    NOMINAL_CHARS_PER_LINE, MIN_CHARS_PER_LINE, MAX_AVG_CHARS_PER_LINE,
    MAX_TEXT_LINES, MAX_TAG_LINES, TAGS_PER_LINE, MAX_TAG_COLUMNS,
)
from .text import truncate_text


# Horizontal (lines of text, measured in rows)
LINE_HEIGHT = 1.4
NOTE_LINE_SCALE = 0.8
TAG_LINE_HEIGHT = 1.5
TAG_BLOCK_PADDING = 1.5
H_PADDING_HEIGHT = 3.5
CHAR_WIDTH = 0.6
H_PADDING_WIDTH = 2.0

# Vertical (columns of text, measured in cols)
COLUMN_WIDTH = 1.6
V_PADDING_WIDTH = 3.5
CHAR_HEIGHT = 1.1
V_PADDING_HEIGHT = 2.0


def calculate_font_size(
    relevance_score: float = 0.0,
    rules: LayoutRules = LAYOUT_RULES,
) -> float:
    """Font size for a card with the given relevance score.

    Every card currently renders at the base size; the score is accepted
    so relevance-weighted sizing can be plugged in here.
    """
    return float(rules.base_font_size)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _text_units(length: int, chars_per_unit: int) -> int:
    return math.ceil(length / chars_per_unit) if length else 0


def calculate_fragment_size(
    fragment: Fragment,
    direction: Direction,
    font_size: float,
    rules: LayoutRules = LAYOUT_RULES,
) -> FragmentSize:
    """Estimate the grid size of *fragment*, clamped to the card bounds."""
    content_len = len(truncate_text(fragment.content, rules.max_content_length))
    note_len = len(truncate_text(fragment.note_text, rules.max_note_length))
    tag_count = len(fragment.tags)

    font_factor = font_size / rules.base_font_size
    chars_per_unit = max(MIN_CHARS_PER_LINE, math.ceil(NOMINAL_CHARS_PER_LINE / font_factor))
    avg_chars = min(chars_per_unit, MAX_AVG_CHARS_PER_LINE)

    # Content always takes at least one line/column; notes share the cap.
    content_units = min(_text_units(content_len, chars_per_unit) or 1, MAX_TEXT_LINES)
    note_units = min(
        _text_units(note_len, chars_per_unit),
        max(0, MAX_TEXT_LINES - content_units),
    )

    if direction == Direction.VERTICAL:
        tag_columns = min(tag_count, MAX_TAG_COLUMNS)
        column_width = font_factor * COLUMN_WIDTH
        tag_width = tag_columns * TAG_LINE_HEIGHT + TAG_BLOCK_PADDING if tag_columns else 0.0

        width = _round_half_up(
            content_units * column_width
            + note_units * column_width * NOTE_LINE_SCALE
            + tag_width
            + V_PADDING_WIDTH
        )
        height = _round_half_up(avg_chars * font_factor * CHAR_HEIGHT + V_PADDING_HEIGHT)
    else:
        tag_lines = min(MAX_TAG_LINES, math.ceil(tag_count / TAGS_PER_LINE))
        line_height = font_factor * LINE_HEIGHT
        tag_height = tag_lines * TAG_LINE_HEIGHT + TAG_BLOCK_PADDING if tag_lines else 0.0

        width = _round_half_up(avg_chars * font_factor * CHAR_WIDTH + H_PADDING_WIDTH)
        height = _round_half_up(
            content_units * line_height
            + note_units * line_height * NOTE_LINE_SCALE
            + tag_height
            + H_PADDING_HEIGHT
        )

    return FragmentSize(
        width=max(rules.min_card_width, min(rules.max_card_width, width)),
        height=max(rules.min_card_height, min(rules.max_card_height, height)),
    )
