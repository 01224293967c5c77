"""Layout dataclasses and configuration constants."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ── Input dataclasses ──────────────────────────────────────────────


class Direction(str, Enum):
    """Reading direction of a card; picks the size-estimation formula."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class Note:
    value: str
    id: str | None = None


@dataclass(frozen=True)
class Fragment:
    """A content card as supplied by the fragment store.

    Only the first note's text and the number of tags influence layout.
    """

    id: str
    content: str = ""
    notes: tuple[Note, ...] = ()
    tags: tuple[str, ...] = ()
    direction: Direction | None = None
    show_content: bool = True
    show_note: bool = True
    show_tags: bool = True

    @property
    def note_text(self) -> str:
        """Text of the first note, or an empty string."""
        return self.notes[0].value if self.notes else ""


# ── Grid geometry ──────────────────────────────────────────────────


@dataclass(frozen=True)
class FragmentSize:
    width: int      # grid columns
    height: int     # grid rows


@dataclass(frozen=True)
class GridPosition:
    row: int
    col: int

    @property
    def is_problematic(self) -> bool:
        """Origin or negative positions are never valid placements."""
        return (self.row == 0 and self.col == 0) or self.row < 0 or self.col < 0


# ── Output dataclasses ─────────────────────────────────────────────


@dataclass
class GridFragment:
    """A fragment with its resolved direction, font size, size and position."""

    fragment: Fragment
    direction: Direction
    font_size: float
    size: FragmentSize
    position: GridPosition

    @property
    def id(self) -> str:
        return self.fragment.id


class UnplacedReason(str, Enum):
    PROBLEMATIC_UNRESOLVED = "problematic position unresolved"
    CONFLICT_UNRESOLVED = "conflict unresolved"
    NO_SPACE = "no space found"


@dataclass
class UnplacedFragment:
    """A fragment dropped from the layout, with the reason it was dropped."""

    id: str
    reason: UnplacedReason
    size: FragmentSize
    stored_position: GridPosition | None = None


@dataclass
class LayoutResult:
    """Complete result of one layout computation.

    ``position_patch`` holds only the fragments whose position differs
    from the supplied one.  ``repaired`` lists fragments whose stored
    position was problematic, ``clipped`` those pulled back inside the
    container, and ``relocated`` those moved off a conflicting position.
    """

    placed: list[GridFragment]
    position_patch: dict[str, GridPosition]
    repaired: list[str] = field(default_factory=list)
    clipped: list[str] = field(default_factory=list)
    relocated: list[str] = field(default_factory=list)
    unplaced: list[UnplacedFragment] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return len(self.unplaced) == 0

    @property
    def positions(self) -> dict[str, GridPosition]:
        """Final position of every placed fragment, keyed by id."""
        return {gf.id: gf.position for gf in self.placed}


class LayoutInputError(ValueError):
    """Raised when raw layout input cannot be parsed."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid layout input at '{key}': {reason}")


# ── Configuration ──────────────────────────────────────────────────

# Size-estimation constants.  Card bounds and grid geometry live in
# fragment_grid.config.LayoutRules.
NOMINAL_CHARS_PER_LINE = 15
MIN_CHARS_PER_LINE = 10
MAX_AVG_CHARS_PER_LINE = 20
MAX_TEXT_LINES = 8          # shared between content and note lines/columns
MAX_TAG_LINES = 2           # horizontal: 4 tags per line
TAGS_PER_LINE = 4
MAX_TAG_COLUMNS = 3         # vertical: one tag per column
