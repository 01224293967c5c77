"""Layout — sizes fragment cards and packs them onto the container grid.

Submodules:
  models        Dataclasses, enums and configuration constants.
  text          Text truncation and the reading-direction heuristic.
  direction     Direction assignment (explicit, cached hint, decider).
  sizing        Content-driven card size estimation.
  grid          Occupancy grid with the one-cell spacing halo.
  search        First-fit placement search (never the origin).
  engine        Position reconciler (compute_layout).
  memo          Caller-side memoization of layout results.
  coords        Grid <-> pixel conversion.
  validation    Invariant checks (overlap, origin, containment).
  serialization JSON conversion (layout_to_dict, parse_layout, ...).
"""

from .models import (
    Direction, Note, Fragment, FragmentSize, GridPosition, GridFragment,
    UnplacedReason, UnplacedFragment, LayoutResult, LayoutInputError,
)
from .engine import compute_layout
from .memo import LayoutMemo
from .direction import make_decider, assign_direction, create_direction_map
from .sizing import calculate_font_size, calculate_fragment_size
from .grid import OccupancyGrid
from .search import find_placement_position
from .coords import grid_to_pixel, pixel_to_grid
from .text import truncate_text, decide_direction
from .validation import validate_layout, find_overlaps
from .serialization import (
    layout_to_dict, parse_layout, parse_layout_request,
    parse_fragments, parse_positions, parse_direction_hints,
)

__all__ = [
    # Models
    "Direction", "Note", "Fragment", "FragmentSize", "GridPosition",
    "GridFragment", "UnplacedReason", "UnplacedFragment", "LayoutResult",
    "LayoutInputError",
    # Engine
    "compute_layout", "LayoutMemo",
    # Building blocks
    "make_decider", "assign_direction", "create_direction_map",
    "calculate_font_size", "calculate_fragment_size",
    "OccupancyGrid", "find_placement_position",
    "grid_to_pixel", "pixel_to_grid",
    "truncate_text", "decide_direction",
    # Validation / Serialization
    "validate_layout", "find_overlaps",
    "layout_to_dict", "parse_layout", "parse_layout_request",
    "parse_fragments", "parse_positions", "parse_direction_hints",
]
