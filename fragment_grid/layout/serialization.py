"""Layout serialization — JSON conversion for requests and results."""

from __future__ import annotations

import math

from fragment_grid.config import LayoutRules, LAYOUT_RULES

from .coords import grid_to_pixel
from .models import (
    Direction, Fragment, FragmentSize, GridFragment, GridPosition,
    LayoutInputError, LayoutResult, Note, UnplacedFragment, UnplacedReason,
)


# ── Parsing ────────────────────────────────────────────────────────


def parse_direction(key: str, value) -> Direction | None:
    if value is None or value == "":
        return None
    try:
        return Direction(value)
    except ValueError:
        raise LayoutInputError(key, f"unknown direction {value!r}") from None


def parse_position(key: str, data) -> GridPosition:
    """Parse ``{"row": r, "col": c}`` (or a ``[row, col]`` pair)."""
    if isinstance(data, (list, tuple)) and len(data) == 2:
        row, col = data
    elif isinstance(data, dict) and "row" in data and "col" in data:
        row, col = data["row"], data["col"]
    else:
        raise LayoutInputError(key, "expected {'row': int, 'col': int}")

    for name, v in (("row", row), ("col", col)):
        if (isinstance(v, bool) or not isinstance(v, (int, float))
                or (isinstance(v, float) and not math.isfinite(v)) or int(v) != v):
            raise LayoutInputError(f"{key}.{name}", f"expected an integer, got {v!r}")
    return GridPosition(row=int(row), col=int(col))


def _parse_note(key: str, data) -> Note:
    if isinstance(data, str):
        return Note(value=data)
    if isinstance(data, dict):
        return Note(value=str(data.get("value") or ""), id=data.get("id"))
    raise LayoutInputError(key, "expected a string or {'value': str}")


def _parse_tag(key: str, data) -> str:
    if isinstance(data, str):
        return data
    if isinstance(data, dict) and data.get("name") is not None:
        return str(data["name"])
    raise LayoutInputError(key, "expected a string or {'name': str}")


def parse_fragment(data: dict, index: int = 0) -> Fragment:
    """Parse a raw fragment dict into a Fragment."""
    key = f"fragments[{index}]"
    if not isinstance(data, dict):
        raise LayoutInputError(key, "expected an object")
    frag_id = data.get("id")
    if frag_id is None or frag_id == "":
        raise LayoutInputError(f"{key}.id", "missing fragment id")

    return Fragment(
        id=str(frag_id),
        content=str(data.get("content") or ""),
        notes=tuple(
            _parse_note(f"{key}.notes[{i}]", n)
            for i, n in enumerate(data.get("notes") or [])
        ),
        tags=tuple(
            _parse_tag(f"{key}.tags[{i}]", t)
            for i, t in enumerate(data.get("tags") or [])
        ),
        direction=parse_direction(f"{key}.direction", data.get("direction")),
        show_content=data.get("show_content", True) is not False,
        show_note=data.get("show_note", True) is not False,
        show_tags=data.get("show_tags", True) is not False,
    )


def parse_fragments(data: list) -> list[Fragment]:
    if not isinstance(data, list):
        raise LayoutInputError("fragments", "expected a list")
    return [parse_fragment(f, i) for i, f in enumerate(data)]


def parse_positions(data: dict | None) -> dict[str, GridPosition]:
    if not data:
        return {}
    if not isinstance(data, dict):
        raise LayoutInputError("positions", "expected an object keyed by fragment id")
    return {
        str(fid): parse_position(f"positions.{fid}", p)
        for fid, p in data.items()
        if p is not None
    }


def parse_direction_hints(data: dict | None) -> dict[str, Direction]:
    if not data:
        return {}
    if not isinstance(data, dict):
        raise LayoutInputError("direction_hints", "expected an object keyed by fragment id")
    hints = {}
    for fid, value in data.items():
        direction = parse_direction(f"direction_hints.{fid}", value)
        if direction is not None:
            hints[str(fid)] = direction
    return hints


def parse_layout_request(
    data: dict,
) -> tuple[list[Fragment], dict[str, GridPosition], dict[str, Direction]]:
    """Parse ``{"fragments": [...], "positions": {...}, "direction_hints": {...}}``."""
    if not isinstance(data, dict):
        raise LayoutInputError("request", "expected an object")
    return (
        parse_fragments(data.get("fragments", [])),
        parse_positions(data.get("positions")),
        parse_direction_hints(data.get("direction_hints")),
    )


# ── Serialization ──────────────────────────────────────────────────


def position_to_dict(p: GridPosition) -> dict:
    return {"row": p.row, "col": p.col}


def fragment_to_dict(f: Fragment) -> dict:
    return {
        "id": f.id,
        "content": f.content,
        "notes": [
            {"value": n.value, **({"id": n.id} if n.id is not None else {})}
            for n in f.notes
        ],
        "tags": list(f.tags),
        **({"direction": f.direction.value} if f.direction is not None else {}),
        "show_content": f.show_content,
        "show_note": f.show_note,
        "show_tags": f.show_tags,
    }


def layout_to_dict(result: LayoutResult, rules: LayoutRules = LAYOUT_RULES) -> dict:
    """Serialize a LayoutResult to a JSON-safe dict.

    Each placed fragment also carries its pixel ``top``/``left`` for
    rendering.
    """
    placed = []
    for gf in result.placed:
        top, left = grid_to_pixel(gf.position, rules)
        placed.append({
            "fragment": fragment_to_dict(gf.fragment),
            "direction": gf.direction.value,
            "font_size": gf.font_size,
            "size": {"width": gf.size.width, "height": gf.size.height},
            "position": position_to_dict(gf.position),
            "pixel": {"top": top, "left": left},
        })

    return {
        "placed": placed,
        "position_patch": {
            fid: position_to_dict(p) for fid, p in result.position_patch.items()
        },
        "repaired": list(result.repaired),
        "clipped": list(result.clipped),
        "relocated": list(result.relocated),
        "unplaced": [
            {
                "id": u.id,
                "reason": u.reason.value,
                "size": {"width": u.size.width, "height": u.size.height},
                **({"stored_position": position_to_dict(u.stored_position)}
                   if u.stored_position is not None else {}),
            }
            for u in result.unplaced
        ],
    }


def parse_layout(data: dict) -> LayoutResult:
    """Parse a layout dict (from ``layout_to_dict``) back into a LayoutResult."""
    placed = [
        GridFragment(
            fragment=parse_fragment(p["fragment"], i),
            direction=Direction(p["direction"]),
            font_size=float(p["font_size"]),
            size=FragmentSize(width=p["size"]["width"], height=p["size"]["height"]),
            position=parse_position(f"placed[{i}].position", p["position"]),
        )
        for i, p in enumerate(data.get("placed", []))
    ]

    unplaced = [
        UnplacedFragment(
            id=u["id"],
            reason=UnplacedReason(u["reason"]),
            size=FragmentSize(width=u["size"]["width"], height=u["size"]["height"]),
            stored_position=(
                parse_position(f"unplaced[{i}].stored_position", u["stored_position"])
                if "stored_position" in u else None
            ),
        )
        for i, u in enumerate(data.get("unplaced", []))
    ]

    return LayoutResult(
        placed=placed,
        position_patch=parse_positions(data.get("position_patch")),
        repaired=list(data.get("repaired", [])),
        clipped=list(data.get("clipped", [])),
        relocated=list(data.get("relocated", [])),
        unplaced=unplaced,
    )
