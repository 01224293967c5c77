"""
FastAPI web server — computes fragment layouts for the card board UI.
"""

from __future__ import annotations

import dataclasses
import logging
import random
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, FiniteFloat

from fragment_grid.config import LAYOUT_RULES
from fragment_grid.layout import (
    LayoutInputError, LayoutMemo,
    compute_layout, layout_to_dict, make_decider, parse_layout_request,
    pixel_to_grid, validate_layout,
)


log = logging.getLogger(__name__)

# ── App ────────────────────────────────────────────────────────────

app = FastAPI(title="fragment-grid")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Layout cache (persists across requests) ────────────────────────

_memo = LayoutMemo(rules=LAYOUT_RULES)


# ── Models ─────────────────────────────────────────────────────────

class NoteIn(BaseModel):
    value: str = ""
    id: str | None = None


class FragmentIn(BaseModel):
    id: str
    content: str = ""
    notes: list[NoteIn] = []
    tags: list[str] = []
    direction: str | None = None
    show_content: bool = True
    show_note: bool = True
    show_tags: bool = True


class PositionIn(BaseModel):
    row: int
    col: int


class LayoutRequest(BaseModel):
    fragments: list[FragmentIn]
    positions: dict[str, PositionIn] = {}
    direction_hints: dict[str, str] = {}
    seed: int | None = None     # makes the direction fallback reproducible


class PixelRequest(BaseModel):
    top: FiniteFloat
    left: FiniteFloat


# ── Routes ─────────────────────────────────────────────────────────

@app.get("/api/config")
def get_config():
    """Return the grid geometry so the UI can size its container."""
    return {
        **dataclasses.asdict(LAYOUT_RULES),
        "container_cols": LAYOUT_RULES.container_cols,
    }


@app.post("/api/layout")
def layout(req: LayoutRequest):
    """Compute a layout and return placements, the position patch and
    the list of fragments that could not be placed.

    Requests without a seed go through the shared memo so an unchanged
    board is not recomputed.
    """
    try:
        fragments, positions, hints = parse_layout_request(req.model_dump())
    except LayoutInputError as e:
        raise HTTPException(422, str(e))

    if req.seed is None:
        result = _memo.compute(fragments, positions, hints)
    else:
        result = compute_layout(
            fragments, positions, hints,
            decide=make_decider(randomize=True, rng=random.Random(req.seed)),
            rules=LAYOUT_RULES,
        )

    body: dict[str, Any] = layout_to_dict(result, LAYOUT_RULES)
    body["errors"] = validate_layout(result, LAYOUT_RULES)
    if body["errors"]:
        log.error("Layout failed validation: %s", body["errors"])
    return body


@app.post("/api/pixel_to_grid")
def to_grid(req: PixelRequest):
    """Snap a dropped card's pixel position to the grid."""
    p = pixel_to_grid(req.top, req.left, LAYOUT_RULES)
    return {"row": p.row, "col": p.col}


def main(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    uvicorn.run("fragment_grid.web.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
