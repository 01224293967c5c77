"""
fragment-grid — entry point.

Usage:
    python -m fragment_grid layout --input board.json            # print layout JSON
    python -m fragment_grid layout --input board.json --output layout.json --seed 7
    python -m fragment_grid serve --port 3000                     # start web server
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import random
import sys
from pathlib import Path

from fragment_grid.config import LAYOUT_RULES


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fragment_grid", description="Pack fragment cards onto a grid")
    p.add_argument("-v", "--verbose", action="store_true", help="Log per-fragment placements")
    sub = p.add_subparsers(dest="cmd", required=True)

    lay = sub.add_parser("layout", help="Compute a layout from a board JSON file")
    lay.add_argument("--input", required=True, help="Path to {fragments, positions, direction_hints} JSON")
    lay.add_argument("--output", default=None, help="Write layout JSON here instead of stdout")
    lay.add_argument("--seed", type=int, default=None, help="Seed for the direction fallback")
    lay.add_argument("--container-width", type=int, default=None, help="Container width in pixels")

    sv = sub.add_parser("serve", help="Start the layout web server")
    sv.add_argument("--host", default="127.0.0.1", help="Host to bind")
    sv.add_argument("--port", type=int, default=8000, help="Port to bind")

    return p


def run_layout(args: argparse.Namespace) -> int:
    from fragment_grid.layout import (
        LayoutInputError, compute_layout, layout_to_dict, make_decider,
        parse_layout_request, validate_layout,
    )

    rules = LAYOUT_RULES
    if args.container_width is not None:
        rules = dataclasses.replace(rules, container_width=args.container_width)

    data = json.loads(Path(args.input).read_text(encoding="utf-8"))
    try:
        fragments, positions, hints = parse_layout_request(data)
    except LayoutInputError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    rng = random.Random(args.seed) if args.seed is not None else None
    result = compute_layout(
        fragments, positions, hints,
        decide=make_decider(randomize=True, rng=rng),
        rules=rules,
    )

    out = layout_to_dict(result, rules)
    out["errors"] = validate_layout(result, rules)
    text = json.dumps(out, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"✅ {len(result.placed)} placed, {len(result.unplaced)} unplaceable → {args.output}")
    else:
        print(text)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "layout":
        return run_layout(args)

    if args.cmd == "serve":
        from fragment_grid.web.server import main as serve_main
        serve_main(host=args.host, port=args.port)
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
