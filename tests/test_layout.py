"""Tests for the layout engine (position reconciler).

Uses the fragment fixture boards:
  - empty horizontal cards are 11×5, so five fit across the 60-column
    container at cols 1, 13, 25, 37, 49
  - SMALL_RULES holds exactly four such cards

Validates:
  - New fragments land at the first scan position and are always patched
  - Problematic stored positions are repaired
  - Conflicting stored positions keep the first and relocate the second
  - Overflowing positions are clipped inside the container
  - Exhaustion reports fragments as unplaceable without disturbing others
  - Re-running on the merged positions is a fixed point
  - No overlaps, no origin, containment for every layout
  - Direction resolution order and memoization
"""

from __future__ import annotations

import dataclasses
import random
import threading
import unittest

from fragment_grid.config import LAYOUT_RULES
from fragment_grid.layout import (
    Direction, FragmentSize, GridPosition, LayoutMemo, UnplacedReason,
    compute_layout, create_direction_map, make_decider, validate_layout,
    find_overlaps,
)
from tests.fragment_fixture import (
    SMALL_RULES, always_horizontal, make_board, make_fragment, make_mixed_board,
)


def layout(fragments, positions=None, hints=None, rules=LAYOUT_RULES):
    return compute_layout(
        fragments, positions or {}, hints or {},
        decide=always_horizontal, rules=rules,
    )


class TestNewFragments(unittest.TestCase):

    def test_first_fragment_at_one_one(self):
        result = layout([make_fragment("a")])
        self.assertEqual(result.positions, {"a": GridPosition(1, 1)})
        self.assertEqual(result.position_patch, {"a": GridPosition(1, 1)})

    def test_row_of_new_fragments(self):
        result = layout(make_board(6))
        cols = [result.positions[f"f{i}"].col for i in range(5)]
        self.assertEqual(cols, [1, 13, 25, 37, 49])
        self.assertTrue(all(result.positions[f"f{i}"].row == 1 for i in range(5)))
        # sixth card wraps below the first row band (5 rows + halo)
        self.assertEqual(result.positions["f5"], GridPosition(7, 1))
        self.assertEqual(set(result.position_patch), {f"f{i}" for i in range(6)})

    def test_new_fragments_fill_around_stored(self):
        frags = [make_fragment("old"), make_fragment("new")]
        result = layout(frags, {"old": GridPosition(1, 1)})
        self.assertEqual(result.positions["new"], GridPosition(1, 13))
        self.assertEqual(result.position_patch, {"new": GridPosition(1, 13)})

    def test_stored_fragments_claim_space_before_new_ones(self):
        # "new" comes first in input but stored fragments are placed first
        frags = [make_fragment("new"), make_fragment("old")]
        result = layout(frags, {"old": GridPosition(1, 1)})
        self.assertEqual(result.positions["old"], GridPosition(1, 1))
        self.assertEqual(result.positions["new"], GridPosition(1, 13))
        self.assertEqual([gf.id for gf in result.placed], ["old", "new"])


class TestStoredPositions(unittest.TestCase):

    def test_valid_position_kept_without_patch(self):
        result = layout([make_fragment("a")], {"a": GridPosition(10, 20)})
        self.assertEqual(result.positions["a"], GridPosition(10, 20))
        self.assertEqual(result.position_patch, {})
        self.assertEqual((result.repaired, result.clipped, result.relocated), ([], [], []))

    def test_origin_is_repaired(self):
        result = layout([make_fragment("a")], {"a": GridPosition(0, 0)})
        self.assertEqual(result.positions["a"], GridPosition(1, 1))
        self.assertEqual(result.position_patch, {"a": GridPosition(1, 1)})
        self.assertEqual(result.repaired, ["a"])

    def test_negative_position_is_repaired(self):
        result = layout([make_fragment("a")], {"a": GridPosition(-3, 5)})
        self.assertNotEqual(result.positions["a"], GridPosition(-3, 5))
        self.assertIn("a", result.position_patch)
        self.assertEqual(result.repaired, ["a"])

    def test_row_zero_is_not_problematic(self):
        result = layout([make_fragment("a")], {"a": GridPosition(0, 4)})
        self.assertEqual(result.positions["a"], GridPosition(0, 4))
        self.assertEqual(result.position_patch, {})

    def test_conflict_keeps_first_relocates_second(self):
        frags = [make_fragment("a"), make_fragment("b")]
        stored = {"a": GridPosition(3, 3), "b": GridPosition(3, 3)}
        result = layout(frags, stored)
        self.assertEqual(result.positions["a"], GridPosition(3, 3))
        self.assertNotIn("a", result.position_patch)
        # a covers cols 3..13 (+ halo 14) on rows 3..7 (+ halo 8)
        self.assertEqual(result.positions["b"], GridPosition(1, 15))
        self.assertEqual(result.position_patch, {"b": GridPosition(1, 15)})
        self.assertEqual(result.relocated, ["b"])

    def test_halo_conflict_is_resolved(self):
        # b starts exactly on a's right halo column
        frags = [make_fragment("a"), make_fragment("b")]
        stored = {"a": GridPosition(2, 1), "b": GridPosition(2, 12)}
        result = layout(frags, stored)
        self.assertEqual(result.relocated, ["b"])
        self.assertEqual(find_overlaps(result.placed), [])

    def test_overflow_is_clipped(self):
        # vertical empty card is 5 wide; container has 60 columns
        frag = make_fragment("v", direction=Direction.VERTICAL)
        result = layout([frag], {"v": GridPosition(4, 59)})
        pos = result.positions["v"]
        self.assertEqual(pos, GridPosition(4, 55))
        self.assertLessEqual(pos.col + 5, LAYOUT_RULES.container_cols)
        self.assertGreaterEqual(pos.col, 1)
        self.assertEqual(result.position_patch, {"v": pos})
        self.assertEqual(result.clipped, ["v"])

    def test_clip_floor_is_one(self):
        # container of 11 columns, card of 11: clipping lands on col 1, still
        # too wide, so the card falls back to the left edge
        rules = dataclasses.replace(LAYOUT_RULES, container_width=11 * 20)
        result = layout([make_fragment("a")], {"a": GridPosition(3, 8)}, rules=rules)
        self.assertEqual(result.clipped, ["a"])
        self.assertEqual(result.positions["a"], GridPosition(1, 0))
        self.assertEqual(validate_layout(result, rules), [])

    def test_stored_position_off_the_grid_is_relocated(self):
        result = layout([make_fragment("a")], {"a": GridPosition(500, 2)})
        self.assertEqual(result.positions["a"], GridPosition(1, 1))
        self.assertEqual(result.relocated, ["a"])

    def test_unknown_ids_in_stored_positions_ignored(self):
        result = layout([make_fragment("a")], {"ghost": GridPosition(1, 1)})
        self.assertEqual(result.positions, {"a": GridPosition(1, 1)})


class TestExhaustion(unittest.TestCase):

    def test_fifth_card_unplaceable(self):
        result = layout(make_board(5), rules=SMALL_RULES)
        self.assertEqual(
            result.positions,
            {
                "f0": GridPosition(1, 1), "f1": GridPosition(1, 13),
                "f2": GridPosition(7, 1), "f3": GridPosition(7, 13),
            },
        )
        self.assertFalse(result.ok)
        self.assertEqual(len(result.unplaced), 1)
        self.assertEqual(result.unplaced[0].id, "f4")
        self.assertEqual(result.unplaced[0].reason, UnplacedReason.NO_SPACE)
        self.assertNotIn("f4", result.position_patch)

    def test_exhaustion_does_not_move_placed(self):
        first = layout(make_board(4), rules=SMALL_RULES)
        frags = make_board(4) + [make_fragment("late")]
        second = layout(frags, first.positions, rules=SMALL_RULES)
        self.assertEqual(second.position_patch, {})
        self.assertEqual([u.id for u in second.unplaced], ["late"])

    def test_unresolved_conflict_reported(self):
        frags = make_board(4) + [make_fragment("dup")]
        stored = dict(layout(make_board(4), rules=SMALL_RULES).positions)
        stored["dup"] = stored["f0"]
        result = layout(frags, stored, rules=SMALL_RULES)
        self.assertEqual(result.unplaced[0].id, "dup")
        self.assertEqual(result.unplaced[0].reason, UnplacedReason.CONFLICT_UNRESOLVED)
        self.assertEqual(result.unplaced[0].stored_position, stored["f0"])

    def test_unresolved_problematic_reported(self):
        frags = make_board(4) + [make_fragment("bad")]
        stored = dict(layout(make_board(4), rules=SMALL_RULES).positions)
        stored["bad"] = GridPosition(0, 0)
        result = layout(frags, stored, rules=SMALL_RULES)
        self.assertEqual(result.unplaced[0].id, "bad")
        self.assertEqual(result.unplaced[0].reason, UnplacedReason.PROBLEMATIC_UNRESOLVED)

    def test_grid_smaller_than_card(self):
        rules = dataclasses.replace(LAYOUT_RULES, grid_rows=4, grid_cols=8)
        result = layout([make_fragment("a"), make_fragment("b")], {"b": GridPosition(1, 1)},
                        rules=rules)
        self.assertEqual(result.placed, [])
        self.assertEqual({u.id for u in result.unplaced}, {"a", "b"})


class TestInvariants(unittest.TestCase):
    """Properties that hold for every layout."""

    def _boards(self):
        mixed = make_mixed_board()
        many = make_board(40)
        yield mixed, {}
        yield many, {}
        yield mixed, {"short": GridPosition(0, 0), "long": GridPosition(2, 2),
                      "vert": GridPosition(2, 2), "noted": GridPosition(5, 58)}
        yield many, {f"f{i}": GridPosition(i, i) for i in range(0, 40, 3)}

    def test_layouts_are_valid(self):
        for frags, stored in self._boards():
            result = layout(frags, stored)
            with self.subTest(n=len(frags), stored=len(stored)):
                self.assertEqual(validate_layout(result), [])
                self.assertNotIn(GridPosition(0, 0), result.positions.values())

    def test_every_fragment_accounted_for(self):
        for frags, stored in self._boards():
            result = layout(frags, stored)
            ids = {gf.id for gf in result.placed} | {u.id for u in result.unplaced}
            self.assertEqual(ids, {f.id for f in frags})

    def test_changed_positions_are_patched(self):
        for frags, stored in self._boards():
            result = layout(frags, stored)
            for fid, pos in result.positions.items():
                if stored.get(fid) != pos:
                    self.assertEqual(result.position_patch[fid], pos)
                else:
                    self.assertNotIn(fid, result.position_patch)

    def test_rerun_is_fixed_point(self):
        for frags, stored in self._boards():
            first = layout(frags, stored)
            merged = {**stored, **first.positions}
            second = layout(frags, merged)
            self.assertEqual(second.position_patch, {})
            self.assertEqual(second.positions, first.positions)

    def test_deterministic(self):
        frags = make_mixed_board() + make_board(10)
        a = layout(frags, {"short": GridPosition(0, 0)})
        b = layout(frags, {"short": GridPosition(0, 0)})
        self.assertEqual(a.positions, b.positions)
        self.assertEqual(a.position_patch, b.position_patch)


class TestDirections(unittest.TestCase):

    def test_explicit_direction_wins(self):
        frag = make_fragment("a", direction=Direction.VERTICAL)
        result = layout([frag], hints={"a": Direction.HORIZONTAL})
        self.assertEqual(result.placed[0].direction, Direction.VERTICAL)
        self.assertEqual(result.placed[0].size, FragmentSize(5, 12))

    def test_hint_used_before_decider(self):
        frag = make_fragment("a", direction=None)
        result = layout([frag], hints={"a": Direction.VERTICAL})
        self.assertEqual(result.placed[0].direction, Direction.VERTICAL)

    def test_decider_used_last(self):
        frag = make_fragment("a", "縦書き", direction=None)
        result = compute_layout([frag], decide=lambda c, n=None: Direction.VERTICAL)
        self.assertEqual(result.placed[0].direction, Direction.VERTICAL)

    def test_seeded_decider_is_reproducible(self):
        frags = [make_fragment(f"c{i}", "縦書きの断片", direction=None) for i in range(8)]
        a = compute_layout(frags, decide=make_decider(rng=random.Random(11)))
        b = compute_layout(frags, decide=make_decider(rng=random.Random(11)))
        self.assertEqual([gf.direction for gf in a.placed], [gf.direction for gf in b.placed])

    def test_create_direction_map(self):
        frags = [
            make_fragment("x", "plain text", direction=None),
            make_fragment("y", "縦書き", direction=None),
            make_fragment("z", direction=Direction.VERTICAL),
        ]
        m = create_direction_map(frags, make_decider(randomize=False))
        self.assertEqual(m, {
            "x": Direction.HORIZONTAL,
            "y": Direction.VERTICAL,
            "z": Direction.VERTICAL,
        })


class TestLayoutMemo(unittest.TestCase):

    def setUp(self):
        self.memo = LayoutMemo(decide=always_horizontal)

    def test_identical_inputs_not_recomputed(self):
        frags = make_board(3)
        r1 = self.memo.compute(frags, {}, {})
        r2 = self.memo.compute(list(frags), {}, {})
        self.assertIs(r1, r2)
        self.assertEqual(self.memo.computations, 1)

    def test_any_input_change_recomputes(self):
        frags = make_board(3)
        self.memo.compute(frags, {}, {})
        self.memo.compute(frags + [make_fragment("new")], {}, {})
        self.memo.compute(frags, {"f0": GridPosition(20, 20)}, {})
        self.memo.compute(frags, {"f0": GridPosition(20, 20)}, {"f1": Direction.VERTICAL})
        self.assertEqual(self.memo.computations, 4)

    def test_recompute_starts_from_scratch(self):
        frags = make_board(2)
        first = self.memo.compute(frags)
        second = self.memo.compute(frags, {"f1": GridPosition(30, 30)})
        self.assertEqual(second.positions["f0"], first.positions["f0"])
        self.assertEqual(second.positions["f1"], GridPosition(30, 30))

    def test_clear(self):
        frags = make_board(1)
        self.memo.compute(frags)
        self.memo.clear()
        self.memo.compute(frags)
        self.assertEqual(self.memo.computations, 2)

    def test_shared_between_threads(self):
        boards = [make_board(n, prefix=f"t{n}_") for n in (1, 2, 3, 4)]
        mismatches = []

        def worker(board):
            want = {f.id for f in board}
            for _ in range(200):
                got = {g.id for g in self.memo.compute(board).placed}
                if got != want:
                    mismatches.append((want, got))

        threads = [threading.Thread(target=worker, args=(b,)) for b in boards]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(mismatches, [])
        for board in boards:
            placed = self.memo.compute(board).placed
            self.assertEqual({g.id for g in placed}, {f.id for f in board})


if __name__ == "__main__":
    unittest.main()
