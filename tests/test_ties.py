from __future__ import annotations

import unittest

from src.core.sheet_music import MeasureData, NoteData
from src.core.ties import TieGroup, expand_range_for_ties, find_tie_groups


def _measure(number: int, tie_end: bool = False, tie_start: bool = False, hand: str = "right") -> MeasureData:
    notes = [NoteData("C", 0, 4, 2.0, tie_end=tie_end), NoteData("D", 0, 4, 2.0, tie_start=tie_start)]
    plain = [NoteData("C", 0, 3, 4.0)]
    if hand == "right":
        return MeasureData(number=number, right_hand=notes, left_hand=plain)
    return MeasureData(number=number, right_hand=plain, left_hand=notes)


class FindTieGroupsTests(unittest.TestCase):
    def test_no_measures(self) -> None:
        self.assertEqual(find_tie_groups([]), [])

    def test_no_ties(self) -> None:
        self.assertEqual(find_tie_groups([_measure(1), _measure(2)]), [])

    def test_tie_across_one_barline(self) -> None:
        measures = [_measure(1, tie_start=True), _measure(2, tie_end=True), _measure(3)]
        self.assertEqual(find_tie_groups(measures), [TieGroup(1, 2)])

    def test_chained_ties_form_one_group(self) -> None:
        measures = [
            _measure(1, tie_start=True),
            _measure(2, tie_end=True, tie_start=True),
            _measure(3, tie_end=True),
            _measure(4),
        ]
        self.assertEqual(find_tie_groups(measures), [TieGroup(1, 3)])

    def test_left_hand_ties_count(self) -> None:
        measures = [_measure(1), _measure(2, tie_start=True, hand="left"), _measure(3, tie_end=True, hand="left")]
        self.assertEqual(find_tie_groups(measures), [TieGroup(2, 3)])

    def test_tie_end_without_start_opens_at_previous_measure(self) -> None:
        measures = [_measure(1), _measure(2), _measure(3, tie_end=True), _measure(4)]
        self.assertEqual(find_tie_groups(measures), [TieGroup(2, 3)])

    def test_tie_end_in_first_measure_is_not_a_group(self) -> None:
        self.assertEqual(find_tie_groups([_measure(1, tie_end=True), _measure(2)]), [])

    def test_unclosed_group_runs_to_last_measure(self) -> None:
        measures = [_measure(1), _measure(2, tie_start=True), _measure(3, tie_end=True, tie_start=True)]
        self.assertEqual(find_tie_groups(measures), [TieGroup(2, 3)])

    def test_tie_out_of_last_measure_is_ignored(self) -> None:
        self.assertEqual(find_tie_groups([_measure(1), _measure(2, tie_start=True)]), [])

    def test_several_groups_are_ordered(self) -> None:
        measures = [
            _measure(1, tie_start=True), _measure(2, tie_end=True),
            _measure(3), _measure(4, tie_start=True), _measure(5, tie_end=True),
        ]
        self.assertEqual(find_tie_groups(measures), [TieGroup(1, 2), TieGroup(4, 5)])


class ExpandRangeTests(unittest.TestCase):
    def test_untouched_range(self) -> None:
        self.assertEqual(expand_range_for_ties(1, 1, [TieGroup(2, 3)]), (1, 1))

    def test_partial_overlap_is_widened(self) -> None:
        self.assertEqual(expand_range_for_ties(3, 4, [TieGroup(2, 3)]), (2, 4))

    def test_range_touching_two_groups(self) -> None:
        self.assertEqual(expand_range_for_ties(3, 4, [TieGroup(2, 3), TieGroup(4, 6)]), (2, 6))

    def test_widening_is_transitive(self) -> None:
        groups = [TieGroup(3, 5), TieGroup(1, 3)]
        self.assertEqual(expand_range_for_ties(1, 1, groups), (1, 5))

    def test_no_groups(self) -> None:
        self.assertEqual(expand_range_for_ties(2, 3, []), (2, 3))


if __name__ == "__main__":
    unittest.main()
