from __future__ import annotations

import unittest

from src.core.steps import (PracticeStep, StepType, generate_steps, generate_steps_with_ties,
                            get_step_description, get_step_type_label)
from src.core.ties import TieGroup


def _ranges(steps):
    return [step.measures for step in steps]


class GenerateStepsTests(unittest.TestCase):
    def test_four_measures(self) -> None:
        steps = generate_steps(4)
        self.assertEqual(_ranges(steps), [[1], [1, 2], [2], [2, 3], [3], [3, 4], [4], [1, 2, 3, 4]])
        self.assertEqual([s.type for s in steps], [
            StepType.SINGLE, StepType.PAIR, StepType.SINGLE, StepType.PAIR,
            StepType.SINGLE, StepType.PAIR, StepType.SINGLE, StepType.CONSOLIDATE,
        ])
        self.assertTrue(all(s.mastered is False for s in steps))

    def test_sixteen_measures_consolidations(self) -> None:
        consolidations = [s.measures for s in generate_steps(16) if s.type == StepType.CONSOLIDATE]
        by_length = {}
        for measures in consolidations:
            by_length.setdefault(len(measures), []).append(measures)
        self.assertEqual(len(by_length[4]), 4)
        self.assertEqual(len(by_length[8]), 2)
        self.assertEqual(by_length[16], [list(range(1, 17))])
        self.assertEqual(set(by_length), {4, 8, 16})

    def test_full_piece_only_above_four_measures(self) -> None:
        self.assertEqual(generate_steps(5)[-1].measures, [1, 2, 3, 4, 5])
        self.assertEqual(generate_steps(3)[-1].measures, [3])

    def test_single_measure(self) -> None:
        self.assertEqual(_ranges(generate_steps(1)), [[1]])

    def test_non_positive_count(self) -> None:
        self.assertEqual(generate_steps(0), [])
        self.assertEqual(generate_steps(-3), [])
        self.assertEqual(generate_steps_with_ties(0, [TieGroup(1, 2)]), [])

    def test_measures_ascending_and_distinct(self) -> None:
        for step in generate_steps(12):
            self.assertEqual(step.measures, sorted(set(step.measures)))


class GenerateStepsWithTiesTests(unittest.TestCase):
    def test_tied_pair_emitted_once(self) -> None:
        steps = generate_steps_with_ties(4, [TieGroup(1, 2)])
        self.assertEqual(_ranges(steps).count([1, 2]), 1)
        self.assertNotIn([1], _ranges(steps))
        self.assertNotIn([2], _ranges(steps))

    def test_tied_pair_ranges(self) -> None:
        steps = generate_steps_with_ties(4, [TieGroup(1, 2)])
        self.assertEqual(_ranges(steps), [[1, 2], [1, 2, 3], [3], [3, 4], [4], [1, 2, 3, 4]])
        self.assertEqual(steps[0].type, StepType.SINGLE)

    def test_empty_groups_match_plain_mode(self) -> None:
        self.assertEqual(generate_steps_with_ties(8, []), generate_steps(8))

    def test_no_step_splits_a_tie_group(self) -> None:
        groups = [TieGroup(2, 3), TieGroup(5, 8), TieGroup(12, 13)]
        for step in generate_steps_with_ties(16, groups):
            first, last = step.measures[0], step.measures[-1]
            for group in groups:
                disjoint = last < group.start or first > group.end
                contains = first <= group.start and last >= group.end
                self.assertTrue(disjoint or contains, (step.measures, group))

    def test_no_duplicate_ranges(self) -> None:
        steps = generate_steps_with_ties(8, [TieGroup(4, 5)])
        keys = [(s.measures[0], s.measures[-1]) for s in steps]
        self.assertEqual(len(keys), len(set(keys)))


class StepTextTests(unittest.TestCase):
    def test_descriptions(self) -> None:
        self.assertEqual(get_step_description(PracticeStep([3], StepType.SINGLE)), "Measure 3")
        self.assertEqual(get_step_description(PracticeStep([3, 4], StepType.PAIR)), "Measures 3-4")
        self.assertEqual(get_step_description(PracticeStep([1, 2, 3, 4], StepType.CONSOLIDATE)), "Measures 1-4")

    def test_labels(self) -> None:
        self.assertEqual(get_step_type_label(StepType.SINGLE), "Learning")
        self.assertEqual(get_step_type_label("pair"), "Connecting")
        self.assertEqual(get_step_type_label(StepType.CONSOLIDATE), "Consolidating")


if __name__ == "__main__":
    unittest.main()
