"""
Progressive practice curriculum.

For each measure i: the measure alone, i with i+1, then at every phrase
boundary the last 4 measures and at every section boundary the last 8.
Pieces longer than one phrase end with the whole piece.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Set, Tuple

from src.core.config import DEFAULT_PRACTICE, PracticeConfig
from src.core.ties import TieGroup, expand_range_for_ties


class StepType(str, Enum):
    SINGLE = 'single'
    PAIR = 'pair'
    CONSOLIDATE = 'consolidate'


STEP_TYPE_LABELS = {
    StepType.SINGLE: 'Learning',
    StepType.PAIR: 'Connecting',
    StepType.CONSOLIDATE: 'Consolidating',
}


@dataclass
class PracticeStep:
    measures: List[int]  # 1-indexed, ascending
    type: StepType
    mastered: bool = field(default=False)

    @property
    def first_measure(self) -> int:
        return self.measures[0]

    @property
    def last_measure(self) -> int:
        return self.measures[-1]


def _candidate_ranges(measure_count: int, config: PracticeConfig) -> List[Tuple[int, int, StepType]]:
    candidates = []
    for i in range(1, measure_count + 1):
        candidates.append((i, i, StepType.SINGLE))
        if i < measure_count:
            candidates.append((i, i + 1, StepType.PAIR))
        if i % config.phrase_length == 0:
            candidates.append((i - config.phrase_length + 1, i, StepType.CONSOLIDATE))
        if i % config.section_length == 0:
            candidates.append((i - config.section_length + 1, i, StepType.CONSOLIDATE))
    if measure_count > config.full_piece_threshold:
        candidates.append((1, measure_count, StepType.CONSOLIDATE))
    return candidates


def _build(measure_count: int, config: PracticeConfig,
           expand: Optional[Callable[[int, int], Tuple[int, int]]] = None) -> List[PracticeStep]:
    steps: List[PracticeStep] = []
    seen: Set[Tuple[int, int]] = set()
    for start, end, step_type in _candidate_ranges(measure_count, config):
        if expand is not None:
            start, end = expand(start, end)
            if (start, end) in seen:
                continue
            seen.add((start, end))
        steps.append(PracticeStep(measures=list(range(start, end + 1)), type=step_type))
    return steps


def generate_steps(measure_count: int, config: PracticeConfig = DEFAULT_PRACTICE) -> List[PracticeStep]:
    """The practice sequence for a piece of `measure_count` measures."""
    return _build(measure_count, config)


def generate_steps_with_ties(measure_count: int, tie_groups: Sequence[TieGroup],
                             config: PracticeConfig = DEFAULT_PRACTICE) -> List[PracticeStep]:
    """
    Same sequence as generate_steps, but every range is widened to whole tie
    groups and a range already emitted is not emitted again.
    Without tie groups the result is exactly generate_steps.
    """
    if not tie_groups:
        return generate_steps(measure_count, config)
    return _build(measure_count, config,
                  expand=lambda start, end: expand_range_for_ties(start, end, tie_groups))


def get_step_description(step: PracticeStep) -> str:
    if len(step.measures) == 1:
        return f"Measure {step.first_measure}"
    return f"Measures {step.first_measure}-{step.last_measure}"


def get_step_type_label(step_type: StepType) -> str:
    return STEP_TYPE_LABELS[StepType(step_type)]
