import logging
from dataclasses import dataclass
from typing import List

from src.core.sheet_music import NoteData, ParsedScore
from src.core.steps import (PracticeStep, StepType, generate_steps_with_ties, get_step_description,
                            get_step_type_label)
from src.core.ties import TieGroup, find_tie_groups
from src.parsing.musicxml_parser import get_measures

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Uploaded Piece"


@dataclass
class PracticeSegment:
    right_hand: List[NoteData]
    left_hand: List[NoteData]
    description: str
    step_type: StepType

    @property
    def label(self) -> str:
        return get_step_type_label(self.step_type)


@dataclass(frozen=True)
class PracticeProgress:
    current_step: int  # 1-based
    total_steps: int
    percent: int
    mastered_steps: int


class ProgressivePracticeSession:
    """Walks a student through the practice steps of one piece, tracking mastery."""

    def __init__(self, score: ParsedScore):
        self.score = score
        self.tie_groups: List[TieGroup] = find_tie_groups(score.measures)
        self.steps: List[PracticeStep] = generate_steps_with_ties(score.measure_count, self.tie_groups)
        self.current_step_index: int = 0
        logger.info("Practice session for %r: %d measures, %d steps, %d tie group(s)",
                    self.title, score.measure_count, len(self.steps), len(self.tie_groups))

    @property
    def title(self) -> str:
        return self.score.title or DEFAULT_TITLE

    @property
    def measure_count(self) -> int:
        return self.score.measure_count

    def get_current_step(self) -> PracticeStep | None:
        if not self.steps:
            return None
        return self.steps[self.current_step_index]

    def get_current_segment(self) -> PracticeSegment | None:
        step = self.get_current_step()
        if step is None:
            return None
        hands = get_measures(self.score, step.measures)
        return PracticeSegment(right_hand=hands.right_hand, left_hand=hands.left_hand,
                               description=get_step_description(step), step_type=step.type)

    def get_current_target_notes(self) -> set[str]:
        """Pitches of the first slot of the current segment, both hands."""
        segment = self.get_current_segment()
        if segment is None:
            return set()
        target_notes = set()
        for hand in (segment.right_hand, segment.left_hand):
            if hand:
                target_notes.update(hand[0].pitches)
        return target_notes

    def get_progress(self) -> PracticeProgress:
        mastered = sum(1 for step in self.steps if step.mastered)
        total = len(self.steps)
        percent = round(mastered / total * 100) if total else 0
        return PracticeProgress(current_step=self.current_step_index + 1, total_steps=total,
                                percent=percent, mastered_steps=mastered)

    def is_complete(self) -> bool:
        return bool(self.steps) and all(step.mastered for step in self.steps)

    def is_at_start(self) -> bool:
        return self.current_step_index == 0

    def is_at_end(self) -> bool:
        return self.current_step_index >= len(self.steps) - 1

    def mark_mastered(self):
        step = self.get_current_step()
        if step is None:
            return
        step.mastered = True
        logger.debug("Step %d mastered (%s)", self.current_step_index + 1, get_step_description(step))

    def next_step(self) -> bool:
        if self.is_at_end():
            return False
        self.current_step_index += 1
        return True

    def previous_step(self) -> bool:
        if self.is_at_start():
            return False
        self.current_step_index -= 1
        return True

    def go_to_step(self, index: int) -> bool:
        if 0 <= index < len(self.steps):
            self.current_step_index = index
            return True
        return False

    def reset(self):
        self.current_step_index = 0

    def clear_mastery(self):
        for step in self.steps:
            step.mastered = False
        self.current_step_index = 0
