import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from src.core.sheet_music import MeasureData, NoteData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TieGroup:
    """Consecutive measures joined by ties. They are always practiced together."""
    start: int
    end: int

    def overlaps(self, start: int, end: int) -> bool:
        return not (end < self.start or start > self.end)

    def merge(self, start: int, end: int) -> Tuple[int, int]:
        return min(start, self.start), max(end, self.end)


def _ends_with_tie(notes: Sequence[NoteData]) -> bool:
    return bool(notes) and notes[-1].tie_start


def _starts_with_tie(notes: Sequence[NoteData]) -> bool:
    return bool(notes) and notes[0].tie_end


def find_tie_groups(measures: Sequence[MeasureData]) -> List[TieGroup]:
    """
    Finds runs of measures linked by ties across barlines.
    Only runs spanning more than one measure are returned, ordered by start.
    """
    groups: List[TieGroup] = []
    open_start: Optional[int] = None

    for index, measure in enumerate(measures):
        number = index + 1
        ends_with_tie = _ends_with_tie(measure.right_hand) or _ends_with_tie(measure.left_hand)
        starts_with_tie = _starts_with_tie(measure.right_hand) or _starts_with_tie(measure.left_hand)

        if starts_with_tie and open_start is None:
            # Tied from a measure we never saw tie forward; assume the one just before
            open_start = max(1, number - 1)

        if open_start is not None and not ends_with_tie:
            if number > open_start:
                groups.append(TieGroup(start=open_start, end=number))
            open_start = None
        elif ends_with_tie and open_start is None:
            open_start = number

    if open_start is not None and len(measures) > open_start:
        groups.append(TieGroup(start=open_start, end=len(measures)))

    logger.debug("Found %d tie group(s) in %d measures", len(groups), len(measures))
    return groups


def expand_range_for_ties(start: int, end: int, tie_groups: Sequence[TieGroup]) -> Tuple[int, int]:
    """Widens start..end until no tie group is only partly inside it."""
    changed = True
    while changed:
        changed = False
        for group in tie_groups:
            if group.overlaps(start, end):
                merged = group.merge(start, end)
                if merged != (start, end):
                    start, end = merged
                    changed = True
    return start, end
