import logging
from typing import Optional

import music21

from src.core.config import DEFAULT_TIMELINE

logger = logging.getLogger(__name__)


def divisions_to_beats(duration: float, divisions: Optional[float]) -> float:
    """Converts a tick count into beats, given the ticks-per-quarter value."""
    if not divisions or divisions <= 0:
        logger.debug("Invalid divisions %r, using %s", divisions, DEFAULT_TIMELINE.default_divisions)
        divisions = DEFAULT_TIMELINE.default_divisions
    return duration / divisions


def apply_dots(base_duration: float, dots: int) -> float:
    """Each dot adds half of the value added before it."""
    total = base_duration
    dot_value = base_duration / 2
    for _ in range(max(0, dots)):
        total += dot_value
        dot_value /= 2
    return total


def note_type_to_beats(note_type: str, dots: int = 0) -> float:
    """
    Converts a named duration ('quarter', 'eighth', '16th', ...) into beats.
    Unknown names fall back to a quarter note.
    """
    try:
        base = float(music21.duration.Duration(type=note_type).quarterLength)
    except (music21.duration.DurationException, TypeError, ValueError):
        logger.debug("Unknown note type %r, defaulting to one beat", note_type)
        base = DEFAULT_TIMELINE.default_duration
    if base <= 0:
        # 'zero' is a valid music21 type but never a sounding note
        base = DEFAULT_TIMELINE.default_duration
    return apply_dots(base, dots)


def resolve_note_duration(note_type: Optional[str], dots: int,
                          duration: Optional[float], divisions: Optional[float]) -> float:
    """Duration of a note event: the named type wins, then explicit ticks, then one beat."""
    if note_type:
        return note_type_to_beats(note_type, dots)
    if duration is not None:
        return divisions_to_beats(duration, divisions)
    logger.debug("Note without type or duration, defaulting to one beat")
    return DEFAULT_TIMELINE.default_duration
