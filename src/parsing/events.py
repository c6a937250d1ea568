from dataclasses import dataclass
from typing import List, Optional, Union

from src.core.sheet_music import TimeSignature


@dataclass(frozen=True)
class AttributesChange:
    """New divisions / time signature / key signature, applying from this point on."""
    divisions: Optional[float] = None
    time_signature: Optional[TimeSignature] = None
    fifths: Optional[int] = None


@dataclass(frozen=True)
class NoteEvent:
    step: str = 'C'
    alter: int = 0
    octave: int = 4
    is_rest: bool = False
    chord: bool = False
    staff: Optional[int] = None
    note_type: Optional[str] = None  # 'quarter', 'eighth', ...
    dots: int = 0
    duration: Optional[float] = None  # in divisions (ticks)
    tie_start: bool = False
    tie_end: bool = False


@dataclass(frozen=True)
class Backup:
    duration: float  # in divisions


@dataclass(frozen=True)
class Forward:
    duration: float  # in divisions


MeasureEvent = Union[AttributesChange, NoteEvent, Backup, Forward]
MeasureEvents = List[MeasureEvent]
