from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import music21


@dataclass(frozen=True)
class ChordNote:
    """A pitch sounding together with a primary note. It has no duration of its own."""
    step: str
    alter: int
    octave: int

    @property
    def name_with_octave(self) -> str:
        return pitch_name(self.step, self.alter, self.octave)


@dataclass
class NoteData:
    """Represents a single sounding slot of one hand: a note (plus chord notes) or a rest."""
    step: str
    alter: int
    octave: int
    duration: float  # in beats (quarter note = 1)
    is_rest: bool = False
    chord_notes: Tuple[ChordNote, ...] = ()
    tie_start: bool = False  # continues into the next measure
    tie_end: bool = False  # continues from the previous measure

    def __post_init__(self):
        # Rests carry no pitch meaning
        if self.is_rest:
            self.step = ''
            self.alter = 0
            self.chord_notes = ()
            self.tie_start = False
            self.tie_end = False
        else:
            self.chord_notes = tuple(self.chord_notes)

    @classmethod
    def rest(cls, duration: float) -> 'NoteData':
        return cls(step='', alter=0, octave=4, duration=duration, is_rest=True)

    @property
    def name_with_octave(self) -> Optional[str]:
        if self.is_rest:
            return None
        return pitch_name(self.step, self.alter, self.octave)

    @property
    def pitches(self) -> List[str]:
        """Primary pitch followed by the chord pitches, e.g. ['C4', 'E4', 'G4']."""
        if self.is_rest:
            return []
        return [self.name_with_octave] + [c.name_with_octave for c in self.chord_notes]

    def as_chord_note(self) -> ChordNote:
        return ChordNote(step=self.step, alter=self.alter, octave=self.octave)


@dataclass(frozen=True)
class TimedNote:
    """A note positioned in time, in beats from the start of its measure."""
    note: NoteData
    start_time: float
    staff: int = 1

    @property
    def duration(self) -> float:
        return self.note.duration

    @property
    def is_rest(self) -> bool:
        return self.note.is_rest


@dataclass
class MeasureData:
    number: int  # 1-indexed
    right_hand: List[NoteData] = field(default_factory=list)
    left_hand: List[NoteData] = field(default_factory=list)


@dataclass(frozen=True)
class TimeSignature:
    beats: int = 4
    beat_type: int = 4

    @property
    def beats_per_measure(self) -> float:
        """Nominal measure length in quarter-note beats."""
        if self.beat_type <= 0:
            return float(self.beats)
        return self.beats * 4 / self.beat_type


@dataclass(frozen=True)
class KeySignature:
    name: str  # e.g. 'G major'
    fifths: int  # -3 = three flats, 2 = two sharps
    scale: Tuple[str, ...]


@dataclass
class HandNotes:
    right_hand: List[NoteData] = field(default_factory=list)
    left_hand: List[NoteData] = field(default_factory=list)


@dataclass
class ParsedScore:
    """The whole piece, measure by measure, ready for rendering and playback."""
    measures: List[MeasureData] = field(default_factory=list)
    time_signature: TimeSignature = field(default_factory=TimeSignature)
    key_signature: Optional[KeySignature] = None
    title: Optional[str] = None

    @property
    def measure_count(self) -> int:
        return len(self.measures)


def pitch_name(step: str, alter: int, octave: int) -> str:
    alter = int(alter)
    accidental = '#' * alter if alter > 0 else '-' * -alter
    p = music21.pitch.Pitch(f"{step}{accidental}{octave}")
    # music21 spells flats with '-'
    return p.nameWithOctave.replace('-', 'b')
