"""
Rebuilds the time position of every note in a measure from a cursor-based
event stream, then collapses simultaneous notes into one slot per onset.

The cursor walk is a fold: every step takes a CursorState and returns a new
one, so a measure can be replayed from any state without side effects.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from src.core.config import DEFAULT_TIMELINE, TimelineConfig
from src.core.durations import divisions_to_beats, resolve_note_duration
from src.core.key_signatures import C_MAJOR, key_signature_for_fifths
from src.core.sheet_music import KeySignature, MeasureData, NoteData, TimedNote, TimeSignature
from src.parsing.events import AttributesChange, Backup, Forward, MeasureEvent, NoteEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CursorState:
    cursor: float = 0.0
    divisions: float = DEFAULT_TIMELINE.default_divisions
    time_signature: TimeSignature = field(default_factory=TimeSignature)
    key_signature: KeySignature = C_MAJOR
    # staff -> onset of the last non-chord note written on it
    last_onsets: Dict[int, float] = field(default_factory=dict)


def _apply_attributes(state: CursorState, event: AttributesChange) -> CursorState:
    changes = {}
    if event.divisions is not None and event.divisions > 0:
        changes['divisions'] = event.divisions
    if event.time_signature is not None:
        changes['time_signature'] = event.time_signature
    if event.fifths is not None:
        changes['key_signature'] = key_signature_for_fifths(event.fifths)
    return replace(state, **changes)


def _place_note(state: CursorState, event: NoteEvent,
                config: TimelineConfig) -> Tuple[CursorState, TimedNote]:
    staff = event.staff if event.staff is not None else config.default_staff
    duration = resolve_note_duration(event.note_type, event.dots, event.duration, state.divisions)

    if event.is_rest:
        note = NoteData.rest(duration)
    else:
        note = NoteData(step=event.step.upper(), alter=int(event.alter), octave=int(event.octave),
                        duration=duration, tie_start=event.tie_start, tie_end=event.tie_end)

    if event.chord:
        # Chord notes sound with the note before them and never move the cursor
        start = state.last_onsets.get(staff)
        if start is None:
            start = max(0.0, state.cursor - duration)
        return state, TimedNote(note=note, start_time=start, staff=staff)

    onsets = dict(state.last_onsets)
    onsets[staff] = state.cursor
    timed = TimedNote(note=note, start_time=state.cursor, staff=staff)
    return replace(state, cursor=state.cursor + duration, last_onsets=onsets), timed


def advance(state: CursorState, event: MeasureEvent,
            config: TimelineConfig = DEFAULT_TIMELINE) -> Tuple[CursorState, Optional[TimedNote]]:
    """Applies one event to the cursor state. Returns the new state and the note it placed, if any."""
    if isinstance(event, AttributesChange):
        return _apply_attributes(state, event), None
    if isinstance(event, Backup):
        cursor = state.cursor - divisions_to_beats(event.duration, state.divisions)
        if cursor < 0:
            logger.debug("Backup past measure start (%.3f beats), clamping to 0", cursor)
            cursor = 0.0
        return replace(state, cursor=cursor), None
    if isinstance(event, Forward):
        return replace(state, cursor=state.cursor + divisions_to_beats(event.duration, state.divisions)), None
    if isinstance(event, NoteEvent):
        return _place_note(state, event, config)
    logger.debug("Ignoring unknown event %r", event)
    return state, None


def reconstruct_measure(events: Sequence[MeasureEvent], state: Optional[CursorState] = None,
                        config: TimelineConfig = DEFAULT_TIMELINE
                        ) -> Tuple[CursorState, List[TimedNote], List[TimedNote]]:
    """
    Walks one measure's events and returns (state, right_hand, left_hand).
    The cursor restarts at 0; divisions, time and key carry over from `state`.
    Notes are returned in emission order, not sorted by time.
    """
    state = replace(state or CursorState(), cursor=0.0, last_onsets={})
    right_hand: List[TimedNote] = []
    left_hand: List[TimedNote] = []
    for event in events:
        state, timed = advance(state, event, config)
        if timed is None:
            continue
        if timed.staff >= 2:
            left_hand.append(timed)
        else:
            right_hand.append(timed)
    return state, right_hand, left_hand


def _merge_slot(slot: List[TimedNote]) -> NoteData:
    # The shortest concurrent voice decides when the next slot begins
    slot_duration = min(t.duration for t in slot)
    sounding = [t.note for t in slot if not t.is_rest]
    if not sounding:
        return NoteData.rest(slot_duration)

    primary = sounding[0]
    chord_notes = list(primary.chord_notes)
    for other in sounding[1:]:
        chord_notes.append(other.as_chord_note())
        chord_notes.extend(other.chord_notes)
    return NoteData(step=primary.step, alter=primary.alter, octave=primary.octave,
                    duration=slot_duration, chord_notes=tuple(chord_notes),
                    tie_start=primary.tie_start, tie_end=primary.tie_end)


def flatten_timed_notes(timed_notes: Sequence[TimedNote],
                        tolerance: float = DEFAULT_TIMELINE.slot_tolerance) -> List[NoteData]:
    """Groups notes by onset and returns one NoteData per slot, in time order."""
    if not timed_notes:
        return []

    slots: List[List[TimedNote]] = []
    for timed in sorted(timed_notes, key=lambda t: t.start_time):
        if slots and timed.start_time - slots[-1][0].start_time < tolerance:
            slots[-1].append(timed)
        else:
            slots.append([timed])
    return [_merge_slot(slot) for slot in slots]


def sequence_to_timed(notes: Sequence[NoteData], staff: int = 1) -> List[TimedNote]:
    """Places an already flat sequence back on the time axis, one note after another."""
    timed = []
    position = 0.0
    for note in notes:
        timed.append(TimedNote(note=note, start_time=position, staff=staff))
        position += note.duration
    return timed


def build_measure(number: int, right_hand: Sequence[TimedNote], left_hand: Sequence[TimedNote],
                  config: TimelineConfig = DEFAULT_TIMELINE) -> MeasureData:
    return MeasureData(number=number,
                       right_hand=flatten_timed_notes(right_hand, config.slot_tolerance),
                       left_hand=flatten_timed_notes(left_hand, config.slot_tolerance))


def sequence_duration(notes: Sequence[NoteData]) -> float:
    return sum(note.duration for note in notes)


def measure_is_consistent(measure: MeasureData, time_signature: TimeSignature,
                          tolerance: float = DEFAULT_TIMELINE.slot_tolerance) -> bool:
    """True when both hands add up to the nominal measure length (hands without notes are skipped)."""
    expected = time_signature.beats_per_measure
    for hand in (measure.right_hand, measure.left_hand):
        if hand and abs(sequence_duration(hand) - expected) >= tolerance:
            return False
    return True
