from dataclasses import dataclass
from typing import Dict, List, Sequence

from src.core.sheet_music import NoteData


@dataclass(frozen=True)
class TimingEvent:
    time: float  # beats from the start of the segment
    duration: float  # beats until the next event


def _slot_key(time: float) -> float:
    # millibeat resolution
    return round(time, 3)


def build_timing_events(right_hand: Sequence[NoteData], left_hand: Sequence[NoteData]) -> List[TimingEvent]:
    """
    Merges both hands into one timeline. Where the hands start something at the
    same time, the shorter duration decides when the next event comes.
    """
    shortest: Dict[float, float] = {}
    for hand in (right_hand, left_hand):
        position = 0.0
        for note in hand:
            key = _slot_key(position)
            if key not in shortest or note.duration < shortest[key]:
                shortest[key] = note.duration
            position += note.duration

    times = sorted(shortest)
    events = []
    for i, time in enumerate(times):
        next_time = times[i + 1] if i + 1 < len(times) else time + shortest[time]
        events.append(TimingEvent(time=time, duration=next_time - time))
    return events


def get_total_duration(events: Sequence[TimingEvent]) -> float:
    if not events:
        return 0.0
    return events[-1].time + events[-1].duration


def beats_to_seconds(beats: float, bpm: float) -> float:
    return beats * 60 / bpm


def seconds_to_beats(seconds: float, bpm: float) -> float:
    return seconds * bpm / 60
