from dataclasses import dataclass


@dataclass(frozen=True)
class TimelineConfig:
    slot_tolerance: float = 0.001  # beats; onsets closer than this share a slot
    default_divisions: int = 1
    default_duration: float = 1.0  # quarter note
    default_staff: int = 1


@dataclass(frozen=True)
class PracticeConfig:
    phrase_length: int = 4
    section_length: int = 8
    full_piece_threshold: int = 4  # full-piece step only when measure count exceeds this


DEFAULT_TIMELINE = TimelineConfig()
DEFAULT_PRACTICE = PracticeConfig()
