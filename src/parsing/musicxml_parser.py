import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union
from xml.etree import ElementTree

from src.core.config import DEFAULT_TIMELINE, TimelineConfig
from src.core.sheet_music import HandNotes, MeasureData, ParsedScore, TimeSignature
from src.parsing.events import AttributesChange, Backup, Forward, MeasureEvents, NoteEvent
from src.parsing.timeline import CursorState, build_measure, reconstruct_measure

logger = logging.getLogger(__name__)


class MusicXMLParseError(ValueError):
    """Raised when a document is not readable as XML at all."""


def _local(tag: str) -> str:
    # Strip a '{namespace}' prefix if the document declares one
    return tag.rsplit('}', 1)[-1]


def _child(parent: ElementTree.Element, name: str) -> Optional[ElementTree.Element]:
    for element in parent:
        if _local(element.tag) == name:
            return element
    return None


def _children(parent: ElementTree.Element, name: str) -> List[ElementTree.Element]:
    return [element for element in parent if _local(element.tag) == name]


def _text(parent: ElementTree.Element, name: str) -> Optional[str]:
    element = _child(parent, name)
    if element is None or element.text is None:
        return None
    return element.text.strip() or None


def _number(parent: ElementTree.Element, name: str) -> Optional[float]:
    text = _text(parent, name)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        logger.debug("Non-numeric <%s> value %r ignored", name, text)
        return None


def _decode_attributes(element: ElementTree.Element) -> AttributesChange:
    time_signature = None
    time_el = _child(element, 'time')
    if time_el is not None:
        beats = _number(time_el, 'beats')
        beat_type = _number(time_el, 'beat-type')
        if beats is not None and beat_type is not None:
            time_signature = TimeSignature(beats=int(beats), beat_type=int(beat_type))

    fifths = None
    key_el = _child(element, 'key')
    if key_el is not None:
        value = _number(key_el, 'fifths')
        fifths = int(value) if value is not None else None

    return AttributesChange(divisions=_number(element, 'divisions'),
                            time_signature=time_signature, fifths=fifths)


def _tie_flags(element: ElementTree.Element):
    tie_types = [tie.get('type') for tie in _children(element, 'tie')]
    notations = _child(element, 'notations')
    if notations is not None:
        tie_types.extend(tied.get('type') for tied in _children(notations, 'tied'))
    return 'start' in tie_types, 'stop' in tie_types


STEPS = frozenset('ABCDEFG')


def _step(parent: ElementTree.Element, name: str) -> str:
    text = (_text(parent, name) or 'C').upper()
    if text not in STEPS:
        logger.debug("Invalid <%s> value %r, using C", name, text)
        return 'C'
    return text


def _octave(parent: ElementTree.Element, name: str) -> int:
    value = _number(parent, name)
    return int(value) if value is not None else 4


def _decode_note(element: ElementTree.Element) -> NoteEvent:
    staff = _number(element, 'staff')
    tie_start, tie_end = _tie_flags(element)
    common = dict(
        chord=_child(element, 'chord') is not None,
        staff=int(staff) if staff is not None else None,
        note_type=_text(element, 'type'),
        dots=len(_children(element, 'dot')),
        duration=_number(element, 'duration'),
    )

    pitch_el = _child(element, 'pitch')
    if pitch_el is not None and _child(element, 'rest') is None:
        return NoteEvent(step=_step(pitch_el, 'step'),
                         alter=int(_number(pitch_el, 'alter') or 0),
                         octave=_octave(pitch_el, 'octave'),
                         tie_start=tie_start, tie_end=tie_end, **common)

    unpitched = _child(element, 'unpitched')
    if unpitched is not None:
        return NoteEvent(step=_step(unpitched, 'display-step'),
                         octave=_octave(unpitched, 'display-octave'),
                         tie_start=tie_start, tie_end=tie_end, **common)

    return NoteEvent(is_rest=True, **common)


def decode_measure_events(measure: ElementTree.Element) -> MeasureEvents:
    """Decodes one <measure> element into the ordered event list the timeline walks."""
    events: MeasureEvents = []
    for child in measure:
        tag = _local(child.tag)
        if tag == 'attributes':
            events.append(_decode_attributes(child))
        elif tag in ('backup', 'forward'):
            duration = _number(child, 'duration')
            if duration is None:
                logger.debug("<%s> without duration ignored", tag)
                continue
            events.append(Backup(duration) if tag == 'backup' else Forward(duration))
        elif tag == 'note':
            if _child(child, 'grace') is not None:
                logger.debug("Grace note skipped, it takes no time in the measure")
                continue
            events.append(_decode_note(child))
    return events


def reconstruct_score(parts: Iterable[Sequence[MeasureEvents]], title: Optional[str] = None,
                      config: TimelineConfig = DEFAULT_TIMELINE) -> ParsedScore:
    """
    Builds the flat per-hand score from decoded events, one list of measures per part.
    Parts are merged by measure index; divisions, time and key carry across parts.
    """
    measures: List[MeasureData] = []
    state = CursorState()
    for part in parts:
        for index, events in enumerate(part):
            state, right_hand, left_hand = reconstruct_measure(events, state, config)
            measure = build_measure(index + 1, right_hand, left_hand, config)
            if index < len(measures):
                measures[index].right_hand.extend(measure.right_hand)
                measures[index].left_hand.extend(measure.left_hand)
            else:
                measures.append(measure)

    return ParsedScore(measures=measures, time_signature=state.time_signature,
                       key_signature=state.key_signature, title=title)


def _title(root: ElementTree.Element) -> Optional[str]:
    work = _child(root, 'work')
    if work is not None:
        work_title = _text(work, 'work-title')
        if work_title:
            return work_title
    return _text(root, 'movement-title')


def parse_musicxml_string(document: Union[str, bytes],
                          config: TimelineConfig = DEFAULT_TIMELINE) -> ParsedScore:
    """Parses a partwise MusicXML document. Only non-XML input raises."""
    try:
        root = ElementTree.fromstring(document)
    except ElementTree.ParseError as exc:
        raise MusicXMLParseError(f"XML parse error: {exc}") from exc

    if _local(root.tag) != 'score-partwise':
        logger.warning("Unsupported MusicXML root <%s>, expected <score-partwise>", _local(root.tag))
        return ParsedScore()

    parts = [[decode_measure_events(measure) for measure in _children(part, 'measure')]
             for part in _children(root, 'part')]
    score = reconstruct_score(parts, title=_title(root), config=config)
    logger.info("Parsed %d measures from %d part(s), %s/%s in %s",
                score.measure_count, len(parts), score.time_signature.beats,
                score.time_signature.beat_type, score.key_signature.name)
    return score


class MusicXMLParser:
    """
    Loads an uncompressed MusicXML file (.xml / .musicxml) into a ParsedScore.
    Unreadable files give an empty score so the caller still has something to show.
    """

    def __init__(self, config: TimelineConfig = DEFAULT_TIMELINE):
        self.config = config

    def parse(self, file_path: Union[str, Path]) -> ParsedScore:
        try:
            document = Path(file_path).read_bytes()
            return parse_musicxml_string(document, self.config)
        except (OSError, MusicXMLParseError) as e:
            logger.error("Error parsing file %s: %s", file_path, e)
            return ParsedScore()


def get_measure_range(score: ParsedScore, start_measure: int, end_measure: int) -> HandNotes:
    """Notes of measures start..end (1-indexed, inclusive), concatenated in order."""
    hands = HandNotes()
    for measure in score.measures:
        if start_measure <= measure.number <= end_measure:
            hands.right_hand.extend(measure.right_hand)
            hands.left_hand.extend(measure.left_hand)
    return hands


def get_measures(score: ParsedScore, measure_numbers: Iterable[int]) -> HandNotes:
    """Notes of the given measure numbers, concatenated in ascending measure order."""
    wanted = set(measure_numbers)
    hands = HandNotes()
    for measure in score.measures:
        if measure.number in wanted:
            hands.right_hand.extend(measure.right_hand)
            hands.left_hand.extend(measure.left_hand)
    return hands
