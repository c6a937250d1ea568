import argparse
import logging
import sys

from src.core.practice_engine import ProgressivePracticeSession
from src.core.scheduler import build_timing_events, get_total_duration
from src.core.steps import generate_steps, get_step_description, get_step_type_label
from src.parsing.musicxml_parser import MusicXMLParser, get_measure_range

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _init_logging(verbose: bool):
    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Print the practice plan for a MusicXML piece.")
    ap.add_argument('path', help="uncompressed MusicXML file (.xml / .musicxml)")
    ap.add_argument('--no-ties', action='store_true', help="ignore ties when chunking measures")
    ap.add_argument('-v', '--verbose', action='store_true')
    args = ap.parse_args(argv)
    _init_logging(args.verbose)

    score = MusicXMLParser().parse(args.path)
    if not score.measures:
        logging.error("No measures found in %s", args.path)
        return 1

    session = ProgressivePracticeSession(score)
    steps = generate_steps(score.measure_count) if args.no_ties else session.steps

    print(f"{session.title} - {score.measure_count} measures, "
          f"{score.time_signature.beats}/{score.time_signature.beat_type}, {score.key_signature.name}")
    hands = get_measure_range(score, 1, score.measure_count)
    total = get_total_duration(build_timing_events(hands.right_hand, hands.left_hand))
    print(f"  total: {total:g} beats")
    for group in session.tie_groups:
        print(f"  tied: measures {group.start}-{group.end}")
    for number, step in enumerate(steps, start=1):
        print(f"{number:3d}. {get_step_type_label(step.type):<14} {get_step_description(step)}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
