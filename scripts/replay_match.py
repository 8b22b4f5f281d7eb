#!/usr/bin/env python3
"""
Replay a stored match and print its scorecard.

Reads a MatchRecord JSON file, rebuilds the match ball by ball (rejecting
any delivery that breaks the laws), and prints the result and cards.

Usage:
    python scripts/replay_match.py data/match.json
    python scripts/replay_match.py data/match.json --innings 2
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from scorebook.config import settings
from scorebook.engine.scorer import MatchScorer
from scorebook.errors import ScoringError
from scorebook.models import MatchRecord
from scorebook.scorecard import match_summary

logger = logging.getLogger(__name__)


def print_innings(card: dict) -> None:
    print(f"\n{card['batting_team']}: {card['total_runs']}/{card['wickets']} ({card['overs']} ov)")
    for b in card["batters"]:
        print(f"  {b['name']:<20} {b['dismissal']:<30} {b['runs']:>4} ({b['balls']})")
    extras = card["extras"]
    print(
        f"  Extras {extras['total']} (w {extras['wides']}, nb {extras['no_balls']}, "
        f"b {extras['byes']}, lb {extras['leg_byes']})"
    )
    if card["fall_of_wickets"]:
        print("  FoW: " + ", ".join(card["fall_of_wickets"]))
    for b in card["bowlers"]:
        print(f"  {b['name']:<20} {b['overs']:>5}-{b['maidens']}-{b['runs']}-{b['wickets']}  econ {b['economy']}")


def main(path: Path, innings: int | None = None) -> int:
    record = MatchRecord.model_validate_json(path.read_text(encoding="utf-8"))
    try:
        scorer = MatchScorer.from_record(record)
    except ScoringError as e:
        logger.error(f"Could not replay {path}: {e.message}")
        return 1

    summary = match_summary(scorer.get_snapshot())
    print(f"{summary['teams'][0]} v {summary['teams'][1]} ({summary['format']}, {summary['total_overs']} overs)")
    print(summary["toss"])
    for card in summary["innings"]:
        if innings is None or card["innings"] == innings:
            print_innings(card)
    print()
    print(summary["result"] or f"In progress: {summary['phase']}")
    if summary["man_of_the_match"]:
        print(f"Man of the match: {summary['man_of_the_match']}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Replay a stored match and print its scorecard")
    parser.add_argument("path", type=Path, help="MatchRecord JSON file")
    parser.add_argument("--innings", type=int, choices=(1, 2), default=None, help="Only print one innings")
    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level)
    sys.exit(main(args.path, args.innings))
