"""
Statistics aggregator.

Turns a completed match snapshot into per-player deltas and folds those
deltas into career totals. Whether a match has already been counted is the
caller's concern: it should aggregate each match once, when the match first
reaches completion.
"""

import logging
from collections.abc import Mapping

from scorebook.errors import StateError
from scorebook.models import BowlingFigures, MatchSnapshot, PlayerStats

logger = logging.getLogger(__name__)

_SUMMED_FIELDS = (
    "matches",
    "innings_batted",
    "runs",
    "balls_faced",
    "fours",
    "sixes",
    "times_out",
    "fifties",
    "hundreds",
    "ducks",
    "wickets",
    "balls_bowled",
    "runs_conceded",
    "dot_balls",
    "maidens",
    "catches",
    "run_outs",
    "stumpings",
    "man_of_the_match",
)


def aggregate_completed_match(match: MatchSnapshot) -> dict[str, PlayerStats]:
    """Return one PlayerStats delta for every player named in either roster."""
    if not match.is_completed:
        raise StateError("only a completed match can be aggregated")

    config = match.config
    deltas: dict[str, PlayerStats] = {
        player: PlayerStats(player=player, matches=1)
        for team in (config.team1, config.team2)
        for player in team.players
    }

    for innings in match.innings:
        # --- Batting & fielding ---
        for card in innings.batters.values():
            stats = deltas[card.name]
            stats.innings_batted += 1
            stats.runs += card.runs
            stats.balls_faced += card.balls_faced
            stats.fours += card.fours
            stats.sixes += card.sixes
            stats.highest_score = max(stats.highest_score, card.runs)
            if card.runs >= 100:
                stats.hundreds += 1
            elif card.runs >= 50:
                stats.fifties += 1

            dismissal = card.dismissal
            if dismissal is None:
                continue
            if dismissal.counts_as_out:
                stats.times_out += 1
                if card.runs == 0:
                    stats.ducks += 1
            if dismissal.fielding_credit and dismissal.fielder in deltas:
                fielder = deltas[dismissal.fielder]
                setattr(fielder, dismissal.fielding_credit,
                        getattr(fielder, dismissal.fielding_credit) + 1)

        # --- Bowling ---
        for card in innings.bowlers.values():
            stats = deltas[card.name]
            stats.wickets += card.wickets
            stats.balls_bowled += card.balls_bowled
            stats.runs_conceded += card.runs_conceded
            stats.dot_balls += card.dots
            stats.maidens += card.maidens
            figures = BowlingFigures(wickets=card.wickets, runs=card.runs_conceded)
            if figures.is_better_than(stats.best_bowling):
                stats.best_bowling = figures

    if match.man_of_the_match in deltas:
        deltas[match.man_of_the_match].man_of_the_match += 1

    logger.info(
        f"Aggregated match {config.team1.name} v {config.team2.name}: "
        f"{len(deltas)} player(s)"
    )
    return deltas


def combine(career: PlayerStats, delta: PlayerStats) -> PlayerStats:
    """Add one match's delta to a player's career totals, returning a new value."""
    if career.player != delta.player:
        raise ValueError(f"cannot combine stats of {career.player} and {delta.player}")

    totals = {field: getattr(career, field) + getattr(delta, field) for field in _SUMMED_FIELDS}
    best = career.best_bowling
    if delta.best_bowling is not None and delta.best_bowling.is_better_than(best):
        best = delta.best_bowling
    return PlayerStats(
        player=career.player,
        highest_score=max(career.highest_score, delta.highest_score),
        best_bowling=best,
        **totals,
    )


def merge_player_stats(
    career: Mapping[str, PlayerStats], deltas: Mapping[str, PlayerStats]
) -> dict[str, PlayerStats]:
    """Fold match deltas into a career table; players new to the table start from zero."""
    merged = dict(career)
    for player, delta in deltas.items():
        merged[player] = combine(merged.get(player, PlayerStats(player=player)), delta)
    return merged
