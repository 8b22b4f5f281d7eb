"""
Shared fixtures for the test suite.

Key design decisions:
  - Two 11-player sides, "Team A" (A1..A11) and "Team B" (B1..B11).
    Team A wins the toss and bats, so B11 opens the bowling.
  - `deliver` fills in the incoming bowler or batter whenever the
    snapshot says a slot is vacant, so tests only spell out what they check.
"""

import pytest

from scorebook.engine.scorer import MatchScorer
from scorebook.models import Delivery, MatchConfig, MatchSnapshot, TeamConfig


TEAM_A = [f"A{i}" for i in range(1, 12)]
TEAM_B = [f"B{i}" for i in range(1, 12)]


def make_config(**overrides) -> MatchConfig:
    data = {
        "team1": TeamConfig(name="Team A", players=TEAM_A),
        "team2": TeamConfig(name="Team B", players=TEAM_B),
        "toss_winner": "Team A",
        "toss_decision": "bat",
        "total_overs": 20,
    }
    data.update(overrides)
    return MatchConfig(**data)


def deliver(scorer: MatchScorer, **kw) -> MatchSnapshot:
    """
    Append one delivery, naming a new bowler or batter if the match needs one.

    Bowlers alternate from the tail of the bowling side (B11, B10, B11, ...);
    new batters come in roster order.
    """
    snap = scorer.get_snapshot()
    batting = snap.config.batting_side(snap.current_innings).players
    bowling = snap.config.bowling_side(snap.current_innings).players

    if snap.needs_bowler and "bowler" not in kw:
        kw["bowler"] = next(p for p in reversed(bowling) if p != snap.previous_bowler)
    if snap.needs_batter:
        fresh = [p for p in batting if p not in snap.current.batters]
        if snap.striker is None and "striker" not in kw:
            kw["striker"] = fresh.pop(0)
        if snap.non_striker is None and "non_striker" not in kw:
            kw["non_striker"] = fresh.pop(0)
    return scorer.append_ball(Delivery(**kw))


# --------------------------------------------------------------------------- #
#  Fixtures
# --------------------------------------------------------------------------- #

@pytest.fixture
def config() -> MatchConfig:
    return make_config()


@pytest.fixture
def make_scorer():
    """Factory for a scorer whose first innings is already under way."""

    def _make(**overrides) -> MatchScorer:
        scorer = MatchScorer(make_config(**overrides))
        scorer.start_first_innings("A1", "A2", "B11")
        return scorer

    return _make


@pytest.fixture
def scorer(make_scorer) -> MatchScorer:
    return make_scorer()


@pytest.fixture
def play():
    return deliver


@pytest.fixture
def completed_match(make_scorer) -> MatchScorer:
    """
    One-over-a-side match that Team A wins by 10 runs.

    Innings 1 (B11 bowling): A1 4, A1 1, A2 c B1 b B11, A3 6, dot, dot -> 11/1
    Innings 2 (A11 bowling): dot, B1 run out (A5), B3 1, B2 b A11, dot, dot -> 1/2
    """
    scorer = make_scorer(total_overs=1)
    deliver(scorer, runs=4)
    deliver(scorer, runs=1)
    deliver(scorer, is_wicket=True, dismissal="caught", fielder="B1")
    deliver(scorer, runs=6)
    deliver(scorer)
    deliver(scorer)

    scorer.start_second_innings("B1", "B2", "A11")
    deliver(scorer)
    deliver(scorer, is_wicket=True, dismissal="run_out", fielder="A5")
    deliver(scorer, runs=1)
    deliver(scorer, is_wicket=True, dismissal="bowled")
    deliver(scorer)
    deliver(scorer)
    return scorer
