"""
Unit tests for dismissal validation, attribution and scorecard wording.
"""

import pytest

from scorebook.engine.wickets import dismissal_text, resolve, validate_dismissal
from scorebook.errors import ValidationError
from scorebook.models import Ball, DismissalKind


def _ball(**kw) -> Ball:
    data = {
        "index": 0,
        "innings": 1,
        "batting_team": "Team A",
        "striker": "A1",
        "non_striker": "A2",
        "bowler": "B11",
        "is_wicket": True,
    }
    data.update(kw)
    return Ball(**data)


def _validate(**kw) -> None:
    data = {"is_wicket": True, "kind": None, "fielder": None, "dismissed": None,
            "striker": "A1", "non_striker": "A2"}
    data.update(kw)
    validate_dismissal(**data)


@pytest.mark.parametrize(
    "kind",
    [DismissalKind.BOWLED, DismissalKind.CAUGHT, DismissalKind.LBW,
     DismissalKind.STUMPED, DismissalKind.HIT_WICKET],
)
def test_bowler_credited_dismissals(kind):
    dismissal = resolve(_ball(dismissal=kind))
    assert dismissal.credited_to_bowler is True
    assert dismissal.batter == "A1"
    assert dismissal.counts_as_out is True


def test_run_out_credits_fielder_not_bowler():
    dismissal = resolve(_ball(dismissal=DismissalKind.RUN_OUT, fielder="B3"))
    assert dismissal.credited_to_bowler is False
    assert dismissal.fielder == "B3"
    assert dismissal.fielding_credit == "run_outs"


def test_retired_credits_nobody():
    dismissal = resolve(_ball(dismissal=DismissalKind.RETIRED))
    assert dismissal.credited_to_bowler is False
    assert dismissal.fielding_credit is None
    assert dismissal.counts_as_out is False


def test_non_striker_named_as_out():
    dismissal = resolve(_ball(dismissal=DismissalKind.RUN_OUT, dismissed="A2"))
    assert dismissal.batter == "A2"


def test_no_wicket_resolves_to_none():
    assert resolve(_ball(is_wicket=False)) is None


def test_valid_dismissals_pass():
    _validate(is_wicket=False)
    _validate(kind=DismissalKind.CAUGHT, fielder="B1")
    _validate(kind=DismissalKind.STUMPED, fielder="B2", wide=True)
    _validate(kind=DismissalKind.RUN_OUT, dismissed="A2", no_ball=True)


@pytest.mark.parametrize(
    "kw",
    [
        {"kind": None},
        {"kind": "handled_the_ball"},
        {"kind": DismissalKind.BOWLED, "fielder": "B1"},
        {"kind": DismissalKind.LBW, "fielder": "B1"},
        {"kind": DismissalKind.HIT_WICKET, "fielder": "B1"},
        {"kind": DismissalKind.LBW, "no_ball": True},
        {"kind": DismissalKind.CAUGHT, "wide": True},
        {"kind": DismissalKind.CAUGHT, "dismissed": "A2"},
        {"kind": DismissalKind.RUN_OUT, "dismissed": "A7"},
        {"is_wicket": False, "kind": DismissalKind.BOWLED},
    ],
)
def test_invalid_dismissals_rejected(kw):
    with pytest.raises(ValidationError):
        _validate(**kw)


@pytest.mark.parametrize(
    "kw, expected",
    [
        ({"dismissal": DismissalKind.BOWLED}, "b B11"),
        ({"dismissal": DismissalKind.CAUGHT, "fielder": "B4"}, "c B4 b B11"),
        ({"dismissal": DismissalKind.CAUGHT, "fielder": "B11"}, "c & b B11"),
        ({"dismissal": DismissalKind.LBW}, "lbw b B11"),
        ({"dismissal": DismissalKind.STUMPED, "fielder": "B7"}, "st B7 b B11"),
        ({"dismissal": DismissalKind.HIT_WICKET}, "hit wicket b B11"),
        ({"dismissal": DismissalKind.RUN_OUT, "fielder": "B2"}, "run out (B2)"),
        ({"dismissal": DismissalKind.RUN_OUT}, "run out"),
        ({"dismissal": DismissalKind.RETIRED}, "retired"),
    ],
)
def test_dismissal_text(kw, expected):
    assert dismissal_text(resolve(_ball(**kw))) == expected


def test_not_out_text():
    assert dismissal_text(None) == "not out"
