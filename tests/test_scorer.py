"""
Tests for MatchScorer: validation at append, lifecycle errors, undo/redo and records.
"""

import pytest

from scorebook.engine.scorer import MatchScorer
from scorebook.errors import StateError, ValidationError
from scorebook.models import MatchPhase, MatchRecord


# --------------------------------------------------------------------------- #
#  Lifecycle
# --------------------------------------------------------------------------- #


def test_append_before_first_innings_setup(config):
    scorer = MatchScorer(config)
    assert scorer.get_snapshot().phase == MatchPhase.NOT_STARTED
    with pytest.raises(StateError):
        scorer.append_ball({"runs": 1})


def test_first_innings_can_only_start_once(scorer):
    with pytest.raises(StateError):
        scorer.start_first_innings("A1", "A2", "B11")


def test_second_innings_before_first_is_complete(scorer, play):
    play(scorer, runs=1)
    with pytest.raises(StateError):
        scorer.start_second_innings("B1", "B2", "A11")


def test_append_between_innings_is_rejected(make_scorer, play):
    scorer = make_scorer(total_overs=1)
    for _ in range(6):
        play(scorer)
    with pytest.raises(StateError):
        play(scorer)


def test_append_after_match_complete(completed_match, play):
    with pytest.raises(StateError):
        play(completed_match, runs=1)


@pytest.mark.parametrize(
    "striker, non_striker, bowler",
    [
        ("B1", "A2", "B11"),
        ("A1", "A1", "B11"),
        ("A1", "A2", "A3"),
    ],
)
def test_opening_selection_must_respect_sides(config, striker, non_striker, bowler):
    scorer = MatchScorer(config)
    with pytest.raises(ValidationError):
        scorer.start_first_innings(striker, non_striker, bowler)
    assert scorer.get_snapshot().phase == MatchPhase.NOT_STARTED


def test_second_innings_rejects_players_from_other_side(make_scorer, play):
    scorer = make_scorer(total_overs=1)
    for _ in range(6):
        play(scorer)
    with pytest.raises(ValidationError):
        scorer.start_second_innings("A1", "B2", "A11")
    with pytest.raises(ValidationError):
        scorer.start_second_innings("B1", "B2", "B3")

    snap = scorer.start_second_innings("B1", "B2", "A11")
    assert snap.batting_team == "Team B"
    assert snap.bowling_team == "Team A"
    assert (snap.striker, snap.non_striker, snap.bowler) == ("B1", "B2", "A11")


# --------------------------------------------------------------------------- #
#  Validation at append
# --------------------------------------------------------------------------- #


def test_invalid_input_leaves_ledger_unchanged(scorer, play):
    play(scorer, runs=1)
    before = scorer.get_snapshot()

    bad = [
        {"runs": -1},
        {"is_wicket": True, "dismissal": "handled_the_ball"},
        {"is_wicket": True, "dismissal": "bowled", "fielder": "B1"},
        {"is_wicket": True, "dismissal": "caught", "fielder": "A5"},
        {"is_wicket": True},
        {"wide": True, "bye": True},
        {"striker": "A1"},
        {"bowler": "B10"},
    ]
    for delivery in bad:
        with pytest.raises(ValidationError):
            scorer.append_ball(delivery)

    assert scorer.get_snapshot() == before
    assert len(scorer.balls) == 1


def test_new_bowler_required_after_over(scorer, play):
    for _ in range(6):
        play(scorer)
    with pytest.raises(ValidationError):
        scorer.append_ball({})
    with pytest.raises(ValidationError):
        scorer.append_ball({"bowler": "B11"})
    with pytest.raises(ValidationError):
        scorer.append_ball({"bowler": "A5"})

    snap = scorer.append_ball({"bowler": "B9"})
    assert snap.bowler == "B9"
    assert snap.previous_bowler == "B11"


def test_bowler_quota(make_scorer, play):
    scorer = make_scorer(max_overs_per_bowler=1)
    # B11 opens, B10 takes the second over
    for _ in range(12):
        play(scorer)
    with pytest.raises(ValidationError):
        scorer.append_ball({"bowler": "B11"})


def test_new_batter_required_after_wicket(scorer, play):
    play(scorer, is_wicket=True, dismissal="lbw")
    with pytest.raises(ValidationError):
        scorer.append_ball({})
    with pytest.raises(ValidationError):
        scorer.append_ball({"striker": "A1"})
    with pytest.raises(ValidationError):
        scorer.append_ball({"striker": "B4"})
    with pytest.raises(ValidationError):
        scorer.append_ball({"striker": "A2"})

    snap = scorer.append_ball({"striker": "A3", "runs": 2})
    assert snap.striker == "A3"
    assert snap.current.batters["A3"].position == 3


# --------------------------------------------------------------------------- #
#  Undo / redo
# --------------------------------------------------------------------------- #


def test_undo_then_redo_restores_snapshot(scorer, play):
    play(scorer, runs=1)
    play(scorer, is_wicket=True, dismissal="caught", fielder="B2")
    before = play(scorer, runs=4)

    after_undo = scorer.undo()
    assert after_undo.current.score == 1
    assert scorer.can_redo is True

    assert scorer.redo() == before


def test_multiple_undo_and_redo(scorer, play):
    snapshots = [play(scorer, runs=r) for r in (1, 2, 3, 4)]
    scorer.undo()
    scorer.undo()
    assert scorer.get_snapshot() == snapshots[1]
    assert scorer.redo() == snapshots[2]
    assert scorer.redo() == snapshots[3]
    assert scorer.can_redo is False


def test_undo_and_redo_noops(scorer):
    before = scorer.get_snapshot()
    assert scorer.undo() == before
    assert scorer.redo() == before


def test_new_append_after_undo_clears_redo(scorer, play):
    play(scorer, runs=4)
    scorer.undo()
    snap = play(scorer, runs=1)

    assert scorer.can_redo is False
    assert scorer.redo() == snap
    assert [b.runs for b in scorer.balls] == [1]


def test_undo_reopens_completed_match(completed_match):
    completed = completed_match.get_snapshot()
    snap = completed_match.undo()
    assert snap.phase == MatchPhase.INNINGS_2_IN_PROGRESS
    assert snap.result is None
    assert completed_match.redo() == completed


def test_undo_across_innings_boundary(make_scorer, play):
    scorer = make_scorer(total_overs=1)
    for _ in range(6):
        play(scorer, runs=1)
    started = scorer.start_second_innings("B1", "B2", "A11")

    snap = scorer.undo()
    assert snap.phase == MatchPhase.INNINGS_1_IN_PROGRESS
    assert len(snap.innings) == 1
    assert scorer.redo() == started

    # A fresh last ball in innings 1 discards the old chase setup
    scorer.undo()
    snap = play(scorer, runs=4)
    assert snap.phase == MatchPhase.INNINGS_1_COMPLETE
    assert snap.first_innings_score == 9


def test_snapshot_is_a_copy(scorer, play):
    play(scorer, runs=2)
    snap = scorer.get_snapshot()
    snap.current.score = 500
    snap.innings.clear()
    assert scorer.get_snapshot().current.score == 2


# --------------------------------------------------------------------------- #
#  Man of the match & records
# --------------------------------------------------------------------------- #


def test_man_of_the_match(scorer, completed_match):
    with pytest.raises(StateError):
        scorer.award_man_of_the_match("A1")
    with pytest.raises(ValidationError):
        completed_match.award_man_of_the_match("Z9")

    snap = completed_match.award_man_of_the_match("A3")
    assert snap.man_of_the_match == "A3"


def test_record_round_trip(completed_match):
    completed_match.award_man_of_the_match("A3")
    record = completed_match.to_record()
    restored_record = MatchRecord.model_validate_json(record.model_dump_json())
    assert restored_record == record

    restored = MatchScorer.from_record(restored_record)
    assert restored.get_snapshot() == completed_match.get_snapshot()
    assert restored.balls == completed_match.balls


def test_record_of_match_in_progress(scorer, play):
    play(scorer, runs=1)
    play(scorer, wide=True)
    record = scorer.to_record()
    restored = MatchScorer.from_record(MatchRecord.model_validate_json(record.model_dump_json()))
    assert restored.get_snapshot() == scorer.get_snapshot()


def test_corrupted_record_is_rejected(scorer, play):
    play(scorer, runs=1)
    record = scorer.to_record()
    tampered = record.balls[0].model_copy(update={"striker": "A9"})
    with pytest.raises(ValidationError):
        MatchScorer.from_record(record.model_copy(update={"balls": [tampered]}))
