"""
Live scoring session for one match.

MatchScorer is the only writer of a match's ledger. Every action validates
its input against the current snapshot, changes the ledger (or the innings
setups), and re-derives the snapshot with `replay`. Callers get deep copies
of the snapshot and can never change the engine's view of the match.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union

import pydantic

from scorebook.engine.extras import check_extras_combination
from scorebook.engine.ledger import BallLedger
from scorebook.engine.replay import replay
from scorebook.engine.wickets import FIELDING_CREDIT, validate_dismissal
from scorebook.errors import StateError, ValidationError
from scorebook.models import (
    BALLS_PER_OVER,
    Ball,
    Delivery,
    InningsSetup,
    MatchConfig,
    MatchPhase,
    MatchRecord,
    MatchSnapshot,
)

logger = logging.getLogger(__name__)


class MatchScorer:
    """Append-only scoring of a two-innings limited-overs match with undo/redo."""

    def __init__(self, config: MatchConfig) -> None:
        self.config = config
        self._ledger = BallLedger()
        self._setups: dict[int, InningsSetup] = {}
        self._man_of_the_match: Optional[str] = None
        self._snapshot = self._replay()

    # ------------------------------------------------------------------ #
    #  Reads
    # ------------------------------------------------------------------ #

    def get_snapshot(self) -> MatchSnapshot:
        """Return a copy of the current snapshot. Has no side effects."""
        return self._snapshot.model_copy(deep=True)

    @property
    def balls(self) -> tuple[Ball, ...]:
        return self._ledger.balls

    @property
    def can_undo(self) -> bool:
        return self._ledger.can_undo

    @property
    def can_redo(self) -> bool:
        return self._ledger.can_redo

    # ------------------------------------------------------------------ #
    #  Innings setup
    # ------------------------------------------------------------------ #

    def start_first_innings(self, striker: str, non_striker: str, bowler: str) -> MatchSnapshot:
        """Choose the opening pair and bowler; only valid before the first ball."""
        if self._snapshot.phase != MatchPhase.NOT_STARTED:
            raise StateError("the first innings has already started")
        self._setups[1] = self._validated_setup(1, striker, non_striker, bowler)
        logger.info(
            f"Innings 1 started: {self.config.batting_first.name} batting, "
            f"{striker} and {non_striker} facing {bowler}"
        )
        return self._refresh()

    def start_second_innings(self, striker: str, non_striker: str, bowler: str) -> MatchSnapshot:
        """Open the chase; only valid once the first innings is complete."""
        if self._snapshot.phase != MatchPhase.INNINGS_1_COMPLETE:
            raise StateError(
                f"cannot start the second innings in phase {self._snapshot.phase.value}"
            )
        self._setups[2] = self._validated_setup(2, striker, non_striker, bowler)
        logger.info(
            f"Innings 2 started: {self.config.bowling_first.name} need "
            f"{self._snapshot.target} to win"
        )
        return self._refresh()

    # ------------------------------------------------------------------ #
    #  Scoring
    # ------------------------------------------------------------------ #

    def append_ball(self, delivery: Union[Delivery, dict]) -> MatchSnapshot:
        """Validate and record the next delivery, then return the new snapshot."""
        if not isinstance(delivery, Delivery):
            try:
                delivery = Delivery.model_validate(delivery)
            except pydantic.ValidationError as e:
                raise ValidationError(f"malformed delivery: {e}") from e

        snap = self._snapshot
        if snap.phase == MatchPhase.MATCH_COMPLETE:
            raise StateError("the match is complete; no further deliveries can be recorded")
        if snap.phase == MatchPhase.INNINGS_1_COMPLETE:
            raise StateError("the first innings is complete; start the second innings first")
        if snap.phase == MatchPhase.NOT_STARTED:
            raise StateError("the first innings has not been set up")

        try:
            ball = self._build_ball(delivery, snap)
        except ValidationError as e:
            logger.warning(f"Rejected delivery: {e.message}")
            raise

        self._ledger.append(ball)
        if ball.innings == 1:
            # A new first-innings history invalidates any chase set up on the old one
            self._setups.pop(2, None)
        self._man_of_the_match = None
        return self._refresh()

    def undo(self) -> MatchSnapshot:
        """Remove the last delivery. No-op on an empty ledger."""
        ball = self._ledger.truncate()
        if ball is None:
            return self.get_snapshot()
        logger.info(f"Undo: removed ball {ball.index} (innings {ball.innings})")
        return self._refresh()

    def redo(self) -> MatchSnapshot:
        """Re-apply the most recently undone delivery. No-op if nothing to redo."""
        ball = self._ledger.restore()
        if ball is None:
            return self.get_snapshot()
        logger.info(f"Redo: restored ball {ball.index} (innings {ball.innings})")
        return self._refresh()

    def award_man_of_the_match(self, player: str) -> MatchSnapshot:
        if not self._snapshot.is_completed:
            raise StateError("man of the match can only be awarded once the match is complete")
        if self.config.team_of(player) is None:
            raise ValidationError(f"{player} did not play in this match")
        self._man_of_the_match = player
        return self._refresh()

    # ------------------------------------------------------------------ #
    #  Persistence shape
    # ------------------------------------------------------------------ #

    def to_record(self) -> MatchRecord:
        # A chase setup kept only for redo is not part of the recorded match
        setups = {
            number: setup
            for number, setup in self._setups.items()
            if number == 1 or self._snapshot.first_innings_score is not None
        }
        return MatchRecord(
            config=self.config,
            balls=list(self._ledger.balls),
            setups=setups,
            man_of_the_match=self._man_of_the_match,
        )

    @classmethod
    def from_record(cls, record: MatchRecord) -> "MatchScorer":
        """
        Rebuild a scorer from its stored inputs.

        Each stored ball is checked against the state it was bowled into, so a
        corrupted record is rejected rather than replayed into nonsense.
        """
        scorer = cls(record.config)
        for number in (1, 2):
            if number not in record.setups:
                continue
            setup = record.setups[number]
            if number == 1:
                scorer.start_first_innings(setup.striker, setup.non_striker, setup.bowler)
            innings_balls = [b for b in record.balls if b.innings == number]
            for ball in innings_balls:
                scorer._restore_ball(ball)
            if number == 1 and 2 in record.setups:
                scorer.start_second_innings(
                    record.setups[2].striker, record.setups[2].non_striker, record.setups[2].bowler
                )
        if len(scorer._ledger) != len(record.balls):
            raise ValidationError("stored balls do not match the stored innings setups")
        if record.man_of_the_match is not None:
            scorer.award_man_of_the_match(record.man_of_the_match)
        return scorer

    def _restore_ball(self, ball: Ball) -> None:
        if not self._snapshot.is_in_progress:
            raise ValidationError(f"stored ball {ball.index} was bowled outside an innings in progress")
        expected = self._build_ball(
            Delivery(**ball.model_dump(exclude={"index", "innings", "batting_team", "recorded_at"})),
            self._snapshot,
        )
        if expected.index != ball.index or expected.innings != ball.innings:
            raise ValidationError(f"stored ball {ball.index} is out of sequence")
        self._ledger.append(ball)
        self._refresh()

    # ------------------------------------------------------------------ #
    #  Internals
    # ------------------------------------------------------------------ #

    def _replay(self) -> MatchSnapshot:
        return replay(self._ledger.balls, self.config, self._setups, self._man_of_the_match)

    def _refresh(self) -> MatchSnapshot:
        previous = self._snapshot.phase
        self._snapshot = self._replay()
        if previous != self._snapshot.phase and self._snapshot.is_completed:
            logger.info(f"Match complete: {self._snapshot.result.description}")
        return self.get_snapshot()

    def _validated_setup(self, innings: int, striker: str, non_striker: str, bowler: str) -> InningsSetup:
        batting = self.config.batting_side(innings)
        bowling = self.config.bowling_side(innings)
        for name in (striker, non_striker):
            if name not in batting.players:
                raise ValidationError(f"{name} is not in the {batting.name} batting side")
        if striker == non_striker:
            raise ValidationError("striker and non-striker must be different players")
        if bowler not in bowling.players:
            raise ValidationError(f"{bowler} is not in the {bowling.name} bowling side")
        return InningsSetup(striker=striker, non_striker=non_striker, bowler=bowler)

    def _build_ball(self, delivery: Delivery, snap: MatchSnapshot) -> Ball:
        """Resolve the players on a delivery and check it against the laws and the match state."""
        innings = snap.current
        batting = self.config.batting_side(snap.current_innings)
        bowling = self.config.bowling_side(snap.current_innings)

        check_extras_combination(
            wide=delivery.wide, no_ball=delivery.no_ball, bye=delivery.bye, leg_bye=delivery.leg_bye
        )

        striker = self._resolve_batter("striker", delivery.striker, snap.striker)
        non_striker = self._resolve_batter("non-striker", delivery.non_striker, snap.non_striker)
        if striker == non_striker:
            raise ValidationError("striker and non-striker must be different players")
        for name in (striker, non_striker):
            if name not in batting.players:
                raise ValidationError(f"{name} is not in the {batting.name} batting side")
            card = innings.batters.get(name)
            if card is not None and card.is_out:
                raise ValidationError(f"{name} is already out")

        bowler = self._resolve_bowler(delivery.bowler, snap)
        if bowler not in bowling.players:
            raise ValidationError(f"{bowler} is not in the {bowling.name} bowling side")

        validate_dismissal(
            is_wicket=delivery.is_wicket,
            kind=delivery.dismissal,
            fielder=delivery.fielder,
            dismissed=delivery.dismissed,
            striker=striker,
            non_striker=non_striker,
            wide=delivery.wide,
            no_ball=delivery.no_ball,
        )
        if delivery.fielder is not None:
            if delivery.dismissal in FIELDING_CREDIT and delivery.fielder not in bowling.players:
                raise ValidationError(f"fielder {delivery.fielder} is not in the {bowling.name} side")

        return Ball(
            index=len(self._ledger),
            innings=snap.current_innings,
            batting_team=batting.name,
            striker=striker,
            non_striker=non_striker,
            bowler=bowler,
            runs=delivery.runs,
            wide=delivery.wide,
            no_ball=delivery.no_ball,
            bye=delivery.bye,
            leg_bye=delivery.leg_bye,
            is_wicket=delivery.is_wicket,
            dismissal=delivery.dismissal,
            fielder=delivery.fielder,
            dismissed=delivery.dismissed,
            recorded_at=datetime.now(timezone.utc),
        )

    @staticmethod
    def _resolve_batter(slot: str, named: Optional[str], current: Optional[str]) -> str:
        if current is None:
            if named is None:
                raise ValidationError(f"a new batter must be named as {slot}")
            return named
        if named is not None and named != current:
            raise ValidationError(f"{named} is not the {slot}; {current} is")
        return current

    def _resolve_bowler(self, named: Optional[str], snap: MatchSnapshot) -> str:
        if snap.bowler is not None:
            if named is not None and named != snap.bowler:
                raise ValidationError(
                    f"{snap.bowler} is mid-over; the bowler cannot change until the over ends"
                )
            return snap.bowler

        if named is None:
            raise ValidationError("the over is complete; a new bowler must be named")
        if named == snap.previous_bowler:
            raise ValidationError(f"{named} bowled the previous over and cannot bowl consecutive overs")
        quota = self.config.max_overs_per_bowler
        if quota is not None:
            card = snap.current.bowlers.get(named)
            if card is not None and card.balls_bowled >= quota * BALLS_PER_OVER:
                raise ValidationError(f"{named} has already bowled the maximum of {quota} overs")
        return named
