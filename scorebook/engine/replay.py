"""
Score accumulator.

`replay` folds a ledger prefix into a MatchSnapshot. It is a pure function
of its arguments: the same balls, config and innings setups always give an
equal snapshot, which is what undo, redo and reloading a stored match rely
on. Nothing here keeps state between calls.
"""

import logging
from typing import Mapping, Optional, Sequence

from scorebook.engine.extras import classify_ball
from scorebook.engine.overs import OverState
from scorebook.engine.transitions import innings_end_reason, resolve_phase, resolve_result
from scorebook.engine.wickets import resolve
from scorebook.errors import StateError
from scorebook.models import (
    BALLS_PER_OVER,
    Ball,
    BatterCard,
    BowlerCard,
    FallOfWicket,
    InningsSetup,
    InningsState,
    MatchConfig,
    MatchPhase,
    MatchSnapshot,
    Partnership,
)

logger = logging.getLogger(__name__)


class InningsAccumulator:
    """
    Maintains one innings, updating it ball by ball.
    Tracks score, wickets, legal balls, extras breakdown, per-batter and
    per-bowler cards, fall of wickets, partnerships and runs per over,
    and drives the over/strike state machine.
    """

    def __init__(
        self,
        number: int,
        config: MatchConfig,
        setup: InningsSetup,
        target: Optional[int] = None,
    ) -> None:
        self.config = config
        self.target = target
        self.crease = OverState.opening(setup)
        self.state = InningsState(
            number=number,
            batting_team=config.batting_side(number).name,
            bowling_team=config.bowling_side(number).name,
        )
        self.state.partnerships.append(
            Partnership(wicket=1, batters=[setup.striker, setup.non_striker])
        )
        self._card_for(setup.striker)
        self._card_for(setup.non_striker)

    def update(self, ball: Ball) -> InningsState:
        """Fold a single delivery into the innings and return the updated state."""
        s = self.state
        if s.is_complete:
            raise StateError(f"ball {ball.index} was bowled after innings {s.number} ended")

        # --- Incoming players named on this delivery ---
        self.crease.take_guard(ball.striker, ball.non_striker, ball.bowler)
        striker = self._card_for(ball.striker)
        self._card_for(ball.non_striker)
        partnership = s.partnerships[-1]
        for name in (ball.striker, ball.non_striker):
            if name not in partnership.batters:
                partnership.batters.append(name)

        credit = classify_ball(ball, self.config)

        # --- Team total & extras breakdown ---
        s.score += credit.total
        s.extras.wides += credit.wides
        s.extras.no_balls += credit.no_balls
        s.extras.byes += credit.byes
        s.extras.leg_byes += credit.leg_byes
        if credit.is_legal:
            s.legal_balls += 1
        s.current_over_runs += credit.total

        # --- Batter ---
        striker.runs += credit.batter_runs
        if credit.is_legal:
            striker.balls_faced += 1
            if credit.batter_runs == 0:
                striker.dots += 1
        if credit.is_four:
            striker.fours += 1
            s.fours += 1
        if credit.is_six:
            striker.sixes += 1
            s.sixes += 1

        # --- Bowler ---
        if ball.bowler not in s.bowlers:
            s.bowlers[ball.bowler] = BowlerCard(name=ball.bowler)
        bowler = s.bowlers[ball.bowler]
        bowler.runs_conceded += credit.bowler_runs
        if credit.is_legal:
            bowler.balls_bowled += 1
            if credit.bowler_runs == 0:
                bowler.dots += 1
        if ball.wide:
            bowler.wides += 1
        if ball.no_ball:
            bowler.no_balls += 1

        # --- Partnership ---
        partnership.runs += credit.total
        if credit.is_legal:
            partnership.balls += 1

        # --- Wicket ---
        dismissal = resolve(ball)
        if dismissal is not None:
            s.wickets += 1
            out = s.batters[dismissal.batter]
            out.is_out = True
            out.dismissal = dismissal
            if dismissal.credited_to_bowler:
                bowler.wickets += 1

            survivor = ball.non_striker if dismissal.batter == ball.striker else ball.striker
            s.fall_of_wickets.append(FallOfWicket(
                wicket_number=s.wickets,
                batter=dismissal.batter,
                batter_runs=out.runs,
                team_score=s.score,
                overs=s.overs_display,
                bowler=ball.bowler,
                how=dismissal.kind,
                partner=survivor,
            ))
            partnership.unbroken = False
            s.partnerships.append(Partnership(wicket=s.wickets + 1, batters=[survivor]))

        # --- Over boundary bookkeeping ---
        over_complete = credit.is_legal and s.legal_balls % BALLS_PER_OVER == 0
        if over_complete:
            if s.current_over_runs == 0:
                bowler.maidens += 1
            s.over_runs_history.append(s.current_over_runs)
            s.current_over_runs = 0

        # --- Innings end, otherwise move the crease on ---
        reason = innings_end_reason(s, self.config, self.target)
        if reason is not None:
            s.is_complete = True
            s.end_reason = reason
            if dismissal is not None:
                # The stand opened by the final wicket never started
                s.partnerships.pop()
            logger.info(
                f"Innings {s.number} complete ({reason.value}): "
                f"{s.batting_team} {s.score_display} in {s.overs_display} overs"
            )
        else:
            self.crease.advance(
                runs_run=ball.runs,
                is_legal=credit.is_legal,
                player_out=dismissal.batter if dismissal else None,
            )

        logger.debug(
            f"Ball {ball.index}: {s.batting_team} {s.score_display} ({s.overs_display})"
        )
        return s

    def _card_for(self, name: str) -> BatterCard:
        s = self.state
        if name not in s.batters:
            s.batters[name] = BatterCard(name=name, position=len(s.batting_order) + 1)
            s.batting_order.append(name)
        return s.batters[name]


def replay(
    balls: Sequence[Ball],
    config: MatchConfig,
    setups: Optional[Mapping[int, InningsSetup]] = None,
    man_of_the_match: Optional[str] = None,
) -> MatchSnapshot:
    """Fold the ledger prefix `balls` into a fresh snapshot of the match."""
    setups = setups or {}
    snapshot = MatchSnapshot(config=config, started_at=config.started_at, ball_count=len(balls))

    if 1 not in setups:
        if balls:
            raise StateError("deliveries recorded before the first innings was set up")
        return snapshot

    accumulators = [InningsAccumulator(1, config, setups[1])]
    for ball in balls:
        if ball.innings == 2 and len(accumulators) == 1:
            first = accumulators[0].state
            if not first.is_complete or 2 not in setups:
                raise StateError(f"ball {ball.index} belongs to an innings that has not started")
            accumulators.append(InningsAccumulator(2, config, setups[2], target=first.score + 1))
        if ball.innings != len(accumulators):
            raise StateError(f"ball {ball.index} is out of order for innings {ball.innings}")
        accumulators[-1].update(ball)

    # A second-innings setup with no balls yet still opens the innings
    first = accumulators[0].state
    if len(accumulators) == 1 and first.is_complete and 2 in setups:
        accumulators.append(InningsAccumulator(2, config, setups[2], target=first.score + 1))

    innings = [acc.state for acc in accumulators]
    snapshot.innings = innings
    snapshot.current_innings = len(innings)
    snapshot.phase = resolve_phase(innings, setups)
    if first.is_complete:
        snapshot.first_innings_score = first.score

    if snapshot.phase in (MatchPhase.INNINGS_1_IN_PROGRESS, MatchPhase.INNINGS_2_IN_PROGRESS):
        crease = accumulators[-1].crease
        snapshot.striker = crease.striker
        snapshot.non_striker = crease.non_striker
        snapshot.bowler = crease.bowler
        snapshot.previous_bowler = crease.previous_bowler

    if snapshot.phase == MatchPhase.MATCH_COMPLETE:
        snapshot.result = resolve_result(config, innings[0], innings[1])
        snapshot.man_of_the_match = man_of_the_match
        snapshot.ended_at = balls[-1].recorded_at if balls else None

    return snapshot
