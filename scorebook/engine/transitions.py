from typing import Mapping, Optional

from scorebook.models import (
    InningsEndReason,
    InningsSetup,
    InningsState,
    MatchConfig,
    MatchPhase,
    MatchResult,
    ResultKind,
)


def innings_end_reason(
    innings: InningsState, config: MatchConfig, target: Optional[int] = None
) -> Optional[InningsEndReason]:
    """
    Decide whether the innings is over after its latest delivery.

    A chase that reaches the target ends the match on the spot, even if the
    same ball also took the last wicket or completed the final over.
    """
    if target is not None and innings.score >= target:
        return InningsEndReason.TARGET_REACHED
    roster_size = len(config.batting_side(innings.number).players)
    if innings.wickets >= roster_size - 1:
        return InningsEndReason.ALL_OUT
    if innings.legal_balls >= config.max_legal_balls:
        return InningsEndReason.OVERS_COMPLETE
    return None


def resolve_result(
    config: MatchConfig, first: InningsState, second: InningsState
) -> Optional[MatchResult]:
    """Result of a finished second innings, or None while the chase is still on."""
    if not second.is_complete:
        return None

    if second.score > first.score:
        roster_size = len(config.batting_side(2).players)
        return MatchResult(
            kind=ResultKind.WICKETS,
            winner=second.batting_team,
            margin=roster_size - 1 - second.wickets,
        )
    if second.score == first.score:
        return MatchResult(kind=ResultKind.TIE)
    return MatchResult(
        kind=ResultKind.RUNS,
        winner=first.batting_team,
        margin=first.score - second.score,
    )


def resolve_phase(
    innings: list[InningsState], setups: Mapping[int, InningsSetup]
) -> MatchPhase:
    """Where the match stands given the innings folded so far."""
    if 1 not in setups or not innings:
        return MatchPhase.NOT_STARTED
    first = innings[0]
    if not first.is_complete:
        return MatchPhase.INNINGS_1_IN_PROGRESS
    if len(innings) < 2:
        return MatchPhase.INNINGS_1_COMPLETE
    if innings[1].is_complete:
        return MatchPhase.MATCH_COMPLETE
    return MatchPhase.INNINGS_2_IN_PROGRESS
