from typing import Optional

from scorebook.errors import ValidationError
from scorebook.models import Ball, Dismissal, DismissalKind


BOWLER_CREDITED = frozenset({
    DismissalKind.BOWLED,
    DismissalKind.CAUGHT,
    DismissalKind.LBW,
    DismissalKind.STUMPED,
    DismissalKind.HIT_WICKET,
})

# Dismissals that record a fielder, and the fielding tally they feed
FIELDING_CREDIT = {
    DismissalKind.CAUGHT: "catches",
    DismissalKind.STUMPED: "stumpings",
    DismissalKind.RUN_OUT: "run_outs",
}

ALLOWED_OFF_WIDE = frozenset({
    DismissalKind.STUMPED,
    DismissalKind.RUN_OUT,
    DismissalKind.HIT_WICKET,
    DismissalKind.RETIRED,
})
ALLOWED_OFF_NO_BALL = frozenset({DismissalKind.RUN_OUT, DismissalKind.RETIRED})

# The non-striker can only be out at the non-facing end
NON_STRIKER_KINDS = frozenset({DismissalKind.RUN_OUT, DismissalKind.RETIRED})


def validate_dismissal(
    *,
    is_wicket: bool,
    kind: Optional[DismissalKind],
    fielder: Optional[str],
    dismissed: Optional[str],
    striker: str,
    non_striker: str,
    wide: bool = False,
    no_ball: bool = False,
) -> None:
    """Raise ValidationError unless the wicket fields describe a possible dismissal."""
    if not is_wicket:
        if kind is not None or fielder is not None or dismissed is not None:
            raise ValidationError("dismissal details given for a delivery that is not a wicket")
        return

    if kind is None:
        raise ValidationError("a wicket needs a dismissal kind")
    try:
        kind = DismissalKind(kind)
    except ValueError:
        raise ValidationError(f"unknown dismissal kind: {kind!r}") from None

    if fielder is not None and kind not in FIELDING_CREDIT:
        raise ValidationError(f"{kind.value} does not involve a fielder")
    if wide and kind not in ALLOWED_OFF_WIDE:
        raise ValidationError(f"a batter cannot be out {kind.value} off a wide")
    if no_ball and kind not in ALLOWED_OFF_NO_BALL:
        raise ValidationError(f"a batter cannot be out {kind.value} off a no-ball")

    if dismissed is None or dismissed == striker:
        return
    if dismissed != non_striker:
        raise ValidationError(f"{dismissed} is not at the crease")
    if kind not in NON_STRIKER_KINDS:
        raise ValidationError(f"the non-striker cannot be out {kind.value}")


def resolve(ball: Ball) -> Optional[Dismissal]:
    """Attribute the wicket on a ledger ball, or return None if there is none."""
    if not ball.is_wicket or ball.dismissal is None:
        return None

    kind = ball.dismissal
    return Dismissal(
        batter=ball.player_out,
        kind=kind,
        bowler=ball.bowler,
        fielder=ball.fielder if kind in FIELDING_CREDIT else None,
        credited_to_bowler=kind in BOWLER_CREDITED,
        fielding_credit=FIELDING_CREDIT.get(kind) if ball.fielder else None,
    )


def dismissal_text(dismissal: Optional[Dismissal]) -> str:
    """Scorecard wording for how a batter got out."""
    if dismissal is None:
        return "not out"

    kind = dismissal.kind
    bowler = dismissal.bowler
    fielder = dismissal.fielder
    if kind == DismissalKind.BOWLED:
        return f"b {bowler}"
    if kind == DismissalKind.CAUGHT:
        if fielder is None:
            return f"c ? b {bowler}"
        if fielder == bowler:
            return f"c & b {bowler}"
        return f"c {fielder} b {bowler}"
    if kind == DismissalKind.LBW:
        return f"lbw b {bowler}"
    if kind == DismissalKind.STUMPED:
        return f"st {fielder} b {bowler}" if fielder else f"st b {bowler}"
    if kind == DismissalKind.HIT_WICKET:
        return f"hit wicket b {bowler}"
    if kind == DismissalKind.RUN_OUT:
        return f"run out ({fielder})" if fielder else "run out"
    return "retired"
