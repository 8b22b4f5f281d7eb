from scorebook.errors import ValidationError
from scorebook.models import Ball, DeliveryCredit, MatchConfig


def check_extras_combination(
    *, wide: bool = False, no_ball: bool = False, bye: bool = False, leg_bye: bool = False
) -> None:
    """
    Reject flag combinations that cannot happen on one delivery.

    No-ball may combine with bye or leg-bye; every other pairing is invalid.
    """
    if wide and no_ball:
        raise ValidationError("a delivery cannot be both a wide and a no-ball")
    if wide and (bye or leg_bye):
        raise ValidationError("runs off a wide are wides, not byes or leg-byes")
    if bye and leg_bye:
        raise ValidationError("a delivery cannot be both a bye and a leg-bye")


def classify(
    runs: int,
    *,
    wide: bool = False,
    no_ball: bool = False,
    bye: bool = False,
    leg_bye: bool = False,
    wide_penalty: int = 1,
    no_ball_penalty: int = 1,
) -> DeliveryCredit:
    """
    Split the runs of one delivery between batter, extras and bowler.

    - Wide: penalty plus all runs run go to wides; not a legal delivery.
    - No-ball: penalty goes to no-balls; runs run go to the batter unless
      the ball is also a bye/leg-bye. Not a legal delivery.
    - Bye / leg-bye: runs go to extras and are not charged to the bowler.
    - Plain: runs go to the batter. Only here are fours and sixes counted.
    """
    if runs < 0:
        raise ValidationError(f"runs cannot be negative (got {runs})")
    check_extras_combination(wide=wide, no_ball=no_ball, bye=bye, leg_bye=leg_bye)

    if wide:
        wides = wide_penalty + runs
        return DeliveryCredit(wides=wides, bowler_runs=wides, is_legal=False)

    no_balls = no_ball_penalty if no_ball else 0
    if bye or leg_bye:
        return DeliveryCredit(
            no_balls=no_balls,
            byes=runs if bye else 0,
            leg_byes=runs if leg_bye else 0,
            bowler_runs=no_balls,
            is_legal=not no_ball,
        )

    plain = not no_ball
    return DeliveryCredit(
        batter_runs=runs,
        no_balls=no_balls,
        bowler_runs=runs + no_balls,
        is_legal=plain,
        is_four=plain and runs == 4,
        is_six=plain and runs == 6,
    )


def classify_ball(ball: Ball, config: MatchConfig) -> DeliveryCredit:
    return classify(
        ball.runs,
        wide=ball.wide,
        no_ball=ball.no_ball,
        bye=ball.bye,
        leg_bye=ball.leg_bye,
        wide_penalty=config.wide_penalty,
        no_ball_penalty=config.no_ball_penalty,
    )
