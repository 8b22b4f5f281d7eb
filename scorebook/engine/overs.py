from typing import Optional

from pydantic import BaseModel

from scorebook.models import BALLS_PER_OVER, InningsSetup


class OverState(BaseModel):
    """
    Who is at the crease and how far the current over has progressed.

    The over is either in progress (`balls_in_over` 0..5 with a bowler in
    place) or complete, in which case `bowler` is empty until the next
    delivery names a new one. `previous_bowler` is the bowler of the last
    completed over and may not bowl the next one.
    """

    striker: Optional[str] = None
    non_striker: Optional[str] = None
    bowler: Optional[str] = None
    previous_bowler: Optional[str] = None
    balls_in_over: int = 0

    @classmethod
    def opening(cls, setup: InningsSetup) -> "OverState":
        return cls(striker=setup.striker, non_striker=setup.non_striker, bowler=setup.bowler)

    @property
    def over_complete(self) -> bool:
        return self.bowler is None

    def take_guard(self, striker: str, non_striker: str, bowler: str) -> None:
        """Fill the slots with the players named on the incoming delivery."""
        self.striker = striker
        self.non_striker = non_striker
        self.bowler = bowler

    def rotate_strike(self) -> None:
        self.striker, self.non_striker = self.non_striker, self.striker

    def vacate(self, player: str) -> None:
        if self.striker == player:
            self.striker = None
        elif self.non_striker == player:
            self.non_striker = None

    def advance(self, *, runs_run: int, is_legal: bool, player_out: Optional[str] = None) -> bool:
        """
        Move the machine on by one delivery and report whether it ended the over.

        Odd runs cross the batters (byes and leg-byes included, since the
        non-striker runs too). A dismissed batter's slot is vacated after the
        crossing. The sixth legal ball swaps ends and retires the bowler.
        """
        if runs_run % 2 == 1:
            self.rotate_strike()
        if player_out is not None:
            self.vacate(player_out)
        if not is_legal:
            return False

        self.balls_in_over += 1
        if self.balls_in_over < BALLS_PER_OVER:
            return False

        self.rotate_strike()
        self.previous_bowler = self.bowler
        self.bowler = None
        self.balls_in_over = 0
        return True
