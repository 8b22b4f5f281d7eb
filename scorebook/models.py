from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from scorebook.config import settings


BALLS_PER_OVER = 6


def format_overs(legal_balls: int) -> str:
    """Render a legal-ball count in overs.balls notation, e.g. 110 -> '18.2'."""
    return f"{legal_balls // BALLS_PER_OVER}.{legal_balls % BALLS_PER_OVER}"


def run_rate(runs: int, legal_balls: int) -> float:
    """Runs per six legal balls."""
    if legal_balls <= 0:
        return 0.0
    return round(runs * BALLS_PER_OVER / legal_balls, 2)


# =========================================================================== #
#  Enumerations
# =========================================================================== #


class DismissalKind(str, Enum):
    """Closed set of ways a batter's innings can end."""

    BOWLED = "bowled"
    CAUGHT = "caught"
    LBW = "lbw"
    RUN_OUT = "run_out"
    STUMPED = "stumped"
    HIT_WICKET = "hit_wicket"
    RETIRED = "retired"


class TossDecision(str, Enum):
    BAT = "bat"
    BOWL = "bowl"


class MatchFormat(str, Enum):
    T10 = "T10"
    T20 = "T20"
    ODI = "ODI"
    CUSTOM = "custom"


FORMAT_OVERS: dict[MatchFormat, int] = {
    MatchFormat.T10: 10,
    MatchFormat.T20: 20,
    MatchFormat.ODI: 50,
}


class MatchPhase(str, Enum):
    """Lifecycle of a two-innings limited-overs match."""

    NOT_STARTED = "not_started"
    INNINGS_1_IN_PROGRESS = "innings_1_in_progress"
    INNINGS_1_COMPLETE = "innings_1_complete"
    INNINGS_2_IN_PROGRESS = "innings_2_in_progress"
    MATCH_COMPLETE = "match_complete"


class InningsEndReason(str, Enum):
    ALL_OUT = "all_out"
    OVERS_COMPLETE = "overs_complete"
    TARGET_REACHED = "target_reached"


class ResultKind(str, Enum):
    RUNS = "runs"
    WICKETS = "wickets"
    TIE = "tie"


# =========================================================================== #
#  Immutable configuration
# =========================================================================== #


class TeamConfig(BaseModel):
    """A side: its name and ordered roster of player identifiers."""

    model_config = {"frozen": True}

    name: str = Field(..., min_length=1)
    players: list[str] = Field(..., min_length=2)

    @field_validator("players")
    @classmethod
    def _unique_players(cls, players: list[str]) -> list[str]:
        if len(set(players)) != len(players):
            raise ValueError("roster contains duplicate player ids")
        return players


class MatchConfig(BaseModel):
    """
    Everything about a match that is fixed before the first ball.

    Penalty runs are copied from settings when the config is built so that
    replaying a stored match never depends on the current environment.
    """

    model_config = {"frozen": True}

    team1: TeamConfig
    team2: TeamConfig
    toss_winner: str
    toss_decision: TossDecision
    format: MatchFormat = MatchFormat.T20
    total_overs: int = Field(..., gt=0)
    max_overs_per_bowler: Optional[int] = Field(None, gt=0)
    wide_penalty: int = Field(default_factory=lambda: settings.wide_penalty, ge=0)
    no_ball_penalty: int = Field(default_factory=lambda: settings.no_ball_penalty, ge=0)
    started_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _resolve_total_overs(cls, data):
        if isinstance(data, dict) and data.get("total_overs") is None:
            data = dict(data)
            fmt = data.get("format", MatchFormat.T20)
            try:
                fmt = MatchFormat(fmt)
            except ValueError:
                # Let field validation report the bad format
                return data
            data["total_overs"] = FORMAT_OVERS.get(fmt, settings.default_overs)
        return data

    @model_validator(mode="after")
    def _check_sides(self) -> "MatchConfig":
        if self.team1.name == self.team2.name:
            raise ValueError("teams must have different names")
        shared = set(self.team1.players) & set(self.team2.players)
        if shared:
            raise ValueError(f"players listed for both teams: {sorted(shared)}")
        if self.toss_winner not in (self.team1.name, self.team2.name):
            raise ValueError(f"toss winner {self.toss_winner!r} is not playing")
        return self

    @property
    def batting_first(self) -> TeamConfig:
        winner_bats = self.toss_decision == TossDecision.BAT
        if (self.toss_winner == self.team1.name) == winner_bats:
            return self.team1
        return self.team2

    @property
    def bowling_first(self) -> TeamConfig:
        return self.team2 if self.batting_first is self.team1 else self.team1

    @property
    def max_legal_balls(self) -> int:
        return self.total_overs * BALLS_PER_OVER

    def batting_side(self, innings: int) -> TeamConfig:
        return self.batting_first if innings == 1 else self.bowling_first

    def bowling_side(self, innings: int) -> TeamConfig:
        return self.bowling_first if innings == 1 else self.batting_first

    def team_of(self, player: str) -> Optional[TeamConfig]:
        for team in (self.team1, self.team2):
            if player in team.players:
                return team
        return None


class InningsSetup(BaseModel):
    """Opening pair and opening bowler chosen before an innings starts."""

    model_config = {"frozen": True}

    striker: str
    non_striker: str
    bowler: str


# =========================================================================== #
#  Deliveries
# =========================================================================== #


class Delivery(BaseModel):
    """
    Scoring intent for the next ball, as entered by the scorer.

    `striker`, `non_striker` and `bowler` default to whoever currently
    occupies the slot; they must be given when the slot is vacant (a new
    batter after a wicket, a new bowler after an over).
    """

    runs: int = Field(0, ge=0, description="Runs run, or 4/6 for a boundary")
    wide: bool = False
    no_ball: bool = False
    bye: bool = False
    leg_bye: bool = False
    is_wicket: bool = False
    dismissal: Optional[DismissalKind] = None
    fielder: Optional[str] = None
    dismissed: Optional[str] = Field(None, description="Batter out, if not the striker")
    striker: Optional[str] = None
    non_striker: Optional[str] = None
    bowler: Optional[str] = None


class Ball(BaseModel):
    """One delivery as stored in the ledger. Never mutated after append."""

    model_config = {"frozen": True}

    index: int = Field(..., ge=0, description="Position in the ledger")
    innings: int = Field(..., ge=1, le=2)
    batting_team: str
    striker: str
    non_striker: str
    bowler: str
    runs: int = Field(0, ge=0)
    wide: bool = False
    no_ball: bool = False
    bye: bool = False
    leg_bye: bool = False
    is_wicket: bool = False
    dismissal: Optional[DismissalKind] = None
    fielder: Optional[str] = None
    dismissed: Optional[str] = None
    recorded_at: Optional[datetime] = None

    @property
    def is_legal(self) -> bool:
        return not (self.wide or self.no_ball)

    @property
    def player_out(self) -> Optional[str]:
        if not self.is_wicket:
            return None
        return self.dismissed or self.striker


class DeliveryCredit(BaseModel):
    """Where the runs of a single delivery go."""

    model_config = {"frozen": True}

    batter_runs: int = 0
    wides: int = 0
    no_balls: int = 0
    byes: int = 0
    leg_byes: int = 0
    bowler_runs: int = 0
    is_legal: bool = True
    is_four: bool = False
    is_six: bool = False

    @property
    def extras(self) -> int:
        return self.wides + self.no_balls + self.byes + self.leg_byes

    @property
    def total(self) -> int:
        return self.batter_runs + self.extras


class Dismissal(BaseModel):
    """A resolved wicket: who is out, how, and who gets the credit."""

    model_config = {"frozen": True}

    batter: str
    kind: DismissalKind
    bowler: str
    fielder: Optional[str] = None
    credited_to_bowler: bool = False
    fielding_credit: Optional[str] = None  # "catches", "stumpings" or "run_outs"

    @property
    def counts_as_out(self) -> bool:
        return self.kind != DismissalKind.RETIRED


# =========================================================================== #
#  Derived innings state
# =========================================================================== #


class ExtrasBreakdown(BaseModel):
    wides: int = 0
    no_balls: int = 0
    byes: int = 0
    leg_byes: int = 0

    @property
    def total(self) -> int:
        return self.wides + self.no_balls + self.byes + self.leg_byes


class FallOfWicket(BaseModel):
    """Record of a wicket falling."""

    wicket_number: int
    batter: str
    batter_runs: int
    team_score: int
    overs: str
    bowler: str
    how: DismissalKind
    partner: Optional[str] = None


class Partnership(BaseModel):
    """Runs and legal balls added by a pair since the previous wicket."""

    wicket: int  # 1st wicket stand, 2nd wicket stand, etc.
    batters: list[str] = Field(default_factory=list)
    runs: int = 0
    balls: int = 0
    unbroken: bool = True


class BatterCard(BaseModel):
    """Per-batter innings figures."""

    name: str
    position: int
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    dots: int = 0
    is_out: bool = False
    dismissal: Optional[Dismissal] = None

    @property
    def strike_rate(self) -> float:
        if self.balls_faced == 0:
            return 0.0
        return round((self.runs / self.balls_faced) * 100, 2)


class BowlerCard(BaseModel):
    """Per-bowler innings figures."""

    name: str
    balls_bowled: int = 0
    runs_conceded: int = 0
    wickets: int = 0
    maidens: int = 0
    dots: int = 0
    wides: int = 0
    no_balls: int = 0

    @property
    def overs_display(self) -> str:
        return format_overs(self.balls_bowled)

    @property
    def economy(self) -> float:
        return run_rate(self.runs_conceded, self.balls_bowled)

    @property
    def figures_str(self) -> str:
        return f"{self.wickets}/{self.runs_conceded} ({self.overs_display})"


class InningsState(BaseModel):
    """One team's innings, folded from its deliveries."""

    number: int
    batting_team: str
    bowling_team: str
    score: int = 0
    wickets: int = 0
    legal_balls: int = 0
    extras: ExtrasBreakdown = Field(default_factory=ExtrasBreakdown)
    fall_of_wickets: list[FallOfWicket] = Field(default_factory=list)
    partnerships: list[Partnership] = Field(default_factory=list)
    batters: dict[str, BatterCard] = Field(default_factory=dict)
    bowlers: dict[str, BowlerCard] = Field(default_factory=dict)
    batting_order: list[str] = Field(default_factory=list)
    over_runs_history: list[int] = Field(default_factory=list)
    current_over_runs: int = 0
    fours: int = 0
    sixes: int = 0
    is_complete: bool = False
    end_reason: Optional[InningsEndReason] = None

    @property
    def overs_completed(self) -> int:
        return self.legal_balls // BALLS_PER_OVER

    @property
    def balls_in_current_over(self) -> int:
        return self.legal_balls % BALLS_PER_OVER

    @property
    def overs_display(self) -> str:
        return format_overs(self.legal_balls)

    @property
    def run_rate(self) -> float:
        return run_rate(self.score, self.legal_balls)

    @property
    def score_display(self) -> str:
        return f"{self.score}/{self.wickets}"

    @property
    def current_partnership(self) -> Optional[Partnership]:
        if self.partnerships and self.partnerships[-1].unbroken:
            return self.partnerships[-1]
        return None


class MatchResult(BaseModel):
    kind: ResultKind
    winner: Optional[str] = None
    margin: Optional[int] = None

    @property
    def description(self) -> str:
        if self.kind == ResultKind.TIE:
            return "Match tied"
        unit = "run" if self.kind == ResultKind.RUNS else "wicket"
        plural = "" if self.margin == 1 else "s"
        return f"{self.winner} won by {self.margin} {unit}{plural}"


class MatchSnapshot(BaseModel):
    """
    The full derived state of a match after replaying its ledger.

    Every field is recomputed from the ledger, the config and the innings
    setups; a snapshot is never edited in place by the engine.
    """

    config: MatchConfig
    phase: MatchPhase = MatchPhase.NOT_STARTED
    current_innings: int = 1
    innings: list[InningsState] = Field(default_factory=list)
    striker: Optional[str] = None
    non_striker: Optional[str] = None
    bowler: Optional[str] = None
    previous_bowler: Optional[str] = None
    first_innings_score: Optional[int] = None
    result: Optional[MatchResult] = None
    man_of_the_match: Optional[str] = None
    ball_count: int = 0
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.phase == MatchPhase.MATCH_COMPLETE

    @property
    def winner(self) -> Optional[str]:
        return self.result.winner if self.result else None

    @property
    def target(self) -> Optional[int]:
        if self.first_innings_score is None:
            return None
        return self.first_innings_score + 1

    @property
    def current(self) -> Optional[InningsState]:
        if not self.innings:
            return None
        return self.innings[-1]

    @property
    def batting_team(self) -> str:
        return self.config.batting_side(self.current_innings).name

    @property
    def bowling_team(self) -> str:
        return self.config.bowling_side(self.current_innings).name

    @property
    def is_in_progress(self) -> bool:
        return self.phase in (MatchPhase.INNINGS_1_IN_PROGRESS, MatchPhase.INNINGS_2_IN_PROGRESS)

    @property
    def needs_batter(self) -> bool:
        return self.is_in_progress and (self.striker is None or self.non_striker is None)

    @property
    def needs_bowler(self) -> bool:
        return self.is_in_progress and self.bowler is None

    @property
    def current_run_rate(self) -> float:
        inn = self.current
        return inn.run_rate if inn else 0.0

    @property
    def runs_needed(self) -> Optional[int]:
        if self.target is None or len(self.innings) < 2:
            return None
        return max(self.target - self.innings[1].score, 0)

    @property
    def balls_remaining(self) -> int:
        inn = self.current
        used = inn.legal_balls if inn else 0
        return max(self.config.max_legal_balls - used, 0)

    @property
    def required_run_rate(self) -> Optional[float]:
        needed = self.runs_needed
        if needed is None:
            return None
        if self.balls_remaining == 0:
            return 0.0
        return run_rate(needed, self.balls_remaining)


# =========================================================================== #
#  Persistence shape
# =========================================================================== #


class MatchRecord(BaseModel):
    """Lossless serialized form of a match: inputs only, no derived fields."""

    config: MatchConfig
    balls: list[Ball] = Field(default_factory=list)
    setups: dict[int, InningsSetup] = Field(default_factory=dict)
    man_of_the_match: Optional[str] = None


# =========================================================================== #
#  Career statistics
# =========================================================================== #


class BowlingFigures(BaseModel):
    model_config = {"frozen": True}

    wickets: int
    runs: int

    def is_better_than(self, other: Optional["BowlingFigures"]) -> bool:
        """More wickets wins; equal wickets are separated by fewer runs."""
        if other is None:
            return True
        if self.wickets != other.wickets:
            return self.wickets > other.wickets
        return self.runs < other.runs

    def __str__(self) -> str:
        return f"{self.wickets}/{self.runs}"


class PlayerStats(BaseModel):
    """
    Cumulative career totals for one player.

    Rates are derived on read from the totals and are never stored.
    """

    player: str
    matches: int = 0

    # Batting
    innings_batted: int = 0
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    times_out: int = 0
    highest_score: int = 0
    fifties: int = 0
    hundreds: int = 0
    ducks: int = 0

    # Bowling
    wickets: int = 0
    balls_bowled: int = 0
    runs_conceded: int = 0
    best_bowling: Optional[BowlingFigures] = None
    dot_balls: int = 0
    maidens: int = 0

    # Fielding
    catches: int = 0
    run_outs: int = 0
    stumpings: int = 0

    man_of_the_match: int = 0

    @property
    def batting_average(self) -> Optional[float]:
        if self.times_out == 0:
            return None
        return round(self.runs / self.times_out, 2)

    @property
    def strike_rate(self) -> float:
        if self.balls_faced == 0:
            return 0.0
        return round((self.runs / self.balls_faced) * 100, 2)

    @property
    def economy(self) -> float:
        return run_rate(self.runs_conceded, self.balls_bowled)

    @property
    def bowling_average(self) -> Optional[float]:
        if self.wickets == 0:
            return None
        return round(self.runs_conceded / self.wickets, 2)

    @property
    def overs_bowled(self) -> str:
        return format_overs(self.balls_bowled)
