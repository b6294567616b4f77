"""Pydantic schemas for every record the engine consumes or produces.

Records are strict: unknown fields are rejected (``extra="forbid"``) and
missing optional values stay ``None`` until a component chooses an explicit,
documented fallback. Produced records are frozen.

Consumed (from collaborators):
- Team: identity plus season scoring averages
- Game: schedule entry, final scores once complete
- MarketLine: optional consensus spread/total for a game

Produced:
- PredictionRecord: predicted scores, spread, total, win probability
- GradedBet / BacktestResult: graded picks for one historical game
- SimulationParams / SimulationResult: optimizer trial inputs and outputs
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from elo_betting_engine.models.numeric import round_to_step, win_percentage

DEFAULT_RATING = 1500.0


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    FINAL = "final"


class BetMarket(str, Enum):
    SPREAD = "spread"
    MONEYLINE = "moneyline"
    TOTAL = "total"


class LineSource(str, Enum):
    """Where the line a bet was graded against came from.

    MARKET: a real sportsbook line
    MODEL: the model's own predicted spread (self-referential backtest)
    BASELINE: the sport's fixed baseline total
    NONE: moneyline bets, which have no line
    """

    MARKET = "market"
    MODEL = "model"
    BASELINE = "baseline"
    NONE = "none"


class Pick(str, Enum):
    HOME = "home"
    AWAY = "away"
    OVER = "over"
    UNDER = "under"


class Outcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    PUSH = "push"


class ConfidenceTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _as_utc(value: datetime | None) -> datetime | None:
    """Normalize datetimes to aware UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Team(BaseModel):
    """A team as supplied by the schedule collaborator.

    Attributes:
        team_id: Unique team identifier
        abbreviation: Display abbreviation (e.g., "KC")
        name: Full display name
        rating: Current Elo rating (1500 for a new season)
        points_scored: Season points scored per game, None if unknown
        points_allowed: Season points allowed per game, None if unknown
        games_played: Completed games this season
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    team_id: str = Field(min_length=1)
    abbreviation: str = Field(min_length=1)
    name: str | None = None
    rating: float = DEFAULT_RATING
    points_scored: float | None = Field(default=None, ge=0)
    points_allowed: float | None = Field(default=None, ge=0)
    games_played: int = Field(default=0, ge=0)


class Game(BaseModel):
    """A scheduled or completed game.

    Final games must carry both scores. ``scheduled_at`` is normalized to
    UTC so games from feeds with and without offsets sort together.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    game_id: str = Field(min_length=1)
    home_team_id: str = Field(min_length=1)
    away_team_id: str = Field(min_length=1)
    scheduled_at: datetime
    status: GameStatus = GameStatus.SCHEDULED
    home_score: int | None = Field(default=None, ge=0)
    away_score: int | None = Field(default=None, ge=0)
    season: str | None = None
    week: int | None = Field(default=None, ge=0)

    @field_validator("scheduled_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @model_validator(mode="after")
    def check_participants_and_scores(self) -> "Game":
        if self.home_team_id == self.away_team_id:
            raise ValueError(f"Game {self.game_id}: home and away team are both {self.home_team_id}")
        if self.status == GameStatus.FINAL and (self.home_score is None or self.away_score is None):
            raise ValueError(f"Game {self.game_id}: final games require both scores")
        return self

    @property
    def is_final(self) -> bool:
        return (
            self.status == GameStatus.FINAL
            and self.home_score is not None
            and self.away_score is not None
        )

    @property
    def home_margin(self) -> int | None:
        """Home score minus away score, None before the game is final."""
        if not self.is_final:
            return None
        return self.home_score - self.away_score

    @property
    def total_points(self) -> int | None:
        if not self.is_final:
            return None
        return self.home_score + self.away_score

    @property
    def is_tie(self) -> bool:
        return self.is_final and self.home_score == self.away_score


class MarketLine(BaseModel):
    """Consensus market line for a game.

    Attributes:
        game_id: Game this line belongs to
        spread: Home-perspective spread (negative = home favored), None if not offered
        total: Combined points line, None if not offered
        captured_at: When the line was captured
        locked_at: When the line was locked before kickoff
        opening_spread: Opening spread, for line-movement display
        opening_total: Opening total, for line-movement display
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    game_id: str = Field(min_length=1)
    spread: float | None = None
    total: float | None = Field(default=None, gt=0)
    captured_at: datetime | None = None
    locked_at: datetime | None = None
    opening_spread: float | None = None
    opening_total: float | None = Field(default=None, gt=0)

    @field_validator("captured_at", "locked_at")
    @classmethod
    def normalize_timezone(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)

    @property
    def spread_movement(self) -> float | None:
        """Current spread minus opening spread (negative = moved toward home)."""
        if self.spread is None or self.opening_spread is None:
            return None
        return round(self.spread - self.opening_spread, 2)

    @property
    def total_movement(self) -> float | None:
        if self.total is None or self.opening_total is None:
            return None
        return round(self.total - self.opening_total, 2)

    @classmethod
    def consensus(
        cls,
        game_id: str,
        spreads: Sequence[float],
        totals: Sequence[float],
        captured_at: datetime | None = None,
        step: float = 0.5,
    ) -> "MarketLine":
        """Build a consensus line from several bookmakers' quotes.

        Each side is the mean of the quotes rounded to ``step``; a side with
        no quotes stays None.

        Example:
            >>> MarketLine.consensus("g1", [-3.0, -3.5, -3.0], [44.5, 45.0]).spread
            -3.0
        """
        spread = round_to_step(sum(spreads) / len(spreads), step) if spreads else None
        total = round_to_step(sum(totals) / len(totals), step) if totals else None
        return cls(game_id=game_id, spread=spread, total=total, captured_at=captured_at)


class ConfidenceAssessment(BaseModel):
    """Edge sizes and conviction tiers for one prediction.

    Spread/total edges are None when no market line exists; their tier is
    then None too. The moneyline edge needs no market.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    spread_edge: float | None
    total_edge: float | None
    moneyline_edge: float
    spread_tier: ConfidenceTier | None
    total_tier: ConfidenceTier | None
    moneyline_tier: ConfidenceTier


class PredictionRecord(BaseModel):
    """Pre-game prediction for one game.

    ``spread`` is away minus home (negative = home favored) after shrinkage;
    ``raw_spread`` is the unshrunk score difference. ``total`` is rounded to
    the sport's line step for display; over/under picks use ``raw_total``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    game_id: str
    home_rating: float
    away_rating: float
    predicted_home_score: float
    predicted_away_score: float
    raw_spread: float
    spread: float
    total: float
    home_win_probability: float = Field(ge=0.0, le=1.0)
    weather_adjustment: float = 0.0
    confidence: ConfidenceAssessment | None = None

    @property
    def raw_total(self) -> float:
        """Predicted home plus away score before line rounding."""
        return round(self.predicted_home_score + self.predicted_away_score, 6)

    @property
    def rating_diff(self) -> float:
        return self.home_rating - self.away_rating

    @property
    def favored_side(self) -> Pick | None:
        """Side the model favors by spread, None for a pick'em."""
        if self.spread < 0:
            return Pick.HOME
        if self.spread > 0:
            return Pick.AWAY
        return None


class GradedBet(BaseModel):
    """A single graded pick for one market."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    market: BetMarket
    line_source: LineSource
    line: float | None
    pick: Pick
    outcome: Outcome


class BacktestResult(BaseModel):
    """One historical game replayed through the model.

    Self-referential grades (``spread_vs_model``, ``total_vs_baseline``) and
    market grades (``spread_vs_market``, ``total_vs_market``) are kept in
    separate fields; market grades are None when the game had no line.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    game_id: str
    scheduled_at: datetime
    season: str | None = None
    week: int | None = None
    home_team_id: str
    away_team_id: str
    home_team: str
    away_team: str
    prediction: PredictionRecord
    market_spread: float | None = None
    market_total: float | None = None
    actual_home_score: int
    actual_away_score: int
    spread_vs_model: GradedBet
    spread_vs_market: GradedBet | None = None
    moneyline: GradedBet
    total_vs_baseline: GradedBet
    total_vs_market: GradedBet | None = None

    @property
    def home_rating(self) -> float:
        return self.prediction.home_rating

    @property
    def away_rating(self) -> float:
        return self.prediction.away_rating

    @property
    def actual_spread(self) -> int:
        """Away minus home, same sign convention as the predicted spread."""
        return self.actual_away_score - self.actual_home_score

    @property
    def actual_total(self) -> int:
        return self.actual_home_score + self.actual_away_score

    @property
    def home_won(self) -> bool:
        return self.actual_home_score > self.actual_away_score

    @property
    def has_market_line(self) -> bool:
        return self.market_spread is not None or self.market_total is not None


class SimulationParams(BaseModel):
    """Tunable model constants for one backtest or optimizer trial.

    Attributes:
        rating_to_points: Points of margin per 100 rating points
        home_advantage: Home advantage in points (split across both sides)
        spread_shrinkage: Fraction the spread is shrunk toward 0 (0 = none)
        rating_cap: Max total rating adjustment in points (0 = uncapped)
        min_spread: Only bet spreads with |spread| >= this
        max_spread: Only bet spreads with |spread| <= this
        stats_regression: Fraction scoring averages regress to league average
        weather_coefficient: Points removed from the total per weather impact point
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    rating_to_points: float = Field(default=5.93, ge=0)
    home_advantage: float = 2.28
    spread_shrinkage: float = Field(default=0.0, ge=0.0, le=1.0)
    rating_cap: float = Field(default=0.0, ge=0)
    min_spread: float = Field(default=0.0, ge=0)
    max_spread: float = Field(default=100.0, ge=0)
    stats_regression: float = Field(default=0.3, ge=0.0, le=1.0)
    weather_coefficient: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def check_spread_window(self) -> "SimulationParams":
        if self.min_spread > self.max_spread:
            raise ValueError(
                f"min_spread ({self.min_spread}) must not exceed max_spread ({self.max_spread})"
            )
        return self

    def key(self) -> tuple[float, ...]:
        """Hashable identity used to de-duplicate parameter sets."""
        return tuple(getattr(self, name) for name in type(self).model_fields)


class SimulationResult(BaseModel):
    """Outcome of one optimizer trial.

    ``total_graded`` counts wins, losses and pushes; it can be below
    ``total_games`` because of the spread window and missing lines.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    params: SimulationParams
    market: BetMarket = BetMarket.SPREAD
    wins: int = Field(ge=0)
    losses: int = Field(ge=0)
    pushes: int = Field(ge=0)
    total_games: int = Field(ge=0)
    stake: float = Field(default=110.0, gt=0)
    payout: float = Field(default=100.0, gt=0)

    @model_validator(mode="after")
    def check_counts(self) -> "SimulationResult":
        if self.wins + self.losses + self.pushes > self.total_games:
            raise ValueError(
                f"graded bets ({self.wins + self.losses + self.pushes}) exceed games ({self.total_games})"
            )
        return self

    @computed_field
    @property
    def total_graded(self) -> int:
        return self.wins + self.losses + self.pushes

    @computed_field
    @property
    def bets(self) -> int:
        """Decided bets (pushes return the stake)."""
        return self.wins + self.losses

    @computed_field
    @property
    def win_pct(self) -> float:
        return win_percentage(self.wins, self.losses)

    @computed_field
    @property
    def profit(self) -> float:
        return self.wins * self.payout - self.losses * self.stake


class EngineDataset(BaseModel):
    """Input bundle handed to the engine by the surrounding service.

    Attributes:
        teams: Teams for the sport/season
        games: Games (scheduled and final)
        lines: Market lines, at most one per game
        weather: Point-valued weather impact per game id (outdoor games only)
    """

    model_config = ConfigDict(extra="forbid")

    teams: list[Team] = Field(default_factory=list)
    games: list[Game]
    lines: list[MarketLine] = Field(default_factory=list)
    weather: dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_unique_lines(self) -> "EngineDataset":
        seen: set[str] = set()
        for line in self.lines:
            if line.game_id in seen:
                raise ValueError(f"Duplicate market line for game {line.game_id}")
            seen.add(line.game_id)
        return self

    def lines_by_game(self) -> dict[str, MarketLine]:
        return {line.game_id: line for line in self.lines}
