"""Per-sport constants for the rating and scoring model.

The same formulas serve every sport; only these constants differ. Default
parameter values are the calibrated/optimized values the production model
shipped with for each league.
"""

from dataclasses import dataclass, field
from enum import Enum

from elo_betting_engine.models.schema import SimulationParams


class Sport(str, Enum):
    NFL = "nfl"
    NBA = "nba"
    NHL = "nhl"
    CBB = "cbb"


@dataclass(frozen=True)
class TierThresholds:
    """Edge needed for a high or medium conviction tier.

    Spread/total edges are in points (goals for hockey); moneyline edges are
    percentage points of win probability away from 50%.
    """

    high: float
    medium: float

    def __post_init__(self) -> None:
        if self.medium > self.high:
            raise ValueError(f"medium threshold {self.medium} exceeds high threshold {self.high}")


@dataclass(frozen=True)
class SportProfile:
    """Constants describing one sport.

    Attributes:
        sport: Sport identifier
        league_avg_points: Average points (goals) per team per game
        k_factor: Elo K-factor
        margin_scaling: Scale K by a logarithmic margin-of-victory multiplier
        rating_home_advantage: Home bonus in rating units for rating updates
        probability_home_advantage: Home bonus in rating units for win probability
        baseline_total: Total used for O/U grading when no market total exists
        score_granularity: Rounding step for predicted scores
        line_granularity: Rounding step for predicted spreads and totals
        allows_ties: Whether a tied final is a legitimate result to grade
        outdoor: Whether weather adjustments apply
        default_params: Model constants used when a run does not supply any
        spread_tiers / total_tiers / moneyline_tiers: Conviction thresholds
    """

    sport: Sport
    league_avg_points: float
    k_factor: float = 20.0
    margin_scaling: bool = True
    rating_home_advantage: float = 48.0
    probability_home_advantage: float = 48.0
    baseline_total: float = 44.0
    score_granularity: float = 0.1
    line_granularity: float = 0.5
    allows_ties: bool = False
    outdoor: bool = False
    default_params: SimulationParams = field(default_factory=SimulationParams)
    spread_tiers: TierThresholds = TierThresholds(high=3.0, medium=1.5)
    total_tiers: TierThresholds = TierThresholds(high=3.0, medium=1.5)
    moneyline_tiers: TierThresholds = TierThresholds(high=15.0, medium=7.0)


NFL = SportProfile(
    sport=Sport.NFL,
    league_avg_points=22.0,
    baseline_total=44.0,
    line_granularity=0.5,
    outdoor=True,
    default_params=SimulationParams(
        rating_to_points=5.93,
        home_advantage=2.28,
        spread_shrinkage=0.55,
        rating_cap=4.0,
        min_spread=0.0,
        max_spread=20.0,
        stats_regression=0.3,
        weather_coefficient=3.0,
    ),
)

NBA = SportProfile(
    sport=Sport.NBA,
    league_avg_points=112.0,
    baseline_total=224.0,
    line_granularity=0.1,
    default_params=SimulationParams(
        rating_to_points=4.0,
        home_advantage=3.0,
        spread_shrinkage=0.55,
        rating_cap=20.0,
        max_spread=40.0,
        stats_regression=0.3,
    ),
    spread_tiers=TierThresholds(high=2.5, medium=1.0),
    total_tiers=TierThresholds(high=5.0, medium=2.0),
)

NHL = SportProfile(
    sport=Sport.NHL,
    league_avg_points=3.1,
    baseline_total=6.2,
    line_granularity=0.5,
    default_params=SimulationParams(
        rating_to_points=1.8,
        home_advantage=0.25,
        spread_shrinkage=0.15,
        rating_cap=3.0,
        max_spread=5.0,
        stats_regression=0.3,
    ),
    spread_tiers=TierThresholds(high=0.5, medium=0.2),
    total_tiers=TierThresholds(high=0.5, medium=0.2),
    moneyline_tiers=TierThresholds(high=12.0, medium=5.0),
)

CBB = SportProfile(
    sport=Sport.CBB,
    league_avg_points=71.0,
    baseline_total=142.0,
    line_granularity=0.1,
    default_params=SimulationParams(
        rating_to_points=6.0,
        home_advantage=4.5,
        spread_shrinkage=0.4,
        rating_cap=20.0,
        max_spread=40.0,
        stats_regression=0.3,
    ),
    spread_tiers=TierThresholds(high=2.5, medium=1.0),
    total_tiers=TierThresholds(high=5.0, medium=3.0),
)

SPORT_PROFILES: dict[Sport, SportProfile] = {
    Sport.NFL: NFL,
    Sport.NBA: NBA,
    Sport.NHL: NHL,
    Sport.CBB: CBB,
}


def get_sport_profile(sport: str | Sport) -> SportProfile:
    """Look up the profile for a sport.

    Args:
        sport: Sport enum or its string value (case-insensitive)

    Returns:
        The sport's SportProfile

    Raises:
        ValueError: If the sport is not supported
    """
    try:
        key = sport if isinstance(sport, Sport) else Sport(sport.lower())
    except ValueError:
        supported = ", ".join(s.value for s in Sport)
        raise ValueError(f"Unsupported sport {sport!r}. Supported: {supported}") from None
    return SPORT_PROFILES[key]
