"""Least-squares calibration of the rating-to-points constants.

Fits final margins against pre-game rating differences:

    home_margin = slope * rating_diff + intercept

``slope * 100`` becomes ``rating_to_points`` (points per 100 rating points)
and the intercept is the home advantage in points.

Example:
    >>> calibrator = Calibrator(get_sport_profile("nfl"))
    >>> result = calibrator.calibrate(games)
    >>> params = result.apply_to(profile.default_params)
    >>> print(f"{result.rating_to_points} pts/100 Elo, R^2 {result.r_squared}")
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

import numpy as np
from sklearn.linear_model import LinearRegression

from elo_betting_engine.models.schema import Game, SimulationParams
from elo_betting_engine.models.timeline import completed_games, iter_slates
from elo_betting_engine.monitoring import get_logger
from elo_betting_engine.ratings.elo import RatingUpdater
from elo_betting_engine.ratings.store import RatingStore
from elo_betting_engine.sports import SportProfile

log = get_logger()


@dataclass(frozen=True)
class CalibrationPoint:
    """Pre-game rating difference and final margin for one game."""

    game_id: str
    rating_diff: float
    margin: int
    home_rating: float
    away_rating: float


@dataclass(frozen=True)
class CalibrationResult:
    """Fitted constants.

    Attributes:
        rating_to_points: Points of margin per 100 rating points (slope * 100)
        home_advantage: Home advantage in points (intercept)
        r_squared: Coefficient of determination, 0 when margins have no variance
        sample_size: Games used in the fit
    """

    rating_to_points: float
    home_advantage: float
    r_squared: float
    sample_size: int

    def apply_to(self, params: SimulationParams) -> SimulationParams:
        """Copy of ``params`` with the fitted constants."""
        return params.model_copy(
            update={"rating_to_points": self.rating_to_points, "home_advantage": self.home_advantage}
        )


def collect_calibration_points(
    games: Iterable[Game],
    profile: SportProfile,
    initial_ratings: Mapping[str, float] | None = None,
) -> list[CalibrationPoint]:
    """Ratings-only chronological pass recording pre-game rating gaps.

    Games sharing a start time see the ratings from before that time.
    """
    store = RatingStore(initial=initial_ratings)
    updater = RatingUpdater.for_sport(profile)
    points: list[CalibrationPoint] = []

    for slate in iter_slates(completed_games(games)):
        for game in slate:
            home_rating = store.get(game.home_team_id)
            away_rating = store.get(game.away_team_id)
            points.append(
                CalibrationPoint(
                    game_id=game.game_id,
                    rating_diff=home_rating - away_rating,
                    margin=game.home_margin,
                    home_rating=home_rating,
                    away_rating=away_rating,
                )
            )
        for game in slate:
            updater.apply(store, game)

    return points


def fit_calibration(points: Sequence[CalibrationPoint]) -> CalibrationResult:
    """Fit margin against rating difference by ordinary least squares.

    Empty input, or rating differences with no variance (every game played
    between equally rated teams), yields zero constants instead of an error.
    """
    n = len(points)
    x = np.array([p.rating_diff for p in points], dtype=float)
    y = np.array([p.margin for p in points], dtype=float)

    if n == 0 or np.allclose(x, x[0]):
        log.warning("calibration_degenerate", sample_size=n)
        return CalibrationResult(rating_to_points=0.0, home_advantage=0.0, r_squared=0.0, sample_size=n)

    model = LinearRegression()
    model.fit(x.reshape(-1, 1), y)
    slope = float(model.coef_[0])
    intercept = float(model.intercept_)

    predicted = slope * x + intercept
    ss_total = float(np.sum((y - y.mean()) ** 2))
    ss_residual = float(np.sum((y - predicted) ** 2))
    r_squared = 0.0 if ss_total == 0 else 1 - ss_residual / ss_total

    return CalibrationResult(
        rating_to_points=round(slope * 100, 2),
        home_advantage=round(intercept, 2),
        r_squared=round(r_squared, 3),
        sample_size=n,
    )


class Calibrator:
    """Runs the ratings pass and the fit for one sport."""

    def __init__(self, profile: SportProfile) -> None:
        self.profile = profile

    def calibrate(
        self,
        games: Iterable[Game],
        initial_ratings: Mapping[str, float] | None = None,
    ) -> CalibrationResult:
        points = collect_calibration_points(games, self.profile, initial_ratings)
        result = fit_calibration(points)
        log.info(
            "calibration_completed",
            sport=self.profile.sport.value,
            rating_to_points=result.rating_to_points,
            home_advantage=result.home_advantage,
            r_squared=result.r_squared,
            sample_size=result.sample_size,
        )
        return result
