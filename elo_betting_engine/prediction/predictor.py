"""Score, spread, total and win-probability prediction from Elo ratings.

The model blends two signals:
- Scoring form: each side's expected points start from the mean of its own
  offense and the opponent's defense, after both averages are regressed
  toward the league average.
- Rating strength: the Elo difference is converted to points
  (``rating_to_points`` per 100 rating points) and split across both sides.

Home advantage, weather and rounding are applied last. Every prediction
is a pure function of its inputs.
"""

from dataclasses import dataclass

from elo_betting_engine.models.numeric import round_to_step
from elo_betting_engine.models.schema import DEFAULT_RATING, PredictionRecord, SimulationParams, Team
from elo_betting_engine.ratings.elo import expected_score
from elo_betting_engine.sports import SportProfile


@dataclass(frozen=True)
class TeamStrength:
    """Inputs describing one side of a game at prediction time.

    Attributes:
        rating: Pre-game Elo rating
        points_scored: Points scored per game
        points_allowed: Points allowed per game
    """

    rating: float
    points_scored: float
    points_allowed: float

    @classmethod
    def from_team(cls, team: Team | None, league_avg: float, rating: float | None = None) -> "TeamStrength":
        """Build from a Team record, filling missing averages with the league average."""
        if team is None:
            return cls(
                rating=DEFAULT_RATING if rating is None else rating,
                points_scored=league_avg,
                points_allowed=league_avg,
            )
        return cls(
            rating=team.rating if rating is None else rating,
            points_scored=league_avg if team.points_scored is None else team.points_scored,
            points_allowed=league_avg if team.points_allowed is None else team.points_allowed,
        )


class ScorePredictor:
    """Predicts final scores for a game between two rated teams.

    Args:
        profile: Sport constants (league average, rounding steps, home edge)
        params: Model constants; defaults to the sport's shipped values

    Example:
        >>> predictor = ScorePredictor(get_sport_profile("nfl"))
        >>> home = TeamStrength(rating=1550, points_scored=24, points_allowed=20)
        >>> away = TeamStrength(rating=1500, points_scored=21, points_allowed=23)
        >>> predictor.predict("g1", home, away).spread
        -3.5
    """

    def __init__(self, profile: SportProfile, params: SimulationParams | None = None) -> None:
        self.profile = profile
        self.params = params if params is not None else profile.default_params

    def _regress(self, value: float) -> float:
        weight = self.params.stats_regression
        return value * (1 - weight) + self.profile.league_avg_points * weight

    def _rating_adjustment(self, home_rating: float, away_rating: float) -> float:
        """Points added to home (and removed from away) for the rating gap."""
        adjustment = (home_rating - away_rating) * self.params.rating_to_points / 100 / 2
        half_cap = self.params.rating_cap / 2
        if half_cap > 0:
            adjustment = max(-half_cap, min(half_cap, adjustment))
        return adjustment

    def predict(
        self,
        game_id: str,
        home: TeamStrength,
        away: TeamStrength,
        weather_impact: float = 0.0,
    ) -> PredictionRecord:
        """Predict one game.

        Args:
            game_id: Game being predicted
            home: Home side ratings and scoring averages
            away: Away side ratings and scoring averages
            weather_impact: Weather impact points (0 for indoor/unknown)

        Returns:
            PredictionRecord with scores, spread (away - home), total and
            home win probability
        """
        params = self.params
        profile = self.profile

        home_score = (self._regress(home.points_scored) + self._regress(away.points_allowed)) / 2
        away_score = (self._regress(away.points_scored) + self._regress(home.points_allowed)) / 2

        adjustment = self._rating_adjustment(home.rating, away.rating)
        home_score += adjustment
        away_score -= adjustment

        home_score += params.home_advantage / 2
        away_score -= params.home_advantage / 2

        weather_adjustment = weather_impact * params.weather_coefficient
        home_score -= weather_adjustment / 2
        away_score -= weather_adjustment / 2

        home_score = round_to_step(max(0.0, home_score), profile.score_granularity)
        away_score = round_to_step(max(0.0, away_score), profile.score_granularity)

        raw_spread = round_to_step(away_score - home_score, profile.score_granularity)
        spread = round_to_step(raw_spread * (1 - params.spread_shrinkage), profile.line_granularity)
        total = round_to_step(home_score + away_score, profile.line_granularity)

        win_probability = expected_score(
            home.rating + profile.probability_home_advantage, away.rating
        )

        return PredictionRecord(
            game_id=game_id,
            home_rating=home.rating,
            away_rating=away.rating,
            predicted_home_score=home_score,
            predicted_away_score=away_score,
            raw_spread=raw_spread,
            spread=spread,
            total=total,
            home_win_probability=win_probability,
            weather_adjustment=weather_adjustment,
        )

    def predict_teams(
        self,
        game_id: str,
        home: Team | None,
        away: Team | None,
        home_rating: float | None = None,
        away_rating: float | None = None,
        weather_impact: float = 0.0,
    ) -> PredictionRecord:
        """Predict from Team records, overriding their ratings when given."""
        league_avg = self.profile.league_avg_points
        return self.predict(
            game_id,
            TeamStrength.from_team(home, league_avg, home_rating),
            TeamStrength.from_team(away, league_avg, away_rating),
            weather_impact=weather_impact,
        )
