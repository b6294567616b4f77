"""Elo rating updates after completed games.

Expected score follows the standard logistic Elo curve:
    E_home = 1 / (1 + 10 ** ((away - (home + home_advantage)) / 400))

After a game each side moves by K * (actual - expected), where actual is
1 / 0 / 0.5 and K is optionally scaled by a margin-of-victory multiplier
so blowouts move ratings more than one-score games (logarithmically, so a
40-point rout is not worth four 10-point wins).
"""

import math
from dataclasses import dataclass

from elo_betting_engine.models.schema import Game
from elo_betting_engine.ratings.store import RatingStore
from elo_betting_engine.sports import SportProfile


def expected_score(rating: float, opponent_rating: float) -> float:
    """Probability that a side rated ``rating`` beats ``opponent_rating``.

    Example:
        >>> expected_score(1500, 1500)
        0.5
        >>> round(expected_score(1600, 1500), 3)
        0.64
    """
    return 1.0 / (1.0 + math.pow(10.0, (opponent_rating - rating) / 400.0))


def margin_multiplier(margin: float) -> float:
    """K-factor multiplier for a final margin: ln(|margin| + 1) * 0.7 + 0.8.

    A margin of 0 (tie) returns 1.0.
    """
    if margin == 0:
        return 1.0
    return math.log(abs(margin) + 1) * 0.7 + 0.8


@dataclass(frozen=True)
class RatingUpdate:
    """Result of rating one completed game.

    Attributes:
        home_rating: Home rating after the game
        away_rating: Away rating after the game
        home_expected: Pre-game expected score for the home side
        home_actual: 1.0 win, 0.5 tie, 0.0 loss
        k_factor: K actually applied (after margin scaling)
    """

    home_rating: float
    away_rating: float
    home_expected: float
    home_actual: float
    k_factor: float


class RatingUpdater:
    """Applies Elo updates for completed games.

    Args:
        k_factor: Base K-factor
        home_advantage: Home bonus in rating units when computing expectation
        margin_scaling: Multiply K by ``margin_multiplier(margin)``
        round_ratings: Round new ratings to whole points (half-up)
    """

    def __init__(
        self,
        k_factor: float = 20.0,
        home_advantage: float = 48.0,
        margin_scaling: bool = True,
        round_ratings: bool = True,
    ) -> None:
        if k_factor <= 0:
            raise ValueError(f"k_factor must be positive (got {k_factor})")
        self.k_factor = k_factor
        self.home_advantage = home_advantage
        self.margin_scaling = margin_scaling
        self.round_ratings = round_ratings

    @classmethod
    def for_sport(cls, profile: SportProfile, round_ratings: bool = True) -> "RatingUpdater":
        return cls(
            k_factor=profile.k_factor,
            home_advantage=profile.rating_home_advantage,
            margin_scaling=profile.margin_scaling,
            round_ratings=round_ratings,
        )

    def update(
        self,
        home_rating: float,
        away_rating: float,
        home_score: int,
        away_score: int,
    ) -> RatingUpdate:
        """Compute post-game ratings from pre-game ratings and the final score."""
        home_expected = expected_score(home_rating + self.home_advantage, away_rating)
        away_expected = 1.0 - home_expected

        if home_score > away_score:
            home_actual = 1.0
        elif home_score < away_score:
            home_actual = 0.0
        else:
            home_actual = 0.5
        away_actual = 1.0 - home_actual

        k = self.k_factor
        if self.margin_scaling:
            k *= margin_multiplier(home_score - away_score)

        new_home = home_rating + k * (home_actual - home_expected)
        new_away = away_rating + k * (away_actual - away_expected)
        if self.round_ratings:
            new_home = float(math.floor(new_home + 0.5))
            new_away = float(math.floor(new_away + 0.5))

        return RatingUpdate(
            home_rating=new_home,
            away_rating=new_away,
            home_expected=home_expected,
            home_actual=home_actual,
            k_factor=k,
        )

    def apply(self, store: RatingStore, game: Game) -> RatingUpdate:
        """Update ``store`` with the result of a final game.

        Raises:
            ValueError: If the game is not final
        """
        if not game.is_final:
            raise ValueError(f"Game {game.game_id} is not final; cannot update ratings")
        result = self.update(
            store.get(game.home_team_id),
            store.get(game.away_team_id),
            game.home_score,
            game.away_score,
        )
        store.set(game.home_team_id, result.home_rating)
        store.set(game.away_team_id, result.away_rating)
        return result
