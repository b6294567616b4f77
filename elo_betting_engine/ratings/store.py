"""Per-run team state: ratings and running scoring averages.

A RatingStore belongs to exactly one chronological pass. Optimizer trials
each build their own, so no rating state is shared between runs.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from elo_betting_engine.models.schema import DEFAULT_RATING


class RatingStore:
    """Mapping from team id to current rating.

    Teams that have not been seen in this run read as ``default_rating``.

    Example:
        >>> store = RatingStore(initial={"KC": 1580})
        >>> store.get("KC"), store.get("DEN")
        (1580.0, 1500.0)
    """

    def __init__(
        self,
        default_rating: float = DEFAULT_RATING,
        initial: Mapping[str, float] | None = None,
    ) -> None:
        self.default_rating = float(default_rating)
        self._ratings: dict[str, float] = {
            team_id: float(rating) for team_id, rating in (initial or {}).items()
        }

    def get(self, team_id: str) -> float:
        return self._ratings.get(team_id, self.default_rating)

    def set(self, team_id: str, rating: float) -> None:
        self._ratings[team_id] = float(rating)

    def snapshot(self) -> dict[str, float]:
        """Copy of the current ratings."""
        return dict(self._ratings)

    def copy(self) -> "RatingStore":
        return RatingStore(self.default_rating, self._ratings)

    def __contains__(self, team_id: object) -> bool:
        return team_id in self._ratings

    def __len__(self) -> int:
        return len(self._ratings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ratings)

    def __repr__(self) -> str:
        return f"RatingStore(teams={len(self._ratings)}, default={self.default_rating})"


@dataclass
class _ScoringTotals:
    games: int = 0
    points_for: float = 0.0
    points_against: float = 0.0


class ScoringLedger:
    """Running points scored/allowed per team, fed one final game at a time.

    Used when a backtest must not see season-final scoring averages: the
    averages for game N come only from games recorded before it.
    """

    def __init__(self) -> None:
        self._totals: dict[str, _ScoringTotals] = {}

    def record(self, home_team_id: str, away_team_id: str, home_score: int, away_score: int) -> None:
        home = self._totals.setdefault(home_team_id, _ScoringTotals())
        away = self._totals.setdefault(away_team_id, _ScoringTotals())
        home.games += 1
        home.points_for += home_score
        home.points_against += away_score
        away.games += 1
        away.points_for += away_score
        away.points_against += home_score

    def games_played(self, team_id: str) -> int:
        totals = self._totals.get(team_id)
        return totals.games if totals else 0

    def averages(self, team_id: str, fallback: float) -> tuple[float, float]:
        """Return (points scored, points allowed) per game.

        ``fallback`` is returned for both when the team has no games yet.
        """
        totals = self._totals.get(team_id)
        if totals is None or totals.games == 0:
            return fallback, fallback
        return totals.points_for / totals.games, totals.points_against / totals.games
