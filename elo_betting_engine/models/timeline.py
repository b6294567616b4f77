"""Chronological ordering of games.

Every pass over history (backtest, calibration, optimizer trial) walks games
through these helpers so that a game is only ever predicted from results that
were known before it started.
"""

from collections.abc import Iterable, Iterator
from itertools import groupby

from elo_betting_engine.models.schema import Game


def completed_games(games: Iterable[Game]) -> list[Game]:
    """Final games with both scores, in input order."""
    return [g for g in games if g.is_final]


def sort_chronologically(games: Iterable[Game]) -> list[Game]:
    """Sort games by start time, breaking timestamp ties by game id.

    The tie-break makes reruns over the same input reproducible regardless
    of the order the collaborator returned the games in.
    """
    return sorted(games, key=lambda g: (g.scheduled_at, g.game_id))


def iter_slates(games: Iterable[Game]) -> Iterator[list[Game]]:
    """Yield groups of games sharing the same start time, oldest first.

    Games within a slate are ordered by game id. Predictions for every game
    in a slate must use ratings from before the slate.

    Example:
        >>> for slate in iter_slates(games):
        ...     predictions = [predict(g) for g in slate]
        ...     for g in slate:
        ...         update(g)
    """
    ordered = sort_chronologically(games)
    for _, slate in groupby(ordered, key=lambda g: g.scheduled_at):
        yield list(slate)
