"""Team rating state and Elo updates."""

from elo_betting_engine.ratings.elo import (
    RatingUpdate,
    RatingUpdater,
    expected_score,
    margin_multiplier,
)
from elo_betting_engine.ratings.store import RatingStore, ScoringLedger

__all__ = [
    "RatingStore",
    "RatingUpdate",
    "RatingUpdater",
    "ScoringLedger",
    "expected_score",
    "margin_multiplier",
]
