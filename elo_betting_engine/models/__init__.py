"""Record schemas and chronology helpers."""

from elo_betting_engine.models.numeric import round_to_step, win_percentage
from elo_betting_engine.models.schema import (
    DEFAULT_RATING,
    BacktestResult,
    BetMarket,
    ConfidenceAssessment,
    ConfidenceTier,
    EngineDataset,
    Game,
    GameStatus,
    GradedBet,
    LineSource,
    MarketLine,
    Outcome,
    Pick,
    PredictionRecord,
    SimulationParams,
    SimulationResult,
    Team,
)
from elo_betting_engine.models.timeline import (
    completed_games,
    iter_slates,
    sort_chronologically,
)

__all__ = [
    "DEFAULT_RATING",
    "BacktestResult",
    "BetMarket",
    "ConfidenceAssessment",
    "ConfidenceTier",
    "EngineDataset",
    "Game",
    "GameStatus",
    "GradedBet",
    "LineSource",
    "MarketLine",
    "Outcome",
    "Pick",
    "PredictionRecord",
    "SimulationParams",
    "SimulationResult",
    "Team",
    "completed_games",
    "iter_slates",
    "sort_chronologically",
    "round_to_step",
    "win_percentage",
]
