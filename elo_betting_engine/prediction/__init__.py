"""Pre-game predictions, confidence tiers, weather impact and live pace."""

from elo_betting_engine.prediction.confidence import assess_confidence, tier_for_edge, with_confidence
from elo_betting_engine.prediction.pace import (
    LiveGameState,
    PaceCalibration,
    PaceProjection,
    PaceProjector,
    minutes_elapsed,
)
from elo_betting_engine.prediction.predictor import ScorePredictor, TeamStrength
from elo_betting_engine.prediction.weather import WeatherConditions, weather_impact

__all__ = [
    "LiveGameState",
    "PaceCalibration",
    "PaceProjection",
    "PaceProjector",
    "ScorePredictor",
    "TeamStrength",
    "WeatherConditions",
    "assess_confidence",
    "minutes_elapsed",
    "tier_for_edge",
    "weather_impact",
    "with_confidence",
]
