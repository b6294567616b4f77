"""Parameter search over the prediction model."""

from elo_betting_engine.optimization.optimizer import (
    DEFAULT_TOLERANCES,
    OptimizationReport,
    ParameterOptimizer,
    drop_near_duplicates,
    simulate,
)
from elo_betting_engine.optimization.presets import (
    BASELINE_PARAMS,
    NBA_BASELINE_PARAMS,
    PRESETS,
    coarse_search,
    fine_search,
    nba_coarse_search,
    nba_fine_search,
    scaled_coarse_search,
    scaled_fine_search,
    search_preset,
    weather_search,
)
from elo_betting_engine.optimization.space import ParameterSpace

__all__ = [
    "BASELINE_PARAMS",
    "DEFAULT_TOLERANCES",
    "NBA_BASELINE_PARAMS",
    "OptimizationReport",
    "PRESETS",
    "ParameterOptimizer",
    "ParameterSpace",
    "coarse_search",
    "drop_near_duplicates",
    "fine_search",
    "nba_coarse_search",
    "nba_fine_search",
    "scaled_coarse_search",
    "scaled_fine_search",
    "search_preset",
    "simulate",
    "weather_search",
]
