"""Search presets used by the production optimizer runs.

Each sport searches on its own scale:
- NFL: hand-picked grids in football points (``coarse_search``, ``fine_search``)
- NBA: home-court, shrinkage, points-per-100 and cap sweeps plus a focused
  grid (``nba_coarse_search``, ``nba_fine_search``)
- NHL / CBB: grids scaled from the sport's shipped parameters
  (``scaled_coarse_search``, ``scaled_fine_search``)

``search_preset`` picks the grid and its baseline for a sport profile.
"""

from collections.abc import Callable, Sequence

from elo_betting_engine.models.schema import SimulationParams
from elo_betting_engine.optimization.space import ParameterSpace
from elo_betting_engine.sports import Sport, SportProfile

# Unshrunk, uncapped model the NFL searches are compared against
BASELINE_PARAMS = SimulationParams(
    rating_to_points=5.93,
    home_advantage=2.28,
    spread_shrinkage=0.0,
    rating_cap=0.0,
    min_spread=0.0,
    max_spread=20.0,
    stats_regression=0.3,
)

# Center of the fine search (winner of the coarse search)
FINE_CENTER = {"spread_shrinkage": 0.45, "rating_cap": 5.0, "max_spread": 8.0}

# Basketball model the NBA searches are compared against
NBA_BASELINE_PARAMS = SimulationParams(
    rating_to_points=6.0,
    home_advantage=4.5,
    spread_shrinkage=0.4,
    rating_cap=20.0,
    min_spread=0.0,
    max_spread=40.0,
    stats_regression=0.3,
)

PRESETS = ("coarse", "fine", "weather")


def coarse_search(base: SimulationParams | None = None) -> list[SimulationParams]:
    """Single-axis sweeps, pairwise combinations and a deep refinement grid.

    The base (BASELINE_PARAMS by default) is always the first candidate.
    """
    base = base if base is not None else BASELINE_PARAMS
    space = ParameterSpace(base)
    return space.combine(
        [base],
        space.sweep(
            spread_shrinkage=[0, 0.1, 0.2, 0.3, 0.4, 0.5],
            rating_cap=[0, 4, 6, 8, 10],
            max_spread=[3, 5, 7, 10, 20],
            min_spread=[0, 1, 2, 3],
        ),
        space.grid(spread_shrinkage=[0.2, 0.3, 0.4], max_spread=[5, 7, 10]),
        space.grid(rating_cap=[4, 6, 8], spread_shrinkage=[0.2, 0.3]),
        space.grid(rating_to_points=[4, 5, 5.93, 7, 8], spread_shrinkage=[0, 0.2, 0.3]),
        space.sweep(home_advantage=[1.5, 2, 2.28, 2.5, 3]),
        space.grid(spread_shrinkage=[0.15, 0.25, 0.35, 0.45], rating_cap=[0, 5, 7], max_spread=[6, 8, 12]),
    )


def fine_search(base: SimulationParams | None = None) -> list[SimulationParams]:
    """Dense grid around the coarse winner plus home-edge and stats sweeps."""
    base = base if base is not None else BASELINE_PARAMS
    space = ParameterSpace(base)
    centered = ParameterSpace(space.with_values(**FINE_CENTER))
    return space.combine(
        space.grid(
            spread_shrinkage=[0.40, 0.42, 0.44, 0.45, 0.46, 0.48, 0.50, 0.52, 0.55],
            rating_cap=[0, 4, 5, 6, 7],
            max_spread=[6, 7, 8, 9, 10, 12, 15, 20],
        ),
        centered.sweep(home_advantage=[1.5, 2.0, 2.5, 3.0]),
        centered.sweep(stats_regression=[0.2, 0.25, 0.35, 0.4]),
    )


def nba_coarse_search(base: SimulationParams | None = None) -> list[SimulationParams]:
    """Basketball sweeps (home court first) followed by the focused grid."""
    base = base if base is not None else NBA_BASELINE_PARAMS
    space = ParameterSpace(base)
    return space.combine(
        [base],
        space.sweep(
            home_advantage=[2.5, 3.0, 3.5, 4.0, 4.5, 5.0],
            spread_shrinkage=[0.35, 0.4, 0.45],
            rating_to_points=[5.0, 5.5, 6.0, 6.5, 7.0],
            rating_cap=[16, 18, 20, 22, 24],
        ),
        nba_fine_search(base),
    )


def nba_fine_search(base: SimulationParams | None = None) -> list[SimulationParams]:
    """Focused basketball grid: 108 combinations around the shipped model."""
    base = base if base is not None else NBA_BASELINE_PARAMS
    return ParameterSpace(base).grid(
        home_advantage=[2.5, 3.0, 3.5, 4.0],
        spread_shrinkage=[0.35, 0.4, 0.45],
        rating_to_points=[5.5, 6.0, 6.5],
        rating_cap=[18, 20, 22],
    )


def _scaled(value: float, factors: Sequence[float]) -> list[float]:
    return [round(value * factor, 4) for factor in factors]


def scaled_coarse_search(base: SimulationParams) -> list[SimulationParams]:
    """Sweeps and pairwise grids sized relative to a sport's own parameters.

    Used for sports without a hand-picked grid. The base is the first
    candidate.
    """
    space = ParameterSpace(base)
    return space.combine(
        [base],
        space.sweep(
            spread_shrinkage=[0, 0.1, 0.2, 0.3, 0.4, 0.5],
            home_advantage=_scaled(base.home_advantage, [0.5, 0.75, 1.25, 1.5]),
            rating_to_points=_scaled(base.rating_to_points, [0.75, 0.9, 1.1, 1.25]),
            rating_cap=_scaled(base.rating_cap, [0, 0.5, 1.5, 2]),
            max_spread=_scaled(base.max_spread, [0.25, 0.5, 0.75]),
            min_spread=_scaled(base.max_spread, [0.05, 0.1, 0.15]),
        ),
        space.grid(
            spread_shrinkage=[0.1, 0.2, 0.3, 0.4],
            rating_cap=_scaled(base.rating_cap, [0, 0.5, 1, 1.5]),
        ),
        space.grid(
            home_advantage=_scaled(base.home_advantage, [0.75, 1, 1.25]),
            rating_to_points=_scaled(base.rating_to_points, [0.9, 1, 1.1]),
        ),
    )


def scaled_fine_search(base: SimulationParams) -> list[SimulationParams]:
    """Dense grid within 20% of a sport's own parameters."""
    factors = [0.8, 0.9, 1.0, 1.1, 1.2]
    shrinkage = [round(base.spread_shrinkage + step, 2) for step in (-0.1, -0.05, 0, 0.05, 0.1)]
    return ParameterSpace(base).grid(
        spread_shrinkage=[s for s in shrinkage if 0 <= s <= 1],
        home_advantage=_scaled(base.home_advantage, factors),
        rating_cap=_scaled(base.rating_cap, factors),
    )


def weather_search(base: SimulationParams | None = None) -> list[SimulationParams]:
    """Weather coefficient sweep, graded on totals."""
    base = base if base is not None else BASELINE_PARAMS
    return ParameterSpace(base).sweep(weather_coefficient=[0, 1, 2, 3, 4, 5])


def search_preset(profile: SportProfile, preset: str) -> tuple[SimulationParams, list[SimulationParams]]:
    """Baseline and candidates for a named preset on a sport's scale.

    Args:
        profile: Sport being tuned
        preset: One of ``coarse``, ``fine`` or ``weather``

    Returns:
        (baseline, candidates)

    Raises:
        ValueError: If the preset is unknown
    """
    if preset not in PRESETS:
        raise ValueError(f"Unknown preset {preset!r}. Supported: {', '.join(PRESETS)}")
    if preset == "weather":
        return profile.default_params, weather_search(profile.default_params)

    builders: dict[str, Callable[[SimulationParams], list[SimulationParams]]]
    if profile.sport == Sport.NFL:
        baseline = BASELINE_PARAMS
        builders = {"coarse": coarse_search, "fine": fine_search}
    elif profile.sport == Sport.NBA:
        baseline = NBA_BASELINE_PARAMS
        builders = {"coarse": nba_coarse_search, "fine": nba_fine_search}
    else:
        baseline = profile.default_params
        builders = {"coarse": scaled_coarse_search, "fine": scaled_fine_search}
    return baseline, builders[preset](baseline)
