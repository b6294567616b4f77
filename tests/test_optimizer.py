"""Tests for parameter spaces, search presets and the optimizer.

Tests cover:
- Grid, sweep and de-duplicating combination of candidates
- Preset sizes and ordering, on each sport's scale
- Flat-stake simulation of the spread and total markets
- Ranking, minimum-sample filtering and near-duplicate removal
- Serial and process-pool runs producing identical reports
"""

import pytest

from elo_betting_engine.models import BetMarket, SimulationParams, SimulationResult
from elo_betting_engine.optimization import (
    BASELINE_PARAMS,
    NBA_BASELINE_PARAMS,
    OptimizationReport,
    ParameterOptimizer,
    ParameterSpace,
    coarse_search,
    drop_near_duplicates,
    fine_search,
    nba_coarse_search,
    nba_fine_search,
    scaled_coarse_search,
    scaled_fine_search,
    search_preset,
    simulate,
    weather_search,
)
from elo_betting_engine.sports import get_sport_profile


def _result(profit_wins: int, **params) -> SimulationResult:
    return SimulationResult(
        params=SimulationParams(**params), wins=profit_wins, losses=10, pushes=0, total_games=100
    )


class TestParameterSpace:
    """Test candidate generation."""

    def test_grid_is_cartesian(self):
        space = ParameterSpace()

        candidates = space.grid(rating_cap=[0, 5], max_spread=[8, 12, 20])

        assert len(candidates) == 6
        assert (candidates[0].rating_cap, candidates[0].max_spread) == (0, 8)
        assert (candidates[-1].rating_cap, candidates[-1].max_spread) == (5, 20)

    def test_sweep_holds_other_axes(self):
        space = ParameterSpace(SimulationParams(rating_cap=4))

        candidates = space.sweep(spread_shrinkage=[0.1, 0.2], max_spread=[10])

        assert len(candidates) == 3
        assert all(c.rating_cap == 4 for c in candidates)
        assert candidates[2].spread_shrinkage == 0.0
        assert candidates[2].max_spread == 10

    def test_combine_drops_repeats(self):
        space = ParameterSpace(SimulationParams(max_spread=20))

        combined = space.combine(
            space.sweep(spread_shrinkage=[0.1, 0.2]),
            space.grid(spread_shrinkage=[0.2, 0.3], rating_cap=[0]),
        )

        assert [c.spread_shrinkage for c in combined] == [0.1, 0.2, 0.3]

    def test_unknown_axis_rejected(self):
        with pytest.raises(ValueError, match="Unknown parameter"):
            ParameterSpace().grid(k_factor=[10, 20])

    def test_invalid_values_rejected(self):
        with pytest.raises(ValueError):
            ParameterSpace().sweep(spread_shrinkage=[1.5])


class TestPresets:
    """Test the production search presets."""

    def test_coarse_starts_with_baseline(self):
        candidates = coarse_search()

        assert candidates[0] == BASELINE_PARAMS
        assert len({c.key() for c in candidates}) == len(candidates)

    def test_fine_search_size(self):
        assert len(fine_search()) == 368

    def test_weather_sweep(self):
        candidates = weather_search()

        assert [c.weather_coefficient for c in candidates] == [0, 1, 2, 3, 4, 5]
        assert all(c.rating_to_points == BASELINE_PARAMS.rating_to_points for c in candidates)

    def test_custom_base(self):
        base = SimulationParams(rating_to_points=3.0, max_spread=40)

        assert coarse_search(base)[0] == base


class TestSportPresets:
    """Test that each sport searches on its own scale."""

    def test_nfl_uses_football_grids(self, nfl_profile):
        baseline, candidates = search_preset(nfl_profile, "coarse")

        assert baseline == BASELINE_PARAMS
        assert candidates == coarse_search()

    def test_nba_fine_grid_size(self):
        candidates = nba_fine_search()

        assert len(candidates) == 108
        assert {c.home_advantage for c in candidates} == {2.5, 3.0, 3.5, 4.0}
        assert {c.rating_cap for c in candidates} == {18, 20, 22}

    def test_nba_coarse_starts_with_baseline(self):
        candidates = nba_coarse_search()

        assert candidates[0] == NBA_BASELINE_PARAMS
        assert {c.key() for c in nba_fine_search()} <= {c.key() for c in candidates}
        assert all(2.5 <= c.home_advantage <= 5.0 for c in candidates)

    def test_nba_preset(self):
        baseline, candidates = search_preset(get_sport_profile("nba"), "fine")

        assert baseline == NBA_BASELINE_PARAMS
        assert len(candidates) == 108

    def test_nhl_grids_stay_on_goal_scale(self):
        profile = get_sport_profile("nhl")

        for preset in ("coarse", "fine"):
            baseline, candidates = search_preset(profile, preset)

            assert baseline == profile.default_params
            assert all(c.home_advantage < 1 for c in candidates)
            assert all(c.max_spread <= profile.default_params.max_spread for c in candidates)

    def test_scaled_coarse_starts_with_base(self):
        base = get_sport_profile("cbb").default_params

        candidates = scaled_coarse_search(base)

        assert candidates[0] == base
        assert len({c.key() for c in candidates}) == len(candidates)

    def test_scaled_fine_grid(self):
        base = get_sport_profile("cbb").default_params

        candidates = scaled_fine_search(base)

        assert len(candidates) == 125
        assert sorted({c.spread_shrinkage for c in candidates}) == [0.3, 0.35, 0.4, 0.45, 0.5]

    def test_weather_preset_uses_sport_defaults(self, nfl_profile):
        baseline, candidates = search_preset(nfl_profile, "weather")

        assert baseline == nfl_profile.default_params
        assert len(candidates) == 6

    def test_unknown_preset(self, nfl_profile):
        with pytest.raises(ValueError, match="Unknown preset"):
            search_preset(nfl_profile, "deep")


class TestSimulate:
    """Test one flat-stake trial."""

    def test_self_graded_spread(self, nfl_profile, season_games, season_teams):
        result = simulate(season_games, season_teams, nfl_profile, BASELINE_PARAMS)

        assert result.market == BetMarket.SPREAD
        assert result.total_games == 56
        assert 0 < result.total_graded <= 56
        assert result.profit == result.wins * 100 - result.losses * 110

    def test_spread_window_limits_bets(self, nfl_profile, season_games, season_teams):
        params = BASELINE_PARAMS.model_copy(update={"min_spread": 100.0, "max_spread": 100.0})

        result = simulate(season_games, season_teams, nfl_profile, params)

        assert result.total_graded == 0
        assert result.win_pct == 0.0
        assert result.total_games == 56

    def test_market_lines_only_bet_games_with_lines(self, nfl_profile, season_games, season_teams, season_lines):
        params = BASELINE_PARAMS.model_copy(update={"max_spread": 100.0})

        result = simulate(
            season_games, season_teams, nfl_profile, params, market_lines=season_lines, use_market_lines=True
        )

        assert result.total_graded == 28

    def test_totals_against_baseline(self, nfl_profile, season_games, season_teams):
        result = simulate(season_games, season_teams, nfl_profile, BASELINE_PARAMS, market=BetMarket.TOTAL)

        assert result.market == BetMarket.TOTAL
        assert result.total_graded == 56

    def test_moneyline_rejected(self, nfl_profile, season_games):
        with pytest.raises(ValueError, match="spread and total"):
            simulate(season_games, None, nfl_profile, BASELINE_PARAMS, market=BetMarket.MONEYLINE)

    def test_custom_odds(self, nfl_profile, season_games, season_teams):
        result = simulate(season_games, season_teams, nfl_profile, BASELINE_PARAMS, stake=100, payout=100)

        assert result.profit == result.wins * 100 - result.losses * 100


class TestDropNearDuplicates:
    """Test near-duplicate removal."""

    def test_neighbours_collapse(self):
        ranked = [
            _result(40, spread_shrinkage=0.45, rating_cap=5, max_spread=8),
            _result(39, spread_shrinkage=0.46, rating_cap=5, max_spread=8),
            _result(38, spread_shrinkage=0.30, rating_cap=5, max_spread=8),
            _result(37, spread_shrinkage=0.45, rating_cap=5, max_spread=12),
        ]

        kept = drop_near_duplicates(ranked)

        assert [r.wins for r in kept] == [40, 38, 37]

    def test_limit(self):
        ranked = [_result(40 - i, max_spread=5 + 2 * i) for i in range(5)]

        assert len(drop_near_duplicates(ranked, limit=2)) == 2

    def test_custom_tolerances(self):
        ranked = [_result(40, home_advantage=2.0), _result(39, home_advantage=2.1)]

        assert len(drop_near_duplicates(ranked, tolerances={"home_advantage": 0.5})) == 1
        assert len(drop_near_duplicates(ranked, tolerances={"home_advantage": 0.05})) == 2


class TestParameterOptimizer:
    """Test ranking and reporting."""

    @pytest.fixture
    def candidates(self):
        return ParameterSpace(BASELINE_PARAMS).grid(spread_shrinkage=[0.0, 0.3, 0.5], rating_cap=[0, 4])

    def test_results_ranked_by_profit(self, nfl_profile, season_games, season_teams, candidates):
        report = ParameterOptimizer(nfl_profile, min_sample_size=10).optimize(
            season_games, candidates, teams=season_teams
        )

        profits = [r.profit for r in report.results]
        assert profits == sorted(profits, reverse=True)
        assert report.total_simulations == 6
        assert report.games_analyzed == 56
        assert report.best_by_profit == report.viable[0]

    def test_min_sample_filter(self, nfl_profile, season_games, season_teams, candidates):
        report = ParameterOptimizer(nfl_profile, min_sample_size=57).optimize(
            season_games, candidates, teams=season_teams
        )

        assert len(report.results) == 6
        assert report.viable == []
        assert report.top == []
        assert report.best_by_profit is None
        assert report.best_by_win_pct is None

    def test_volume_pick_meets_breakeven(self, nfl_profile, season_games, season_teams, candidates):
        report = ParameterOptimizer(nfl_profile, min_sample_size=10).optimize(
            season_games, candidates, teams=season_teams
        )

        if report.best_by_volume is not None:
            assert report.best_by_volume.win_pct >= 52.4

    def test_baseline_simulated_when_not_a_candidate(self, nfl_profile, season_games, season_teams, candidates):
        baseline = BASELINE_PARAMS.model_copy(update={"home_advantage": 3.0})

        report = ParameterOptimizer(nfl_profile, min_sample_size=10).optimize(
            season_games, candidates, teams=season_teams, baseline=baseline
        )

        assert report.baseline == simulate(season_games, season_teams, nfl_profile, baseline)

    def test_baseline_found_among_candidates(self, nfl_profile, season_games, season_teams, candidates):
        report = ParameterOptimizer(nfl_profile, min_sample_size=10).optimize(
            season_games, candidates, teams=season_teams, baseline=candidates[0]
        )

        assert report.baseline.params == candidates[0]

    def test_best_where(self, nfl_profile, season_games, season_teams, candidates):
        report = ParameterOptimizer(nfl_profile, min_sample_size=10).optimize(
            season_games, candidates, teams=season_teams
        )

        best_capped = report.best_where(rating_cap=4)

        assert best_capped.params.rating_cap == 4
        assert all(
            r.profit <= best_capped.profit for r in report.results if r.params.rating_cap == 4
        )
        assert report.best_where(rating_cap=99) is None

    def test_process_pool_matches_serial(self, nfl_profile, season_games, season_teams, candidates):
        serial = ParameterOptimizer(nfl_profile, min_sample_size=10).optimize(
            season_games, candidates, teams=season_teams
        )
        pooled = ParameterOptimizer(nfl_profile, min_sample_size=10, max_workers=2).optimize(
            season_games, candidates, teams=season_teams
        )

        assert pooled.results == serial.results
        assert pooled.top == serial.top

    def test_market_lines_as_list(self, nfl_profile, season_games, season_teams, season_lines, candidates):
        report = ParameterOptimizer(nfl_profile, min_sample_size=0).optimize(
            season_games,
            candidates,
            teams=season_teams,
            market_lines=season_lines,
            use_market_lines=True,
        )

        assert all(r.total_graded <= 28 for r in report.results)

    @pytest.mark.parametrize("kwargs", [{"min_sample_size": -1}, {"max_workers": 0}])
    def test_invalid_arguments(self, nfl_profile, kwargs):
        with pytest.raises(ValueError):
            ParameterOptimizer(nfl_profile, **kwargs)

    def test_empty_report(self):
        report = OptimizationReport(results=[])

        assert report.best_where(max_spread=8) is None
