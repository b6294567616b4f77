"""Grid-search optimizer over model parameters.

Every candidate parameter set is simulated with a fresh backtest pass over
the same games and scored by flat-stake profit at -110. Results are ranked
by profit, filtered to a minimum sample, and de-duplicated so the top list
shows distinct configurations rather than ten neighbours of one winner.

Trials are independent and own their rating state, so they can run in a
process pool.
"""

import concurrent.futures
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from elo_betting_engine.backtesting.engine import BacktestRunner
from elo_betting_engine.config import get_settings
from elo_betting_engine.models.schema import (
    BetMarket,
    Game,
    GradedBet,
    MarketLine,
    Outcome,
    SimulationParams,
    SimulationResult,
    Team,
)
from elo_betting_engine.models.timeline import completed_games
from elo_betting_engine.monitoring import get_logger
from elo_betting_engine.sports import SportProfile

log = get_logger()

DEFAULT_TOLERANCES: dict[str, float] = {
    "spread_shrinkage": 0.05,
    "rating_cap": 1.0,
    "max_spread": 1.0,
}


def simulate(
    games: Sequence[Game],
    teams: Sequence[Team] | None,
    profile: SportProfile,
    params: SimulationParams,
    market_lines: Mapping[str, MarketLine] | Iterable[MarketLine] | None = None,
    market: BetMarket = BetMarket.SPREAD,
    use_market_lines: bool = False,
    stake: float = 110.0,
    payout: float = 100.0,
) -> SimulationResult:
    """Simulate flat betting one market with one parameter set.

    Spread bets are only placed when ``min_spread <= |predicted spread| <=
    max_spread``. With ``use_market_lines`` the picks are graded against
    market lines and games without a line are not bet; otherwise they are
    graded against the model's own spread or the baseline total.

    Raises:
        ValueError: For the moneyline market, which has no line to tune
    """
    if market == BetMarket.MONEYLINE:
        raise ValueError("simulate supports the spread and total markets only")

    run = BacktestRunner(profile, params).run(games, teams=teams, market_lines=market_lines)

    wins = losses = pushes = 0
    for result in run.results:
        bet: GradedBet | None
        if market == BetMarket.SPREAD:
            size = abs(result.prediction.spread)
            if size < params.min_spread or size > params.max_spread:
                continue
            bet = result.spread_vs_market if use_market_lines else result.spread_vs_model
        else:
            bet = result.total_vs_market if use_market_lines else result.total_vs_baseline
        if bet is None:
            continue
        if bet.outcome == Outcome.WIN:
            wins += 1
        elif bet.outcome == Outcome.LOSS:
            losses += 1
        else:
            pushes += 1

    return SimulationResult(
        params=params,
        market=market,
        wins=wins,
        losses=losses,
        pushes=pushes,
        total_games=len(run.results),
        stake=stake,
        payout=payout,
    )


def drop_near_duplicates(
    results: Iterable[SimulationResult],
    tolerances: Mapping[str, float] | None = None,
    limit: int | None = None,
) -> list[SimulationResult]:
    """Keep results whose params differ from every kept one on some field.

    A result is a near-duplicate of a kept result when, for every field in
    ``tolerances``, the two values differ by less than the tolerance.
    Input order is preserved, so pass results already ranked.
    """
    tolerances = DEFAULT_TOLERANCES if tolerances is None else tolerances
    kept: list[SimulationResult] = []
    for result in results:
        if limit is not None and len(kept) >= limit:
            break
        duplicate = any(
            all(
                abs(getattr(k.params, name) - getattr(result.params, name)) < tol
                for name, tol in tolerances.items()
            )
            for k in kept
        )
        if not duplicate:
            kept.append(result)
    return kept


@dataclass
class OptimizationReport:
    """Ranked outcome of an optimizer search.

    Attributes:
        results: Every trial, most profitable first
        viable: Trials meeting the minimum sample size, same order
        top: De-duplicated viable trials, at most ``top_n``
        best_by_profit: Most profitable viable trial
        best_by_win_pct: Highest win percentage among viable trials
        best_by_volume: Most bets among viable trials at or above breakeven
        baseline: Trial for the baseline parameters, if one was run
        total_simulations: Number of trials
        games_analyzed: Final games in the input
        breakeven_win_pct: Win percentage needed to profit at the trial odds
    """

    results: list[SimulationResult]
    viable: list[SimulationResult] = field(default_factory=list)
    top: list[SimulationResult] = field(default_factory=list)
    best_by_profit: SimulationResult | None = None
    best_by_win_pct: SimulationResult | None = None
    best_by_volume: SimulationResult | None = None
    baseline: SimulationResult | None = None
    total_simulations: int = 0
    games_analyzed: int = 0
    breakeven_win_pct: float = field(default_factory=lambda: get_settings().breakeven_win_pct)

    def best_where(self, **fixed: float) -> SimulationResult | None:
        """Most profitable trial whose params match every given value.

        Example:
            >>> report.best_where(max_spread=8)
        """
        for result in self.results:
            if all(getattr(result.params, name) == value for name, value in fixed.items()):
                return result
        return None


def _trial(args: tuple) -> SimulationResult:
    return simulate(*args)


class ParameterOptimizer:
    """Runs and ranks optimizer trials.

    Args:
        profile: Sport being tuned
        min_sample_size: Graded bets (pushes included) needed to rank a trial
        top_n: Size of the de-duplicated top list
        max_workers: Process pool size; 1 runs trials serially in-process
        tolerances: Near-duplicate tolerances per parameter
        breakeven_win_pct: Win percentage needed for ``best_by_volume``;
            defaults to settings
        stake: Amount risked per bet
        payout: Amount won per winning bet
    """

    def __init__(
        self,
        profile: SportProfile,
        min_sample_size: int = 50,
        top_n: int = 20,
        max_workers: int = 1,
        tolerances: Mapping[str, float] | None = None,
        breakeven_win_pct: float | None = None,
        stake: float = 110.0,
        payout: float = 100.0,
    ) -> None:
        if min_sample_size < 0:
            raise ValueError(f"min_sample_size must be non-negative (got {min_sample_size})")
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1 (got {max_workers})")
        self.profile = profile
        self.min_sample_size = min_sample_size
        self.top_n = top_n
        self.max_workers = max_workers
        self.tolerances = dict(DEFAULT_TOLERANCES if tolerances is None else tolerances)
        self.breakeven_win_pct = (
            get_settings().breakeven_win_pct if breakeven_win_pct is None else breakeven_win_pct
        )
        self.stake = stake
        self.payout = payout

    def optimize(
        self,
        games: Iterable[Game],
        candidates: Sequence[SimulationParams],
        teams: Sequence[Team] | None = None,
        market_lines: Mapping[str, MarketLine] | Iterable[MarketLine] | None = None,
        market: BetMarket = BetMarket.SPREAD,
        use_market_lines: bool = False,
        baseline: SimulationParams | None = None,
    ) -> OptimizationReport:
        """Simulate every candidate and rank the results.

        Args:
            games: Historical games (non-final games are ignored)
            candidates: Parameter sets to try
            teams: Team records for scoring averages
            market_lines: Market lines for market grading
            market: Spread or total
            use_market_lines: Grade against market lines instead of the model line
            baseline: Parameters to report as the baseline; simulated
                separately when not among the candidates

        Returns:
            OptimizationReport
        """
        finals = completed_games(games)
        teams = list(teams) if teams is not None else None
        if market_lines is not None and not isinstance(market_lines, Mapping):
            market_lines = {line.game_id: line for line in market_lines}

        log.info(
            "optimizer_started",
            sport=self.profile.sport.value,
            market=market.value,
            candidates=len(candidates),
            games=len(finals),
            max_workers=self.max_workers,
        )

        trial_args = [
            (finals, teams, self.profile, params, market_lines, market, use_market_lines, self.stake, self.payout)
            for params in candidates
        ]
        results = self._run_trials(trial_args)
        results.sort(key=lambda r: r.profit, reverse=True)

        viable = [r for r in results if r.total_graded >= self.min_sample_size]
        top = drop_near_duplicates(viable, self.tolerances, limit=self.top_n)
        by_win_pct = sorted(viable, key=lambda r: r.win_pct, reverse=True)
        by_volume = sorted(
            (r for r in viable if r.win_pct >= self.breakeven_win_pct),
            key=lambda r: r.bets,
            reverse=True,
        )

        baseline_result = None
        if baseline is not None:
            baseline_result = next((r for r in results if r.params.key() == baseline.key()), None)
            if baseline_result is None:
                baseline_result = simulate(
                    finals, teams, self.profile, baseline, market_lines, market, use_market_lines, self.stake, self.payout
                )

        report = OptimizationReport(
            results=results,
            viable=viable,
            top=top,
            best_by_profit=viable[0] if viable else None,
            best_by_win_pct=by_win_pct[0] if by_win_pct else None,
            best_by_volume=by_volume[0] if by_volume else None,
            baseline=baseline_result,
            total_simulations=len(results),
            games_analyzed=len(finals),
            breakeven_win_pct=self.breakeven_win_pct,
        )
        log.info(
            "optimizer_completed",
            sport=self.profile.sport.value,
            total_simulations=report.total_simulations,
            viable=len(viable),
            best_profit=report.best_by_profit.profit if report.best_by_profit else None,
        )
        return report

    def _run_trials(self, trial_args: list[tuple]) -> list[SimulationResult]:
        if self.max_workers == 1 or len(trial_args) <= 1:
            return [_trial(args) for args in trial_args]

        results: list[SimulationResult | None] = [None] * len(trial_args)
        with concurrent.futures.ProcessPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(_trial, args): i for i, args in enumerate(trial_args)}
            for future in concurrent.futures.as_completed(futures):
                index = futures[future]
                try:
                    results[index] = future.result()
                except Exception as e:
                    log.error("optimizer_trial_failed", params=trial_args[index][3].model_dump(), error=str(e))
                    raise
        return results
