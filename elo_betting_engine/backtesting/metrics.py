"""Aggregate win/loss/push records for backtest results.

Summaries are always derived from the result list, never stored alongside
it. Each grading mode gets its own bucket:
- spread_vs_model / total_vs_baseline: self-referential, every game
- spread_vs_market / total_vs_market: real ATS and O/U, games with lines only
- moneyline: straight-up picks
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np

from elo_betting_engine.models.numeric import win_percentage
from elo_betting_engine.models.schema import BacktestResult, GradedBet, Outcome


@dataclass
class MarketRecord:
    """Win/loss/push tally for one grading bucket.

    Attributes:
        wins: Winning picks
        losses: Losing picks
        pushes: Pushes (stake returned)
    """

    wins: int = 0
    losses: int = 0
    pushes: int = 0

    def add(self, bet: GradedBet | None) -> None:
        if bet is None:
            return
        if bet.outcome == Outcome.WIN:
            self.wins += 1
        elif bet.outcome == Outcome.LOSS:
            self.losses += 1
        else:
            self.pushes += 1

    @property
    def graded(self) -> int:
        return self.wins + self.losses + self.pushes

    @property
    def win_pct(self) -> float:
        """Wins over decided bets, one decimal, 0.0 with nothing decided."""
        return win_percentage(self.wins, self.losses)

    def profit(self, stake: float = 110.0, payout: float = 100.0) -> float:
        return self.wins * payout - self.losses * stake

    def to_dict(self) -> dict:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "pushes": self.pushes,
            "win_pct": self.win_pct,
        }


@dataclass
class BacktestSummary:
    """Aggregate performance over a backtest.

    Attributes:
        total_games: Results graded (excluded ties not counted)
        games_with_market_line: Results with a market spread or total
        spread_vs_model: Spread picks against the model's own line
        spread_vs_market: ATS record against market spreads
        moneyline: Straight-up record
        total_vs_baseline: O/U record against the sport's baseline total
        total_vs_market: O/U record against market totals
        mean_absolute_spread_error: Mean |predicted spread - actual spread|
        mean_absolute_total_error: Mean |predicted total - actual total|
    """

    total_games: int = 0
    games_with_market_line: int = 0
    spread_vs_model: MarketRecord = field(default_factory=MarketRecord)
    spread_vs_market: MarketRecord = field(default_factory=MarketRecord)
    moneyline: MarketRecord = field(default_factory=MarketRecord)
    total_vs_baseline: MarketRecord = field(default_factory=MarketRecord)
    total_vs_market: MarketRecord = field(default_factory=MarketRecord)
    mean_absolute_spread_error: float = 0.0
    mean_absolute_total_error: float = 0.0

    def buckets(self) -> dict[str, MarketRecord]:
        return {
            "spread_vs_model": self.spread_vs_model,
            "spread_vs_market": self.spread_vs_market,
            "moneyline": self.moneyline,
            "total_vs_baseline": self.total_vs_baseline,
            "total_vs_market": self.total_vs_market,
        }

    def to_dict(self) -> dict:
        data = {name: record.to_dict() for name, record in self.buckets().items()}
        data["total_games"] = self.total_games
        data["games_with_market_line"] = self.games_with_market_line
        data["mean_absolute_spread_error"] = self.mean_absolute_spread_error
        data["mean_absolute_total_error"] = self.mean_absolute_total_error
        return data


def mean_absolute_error(predicted: Sequence[float], actual: Sequence[float]) -> float:
    """Mean absolute difference, 0.0 for empty input.

    Raises:
        ValueError: If the sequences differ in length
    """
    if not predicted:
        return 0.0
    if len(predicted) != len(actual):
        raise ValueError(f"Length mismatch: {len(predicted)} predicted vs {len(actual)} actual")
    return round(float(np.mean(np.abs(np.array(predicted) - np.array(actual)))), 2)


def summarize(results: Iterable[BacktestResult]) -> BacktestSummary:
    """Build a BacktestSummary from results."""
    results = list(results)
    summary = BacktestSummary(total_games=len(results))

    for result in results:
        summary.spread_vs_model.add(result.spread_vs_model)
        summary.spread_vs_market.add(result.spread_vs_market)
        summary.moneyline.add(result.moneyline)
        summary.total_vs_baseline.add(result.total_vs_baseline)
        summary.total_vs_market.add(result.total_vs_market)
        if result.has_market_line:
            summary.games_with_market_line += 1

    summary.mean_absolute_spread_error = mean_absolute_error(
        [r.prediction.spread for r in results], [r.actual_spread for r in results]
    )
    summary.mean_absolute_total_error = mean_absolute_error(
        [r.prediction.total for r in results], [r.actual_total for r in results]
    )
    return summary
