"""Breakdowns of spread performance from a backtest.

Splits graded spread picks into buckets that show where the model wins and
loses: which side it picked, whether it took the favorite, how large the
predicted spread was, and whether the game stayed close. Also reports how
far predicted spreads were from actual spreads and how often the model
picked the straight-up winner.
"""

from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from elo_betting_engine.backtesting.engine import BacktestRun
from elo_betting_engine.backtesting.metrics import MarketRecord

# Predicted-spread size buckets: (label, lower bound inclusive, upper bound exclusive)
SPREAD_SIZE_BUCKETS = (("0-3", 0.0, 3.0), ("3-7", 3.0, 7.0), ("7+", 7.0, np.inf))
CLOSE_GAME_MARGIN = 7


def _record(outcomes: pd.Series) -> MarketRecord:
    counts = outcomes.value_counts()
    return MarketRecord(
        wins=int(counts.get("win", 0)),
        losses=int(counts.get("loss", 0)),
        pushes=int(counts.get("push", 0)),
    )


@dataclass
class SpreadAnalysis:
    """Spread-performance breakdown.

    Attributes:
        total_games: Graded picks analyzed
        by_pick_side: "home" / "away"
        by_favorite: "favorite" / "underdog" / "pickem", relative to the model's spread
        by_spread_size: Predicted |spread| buckets "0-3" / "3-7" / "7+"
        by_game_type: "close" (actual margin < 7) / "blowout"
        by_week: Week number -> record (games without a week use 0)
        mean_spread_error: Mean |predicted spread - actual spread|
        median_spread_error: Median of the same
        mean_predicted_margin: Mean |predicted spread|
        mean_actual_margin: Mean |actual spread|
        correct_direction: Games where the model's favorite won outright
        wrong_direction: Games where it lost outright (ties and pick'ems excluded)
        biggest_misses: Largest spread errors, largest first
    """

    total_games: int = 0
    by_pick_side: dict[str, MarketRecord] = field(default_factory=dict)
    by_favorite: dict[str, MarketRecord] = field(default_factory=dict)
    by_spread_size: dict[str, MarketRecord] = field(default_factory=dict)
    by_game_type: dict[str, MarketRecord] = field(default_factory=dict)
    by_week: dict[int, MarketRecord] = field(default_factory=dict)
    mean_spread_error: float = 0.0
    median_spread_error: float = 0.0
    mean_predicted_margin: float = 0.0
    mean_actual_margin: float = 0.0
    correct_direction: int = 0
    wrong_direction: int = 0
    biggest_misses: pd.DataFrame = field(default_factory=pd.DataFrame)

    @property
    def direction_accuracy(self) -> float:
        decided = self.correct_direction + self.wrong_direction
        if decided == 0:
            return 0.0
        return round(self.correct_direction / decided * 100, 1)


def analyze_spread_performance(
    run: BacktestRun | pd.DataFrame,
    against_market: bool = False,
    misses: int = 20,
) -> SpreadAnalysis:
    """Break down spread results.

    Args:
        run: A BacktestRun or its ``to_frame()`` output
        against_market: Analyze ATS grades (games with market spreads only)
            instead of grades against the model's own line
        misses: Number of biggest misses to keep

    Returns:
        SpreadAnalysis; empty input yields an all-zero analysis
    """
    df = run.to_frame() if isinstance(run, BacktestRun) else run.copy()
    pick_col, result_col = ("ats_pick", "ats_result") if against_market else ("spread_pick", "spread_result")

    if df.empty:
        return SpreadAnalysis()
    df = df[df[result_col].notna()].copy()
    if df.empty:
        return SpreadAnalysis()

    df["spread_error"] = (df["predicted_spread"] - df["actual_spread"]).abs()
    df["predicted_margin"] = df["predicted_spread"].abs()
    df["actual_margin"] = df["actual_spread"].abs()
    df["favored"] = np.select(
        [df["predicted_spread"] < 0, df["predicted_spread"] > 0], ["home", "away"], default="none"
    )
    df["pick_type"] = np.select(
        [df["favored"] == "none", df[pick_col] == df["favored"]], ["pickem", "favorite"], default="underdog"
    )

    analysis = SpreadAnalysis(total_games=len(df))

    for side, group in df.groupby(pick_col):
        analysis.by_pick_side[side] = _record(group[result_col])
    for pick_type, group in df.groupby("pick_type"):
        analysis.by_favorite[pick_type] = _record(group[result_col])
    for label, lower, upper in SPREAD_SIZE_BUCKETS:
        mask = (df["predicted_margin"] >= lower) & (df["predicted_margin"] < upper)
        analysis.by_spread_size[label] = _record(df.loc[mask, result_col])
    close = df["actual_margin"] < CLOSE_GAME_MARGIN
    analysis.by_game_type["close"] = _record(df.loc[close, result_col])
    analysis.by_game_type["blowout"] = _record(df.loc[~close, result_col])
    weeks = df["week"].fillna(0).astype(int)
    for week, group in df.groupby(weeks):
        analysis.by_week[int(week)] = _record(group[result_col])

    analysis.mean_spread_error = round(float(df["spread_error"].mean()), 1)
    analysis.median_spread_error = round(float(df["spread_error"].median()), 1)
    analysis.mean_predicted_margin = round(float(df["predicted_margin"].mean()), 1)
    analysis.mean_actual_margin = round(float(df["actual_margin"].mean()), 1)

    actual_winner = np.select([df["actual_spread"] < 0, df["actual_spread"] > 0], ["home", "away"], default="tie")
    decided = (actual_winner != "tie") & (df["favored"] != "none")
    analysis.correct_direction = int(((df["favored"] == actual_winner) & decided).sum())
    analysis.wrong_direction = int(((df["favored"] != actual_winner) & decided).sum())

    analysis.biggest_misses = (
        df.sort_values("spread_error", ascending=False)
        .head(misses)[
            ["game_id", "week", "away_team", "home_team", "predicted_spread", "actual_spread",
             "spread_error", pick_col, result_col]
        ]
        .reset_index(drop=True)
    )
    return analysis
