"""Historical replay, grading and reporting for the Elo model.

Provides:
- BacktestRunner: chronological replay producing graded results
- Grading functions for spread, moneyline and total picks
- Summaries, spread-performance analysis and Rich reports
"""

from elo_betting_engine.backtesting.analysis import SpreadAnalysis, analyze_spread_performance
from elo_betting_engine.backtesting.engine import BacktestRun, BacktestRunner, run_backtest
from elo_betting_engine.backtesting.grading import (
    GameGrades,
    grade_game,
    grade_moneyline,
    grade_spread,
    grade_total,
)
from elo_betting_engine.backtesting.metrics import BacktestSummary, MarketRecord, summarize
from elo_betting_engine.backtesting.report import (
    format_backtest_report,
    format_optimization_report,
    format_spread_analysis,
)

__all__ = [
    "BacktestRun",
    "BacktestRunner",
    "BacktestSummary",
    "GameGrades",
    "MarketRecord",
    "SpreadAnalysis",
    "analyze_spread_performance",
    "format_backtest_report",
    "format_optimization_report",
    "format_spread_analysis",
    "grade_game",
    "grade_moneyline",
    "grade_spread",
    "grade_total",
    "run_backtest",
    "summarize",
]
