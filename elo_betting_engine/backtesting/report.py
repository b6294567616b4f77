"""Human-readable backtest and optimizer reports.

Provides formatted output for backtest runs, spread analyses and optimizer
searches using Rich for terminal display.
"""

from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from elo_betting_engine.backtesting.analysis import SpreadAnalysis
from elo_betting_engine.backtesting.engine import BacktestRun
from elo_betting_engine.backtesting.metrics import MarketRecord
from elo_betting_engine.config import get_settings

if TYPE_CHECKING:
    from elo_betting_engine.models.schema import SimulationResult
    from elo_betting_engine.optimization.optimizer import OptimizationReport

_BUCKET_LABELS = {
    "spread_vs_model": "Spread (model line)",
    "spread_vs_market": "ATS (market line)",
    "moneyline": "Moneyline",
    "total_vs_baseline": "O/U (baseline)",
    "total_vs_market": "O/U (market line)",
}


def _console(buffer: StringIO) -> Console:
    return Console(file=buffer, force_terminal=True, width=100, highlight=False)


def win_pct_markup(win_pct: float, breakeven: float) -> str:
    """Win percentage colored green at or above breakeven, red below."""
    color = "green" if win_pct >= breakeven else "red"
    return f"[{color}]{win_pct:.1f}%[/{color}]"


def _win_pct_cell(record: MarketRecord, breakeven: float) -> str:
    if record.wins + record.losses == 0:
        return "[dim]-[/dim]"
    return win_pct_markup(record.win_pct, breakeven)


def _record_table(title: str, records: dict, label: str, breakeven: float) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column(label, style="cyan")
    table.add_column("W", justify="right")
    table.add_column("L", justify="right")
    table.add_column("P", justify="right")
    table.add_column("Win %", justify="right")
    for key, record in records.items():
        table.add_row(str(key), str(record.wins), str(record.losses), str(record.pushes), _win_pct_cell(record, breakeven))
    return table


def format_backtest_report(
    run: BacktestRun, title: str = "Backtest Report", breakeven_win_pct: float | None = None
) -> str:
    """Format a backtest run for terminal display.

    Market-line and self-referential records are listed as separate rows.

    Args:
        run: BacktestRun to format
        title: Report heading
        breakeven_win_pct: Win percentage shown in green; defaults to settings

    Returns:
        Formatted string for terminal output
    """
    breakeven = get_settings().breakeven_win_pct if breakeven_win_pct is None else breakeven_win_pct
    buffer = StringIO()
    console = _console(buffer)
    summary = run.summary

    console.print(f"\n[bold blue]=== {title} ===[/bold blue]\n")
    console.print(
        f"[white]{summary.total_games} games graded, "
        f"{summary.games_with_market_line} with market lines. "
        f"Skipped {run.skipped_games} non-final games, "
        f"excluded {run.excluded_ties} ties.[/white]\n"
    )

    records = Table(title="Records", show_header=True)
    records.add_column("Market", style="cyan")
    records.add_column("W", justify="right")
    records.add_column("L", justify="right")
    records.add_column("P", justify="right")
    records.add_column("Win %", justify="right")
    records.add_column("Profit", justify="right")
    for name, record in summary.buckets().items():
        profit = record.profit()
        color = "green" if profit > 0 else "red"
        records.add_row(
            _BUCKET_LABELS[name],
            str(record.wins),
            str(record.losses),
            str(record.pushes),
            _win_pct_cell(record, breakeven),
            f"[{color}]{profit:+,.0f}[/{color}]" if record.graded else "[dim]-[/dim]",
        )
    console.print(records)

    errors = Table(title="Prediction Error", show_header=True)
    errors.add_column("Metric", style="cyan")
    errors.add_column("Value", justify="right")
    errors.add_row("Mean |spread error|", f"{summary.mean_absolute_spread_error:.2f}")
    errors.add_row("Mean |total error|", f"{summary.mean_absolute_total_error:.2f}")
    console.print(errors)

    if run.final_ratings:
        console.print("\n[bold blue]=== Top Ratings ===[/bold blue]\n")
        ratings = Table(show_header=True)
        ratings.add_column("Team", style="cyan")
        ratings.add_column("Rating", justify="right")
        ordered = sorted(run.final_ratings.items(), key=lambda item: item[1], reverse=True)
        for team_id, rating in ordered[:10]:
            ratings.add_row(team_id, f"{rating:.0f}")
        console.print(ratings)

    console.print("")
    return buffer.getvalue()


def format_spread_analysis(analysis: SpreadAnalysis, breakeven_win_pct: float | None = None) -> str:
    """Format a spread-performance breakdown."""
    breakeven = get_settings().breakeven_win_pct if breakeven_win_pct is None else breakeven_win_pct
    buffer = StringIO()
    console = _console(buffer)

    console.print("\n[bold blue]=== Spread Analysis ===[/bold blue]\n")
    console.print(
        f"[white]{analysis.total_games} picks. Mean spread error {analysis.mean_spread_error}, "
        f"median {analysis.median_spread_error}. "
        f"Picked the winner {analysis.direction_accuracy}% of the time.[/white]\n"
    )
    console.print(_record_table("By Pick Side", analysis.by_pick_side, "Side", breakeven))
    console.print(_record_table("Favorite vs Underdog", analysis.by_favorite, "Pick", breakeven))
    console.print(_record_table("By Predicted Spread", analysis.by_spread_size, "Spread", breakeven))
    console.print(_record_table("Close Games vs Blowouts", analysis.by_game_type, "Game", breakeven))

    if not analysis.biggest_misses.empty:
        misses = Table(title="Biggest Misses", show_header=True)
        misses.add_column("Game", style="cyan")
        misses.add_column("Predicted", justify="right")
        misses.add_column("Actual", justify="right")
        misses.add_column("Error", justify="right")
        for row in analysis.biggest_misses.head(10).itertuples(index=False):
            misses.add_row(
                f"{row.away_team} @ {row.home_team}",
                f"{row.predicted_spread:+.1f}",
                f"{int(row.actual_spread):+d}",
                f"{row.spread_error:.1f}",
            )
        console.print(misses)

    console.print("")
    return buffer.getvalue()


def _params_cell(result: "SimulationResult") -> str:
    p = result.params
    return (
        f"rtp={p.rating_to_points:g} hfa={p.home_advantage:g} shrink={p.spread_shrinkage:g} "
        f"cap={p.rating_cap:g} spread={p.min_spread:g}-{p.max_spread:g}"
    )


def format_optimization_report(report: "OptimizationReport", limit: int = 10) -> str:
    """Format an optimizer report for terminal display.

    Win percentages are colored against the report's breakeven.
    """
    buffer = StringIO()
    console = _console(buffer)

    console.print("\n[bold blue]=== Optimizer Report ===[/bold blue]\n")
    console.print(
        f"[white]{report.total_simulations} simulations over {report.games_analyzed} games, "
        f"{len(report.viable)} with enough bets.[/white]\n"
    )

    highlights = Table(title="Highlights", show_header=True)
    highlights.add_column("", style="cyan")
    highlights.add_column("Params")
    highlights.add_column("Record", justify="right")
    highlights.add_column("Win %", justify="right")
    highlights.add_column("Profit", justify="right")
    for label, result in (
        ("Baseline", report.baseline),
        ("Best profit", report.best_by_profit),
        ("Best win %", report.best_by_win_pct),
        ("Best volume", report.best_by_volume),
    ):
        if result is None:
            highlights.add_row(label, "[dim]n/a[/dim]", "", "", "")
            continue
        highlights.add_row(
            label,
            _params_cell(result),
            f"{result.wins}-{result.losses}-{result.pushes}",
            win_pct_markup(result.win_pct, report.breakeven_win_pct),
            f"{result.profit:+,.0f}",
        )
    console.print(highlights)

    if report.top:
        top = Table(title=f"Top {min(limit, len(report.top))} (distinct)", show_header=True)
        top.add_column("#", justify="right")
        top.add_column("Params")
        top.add_column("Bets", justify="right")
        top.add_column("Win %", justify="right")
        top.add_column("Profit", justify="right")
        for rank, result in enumerate(report.top[:limit], start=1):
            color = "green" if result.profit > 0 else "red"
            top.add_row(
                str(rank),
                _params_cell(result),
                str(result.bets),
                win_pct_markup(result.win_pct, report.breakeven_win_pct),
                f"[{color}]{result.profit:+,.0f}[/{color}]",
            )
        console.print(top)

    console.print("")
    return buffer.getvalue()
