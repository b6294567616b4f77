"""Typer CLI entry point for the Elo betting engine.

Operator commands over a JSON dataset file
({"teams": [...], "games": [...], "lines": [...], "weather": {...}}):
- elo-engine backtest season.json --sport nfl
- elo-engine calibrate season.json
- elo-engine optimize season.json --preset fine --workers 4
- elo-engine version
"""

import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

# Load .env file before settings are read
load_dotenv()

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from elo_betting_engine import __version__
from elo_betting_engine.backtesting import (
    BacktestRunner,
    analyze_spread_performance,
    format_backtest_report,
    format_optimization_report,
    format_spread_analysis,
)
from elo_betting_engine.calibration import Calibrator
from elo_betting_engine.config import get_settings
from elo_betting_engine.models import BetMarket, EngineDataset
from elo_betting_engine.monitoring import bind_run_id, configure_logging, unbind_run_id
from elo_betting_engine.optimization import ParameterOptimizer, search_preset
from elo_betting_engine.sports import SportProfile, get_sport_profile

cli = typer.Typer(
    name="elo-engine",
    help="""Elo betting engine - backtest, calibrate and tune the rating model.

QUICK START:
  elo-engine backtest season.json --sport nfl
  elo-engine calibrate season.json
  elo-engine optimize season.json --preset coarse --workers 4
""",
    add_completion=False,
)

console = Console(force_terminal=True, highlight=False, no_color=os.getenv("NO_COLOR") is not None)


class Preset(str, Enum):
    COARSE = "coarse"
    FINE = "fine"
    WEATHER = "weather"


def load_dataset(path: Path) -> EngineDataset:
    """Read and validate a dataset file.

    Raises:
        ValidationError: If any record is malformed
    """
    return EngineDataset.model_validate_json(path.read_text(encoding="utf-8"))


def _load_or_exit(path: Path) -> EngineDataset:
    try:
        return load_dataset(path)
    except ValidationError as e:
        console.print(f"[bold red]Invalid dataset:[/bold red] {e.error_count()} error(s)")
        console.print(str(e), markup=False)
        raise typer.Exit(code=1)


def _profile_or_exit(sport: str | None) -> SportProfile:
    try:
        return get_sport_profile(sport or get_settings().default_sport)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)


@cli.callback()
def main_callback():
    """Configure logging from settings before any command runs."""
    configure_logging(get_settings().log_mode)


@cli.command()
def backtest(
    data_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Dataset JSON file"),
    sport: str = typer.Option(None, "--sport", "-s", help="Sport profile (nfl, nba, nhl, cbb)"),
    rolling_stats: bool = typer.Option(False, "--rolling-stats", help="Use prior-game scoring averages only"),
    analysis: bool = typer.Option(False, "--analysis", "-a", help="Show spread-performance breakdowns"),
    csv_out: Path = typer.Option(None, "--csv", help="Write per-game results to a CSV file"),
):
    """Replay completed games and grade the model's picks.

    \b
    EXAMPLES:
      elo-engine backtest nfl-2024.json
      elo-engine backtest nba.json --sport nba --analysis
    """
    profile = _profile_or_exit(sport)
    dataset = _load_or_exit(data_file)

    bind_run_id(f"backtest-{data_file.stem}")
    try:
        run = BacktestRunner(profile, rolling_stats=rolling_stats).run(
            dataset.games,
            teams=dataset.teams,
            market_lines=dataset.lines,
            weather_impacts=dataset.weather,
        )
    finally:
        unbind_run_id()

    typer.echo(format_backtest_report(run, title=f"{profile.sport.value.upper()} Backtest"))
    if analysis:
        typer.echo(format_spread_analysis(analyze_spread_performance(run)))
        if run.summary.spread_vs_market.graded:
            typer.echo(format_spread_analysis(analyze_spread_performance(run, against_market=True)))
    if csv_out is not None:
        run.to_frame().to_csv(csv_out, index=False)
        console.print(f"[green]Wrote {len(run.results)} rows to {csv_out}[/green]")


@cli.command()
def calibrate(
    data_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Dataset JSON file"),
    sport: str = typer.Option(None, "--sport", "-s", help="Sport profile (nfl, nba, nhl, cbb)"),
):
    """Fit rating-to-points and home advantage from final margins."""
    profile = _profile_or_exit(sport)
    dataset = _load_or_exit(data_file)

    result = Calibrator(profile).calibrate(dataset.games)

    table = Table(title=f"{profile.sport.value.upper()} Calibration", show_header=True)
    table.add_column("Constant", style="cyan")
    table.add_column("Fitted", justify="right")
    table.add_column("Current", justify="right")
    table.add_row("Points per 100 rating", f"{result.rating_to_points:.2f}", f"{profile.default_params.rating_to_points:.2f}")
    table.add_row("Home advantage (pts)", f"{result.home_advantage:.2f}", f"{profile.default_params.home_advantage:.2f}")
    table.add_row("R squared", f"{result.r_squared:.3f}", "")
    table.add_row("Games", str(result.sample_size), "")
    console.print(table)


@cli.command()
def optimize(
    data_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Dataset JSON file"),
    sport: str = typer.Option(None, "--sport", "-s", help="Sport profile (nfl, nba, nhl, cbb)"),
    preset: Preset = typer.Option(Preset.COARSE, "--preset", "-p", help="Search preset"),
    workers: int = typer.Option(None, "--workers", "-w", help="Process pool size (default from settings)"),
    market_lines: bool = typer.Option(False, "--market-lines", help="Grade against market lines"),
    limit: int = typer.Option(10, "--limit", "-n", help="Rows in the top table"),
):
    """Search model parameters by simulated flat-bet profit.

    \b
    PRESETS:
      coarse   sweeps, pairwise combinations and a deep grid
      fine     dense grid around the coarse winner
      weather  weather coefficient sweep, graded on totals

    Grids are sized for the chosen sport (points, goals or basketball points).
    """
    settings = get_settings()
    profile = _profile_or_exit(sport)
    dataset = _load_or_exit(data_file)

    baseline, candidates = search_preset(profile, preset.value)
    market = BetMarket.TOTAL if preset == Preset.WEATHER else BetMarket.SPREAD

    optimizer = ParameterOptimizer(
        profile,
        min_sample_size=settings.min_sample_size,
        top_n=settings.top_n,
        max_workers=workers or settings.optimizer_max_workers,
        breakeven_win_pct=settings.breakeven_win_pct,
        stake=settings.stake,
        payout=settings.payout,
    )

    bind_run_id(f"optimize-{preset.value}-{data_file.stem}")
    try:
        report = optimizer.optimize(
            dataset.games,
            candidates,
            teams=dataset.teams,
            market_lines=dataset.lines,
            market=market,
            use_market_lines=market_lines,
            baseline=baseline,
        )
    finally:
        unbind_run_id()

    typer.echo(format_optimization_report(report, limit=limit))


@cli.command()
def version():
    """Show version and configuration info."""
    settings = get_settings()
    console.print(f"[bold cyan]Elo Betting Engine[/bold cyan] v{__version__}")
    console.print()
    console.print("[bold]Configuration:[/bold]")
    console.print(f"  Environment: {settings.environment}")
    console.print(f"  Default sport: {settings.default_sport}")
    console.print(f"  Optimizer workers: {settings.optimizer_max_workers}")
    console.print(f"  Min sample size: {settings.min_sample_size}")


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
