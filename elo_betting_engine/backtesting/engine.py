"""Chronological backtesting engine for the Elo model.

Replays a list of completed games in start-time order. For each game the
model predicts from the ratings known before kickoff, the prediction is
graded against the final score, and only then are ratings updated.

Key principle: a game is only ever predicted from results that finished
before it started. Games sharing a start time form a slate; every game in
a slate is predicted with the ratings from before the slate.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import pandas as pd

from elo_betting_engine.backtesting.grading import grade_game
from elo_betting_engine.backtesting.metrics import BacktestSummary, summarize
from elo_betting_engine.models.schema import (
    BacktestResult,
    Game,
    MarketLine,
    PredictionRecord,
    SimulationParams,
    Team,
)
from elo_betting_engine.models.timeline import completed_games, iter_slates
from elo_betting_engine.monitoring import get_logger
from elo_betting_engine.prediction.confidence import assess_confidence, with_confidence
from elo_betting_engine.prediction.predictor import ScorePredictor, TeamStrength
from elo_betting_engine.ratings.elo import RatingUpdater
from elo_betting_engine.ratings.store import RatingStore, ScoringLedger
from elo_betting_engine.sports import SportProfile

log = get_logger()


@dataclass
class BacktestRun:
    """Output of one backtest pass.

    Attributes:
        results: Graded results in chronological order
        final_ratings: Ratings after the last game
        skipped_games: Games dropped for not being final
        excluded_ties: Tied finals rated but not graded (sport has no ties)
    """

    results: list[BacktestResult]
    final_ratings: dict[str, float] = field(default_factory=dict)
    skipped_games: int = 0
    excluded_ties: int = 0

    @property
    def summary(self) -> BacktestSummary:
        return summarize(self.results)

    def to_frame(self) -> pd.DataFrame:
        """One row per graded game, suitable for analysis and export."""
        rows = []
        for r in self.results:
            p = r.prediction
            rows.append(
                {
                    "game_id": r.game_id,
                    "scheduled_at": r.scheduled_at,
                    "season": r.season,
                    "week": r.week,
                    "home_team": r.home_team,
                    "away_team": r.away_team,
                    "home_rating": r.home_rating,
                    "away_rating": r.away_rating,
                    "predicted_home_score": p.predicted_home_score,
                    "predicted_away_score": p.predicted_away_score,
                    "predicted_spread": p.spread,
                    "predicted_total": p.total,
                    "home_win_probability": p.home_win_probability,
                    "market_spread": r.market_spread,
                    "market_total": r.market_total,
                    "actual_home_score": r.actual_home_score,
                    "actual_away_score": r.actual_away_score,
                    "actual_spread": r.actual_spread,
                    "actual_total": r.actual_total,
                    "spread_pick": r.spread_vs_model.pick.value,
                    "spread_result": r.spread_vs_model.outcome.value,
                    "ats_pick": r.spread_vs_market.pick.value if r.spread_vs_market else None,
                    "ats_result": r.spread_vs_market.outcome.value if r.spread_vs_market else None,
                    "moneyline_pick": r.moneyline.pick.value,
                    "moneyline_result": r.moneyline.outcome.value,
                    "ou_pick": r.total_vs_baseline.pick.value,
                    "ou_result": r.total_vs_baseline.outcome.value,
                    "market_ou_pick": r.total_vs_market.pick.value if r.total_vs_market else None,
                    "market_ou_result": r.total_vs_market.outcome.value if r.total_vs_market else None,
                }
            )
        return pd.DataFrame(rows)


class BacktestRunner:
    """Replays completed games through predictor, grader and rating updater.

    Each ``run`` builds its own RatingStore, so a runner can be reused and
    parallel runs never share state.

    Example:
        >>> runner = BacktestRunner(get_sport_profile("nfl"))
        >>> run = runner.run(games, teams=teams, market_lines=lines)
        >>> print(f"ATS: {run.summary.spread_vs_market.win_pct}%")
    """

    def __init__(
        self,
        profile: SportProfile,
        params: SimulationParams | None = None,
        rolling_stats: bool = False,
        round_ratings: bool = True,
    ) -> None:
        """Initialize the runner.

        Args:
            profile: Sport constants
            params: Model constants (defaults to the sport's shipped values)
            rolling_stats: Use scoring averages from prior games only instead
                of the team records' season averages
            round_ratings: Round updated ratings to whole points
        """
        self.profile = profile
        self.params = params if params is not None else profile.default_params
        self.rolling_stats = rolling_stats
        self.predictor = ScorePredictor(profile, self.params)
        self.updater = RatingUpdater.for_sport(profile, round_ratings=round_ratings)

    def run(
        self,
        games: Iterable[Game],
        teams: Iterable[Team] | None = None,
        market_lines: Iterable[MarketLine] | Mapping[str, MarketLine] | None = None,
        initial_ratings: Mapping[str, float] | None = None,
        weather_impacts: Mapping[str, float] | None = None,
    ) -> BacktestRun:
        """Run the backtest.

        Args:
            games: Historical games in any order; non-final games are skipped
            teams: Team records for names and scoring averages
            market_lines: Market lines, as a list or keyed by game id
            initial_ratings: Starting ratings (unlisted teams start at 1500)
            weather_impacts: Weather impact points by game id

        Returns:
            BacktestRun with results in chronological order
        """
        games = list(games)
        finals = completed_games(games)
        skipped = len(games) - len(finals)
        teams_by_id = {t.team_id: t for t in teams or []}
        lines = _index_lines(market_lines)
        weather = weather_impacts or {}

        store = RatingStore(initial=initial_ratings)
        ledger = ScoringLedger() if self.rolling_stats else None
        unknown: set[str] = set()

        log.info(
            "backtest_started",
            sport=self.profile.sport.value,
            games=len(finals),
            skipped_games=skipped,
            rolling_stats=self.rolling_stats,
        )

        results: list[BacktestResult] = []
        excluded_ties = 0

        for slate in iter_slates(finals):
            predictions = {
                game.game_id: self._predict(game, store, teams_by_id, ledger, weather, unknown)
                for game in slate
            }

            for game in slate:
                if game.is_tie and not self.profile.allows_ties:
                    excluded_ties += 1
                    continue
                results.append(
                    self._grade(game, predictions[game.game_id], teams_by_id, lines.get(game.game_id))
                )

            for game in slate:
                self.updater.apply(store, game)
                if ledger is not None:
                    ledger.record(game.home_team_id, game.away_team_id, game.home_score, game.away_score)

        if unknown:
            log.warning("unknown_teams", team_ids=sorted(unknown), count=len(unknown))

        run = BacktestRun(
            results=results,
            final_ratings=store.snapshot(),
            skipped_games=skipped,
            excluded_ties=excluded_ties,
        )
        log.info(
            "backtest_completed",
            sport=self.profile.sport.value,
            graded_games=len(results),
            excluded_ties=excluded_ties,
            skipped_games=skipped,
        )
        return run

    def _strength(
        self,
        team_id: str,
        rating: float,
        teams_by_id: Mapping[str, Team],
        ledger: ScoringLedger | None,
        unknown: set[str],
    ) -> TeamStrength:
        league_avg = self.profile.league_avg_points
        if ledger is not None:
            scored, allowed = ledger.averages(team_id, league_avg)
            return TeamStrength(rating=rating, points_scored=scored, points_allowed=allowed)
        team = teams_by_id.get(team_id)
        if team is None and teams_by_id:
            unknown.add(team_id)
        return TeamStrength.from_team(team, league_avg, rating)

    def _predict(
        self,
        game: Game,
        store: RatingStore,
        teams_by_id: Mapping[str, Team],
        ledger: ScoringLedger | None,
        weather: Mapping[str, float],
        unknown: set[str],
    ) -> PredictionRecord:
        home = self._strength(game.home_team_id, store.get(game.home_team_id), teams_by_id, ledger, unknown)
        away = self._strength(game.away_team_id, store.get(game.away_team_id), teams_by_id, ledger, unknown)
        impact = weather.get(game.game_id, 0.0) if self.profile.outdoor else 0.0
        return self.predictor.predict(game.game_id, home, away, weather_impact=impact)

    def _grade(
        self,
        game: Game,
        prediction: PredictionRecord,
        teams_by_id: Mapping[str, Team],
        line: MarketLine | None,
    ) -> BacktestResult:
        market_spread = line.spread if line is not None else None
        market_total = line.total if line is not None else None
        prediction = with_confidence(prediction, assess_confidence(prediction, line, self.profile))
        grades = grade_game(
            prediction,
            game.home_score,
            game.away_score,
            self.profile,
            market_spread=market_spread,
            market_total=market_total,
        )
        return BacktestResult(
            game_id=game.game_id,
            scheduled_at=game.scheduled_at,
            season=game.season,
            week=game.week,
            home_team_id=game.home_team_id,
            away_team_id=game.away_team_id,
            home_team=_abbreviation(game.home_team_id, teams_by_id),
            away_team=_abbreviation(game.away_team_id, teams_by_id),
            prediction=prediction,
            market_spread=market_spread,
            market_total=market_total,
            actual_home_score=game.home_score,
            actual_away_score=game.away_score,
            spread_vs_model=grades.spread_vs_model,
            spread_vs_market=grades.spread_vs_market,
            moneyline=grades.moneyline,
            total_vs_baseline=grades.total_vs_baseline,
            total_vs_market=grades.total_vs_market,
        )


def _index_lines(
    market_lines: Iterable[MarketLine] | Mapping[str, MarketLine] | None,
) -> dict[str, MarketLine]:
    if market_lines is None:
        return {}
    if isinstance(market_lines, Mapping):
        return dict(market_lines)
    return {line.game_id: line for line in market_lines}


def _abbreviation(team_id: str, teams_by_id: Mapping[str, Team]) -> str:
    team = teams_by_id.get(team_id)
    return team.abbreviation if team is not None else team_id


def run_backtest(
    games: Iterable[Game],
    profile: SportProfile,
    params: SimulationParams | None = None,
    teams: Iterable[Team] | None = None,
    market_lines: Iterable[MarketLine] | Mapping[str, MarketLine] | None = None,
    rolling_stats: bool = False,
) -> BacktestRun:
    """Convenience function to run a backtest.

    Creates a BacktestRunner with the given parameters and runs it.
    """
    runner = BacktestRunner(profile, params=params, rolling_stats=rolling_stats)
    return runner.run(games, teams=teams, market_lines=market_lines)
