"""Shared pytest fixtures for Elo betting engine tests."""

from datetime import datetime, timedelta, timezone

import pytest

from elo_betting_engine.models import Game, GameStatus, MarketLine, PredictionRecord, Team
from elo_betting_engine.monitoring import configure_logging
from elo_betting_engine.sports import get_sport_profile

SEASON_START = datetime(2024, 9, 8, 17, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Configure structlog for test output."""
    configure_logging("development")


@pytest.fixture
def nfl_profile():
    return get_sport_profile("nfl")


@pytest.fixture
def make_game():
    """Factory for games; scores make the game final.

    Example:
        game = make_game("g1", "KC", "DEN", 24, 20, days=3)
    """

    def _make(
        game_id: str,
        home: str,
        away: str,
        home_score: int | None = None,
        away_score: int | None = None,
        days: float = 0,
        week: int | None = None,
    ) -> Game:
        final = home_score is not None and away_score is not None
        return Game(
            game_id=game_id,
            home_team_id=home,
            away_team_id=away,
            scheduled_at=SEASON_START + timedelta(days=days),
            status=GameStatus.FINAL if final else GameStatus.SCHEDULED,
            home_score=home_score,
            away_score=away_score,
            season="2024",
            week=week,
        )

    return _make


@pytest.fixture
def make_prediction():
    """Factory for prediction records with only the graded fields varied."""

    def _make(
        spread: float = -3.0,
        total: float = 44.0,
        home_win_probability: float = 0.6,
        game_id: str = "g1",
    ) -> PredictionRecord:
        home = (total - spread) / 2
        return PredictionRecord(
            game_id=game_id,
            home_rating=1500.0,
            away_rating=1500.0,
            predicted_home_score=home,
            predicted_away_score=total - home,
            raw_spread=spread,
            spread=spread,
            total=total,
            home_win_probability=home_win_probability,
        )

    return _make


@pytest.fixture
def season_teams():
    """Eight teams; T8 is the strongest, T1 the weakest."""
    return [
        Team(
            team_id=f"T{i}",
            abbreviation=f"TM{i}",
            name=f"Team {i}",
            points_scored=16.0 + i,
            points_allowed=28.0 - i,
        )
        for i in range(1, 9)
    ]


@pytest.fixture
def season_games():
    """Fourteen weeks of four games with deterministic scores.

    Two games each week share the early kickoff, so slates are exercised.
    Stronger teams (higher index) usually win. No ties.
    """
    games = []
    for week in range(14):
        for k in range(4):
            home_idx = (k + week) % 8 + 1
            away_idx = (k + week + 4) % 8 + 1
            home_score = 17 + 2 * home_idx - away_idx + (week % 3)
            away_score = 14 + 2 * away_idx - home_idx + ((week + k) % 4)
            if home_score == away_score:
                home_score += 3
            kickoff = SEASON_START + timedelta(days=7 * week, hours=0 if k < 2 else 3 + k)
            games.append(
                Game(
                    game_id=f"2024-{week:02d}-{k}",
                    home_team_id=f"T{home_idx}",
                    away_team_id=f"T{away_idx}",
                    scheduled_at=kickoff,
                    status=GameStatus.FINAL,
                    home_score=home_score,
                    away_score=away_score,
                    season="2024",
                    week=week + 1,
                )
            )
    return games


@pytest.fixture
def season_lines(season_games):
    """Market lines for every other game, home favored by the strength gap."""
    lines = []
    for i, game in enumerate(season_games):
        if i % 2:
            continue
        gap = int(game.home_team_id[1:]) - int(game.away_team_id[1:])
        lines.append(
            MarketLine(
                game_id=game.game_id,
                spread=-1.5 * gap - 1.5,
                total=44.5,
                opening_spread=-1.5 * gap,
                opening_total=45.0,
            )
        )
    return lines
