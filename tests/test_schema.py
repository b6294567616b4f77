"""Tests for record schemas, numeric helpers, chronology and sport profiles.

Tests cover:
- Strict validation of consumed records
- Derived properties of games, lines and simulation results
- Half-up rounding and zero-safe win percentages
- Chronological sort and slate grouping
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from elo_betting_engine.models import (
    EngineDataset,
    Game,
    GameStatus,
    MarketLine,
    SimulationParams,
    SimulationResult,
    Team,
    completed_games,
    iter_slates,
    round_to_step,
    sort_chronologically,
    win_percentage,
)
from elo_betting_engine.sports import Sport, TierThresholds, get_sport_profile


class TestGame:
    """Test Game validation and derived values."""

    def test_final_game_properties(self, make_game):
        game = make_game("g1", "KC", "DEN", 27, 20)

        assert game.is_final
        assert game.home_margin == 7
        assert game.total_points == 47
        assert not game.is_tie

    def test_scheduled_game_has_no_margin(self, make_game):
        game = make_game("g1", "KC", "DEN")

        assert not game.is_final
        assert game.home_margin is None
        assert game.total_points is None

    def test_same_team_rejected(self):
        with pytest.raises(ValidationError, match="home and away"):
            Game(game_id="g1", home_team_id="KC", away_team_id="KC", scheduled_at=datetime(2024, 9, 8))

    def test_final_requires_scores(self):
        with pytest.raises(ValidationError, match="require both scores"):
            Game(
                game_id="g1",
                home_team_id="KC",
                away_team_id="DEN",
                scheduled_at=datetime(2024, 9, 8),
                status=GameStatus.FINAL,
                home_score=21,
            )

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            Game(
                game_id="g1",
                home_team_id="KC",
                away_team_id="DEN",
                scheduled_at=datetime(2024, 9, 8),
                venue="Arrowhead",
            )

    def test_naive_time_read_as_utc(self):
        """Naive and offset timestamps for the same instant compare equal."""
        naive = Game(game_id="a", home_team_id="KC", away_team_id="DEN", scheduled_at=datetime(2024, 9, 8, 17))
        offset = Game(
            game_id="b",
            home_team_id="KC",
            away_team_id="DEN",
            scheduled_at=datetime(2024, 9, 8, 13, tzinfo=timezone(timedelta(hours=-4))),
        )

        assert naive.scheduled_at.tzinfo is not None
        assert naive.scheduled_at == offset.scheduled_at

    def test_negative_score_rejected(self):
        with pytest.raises(ValidationError):
            Game(
                game_id="g1",
                home_team_id="KC",
                away_team_id="DEN",
                scheduled_at=datetime(2024, 9, 8),
                status=GameStatus.FINAL,
                home_score=-1,
                away_score=3,
            )


class TestMarketLine:
    """Test market line helpers."""

    def test_consensus_rounds_to_half_point(self):
        line = MarketLine.consensus("g1", [-3.0, -3.5, -3.0], [44.5, 45.0])

        assert line.spread == -3.0
        assert line.total == 45.0

    def test_consensus_missing_side_is_none(self):
        line = MarketLine.consensus("g1", [-6.5], [])

        assert line.spread == -6.5
        assert line.total is None

    def test_line_movement(self):
        line = MarketLine(game_id="g1", spread=-4.5, opening_spread=-3.0, total=47.0, opening_total=45.5)

        assert line.spread_movement == -1.5
        assert line.total_movement == 1.5

    def test_movement_without_opening_is_none(self):
        assert MarketLine(game_id="g1", spread=-3.0).spread_movement is None


class TestSimulationRecords:
    """Test SimulationParams and SimulationResult validation."""

    def test_spread_window_validated(self):
        with pytest.raises(ValidationError, match="min_spread"):
            SimulationParams(min_spread=8, max_spread=3)

    def test_shrinkage_must_be_fraction(self):
        with pytest.raises(ValidationError):
            SimulationParams(spread_shrinkage=1.5)

    def test_key_identifies_values(self):
        assert SimulationParams(rating_cap=4).key() == SimulationParams(rating_cap=4.0).key()
        assert SimulationParams(rating_cap=4).key() != SimulationParams(rating_cap=5).key()

    def test_profit_at_minus_110(self):
        result = SimulationResult(params=SimulationParams(), wins=36, losses=22, pushes=2, total_games=80)

        assert result.total_graded == 60
        assert result.bets == 58
        assert result.win_pct == 62.1
        assert result.profit == 36 * 100 - 22 * 110

    def test_zero_graded_is_zero_percent(self):
        result = SimulationResult(params=SimulationParams(), wins=0, losses=0, pushes=0, total_games=10)

        assert result.win_pct == 0.0
        assert result.profit == 0.0

    def test_graded_cannot_exceed_games(self):
        with pytest.raises(ValidationError, match="exceed"):
            SimulationResult(params=SimulationParams(), wins=5, losses=5, pushes=1, total_games=10)


class TestNumeric:
    """Test rounding helpers."""

    @pytest.mark.parametrize(
        "value,step,expected",
        [
            (2.25, 0.5, 2.5),
            (-2.25, 0.5, -2.0),
            (-3.26, 0.5, -3.5),
            (44.24, 0.5, 44.0),
            (3.36, 0.1, 3.4),
            (-0.04, 0.1, 0.0),
        ],
    )
    def test_round_to_step_half_up(self, value, step, expected):
        assert round_to_step(value, step) == expected

    def test_round_to_step_rejects_bad_step(self):
        with pytest.raises(ValueError):
            round_to_step(1.0, 0)

    def test_win_percentage(self):
        assert win_percentage(36, 22) == 62.1
        assert win_percentage(0, 0) == 0.0
        assert win_percentage(1, 0) == 100.0


class TestTimeline:
    """Test chronological ordering helpers."""

    def test_sort_breaks_timestamp_ties_by_game_id(self, make_game):
        games = [
            make_game("c", "A", "B", 1, 0, days=1),
            make_game("b", "C", "D", 1, 0),
            make_game("a", "E", "F", 1, 0),
        ]

        assert [g.game_id for g in sort_chronologically(games)] == ["a", "b", "c"]

    def test_slates_group_same_kickoff(self, make_game):
        games = [
            make_game("late", "A", "B", 1, 0, days=1),
            make_game("early-2", "C", "D", 1, 0),
            make_game("early-1", "E", "F", 1, 0),
        ]

        slates = [[g.game_id for g in slate] for slate in iter_slates(games)]

        assert slates == [["early-1", "early-2"], ["late"]]

    def test_completed_games_keeps_finals_in_order(self, make_game):
        games = [
            make_game("b", "A", "B", 1, 0, days=1),
            make_game("s", "C", "D"),
            make_game("a", "E", "F", 2, 2),
        ]

        assert [g.game_id for g in completed_games(games)] == ["b", "a"]


class TestEngineDataset:
    """Test the input bundle."""

    def test_duplicate_lines_rejected(self, make_game):
        with pytest.raises(ValidationError, match="Duplicate"):
            EngineDataset(
                games=[make_game("g1", "A", "B")],
                lines=[MarketLine(game_id="g1", spread=-3), MarketLine(game_id="g1", spread=-4)],
            )

    def test_lines_by_game(self, make_game):
        dataset = EngineDataset(
            teams=[Team(team_id="A", abbreviation="AAA")],
            games=[make_game("g1", "A", "B")],
            lines=[MarketLine(game_id="g1", spread=-3)],
        )

        assert dataset.lines_by_game()["g1"].spread == -3


class TestSportProfiles:
    """Test sport profile lookup."""

    def test_lookup_is_case_insensitive(self):
        assert get_sport_profile("NFL").sport == Sport.NFL
        assert get_sport_profile(Sport.NBA).line_granularity == 0.1

    def test_unknown_sport(self):
        with pytest.raises(ValueError, match="Unsupported sport"):
            get_sport_profile("cricket")

    def test_tier_thresholds_ordered(self):
        with pytest.raises(ValueError):
            TierThresholds(high=1.0, medium=2.0)

    def test_no_profile_allows_ties(self):
        for sport in Sport:
            assert not get_sport_profile(sport).allows_ties
