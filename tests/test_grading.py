"""Tests for spread, moneyline and total grading.

Tests cover:
- Pick side against market and model lines
- Push detection on whole-number lines
- Tie-break when the model spread equals the line
- Self-referential and market grades kept separate
- Over/under picks taken before the total is rounded
"""

import pytest

from elo_betting_engine.backtesting import grade_game, grade_moneyline, grade_spread, grade_total
from elo_betting_engine.models import BetMarket, LineSource, Outcome, Pick
from elo_betting_engine.prediction import ScorePredictor, TeamStrength


class TestGradeSpreadAgainstMarket:
    """Test ATS grading with a market spread."""

    @pytest.mark.parametrize(
        "home_score,away_score,expected",
        [
            (27, 20, Outcome.WIN),
            (23, 20, Outcome.PUSH),
            (21, 20, Outcome.LOSS),
            (17, 20, Outcome.LOSS),
        ],
    )
    def test_home_pick(self, make_prediction, home_score, away_score, expected):
        prediction = make_prediction(spread=-5.0)

        bet = grade_spread(prediction, home_score, away_score, market_spread=-3.0)

        assert bet.pick == Pick.HOME
        assert bet.line_source == LineSource.MARKET
        assert bet.line == -3.0
        assert bet.outcome == expected

    def test_away_pick_covers(self, make_prediction):
        prediction = make_prediction(spread=-1.0)

        bet = grade_spread(prediction, 21, 20, market_spread=-3.0)

        assert bet.pick == Pick.AWAY
        assert bet.outcome == Outcome.WIN

    def test_away_underdog_wins_outright(self, make_prediction):
        prediction = make_prediction(spread=7.5)

        bet = grade_spread(prediction, 14, 24, market_spread=3.5)

        assert bet.pick == Pick.AWAY
        assert bet.outcome == Outcome.WIN

    def test_half_point_line_never_pushes(self, make_prediction):
        prediction = make_prediction(spread=-6.0)

        bet = grade_spread(prediction, 24, 21, market_spread=-3.5)

        assert bet.outcome == Outcome.LOSS

    @pytest.mark.parametrize(
        "line,expected_pick",
        [(-3.0, Pick.HOME), (2.0, Pick.AWAY), (0.0, Pick.AWAY)],
    )
    def test_equal_to_line_takes_favorite(self, make_prediction, line, expected_pick):
        prediction = make_prediction(spread=line)

        bet = grade_spread(prediction, 20, 20, market_spread=line)

        assert bet.pick == expected_pick


class TestGradeSpreadAgainstModel:
    """Test grading against the model's own spread."""

    def test_uses_model_spread(self, make_prediction):
        prediction = make_prediction(spread=-3.0)

        bet = grade_spread(prediction, 24, 20)

        assert bet.line_source == LineSource.MODEL
        assert bet.line == -3.0
        assert bet.pick == Pick.HOME
        assert bet.outcome == Outcome.WIN

    def test_push_on_exact_margin(self, make_prediction):
        bet = grade_spread(make_prediction(spread=-3.0), 23, 20)

        assert bet.outcome == Outcome.PUSH

    def test_positive_model_spread_takes_away(self, make_prediction):
        bet = grade_spread(make_prediction(spread=2.5), 20, 21)

        assert bet.pick == Pick.AWAY
        assert bet.outcome == Outcome.LOSS


class TestGradeMoneyline:
    """Test straight-up grading."""

    def test_home_favorite_wins(self, make_prediction):
        bet = grade_moneyline(make_prediction(home_win_probability=0.62), 24, 20)

        assert bet.market == BetMarket.MONEYLINE
        assert bet.line is None
        assert bet.line_source == LineSource.NONE
        assert bet.pick == Pick.HOME
        assert bet.outcome == Outcome.WIN

    def test_coin_flip_picks_away(self, make_prediction):
        bet = grade_moneyline(make_prediction(home_win_probability=0.5), 24, 20)

        assert bet.pick == Pick.AWAY
        assert bet.outcome == Outcome.LOSS

    def test_tie_is_push(self, make_prediction):
        bet = grade_moneyline(make_prediction(home_win_probability=0.7), 17, 17)

        assert bet.outcome == Outcome.PUSH


class TestGradeTotal:
    """Test over/under grading."""

    def test_over_against_market(self, make_prediction):
        bet = grade_total(make_prediction(total=48.0), 24, 21, market_total=44.5)

        assert bet.pick == Pick.OVER
        assert bet.line_source == LineSource.MARKET
        assert bet.outcome == Outcome.WIN

    def test_under_loses(self, make_prediction):
        bet = grade_total(make_prediction(total=40.0), 28, 21, market_total=44.5)

        assert bet.pick == Pick.UNDER
        assert bet.outcome == Outcome.LOSS

    def test_equal_to_baseline_is_under(self, make_prediction):
        bet = grade_total(make_prediction(total=44.0), 24, 20, baseline_total=44.0)

        assert bet.pick == Pick.UNDER
        assert bet.line_source == LineSource.BASELINE
        assert bet.outcome == Outcome.PUSH

    def test_market_wins_over_baseline(self, make_prediction):
        bet = grade_total(make_prediction(total=46.0), 24, 20, market_total=47.0, baseline_total=44.0)

        assert bet.line == 47.0
        assert bet.pick == Pick.UNDER

    def test_requires_a_line(self, make_prediction):
        with pytest.raises(ValueError, match="market_total or a baseline_total"):
            grade_total(make_prediction(), 24, 20)

    def test_over_uses_unrounded_predicted_total(self, nfl_profile):
        """A predicted sum just above the line is an over even when the total rounds down to it."""
        side = TeamStrength(rating=1500, points_scored=22.1, points_allowed=22.1)
        prediction = ScorePredictor(nfl_profile).predict("g1", side, side)

        bet = grade_total(prediction, 30, 20, baseline_total=44.0)

        assert prediction.total == 44.0
        assert prediction.raw_total == 44.1
        assert bet.pick == Pick.OVER
        assert bet.outcome == Outcome.WIN

    def test_baseline_grade_in_game_uses_unrounded_total(self, nfl_profile):
        side = TeamStrength(rating=1500, points_scored=22.1, points_allowed=22.1)
        prediction = ScorePredictor(nfl_profile).predict("g1", side, side)

        grades = grade_game(prediction, 17, 20, nfl_profile)

        assert grades.total_vs_baseline.pick == Pick.OVER
        assert grades.total_vs_baseline.outcome == Outcome.LOSS


class TestGradeGame:
    """Test grading every market for one game."""

    def test_without_market_line(self, make_prediction, nfl_profile):
        grades = grade_game(make_prediction(spread=-3.0, total=44.0), 27, 20, nfl_profile)

        assert grades.spread_vs_market is None
        assert grades.total_vs_market is None
        assert grades.spread_vs_model.line_source == LineSource.MODEL
        assert grades.total_vs_baseline.line == nfl_profile.baseline_total

    def test_market_and_model_grades_differ(self, make_prediction, nfl_profile):
        """Model spread -3 covers at home; against a -10 market line the pick is away."""
        grades = grade_game(
            make_prediction(spread=-3.0, total=44.0), 27, 20, nfl_profile, market_spread=-10.0, market_total=50.5
        )

        assert grades.spread_vs_model.outcome == Outcome.WIN
        assert grades.spread_vs_market.pick == Pick.AWAY
        assert grades.spread_vs_market.outcome == Outcome.WIN
        assert grades.total_vs_market.pick == Pick.UNDER
        assert grades.total_vs_market.outcome == Outcome.WIN
        assert grades.total_vs_baseline.outcome == Outcome.LOSS
