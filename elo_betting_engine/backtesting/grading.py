"""Grading of model picks against final scores.

Every market produces a three-way outcome (win / loss / push). Spreads and
totals are graded twice when a market line exists:
- against the market line (``line_source=market``), the real ATS/O-U test;
- against the model's own spread or the sport's baseline total, which
  always exists and keeps seasons without odds gradeable.

The two grades are returned in separate fields and never combined.
"""

from dataclasses import dataclass

from elo_betting_engine.models.schema import (
    BetMarket,
    GradedBet,
    LineSource,
    Outcome,
    Pick,
    PredictionRecord,
)
from elo_betting_engine.sports import SportProfile

PUSH_TOLERANCE = 1e-9


def _three_way(value: float) -> Outcome:
    """Positive wins, negative loses, zero (within tolerance) pushes."""
    if abs(value) < PUSH_TOLERANCE:
        return Outcome.PUSH
    return Outcome.WIN if value > 0 else Outcome.LOSS


def grade_spread(
    prediction: PredictionRecord,
    home_score: int,
    away_score: int,
    market_spread: float | None = None,
) -> GradedBet:
    """Grade the spread pick.

    The line is the market spread when given, otherwise the model's own
    spread. The model takes the home side when its spread is below the
    line (home stronger than the market thinks) and the away side when
    above; on equality it takes the favorite (home when the line is
    negative).

    Example:
        Line -3, home wins by 3: cover margin 3 + (-3) = 0, a push.
    """
    if market_spread is not None:
        line, source = market_spread, LineSource.MARKET
    else:
        line, source = prediction.spread, LineSource.MODEL

    if prediction.spread < line:
        pick = Pick.HOME
    elif prediction.spread > line:
        pick = Pick.AWAY
    else:
        pick = Pick.HOME if line < 0 else Pick.AWAY

    cover = (home_score - away_score) + line
    outcome = _three_way(cover if pick == Pick.HOME else -cover)
    return GradedBet(market=BetMarket.SPREAD, line_source=source, line=line, pick=pick, outcome=outcome)


def grade_moneyline(prediction: PredictionRecord, home_score: int, away_score: int) -> GradedBet:
    """Grade the straight-up pick: home when its win probability exceeds 0.5."""
    pick = Pick.HOME if prediction.home_win_probability > 0.5 else Pick.AWAY
    margin = home_score - away_score
    outcome = _three_way(margin if pick == Pick.HOME else -margin)
    return GradedBet(market=BetMarket.MONEYLINE, line_source=LineSource.NONE, line=None, pick=pick, outcome=outcome)


def grade_total(
    prediction: PredictionRecord,
    home_score: int,
    away_score: int,
    market_total: float | None = None,
    baseline_total: float | None = None,
) -> GradedBet:
    """Grade the over/under pick against the market total or the baseline.

    The pick is over when the predicted home plus away score exceeds the
    line, compared before the total is rounded to the line step.

    Raises:
        ValueError: If neither a market total nor a baseline is given
    """
    if market_total is not None:
        line, source = market_total, LineSource.MARKET
    elif baseline_total is not None:
        line, source = baseline_total, LineSource.BASELINE
    else:
        raise ValueError("grade_total needs a market_total or a baseline_total")

    pick = Pick.OVER if prediction.raw_total > line else Pick.UNDER
    diff = (home_score + away_score) - line
    outcome = _three_way(diff if pick == Pick.OVER else -diff)
    return GradedBet(market=BetMarket.TOTAL, line_source=source, line=line, pick=pick, outcome=outcome)


@dataclass(frozen=True)
class GameGrades:
    """All grades for one game; market grades are None without a line."""

    spread_vs_model: GradedBet
    spread_vs_market: GradedBet | None
    moneyline: GradedBet
    total_vs_baseline: GradedBet
    total_vs_market: GradedBet | None


def grade_game(
    prediction: PredictionRecord,
    home_score: int,
    away_score: int,
    profile: SportProfile,
    market_spread: float | None = None,
    market_total: float | None = None,
) -> GameGrades:
    """Grade every market for one game."""
    return GameGrades(
        spread_vs_model=grade_spread(prediction, home_score, away_score),
        spread_vs_market=(
            None
            if market_spread is None
            else grade_spread(prediction, home_score, away_score, market_spread)
        ),
        moneyline=grade_moneyline(prediction, home_score, away_score),
        total_vs_baseline=grade_total(
            prediction, home_score, away_score, baseline_total=profile.baseline_total
        ),
        total_vs_market=(
            None
            if market_total is None
            else grade_total(prediction, home_score, away_score, market_total=market_total)
        ),
    )
