"""Conviction tiers for predictions.

An edge is how far the model disagrees with the market: points for spreads
and totals, percentage points away from a coin flip for moneylines. Tiers
are display metadata only and never change a pick.
"""

from elo_betting_engine.models.schema import (
    ConfidenceAssessment,
    ConfidenceTier,
    MarketLine,
    PredictionRecord,
)
from elo_betting_engine.sports import SportProfile, TierThresholds


def tier_for_edge(edge: float, thresholds: TierThresholds) -> ConfidenceTier:
    """Map an edge to high / medium / low.

    Example:
        >>> tier_for_edge(3.5, TierThresholds(high=3.0, medium=1.5))
        <ConfidenceTier.HIGH: 'high'>
    """
    if edge >= thresholds.high:
        return ConfidenceTier.HIGH
    if edge >= thresholds.medium:
        return ConfidenceTier.MEDIUM
    return ConfidenceTier.LOW


def assess_confidence(
    prediction: PredictionRecord,
    market_line: MarketLine | None,
    profile: SportProfile,
) -> ConfidenceAssessment:
    """Measure edges against the market and tier them.

    Args:
        prediction: Model prediction
        market_line: Market line for the game, None if not offered
        profile: Sport whose thresholds apply

    Returns:
        ConfidenceAssessment; spread/total edge and tier are None when the
        corresponding market value is missing
    """
    spread_edge = None
    total_edge = None
    if market_line is not None and market_line.spread is not None:
        spread_edge = round(abs(prediction.spread - market_line.spread), 2)
    if market_line is not None and market_line.total is not None:
        total_edge = round(abs(prediction.total - market_line.total), 2)

    moneyline_edge = round(abs(prediction.home_win_probability - 0.5) * 100, 2)

    return ConfidenceAssessment(
        spread_edge=spread_edge,
        total_edge=total_edge,
        moneyline_edge=moneyline_edge,
        spread_tier=None if spread_edge is None else tier_for_edge(spread_edge, profile.spread_tiers),
        total_tier=None if total_edge is None else tier_for_edge(total_edge, profile.total_tiers),
        moneyline_tier=tier_for_edge(moneyline_edge, profile.moneyline_tiers),
    )


def with_confidence(prediction: PredictionRecord, assessment: ConfidenceAssessment) -> PredictionRecord:
    """Return a copy of ``prediction`` carrying ``assessment``."""
    return prediction.model_copy(update={"confidence": assessment})
