"""Numeric helpers shared by the schemas, the predictor and the summaries.

Lines and scores are rounded half-up (a 2.25 spread rounds to 2.5, -2.25 to
-2.0), which is how sportsbooks and the published predictions round. The
built-in ``round`` uses banker's rounding and is not used for lines.
"""

import math


def round_to_step(value: float, step: float) -> float:
    """Round a value half-up to the nearest multiple of ``step``.

    Args:
        value: Value to round
        step: Granularity (e.g. 0.5 for football lines, 0.1 for scores)

    Returns:
        Rounded value, cleaned of binary floating point noise

    Example:
        >>> round_to_step(-3.26, 0.5)
        -3.5
        >>> round_to_step(44.25, 0.5)
        44.5
    """
    if step <= 0:
        raise ValueError(f"step must be positive (got {step})")
    factor = 1.0 / step
    rounded = math.floor(value * factor + 0.5) / factor
    # Strip representation noise like 3.3000000000000003 and negative zero
    return round(rounded, 10) + 0.0


def win_percentage(wins: int, losses: int) -> float:
    """Win percentage over decided bets, rounded to one decimal.

    Pushes are excluded from the denominator. Zero decided bets gives 0.0
    rather than NaN.

    Example:
        >>> win_percentage(36, 22)
        62.1
    """
    decided = wins + losses
    if decided == 0:
        return 0.0
    return round_to_step(wins / decided * 100, 0.1)
