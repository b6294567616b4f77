"""Elo rating engine for spread, moneyline and total predictions.

Rates teams from completed games, predicts scores, grades picks against
market lines, and validates and tunes the model by replaying seasons.
"""

__version__ = "0.1.0"
