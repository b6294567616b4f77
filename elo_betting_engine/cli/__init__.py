"""CLI package for the Elo betting engine.

Provides operator commands for backtesting, calibration and optimization.
"""

from elo_betting_engine.cli.main import cli

__all__ = ["cli"]
