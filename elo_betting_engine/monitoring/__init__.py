"""Monitoring module for structured logging.

Provides structlog configuration shared by the engine, the optimizer and the
operator CLI:
- Structured JSON logging for production
- Human-readable console output for development
- Run IDs for grouping the events of one backtest or optimizer trial
"""

from elo_betting_engine.monitoring.logging import (
    configure_logging,
    get_logger,
    bind_run_id,
    unbind_run_id,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_run_id",
    "unbind_run_id",
]
