"""Structured logging configuration using structlog.

The engine is a batch computation, so logging is about traceability of runs:
- JSON output in production mode (one line per event, easy to aggregate)
- Colored console output in development mode (human-readable)
- Run IDs bound through contextvars so every event of a backtest or
  optimizer trial can be grouped

Usage:
    from elo_betting_engine.monitoring import configure_logging, get_logger

    configure_logging("production")  # or "development"

    log = get_logger()
    log.info("backtest_completed", sport="nfl", graded_games=227)
    log.warning("unknown_team", team_id="99")
"""

import logging
import sys

import structlog


def configure_logging(mode: str = "development", level: int = logging.INFO) -> None:
    """Configure structlog for the engine.

    Args:
        mode: Either "production" (JSON output) or "development" (colored console)
        level: Standard library logging level for the root handler
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if mode == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (defaults to caller's module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def bind_run_id(run_id: str) -> None:
    """Bind a run ID to the current context.

    All subsequent log events in this context carry the run_id field, which
    ties together the events of one backtest pass or optimizer trial.

    Args:
        run_id: Unique identifier for this run
    """
    structlog.contextvars.bind_contextvars(run_id=run_id)


def unbind_run_id() -> None:
    """Remove the run ID from context once the run completes."""
    structlog.contextvars.unbind_contextvars("run_id")
