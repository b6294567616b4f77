"""Configuration management for the Elo betting engine.

Settings are loaded from environment variables (prefix ``ELO_ENGINE_``) and
an optional ``.env`` file using pydantic-settings. Nothing here is secret;
every field has a default so the engine runs with no configuration at all.
"""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Engine settings loaded from environment variables.

    Settings:
    - ENVIRONMENT: "development" (console logs) or "production" (JSON logs)
    - DEFAULT_SPORT: Sport profile used when a command does not name one
    - OPTIMIZER_MAX_WORKERS: Process pool size for optimizer trials (1 = serial)
    - MIN_SAMPLE_SIZE: Minimum graded games for an optimizer result to rank
    - TOP_N: Number of deduplicated optimizer results to keep
    - BREAKEVEN_WIN_PCT: Win percentage needed to break even at -110
    - STAKE / PAYOUT: Amount risked and amount won per simulated bet
    """

    environment: str = Field(default="development")
    default_sport: str = Field(default="nfl")

    optimizer_max_workers: int = Field(default=1, ge=1, le=64)
    min_sample_size: int = Field(default=50, ge=1)
    top_n: int = Field(default=20, ge=1, le=500)
    breakeven_win_pct: float = Field(default=52.4, ge=0.0, le=100.0)

    stake: float = Field(default=110.0, gt=0, description="Amount risked per bet (-110 odds)")
    payout: float = Field(default=100.0, gt=0, description="Amount won per winning bet")

    model_config = SettingsConfigDict(
        env_prefix="ELO_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_environment(self) -> "EngineSettings":
        if self.environment not in ("development", "production"):
            raise ValueError(
                f"environment must be 'development' or 'production' (got {self.environment!r})"
            )
        return self

    @property
    def log_mode(self) -> str:
        """Logging mode matching the environment."""
        return "production" if self.environment == "production" else "development"


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached settings instance (singleton).

    Returns:
        EngineSettings instance with validated configuration

    Raises:
        ValidationError: If an environment variable holds an invalid value
    """
    return EngineSettings()
