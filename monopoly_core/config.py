"""
Game configuration settings.

``GameConfig`` holds the rule constants of a single game. ``EngineSettings``
reads process-wide defaults from the environment (prefix ``MONOPOLY_``)
using pydantic-settings.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

JAIL_FINE = 50
MAX_JAIL_TURNS = 3


@dataclass
class GameConfig:
    """Configuration for a Monopoly game."""

    starting_money: int = 1500
    go_salary: int = 200

    min_players: int = 2
    max_players: int = 6

    jail_fine: int = JAIL_FINE
    max_jail_turns: int = MAX_JAIL_TURNS

    mortgage_interest_rate: float = 0.10

    seed: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: Optional["EngineSettings"] = None) -> "GameConfig":
        """Build a config from environment-driven engine settings."""
        settings = settings or get_settings()
        return cls(
            starting_money=settings.starting_money,
            go_salary=settings.go_salary,
            seed=settings.seed,
        )


class EngineSettings(BaseSettings):
    """
    Engine defaults loaded from environment variables.

    Environment variables (prefix: MONOPOLY_):
        MONOPOLY_LOG_LEVEL      - logging level name (default: INFO)
        MONOPOLY_STARTING_MONEY - cash each player starts with (default: 1500)
        MONOPOLY_GO_SALARY      - salary for passing GO (default: 200)
        MONOPOLY_SEED           - optional dice seed for reproducible games
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="MONOPOLY_",
    )

    log_level: str = Field(default="INFO", description="Root logging level.")
    starting_money: int = Field(default=1500, ge=0)
    go_salary: int = Field(default=200, ge=0)
    seed: Optional[int] = Field(default=None, description="Dice RNG seed.")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept standard logging level names only."""
        level = v.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache
def get_settings() -> EngineSettings:
    """Return cached engine settings instance."""
    return EngineSettings()


def configure_logging(settings: Optional[EngineSettings] = None) -> None:
    """Configure root logging for hosts that embed the engine."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
