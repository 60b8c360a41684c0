"""
pledge configuration.

Settings come from keyword arguments or from the environment:

    PLEDGE_REACTOR          "queue" (default) or "asyncio"
    PLEDGE_LOG_LEVEL        level name for the "pledge" logger (default WARNING)
    PLEDGE_MAX_DRAIN_TURNS  cap on jobs per TaskQueue.run_until_idle() call
"""

import logging
import os
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class PledgeConfig(BaseModel):
    """Library-wide settings."""

    reactor: Literal["queue", "asyncio"] = "queue"
    log_level: str = "WARNING"
    max_drain_turns: Optional[int] = Field(default=None, gt=0)

    @field_validator("reactor", mode="before")
    @classmethod
    def _normalize_reactor(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def from_env(cls) -> "PledgeConfig":
        """Build a config from PLEDGE_* environment variables."""
        values = {}
        reactor = os.environ.get("PLEDGE_REACTOR")
        if reactor:
            values["reactor"] = reactor
        log_level = os.environ.get("PLEDGE_LOG_LEVEL")
        if log_level:
            values["log_level"] = log_level
        max_turns = os.environ.get("PLEDGE_MAX_DRAIN_TURNS")
        if max_turns:
            values["max_drain_turns"] = max_turns
        return cls(**values)


_config: Optional[PledgeConfig] = None


def get_config() -> PledgeConfig:
    """Return the active config, reading the environment on first use."""
    global _config
    if _config is None:
        _config = PledgeConfig.from_env()
    return _config


def configure(config: Optional[PledgeConfig] = None, **overrides) -> PledgeConfig:
    """
    Apply a configuration.

    Sets the "pledge" logger level and drops the default reactor so the
    next get_reactor() builds one from the new settings.

    Args:
        config: Config to apply (None = read the environment)
        **overrides: Field values replacing those of config

    Returns:
        The applied config
    """
    global _config
    from .core.reactor import set_reactor

    config = config or PledgeConfig.from_env()
    if overrides:
        config = PledgeConfig(**{**config.model_dump(), **overrides})

    _config = config
    logging.getLogger("pledge").setLevel(config.log_level)
    set_reactor(None)
    logger.debug(f"Configured: {config!r}")
    return config
