"""Configuration system for the BIR rules engine.

Pydantic Settings-based configuration with environment variable support.
Only operational settings live here; statutory tax constants are fixed in
``bir_rules.thresholds`` and cannot be overridden.

Usage:
    from bir_rules.config import RulesEngineConfig, configure_logging

    # Load from environment variables and .env file
    config = RulesEngineConfig()
    configure_logging(config)

Environment Variables:
    BIR_RULES_ENV: Environment name (development, staging, production, test)
    BIR_RULES_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    BIR_RULES_LOG_FORMAT: Log renderer (console, json)
    BIR_RULES_DEBUG_MODE: Log every pipeline step at debug level
"""

import logging
from enum import Enum
from typing import Any, Optional

import structlog
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class LogFormat(str, Enum):
    """Supported log renderers."""

    CONSOLE = "console"
    JSON = "json"


class RulesEngineConfig(BaseSettings):
    """Root configuration for the rules engine.

    Example:
        config = RulesEngineConfig(log_level="debug", log_format="json")
        assert config.log_level == "DEBUG"
    """

    model_config = SettingsConfigDict(
        env_prefix="BIR_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="Renderer used for structured log output",
    )
    debug_mode: bool = Field(
        default=False,
        description="Log the digest of every pipeline step",
    )

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        """Check if debug mode is enabled (directly or via log level)."""
        return self.debug_mode or self.log_level == "DEBUG"


def load_config(**overrides: Any) -> RulesEngineConfig:
    """Build a RulesEngineConfig, reporting bad values as ConfigurationError.

    Args:
        **overrides: Explicit values that take precedence over the
            environment

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If any setting fails validation
    """
    try:
        return RulesEngineConfig(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ConfigurationError(
            f"Invalid rules engine configuration: {first.get('msg')}",
            config_key=key,
            actual=first.get("input"),
            details={"error_count": e.error_count()},
        ) from e


def configure_logging(config: Optional[RulesEngineConfig] = None) -> None:
    """Configure structlog according to the engine configuration.

    Args:
        config: Configuration to apply (default: loaded from environment)
    """
    config = config or load_config()
    level = logging.getLevelName(config.log_level)

    renderer: Any
    if config.log_format == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
