"""Configuration management for the query runner."""

import os
import logging
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

from aqlrunner.aql_tools import Catalog, ConnectionSettings

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Runner configuration with validation."""
    catalog_path: str = "config.json"
    database: Optional[str] = None
    pool_size: int = 4
    acquire_timeout: float = 10.0
    request_timeout: float = 60.0
    batch_size: int = 1000
    max_runtime: float = 0.0
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        errors = []

        if not self.catalog_path:
            errors.append("AQL_CATALOG_PATH must not be empty")

        if self.pool_size < 1:
            errors.append("ARANGO_POOL_SIZE must be at least 1")

        if self.acquire_timeout <= 0:
            errors.append("ARANGO_ACQUIRE_TIMEOUT must be positive")

        if self.request_timeout <= 0:
            errors.append("ARANGO_REQUEST_TIMEOUT must be positive")

        if self.batch_size < 1:
            errors.append("ARANGO_BATCH_SIZE must be at least 1")

        if self.max_runtime < 0:
            errors.append("ARANGO_MAX_RUNTIME must not be negative")

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

        if errors:
            error_message = "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            raise ValueError(error_message)

    def connection_settings(self, catalog: Catalog) -> ConnectionSettings:
        """Combine catalog credentials with pool tuning."""
        return ConnectionSettings.from_catalog(
            catalog,
            database=self.database,
            pool_size=self.pool_size,
            acquire_timeout=self.acquire_timeout,
            request_timeout=self.request_timeout,
            batch_size=self.batch_size,
            max_runtime=self.max_runtime,
        )


def _env_number(name: str, default, cast):
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return cast(value)
    except ValueError:
        raise ValueError(f"Configuration errors:\n  - {name} must be a number, got {value!r}")


def load_config() -> Config:
    """
    Load configuration from environment variables.

    Loads from .env file if present, then from environment variables.

    Returns:
        Config object with validated settings
    """
    load_dotenv()

    try:
        config = Config(
            catalog_path=os.getenv("AQL_CATALOG_PATH", "config.json"),
            database=os.getenv("ARANGO_DATABASE") or None,
            pool_size=_env_number("ARANGO_POOL_SIZE", 4, int),
            acquire_timeout=_env_number("ARANGO_ACQUIRE_TIMEOUT", 10.0, float),
            request_timeout=_env_number("ARANGO_REQUEST_TIMEOUT", 60.0, float),
            batch_size=_env_number("ARANGO_BATCH_SIZE", 1000, int),
            max_runtime=_env_number("ARANGO_MAX_RUNTIME", 0.0, float),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
        logger.info("Configuration loaded successfully")
        return config
    except ValueError as error:
        logger.error(f"Failed to load configuration: {error}")
        raise

