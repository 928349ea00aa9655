"""
Runtime settings loaded from the environment (and a local .env file).
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from housing_portal.core.errors import ConfigError
from housing_portal.core.money import coerce_float


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_HOURLY_RATE = 125.0


@dataclass(frozen=True)
class Settings:
    """
    Client configuration.

    Usage:
        settings = load_settings()
        api = ApiClient(settings.api_url, timeout=settings.timeout)
    """
    api_url: str
    timeout: float = DEFAULT_TIMEOUT
    default_hourly_rate: float = DEFAULT_HOURLY_RATE
    log_level: str = "INFO"


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Build Settings from environment variables.

    Reads:
        HOUSING_API_URL (required)
        HOUSING_API_TIMEOUT (default 30)
        HOUSING_DEFAULT_HOURLY_RATE (default 125)
        HOUSING_LOG_LEVEL (default INFO)

    Raises:
        ConfigError: if the API URL is missing or a number is invalid
    """
    load_dotenv(env_file)

    api_url = (os.getenv("HOUSING_API_URL") or "").strip()
    if not api_url:
        raise ConfigError(
            "HOUSING_API_URL environment variable not set. "
            "Point it at the backend base URL, e.g. http://localhost:5000/api"
        )

    timeout = _number_setting("HOUSING_API_TIMEOUT", DEFAULT_TIMEOUT)
    if timeout <= 0:
        raise ConfigError(f"HOUSING_API_TIMEOUT must be positive, got {timeout}")

    settings = Settings(
        api_url=api_url.rstrip("/"),
        timeout=timeout,
        default_hourly_rate=_number_setting("HOUSING_DEFAULT_HOURLY_RATE", DEFAULT_HOURLY_RATE),
        log_level=(os.getenv("HOUSING_LOG_LEVEL") or "INFO").upper(),
    )
    logger.debug(f"Loaded settings for {settings.api_url}")
    return settings


def _number_setting(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default

    value = coerce_float(raw)
    if value is None:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    return value
