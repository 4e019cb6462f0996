"""Load environment variables and build client settings.

For local dev, loads a .env file based on ENV ("dev" by default).
In staging and prod the variables are injected into the process environment,
so no .env file is loaded.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv

EnvironmentName = Literal["dev", "staging", "prod"]

DEFAULT_API_BASE_URL = "http://localhost:5000/api"
DEFAULT_STORAGE_PATH = "~/.promise_realty/storage.json"

_TRUTHY = {"1", "true", "yes", "on"}

logger = logging.getLogger(__name__)


def get_current_environment() -> EnvironmentName:
    """Get the current environment (dev, staging, or prod)."""
    env = os.getenv("ENV", "dev")
    if env in ("dev", "staging", "prod"):
        return env  # type: ignore[return-value]
    raise ValueError(f"Invalid ENV value: {env}. Must be 'dev', 'staging', or 'prod'.")


def load_environment() -> EnvironmentName:
    """Load the .env file for dev; rely on the process environment otherwise."""
    env = get_current_environment()
    if env == "dev":
        logger.info("Loading environment variables from .env.dev")
        load_dotenv(".env.dev")
    else:
        logger.info(f"Running in {env} environment (env vars from process)")
    return env


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_log_level() -> Optional[int]:
    if "LOG_LEVEL" not in os.environ:
        return None
    match os.environ["LOG_LEVEL"].upper():
        case "DEBUG":
            return logging.DEBUG
        case "INFO":
            return logging.INFO
        case "WARNING":
            return logging.WARNING
        case "ERROR":
            return logging.ERROR
        case "CRITICAL":
            return logging.CRITICAL
        case _:
            raise ValueError(f"Invalid log level: {os.environ['LOG_LEVEL']}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: float = 10.0
    storage_path: str = DEFAULT_STORAGE_PATH
    # Treat every backend call as lacking connectivity without sending it.
    offline: bool = False
    allow_fallback_login: bool = True
    fallback_on_validation_error: bool = True
    retry_attempts: int = 1
    retry_initial_delay: float = 0.5
    # Level for the "realty" logger; None leaves logging untouched.
    log_level: Optional[int] = None

    @classmethod
    def from_env(cls, load: bool = True) -> "Settings":
        """Build settings from REALTY_* environment variables.

        Args:
            load: Load the environment's .env file first.
        """
        if load:
            load_environment()
        settings = cls(
            api_base_url=os.getenv("REALTY_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip(
                "/"
            ),
            timeout=_env_float("REALTY_API_TIMEOUT", 10.0),
            storage_path=os.getenv("REALTY_STORAGE_PATH", DEFAULT_STORAGE_PATH),
            offline=_env_bool("REALTY_OFFLINE", False),
            allow_fallback_login=_env_bool("REALTY_ALLOW_FALLBACK_LOGIN", True),
            fallback_on_validation_error=_env_bool(
                "REALTY_FALLBACK_ON_VALIDATION_ERROR", True
            ),
            retry_attempts=_env_int("REALTY_RETRY_ATTEMPTS", 1),
            retry_initial_delay=_env_float("REALTY_RETRY_INITIAL_DELAY", 0.5),
            log_level=_env_log_level(),
        )
        if settings.retry_attempts < 1:
            raise ValueError("REALTY_RETRY_ATTEMPTS must be at least 1")
        return settings

    @property
    def resolved_storage_path(self) -> Path:
        return Path(self.storage_path).expanduser()
