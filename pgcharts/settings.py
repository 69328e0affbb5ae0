"""Django settings for pgcharts.

Configuration is driven by environment variables so the same settings module
serves local use and deployment alongside a collector.
"""

from __future__ import annotations

import os


def _env_bool(name: str, *, default: bool) -> bool:
    """Parse a boolean environment variable.

    Args:
        name: Environment variable name.
        default: Value when the variable is not set.

    Returns:
        Parsed boolean value.
    """

    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _env_str(name: str, *, default: str) -> str:
    """Return a trimmed string environment variable, or `default` when unset or blank."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_csv(name: str, *, default: list[str]) -> list[str]:
    """Parse a comma-separated environment variable into a list of strings.

    Args:
        name: Environment variable name.
        default: Value when the variable is not set.

    Returns:
        A list of non-empty, trimmed values.
    """

    raw = os.getenv(name)
    if raw is None:
        return default
    return [part.strip() for part in raw.split(",") if part.strip()]


DEBUG = _env_bool("PGCHARTS_DEBUG", default=False)

INSTALLED_APPS = [
    "postgres.apps.PostgresConfig",
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

# Glob patterns (`!` negates, first match wins) deciding which databases get charts.
PGCHARTS_DATABASE_SELECTOR: list[str] = _env_csv("PGCHARTS_DATABASE_SELECTOR", default=["*"])

PGCHARTS_LOG_LEVEL = _env_str("PGCHARTS_LOG_LEVEL", default="DEBUG" if DEBUG else "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "agent": {"handlers": ["console"], "level": PGCHARTS_LOG_LEVEL, "propagate": True},
        "postgres": {"handlers": ["console"], "level": PGCHARTS_LOG_LEVEL, "propagate": True},
    },
}
