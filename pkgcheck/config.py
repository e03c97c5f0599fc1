"""Runtime settings, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_CHECK_NAME = "packages-check-bot"


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


def _env_float(key: str, default: float) -> float:
    return float(os.environ.get(key, default))


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration.

    Environment variables:
        GITHUB_TOKEN                 — API token (optional)
        PKGCHECK_GITHUB_API_URL      — REST base URL (default: https://api.github.com)
        PKGCHECK_CHECK_NAME          — check run name (default: packages-check-bot)
        PKGCHECK_UPDATE_RETRIES      — extra attempts per check update (default: 3)
        PKGCHECK_UPDATE_RETRY_DELAY  — seconds between update attempts (default: 30)
        PKGCHECK_UPDATE_BACKOFF      — fixed | exponential (default: fixed)
        PKGCHECK_WORKER_CONCURRENCY  — parallel analysis runs (default: 4)
        PKGCHECK_LOG_LEVEL           — log level for the bot (default: INFO)
        PKGCHECK_LOG_FORMAT          — console | json (default: console)
    """

    github_token: str | None = None
    github_api_url: str = DEFAULT_API_URL
    check_name: str = DEFAULT_CHECK_NAME
    update_retries: int = 3
    update_retry_delay: float = 30.0
    update_backoff: str = "fixed"
    worker_concurrency: int = 4
    log_level: str = "INFO"
    log_format: str = "console"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            github_token=os.environ.get("GITHUB_TOKEN") or None,
            github_api_url=os.environ.get("PKGCHECK_GITHUB_API_URL", DEFAULT_API_URL),
            check_name=os.environ.get("PKGCHECK_CHECK_NAME", DEFAULT_CHECK_NAME),
            update_retries=_env_int("PKGCHECK_UPDATE_RETRIES", 3),
            update_retry_delay=_env_float("PKGCHECK_UPDATE_RETRY_DELAY", 30.0),
            update_backoff=os.environ.get("PKGCHECK_UPDATE_BACKOFF", "fixed").lower(),
            worker_concurrency=_env_int("PKGCHECK_WORKER_CONCURRENCY", 4),
            log_level=os.environ.get("PKGCHECK_LOG_LEVEL", "INFO").upper(),
            log_format=os.environ.get("PKGCHECK_LOG_FORMAT", "console").lower(),
        )
