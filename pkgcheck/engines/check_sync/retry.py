"""Retry policy for check-run writes."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import httpx
import structlog

from pkgcheck.config import Settings

log = structlog.get_logger("pkgcheck.engine")

T = TypeVar("T")

Backoff = Callable[[int], float]


def fixed_backoff(delay: float) -> Backoff:
    """Same delay before every retry."""
    return lambda _attempt: delay


def exponential_backoff(base: float, cap: float = 300.0) -> Backoff:
    """``base * 2**attempt`` seconds, capped at *cap*."""
    return lambda attempt: min(base * (2**attempt), cap)


@dataclass(frozen=True)
class RetryPolicy:
    """Run an async call, retrying up to ``max_retries`` extra times.

    ``backoff(n)`` gives the sleep before retry ``n`` (0-based). Only
    exceptions listed in ``retry_on`` are retried; the last one propagates.
    """

    max_retries: int = 3
    backoff: Backoff = field(default=fixed_backoff(30.0))
    retry_on: tuple[type[BaseException], ...] = (httpx.HTTPError,)

    async def call(self, fn: Callable[[], Awaitable[T]], *, operation: str) -> T:
        attempt = 0
        while True:
            try:
                return await fn()
            except self.retry_on as exc:
                if attempt >= self.max_retries:
                    log.error(
                        "retry.exhausted",
                        operation=operation,
                        attempts=attempt + 1,
                        error=str(exc),
                    )
                    raise
                delay = self.backoff(attempt)
                log.warning(
                    "retry.scheduled",
                    operation=operation,
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    delay_seconds=delay,
                    error=str(exc),
                )
                await asyncio.sleep(delay)
                attempt += 1


def policy_from_settings(settings: Settings) -> RetryPolicy:
    if settings.update_backoff == "exponential":
        backoff = exponential_backoff(settings.update_retry_delay)
    else:
        backoff = fixed_backoff(settings.update_retry_delay)
    return RetryPolicy(max_retries=settings.update_retries, backoff=backoff)
