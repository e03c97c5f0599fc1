"""Dependency injection — GitHub client, pending store, worker, synchronizer."""

from __future__ import annotations

import asyncio

from pkgcheck.config import Settings
from pkgcheck.core.github import GitHubClient
from pkgcheck.engines.check_sync import (
    CheckSynchronizer,
    CheckWorker,
    InMemoryPendingCheckStore,
    PendingCheckStore,
    report_outcomes,
)
from pkgcheck.engines.check_sync.retry import policy_from_settings

# ---------------------------------------------------------------------------
# Singletons (initialised by app lifespan)
# ---------------------------------------------------------------------------
_github_client: GitHubClient | None = None
_worker: CheckWorker | None = None
_synchronizer: CheckSynchronizer | None = None
_outcome_task: asyncio.Task[None] | None = None


def init_components(
    settings: Settings | None = None,
    *,
    store: PendingCheckStore | None = None,
    client: GitHubClient | None = None,
) -> CheckSynchronizer:
    """Build the client, worker and synchronizer. Called once at startup."""
    global _github_client, _worker, _synchronizer  # noqa: PLW0603
    settings = settings or Settings.from_env()
    _github_client = client or GitHubClient(
        settings.github_token, base_url=settings.github_api_url
    )
    _worker = CheckWorker(concurrency=settings.worker_concurrency)
    _synchronizer = CheckSynchronizer(
        _github_client,
        store or InMemoryPendingCheckStore(),
        _worker.enqueue,
        check_name=settings.check_name,
        retry_policy=policy_from_settings(settings),
    )
    return _synchronizer


async def start_components() -> None:
    """Start the worker pool and the task that drains its outcome channel."""
    global _outcome_task  # noqa: PLW0603
    worker = get_worker()
    await worker.start(get_synchronizer().run)
    if _outcome_task is None:
        _outcome_task = asyncio.create_task(
            report_outcomes(worker.outcomes), name="check-outcomes"
        )


async def dispose_components() -> None:
    """Stop the worker and outcome reporter, then close the HTTP client."""
    global _github_client, _worker, _synchronizer, _outcome_task  # noqa: PLW0603
    if _worker is not None:
        await _worker.stop()
    if _outcome_task is not None:
        _outcome_task.cancel()
        await asyncio.gather(_outcome_task, return_exceptions=True)
    if _github_client is not None:
        await _github_client.close()
    _github_client = None
    _worker = None
    _synchronizer = None
    _outcome_task = None


def get_worker() -> CheckWorker:
    if _worker is None:
        raise RuntimeError("call init_components() before handling requests")
    return _worker


def get_synchronizer() -> CheckSynchronizer:
    if _synchronizer is None:
        raise RuntimeError("call init_components() before handling requests")
    return _synchronizer
