"""CheckWorker — background queue that runs analyses off the webhook path."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from pkgcheck.engines.check_sync.models import CheckSuiteTrigger, RunOutcome

logger = structlog.get_logger("pkgcheck.worker")

RunFn = Callable[[CheckSuiteTrigger], Awaitable[RunOutcome]]


class CheckWorker:
    """Pool of consumer loops over one ``asyncio.Queue`` of triggers.

    Every job ends with exactly one ``RunOutcome`` on :attr:`outcomes`; a job
    that raises is reported as ``errored`` and its loop keeps going. With
    ``concurrency > 1`` a run stuck in update backoff does not hold up the
    other repositories' runs.
    """

    def __init__(self, *, concurrency: int = 4, outcome_maxsize: int = 1000) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._concurrency = concurrency
        self._jobs: asyncio.Queue[CheckSuiteTrigger] = asyncio.Queue()
        self.outcomes: asyncio.Queue[RunOutcome] = asyncio.Queue(maxsize=outcome_maxsize)
        self._tasks: list[asyncio.Task[None]] = []

    def enqueue(self, trigger: CheckSuiteTrigger) -> None:
        self._jobs.put_nowait(trigger)
        logger.debug("worker.enqueued", head_sha=trigger.head_sha, pending=self._jobs.qsize())

    @property
    def pending(self) -> int:
        return self._jobs.qsize()

    async def start(self, run_fn: RunFn) -> None:
        """Start ``concurrency`` consumer loops as asyncio tasks."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._loop(run_fn), name=f"check-worker-{i}")
            for i in range(self._concurrency)
        ]
        logger.info("worker.started", concurrency=self._concurrency)

    async def stop(self) -> None:
        """Cancel the consumer loops and wait for them to exit."""
        if not self._tasks:
            return
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("worker.stopped")

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._jobs.join()

    async def _loop(self, run_fn: RunFn) -> None:
        while True:
            trigger = await self._jobs.get()
            try:
                outcome = await self.process(run_fn, trigger)
                self._report(outcome)
            finally:
                self._jobs.task_done()

    @staticmethod
    async def process(run_fn: RunFn, trigger: CheckSuiteTrigger) -> RunOutcome:
        try:
            return await run_fn(trigger)
        except Exception as exc:
            logger.exception("worker.run_failed", head_sha=trigger.head_sha)
            return RunOutcome(
                head_sha=trigger.head_sha,
                status="errored",
                error=f"{type(exc).__name__}: {exc}",
            )

    def _report(self, outcome: RunOutcome) -> None:
        try:
            self.outcomes.put_nowait(outcome)
        except asyncio.QueueFull:
            logger.warning("worker.outcome_dropped", head_sha=outcome.head_sha)


async def report_outcomes(outcomes: asyncio.Queue[RunOutcome]) -> None:
    """Drain the outcome channel forever, logging each terminal status.

    ``errored`` runs leave their check ``in_progress``, so they are logged at
    error level with the failure text.
    """
    while True:
        outcome = await outcomes.get()
        try:
            if outcome.status == "errored":
                logger.error(
                    "worker.run_errored",
                    head_sha=outcome.head_sha,
                    error=outcome.error,
                )
            else:
                logger.info(
                    "worker.outcome",
                    head_sha=outcome.head_sha,
                    status=outcome.status,
                    conclusion=outcome.conclusion,
                    annotations=outcome.annotation_count,
                    update_calls=outcome.update_calls,
                )
        finally:
            outcomes.task_done()
