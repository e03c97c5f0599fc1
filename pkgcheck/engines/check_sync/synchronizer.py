"""CheckSynchronizer — drive one dependency check from webhook to completed check run."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from pkgcheck.core.github import GitHubClient
from pkgcheck.engines.check_sync.models import (
    MAX_ANNOTATIONS_PER_UPDATE,
    ZERO_SHA,
    CheckSuiteTrigger,
    FileChange,
    PendingCheck,
    RunOutcome,
)
from pkgcheck.engines.check_sync.pending import PendingCheckStore
from pkgcheck.engines.check_sync.retry import RetryPolicy
from pkgcheck.engines.check_sync.state import (
    assign_run_id,
    cancel,
    complete,
    new_check,
    start_analysis,
)
from pkgcheck.engines.dependency_check import (
    AnalysisResult,
    AnnotationResult,
    ManifestContext,
    RefTypeResolver,
    match_checker,
    summarize,
)
from pkgcheck.engines.dependency_check.annotator import oxford
from pkgcheck.exceptions import CheckRunError

log = structlog.get_logger("pkgcheck.engine")

_ANALYZED_STATUSES = frozenset({"added", "modified"})


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CheckSynchronizer:
    """Owns the pending-check guard and the create → analyze → update sequence.

    ``enqueue`` hands a trigger to the background worker; the webhook path
    never waits for the analysis itself.
    """

    def __init__(
        self,
        client: GitHubClient,
        store: PendingCheckStore,
        enqueue: Callable[[CheckSuiteTrigger], None],
        *,
        check_name: str = "packages-check-bot",
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._enqueue = enqueue
        self._check_name = check_name
        self._retry = retry_policy or RetryPolicy()
        self._resolver = RefTypeResolver(client)
        # Head SHAs queued or running in this process.
        self._in_flight: set[str] = set()

    # ── trigger ──────────────────────────────────────────────────────────

    async def handle_trigger(self, trigger: CheckSuiteTrigger) -> dict[str, Any]:
        """Create (or acknowledge) the check run and queue the analysis.

        Returns the GitHub create-check response. If creation fails, the
        check is re-created as ``completed/cancelled`` with the error text as
        summary and that response is returned instead.
        """
        check = new_check(trigger, self._check_name, _now())
        log.info(
            "check.triggered",
            repo=f"{trigger.owner}/{trigger.repo}",
            head_sha=trigger.head_sha,
            rerun=trigger.is_rerun,
            pull_requests=oxford(list(trigger.pull_request_urls), 5),
        )

        claimed = False
        enqueued = False
        try:
            if trigger.is_rerun:
                claimed = await self._claim(check, trigger)
                if claimed:
                    self._schedule(trigger)
                    enqueued = True
                response = await self._client.create_check_run(
                    trigger.owner, trigger.repo, check.to_create_body()
                )
            else:
                claimed = await self._claim(check, trigger)
                response = await self._client.create_check_run(
                    trigger.owner, trigger.repo, check.to_create_body()
                )
                if claimed:
                    run_id = response.get("id")
                    if run_id is None:
                        raise CheckRunError("create check run response carried no id")
                    await self._store.put(assign_run_id(check, int(run_id)))
                    self._schedule(trigger)
                    enqueued = True
            log.debug("check.created", head_sha=trigger.head_sha, queued=enqueued)
            return response
        except Exception as exc:
            log.exception("check.create_failed", head_sha=trigger.head_sha, error=str(exc))
            if claimed and not enqueued:
                await self._store.delete(trigger.head_sha)
            cancelled = cancel(check, str(exc), _now())
            return await self._client.create_check_run(
                trigger.owner, trigger.repo, cancelled.to_create_body()
            )

    async def _claim(self, check: PendingCheck, trigger: CheckSuiteTrigger) -> bool:
        """Take the pending slot for the head SHA.

        A re-request may take over an entry that has no queued or running job
        in this process; such an entry was left behind by a run that died
        mid-analysis.
        """
        if await self._store.claim(check):
            return True
        if not trigger.is_rerequest or trigger.head_sha in self._in_flight:
            return False
        log.warning("check.stale_entry_replaced", head_sha=trigger.head_sha)
        await self._store.put(check)
        return True

    def _schedule(self, trigger: CheckSuiteTrigger) -> None:
        self._in_flight.add(trigger.head_sha)
        self._enqueue(trigger)

    # ── background run ───────────────────────────────────────────────────

    async def run(self, trigger: CheckSuiteTrigger) -> RunOutcome:
        """Analyze the commit range and push the result to the check run.

        Errors propagate to the caller (the worker). In that case the pending
        entry is kept and the check run stays ``in_progress`` until a re-run.
        """
        try:
            return await self._run(trigger)
        finally:
            self._in_flight.discard(trigger.head_sha)

    async def _run(self, trigger: CheckSuiteTrigger) -> RunOutcome:
        check = await self._store.get(trigger.head_sha)
        if check is None:
            # Finished by another trigger or another bot instance.
            log.info("check.already_finished", head_sha=trigger.head_sha)
            return RunOutcome(head_sha=trigger.head_sha, status="skipped")

        check = start_analysis(check)
        await self._store.put(check)

        files = await self.list_changed_files(trigger)
        log.info(
            "check.analysis_started",
            files=len(files),
            before=trigger.before,
            head_sha=trigger.head_sha,
        )

        result = await self.analyze(trigger, files)
        summary = summarize(result)
        check = complete(check, summary, _now())
        update_calls = await self.push(check, result.annotations)

        await self._store.delete(trigger.head_sha)
        log.info(
            "check.completed",
            head_sha=trigger.head_sha,
            conclusion=summary.conclusion,
            annotations=len(result.annotations),
            dependencies=result.checked_dependency_count,
        )
        return RunOutcome(
            head_sha=trigger.head_sha,
            status="completed",
            conclusion=summary.conclusion,
            annotation_count=len(result.annotations),
            update_calls=update_calls,
            files=tuple(result.source_filenames),
        )

    async def list_changed_files(self, trigger: CheckSuiteTrigger) -> list[FileChange]:
        """Files changed in ``before...head``; a new ref lists the head commit alone.

        A failed listing is logged and treated as no changes, so the run still
        completes (as ``neutral``).
        """
        try:
            if not trigger.before or trigger.before == ZERO_SHA:
                raw = await self._client.get_commit_files(
                    trigger.owner, trigger.repo, trigger.head_sha
                )
            else:
                raw = await self._client.compare_commit_files(
                    trigger.owner, trigger.repo, trigger.before, trigger.head_sha
                )
        except httpx.HTTPError as exc:
            log.error(
                "check.list_files_failed",
                head_sha=trigger.head_sha,
                before=trigger.before,
                error=str(exc),
            )
            return []
        return [FileChange(filename=f["filename"], status=f.get("status", "")) for f in raw]

    async def analyze(
        self, trigger: CheckSuiteTrigger, files: list[FileChange]
    ) -> AnalysisResult:
        ctx = ManifestContext(
            client=self._client,
            resolver=self._resolver,
            owner=trigger.owner,
            repo=trigger.repo,
            head_sha=trigger.head_sha,
        )
        result = AnalysisResult()
        for change in files:
            if change.status not in _ANALYZED_STATUSES:
                continue
            checker = match_checker(change.filename)
            if checker is None:
                continue
            result.add_source_filename(change.filename)
            await checker.check(ctx, change.filename, result)
        return result

    async def push(self, check: PendingCheck, annotations: list[AnnotationResult]) -> int:
        """Send the final state in batches of at most 50 annotations.

        Returns the number of update calls issued. A batch that still fails
        after retries aborts the remaining batches.
        """
        if not annotations:
            await self._update(check, None)
            return 1

        calls = 0
        for start in range(0, len(annotations), MAX_ANNOTATIONS_PER_UPDATE):
            batch = annotations[start : start + MAX_ANNOTATIONS_PER_UPDATE]
            await self._update(check, [a.to_api() for a in batch])
            calls += 1
        return calls

    async def _update(
        self, check: PendingCheck, annotations: list[dict[str, Any]] | None
    ) -> None:
        if check.check_run_id is None:
            raise CheckRunError(f"check for {check.head_sha} has no check run id")
        body = check.to_update_body(annotations)
        await self._retry.call(
            lambda: self._client.update_check_run(
                check.owner, check.repo, check.check_run_id, body
            ),
            operation="update_check_run",
        )
        log.info(
            "check.updated",
            repo=f"{check.owner}/{check.repo}",
            check_run_id=check.check_run_id,
            head_sha=check.head_sha,
            status=check.status,
            conclusion=check.conclusion,
            annotations=len(annotations or []),
        )
