"""Pure state transitions for a pending check run.

    created ──start_analysis──▶ analyzing ──complete──▶ completed
       │
       └────────cancel────────▶ cancelled

Each function validates its precondition and returns a new ``PendingCheck``.
"""

from __future__ import annotations

from dataclasses import replace

from pkgcheck.engines.check_sync.models import (
    CheckOutput,
    CheckState,
    CheckSuiteTrigger,
    PendingCheck,
)
from pkgcheck.engines.dependency_check.models import CheckSummary
from pkgcheck.exceptions import InvalidTransitionError

INITIAL_OUTPUT = CheckOutput(
    title="Dependency check",
    summary="Checking any new/updated dependencies...",
)


def _require(check: PendingCheck, *allowed: CheckState, action: str) -> None:
    if check.state not in allowed:
        raise InvalidTransitionError(
            f"cannot {action} check for {check.head_sha} in state {check.state.value}"
        )


def new_check(trigger: CheckSuiteTrigger, name: str, now: str) -> PendingCheck:
    return PendingCheck(
        owner=trigger.owner,
        repo=trigger.repo,
        name=name,
        head_sha=trigger.head_sha,
        head_branch=trigger.head_branch,
        started_at=now,
        output=INITIAL_OUTPUT,
        check_run_id=trigger.check_run_id,
    )


def assign_run_id(check: PendingCheck, check_run_id: int) -> PendingCheck:
    _require(check, CheckState.CREATED, action="assign a run id to")
    return replace(check, check_run_id=check_run_id)


def start_analysis(check: PendingCheck) -> PendingCheck:
    _require(check, CheckState.CREATED, action="start analysis of")
    if check.check_run_id is None:
        raise InvalidTransitionError(f"check for {check.head_sha} has no check run id")
    return replace(check, state=CheckState.ANALYZING)


def complete(check: PendingCheck, summary: CheckSummary, now: str) -> PendingCheck:
    _require(check, CheckState.ANALYZING, action="complete")
    return replace(
        check,
        state=CheckState.COMPLETED,
        conclusion=summary.conclusion,
        completed_at=now,
        output=CheckOutput(title=summary.title, summary=summary.summary),
    )


def cancel(check: PendingCheck, reason: str, now: str) -> PendingCheck:
    _require(check, CheckState.CREATED, action="cancel")
    return replace(
        check,
        state=CheckState.CANCELLED,
        conclusion="cancelled",
        completed_at=now,
        output=CheckOutput(title=INITIAL_OUTPUT.title, summary=reason),
    )
