"""Data models for the check synchronizer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

# ``before`` value GitHub sends for a freshly pushed ref.
ZERO_SHA = "0" * 40

# GitHub rejects more than 50 annotations per check-run update.
MAX_ANNOTATIONS_PER_UPDATE = 50


class CheckState(str, Enum):
    CREATED = "created"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CheckSuiteTrigger:
    """One webhook delivery asking for a check of ``head_sha``.

    ``check_run_id`` is set only for re-run requests, which reuse the
    existing check run instead of creating a new one. ``rerequested`` marks
    any user re-request, including a whole-suite one.
    """

    owner: str
    repo: str
    head_sha: str
    head_branch: str | None = None
    before: str | None = None
    pull_request_urls: tuple[str, ...] = ()
    check_run_id: int | None = None
    html_url: str | None = None
    rerequested: bool = False

    @property
    def is_rerun(self) -> bool:
        return self.check_run_id is not None

    @property
    def is_rerequest(self) -> bool:
        """Explicitly re-requested by a user, for one run or the whole suite."""
        return self.rerequested or self.is_rerun


@dataclass(frozen=True)
class FileChange:
    filename: str
    status: str  # added | modified | removed | renamed | ...


@dataclass(frozen=True)
class CheckOutput:
    title: str
    summary: str


@dataclass(frozen=True)
class PendingCheck:
    """In-flight check run for one head commit.

    Instances are never mutated; the functions in ``state`` return updated
    copies.
    """

    owner: str
    repo: str
    name: str
    head_sha: str
    head_branch: str | None
    started_at: str
    output: CheckOutput
    state: CheckState = CheckState.CREATED
    check_run_id: int | None = None
    conclusion: str | None = None
    completed_at: str | None = None

    @property
    def status(self) -> Literal["in_progress", "completed"]:
        if self.state in (CheckState.COMPLETED, CheckState.CANCELLED):
            return "completed"
        return "in_progress"

    def _output_body(self, annotations: list[dict[str, Any]] | None) -> dict[str, Any]:
        output: dict[str, Any] = {"title": self.output.title, "summary": self.output.summary}
        if annotations:
            output["annotations"] = annotations
        return output

    def _common_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "name": self.name,
            "started_at": self.started_at,
            "status": self.status,
        }
        if self.conclusion is not None:
            body["conclusion"] = self.conclusion
        if self.completed_at is not None:
            body["completed_at"] = self.completed_at
        return body

    def to_create_body(self) -> dict[str, Any]:
        body = self._common_body()
        body["head_sha"] = self.head_sha
        if self.head_branch:
            body["head_branch"] = self.head_branch
        body["output"] = self._output_body(None)
        return body

    def to_update_body(self, annotations: list[dict[str, Any]] | None = None) -> dict[str, Any]:
        body = self._common_body()
        body["output"] = self._output_body(annotations)
        return body


RunStatus = Literal["completed", "errored", "skipped"]


@dataclass(frozen=True)
class RunOutcome:
    """Terminal report of one background analysis run."""

    head_sha: str
    status: RunStatus
    conclusion: str | None = None
    annotation_count: int = 0
    update_calls: int = 0
    error: str | None = None
    files: tuple[str, ...] = ()
