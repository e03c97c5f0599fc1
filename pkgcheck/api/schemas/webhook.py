"""GitHub webhook payload schemas (only the fields the bot reads)."""

from __future__ import annotations

from pydantic import BaseModel

from pkgcheck.engines.check_sync.models import CheckSuiteTrigger


class Owner(BaseModel):
    login: str


class Repository(BaseModel):
    name: str
    owner: Owner
    html_url: str | None = None


class PullRequestRef(BaseModel):
    url: str


class CheckSuite(BaseModel):
    id: int | None = None
    head_branch: str | None = None
    head_sha: str
    before: str | None = None
    pull_requests: list[PullRequestRef] = []


class CheckRun(BaseModel):
    id: int
    check_suite: CheckSuite


class CheckSuiteEvent(BaseModel):
    action: str
    check_suite: CheckSuite
    repository: Repository

    def to_trigger(self) -> CheckSuiteTrigger:
        return _trigger(
            self.check_suite, self.repository, rerequested=self.action == "rerequested"
        )


class CheckRunEvent(BaseModel):
    action: str
    check_run: CheckRun
    repository: Repository

    def to_trigger(self) -> CheckSuiteTrigger:
        return _trigger(
            self.check_run.check_suite, self.repository, self.check_run.id, rerequested=True
        )


class WebhookAck(BaseModel):
    """Response body for a webhook delivery."""

    status: str  # accepted | ignored
    check_run_id: int | None = None
    conclusion: str | None = None


def _trigger(
    suite: CheckSuite,
    repository: Repository,
    check_run_id: int | None = None,
    *,
    rerequested: bool = False,
) -> CheckSuiteTrigger:
    return CheckSuiteTrigger(
        owner=repository.owner.login,
        repo=repository.name,
        head_sha=suite.head_sha,
        head_branch=suite.head_branch,
        before=suite.before,
        pull_request_urls=tuple(pr.url for pr in suite.pull_requests),
        check_run_id=check_run_id,
        html_url=repository.html_url,
        rerequested=rerequested,
    )
