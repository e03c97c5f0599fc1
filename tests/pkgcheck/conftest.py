"""Shared fixtures for packages-check-bot tests.

GitHub is never contacted: ``github`` is a ``MagicMock(spec=GitHubClient)``
whose async methods are ``AsyncMock``s, with helpers to declare which refs,
commits and files exist.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest

from pkgcheck.core.github import GitHubClient
from pkgcheck.engines.check_sync.models import CheckSuiteTrigger

HEAD_SHA = "a" * 40
BEFORE_SHA = "b" * 40


def http_error(status: int, url: str = "https://api.github.com/repos/o/r") -> httpx.HTTPStatusError:
    request = httpx.Request("GET", url)
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"{status}", request=request, response=response)


@pytest.fixture
def github():
    """Mock GitHub client: no refs, no files, create → id 42."""
    client = MagicMock(spec=GitHubClient)
    client.create_check_run.return_value = {"id": 42, "status": "in_progress"}
    client.update_check_run.return_value = {"id": 42}
    client.get_ref.side_effect = http_error(404)
    client.get_git_commit.side_effect = http_error(404)
    client.get_content.side_effect = http_error(404)
    client.compare_commit_files.return_value = []
    client.get_commit_files.return_value = []
    return client


@pytest.fixture
def set_refs(github):
    """Declare which tags / branches / commits exist on github.com."""

    def _set(*, tags=(), branches=(), commits=()):
        async def get_ref(owner, repo, ref):
            kind, _, name = ref.partition("/")
            if (kind == "tags" and name in tags) or (kind == "heads" and name in branches):
                return {"ref": f"refs/{ref}"}
            raise http_error(404)

        async def get_git_commit(owner, repo, sha):
            if sha in commits:
                return {"sha": sha}
            raise http_error(404)

        github.get_ref.side_effect = get_ref
        github.get_git_commit.side_effect = get_git_commit

    return _set


@pytest.fixture
def set_files(github):
    """Declare file contents at the head commit (path → text)."""

    def _set(files: dict[str, str]):
        async def get_content(owner, repo, path, ref):
            if path in files:
                return files[path]
            raise http_error(404)

        github.get_content.side_effect = get_content

    return _set


@pytest.fixture
def make_trigger():
    def _make(**overrides) -> CheckSuiteTrigger:
        defaults = {
            "owner": "acme",
            "repo": "app",
            "head_sha": HEAD_SHA,
            "head_branch": "feature",
            "before": BEFORE_SHA,
        }
        defaults.update(overrides)
        return CheckSuiteTrigger(**defaults)

    return _make


@pytest.fixture
def make_http_error():
    return http_error
