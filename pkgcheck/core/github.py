"""Async GitHub REST client — check runs, commit diffs, contents, git refs."""

from __future__ import annotations

import asyncio
import base64
import time
from typing import Any

import httpx
import structlog

from pkgcheck.exceptions import RateLimitError

log = structlog.get_logger("pkgcheck.github")

_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 1.0  # seconds
_RATE_LIMIT_FALLBACK_WAIT = 60  # seconds

HOSTING_DOMAIN = "github.com"


class GitHubClient:
    """Thin async wrapper around the GitHub REST API.

    Only GETs are retried here (they are idempotent). Check-run writes are
    single-shot; callers wrap them in a :class:`RetryPolicy`.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = "https://api.github.com",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"token {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=30.0,
            follow_redirects=True,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── check runs ─────────────────────────────────────────────────────────

    async def create_check_run(self, owner: str, repo: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST /repos/{owner}/{repo}/check-runs"""
        resp = await self._client.post(f"/repos/{owner}/{repo}/check-runs", json=body)
        resp.raise_for_status()
        return resp.json()

    async def update_check_run(
        self, owner: str, repo: str, check_run_id: int, body: dict[str, Any]
    ) -> dict[str, Any]:
        """PATCH /repos/{owner}/{repo}/check-runs/{check_run_id}"""
        resp = await self._client.patch(
            f"/repos/{owner}/{repo}/check-runs/{check_run_id}", json=body
        )
        resp.raise_for_status()
        return resp.json()

    # ── changed files ──────────────────────────────────────────────────────

    async def get_commit_files(self, owner: str, repo: str, sha: str) -> list[dict[str, Any]]:
        """Files touched by a single commit."""
        data = await self.get(f"/repos/{owner}/{repo}/commits/{sha}")
        return list(data.get("files") or [])

    async def compare_commit_files(
        self, owner: str, repo: str, base: str, head: str
    ) -> list[dict[str, Any]]:
        """Files changed in the ``base...head`` range."""
        data = await self.get(f"/repos/{owner}/{repo}/compare/{base}...{head}")
        return list(data.get("files") or [])

    # ── contents / git data ────────────────────────────────────────────────

    async def get_content(self, owner: str, repo: str, path: str, ref: str) -> str:
        """Fetch a file at *ref* and return it decoded as UTF-8 text.

        Raises ``httpx.HTTPStatusError`` on a non-2xx response and
        ``ValueError`` if the payload carries no base64 content (e.g. *path*
        is a directory).
        """
        data = await self.get(f"/repos/{owner}/{repo}/contents/{path}", params={"ref": ref})
        if not isinstance(data, dict) or "content" not in data:
            raise ValueError(f"no file content returned for {path}")
        return base64.b64decode(data["content"]).decode("utf-8")

    async def get_ref(self, owner: str, repo: str, ref: str) -> dict[str, Any]:
        """GET /repos/{owner}/{repo}/git/ref/{ref} — e.g. ``tags/v1.0``."""
        return await self.get(f"/repos/{owner}/{repo}/git/ref/{ref}")

    async def get_git_commit(self, owner: str, repo: str, sha: str) -> dict[str, Any]:
        """GET /repos/{owner}/{repo}/git/commits/{sha}"""
        return await self.get(f"/repos/{owner}/{repo}/git/commits/{sha}")

    # ── generic ────────────────────────────────────────────────────────────

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Single-resource GET, returns parsed JSON."""
        response = await self._request_with_retry(path, params)
        return response.json()

    # ── internal ───────────────────────────────────────────────────────────

    async def _request_with_retry(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """GET with exponential backoff on 5xx and timeout errors.

        A 403 carrying rate-limit headers sleeps until the limit resets and
        retries; if every attempt is rate limited, ``RateLimitError`` is raised.
        """
        last_exc: Exception | None = None
        for attempt in range(_MAX_RETRIES):
            try:
                resp = await self._client.get(url, params=params)

                if resp.status_code == 403 and _is_rate_limited(resp):
                    wait = _rate_limit_wait(resp)
                    log.warning(
                        "github.rate_limit",
                        url=url,
                        wait_seconds=wait,
                        attempt=attempt + 1,
                        max_retries=_MAX_RETRIES,
                    )
                    await asyncio.sleep(wait)
                    last_exc = RateLimitError(wait)
                    continue

                if resp.status_code < 500:
                    resp.raise_for_status()
                    return resp

                log.warning(
                    "github.server_error",
                    url=url,
                    status=resp.status_code,
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = httpx.HTTPStatusError(
                    f"{resp.status_code}", request=resp.request, response=resp
                )
            except httpx.TimeoutException as exc:
                log.warning(
                    "github.timeout",
                    url=url,
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = exc

            if attempt < _MAX_RETRIES - 1:
                delay = _RETRY_BASE_DELAY * (2**attempt)
                await asyncio.sleep(delay)

        raise last_exc  # type: ignore[misc]


def _is_rate_limited(response: httpx.Response) -> bool:
    """True if a 403 is a primary (remaining == 0) or secondary rate limit."""
    remaining = response.headers.get("X-RateLimit-Remaining")
    if remaining is not None and remaining.strip() == "0":
        return True
    return "Retry-After" in response.headers


def _rate_limit_wait(response: httpx.Response) -> int:
    """Seconds to wait: ``Retry-After`` first, then ``X-RateLimit-Reset``."""
    retry_after = response.headers.get("Retry-After")
    if retry_after is not None and retry_after.strip().isdigit():
        return max(int(retry_after), 1)
    reset_ts = response.headers.get("X-RateLimit-Reset")
    if reset_ts is not None and reset_ts.strip().isdigit():
        return max(int(reset_ts) - int(time.time()), 1)
    return _RATE_LIMIT_FALLBACK_WAIT


def split_address(address: str) -> tuple[str, str, str] | None:
    """Split ``host/owner/repo[.git]`` into ``(host, owner, repo)``.

    Returns None if the address has fewer than three path segments.
    """
    parts = address.split("/")
    if len(parts) < 3 or not all(parts[:3]):
        return None
    host, owner, repo = parts[0], parts[1], parts[2]
    if repo.endswith(".git"):
        repo = repo[:-4]
    return host, owner, repo
