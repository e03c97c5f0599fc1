"""Classify a locator ref as tag / branch / commit by asking the hosting API."""

from __future__ import annotations

import httpx
import structlog

from pkgcheck.core.github import HOSTING_DOMAIN, GitHubClient, split_address
from pkgcheck.engines.dependency_check.models import RefType

log = structlog.get_logger("pkgcheck.engine")


class RefTypeResolver:
    """Resolve ``(address, tag)`` pairs with ordered fallback lookups.

    Order: ``refs/tags/<tag>`` → ``refs/heads/<tag>`` → commit object. A failed
    lookup is the normal way to fall through to the next one, so lookup
    errors are logged at debug level and never propagated.
    """

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    async def resolve(self, address: str, tag: str) -> RefType:
        if not tag:
            return "branch"

        parts = split_address(address)
        if parts is None or parts[0] != HOSTING_DOMAIN:
            # Cannot verify remotely; assume the worst non-failing case.
            return "branch"
        _, owner, repo = parts

        if await self._lookup(address, "tag", self._client.get_ref(owner, repo, f"tags/{tag}")):
            return "tag"
        if await self._lookup(address, "branch", self._client.get_ref(owner, repo, f"heads/{tag}")):
            return "branch"
        if await self._lookup(address, "commit", self._client.get_git_commit(owner, repo, tag)):
            return "commit"
        return "unknown"

    @staticmethod
    async def _lookup(address: str, kind: str, request) -> bool:
        try:
            await request
        except httpx.HTTPError as exc:
            log.debug("resolver.lookup_failed", address=address, kind=kind, error=str(exc))
            return False
        return True
