"""Pending-check store — at most one live analysis per head commit."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pkgcheck.engines.check_sync.models import PendingCheck


@runtime_checkable
class PendingCheckStore(Protocol):
    """Key-value store of in-flight checks, keyed by head SHA.

    Async so a shared external store can back multiple bot instances.
    """

    async def get(self, head_sha: str) -> PendingCheck | None: ...

    async def claim(self, check: PendingCheck) -> bool:
        """Insert *check* unless an entry for its SHA exists; True if inserted."""
        ...

    async def put(self, check: PendingCheck) -> None: ...

    async def delete(self, head_sha: str) -> None: ...


class InMemoryPendingCheckStore:
    """Process-local store.

    ``claim`` never awaits between the lookup and the insert, so it is atomic
    on a single event loop.
    """

    def __init__(self) -> None:
        self._checks: dict[str, PendingCheck] = {}

    async def get(self, head_sha: str) -> PendingCheck | None:
        return self._checks.get(head_sha)

    async def claim(self, check: PendingCheck) -> bool:
        if check.head_sha in self._checks:
            return False
        self._checks[check.head_sha] = check
        return True

    async def put(self, check: PendingCheck) -> None:
        self._checks[check.head_sha] = check

    async def delete(self, head_sha: str) -> None:
        self._checks.pop(head_sha, None)

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, head_sha: object) -> bool:
        return head_sha in self._checks
