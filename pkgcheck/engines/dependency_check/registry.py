"""Checker registry — match changed filenames to manifest checkers."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pkgcheck.engines.dependency_check.models import AnalysisResult

if TYPE_CHECKING:
    from pkgcheck.engines.dependency_check.checker import ManifestContext


@runtime_checkable
class ManifestChecker(Protocol):
    """Interface that every manifest checker must satisfy."""

    kind: str
    file_pattern: re.Pattern[str]

    async def check(
        self, ctx: ManifestContext, filename: str, result: AnalysisResult
    ) -> None: ...


CHECKER_REGISTRY: dict[str, ManifestChecker] = {}


def register_checker(checker: ManifestChecker) -> None:
    """Register a checker instance by its kind."""
    CHECKER_REGISTRY[checker.kind] = checker


def match_checker(filename: str) -> ManifestChecker | None:
    """Return the first registered checker whose pattern matches *filename*."""
    for checker in CHECKER_REGISTRY.values():
        if checker.file_pattern.match(filename):
            return checker
    return None
