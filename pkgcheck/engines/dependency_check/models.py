"""Data models for the dependency check engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

RefType = Literal["commit", "tag", "branch", "unknown"]
AnnotationLevel = Literal["notice", "warning", "failure"]

PROBLEM_LEVELS: frozenset[str] = frozenset({"warning", "failure"})


@dataclass(frozen=True)
class Dependency:
    """A single dependency entry extracted from a manifest file.

    ``ref_type`` is only known up front for lock-file entries; locator-style
    dependencies get it from the resolver via ``dataclasses.replace``.
    """

    name: str
    url: str
    raw_ref_type: str | None = None  # version | branch | revision
    ref_type: RefType | None = None
    ref_name: str | None = None


@dataclass(frozen=True)
class AnnotationResult:
    """One diagnosed problem anchored to a line of a manifest file."""

    title: str
    message: str
    annotation_level: AnnotationLevel
    dependency: Dependency
    path: str
    start_line: int
    end_line: int
    raw_details: str | None = None

    def to_api(self) -> dict[str, Any]:
        """Render as a GitHub check-run annotation (internal fields stripped)."""
        payload: dict[str, Any] = {
            "path": self.path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "annotation_level": self.annotation_level,
            "title": self.title,
            "message": self.message,
        }
        if self.raw_details is not None:
            payload["raw_details"] = self.raw_details
        return payload


@dataclass
class AnalysisResult:
    """Accumulator for a single analysis run."""

    checked_dependency_count: int = 0
    source_filenames: list[str] = field(default_factory=list)
    annotations: list[AnnotationResult] = field(default_factory=list)

    def add_source_filename(self, filename: str) -> None:
        self.source_filenames.append(filename)

    def count_level(self, level: AnnotationLevel) -> int:
        return sum(1 for a in self.annotations if a.annotation_level == level)

    @property
    def problem_count(self) -> int:
        return sum(1 for a in self.annotations if a.annotation_level in PROBLEM_LEVELS)


@dataclass(frozen=True)
class CheckSummary:
    """Final conclusion + output text for a completed run."""

    conclusion: Literal["neutral", "success", "failure"]
    title: str
    summary: str
