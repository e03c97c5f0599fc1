"""Dependency check engine — find non-deterministic dependency locators in manifests."""

from pkgcheck.engines.dependency_check.annotator import summarize
from pkgcheck.engines.dependency_check.checker import ManifestContext
from pkgcheck.engines.dependency_check.models import (
    AnalysisResult,
    AnnotationResult,
    CheckSummary,
    Dependency,
)
from pkgcheck.engines.dependency_check.ref_resolver import RefTypeResolver
from pkgcheck.engines.dependency_check.registry import match_checker

__all__ = [
    "AnalysisResult",
    "AnnotationResult",
    "CheckSummary",
    "Dependency",
    "ManifestContext",
    "RefTypeResolver",
    "match_checker",
    "summarize",
]
