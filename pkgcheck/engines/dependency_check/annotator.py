"""Turn dependencies into check-run annotations and summarize a finished run.

Everything in this module is a pure function of its inputs: no counters,
no clocks, no I/O.  Feeding the same dependency twice yields identical
annotations.
"""

from __future__ import annotations

from collections.abc import Sequence

from pkgcheck.engines.dependency_check.locator import (
    REQUIRED_PROTOCOL,
    Locator,
)
from pkgcheck.engines.dependency_check.models import (
    AnalysisResult,
    AnnotationLevel,
    AnnotationResult,
    CheckSummary,
    Dependency,
    RefType,
)

# Summary lists / counts are capped so the check output stays readable.
_LIST_LIMIT = 3
_COUNT_BOUND = 10

_BRANCH_RISK = "If the branch advances, it will be impossible to rebuild the same output in the future."
_COMMIT_RISK = (
    "If the commit is overwritten by a force-push, "
    "it will be impossible to rebuild the same output in the future."
)


def diagnose_locator(
    dependency: Dependency,
    locator: Locator,
    ref_type: RefType | None,
    path: str,
    line: int,
) -> list[AnnotationResult]:
    """Annotations for a URL-style dependency (package.json and friends).

    Each rule is evaluated independently; one dependency can trip several.
    """
    suggested_url = locator.suggested_url(ref_type)
    url = dependency.url
    out: list[AnnotationResult] = []

    def add(level: AnnotationLevel, title: str, message: str) -> None:
        out.append(
            AnnotationResult(
                title=title,
                message=f"{message}\r\n\r\nSuggested URL: {suggested_url}",
                annotation_level=level,
                dependency=dependency,
                path=path,
                start_line=line,
                end_line=line,
                raw_details=suggested_url,
            )
        )

    if locator.protocol != REQUIRED_PROTOCOL:
        add(
            "warning",
            f"Found protocol {locator.protocol} being used in dependency",
            f"Protocol should be {REQUIRED_PROTOCOL}.",
        )
    if not locator.is_shorthand and not locator.address.endswith(".git"):
        add(
            "warning",
            "Address should end with .git for consistency.",
            "Android builds have been known to fail when dependency addresses don't end with .git.",
        )

    if not locator.tag:
        add(
            "failure",
            "Dependency is not locked with a tag/release.",
            f"{url} is not a deterministic dependency locator.\n{_BRANCH_RISK}",
        )
    elif ref_type is None or ref_type == "unknown":
        add(
            "failure",
            f"Dependency is locked with an unknown ref-spec (`{locator.tag}`).",
            f"Please check that the tag `{locator.tag}` exists in the target repository "
            f"{locator.address}.",
        )
    elif ref_type == "commit":
        add(
            "notice",
            "Dependency is locked with a commit instead of a tag/release.",
            f"{url} is not a deterministic dependency locator.\n{_COMMIT_RISK}",
        )
    elif ref_type == "branch":
        add(
            "failure",
            "Dependency is locked with a branch instead of a tag/release.",
            f"{url} is not a deterministic dependency locator.\n{_BRANCH_RISK}",
        )

    return out


def diagnose_lock_entry(dependency: Dependency, path: str, line: int) -> list[AnnotationResult]:
    """Annotations for a lock-file entry whose ref kind is already known."""
    if dependency.ref_type == "commit":
        level: AnnotationLevel = "notice"
        message = f"A commit SHA is not a deterministic dependency locator.\n{_COMMIT_RISK}"
    elif dependency.ref_type == "branch":
        level = "failure"
        message = f"A branch is not a deterministic dependency locator.\n{_BRANCH_RISK}"
    else:
        return []

    return [
        AnnotationResult(
            title=(
                f"Dependency '{dependency.name}' is locked with "
                f"{dependency.raw_ref_type} '{dependency.ref_name}'."
            ),
            message=f"{message}\n\nPlease lock the dependency with a tag/release.",
            annotation_level=level,
            dependency=dependency,
            path=path,
            start_line=line,
            end_line=line,
        )
    ]


# ── summary ──────────────────────────────────────────────────────────────


def summarize(result: AnalysisResult) -> CheckSummary:
    """Compute the check conclusion and output text for a finished run."""
    if result.checked_dependency_count == 0:
        return CheckSummary(
            conclusion="neutral",
            title="No changes to dependencies",
            summary="No changes detected to dependency manifest files",
        )

    filenames = oxford([f"`{f}`" for f in result.source_filenames], _LIST_LIMIT)
    if result.problem_count == 0:
        return CheckSummary(
            conclusion="success",
            title="All dependencies are good!",
            summary=f"No problems detected in changes to {filenames}",
        )

    failures = result.count_level("failure")
    warnings = result.count_level("warning")
    notices = result.count_level("notice")
    per_level = [
        f"{count} {pluralize(count, level)}"
        for count, level in ((failures, "failure"), (warnings, "warning"), (notices, "notice"))
        if count > 0
    ]
    offenders = list(dict.fromkeys(a.dependency.name for a in result.annotations))
    dep_count = _item_count(result.checked_dependency_count, "dependency", "dependencies")

    return CheckSummary(
        conclusion="failure",
        title=f"{_item_count(failures + warnings, 'problem')} detected",
        summary=(
            f"Checked {dep_count} in {filenames}.\n"
            f"{oxford(per_level)} in {oxford([f'`{n}`' for n in offenders], _LIST_LIMIT)} "
            "need your attention!"
        ),
    )


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    if count == 1:
        return singular
    return plural if plural is not None else f"{singular}s"


def bounded_number(count: int, bound: int = _COUNT_BOUND) -> str:
    return f"more than {bound}" if count > bound else str(count)


def oxford(items: Sequence[str], limit: int | None = None) -> str:
    """Join items as ``a, b, and c``; past *limit* items collapse to ``and N others``."""
    n = len(items)
    if n == 0:
        return ""
    if n == 1:
        return items[0]
    if n == 2:
        return f"{items[0]} and {items[1]}"
    if limit is not None and n > limit:
        extra = n - limit
        return f"{', '.join(items[:limit])}, and {extra} {pluralize(extra, 'other')}"
    return f"{', '.join(items[:-1])}, and {items[-1]}"


def _item_count(count: int, singular: str, plural: str | None = None) -> str:
    return f"{bounded_number(count)} {pluralize(count, singular, plural)}"
