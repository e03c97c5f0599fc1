"""Tests for annotation rules and run summaries."""

from __future__ import annotations

import pytest

from pkgcheck.engines.dependency_check.annotator import (
    bounded_number,
    diagnose_locator,
    diagnose_lock_entry,
    oxford,
    summarize,
)
from pkgcheck.engines.dependency_check.locator import parse_locator
from pkgcheck.engines.dependency_check.models import (
    AnalysisResult,
    AnnotationResult,
    Dependency,
)


def _diagnose(url: str, ref_type, name: str = "lib"):
    dep = Dependency(name=name, url=url, ref_type=ref_type)
    return diagnose_locator(dep, parse_locator(url), ref_type, "package.json", 7)


def _annotation(name: str, level: str) -> AnnotationResult:
    return AnnotationResult(
        title="t",
        message="m",
        annotation_level=level,
        dependency=Dependency(name=name, url="u"),
        path="package.json",
        start_line=1,
        end_line=1,
    )


# ── locator rules ────────────────────────────────────────────────────────


class TestDiagnoseLocator:
    def test_canonical_tag_is_clean(self):
        assert _diagnose("git+https://github.com/a/b.git#v1.2.3", "tag") == []

    def test_http_protocol_warns_with_suggestion(self):
        out = _diagnose("http://github.com/a/b.git#v1.2.3", "tag")
        assert len(out) == 1
        assert out[0].annotation_level == "warning"
        assert out[0].title == "Found protocol http:// being used in dependency"
        assert out[0].raw_details == "git+https://github.com/a/b.git#v1.2.3"
        assert out[0].message.endswith(
            "\r\n\r\nSuggested URL: git+https://github.com/a/b.git#v1.2.3"
        )
        assert (out[0].start_line, out[0].end_line) == (7, 7)

    def test_missing_dot_git_warns(self):
        out = _diagnose("git+https://github.com/a/b#v1", "tag")
        assert [a.annotation_level for a in out] == ["warning"]
        assert out[0].title == "Address should end with .git for consistency."

    def test_shorthand_skips_dot_git_rule(self):
        out = _diagnose("github:a/b#v1", "tag")
        assert [a.title for a in out] == ["Found protocol github: being used in dependency"]

    def test_empty_tag_fails(self):
        out = _diagnose("git+ssh://github.com/a/b#", "branch")
        levels = [a.annotation_level for a in out]
        assert levels == ["warning", "warning", "failure"]
        assert out[-1].title == "Dependency is not locked with a tag/release."
        assert out[-1].raw_details == "git+https://github.com/a/b.git#<release-tag>"

    def test_branch_fails(self):
        out = _diagnose("git+https://github.com/a/b.git#master", "branch")
        assert len(out) == 1
        assert out[0].annotation_level == "failure"
        assert "branch instead of a tag" in out[0].title

    def test_commit_is_notice(self):
        out = _diagnose("git+https://github.com/a/b.git#346938d", "commit")
        assert [a.annotation_level for a in out] == ["notice"]

    @pytest.mark.parametrize("ref_type", ["unknown", None])
    def test_unknown_ref_fails(self, ref_type):
        out = _diagnose("git+https://github.com/a/b.git#nope", ref_type)
        assert [a.annotation_level for a in out] == ["failure"]
        assert "`nope`" in out[0].title
        assert "github.com/a/b.git" in out[0].message

    def test_same_input_same_output(self):
        url = "git+ssh://github.com/a/b#master"
        assert _diagnose(url, "branch") == _diagnose(url, "branch")

    def test_to_api_drops_dependency(self):
        payload = _diagnose("http://github.com/a/b.git#v1", "tag")[0].to_api()
        assert "dependency" not in payload
        assert payload["path"] == "package.json"
        assert payload["raw_details"] == "git+https://github.com/a/b.git#v1"


# ── lock rules ───────────────────────────────────────────────────────────


class TestDiagnoseLockEntry:
    def test_commit_is_notice(self):
        dep = Dependency(
            name="github.com/x/y",
            url="github.com/x/y",
            raw_ref_type="revision",
            ref_type="commit",
            ref_name="abc",
        )
        (ann,) = diagnose_lock_entry(dep, "Gopkg.lock", 3)
        assert ann.annotation_level == "notice"
        assert ann.title == "Dependency 'github.com/x/y' is locked with revision 'abc'."
        assert ann.raw_details is None

    def test_branch_is_failure(self):
        dep = Dependency(
            name="n", url="n", raw_ref_type="branch", ref_type="branch", ref_name="master"
        )
        (ann,) = diagnose_lock_entry(dep, "Gopkg.toml", 9)
        assert ann.annotation_level == "failure"
        assert ann.path == "Gopkg.toml"
        assert ann.start_line == 9

    def test_tag_is_clean(self):
        dep = Dependency(name="n", url="n", raw_ref_type="version", ref_type="tag", ref_name="v1")
        assert diagnose_lock_entry(dep, "Gopkg.lock", 1) == []


# ── summary ──────────────────────────────────────────────────────────────


class TestSummarize:
    def test_neutral_when_nothing_checked(self):
        summary = summarize(AnalysisResult())
        assert summary.conclusion == "neutral"
        assert summary.title == "No changes to dependencies"
        assert summary.summary == "No changes detected to dependency manifest files"

    def test_success(self):
        result = AnalysisResult(checked_dependency_count=3, source_filenames=["package.json"])
        summary = summarize(result)
        assert summary.conclusion == "success"
        assert summary.title == "All dependencies are good!"
        assert summary.summary == "No problems detected in changes to `package.json`"

    def test_notices_only_is_success(self):
        result = AnalysisResult(
            checked_dependency_count=1,
            source_filenames=["package.json"],
            annotations=[_annotation("a", "notice")],
        )
        assert summarize(result).conclusion == "success"

    def test_failure_text(self):
        result = AnalysisResult(
            checked_dependency_count=4,
            source_filenames=["package.json", "web/package.json"],
            annotations=[
                _annotation("a", "failure"),
                _annotation("a", "warning"),
                _annotation("b", "warning"),
                _annotation("c", "notice"),
            ],
        )
        summary = summarize(result)
        assert summary.conclusion == "failure"
        assert summary.title == "3 problems detected"
        assert summary.summary == (
            "Checked 4 dependencies in `package.json` and `web/package.json`.\n"
            "1 failure, 2 warnings, and 1 notice in `a`, `b`, and `c` need your attention!"
        )

    def test_single_problem_title(self):
        result = AnalysisResult(
            checked_dependency_count=1,
            source_filenames=["package.json"],
            annotations=[_annotation("a", "failure")],
        )
        summary = summarize(result)
        assert summary.title == "1 problem detected"
        assert summary.summary.startswith("Checked 1 dependency in")

    def test_counts_are_bounded(self):
        result = AnalysisResult(
            checked_dependency_count=25,
            source_filenames=["package.json"],
            annotations=[_annotation(f"d{i}", "failure") for i in range(12)],
        )
        summary = summarize(result)
        assert summary.title == "more than 10 problems detected"
        assert summary.summary.startswith("Checked more than 10 dependencies in")
        assert "`d0`, `d1`, `d2`, and 9 others" in summary.summary


class TestFormatting:
    @pytest.mark.parametrize(
        "items,limit,expected",
        [
            ([], None, ""),
            (["a"], None, "a"),
            (["a", "b"], None, "a and b"),
            (["a", "b", "c"], None, "a, b, and c"),
            (["a", "b", "c", "d"], 3, "a, b, c, and 1 other"),
            (["a", "b", "c", "d", "e"], 3, "a, b, c, and 2 others"),
            (["a", "b", "c"], 3, "a, b, and c"),
        ],
    )
    def test_oxford(self, items, limit, expected):
        assert oxford(items, limit) == expected

    def test_bounded_number(self):
        assert bounded_number(10) == "10"
        assert bounded_number(11) == "more than 10"
