"""Tests for pending-check transitions and check-run bodies."""

from __future__ import annotations

import pytest

from pkgcheck.engines.check_sync.models import CheckState
from pkgcheck.engines.check_sync.state import (
    INITIAL_OUTPUT,
    assign_run_id,
    cancel,
    complete,
    new_check,
    start_analysis,
)
from pkgcheck.engines.dependency_check.models import CheckSummary
from pkgcheck.exceptions import InvalidTransitionError

NOW = "2024-01-01T00:00:00+00:00"
LATER = "2024-01-01T00:05:00+00:00"
SUMMARY = CheckSummary(conclusion="success", title="All dependencies are good!", summary="ok")


class TestTransitions:
    def test_new_check_is_created_in_progress(self, make_trigger):
        check = new_check(make_trigger(), "deps", NOW)
        assert check.state is CheckState.CREATED
        assert check.status == "in_progress"
        assert check.output == INITIAL_OUTPUT
        assert check.check_run_id is None

    def test_rerun_carries_run_id(self, make_trigger):
        check = new_check(make_trigger(check_run_id=7), "deps", NOW)
        assert check.check_run_id == 7

    def test_happy_path(self, make_trigger):
        check = assign_run_id(new_check(make_trigger(), "deps", NOW), 42)
        check = start_analysis(check)
        assert check.state is CheckState.ANALYZING
        assert check.status == "in_progress"

        done = complete(check, SUMMARY, LATER)
        assert done.state is CheckState.COMPLETED
        assert done.status == "completed"
        assert done.conclusion == "success"
        assert done.completed_at == LATER
        assert done.output.title == "All dependencies are good!"
        # Originals are untouched.
        assert check.state is CheckState.ANALYZING

    def test_start_without_run_id(self, make_trigger):
        with pytest.raises(InvalidTransitionError, match="no check run id"):
            start_analysis(new_check(make_trigger(), "deps", NOW))

    def test_complete_requires_analyzing(self, make_trigger):
        check = assign_run_id(new_check(make_trigger(), "deps", NOW), 42)
        with pytest.raises(InvalidTransitionError):
            complete(check, SUMMARY, LATER)

    def test_cannot_restart_completed(self, make_trigger):
        check = start_analysis(assign_run_id(new_check(make_trigger(), "deps", NOW), 42))
        done = complete(check, SUMMARY, LATER)
        with pytest.raises(InvalidTransitionError):
            start_analysis(done)
        with pytest.raises(InvalidTransitionError):
            cancel(done, "x", LATER)

    def test_cancel(self, make_trigger):
        check = cancel(new_check(make_trigger(), "deps", NOW), "boom", LATER)
        assert check.state is CheckState.CANCELLED
        assert check.status == "completed"
        assert check.conclusion == "cancelled"
        assert check.output.summary == "boom"


class TestBodies:
    def test_create_body(self, make_trigger):
        body = new_check(make_trigger(), "deps", NOW).to_create_body()
        assert body == {
            "name": "deps",
            "started_at": NOW,
            "status": "in_progress",
            "head_sha": "a" * 40,
            "head_branch": "feature",
            "output": {
                "title": "Dependency check",
                "summary": "Checking any new/updated dependencies...",
            },
        }

    def test_cancelled_create_body(self, make_trigger):
        body = cancel(new_check(make_trigger(), "deps", NOW), "boom", LATER).to_create_body()
        assert body["status"] == "completed"
        assert body["conclusion"] == "cancelled"
        assert body["completed_at"] == LATER
        assert body["output"]["summary"] == "boom"

    def test_update_body_annotations(self, make_trigger):
        check = start_analysis(assign_run_id(new_check(make_trigger(), "deps", NOW), 42))
        done = complete(check, SUMMARY, LATER)
        assert "annotations" not in done.to_update_body()["output"]
        assert "annotations" not in done.to_update_body([])["output"]
        body = done.to_update_body([{"path": "package.json"}])
        assert body["output"]["annotations"] == [{"path": "package.json"}]
        assert body["conclusion"] == "success"
        assert "head_sha" not in body
