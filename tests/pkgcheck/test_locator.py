"""Tests for locator parsing and URL suggestions."""

from __future__ import annotations

import pytest

from pkgcheck.engines.dependency_check.locator import parse_locator


class TestParseLocator:
    def test_canonical(self):
        loc = parse_locator("git+https://github.com/a/b.git#v1.2.3")
        assert loc is not None
        assert loc.protocol == "git+https://"
        assert loc.address == "github.com/a/b.git"
        assert loc.tag == "v1.2.3"

    def test_no_fragment(self):
        loc = parse_locator("https://github.com/a/b")
        assert loc is not None
        assert loc.tag == ""

    def test_empty_fragment(self):
        loc = parse_locator("git+ssh://github.com/a/b#")
        assert loc is not None
        assert loc.tag == ""

    def test_github_shorthand_rewrites_address(self):
        loc = parse_locator("github:status-im/bignumber.js#v4.0.0")
        assert loc is not None
        assert loc.is_shorthand
        assert loc.address == "github.com/status-im/bignumber.js"
        assert loc.tag == "v4.0.0"

    @pytest.mark.parametrize(
        "protocol",
        ["http://", "https://", "git+http://", "git+https://", "ssh://", "git+ssh://"],
    )
    def test_all_protocols_recognized(self, protocol):
        loc = parse_locator(f"{protocol}github.com/a/b.git#v1")
        assert loc is not None
        assert loc.protocol == protocol

    @pytest.mark.parametrize(
        "spec",
        ["^1.2.3", "~0.4", "file:../local", "./vendor/lib", "latest", "git://github.com/a/b"],
    )
    def test_non_remote_specs_skipped(self, spec):
        assert parse_locator(spec) is None

    def test_userinfo_not_matched(self):
        # '@' is outside the address alphabet.
        assert parse_locator("git+ssh://git@github.com/a/b.git#v1") is None


class TestSuggestedUrl:
    def test_http_with_tag_keeps_address_and_tag(self):
        loc = parse_locator("http://github.com/a/b.git#v1.2.3")
        assert loc.suggested_url("tag") == "git+https://github.com/a/b.git#v1.2.3"

    def test_appends_dot_git(self):
        loc = parse_locator("https://github.com/a/b#v1")
        assert loc.suggested_url("tag") == "git+https://github.com/a/b.git#v1"

    def test_placeholder_when_not_a_tag(self):
        loc = parse_locator("git+https://github.com/a/b.git#master")
        assert loc.suggested_url("branch") == "git+https://github.com/a/b.git#<release-tag>"
        assert loc.suggested_url("commit") == "git+https://github.com/a/b.git#<release-tag>"
        assert loc.suggested_url("unknown") == "git+https://github.com/a/b.git#<release-tag>"

    def test_shorthand_suggestion(self):
        loc = parse_locator("github:a/b")
        assert loc.suggested_url("branch") == "git+https://github.com/a/b.git#<release-tag>"
