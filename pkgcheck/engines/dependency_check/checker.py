"""Manifest checkers — fetch a changed manifest, extract, resolve, diagnose."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

import httpx
import structlog

from pkgcheck.core.github import GitHubClient
from pkgcheck.engines.dependency_check.annotator import diagnose_locator, diagnose_lock_entry
from pkgcheck.engines.dependency_check.extractors import gopkg, package_json
from pkgcheck.engines.dependency_check.locator import parse_locator
from pkgcheck.engines.dependency_check.models import AnalysisResult
from pkgcheck.engines.dependency_check.ref_resolver import RefTypeResolver
from pkgcheck.engines.dependency_check.registry import register_checker
from pkgcheck.exceptions import ManifestFetchError

log = structlog.get_logger("pkgcheck.engine")


@dataclass
class ManifestContext:
    """Everything a checker needs to read files at the head commit."""

    client: GitHubClient
    resolver: RefTypeResolver
    owner: str
    repo: str
    head_sha: str

    async def fetch(self, path: str) -> str:
        try:
            content = await self.client.get_content(self.owner, self.repo, path, self.head_sha)
        except httpx.HTTPStatusError as exc:
            raise ManifestFetchError(
                path, exc.response.status_code, exc.response.reason_phrase
            ) from exc
        except ValueError as exc:
            raise ManifestFetchError(path, None, str(exc)) from exc
        log.debug("manifest.fetched", path=path, ref=self.head_sha, size=len(content))
        return content


def find_line(contents: str, substring: str) -> int | None:
    """1-based line of the first occurrence of *substring*, or None."""
    index = contents.find(substring)
    if index < 0:
        return None
    return contents.count("\n", 0, index) + 1


def find_toml_line(contents: str, project_name: str, line_substring: str) -> int | None:
    """Line of *line_substring* inside the ``[[...]]`` block naming *project_name*.

    Falls back to the ``name = ...`` line when the block has no such entry.
    """
    name_index = contents.find(f'name = "{project_name}"')
    if name_index < 0:
        return None
    block_start = contents.rfind("[[", 0, name_index)
    block_end = contents.find("[[", name_index)
    if block_start >= 0:
        index = contents.find(
            line_substring, block_start, block_end if block_end >= 0 else len(contents)
        )
        if index >= 0:
            return contents.count("\n", 0, index) + 1
    return contents.count("\n", 0, name_index) + 1


class PackageJsonChecker:
    kind = "package-json"
    file_pattern = re.compile(r"^(.*/)?package\.json(\.orig)?$")

    async def check(self, ctx: ManifestContext, filename: str, result: AnalysisResult) -> None:
        contents = await ctx.fetch(filename)
        dependencies = package_json.extract_dependencies(
            package_json.parse_package_json(filename, contents)
        )
        result.checked_dependency_count += len(dependencies)

        for dependency in dependencies:
            locator = parse_locator(dependency.url)
            if locator is None:
                continue
            ref_type = dependency.ref_type or await ctx.resolver.resolve(
                locator.address, locator.tag
            )
            dependency = replace(dependency, ref_type=ref_type)
            line = find_line(contents, dependency.url) or 1
            result.annotations.extend(
                diagnose_locator(dependency, locator, ref_type, filename, line)
            )


class GopkgChecker:
    kind = "gopkg"
    file_pattern = re.compile(r"^(.*/)?Gopkg\.toml$")

    async def check(self, ctx: ManifestContext, filename: str, result: AnalysisResult) -> None:
        # The lock sits next to the manifest.
        match = self.file_pattern.match(filename)
        directory = (match.group(1) if match else None) or ""
        lock_filename = f"{directory}Gopkg.lock"

        toml_contents = await ctx.fetch(filename)
        lock_contents = await ctx.fetch(lock_filename)
        dependencies = gopkg.extract_dependencies(
            gopkg.parse_toml(lock_filename, lock_contents),
            gopkg.parse_toml(filename, toml_contents),
        )
        result.checked_dependency_count += len(dependencies)

        for dependency in dependencies:
            if dependency.ref_type is None:
                continue
            needle = f'{dependency.raw_ref_type} = "{dependency.ref_name}"'
            path, line = filename, find_toml_line(toml_contents, dependency.name, needle)
            if line is None:
                path, line = lock_filename, find_toml_line(lock_contents, dependency.name, needle)
            result.annotations.extend(diagnose_lock_entry(dependency, path, line or 1))


register_checker(PackageJsonChecker())
register_checker(GopkgChecker())
