"""Extractor for npm-style package.json dependency maps."""

from __future__ import annotations

import json
from typing import Any

from pkgcheck.engines.dependency_check.models import Dependency
from pkgcheck.exceptions import ManifestParseError

# Order matters: annotations within a file follow section order.
DEP_SECTIONS = ("dependencies", "devDependencies", "optionalDependencies")


def parse_package_json(path: str, content: str) -> dict[str, Any]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(path, str(exc)) from exc
    if not isinstance(data, dict):
        raise ManifestParseError(path, "top-level value is not an object")
    return data


def extract_dependencies(data: dict[str, Any]) -> list[Dependency]:
    """Flatten the dependency sections into ``Dependency`` records.

    A missing section contributes nothing; non-string specs (e.g. a
    malformed nested object) are skipped.
    """
    deps: list[Dependency] = []
    for section in DEP_SECTIONS:
        table = data.get(section) or {}
        if not isinstance(table, dict):
            continue
        for name, spec in table.items():
            if isinstance(spec, str):
                deps.append(Dependency(name=name, url=spec))
    return deps
