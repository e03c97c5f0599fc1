"""Extractor for dep's Gopkg.lock, with Gopkg.toml constraints/overrides."""

from __future__ import annotations

import sys
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pkgcheck.engines.dependency_check.models import Dependency, RefType
from pkgcheck.exceptions import ManifestParseError

# Field precedence within a single [[projects]] / [[constraint]] entry.
_REF_FIELDS: tuple[tuple[str, RefType], ...] = (
    ("version", "tag"),
    ("branch", "branch"),
    ("revision", "commit"),
)


def parse_toml(path: str, content: str) -> dict[str, Any]:
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestParseError(path, str(exc)) from exc


def _raw_ref(entry: dict[str, Any]) -> tuple[str, RefType, str] | None:
    for field_name, ref_type in _REF_FIELDS:
        value = entry.get(field_name)
        if value:
            return field_name, ref_type, str(value)
    return None


def _pins_by_name(manifest: dict[str, Any] | None) -> dict[str, tuple[str, RefType, str]]:
    """Name → ref pin from Gopkg.toml; ``[[override]]`` wins over ``[[constraint]]``."""
    pins: dict[str, tuple[str, RefType, str]] = {}
    if not manifest:
        return pins
    for table in ("constraint", "override"):
        for entry in manifest.get(table) or []:
            name = entry.get("name")
            pin = _raw_ref(entry)
            if name and pin is not None:
                pins[name] = pin
    return pins


def extract_dependencies(
    lock: dict[str, Any], manifest: dict[str, Any] | None = None
) -> list[Dependency]:
    """Build one ``Dependency`` per ``[[projects]]`` entry of the lock.

    The ref comes from a matching override/constraint in *manifest* if there
    is one, else from the lock entry itself. Entries with no
    ``version``/``branch``/``revision`` get ``ref_type=None``.
    """
    pins = _pins_by_name(manifest)
    deps: list[Dependency] = []
    for project in lock.get("projects") or []:
        name = project.get("name")
        if not name:
            continue
        pin = pins.get(name) or _raw_ref(project)
        raw_ref_type, ref_type, ref_name = pin if pin is not None else (None, None, None)
        deps.append(
            Dependency(
                name=name,
                url=project.get("source") or name,
                raw_ref_type=raw_ref_type,
                ref_type=ref_type,
                ref_name=ref_name,
            )
        )
    return deps
