"""Parse dependency locator strings (``git+https://host/owner/repo.git#tag``)."""

from __future__ import annotations

import re
from dataclasses import dataclass

from pkgcheck.engines.dependency_check.models import RefType

REQUIRED_PROTOCOL = "git+https://"
SHORTHAND_PROTOCOL = "github:"
RELEASE_TAG_PLACEHOLDER = "<release-tag>"

LOCATOR_PATTERN = re.compile(
    r"^(http://|https://|git\+http://|git\+https://|ssh://|git\+ssh://|github:)"
    r"([a-zA-Z0-9_\-./]+)"
    r"(#(.*))?$"
)


@dataclass(frozen=True)
class Locator:
    """A remote dependency locator split into its parts."""

    url: str
    protocol: str
    address: str
    tag: str

    @property
    def is_shorthand(self) -> bool:
        return self.protocol == SHORTHAND_PROTOCOL

    def suggested_url(self, ref_type: RefType | None) -> str:
        """Canonical form: ``git+https://`` + address ending in ``.git`` + release tag."""
        address = self.address if self.address.endswith(".git") else f"{self.address}.git"
        tag = self.tag if ref_type == "tag" and self.tag else RELEASE_TAG_PLACEHOLDER
        return f"{REQUIRED_PROTOCOL}{address}#{tag}"


def parse_locator(url: str) -> Locator | None:
    """Return the parsed locator, or None for local paths / semver ranges."""
    match = LOCATOR_PATTERN.match(url)
    if match is None:
        return None

    protocol = match.group(1)
    address = match.group(2)
    if protocol == SHORTHAND_PROTOCOL:
        address = f"github.com/{address}"
    return Locator(url=url, protocol=protocol, address=address, tag=match.group(4) or "")
