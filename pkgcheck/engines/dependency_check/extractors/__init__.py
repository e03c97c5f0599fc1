"""Manifest extractors — parsed manifest → ``Dependency`` records."""
