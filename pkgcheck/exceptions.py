"""Custom exceptions for packages-check-bot."""


class PackagesCheckError(Exception):
    """Base exception for all packages-check-bot errors."""


class ManifestFetchError(PackagesCheckError):
    """Raised when a manifest file cannot be fetched from the repository."""

    def __init__(self, path: str, status: int | None, reason: str = ""):
        self.path = path
        self.status = status
        detail = f"HTTP error {status}" if status is not None else "fetch failed"
        if reason:
            detail = f"{detail} ({reason})"
        super().__init__(f"{detail} fetching {path}")


class ManifestParseError(PackagesCheckError):
    """Raised when a manifest file is not valid JSON / TOML."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"cannot parse {path}: {reason}")


class CheckRunError(PackagesCheckError):
    """Raised when a check run cannot be created or updated on GitHub."""


class InvalidTransitionError(PackagesCheckError):
    """Raised when a check run is moved to a state its current state does not allow."""


class RateLimitError(PackagesCheckError):
    """Raised when GitHub keeps rate-limiting a request after every retry."""

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(f"rate limit exceeded, retry after {retry_after}s")
