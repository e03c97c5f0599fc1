"""packages-check-bot — flags non-deterministic dependency locators on GitHub check runs."""

__version__ = "0.1.0"
