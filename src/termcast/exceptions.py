"""Exception hierarchy shared by the recording embed pipeline."""

from __future__ import annotations

from collections.abc import Iterable


class TermcastError(RuntimeError):
    """Base exception for termcast failures."""


class ConfigurationError(TermcastError):
    """Raised when setup-time options cannot be accepted."""


class UnknownOptionError(ConfigurationError):
    """Raised when unrecognised option keys are supplied at setup time."""

    def __init__(self, keys: Iterable[str], *, owner: str = "termcast") -> None:
        self.keys = sorted(str(key) for key in keys)
        plural = "s" if len(self.keys) > 1 else ""
        super().__init__(
            f"Unrecognized option{plural} specified for {owner}: {', '.join(self.keys)}"
        )


class InvalidOptionError(ConfigurationError):
    """Raised when an option value cannot be coerced to its expected type."""


class AssetMissingError(TermcastError):
    """Raised when a packaged runtime file cannot be located."""


__all__ = [
    "AssetMissingError",
    "ConfigurationError",
    "InvalidOptionError",
    "TermcastError",
    "UnknownOptionError",
]
