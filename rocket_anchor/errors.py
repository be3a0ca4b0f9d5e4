"""Exception types raised by Rocket Anchor."""

from __future__ import annotations

from typing import Any


class RocketAnchorError(Exception):
    """Base class for all Rocket Anchor errors."""


class ConfigError(RocketAnchorError):
    """Raised for missing or malformed configuration, IDLs, artifacts or keys."""


class BuildError(RocketAnchorError):
    """Raised when the external build tool exits non-zero."""


class ResolutionError(RocketAnchorError):
    """Raised when a placeholder cannot be turned into a call value."""

    def __init__(self, message: str, key: Any = None, value: Any = None, context: str | None = None) -> None:
        self.reason = message
        self.key = key
        self.value = value
        self.context = context
        if key is not None:
            message = f"{message} ({context or 'value'} {key!r}: {value!r})"
        super().__init__(message)


class UnknownFunctionError(ResolutionError):
    """Raised when a call names an instruction the IDL does not define."""


class SeedError(RocketAnchorError):
    """Raised when a seed plan fails; the original error is the __cause__."""

    def __init__(self, program: str, message: str) -> None:
        self.program = program
        super().__init__(f"Failed to seed {program}: {message}")
