"""Utility helpers for Rocket Anchor."""

import re
from typing import Callable, Optional

ProgressCallback = Callable[[str, Optional[float]], None]


_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SIGNATURE_RE = re.compile(r"Signature: ([1-9A-HJ-NP-Za-km-z]+)")


def snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY_RE.sub("_", name).lower()


def extract_signature(output: str) -> str | None:
    match = _SIGNATURE_RE.search(output)
    return match.group(1) if match else None


def ensure_str(value, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string")
    return value


def ensure_positive_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer")
    return value
