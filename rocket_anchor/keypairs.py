"""Keypair loading from files, base58 secrets, or the default Solana identity."""

from __future__ import annotations

import json
import re
from pathlib import Path

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .constants import DEFAULT_KEYPAIR_PATH
from .errors import ConfigError

# A 64-byte secret key encodes to 87 or 88 base58 characters.
_BASE58_SECRET_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{87,88}$")


def resolve_keypair_path(source: str, base_dir: str | Path | None = None) -> Path:
    path = Path(source).expanduser()
    if path.is_absolute():
        return path
    return (Path(base_dir or Path.cwd()) / path).resolve()


def _keypair_from_file(path: Path) -> Keypair:
    try:
        raw = json.loads(path.read_text())
        if isinstance(raw, dict) and "secretKey" in raw:
            raw = raw["secretKey"]
        if not isinstance(raw, list):
            raise ValueError("Invalid keypair file format")
        return Keypair.from_bytes(bytes(raw))
    except (OSError, ValueError, TypeError) as exc:
        raise ConfigError(f"Failed to load keypair from {path}: {exc}") from exc


def load_keypair(source: str | None = None, base_dir: str | Path | None = None) -> Keypair:
    if not source:
        source = DEFAULT_KEYPAIR_PATH
    path = resolve_keypair_path(source, base_dir)
    if path.exists():
        return _keypair_from_file(path)
    if _BASE58_SECRET_RE.match(source):
        return Keypair.from_base58_string(source)
    raise FileNotFoundError(f"Keypair file not found: {path}")


def pubkey_from_keypair_file(path: str | Path) -> Pubkey:
    keypair_path = Path(path)
    if not keypair_path.exists():
        raise ConfigError(f"Program keypair not found: {keypair_path}")
    return _keypair_from_file(keypair_path).pubkey()
