"""Project configuration loading (ra.toml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib
except ImportError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

from .constants import (
    ALLOWED_COMMITMENT,
    CLUSTER_URLS,
    CONFIG_FILENAME,
    DEFAULT_ARTIFACTS_DIR,
    DEFAULT_COMMITMENT,
    DEFAULT_LOG_WAIT_SECONDS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SETTLE_DELAY,
)
from .errors import ConfigError


@dataclass
class NetworkConfig:
    name: str
    url: str
    accounts: List[str] = field(default_factory=list)
    commitment: str = DEFAULT_COMMITMENT
    timeout: Optional[float] = None
    skip_preflight: bool = False

    @property
    def signer_path(self) -> Optional[str]:
        return self.accounts[0] if self.accounts else None


@dataclass
class PathsConfig:
    programs: str = "./programs"
    tests: str = "./tests"
    artifacts: str = DEFAULT_ARTIFACTS_DIR


@dataclass
class SeedingConfig:
    settle_delay: float = DEFAULT_SETTLE_DELAY
    log_wait_seconds: float = DEFAULT_LOG_WAIT_SECONDS
    poll_interval: float = DEFAULT_POLL_INTERVAL


@dataclass
class RAConfig:
    root: Path
    networks: Dict[str, NetworkConfig]
    paths: PathsConfig = field(default_factory=PathsConfig)
    seeding: SeedingConfig = field(default_factory=SeedingConfig)

    def network(self, name: str) -> NetworkConfig:
        try:
            return self.networks[name]
        except KeyError:
            available = ", ".join(sorted(self.networks)) or "<none>"
            raise ConfigError(
                f'Network "{name}" not found in {CONFIG_FILENAME}. Available networks: {available}'
            ) from None

    @property
    def artifacts_dir(self) -> Path:
        path = Path(self.paths.artifacts).expanduser()
        if path.is_absolute():
            return path
        return (self.root / path).resolve()


_DEFAULT_CONFIG: Dict[str, Any] = {
    "networks": {
        "localnet": {
            "url": CLUSTER_URLS["localnet"],
            "accounts": ["~/.config/solana/id.json"],
            "commitment": "confirmed",
        },
        "devnet": {
            "url": CLUSTER_URLS["devnet"],
            "accounts": ["~/.config/solana/devnet.json"],
            "commitment": "confirmed",
            "timeout": 60,
        },
        "mainnet": {
            "url": CLUSTER_URLS["mainnet"],
            "accounts": ["~/.config/solana/mainnet.json"],
            "commitment": "finalized",
            "timeout": 90,
        },
    },
    "paths": {
        "programs": "./programs",
        "tests": "./tests",
        "artifacts": DEFAULT_ARTIFACTS_DIR,
    },
    "seeding": {
        "settle_delay": DEFAULT_SETTLE_DELAY,
        "log_wait_seconds": DEFAULT_LOG_WAIT_SECONDS,
        "poll_interval": DEFAULT_POLL_INTERVAL,
    },
}


def _non_negative(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ConfigError(f"{name} must be a non-negative number")
    return float(value)


def _parse_network(name: str, raw: Any) -> NetworkConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f'Network "{name}" must be a table')
    url = raw.get("url")
    if not isinstance(url, str) or not url:
        raise ConfigError(f'Network "{name}" must have a valid "url" string')
    accounts = raw.get("accounts", [])
    if not isinstance(accounts, list) or not all(isinstance(a, str) for a in accounts):
        raise ConfigError(f'Network "{name}" accounts must be a list of strings')
    commitment = raw.get("commitment", DEFAULT_COMMITMENT)
    if commitment not in ALLOWED_COMMITMENT:
        raise ConfigError(
            f'Network "{name}" commitment must be one of: {", ".join(sorted(ALLOWED_COMMITMENT))}'
        )
    timeout = raw.get("timeout")
    if timeout is not None:
        timeout = _non_negative(timeout, f"networks.{name}.timeout")
    return NetworkConfig(
        name=name,
        url=url,
        accounts=list(accounts),
        commitment=commitment,
        timeout=timeout,
        skip_preflight=bool(raw.get("skip_preflight", False)),
    )


def _parse_paths(raw: Any) -> PathsConfig:
    if raw is None:
        return PathsConfig()
    if not isinstance(raw, dict):
        raise ConfigError("paths must be a table")
    paths = PathsConfig()
    for key in ("programs", "tests", "artifacts"):
        value = raw.get(key)
        if value is None:
            continue
        if not isinstance(value, str) or not value:
            raise ConfigError(f"paths.{key} must be a non-empty string")
        setattr(paths, key, value)
    return paths


def _parse_seeding(raw: Any) -> SeedingConfig:
    if raw is None:
        return SeedingConfig()
    if not isinstance(raw, dict):
        raise ConfigError("seeding must be a table")
    seeding = SeedingConfig()
    for key in ("settle_delay", "log_wait_seconds", "poll_interval"):
        if key in raw:
            setattr(seeding, key, _non_negative(raw[key], f"seeding.{key}"))
    if seeding.poll_interval <= 0:
        raise ConfigError("seeding.poll_interval must be > 0")
    return seeding


def parse_config(data: Dict[str, Any], root: Path) -> RAConfig:
    networks = data.get("networks")
    if not isinstance(networks, dict):
        raise ConfigError('Config must have a "networks" table')
    return RAConfig(
        root=root,
        networks={name: _parse_network(name, raw) for name, raw in networks.items()},
        paths=_parse_paths(data.get("paths")),
        seeding=_parse_seeding(data.get("seeding")),
    )


def load_config(path: str | Path | None = None, root: str | Path | None = None) -> RAConfig:
    if path is not None:
        config_path = Path(path).expanduser()
    else:
        config_path = Path(root or Path.cwd()) / CONFIG_FILENAME
    if not config_path.exists():
        if path is not None:
            raise ConfigError(f"Config not found: {config_path}")
        raise ConfigError(f'{CONFIG_FILENAME} not found. Run "ra init" to create one.')
    try:
        data = tomllib.loads(config_path.read_text())
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to load config from {config_path}: {exc}") from exc
    return parse_config(data, config_path.resolve().parent)


def default_config() -> Dict[str, Any]:
    return {
        "networks": {name: dict(net) for name, net in _DEFAULT_CONFIG["networks"].items()},
        "paths": dict(_DEFAULT_CONFIG["paths"]),
        "seeding": dict(_DEFAULT_CONFIG["seeding"]),
    }


def write_default_config(path: str | Path, force: bool = False) -> Path:
    config_path = Path(path)
    if config_path.exists() and not force:
        raise ConfigError(f"{config_path.name} already exists!")
    config_path.write_bytes(tomli_w.dumps(default_config()).encode())
    return config_path
