"""Seed plan documents: discovery, parsing and validation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib
except ImportError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

from .constants import SEED_SEARCH_PATHS
from .errors import ConfigError
from .util import ensure_positive_int, ensure_str


@dataclass(frozen=True)
class CallSpec:
    function: str
    accounts: Dict[str, Any] = field(default_factory=dict)
    args: List[Any] = field(default_factory=list)
    repeat: int = 1


@dataclass(frozen=True)
class SeedPlan:
    program: str
    initialize: Optional[CallSpec] = None
    seeds: List[CallSpec] = field(default_factory=list)

    @property
    def call_count(self) -> int:
        count = 1 if self.initialize else 0
        return count + sum(seed.repeat for seed in self.seeds)


def parse_call(raw: Any, where: str, allow_repeat: bool = True) -> CallSpec:
    if not isinstance(raw, dict):
        raise ValueError(f"{where} must be a table")
    function = ensure_str(raw.get("function"), f"{where}.function")
    accounts = raw.get("accounts", {})
    if not isinstance(accounts, dict):
        raise ValueError(f"{where}.accounts must be a table of role = value")
    for role in accounts:
        ensure_str(role, f"{where}.accounts key")
    args = raw.get("args", [])
    if not isinstance(args, list):
        raise ValueError(f"{where}.args must be a list")
    repeat = 1
    if "repeat" in raw:
        if not allow_repeat:
            raise ValueError(f"{where}.repeat is not supported for initialize")
        repeat = ensure_positive_int(raw["repeat"], f"{where}.repeat")
    return CallSpec(function=function, accounts=dict(accounts), args=list(args), repeat=repeat)


def parse_plan(raw: Any, index: int) -> SeedPlan:
    where = f"plans[{index}]"
    try:
        if not isinstance(raw, dict):
            raise ValueError(f"{where} must be a table")
        program = ensure_str(raw.get("program"), f"{where}.program")
        initialize = None
        if raw.get("initialize") is not None:
            initialize = parse_call(raw["initialize"], f"{where}.initialize", allow_repeat=False)
        seeds_raw = raw.get("seeds", [])
        if not isinstance(seeds_raw, list):
            raise ValueError(f"{where}.seeds must be a list")
        seeds = [parse_call(item, f"{where}.seeds[{i}]") for i, item in enumerate(seeds_raw)]
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    return SeedPlan(program=program, initialize=initialize, seeds=seeds)


def parse_plans(data: Any) -> List[SeedPlan]:
    if isinstance(data, dict) and "plans" in data:
        data = data["plans"]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ConfigError("Seed document must contain a plan or a list of plans")
    return [parse_plan(item, index) for index, item in enumerate(data)]


def _read_document(path: Path) -> Any:
    text = path.read_text()
    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse seed file {path}: {exc}") from exc


def find_seed_file(root: Path, seed_file: Optional[str] = None) -> Path:
    if seed_file:
        path = Path(seed_file).expanduser()
        if not path.is_absolute():
            path = (root / path).resolve()
        if not path.exists():
            raise ConfigError(f"Seed file not found: {path}")
        return path
    for candidate in SEED_SEARCH_PATHS:
        path = root / candidate
        if path.exists():
            return path
    raise ConfigError(
        "No seed configuration found. Create seeds/index.toml or use --seed-file"
    )


def load_plans(root: str | Path | None = None, seed_file: Optional[str] = None) -> List[SeedPlan]:
    path = find_seed_file(Path(root or Path.cwd()), seed_file)
    return parse_plans(_read_document(path))
