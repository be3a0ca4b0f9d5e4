"""Locate built programs and their IDLs in the artifacts directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from anchorpy import Idl, Program, Provider
from solders.pubkey import Pubkey

from .errors import ConfigError
from .keypairs import pubkey_from_keypair_file
from .util import ProgressCallback


@dataclass
class ProgramInfo:
    name: str
    so_path: Path
    keypair_path: Path
    idl_path: Optional[Path] = None

    @property
    def program_id(self) -> Pubkey:
        return pubkey_from_keypair_file(self.keypair_path)


def deploy_dir(artifacts_dir: Path) -> Path:
    return Path(artifacts_dir) / "deploy"


def idl_path_for(artifacts_dir: Path, name: str) -> Path:
    return Path(artifacts_dir) / "idl" / f"{name}.json"


def keypair_path_for(artifacts_dir: Path, name: str) -> Path:
    return deploy_dir(artifacts_dir) / f"{name}-keypair.json"


def find_programs(
    artifacts_dir: Path,
    program: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> List[ProgramInfo]:
    target = deploy_dir(artifacts_dir)
    if not target.is_dir():
        raise ConfigError(f"Deploy directory not found: {target}")

    programs: List[ProgramInfo] = []
    for so_path in sorted(target.glob("*.so")):
        name = so_path.stem
        if program and name != program:
            continue
        keypair_path = keypair_path_for(artifacts_dir, name)
        if not keypair_path.exists():
            if on_progress:
                on_progress(f"Warning: keypair not found for {name}, skipping", None)
            continue
        idl_path = idl_path_for(artifacts_dir, name)
        programs.append(
            ProgramInfo(
                name=name,
                so_path=so_path,
                keypair_path=keypair_path,
                idl_path=idl_path if idl_path.exists() else None,
            )
        )

    if not programs:
        if program:
            raise ConfigError(f'Program "{program}" not found')
        raise ConfigError("No programs found to deploy")
    return programs


def load_idl(artifacts_dir: Path, name: str) -> Idl:
    path = idl_path_for(artifacts_dir, name)
    if not path.exists():
        raise ConfigError(f"IDL not found for {name}: {path}")
    try:
        return Idl.from_json(path.read_text())
    except ValueError as exc:
        raise ConfigError(f"Invalid IDL for {name}: {path}: {exc}") from exc


def program_id_for(artifacts_dir: Path, name: str) -> Pubkey:
    return pubkey_from_keypair_file(keypair_path_for(artifacts_dir, name))


def open_program(artifacts_dir: Path, name: str, provider: Provider) -> Program:
    idl = load_idl(artifacts_dir, name)
    return Program(idl, program_id_for(artifacts_dir, name), provider)
