"""Build and deploy Anchor programs, wrapping the anchor and solana CLIs."""

from __future__ import annotations

import asyncio
import json
import subprocess
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from solana.rpc.async_api import AsyncClient
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .config import NetworkConfig, RAConfig
from .constants import DEFAULT_KEYPAIR_PATH, LAMPORTS_PER_SOL
from .errors import BuildError, ConfigError
from .keypairs import load_keypair, resolve_keypair_path
from .programs import ProgramInfo, find_programs
from .seeder import PlanResult, open_client, run_seeds
from .util import ProgressCallback, extract_signature


@dataclass
class DeployOptions:
    program: Optional[str] = None
    skip_build: bool = False
    verifiable: bool = False
    verify: bool = False
    upgradeable: bool = True
    seed: bool = False
    seed_file: Optional[str] = None


@dataclass
class DeployResult:
    success: bool
    program_name: str
    program_id: str
    tx_signature: Optional[str] = None
    error: Optional[str] = None
    verified: Optional[bool] = None


def build(verifiable: bool = False, cwd: Path | None = None) -> None:
    cmd = ["anchor", "build"]
    if verifiable:
        cmd.append("--verifiable")
    rc = subprocess.call(cmd, cwd=str(cwd) if cwd else None)
    if rc != 0:
        raise BuildError("Build failed")


def run_tests(cwd: Path | None = None) -> int:
    return subprocess.call(["anchor", "test"], cwd=str(cwd) if cwd else None)


def deploy_command(program: ProgramInfo, network: NetworkConfig, deployer_keypair: Path, upgradeable: bool) -> List[str]:
    cmd = [
        "solana",
        "program",
        "deploy",
        str(program.so_path),
        "--program-id",
        str(program.keypair_path),
        "--keypair",
        str(deployer_keypair),
        "--url",
        network.url,
    ]
    if not upgradeable:
        cmd.append("--final")
    return cmd


def deploy_program(
    program: ProgramInfo,
    network: NetworkConfig,
    deployer_keypair: Path,
    upgradeable: bool = True,
) -> DeployResult:
    try:
        program_id = str(program.program_id)
    except ConfigError as exc:
        return DeployResult(success=False, program_name=program.name, program_id="", error=str(exc))

    cmd = deploy_command(program, network, deployer_keypair, upgradeable)
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode != 0:
        msg = result.stderr.strip() or result.stdout.strip() or "solana program deploy failed"
        return DeployResult(success=False, program_name=program.name, program_id=program_id, error=msg)
    return DeployResult(
        success=True,
        program_name=program.name,
        program_id=program_id,
        tx_signature=extract_signature(result.stdout),
    )


async def fetch_balance(network: NetworkConfig, owner: Pubkey) -> int:
    client = open_client(network)
    try:
        return (await client.get_balance(owner)).value
    finally:
        await client.close()


async def verify_program(client: AsyncClient, result: DeployResult) -> None:
    info = (await client.get_account_info(Pubkey.from_string(result.program_id))).value
    if info is None:
        raise ConfigError(f"Program {result.program_name} not found on chain")
    if not info.executable:
        raise ConfigError(f"Program {result.program_name} is not executable")


async def verify_programs(
    network: NetworkConfig,
    results: List[DeployResult],
    on_progress: Optional[ProgressCallback] = None,
) -> None:
    client = open_client(network)
    try:
        for result in results:
            if not result.success:
                continue
            try:
                await verify_program(client, result)
            except ConfigError as exc:
                result.verified = False
                result.error = str(exc)
                if on_progress:
                    on_progress(str(exc), None)
                continue
            result.verified = True
            if on_progress:
                on_progress(f"{result.program_name} verified on chain", None)
    finally:
        await client.close()


@contextmanager
def deployer_keypair_file(source: Optional[str], keypair: Keypair, base_dir: Path) -> Iterator[Path]:
    """Yield a keypair file the solana CLI can read.

    A base58 secret has no file behind it, so it is written to a private
    temporary directory for the duration of the deploy.
    """
    path = resolve_keypair_path(source or DEFAULT_KEYPAIR_PATH, base_dir)
    if path.is_file():
        yield path
        return
    with tempfile.TemporaryDirectory(prefix="ra-deployer-") as tmp:
        tmp_path = Path(tmp) / "deployer.json"
        tmp_path.write_text(json.dumps(list(bytes(keypair))))
        yield tmp_path


def deploy(
    config: RAConfig,
    network_name: str,
    options: Optional[DeployOptions] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> List[DeployResult]:
    options = options or DeployOptions()
    network = config.network(network_name)

    def report(message: str) -> None:
        if on_progress:
            on_progress(message, None)

    report(f"Network: {network_name}")
    report(f"  URL: {network.url}")

    deployer = load_keypair(network.signer_path, config.root)
    report(f"Deployer: {deployer.pubkey()}")

    balance = asyncio.run(fetch_balance(network, deployer.pubkey()))
    report(f"Balance: {balance / LAMPORTS_PER_SOL:.4f} SOL")
    if balance == 0:
        raise ConfigError("Deployer account has no SOL balance")

    if not options.skip_build:
        report("Building programs...")
        build(options.verifiable, cwd=config.root)
        report("Build completed")

    results: List[DeployResult] = []
    with deployer_keypair_file(network.signer_path, deployer, config.root) as deployer_path:
        for program in find_programs(config.artifacts_dir, options.program, on_progress):
            report(f"Deploying {program.name}...")
            if program.idl_path is None:
                report(f"Warning: no IDL found for {program.name}, it cannot be seeded")
            result = deploy_program(program, network, deployer_path, options.upgradeable)
            results.append(result)
            if result.success:
                report(f"{program.name} deployed")
                report(f"  Program ID: {result.program_id}")
                if result.tx_signature:
                    report(f"  Signature: {result.tx_signature}")
            else:
                report(f"Failed to deploy {program.name}: {result.error}")

    if options.verify:
        report("Verifying deployments...")
        asyncio.run(verify_programs(network, results, on_progress))

    if options.seed:
        report("Running seed plans...")
        seed_results: List[PlanResult] = asyncio.run(
            run_seeds(config, network_name, program=options.program, seed_file=options.seed_file, on_progress=on_progress)
        )
        report(f"Seeded {len(seed_results)} program(s)")

    return results
