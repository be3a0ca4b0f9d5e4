"""Seed sequencing: initialize, then each seed entry `repeat` times.

Plans run one at a time and every call inside a plan runs strictly in
order; a later call may depend on state written by an earlier one. The
first failing call moves the plan to FAILED and its error propagates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Optional

from anchorpy import Program, Provider, Wallet
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.types import TxOpts

from .config import NetworkConfig, RAConfig
from .errors import SeedError
from .executor import CallOptions, CallResult, execute_call
from .keypairs import load_keypair
from .plans import CallSpec, SeedPlan, load_plans
from .programs import open_program
from .util import ProgressCallback

CallRunner = Callable[[CallSpec], Awaitable[CallResult]]


class SeedPhase(str, Enum):
    IDLE = "idle"
    RUNNING_INITIALIZE = "running_initialize"
    RUNNING_SEEDS = "running_seeds"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PlanResult:
    program: str
    phase: SeedPhase = SeedPhase.IDLE
    calls: List[CallResult] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        return self.phase == SeedPhase.DONE


class SeedSequencer:
    """Drives one SeedPlan through its phases."""

    def __init__(
        self,
        plan: SeedPlan,
        run_call: CallRunner,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.plan = plan
        self.run_call = run_call
        self.on_progress = on_progress
        self.result = PlanResult(program=plan.program)
        self._completed = 0

    @property
    def phase(self) -> SeedPhase:
        return self.result.phase

    def _report(self, message: str) -> None:
        if self.on_progress:
            total = self.plan.call_count
            pct = (self._completed / total) * 100.0 if total else None
            self.on_progress(message, pct)

    async def _call(self, spec: CallSpec) -> None:
        self._report(f"Calling program method: {spec.function}")
        self.result.calls.append(await self.run_call(spec))
        self._completed += 1

    async def run(self) -> PlanResult:
        if self.result.phase != SeedPhase.IDLE:
            raise RuntimeError(f"Seed plan for {self.plan.program} already ran")
        try:
            if self.plan.initialize is not None:
                self.result.phase = SeedPhase.RUNNING_INITIALIZE
                self._report("Running initialize...")
                await self._call(self.plan.initialize)
                self._report("Initialize completed")

            self.result.phase = SeedPhase.RUNNING_SEEDS
            total = len(self.plan.seeds)
            for index, seed in enumerate(self.plan.seeds, start=1):
                self._report(f"Running seed {index}/{total}...")
                for iteration in range(seed.repeat):
                    if seed.repeat > 1:
                        self._report(f"Iteration {iteration + 1}/{seed.repeat}")
                    await self._call(seed)
                self._report(f"Seed {index} ({seed.function}) completed")
        except Exception as exc:
            self.result.phase = SeedPhase.FAILED
            self.result.error = exc
            raise
        self.result.phase = SeedPhase.DONE
        return self.result


def select_plans(plans: Iterable[SeedPlan], program: Optional[str] = None) -> List[SeedPlan]:
    return [plan for plan in plans if not program or plan.program == program]


def call_options(config: RAConfig, network: NetworkConfig) -> CallOptions:
    return CallOptions(
        commitment=network.commitment,
        skip_preflight=network.skip_preflight,
        settle_delay=config.seeding.settle_delay,
        log_wait_seconds=config.seeding.log_wait_seconds,
        poll_interval=config.seeding.poll_interval,
    )


def program_runner(
    program: Program,
    options: CallOptions,
    on_progress: Optional[ProgressCallback] = None,
) -> CallRunner:
    async def run_call(spec: CallSpec) -> CallResult:
        return await execute_call(program, spec.function, spec.accounts, spec.args, options, on_progress)

    return run_call


def open_client(network: NetworkConfig) -> AsyncClient:
    if network.timeout is not None:
        return AsyncClient(network.url, commitment=Commitment(network.commitment), timeout=network.timeout)
    return AsyncClient(network.url, commitment=Commitment(network.commitment))


async def seed_plan(
    plan: SeedPlan,
    artifacts_dir: Path,
    provider: Provider,
    options: CallOptions,
    on_progress: Optional[ProgressCallback] = None,
) -> PlanResult:
    program = open_program(artifacts_dir, plan.program, provider)
    if on_progress:
        on_progress(f"Program ID: {program.program_id}", None)
    sequencer = SeedSequencer(plan, program_runner(program, options, on_progress), on_progress)
    return await sequencer.run()


async def run_seeds(
    config: RAConfig,
    network_name: str,
    program: Optional[str] = None,
    seed_file: Optional[str] = None,
    keep_going: bool = False,
    on_progress: Optional[ProgressCallback] = None,
) -> List[PlanResult]:
    network = config.network(network_name)
    signer = load_keypair(network.signer_path, config.root)
    plans = select_plans(load_plans(config.root, seed_file), program)
    if program and not plans and on_progress:
        on_progress(f"No seed plan found for {program}", None)

    options = call_options(config, network)
    client = open_client(network)
    provider = Provider(
        client,
        Wallet(signer),
        opts=TxOpts(
            skip_confirmation=False,
            skip_preflight=network.skip_preflight,
            preflight_commitment=Commitment(network.commitment),
        ),
    )
    if on_progress:
        on_progress(f"Seeding on {network_name}...", None)
        on_progress(f"Wallet: {signer.pubkey()}", None)

    results: List[PlanResult] = []
    try:
        for plan in plans:
            if on_progress:
                on_progress(f"Seeding {plan.program}...", None)
            try:
                result = await seed_plan(plan, config.artifacts_dir, provider, options, on_progress)
            except Exception as exc:
                if on_progress:
                    on_progress(f"Failed to seed {plan.program}: {exc}", None)
                if not keep_going:
                    raise SeedError(plan.program, str(exc)) from exc
                results.append(PlanResult(program=plan.program, phase=SeedPhase.FAILED, error=exc))
                continue
            results.append(result)
            if on_progress:
                on_progress(f"{plan.program} seeded successfully", None)
    finally:
        await client.close()
    return results
