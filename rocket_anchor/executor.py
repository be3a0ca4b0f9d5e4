"""Execute one declarative call against a deployed Anchor program.

The executor resolves placeholders, submits the instruction through
anchorpy, waits for confirmation, then reads the transaction logs back to
decode the events the program emitted.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence

import httpx
from anchorpy import Context, Event, EventParser, Program
from solana.exceptions import SolanaRpcException
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.signature import Signature

from .constants import (
    DEFAULT_COMMITMENT,
    DEFAULT_LOG_WAIT_SECONDS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SETTLE_DELAY,
)
from .errors import UnknownFunctionError
from .placeholders import resolve_accounts, resolve_args
from .util import ProgressCallback, snake_case


@dataclass
class CallOptions:
    commitment: str = DEFAULT_COMMITMENT
    skip_preflight: bool = False
    settle_delay: float = DEFAULT_SETTLE_DELAY
    log_wait_seconds: float = DEFAULT_LOG_WAIT_SECONDS
    poll_interval: float = DEFAULT_POLL_INTERVAL


@dataclass
class CallResult:
    function: str
    signature: Signature
    events: List[Event] = field(default_factory=list)
    logs_found: bool = True


_READ_ERRORS = (RPCException, SolanaRpcException, httpx.HTTPError)


def read_commitment(commitment: str) -> str:
    # getTransaction rejects anything below "confirmed"
    if commitment == "processed":
        return "confirmed"
    return commitment


def lookup_instruction(program: Program, function: str):
    for name in (function, snake_case(function)):
        if name in program.rpc:
            return program.rpc[name]
    raise UnknownFunctionError(f"Program {program.program_id} has no instruction named {function!r}")


async def fetch_logs(
    program: Program,
    signature: Signature,
    options: CallOptions,
) -> Optional[List[str]]:
    """Poll for the confirmed transaction and return its log lines.

    Returns None when the transaction is still not visible once the wait
    window closes; the caller treats that as "no events", not as a failure.
    RPC errors during the read count as "not visible yet".
    """
    connection = program.provider.connection
    commitment = Commitment(read_commitment(options.commitment))
    await asyncio.sleep(options.settle_delay)
    deadline = time.monotonic() + options.log_wait_seconds
    while True:
        try:
            resp = await connection.get_transaction(
                signature,
                commitment=commitment,
                max_supported_transaction_version=0,
            )
        except _READ_ERRORS:
            tx = None
        else:
            tx = resp.value
        if tx is not None:
            meta = tx.transaction.meta
            if meta is None or meta.log_messages is None:
                return []
            return list(meta.log_messages)
        if time.monotonic() >= deadline:
            return None
        await asyncio.sleep(options.poll_interval)


def parse_events(program: Program, logs: Sequence[str]) -> List[Event]:
    events: List[Event] = []
    EventParser(program.program_id, program.coder).parse_logs(list(logs), events.append)
    return events


def format_event(event: Event) -> str:
    return f"Event {event.name}: {event.data}"


async def execute_call(
    program: Program,
    function: str,
    accounts: Mapping[str, Any],
    args: Sequence[Any],
    options: Optional[CallOptions] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> CallResult:
    options = options or CallOptions()
    rpc_fn = lookup_instruction(program, function)
    caller = program.provider.wallet.public_key

    resolved = resolve_accounts(accounts, caller, program.program_id)
    values = resolve_args(args, caller, program.program_id)

    ctx = Context(
        accounts={snake_case(role): address for role, address in resolved.accounts.items()},
        signers=resolved.signers,
        options=TxOpts(
            skip_confirmation=False,
            skip_preflight=options.skip_preflight,
            preflight_commitment=Commitment(options.commitment),
        ),
    )
    signature = await rpc_fn(*values, ctx=ctx)
    if on_progress:
        on_progress(f"Tx: {signature}", None)

    logs = await fetch_logs(program, signature, options)
    if logs is None:
        if on_progress:
            on_progress(f"Transaction {signature} not yet visible; skipping event decode", None)
        return CallResult(function=function, signature=signature, logs_found=False)

    events = parse_events(program, logs)
    if on_progress:
        for event in events:
            on_progress(format_event(event), None)
    return CallResult(function=function, signature=signature, events=events)
