"""Placeholder parsing and resolution for seed calls.

A raw value from a seed document is parsed into exactly one placeholder kind
by ``parse_placeholder``. The first matching rule wins:

1. non string/number values pass through (``Literal``)
2. numbers widen to ``int`` (``Literal``)
3. valid base58 addresses (``RawAddress``)
4. ``signer`` / ``payer`` (``Signer``)
5. ``systemProgram`` (``SystemProgram``)
6. ``rent`` (``Rent``)
7. ``new:...`` (``NewKeypair``)
8. ``pda:...`` (``ProgramAddress``)
9. anything else: passed through for args, parsed as an address for accounts
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Union

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .constants import (
    NEW_KEYPAIR_PREFIX,
    PDA_PREFIX,
    RENT_KEYWORD,
    RENT_SYSVAR_ID,
    SIGNER_KEYWORDS,
    SYSTEM_PROGRAM_ID,
    SYSTEM_PROGRAM_KEYWORD,
)
from .errors import ResolutionError
from .pda import derive_address

ACCOUNTS = "accounts"
ARGS = "args"


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Signer:
    pass


@dataclass(frozen=True)
class SystemProgram:
    pass


@dataclass(frozen=True)
class Rent:
    pass


@dataclass(frozen=True)
class NewKeypair:
    label: str = ""


@dataclass(frozen=True)
class ProgramAddress:
    spec: str


@dataclass(frozen=True)
class RawAddress:
    address: Pubkey


@dataclass(frozen=True)
class Passthrough:
    value: Any


Placeholder = Union[Literal, Signer, SystemProgram, Rent, NewKeypair, ProgramAddress, RawAddress, Passthrough]


@dataclass
class ResolvedAccounts:
    """Resolved account map plus the keypairs that must co-sign."""

    accounts: Dict[str, Pubkey] = field(default_factory=dict)
    signers: List[Keypair] = field(default_factory=list)


def _widen_number(value: Union[int, float]) -> int:
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"numeric value {value!r} is not an integer")
        return int(value)
    return int(value)


def _try_pubkey(value: str) -> Pubkey | None:
    try:
        return Pubkey.from_string(value)
    except ValueError:
        return None


def parse_placeholder(value: Any, context: str) -> Placeholder:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return Literal(value)
    if isinstance(value, (int, float)):
        return Literal(_widen_number(value))
    address = _try_pubkey(value)
    if address is not None:
        return RawAddress(address)
    if value in SIGNER_KEYWORDS:
        return Signer()
    if value == SYSTEM_PROGRAM_KEYWORD:
        return SystemProgram()
    if value == RENT_KEYWORD:
        return Rent()
    if value.startswith(NEW_KEYPAIR_PREFIX):
        return NewKeypair(value[len(NEW_KEYPAIR_PREFIX):])
    if value.startswith(PDA_PREFIX):
        return ProgramAddress(value)
    if context == ARGS:
        return Passthrough(value)
    # Accounts only take addresses; Pubkey.from_string supplies the error text.
    return RawAddress(Pubkey.from_string(value))


def resolve_placeholder(
    placeholder: Placeholder,
    caller: Pubkey,
    program_id: Pubkey,
) -> tuple[Any, Keypair | None]:
    """Return the concrete value and, for ``new:``, the generated keypair."""
    if isinstance(placeholder, (Literal, Passthrough)):
        return placeholder.value, None
    if isinstance(placeholder, RawAddress):
        return placeholder.address, None
    if isinstance(placeholder, Signer):
        return caller, None
    if isinstance(placeholder, SystemProgram):
        return SYSTEM_PROGRAM_ID, None
    if isinstance(placeholder, Rent):
        return RENT_SYSVAR_ID, None
    if isinstance(placeholder, NewKeypair):
        keypair = Keypair()
        return keypair.pubkey(), keypair
    if isinstance(placeholder, ProgramAddress):
        return derive_address(placeholder.spec, caller, program_id), None
    raise TypeError(f"Unknown placeholder: {placeholder!r}")


def resolve_value(value: Any, context: str, caller: Pubkey, program_id: Pubkey) -> tuple[Any, Keypair | None]:
    try:
        return resolve_placeholder(parse_placeholder(value, context), caller, program_id)
    except ValueError as exc:
        raise ResolutionError(f"Cannot resolve placeholder: {exc}") from exc


def resolve_accounts(accounts: Mapping[str, Any], caller: Pubkey, program_id: Pubkey) -> ResolvedAccounts:
    resolved = ResolvedAccounts()
    for role, raw in accounts.items():
        try:
            value, keypair = resolve_value(raw, ACCOUNTS, caller, program_id)
        except ResolutionError as exc:
            raise ResolutionError(exc.reason, key=role, value=raw, context=ACCOUNTS) from exc
        resolved.accounts[role] = value
        if keypair is not None:
            resolved.signers.append(keypair)
    return resolved


def resolve_args(args: Sequence[Any], caller: Pubkey, program_id: Pubkey) -> List[Any]:
    values: List[Any] = []
    for index, raw in enumerate(args):
        try:
            # Keypairs minted in argument position never co-sign.
            value, _keypair = resolve_value(raw, ARGS, caller, program_id)
        except ResolutionError as exc:
            raise ResolutionError(exc.reason, key=index, value=raw, context=ARGS) from exc
        values.append(value)
    return values
