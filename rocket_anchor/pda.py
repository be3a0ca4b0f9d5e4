"""Program derived address resolution for `pda:` placeholders.

A derivation string reads ``pda:`` followed by comma-separated fragments. Each fragment
becomes one seed:

* ``signer`` -> the caller's public key bytes
* ``pda:...`` -> the bytes of the nested derived address
* anything else -> the fragment's UTF-8 bytes, untransformed

``pda:vault,signer`` derives from ``[b"vault", caller]``.
``pda:pda:vault,signer`` derives from ``[bytes(derive("pda:vault")), caller]``.
A string with a single level and no comma may separate fragments with ``:``
instead (``pda:vault:signer``).
"""

from __future__ import annotations

from typing import List

from solders.pubkey import Pubkey

from .constants import MAX_SEED_LEN, MAX_SEEDS, PDA_PREFIX, PDA_SIGNER_FRAGMENT
from .errors import ResolutionError


def split_fragments(seed_spec: str) -> List[str]:
    if not seed_spec.startswith(PDA_PREFIX):
        raise ResolutionError(f"PDA spec must start with '{PDA_PREFIX}': {seed_spec!r}")
    body = seed_spec[len(PDA_PREFIX):]
    if not body:
        raise ResolutionError(f"PDA spec has no seeds: {seed_spec!r}")
    if "," in body or body.startswith(PDA_PREFIX):
        fragments = body.split(",")
    else:
        fragments = body.split(":")
    if any(not fragment for fragment in fragments):
        raise ResolutionError(f"PDA spec has an empty seed: {seed_spec!r}")
    return fragments


def fragment_bytes(fragment: str, caller: Pubkey, program_id: Pubkey) -> bytes:
    if fragment == PDA_SIGNER_FRAGMENT:
        return bytes(caller)
    if fragment.startswith(PDA_PREFIX):
        return bytes(derive_address(fragment, caller, program_id))
    return fragment.encode("utf-8")


def seed_list(seed_spec: str, caller: Pubkey, program_id: Pubkey) -> List[bytes]:
    seeds = [fragment_bytes(fragment, caller, program_id) for fragment in split_fragments(seed_spec)]
    if len(seeds) > MAX_SEEDS - 1:
        raise ResolutionError(f"PDA spec has more than {MAX_SEEDS - 1} seeds: {seed_spec!r}")
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise ResolutionError(f"PDA seed longer than {MAX_SEED_LEN} bytes in {seed_spec!r}: {seed!r}")
    return seeds


def derive_address(seed_spec: str, caller: Pubkey, program_id: Pubkey) -> Pubkey:
    address, _bump = Pubkey.find_program_address(seed_list(seed_spec, caller, program_id), program_id)
    return address
