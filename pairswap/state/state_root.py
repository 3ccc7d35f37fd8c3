"""
Deterministic state root hashing for a pair ledger (v1).

This is intended for:
- debugging / audit (stable hashes for the same logical state),
- checking that a rejected call left the ledger untouched,
- hosts that commit to contract state in an external state tree.
"""

from __future__ import annotations

from .canonical import domain_sep_bytes, encode_bytes, encode_uvarint, hex_to_bytes_fixed, sha256_hex
from .ledger import Ledger
from .pools import PoolState


STATE_ROOT_VERSION = 1


def _amount(name: str, value: int) -> bytes:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"invalid {name}: {value!r}")
    return encode_uvarint(value)


def _encode_pool_section(pool: PoolState) -> bytes:
    out = bytearray()
    out += hex_to_bytes_fixed(pool.token0, nbytes=32, name="token0")
    out += hex_to_bytes_fixed(pool.token1, nbytes=32, name="token1")
    out += hex_to_bytes_fixed(pool.fee_recipient, nbytes=32, name="fee_recipient")
    for name in ("reserve0", "reserve1", "k_last", "total_supply", "deposit_total0", "deposit_total1"):
        out += _amount(name, getattr(pool, name))
    return bytes(out)


def _encode_balances_section(ledger: Ledger) -> bytes:
    entries = sorted(
        (hex_to_bytes_fixed(owner, nbytes=32, name="owner"), amount) for owner, amount in ledger.iter_balances()
    )
    out = bytearray(encode_uvarint(len(entries)))
    for owner_b, amount in entries:
        out += owner_b
        out += _amount("LP balance", amount)
    return bytes(out)


def _encode_allowances_section(ledger: Ledger) -> bytes:
    entries = sorted(
        (
            hex_to_bytes_fixed(owner, nbytes=32, name="owner"),
            hex_to_bytes_fixed(spender, nbytes=32, name="spender"),
            amount,
        )
        for (owner, spender), amount in ledger.iter_allowances()
    )
    out = bytearray(encode_uvarint(len(entries)))
    for owner_b, spender_b, amount in entries:
        out += owner_b
        out += spender_b
        out += _amount("allowance", amount)
    return bytes(out)


def _encode_deposits_section(ledger: Ledger, index: int) -> bytes:
    entries = sorted(
        (hex_to_bytes_fixed(owner, nbytes=32, name="owner"), entry.pending)
        for owner, entry in ledger.iter_deposits(index)
        if entry.pending > 0
    )
    out = bytearray(encode_uvarint(len(entries)))
    for owner_b, amount in entries:
        out += owner_b
        out += _amount("pending deposit", amount)
    return bytes(out)


def compute_pair_state_root(ledger: Ledger) -> str:
    """
    Compute a deterministic state root hash for a pair ledger.

    Returns a 0x-prefixed sha256 digest.
    """
    if not isinstance(ledger, Ledger):
        raise TypeError("ledger must be a Ledger")

    payload = (
        domain_sep_bytes("pair_state_root", version=STATE_ROOT_VERSION)
        + b"POL"
        + encode_bytes(_encode_pool_section(ledger.pool))
        + b"LPB"
        + encode_bytes(_encode_balances_section(ledger))
        + b"ALW"
        + encode_bytes(_encode_allowances_section(ledger))
        + b"DP0"
        + encode_bytes(_encode_deposits_section(ledger, 0))
        + b"DP1"
        + encode_bytes(_encode_deposits_section(ledger, 1))
    )
    return sha256_hex(payload)
