"""
Pool state for a single constant-product pair.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .balances import Address, Amount, AssetId
from .canonical import canonical_hex_fixed_allow_0x


@dataclass(frozen=True)
class PoolState:
    """
    Scalar pair state. Maps (balances, allowances, deposits) live in the ledger.

    `deposit_total0/1` are the per-asset sums of pending deposits; they are
    excluded from the settled balances that become reserves.
    """

    token0: AssetId
    token1: AssetId
    fee_recipient: Address
    reserve0: Amount = 0
    reserve1: Amount = 0
    k_last: Amount = 0
    total_supply: Amount = 0
    deposit_total0: Amount = 0
    deposit_total1: Amount = 0

    def __post_init__(self) -> None:
        for name in ("token0", "token1", "fee_recipient"):
            value = getattr(self, name)
            canonical = canonical_hex_fixed_allow_0x(value, nbytes=32, name=name)
            if canonical != value:
                raise ValueError(f"{name} must be canonical lowercase 0x-hex: {value!r}")
        if self.token0 == self.token1:
            raise ValueError("token0 and token1 must differ")
        for name in ("reserve0", "reserve1", "k_last", "total_supply", "deposit_total0", "deposit_total1"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")

    def asset_index(self, asset: AssetId) -> int:
        """Return 0 or 1 for a pair asset; raises KeyError otherwise."""
        if asset == self.token0:
            return 0
        if asset == self.token1:
            return 1
        raise KeyError(asset)

    def with_reserves(self, reserve0: Amount, reserve1: Amount) -> "PoolState":
        return replace(self, reserve0=reserve0, reserve1=reserve1)

    def with_deposit_total(self, index: int, total: Amount) -> "PoolState":
        if index == 0:
            return replace(self, deposit_total0=total)
        return replace(self, deposit_total1=total)

    def deposit_total(self, index: int) -> Amount:
        return self.deposit_total0 if index == 0 else self.deposit_total1

    def reserve(self, index: int) -> Amount:
        return self.reserve0 if index == 0 else self.reserve1
