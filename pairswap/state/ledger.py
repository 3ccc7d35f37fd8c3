"""
Pair ledger: LP supply and balances, allowances, pending deposits, reserves.

The ledger is one exclusively-owned mutable object per pair. It is passed by
reference into every engine operation; there is no module-level state.

Pending deposits follow an explicit two-phase lifecycle:

    SETTLED --credit--> DEPOSITED --settle--> SETTLED

A missing store key reads as the settled zero entry, so presence in the store
never carries meaning on its own.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, unique
from typing import Iterator, Optional, Tuple

from ..errors import Reason, raise_for
from .balances import Address, Amount
from .pools import PoolState
from .store import DictStore, JournaledStore, KeyValueStore


AllowanceKey = Tuple[Address, Address]  # (owner, spender)


@unique
class DepositPhase(Enum):
    DEPOSITED = "deposited"
    SETTLED = "settled"


@dataclass(frozen=True)
class DepositEntry:
    amount: Amount = 0
    phase: DepositPhase = DepositPhase.SETTLED

    def __post_init__(self) -> None:
        if not isinstance(self.amount, int) or isinstance(self.amount, bool):
            raise TypeError("amount must be an int")
        if self.amount < 0:
            raise ValueError(f"amount must be non-negative: {self.amount}")
        if self.phase is DepositPhase.SETTLED and self.amount != 0:
            raise ValueError("settled deposit entries carry no amount")

    @property
    def pending(self) -> Amount:
        return self.amount if self.phase is DepositPhase.DEPOSITED else 0

    def credit(self, amount: Amount) -> "DepositEntry":
        if amount < 0:
            raise ValueError(f"credit must be non-negative: {amount}")
        return DepositEntry(amount=self.pending + amount, phase=DepositPhase.DEPOSITED)

    def settle(self) -> "DepositEntry":
        if self.phase is not DepositPhase.DEPOSITED:
            raise ValueError("only a DEPOSITED entry can be settled")
        return SETTLED


SETTLED = DepositEntry()


class Ledger:
    """
    Ledger over four key-value stores plus the scalar `PoolState`.

    Stores are wrapped in `JournaledStore` so `transaction()` can undo every
    write made by a failed call.
    """

    def __init__(
        self,
        pool: PoolState,
        *,
        balances: Optional[KeyValueStore[Address, Amount]] = None,
        allowances: Optional[KeyValueStore[AllowanceKey, Amount]] = None,
        deposits0: Optional[KeyValueStore[Address, DepositEntry]] = None,
        deposits1: Optional[KeyValueStore[Address, DepositEntry]] = None,
    ) -> None:
        self._pool = pool
        self._balances: JournaledStore[Address, Amount] = JournaledStore(balances or DictStore())
        self._allowances: JournaledStore[AllowanceKey, Amount] = JournaledStore(allowances or DictStore())
        self._deposits = (
            JournaledStore(deposits0 or DictStore()),
            JournaledStore(deposits1 or DictStore()),
        )
        self._in_transaction = False

    # -- scalar state ---------------------------------------------------------

    @property
    def pool(self) -> PoolState:
        return self._pool

    @pool.setter
    def pool(self, value: PoolState) -> None:
        if not isinstance(value, PoolState):
            raise TypeError("pool must be a PoolState")
        if (value.token0, value.token1) != (self._pool.token0, self._pool.token1):
            raise ValueError("pair tokens are immutable")
        self._pool = value

    @property
    def total_supply(self) -> Amount:
        return self._pool.total_supply

    # -- LP balances / allowances --------------------------------------------

    def balance_of(self, owner: Address) -> Amount:
        return self._balances.get(owner, 0)

    def set_balance(self, owner: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"LP balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.remove(owner)
        else:
            self._balances.insert(owner, amount)

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def set_allowance(self, owner: Address, spender: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"allowance cannot be negative: {amount}")
        if amount == 0:
            self._allowances.remove((owner, spender))
        else:
            self._allowances.insert((owner, spender), amount)

    def iter_balances(self) -> Iterator[Tuple[Address, Amount]]:
        return self._balances.items()

    def iter_allowances(self) -> Iterator[Tuple[AllowanceKey, Amount]]:
        return self._allowances.items()

    # -- pending deposits ----------------------------------------------------

    def deposit_entry(self, index: int, owner: Address) -> DepositEntry:
        return self._deposits[index].get(owner, SETTLED)

    def _put_deposit(self, index: int, owner: Address, entry: DepositEntry) -> None:
        if entry == SETTLED:
            self._deposits[index].remove(owner)
        else:
            self._deposits[index].insert(owner, entry)

    def pending_deposit(self, index: int, owner: Address) -> Amount:
        return self.deposit_entry(index, owner).pending

    def credit_deposit(self, index: int, owner: Address, amount: Amount) -> None:
        """Move `owner`'s entry to DEPOSITED (accumulating) and grow the asset total."""
        if amount == 0:
            return
        self._put_deposit(index, owner, self.deposit_entry(index, owner).credit(amount))
        self._pool = self._pool.with_deposit_total(index, self._pool.deposit_total(index) + amount)

    def settle_deposit(self, index: int, owner: Address) -> Amount:
        """
        Move `owner`'s entry from DEPOSITED to SETTLED and return the amount.

        Returns 0 when nothing is pending.
        """
        entry = self.deposit_entry(index, owner)
        if entry.phase is not DepositPhase.DEPOSITED:
            return 0
        total = self._pool.deposit_total(index) - entry.amount
        if total < 0:
            raise_for(Reason.INSUFFICIENT_BALANCE, f"deposit total underflow: {total}")
        self._put_deposit(index, owner, entry.settle())
        self._pool = self._pool.with_deposit_total(index, total)
        return entry.amount

    def iter_deposits(self, index: int) -> Iterator[Tuple[Address, DepositEntry]]:
        return self._deposits[index].items()

    # -- atomicity -----------------------------------------------------------

    def _stores(self) -> Tuple[JournaledStore, ...]:
        return (self._balances, self._allowances) + self._deposits

    @contextmanager
    def transaction(self) -> Iterator["Ledger"]:
        """
        Run a block atomically: any exception restores every store and the
        pool state to their values at entry, then propagates.
        """
        if self._in_transaction:
            raise RuntimeError("ledger transaction already open")
        saved_pool = self._pool
        for store in self._stores():
            store.begin()
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            for store in self._stores():
                store.rollback()
            self._pool = saved_pool
            raise
        else:
            for store in self._stores():
                store.commit()
        finally:
            self._in_transaction = False

    def __repr__(self) -> str:
        p = self._pool
        return f"Ledger(reserves=({p.reserve0}, {p.reserve1}), total_supply={p.total_supply})"
