"""
LP token primitives over the pair ledger.

`mint`/`burn` move `total_supply` and one balance in lockstep; they are only
called by the pair engine's settlement operations. `transfer`, `approve` and
`transfer_from` are the fungible-token surface.

Balances and allowances are always non-negative; shortfalls are explicit
named failures rather than arithmetic underflow.
"""

from __future__ import annotations

from dataclasses import replace

from ..errors import Reason, require
from ..kernels.python.fixed_point_v1 import MAX_U256
from .balances import Address, Amount
from .ledger import Ledger


# Allowance sentinel meaning "infinite"; never decremented.
MAX_ALLOWANCE = MAX_U256


def _require_amount(name: str, value: Amount) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > MAX_U256:
        raise ValueError(f"{name} exceeds the u256 domain")


class LPToken:
    """Fungible share accounting for one pair, bound to its ledger."""

    def __init__(self, ledger: Ledger) -> None:
        self._ledger = ledger

    @property
    def total_supply(self) -> Amount:
        return self._ledger.total_supply

    def balance_of(self, owner: Address) -> Amount:
        return self._ledger.balance_of(owner)

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._ledger.allowance(owner, spender)

    def mint(self, to: Address, value: Amount) -> None:
        _require_amount("value", value)
        ledger = self._ledger
        ledger.pool = replace(ledger.pool, total_supply=ledger.total_supply + value)
        ledger.set_balance(to, ledger.balance_of(to) + value)

    def burn(self, owner: Address, value: Amount) -> None:
        _require_amount("value", value)
        ledger = self._ledger
        balance = ledger.balance_of(owner)
        require(balance >= value, Reason.INSUFFICIENT_BALANCE, f"{balance} < {value}")
        ledger.set_balance(owner, balance - value)
        ledger.pool = replace(ledger.pool, total_supply=ledger.total_supply - value)

    def transfer(self, sender: Address, to: Address, value: Amount) -> bool:
        _require_amount("value", value)
        ledger = self._ledger
        balance = ledger.balance_of(sender)
        require(balance >= value, Reason.INSUFFICIENT_BALANCE, f"{balance} < {value}")
        ledger.set_balance(sender, balance - value)
        ledger.set_balance(to, ledger.balance_of(to) + value)
        return True

    def approve(self, owner: Address, spender: Address, value: Amount) -> bool:
        _require_amount("value", value)
        self._ledger.set_allowance(owner, spender, value)
        return True

    def transfer_from(self, spender: Address, owner: Address, to: Address, value: Amount) -> bool:
        _require_amount("value", value)
        current = self._ledger.allowance(owner, spender)
        if current != MAX_ALLOWANCE:
            require(current >= value, Reason.INSUFFICIENT_ALLOWANCE, f"{current} < {value}")
            self._ledger.set_allowance(owner, spender, current - value)
        return self.transfer(owner, to, value)
