"""Ledger invariant checkers for the pair.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass). The engine runs them
after every state-changing call when `PairConfig.check_invariants` is set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..integration.host import AssetHost
from ..state.balances import ZERO_ADDRESS, Address
from ..state.ledger import Ledger
from .config import PairConfig


@dataclass(frozen=True)
class PairSnapshot:
    ledger: Ledger
    host: AssetHost
    address: Address
    config: PairConfig


def inv_lp_supply_matches_balances(s: PairSnapshot) -> bool:
    return sum(amount for _, amount in s.ledger.iter_balances()) == s.ledger.total_supply


def inv_deposit_totals_match_entries(s: PairSnapshot) -> bool:
    pool = s.ledger.pool
    for index in (0, 1):
        pending = sum(entry.pending for _, entry in s.ledger.iter_deposits(index))
        if pending != pool.deposit_total(index):
            return False
    return True


def inv_reserves_within_max(s: PairSnapshot) -> bool:
    pool = s.ledger.pool
    return pool.reserve0 <= s.config.max_balance and pool.reserve1 <= s.config.max_balance


def inv_deposits_backed_by_balance(s: PairSnapshot) -> bool:
    pool = s.ledger.pool
    for index, token in enumerate((pool.token0, pool.token1)):
        held = s.host.balance_of(token, s.address)
        if pool.deposit_total(index) > held - pool.reserve(index):
            return False
    return True


def inv_minimum_liquidity_locked(s: PairSnapshot) -> bool:
    if s.ledger.total_supply == 0:
        return True
    return s.ledger.balance_of(ZERO_ADDRESS) >= s.config.minimum_liquidity


INVARIANT_REGISTRY: dict[str, Callable[[PairSnapshot], bool]] = {
    "inv_lp_supply_matches_balances": inv_lp_supply_matches_balances,
    "inv_deposit_totals_match_entries": inv_deposit_totals_match_entries,
    "inv_reserves_within_max": inv_reserves_within_max,
    "inv_deposits_backed_by_balance": inv_deposits_backed_by_balance,
    "inv_minimum_liquidity_locked": inv_minimum_liquidity_locked,
}


def check_all(snapshot: PairSnapshot) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(snapshot)
    ]
