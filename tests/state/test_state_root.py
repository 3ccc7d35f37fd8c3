# [TESTER] v1

from __future__ import annotations

from dataclasses import replace

import pytest

from pairswap.state.ledger import Ledger
from pairswap.state.pools import PoolState
from pairswap.state.state_root import compute_pair_state_root


def _addr(n: int) -> str:
    return "0x" + f"{n:064x}"


def _ledger() -> Ledger:
    return Ledger(PoolState(token0=_addr(0xA0), token1=_addr(0xA1), fee_recipient=_addr(0xFE)))


def test_state_root_is_deterministic_across_insert_order() -> None:
    a = _ledger()
    b = _ledger()
    for owner, amount in ((_addr(1), 5), (_addr(2), 7), (_addr(3), 9)):
        a.set_balance(owner, amount)
    for owner, amount in ((_addr(3), 9), (_addr(1), 5), (_addr(2), 7)):
        b.set_balance(owner, amount)
    a.set_allowance(_addr(1), _addr(2), 3)
    b.set_allowance(_addr(1), _addr(2), 3)
    a.credit_deposit(0, _addr(4), 11)
    b.credit_deposit(0, _addr(4), 11)

    root = compute_pair_state_root(a)
    assert root == compute_pair_state_root(b)
    assert root.startswith("0x") and len(root) == 66


def test_state_root_changes_with_each_section() -> None:
    base = _ledger()
    seen = {compute_pair_state_root(base)}

    ledger = _ledger()
    ledger.pool = replace(ledger.pool, reserve0=1)
    seen.add(compute_pair_state_root(ledger))

    ledger = _ledger()
    ledger.set_balance(_addr(1), 1)
    seen.add(compute_pair_state_root(ledger))

    ledger = _ledger()
    ledger.set_allowance(_addr(1), _addr(2), 1)
    seen.add(compute_pair_state_root(ledger))

    ledger = _ledger()
    ledger.credit_deposit(0, _addr(1), 1)
    seen.add(compute_pair_state_root(ledger))

    ledger = _ledger()
    ledger.credit_deposit(1, _addr(1), 1)
    seen.add(compute_pair_state_root(ledger))

    assert len(seen) == 6


def test_state_root_rejects_non_ledger() -> None:
    with pytest.raises(TypeError):
        compute_pair_state_root(object())  # type: ignore[arg-type]
