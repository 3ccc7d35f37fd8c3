# [TESTER] v1

from __future__ import annotations

from dataclasses import replace

import pytest

from pairswap.errors import PairError, Reason
from pairswap.state.ledger import SETTLED, DepositEntry, DepositPhase, Ledger
from pairswap.state.pools import PoolState


def _addr(n: int) -> str:
    return "0x" + f"{n:064x}"


TOKEN0 = _addr(0xA0)
TOKEN1 = _addr(0xA1)
FEE = _addr(0xFE)
ALICE = _addr(1)
BOB = _addr(2)


def _ledger() -> Ledger:
    return Ledger(PoolState(token0=TOKEN0, token1=TOKEN1, fee_recipient=FEE))


class TestDepositEntry:
    def test_default_is_settled_zero(self) -> None:
        assert DepositEntry() == SETTLED
        assert SETTLED.pending == 0

    def test_credit_accumulates(self) -> None:
        e = SETTLED.credit(5).credit(7)
        assert e.phase is DepositPhase.DEPOSITED
        assert e.pending == 12

    def test_settle_requires_deposited(self) -> None:
        with pytest.raises(ValueError, match="DEPOSITED"):
            SETTLED.settle()
        assert SETTLED.credit(1).settle() == SETTLED

    def test_settled_entry_carries_no_amount(self) -> None:
        with pytest.raises(ValueError, match="settled"):
            DepositEntry(amount=3, phase=DepositPhase.SETTLED)


class TestPendingDeposits:
    def test_credit_and_settle_track_totals(self) -> None:
        ledger = _ledger()
        ledger.credit_deposit(0, ALICE, 100)
        ledger.credit_deposit(0, ALICE, 50)
        ledger.credit_deposit(0, BOB, 10)
        ledger.credit_deposit(1, ALICE, 7)
        assert ledger.pending_deposit(0, ALICE) == 150
        assert ledger.pool.deposit_total0 == 160
        assert ledger.pool.deposit_total1 == 7

        assert ledger.settle_deposit(0, ALICE) == 150
        assert ledger.pending_deposit(0, ALICE) == 0
        assert ledger.pool.deposit_total0 == 10
        assert ledger.deposit_entry(0, ALICE) == SETTLED
        assert [owner for owner, _ in ledger.iter_deposits(0)] == [BOB]

    def test_settle_without_pending_returns_zero(self) -> None:
        ledger = _ledger()
        assert ledger.settle_deposit(1, ALICE) == 0
        assert ledger.pool.deposit_total1 == 0

    def test_settle_beyond_total_is_named_failure(self) -> None:
        ledger = _ledger()
        ledger.credit_deposit(0, ALICE, 10)
        ledger.pool = ledger.pool.with_deposit_total(0, 5)
        with pytest.raises(PairError) as exc:
            ledger.settle_deposit(0, ALICE)
        assert exc.value.reason is Reason.INSUFFICIENT_BALANCE
        assert ledger.pending_deposit(0, ALICE) == 10
        assert ledger.pool.deposit_total0 == 5

    def test_zero_credit_is_noop(self) -> None:
        ledger = _ledger()
        ledger.credit_deposit(0, ALICE, 0)
        assert list(ledger.iter_deposits(0)) == []


class TestBalancesAndAllowances:
    def test_zero_entries_are_removed(self) -> None:
        ledger = _ledger()
        ledger.set_balance(ALICE, 5)
        ledger.set_allowance(ALICE, BOB, 3)
        ledger.set_balance(ALICE, 0)
        ledger.set_allowance(ALICE, BOB, 0)
        assert list(ledger.iter_balances()) == []
        assert list(ledger.iter_allowances()) == []

    def test_negative_rejected(self) -> None:
        ledger = _ledger()
        with pytest.raises(ValueError):
            ledger.set_balance(ALICE, -1)
        with pytest.raises(ValueError):
            ledger.set_allowance(ALICE, BOB, -1)


class TestTransaction:
    def test_exception_restores_everything(self) -> None:
        ledger = _ledger()
        ledger.set_balance(ALICE, 5)
        ledger.credit_deposit(0, BOB, 9)
        before_pool = ledger.pool

        with pytest.raises(RuntimeError, match="boom"):
            with ledger.transaction():
                ledger.set_balance(ALICE, 50)
                ledger.set_balance(BOB, 1)
                ledger.set_allowance(ALICE, BOB, 2)
                ledger.settle_deposit(0, BOB)
                ledger.credit_deposit(1, ALICE, 4)
                ledger.pool = replace(ledger.pool, reserve0=77, total_supply=3)
                raise RuntimeError("boom")

        assert ledger.pool == before_pool
        assert dict(ledger.iter_balances()) == {ALICE: 5}
        assert list(ledger.iter_allowances()) == []
        assert ledger.pending_deposit(0, BOB) == 9
        assert ledger.pending_deposit(1, ALICE) == 0

    def test_success_commits(self) -> None:
        ledger = _ledger()
        with ledger.transaction():
            ledger.set_balance(ALICE, 5)
        assert ledger.balance_of(ALICE) == 5

    def test_nested_transaction_rejected(self) -> None:
        ledger = _ledger()
        with ledger.transaction():
            with pytest.raises(RuntimeError, match="already open"):
                with ledger.transaction():
                    pass


def test_pool_tokens_are_immutable() -> None:
    ledger = _ledger()
    with pytest.raises(ValueError, match="immutable"):
        ledger.pool = replace(ledger.pool, token0=_addr(0xCC))


def test_pool_state_validation() -> None:
    with pytest.raises(ValueError, match="differ"):
        PoolState(token0=TOKEN0, token1=TOKEN0, fee_recipient=FEE)
    with pytest.raises(ValueError, match="canonical"):
        PoolState(token0=TOKEN0.upper().replace("0X", "0x"), token1=TOKEN1, fee_recipient=FEE)
    with pytest.raises(ValueError):
        PoolState(token0=TOKEN0, token1=TOKEN1, fee_recipient=FEE, reserve0=-1)
    pool = PoolState(token0=TOKEN0, token1=TOKEN1, fee_recipient=FEE)
    assert pool.asset_index(TOKEN1) == 1
    with pytest.raises(KeyError):
        pool.asset_index(FEE)
