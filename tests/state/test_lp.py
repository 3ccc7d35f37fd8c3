# [TESTER] v1

from __future__ import annotations

import pytest

from pairswap.errors import PairPreconditionError, Reason
from pairswap.state.ledger import Ledger
from pairswap.state.lp import MAX_ALLOWANCE, LPToken
from pairswap.state.pools import PoolState


def _addr(n: int) -> str:
    return "0x" + f"{n:064x}"


ALICE = _addr(1)
BOB = _addr(2)
CAROL = _addr(3)


def _lp() -> LPToken:
    pool = PoolState(token0=_addr(0xA0), token1=_addr(0xA1), fee_recipient=_addr(0xFE))
    return LPToken(Ledger(pool))


def test_mint_and_burn_move_supply_in_lockstep() -> None:
    lp = _lp()
    lp.mint(ALICE, 100)
    lp.mint(BOB, 50)
    assert lp.total_supply == 150
    lp.burn(ALICE, 40)
    assert lp.total_supply == 110
    assert lp.balance_of(ALICE) == 60


def test_burn_more_than_balance() -> None:
    lp = _lp()
    lp.mint(ALICE, 10)
    with pytest.raises(PairPreconditionError) as exc:
        lp.burn(ALICE, 11)
    assert exc.value.reason is Reason.INSUFFICIENT_BALANCE


def test_transfer() -> None:
    lp = _lp()
    lp.mint(ALICE, 10)
    assert lp.transfer(ALICE, BOB, 4) is True
    assert (lp.balance_of(ALICE), lp.balance_of(BOB)) == (6, 4)
    with pytest.raises(PairPreconditionError) as exc:
        lp.transfer(BOB, ALICE, 5)
    assert exc.value.reason is Reason.INSUFFICIENT_BALANCE


def test_self_transfer_keeps_balance() -> None:
    lp = _lp()
    lp.mint(ALICE, 10)
    lp.transfer(ALICE, ALICE, 10)
    assert lp.balance_of(ALICE) == 10


def test_transfer_from_decrements_allowance() -> None:
    lp = _lp()
    lp.mint(ALICE, 100)
    lp.approve(ALICE, BOB, 30)
    assert lp.transfer_from(BOB, ALICE, CAROL, 20) is True
    assert lp.allowance(ALICE, BOB) == 10
    assert lp.balance_of(CAROL) == 20
    with pytest.raises(PairPreconditionError) as exc:
        lp.transfer_from(BOB, ALICE, CAROL, 11)
    assert exc.value.reason is Reason.INSUFFICIENT_ALLOWANCE


def test_max_allowance_is_never_decremented() -> None:
    lp = _lp()
    lp.mint(ALICE, 100)
    lp.approve(ALICE, BOB, MAX_ALLOWANCE)
    lp.transfer_from(BOB, ALICE, CAROL, 60)
    assert lp.allowance(ALICE, BOB) == MAX_ALLOWANCE


def test_rejects_invalid_values() -> None:
    lp = _lp()
    with pytest.raises(ValueError):
        lp.mint(ALICE, -1)
    with pytest.raises(TypeError):
        lp.approve(ALICE, BOB, True)
    with pytest.raises(ValueError, match="u256"):
        lp.approve(ALICE, BOB, MAX_ALLOWANCE + 1)
