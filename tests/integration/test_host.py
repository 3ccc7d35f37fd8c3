# [TESTER] v1

from __future__ import annotations

import pytest

from pairswap.integration.host import CallContext, LocalChain, TransferError


def _addr(n: int) -> str:
    return "0x" + f"{n:064x}"


ASSET = _addr(0xA0)
ALICE = _addr(1)
BOB = _addr(2)


def test_call_context_canonicalizes_addresses() -> None:
    ctx = CallContext(sender=ALICE[2:].upper(), recipient=BOB.upper().replace("0X", "0x"), amount=5, asset=ASSET)
    assert ctx.sender == ALICE
    assert ctx.recipient == BOB


def test_call_context_validation() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        CallContext(sender=ALICE, amount=-1)
    with pytest.raises(TypeError):
        CallContext(sender=ALICE, amount=True)
    with pytest.raises(ValueError, match="requires asset and recipient"):
        CallContext(sender=ALICE, amount=5)
    with pytest.raises(ValueError):
        CallContext(sender="0x1234")


def test_send_moves_value_and_returns_context() -> None:
    chain = LocalChain()
    chain.mint_asset(ALICE, ASSET, 100)
    ctx = chain.send(ALICE, BOB, ASSET, 40)
    assert ctx == CallContext(sender=ALICE, recipient=BOB, amount=40, asset=ASSET)
    assert chain.balance_of(ASSET, ALICE) == 60
    assert chain.balance_of(ASSET, BOB) == 40


def test_transfer_failures() -> None:
    chain = LocalChain()
    chain.mint_asset(ALICE, ASSET, 10)
    with pytest.raises(TransferError, match="Insufficient"):
        chain.transfer(ALICE, BOB, ASSET, 11)
    with pytest.raises(TransferError, match="negative"):
        chain.transfer(ALICE, BOB, ASSET, -1)
    assert chain.balance_of(ASSET, ALICE) == 10


def test_transaction_rolls_back_on_exception() -> None:
    chain = LocalChain()
    chain.mint_asset(ALICE, ASSET, 10)
    with pytest.raises(RuntimeError):
        with chain.transaction():
            chain.transfer(ALICE, BOB, ASSET, 7)
            raise RuntimeError("abort")
    assert chain.balance_of(ASSET, ALICE) == 10
    assert chain.balance_of(ASSET, BOB) == 0

    with chain.transaction():
        chain.transfer(ALICE, BOB, ASSET, 7)
    assert chain.balance_of(ASSET, BOB) == 7
