"""
Host collaborators for the pair engine.

The engine needs three things from its host:
- a per-call context (who is calling, where attached value went, how much),
- a balance oracle (what the pair holds of each asset),
- a transfer requester (move assets out of the pair).

`AssetHost` is the protocol; `LocalChain` is an in-memory host used by tests
and offline simulation. It keeps asset balances in a `BalanceTable` and
checkpoints them so a failed call can be rolled back.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import ContextManager, Iterator, Optional, Protocol

from structlog import get_logger

from ..state.balances import Address, Amount, AssetId, BalanceTable
from ..state.canonical import canonical_address

logger = get_logger()


@dataclass(frozen=True)
class CallContext:
    """
    Per-call caller context.

    `recipient`/`amount`/`asset` describe value attached to the call; calls
    that carry no value have `amount == 0` and `asset is None`.
    """

    sender: Address
    recipient: Optional[Address] = None
    amount: Amount = 0
    asset: Optional[AssetId] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", canonical_address(self.sender, name="sender"))
        if self.recipient is not None:
            object.__setattr__(self, "recipient", canonical_address(self.recipient, name="recipient"))
        if self.asset is not None:
            object.__setattr__(self, "asset", canonical_address(self.asset, name="asset"))
        if not isinstance(self.amount, int) or isinstance(self.amount, bool):
            raise TypeError("amount must be an int")
        if self.amount < 0:
            raise ValueError(f"amount must be non-negative: {self.amount}")
        if self.amount > 0 and (self.asset is None or self.recipient is None):
            raise ValueError("attached value requires asset and recipient")


class AssetHost(Protocol):
    def balance_of(self, asset: AssetId, owner: Address) -> Amount:
        ...

    def transfer(self, sender: Address, to: Address, asset: AssetId, amount: Amount) -> None:
        ...

    def transaction(self) -> ContextManager[object]:
        ...


class TransferError(Exception):
    """Raised by `LocalChain` when a transfer cannot be performed."""


class LocalChain:
    """In-memory `AssetHost` with call-scoped rollback."""

    def __init__(self, balances: Optional[BalanceTable] = None) -> None:
        self.balances = balances if balances is not None else BalanceTable()
        self._depth = 0
        self.log = logger.new(host="local")

    def balance_of(self, asset: AssetId, owner: Address) -> Amount:
        return self.balances.get(canonical_address(owner, name="owner"), canonical_address(asset, name="asset"))

    def mint_asset(self, owner: Address, asset: AssetId, amount: Amount) -> None:
        """Create `amount` of `asset` out of thin air (test/simulation only)."""
        self.balances.add(canonical_address(owner, name="owner"), canonical_address(asset, name="asset"), amount)

    def transfer(self, sender: Address, to: Address, asset: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise TransferError(f"negative transfer amount: {amount}")
        try:
            self.balances.move(
                canonical_address(sender, name="sender"),
                canonical_address(to, name="to"),
                canonical_address(asset, name="asset"),
                amount,
            )
        except ValueError as exc:
            raise TransferError(str(exc)) from exc
        self.log.debug("transfer", sender=sender, to=to, asset=asset, amount=amount)

    def send(self, sender: Address, recipient: Address, asset: AssetId, amount: Amount) -> CallContext:
        """
        Move `amount` of `asset` from `sender` to `recipient` and return the
        context of a call carrying that value.
        """
        self.transfer(sender, recipient, asset, amount)
        return CallContext(sender=sender, recipient=recipient, amount=amount, asset=asset)

    @contextmanager
    def transaction(self) -> Iterator["LocalChain"]:
        snapshot = self.balances.get_all_balances()
        self._depth += 1
        try:
            yield self
        except BaseException:
            self.balances.restore(snapshot)
            self.log.debug("rolled back", depth=self._depth)
            raise
        finally:
            self._depth -= 1
