"""
External asset balances held by accounts, keyed by (owner, asset).

The pair never writes this table. It backs `LocalChain`, the in-memory host
that answers balance queries and performs transfers for the engine.
"""

from typing import Dict, Tuple


# Type aliases
Address = str  # 32-byte hex string (0x...)
AssetId = str  # 32-byte hex string (0x...)
Amount = int  # Non-negative integer (arbitrary precision)

# Permanently unusable address; receives the locked minimum liquidity.
ZERO_ADDRESS = "0x" + "00" * 32

Snapshot = Dict[Tuple[Address, AssetId], Amount]


class BalanceTable:
    """Sparse (owner, asset) -> amount map; absent keys hold zero."""

    def __init__(self) -> None:
        self._balances: Snapshot = {}

    def get(self, owner: Address, asset: AssetId) -> Amount:
        return self._balances.get((owner, asset), 0)

    def add(self, owner: Address, asset: AssetId, delta: Amount) -> None:
        """
        Apply a signed `delta` to one balance.

        Raises:
            ValueError: If the balance would go below zero
        """
        updated = self.get(owner, asset) + delta
        if updated < 0:
            raise ValueError(f"Insufficient balance: {owner} holds {updated - delta} of {asset}, needs {-delta}")
        if updated == 0:
            self._balances.pop((owner, asset), None)
        else:
            self._balances[(owner, asset)] = updated

    def move(self, sender: Address, to: Address, asset: AssetId, amount: Amount) -> None:
        """Debit `sender` then credit `to`; the debit fails first if short."""
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        self.add(sender, asset, -amount)
        self.add(to, asset, amount)

    def get_all_balances(self) -> Snapshot:
        """Copy of the table, suitable for `restore`."""
        return dict(self._balances)

    def restore(self, snapshot: Snapshot) -> None:
        self._balances = dict(snapshot)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
