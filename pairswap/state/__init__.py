"""
Ledger state for a constant-product pair
"""

from .balances import ZERO_ADDRESS, BalanceTable
from .ledger import DepositEntry, DepositPhase, Ledger
from .lp import MAX_ALLOWANCE, LPToken
from .pools import PoolState
from .state_root import compute_pair_state_root
from .store import DictStore, JournaledStore, KeyValueStore

__all__ = [
    "ZERO_ADDRESS",
    "BalanceTable",
    "DepositEntry",
    "DepositPhase",
    "Ledger",
    "MAX_ALLOWANCE",
    "LPToken",
    "PoolState",
    "compute_pair_state_root",
    "DictStore",
    "JournaledStore",
    "KeyValueStore",
]
