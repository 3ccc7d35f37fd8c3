"""
Pair engine, configuration and post-call invariants
"""

from ..errors import (
    PairEconomicError,
    PairError,
    PairInvariantError,
    PairLockedError,
    PairOverflowError,
    PairPreconditionError,
    Reason,
)
from .config import MAX_BALANCE, MAX_NATIVE_BALANCE, PairConfig
from .invariants import INVARIANT_REGISTRY, PairSnapshot, check_all
from .pair import PairEngine

__all__ = [
    "PairEconomicError",
    "PairError",
    "PairInvariantError",
    "PairLockedError",
    "PairOverflowError",
    "PairPreconditionError",
    "Reason",
    "MAX_BALANCE",
    "MAX_NATIVE_BALANCE",
    "PairConfig",
    "INVARIANT_REGISTRY",
    "PairSnapshot",
    "check_all",
    "PairEngine",
]
