"""Exception types for the pair engine.

Every rejection carries a stable ``Reason`` so callers and tests can assert on
the cause, not merely on failure. ``raise_for()`` picks the subclass that
matches the reason's category:

- precondition violations (caller error),
- economic violations (the specific transaction is refused),
- overflow guards (values past a representable ceiling).
"""

from __future__ import annotations

from enum import Enum, unique
from typing import NoReturn, Optional


@unique
class Reason(str, Enum):
    # Preconditions
    WRONG_RECIPIENT = "WRONG_RECIPIENT"
    AMOUNT_NOT_ZERO = "AMOUNT_NOT_ZERO"
    INVALID_DEPOSIT_TOKEN = "INVALID_DEPOSIT_TOKEN"
    INVALID_TO = "INVALID_TO"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INSUFFICIENT_ALLOWANCE = "INSUFFICIENT_ALLOWANCE"
    INSUFFICIENT_DEPOSIT = "INSUFFICIENT_DEPOSIT"
    # Economic
    INSUFFICIENT_LIQUIDITY_MINTED = "INSUFFICIENT_LIQUIDITY_MINTED"
    INSUFFICIENT_LIQUIDITY_BURNED = "INSUFFICIENT_LIQUIDITY_BURNED"
    INSUFFICIENT_OUTPUT_AMOUNT = "INSUFFICIENT_OUTPUT_AMOUNT"
    INSUFFICIENT_INPUT_AMOUNT = "INSUFFICIENT_INPUT_AMOUNT"
    INSUFFICIENT_LIQUIDITY = "INSUFFICIENT_LIQUIDITY"
    K = "K"
    # Overflow guards
    AMOUNT_OVERFLOW = "AMOUNT_OVERFLOW"
    TOKEN_BALANCE_OVERFLOW = "TOKEN_BALANCE_OVERFLOW"
    # Execution
    LOCKED = "LOCKED"
    INVARIANT = "INVARIANT"


class PairError(Exception):
    """Base class: a named, synchronous rejection of one call."""

    def __init__(self, reason: Reason, detail: Optional[str] = None) -> None:
        self.reason = reason
        self.detail = detail
        message = reason.value if detail is None else f"{reason.value}: {detail}"
        super().__init__(message)


class PairPreconditionError(PairError):
    """Raised when the caller's request is malformed or not permitted."""


class PairEconomicError(PairError):
    """Raised when a well-formed request would be economically unsound."""


class PairOverflowError(PairError):
    """Raised when a value exceeds its representable ceiling."""


class PairLockedError(PairError):
    """Raised on reentry into the pair while a call is in flight."""

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(Reason.LOCKED, detail)


class PairInvariantError(PairError):
    """Raised when a post-state violates one or more ledger invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(Reason.INVARIANT, f"invariant violations: {', '.join(violations)}")


_OVERFLOW = frozenset({Reason.AMOUNT_OVERFLOW, Reason.TOKEN_BALANCE_OVERFLOW})
_ECONOMIC = frozenset(
    {
        Reason.INSUFFICIENT_LIQUIDITY_MINTED,
        Reason.INSUFFICIENT_LIQUIDITY_BURNED,
        Reason.INSUFFICIENT_OUTPUT_AMOUNT,
        Reason.INSUFFICIENT_INPUT_AMOUNT,
        Reason.INSUFFICIENT_LIQUIDITY,
        Reason.K,
    }
)


def error_for(reason: Reason, detail: Optional[str] = None) -> PairError:
    if reason is Reason.LOCKED:
        return PairLockedError(detail)
    if reason in _OVERFLOW:
        return PairOverflowError(reason, detail)
    if reason in _ECONOMIC:
        return PairEconomicError(reason, detail)
    return PairPreconditionError(reason, detail)


def raise_for(reason: Reason, detail: Optional[str] = None) -> NoReturn:
    raise error_for(reason, detail)


def require(condition: bool, reason: Reason, detail: Optional[str] = None) -> None:
    """Raise the error for `reason` unless `condition` holds."""
    if not condition:
        raise_for(reason, detail)
