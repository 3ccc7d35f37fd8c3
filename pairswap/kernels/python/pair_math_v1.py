"""
Constant-product pair math kernel (v1 semantics).

Pure, integer-only helpers used by the pair engine:
- LP mint amounts (first liquidity and proportional),
- LP burn amounts (floor rounding, favours the pool),
- the fee-adjusted swap invariant check,
- protocol fee liquidity from invariant growth.

These functions never touch state; the engine maps their results to
named failures.
"""

from __future__ import annotations

from dataclasses import dataclass

from .fixed_point_v1 import MAX_U256, min_u256, sqrt


MINIMUM_LIQUIDITY = 1000

SWAP_FEE_NUMERATOR = 3
SWAP_FEE_DENOMINATOR = 1000

# Protocol takes 1/(divisor + 1) of invariant growth.
PROTOCOL_FEE_DIVISOR = 5


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _require_non_negative(name: str, value: int) -> None:
    _require_int(name, value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


def _require_u256_product(name: str, value: int) -> int:
    if value > MAX_U256:
        raise ValueError(f"{name} exceeds the u256 domain")
    return value


@dataclass(frozen=True)
class SwapInvariantResult:
    balance0_adjusted: int
    balance1_adjusted: int
    k_before_scaled: int
    k_after_scaled: int

    @property
    def ok(self) -> bool:
        return self.k_after_scaled >= self.k_before_scaled


def initial_liquidity(*, amount0: int, amount1: int, minimum_liquidity: int = MINIMUM_LIQUIDITY) -> int:
    """
    Liquidity for the first mint: `sqrt(amount0 * amount1) - minimum_liquidity`.

    The result may be zero or negative; the caller rejects those.
    """
    _require_non_negative("amount0", amount0)
    _require_non_negative("amount1", amount1)
    _require_non_negative("minimum_liquidity", minimum_liquidity)
    product = _require_u256_product("amount0 * amount1", amount0 * amount1)
    return sqrt(product) - minimum_liquidity


def proportional_liquidity(
    *,
    amount0: int,
    amount1: int,
    reserve0: int,
    reserve1: int,
    total_supply: int,
) -> int:
    """
    Liquidity for a later mint: the smaller of the two asset-implied shares.

    An empty reserve yields zero rather than dividing by zero.
    """
    for name, v in (
        ("amount0", amount0),
        ("amount1", amount1),
        ("reserve0", reserve0),
        ("reserve1", reserve1),
        ("total_supply", total_supply),
    ):
        _require_non_negative(name, v)

    if reserve0 == 0 or reserve1 == 0:
        return 0

    liquidity0 = _require_u256_product("amount0 * total_supply", amount0 * total_supply) // reserve0
    liquidity1 = _require_u256_product("amount1 * total_supply", amount1 * total_supply) // reserve1
    return min_u256(liquidity0, liquidity1)


def burn_amounts(*, liquidity: int, balance0: int, balance1: int, total_supply: int) -> tuple[int, int]:
    """
    Underlying amounts for redeeming `liquidity` (floor rounding).
    """
    for name, v in (
        ("liquidity", liquidity),
        ("balance0", balance0),
        ("balance1", balance1),
        ("total_supply", total_supply),
    ):
        _require_non_negative(name, v)
    if total_supply == 0:
        raise ValueError("total_supply must be positive")

    amount0 = _require_u256_product("liquidity * balance0", liquidity * balance0) // total_supply
    amount1 = _require_u256_product("liquidity * balance1", liquidity * balance1) // total_supply
    return amount0, amount1


def adjusted_balance(
    *,
    balance: int,
    amount_in: int,
    fee_numerator: int = SWAP_FEE_NUMERATOR,
    fee_denominator: int = SWAP_FEE_DENOMINATOR,
) -> int:
    """`balance * fee_denominator - amount_in * fee_numerator` (fee on input only)."""
    _require_non_negative("balance", balance)
    _require_non_negative("amount_in", amount_in)
    return balance * fee_denominator - amount_in * fee_numerator


def check_swap_invariant(
    *,
    balance0: int,
    balance1: int,
    amount0_in: int,
    amount1_in: int,
    reserve0: int,
    reserve1: int,
    fee_numerator: int = SWAP_FEE_NUMERATOR,
    fee_denominator: int = SWAP_FEE_DENOMINATOR,
) -> SwapInvariantResult:
    """
    Fee-adjusted constant-product check:

        (b0 * D - in0 * N) * (b1 * D - in1 * N) >= r0 * r1 * D**2

    with N/D the swap fee (3/1000 by default).
    """
    _require_non_negative("reserve0", reserve0)
    _require_non_negative("reserve1", reserve1)
    _require_int("fee_numerator", fee_numerator)
    _require_int("fee_denominator", fee_denominator)
    if fee_denominator <= 0 or not (0 <= fee_numerator < fee_denominator):
        raise ValueError("fee must satisfy 0 <= numerator < denominator")

    adj0 = adjusted_balance(
        balance=balance0, amount_in=amount0_in, fee_numerator=fee_numerator, fee_denominator=fee_denominator
    )
    adj1 = adjusted_balance(
        balance=balance1, amount_in=amount1_in, fee_numerator=fee_numerator, fee_denominator=fee_denominator
    )
    k_before_scaled = _require_u256_product(
        "reserve0 * reserve1 * denominator**2", reserve0 * reserve1 * fee_denominator * fee_denominator
    )
    # A negative adjusted balance can only come from input larger than the
    # post-swap balance; it must never pass by a negative*negative product.
    if adj0 < 0 or adj1 < 0:
        k_after_scaled = -1
    else:
        k_after_scaled = _require_u256_product("balance0_adjusted * balance1_adjusted", adj0 * adj1)
    return SwapInvariantResult(
        balance0_adjusted=adj0,
        balance1_adjusted=adj1,
        k_before_scaled=k_before_scaled,
        k_after_scaled=k_after_scaled,
    )


def protocol_fee_liquidity(
    *,
    total_supply: int,
    reserve0: int,
    reserve1: int,
    k_last: int,
    fee_divisor: int = PROTOCOL_FEE_DIVISOR,
) -> int:
    """
    LP tokens owed to the protocol for invariant growth since `k_last`:

        total_supply * (root_k - root_k_last) / (root_k * divisor + root_k_last)

    Returns 0 when `k_last == 0` or the invariant did not grow.
    """
    for name, v in (
        ("total_supply", total_supply),
        ("reserve0", reserve0),
        ("reserve1", reserve1),
        ("k_last", k_last),
    ):
        _require_non_negative(name, v)
    _require_int("fee_divisor", fee_divisor)
    if fee_divisor <= 0:
        raise ValueError("fee_divisor must be positive")

    if k_last == 0:
        return 0
    root_k = sqrt(_require_u256_product("reserve0 * reserve1", reserve0 * reserve1))
    root_k_last = sqrt(k_last)
    if root_k <= root_k_last:
        return 0

    numerator = _require_u256_product("total_supply * (root_k - root_k_last)", total_supply * (root_k - root_k_last))
    denominator = root_k * fee_divisor + root_k_last
    return numerator // denominator
