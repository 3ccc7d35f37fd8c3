"""
Fixed-point integer helpers (v1 semantics).

Values live in the unsigned 256-bit domain `[0, MAX_U256]`. Python ints are
unbounded, so the ceiling is enforced explicitly instead of by machine width.

`sqrt` is the Babylonian-method square root used for first-liquidity pricing
and protocol-fee growth. It must agree with `math.isqrt` on the whole domain.
"""

from __future__ import annotations


MAX_U256 = (1 << 256) - 1

# Newton steps after the range-check seed. The seed is within a factor of three
# of the true root; quadratic convergence then covers a 256-bit input.
SQRT_ITERATIONS = 7

# (threshold, root scale) pairs, each halving the remaining bit-width.
_SQRT_RANGE_CHECKS = (
    (1 << 128, 1 << 64),
    (1 << 64, 1 << 32),
    (1 << 32, 1 << 16),
    (1 << 16, 1 << 8),
    (1 << 8, 1 << 4),
    (1 << 4, 1 << 2),
    (1 << 3, 1 << 1),
)


def _require_u256(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > MAX_U256:
        raise ValueError(f"{name} exceeds the u256 domain")


def sqrt(x: int) -> int:
    """
    Floor square root: the largest `y` with `y * y <= x`.

    Raises TypeError/ValueError for values outside `[0, MAX_U256]`.
    """
    _require_u256("x", x)
    if x == 0:
        return 0

    xx = x
    r = 1
    for threshold, scale in _SQRT_RANGE_CHECKS:
        if xx >= threshold:
            xx //= scale * scale
            r *= scale

    for _ in range(SQRT_ITERATIONS):
        r = (r + x // r) >> 1

    r1 = x // r
    return r if r < r1 else r1


def min_u256(a: int, b: int) -> int:
    _require_u256("a", a)
    _require_u256("b", b)
    return a if a < b else b


def max_u256(a: int, b: int) -> int:
    _require_u256("a", a)
    _require_u256("b", b)
    return a if a > b else b
