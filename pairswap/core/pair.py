"""
Constant-product pair engine (imperative shell over the pair kernels).

Each public operation:

1. runs under a non-reentrant guard,
2. opens a host transaction and a ledger transaction,
3. validates preconditions in a fixed order (each a named `PairError`),
4. mutates the ledger, requests transfers, then resynchronises reserves,
5. checks ledger invariants (optional) before committing.

Any exception rolls back the ledger and the host, then propagates. Transfers
are treated as untrusted: every invariant check happens after them.

Deposits are two-phase. `deposit` records value the caller already sent to
the pair as DEPOSITED for a beneficiary; `mint`, `swap` and `withdraw` settle
the caller's own deposits.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator, Optional, Tuple

from structlog import get_logger

from ..errors import PairError, PairInvariantError, PairLockedError, Reason, raise_for, require
from ..integration.host import AssetHost, CallContext
from ..kernels.python.fixed_point_v1 import MAX_U256
from ..kernels.python.pair_math_v1 import (
    burn_amounts,
    check_swap_invariant,
    initial_liquidity,
    proportional_liquidity,
    protocol_fee_liquidity,
)
from ..state.balances import ZERO_ADDRESS, Address, Amount, AssetId
from ..state.canonical import canonical_address
from ..state.ledger import Ledger
from ..state.lp import LPToken
from ..state.pools import PoolState
from ..state.state_root import compute_pair_state_root
from ..state.store import KeyValueStore
from .config import PairConfig
from .invariants import PairSnapshot, check_all

logger = get_logger()


def _require_amount(name: str, value: Amount) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > MAX_U256:
        raise ValueError(f"{name} exceeds the u256 domain")


class PairEngine:
    """Stateful pair: owns one ledger and talks to one host."""

    def __init__(
        self,
        *,
        address: Address,
        host: AssetHost,
        ledger: Ledger,
        config: Optional[PairConfig] = None,
    ) -> None:
        self._address = canonical_address(address, name="address")
        if self._address in (ledger.pool.token0, ledger.pool.token1):
            raise ValueError("pair address must differ from its tokens")
        self._host = host
        self._ledger = ledger
        self._lp = LPToken(ledger)
        self._config = config if config is not None else PairConfig()
        self._entered = False
        self.log = logger.new(pair=self._address)

    @classmethod
    def create(
        cls,
        *,
        address: Address,
        token0: AssetId,
        token1: AssetId,
        fee_recipient: Address,
        host: AssetHost,
        config: Optional[PairConfig] = None,
        balances: Optional[KeyValueStore] = None,
        allowances: Optional[KeyValueStore] = None,
        deposits0: Optional[KeyValueStore] = None,
        deposits1: Optional[KeyValueStore] = None,
    ) -> "PairEngine":
        """Construct a fresh pair with zero reserves and supply."""
        pool = PoolState(
            token0=canonical_address(token0, name="token0"),
            token1=canonical_address(token1, name="token1"),
            fee_recipient=canonical_address(fee_recipient, name="fee_recipient"),
        )
        ledger = Ledger(
            pool,
            balances=balances,
            allowances=allowances,
            deposits0=deposits0,
            deposits1=deposits1,
        )
        return cls(address=address, host=host, ledger=ledger, config=config)

    # -- views ---------------------------------------------------------------

    @property
    def address(self) -> Address:
        return self._address

    @property
    def config(self) -> PairConfig:
        return self._config

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def token0(self) -> AssetId:
        return self._ledger.pool.token0

    @property
    def token1(self) -> AssetId:
        return self._ledger.pool.token1

    @property
    def total_supply(self) -> Amount:
        return self._ledger.total_supply

    @property
    def k_last(self) -> Amount:
        return self._ledger.pool.k_last

    def get_reserves(self) -> Tuple[Amount, Amount]:
        pool = self._ledger.pool
        return pool.reserve0, pool.reserve1

    def balance_of(self, owner: Address) -> Amount:
        return self._lp.balance_of(canonical_address(owner, name="owner"))

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._lp.allowance(canonical_address(owner, name="owner"), canonical_address(spender, name="spender"))

    def pending_deposits(self, owner: Address) -> Tuple[Amount, Amount]:
        owner = canonical_address(owner, name="owner")
        return self._ledger.pending_deposit(0, owner), self._ledger.pending_deposit(1, owner)

    def state_root(self) -> str:
        return compute_pair_state_root(self._ledger)

    # -- call plumbing -------------------------------------------------------

    @contextmanager
    def _call(self, op: str, ctx: CallContext) -> Iterator[Address]:
        if self._entered:
            raise PairLockedError(f"reentrant call to {op}")
        if not isinstance(ctx, CallContext):
            raise TypeError("ctx must be a CallContext")
        self._entered = True
        try:
            with self._host.transaction(), self._ledger.transaction():
                yield ctx.sender
                if self._config.check_invariants:
                    violations = check_all(
                        PairSnapshot(ledger=self._ledger, host=self._host, address=self._address, config=self._config)
                    )
                    if violations:
                        raise PairInvariantError(violations)
        except PairError as exc:
            self.log.warning("call rejected", op=op, sender=ctx.sender, reason=exc.reason.value, detail=exc.detail)
            raise
        finally:
            self._entered = False

    @staticmethod
    def _require_no_value(ctx: CallContext) -> None:
        require(ctx.amount == 0, Reason.AMOUNT_NOT_ZERO, f"attached {ctx.amount}")

    def _get_balances(self) -> Tuple[Amount, Amount]:
        """Held balances minus pending deposits: the funds that may become reserves."""
        pool = self._ledger.pool
        balance0 = self._host.balance_of(pool.token0, self._address) - pool.deposit_total0
        balance1 = self._host.balance_of(pool.token1, self._address) - pool.deposit_total1
        require(
            balance0 >= 0 and balance1 >= 0,
            Reason.INSUFFICIENT_BALANCE,
            f"pending deposits exceed held balance: ({balance0}, {balance1})",
        )
        return balance0, balance1

    def _require_balances_fit(self, balance0: Amount, balance1: Amount) -> None:
        max_balance = self._config.max_balance
        require(
            balance0 <= max_balance and balance1 <= max_balance,
            Reason.TOKEN_BALANCE_OVERFLOW,
            f"({balance0}, {balance1}) > {max_balance}",
        )

    def _update(self, balance0: Amount, balance1: Amount) -> None:
        self._require_balances_fit(balance0, balance1)
        self._ledger.pool = self._ledger.pool.with_reserves(balance0, balance1)

    def _record_k_last(self) -> None:
        pool = self._ledger.pool
        self._ledger.pool = replace(pool, k_last=pool.reserve0 * pool.reserve1)

    def _mint_fee(self, reserve0: Amount, reserve1: Amount) -> Amount:
        pool = self._ledger.pool
        liquidity = protocol_fee_liquidity(
            total_supply=pool.total_supply,
            reserve0=reserve0,
            reserve1=reserve1,
            k_last=pool.k_last,
            fee_divisor=self._config.protocol_fee_divisor,
        )
        if liquidity > 0:
            self._lp.mint(pool.fee_recipient, liquidity)
            self.log.info("protocol fee minted", to=pool.fee_recipient, liquidity=liquidity)
        return liquidity

    def _transfer_out(self, to: Address, asset: AssetId, amount: Amount) -> None:
        if amount > 0:
            self._host.transfer(self._address, to, asset, amount)

    # -- deposit-then-settle -------------------------------------------------

    def deposit(self, ctx: CallContext, to: Address) -> None:
        """Credit value attached to `ctx` as a pending deposit of `to`."""
        with self._call("deposit", ctx):
            require(ctx.recipient == self._address, Reason.WRONG_RECIPIENT, f"sent to {ctx.recipient}")
            cfg = self._config
            require(ctx.amount <= cfg.max_native_balance, Reason.AMOUNT_OVERFLOW, f"{ctx.amount} > native max")
            require(ctx.amount <= cfg.max_balance, Reason.AMOUNT_OVERFLOW, f"{ctx.amount} > {cfg.max_balance}")
            try:
                index = self._ledger.pool.asset_index(ctx.asset)
            except KeyError:
                raise_for(Reason.INVALID_DEPOSIT_TOKEN, f"{ctx.asset}")
            to = canonical_address(to, name="to")
            pending = self._ledger.pending_deposit(index, to) + ctx.amount
            require(pending <= cfg.max_balance, Reason.AMOUNT_OVERFLOW, f"pending {pending} > {cfg.max_balance}")

            self._ledger.credit_deposit(index, to, ctx.amount)
            self.log.info("deposit", sender=ctx.sender, to=to, asset=ctx.asset, amount=ctx.amount, pending=pending)

    def withdraw(self, ctx: CallContext, to: Address) -> Tuple[Amount, Amount]:
        """Cancel the caller's pending deposits and return them to `to`."""
        with self._call("withdraw", ctx) as sender:
            self._require_no_value(ctx)
            to = canonical_address(to, name="to")
            amount0 = self._ledger.settle_deposit(0, sender)
            amount1 = self._ledger.settle_deposit(1, sender)
            require(amount0 > 0 or amount1 > 0, Reason.INSUFFICIENT_DEPOSIT, "nothing pending")

            pool = self._ledger.pool
            self._transfer_out(to, pool.token0, amount0)
            self._transfer_out(to, pool.token1, amount1)
            self._update(*self._get_balances())
            self.log.info("withdraw", sender=sender, to=to, amount0=amount0, amount1=amount1)
        return amount0, amount1

    def mint(self, ctx: CallContext, to: Address) -> Amount:
        """Settle the caller's pending deposits into reserves and mint LP to `to`."""
        with self._call("mint", ctx) as sender:
            self._require_no_value(ctx)
            to = canonical_address(to, name="to")
            pool = self._ledger.pool
            amount0 = self._ledger.pending_deposit(0, sender)
            amount1 = self._ledger.pending_deposit(1, sender)

            first = pool.total_supply == 0
            if first:
                liquidity = initial_liquidity(
                    amount0=amount0,
                    amount1=amount1,
                    minimum_liquidity=self._config.minimum_liquidity,
                )
            else:
                liquidity = proportional_liquidity(
                    amount0=amount0,
                    amount1=amount1,
                    reserve0=pool.reserve0,
                    reserve1=pool.reserve1,
                    total_supply=pool.total_supply,
                )
            require(liquidity > 0, Reason.INSUFFICIENT_LIQUIDITY_MINTED, f"liquidity={liquidity}")

            if first:
                # Permanently locked; never redeemable.
                self._lp.mint(ZERO_ADDRESS, self._config.minimum_liquidity)
            self._lp.mint(to, liquidity)
            self._ledger.settle_deposit(0, sender)
            self._ledger.settle_deposit(1, sender)
            self._update(*self._get_balances())
            self._record_k_last()
            self.log.info("mint", sender=sender, to=to, amount0=amount0, amount1=amount1, liquidity=liquidity)
        return liquidity

    def burn(self, ctx: CallContext, amount: Amount, to: Address) -> Tuple[Amount, Amount]:
        """Redeem `amount` LP of the caller for underlying assets sent to `to`."""
        _require_amount("amount", amount)
        with self._call("burn", ctx) as sender:
            self._require_no_value(ctx)
            to = canonical_address(to, name="to")
            balance0, balance1 = self._get_balances()
            self._require_balances_fit(balance0, balance1)
            pool = self._ledger.pool
            protocol_fee = self._mint_fee(pool.reserve0, pool.reserve1)

            total_supply = self._ledger.total_supply
            require(total_supply > 0, Reason.INSUFFICIENT_LIQUIDITY_BURNED, "no supply")
            require(amount <= total_supply, Reason.INSUFFICIENT_BALANCE, f"{amount} > total supply")
            amount0, amount1 = burn_amounts(
                liquidity=amount,
                balance0=balance0,
                balance1=balance1,
                total_supply=total_supply,
            )
            require(amount0 > 0 and amount1 > 0, Reason.INSUFFICIENT_LIQUIDITY_BURNED, f"({amount0}, {amount1})")

            self._lp.burn(sender, amount)
            self._transfer_out(to, pool.token0, amount0)
            self._transfer_out(to, pool.token1, amount1)
            self._update(*self._get_balances())
            self._record_k_last()
            self.log.info(
                "burn",
                sender=sender,
                to=to,
                liquidity=amount,
                amount0=amount0,
                amount1=amount1,
                protocol_fee=protocol_fee,
            )
        return amount0, amount1

    def swap(self, ctx: CallContext, amount0_out: Amount, amount1_out: Amount, to: Address) -> Tuple[Amount, Amount]:
        """
        Send the requested outputs to `to`, then settle the caller's pending
        deposits as input and enforce the fee-adjusted invariant.

        Returns the consumed input `(amount0_in, amount1_in)`.
        """
        _require_amount("amount0_out", amount0_out)
        _require_amount("amount1_out", amount1_out)
        with self._call("swap", ctx) as sender:
            self._require_no_value(ctx)
            require(amount0_out > 0 or amount1_out > 0, Reason.INSUFFICIENT_OUTPUT_AMOUNT)
            pool = self._ledger.pool
            reserve0, reserve1 = pool.reserve0, pool.reserve1
            require(
                amount0_out < reserve0 and amount1_out < reserve1,
                Reason.INSUFFICIENT_LIQUIDITY,
                f"out=({amount0_out}, {amount1_out}) reserves=({reserve0}, {reserve1})",
            )
            to = canonical_address(to, name="to")
            require(to not in (pool.token0, pool.token1), Reason.INVALID_TO, to)

            # Optimistic transfer; the input must already be pending.
            self._transfer_out(to, pool.token0, amount0_out)
            self._transfer_out(to, pool.token1, amount1_out)

            require(
                self._ledger.pending_deposit(0, sender) > 0 or self._ledger.pending_deposit(1, sender) > 0,
                Reason.INSUFFICIENT_INPUT_AMOUNT,
            )
            amount0_in = self._ledger.settle_deposit(0, sender)
            amount1_in = self._ledger.settle_deposit(1, sender)
            balance0, balance1 = self._get_balances()
            self._require_balances_fit(balance0, balance1)

            cfg = self._config
            check = check_swap_invariant(
                balance0=balance0,
                balance1=balance1,
                amount0_in=amount0_in,
                amount1_in=amount1_in,
                reserve0=reserve0,
                reserve1=reserve1,
                fee_numerator=cfg.swap_fee_numerator,
                fee_denominator=cfg.swap_fee_denominator,
            )
            require(check.ok, Reason.K, f"{check.k_after_scaled} < {check.k_before_scaled}")

            self._update(balance0, balance1)
            self.log.info(
                "swap",
                sender=sender,
                to=to,
                amount0_in=amount0_in,
                amount1_in=amount1_in,
                amount0_out=amount0_out,
                amount1_out=amount1_out,
            )
        return amount0_in, amount1_in

    def skim(self, ctx: CallContext, to: Address) -> Tuple[Amount, Amount]:
        """Send held balance beyond reserves and pending deposits to `to`."""
        with self._call("skim", ctx):
            self._require_no_value(ctx)
            to = canonical_address(to, name="to")
            balance0, balance1 = self._get_balances()
            pool = self._ledger.pool
            excess0 = max(balance0 - pool.reserve0, 0)
            excess1 = max(balance1 - pool.reserve1, 0)
            self._transfer_out(to, pool.token0, excess0)
            self._transfer_out(to, pool.token1, excess1)
            self.log.info("skim", sender=ctx.sender, to=to, amount0=excess0, amount1=excess1)
        return excess0, excess1

    def sync(self, ctx: CallContext) -> Tuple[Amount, Amount]:
        """Force reserves to match held balances minus pending deposits."""
        with self._call("sync", ctx):
            self._require_no_value(ctx)
            self._update(*self._get_balances())
            reserves = self.get_reserves()
            self.log.info("sync", sender=ctx.sender, reserve0=reserves[0], reserve1=reserves[1])
        return reserves

    # -- LP token surface ----------------------------------------------------

    def token_transfer(self, ctx: CallContext, to: Address, value: Amount) -> bool:
        _require_amount("value", value)
        with self._call("token_transfer", ctx) as sender:
            self._require_no_value(ctx)
            to = canonical_address(to, name="to")
            self._lp.transfer(sender, to, value)
            self.log.debug("lp transfer", sender=sender, to=to, value=value)
        return True

    def approve(self, ctx: CallContext, spender: Address, value: Amount) -> bool:
        _require_amount("value", value)
        with self._call("approve", ctx) as owner:
            self._require_no_value(ctx)
            spender = canonical_address(spender, name="spender")
            self._lp.approve(owner, spender, value)
            self.log.debug("lp approve", owner=owner, spender=spender, value=value)
        return True

    def transfer_from(self, ctx: CallContext, owner: Address, to: Address, value: Amount) -> bool:
        _require_amount("value", value)
        with self._call("transfer_from", ctx) as spender:
            self._require_no_value(ctx)
            owner = canonical_address(owner, name="owner")
            to = canonical_address(to, name="to")
            self._lp.transfer_from(spender, owner, to, value)
            self.log.debug("lp transfer_from", spender=spender, owner=owner, to=to, value=value)
        return True
