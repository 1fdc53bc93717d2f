"""Constant-mean market maker (CMMM) pricing.

The curve interpolates between a weighted product (flatness 0) and a
weighted sum (flatness 1). With

    prod = b1^w1 * ... * bn^wn
    sum  = w1*b1 + ... + wn*bn

the invariant ``h`` is the reference balance at which the curve passes
through (h, h, ..., h):

    h = (sqrt(prod * (prod * (A*A + 4*(1-A)) + 8*A*sum)) - A*prod) / 2

The hybrid curve has no closed form for a single unknown balance, so swaps
are priced by holding ``h`` fixed and solving for the missing balance with
Newton-Raphson, seeded with the pure weighted-product estimate.

All arithmetic is float; amounts are floored back to integer units (the
given-out input is rounded up so rounding never favors the trader).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple

from swap_router.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from swap_router.constants import INVARIANT_TOLERANCE, VALIDITY_TOLERANCE
from swap_router.errors import (
    InvalidAmountError,
    NewtonDivergedError,
    SameCoinError,
    SwapDisabledError,
    TradeBoundsError,
    ZeroBalanceError,
)
from swap_router.math.fixed_point import close_enough, to_int, very_close_int
from swap_router.pools.types import Pool

__all__ = [
    "InvariantComponents",
    "SwapQuote",
    "calc_in_given_out",
    "calc_invariant",
    "calc_invariant_components",
    "calc_invariant_quadratic",
    "calc_out_given_in",
    "check_trade_bounds",
    "is_valid_swap",
    "quote_in_given_out",
    "quote_out_given_in",
    "solve_balance_given_invariant",
    "spot_price",
]


@dataclass(frozen=True)
class SwapQuote:
    """Result of pricing one swap inside one pool.

    ``fee_in`` is charged on the input side, ``fee_out`` on the output side,
    both in raw units of the respective coin.
    """

    amount_in: int
    amount_out: int
    fee_in: int = 0
    fee_out: int = 0


class InvariantComponents(NamedTuple):
    """Invariant parts with and without one coin's contribution."""

    prod: float
    sum: float
    p0: float
    s0: float
    h: float


def calc_invariant_quadratic(prod: float, sum_: float, flatness: float) -> float:
    """Solve the invariant quadratic for h given the product and sum parts."""
    return (
        math.sqrt(prod * (prod * (flatness * flatness + (1 - flatness) * 4) + flatness * sum_ * 8))
        - flatness * prod
    ) / 2


def _log_balance(pool: Pool, coin_type: str, balance: float) -> float:
    if balance <= 0:
        raise ZeroBalanceError(f"Pool {pool.id} has no {coin_type} balance")
    return math.log(balance)


def calc_invariant(pool: Pool) -> float:
    """Compute the invariant h of the pool's current state.

    Raises:
        ZeroBalanceError: If any coin balance is zero
    """
    return calc_invariant_components(pool, None).h


def calc_invariant_components(pool: Pool, excluded_coin: str | None) -> InvariantComponents:
    """Compute (prod, sum, p0, s0, h) for the pool.

    ``p0`` and ``s0`` are the product and sum parts without the contribution
    of ``excluded_coin`` (the coin whose balance is about to be solved for).
    The product is accumulated in log space to avoid overflow.

    Raises:
        ZeroBalanceError: If any coin balance is zero
    """
    log_prod = 0.0
    sum_ = 0.0
    log_p0 = 0.0
    s0 = 0.0

    for coin_type, coin in pool.coins.items():
        balance = float(coin.balance)
        p = coin.weight * _log_balance(pool, coin_type, balance)
        s = coin.weight * balance

        log_prod += p
        sum_ += s
        if coin_type != excluded_coin:
            log_p0 += p
            s0 += s

    prod = math.exp(log_prod)
    return InvariantComponents(
        prod=prod,
        sum=sum_,
        p0=math.exp(log_p0),
        s0=s0,
        h=calc_invariant_quadratic(prod, sum_, pool.flatness),
    )


def solve_balance_given_invariant(
    flatness: float,
    weight: float,
    h: float,
    xi: float,
    p0: float,
    s0: float,
    *,
    max_attempts: int = DEFAULT_ROUTER_CONFIG.newton_max_attempts,
    convergence_bound: float = DEFAULT_ROUTER_CONFIG.newton_convergence_bound,
) -> float:
    """Solve for the balance of one coin given the invariant and all other balances.

    Newton-Raphson on the curve equation with the other coins folded into
    ``p0`` (product part) and ``s0`` (sum part). With x^w written xw, each
    step is

        x' = x * (xw * (c1*x + c2*xw + c3) + c4 - xw * (c5*xw + c6))
             / (xw * (c7*x + c8*xw + c9 - c10))

    If a step would make the numerator or denominator negative (the seed
    overshot a small true root) the iterate restarts at ``1 / 2**attempt``.

    Args:
        flatness: Pool flatness A
        weight: Weight of the unknown coin
        h: Invariant to hold
        xi: Initial estimate
        p0: Product part of every other coin
        s0: Sum part of every other coin
        max_attempts: Iteration budget
        convergence_bound: Relative step size that counts as converged

    Returns:
        The unknown balance (float)

    Raises:
        NewtonDivergedError: If the budget is exhausted or the iteration overflows
    """
    ac = 1 - flatness
    aw = flatness * weight
    acw = ac * weight
    as0 = flatness * s0
    ah = flatness * h

    c1 = 2 * aw * weight
    c2 = 2 * acw * p0
    c3 = 2 * weight * as0 + ah
    c4 = h * h / p0
    c5 = ac * p0
    c6 = 2 * as0 + weight * ah
    c7 = 2 * aw * (weight + 1)
    c8 = 2 * acw * p0
    c9 = 2 * aw * s0
    c10 = aw * h

    x = xi
    prev_x = x
    attempt = 0
    try:
        while attempt < max_attempts:
            xw = x**weight

            top_pos = x * (xw * (c1 * x + c2 * xw + c3) + c4)
            top_neg = x * (xw * (c5 * xw + c6))
            bottom_pos = c7 * x + c8 * xw + c9

            if top_pos < top_neg or bottom_pos <= c10:
                x = 1 / 2**attempt
                attempt += 1
                continue

            x = (top_pos - top_neg) / (xw * (bottom_pos - c10))

            if close_enough(x, prev_x, convergence_bound):
                return x

            prev_x = x
            attempt += 1
    except (OverflowError, ZeroDivisionError) as err:
        raise NewtonDivergedError(f"Newton iteration failed numerically: {err}") from err

    raise NewtonDivergedError(f"Newton did not converge after {max_attempts} attempts")


def _check_coins(pool: Pool, coin_in: str, coin_out: str) -> None:
    if coin_in == coin_out:
        raise SameCoinError(f"Cannot swap {coin_in} for itself")
    # Raises UnknownCoinError for coins the pool does not hold
    pool.coin(coin_in)
    pool.coin(coin_out)


def quote_out_given_in(
    pool: Pool,
    coin_in: str,
    coin_out: str,
    amount_in: int,
    config: RouterConfig = DEFAULT_ROUTER_CONFIG,
) -> SwapQuote:
    """Price selling ``amount_in`` of coin_in for coin_out.

    The input fee is taken before the solve, the output fee after it.
    A fee-disabled pair prices to zero output rather than raising.

    Args:
        pool: Pool state to price against
        coin_in: Coin sold into the pool
        coin_out: Coin bought from the pool
        amount_in: Raw input amount, fees included
        config: Newton bounds

    Returns:
        SwapQuote with the floored output amount

    Raises:
        SameCoinError: If coin_in == coin_out
        UnknownCoinError: If the pool does not hold either coin
        InvalidAmountError: If amount_in is negative
        ZeroBalanceError: If the pool has an empty coin
        NewtonDivergedError: If the solve fails
    """
    _check_coins(pool, coin_in, coin_out)
    if amount_in < 0:
        raise InvalidAmountError(f"amount_in cannot be negative: {amount_in}")

    fee_in, fee_out = pool.fees(coin_in, coin_out)
    if fee_in >= 1 or fee_out >= 1 or amount_in == 0:
        return SwapQuote(amount_in=amount_in, amount_out=0)

    state_in = pool.coin(coin_in)
    state_out = pool.coin(coin_out)
    old_in = float(state_in.balance)
    old_out = float(state_out.balance)
    if old_in <= 0:
        raise ZeroBalanceError(f"Pool {pool.id} has no {coin_in} balance")

    # The output balance is the unknown, so it is left out of p0/s0
    prod, _sum, p0, s0, h = calc_invariant_components(pool, coin_out)

    net_in = (1 - fee_in) * amount_in
    new_p0 = p0 * ((old_in + net_in) / old_in) ** state_in.weight
    new_s0 = s0 + state_in.weight * net_in
    xi = (prod / new_p0) ** (1 / state_out.weight)

    new_out = solve_balance_given_invariant(
        pool.flatness,
        state_out.weight,
        h,
        xi,
        new_p0,
        new_s0,
        max_attempts=config.newton_max_attempts,
        convergence_bound=config.newton_convergence_bound,
    )

    gross_out = old_out - new_out
    amount_out = max(to_int(gross_out * (1 - fee_out)), 0)
    return SwapQuote(
        amount_in=amount_in,
        amount_out=amount_out,
        fee_in=amount_in - to_int(net_in),
        fee_out=max(to_int(gross_out) - amount_out, 0),
    )


def quote_in_given_out(
    pool: Pool,
    coin_in: str,
    coin_out: str,
    amount_out: int,
    config: RouterConfig = DEFAULT_ROUTER_CONFIG,
) -> SwapQuote:
    """Price buying exactly ``amount_out`` of coin_out with coin_in.

    The output fee is grossed up before the solve and the input fee after it,
    so the returned amount covers both fees.

    Raises:
        SameCoinError: If coin_in == coin_out
        UnknownCoinError: If the pool does not hold either coin
        InvalidAmountError: If amount_out is negative
        SwapDisabledError: If the pair is fee-disabled and amount_out > 0
        TradeBoundsError: If amount_out (plus fee) would drain the pool
        ZeroBalanceError: If the pool has an empty coin
        NewtonDivergedError: If the solve fails
    """
    _check_coins(pool, coin_in, coin_out)
    if amount_out < 0:
        raise InvalidAmountError(f"amount_out cannot be negative: {amount_out}")
    if amount_out == 0:
        return SwapQuote(amount_in=0, amount_out=0)

    fee_in, fee_out = pool.fees(coin_in, coin_out)
    if fee_in >= 1 or fee_out >= 1:
        raise SwapDisabledError(f"Pool {pool.id} has {coin_in} -> {coin_out} disabled")

    state_in = pool.coin(coin_in)
    state_out = pool.coin(coin_out)
    old_in = float(state_in.balance)
    old_out = float(state_out.balance)

    feed_out = amount_out / (1 - fee_out)
    new_out = old_out - feed_out
    if new_out <= 0:
        raise TradeBoundsError(
            f"Pool {pool.id} cannot pay out {amount_out} {coin_out} from {state_out.balance}"
        )

    # The input balance is the unknown, so it is left out of p0/s0
    prod, _sum, p0, s0, h = calc_invariant_components(pool, coin_in)

    new_p0 = p0 * (new_out / old_out) ** state_out.weight
    new_s0 = s0 - state_out.weight * feed_out
    xi = (prod / new_p0) ** (1 / state_in.weight)

    new_in = solve_balance_given_invariant(
        pool.flatness,
        state_in.weight,
        h,
        xi,
        new_p0,
        new_s0,
        max_attempts=config.newton_max_attempts,
        convergence_bound=config.newton_convergence_bound,
    )

    gross_in = new_in - old_in
    amount_in = max(math.ceil(gross_in / (1 - fee_in)), 0)
    return SwapQuote(
        amount_in=amount_in,
        amount_out=amount_out,
        fee_in=max(amount_in - math.ceil(gross_in), 0),
        fee_out=max(math.ceil(feed_out) - amount_out, 0),
    )


def calc_out_given_in(
    pool: Pool,
    coin_in: str,
    coin_out: str,
    amount_in: int,
    config: RouterConfig = DEFAULT_ROUTER_CONFIG,
) -> int:
    """Output amount for selling ``amount_in`` (see ``quote_out_given_in``)."""
    return quote_out_given_in(pool, coin_in, coin_out, amount_in, config).amount_out


def calc_in_given_out(
    pool: Pool,
    coin_in: str,
    coin_out: str,
    amount_out: int,
    config: RouterConfig = DEFAULT_ROUTER_CONFIG,
) -> int:
    """Input amount required to buy ``amount_out`` (see ``quote_in_given_out``)."""
    return quote_in_given_out(pool, coin_in, coin_out, amount_out, config).amount_in


def spot_price(pool: Pool, coin_in: str, coin_out: str) -> float:
    """Weighted spot price in units of coin_in per coin_out.

    ``(balance_in / weight_in) / (balance_out / weight_out)``; informational
    only, never used to size trades.

    Raises:
        UnknownCoinError: If the pool does not hold either coin
        ZeroBalanceError: If the output balance is zero
    """
    state_in = pool.coin(coin_in)
    state_out = pool.coin(coin_out)
    if state_out.balance <= 0:
        raise ZeroBalanceError(f"Pool {pool.id} has no {coin_out} balance")
    return (state_in.balance / state_in.weight) / (state_out.balance / state_out.weight)


def check_trade_bounds(
    pool: Pool,
    coin_in: str,
    amount_in: int,
    coin_out: str,
    amount_out: int,
    max_ratio: float,
) -> None:
    """Reject trades that move too large a share of either balance.

    Raises:
        TradeBoundsError: If amount_in or amount_out exceeds ``max_ratio`` of
            the respective pool balance
    """
    balance_in = pool.balance(coin_in)
    balance_out = pool.balance(coin_out)
    if amount_in > balance_in * max_ratio:
        raise TradeBoundsError(
            f"Pool {pool.id}: {amount_in} {coin_in} exceeds {max_ratio:.3f} of {balance_in}"
        )
    if amount_out > balance_out * max_ratio:
        raise TradeBoundsError(
            f"Pool {pool.id}: {amount_out} {coin_out} exceeds {max_ratio:.3f} of {balance_out}"
        )


def is_valid_swap(pool: Pool, coin_in: str, coin_out: str, amount_in: int, amount_out: int) -> bool:
    """Check that a priced swap keeps the pool's invariant.

    Three invariants are compared: before the swap (pre), after applying the
    raw amounts (post), and after applying the amounts net of fees (pseudo).
    The swap is valid when post does not fall below pre beyond a tiny
    relative tolerance and pseudo matches pre.
    """
    if coin_in == coin_out:
        return False

    state_in = pool.coin(coin_in)
    state_out = pool.coin(coin_out)
    feed_in = amount_in * (1 - state_in.trade_fee_in)
    feed_out = 0.0 if amount_out == 0 else amount_out / (1 - state_out.trade_fee_out)
    if feed_out > state_out.balance + 1 or amount_out > state_out.balance + 1:
        return False

    pre_prod = pre_sum = 0.0
    post_prod = post_sum = 0.0
    pseudo_prod = pseudo_sum = 0.0

    try:
        for coin_type, coin in pool.coins.items():
            balance = float(coin.balance)
            if coin_type == coin_in:
                post, pseudo = balance + amount_in, balance + feed_in
            elif coin_type == coin_out:
                post, pseudo = balance - amount_out, balance - feed_out
            else:
                post = pseudo = balance

            pre_prod += coin.weight * math.log(balance)
            pre_sum += coin.weight * balance
            post_prod += coin.weight * math.log(post)
            post_sum += coin.weight * post
            pseudo_prod += coin.weight * math.log(pseudo)
            pseudo_sum += coin.weight * pseudo
    except ValueError:
        # log of a drained balance
        return False

    pre = calc_invariant_quadratic(math.exp(pre_prod), pre_sum, pool.flatness)
    post = calc_invariant_quadratic(math.exp(post_prod), post_sum, pool.flatness)
    pseudo = calc_invariant_quadratic(math.exp(pseudo_prod), pseudo_sum, pool.flatness)

    return post * (1 + INVARIANT_TOLERANCE) >= pre and (
        very_close_int(pre, pseudo) or close_enough(pre, pseudo, VALIDITY_TOLERANCE)
    )
