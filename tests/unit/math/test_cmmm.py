"""Tests for constant-mean market maker pricing."""

import pytest

from swap_router.config import RouterConfig
from swap_router.errors import (
    InvalidAmountError,
    NewtonDivergedError,
    SameCoinError,
    SwapDisabledError,
    TradeBoundsError,
    UnknownCoinError,
    ZeroBalanceError,
)
from swap_router.math.cmmm import (
    calc_in_given_out,
    calc_invariant,
    calc_invariant_components,
    calc_out_given_in,
    check_trade_bounds,
    is_valid_swap,
    quote_in_given_out,
    quote_out_given_in,
    solve_balance_given_invariant,
    spot_price,
)
from tests.helpers import SUI, USDC, USDT, WETH, make_pool

BALANCE = 10**12


def relative_error(actual: float, expected: float) -> float:
    return abs(actual - expected) / expected


class TestInvariant:
    """Tests for the invariant h."""

    def test_product_curve_invariant_is_weighted_product(self):
        """Flatness 0 reduces h to the weighted geometric mean."""
        pool = make_pool("p", {SUI: 4 * BALANCE, USDC: BALANCE})
        assert calc_invariant(pool) == pytest.approx(2 * BALANCE, rel=1e-12)

    def test_balanced_pool_invariant_is_balance(self):
        """A balanced pool passes through (b, b) at every flatness."""
        for flatness in (0.0, 0.5, 1.0):
            pool = make_pool("p", {SUI: BALANCE, USDC: BALANCE}, flatness=flatness)
            assert calc_invariant(pool) == pytest.approx(BALANCE, rel=1e-12)

    def test_components_exclude_one_coin(self):
        """p0 and s0 leave out the excluded coin."""
        pool = make_pool("p", {SUI: 4 * BALANCE, USDC: BALANCE})
        components = calc_invariant_components(pool, USDC)

        assert components.s0 == pytest.approx(0.5 * 4 * BALANCE)
        assert components.p0 == pytest.approx((4 * BALANCE) ** 0.5, rel=1e-12)
        assert components.sum == pytest.approx(0.5 * 5 * BALANCE)

    def test_zero_balance_raises(self):
        pool = make_pool("p", {SUI: 0, USDC: BALANCE})
        with pytest.raises(ZeroBalanceError):
            calc_invariant(pool)


class TestNewtonSolver:
    """Tests for solving a balance given the invariant."""

    def test_recovers_from_poor_seed(self):
        """A seed far from the root still converges for the product curve."""
        # Other coin holds 10^12 with weight 0.5, h = 10^12
        p0 = float(BALANCE) ** 0.5
        result = solve_balance_given_invariant(0.0, 0.5, float(BALANCE), 1.0, p0, 0.5 * BALANCE)
        assert result == pytest.approx(BALANCE, rel=1e-9)

    def test_exhausted_budget_raises(self):
        """One attempt from a bad seed cannot converge."""
        p0 = float(BALANCE) ** 0.5
        with pytest.raises(NewtonDivergedError):
            solve_balance_given_invariant(
                0.0, 0.5, float(BALANCE), 1.0, p0, 0.5 * BALANCE, max_attempts=1
            )

    @pytest.mark.parametrize("flatness", [0.0, 0.5])
    @pytest.mark.parametrize("weight", [0.6, 0.8, 0.95])
    def test_restarts_when_seed_overshoots_small_root(self, flatness, weight):
        """A seed far above a small root restarts low and still converges."""
        pool = make_pool(
            "p",
            {SUI: 10**3, USDC: BALANCE},
            weights={SUI: weight, USDC: 1 - weight},
            flatness=flatness,
        )
        _prod, _sum, p0, s0, h = calc_invariant_components(pool, SUI)

        result = solve_balance_given_invariant(flatness, weight, h, float(BALANCE), p0, s0)

        assert result == pytest.approx(10**3, rel=1e-6)

    def test_hybrid_curve_root_satisfies_invariant(self):
        """The solved balance reproduces the pool invariant."""
        pool = make_pool("p", {SUI: BALANCE, USDC: 2 * BALANCE}, flatness=0.5)
        _prod, _sum, p0, s0, h = calc_invariant_components(pool, USDC)

        result = solve_balance_given_invariant(0.5, 0.5, h, float(BALANCE), p0, s0)

        assert result == pytest.approx(2 * BALANCE, rel=1e-8)


class TestQuoteOutGivenIn:
    """Tests for given-in pricing."""

    def test_constant_product_matches_closed_form(self, sui_usdc_pool):
        """Balanced product pool matches x*y=k within 0.01%."""
        amount_in = 10**6
        expected = BALANCE * (1 - BALANCE / (BALANCE + amount_in))

        amount_out = calc_out_given_in(sui_usdc_pool, SUI, USDC, amount_in)

        assert relative_error(amount_out, expected) < 1e-4

    def test_weighted_pool_matches_closed_form(self):
        """80/20 product pool matches the weighted closed form."""
        pool = make_pool(
            "p", {SUI: 4 * BALANCE, USDC: BALANCE}, weights={SUI: 0.8, USDC: 0.2}
        )
        amount_in = 10**9
        expected = BALANCE * (1 - (4 * BALANCE / (4 * BALANCE + amount_in)) ** 4)

        amount_out = calc_out_given_in(pool, SUI, USDC, amount_in)

        assert relative_error(amount_out, expected) < 1e-4

    def test_output_monotonic_in_input(self, sui_usdc_pool):
        """More input never yields less output."""
        outputs = [
            calc_out_given_in(sui_usdc_pool, SUI, USDC, 10**exponent) for exponent in range(6, 12)
        ]
        assert outputs == sorted(outputs)
        assert len(set(outputs)) == len(outputs)

    def test_fees_reduce_output(self):
        """Fees on both sides cost roughly fee_in + fee_out."""
        no_fee = make_pool("p", {SUI: BALANCE, USDC: BALANCE})
        with_fee = make_pool("p", {SUI: BALANCE, USDC: BALANCE}, fee=0.003)

        plain = calc_out_given_in(no_fee, SUI, USDC, 10**6)
        charged = calc_out_given_in(with_fee, SUI, USDC, 10**6)

        assert charged < plain
        assert abs(charged / plain - 0.997**2) < 1e-4

    def test_fee_amounts_reported(self):
        """The quote reports the input fee in raw units."""
        pool = make_pool("p", {SUI: BALANCE, USDC: BALANCE}, fees_in={SUI: 0.01})
        quote = quote_out_given_in(pool, SUI, USDC, 10**6)

        assert abs(quote.fee_in - 10_000) <= 1
        assert quote.fee_out == 0

    def test_flatter_curve_gives_more_output(self):
        """Near balance a flatter curve has less slippage."""
        product = make_pool("p", {SUI: BALANCE, USDC: BALANCE})
        hybrid = make_pool("p", {SUI: BALANCE, USDC: BALANCE}, flatness=0.5)
        amount_in = 10**10

        product_out = calc_out_given_in(product, SUI, USDC, amount_in)
        hybrid_out = calc_out_given_in(hybrid, SUI, USDC, amount_in)

        assert product_out < hybrid_out <= amount_in

    def test_three_coin_pool(self):
        """Pricing works with coins that do not take part in the swap."""
        pool = make_pool("p", {SUI: BALANCE, USDC: BALANCE, USDT: BALANCE})
        amount_out = calc_out_given_in(pool, SUI, USDC, 10**6)
        assert 0 < amount_out < 10**6

    def test_disabled_pair_returns_zero(self):
        """fee_in >= 1 prices to zero output instead of raising."""
        pool = make_pool("p", {SUI: BALANCE, USDC: BALANCE}, fees_in={SUI: 1.0})
        assert calc_out_given_in(pool, SUI, USDC, 10**6) == 0

    def test_zero_amount_returns_zero(self, sui_usdc_pool):
        assert calc_out_given_in(sui_usdc_pool, SUI, USDC, 0) == 0

    def test_negative_amount_raises(self, sui_usdc_pool):
        with pytest.raises(InvalidAmountError):
            calc_out_given_in(sui_usdc_pool, SUI, USDC, -1)

    def test_same_coin_raises(self, sui_usdc_pool):
        with pytest.raises(SameCoinError):
            calc_out_given_in(sui_usdc_pool, SUI, SUI, 10**6)

    def test_unknown_coin_raises(self, sui_usdc_pool):
        with pytest.raises(UnknownCoinError):
            calc_out_given_in(sui_usdc_pool, SUI, WETH, 10**6)

    def test_pool_not_modified(self, sui_usdc_pool):
        """Pricing is pure."""
        calc_out_given_in(sui_usdc_pool, SUI, USDC, 10**9)
        assert sui_usdc_pool.balance(SUI) == BALANCE
        assert sui_usdc_pool.balance(USDC) == BALANCE


class TestQuoteInGivenOut:
    """Tests for given-out pricing."""

    def test_constant_product_matches_closed_form(self, sui_usdc_pool):
        amount_out = 10**6
        expected = BALANCE * (BALANCE / (BALANCE - amount_out) - 1)

        amount_in = calc_in_given_out(sui_usdc_pool, SUI, USDC, amount_out)

        assert relative_error(amount_in, expected) < 1e-4

    def test_round_trip_never_favors_trader(self):
        """Buying back the output of a given-in quote costs at least the input."""
        for flatness in (0.0, 0.5, 1.0):
            pool = make_pool("p", {SUI: BALANCE, USDC: BALANCE}, flatness=flatness, fee=0.003)
            amount_in = 10**9

            amount_out = calc_out_given_in(pool, SUI, USDC, amount_in)
            required_in = calc_in_given_out(pool, SUI, USDC, amount_out)

            assert required_in >= amount_in * (1 - 1e-6)

    @pytest.mark.parametrize("amount_in", [10**9, 10**11])
    def test_round_trip_on_unbalanced_pool(self, amount_in):
        """Skewed weights and balances still price consistently both ways."""
        pool = make_pool(
            "p",
            {SUI: BALANCE, USDC: 3 * 10**11},
            weights={SUI: 0.9, USDC: 0.1},
        )

        amount_out = calc_out_given_in(pool, SUI, USDC, amount_in)
        required_in = calc_in_given_out(pool, SUI, USDC, amount_out)

        assert amount_out > 0
        assert required_in == pytest.approx(amount_in, rel=1e-6)

    def test_disabled_pair_raises(self):
        pool = make_pool("p", {SUI: BALANCE, USDC: BALANCE}, fees_out={USDC: 1.0})
        with pytest.raises(SwapDisabledError):
            quote_in_given_out(pool, SUI, USDC, 10**6)

    def test_zero_amount_returns_zero(self, sui_usdc_pool):
        quote = quote_in_given_out(sui_usdc_pool, SUI, USDC, 0)
        assert quote.amount_in == 0
        assert quote.amount_out == 0

    def test_draining_pool_raises(self, sui_usdc_pool):
        """Asking for the whole balance cannot be priced."""
        with pytest.raises(TradeBoundsError):
            quote_in_given_out(sui_usdc_pool, SUI, USDC, BALANCE)

    def test_fees_increase_input(self):
        no_fee = make_pool("p", {SUI: BALANCE, USDC: BALANCE})
        with_fee = make_pool("p", {SUI: BALANCE, USDC: BALANCE}, fee=0.003)

        assert calc_in_given_out(with_fee, SUI, USDC, 10**6) > calc_in_given_out(
            no_fee, SUI, USDC, 10**6
        )


class TestNewtonBudget:
    """Tests for the configured Newton budget."""

    def test_budget_comes_from_config(self):
        """A budget too small for the seed surfaces as NewtonDivergedError."""
        config = RouterConfig(newton_max_attempts=1, newton_convergence_bound=1e-300)
        pool = make_pool("p", {SUI: BALANCE, USDC: 3 * BALANCE}, flatness=0.7)

        with pytest.raises(NewtonDivergedError):
            quote_out_given_in(pool, SUI, USDC, 10**10, config)


class TestSpotPrice:
    """Tests for weighted spot price."""

    def test_balanced_pool(self, sui_usdc_pool):
        assert spot_price(sui_usdc_pool, SUI, USDC) == 1.0

    def test_price_in_units_of_coin_in(self):
        pool = make_pool("p", {SUI: 2 * BALANCE, USDC: BALANCE})
        assert spot_price(pool, SUI, USDC) == pytest.approx(2.0)
        assert spot_price(pool, USDC, SUI) == pytest.approx(0.5)

    def test_weights_cancel_balances(self):
        pool = make_pool(
            "p", {SUI: 4 * BALANCE, USDC: BALANCE}, weights={SUI: 0.8, USDC: 0.2}
        )
        assert spot_price(pool, SUI, USDC) == pytest.approx(1.0)

    def test_zero_output_balance_raises(self):
        pool = make_pool("p", {SUI: BALANCE, USDC: 0})
        with pytest.raises(ZeroBalanceError):
            spot_price(pool, SUI, USDC)


class TestTradeBounds:
    """Tests for the per-hop trade size bound."""

    def test_within_bounds(self, sui_usdc_pool):
        check_trade_bounds(sui_usdc_pool, SUI, 10**9, USDC, 10**9, 0.299)

    def test_input_too_large(self, sui_usdc_pool):
        with pytest.raises(TradeBoundsError):
            check_trade_bounds(sui_usdc_pool, SUI, BALANCE // 2, USDC, 10**9, 0.299)

    def test_output_too_large(self, sui_usdc_pool):
        with pytest.raises(TradeBoundsError):
            check_trade_bounds(sui_usdc_pool, SUI, 10**9, USDC, BALANCE // 2, 0.299)


class TestIsValidSwap:
    """Tests for invariant-based swap validation."""

    def test_priced_swap_is_valid(self, sui_usdc_pool):
        amount_out = calc_out_given_in(sui_usdc_pool, SUI, USDC, 10**9)
        assert is_valid_swap(sui_usdc_pool, SUI, USDC, 10**9, amount_out)

    def test_inflated_output_is_invalid(self, sui_usdc_pool):
        """Paying out more than quoted lowers the invariant."""
        amount_out = calc_out_given_in(sui_usdc_pool, SUI, USDC, 10**9)
        assert not is_valid_swap(sui_usdc_pool, SUI, USDC, 10**9, amount_out * 11 // 10)

    def test_draining_output_is_invalid(self, sui_usdc_pool):
        assert not is_valid_swap(sui_usdc_pool, SUI, USDC, 10**9, 2 * BALANCE)

    def test_same_coin_is_invalid(self, sui_usdc_pool):
        assert not is_valid_swap(sui_usdc_pool, SUI, SUI, 10**9, 10**9)
