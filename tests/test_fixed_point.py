"""
Fixed-Point Math & Interest Engine Test Suite

Coverage:
  - WAD primitives: mul/div, ln, exp, binary exponentiation
  - daily_rate_from_apy: zero point, monotonicity, reference values
  - compound_growth: truncation, zero inputs
  - InterestEngine: reference rewards, cache, APY boundary sensitivity
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from qstake.constants import MAX_APY_BASIS_POINTS, WAD
from qstake.fixed_point import (
    compound_growth,
    daily_rate_from_apy,
    div_wad,
    exp_wad,
    ln_wad,
    mul_wad,
    pow_wad,
)
from qstake.staking.interest import InterestEngine, reward


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

E9 = 10 ** 9
PRINCIPAL = 200 * E9


# ══════════════════════════════════════════════════════════════════════
#  PRIMITIVES
# ══════════════════════════════════════════════════════════════════════


class TestWadPrimitives:
    """mul/div/pow on WAD values."""

    def test_mul_wad_truncates(self):
        assert mul_wad(WAD, WAD) == WAD
        assert mul_wad(3, WAD // 2) == 1

    def test_div_wad(self):
        assert div_wad(WAD, 2 * WAD) == WAD // 2
        assert div_wad(1, 3) == WAD // 3

    def test_div_wad_by_zero_raises(self):
        with pytest.raises(ZeroDivisionError):
            div_wad(WAD, 0)

    def test_pow_wad_zero_exponent(self):
        assert pow_wad(5 * WAD, 0) == WAD

    def test_pow_wad_integer_base(self):
        assert pow_wad(2 * WAD, 10) == 1024 * WAD

    def test_pow_wad_negative_exponent_raises(self):
        with pytest.raises(ValueError):
            pow_wad(WAD, -1)


class TestLnExp:
    """Natural log and exponential at 18 decimals."""

    def test_ln_of_one_is_zero(self):
        assert ln_wad(WAD) == 0

    def test_ln_reference_values(self):
        assert ln_wad(2 * WAD) == 693147180559945309
        assert ln_wad(WAD + WAD // 100) == 9950330853168082

    def test_ln_below_one_is_negative(self):
        assert ln_wad(WAD // 2) == -693147180559945310

    def test_ln_non_positive_raises(self):
        with pytest.raises(ValueError):
            ln_wad(0)
        with pytest.raises(ValueError):
            ln_wad(-WAD)

    def test_exp_of_zero_is_one(self):
        assert exp_wad(0) == WAD

    def test_exp_of_one(self):
        assert exp_wad(WAD) == 2718281828459045235

    def test_exp_ln_roundtrip_close(self):
        x = 3 * WAD
        assert abs(exp_wad(ln_wad(x)) - x) <= 10


# ══════════════════════════════════════════════════════════════════════
#  DAILY RATE
# ══════════════════════════════════════════════════════════════════════


class TestDailyRate:
    """daily_rate_from_apy."""

    def test_zero_apy_is_zero_rate(self):
        assert daily_rate_from_apy(0) == 0

    def test_reference_rates(self):
        assert daily_rate_from_apy(1) == 273958942548
        assert daily_rate_from_apy(100) == 27261552008993
        assert daily_rate_from_apy(10000) == 1900837677234845

    def test_positive_for_every_nonzero_apy(self):
        for apy in (1, 2, 50, 999, 5000, MAX_APY_BASIS_POINTS):
            assert daily_rate_from_apy(apy) > 0

    def test_monotonic_non_decreasing(self):
        previous = daily_rate_from_apy(0)
        for apy in range(1, MAX_APY_BASIS_POINTS + 1):
            rate = daily_rate_from_apy(apy)
            assert rate >= previous
            previous = rate

    def test_negative_apy_raises(self):
        with pytest.raises(ValueError):
            daily_rate_from_apy(-1)


# ══════════════════════════════════════════════════════════════════════
#  COMPOUND GROWTH
# ══════════════════════════════════════════════════════════════════════


class TestCompoundGrowth:
    """compound_growth truncation and zero handling."""

    def test_zero_inputs(self):
        rate = daily_rate_from_apy(100)
        assert compound_growth(0, rate, 28) == 0
        assert compound_growth(PRINCIPAL, 0, 28) == 0
        assert compound_growth(PRINCIPAL, rate, 0) == 0

    def test_single_day_is_simple_interest(self):
        rate = daily_rate_from_apy(100)
        assert compound_growth(WAD, rate, 1) == rate

    def test_full_year_never_exceeds_apy(self):
        # (1 + r)^365 - 1 == 100% up to truncation, never above
        assert compound_growth(PRINCIPAL, daily_rate_from_apy(10000), 365) == PRINCIPAL - 1

    def test_negative_input_raises(self):
        with pytest.raises(ValueError):
            compound_growth(-1, 1, 1)


# ══════════════════════════════════════════════════════════════════════
#  INTEREST ENGINE
# ══════════════════════════════════════════════════════════════════════


class TestInterestEngine:
    """reward() and the cached engine."""

    def test_zero_days_or_principal(self):
        for apy in (0, 1, 100, 10000):
            assert reward(PRINCIPAL, apy, 0) == 0
            assert reward(0, apy, 28) == 0

    def test_zero_apy(self):
        assert reward(PRINCIPAL, 0, 365) == 0

    def test_one_percent_full_cycle(self):
        assert reward(PRINCIPAL, 100, 28) == 152720889

    def test_one_percent_clipped_cycle(self):
        assert reward(PRINCIPAL, 100, 21) == 114529737

    def test_small_amounts_round_down(self):
        assert reward(1, 10000, 365) == 0
        assert reward(1000, 10000, 28) == 54
        assert reward(PRINCIPAL, 1, 1) == 54791

    def test_ceiling_principal_is_exact_integer(self):
        assert reward(10 ** 30, 10000, 365) == 999999999999998917000000000000

    def test_deterministic(self):
        assert reward(PRINCIPAL, 1234, 28) == reward(PRINCIPAL, 1234, 28)

    def test_engine_matches_function(self):
        engine = InterestEngine()
        for apy in (0, 100, 1500, 600):
            assert engine.reward(PRINCIPAL, apy, 28) == reward(PRINCIPAL, apy, 28)

    def test_engine_zero_inputs(self):
        engine = InterestEngine()
        assert engine.reward(PRINCIPAL, 0, 28) == 0
        assert engine.reward(PRINCIPAL, 100, 0) == 0
        assert engine.reward(0, 100, 28) == 0

    def test_engine_caches_rate(self):
        engine = InterestEngine()
        first = engine.daily_rate(100)
        assert engine.daily_rate(100) == first
        assert 100 in engine._rates

    def test_engine_rejects_out_of_range_apy(self):
        engine = InterestEngine()
        with pytest.raises(ValueError):
            engine.daily_rate(MAX_APY_BASIS_POINTS + 1)

    def test_split_span_differs_from_single_span(self):
        """Two 28-day closes at different APYs vs one 56-day close at the second."""
        first = reward(PRINCIPAL, 100, 28)
        second = reward(PRINCIPAL + first, 500, 28)
        assert (first, second) == (152720889, 750536708)
        assert first + second == 903257597
        assert reward(PRINCIPAL, 500, 56) == 1502740295
        assert first + second != reward(PRINCIPAL, 500, 56)

    def test_decreasing_apy_split_beats_single_span(self):
        first = reward(PRINCIPAL, 1500, 28)
        second = reward(PRINCIPAL + first, 600, 28)
        assert first + second == 3061476735
        assert first + second > reward(PRINCIPAL, 600, 56) == 1795993482
