"""
Tests for betsim/core/odds_math.py

Run with: pytest tests/test_odds_math.py -v
"""

import math

import pytest

from betsim.core.odds_math import (
    apply_margin,
    clamp,
    combined_odds,
    implied_prob,
    is_unit_sum,
    normalize,
    overround,
    payout,
    prob_to_decimal,
    round_odds,
    to_credits,
)


class TestClampAndNormalize:

    @pytest.mark.parametrize("value,expected", [(-1.0, 0.15), (0.5, 0.5), (0.99, 0.85)])
    def test_clamp(self, value, expected):
        assert clamp(value, 0.15, 0.85) == expected

    def test_clamp_rejects_inverted_bounds(self):
        with pytest.raises(ValueError):
            clamp(0.5, 0.9, 0.1)

    def test_normalize_sums_to_one(self):
        probs = normalize([0.5, 0.28, 0.30])
        assert is_unit_sum(probs)
        assert probs[0] == pytest.approx(0.5 / 1.08)

    def test_normalize_rejects_zero_sum(self):
        with pytest.raises(ValueError):
            normalize([0.0, 0.0])

    def test_normalize_rejects_negative(self):
        with pytest.raises(ValueError):
            normalize([0.6, -0.1])


class TestPricing:
    """Probability to price conversions."""

    def test_apply_margin_scales_every_outcome(self):
        booked = apply_margin([0.42, 0.28, 0.30], 1.07)
        assert sum(booked) == pytest.approx(1.07)
        assert booked[0] == pytest.approx(0.4494)

    def test_prob_to_decimal(self):
        assert prob_to_decimal(0.5) == pytest.approx(2.0)
        assert prob_to_decimal(0.25) == pytest.approx(4.0)

    @pytest.mark.parametrize("prob", [0.0, -0.2, math.inf, math.nan])
    def test_prob_to_decimal_rejects_bad_probability(self, prob):
        with pytest.raises(ValueError):
            prob_to_decimal(prob)

    def test_implied_prob(self):
        assert implied_prob(2.5) == pytest.approx(0.4)

    def test_implied_prob_rejects_sub_unit_odds(self):
        with pytest.raises(ValueError):
            implied_prob(0.9)

    def test_overround_of_default_book(self):
        # 2.23 / 3.34 / 3.12 is the parity book with the 7% margin.
        assert overround([2.23, 3.34, 3.12]) == pytest.approx(0.0683, abs=0.001)

    def test_round_odds_rounds_then_floors(self):
        assert round_odds(2.2252) == 2.23
        assert round_odds(1.149, floor=1.15) == 1.15
        assert round_odds(1.05, floor=1.15) == 1.15
        assert round_odds(1.7, floor=1.80) == 1.80


class TestMultiplesAndPayouts:

    def test_combined_odds_example(self):
        assert combined_odds([2.10, 1.85, 3.40]) == pytest.approx(13.209)

    def test_combined_odds_single_leg(self):
        assert combined_odds([2.5]) == 2.5

    def test_combined_odds_is_not_rounded(self):
        assert combined_odds([1.11, 1.11]) == pytest.approx(1.2321)

    def test_combined_odds_rejects_empty(self):
        with pytest.raises(ValueError):
            combined_odds([])

    def test_combined_odds_rejects_sub_unit_leg(self):
        with pytest.raises(ValueError):
            combined_odds([2.0, 0.95])

    def test_payout(self):
        assert payout(100, 13.209) == pytest.approx(1320.9)

    @pytest.mark.parametrize("amount,expected", [
        (210.00000000000003, 210),
        (1320.9, 1321),
        (1320.5, 1321),
        (1320.49, 1320),
        (0.0, 0),
    ])
    def test_to_credits_rounds_half_up(self, amount, expected):
        assert to_credits(amount) == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
