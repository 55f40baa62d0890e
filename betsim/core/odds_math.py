"""Fundamental odds mathematics: the single source of truth.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never reimplement locally in services.

The pillars exposed are:

1. **Probability shaping**: clamping and normalisation to a unit sum.
2. **Margin**: the bookmaker over-round applied to fair probabilities.
3. **Odds conversion**: probability ↔ decimal odds, with rounding and
   floors for published prices.
4. **Parlays**: combined decimal odds and payouts of multi-leg tickets.

Design decisions
----------------
* All odds are **decimal** (European).  A price of 2.10 returns 2.10
  credits per credit staked, stake included.
* The margin is applied multiplicatively to every outcome rather than by
  Shin or power methods.  The engine only *publishes* prices; it never
  needs to recover true probabilities from a market.
* Combined odds of a parlay are kept unrounded.  Rounding is a display
  concern (:func:`round_odds`), and rounding each intermediate product
  would drift the payout of long tickets.
* Credit amounts are whole numbers.  :func:`to_credits` rounds half-up so
  that a payout of 1320.5 credits pays 1321, never 1320.

Run tests with::

    pytest tests/test_odds_math.py -v
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Final, Iterable, Sequence, Tuple

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: Decimal odds can never be below even-stake return.
_MIN_DECIMAL_ODDS: Final[float] = 1.0

#: Tolerance used when checking that probabilities sum to one.
_UNIT_SUM_TOL: Final[float] = 1e-9


# ---------------------------------------------------------------------------
# Probability shaping
# ---------------------------------------------------------------------------


def clamp(value: float, lower: float, upper: float) -> float:
    """Restrict ``value`` to the closed interval ``[lower, upper]``.

    Raises:
        ValueError: If ``lower > upper``.
    """
    if lower > upper:
        raise ValueError(f"Invalid clamp bounds [{lower!r}, {upper!r}].")
    return max(lower, min(upper, value))


def normalize(probs: Sequence[float]) -> Tuple[float, ...]:
    """Scale non-negative weights so that they sum to exactly 1.

    Args:
        probs: Raw probabilities (or any non-negative weights).

    Returns:
        Tuple of the same length whose elements sum to 1.0.

    Raises:
        ValueError: If any weight is negative or the total is not positive.

    Examples::

        normalize([0.85, 0.28, 0.10]) → (0.6911, 0.2276, 0.0813)
    """
    if any(p < 0.0 for p in probs):
        raise ValueError(f"Probabilities must be non-negative, got {list(probs)!r}.")
    total = math.fsum(probs)
    if total <= 0.0:
        raise ValueError("Cannot normalise probabilities with a non-positive sum.")
    return tuple(p / total for p in probs)


def apply_margin(probs: Sequence[float], margin: float) -> Tuple[float, ...]:
    """Inflate fair probabilities by the bookmaker margin.

    With ``margin = 1.07`` a fair book summing to 1.0 becomes a book whose
    implied probabilities sum to 1.07, i.e. a 7% over-round.

    Raises:
        ValueError: If ``margin`` is not positive.
    """
    if margin <= 0.0:
        raise ValueError(f"Margin must be positive, got {margin!r}.")
    return tuple(p * margin for p in probs)


# ---------------------------------------------------------------------------
# Odds conversion
# ---------------------------------------------------------------------------


def prob_to_decimal(prob: float) -> float:
    """Convert a (possibly margin-inflated) probability to decimal odds.

    Args:
        prob: Probability in ``(0, ∞)``.  Margin-inflated probabilities may
            exceed 1.0 for extreme favourites, which yields odds below 1.0;
            callers floor the published price.

    Raises:
        ValueError: If ``prob <= 0`` or is not finite.
    """
    if not math.isfinite(prob) or prob <= 0.0:
        raise ValueError(f"Probability must be positive and finite, got {prob!r}.")
    return 1.0 / prob


def implied_prob(decimal_odds: float) -> float:
    """Implied probability of a decimal price (margin included).

    Raises:
        ValueError: If ``decimal_odds < 1.0``.

    Examples::

        implied_prob(2.00) → 0.5000
        implied_prob(3.34) → 0.2994
    """
    if decimal_odds < _MIN_DECIMAL_ODDS:
        raise ValueError(f"Decimal odds {decimal_odds!r} must be ≥ 1.0.")
    return 1.0 / decimal_odds


def overround(prices: Iterable[float]) -> float:
    """Book over-round: sum of implied probabilities minus one.

    A positive value is the bookmaker's structural edge.
    """
    return math.fsum(implied_prob(p) for p in prices) - 1.0


def round_odds(odds: float, decimals: int = 2, floor: float = _MIN_DECIMAL_ODDS) -> float:
    """Round a price for publication, then apply a minimum.

    The order matters: rounding first means a raw 1.149 rounds to 1.15 and
    survives a 1.15 floor unchanged.
    """
    return max(floor, round(odds, decimals))


def is_unit_sum(probs: Iterable[float], tol: float = _UNIT_SUM_TOL) -> bool:
    """Return True when ``probs`` sums to 1.0 within ``tol``."""
    return abs(math.fsum(probs) - 1.0) <= tol


# ---------------------------------------------------------------------------
# Parlays and payouts
# ---------------------------------------------------------------------------


def combined_odds(leg_odds: Sequence[float]) -> float:
    """Decimal odds of a multiple: the product of every leg's price.

    Raises:
        ValueError: If ``leg_odds`` is empty or any price is below 1.0.

    Examples::

        combined_odds([2.10, 1.85, 3.40]) → 13.209
    """
    if not leg_odds:
        raise ValueError("A multiple needs at least one leg.")
    result = 1.0
    for price in leg_odds:
        if price < _MIN_DECIMAL_ODDS:
            raise ValueError(f"Leg odds {price!r} must be ≥ 1.0.")
        result *= price
    return result


def payout(stake: float, decimal_odds: float) -> float:
    """Gross return of a winning ticket (stake included)."""
    return stake * decimal_odds


def to_credits(amount: float) -> int:
    """Round a credit amount half-up to a whole credit.

    ``Decimal(repr(...))`` avoids binary artefacts such as
    ``100 * 2.1 == 210.00000000000003``.
    """
    return int(Decimal(repr(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
