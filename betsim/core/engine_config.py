"""Engine configuration: all tunable constants in one place.

This module is the **registry** for every constant used by the odds
generator, the match simulator and the credit ledger.  Nowhere else in the
codebase should base probabilities, margins, odds floors or credit amounts
be hard-coded.

Architecture
------------
:class:`EngineConfig` is a frozen dataclass carrying all constants.
:meth:`EngineConfig.default` returns the canonical values and
:meth:`EngineConfig.from_env` overlays a handful of environment variables
(read from ``.env`` via ``python-dotenv``).

Typical usage::

    from betsim.core.engine_config import EngineConfig

    cfg = EngineConfig.default()

    # Override a single constant for an experiment:
    from dataclasses import replace
    generous = replace(cfg, bookmaker_margin=1.02)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Final, Optional, Tuple

from dotenv import load_dotenv

#: Exact-score outcomes offered when goal markets are priced.
DEFAULT_EXACT_SCORES: Final[Tuple[str, ...]] = (
    "0-0", "1-0", "2-0", "2-1", "0-1", "0-2", "1-2", "1-1", "2-2",
)


@dataclass(frozen=True)
class EngineConfig:
    """Immutable configuration bundle for one betting session.

    Attributes:
        base_home_prob: Baseline home-win probability before the rating
            adjustment.  Encodes home advantage at rating parity.
        base_draw_prob: Baseline draw probability.  Never adjusted by
            ratings, only by normalisation.
        base_away_prob: Baseline away-win probability.
        rating_divisor: Combined-rating difference that shifts one full
            unit of probability from away to home.
        home_prob_bounds: Clamp applied to the adjusted home probability.
        away_prob_bounds: Clamp applied to the adjusted away probability.
        bookmaker_margin: Multiplier on normalised probabilities.  Values
            above 1.0 make implied probabilities sum past 100% (over-round).
        min_home_odds / min_draw_odds / min_away_odds: Decimal odds floors
            applied after rounding.
        odds_decimals: Rounding precision of published odds.

        --- Match simulation ---
        goal_chances: Independent scoring chances per side.
        base_goal_prob: Per-chance probability at attack == defence.
        goal_prob_scale: Rating gap divisor inside ``tanh``.
        goal_prob_amplitude: Maximum swing added by ``tanh``.
        goal_prob_bounds: Clamp on the per-chance probability.

        --- Ledger ---
        initial_credits: Opening balance of a session.
        top_up_amount: Credits granted by a top-up.
        top_up_threshold: Top-up only applies while balance is below this.

        --- Goal markets ---
        price_goal_markets: When True the fixture builder also attaches
            over/under and exact-score odds.
        exact_scores: Exact-score labels priced when goal markets are on.
        min_goal_market_odds: Floor on every goal-market price.

        seed: Optional RNG seed used when the caller does not inject a
            random source.  ``None`` for non-deterministic sessions.
    """

    # 1X2 odds
    base_home_prob: float = 0.42
    base_draw_prob: float = 0.28
    base_away_prob: float = 0.30
    rating_divisor: float = 150.0
    home_prob_bounds: Tuple[float, float] = (0.15, 0.85)
    away_prob_bounds: Tuple[float, float] = (0.10, 0.80)
    bookmaker_margin: float = 1.07
    min_home_odds: float = 1.15
    min_draw_odds: float = 1.80
    min_away_odds: float = 1.15
    odds_decimals: int = 2

    # Match simulation
    goal_chances: int = 15
    base_goal_prob: float = 0.10
    goal_prob_scale: float = 25.0
    goal_prob_amplitude: float = 0.15
    goal_prob_bounds: Tuple[float, float] = (0.05, 0.40)

    # Ledger
    initial_credits: int = 1000
    top_up_amount: int = 250
    top_up_threshold: int = 100

    # Goal markets
    price_goal_markets: bool = False
    exact_scores: Tuple[str, ...] = DEFAULT_EXACT_SCORES
    min_goal_market_odds: float = 1.01

    seed: Optional[int] = None

    # ------------------------------------------------------------------ #
    #  Named constructors                                                  #
    # ------------------------------------------------------------------ #

    @classmethod
    def default(cls) -> EngineConfig:
        """Return the canonical engine configuration."""
        return cls()

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Return the default configuration with environment overrides.

        Recognised variables::

            INITIAL_CREDITS      int
            TOP_UP_AMOUNT        int
            TOP_UP_THRESHOLD     int
            BOOKMAKER_MARGIN     float
            PRICE_GOAL_MARKETS   "true" / "false"
            SIM_SEED             int (unset = non-deterministic)
        """
        load_dotenv()
        cfg = cls.default()
        seed = os.getenv("SIM_SEED")
        return replace(
            cfg,
            initial_credits=int(os.getenv("INITIAL_CREDITS", str(cfg.initial_credits))),
            top_up_amount=int(os.getenv("TOP_UP_AMOUNT", str(cfg.top_up_amount))),
            top_up_threshold=int(os.getenv("TOP_UP_THRESHOLD", str(cfg.top_up_threshold))),
            bookmaker_margin=float(os.getenv("BOOKMAKER_MARGIN", str(cfg.bookmaker_margin))),
            price_goal_markets=os.getenv("PRICE_GOAL_MARKETS", "false").lower() == "true",
            seed=int(seed) if seed else None,
        )

    # ------------------------------------------------------------------ #
    #  Convenience accessors                                               #
    # ------------------------------------------------------------------ #

    @property
    def max_score(self) -> int:
        """Upper bound on a single side's simulated score."""
        return self.goal_chances

    def __repr__(self) -> str:
        return (
            f"EngineConfig(margin={self.bookmaker_margin}, "
            f"chances={self.goal_chances}, "
            f"credits={self.initial_credits}, "
            f"goal_markets={self.price_goal_markets})"
        )
