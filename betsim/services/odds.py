"""
Odds generation from team ratings.

The 1X2 market is priced from the combined-rating gap between the two
teams on top of a home-favouring baseline (42% / 28% / 30%).  The steps
are, in order:

    1. shift ``rating_diff / 150`` of probability from away to home
    2. clamp home to [0.15, 0.85] and away to [0.10, 0.80]
    3. normalise the three outcomes to a unit sum
    4. inflate by the 7% bookmaker margin
    5. invert to decimal odds, round to 2 dp, apply the odds floors

Clamping happens before normalisation, so a lopsided matchup still ends
up with a book that sums to exactly one before the margin.

Goal markets (over/under 2.5 and exact score) are priced only when the
config asks for them.  They reuse the match simulator's per-chance
probabilities: each side's goals are Binomial(chances, p), so the fair
probabilities are exact rather than sampled.
"""

import logging
from typing import Dict, Optional

import numpy as np
from scipy.stats import binom

from betsim.core.engine_config import EngineConfig
from betsim.core.markets import OVER_UNDER_LINE, MarketType, OneXTwoOutcome, OverUnderOutcome, parse_market
from betsim.core.odds_math import apply_margin, clamp, normalize, prob_to_decimal, round_odds
from betsim.models import Team
from betsim.services.match_sim import goal_probability

logger = logging.getLogger(__name__)


def one_x_two_probabilities(home: Team, away: Team, config: Optional[EngineConfig] = None) -> Dict[str, float]:
    """Fair (margin-free) 1X2 probabilities, summing to 1."""
    cfg = config or EngineConfig.default()

    rating_diff = home.strength - away.strength
    adjustment = rating_diff / cfg.rating_divisor

    prob_home = clamp(cfg.base_home_prob + adjustment, *cfg.home_prob_bounds)
    prob_draw = cfg.base_draw_prob
    prob_away = clamp(cfg.base_away_prob - adjustment, *cfg.away_prob_bounds)

    prob_home, prob_draw, prob_away = normalize([prob_home, prob_draw, prob_away])
    return {
        OneXTwoOutcome.HOME.value: prob_home,
        OneXTwoOutcome.DRAW.value: prob_draw,
        OneXTwoOutcome.AWAY.value: prob_away,
    }


def generate_1x2_odds(home: Team, away: Team, config: Optional[EngineConfig] = None) -> Dict[str, float]:
    """
    Decimal 1X2 odds for ``home`` vs ``away``.

    Deterministic in the two teams' ratings.  Every price is finite and at
    or above its floor (1.15 home, 1.80 draw, 1.15 away by default).

    Returns:
        ``{"home": ..., "draw": ..., "away": ...}``
    """
    cfg = config or EngineConfig.default()
    fair = one_x_two_probabilities(home, away, cfg)
    labels = list(fair)
    booked = apply_margin([fair[label] for label in labels], cfg.bookmaker_margin)

    floors = {
        OneXTwoOutcome.HOME.value: cfg.min_home_odds,
        OneXTwoOutcome.DRAW.value: cfg.min_draw_odds,
        OneXTwoOutcome.AWAY.value: cfg.min_away_odds,
    }
    return {
        label: round_odds(prob_to_decimal(prob), cfg.odds_decimals, floors[label])
        for label, prob in zip(labels, booked)
    }


def _goal_pmfs(home: Team, away: Team, cfg: EngineConfig):
    goals = np.arange(cfg.goal_chances + 1)
    home_pmf = binom.pmf(goals, cfg.goal_chances, goal_probability(home.attack, away.defense, cfg))
    away_pmf = binom.pmf(goals, cfg.goal_chances, goal_probability(away.attack, home.defense, cfg))
    return home_pmf, away_pmf


def generate_goal_market_odds(
    home: Team,
    away: Team,
    config: Optional[EngineConfig] = None,
) -> Dict[MarketType, Dict[str, float]]:
    """
    Over/under and exact-score odds from the binomial goal model.

    Exact-score prices cover only the configured score labels, so that
    book does not sum to one and is not normalised.
    """
    cfg = config or EngineConfig.default()
    home_pmf, away_pmf = _goal_pmfs(home, away, cfg)
    joint = np.outer(home_pmf, away_pmf)
    totals = np.add.outer(np.arange(len(home_pmf)), np.arange(len(away_pmf)))

    prob_over = float(joint[totals > OVER_UNDER_LINE].sum())
    prob_under = float(joint[totals < OVER_UNDER_LINE].sum())
    prob_over, prob_under = normalize([prob_over, prob_under])
    booked_over, booked_under = apply_margin([prob_over, prob_under], cfg.bookmaker_margin)

    def publish(prob: float) -> float:
        return round_odds(prob_to_decimal(prob), cfg.odds_decimals, cfg.min_goal_market_odds)

    exact: Dict[str, float] = {}
    for label in cfg.exact_scores:
        score = parse_market(MarketType.EXACT_SCORE, label)
        if score.home > cfg.goal_chances or score.away > cfg.goal_chances:
            continue
        prob = float(joint[score.home, score.away]) * cfg.bookmaker_margin
        exact[score.label] = publish(prob)

    return {
        MarketType.OVER_UNDER: {
            OverUnderOutcome.OVER.value: publish(booked_over),
            OverUnderOutcome.UNDER.value: publish(booked_under),
        },
        MarketType.EXACT_SCORE: exact,
    }


def generate_match_odds(
    home: Team,
    away: Team,
    config: Optional[EngineConfig] = None,
) -> Dict[MarketType, Dict[str, float]]:
    """Full odds mapping attached to a new match."""
    cfg = config or EngineConfig.default()
    odds: Dict[MarketType, Dict[str, float]] = {
        MarketType.ONE_X_TWO: generate_1x2_odds(home, away, cfg),
    }
    if cfg.price_goal_markets:
        odds.update(generate_goal_market_odds(home, away, cfg))
    logger.debug("Priced %s vs %s: %s", home.name, away.name, odds[MarketType.ONE_X_TWO])
    return odds
