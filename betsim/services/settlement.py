"""
Bet settlement against finished matches.

Pure functions: no ledger state.  The ledger feeds in its bets and the
updated match set and applies the returned statuses and credit delta.

Rules
-----
A leg is PENDING while its match is UPCOMING (or not in the match set),
otherwise WON or LOST according to its market.  Settlement is
all-or-nothing per bet:

    any leg PENDING           → bet stays ACTIVE
    all decided, any LOST     → LOST
    all decided, all WON      → WON, payout credited once

Only ACTIVE bets are evaluated, so running settlement again over the same
bets and matches changes nothing.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

from betsim.core.odds_math import to_credits
from betsim.models import Bet, BetSelection, BetStatus, Match

logger = logging.getLogger(__name__)


class LegOutcome(str, Enum):
    WON = "WON"
    LOST = "LOST"
    PENDING = "PENDING"


@dataclass
class BetEvaluation:
    """Leg-by-leg verdict for one bet."""

    status: BetStatus
    legs: List[LegOutcome]


@dataclass
class SettlementResult:
    """Bets after settlement plus the credits owed to the balance."""

    bets: List[Bet]
    settled: List[Bet] = field(default_factory=list)
    credits_delta: int = 0

    @property
    def won(self) -> List[Bet]:
        return [b for b in self.settled if b.status is BetStatus.WON]

    @property
    def lost(self) -> List[Bet]:
        return [b for b in self.settled if b.status is BetStatus.LOST]


def evaluate_leg(selection: BetSelection, match: Optional[Match]) -> LegOutcome:
    """Outcome of one leg given the current state of its match."""
    if match is None or not match.is_finished:
        return LegOutcome.PENDING
    won = selection.market.evaluate(match.home_score, match.away_score)
    return LegOutcome.WON if won else LegOutcome.LOST


def evaluate_bet(bet: Bet, matches_by_id: Mapping[str, Match]) -> BetEvaluation:
    """Evaluate every leg and derive the bet's status."""
    legs = [evaluate_leg(s, matches_by_id.get(s.match_id)) for s in bet.selections]

    if LegOutcome.PENDING in legs:
        status = BetStatus.ACTIVE
    elif LegOutcome.LOST in legs:
        status = BetStatus.LOST
    else:
        status = BetStatus.WON
    return BetEvaluation(status=status, legs=legs)


def settle_bets(bets: Iterable[Bet], matches: Iterable[Match]) -> SettlementResult:
    """
    Settle every ACTIVE bet whose legs are all decided.

    Args:
        bets: All bets of the session; settled ones pass through untouched.
        matches: The complete, already updated match set.

    Returns:
        :class:`SettlementResult` with the bets in their original order,
        the ones settled by this call, and the whole-credit winnings.
    """
    matches_by_id: Dict[str, Match] = {m.id: m for m in matches}
    result = SettlementResult(bets=[])

    for bet in bets:
        if bet.is_settled:
            result.bets.append(bet)
            continue

        evaluation = evaluate_bet(bet, matches_by_id)
        if evaluation.status is BetStatus.ACTIVE:
            result.bets.append(bet)
            continue

        settled = bet.settle(evaluation.status)
        result.bets.append(settled)
        result.settled.append(settled)

        if settled.status is BetStatus.WON:
            winnings = to_credits(settled.payout)
            result.credits_delta += winnings
            logger.info("WIN: bet %s (%d legs @ %.2f) | +%d credits",
                        settled.id, len(settled.selections), settled.odds, winnings)
        else:
            logger.info("LOSS: bet %s (%d legs @ %.2f) | stake %d",
                        settled.id, len(settled.selections), settled.odds, settled.stake)

    return result
