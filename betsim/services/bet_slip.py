"""
Bet slip: the selections a player is assembling before placing them.

A slip holds at most one selection per (match, market).  Picking the same
outcome again removes it; picking another outcome of the same market on
the same match replaces the old one.
"""

import logging
from typing import List, Optional, Union

from betsim.core.markets import MarketType, parse_market
from betsim.core.odds_math import combined_odds, payout
from betsim.models import BetSelection, Match

logger = logging.getLogger(__name__)


def build_selection(
    match: Match,
    market_type: Union[MarketType, str],
    label: str,
    odds: Optional[float] = None,
) -> BetSelection:
    """
    Create a selection on an UPCOMING match.

    The label is validated against its market here, so a bad label never
    reaches settlement.  Without explicit ``odds`` the match's published
    price is captured; the selection keeps that snapshot for good.

    Raises:
        ValueError: Unknown market/label, finished match, or no published
            price for the outcome and no ``odds`` given.
    """
    market = parse_market(market_type, label)
    if match.is_finished:
        raise ValueError(f"Match {match.id} ({match.label}) is finished; selections are closed")

    if odds is None:
        odds = match.price(market.market_type, market.label)
        if odds is None:
            raise ValueError(
                f"No {market.market_type.value} price for {market.label!r} on {match.label}"
            )
    return BetSelection(match=match, market=market, odds=float(odds))


class BetSlip:
    """Ordered, de-duplicated collection of selections."""

    def __init__(self):
        self._selections: List[BetSelection] = []

    def __len__(self) -> int:
        return len(self._selections)

    def __iter__(self):
        return iter(self._selections)

    @property
    def selections(self) -> List[BetSelection]:
        return list(self._selections)

    def toggle(self, selection: BetSelection) -> bool:
        """
        Add or remove ``selection``.

        Returns:
            True if the selection is on the slip afterwards.
        """
        if any(s.key == selection.key for s in self._selections):
            self.remove(selection)
            return False

        self._selections = [
            s for s in self._selections
            if not (s.match_id == selection.match_id and s.market_type is selection.market_type)
        ]
        self._selections.append(selection)
        return True

    def remove(self, selection: BetSelection) -> None:
        self._selections = [s for s in self._selections if s.key != selection.key]

    def clear(self) -> None:
        self._selections.clear()

    def combined_odds(self) -> float:
        """Multiple price of everything on the slip; 1.0 when empty."""
        if not self._selections:
            return 1.0
        return combined_odds([s.odds for s in self._selections])

    def potential_payout(self, stake: float) -> float:
        return payout(stake, self.combined_odds())
