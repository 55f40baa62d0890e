"""
Domain model for the virtual betting engine.

In-memory dataclasses for teams, matches, selections and bets.  All four
are frozen: lifecycle transitions (a match finishing, a bet settling)
return a new object, so an earlier snapshot held by a selection or a
caller can never change underneath it.
"""

import math
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from betsim.core.markets import Market, MarketType
from betsim.core.odds_math import combined_odds, payout


def new_id() -> str:
    """Fresh unique identifier for a match or a bet."""
    return uuid.uuid4().hex


class MatchStatus(str, Enum):
    UPCOMING = "UPCOMING"
    FINISHED = "FINISHED"


class BetStatus(str, Enum):
    ACTIVE = "ACTIVE"
    WON = "WON"
    LOST = "LOST"


# ---------------------------------------------------------------------------
# Teams and matches
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Team:
    """A fictional team with attack and defence ratings."""

    id: str
    name: str
    attack: float
    defense: float
    logo: str = ""

    def __post_init__(self) -> None:
        for rating_name in ("attack", "defense"):
            value = getattr(self, rating_name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(
                    f"Team {self.id!r}: {rating_name} must be positive and finite, got {value!r}."
                )

    @property
    def strength(self) -> float:
        """Combined rating used by the odds generator."""
        return self.attack + self.defense


@dataclass(frozen=True)
class Match:
    """
    A fixture between a home and an away team.

    ``odds`` maps each priced market to its outcome prices and is fixed at
    creation.  Scores are set iff ``status`` is FINISHED.
    """

    id: str
    home: Team
    away: Team
    odds: Mapping[MarketType, Mapping[str, float]] = field(default_factory=dict)
    status: MatchStatus = MatchStatus.UPCOMING
    home_score: Optional[int] = None
    away_score: Optional[int] = None

    def __post_init__(self) -> None:
        has_scores = self.home_score is not None and self.away_score is not None
        if (self.status is MatchStatus.FINISHED) != has_scores:
            raise ValueError(f"Match {self.id}: scores must be present iff the match is FINISHED.")
        frozen_odds = MappingProxyType({
            MarketType(market): MappingProxyType(dict(prices)) for market, prices in self.odds.items()
        })
        object.__setattr__(self, "odds", frozen_odds)

    @property
    def is_finished(self) -> bool:
        return self.status is MatchStatus.FINISHED

    @property
    def label(self) -> str:
        return f"{self.home.name} vs {self.away.name}"

    def price(self, market_type: MarketType, label: str) -> Optional[float]:
        """Published odds of one outcome, or None if not priced."""
        return self.odds.get(market_type, {}).get(label)

    def finish(self, home_score: int, away_score: int) -> "Match":
        """Return the FINISHED copy of this match with its final score."""
        if self.is_finished:
            raise ValueError(f"Match {self.id} is already finished.")
        if home_score < 0 or away_score < 0:
            raise ValueError(f"Scores cannot be negative: {home_score}-{away_score}.")
        return replace(
            self,
            status=MatchStatus.FINISHED,
            home_score=int(home_score),
            away_score=int(away_score),
        )


# ---------------------------------------------------------------------------
# Selections and bets
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BetSelection:
    """One leg: a market outcome on a match at the odds captured when picked."""

    match: Match
    market: Market
    odds: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.odds) or self.odds < 1.0:
            raise ValueError(f"Selection odds must be finite and ≥ 1.0, got {self.odds!r}.")

    @property
    def match_id(self) -> str:
        return self.match.id

    @property
    def market_type(self) -> MarketType:
        return self.market.market_type

    @property
    def label(self) -> str:
        return self.market.label

    @property
    def key(self) -> str:
        """Slip identity, also the key of a single-bet stake map."""
        return f"{self.match.id}-{self.market_type.value}-{self.label}"


@dataclass(frozen=True)
class Bet:
    """A placed wager: one leg is a single, several legs a multiple."""

    selections: Tuple[BetSelection, ...]
    stake: int
    odds: float
    status: BetStatus = BetStatus.ACTIVE
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if not self.selections:
            raise ValueError("A bet needs at least one selection.")
        if self.stake <= 0:
            raise ValueError(f"Stake must be positive, got {self.stake!r}.")

    @classmethod
    def from_selections(cls, selections, stake: int) -> "Bet":
        """Build an ACTIVE bet whose odds are the product of its legs."""
        legs = tuple(selections)
        return cls(
            selections=legs,
            stake=stake,
            odds=combined_odds([s.odds for s in legs]),
        )

    @property
    def is_multiple(self) -> bool:
        return len(self.selections) > 1

    @property
    def is_settled(self) -> bool:
        return self.status is not BetStatus.ACTIVE

    @property
    def payout(self) -> float:
        """Potential (or, once WON, actual) gross return."""
        return payout(self.stake, self.odds)

    @property
    def display_odds(self) -> float:
        return round(self.odds, 2)

    def settle(self, status: BetStatus) -> "Bet":
        """Return the settled copy of this bet.  Only ACTIVE bets settle."""
        if self.is_settled:
            raise ValueError(f"Bet {self.id} is already settled as {self.status.value}.")
        if status is BetStatus.ACTIVE:
            raise ValueError("A bet can only settle to WON or LOST.")
        return replace(self, status=status)
