"""
Pydantic request/response schemas for the Virtual Bet Simulator API.

Domain objects are frozen dataclasses that nest whole matches inside
selections; the response schemas flatten them to ids and plain values so
the display layer never has to understand the engine's object graph.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from betsim.core.markets import MarketType, parse_market
from betsim.models import Bet, BetSelection, Match, Team
from betsim.services.ledger import LedgerState, PlacementResult, RoundResult, TopUpResult

StakeValue = Union[int, float, str]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class SelectionIn(BaseModel):
    """One outcome picked by the player."""

    match_id: str = Field(..., min_length=1)
    market_type: MarketType = Field(MarketType.ONE_X_TWO, description='"1X2", "Exact Score" or "Over/Under 2.5"')
    label: str = Field(..., min_length=1, max_length=20, description='e.g. "home", "2-1", "Over"')

    @field_validator("label")
    @classmethod
    def strip_label(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def validate_label_for_market(self) -> "SelectionIn":
        # Raises ValueError (422) for a label the market cannot settle.
        parse_market(self.market_type, self.label)
        return self

    model_config = {
        "json_schema_extra": {
            "example": {"match_id": "3f2c9e0a5b7d4e1f8a6b2c4d9e0f1a2b", "market_type": "1X2", "label": "home"}
        }
    }


class SingleBetsRequest(BaseModel):
    """
    Payload for POST /api/bets/single.

    ``stakes`` is keyed by selection key (``<match_id>-<market>-<label>``).
    Selections without a stake are ignored.  Stakes that are not positive
    whole numbers are reported back in ``invalid_keys`` instead of failing
    the request.
    """

    selections: List[SelectionIn] = Field(default_factory=list)
    stakes: Dict[str, StakeValue] = Field(default_factory=dict)

    @field_validator("stakes", mode="before")
    @classmethod
    def drop_blank_stakes(cls, v):
        if isinstance(v, dict):
            # Booleans would coerce to 0/1 credits; keep them as text so the
            # ledger reports them as invalid stakes.
            return {
                k: str(s).lower() if isinstance(s, bool) else s
                for k, s in v.items()
                if s is not None and s != ""
            }
        return v


class MultipleBetRequest(BaseModel):
    """Payload for POST /api/bets/multiple: every selection becomes a leg."""

    selections: List[SelectionIn] = Field(default_factory=list)
    stake: StakeValue

    @field_validator("stake", mode="before")
    @classmethod
    def reject_non_scalar_stake(cls, v):
        if isinstance(v, bool):
            raise ValueError("stake must be a number of credits")
        if isinstance(v, str):
            return v.strip()
        return v


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class TeamOut(BaseModel):
    id: str
    name: str
    attack: float
    defense: float
    logo: str = ""

    @classmethod
    def from_team(cls, team: Team) -> "TeamOut":
        return cls(id=team.id, name=team.name, attack=team.attack, defense=team.defense, logo=team.logo)


class MatchOut(BaseModel):
    id: str
    home: TeamOut
    away: TeamOut
    status: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    odds: Dict[str, Dict[str, float]]

    @classmethod
    def from_match(cls, match: Match) -> "MatchOut":
        return cls(
            id=match.id,
            home=TeamOut.from_team(match.home),
            away=TeamOut.from_team(match.away),
            status=match.status.value,
            home_score=match.home_score,
            away_score=match.away_score,
            odds={market.value: dict(prices) for market, prices in match.odds.items()},
        )


class SelectionOut(BaseModel):
    key: str
    match_id: str
    match_label: str
    market_type: str
    label: str
    odds: float

    @classmethod
    def from_selection(cls, selection: BetSelection) -> "SelectionOut":
        return cls(
            key=selection.key,
            match_id=selection.match_id,
            match_label=selection.match.label,
            market_type=selection.market_type.value,
            label=selection.label,
            odds=selection.odds,
        )


class BetOut(BaseModel):
    id: str
    selections: List[SelectionOut]
    stake: int
    odds: float
    display_odds: float
    potential_payout: float
    status: str
    is_multiple: bool

    @classmethod
    def from_bet(cls, bet: Bet) -> "BetOut":
        return cls(
            id=bet.id,
            selections=[SelectionOut.from_selection(s) for s in bet.selections],
            stake=bet.stake,
            odds=bet.odds,
            display_odds=bet.display_odds,
            potential_payout=round(bet.payout, 2),
            status=bet.status.value,
            is_multiple=bet.is_multiple,
        )


class PlacementResponse(BaseModel):
    placed: List[BetOut]
    rejection: Optional[str] = None
    invalid_keys: List[str] = Field(default_factory=list)
    total_stake: int = 0
    balance: int

    @classmethod
    def from_result(cls, result: PlacementResult, balance: int) -> "PlacementResponse":
        return cls(
            placed=[BetOut.from_bet(b) for b in result.applied],
            rejection=result.rejection.value if result.rejection else None,
            invalid_keys=result.invalid_keys,
            total_stake=result.total_stake,
            balance=balance,
        )


class RoundResponse(BaseModel):
    """Payload of POST /api/rounds/simulate."""

    stale: bool
    matches: List[MatchOut]
    settled: List[BetOut]
    credits_delta: int
    balance: int

    @classmethod
    def from_result(cls, result: RoundResult, balance: int) -> "RoundResponse":
        return cls(
            stale=result.stale,
            matches=[MatchOut.from_match(m) for m in result.matches],
            settled=[BetOut.from_bet(b) for b in result.settled],
            credits_delta=result.credits_delta,
            balance=balance,
        )


class TopUpResponse(BaseModel):
    applied: bool
    amount: int
    balance: int

    @classmethod
    def from_result(cls, result: TopUpResult) -> "TopUpResponse":
        return cls(applied=result.applied, amount=result.amount, balance=result.balance)


class StateResponse(BaseModel):
    balance: int
    exposure: int
    upcoming_matches: List[MatchOut]
    finished_matches: List[MatchOut]
    active_bets: List[BetOut]
    settled_bets: List[BetOut]

    @classmethod
    def from_state(cls, state: LedgerState) -> "StateResponse":
        return cls(
            balance=state.balance,
            exposure=state.exposure,
            upcoming_matches=[MatchOut.from_match(m) for m in state.upcoming_matches],
            finished_matches=[MatchOut.from_match(m) for m in state.finished_matches],
            active_bets=[BetOut.from_bet(b) for b in state.active_bets],
            settled_bets=[BetOut.from_bet(b) for b in state.settled_bets],
        )


class CommentaryResponse(BaseModel):
    match_id: str
    commentary: str
