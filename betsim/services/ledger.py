"""
Credit ledger and round lifecycle for one betting session.

The ledger owns the three pieces of shared mutable state: the match
collection, the bet collection and the credit balance.  They only change
through the operations below, and a simulated round replaces all three in
a single commit step (:meth:`BetLedger.apply_round`), so a snapshot never
shows finished matches next to unsettled bets that should have settled.

    new_round()          → fixtures for every team in the catalog
    place_single_bets()  → one bet per staked selection, atomic debit
    place_multiple_bet() → one parlay over all selections
    simulate_round()     → score every upcoming match, then settle
    top_up()             → free credits while the balance is low

Invalid user input is never raised: placements return a
:class:`PlacementResult` whose ``rejection`` says why nothing happened.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np

from betsim.core.engine_config import EngineConfig
from betsim.core.sim_interface import BaseMatchSimulator
from betsim.models import Bet, BetSelection, BetStatus, Match, Team
from betsim.services.fixtures import generate_fixtures
from betsim.services.match_sim import MatchSimulator
from betsim.services.ratings import RatingsStore, get_ratings_store
from betsim.services.settlement import settle_bets

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class Rejection(str, Enum):
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    INVALID_STAKE = "INVALID_STAKE"
    EMPTY_SELECTION = "EMPTY_SELECTION"
    DUPLICATE_MATCH = "DUPLICATE_MATCH"
    MATCH_CLOSED = "MATCH_CLOSED"


@dataclass
class PlacementResult:
    """Outcome of a placement request."""

    applied: List[Bet] = field(default_factory=list)
    rejection: Optional[Rejection] = None
    invalid_keys: List[str] = field(default_factory=list)
    total_stake: int = 0

    @property
    def ok(self) -> bool:
        return self.rejection is None


@dataclass
class RoundResult:
    """Matches and bets after a simulated round, plus winnings credited."""

    matches: List[Match]
    bets: List[Bet]
    credits_delta: int = 0
    settled: List[Bet] = field(default_factory=list)
    stale: bool = False


@dataclass
class TopUpResult:
    applied: bool
    amount: int
    balance: int


@dataclass
class LedgerState:
    """Read-only snapshot of a session."""

    balance: int
    upcoming_matches: List[Match]
    finished_matches: List[Match]
    active_bets: List[Bet]
    settled_bets: List[Bet]

    @property
    def exposure(self) -> int:
        """Credits currently staked on ACTIVE bets."""
        return sum(b.stake for b in self.active_bets)


def parse_stake(value: Any) -> Optional[int]:
    """
    Whole-credit stake from user input, or None if it is not a positive
    whole number.  Accepts ints, integral floats and digit strings.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        stake = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        stake = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        stake = int(value.strip())
    else:
        return None
    return stake if stake > 0 else None


# ---------------------------------------------------------------------------
# Round runner (pure)
# ---------------------------------------------------------------------------

def simulate_round(
    matches: Sequence[Match],
    bets: Sequence[Bet],
    simulator: BaseMatchSimulator,
) -> RoundResult:
    """
    Score every UPCOMING match, then settle against the full updated set.

    With no UPCOMING match the round is stale: inputs come back unchanged.
    """
    upcoming = [m for m in matches if not m.is_finished]
    if not upcoming:
        logger.info("No upcoming matches; nothing to simulate")
        return RoundResult(matches=list(matches), bets=list(bets), stale=True)

    finished: Dict[str, Match] = {}
    for match in upcoming:
        score = simulator.simulate(match.home, match.away)
        finished[match.id] = match.finish(score.home_score, score.away_score)
        logger.info("FT: %s %d - %d %s", match.home.name, score.home_score, score.away_score, match.away.name)

    updated = [finished.get(m.id, m) for m in matches]
    settlement = settle_bets(bets, updated)

    return RoundResult(
        matches=updated,
        bets=settlement.bets,
        credits_delta=settlement.credits_delta,
        settled=settlement.settled,
    )


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

class BetLedger:
    """
    Session state: balance, matches and bets.

    The random source is shared by fixture generation and the default
    simulator, so one seed reproduces a whole session.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        simulator: Optional[BaseMatchSimulator] = None,
        ratings: Optional[RatingsStore] = None,
        rng: Optional[np.random.Generator] = None,
        balance: Optional[int] = None,
        matches: Optional[Iterable[Match]] = None,
    ):
        self.config = config or EngineConfig.default()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        if simulator is None:
            simulator = MatchSimulator(self.config, rng=self.rng)
        if not isinstance(simulator, BaseMatchSimulator):
            raise TypeError(f"simulator must be a BaseMatchSimulator, got {type(simulator).__name__}")
        self.simulator = simulator
        self.ratings = ratings if ratings is not None else get_ratings_store()

        self.balance: int = self.config.initial_credits if balance is None else int(balance)
        if self.balance < 0:
            raise ValueError(f"Opening balance cannot be negative, got {self.balance}")

        self._matches: List[Match] = list(matches or [])
        self._bets: List[Bet] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def matches(self) -> List[Match]:
        return list(self._matches)

    @property
    def bets(self) -> List[Bet]:
        return list(self._bets)

    @property
    def upcoming_matches(self) -> List[Match]:
        return [m for m in self._matches if not m.is_finished]

    def get_match(self, match_id: str) -> Match:
        for match in self._matches:
            if match.id == match_id:
                return match
        raise KeyError(f"Unknown match id {match_id!r}")

    def get_state(self) -> LedgerState:
        return LedgerState(
            balance=self.balance,
            upcoming_matches=self.upcoming_matches,
            finished_matches=[m for m in self._matches if m.is_finished],
            active_bets=[b for b in self._bets if b.status is BetStatus.ACTIVE],
            settled_bets=[b for b in self._bets if b.is_settled],
        )

    # ------------------------------------------------------------------
    # Fixtures
    # ------------------------------------------------------------------

    def new_round(self, teams: Optional[Sequence[Team]] = None) -> List[Match]:
        """
        Generate the next round of fixtures.

        While the current round still has UPCOMING matches no new round is
        created and the current upcoming matches are returned.
        """
        upcoming = self.upcoming_matches
        if upcoming:
            logger.warning("Round still in progress (%d upcoming); not generating fixtures", len(upcoming))
            return upcoming

        roster = list(teams) if teams is not None else self.ratings.all_teams()
        fixtures = generate_fixtures(roster, rng=self.rng, config=self.config)
        self._matches.extend(fixtures)
        return fixtures

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def _is_open(self, selection: BetSelection) -> bool:
        try:
            return not self.get_match(selection.match_id).is_finished
        except KeyError:
            return False

    def _reject(self, rejection: Rejection, detail: str, **kwargs) -> PlacementResult:
        logger.warning("Placement rejected (%s): %s", rejection.value, detail)
        return PlacementResult(rejection=rejection, **kwargs)

    def place_single_bets(
        self,
        selections: Sequence[BetSelection],
        stake_map: Mapping[str, Any],
    ) -> PlacementResult:
        """
        Place one single per selection that has a stake in ``stake_map``.

        ``stake_map`` is keyed by :attr:`BetSelection.key`.  Selections
        without an entry are skipped and a repeated selection counts once.
        Entries that are not positive whole numbers are excluded and
        listed in ``invalid_keys``.  The total of
        the valid stakes is checked against the balance once; either every
        bet is placed or none.
        """
        staked: List[tuple] = []
        invalid: List[str] = []
        seen = set()
        for selection in selections:
            if selection.key in seen:
                continue
            seen.add(selection.key)
            raw = stake_map.get(selection.key)
            if raw is None or raw == "":
                continue
            stake = parse_stake(raw)
            if stake is None:
                invalid.append(selection.key)
            else:
                staked.append((selection, stake))

        if not staked:
            return self._reject(Rejection.EMPTY_SELECTION, f"no positive stakes (invalid: {invalid})",
                                invalid_keys=invalid)

        closed = [s.key for s, _ in staked if not self._is_open(s)]
        if closed:
            return self._reject(Rejection.MATCH_CLOSED, f"closed selections {closed}", invalid_keys=invalid)

        total = sum(stake for _, stake in staked)
        if total > self.balance:
            return self._reject(
                Rejection.INSUFFICIENT_CREDITS, f"stake {total} > balance {self.balance}",
                invalid_keys=invalid, total_stake=total,
            )

        new_bets = [Bet.from_selections([selection], stake) for selection, stake in staked]
        self.balance -= total
        self._bets.extend(new_bets)
        logger.info("Placed %d single(s) for %d credits; balance %d", len(new_bets), total, self.balance)
        return PlacementResult(applied=new_bets, invalid_keys=invalid, total_stake=total)

    def place_multiple_bet(self, selections: Sequence[BetSelection], stake: Any) -> PlacementResult:
        """Place one multiple over every selection, legs in the given order."""
        if not selections:
            return self._reject(Rejection.EMPTY_SELECTION, "multiple with no selections")

        parsed = parse_stake(stake)
        if parsed is None:
            return self._reject(Rejection.INVALID_STAKE, f"stake {stake!r}")

        match_ids = [s.match_id for s in selections]
        if len(match_ids) != len(set(match_ids)):
            return self._reject(Rejection.DUPLICATE_MATCH, "two legs on the same match")

        if not all(self._is_open(s) for s in selections):
            return self._reject(Rejection.MATCH_CLOSED, "leg on a finished or unknown match")

        if parsed > self.balance:
            return self._reject(
                Rejection.INSUFFICIENT_CREDITS, f"stake {parsed} > balance {self.balance}",
                total_stake=parsed,
            )

        bet = Bet.from_selections(selections, parsed)
        self.balance -= parsed
        self._bets.append(bet)
        logger.info("Placed %d-leg multiple @ %.2f for %d credits; balance %d",
                    len(bet.selections), bet.odds, parsed, self.balance)
        return PlacementResult(applied=[bet], total_stake=parsed)

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def apply_round(self, result: RoundResult) -> None:
        """Commit a computed round: matches, bets and balance together."""
        if result.credits_delta < 0:
            raise ValueError("Settlement can only credit the balance")
        self._matches = list(result.matches)
        self._bets = list(result.bets)
        self.balance += result.credits_delta

    def simulate_round(self) -> RoundResult:
        """Play every upcoming match and settle; stale rounds change nothing."""
        result = simulate_round(self._matches, self._bets, self.simulator)
        if result.stale:
            return result
        self.apply_round(result)
        logger.info(
            "Round complete: %d bet(s) settled, +%d credits, balance %d",
            len(result.settled), result.credits_delta, self.balance,
        )
        return result

    # ------------------------------------------------------------------
    # Credits
    # ------------------------------------------------------------------

    def top_up(self) -> TopUpResult:
        """Grant free credits, only while the balance is below the threshold."""
        if self.balance >= self.config.top_up_threshold:
            logger.info("Top-up refused: balance %d >= %d", self.balance, self.config.top_up_threshold)
            return TopUpResult(applied=False, amount=0, balance=self.balance)
        self.balance += self.config.top_up_amount
        logger.info("Top-up of %d credits; balance %d", self.config.top_up_amount, self.balance)
        return TopUpResult(applied=True, amount=self.config.top_up_amount, balance=self.balance)


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_ledger: Optional[BetLedger] = None


def get_ledger() -> BetLedger:
    global _ledger
    if _ledger is None:
        _ledger = BetLedger(config=EngineConfig.from_env())
    return _ledger


def reset_ledger(ledger: Optional[BetLedger] = None) -> BetLedger:
    """Replace the session ledger (new session, or a test fixture)."""
    global _ledger
    _ledger = ledger or BetLedger(config=EngineConfig.from_env())
    return _ledger
