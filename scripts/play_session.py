#!/usr/bin/env python3
"""
Play an automatic betting session from the command line.

Each round generates fixtures, backs the favourite of every match with a
flat stake (or strings all favourites into one multiple), simulates the
round and prints the resulting balance.

Usage:
    python scripts/play_session.py --rounds 10 --seed 42 --stake 25
    python scripts/play_session.py --rounds 5 --multiple --stake 10
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from betsim.core.engine_config import EngineConfig  # noqa: E402
from betsim.core.markets import MarketType  # noqa: E402
from betsim.models import BetSelection, BetStatus, Match  # noqa: E402
from betsim.services.bet_slip import BetSlip, build_selection  # noqa: E402
from betsim.services.ledger import BetLedger  # noqa: E402

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def favourite_selection(match: Match) -> BetSelection:
    """1X2 selection on the shortest-priced outcome of ``match``."""
    prices = match.odds[MarketType.ONE_X_TWO]
    label = min(prices, key=prices.get)
    return build_selection(match, MarketType.ONE_X_TWO, label)


def play_round(ledger: BetLedger, stake: int, multiple: bool) -> None:
    matches: List[Match] = ledger.new_round()
    slip = BetSlip()
    for match in matches:
        slip.toggle(favourite_selection(match))

    if multiple:
        result = ledger.place_multiple_bet(slip.selections, stake)
    else:
        result = ledger.place_single_bets(slip.selections, {s.key: stake for s in slip})
    if not result.ok:
        print(f"  bets rejected: {result.rejection.value}")

    outcome = ledger.simulate_round()
    for match in outcome.matches[-len(matches):]:
        print(f"  {match.home.name:>14} {match.home_score} - {match.away_score} {match.away.name}")
    won = sum(1 for b in outcome.settled if b.status is BetStatus.WON)
    print(f"  settled {len(outcome.settled)} bet(s), {won} won, +{outcome.credits_delta} credits")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Play automatic rounds of the Virtual Bet Simulator."
    )
    parser.add_argument("--rounds", type=int, default=5, help="Number of rounds to play.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for fixtures and results.")
    parser.add_argument("--stake", type=int, default=20, help="Flat stake per bet in credits.")
    parser.add_argument(
        "--multiple",
        action="store_true",
        help="Place one multiple per round instead of singles.",
    )
    parser.add_argument(
        "--goal-markets",
        action="store_true",
        help="Also price over/under and exact-score markets.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine activity.")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)
    if args.rounds <= 0 or args.stake <= 0:
        parser.error("--rounds and --stake must be positive")

    config = replace(EngineConfig.from_env(), seed=args.seed, price_goal_markets=args.goal_markets)
    ledger = BetLedger(config=config)
    print(f"Starting balance: {ledger.balance} credits")

    for round_no in range(1, args.rounds + 1):
        print(f"Round {round_no}")
        play_round(ledger, args.stake, args.multiple)
        top_up = ledger.top_up()
        if top_up.applied:
            print(f"  topped up +{top_up.amount}")
        print(f"  balance: {ledger.balance} credits")

    state = ledger.get_state()
    won = sum(1 for b in state.settled_bets if b.status is BetStatus.WON)
    print(f"Final balance: {state.balance} credits ({won}/{len(state.settled_bets)} bets won)")


if __name__ == "__main__":
    main()
