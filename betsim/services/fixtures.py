"""
Fixture builder: shuffle the roster, pair it up, price every pairing.

Pairing is uniformly random over all permutations of the roster
(Fisher-Yates), then consecutive teams meet: index 0 hosts index 1,
index 2 hosts index 3, and so on.  With an odd roster the team shuffled
into last place sits the round out.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from betsim.core.engine_config import EngineConfig
from betsim.models import Match, Team, new_id
from betsim.services.odds import generate_match_odds

logger = logging.getLogger(__name__)


def shuffle_teams(teams: Sequence[Team], rng: np.random.Generator) -> List[Team]:
    """Fisher-Yates shuffle of a copy of ``teams``."""
    shuffled = list(teams)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def generate_fixtures(
    teams: Sequence[Team],
    rng: Optional[np.random.Generator] = None,
    config: Optional[EngineConfig] = None,
) -> List[Match]:
    """
    Build one round of UPCOMING matches from ``teams``.

    Args:
        teams: The roster.  Each team appears in at most one match.
        rng: Random source for the shuffle.  Defaults to a generator
            seeded from ``config.seed``.
        config: Engine constants for odds generation.

    Returns:
        ``len(teams) // 2`` matches, each with fresh id and 1X2 odds.
    """
    cfg = config or EngineConfig.default()
    if rng is None:
        rng = np.random.default_rng(cfg.seed)

    ids = [t.id for t in teams]
    if len(ids) != len(set(ids)):
        raise ValueError("A round cannot contain the same team twice")

    shuffled = shuffle_teams(teams, rng)
    if len(shuffled) % 2 == 1:
        logger.info("Odd roster (%d teams): %s sits out this round", len(shuffled), shuffled[-1].name)

    matches: List[Match] = []
    for i in range(0, len(shuffled) - 1, 2):
        home, away = shuffled[i], shuffled[i + 1]
        matches.append(Match(id=new_id(), home=home, away=away, odds=generate_match_odds(home, away, cfg)))

    logger.info("Generated %d fixtures from %d teams", len(matches), len(shuffled))
    return matches
