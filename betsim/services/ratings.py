"""
Static ratings catalog for the fictional league.

Each team carries an attack and a defence rating (roughly 70-95).  The
catalog is read-only: the odds generator and the match simulator take
``Team`` objects, never team ids, so a caller can always pass its own
teams instead of the seed league.
"""

import logging
from typing import Dict, Iterable, List, Optional

from betsim.models import Team

logger = logging.getLogger(__name__)


SEED_TEAMS: List[Team] = [
    Team(id="tutinham", name="Tutinham", logo="⚽️", attack=85, defense=78),
    Team(id="team_as_turbo", name="Team as Turbo", logo="🚀", attack=90, defense=72),
    Team(id="scarsenal", name="Scarsenal", logo="💣", attack=88, defense=75),
    Team(id="yaratasaray", name="Yaratasaray", logo="🦁", attack=82, defense=80),
    Team(id="dressytim", name="Dressytim", logo="👔", attack=75, defense=85),
    Team(id="giorg", name="Giorg e san giorg", logo="🐉", attack=78, defense=82),
    Team(id="faccia_leeds", name="Faccia da Leeds", logo="🦉", attack=79, defense=79),
    Team(id="cocajuniors", name="Coca Juniors", logo="🥤", attack=81, defense=81),
]


class RatingsStore:
    """Lookup over a fixed set of teams."""

    def __init__(self, teams: Optional[Iterable[Team]] = None):
        catalog = list(SEED_TEAMS if teams is None else teams)
        self._by_id: Dict[str, Team] = {}
        for team in catalog:
            if team.id in self._by_id:
                raise ValueError(f"Duplicate team id {team.id!r} in ratings catalog")
            self._by_id[team.id] = team
        logger.debug("Ratings store loaded with %d teams", len(self._by_id))

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, team_id: str) -> bool:
        return team_id in self._by_id

    def all_teams(self) -> List[Team]:
        """Teams in catalog order."""
        return list(self._by_id.values())

    def get(self, team_id: str) -> Team:
        """Return the team with ``team_id``; raises KeyError if unknown."""
        try:
            return self._by_id[team_id]
        except KeyError:
            raise KeyError(f"Unknown team id {team_id!r}") from None


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_ratings_store: Optional[RatingsStore] = None


def get_ratings_store() -> RatingsStore:
    global _ratings_store
    if _ratings_store is None:
        _ratings_store = RatingsStore()
    return _ratings_store
