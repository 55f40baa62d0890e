"""
Tests for betsim/services/ratings.py

Run with: pytest tests/test_ratings.py -v
"""

import pytest

from betsim.models import Team
from betsim.services.ratings import SEED_TEAMS, RatingsStore, get_ratings_store


class TestRatingsStore:

    def test_seed_league(self):
        store = RatingsStore()
        assert len(store) == 8
        assert "scarsenal" in store
        assert store.get("tutinham").attack == 85
        assert [t.id for t in store.all_teams()] == [t.id for t in SEED_TEAMS]

    def test_custom_roster(self):
        store = RatingsStore([Team(id="x", name="X", attack=70, defense=70)])
        assert len(store) == 1

    def test_unknown_team(self):
        with pytest.raises(KeyError):
            RatingsStore().get("real_madrid")

    def test_duplicate_ids_rejected(self):
        team = Team(id="x", name="X", attack=70, defense=70)
        with pytest.raises(ValueError):
            RatingsStore([team, team])

    def test_singleton(self):
        assert get_ratings_store() is get_ratings_store()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
