"""
Tests for betsim/services/match_sim.py

Run with: pytest tests/test_match_sim.py -v
"""

import numpy as np
import pytest

from betsim.models import Team
from betsim.services.match_sim import MatchSimulator, SimulationResult, goal_probability


def _team(team_id, attack, defense):
    return Team(id=team_id, name=team_id, attack=attack, defense=defense)


EVEN_A = _team("even_a", 80, 80)
EVEN_B = _team("even_b", 80, 80)
GIANT = _team("giant", 200, 200)
MINNOW = _team("minnow", 10, 10)


class TestGoalProbability:

    def test_parity_is_base_probability(self):
        assert goal_probability(80, 80) == pytest.approx(0.1)

    def test_monotone_in_attack(self):
        assert goal_probability(85, 80) > goal_probability(80, 80) > goal_probability(75, 80)

    def test_saturates_for_huge_gaps(self):
        assert goal_probability(200, 10) == pytest.approx(0.25)
        assert goal_probability(10, 200) == pytest.approx(0.05)

    def test_stays_inside_bounds(self):
        for attack in range(1, 300, 17):
            for defense in range(1, 300, 19):
                assert 0.05 <= goal_probability(attack, defense) <= 0.40


class TestSimulate:
    """Single-match simulation."""

    @pytest.mark.parametrize("home,away", [
        (GIANT, MINNOW),
        (MINNOW, GIANT),
        (EVEN_A, EVEN_B),
        (_team("sharp", 120, 20), _team("leaky", 30, 5)),
        (_team("tiny_a", 1, 1), _team("tiny_b", 1, 1)),
        (_team("wall", 5, 300), _team("cannon", 300, 5)),
    ])
    def test_scores_bounded_by_chances(self, home, away):
        sim = MatchSimulator(seed=9)
        for _ in range(300):
            score = sim.simulate(home, away)
            assert 0 <= score.home_score <= 15
            assert 0 <= score.away_score <= 15

    def test_parity_mean_is_about_one_and_a_half(self):
        sim = MatchSimulator(seed=42)
        scores = [sim.simulate(EVEN_A, EVEN_B) for _ in range(10000)]
        assert np.mean([s.home_score for s in scores]) == pytest.approx(1.5, abs=0.3)
        assert np.mean([s.away_score for s in scores]) == pytest.approx(1.5, abs=0.3)

    def test_same_seed_same_scores(self):
        a = MatchSimulator(seed=17)
        b = MatchSimulator(seed=17)
        assert [a.simulate(EVEN_A, EVEN_B) for _ in range(20)] == [b.simulate(EVEN_A, EVEN_B) for _ in range(20)]

    def test_shared_generator(self):
        rng = np.random.default_rng(1)
        sim = MatchSimulator(rng=rng)
        assert sim.rng is rng


class TestSimulateMany:

    def test_distribution(self):
        result = MatchSimulator().simulate_many(EVEN_A, EVEN_B, n_sims=10000, seed=42)
        assert isinstance(result, SimulationResult)
        assert result.home_goal_prob == pytest.approx(0.1)
        assert result.mean_home_score == pytest.approx(1.5, abs=0.3)
        assert result.home_win_prob + result.draw_prob + result.away_win_prob == pytest.approx(1.0)
        assert 0.0 < result.total_over_prob(2.5) < 1.0

    def test_strong_side_wins_more(self):
        result = MatchSimulator().simulate_many(GIANT, MINNOW, n_sims=5000, seed=3)
        assert result.home_win_prob > 0.85
        assert result.exact_score_prob(0, 0) < 0.05

    def test_seeded_runs_are_reproducible(self):
        sim = MatchSimulator()
        first = sim.simulate_many(EVEN_A, EVEN_B, n_sims=200, seed=8)
        second = sim.simulate_many(EVEN_A, EVEN_B, n_sims=200, seed=8)
        np.testing.assert_array_equal(first.home_scores, second.home_scores)

    def test_to_dict(self):
        summary = MatchSimulator().simulate_many(EVEN_A, EVEN_B, n_sims=100, seed=1).to_dict()
        assert summary["n_sims"] == 100
        assert {"home_win_prob", "draw_prob", "away_win_prob", "mean_home_score"} <= set(summary)

    def test_rejects_non_positive_runs(self):
        with pytest.raises(ValueError):
            MatchSimulator().simulate_many(EVEN_A, EVEN_B, n_sims=0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
