"""
Tests for betsim/core/engine_config.py

Run with: pytest tests/test_engine_config.py -v
"""

from dataclasses import FrozenInstanceError, replace

import pytest

from betsim.core.engine_config import DEFAULT_EXACT_SCORES, EngineConfig


class TestDefaults:

    def test_canonical_values(self):
        cfg = EngineConfig.default()
        assert (cfg.base_home_prob, cfg.base_draw_prob, cfg.base_away_prob) == (0.42, 0.28, 0.30)
        assert cfg.bookmaker_margin == 1.07
        assert cfg.goal_chances == 15
        assert cfg.initial_credits == 1000
        assert (cfg.top_up_amount, cfg.top_up_threshold) == (250, 100)
        assert cfg.price_goal_markets is False
        assert cfg.exact_scores == DEFAULT_EXACT_SCORES
        assert cfg.seed is None

    def test_baseline_is_a_unit_book(self):
        cfg = EngineConfig.default()
        assert cfg.base_home_prob + cfg.base_draw_prob + cfg.base_away_prob == pytest.approx(1.0)

    def test_max_score(self):
        assert EngineConfig.default().max_score == 15
        assert replace(EngineConfig.default(), goal_chances=9).max_score == 9

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            EngineConfig.default().bookmaker_margin = 1.0

    def test_repr(self):
        assert "margin=1.07" in repr(EngineConfig.default())


class TestFromEnv:
    """Environment overrides."""

    ENV_VARS = (
        "INITIAL_CREDITS", "TOP_UP_AMOUNT", "TOP_UP_THRESHOLD",
        "BOOKMAKER_MARGIN", "PRICE_GOAL_MARKETS", "SIM_SEED",
    )

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in self.ENV_VARS:
            monkeypatch.delenv(name, raising=False)

    def test_without_overrides_matches_default(self):
        assert EngineConfig.from_env() == EngineConfig.default()

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("INITIAL_CREDITS", "500")
        monkeypatch.setenv("TOP_UP_AMOUNT", "50")
        monkeypatch.setenv("BOOKMAKER_MARGIN", "1.10")
        monkeypatch.setenv("PRICE_GOAL_MARKETS", "TRUE")
        monkeypatch.setenv("SIM_SEED", "123")
        cfg = EngineConfig.from_env()
        assert cfg.initial_credits == 500
        assert cfg.top_up_amount == 50
        assert cfg.top_up_threshold == 100
        assert cfg.bookmaker_margin == pytest.approx(1.10)
        assert cfg.price_goal_markets is True
        assert cfg.seed == 123


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
