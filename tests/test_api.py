"""
Tests for the HTTP surface in betsim/main.py

Run with: pytest tests/test_api.py -v
"""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from betsim.core.odds_math import to_credits
from betsim.core.sim_interface import ScriptedSimulator
from betsim.main import app
from betsim.services.commentary import OFFLINE_COMMENTARY
from betsim.services.ledger import BetLedger, reset_ledger


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("COMMENTARY_API_KEY", raising=False)
    # Every match ends 2-1 to the home side.
    reset_ledger(BetLedger(simulator=ScriptedSimulator(default=(2, 1)), rng=np.random.default_rng(7)))
    with TestClient(app) as test_client:
        yield test_client


def _selection(match_id, label="home", market_type="1X2"):
    return {"match_id": match_id, "market_type": market_type, "label": label}


def _upcoming(client):
    return client.get("/api/state").json()["upcoming_matches"]


class TestSession:

    def test_health(self, client):
        body = client.get("/").json()
        assert body["status"] == "operational"

    def test_startup_opens_a_round(self, client):
        state = client.get("/api/state").json()
        assert state["balance"] == 1000
        assert len(state["upcoming_matches"]) == 4
        assert state["active_bets"] == []

    def test_new_round_while_open_returns_current(self, client):
        current = {m["id"] for m in _upcoming(client)}
        returned = {m["id"] for m in client.post("/api/rounds").json()}
        assert returned == current

    def test_single_bet_then_settle(self, client):
        match = _upcoming(client)[0]
        key = f"{match['id']}-1X2-home"
        resp = client.post(
            "/api/bets/single",
            json={"selections": [_selection(match["id"])], "stakes": {key: 100}},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["rejection"] is None
        assert body["balance"] == 900
        assert body["placed"][0]["selections"][0]["key"] == key

        round_body = client.post("/api/rounds/simulate").json()
        expected = to_credits(100 * match["odds"]["1X2"]["home"])
        assert round_body["stale"] is False
        assert round_body["credits_delta"] == expected
        assert round_body["settled"][0]["status"] == "WON"
        assert round_body["balance"] == 900 + expected

        stale = client.post("/api/rounds/simulate").json()
        assert stale["stale"] is True
        assert stale["balance"] == 900 + expected

    def test_multiple_bet(self, client):
        matches = _upcoming(client)
        resp = client.post(
            "/api/bets/multiple",
            json={"selections": [_selection(m["id"]) for m in matches[:3]], "stake": "50"},
        )
        body = resp.json()
        assert body["rejection"] is None
        assert body["placed"][0]["is_multiple"] is True
        assert body["balance"] == 950


class TestRejections:
    """User errors come back as values, protocol errors as HTTP codes."""

    def test_duplicate_match(self, client):
        match_id = _upcoming(client)[0]["id"]
        resp = client.post(
            "/api/bets/multiple",
            json={"selections": [_selection(match_id, "home"), _selection(match_id, "draw")], "stake": 10},
        )
        assert resp.status_code == 200
        assert resp.json()["rejection"] == "DUPLICATE_MATCH"

    def test_insufficient_credits(self, client):
        match_id = _upcoming(client)[0]["id"]
        resp = client.post(
            "/api/bets/single",
            json={"selections": [_selection(match_id)], "stakes": {f"{match_id}-1X2-home": 5000}},
        )
        assert resp.json()["rejection"] == "INSUFFICIENT_CREDITS"
        assert resp.json()["balance"] == 1000

    def test_invalid_stake_keys(self, client):
        match_id = _upcoming(client)[0]["id"]
        key = f"{match_id}-1X2-home"
        body = client.post(
            "/api/bets/single",
            json={"selections": [_selection(match_id)], "stakes": {key: "abc"}},
        ).json()
        assert body["rejection"] == "EMPTY_SELECTION"
        assert body["invalid_keys"] == [key]

    def test_boolean_stake_is_invalid(self, client):
        match_id = _upcoming(client)[0]["id"]
        key = f"{match_id}-1X2-home"
        body = client.post(
            "/api/bets/single",
            json={"selections": [_selection(match_id)], "stakes": {key: True}},
        ).json()
        assert body["rejection"] == "EMPTY_SELECTION"
        assert body["invalid_keys"] == [key]
        assert body["placed"] == []
        assert body["balance"] == 1000

    def test_repeated_selection_is_charged_once(self, client):
        match_id = _upcoming(client)[0]["id"]
        key = f"{match_id}-1X2-home"
        body = client.post(
            "/api/bets/single",
            json={"selections": [_selection(match_id), _selection(match_id)], "stakes": {key: 100}},
        ).json()
        assert len(body["placed"]) == 1
        assert body["total_stake"] == 100
        assert body["balance"] == 900

    def test_bad_label_is_422(self, client):
        match_id = _upcoming(client)[0]["id"]
        resp = client.post(
            "/api/bets/multiple",
            json={"selections": [_selection(match_id, "Home")], "stake": 10},
        )
        assert resp.status_code == 422

    def test_unpriced_market_is_422(self, client):
        match_id = _upcoming(client)[0]["id"]
        resp = client.post(
            "/api/bets/multiple",
            json={"selections": [_selection(match_id, "Over", "Over/Under 2.5")], "stake": 10},
        )
        assert resp.status_code == 422

    def test_unknown_match_is_404(self, client):
        resp = client.post("/api/bets/multiple", json={"selections": [_selection("nope")], "stake": 10})
        assert resp.status_code == 404

    def test_closed_match(self, client):
        match_id = _upcoming(client)[0]["id"]
        client.post("/api/rounds/simulate")
        resp = client.post(
            "/api/bets/single",
            json={"selections": [_selection(match_id)], "stakes": {f"{match_id}-1X2-home": 10}},
        )
        assert resp.json()["rejection"] == "MATCH_CLOSED"


class TestCreditsAndCommentary:

    def test_top_up_refused_when_funded(self, client):
        body = client.post("/api/credits/top-up").json()
        assert body == {"applied": False, "amount": 0, "balance": 1000}

    def test_commentary(self, client):
        match_id = _upcoming(client)[0]["id"]
        assert client.get(f"/api/matches/{match_id}/commentary").status_code == 409

        client.post("/api/rounds/simulate")
        body = client.get(f"/api/matches/{match_id}/commentary").json()
        assert body == {"match_id": match_id, "commentary": OFFLINE_COMMENTARY}

    def test_commentary_unknown_match(self, client):
        assert client.get("/api/matches/nope/commentary").status_code == 404


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
