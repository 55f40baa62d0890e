"""
FastAPI application for the Virtual Bet Simulator
One in-memory betting session per process
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List
import logging
import os

from betsim.core.markets import parse_market
from betsim.models import BetSelection
from betsim.services.commentary import generate_match_commentary
from betsim.services.ledger import BetLedger, get_ledger
from betsim.schemas import (
    CommentaryResponse,
    MatchOut,
    MultipleBetRequest,
    PlacementResponse,
    RoundResponse,
    SelectionIn,
    SingleBetsRequest,
    StateResponse,
    TopUpResponse,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    ledger = get_ledger()
    logger.info("Starting Virtual Bet Simulator (%r)", ledger.config)
    if not ledger.upcoming_matches:
        ledger.new_round()
    yield
    logger.info("Shutting down; final balance %d credits", ledger.balance)


app = FastAPI(
    title="Virtual Bet Simulator",
    description="Simulated football betting with virtual credits",
    version="1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _resolve_selections(ledger: BetLedger, selections: List[SelectionIn]) -> List[BetSelection]:
    """
    Turn request selections into engine selections at the published odds.

    Finished matches still resolve, so the ledger can answer MATCH_CLOSED.
    """
    resolved = []
    for sel in selections:
        try:
            match = ledger.get_match(sel.match_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Match {sel.match_id} not found")
        market = parse_market(sel.market_type, sel.label)
        price = match.price(market.market_type, market.label)
        if price is None:
            raise HTTPException(
                status_code=422,
                detail=f"{market.market_type.value} {market.label!r} is not priced for {match.label}",
            )
        resolved.append(BetSelection(match=match, market=market, odds=price))
    return resolved


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Health check"""
    return {
        "app": "Virtual Bet Simulator",
        "version": "1.0",
        "status": "operational",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api/state", response_model=StateResponse)
async def get_state():
    return StateResponse.from_state(get_ledger().get_state())


@app.post("/api/rounds", response_model=List[MatchOut])
async def new_round():
    """Generate fixtures, or return the current round if it is still open."""
    matches = get_ledger().new_round()
    return [MatchOut.from_match(m) for m in matches]


@app.post("/api/rounds/simulate", response_model=RoundResponse)
async def simulate_round():
    ledger = get_ledger()
    result = ledger.simulate_round()
    return RoundResponse.from_result(result, ledger.balance)


# ============================================================================
# BETS & CREDITS
# ============================================================================

@app.post("/api/bets/single", response_model=PlacementResponse)
async def place_single_bets(payload: SingleBetsRequest):
    ledger = get_ledger()
    selections = _resolve_selections(ledger, payload.selections)
    result = ledger.place_single_bets(selections, payload.stakes)
    return PlacementResponse.from_result(result, ledger.balance)


@app.post("/api/bets/multiple", response_model=PlacementResponse)
async def place_multiple_bet(payload: MultipleBetRequest):
    ledger = get_ledger()
    selections = _resolve_selections(ledger, payload.selections)
    result = ledger.place_multiple_bet(selections, payload.stake)
    return PlacementResponse.from_result(result, ledger.balance)


@app.post("/api/credits/top-up", response_model=TopUpResponse)
async def top_up():
    return TopUpResponse.from_result(get_ledger().top_up())


@app.get("/api/matches/{match_id}/commentary", response_model=CommentaryResponse)
def match_commentary(match_id: str):
    """Narrative for a finished match (blocking HTTP call, run in the threadpool)."""
    try:
        match = get_ledger().get_match(match_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Match not found")
    if not match.is_finished:
        raise HTTPException(status_code=409, detail="Match has not been played yet")
    return CommentaryResponse(match_id=match.id, commentary=generate_match_commentary(match))


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": type(exc).__name__}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
