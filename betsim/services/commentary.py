"""
Post-match commentary from a hosted text-generation model.

Purely cosmetic: nothing in the ledger waits on it, and
:func:`generate_match_commentary` always returns text.  Without an API key
a fixed narrative is returned; any network or response-shape failure
yields a second fixed line.

Environment:
    COMMENTARY_API_KEY   key for the generation endpoint (unset = offline)
    COMMENTARY_API_URL   generateContent endpoint of the model
"""

import logging
import os
from typing import Optional

import requests
from dotenv import load_dotenv

from betsim.models import Match

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.5-flash:generateContent"
)
REQUEST_TIMEOUT = 15

OFFLINE_COMMENTARY = (
    "A truly memorable match was played out on the pitch today, "
    "with both sides showing tremendous spirit."
)
FAILED_COMMENTARY = "The commentator is lost for words! What a match!"


def build_prompt(match: Match) -> str:
    return (
        "You are a dramatic and entertaining football commentator. Write a short "
        f"one-paragraph summary of a match between {match.home.name} and "
        f"{match.away.name} that finished {match.home_score} - {match.away_score}."
    )


def _extract_text(payload: dict) -> str:
    text = payload["candidates"][0]["content"]["parts"][0]["text"]
    if not isinstance(text, str) or not text.strip():
        raise ValueError("empty commentary")
    return text.strip()


def generate_match_commentary(
    match: Match,
    api_key: Optional[str] = None,
    api_url: Optional[str] = None,
) -> str:
    """
    One paragraph of colour commentary for a finished match.

    Args:
        match: Should be FINISHED; an unfinished match gets the offline text.
        api_key: Overrides ``COMMENTARY_API_KEY``.
        api_url: Overrides ``COMMENTARY_API_URL``.
    """
    key = api_key or os.getenv("COMMENTARY_API_KEY")
    if not key:
        logger.warning("COMMENTARY_API_KEY not set; using offline commentary")
        return OFFLINE_COMMENTARY
    if not match.is_finished:
        logger.warning("Commentary requested for unfinished match %s", match.id)
        return OFFLINE_COMMENTARY

    url = api_url or os.getenv("COMMENTARY_API_URL", DEFAULT_API_URL)
    body = {"contents": [{"parts": [{"text": build_prompt(match)}]}]}

    try:
        resp = requests.post(
            url,
            json=body,
            headers={"x-goog-api-key": key},
            timeout=REQUEST_TIMEOUT,
        )
        resp.raise_for_status()
        return _extract_text(resp.json())
    except requests.RequestException as exc:
        logger.warning("Commentary request failed for %s: %s", match.label, exc)
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        logger.warning("Unexpected commentary response for %s: %s", match.label, exc)
    return FAILED_COMMENTARY
