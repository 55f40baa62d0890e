"""Bet markets as a closed tagged union.

Every selection on a bet slip is one of three market variants, each
carrying its own strongly typed outcome:

* :class:`OneXTwo`   : match result: home win / draw / away win.
* :class:`ExactScore`: the exact final score, e.g. ``"2-1"``.
* :class:`OverUnder` : total goals over or under a line (2.5).

A variant is built from a raw ``(market_type, label)`` pair with
:func:`parse_market`, which is the only place labels are interpreted.
Unrecognised labels raise ``ValueError`` there, so an invalid label can
never reach settlement and silently lose.

Evaluation is a pure function of the final score::

    market = parse_market(MarketType.OVER_UNDER, "Over")
    market.evaluate(2, 1)  → True   (3 goals > 2.5)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Final, Union


class MarketType(str, Enum):
    """Bet market identifiers.  Values are the public market names."""

    ONE_X_TWO = "1X2"
    EXACT_SCORE = "Exact Score"
    OVER_UNDER = "Over/Under 2.5"


class OneXTwoOutcome(str, Enum):
    HOME = "home"
    DRAW = "draw"
    AWAY = "away"


class OverUnderOutcome(str, Enum):
    OVER = "Over"
    UNDER = "Under"


#: Total-goals line of the over/under market.
OVER_UNDER_LINE: Final[float] = 2.5

_SCORE_LABEL = re.compile(r"^(\d+)-(\d+)$")


def result_label(home_score: int, away_score: int) -> OneXTwoOutcome:
    """The 1X2 outcome produced by a final score."""
    if home_score > away_score:
        return OneXTwoOutcome.HOME
    if home_score < away_score:
        return OneXTwoOutcome.AWAY
    return OneXTwoOutcome.DRAW


def score_label(home_score: int, away_score: int) -> str:
    """The exact-score label of a final score, e.g. ``"2-1"``."""
    return f"{home_score}-{away_score}"


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OneXTwo:
    outcome: OneXTwoOutcome

    market_type = MarketType.ONE_X_TWO

    @property
    def label(self) -> str:
        return self.outcome.value

    def evaluate(self, home_score: int, away_score: int) -> bool:
        return result_label(home_score, away_score) is self.outcome


@dataclass(frozen=True)
class ExactScore:
    home: int
    away: int

    market_type = MarketType.EXACT_SCORE

    def __post_init__(self) -> None:
        if self.home < 0 or self.away < 0:
            raise ValueError(f"Exact score cannot be negative: {self.home}-{self.away}.")

    @property
    def label(self) -> str:
        return score_label(self.home, self.away)

    def evaluate(self, home_score: int, away_score: int) -> bool:
        return score_label(home_score, away_score) == self.label


@dataclass(frozen=True)
class OverUnder:
    outcome: OverUnderOutcome
    line: float = OVER_UNDER_LINE

    market_type = MarketType.OVER_UNDER

    @property
    def label(self) -> str:
        return self.outcome.value

    def evaluate(self, home_score: int, away_score: int) -> bool:
        total = home_score + away_score
        if self.outcome is OverUnderOutcome.OVER:
            return total > self.line
        return total < self.line


Market = Union[OneXTwo, ExactScore, OverUnder]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def parse_market(market_type: Union[MarketType, str], label: str) -> Market:
    """Build a typed market selection from its raw ``(type, label)`` pair.

    Args:
        market_type: A :class:`MarketType` or its public value
            (``"1X2"``, ``"Exact Score"``, ``"Over/Under 2.5"``).
        label: Outcome label.  ``"home"``/``"draw"``/``"away"`` for 1X2,
            ``"<home>-<away>"`` for exact score, ``"Over"``/``"Under"`` for
            over/under.

    Raises:
        ValueError: If the market type is unknown or the label is not a
            valid outcome of that market.
    """
    try:
        mtype = MarketType(market_type)
    except ValueError:
        raise ValueError(f"Unknown market type {market_type!r}.") from None

    if mtype is MarketType.ONE_X_TWO:
        try:
            return OneXTwo(OneXTwoOutcome(label))
        except ValueError:
            raise ValueError(f"Invalid 1X2 label {label!r}; expected home, draw or away.") from None

    if mtype is MarketType.OVER_UNDER:
        try:
            return OverUnder(OverUnderOutcome(label))
        except ValueError:
            raise ValueError(f"Invalid over/under label {label!r}; expected Over or Under.") from None

    match = _SCORE_LABEL.match(label.strip()) if isinstance(label, str) else None
    if match is None:
        raise ValueError(f"Invalid exact-score label {label!r}; expected e.g. '2-1'.")
    return ExactScore(int(match.group(1)), int(match.group(2)))
