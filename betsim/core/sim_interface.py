"""Dependency-injection interfaces for swappable match simulators.

This module defines the contract that **every** match simulator must
satisfy.  The ledger and the round runner accept a
:class:`BaseMatchSimulator` rather than importing ``MatchSimulator``
directly.  This enables:

* **Unit testing**: inject a :class:`ScriptedSimulator` that returns
  fixed scores, so settlement can be tested without statistical sampling.
* **Model extension**: swap in a Poisson or correlated-goals engine
  without touching the ledger.

Design choices
--------------
* :class:`BaseMatchSimulator` is an abstract base class (ABC) rather than a
  ``typing.Protocol`` because we want ``isinstance`` checks at runtime
  (the ledger's constructor guard) and explicit inheritance.
* :class:`ScoreLine` is frozen and slotted so it can be passed around and
  compared freely.

Run tests with::

    pytest tests/test_sim_interface.py -v
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Tuple

if TYPE_CHECKING:
    from betsim.models import Team


# ---------------------------------------------------------------------------
# Data transfer objects
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ScoreLine:
    """Immutable final score of one simulated match.

    Attributes:
        home_score: Goals scored by the home team.  ``≥ 0``.
        away_score: Goals scored by the away team.  ``≥ 0``.
    """

    home_score: int
    away_score: int

    def __post_init__(self) -> None:
        if self.home_score < 0 or self.away_score < 0:
            raise ValueError(
                f"ScoreLine cannot be negative: {self.home_score}-{self.away_score}."
            )

    @property
    def total(self) -> int:
        return self.home_score + self.away_score

    def __str__(self) -> str:
        return f"{self.home_score}-{self.away_score}"


# ---------------------------------------------------------------------------
# Abstract simulator
# ---------------------------------------------------------------------------


class BaseMatchSimulator(ABC):
    """Contract that every match simulator must satisfy.

    Subclasses implement :meth:`simulate`.  The round runner calls only
    this method; it never instantiates a concrete simulator itself.

    Randomness
    ----------
    A simulator owns its random source.  Two calls with identical teams
    must be able to produce different scores; reproducibility comes from
    seeding the source at construction, never from shared global state.
    """

    #: Short identifier used in logs.  Must be overridden by subclasses.
    engine_name: str = "BaseMatchSimulator"

    @abstractmethod
    def simulate(self, home: Team, away: Team) -> ScoreLine:
        """Play one match and return its final score.

        Args:
            home: The home team.
            away: The away team.

        Returns:
            :class:`ScoreLine` with both scores ``≥ 0``.
        """


# ---------------------------------------------------------------------------
# Scripted simulator: deterministic stub
# ---------------------------------------------------------------------------


class ScriptedSimulator(BaseMatchSimulator):
    """A simulator that replays predetermined scores.

    Scores are looked up by ``(home.id, away.id)``; pairs without a script
    get ``default``.  Used in tests that need to force a result, and by
    callers replaying a known round.  **Never use for live sessions.**

    Example::

        sim = ScriptedSimulator({("ajax", "porto"): (2, 1)})
        sim.simulate(ajax, porto)  → ScoreLine(2, 1)
    """

    engine_name = "ScriptedSimulator"

    def __init__(
        self,
        scores: Optional[Mapping[Tuple[str, str], Tuple[int, int]]] = None,
        default: Tuple[int, int] = (0, 0),
    ):
        self._scores: Dict[Tuple[str, str], Tuple[int, int]] = dict(scores or {})
        self._default = default
        self.calls = 0

    def simulate(self, home: Team, away: Team) -> ScoreLine:
        self.calls += 1
        home_score, away_score = self._scores.get((home.id, away.id), self._default)
        return ScoreLine(home_score, away_score)
