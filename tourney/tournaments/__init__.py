"""
Tournament package.

create_engine() is the single entry point for instantiating either format.

To add a new format:
  1. Create tourney/tournaments/<name>.py implementing TournamentEngine
  2. Add a case here and a codec in tourney/serialization.py
"""

from __future__ import annotations

import random

from tourney.tournaments.base import (
    SWISS_BYE,
    WILDCARD,
    EliminationState,
    Match,
    MatchRecord,
    MatchResult,
    Pairing,
    Player,
    Round,
    StandingEntry,
    SwissState,
    TournamentEngine,
    TournamentMode,
    TournamentState,
)
from tourney.tournaments.elimination import DEFAULT_MATCH_POINT, EliminationEngine
from tourney.tournaments.events import (
    BracketUpdatedEvent,
    EventListener,
    MatchDecidedEvent,
    PairingsUpdatedEvent,
    PersistenceWarningEvent,
    TournamentCompleteEvent,
    TournamentEvent,
    TournamentResetEvent,
    TournamentStartEvent,
)
from tourney.tournaments.swiss import SwissEngine

__all__ = [
    # Base types
    "Player",
    "Match",
    "Round",
    "MatchRecord",
    "MatchResult",
    "Pairing",
    "EliminationState",
    "SwissState",
    "StandingEntry",
    "TournamentEngine",
    "TournamentMode",
    "TournamentState",
    "WILDCARD",
    "SWISS_BYE",
    # Events
    "TournamentEvent",
    "EventListener",
    "TournamentStartEvent",
    "BracketUpdatedEvent",
    "PairingsUpdatedEvent",
    "MatchDecidedEvent",
    "TournamentCompleteEvent",
    "TournamentResetEvent",
    "PersistenceWarningEvent",
    # Implementations
    "EliminationEngine",
    "SwissEngine",
    "DEFAULT_MATCH_POINT",
    # Factory
    "create_engine",
]


def create_engine(
    mode: TournamentMode,
    match_point: int = DEFAULT_MATCH_POINT,
    rng: random.Random | None = None,
) -> TournamentEngine:
    """
    Instantiate the correct TournamentEngine.

    Args:
        mode:        "elimination" | "swiss"
        match_point: score that wins an elimination match (ignored for Swiss)
        rng:         source of randomness for seeding (elimination only)
    """
    match mode:
        case "elimination":
            return EliminationEngine(match_point=match_point, rng=rng)
        case "swiss":
            return SwissEngine()
        case _:
            raise ValueError(
                f"Unknown tournament mode: {mode!r}. Valid modes: elimination, swiss"
            )
