"""
Tournament event dataclasses — the shared language between a session and
any presentation consumer (CLI, JSON API, tests).

All events are frozen and carry complete snapshots, so a consumer can
re-render from any single event without keeping its own copy of the state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Union

from tourney.tournaments.base import (
    MatchRecord,
    MatchResult,
    Pairing,
    Round,
    StandingEntry,
    TournamentMode,
)


@dataclass(frozen=True)
class TournamentStartEvent:
    """Fired once when a tournament is created or resumed."""

    mode: TournamentMode
    name: str
    participant_names: list[str]
    total_rounds: int
    resumed: bool = False
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class BracketUpdatedEvent:
    """Fired after every elimination transition."""

    name: str
    rounds: tuple[Round, ...]
    current_round_index: int
    current_match_index: int
    live_scores: dict[str, int]
    total_rounds: int


@dataclass(frozen=True)
class PairingsUpdatedEvent:
    """Fired after every Swiss transition."""

    name: str
    round_num: int
    total_rounds: int
    pairings: tuple[Pairing, ...]
    decided: tuple[bool, ...]           # parallel to pairings
    standings: list[StandingEntry]


@dataclass(frozen=True)
class MatchDecidedEvent:
    """Fired when a match gets its winner (byes excluded)."""

    mode: TournamentMode
    round_num: int
    winner_name: str
    loser_name: str
    record: MatchRecord | MatchResult


@dataclass(frozen=True)
class TournamentCompleteEvent:
    """Fired once the champion is known."""

    mode: TournamentMode
    name: str
    winner_name: str
    final_standings: list[StandingEntry]
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class TournamentResetEvent:
    mode: TournamentMode
    name: str


@dataclass(frozen=True)
class PersistenceWarningEvent:
    """A save or load failed; the in-memory state is still authoritative."""

    key: str
    message: str


# Union type for type-safe pattern matching in consumers
TournamentEvent = Union[
    TournamentStartEvent,
    BracketUpdatedEvent,
    PairingsUpdatedEvent,
    MatchDecidedEvent,
    TournamentCompleteEvent,
    TournamentResetEvent,
    PersistenceWarningEvent,
]

EventListener = Callable[[TournamentEvent], None]
