"""
Tournament abstractions — shared types and the TournamentEngine base class.

Both formats (elimination and Swiss) share the Player model and the
TournamentEngine interface, but never call into each other.  Every state
type here is a frozen dataclass: an engine operation takes a state and
returns a new one, so the previous value stays valid if anything raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import ClassVar, Iterable, Literal, Union

from tourney.errors import InsufficientPlayersError, InvalidPlayerError

TournamentMode = Literal["elimination", "swiss"]
Slot = Literal[1, 2]

WILDCARD_NAME = "Wildcard (Bye)"
SWISS_BYE_NAME = "Bye"
RESERVED_NAMES = frozenset({WILDCARD_NAME, SWISS_BYE_NAME})

MIN_PLAYERS = 2


def total_rounds(player_count: int) -> int:
    """ceil(log2(n)), computed exactly on integers."""
    return max(player_count - 1, 0).bit_length()


@dataclass(frozen=True)
class Player:
    """A participant (or a bye sentinel) as seen by one engine."""

    name: str
    score: int = 0
    history: tuple[str, ...] = ()   # Swiss only: opponents already played
    is_bye: bool = False

    def with_score(self, score: int) -> Player:
        return replace(self, score=max(score, 0))

    def __repr__(self) -> str:
        if self.is_bye:
            return f"Player(BYE {self.name!r})"
        return f"Player({self.name!r}, score={self.score})"


# Tagged bye sentinels.  Downstream code checks `is_bye`, never `is None`.
WILDCARD = Player(name=WILDCARD_NAME, is_bye=True)
SWISS_BYE = Player(name=SWISS_BYE_NAME, is_bye=True)


@dataclass(frozen=True)
class Match:
    """One elimination match.  `winner`, when set, is one of the two slots."""

    player1: Player
    player2: Player
    winner: Player | None = None

    @property
    def players(self) -> tuple[Player, Player]:
        return (self.player1, self.player2)

    @property
    def is_bye(self) -> bool:
        return self.player1.is_bye or self.player2.is_bye

    @property
    def is_decided(self) -> bool:
        return self.winner is not None

    @property
    def real_players(self) -> list[Player]:
        return [p for p in self.players if not p.is_bye]

    def slot(self, slot: int) -> Player:
        if slot == 1:
            return self.player1
        if slot == 2:
            return self.player2
        raise ValueError(f"Slot must be 1 or 2, got {slot!r}")

    def loser(self) -> Player | None:
        if self.winner is None:
            return None
        return self.player2 if self.winner.name == self.player1.name else self.player1


Round = tuple[Match, ...]


@dataclass(frozen=True)
class MatchRecord:
    """One line of the elimination match history (1-based numbering)."""

    round: int
    match: int
    winner: str
    score: int   # winner's live score when the match was decided


@dataclass(frozen=True)
class EliminationState:
    name: str
    match_point: int
    rounds: tuple[Round, ...]
    current_round_index: int = 0
    current_match_index: int = 0
    match_history: tuple[MatchRecord, ...] = ()
    # Running score of every real player in the current round, keyed by name.
    live_scores: dict[str, int] = field(default_factory=dict)

    mode: ClassVar[TournamentMode] = "elimination"

    @property
    def current_round(self) -> Round:
        return self.rounds[self.current_round_index]

    @property
    def current_match(self) -> Match | None:
        if self.current_match_index < len(self.current_round):
            return self.current_round[self.current_match_index]
        return None


@dataclass(frozen=True)
class Pairing:
    """An unordered Swiss matchup; `player_b` may be the SWISS_BYE sentinel."""

    player_a: Player
    player_b: Player

    @property
    def is_bye(self) -> bool:
        return self.player_b.is_bye

    @property
    def names(self) -> frozenset[str]:
        return frozenset((self.player_a.name, self.player_b.name))

    def involves(self, name_a: str, name_b: str) -> bool:
        return self.names == frozenset((name_a, name_b))


@dataclass(frozen=True)
class MatchResult:
    """Append-only Swiss result log entry."""

    round: int
    winner: str
    loser: str   # SWISS_BYE_NAME for an auto-resolved bye

    def involves(self, name_a: str, name_b: str) -> bool:
        return {self.winner, self.loser} == {name_a, name_b}


@dataclass(frozen=True)
class SwissState:
    name: str
    players: tuple[Player, ...]
    round: int
    pairings: tuple[Pairing, ...]
    match_results: tuple[MatchResult, ...] = ()
    champion: str | None = None

    mode: ClassVar[TournamentMode] = "swiss"

    @property
    def completed_matches(self) -> int:
        """Results logged for the current round, byes included."""
        return sum(1 for r in self.match_results if r.round == self.round)

    @property
    def is_finished(self) -> bool:
        return self.champion is not None


TournamentState = Union[EliminationState, SwissState]


@dataclass
class StandingEntry:
    """Running tally for one participant."""

    name: str
    score: int = 0
    wins: int = 0
    losses: int = 0
    byes: int = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses


PlayerInput = Union[str, Player]


def normalize_names(players: Iterable[PlayerInput], *, minimum: int = MIN_PLAYERS) -> list[str]:
    """
    Validate a raw participant list and return the cleaned names in order.

    Raises:
        InsufficientPlayersError: fewer than `minimum` entries.
        InvalidPlayerError: a blank, duplicated or reserved name.
    """
    names: list[str] = []
    for entry in players:
        raw = entry.name if isinstance(entry, Player) else entry
        names.append(validate_name(raw, taken=names))

    if len(names) < minimum:
        raise InsufficientPlayersError(len(names))
    return names


def validate_name(raw: object, taken: Iterable[str] = ()) -> str:
    """Return the stripped name, or raise InvalidPlayerError."""
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidPlayerError("Player names must be non-empty strings.")
    name = raw.strip()
    if name in RESERVED_NAMES:
        raise InvalidPlayerError(f"{name!r} is reserved for byes.")
    if name in set(taken):
        raise InvalidPlayerError(f"Duplicate player name: {name!r}")
    return name


class TournamentEngine(ABC):
    """
    Abstract base class for both tournament formats.

    Engines hold configuration only (match point, RNG); all tournament data
    lives in the state values they take and return.
    """

    mode: ClassVar[TournamentMode]

    @abstractmethod
    def create(self, players: Iterable[PlayerInput], name: str) -> TournamentState:
        """Build the initial state from a participant list."""
        ...  # pragma: no cover

    @abstractmethod
    def champion(self, state: TournamentState) -> str | None:
        """Return the champion's name once the tournament is over, else None."""
        ...  # pragma: no cover

    @abstractmethod
    def standings(self, state: TournamentState) -> list[StandingEntry]:
        """Return current standings, best first."""
        ...  # pragma: no cover
