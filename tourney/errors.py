"""
Tournament error taxonomy.

Every error raised by the engines, the session layer or the store derives
from TournamentError, so a presentation layer can catch one type and show
str(exc) to the user.  None of them leave an engine in a broken state: the
previous state value is still valid after any of these is raised.
"""

from __future__ import annotations


class TournamentError(Exception):
    """Base class for all recoverable tournament errors."""


class InsufficientPlayersError(TournamentError, ValueError):
    """Fewer than two participants were supplied (or would remain)."""

    def __init__(self, count: int, message: str | None = None) -> None:
        self.count = count
        super().__init__(
            message or f"A tournament requires at least 2 players, got {count}."
        )


class InvalidPlayerError(TournamentError, ValueError):
    """A participant name is blank, duplicated, reserved or unknown."""


class RoundIncompleteError(TournamentError):
    """advance() was requested while the active round still has open matches."""

    def __init__(self, round_num: int, open_matches: int) -> None:
        self.round_num = round_num
        self.open_matches = open_matches
        super().__init__(
            f"Round {round_num} still has {open_matches} undecided match(es)."
        )


class BracketLockedError(TournamentError):
    """A structural edit was attempted after round 1 produced results."""


class DuplicateResultError(TournamentError):
    """A Swiss pairing was already decided in the current round."""

    def __init__(self, round_num: int, player_a: str, player_b: str) -> None:
        self.round_num = round_num
        self.players = (player_a, player_b)
        super().__init__(
            f"{player_a} vs {player_b} was already decided in round {round_num}."
        )


class PairingNotFoundError(TournamentError, LookupError):
    """A Swiss result names two players who are not paired this round."""


class TournamentCompleteError(TournamentError):
    """A mutation was requested after the champion has been decided."""


class NoActiveTournamentError(TournamentError):
    """An operation needs a tournament but none was started or resumed."""


class PersistenceError(TournamentError):
    """The key-value store failed to read, write or decode a snapshot."""

    def __init__(self, key: str, message: str, cause: Exception | None = None) -> None:
        self.key = key
        self.cause = cause
        super().__init__(f"[{key}] {message}")
