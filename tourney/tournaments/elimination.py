"""
Single-elimination bracket.

Rules:
- Players are shuffled uniformly (Fisher–Yates) and paired in order.
- An odd player out meets the "Wildcard (Bye)" sentinel and is advanced
  immediately: bye matches are created already decided.
- A match is won by the first player whose live score reaches the
  tournament's match point, or by a manual override.
- Once every match of the last round is decided, advance() pairs the
  winners of matches 2i and 2i+1; a trailing winner gets a bye.
- Round 1 may still be edited (add/remove players) until it has a contested
  result or a recorded score.

The module-level functions work on raw rounds; EliminationEngine wraps them
to produce full EliminationState values.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Iterable, Sequence, TypeVar

from tourney.errors import (
    BracketLockedError,
    InsufficientPlayersError,
    InvalidPlayerError,
    RoundIncompleteError,
    TournamentCompleteError,
)
from tourney.tournaments.base import (
    MIN_PLAYERS,
    WILDCARD,
    EliminationState,
    Match,
    MatchRecord,
    Player,
    PlayerInput,
    Round,
    StandingEntry,
    TournamentEngine,
    normalize_names,
    validate_name,
)

logger = logging.getLogger(__name__)

DEFAULT_MATCH_POINT = 5

T = TypeVar("T")


# ------------------------------------------------------------------ #
# Bracket functions                                                    #
# ------------------------------------------------------------------ #

def fisher_yates_shuffle(items: Sequence[T], rng: random.Random) -> list[T]:
    """Return a uniformly shuffled copy of `items`."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def seed(players: Iterable[PlayerInput], rng: random.Random | None = None) -> Round:
    """
    Build the first round from a participant list.

    Raises:
        InsufficientPlayersError: fewer than 2 players.
        InvalidPlayerError: blank, duplicate or reserved names.
    """
    names = normalize_names(players)
    shuffled = fisher_yates_shuffle(names, rng or random.Random())

    matches: list[Match] = []
    for i in range(0, len(shuffled), 2):
        p1 = Player(shuffled[i])
        p2 = Player(shuffled[i + 1]) if i + 1 < len(shuffled) else WILDCARD
        matches.append(_make_match(p1, p2))
    return tuple(matches)


def record_score(
    round_: Round,
    match_index: int,
    slot: int,
    delta: int,
    match_point: int,
) -> Round:
    """
    Add `delta` to the player in `slot` of the given match.

    Reaching `match_point` decides the match.  Scores never drop below 0.
    A match that already has a winner is left untouched and the same round
    object is returned.
    """
    match = _get_match(round_, match_index)
    if match.is_decided:
        logger.debug("Match %d already decided — score ignored", match_index + 1)
        return round_
    if delta == 0:
        raise ValueError("Score delta must be non-zero.")
    if match_point < 1:
        raise ValueError(f"match_point must be >= 1, got {match_point}")

    target = match.slot(slot)
    if target.is_bye:
        raise ValueError("Cannot score a bye slot.")

    scored = target.with_score(target.score + delta)
    winner = scored if scored.score >= match_point else None
    updated = Match(
        player1=scored if slot == 1 else match.player1,
        player2=scored if slot == 2 else match.player2,
        winner=winner,
    )
    return _replace_match(round_, match_index, updated)


def record_manual_winner(round_: Round, match_index: int, slot: int) -> Round:
    """Force the player in `slot` to win, regardless of score."""
    match = _get_match(round_, match_index)
    if match.is_decided:
        logger.debug("Match %d already decided — manual winner ignored", match_index + 1)
        return round_

    winner = match.slot(slot)
    if winner.is_bye:
        raise ValueError("A bye cannot win a match.")
    return _replace_match(round_, match_index, replace(match, winner=winner))


def advance(rounds: tuple[Round, ...]) -> tuple[Round, ...]:
    """
    Append the next round, built from the winners of the last round.

    Raises:
        RoundIncompleteError: the last round has undecided matches.
        TournamentCompleteError: the bracket already has a champion.
    """
    if not rounds:
        raise ValueError("Cannot advance an empty bracket.")
    if is_complete(rounds) is not None:
        raise TournamentCompleteError("The bracket already has a champion.")

    last = rounds[-1]
    open_matches = sum(1 for m in last if not m.is_decided)
    if open_matches:
        raise RoundIncompleteError(len(rounds), open_matches)

    # Winners start the next match from zero.
    winners = [Player(m.winner.name) for m in last if m.winner is not None]
    next_round = tuple(
        _make_match(winners[i], winners[i + 1] if i + 1 < len(winners) else WILDCARD)
        for i in range(0, len(winners), 2)
    )
    return rounds + (next_round,)


def is_complete(rounds: tuple[Round, ...]) -> Player | None:
    """Return the champion when the last round is a single decided match."""
    if not rounds:
        return None
    last = rounds[-1]
    if len(last) == 1 and last[0].winner is not None:
        return last[0].winner
    return None


def is_locked(rounds: tuple[Round, ...]) -> bool:
    """True once round 1 has a contested result, any score, or a successor."""
    if len(rounds) > 1:
        return True
    for match in rounds[0]:
        if match.is_bye:
            continue
        if match.is_decided or any(p.score for p in match.players):
            return True
    return False


def add_player(rounds: tuple[Round, ...], name: str) -> tuple[Round, ...]:
    """
    Insert a late entrant into the first open (bye) slot of round 1, or
    append a new bye match when every slot is taken.
    """
    _ensure_unlocked(rounds)
    first = rounds[0]
    newcomer = Player(validate_name(name, taken=player_names(first)))

    matches = list(first)
    for i, match in enumerate(matches):
        if match.player1.is_bye:
            matches[i] = _make_match(newcomer, match.player2)
            break
        if match.player2.is_bye:
            matches[i] = _make_match(match.player1, newcomer)
            break
    else:
        matches.append(_make_match(newcomer, WILDCARD))

    logger.info("Added %s to round 1", newcomer.name)
    return (tuple(matches),)


def remove_player(rounds: tuple[Round, ...], name: str) -> tuple[Round, ...]:
    """
    Replace a player's round-1 slot with a bye.  Matches left with no real
    player are dropped.
    """
    _ensure_unlocked(rounds)
    first = rounds[0]
    names = player_names(first)
    if name not in names:
        raise InvalidPlayerError(f"Unknown player: {name!r}")
    if len(names) - 1 < MIN_PLAYERS:
        raise InsufficientPlayersError(
            len(names) - 1, "Removing this player would leave fewer than 2 players."
        )

    matches: list[Match] = []
    for match in first:
        if name not in (match.player1.name, match.player2.name):
            matches.append(match)
            continue
        p1 = WILDCARD if match.player1.name == name else match.player1
        p2 = WILDCARD if match.player2.name == name else match.player2
        if p1.is_bye and p2.is_bye:
            continue
        matches.append(_make_match(p1, p2))

    logger.info("Removed %s from round 1", name)
    return (tuple(matches),)


def rename_player(rounds: tuple[Round, ...], old: str, new: str) -> tuple[Round, ...]:
    """Relabel a player in every round.  Allowed at any stage."""
    names = player_names(rounds[0])
    if old not in names:
        raise InvalidPlayerError(f"Unknown player: {old!r}")
    new = validate_name(new, taken=[n for n in names if n != old])
    if new == old:
        return rounds

    def relabel(p: Player | None) -> Player | None:
        if p is not None and not p.is_bye and p.name == old:
            return replace(p, name=new)
        return p

    return tuple(
        tuple(
            Match(relabel(m.player1), relabel(m.player2), relabel(m.winner))
            for m in round_
        )
        for round_ in rounds
    )


def player_names(round_: Round) -> list[str]:
    """Real player names in bracket order."""
    return [p.name for m in round_ for p in m.real_players]


def bracket_rounds(first: Round) -> int:
    """Rounds needed to reduce the matches of round 1 to a single final."""
    return (len(first) - 1).bit_length() + 1


# ------------------------------------------------------------------ #
# Engine                                                               #
# ------------------------------------------------------------------ #

class EliminationEngine(TournamentEngine):
    """State-level wrapper around the bracket functions."""

    mode = "elimination"

    def __init__(
        self,
        match_point: int = DEFAULT_MATCH_POINT,
        rng: random.Random | None = None,
    ) -> None:
        if match_point < 1:
            raise ValueError(f"match_point must be >= 1, got {match_point}")
        self.match_point = match_point
        self._rng = rng or random.Random()

    def create(self, players: Iterable[PlayerInput], name: str) -> EliminationState:
        first = seed(players, self._rng)
        logger.info(
            "Seeded %r: %d players, %d matches, match point %d",
            name, len(player_names(first)), len(first), self.match_point,
        )
        return _refresh(
            EliminationState(name=name, match_point=self.match_point, rounds=(first,))
        )

    def record_score(
        self, state: EliminationState, match_index: int, slot: int, delta: int
    ) -> EliminationState:
        new_round = record_score(
            state.current_round, match_index, slot, delta, state.match_point
        )
        return _commit_round(state, new_round, match_index)

    def record_manual_winner(
        self, state: EliminationState, match_index: int, slot: int
    ) -> EliminationState:
        new_round = record_manual_winner(state.current_round, match_index, slot)
        return _commit_round(state, new_round, match_index)

    def advance(self, state: EliminationState) -> EliminationState:
        rounds = advance(state.rounds)
        logger.info("Advanced %r to round %d (%d matches)", state.name, len(rounds), len(rounds[-1]))
        return _refresh(replace(state, rounds=rounds))

    def add_player(self, state: EliminationState, name: str) -> EliminationState:
        return _refresh(replace(state, rounds=add_player(state.rounds, name)))

    def remove_player(self, state: EliminationState, name: str) -> EliminationState:
        return _refresh(replace(state, rounds=remove_player(state.rounds, name)))

    def rename_player(self, state: EliminationState, old: str, new: str) -> EliminationState:
        rounds = rename_player(state.rounds, old, new)
        if rounds is state.rounds:
            return state
        new = new.strip()
        history = tuple(
            replace(r, winner=new) if r.winner == old else r for r in state.match_history
        )
        return _refresh(replace(state, rounds=rounds, match_history=history))

    def is_complete(self, state: EliminationState) -> bool:
        return is_complete(state.rounds) is not None

    def total_rounds(self, state: EliminationState) -> int:
        return bracket_rounds(state.rounds[0])

    def is_round_decided(self, state: EliminationState) -> bool:
        return all(m.is_decided for m in state.current_round)

    def champion(self, state: EliminationState) -> str | None:
        winner = is_complete(state.rounds)
        return winner.name if winner else None

    def standings(self, state: EliminationState) -> list[StandingEntry]:
        """Players by rounds survived (wins + byes), then bracket order."""
        order = player_names(state.rounds[0])
        entries = {name: StandingEntry(name=name) for name in order}

        for round_ in state.rounds:
            for match in round_:
                if match.winner is None:
                    continue
                entry = entries.get(match.winner.name)
                if entry is None:
                    continue
                if match.is_bye:
                    entry.byes += 1
                else:
                    entry.wins += 1
                    loser = match.loser()
                    if loser is not None and loser.name in entries:
                        entries[loser.name].losses += 1
                entry.score = entry.wins + entry.byes

        return sorted(
            entries.values(),
            key=lambda e: (-e.score, -e.wins, order.index(e.name)),
        )


# ------------------------------------------------------------------ #
# Internal helpers                                                     #
# ------------------------------------------------------------------ #

def _make_match(p1: Player, p2: Player) -> Match:
    """Build a match, pre-resolving it when one side is a bye."""
    if p1.is_bye and p2.is_bye:
        raise ValueError("A match needs at least one real player.")
    if p2.is_bye:
        return Match(p1, p2, winner=p1)
    if p1.is_bye:
        return Match(p1, p2, winner=p2)
    return Match(p1, p2)


def _get_match(round_: Round, match_index: int) -> Match:
    if not 0 <= match_index < len(round_):
        raise IndexError(
            f"Match index {match_index} out of range (round has {len(round_)} matches)"
        )
    return round_[match_index]


def _replace_match(round_: Round, match_index: int, match: Match) -> Round:
    return round_[:match_index] + (match,) + round_[match_index + 1:]


def _ensure_unlocked(rounds: tuple[Round, ...]) -> None:
    if not rounds:
        raise ValueError("The bracket has not been seeded.")
    if is_locked(rounds):
        raise BracketLockedError(
            "Players can only be added or removed before round 1 has results."
        )


def _commit_round(state: EliminationState, new_round: Round, match_index: int) -> EliminationState:
    if new_round is state.current_round:
        return state

    history = state.match_history
    before = state.current_round[match_index]
    after = new_round[match_index]
    if not before.is_decided and after.winner is not None:
        record = MatchRecord(
            round=state.current_round_index + 1,
            match=match_index + 1,
            winner=after.winner.name,
            score=after.winner.score,
        )
        history = history + (record,)
        logger.info(
            "Round %d match %d: %s wins with %d pts",
            record.round, record.match, record.winner, record.score,
        )

    rounds = state.rounds[:-1] + (new_round,)
    return _refresh(replace(state, rounds=rounds, match_history=history))


def _refresh(state: EliminationState) -> EliminationState:
    """Recompute the derived cursor and live score fields."""
    current_round_index = len(state.rounds) - 1
    current = state.rounds[current_round_index]
    current_match_index = next(
        (i for i, m in enumerate(current) if not m.is_decided), len(current)
    )
    live_scores = {p.name: p.score for m in current for p in m.real_players}
    return replace(
        state,
        current_round_index=current_round_index,
        current_match_index=current_match_index,
        live_scores=live_scores,
    )
