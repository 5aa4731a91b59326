"""
Tournament sessions — one engine, one store key, one optional listener.

A session owns the single active state of its mode.  Every user intent goes
through the same sequence:

    1. the engine computes the new state (raising leaves nothing changed)
    2. the session commits it in memory
    3. the listener receives events describing the new state
    4. the snapshot is saved (or removed, once the champion is known)

Because step 4 is awaited after step 2, a save can never persist a state
other than the one just committed.  Store failures never propagate: they are
logged, remembered in `last_persistence_error`, and reported to the listener
as a PersistenceWarningEvent.
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from typing import Generic, Iterable, TypeVar

from tourney import serialization
from tourney.config import Config
from tourney.errors import NoActiveTournamentError, PersistenceError
from tourney.names import random_tournament_name
from tourney.store import KeyValueStore
from tourney.tournaments.base import (
    SWISS_BYE_NAME,
    EliminationState,
    PlayerInput,
    StandingEntry,
    SwissState,
    TournamentMode,
)
from tourney.tournaments.elimination import EliminationEngine, player_names
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

logger = logging.getLogger(__name__)

S = TypeVar("S", EliminationState, SwissState)


class TournamentSession(ABC, Generic[S]):
    """Shared resume / start / commit / reset plumbing for both modes."""

    mode: TournamentMode

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        listener: EventListener | None = None,
    ) -> None:
        self.store = store
        self.key = key
        self._listener = listener
        self.state: S | None = None
        self.last_persistence_error: PersistenceError | None = None

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    @property
    def is_active(self) -> bool:
        return self.state is not None

    @property
    def is_complete(self) -> bool:
        return self.state is not None and self.champion is not None

    @property
    def champion(self) -> str | None:
        return None if self.state is None else self.engine.champion(self.state)

    async def resume(self) -> S | None:
        """
        Load the persisted snapshot for this mode, if any.

        An unreadable or corrupt snapshot is reported as a warning and
        treated as nothing to resume.
        """
        try:
            data = await self.store.load(self.key)
        except PersistenceError as exc:
            self._warn(exc)
            return None
        if data is None:
            return None

        try:
            state = serialization.decode(data, expected_mode=self.mode)
        except ValueError as exc:
            self._warn(PersistenceError(self.key, f"Corrupt snapshot: {exc}", exc))
            return None

        self.state = state
        logger.info("Resumed %s tournament %r from %r", self.mode, state.name, self.key)
        self._emit(self._start_event(state, resumed=True))
        for event in self._state_events(None, state):
            self._emit(event)
        return state

    async def start(self, players: Iterable[PlayerInput], name: str | None = None) -> S:
        """Create a new tournament, replacing any active one of this mode."""
        name = (name or "").strip() or random_tournament_name()
        state = self._create(players, name)
        self.state = None
        self._emit(self._start_event(state, resumed=False))
        return await self._commit(state)

    async def reset(self) -> None:
        """Drop the active tournament and its persisted snapshot."""
        name = self.state.name if self.state is not None else ""
        self.state = None
        await self._remove_snapshot()
        logger.info("Reset %s tournament %r", self.mode, name)
        self._emit(TournamentResetEvent(mode=self.mode, name=name))

    def standings(self) -> list[StandingEntry]:
        return self.engine.standings(self._require_state())

    # ------------------------------------------------------------------ #
    # Subclass hooks                                                       #
    # ------------------------------------------------------------------ #

    @property
    @abstractmethod
    def engine(self) -> EliminationEngine | SwissEngine:
        ...

    @abstractmethod
    def _create(self, players: Iterable[PlayerInput], name: str) -> S:
        ...

    @abstractmethod
    def _start_event(self, state: S, resumed: bool) -> TournamentStartEvent:
        ...

    @abstractmethod
    def _state_events(self, previous: S | None, state: S) -> list[TournamentEvent]:
        """Events describing the transition previous -> state."""
        ...

    # ------------------------------------------------------------------ #
    # Internal helpers                                                     #
    # ------------------------------------------------------------------ #

    def _require_state(self) -> S:
        if self.state is None:
            raise NoActiveTournamentError(f"No active {self.mode} tournament.")
        return self.state

    async def _commit(self, new_state: S) -> S:
        previous = self.state
        if new_state is previous:
            return new_state

        self.state = new_state
        for event in self._state_events(previous, new_state):
            self._emit(event)

        champion = self.engine.champion(new_state)
        if champion is None:
            await self._save(new_state)
            return new_state

        self._emit(
            TournamentCompleteEvent(
                mode=self.mode,
                name=new_state.name,
                winner_name=champion,
                final_standings=self.engine.standings(new_state),
            )
        )
        # A finished tournament is no longer resumable.
        await self._remove_snapshot()
        return new_state

    async def _save(self, state: S) -> None:
        try:
            await self.store.save(self.key, serialization.encode(state))
        except PersistenceError as exc:
            self._warn(exc)
        else:
            self.last_persistence_error = None

    async def _remove_snapshot(self) -> None:
        try:
            await self.store.remove(self.key)
        except PersistenceError as exc:
            self._warn(exc)

    def _warn(self, exc: PersistenceError) -> None:
        logger.warning("Persistence failure: %s", exc)
        self.last_persistence_error = exc
        self._emit(PersistenceWarningEvent(key=self.key, message=str(exc)))

    def _emit(self, event: TournamentEvent) -> None:
        if self._listener is not None:
            self._listener(event)


class EliminationSession(TournamentSession[EliminationState]):
    mode = "elimination"

    def __init__(
        self,
        store: KeyValueStore,
        key: str = "lastTournament",
        listener: EventListener | None = None,
        *,
        match_point: int = 5,
        auto_advance: bool = True,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(store, key, listener)
        self._engine = EliminationEngine(match_point=match_point, rng=rng)
        self.auto_advance = auto_advance

    @property
    def engine(self) -> EliminationEngine:
        return self._engine

    async def record_score(self, match_index: int, slot: int, delta: int) -> EliminationState:
        state = self.engine.record_score(self._require_state(), match_index, slot, delta)
        return await self._commit(self._maybe_advance(state))

    async def set_winner(self, match_index: int, slot: int) -> EliminationState:
        state = self.engine.record_manual_winner(self._require_state(), match_index, slot)
        return await self._commit(self._maybe_advance(state))

    async def advance(self) -> EliminationState:
        return await self._commit(self.engine.advance(self._require_state()))

    async def add_player(self, name: str) -> EliminationState:
        return await self._commit(self.engine.add_player(self._require_state(), name))

    async def remove_player(self, name: str) -> EliminationState:
        return await self._commit(self.engine.remove_player(self._require_state(), name))

    async def rename_player(self, old: str, new: str) -> EliminationState:
        return await self._commit(self.engine.rename_player(self._require_state(), old, new))

    def _create(self, players: Iterable[PlayerInput], name: str) -> EliminationState:
        return self.engine.create(players, name)

    def _maybe_advance(self, state: EliminationState) -> EliminationState:
        if (
            self.auto_advance
            and self.engine.is_round_decided(state)
            and not self.engine.is_complete(state)
        ):
            return self.engine.advance(state)
        return state

    def _start_event(self, state: EliminationState, resumed: bool) -> TournamentStartEvent:
        return TournamentStartEvent(
            mode=self.mode,
            name=state.name,
            participant_names=player_names(state.rounds[0]),
            total_rounds=self.engine.total_rounds(state),
            resumed=resumed,
        )

    def _state_events(
        self, previous: EliminationState | None, state: EliminationState
    ) -> list[TournamentEvent]:
        events: list[TournamentEvent] = []
        known = len(previous.match_history) if previous is not None else len(state.match_history)
        for record in state.match_history[known:]:
            match = state.rounds[record.round - 1][record.match - 1]
            loser = match.loser()
            events.append(
                MatchDecidedEvent(
                    mode=self.mode,
                    round_num=record.round,
                    winner_name=record.winner,
                    loser_name=loser.name if loser else "",
                    record=record,
                )
            )
        events.append(
            BracketUpdatedEvent(
                name=state.name,
                rounds=state.rounds,
                current_round_index=state.current_round_index,
                current_match_index=state.current_match_index,
                live_scores=dict(state.live_scores),
                total_rounds=self.engine.total_rounds(state),
            )
        )
        return events


class SwissSession(TournamentSession[SwissState]):
    mode = "swiss"

    def __init__(
        self,
        store: KeyValueStore,
        key: str = "swissTournament",
        listener: EventListener | None = None,
    ) -> None:
        super().__init__(store, key, listener)
        self._engine = SwissEngine()

    @property
    def engine(self) -> SwissEngine:
        return self._engine

    async def record_result(self, winner: str, loser: str) -> SwissState:
        return await self._commit(
            self.engine.record_result(self._require_state(), winner, loser)
        )

    def is_match_decided(self, player_a: str, player_b: str) -> bool:
        return self.engine.is_match_decided(self._require_state(), player_a, player_b)

    def _create(self, players: Iterable[PlayerInput], name: str) -> SwissState:
        return self.engine.create(players, name)

    def _start_event(self, state: SwissState, resumed: bool) -> TournamentStartEvent:
        return TournamentStartEvent(
            mode=self.mode,
            name=state.name,
            participant_names=[p.name for p in state.players],
            total_rounds=self.engine.total_rounds(state),
            resumed=resumed,
        )

    def _state_events(
        self, previous: SwissState | None, state: SwissState
    ) -> list[TournamentEvent]:
        events: list[TournamentEvent] = []
        known = len(previous.match_results) if previous is not None else len(state.match_results)
        for result in state.match_results[known:]:
            if result.loser == SWISS_BYE_NAME:
                continue
            events.append(
                MatchDecidedEvent(
                    mode=self.mode,
                    round_num=result.round,
                    winner_name=result.winner,
                    loser_name=result.loser,
                    record=result,
                )
            )
        events.append(
            PairingsUpdatedEvent(
                name=state.name,
                round_num=state.round,
                total_rounds=self.engine.total_rounds(state),
                pairings=state.pairings,
                decided=tuple(
                    self.engine.is_match_decided(
                        state, p.player_a.name, p.player_b.name
                    )
                    for p in state.pairings
                ),
                standings=self.engine.standings(state),
            )
        )
        return events


def create_session(
    mode: TournamentMode,
    config: Config,
    store: KeyValueStore,
    listener: EventListener | None = None,
    *,
    match_point: int | None = None,
    rng: random.Random | None = None,
) -> EliminationSession | SwissSession:
    """Build a session for `mode` using the storage keys and defaults in `config`."""
    match mode:
        case "elimination":
            return EliminationSession(
                store,
                config.storage.elimination_key,
                listener,
                match_point=match_point or config.tournament.match_point,
                auto_advance=config.tournament.auto_advance,
                rng=rng,
            )
        case "swiss":
            return SwissSession(store, config.storage.swiss_key, listener)
        case _:
            raise ValueError(f"Unknown tournament mode: {mode!r}")
