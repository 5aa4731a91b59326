"""
Swiss-system tournament.

Rules:
- Round 1 pairs players in entry order; later rounds rank by score
  (stable, so equal scores keep entry order).
- Pairing is a greedy forward scan: each unpaired player meets the first
  later unpaired player with the *same* score whom they have not played.
  Anyone left without such a partner gets a bye.  This is deliberately a
  heuristic: it can hand out more byes than a full matching would.
- Byes are decided as soon as the round is paired: the player is logged as
  the winner against "Bye" with no score and no history change.
- A win is worth 1 point.  Both players record each other in their history.
- The tournament lasts ceil(log2(N)) rounds; the champion is the first
  player in the final standings (highest score, ties by entry order).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Sequence

from tourney.errors import (
    DuplicateResultError,
    InvalidPlayerError,
    PairingNotFoundError,
    TournamentCompleteError,
)
from tourney.tournaments.base import (
    SWISS_BYE,
    SWISS_BYE_NAME,
    MatchResult,
    Pairing,
    Player,
    PlayerInput,
    StandingEntry,
    SwissState,
    TournamentEngine,
    normalize_names,
    total_rounds,
)

logger = logging.getLogger(__name__)

POINTS_FOR_WIN = 1


def initialize(players: Iterable[PlayerInput]) -> list[Player]:
    """Convert a raw participant list into fresh Swiss players."""
    return [Player(name) for name in normalize_names(players)]


def generate_pairings(players: Sequence[Player]) -> list[Pairing]:
    """Greedy equal-score pairing with rematch exclusion."""
    ranked = sorted(players, key=lambda p: -p.score)
    used: set[int] = set()
    pairings: list[Pairing] = []

    for i, player in enumerate(ranked):
        if i in used:
            continue
        used.add(i)
        partner = next(
            (
                j for j in range(i + 1, len(ranked))
                if j not in used
                and ranked[j].score == player.score
                and ranked[j].name not in player.history
                and player.name not in ranked[j].history
            ),
            None,
        )
        if partner is None:
            pairings.append(Pairing(player, SWISS_BYE))
        else:
            used.add(partner)
            pairings.append(Pairing(player, ranked[partner]))

    return pairings


class SwissEngine(TournamentEngine):
    """Round-by-round Swiss pairing over immutable SwissState values."""

    mode = "swiss"

    def create(self, players: Iterable[PlayerInput], name: str) -> SwissState:
        roster = tuple(initialize(players))
        logger.info(
            "Created Swiss %r: %d players, %d rounds",
            name, len(roster), total_rounds(len(roster)),
        )
        state = SwissState(name=name, players=roster, round=1, pairings=())
        return self._settle(self._pair_round(state))

    def record_result(self, state: SwissState, winner: str, loser: str) -> SwissState:
        """
        Record that `winner` beat `loser` in the current round.

        Raises:
            TournamentCompleteError: the champion is already known.
            InvalidPlayerError: a player was named against themselves.
            DuplicateResultError: this pairing was already decided this round.
            PairingNotFoundError: the two players are not paired this round.
        """
        if state.is_finished:
            raise TournamentCompleteError(
                f"The tournament is over; {state.champion} is champion."
            )
        if winner == loser:
            raise InvalidPlayerError("A player cannot play against themselves.")
        if self.is_match_decided(state, winner, loser):
            raise DuplicateResultError(state.round, winner, loser)
        if not any(p.involves(winner, loser) for p in state.pairings):
            raise PairingNotFoundError(
                f"{winner} and {loser} are not paired in round {state.round}."
            )

        players = tuple(_apply_result(p, winner, loser) for p in state.players)
        result = MatchResult(round=state.round, winner=winner, loser=loser)
        logger.info("Round %d: %s beat %s", state.round, winner, loser)

        state = replace(
            state,
            players=players,
            match_results=state.match_results + (result,),
        )
        return self._settle(state)

    def is_match_decided(self, state: SwissState, player_a: str, player_b: str) -> bool:
        return any(
            r.round == state.round and r.involves(player_a, player_b)
            for r in state.match_results
        )

    def total_rounds(self, state: SwissState) -> int:
        return total_rounds(len(state.players))

    def champion(self, state: SwissState) -> str | None:
        return state.champion

    def standings(self, state: SwissState) -> list[StandingEntry]:
        entries = {p.name: StandingEntry(name=p.name, score=p.score) for p in state.players}
        for result in state.match_results:
            if result.loser == SWISS_BYE_NAME:
                entries[result.winner].byes += 1
                continue
            entries[result.winner].wins += 1
            entries[result.loser].losses += 1
        # sorted() is stable: equal scores keep entry order.
        return sorted(entries.values(), key=lambda e: -e.score)

    # ------------------------------------------------------------------ #
    # Internal helpers                                                     #
    # ------------------------------------------------------------------ #

    def _pair_round(self, state: SwissState) -> SwissState:
        pairings = tuple(generate_pairings(state.players))
        byes = tuple(
            MatchResult(round=state.round, winner=p.player_a.name, loser=SWISS_BYE_NAME)
            for p in pairings
            if p.is_bye
        )
        logger.info(
            "Round %d paired: %d matches, %d bye(s)",
            state.round, len(pairings) - len(byes), len(byes),
        )
        return replace(state, pairings=pairings, match_results=state.match_results + byes)

    def _settle(self, state: SwissState) -> SwissState:
        """Close every finished round: either crown a champion or pair the next."""
        while state.completed_matches >= len(state.pairings):
            if state.round >= self.total_rounds(state):
                champion = self.standings(state)[0]
                logger.info(
                    "Swiss %r complete: %s wins with %d pts",
                    state.name, champion.name, champion.score,
                )
                return replace(state, champion=champion.name)
            state = self._pair_round(replace(state, round=state.round + 1))
        return state


def _apply_result(player: Player, winner: str, loser: str) -> Player:
    if player.name == winner:
        return replace(
            player,
            score=player.score + POINTS_FOR_WIN,
            history=player.history + (loser,),
        )
    if player.name == loser:
        return replace(player, history=player.history + (winner,))
    return player
