"""
Tests for the Swiss engine — greedy pairing, rematch exclusion, bye policy,
round counting and champion selection.
"""

from __future__ import annotations

import pytest

from tourney.errors import (
    DuplicateResultError,
    InsufficientPlayersError,
    InvalidPlayerError,
    PairingNotFoundError,
    TournamentCompleteError,
)
from tourney.tournaments import create_engine
from tourney.tournaments.base import SWISS_BYE_NAME, MatchResult, Player, SwissState
from tourney.tournaments.swiss import SwissEngine, generate_pairings, initialize


def names(pairings) -> list[tuple[str, str]]:
    return [(p.player_a.name, p.player_b.name) for p in pairings]


def play_round(engine: SwissEngine, state: SwissState) -> SwissState:
    """Player A of every open pairing wins."""
    for pairing in state.pairings:
        if pairing.is_bye:
            continue
        a, b = pairing.player_a.name, pairing.player_b.name
        if not engine.is_match_decided(state, a, b):
            state = engine.record_result(state, a, b)
    return state


def play_out(engine: SwissEngine, state: SwissState) -> SwissState:
    while not state.is_finished:
        state = play_round(engine, state)
    return state


class TestGeneratePairings:

    def test_round_one_pairs_in_entry_order(self):
        assert names(generate_pairings(initialize(["A", "B", "C", "D"]))) == [
            ("A", "B"), ("C", "D"),
        ]

    def test_equal_scores_keep_entry_order(self):
        players = [Player("A", 0), Player("B", 1), Player("C", 0), Player("D", 1)]
        assert names(generate_pairings(players)) == [("B", "D"), ("A", "C")]

    def test_skips_previous_opponent(self):
        players = [
            Player("A", 1, history=("B",)),
            Player("B", 1, history=("A",)),
            Player("C", 1),
            Player("D", 1),
        ]
        assert names(generate_pairings(players)) == [("A", "C"), ("B", "D")]

    def test_never_pairs_unequal_scores(self):
        players = [Player("A", 2), Player("B", 1), Player("C", 0)]
        pairings = generate_pairings(players)
        assert all(p.is_bye for p in pairings)
        assert [p.player_b.name for p in pairings] == [SWISS_BYE_NAME] * 3

    def test_greedy_scan_can_leave_extra_bye(self):
        # A takes B first, so C and D (who already met) cannot pair.
        players = [
            Player("A"),
            Player("B"),
            Player("C", history=("D",)),
            Player("D", history=("C",)),
        ]
        assert names(generate_pairings(players)) == [
            ("A", "B"), ("C", SWISS_BYE_NAME), ("D", SWISS_BYE_NAME),
        ]

    def test_odd_player_gets_bye(self):
        pairings = generate_pairings(initialize(["A", "B", "C"]))
        assert names(pairings) == [("A", "B"), ("C", SWISS_BYE_NAME)]
        assert pairings[-1].is_bye


class TestSwissEngine:

    def setup_method(self):
        self.engine = SwissEngine()

    def test_four_player_example(self):
        state = self.engine.create(["A", "B", "C", "D"], "Open")
        assert state.round == 1
        assert names(state.pairings) == [("A", "B"), ("C", "D")]

        state = self.engine.record_result(state, "A", "B")
        state = self.engine.record_result(state, "C", "D")

        assert state.round == 2
        assert names(state.pairings) == [("A", "C"), ("B", "D")]
        by_name = {p.name: p for p in state.players}
        assert by_name["A"].history == ("B",)
        assert by_name["B"].history == ("A",)
        assert by_name["A"].score == 1 and by_name["B"].score == 0

    def test_round_counts(self):
        assert self.engine.total_rounds(self.engine.create(["A", "B"], "x")) == 1
        assert self.engine.total_rounds(self.engine.create(list("ABCD"), "x")) == 2
        assert self.engine.total_rounds(self.engine.create(list("ABCDE"), "x")) == 3
        assert self.engine.total_rounds(self.engine.create(list("ABCDEFGHI"), "x")) == 4

    @pytest.mark.parametrize("players,rounds", [(list("ABCD"), 2), (list("ABCDE"), 3)])
    def test_tournament_ends_after_total_rounds(self, players, rounds):
        state = play_out(self.engine, self.engine.create(players, "Open"))
        assert state.round == rounds
        assert state.champion is not None
        assert max(r.round for r in state.match_results) == rounds

    def test_byes_are_auto_resolved_without_points(self):
        state = self.engine.create(["A", "B", "C"], "Trio")
        assert MatchResult(round=1, winner="C", loser=SWISS_BYE_NAME) in state.match_results
        assert state.completed_matches == 1
        c = next(p for p in state.players if p.name == "C")
        assert c.score == 0 and c.history == ()

    def test_three_player_run(self):
        state = self.engine.create(["A", "B", "C"], "Trio")
        state = self.engine.record_result(state, "A", "B")

        # A leads alone; B and C are level and have not met.
        assert state.round == 2
        assert names(state.pairings) == [("A", SWISS_BYE_NAME), ("B", "C")]

        state = self.engine.record_result(state, "B", "C")
        assert state.is_finished
        assert state.champion == "A"

    def test_no_rematch_when_alternative_exists(self):
        state = play_out(self.engine, self.engine.create(list("ABCDEFGH"), "Eight"))
        for player in state.players:
            assert len(player.history) == len(set(player.history))

    def test_duplicate_result_rejected_in_either_direction(self):
        state = self.engine.create(["A", "B", "C", "D"], "Open")
        state = self.engine.record_result(state, "A", "B")
        for winner, loser in (("A", "B"), ("B", "A")):
            with pytest.raises(DuplicateResultError):
                self.engine.record_result(state, winner, loser)
        assert len(state.match_results) == 1
        assert next(p for p in state.players if p.name == "A").score == 1

    def test_unpaired_players_rejected(self):
        state = self.engine.create(["A", "B", "C", "D"], "Open")
        with pytest.raises(PairingNotFoundError):
            self.engine.record_result(state, "A", "C")
        with pytest.raises(PairingNotFoundError):
            self.engine.record_result(state, "A", "Zed")

    def test_self_pairing_rejected(self):
        state = self.engine.create(["A", "B"], "Pair")
        with pytest.raises(InvalidPlayerError):
            self.engine.record_result(state, "A", "A")

    def test_bye_result_cannot_be_recorded_again(self):
        state = self.engine.create(["A", "B", "C"], "Trio")
        with pytest.raises(DuplicateResultError):
            self.engine.record_result(state, "C", SWISS_BYE_NAME)

    def test_result_after_finish_rejected(self):
        state = self.engine.create(["A", "B"], "Pair")
        state = self.engine.record_result(state, "B", "A")
        assert self.engine.champion(state) == "B"
        with pytest.raises(TournamentCompleteError):
            self.engine.record_result(state, "A", "B")

    def test_standings_break_ties_by_entry_order(self):
        state = self.engine.create(["A", "B", "C", "D"], "Open")
        state = self.engine.record_result(state, "B", "A")
        state = self.engine.record_result(state, "D", "C")
        # Round 2: B vs D (1 pt each), A vs C (0 pts each).
        assert names(state.pairings) == [("B", "D"), ("A", "C")]
        state = self.engine.record_result(state, "D", "B")
        state = self.engine.record_result(state, "A", "C")

        standings = self.engine.standings(state)
        assert [e.name for e in standings] == ["D", "A", "B", "C"]
        assert state.champion == "D"

    def test_standings_tally(self):
        state = self.engine.create(["A", "B", "C"], "Trio")
        state = self.engine.record_result(state, "A", "B")
        table = {e.name: e for e in self.engine.standings(state)}
        assert (table["A"].wins, table["A"].losses, table["A"].byes) == (1, 0, 1)
        assert (table["B"].wins, table["B"].losses) == (0, 1)
        assert table["C"].byes == 1
        assert table["A"].games_played == 1

    def test_state_is_not_mutated(self):
        state = self.engine.create(["A", "B", "C", "D"], "Open")
        after = self.engine.record_result(state, "A", "B")
        assert after is not state
        assert state.match_results == ()
        assert all(p.score == 0 for p in state.players)

    def test_invalid_rosters_rejected(self):
        with pytest.raises(InsufficientPlayersError):
            self.engine.create(["A"], "Solo")
        with pytest.raises(InvalidPlayerError):
            self.engine.create(["A", "Bye"], "Reserved")

    def test_factory(self):
        assert isinstance(create_engine("swiss"), SwissEngine)
