"""
Interactive control loops — turn prompts into session intents.

Rendering is not done here: every intent goes through the session, whose
listener (cli/display.py) redraws from the emitted events.  Engine errors
are printed and the loop continues with the unchanged state.
"""

from __future__ import annotations

from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt

from tourney.config import ScoreAction
from tourney.errors import TournamentError
from tourney.session import EliminationSession, SwissSession
from tourney.tournaments.elimination import is_locked

console = Console(legacy_windows=False)


async def run_elimination(session: EliminationSession, actions: list[ScoreAction]) -> None:
    """Drive an elimination session until a champion is crowned or the user quits."""
    while session.state is not None and not session.is_complete:
        state = session.state
        current = state.current_match

        menu: list[tuple[str, str]] = []
        if current is not None:
            p1, p2 = current.player1.name, current.player2.name
            console.print(
                f"\n[bold bright_blue]▶ Round {state.current_round_index + 1}, "
                f"match {state.current_match_index + 1}[/]  "
                f"[bold]{p1}[/] {current.player1.score}  vs  "
                f"{current.player2.score} [bold]{p2}[/]  "
                f"[dim](first to {state.match_point})[/]"
            )
            menu += [("score1", f"Score for {p1}"), ("score2", f"Score for {p2}")]
            menu += [("minus", "Take points back"), ("winner", "Set winner manually")]
        else:
            menu.append(("advance", "Advance to the next round"))
        if not is_locked(state.rounds):
            menu += [("add", "Add player"), ("remove", "Remove player")]
        menu += [("rename", "Rename player"), ("reset", "Reset tournament"), ("quit", "Quit (progress is saved)")]

        action = _choose(menu)
        try:
            match action:
                case "score1" | "score2":
                    slot = 1 if action == "score1" else 2
                    points = _choose_points(actions)
                    await session.record_score(state.current_match_index, slot, points)
                case "minus":
                    slot = IntPrompt.ask("Player slot", choices=["1", "2"])
                    points = IntPrompt.ask("Points to remove", default=1)
                    await session.record_score(state.current_match_index, slot, -abs(points))
                case "winner":
                    slot = IntPrompt.ask("Winning slot", choices=["1", "2"])
                    await session.set_winner(state.current_match_index, slot)
                case "advance":
                    await session.advance()
                case "add":
                    await session.add_player(Prompt.ask("New player name"))
                case "remove":
                    await session.remove_player(Prompt.ask("Player to remove"))
                case "rename":
                    old = Prompt.ask("Current name")
                    await session.rename_player(old, Prompt.ask("New name"))
                case "reset":
                    if Confirm.ask("[red]Reset the tournament?[/]", default=False):
                        await session.reset()
                        return
                case "quit":
                    return
        except (TournamentError, ValueError, IndexError) as exc:
            console.print(f"  [red]{exc}[/]")


async def run_swiss(session: SwissSession) -> None:
    """Drive a Swiss session until a champion is crowned or the user quits."""
    while session.state is not None and not session.is_complete:
        state = session.state
        open_pairings = [
            p for p in state.pairings
            if not p.is_bye and not session.is_match_decided(p.player_a.name, p.player_b.name)
        ]

        menu = [
            (str(i), f"{p.player_a.name} vs {p.player_b.name}")
            for i, p in enumerate(open_pairings)
        ]
        menu += [("reset", "Reset tournament"), ("quit", "Quit (progress is saved)")]
        console.print(f"\n[bold bright_blue]▶ Round {state.round}[/] — record a result:")

        action = _choose(menu)
        try:
            match action:
                case "reset":
                    if Confirm.ask("[red]Reset the tournament?[/]", default=False):
                        await session.reset()
                        return
                case "quit":
                    return
                case _:
                    pairing = open_pairings[int(action)]
                    a, b = pairing.player_a.name, pairing.player_b.name
                    choice = IntPrompt.ask(f"Winner: 1. {a}   2. {b}", choices=["1", "2"])
                    winner, loser = (a, b) if choice == 1 else (b, a)
                    await session.record_result(winner, loser)
        except TournamentError as exc:
            console.print(f"  [red]{exc}[/]")


# --------------------------------------------------------------------------- #
# Helpers                                                                      #
# --------------------------------------------------------------------------- #

def _choose(menu: list[tuple[str, str]]) -> str:
    for i, (_, label) in enumerate(menu, 1):
        console.print(f"  {i}. {label}")
    choice = IntPrompt.ask("Select", choices=[str(i) for i in range(1, len(menu) + 1)])
    return menu[choice - 1][0]


def _choose_points(actions: list[ScoreAction]) -> int:
    for i, action in enumerate(actions, 1):
        console.print(f"    {i}. {action.label} (+{action.points})")
    choice = IntPrompt.ask("  Finish", choices=[str(i) for i in range(1, len(actions) + 1)])
    return actions[choice - 1].points
