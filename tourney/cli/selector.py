"""
Interactive tournament setup.

Players are entered one at a time; the list can be edited (rename/remove)
before the tournament starts.  A blank name picks a random one.
"""

from __future__ import annotations

from rich.console import Console
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from tourney.config import TournamentConfig
from tourney.errors import InvalidPlayerError
from tourney.names import random_player_name, random_tournament_name
from tourney.tournaments.base import MIN_PLAYERS, TournamentMode, total_rounds, validate_name

console = Console(legacy_windows=False)


def select_participants() -> list[str]:
    """
    Prompt for participant names until the user types `done` (min 2).

    Commands:
        <name>            add a player (blank = random name)
        rename <n> <new>  rename player number n
        remove <n>        remove player number n
        done              finish
    """
    console.print(
        "\n[bold]Participants[/]\n"
        "  Type a name to add it ([dim]Enter = random name[/]).\n"
        "  [bold]rename <n> <name>[/], [bold]remove <n>[/], [bold]done[/] when finished.\n"
    )
    players: list[str] = []

    while True:
        raw = Prompt.ask(f"  Player #{len(players) + 1}", default="", show_default=False).strip()
        command, _, rest = raw.partition(" ")

        if command.lower() == "done":
            if len(players) < MIN_PLAYERS:
                console.print(f"  [red]Need at least {MIN_PLAYERS} players.[/]")
                continue
            break

        if command.lower() in ("rename", "remove") and rest:
            _edit_players(players, command.lower(), rest)
            _print_players(players)
            continue

        name = raw or random_player_name(players)
        try:
            players.append(validate_name(name, taken=players))
        except InvalidPlayerError as exc:
            console.print(f"  [red]{exc}[/]")
            continue
        console.print(f"  [green]✓[/] Added [bold]{players[-1]}[/]")

    _print_players(players)
    return players


def select_tournament_name() -> str:
    suggestion = random_tournament_name()
    return Prompt.ask("\n[bold]Tournament name[/]", default=suggestion).strip() or suggestion


def select_mode() -> TournamentMode:
    console.print("\n[bold]Tournament format:[/]")
    console.print("  1. Single elimination")
    console.print("  2. Swiss")
    choice = IntPrompt.ask("Select format", choices=["1", "2"], default=1)
    return "elimination" if choice == 1 else "swiss"


def select_match_point(cfg: TournamentConfig) -> int:
    """Pick the elimination match point from the configured menu."""
    options = [str(v) for v in cfg.match_point_options]
    default = cfg.match_point if str(cfg.match_point) in options else int(options[0])
    return IntPrompt.ask(
        "[bold]Points to win a match[/]", choices=options, default=default
    )


# --------------------------------------------------------------------------- #
# Helpers                                                                      #
# --------------------------------------------------------------------------- #

def _edit_players(players: list[str], command: str, rest: str) -> None:
    index_raw, _, new_name = rest.partition(" ")
    if not index_raw.isdigit() or not 1 <= int(index_raw) <= len(players):
        console.print(f"  [red]Enter a player number between 1 and {len(players)}.[/]")
        return
    index = int(index_raw) - 1

    if command == "remove":
        console.print(f"  [yellow]Removed[/] {players.pop(index)}")
        return

    others = players[:index] + players[index + 1:]
    try:
        players[index] = validate_name(new_name, taken=others)
    except InvalidPlayerError as exc:
        console.print(f"  [red]{exc}[/]")


def _print_players(players: list[str]) -> None:
    table = Table(
        title="Line-up",
        show_header=True,
        header_style="bold",
        border_style="green",
        show_lines=False,
    )
    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("Name", min_width=20)
    for i, name in enumerate(players, 1):
        table.add_row(str(i), name)

    console.print()
    console.print(table)
    if len(players) >= MIN_PLAYERS:
        console.print(
            f"  [dim]ℹ  {len(players)} players → {total_rounds(len(players))} round(s); "
            f"{len(players) % 2} bye(s) in round 1 of a bracket.[/]"
        )
    console.print()
