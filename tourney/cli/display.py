"""
Rich-based CLI consumer for TournamentEvent objects.

Every event carries a full snapshot, so each render is self-contained:
the bracket, the pairings and the standings are redrawn from the event
alone.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tourney.tournaments.base import Match, StandingEntry
from tourney.tournaments.events import (
    BracketUpdatedEvent,
    MatchDecidedEvent,
    PairingsUpdatedEvent,
    PersistenceWarningEvent,
    TournamentCompleteEvent,
    TournamentEvent,
    TournamentResetEvent,
    TournamentStartEvent,
)

console = Console(legacy_windows=False)


def display_tournament_event(event: TournamentEvent) -> None:
    """Dispatch a TournamentEvent to the appropriate display function."""
    match event:
        case TournamentStartEvent():
            _tournament_start(event)
        case BracketUpdatedEvent():
            _bracket_updated(event)
        case PairingsUpdatedEvent():
            _pairings_updated(event)
        case MatchDecidedEvent():
            _match_decided(event)
        case TournamentCompleteEvent():
            _tournament_complete(event)
        case TournamentResetEvent():
            console.print(f"\n[dim]Tournament {event.name!r} was reset.[/]")
        case PersistenceWarningEvent():
            console.print(
                f"\n[yellow]⚠  Progress could not be saved:[/] {event.message}\n"
                "[dim]   The tournament continues in memory; the next action will retry.[/]"
            )


# --------------------------------------------------------------------------- #
# Display functions                                                            #
# --------------------------------------------------------------------------- #

def _tournament_start(event: TournamentStartEvent) -> None:
    names = "  •  ".join(event.participant_names)
    verb = "Resumed" if event.resumed else "Started"
    console.print()
    console.print(
        Panel(
            f"[bold]{event.name}[/]\n\n"
            f"[dim]Participants ({len(event.participant_names)}):[/]\n{names}\n\n"
            f"[dim]Rounds: {event.total_rounds}  •  {verb} "
            f"{event.timestamp.strftime('%Y-%m-%d %H:%M:%S')}[/]",
            title=f"[bold green] {event.mode.title()} Tournament [/]",
            border_style="green",
            expand=False,
        )
    )


def _bracket_updated(event: BracketUpdatedEvent) -> None:
    for round_index, round_ in enumerate(event.rounds):
        is_current = round_index == event.current_round_index
        table = Table(
            title=f"Round {round_index + 1} of {event.total_rounds}",
            show_header=True,
            header_style="bold",
            border_style="bright_blue" if is_current else "dim",
            show_lines=False,
        )
        table.add_column("#", style="dim", width=3, justify="right")
        table.add_column("Player 1", min_width=18)
        table.add_column("Pts", justify="right", width=4)
        table.add_column("", width=3, justify="center")
        table.add_column("Pts", justify="right", width=4)
        table.add_column("Player 2", min_width=18)
        table.add_column("Winner", min_width=18)

        for match_index, match in enumerate(round_):
            active = is_current and match_index == event.current_match_index
            table.add_row(
                str(match_index + 1),
                *_match_cells(match),
                style="bold" if active else "",
            )
        console.print()
        console.print(table)


def _match_cells(match: Match) -> tuple[str, str, str, str, str, str]:
    def name(p) -> str:
        return f"[dim]{p.name}[/]" if p.is_bye else p.name

    def pts(p) -> str:
        return "" if p.is_bye else str(p.score)

    winner = f"[green]{match.winner.name}[/]" if match.winner else "[dim]—[/]"
    sep = "→" if match.is_bye else "vs"
    return (
        name(match.player1),
        pts(match.player1),
        sep,
        pts(match.player2),
        name(match.player2),
        winner,
    )


def _pairings_updated(event: PairingsUpdatedEvent) -> None:
    console.print()
    console.rule(
        f"[bold]{event.name} — Round {event.round_num} of {event.total_rounds}[/]",
        style="bright_blue",
    )
    table = Table(show_header=True, header_style="bold", border_style="dim", show_lines=False)
    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("Player", min_width=18)
    table.add_column("", width=3, justify="center")
    table.add_column("Opponent", min_width=18)
    table.add_column("Status", width=10)

    for i, (pairing, decided) in enumerate(zip(event.pairings, event.decided), 1):
        if pairing.is_bye:
            table.add_row(str(i), f"[bold]{pairing.player_a.name}[/]", "→", "[dim]BYE[/]", "[dim]bye[/]")
            continue
        status = "[green]done[/]" if decided else "[yellow]open[/]"
        table.add_row(
            str(i),
            f"[bold]{pairing.player_a.name}[/]",
            "vs",
            f"[bold]{pairing.player_b.name}[/]",
            status,
        )
    console.print(table)
    _standings_table(f"Standings after {event.round_num - 1} round(s)", event.standings)


def _match_decided(event: MatchDecidedEvent) -> None:
    console.print(
        f"\n  [green]✓[/] [bold]{event.winner_name}[/] beats {event.loser_name}  "
        f"[dim](round {event.round_num})[/]"
    )


def _tournament_complete(event: TournamentCompleteEvent) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold yellow]★  {event.winner_name}[/]\n\n"
            f"[dim]{event.name}  •  {event.timestamp.strftime('%Y-%m-%d %H:%M:%S')}[/]",
            title="[bold green] Tournament Champion [/]",
            border_style="yellow",
            expand=False,
        )
    )
    _standings_table("Final Standings", event.final_standings, highlight_first=True)
    console.print()


def _standings_table(
    title: str, standings: list[StandingEntry], highlight_first: bool = False
) -> None:
    table = Table(
        title=title,
        show_header=True,
        header_style="bold",
        border_style="dim",
        show_lines=False,
    )
    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("Name", min_width=20)
    table.add_column("W", justify="center", width=4)
    table.add_column("L", justify="center", width=4)
    table.add_column("Bye", justify="center", width=4)
    table.add_column("Pts", justify="right", width=5)

    for i, entry in enumerate(standings, 1):
        style = "bold yellow" if highlight_first and i == 1 else ""
        table.add_row(
            str(i),
            entry.name,
            str(entry.wins),
            str(entry.losses),
            str(entry.byes),
            str(entry.score),
            style=style,
        )

    console.print()
    console.print(table)
