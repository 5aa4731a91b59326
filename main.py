"""
Tourney — interactive CLI entry point.

Usage:
    uv run python main.py

Wires together:
    config → store → resume prompt / setup selector → session → control loop
    and the Rich display as the session listener.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from rich.prompt import Confirm

from tourney.cli.controls import run_elimination, run_swiss
from tourney.cli.display import console, display_tournament_event
from tourney.cli.selector import (
    select_match_point,
    select_mode,
    select_participants,
    select_tournament_name,
)
from tourney.config import Config, load_config
from tourney.errors import PersistenceError
from tourney.log import configure_logging
from tourney.session import EliminationSession, SwissSession, create_session
from tourney.store import FileStore, KeyValueStore


async def _main() -> None:
    config_path = Path("config.yaml")
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        config = Config()
    except ValueError as exc:
        console.print(f"[red]Config error:[/] {exc}")
        sys.exit(1)

    # Log to file only; the console belongs to the Rich display.
    configure_logging(config.logging, console=False)

    store = FileStore(config.storage.directory_path)

    # ── Offer to resume a saved tournament ───────────────────────────── #
    for mode in ("elimination", "swiss"):
        session = create_session(mode, config, store, display_tournament_event)
        if not await _has_snapshot(store, session.key):
            continue
        if Confirm.ask(f"\nA saved [bold]{mode}[/] tournament was found. Resume it?", default=True):
            if await session.resume() is not None:
                await _play(session, config)
                return

    # ── New tournament ───────────────────────────────────────────────── #
    name = select_tournament_name()
    players = select_participants()
    mode = select_mode()
    match_point = select_match_point(config.tournament) if mode == "elimination" else None

    session = create_session(
        mode, config, store, display_tournament_event, match_point=match_point
    )
    await session.start(players, name)
    await _play(session, config)


async def _play(session: EliminationSession | SwissSession, config: Config) -> None:
    if isinstance(session, EliminationSession):
        await run_elimination(session, config.tournament.score_actions)
    else:
        await run_swiss(session)


async def _has_snapshot(store: KeyValueStore, key: str) -> bool:
    try:
        return await store.load(key) is not None
    except PersistenceError as exc:
        console.print(f"[yellow]Could not check saved tournaments:[/] {exc}")
        return False


def main() -> None:
    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted. Progress up to the last action is saved.[/]")


if __name__ == "__main__":
    main()
