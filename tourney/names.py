"""Random tournament and player names for when the user leaves them blank."""

from __future__ import annotations

import random
from typing import Iterable

_FIRST_WORDS = [
    "Crimson", "Iron", "Midnight", "Thunder", "Golden", "Silent", "Blazing",
    "Frozen", "Shadow", "Electric", "Savage", "Cosmic", "Royal", "Wild",
]
_SECOND_WORDS = [
    "Clash", "Showdown", "Cup", "Gauntlet", "Arena", "Rumble", "Throwdown",
    "Invitational", "Brawl", "Open", "Classic", "Duel", "Championship",
]
_PLAYER_NAMES = [
    "Ace", "Blaze", "Comet", "Dash", "Echo", "Flint", "Ghost", "Hawk",
    "Ivy", "Jinx", "Kite", "Lynx", "Maverick", "Nova", "Onyx", "Pike",
    "Quill", "Raven", "Storm", "Talon", "Vex", "Wren", "Zephyr",
]


def random_tournament_name(rng: random.Random | None = None) -> str:
    rng = rng or random.Random()
    return f"{rng.choice(_FIRST_WORDS)} {rng.choice(_SECOND_WORDS)}"


def random_player_name(taken: Iterable[str] = (), rng: random.Random | None = None) -> str:
    """Pick an unused name; numbered suffixes once the list runs out."""
    rng = rng or random.Random()
    used = set(taken)
    free = [n for n in _PLAYER_NAMES if n not in used]
    if free:
        return rng.choice(free)
    base = rng.choice(_PLAYER_NAMES)
    suffix = 2
    while f"{base} {suffix}" in used:
        suffix += 1
    return f"{base} {suffix}"
