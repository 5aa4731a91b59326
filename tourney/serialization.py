"""
Snapshot codec: TournamentState <-> UTF-8 JSON bytes.

Payloads carry a "version" and a "mode" key so a store can hold either
format.  decode(encode(state)) == state for every state an engine produces.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any

from tourney.tournaments.base import (
    EliminationState,
    Match,
    MatchRecord,
    MatchResult,
    Pairing,
    Player,
    SwissState,
    TournamentMode,
    TournamentState,
)

SNAPSHOT_VERSION = 1


def to_json_dict(obj: Any) -> Any:
    """Recursively convert dataclasses, tuples and dicts to JSON-safe values."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_json_dict(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, (list, tuple)):
        return [to_json_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): to_json_dict(v) for k, v in obj.items()}
    return obj


def encode(state: TournamentState) -> bytes:
    payload = {"version": SNAPSHOT_VERSION, "mode": state.mode, **to_json_dict(state)}
    return json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")


def decode(data: bytes, expected_mode: TournamentMode | None = None) -> TournamentState:
    """
    Rebuild a state from a snapshot.

    Raises:
        ValueError: the payload is not valid JSON, has an unknown version or
                    mode, or is missing fields.
    """
    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"Snapshot is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ValueError("Snapshot must be a JSON object.")

    version = raw.get("version")
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {version!r}")
    mode = raw.get("mode")
    if expected_mode is not None and mode != expected_mode:
        raise ValueError(f"Expected a {expected_mode} snapshot, got {mode!r}")

    try:
        match mode:
            case "elimination":
                return _decode_elimination(raw)
            case "swiss":
                return _decode_swiss(raw)
            case _:
                raise ValueError(f"Unknown snapshot mode: {mode!r}")
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Invalid {mode} snapshot structure: {exc}") from exc


# ------------------------------------------------------------------ #
# Per-mode decoders                                                    #
# ------------------------------------------------------------------ #

def _player(raw: dict) -> Player:
    return Player(
        name=str(raw["name"]),
        score=int(raw.get("score", 0)),
        history=tuple(str(h) for h in raw.get("history", ())),
        is_bye=bool(raw.get("is_bye", False)),
    )


def _optional_player(raw: dict | None) -> Player | None:
    return None if raw is None else _player(raw)


def _decode_elimination(raw: dict) -> EliminationState:
    rounds = tuple(
        tuple(
            Match(
                player1=_player(m["player1"]),
                player2=_player(m["player2"]),
                winner=_optional_player(m.get("winner")),
            )
            for m in round_
        )
        for round_ in raw["rounds"]
    )
    if not rounds:
        raise ValueError("Elimination snapshot has no rounds.")
    return EliminationState(
        name=str(raw["name"]),
        match_point=int(raw["match_point"]),
        rounds=rounds,
        current_round_index=int(raw["current_round_index"]),
        current_match_index=int(raw["current_match_index"]),
        match_history=tuple(
            MatchRecord(
                round=int(r["round"]),
                match=int(r["match"]),
                winner=str(r["winner"]),
                score=int(r["score"]),
            )
            for r in raw.get("match_history", ())
        ),
        live_scores={str(k): int(v) for k, v in raw.get("live_scores", {}).items()},
    )


def _decode_swiss(raw: dict) -> SwissState:
    return SwissState(
        name=str(raw["name"]),
        players=tuple(_player(p) for p in raw["players"]),
        round=int(raw["round"]),
        pairings=tuple(
            Pairing(player_a=_player(p["player_a"]), player_b=_player(p["player_b"]))
            for p in raw["pairings"]
        ),
        match_results=tuple(
            MatchResult(round=int(r["round"]), winner=str(r["winner"]), loser=str(r["loser"]))
            for r in raw.get("match_results", ())
        ),
        champion=raw.get("champion"),
    )
