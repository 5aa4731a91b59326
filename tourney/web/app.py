"""
FastAPI application — JSON API over the tournament sessions.

Exposes:
  GET    /api/config                        Match-point menu and score actions
  GET    /api/elimination                   Current bracket
  POST   /api/elimination                   Start a bracket
  DELETE /api/elimination                   Reset the bracket
  POST   /api/elimination/score             Add (or take back) points
  POST   /api/elimination/winner            Set a match winner manually
  POST   /api/elimination/advance           Build the next round
  POST   /api/elimination/players           Add a player
  PATCH  /api/elimination/players/{name}    Rename a player
  DELETE /api/elimination/players/{name}    Remove a player
  GET    /api/swiss                         Current pairings and standings
  POST   /api/swiss                         Start a Swiss tournament
  DELETE /api/swiss                         Reset the Swiss tournament
  POST   /api/swiss/results                 Record a match result

Sessions are created lazily and resume the persisted snapshot of their mode
on first use.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException

from tourney.config import load_config_or_default
from tourney.errors import (
    BracketLockedError,
    DuplicateResultError,
    NoActiveTournamentError,
    PairingNotFoundError,
    RoundIncompleteError,
    TournamentCompleteError,
    TournamentError,
)
from tourney.log import configure_logging
from tourney.serialization import to_json_dict
from tourney.session import EliminationSession, SwissSession, create_session
from tourney.store import FileStore, KeyValueStore
from tourney.tournaments.base import TournamentMode
from tourney.tournaments.elimination import is_locked

config = load_config_or_default()
logger = configure_logging(config.logging)

store: KeyValueStore = FileStore(config.storage.directory_path)
_sessions: dict[str, EliminationSession | SwissSession] = {}

app = FastAPI(title="Tourney")


# --------------------------------------------------------------------------- #
# Session helpers                                                              #
# --------------------------------------------------------------------------- #

async def _session(mode: TournamentMode) -> EliminationSession | SwissSession:
    """Return the session for `mode`, resuming its snapshot the first time."""
    session = _sessions.get(mode)
    if session is None:
        session = create_session(mode, config, store)
        await session.resume()
        _sessions[mode] = session
    return session


def _http_error(exc: Exception) -> HTTPException:
    match exc:
        case NoActiveTournamentError() | PairingNotFoundError():
            status = 404
        case (
            BracketLockedError()
            | RoundIncompleteError()
            | DuplicateResultError()
            | TournamentCompleteError()
        ):
            status = 409
        case _:
            status = 400
    return HTTPException(status_code=status, detail=str(exc))


def _require(payload: dict, field: str):
    value = payload.get(field)
    if value is None:
        raise HTTPException(status_code=400, detail=f"{field} is required")
    return value


def _require_int(payload: dict, field: str) -> int:
    value = _require(payload, field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise HTTPException(status_code=400, detail=f"{field} must be an integer")
    return value


def _start_request(payload: dict) -> tuple[list, str | None]:
    players = _require(payload, "players")
    if not isinstance(players, list):
        raise HTTPException(status_code=400, detail="players must be a list")
    name = payload.get("name")
    if name is not None and not isinstance(name, str):
        raise HTTPException(status_code=400, detail="name must be a string")
    return players, name


def _elimination_view(session: EliminationSession) -> dict:
    state = session.state
    if state is None:
        raise _http_error(NoActiveTournamentError("No active elimination tournament."))
    return {
        "mode": state.mode,
        **to_json_dict(state),
        "total_rounds": session.engine.total_rounds(state),
        "locked": is_locked(state.rounds),
        "champion": session.champion,
        "standings": to_json_dict(session.standings()),
        "persistence_warning": _warning(session),
    }


def _swiss_view(session: SwissSession) -> dict:
    state = session.state
    if state is None:
        raise _http_error(NoActiveTournamentError("No active swiss tournament."))
    return {
        "mode": state.mode,
        **to_json_dict(state),
        "total_rounds": session.engine.total_rounds(state),
        "decided": [
            session.is_match_decided(p.player_a.name, p.player_b.name)
            for p in state.pairings
        ],
        "standings": to_json_dict(session.standings()),
        "persistence_warning": _warning(session),
    }


def _warning(session: EliminationSession | SwissSession) -> str | None:
    exc = session.last_persistence_error
    return str(exc) if exc is not None else None


# --------------------------------------------------------------------------- #
# REST                                                                         #
# --------------------------------------------------------------------------- #

@app.get("/api/config")
def get_config():
    t = config.tournament
    return {
        "match_point": t.match_point,
        "match_point_options": t.match_point_options,
        "score_actions": [{"label": a.label, "points": a.points} for a in t.score_actions],
        "auto_advance": t.auto_advance,
    }


# ── Single elimination ───────────────────────────────────────────────────── #

@app.get("/api/elimination")
async def get_elimination():
    return _elimination_view(await _session("elimination"))


@app.post("/api/elimination")
async def start_elimination(payload: dict):
    players, name = _start_request(payload)
    match_point = payload.get("match_point")
    if match_point is not None and (
        isinstance(match_point, bool) or not isinstance(match_point, int) or match_point < 1
    ):
        raise HTTPException(status_code=400, detail="match_point must be a positive integer")

    session = create_session("elimination", config, store, match_point=match_point)
    try:
        await session.start(players, name)
    except (TournamentError, ValueError) as exc:
        raise _http_error(exc) from exc
    _sessions["elimination"] = session
    return _elimination_view(session)


@app.delete("/api/elimination")
async def reset_elimination():
    await (await _session("elimination")).reset()
    return {"ok": True}


@app.post("/api/elimination/score")
async def score_elimination(payload: dict):
    session = await _session("elimination")
    match_index = _require_int(payload, "match_index")
    slot = _require_int(payload, "slot")
    delta = _require_int(payload, "delta")
    try:
        await session.record_score(match_index, slot, delta)
    except (TournamentError, ValueError, IndexError) as exc:
        raise _http_error(exc) from exc
    return _elimination_view(session)


@app.post("/api/elimination/winner")
async def set_elimination_winner(payload: dict):
    session = await _session("elimination")
    match_index = _require_int(payload, "match_index")
    slot = _require_int(payload, "slot")
    try:
        await session.set_winner(match_index, slot)
    except (TournamentError, ValueError, IndexError) as exc:
        raise _http_error(exc) from exc
    return _elimination_view(session)


@app.post("/api/elimination/advance")
async def advance_elimination():
    session = await _session("elimination")
    try:
        await session.advance()
    except TournamentError as exc:
        raise _http_error(exc) from exc
    return _elimination_view(session)


@app.post("/api/elimination/players")
async def add_elimination_player(payload: dict):
    session = await _session("elimination")
    name = _require(payload, "name")
    try:
        await session.add_player(str(name))
    except TournamentError as exc:
        raise _http_error(exc) from exc
    return _elimination_view(session)


@app.patch("/api/elimination/players/{name}")
async def rename_elimination_player(name: str, payload: dict):
    session = await _session("elimination")
    new_name = _require(payload, "name")
    try:
        await session.rename_player(name, str(new_name))
    except TournamentError as exc:
        raise _http_error(exc) from exc
    return _elimination_view(session)


@app.delete("/api/elimination/players/{name}")
async def remove_elimination_player(name: str):
    session = await _session("elimination")
    try:
        await session.remove_player(name)
    except TournamentError as exc:
        raise _http_error(exc) from exc
    return _elimination_view(session)


# ── Swiss ────────────────────────────────────────────────────────────────── #

@app.get("/api/swiss")
async def get_swiss():
    return _swiss_view(await _session("swiss"))


@app.post("/api/swiss")
async def start_swiss(payload: dict):
    players, name = _start_request(payload)
    session = await _session("swiss")
    try:
        await session.start(players, name)
    except (TournamentError, ValueError) as exc:
        raise _http_error(exc) from exc
    return _swiss_view(session)


@app.delete("/api/swiss")
async def reset_swiss():
    await (await _session("swiss")).reset()
    return {"ok": True}


@app.post("/api/swiss/results")
async def record_swiss_result(payload: dict):
    session = await _session("swiss")
    winner = _require(payload, "winner")
    loser = _require(payload, "loser")
    try:
        await session.record_result(str(winner), str(loser))
    except TournamentError as exc:
        raise _http_error(exc) from exc
    return _swiss_view(session)
