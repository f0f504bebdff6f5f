"""FastAPI app: player and GM routes over a single RoundEngine."""

import logging
import secrets

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import (
    ClueSupplyResponse,
    GenerateCluesRequest,
    GhostIntervalRequest,
    GhostVoteRequest,
    KillerAdvantageRequest,
    MoveRequest,
    PinRequest,
    PlayerStateResponse,
    RegisterRequest,
    RemovePlayerRequest,
    RosterResponse,
    RoundResponse,
    ScatterRequest,
    SummaryResponse,
    TargetRequest,
    UnlockRequest,
    UpdatePlayerRequest,
    clue_supply_to_public,
    player_state_to_public,
    player_to_public,
    roster_to_public,
    round_report_to_public,
    summary_to_public,
)
from manor import roster
from manor.config import EngineConfig
from manor.engine import RoundEngine
from manor.errors import GameError, Unauthorized

logger = logging.getLogger(__name__)

app = FastAPI(title="Manor of Whispers API", version="0.1.0")
app.state.engine = RoundEngine(EngineConfig.from_env())

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _failure(status_code: int, error: str, kind: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error, "kind": kind}, headers=headers)


@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError):
    logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return _failure(exc.status_code, exc.message, exc.kind)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _failure(422, "Invalid request.", "validation")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request.")
    return _failure(422, f"{field}: {message}" if field else message, "validation")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _failure(404, "Not found.", "not_found")
    return _failure(exc.status_code, str(exc.detail), "error", headers=getattr(exc, "headers", None))


def get_engine(request: Request) -> RoundEngine:
    return request.app.state.engine


# ------------------ player routes ------------------


@app.post("/api/register", response_model=dict, tags=["Player"], summary="Join the game")
def register(body: RegisterRequest, engine: RoundEngine = Depends(get_engine)):
    player = engine.register(body.name)
    return {
        "ok": True,
        "player": {"id": player.id, "name": player.name, "pin": player.pin, "role": player.role.value},
    }


@app.post("/api/rejoin", response_model=dict, tags=["Player"], summary="Rejoin with a PIN")
def rejoin(body: PinRequest, engine: RoundEngine = Depends(get_engine)):
    with engine.locked():
        player = engine.rejoin(body.pin)
        return {"ok": True, "player": player_to_public(player).model_dump()}


@app.post("/api/state", response_model=PlayerStateResponse, tags=["Player"], summary="Player view")
def player_state(body: PinRequest, engine: RoundEngine = Depends(get_engine)):
    with engine.locked() as state:
        player = roster.require_pin(state, body.pin)
        return player_state_to_public(state, player)


@app.post("/api/move", response_model=dict, tags=["Player"], summary="Move to a room")
def move(body: MoveRequest, engine: RoundEngine = Depends(get_engine)):
    outcome = engine.move(body.pin, body.room, stay=body.stay)
    record = outcome.record
    message = f"You stay in {record.to_room}." if not record.is_real else f"You slip into {record.to_room}."
    return {
        "ok": True,
        "message": message,
        "room": record.to_room,
        "clue": outcome.clue.text if outcome.clue else None,
    }


@app.post("/api/vote", response_model=dict, tags=["Player"], summary="Vote to execute")
def vote(body: TargetRequest, engine: RoundEngine = Depends(get_engine)):
    with engine.locked() as state:
        engine.vote(body.pin, body.target_pin)
        target = roster.require_pin(state, body.target_pin)
        return {"ok": True, "message": f"You silently point a finger at {target.name}."}


@app.post("/api/ghostVote", response_model=dict, tags=["Player"], summary="Ghost vote for an event")
def ghost_vote(body: GhostVoteRequest, engine: RoundEngine = Depends(get_engine)):
    record = engine.ghost_vote(body.pin, body.event)
    return {"ok": True, "message": f"Your restless spirit calls for {record.event.value}.", "event": record.event.value}


@app.post("/api/kill", response_model=dict, tags=["Player"], summary="Kill")
def kill(body: TargetRequest, engine: RoundEngine = Depends(get_engine)):
    with engine.locked() as state:
        record = engine.kill(body.pin, body.target_pin)
        victim = roster.require_pin(state, record.victim_pin)
        return {
            "ok": True,
            "message": f"{victim.name} will not leave {record.room}.",
            "victim": {"name": victim.name, "pin": victim.pin},
            "room": record.room,
        }


# ------------------ GM routes ------------------


@app.post("/api/gm/unlock", response_model=RosterResponse, tags=["GM"], summary="Unlock GM panel")
def unlock(body: UnlockRequest, engine: RoundEngine = Depends(get_engine)):
    if not secrets.compare_digest(str(body.gm_pin), str(engine.config.gm_secret)):
        raise Unauthorized("Invalid GM PIN.")
    with engine.locked() as state:
        return roster_to_public(state)


@app.get("/api/gm/roster", response_model=RosterResponse, tags=["GM"], summary="Roster")
def get_roster(engine: RoundEngine = Depends(get_engine)):
    with engine.locked() as state:
        return roster_to_public(state)


@app.post("/api/gm/updatePlayer", response_model=dict, tags=["GM"], summary="Set role / alive")
def update_player(body: UpdatePlayerRequest, engine: RoundEngine = Depends(get_engine)):
    with engine.locked():
        player = engine.update_player(body.id, role=body.role, alive=body.alive)
        return {"ok": True, "player": player_to_public(player).model_dump()}


@app.post("/api/gm/removePlayer", response_model=dict, tags=["GM"], summary="Remove player")
def remove_player(body: RemovePlayerRequest, engine: RoundEngine = Depends(get_engine)):
    removed = engine.remove_player(body.id, body.pin)
    return {"ok": True, "message": f"{removed.name} has left the manor."}


@app.post("/api/gm/randomizeRoles", response_model=RosterResponse, tags=["GM"], summary="Randomize roles")
def randomize_roles(engine: RoundEngine = Depends(get_engine)):
    with engine.locked() as state:
        engine.randomize_roles()
        return roster_to_public(state)


@app.post("/api/gm/nextRound", response_model=RoundResponse, tags=["GM"], summary="Advance round")
def next_round(engine: RoundEngine = Depends(get_engine)):
    return round_report_to_public(engine.advance_round())


@app.post("/api/gm/newGame", response_model=dict, tags=["GM"], summary="Reset the game")
def new_game(engine: RoundEngine = Depends(get_engine)):
    state = engine.new_game()
    return {"ok": True, "round": state.round_index}


def _toggle_route(path: str, effect: str):
    @app.post(
        path,
        response_model=dict,
        tags=["GM"],
        summary=f"Arm/disarm {effect} for next round",
        name=f"toggle_{effect}",
    )
    def toggle(engine: RoundEngine = Depends(get_engine)):
        return {"ok": True, effect: engine.toggle_effect(effect)}


_toggle_route("/api/gm/toggleRevealDots", "reveal_dots")
_toggle_route("/api/gm/toggleKillerGaze", "killer_gaze")
_toggle_route("/api/gm/toggleScream", "scream")
_toggle_route("/api/gm/toggleDeadIntervene", "dead_intervene")
_toggle_route("/api/gm/toggleSanctuary", "sanctuary")
_toggle_route("/api/gm/toggleShove", "shove")


@app.post("/api/gm/toggleKillerClueVisibility", response_model=dict, tags=["GM"], summary="Killer sees room clues")
def toggle_killer_clue_visibility(engine: RoundEngine = Depends(get_engine)):
    return {"ok": True, "killer_clue_visibility": engine.toggle_killer_clue_visibility()}


@app.post("/api/gm/killerAdvantage", response_model=dict, tags=["GM"], summary="Killer-Advantage settings")
def killer_advantage(body: KillerAdvantageRequest, engine: RoundEngine = Depends(get_engine)):
    with engine.locked() as state:
        settings = engine.set_killer_advantage(body.interval, toggle=body.toggle)
        return {
            "ok": True,
            "enabled": settings.killer_advantage_enabled,
            "interval": settings.killer_advantage_interval,
            "advantage_round": state.is_killer_advantage_round(),
        }


@app.post("/api/gm/ghostEventInterval", response_model=dict, tags=["GM"], summary="Ghost event interval")
def ghost_event_interval(body: GhostIntervalRequest, engine: RoundEngine = Depends(get_engine)):
    settings = engine.set_ghost_event_interval(body.interval)
    return {"ok": True, "interval": settings.ghost_event_interval}


@app.post("/api/gm/scatterPlayers", response_model=dict, tags=["GM"], summary="Scatter players now")
def scatter_players(body: ScatterRequest, engine: RoundEngine = Depends(get_engine)):
    return {"ok": True, "scattered": engine.scatter_players(include_dead=body.include_dead)}


@app.post("/api/gm/generateClues", response_model=ClueSupplyResponse, tags=["GM"], summary="Generate clues")
def generate_clues(body: GenerateCluesRequest, engine: RoundEngine = Depends(get_engine)):
    with engine.locked() as state:
        engine.generate_clues(body.sentence)
        return clue_supply_to_public(state)


@app.get("/api/gm/summary", response_model=SummaryResponse, tags=["GM"], summary="GM summary")
def summary(engine: RoundEngine = Depends(get_engine)):
    with engine.locked() as state:
        return summary_to_public(state)


@app.get("/health", tags=["System"], summary="Health check")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=4000)
