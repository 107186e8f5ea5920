"""
Borders Coordinator Service — FastAPI front end for the host game

The host pushes its tick, join, death and command events here. Every
border, chat, score and teleport effect produced while handling a request
is returned in the response's ``actions`` list for the host to apply.

Configuration (environment):
  BORDERS_STATE_FILE     snapshot path (default config/borders_state.json)
  BORDERS_DIMENSIONS     comma-separated dimensions kept in sync
  BORDERS_ITEM_REGISTRY  optional newline-separated list of known item ids

Usage:
  python -m uvicorn border_service:app --host 127.0.0.1 --port 5124
"""

import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from coordinator.border_coordinator import BorderCoordinator
from coordinator.border_state import Position, DEFAULT_DIMENSIONS
from coordinator.items import ItemRegistry
from coordinator.persistence import DEFAULT_STATE_PATH
from coordinator.sinks import OutboxSink, StaticInventorySource

# ─── Coordinator ───

coordinator: BorderCoordinator | None = None
outbox: OutboxSink | None = None
inventories: StaticInventorySource | None = None


def parse_dimensions(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_DIMENSIONS
    dims = tuple(d.strip() for d in raw.split(',') if d.strip())
    return dims or DEFAULT_DIMENSIONS


def load_registry(path: str | None) -> ItemRegistry:
    if not path:
        return ItemRegistry()
    try:
        return ItemRegistry.from_file(path)
    except OSError as e:
        print(f"[Borders] Could not read item registry {path}: {e}", file=sys.stderr, flush=True)
        return ItemRegistry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the coordinator and restore the saved snapshot on startup."""
    global coordinator, outbox, inventories
    state_path = os.environ.get('BORDERS_STATE_FILE', DEFAULT_STATE_PATH)
    outbox = OutboxSink()
    inventories = StaticInventorySource()
    coordinator = BorderCoordinator(
        sink=outbox,
        source=inventories,
        dimensions=parse_dimensions(os.environ.get('BORDERS_DIMENSIONS')),
        state_path=state_path,
        registry=load_registry(os.environ.get('BORDERS_ITEM_REGISTRY')),
    )
    restored = coordinator.on_startup()
    # Startup re-sync actions stay queued and ride on the first response
    print(f"[Borders] {'Restored' if restored else 'No'} saved state ({state_path})",
          file=sys.stderr, flush=True)
    yield
    saved = coordinator.on_shutdown()
    print(f"[Borders] Shutting down, state {'saved' if saved else 'NOT saved'}",
          file=sys.stderr, flush=True)


app = FastAPI(lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def bad_request(request: Request, exc: RequestValidationError):
    """Malformed bodies (wrong types, non-finite coordinates) are a plain 400."""
    detail = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": detail})


# ─── Request Models ───

class TickRequest(BaseModel):
    inventories: dict[str, dict[str, int]] = Field(default_factory=dict)


class JoinRequest(BaseModel):
    player: str
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    z: float = Field(allow_inf_nan=False)


class DeathRequest(BaseModel):
    player: str


class CommandRequest(BaseModel):
    command: str
    args: dict = Field(default_factory=dict)


def _require_coordinator() -> BorderCoordinator:
    if coordinator is None:
        raise HTTPException(503, "Coordinator not started")
    return coordinator


def _respond(events: list[dict], **extra) -> dict:
    return {'events': events, 'actions': outbox.drain(), **extra}


# ─── Endpoints ───
# Plain def handlers run on the threadpool; the coordinator lock serializes them.

@app.get("/health")
def health():
    return {
        "status": "ok" if coordinator is not None else "starting",
        "ready": coordinator is not None,
    }


@app.get("/state")
def state():
    return _require_coordinator().snapshot()


@app.post("/tick")
def tick(request: TickRequest):
    coord = _require_coordinator()
    with coord.lock:
        inventories.update(request.inventories)
        events = coord.on_tick()
        return _respond(events, tick=coord.state.global_tick)


@app.post("/join")
def join(request: JoinRequest):
    if not request.player.strip():
        raise HTTPException(400, "Empty player id")
    coord = _require_coordinator()
    with coord.lock:
        events = coord.on_player_join(request.player, Position(request.x, request.y, request.z))
        return _respond(events)


@app.post("/death")
def death(request: DeathRequest):
    if not request.player.strip():
        raise HTTPException(400, "Empty player id")
    coord = _require_coordinator()
    with coord.lock:
        events = coord.on_player_death(request.player)
        return _respond(events)


@app.post("/command")
def command(request: CommandRequest):
    coord = _require_coordinator()
    with coord.lock:
        result = coord.on_command(request.command, request.args)
        actions = outbox.drain()
    if not result.ok:
        raise HTTPException(400, result.message)
    print(f"[Borders] Command {request.command}: {result.message.splitlines()[0]}",
          file=sys.stderr, flush=True)
    return {**result.to_dict(), 'actions': actions}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=5124)
