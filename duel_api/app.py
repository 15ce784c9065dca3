from fastapi import FastAPI, HTTPException
from duel_engine.engine import Engine
from duel_engine.model import Intent, MatchConfig, MatchState, RobotState
from duel_runtime.controls import control_availability, intent_for_key, intent_for_tap
from duel_runtime.runner import TickRunner
from .schemas import EventsResponse, IntentIn, IntentResult, KeyIn, TapIn

TICK_MS = 200
TIME_COMPRESSION = 1.0

app = FastAPI(title="Robo Duel")
runner: TickRunner | None = None

def _make_runner() -> TickRunner:
    """Create an engine in the WAITING phase behind a fresh runner."""
    return TickRunner(Engine(MatchConfig()), tick_ms=TICK_MS, time_compression=TIME_COMPRESSION)

def _require_runner() -> TickRunner:
    if not runner:
        raise HTTPException(400, "Match not created")
    return runner

def _robot_json(r: RobotState) -> dict:
    return {"id": r.id, "pos": list(r.pos), "ammo": r.ammo, "score": r.score,
            "last_shot_ms": r.last_shot_ms}

def _state_json(s: MatchState) -> dict:
    return {
        "phase": s.phase.value,
        "time_remaining": s.time_remaining,
        "ts_ms": s.ts_ms,
        "user": _robot_json(s.user),
        "enemy": _robot_json(s.enemy),
        "messages": list(s.messages),
        "outcome": s.outcome,
        "controls": control_availability(s),
    }

async def _submit(r: TickRunner, intent: Intent | None) -> IntentResult:
    if intent is None:
        return IntentResult(accepted=False, events=0)
    before = await r.snapshot()
    evts = await r.submit(intent)
    after = await r.snapshot()
    return IntentResult(accepted=after != before, events=len(evts))

@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Robo Duel API",
        "docs": "/docs",
        "version": "1.0"
    }

@app.on_event("startup")
async def startup():
    """Create an idle match on app startup."""
    global runner
    runner = _make_runner()

@app.on_event("shutdown")
async def shutdown():
    """Stop the match loop on app shutdown."""
    if runner:
        await runner.stop()

@app.post("/match/start")
async def start_match():
    """Start a new match, or restart after the previous one ended."""
    global runner
    if not runner:
        runner = _make_runner()
    if not await runner.restart():
        raise HTTPException(409, "Match already running")
    s = await runner.snapshot()
    return {"phase": s.phase.value, "time_remaining": s.time_remaining}

@app.post("/match/intents", response_model=IntentResult)
async def post_intent(intent: IntentIn):
    """Submit an abstract intent for the user robot."""
    r = _require_runner()
    print(f"[API] Received intent {intent.kind} ({intent.dx}, {intent.dy})")
    return await _submit(r, Intent(kind=intent.kind, dx=intent.dx, dy=intent.dy))

@app.post("/match/keys", response_model=IntentResult)
async def post_key(req: KeyIn):
    """Submit a raw key press."""
    r = _require_runner()
    return await _submit(r, intent_for_key(req.key, await r.snapshot()))

@app.post("/match/tap", response_model=IntentResult)
async def post_tap(req: TapIn):
    """Submit a tap on a board cell."""
    r = _require_runner()
    return await _submit(r, intent_for_tap((req.x, req.y), await r.snapshot()))

@app.get("/match/state")
async def get_state():
    """Get current match state snapshot."""
    r = _require_runner()
    return _state_json(await r.snapshot())

@app.get("/match/events")
async def get_events(since: int = 0, limit: int = 500):
    """Get events since offset."""
    r = _require_runner()
    evts, next_offset = r.events.since(since, limit)
    return EventsResponse(
        next_offset=next_offset,
        events=[{"kind": e.kind, "ts_ms": e.ts_ms, "data": e.data} for e in evts]
    )

@app.post("/match/time-control")
async def set_time_control(time_compression: float):
    """Set match time compression (1.0 = real-time, higher = faster)."""
    r = _require_runner()
    r.set_time_compression(time_compression)
    return {"time_compression": r.time_compression}

@app.get("/match/time-control")
async def get_time_control():
    """Get current time compression setting."""
    r = _require_runner()
    return {"time_compression": r.time_compression}
