import logging
import threading
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from game_context import configure_logging, load_config
from game_runner import Game
from game_session import GameSession
from ui.web_provider import WebProvider

logger = logging.getLogger(__name__)

config = load_config()

app = FastAPI(title="rpg2d")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


sessions: Dict[str, GameSession] = {}
_sessions_lock = threading.Lock()


class StepRequest(BaseModel):
    session_id: str
    action: str
    target: int | None = None
    option: str | None = None
    item: str | None = None
    perk: str | None = None
    branch: str | None = None


class EventsRequest(BaseModel):
    session_id: str


def _get_or_create_session(session_id: str) -> GameSession:
    with _sessions_lock:
        session = sessions.get(session_id)
        if session is None:
            session = GameSession(None)
            ui = WebProvider(session)
            session.game = Game(ui, seed=config.seed)
            sessions[session_id] = session
            logger.info("new session %s", session_id)
        return session


@app.post("/step")
def step(req: StepRequest):
    session = _get_or_create_session(req.session_id)
    payload: Dict[str, Any] = {
        "action": req.action,
        "target": req.target,
        "option": req.option,
        "item": req.item,
        "perk": req.perk,
        "branch": req.branch,
    }
    payload = {k: v for k, v in payload.items() if v is not None}
    result, events, snap = session.step(payload)
    return {
        "result": result.to_dict() if result else None,
        "events": events,
        "snapshot": snap,
    }


@app.post("/events")
def events(req: EventsRequest):
    if req.session_id not in sessions:
        return []
    return sessions[req.session_id].drain()


@app.get("/state/{session_id}")
def state(session_id: str):
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return session.snapshot()


if __name__ == "__main__":
    import uvicorn

    configure_logging(config)
    uvicorn.run(app, host="127.0.0.1", port=8000)
