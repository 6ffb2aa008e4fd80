import json
import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError
from starlette.responses import Response

from pwcheck import settings
from pwcheck.coordinator import EvaluationCoordinator, evaluate_password
from pwcheck.models import EvaluationResult, ResultView
from pwcheck.presentation import LOADING_VIEW, describe
from pwcheck.pwned import LeakOracle, LeakVerdict

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE = "pwcheck"
app = FastAPI(title=SERVICE, version=settings.VERSION)

# Local companion for the browser extension / dev frontends only
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_origin_regex=r"(chrome|moz)-extension://.*",
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    resp: Response = await call_next(request)
    resp.headers["Cache-Control"] = "no-store"
    resp.headers["X-Content-Type-Options"] = "nosniff"
    resp.headers["Referrer-Policy"] = "no-referrer"
    return resp


# --- Oracle ---
_oracle: Optional[LeakOracle] = None


def get_oracle() -> LeakOracle:
    # shared so the per-prefix cache survives across requests
    global _oracle
    if _oracle is None:
        _oracle = LeakOracle()
    return _oracle


# --- Models ---
class EvaluateIn(BaseModel):
    password: str


class EvaluateOut(BaseModel):
    strength: int
    leak: LeakVerdict
    view: ResultView


class FieldValue(BaseModel):
    field: str
    value: Optional[str] = None


class InputMessage(FieldValue):
    type: Literal["input"]


class SnapshotMessage(BaseModel):
    type: Literal["snapshot"]
    fields: List[FieldValue]


# --- Basic endpoints ---
@app.get("/health")
def health():
    return {"status": "ok", "service": SERVICE, "version": settings.VERSION}


@app.get("/version")
def version():
    return {"service": SERVICE, "version": app.version}


@app.post("/evaluate", response_model=EvaluateOut)
async def evaluate(body: EvaluateIn, oracle: LeakOracle = Depends(get_oracle)):
    strength, leak = await evaluate_password(body.password, oracle)
    view = describe(EvaluationResult(strength=strength, leak=leak, request_id=0))
    return EvaluateOut(strength=strength, leak=leak, view=view)


# --- Live field checks ---
@app.websocket("/ws")
async def field_events(websocket: WebSocket, oracle: LeakOracle = Depends(get_oracle)):
    await websocket.accept()

    async def send(payload: Dict[str, Any]) -> None:
        await websocket.send_json(payload)

    async def on_pending(field_id: str) -> None:
        await send({"type": "loading", "field": field_id, "view": LOADING_VIEW.model_dump()})

    async def on_result(field_id: str, result: EvaluationResult) -> None:
        await send({
            "type": "result",
            "field": field_id,
            "request_id": result.request_id,
            "strength": result.strength,
            "leak": result.leak,
            "view": describe(result).model_dump(),
        })

    async def on_clear(field_id: str) -> None:
        await send({"type": "clear", "field": field_id})

    coordinator = EvaluationCoordinator(on_result, on_clear, oracle=oracle, on_pending=on_pending)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except ValueError:
                await send({"type": "error", "detail": "Message is not JSON."})
                continue
            kind = data.get("type") if isinstance(data, dict) else None
            try:
                if kind == "input":
                    msg = InputMessage(**data)
                    coordinator.handle_input(msg.field, msg.value)
                elif kind == "snapshot":
                    snap = SnapshotMessage(**data)
                    coordinator.start((f.field, f.value) for f in snap.fields)
                else:
                    await send({"type": "error", "detail": "Unknown message type."})
            except ValidationError:
                # never echo the payload back, it may hold a password
                await send({"type": "error", "detail": f"Malformed {kind} message."})
    except WebSocketDisconnect:
        logger.debug("field socket closed")
    finally:
        await coordinator.aclose()
