# ttm_coach/api.py
# HTTP surface: assessment scoring, feedback prescriptions, tone rewrite,
# work-plan skeleton, stage guide and work chat.

import os
from datetime import datetime
from typing import Callable, List, Literal, Optional
from zoneinfo import ZoneInfo

from fastapi import FastAPI, APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from .banding import band_labels, classify, stage_name
from .catalog import CatalogStore, default_catalog
from .chat_log import write_chat_message
from .config import settings
from .db import get_session, init_db
from .debug_utils import debug_log
from .dimensions import Stage
from .errors import (
    CatalogLoadError,
    EngineError,
    InvalidInputShape,
    LLMResponseError,
    LLMUnavailable,
)
from .llm import get_llm_client
from .models import User, WorkSession
from .prescriptions import (
    get_or_create_user,
    list_prescriptions,
    prescription_payload,
    record_prescription,
)
from .scoring import RawAnswers, Scores, aggregate_scores, default_answers
from .selector import select_messages
from .stages import stage_metadata
from .tone import DEFAULT_TONE, rewrite_messages
from .work_skeleton import build_from_answers
from .workchat import ChatTurn, MAX_EXAMPLE_CHARS, chat_reply, evaluate_example

ENV = (settings.ENV or os.getenv("ENV", "development")).lower()

# Application start time (UTC)
APP_START_DT = datetime.now(ZoneInfo("UTC"))
APP_START_STR = APP_START_DT.strftime("%d/%m/%y %H:%M:%S")


def _uptime_seconds() -> int:
    try:
        return int((datetime.now(ZoneInfo("UTC")) - APP_START_DT).total_seconds())
    except Exception:
        return 0


def _print_env_banner():
    try:
        print("\n" + "═" * 72)
        print(f"🚀 Starting TTM Coach [{ENV.upper()}]")
        print(f"🕒 App start (UTC): {APP_START_STR}")
        print("═" * 72 + "\n")
    except Exception:
        pass


app = FastAPI(title="TTM Coach")
router = APIRouter()


@app.on_event("startup")
def on_startup():
    init_db()
    catalog = default_catalog()
    debug_log(f"catalog {catalog.version} loaded from {catalog.source}", tag="catalog", always=True)
    _print_env_banner()


# ──────────────────────────────────────────────────────────────────────────────
# Error mapping
# ──────────────────────────────────────────────────────────────────────────────

@app.exception_handler(InvalidInputShape)
async def _invalid_input(request: Request, exc: InvalidInputShape):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(EngineError)
async def _engine_error(request: Request, exc: EngineError):
    # BandNotFound / MessageNotFound: catalog and engine disagree
    debug_log(f"{exc.__class__.__name__} on {request.url.path}: {exc}", tag="engine", always=True)
    return JSONResponse(status_code=500, content={"detail": "feedback engine error"})


@app.exception_handler(CatalogLoadError)
async def _catalog_error(request: Request, exc: CatalogLoadError):
    debug_log(f"catalog load failed: {exc}", tag="catalog", always=True)
    return JSONResponse(status_code=500, content={"detail": "catalog unavailable"})


@app.exception_handler(LLMUnavailable)
async def _llm_unavailable(request: Request, exc: LLMUnavailable):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(LLMResponseError)
async def _llm_bad_reply(request: Request, exc: LLMResponseError):
    debug_log(f"LLM reply unusable on {request.url.path}: {exc}", tag="workchat", always=True)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


# ──────────────────────────────────────────────────────────────────────────────
# Dependencies
# ──────────────────────────────────────────────────────────────────────────────

def get_catalog() -> CatalogStore:
    return default_catalog()


def get_llm_factory() -> Callable[[str], object]:
    """Returns touchpoint -> client; clients are only built when an endpoint needs one."""
    return lambda touchpoint: get_llm_client(touchpoint)


def _require_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    session: Session = Depends(get_session),
) -> User:
    uid = (x_user_id or "").strip()
    if not uid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="X-User-Id header required")
    return get_or_create_user(session, uid)


# ──────────────────────────────────────────────────────────────────────────────
# Request bodies
# ──────────────────────────────────────────────────────────────────────────────

class PrescriptionRequest(BaseModel):
    scores: dict
    rewrite: bool = False
    tone: Literal["plain", "mi", "polite"] = DEFAULT_TONE


class StyleItem(BaseModel):
    id: str
    title: str
    body: str


class StyleRequest(BaseModel):
    items: List[StyleItem]
    tone: Literal["plain", "mi", "polite"] = DEFAULT_TONE


class WorkChatRequest(BaseModel):
    messages: List[ChatTurn] = Field(..., min_length=1)
    stage: Optional[Stage] = None
    answers: Optional[dict] = None
    session_id: Optional[int] = None


class EvaluateExampleRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=MAX_EXAMPLE_CHARS)


# ──────────────────────────────────────────────────────────────────────────────
# Health / Root
# ──────────────────────────────────────────────────────────────────────────────

@app.get("/health")
def health():
    return {
        "ok": True,
        "env": ENV,
        "app_start_utc": APP_START_STR,
        "uptime_seconds": _uptime_seconds(),
    }


@app.get("/")
def root():
    return {
        "service": "ttm-coach",
        "status": "ok",
        "env": ENV,
        "uptime_seconds": _uptime_seconds(),
    }


# ──────────────────────────────────────────────────────────────────────────────
# Assessment
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/assessment/default")
def assessment_default(catalog: CatalogStore = Depends(get_catalog)):
    """Neutral starting answers for every item (what the forms pre-fill)."""
    return {"catalog_version": catalog.version, **default_answers(catalog).to_payload()}


@router.post("/assessment/score")
def assessment_score(payload: dict, catalog: CatalogStore = Depends(get_catalog)):
    raw = RawAnswers.from_payload(payload)
    if not raw.is_complete():
        raise InvalidInputShape(f"unanswered items: {raw.missing_items()}")
    scores = aggregate_scores(raw, catalog)
    bands = classify(scores, catalog)
    return {
        "catalog_version": catalog.version,
        "stage_name": stage_name(scores.stage),
        "scores": scores.to_payload(),
        "bands": bands.to_payload(),
        "band_labels": band_labels(bands, catalog),
    }


# ──────────────────────────────────────────────────────────────────────────────
# Prescriptions
# ──────────────────────────────────────────────────────────────────────────────

def _apply_rewrite(items: list[dict], rewritten: list[dict]) -> list[dict]:
    by_id = {r["id"]: r for r in rewritten}
    out = []
    for item in items:
        r = by_id.get(item["id"])
        out.append({**item, "title": r["title"], "body": r["body"]} if r else item)
    return out


@router.post("/prescription")
def create_prescription(
    body: PrescriptionRequest,
    user: User = Depends(_require_user),
    session: Session = Depends(get_session),
    catalog: CatalogStore = Depends(get_catalog),
    llm_factory: Callable[[str], object] = Depends(get_llm_factory),
):
    scores = Scores.from_payload(body.scores)
    scores.check_ranges(catalog)
    selection = select_messages(scores, catalog, policy=settings.SELF_EFFICACY_POLICY)
    items = [m.to_payload() for m in selection.items]

    note = None
    tone = None
    if body.rewrite:
        styled = rewrite_messages(items, body.tone, client=llm_factory("tone_rewrite"))
        note = styled.get("note")
        if not note:
            items = _apply_rewrite(items, styled["items"])
            tone = body.tone

    row = record_prescription(
        session,
        user,
        catalog_version=catalog.version,
        scores=scores,
        bands=selection.bands,
        messages=items,
        tone=tone,
    )
    out = prescription_payload(row)
    if note:
        out["note"] = note
    return out


@router.get("/prescriptions")
def get_prescriptions(
    limit: int = 50,
    user: User = Depends(_require_user),
    session: Session = Depends(get_session),
):
    rows = list_prescriptions(session, user, limit=max(1, min(limit, 200)))
    return {"items": [prescription_payload(r) for r in rows]}


@router.post("/style")
def style(
    body: StyleRequest,
    user: User = Depends(_require_user),
    llm_factory: Callable[[str], object] = Depends(get_llm_factory),
):
    items = [i.model_dump() for i in body.items]
    return rewrite_messages(items, body.tone, client=llm_factory("tone_rewrite"))


# ──────────────────────────────────────────────────────────────────────────────
# Work plan / stage guide
# ──────────────────────────────────────────────────────────────────────────────

@router.post("/work/skeleton")
def work_skeleton(payload: dict, catalog: CatalogStore = Depends(get_catalog)):
    result = build_from_answers(RawAnswers.from_payload(payload), catalog)
    return {**result.to_payload(), "stage_guide": stage_metadata(result.scores.stage)}


@router.get("/stages/{stage}")
def stage_guide(stage: str):
    try:
        return stage_metadata(Stage.parse(stage))
    except ValueError:
        raise HTTPException(status_code=404, detail=f"unknown stage: {stage}")


# ──────────────────────────────────────────────────────────────────────────────
# Work chat
# ──────────────────────────────────────────────────────────────────────────────

def _session_payload(ws: WorkSession) -> dict:
    return {
        "id": ws.id,
        "stage": ws.stage,
        "created_at": ws.created_at.isoformat() if ws.created_at else None,
        "updated_at": ws.updated_at.isoformat() if ws.updated_at else None,
        "message_count": len(ws.messages),
    }


def _own_session(session: Session, user: User, session_id: int) -> WorkSession:
    ws = session.get(WorkSession, session_id)
    if not ws or ws.user_id != user.id:
        raise HTTPException(status_code=404, detail="work session not found")
    return ws


@router.post("/workchat")
def workchat(
    body: WorkChatRequest,
    user: User = Depends(_require_user),
    session: Session = Depends(get_session),
    catalog: CatalogStore = Depends(get_catalog),
    llm_factory: Callable[[str], object] = Depends(get_llm_factory),
):
    if body.messages[-1].role != "user":
        raise InvalidInputShape("The last message must be from the user.")
    client = llm_factory("work_chat")

    context = None
    stage = body.stage
    if body.answers is not None:
        result = build_from_answers(RawAnswers.from_payload(body.answers), catalog)
        context = result.to_payload()
        stage = result.scores.stage

    if body.session_id is not None:
        ws = _own_session(session, user, body.session_id)
        if context is None:
            context = ws.context
        if stage is None and ws.stage:
            stage = Stage.parse(ws.stage)
    else:
        ws = WorkSession(user_id=user.id, stage=stage.value if stage else None, context=context)
        session.add(ws)
        session.commit()
        session.refresh(ws)

    write_chat_message(ws.id, "user", body.messages[-1].content)
    reply = chat_reply(body.messages, {"stage": stage, "skeleton": context}, client=client)
    write_chat_message(ws.id, "assistant", reply)
    return {"reply": reply, "session_id": ws.id}


@router.get("/workchat/sessions")
def workchat_sessions(user: User = Depends(_require_user), session: Session = Depends(get_session)):
    rows = (
        session.query(WorkSession)
        .filter(WorkSession.user_id == user.id)
        .order_by(WorkSession.id.desc())
        .all()
    )
    return {"items": [_session_payload(ws) for ws in rows]}


@router.get("/workchat/sessions/{session_id}/messages")
def workchat_messages(
    session_id: int,
    user: User = Depends(_require_user),
    session: Session = Depends(get_session),
):
    ws = _own_session(session, user, session_id)
    return {
        "session": _session_payload(ws),
        "items": [
            {
                "id": m.id,
                "role": m.role,
                "content": m.content,
                "created_at": m.created_at.isoformat() if m.created_at else None,
            }
            for m in ws.messages
        ],
    }


@router.post("/workchat/evaluate-example")
def workchat_evaluate_example(
    body: EvaluateExampleRequest,
    user: User = Depends(_require_user),
    llm_factory: Callable[[str], object] = Depends(get_llm_factory),
):
    return evaluate_example(body.prompt, client=llm_factory("example_evaluation")).model_dump()


# Mount routes
app.include_router(router)
