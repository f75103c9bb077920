"""FastAPI application for ExitLayer intake: questionnaire, sessions, submission."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.api.rate_limit import RateLimiter
from backend.api.schemas import (
    CreateSessionRequest,
    LinkAccountRequest,
    SaveDraftRequest,
    SubmitPayload,
    VisibleQuestionsRequest,
)
from backend.api.security import get_client_ip, new_session_token, normalize_email
from backend.config.settings import get_settings
from backend.engine.valuation import calculate_valuation
from backend.models.session import AuditSession, SessionStatus
from backend.orchestrator import SubmissionOrchestrator
from backend.persistence.base import SessionStore
from backend.persistence.memory import InMemorySessionStore
from backend.persistence.supabase_store import SupabaseSessionStore
from backend.questionnaire.catalog import POST_SALE_SECTIONS, QUESTION_SECTIONS, VALUATION_SECTIONS
from backend.questionnaire.visibility import missing_required, visible_questions
from backend.sessions.drafts import DraftStore
from backend.sessions.errors import PersistenceError, StatusTransitionError, SubmissionError
from backend.sessions.stages import STAGE_LABELS, advance_status, client_stage

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="ExitLayer Intake API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _build_store() -> SessionStore:
    if settings.supabase_configured:
        return SupabaseSessionStore.from_credentials(settings.supabase_url, settings.supabase_key)
    logger.warning("Supabase not configured; sessions are kept in memory")
    return InMemorySessionStore()


# Singletons (tests swap these out)
session_store: SessionStore = _build_store()
submit_limiter = RateLimiter(
    max_requests=settings.submit_rate_limit_max,
    window_seconds=settings.submit_rate_limit_window_seconds,
)

SECTIONS_BY_FLOW = {
    "valuation": VALUATION_SECTIONS,
    "post_sale": POST_SALE_SECTIONS,
    "all": QUESTION_SECTIONS,
}


def _error(status_code: int, message: str, headers: Optional[dict[str, str]] = None, **extra: Any) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=status_code, headers=headers)


def _utc_now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------

@app.post("/api/submit")
async def submit(request: Request):
    """Score the questionnaire, generate every document and persist the bundle."""
    limit = submit_limiter.check(f"submit:{get_client_ip(request.headers)}")
    headers = limit.headers()
    if not limit.allowed:
        logger.warning("Submit rate limit exceeded")
        return JSONResponse(
            {"success": False, "error": "Too many submissions. Please try again later."},
            status_code=429,
            headers=headers,
        )

    try:
        body = await request.json()
        payload = SubmitPayload.model_validate(body)
    except ValueError:  # decode and validation errors
        return JSONResponse(
            {"success": False, "error": "Please complete all required fields."},
            status_code=400,
            headers=headers,
        )

    orchestrator = SubmissionOrchestrator(store=session_store, settings=settings)
    try:
        result = await orchestrator.submit(payload)
    except PersistenceError as e:
        logger.exception("Failed to save submission")
        return JSONResponse({"success": False, "error": e.message}, status_code=e.status_code, headers=headers)
    except SubmissionError as e:
        return JSONResponse({"success": False, "error": e.message}, status_code=e.status_code, headers=headers)
    except Exception:
        logger.exception("Submission error")
        return JSONResponse(
            {"success": False, "error": "Failed to process submission"},
            status_code=500,
            headers=headers,
        )

    return JSONResponse(result.to_response(), headers=headers)


@app.post("/api/valuation")
async def valuation(answers: dict[str, Any]):
    """Valuation quiz result: current and potential exit price."""
    return calculate_valuation(answers).to_dict()


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

@app.post("/api/audit-session")
async def create_session(body: CreateSessionRequest):
    """Start a questionnaire session, or resume the open one for this email."""
    if not body.full_name or not body.email or not body.company_name:
        return _error(400, "Name, email, and company name are required")

    email = normalize_email(body.email)
    try:
        existing = await session_store.find_in_progress_by_email(email)
        if existing is not None:
            return {
                "session_token": existing.session_token,
                "resumed": True,
                "current_question_index": existing.current_question_index,
                "form_data": existing.form_data,
            }

        token = new_session_token()
        now = _utc_now()
        await session_store.insert(AuditSession(
            session_token=token,
            email=email,
            full_name=body.full_name.strip(),
            company_name=body.company_name.strip(),
            form_data={"full_name": body.full_name, "email": body.email, "company_name": body.company_name},
            current_question_index=3,  # past the three lead-capture questions
            questions_answered=3,
            created_at=now,
            updated_at=now,
        ))
    except PersistenceError:
        logger.exception("Failed to create audit session")
        return _error(500, "Failed to create session")

    return {"session_token": token, "resumed": False}


@app.put("/api/audit-session/save")
async def save_session(body: SaveDraftRequest):
    """Autosave draft answers. Only in-progress sessions accept writes."""
    if not body.session_token:
        return _error(400, "Session token is required")

    draft = DraftStore(body.session_token, session_store, question_index=body.current_question_index)
    draft.record_many(body.form_data)
    try:
        result = await draft.flush()
    except PersistenceError:
        logger.exception("Failed to save audit session")
        return _error(500, "Failed to save progress")

    if not result.saved:
        return _error(409, "Session is not in progress", saved=False)
    return {"saved": True}


@app.get("/api/audit-session/load")
async def load_session(token: str = ""):
    if not token:
        return _error(400, "Token is required")

    try:
        session = await session_store.get(token)
    except PersistenceError:
        logger.exception("Audit session load error")
        return _error(500, "Internal server error")

    if session is None:
        return _error(404, "Session not found")
    if session.status == SessionStatus.ACCOUNT_CREATED:
        return _error(410, "Session already completed", status=session.status.value)

    stage = client_stage(session)
    label, description = STAGE_LABELS[stage]
    return {
        "session_token": session.session_token,
        "form_data": session.form_data,
        "current_question_index": session.current_question_index,
        "questions_answered": session.questions_answered,
        "status": session.status.value,
        "client_stage": stage.value,
        "client_stage_label": label,
        "client_stage_description": description,
    }


@app.post("/api/audit-session/link-account")
async def link_account(body: LinkAccountRequest):
    """Attach a created account to a submitted session."""
    if not body.session_token or not body.user_id:
        return _error(400, "Session token and user ID are required")

    try:
        session = await session_store.get(body.session_token)
        if session is None:
            return _error(404, "Session not found")
        if session.status != SessionStatus.SUBMITTED:
            return _error(400, "Session must be submitted before linking an account")

        status = advance_status(session.status, SessionStatus.ACCOUNT_CREATED)
        await session_store.update(body.session_token, {
            "user_id": body.user_id,
            "status": status,
            "updated_at": _utc_now(),
        })
    except StatusTransitionError as e:
        return _error(e.status_code, e.message)
    except PersistenceError:
        logger.exception("Failed to link account")
        return _error(500, "Failed to link account")

    return {"linked": True}


# ---------------------------------------------------------------------------
# Questionnaire
# ---------------------------------------------------------------------------

@app.get("/api/questionnaire")
async def questionnaire():
    return {
        "valuation": [s.model_dump(by_alias=True, exclude_none=True) for s in VALUATION_SECTIONS],
        "postSale": [s.model_dump(by_alias=True, exclude_none=True) for s in POST_SALE_SECTIONS],
    }


@app.post("/api/questionnaire/visible")
async def questionnaire_visible(body: VisibleQuestionsRequest):
    """Questions the client sees for the answers so far, in order."""
    sections = SECTIONS_BY_FLOW.get(body.flow)
    if sections is None:
        return _error(400, f"Unknown flow: {body.flow}")

    visible = visible_questions(sections, body.answers)
    return {
        "questions": [
            {
                "id": item.question.id,
                "field": item.question.field,
                "sectionIndex": item.section_index,
                "sectionTitle": item.section_title,
                "indexInSection": item.index_in_section,
                "totalInSection": item.total_in_section,
                "globalIndex": item.global_index,
            }
            for item in visible
        ],
        "total": len(visible),
        "missingRequired": missing_required(sections, body.answers),
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}
