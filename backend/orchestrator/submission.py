"""Submission orchestrator: checks the session, runs the generators, persists the bundle."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from backend.api.schemas import SubmitPayload
from backend.api.security import is_valid_session_token, new_session_token, normalize_email
from backend.config.settings import Settings
from backend.documents.build_plan import render_build_plan
from backend.documents.discovery_agenda import render_discovery_agenda
from backend.engine.calculator import calculate_exit_layer_score
from backend.generators.call_prep import generate_call_prep, render_call_prep_markdown
from backend.generators.diagnostic_report import generate_diagnostic_report
from backend.generators.skills import generate_skills, render_skills_markdown
from backend.generators.system_spec import generate_system_spec
from backend.hooks.audit_hooks import log_submission
from backend.models.answers import AuditResponse
from backend.models.score import ExitLayerScore
from backend.models.session import AuditSession, SessionStatus
from backend.persistence.base import SessionStore
from backend.sessions.errors import (
    InvalidSessionTokenError,
    PersistenceError,
    SessionEmailMismatchError,
    SessionNotEditableError,
    SessionNotFoundError,
)
from backend.sessions.stages import EDITABLE_STATUSES, advance_status

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def client_folder_name(company_name: str, submitted_on: str) -> str:
    """``Acme Co.`` on 2026-01-05 -> ``Acme-Co--2026-01-05``."""
    sanitized = re.sub(r"[^a-zA-Z0-9]", "-", company_name or "Unknown-Client")
    return f"{sanitized}-{submitted_on}"


@dataclass(frozen=True)
class GeneratedContent:
    score: ExitLayerScore
    bundle: dict[str, Any]


def generate_content(
    form_data: dict[str, Any],
    generated_at: str,
    sprint_cost: float,
    analytics: Any = None,
    analytics_session: Any = None,
) -> GeneratedContent:
    """Run every generator over one set of answers.

    ``generated_at`` is the single timestamp stamped into every document.
    """
    r = AuditResponse(form_data)
    score = calculate_exit_layer_score(r)
    report = generate_diagnostic_report(r, score)
    system_spec = generate_system_spec(r, generated_at=generated_at)
    call_prep = generate_call_prep(r, generated_at=generated_at)
    skills = generate_skills(r, system_spec, generated_at=generated_at)

    bundle = {
        "diagnosticReport": report.to_markdown(),
        "systemSpec": system_spec.to_dict(),
        "buildPlan": render_build_plan(system_spec, score, sprint_cost=sprint_cost),
        "discoveryAgenda": render_discovery_agenda(system_spec),
        "callPrep": call_prep.to_dict(),
        "callPrepMarkdown": render_call_prep_markdown(call_prep),
        "skillsCatalog": skills.to_dict(),
        "skillsCatalogMarkdown": render_skills_markdown(skills),
        "analytics": {
            "summary": analytics,
            "session": analytics_session,
            "savedAt": generated_at,
        } if analytics else None,
        "metadata": {
            "clientName": r.text("company_name"),
            "contactName": r.text("full_name") or r.text("contact_name"),
            "contactEmail": r.text("email") or r.text("contact_email"),
            "submissionDate": generated_at,
            "overallScore": score.overall,
            "totalSystems": system_spec.summary.total_systems_to_build,
            "totalSkills": skills.summary.total_skills,
            "automationCoverage": system_spec.summary.automation_coverage,
        },
    }
    return GeneratedContent(score=score, bundle=bundle)


@dataclass(frozen=True)
class SubmissionResult:
    score: ExitLayerScore
    client_folder: str
    session_token: Optional[str]
    audit_entry: dict[str, Any]

    def to_response(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": "Questionnaire submitted successfully",
            "clientFolder": self.client_folder,
            "score": self.score.to_dict(),
            "session_token": self.session_token,
        }


class SubmissionOrchestrator:
    """Validated payload in, persisted bundle out.

    Session errors are raised before any scoring runs. Store failures
    propagate as ``PersistenceError``; nothing is retried.
    """

    def __init__(
        self,
        store: SessionStore,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._store = store
        self._settings = settings or Settings()
        self._clock = clock

    async def check_session(self, session_token: str, submission_email: str) -> AuditSession:
        if not is_valid_session_token(session_token):
            raise InvalidSessionTokenError()

        session = await self._store.get(session_token)
        if session is None:
            raise SessionNotFoundError()
        if session.status not in EDITABLE_STATUSES:
            raise SessionNotEditableError()

        session_email = normalize_email(session.email)
        if session_email and submission_email and session_email != submission_email:
            raise SessionEmailMismatchError()
        return session

    async def submit(self, payload: SubmitPayload) -> SubmissionResult:
        form_data = payload.form_data()
        token = payload.session_token or None
        submission_email = normalize_email(payload.contact_email_value)

        session: Optional[AuditSession] = None
        if token:
            session = await self.check_session(token, submission_email)

        now = self._clock()
        generated_at = now.isoformat()
        content = generate_content(
            form_data,
            generated_at,
            sprint_cost=self._settings.sprint_cost,
            analytics=payload.analytics,
            analytics_session=payload.analytics_session,
        )
        score = content.score
        folder = client_folder_name(payload.company_name, generated_at[:10])
        score_data = score.to_dict()
        stored_score = {
            "overall": score_data["overall"],
            "dimensions": score_data["dimensions"],
            "financialMetrics": score_data["financialMetrics"],
        }

        if session is not None:
            status = advance_status(session.status, SessionStatus.SUBMITTED)
            updated = await self._store.update(
                session.session_token,
                {
                    "status": status,
                    "overall_score": score.overall,
                    "client_folder": folder,
                    "score_data": stored_score,
                    "form_data": form_data,
                    "generated_content": content.bundle,
                    "submitted_at": generated_at,
                    "updated_at": generated_at,
                },
                only_statuses=EDITABLE_STATUSES,
            )
            if not updated:
                logger.error("Audit session changed status before the submission was saved")
                raise PersistenceError()
        else:
            await self._store.insert(AuditSession(
                session_token=new_session_token(),
                email=payload.contact_email_value,
                full_name=payload.contact_name_value,
                company_name=payload.company_name,
                status=SessionStatus.SUBMITTED,
                form_data=form_data,
                score_data=stored_score,
                generated_content=content.bundle,
                overall_score=score.overall,
                client_folder=folder,
                created_at=generated_at,
                submitted_at=generated_at,
            ))

        metadata = content.bundle["metadata"]
        entry = log_submission(
            client_folder=folder,
            overall_score=score.overall,
            total_systems=metadata["totalSystems"],
            total_skills=metadata["totalSkills"],
            automation_coverage=metadata["automationCoverage"],
            submitted_at=generated_at,
            session_token=token,
        )
        return SubmissionResult(score=score, client_folder=folder, session_token=token, audit_entry=entry)
