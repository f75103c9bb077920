"""Session status pipeline and the derived client stage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from backend.models.session import AuditSession, ClientStage, FullAuditStatus, SessionStatus
from backend.sessions.errors import StatusTransitionError

STATUS_ORDER: tuple[SessionStatus, ...] = (
    SessionStatus.IN_PROGRESS,
    SessionStatus.SUBMITTED,
    SessionStatus.ACCOUNT_CREATED,
)

# Statuses a submission may still write to.
EDITABLE_STATUSES = (SessionStatus.IN_PROGRESS, SessionStatus.SUBMITTED)


@dataclass(frozen=True)
class RequiredDocument:
    id: str
    name: str
    description: str


REQUIRED_DOCUMENTS: tuple[RequiredDocument, ...] = (
    RequiredDocument("service_offerings", "Service Offerings Document",
                     "Your current services, pricing, and packages"),
    RequiredDocument("sample_deliverable", "Sample Client Deliverable",
                     "A recent project or report you delivered"),
    RequiredDocument("team_structure", "Team Structure / Org Chart", "Who does what on your team"),
    RequiredDocument("current_sops", "Current SOPs (if any)", "Any documented processes you have"),
)

STAGE_LABELS: dict[ClientStage, tuple[str, str]] = {
    ClientStage.NEW: ("Getting Started", "Complete your full audit to unlock insights"),
    ClientStage.IN_AUDIT: ("Audit In Progress", "Continue your deep-dive assessment"),
    ClientStage.DOCS_NEEDED: ("Documents Needed", "Upload your documents so we can start building"),
    ClientStage.READY: ("Ready to Build", "Everything received. Let's schedule your kickoff."),
    ClientStage.BUILDING: ("Building", "Your transformation is underway"),
    ClientStage.COMPLETE: ("Complete", "Your transformation is complete"),
}


def advance_status(current: SessionStatus, target: SessionStatus) -> SessionStatus:
    """Return ``target`` if it is not behind ``current``; staying put is allowed."""
    if STATUS_ORDER.index(target) < STATUS_ORDER.index(current):
        raise StatusTransitionError(
            f"Cannot move session from {current.value} back to {target.value}"
        )
    return target


def uploaded_document_count(session: AuditSession) -> int:
    uploaded = set(session.documents_uploaded)
    return sum(1 for doc in REQUIRED_DOCUMENTS if doc.id in uploaded)


def has_all_documents(session: AuditSession) -> bool:
    return uploaded_document_count(session) == len(REQUIRED_DOCUMENTS)


def client_stage(session: Optional[AuditSession]) -> ClientStage:
    if session is None:
        return ClientStage.NEW

    sprint = session.sprint_data
    if sprint is not None and sprint.status == "complete":
        return ClientStage.COMPLETE
    if sprint is not None and sprint.week > 0:
        return ClientStage.BUILDING

    if session.full_audit_status == FullAuditStatus.COMPLETED:
        return ClientStage.READY if has_all_documents(session) else ClientStage.DOCS_NEEDED
    if session.full_audit_status == FullAuditStatus.IN_PROGRESS:
        return ClientStage.IN_AUDIT
    return ClientStage.NEW
