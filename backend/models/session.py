"""Persisted questionnaire session (one row of ``audit_sessions``)."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    ACCOUNT_CREATED = "account_created"


class FullAuditStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ClientStage(str, Enum):
    NEW = "new"
    IN_AUDIT = "in_audit"
    DOCS_NEEDED = "docs_needed"
    READY = "ready"
    BUILDING = "building"
    COMPLETE = "complete"


@dataclass
class SprintData:
    week: int = 0
    systems: list[str] = field(default_factory=list)
    hours_reclaimed: float = 0
    status: str = "active"  # "active" | "complete"


@dataclass
class AuditSession:
    session_token: str
    email: str = ""
    full_name: str = ""
    company_name: str = ""
    status: SessionStatus = SessionStatus.IN_PROGRESS
    form_data: dict[str, Any] = field(default_factory=dict)
    score_data: Optional[dict[str, Any]] = None
    generated_content: Optional[dict[str, Any]] = None
    overall_score: Optional[int] = None
    client_folder: Optional[str] = None
    current_question_index: int = 0
    questions_answered: int = 0
    user_id: Optional[str] = None
    full_audit_status: FullAuditStatus = FullAuditStatus.NOT_STARTED
    sprint_data: Optional[SprintData] = None
    documents_uploaded: list[str] = field(default_factory=list)
    created_at: Optional[str] = None
    submitted_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_row(self) -> dict[str, Any]:
        """Column dict for the datastore (enums as their values)."""
        row = asdict(self)
        row["status"] = self.status.value
        row["full_audit_status"] = self.full_audit_status.value
        if self.sprint_data is not None:
            row["sprint_data"] = {
                "week": self.sprint_data.week,
                "systems": list(self.sprint_data.systems),
                "hoursReclaimed": self.sprint_data.hours_reclaimed,
                "status": self.sprint_data.status,
            }
        return row

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "AuditSession":
        sprint = row.get("sprint_data")
        return cls(
            session_token=row["session_token"],
            email=row.get("email") or "",
            full_name=row.get("full_name") or "",
            company_name=row.get("company_name") or "",
            status=SessionStatus(row.get("status") or SessionStatus.IN_PROGRESS.value),
            form_data=row.get("form_data") or {},
            score_data=row.get("score_data"),
            generated_content=row.get("generated_content"),
            overall_score=row.get("overall_score"),
            client_folder=row.get("client_folder"),
            current_question_index=row.get("current_question_index") or 0,
            questions_answered=row.get("questions_answered") or 0,
            user_id=row.get("user_id"),
            full_audit_status=FullAuditStatus(
                row.get("full_audit_status") or FullAuditStatus.NOT_STARTED.value
            ),
            sprint_data=SprintData(
                week=sprint.get("week", 0),
                systems=list(sprint.get("systems") or []),
                hours_reclaimed=sprint.get("hoursReclaimed", 0),
                status=sprint.get("status", "active"),
            ) if isinstance(sprint, dict) else None,
            documents_uploaded=list(row.get("documents_uploaded") or []),
            created_at=row.get("created_at"),
            submitted_at=row.get("submitted_at"),
            updated_at=row.get("updated_at"),
        )
