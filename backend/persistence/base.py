from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from backend.models.session import AuditSession, SessionStatus

# Columns a draft autosave may touch.
DRAFT_FIELDS = ("form_data", "current_question_index", "questions_answered", "last_saved_at", "updated_at")


@dataclass(frozen=True)
class SaveResult:
    saved: bool
    error: Optional[str] = None


class SessionStore(ABC):
    """Abstract base for ``audit_sessions`` storage.

    Writes are last-write-wins; no implementation locks a session.
    Failures of the underlying datastore raise ``PersistenceError``.
    """

    @abstractmethod
    async def get(self, session_token: str) -> Optional[AuditSession]:
        ...

    @abstractmethod
    async def find_in_progress_by_email(self, email: str) -> Optional[AuditSession]:
        """Most recently created in-progress session for a normalized email."""
        ...

    @abstractmethod
    async def insert(self, session: AuditSession) -> AuditSession:
        ...

    @abstractmethod
    async def update(
        self,
        session_token: str,
        fields: dict[str, Any],
        only_statuses: Optional[Sequence[SessionStatus]] = None,
    ) -> bool:
        """Apply ``fields`` to the session; False when no row matched.

        ``only_statuses`` restricts the write to sessions currently in one
        of those statuses.
        """
        ...

    async def save(self, session_token: str, data: dict[str, Any]) -> SaveResult:
        """Draft autosave: only in-progress sessions, only draft columns."""
        fields = {k: v for k, v in data.items() if k in DRAFT_FIELDS}
        matched = await self.update(session_token, fields, only_statuses=(SessionStatus.IN_PROGRESS,))
        if not matched:
            return SaveResult(saved=False, error="Session is not in progress")
        return SaveResult(saved=True)
