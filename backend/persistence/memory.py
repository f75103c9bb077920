"""Process-local session store, used in tests and when no datastore is configured."""

from __future__ import annotations

import copy
from typing import Any, Optional, Sequence

from backend.models.session import AuditSession, SessionStatus
from backend.persistence.base import SessionStore


class InMemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._rows: dict[str, dict[str, Any]] = {}

    async def get(self, session_token: str) -> Optional[AuditSession]:
        row = self._rows.get(session_token)
        return AuditSession.from_row(copy.deepcopy(row)) if row else None

    async def find_in_progress_by_email(self, email: str) -> Optional[AuditSession]:
        # dicts keep insertion order, so the last match is the newest
        matches = [
            row for row in self._rows.values()
            if row.get("email") == email and row.get("status") == SessionStatus.IN_PROGRESS.value
        ]
        return AuditSession.from_row(copy.deepcopy(matches[-1])) if matches else None

    async def insert(self, session: AuditSession) -> AuditSession:
        self._rows[session.session_token] = session.to_row()
        return session

    async def update(
        self,
        session_token: str,
        fields: dict[str, Any],
        only_statuses: Optional[Sequence[SessionStatus]] = None,
    ) -> bool:
        row = self._rows.get(session_token)
        if row is None:
            return False
        if only_statuses is not None and row.get("status") not in {s.value for s in only_statuses}:
            return False
        for key, value in fields.items():
            row[key] = value.value if isinstance(value, SessionStatus) else copy.deepcopy(value)
        return True

    def __len__(self) -> int:
        return len(self._rows)
