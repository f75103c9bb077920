"""``audit_sessions`` table in Supabase."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from supabase import Client, create_client

from backend.models.session import AuditSession, SessionStatus
from backend.persistence.base import SessionStore
from backend.sessions.errors import PersistenceError

logger = logging.getLogger(__name__)

TABLE = "audit_sessions"


class SupabaseSessionStore(SessionStore):
    def __init__(self, client: Client):
        self._sb = client

    @classmethod
    def from_credentials(cls, url: str, key: str) -> "SupabaseSessionStore":
        return cls(create_client(url, key))

    def _table(self):
        return self._sb.table(TABLE)

    async def get(self, session_token: str) -> Optional[AuditSession]:
        try:
            res = self._table().select("*").eq("session_token", session_token).limit(1).execute()
        except Exception as e:
            logger.exception("Failed to load audit session")
            raise PersistenceError("Failed to load session.") from e
        return AuditSession.from_row(res.data[0]) if res.data else None

    async def find_in_progress_by_email(self, email: str) -> Optional[AuditSession]:
        try:
            res = (
                self._table()
                .select("*")
                .eq("email", email)
                .eq("status", SessionStatus.IN_PROGRESS.value)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.exception("Failed to look up in-progress session")
            raise PersistenceError("Failed to load session.") from e
        return AuditSession.from_row(res.data[0]) if res.data else None

    async def insert(self, session: AuditSession) -> AuditSession:
        row = {k: v for k, v in session.to_row().items() if v is not None}
        try:
            self._table().insert(row).execute()
        except Exception as e:
            logger.exception("Failed to create audit session")
            raise PersistenceError() from e
        return session

    async def update(
        self,
        session_token: str,
        fields: dict[str, Any],
        only_statuses: Optional[Sequence[SessionStatus]] = None,
    ) -> bool:
        values = {k: (v.value if isinstance(v, SessionStatus) else v) for k, v in fields.items()}
        query = self._table().update(values).eq("session_token", session_token)
        if only_statuses is not None:
            query = query.in_("status", [s.value for s in only_statuses])
        try:
            res = query.execute()
        except Exception as e:
            logger.exception("Failed to update audit session")
            raise PersistenceError() from e
        return bool(res.data)
