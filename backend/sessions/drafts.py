"""In-progress questionnaire answers and their autosave.

Scoring never sees a draft; it takes the completed answers at submit time.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from backend.persistence.base import SaveResult, SessionStore

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


class DraftStore:
    """Holds one session's answers and flushes them through a ``SessionStore``.

    ``record`` only marks the draft dirty; ``flush`` writes when dirty.
    Concurrent flushes for the same session overwrite each other.
    """

    def __init__(
        self,
        session_token: str,
        store: SessionStore,
        answers: Optional[dict[str, Any]] = None,
        question_index: int = 0,
        clock: Callable[[], str] = _utc_now,
    ):
        self.session_token = session_token
        self._store = store
        self._answers: dict[str, Any] = dict(answers or {})
        self.question_index = question_index
        self._clock = clock
        self._dirty = False
        self.last_result: Optional[SaveResult] = None

    @property
    def answers(self) -> dict[str, Any]:
        return dict(self._answers)

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def questions_answered(self) -> int:
        return sum(1 for value in self._answers.values() if value not in (None, "", []))

    def record(self, field: str, value: Any, question_index: Optional[int] = None) -> None:
        self._answers[field] = value
        if question_index is not None:
            self.question_index = question_index
        self._dirty = True

    def record_many(self, answers: dict[str, Any]) -> None:
        self._answers.update(answers)
        self._dirty = True

    async def flush(self) -> SaveResult:
        if not self._dirty:
            return self.last_result or SaveResult(saved=True)
        now = self._clock()
        result = await self._store.save(self.session_token, {
            "form_data": dict(self._answers),
            "current_question_index": self.question_index,
            "questions_answered": self.questions_answered,
            "last_saved_at": now,
            "updated_at": now,
        })
        if result.saved:
            self._dirty = False
        else:
            logger.warning("Draft autosave rejected for session: %s", result.error)
        self.last_result = result
        return result
