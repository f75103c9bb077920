"""Tests for session status, client stage, drafts and the in-memory store."""

import pytest

from backend.models.session import (
    AuditSession,
    ClientStage,
    FullAuditStatus,
    SessionStatus,
    SprintData,
)
from backend.sessions.drafts import DraftStore
from backend.sessions.errors import StatusTransitionError
from backend.sessions.stages import (
    REQUIRED_DOCUMENTS,
    advance_status,
    client_stage,
    has_all_documents,
    uploaded_document_count,
)

TOKEN = "a" * 64


def _session(**kwargs) -> AuditSession:
    return AuditSession(session_token=TOKEN, email="dana@brightline.example", **kwargs)


class TestAdvanceStatus:
    def test_forward_moves(self):
        assert advance_status(SessionStatus.IN_PROGRESS, SessionStatus.SUBMITTED) == SessionStatus.SUBMITTED
        assert advance_status(SessionStatus.SUBMITTED, SessionStatus.ACCOUNT_CREATED) == (
            SessionStatus.ACCOUNT_CREATED
        )

    def test_staying_put_is_allowed(self):
        assert advance_status(SessionStatus.SUBMITTED, SessionStatus.SUBMITTED) == SessionStatus.SUBMITTED

    def test_backwards_move_raises(self):
        with pytest.raises(StatusTransitionError) as exc:
            advance_status(SessionStatus.ACCOUNT_CREATED, SessionStatus.IN_PROGRESS)
        assert exc.value.status_code == 400
        assert "account_created" in exc.value.message


class TestClientStage:
    def test_no_session_is_new(self):
        assert client_stage(None) == ClientStage.NEW

    def test_audit_in_progress(self):
        assert client_stage(_session(full_audit_status=FullAuditStatus.IN_PROGRESS)) == ClientStage.IN_AUDIT

    def test_completed_audit_needs_documents(self):
        session = _session(full_audit_status=FullAuditStatus.COMPLETED, documents_uploaded=["team_structure"])
        assert uploaded_document_count(session) == 1
        assert client_stage(session) == ClientStage.DOCS_NEEDED

    def test_all_documents_ready(self):
        session = _session(
            full_audit_status=FullAuditStatus.COMPLETED,
            documents_uploaded=[doc.id for doc in REQUIRED_DOCUMENTS] + ["extra_upload"],
        )
        assert has_all_documents(session)
        assert client_stage(session) == ClientStage.READY

    def test_sprint_overrides_audit(self):
        building = _session(sprint_data=SprintData(week=2))
        complete = _session(sprint_data=SprintData(week=4, status="complete"))
        assert client_stage(building) == ClientStage.BUILDING
        assert client_stage(complete) == ClientStage.COMPLETE


class TestSessionRows:
    def test_row_round_trip_keeps_sprint(self):
        session = _session(status=SessionStatus.SUBMITTED, sprint_data=SprintData(week=3, hours_reclaimed=12))
        row = session.to_row()
        assert row["status"] == "submitted"
        assert row["sprint_data"]["hoursReclaimed"] == 12
        assert AuditSession.from_row(row) == session

    def test_from_row_defaults(self):
        session = AuditSession.from_row({"session_token": TOKEN, "status": None, "form_data": None})
        assert session.status == SessionStatus.IN_PROGRESS
        assert session.form_data == {}
        assert session.sprint_data is None


class TestInMemoryStore:
    @pytest.mark.asyncio
    async def test_update_respects_status_filter(self, store):
        await store.insert(_session(status=SessionStatus.SUBMITTED))
        matched = await store.update(TOKEN, {"user_id": "u1"}, only_statuses=(SessionStatus.IN_PROGRESS,))
        assert matched is False
        assert (await store.get(TOKEN)).user_id is None

    @pytest.mark.asyncio
    async def test_update_missing_session(self, store):
        assert await store.update("b" * 64, {"user_id": "u1"}) is False

    @pytest.mark.asyncio
    async def test_newest_in_progress_session_for_email(self, store):
        await store.insert(AuditSession(session_token="1" * 64, email="x@example.com"))
        await store.insert(AuditSession(session_token="2" * 64, email="x@example.com"))
        await store.insert(AuditSession(session_token="3" * 64, email="x@example.com",
                                        status=SessionStatus.SUBMITTED))
        found = await store.find_in_progress_by_email("x@example.com")
        assert found.session_token == "2" * 64
        assert await store.find_in_progress_by_email("nobody@example.com") is None
        assert len(store) == 3

    @pytest.mark.asyncio
    async def test_get_returns_copy(self, store):
        await store.insert(_session(form_data={"a": 1}))
        session = await store.get(TOKEN)
        session.form_data["a"] = 2
        assert (await store.get(TOKEN)).form_data == {"a": 1}

    @pytest.mark.asyncio
    async def test_save_only_writes_draft_columns(self, store):
        await store.insert(_session())
        result = await store.save(TOKEN, {"form_data": {"a": 1}, "status": "submitted"})
        assert result.saved
        session = await store.get(TOKEN)
        assert session.form_data == {"a": 1}
        assert session.status == SessionStatus.IN_PROGRESS


class TestDraftStore:
    @pytest.mark.asyncio
    async def test_flush_writes_answers(self, store):
        await store.insert(_session())
        draft = DraftStore(TOKEN, store, clock=lambda: "2026-03-02T10:00:00+00:00")
        draft.record("company_name", "Brightline Studio", question_index=4)
        draft.record("team_size_total", "")
        assert draft.dirty

        result = await draft.flush()

        assert result.saved
        assert not draft.dirty
        session = await store.get(TOKEN)
        assert session.form_data == {"company_name": "Brightline Studio", "team_size_total": ""}
        assert session.current_question_index == 4
        assert session.questions_answered == 1
        assert session.updated_at == "2026-03-02T10:00:00+00:00"

    @pytest.mark.asyncio
    async def test_clean_flush_does_not_write(self, store):
        draft = DraftStore(TOKEN, store)
        result = await draft.flush()
        assert result.saved
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_submitted_session_rejects_draft(self, store):
        await store.insert(_session(status=SessionStatus.SUBMITTED, form_data={"a": 1}))
        draft = DraftStore(TOKEN, store)
        draft.record_many({"a": 2})

        result = await draft.flush()

        assert not result.saved
        assert result.error == "Session is not in progress"
        assert draft.dirty
        assert (await store.get(TOKEN)).form_data == {"a": 1}

    def test_answers_is_a_copy(self, store):
        draft = DraftStore(TOKEN, store, answers={"a": 1})
        draft.answers["a"] = 2
        assert draft.answers == {"a": 1}
