"""Tests for the submission orchestrator and the generated content bundle."""

from datetime import datetime, timezone

import pytest

from backend.api.schemas import SubmitPayload
from backend.config.settings import Settings
from backend.models.session import AuditSession, SessionStatus
from backend.orchestrator.submission import (
    SubmissionOrchestrator,
    client_folder_name,
    generate_content,
)
from backend.persistence.memory import InMemorySessionStore
from backend.sessions.errors import (
    InvalidSessionTokenError,
    PersistenceError,
    SessionEmailMismatchError,
    SessionNotEditableError,
    SessionNotFoundError,
)

TOKEN = "c" * 64
GENERATED_AT = "2026-03-02T10:00:00+00:00"


def _fixed_clock() -> datetime:
    return datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


class StaleStore(InMemorySessionStore):
    """Session moves on between the check and the write."""

    async def update(self, session_token, fields, only_statuses=None):
        return False


@pytest.fixture
def orchestrator(store) -> SubmissionOrchestrator:
    return SubmissionOrchestrator(store=store, settings=Settings(sprint_cost=10_000), clock=_fixed_clock)


class TestClientFolderName:
    def test_punctuation_becomes_dashes(self):
        assert client_folder_name("Acme Co.", "2026-01-05") == "Acme-Co--2026-01-05"

    def test_missing_company(self):
        assert client_folder_name("", "2026-01-05") == "Unknown-Client-2026-01-05"


class TestGenerateContent:
    def test_bundle_keys(self, owner_bottleneck):
        content = generate_content(owner_bottleneck, GENERATED_AT, sprint_cost=10_000)
        assert list(content.bundle) == [
            "diagnosticReport",
            "systemSpec",
            "buildPlan",
            "discoveryAgenda",
            "callPrep",
            "callPrepMarkdown",
            "skillsCatalog",
            "skillsCatalogMarkdown",
            "analytics",
            "metadata",
        ]

    def test_metadata(self, owner_bottleneck):
        content = generate_content(owner_bottleneck, GENERATED_AT, sprint_cost=10_000)
        metadata = content.bundle["metadata"]
        assert metadata["clientName"] == "Acme Co."
        assert metadata["contactName"] == "Sam Patel"
        assert metadata["contactEmail"] == "sam@acmeco.com"
        assert metadata["submissionDate"] == GENERATED_AT
        assert metadata["overallScore"] == content.score.overall
        assert metadata["totalSystems"] > 0

    def test_analytics_absent_without_summary(self, agency_1m):
        content = generate_content(agency_1m, GENERATED_AT, sprint_cost=10_000)
        assert content.bundle["analytics"] is None

    def test_analytics_carries_saved_at(self, agency_1m):
        content = generate_content(agency_1m, GENERATED_AT, sprint_cost=10_000,
                                   analytics={"totalTimeMs": 1}, analytics_session={"id": "s"})
        assert content.bundle["analytics"] == {
            "summary": {"totalTimeMs": 1},
            "session": {"id": "s"},
            "savedAt": GENERATED_AT,
        }

    def test_same_timestamp_everywhere(self, owner_bottleneck):
        bundle = generate_content(owner_bottleneck, GENERATED_AT, sprint_cost=10_000).bundle
        assert bundle["systemSpec"]["clientInfo"]["generatedAt"] == GENERATED_AT
        assert bundle["callPrep"]["clientInfo"]["generatedAt"] == GENERATED_AT
        assert bundle["skillsCatalog"]["generatedAt"] == GENERATED_AT


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_without_session_inserts(self, orchestrator, store, submit_body):
        result = await orchestrator.submit(SubmitPayload.model_validate(submit_body))

        assert result.session_token is None
        assert result.client_folder == "Brightline-Studio-2026-03-02"
        assert result.audit_entry["has_session"] is False
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_submit_with_session_updates(self, orchestrator, store, submit_body):
        await store.insert(AuditSession(session_token=TOKEN, email="dana@brightlinestudio.com"))

        payload = SubmitPayload.model_validate({**submit_body, "_session_token": TOKEN})
        result = await orchestrator.submit(payload)

        session = await store.get(TOKEN)
        assert result.session_token == TOKEN
        assert session.status == SessionStatus.SUBMITTED
        assert session.client_folder == result.client_folder
        assert session.submitted_at == GENERATED_AT
        assert session.score_data["overall"] == result.score.overall
        assert "analysis" not in session.score_data
        assert session.generated_content["metadata"]["submissionDate"] == GENERATED_AT

    @pytest.mark.asyncio
    async def test_resubmit_while_submitted(self, orchestrator, store, submit_body):
        await store.insert(AuditSession(session_token=TOKEN, email="dana@brightlinestudio.com",
                                        status=SessionStatus.SUBMITTED))
        payload = SubmitPayload.model_validate({**submit_body, "_session_token": TOKEN})
        result = await orchestrator.submit(payload)
        assert result.session_token == TOKEN

    @pytest.mark.asyncio
    async def test_stale_session_raises(self, submit_body):
        store = StaleStore()
        await store.insert(AuditSession(session_token=TOKEN, email="dana@brightlinestudio.com"))
        orchestrator = SubmissionOrchestrator(store=store, clock=_fixed_clock)

        with pytest.raises(PersistenceError) as exc:
            await orchestrator.submit(SubmitPayload.model_validate({**submit_body, "_session_token": TOKEN}))
        assert exc.value.status_code == 500


class TestCheckSession:
    @pytest.mark.asyncio
    async def test_invalid_token(self, orchestrator):
        with pytest.raises(InvalidSessionTokenError):
            await orchestrator.check_session("not-a-token", "dana@brightlinestudio.com")

    @pytest.mark.asyncio
    async def test_not_found(self, orchestrator):
        with pytest.raises(SessionNotFoundError) as exc:
            await orchestrator.check_session(TOKEN, "dana@brightlinestudio.com")
        assert exc.value.status_code == 404

    @pytest.mark.asyncio
    async def test_not_editable(self, orchestrator, store):
        await store.insert(AuditSession(session_token=TOKEN, email="dana@brightlinestudio.com",
                                        status=SessionStatus.ACCOUNT_CREATED))
        with pytest.raises(SessionNotEditableError):
            await orchestrator.check_session(TOKEN, "dana@brightlinestudio.com")

    @pytest.mark.asyncio
    async def test_email_mismatch(self, orchestrator, store):
        await store.insert(AuditSession(session_token=TOKEN, email="Dana@BrightlineStudio.com"))
        with pytest.raises(SessionEmailMismatchError) as exc:
            await orchestrator.check_session(TOKEN, "other@agency.com")
        assert exc.value.status_code == 403

    @pytest.mark.asyncio
    async def test_email_compared_case_insensitively(self, orchestrator, store):
        await store.insert(AuditSession(session_token=TOKEN, email="Dana@BrightlineStudio.com"))
        session = await orchestrator.check_session(TOKEN, "dana@brightlinestudio.com")
        assert session.session_token == TOKEN
