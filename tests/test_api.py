"""Tests for FastAPI endpoints: submission, sessions, questionnaire, health."""

import pytest
from httpx import ASGITransport, AsyncClient

import backend.main as main
from backend.api.rate_limit import RateLimiter
from backend.main import app
from backend.models.session import SessionStatus
from backend.persistence.memory import InMemorySessionStore


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch):
    """Every test gets an empty store and a fresh submit limiter."""
    store = InMemorySessionStore()
    monkeypatch.setattr(main, "session_store", store)
    main.submit_limiter.reset()
    return store


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def _start_session(client, body) -> str:
    resp = await client.post("/api/audit-session", json={
        "full_name": body["full_name"],
        "email": body["email"],
        "company_name": body["company_name"],
    })
    assert resp.status_code == 200
    return resp.json()["session_token"]


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_endpoint(self):
        async with _client() as client:
            resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_cors_headers_present(self):
        async with _client() as client:
            resp = await client.options(
                "/api/submit",
                headers={
                    "Origin": "http://localhost:3000",
                    "Access-Control-Request-Method": "POST",
                },
            )
        assert resp.headers.get("access-control-allow-origin") == "http://localhost:3000"


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_without_session(self, submit_body, fresh_state):
        async with _client() as client:
            resp = await client.post("/api/submit", json=submit_body)

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["session_token"] is None
        assert data["clientFolder"].startswith("Brightline-Studio-")
        assert data["score"]["overall"] == 36
        assert resp.headers["X-RateLimit-Limit"] == "20"
        assert len(fresh_state) == 1

    @pytest.mark.asyncio
    async def test_missing_contact_is_rejected(self, submit_body):
        body = {k: v for k, v in submit_body.items() if k != "email"}
        async with _client() as client:
            resp = await client.post("/api/submit", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Please complete all required fields."}

    @pytest.mark.asyncio
    async def test_invalid_json_is_rejected(self):
        async with _client() as client:
            resp = await client.post(
                "/api/submit",
                content=b"{not json",
                headers={"content-type": "application/json"},
            )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_undecodable_body_is_rejected(self):
        async with _client() as client:
            resp = await client.post(
                "/api/submit",
                content=b'{"company_name": "\xff\xfe"}',
                headers={"content-type": "application/json"},
            )
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Please complete all required fields."}
        assert resp.headers["X-RateLimit-Remaining"] == "19"

    @pytest.mark.asyncio
    async def test_rate_limited(self, monkeypatch, submit_body):
        monkeypatch.setattr(main, "submit_limiter", RateLimiter(max_requests=1, window_seconds=3600))
        async with _client() as client:
            first = await client.post("/api/submit", json=submit_body)
            second = await client.post("/api/submit", json=submit_body)
        assert first.status_code == 200
        assert second.status_code == 429
        assert "Retry-After" in second.headers
        assert second.json()["success"] is False

    @pytest.mark.asyncio
    async def test_invalid_session_token(self, submit_body):
        async with _client() as client:
            resp = await client.post("/api/submit", json={**submit_body, "_session_token": "abc"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid session token."

    @pytest.mark.asyncio
    async def test_unknown_session(self, submit_body):
        async with _client() as client:
            resp = await client.post("/api/submit", json={**submit_body, "_session_token": "f" * 64})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_email_mismatch(self, submit_body):
        async with _client() as client:
            token = await _start_session(client, submit_body)
            resp = await client.post("/api/submit", json={
                **submit_body,
                "email": "someone@otheragency.com",
                "_session_token": token,
            })
        assert resp.status_code == 403
        assert resp.json()["error"] == "Session email mismatch."

    @pytest.mark.asyncio
    async def test_submit_with_session_stores_bundle(self, submit_body, fresh_state):
        async with _client() as client:
            token = await _start_session(client, submit_body)
            resp = await client.post("/api/submit", json={**submit_body, "_session_token": token})

        assert resp.status_code == 200
        assert resp.json()["session_token"] == token

        session = await fresh_state.get(token)
        assert session.status == SessionStatus.SUBMITTED
        assert session.overall_score == 36
        assert "_session_token" not in session.form_data
        bundle = session.generated_content
        assert bundle["metadata"]["clientName"] == "Brightline Studio"
        assert bundle["analytics"]["summary"] == {"totalTimeMs": 120_000}
        assert bundle["diagnosticReport"].startswith("# ExitLayer Diagnostic Report")
        assert set(session.score_data) == {"overall", "dimensions", "financialMetrics"}


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_create_requires_fields(self):
        async with _client() as client:
            resp = await client.post("/api/audit-session", json={"email": "a@b.com"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_create_then_resume(self, submit_body):
        async with _client() as client:
            token = await _start_session(client, submit_body)
            resp = await client.post("/api/audit-session", json={
                "full_name": "Dana Reyes",
                "email": "  DANA@brightlinestudio.com ",
                "company_name": "Brightline Studio",
            })
        data = resp.json()
        assert data["resumed"] is True
        assert data["session_token"] == token
        assert data["current_question_index"] == 3

    @pytest.mark.asyncio
    async def test_save_and_load(self, submit_body):
        async with _client() as client:
            token = await _start_session(client, submit_body)
            saved = await client.put("/api/audit-session/save", json={
                "session_token": token,
                "form_data": {"revenue_12mo": 1_200_000, "has_sops": "Yes"},
                "current_question_index": 7,
            })
            loaded = await client.get("/api/audit-session/load", params={"token": token})

        assert saved.json() == {"saved": True}
        data = loaded.json()
        assert data["form_data"] == {"revenue_12mo": 1_200_000, "has_sops": "Yes"}
        assert data["current_question_index"] == 7
        assert data["questions_answered"] == 2
        assert data["status"] == "in_progress"
        assert data["client_stage"] == "new"
        assert data["client_stage_label"] == "Getting Started"
        assert data["client_stage_description"] == "Complete your full audit to unlock insights"

    @pytest.mark.asyncio
    async def test_save_requires_token(self):
        async with _client() as client:
            resp = await client.put("/api/audit-session/save", json={"form_data": {}})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_load_errors(self):
        async with _client() as client:
            missing = await client.get("/api/audit-session/load")
            unknown = await client.get("/api/audit-session/load", params={"token": "f" * 64})
        assert missing.status_code == 400
        assert unknown.status_code == 404

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, submit_body):
        async with _client() as client:
            token = await _start_session(client, submit_body)

            early_link = await client.post("/api/audit-session/link-account",
                                           json={"session_token": token, "user_id": "user-1"})
            assert early_link.status_code == 400

            submitted = await client.post("/api/submit", json={**submit_body, "_session_token": token})
            assert submitted.status_code == 200

            late_save = await client.put("/api/audit-session/save",
                                         json={"session_token": token, "form_data": {"a": 1}})
            assert late_save.status_code == 409
            assert late_save.json()["saved"] is False

            linked = await client.post("/api/audit-session/link-account",
                                       json={"session_token": token, "user_id": "user-1"})
            assert linked.json() == {"linked": True}

            loaded = await client.get("/api/audit-session/load", params={"token": token})
            assert loaded.status_code == 410
            assert loaded.json()["status"] == "account_created"

            resubmit = await client.post("/api/submit", json={**submit_body, "_session_token": token})
            assert resubmit.status_code == 400
            assert resubmit.json()["error"] == "Session is no longer editable."

    @pytest.mark.asyncio
    async def test_link_unknown_session(self):
        async with _client() as client:
            resp = await client.post("/api/audit-session/link-account",
                                     json={"session_token": "f" * 64, "user_id": "user-1"})
        assert resp.status_code == 404


class TestQuestionnaireEndpoints:
    @pytest.mark.asyncio
    async def test_questionnaire_uses_camel_case(self):
        async with _client() as client:
            resp = await client.get("/api/questionnaire")
        data = resp.json()
        assert len(data["valuation"]) == 4
        assert len(data["postSale"]) == 8
        first = data["valuation"][0]["questions"][0]
        assert first["field"] == "annual_revenue"
        assert "helpText" in first

    @pytest.mark.asyncio
    async def test_visible_questions(self):
        async with _client() as client:
            resp = await client.post("/api/questionnaire/visible",
                                     json={"answers": {"has_sops": "No"}, "flow": "post_sale"})
        data = resp.json()
        fields = [q["field"] for q in data["questions"]]
        assert "has_sops" in fields
        assert "sop_list" not in fields
        assert data["total"] == len(fields)
        assert [q["globalIndex"] for q in data["questions"]] == list(range(data["total"]))

    @pytest.mark.asyncio
    async def test_unknown_flow(self):
        async with _client() as client:
            resp = await client.post("/api/questionnaire/visible", json={"flow": "nope"})
        assert resp.status_code == 400


class TestValuationEndpoint:
    @pytest.mark.asyncio
    async def test_valuation(self):
        async with _client() as client:
            resp = await client.post("/api/valuation", json={
                "annual_revenue": 1_000_000,
                "profit_margin": "20-30%",
                "owner_annual_comp": 150_000,
            })
        assert resp.status_code == 200
        assert resp.json()["sde"] == 400_000
