"""Shared test fixtures for the ExitLayer intake test suite."""

import pytest

from backend.models.answers import AuditResponse
from backend.persistence.memory import InMemorySessionStore


@pytest.fixture
def agency_1m() -> dict:
    """$1.2M agency, six people, owner working 45 hours a week.

    Monthly revenue 100k over 45 weekly hours gives an owner hourly value
    of about 2222.22.
    """
    return {
        "company_name": "Brightline Studio",
        "full_name": "Dana Reyes",
        "email": "dana@brightlinestudio.com",
        "revenue_12mo": 1_200_000,
        "revenue_monthly_avg": 100_000,
        "team_size_total": 6,
        "time_delivery_hrs": 25,
        "time_sales_hrs": 5,
        "time_mgmt_hrs": 5,
        "time_ops_hrs": 5,
        "time_strategy_hrs": 5,
        "has_sops": "Yes",
        "documented_pct": 40,
    }


@pytest.fixture
def owner_bottleneck() -> dict:
    """Owner-run agency: the team cannot deliver or close without them."""
    return {
        "company_name": "Acme Co.",
        "full_name": "Sam Patel",
        "email": "sam@acmeco.com",
        "revenue_12mo": 900_000,
        "team_size_total": 4,
        "team_ft": 2,
        "team_contractors": 3,
        "time_delivery_hrs": 35,
        "time_sales_hrs": 10,
        "time_mgmt_hrs": 5,
        "time_ops_hrs": 5,
        "time_strategy_hrs": 1,
        "projects_requiring_owner_pct": 80,
        "team_can_onboard": "Sometimes",
        "team_can_deliver": "No",
        "team_can_close": "No",
        "has_sops": "No",
        "documented_pct": 10,
        "has_kickoff_checklist": "No",
        "has_qc_checklist": "No",
        "top3_concentration_pct": 60,
        "churn_rate_pct": 35,
        "revenue_recurring_pct": 20,
        "positioning_clarity": 4,
        "team_utilization_score": 2,
        "core_service": "Brand strategy",
        "tasks_only_owner": "Final QA review, Pricing new proposals, Hiring decisions",
        "decisions_only_owner": "Pricing for custom work, Whether to take on a new client",
        "tools_pm": "Asana",
        "tools_crm": "HubSpot",
    }


@pytest.fixture
def agency_response(agency_1m) -> AuditResponse:
    return AuditResponse(agency_1m)


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def submit_body(agency_1m) -> dict:
    """Submission body as the intake form posts it."""
    return {
        **agency_1m,
        "_analytics": {"totalTimeMs": 120_000},
        "_analyticsSession": {"id": "analytics-1"},
    }
