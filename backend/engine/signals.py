"""Derived answer signals reused across the scoring and generator modules."""

from __future__ import annotations

from backend.engine.numeric import clamp
from backend.models.answers import AuditResponse

TIME_FIELDS = (
    "time_delivery_hrs",
    "time_sales_hrs",
    "time_mgmt_hrs",
    "time_ops_hrs",
    "time_strategy_hrs",
)

WEEKS_PER_MONTH = 4.33
WEEKS_PER_YEAR = 52


def total_weekly_hours(response: AuditResponse) -> float:
    """Sum of the owner's weekly hours across the five time buckets."""
    return sum(max(0.0, response.number(f)) for f in TIME_FIELDS)


def delivery_pct(response: AuditResponse) -> float:
    """Share of the owner's week spent in delivery, 0-100 (0 with no hours)."""
    total = total_weekly_hours(response)
    if total <= 0:
        return 0.0
    return max(0.0, response.number("time_delivery_hrs")) / total * 100


def percent(response: AuditResponse, key: str, default: float = 0) -> float:
    """Percentage answer clamped to 0-100."""
    return clamp(response.number(key, default))


def team_can(response: AuditResponse, capability: str) -> bool:
    """True when the team can onboard/deliver/close without the owner."""
    return response.equals(f"team_can_{capability}", "Yes")


def team_cannot(response: AuditResponse, capability: str) -> bool:
    """True on an explicit 'No' or 'Sometimes' answer."""
    return response.text(f"team_can_{capability}") in ("No", "Sometimes")
