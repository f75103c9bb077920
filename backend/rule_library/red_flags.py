"""Consistency checks between answers that should not both be true.

Each check is independent; several can fire for the same client. The
result is a flag with what was observed and how to probe it on the call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from backend.engine.signals import total_weekly_hours
from backend.models.answers import AuditResponse, format_answer_number
from backend.rule_library.registry import register_rule

RED_FLAG_RULES = "red_flags"


@dataclass(frozen=True)
class RedFlag:
    observation: str
    probe: str


def _n(r: AuditResponse, key: str) -> str:
    return format_answer_number(r.number(key))


@register_rule(
    "onboarding-documented-but-blocked",
    RED_FLAG_RULES,
    "Team can't onboard although onboarding is documented",
    trigger=lambda r: not r.equals("team_can_onboard", "Yes") and r.equals("onboarding_documented", "Yes"),
)
def onboarding_contradiction(r: AuditResponse, produced: list[Any]) -> list[RedFlag]:
    return [RedFlag(
        observation='Says team "can\'t onboard" but also says onboarding is "documented"',
        probe="Is the doc outdated? Not being followed? Or just not trusting the team?",
    )]


@register_rule(
    "long-hours-little-strategy",
    RED_FLAG_RULES,
    "Long weeks with almost no strategy time",
    trigger=lambda r: total_weekly_hours(r) > 50 and r.number("time_strategy_hrs") < 3,
)
def hours_without_strategy(r: AuditResponse, produced: list[Any]) -> list[RedFlag]:
    total = format_answer_number(total_weekly_hours(r))
    return [RedFlag(
        observation=f"{total} hours/week but only {_n(r, 'time_strategy_hrs')} hours on strategy",
        probe=(
            "Where do they think this time should come from? "
            "What would they do with more strategic time?"
        ),
    )]


@register_rule(
    "recurring-with-churn",
    RED_FLAG_RULES,
    "Mostly recurring revenue but high churn",
    trigger=lambda r: r.number("revenue_recurring_pct") > 50 and r.number("churn_rate_pct") > 20,
)
def recurring_churn(r: AuditResponse, produced: list[Any]) -> list[RedFlag]:
    return [RedFlag(
        observation=f"{_n(r, 'revenue_recurring_pct')}% recurring but {_n(r, 'churn_rate_pct')}% churn",
        probe="How bad is churn really? Who's churning? Is it delivery or fit?",
    )]


@register_rule(
    "contractor-heavy",
    RED_FLAG_RULES,
    "More contractors than full-time staff",
    trigger=lambda r: r.number("team_contractors") > r.number("team_ft"),
)
def contractor_heavy(r: AuditResponse, produced: list[Any]) -> list[RedFlag]:
    return [RedFlag(
        observation=f"More contractors ({_n(r, 'team_contractors')}) than FTEs ({_n(r, 'team_ft')})",
        probe=(
            "Are contractors reliable? Is contractor churn part of the problem? "
            "Can we systematize around them?"
        ),
    )]


@register_rule(
    "capable-but-untrusted",
    RED_FLAG_RULES,
    "Team rated capable but not trusted",
    trigger=lambda r: r.number("team_capability_score") > 7 and 0 < r.number("team_trust_level") < 5,
)
def trust_gap(r: AuditResponse, produced: list[Any]) -> list[RedFlag]:
    return [RedFlag(
        observation=(
            f"Team capability: {_n(r, 'team_capability_score')}/10, "
            f"but trust: {_n(r, 'team_trust_level')}/10"
        ),
        probe="They rate team as capable but don't trust them. Why the gap?",
    )]


@register_rule(
    "sops-but-undocumented",
    RED_FLAG_RULES,
    "Claims SOPs but little is documented",
    trigger=lambda r: r.equals("has_sops", "Yes") and r.number("documented_pct") < 30,
)
def thin_sops(r: AuditResponse, produced: list[Any]) -> list[RedFlag]:
    return [RedFlag(
        observation=f'Says "Yes" to SOPs but only {_n(r, "documented_pct")}% documented',
        probe="Are the SOPs comprehensive or just a few basics?",
    )]
