"""Rules that flag answers too thin to build from.

A gap fires when an answer is missing or shorter than the detail needed to
design a system. Each carries the questions to ask on the discovery call.
"""

from __future__ import annotations

from typing import Any, Callable

from backend.engine.signals import team_cannot
from backend.models.answers import AuditResponse
from backend.models.enums import GapPriority
from backend.models.system_spec import Gap
from backend.rule_library.registry import register_rule

GAP_RULES = "gaps"


def too_short(r: AuditResponse, key: str, min_length: int) -> bool:
    return len(r.text(key)) < min_length


def _missing_tool(key: str) -> Callable[[AuditResponse], bool]:
    def trigger(r: AuditResponse) -> bool:
        tool = r.text(key)
        return not tool or tool.lower() == "none"

    return trigger


def register_gap(
    field: str,
    question: str,
    reason: str,
    discovery_questions: list[str],
    priority: GapPriority,
    trigger: Callable[[AuditResponse], bool],
) -> None:
    """Register a gap rule that emits one fixed ``Gap`` when ``trigger`` holds."""
    gap = Gap(
        field=field,
        question=question,
        reason=reason,
        discovery_questions=discovery_questions,
        priority=priority,
    )

    def produce(r: AuditResponse, produced: list[Any]) -> list[Gap]:
        return [gap]

    register_rule(field, GAP_RULES, reason, trigger=trigger)(produce)


register_gap(
    "tasks_only_owner",
    "What tasks can ONLY you do?",
    "Answer too brief - need specific task breakdown to build automation",
    [
        "Walk me through a typical day - what tasks require your personal attention?",
        'When your team says "I need you to look at this", what are the top 5 things they bring?',
        "What tasks do you do that you've never tried to delegate? Why?",
    ],
    GapPriority.CRITICAL,
    trigger=lambda r: too_short(r, "tasks_only_owner", 20),
)

register_gap(
    "decisions_only_owner",
    "What decisions can ONLY you make?",
    "Answer too brief - need specific decisions to build frameworks",
    [
        "What decisions does your team escalate to you daily?",
        "When a client asks for something custom, who decides if we do it?",
        "What decisions have you made in the past month that only you could make?",
    ],
    GapPriority.CRITICAL,
    trigger=lambda r: too_short(r, "decisions_only_owner", 20),
)

register_gap(
    "vacation_breaks",
    "What would break if you took 2 weeks off?",
    "Need specific failure points to build backup systems",
    [
        "What happened the last time you were unavailable for a day?",
        "What are the top 3 things clients would complain about if you disappeared?",
        "What balls would get dropped if no one could reach you?",
    ],
    GapPriority.CRITICAL,
    trigger=lambda r: too_short(r, "vacation_breaks", 30),
)

register_gap(
    "delivery_blocker",
    "Why can't your team deliver without you?",
    "Need to understand specific blocker to design solution",
    [
        "At what point in the project does your team get stuck?",
        "Is it a skill issue, confidence issue, or client expectation issue?",
        "What would happen if they tried to deliver without you?",
    ],
    GapPriority.CRITICAL,
    trigger=lambda r: team_cannot(r, "deliver") and too_short(r, "delivery_blocker", 10),
)

register_gap(
    "tools_pm",
    "What project management tool do you use?",
    "PM tool required for automation - need to set one up",
    [
        "How do you currently track projects and tasks?",
        "What's your budget for PM tooling?",
        "Any tools you've tried and didn't like?",
    ],
    GapPriority.IMPORTANT,
    trigger=_missing_tool("tools_pm"),
)

register_gap(
    "tools_crm",
    "What CRM do you use?",
    "CRM required for sales automation and client tracking",
    [
        "How do you currently track leads and clients?",
        "Do you have any existing client database/spreadsheet?",
        "What's your budget for CRM tooling?",
    ],
    GapPriority.IMPORTANT,
    trigger=_missing_tool("tools_crm"),
)

register_gap(
    "core_service",
    "If you could only offer ONE service, which would it be?",
    "Need to identify core service for productization",
    [
        "What service generates the most revenue?",
        "What service do you enjoy delivering most?",
        "What service has the best client results/testimonials?",
    ],
    GapPriority.IMPORTANT,
    trigger=lambda r: too_short(r, "core_service", 10),
)

register_gap(
    "proprietary_method_description",
    "Describe your proprietary methodology",
    "This is critical IP for productization - need full documentation",
    [
        "What are the steps/phases in your methodology?",
        "What's unique about your approach vs competitors?",
        "Do you have this written down anywhere?",
    ],
    GapPriority.CRITICAL,
    trigger=lambda r: (
        r.equals("has_proprietary_method", "Yes")
        and too_short(r, "proprietary_method_description", 30)
    ),
)

register_gap(
    "core_service_steps",
    "What are the main steps in your core delivery process?",
    "Need detailed workflow to build automation and SOPs",
    [
        "Walk me through a project from start to finish",
        "What happens after you get a signed contract?",
        "What are the main milestones in a typical project?",
        "Where are the handoff points between team members?",
    ],
    GapPriority.CRITICAL,
    trigger=lambda r: too_short(r, "core_service_steps", 50),
)

register_gap(
    "handoff_points",
    "Where are the handoff points between you and your team?",
    "Handoffs are where work often stalls - need to systematize these",
    [
        "At what point do you hand work to your team?",
        "What information do you give them when you hand off?",
        "When does work come back to you?",
        "What causes delays in these handoffs?",
    ],
    GapPriority.IMPORTANT,
    trigger=lambda r: (r.number("team_size_total") or 1) > 1 and too_short(r, "handoff_points", 20),
)

register_gap(
    "client_tier_description",
    "Describe your client tiers and what's included in each",
    "Need tier details to build tier-specific automations and SOPs",
    [
        "What are the names of your tiers?",
        "What's included in each tier?",
        "What's the price range for each?",
        "How do clients typically move between tiers?",
    ],
    GapPriority.IMPORTANT,
    trigger=lambda r: (
        r.equals("has_client_tiers", "Yes, clearly defined tiers")
        and too_short(r, "client_tier_description", 30)
    ),
)

register_gap(
    "team_member_who_could_lead",
    "Who could take over client-facing work?",
    "No succession path for owner removal - may need to hire or develop someone",
    [
        "Is there anyone on your team who could grow into this role?",
        "What skills are missing that prevent current team from taking over?",
        "Would you consider hiring a client success/account manager?",
        "What would you need to see to trust someone with client relationships?",
    ],
    GapPriority.IMPORTANT,
    trigger=lambda r: r.equals("team_member_who_could_lead", "No, need to hire"),
)
