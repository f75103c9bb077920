"""System spec generator.

Takes questionnaire answers and produces:
1. Systems to build, from the ordered system rules
2. Integration requirements for the client's tool stack
3. Gap analysis (answers that need follow-up discovery)
4. Automation coverage estimate per area
5. A week-by-week build plan and a discovery call agenda
"""

from __future__ import annotations

import logging
from typing import Any

from backend.engine.numeric import round_half_up
from backend.engine.text import is_api_available, parse_estimated_time
from backend.models.answers import AuditResponse, format_answer_number
from backend.models.enums import GapPriority, Priority, SystemCategory
from backend.models.system_spec import (
    PRIORITY_RANK,
    AgendaItem,
    AutomationCoverage,
    BuildWeek,
    ClientInfo,
    CoverageArea,
    Gap,
    Integration,
    SpecSummary,
    System,
    SystemSpecOutput,
)
from backend.rule_library.gaps import GAP_RULES
from backend.rule_library.registry import run_rules
from backend.rule_library.systems import SYSTEM_RULES

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Systems
# ---------------------------------------------------------------------------

def identify_systems(r: AuditResponse) -> list[System]:
    """Run the system rules, sort by priority (stable) and drop repeated ids and names."""
    systems = sorted(run_rules(SYSTEM_RULES, r), key=lambda s: PRIORITY_RANK[s.priority])
    unique: list[System] = []
    seen_ids: set[str] = set()
    seen_names: set[str] = set()
    for system in systems:
        if system.id in seen_ids or system.name in seen_names:
            continue
        seen_ids.add(system.id)
        seen_names.add(system.name)
        unique.append(system)
    return unique


def identify_gaps(r: AuditResponse) -> list[Gap]:
    return run_rules(GAP_RULES, r)


# ---------------------------------------------------------------------------
# Integrations
# ---------------------------------------------------------------------------

def _integration(
    tool: str,
    category: str,
    required: bool,
    purpose: str,
    alternative: str,
) -> Integration:
    return Integration(
        tool=tool,
        tool_category=category,
        required=required,
        purpose=purpose,
        api_available=is_api_available(tool),
        alternative_if_missing=alternative,
    )


def identify_integrations(r: AuditResponse) -> list[Integration]:
    integrations: list[Integration] = []

    if r.has("tools_crm"):
        integrations.append(_integration(
            r.text("tools_crm"), "CRM", True,
            "Client data, pipeline, automation triggers",
            "HubSpot Free, Pipedrive, or Notion CRM",
        ))
    else:
        integrations.append(Integration(
            tool="None specified",
            tool_category="CRM",
            required=True,
            purpose="Need CRM for client tracking and automation",
            api_available=False,
            alternative_if_missing="Recommend HubSpot Free or Pipedrive",
        ))

    if r.has("tools_pm"):
        integrations.append(_integration(
            r.text("tools_pm"), "Project Management", True,
            "Project tracking, task management, team collaboration",
            "ClickUp, Asana, or Monday.com",
        ))
    else:
        integrations.append(Integration(
            tool="None specified",
            tool_category="Project Management",
            required=True,
            purpose="Essential for delivery process automation",
            api_available=False,
            alternative_if_missing="Recommend ClickUp or Asana",
        ))

    if r.has("tools_comm"):
        integrations.append(_integration(
            r.text("tools_comm"), "Communication", True,
            "Team communication, notifications, client updates",
            "Slack",
        ))

    if r.has("tools_storage"):
        integrations.append(_integration(
            r.text("tools_storage"), "File Storage", False,
            "Document templates, deliverables, client files",
            "Google Drive",
        ))

    if r.has("tools_accounting"):
        integrations.append(_integration(
            r.text("tools_accounting"), "Accounting", False,
            "Invoicing automation, financial tracking",
            "QuickBooks or Xero",
        ))

    if r.has("tools_automation"):
        integrations.append(_integration(
            r.text("tools_automation"), "Automation", True,
            "Connect tools, automate workflows between systems",
            "Zapier or Make",
        ))
    else:
        integrations.append(Integration(
            tool="Zapier/Make",
            tool_category="Automation",
            required=True,
            purpose="Connect tools, automate workflows between systems",
            api_available=True,
            alternative_if_missing="Must have automation layer - Zapier or Make required",
        ))

    return integrations


# ---------------------------------------------------------------------------
# Automation coverage
# ---------------------------------------------------------------------------

def _names(systems: list[System], category: SystemCategory) -> list[str]:
    return [s.name for s in systems if s.category == category]


def _pct(value: float) -> str:
    return format_answer_number(round_half_up(value))


def calculate_automation_coverage(r: AuditResponse, systems: list[System]) -> AutomationCoverage:
    """Heuristic automation percentage per business area, each with its own cap."""
    documented = r.number("documented_pct")

    delivery_systems = _names(systems, SystemCategory.DELIVERY)
    delivery = min(
        len(delivery_systems) * 15
        + (10 if r.equals("has_kickoff_checklist", "Yes") else 0)
        + (10 if r.equals("has_qc_checklist", "Yes") else 0)
        + documented * 0.3,
        85,
    )

    sales_systems = _names(systems, SystemCategory.SALES)
    sales = min(
        len(sales_systems) * 20
        + (15 if r.equals("has_proposal_template", "Yes") else 0)
        + (10 if r.has("tools_crm") else 0),
        70,  # selling always needs a human
    )

    comms_systems = _names(systems, SystemCategory.CLIENT_COMMS)
    template_count = len(r.selections("comm_templates"))
    comms = min(
        len(comms_systems) * 15
        + template_count * 10
        + (10 if r.has("tools_comm") else 0),
        80,
    )

    ops_systems = _names(systems, SystemCategory.OPERATIONS)
    ops = min(
        len(ops_systems) * 15
        + documented * 0.4
        + (15 if r.has("tools_pm") else 0),
        75,
    )

    quality_systems = _names(systems, SystemCategory.QUALITY)
    quality = min(
        len(quality_systems) * 20
        + (20 if r.equals("has_qc_checklist", "Yes") else 0)
        + (r.number("delivery_consistency") or 5) * 5,
        80,
    )

    owner_pct = r.number("projects_requiring_owner_pct") or 70
    breakdown = [
        CoverageArea(
            area="Delivery",
            current_state=f"{format_answer_number(owner_pct)}% requires owner",
            target_state=f"{_pct(100 - delivery)}% requires owner",
            automation_percentage=int(round_half_up(delivery)),
            systems_required=delivery_systems,
        ),
        CoverageArea(
            area="Sales",
            current_state="Team can close" if r.equals("team_can_close", "Yes") else "Owner-dependent",
            target_state=f"{_pct(sales)}% automated/delegated",
            automation_percentage=int(round_half_up(sales)),
            systems_required=sales_systems,
        ),
        CoverageArea(
            area="Client Communications",
            current_state=f"{template_count} templates exist",
            target_state=f"{_pct(comms)}% templated/automated",
            automation_percentage=int(round_half_up(comms)),
            systems_required=comms_systems,
        ),
        CoverageArea(
            area="Operations",
            current_state=f"{format_answer_number(documented)}% documented",
            target_state=f"{_pct(ops)}% automated",
            automation_percentage=int(round_half_up(ops)),
            systems_required=ops_systems,
        ),
        CoverageArea(
            area="Quality Assurance",
            current_state="Checklist exists" if r.equals("has_qc_checklist", "Yes") else "No checklist",
            target_state=f"{_pct(quality)}% automated",
            automation_percentage=int(round_half_up(quality)),
            systems_required=quality_systems,
        ),
    ]

    return AutomationCoverage(
        delivery_automation=int(round_half_up(delivery)),
        sales_automation=int(round_half_up(sales)),
        client_comms_automation=int(round_half_up(comms)),
        operations_automation=int(round_half_up(ops)),
        quality_automation=int(round_half_up(quality)),
        overall=int(round_half_up((delivery + sales + comms + ops + quality) / 5)),
        breakdown=breakdown,
    )


# ---------------------------------------------------------------------------
# Build plan and discovery agenda
# ---------------------------------------------------------------------------

def generate_build_plan(systems: list[System]) -> list[BuildWeek]:
    """Weeks 2-4 of the sprint; week 1 is the audit itself."""
    p0 = [s.name for s in systems if s.priority == Priority.P0]
    p1 = [s.name for s in systems if s.priority == Priority.P1]

    return [
        BuildWeek(
            week=2,
            focus="Architecture & Quick Wins",
            systems=p0[:4],
            deliverables=[
                "System architecture diagram",
                "Quick win checklists/templates",
                "Integration requirements finalized",
            ],
        ),
        BuildWeek(
            week=3,
            focus="Core Systems Build",
            systems=p0[4:] + p1[:3],
            deliverables=[
                "Core SOPs documented",
                "Decision frameworks created",
                "Automations built and tested",
            ],
        ),
        BuildWeek(
            week=4,
            focus="Testing & Handoff",
            systems=p1[3:],
            deliverables=[
                "All systems tested",
                "Team trained on new processes",
                "Handoff documentation complete",
                "Productization roadmap defined",
            ],
        ),
    ]


def generate_discovery_agenda(gaps: list[Gap], r: AuditResponse) -> list[AgendaItem]:
    agenda: list[AgendaItem] = []

    critical = [g for g in gaps if g.priority == GapPriority.CRITICAL]
    important = [g for g in gaps if g.priority == GapPriority.IMPORTANT]

    if critical:
        agenda.append(AgendaItem(
            topic="Critical Information Gaps",
            questions=[q for g in critical for q in g.discovery_questions],
            duration="20 minutes",
        ))

    if important:
        agenda.append(AgendaItem(
            topic="Tool & Process Deep Dive",
            questions=[q for g in important for q in g.discovery_questions],
            duration="15 minutes",
        ))

    agenda.append(AgendaItem(
        topic="Core Delivery Process Mapping",
        questions=[
            f'Walk me through delivering "{r.text("core_service", "your core service")}" '
            "from start to finish",
            "Where do you currently get stuck or need to intervene?",
            "What does your team do while waiting for you?",
            "How do you currently handle revisions?",
        ],
        duration="25 minutes",
    ))

    if r.has("tools_pm") or r.has("tools_crm"):
        agenda.append(AgendaItem(
            topic="Tool Walkthrough & Integration Planning",
            questions=[
                "Can you show me your current PM tool setup?",
                "How are projects/tasks currently structured?",
                "What automations do you already have in place?",
                "Where do things fall through the cracks?",
            ],
            duration="15 minutes",
        ))

    return agenda


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def generate_system_spec(data: Any, generated_at: str = "") -> SystemSpecOutput:
    """Build the full system spec for one client.

    ``generated_at`` is stamped into ``client_info`` as given; the generator
    never reads the clock.
    """
    r = data if isinstance(data, AuditResponse) else AuditResponse(data)

    systems = identify_systems(r)
    integrations = identify_integrations(r)
    gaps = identify_gaps(r)
    coverage = calculate_automation_coverage(r, systems)

    summary = SpecSummary(
        total_systems_to_build=len(systems),
        p0_systems=sum(1 for s in systems if s.priority == Priority.P0),
        p1_systems=sum(1 for s in systems if s.priority == Priority.P1),
        estimated_build_hours=sum(parse_estimated_time(s.estimated_build_time) for s in systems),
        weekly_hours_reclaimed=sum(s.owner_time_reclaimed for s in systems),
        automation_coverage=coverage.overall,
    )

    logger.debug(
        "System spec: %d systems (%d P0), %d gaps, coverage %d%%",
        summary.total_systems_to_build, summary.p0_systems, len(gaps), coverage.overall,
    )

    return SystemSpecOutput(
        client_info=ClientInfo(
            name=r.text("contact_name") or r.text("full_name", "Unknown"),
            email=r.text("contact_email") or r.text("email"),
            company=r.text("company_name", "Unknown"),
            generated_at=generated_at,
        ),
        summary=summary,
        systems=systems,
        integrations=integrations,
        gaps=gaps,
        automation_coverage=coverage,
        week_by_week_build_plan=generate_build_plan(systems),
        follow_up_discovery_agenda=generate_discovery_agenda(gaps, r),
    )
