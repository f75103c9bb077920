"""Rules that turn questionnaire answers into systems to build.

Each rule is independent: it looks at a few answers and, when its trigger
holds, emits one or more ``System`` entries with a fixed priority and
category. Rules run in the order they are registered below.
"""

from __future__ import annotations

from typing import Any, Callable

from backend.engine.signals import delivery_pct, team_cannot
from backend.engine.text import parse_text_list, slugify, truncate
from backend.models.answers import AuditResponse
from backend.models.enums import Priority, SystemCategory, SystemType
from backend.models.system_spec import PRD, System
from backend.rule_library.registry import register_rule

SYSTEM_RULES = "systems"

TO_BE_DETERMINED = "To be determined in discovery"
REQUIRED_COMM_TEMPLATES = ("Welcome email", "Status updates", "Project completion")
HIGH_REVISION_ROUNDS = ("4-5 rounds", "6+ rounds", "Unlimited until they're happy")
FREQUENT_SCOPE_ISSUES = ("Often - we usually just do it", "Almost always - it's a constant battle")


def _existing_ids(produced: list[System]) -> set[str]:
    return {s.id for s in produced}


def system_already_exists(produced: list[System], name: str) -> bool:
    """True when an earlier system mentions ``name`` in its name or description."""
    needle = name.lower()
    return any(needle in s.name.lower() or needle in s.description.lower() for s in produced)


def core_service_name(r: AuditResponse) -> str:
    if r.has("core_service"):
        return r.text("core_service")
    services = r.get("services")
    if isinstance(services, list) and services and isinstance(services[0], dict):
        name = services[0].get("name")
        if isinstance(name, str) and name.strip():
            return name
    return "core service"


# ---------------------------------------------------------------------------
# Owner-only tasks
# ---------------------------------------------------------------------------

def strategy_agent(task: str, r: AuditResponse, idx: int) -> System:
    return System(
        id=f"agent-strategy-{idx}",
        name=f"Strategy Agent: {truncate(task, 40)}",
        type=SystemType.AGENT,
        priority=Priority.P1,
        category=SystemCategory.DELIVERY,
        description=f"AI agent to assist with: {task}",
        triggered_by=[f'tasks_only_owner includes: "{task}"'],
        estimated_build_time="4 hours",
        owner_time_reclaimed=3,
        prerequisites=["Core delivery SOP"],
        prd=PRD(
            problem=f'"{task}" requires owner involvement',
            solution="Strategy assistance agent with templates and frameworks",
            inputs=["Client brief", "Goals", "Constraints"],
            outputs=["Strategy draft for review"],
            workflow=["Input client context", "Agent generates draft", "Human review", "Finalize"],
            success_metrics=["Reduce strategy time by 50%"],
            handoff_process="Train team on agent usage",
        ),
    )


def client_comms_sop(task: str, r: AuditResponse, idx: int) -> System:
    return System(
        id=f"sop-client-comms-{idx}",
        name=f"Client Communication SOP: {truncate(task, 40)}",
        type=SystemType.SOP,
        priority=Priority.P1,
        category=SystemCategory.CLIENT_COMMS,
        description=f"Process for: {task}",
        triggered_by=[f'tasks_only_owner includes: "{task}"'],
        estimated_build_time="2 hours",
        owner_time_reclaimed=4,
        prerequisites=["Communication templates"],
        integrations=[r.text("tools_comm", "email/calendar")],
        prd=PRD(
            problem=f'"{task}" requires owner - clients expect direct owner contact',
            solution="Scripts, templates, and escalation rules for client communication",
            inputs=["Client query/situation"],
            outputs=["Appropriate response/action"],
            workflow=[
                "Receive communication",
                "Identify type",
                "Use appropriate template/script",
                "Escalate if needed",
            ],
            success_metrics=["80% of client comms handled without owner"],
            handoff_process="Train account manager, role-play scenarios",
        ),
    )


def qa_checklist(task: str, r: AuditResponse, idx: int) -> System:
    return System(
        id=f"checklist-qa-{idx}",
        name=f"QA Process: {truncate(task, 40)}",
        type=SystemType.CHECKLIST,
        priority=Priority.P0,
        category=SystemCategory.QUALITY,
        description=f"Quality assurance for: {task}",
        triggered_by=[f'tasks_only_owner includes: "{task}"'],
        estimated_build_time="1 hour",
        owner_time_reclaimed=3,
        integrations=[r.text("tools_pm", "PM tool")],
        prd=PRD(
            problem=f'"{task}" requires owner to ensure quality',
            solution="Detailed QA checklist defining quality standards",
            inputs=["Deliverable to review"],
            outputs=["Pass/fail with revision list"],
            workflow=["Complete work", "Run QA checklist", "Fix issues", "Pass to next stage"],
            success_metrics=["Quality maintained without owner review"],
            handoff_process="Train team on quality standards",
        ),
    )


def pricing_calculator(task: str, r: AuditResponse, idx: int) -> System:
    return System(
        id="framework-pricing-calculator",
        name="Pricing Calculator",
        type=SystemType.DECISION_FRAMEWORK,
        priority=Priority.P1,
        category=SystemCategory.SALES,
        description="Systematic pricing based on project parameters",
        triggered_by=[f'tasks_only_owner includes: "{task}"'],
        estimated_build_time="3 hours",
        owner_time_reclaimed=2,
        prerequisites=["Service packages defined"],
        prd=PRD(
            problem="Pricing decisions require owner judgment",
            solution="Pricing calculator/framework based on project scope",
            inputs=["Project type", "Scope", "Timeline", "Client tier"],
            outputs=["Recommended price range"],
            workflow=[
                "Input project parameters",
                "Calculator provides range",
                "Team selects within range or escalates",
            ],
            success_metrics=["80% of quotes done without owner"],
            handoff_process="Build calculator, train team on usage and escalation criteria",
        ),
    )


def task_sop(task: str, r: AuditResponse, idx: int) -> System:
    return System(
        id=f"sop-task-{idx}",
        name=f"SOP: {truncate(task, 40)}",
        type=SystemType.SOP,
        priority=Priority.P1,
        category=SystemCategory.OPERATIONS,
        description=f"Standard operating procedure for: {task}",
        triggered_by=[f'tasks_only_owner includes: "{task}"'],
        estimated_build_time="2 hours",
        owner_time_reclaimed=2,
        prd=PRD(
            problem=f'"{task}" requires owner',
            solution="Step-by-step SOP for this task",
            inputs=["To be determined"],
            outputs=["Task completed"],
            workflow=["To be mapped in discovery"],
            success_metrics=["Task can be done by team"],
            handoff_process="Document process, train team",
        ),
    )


# Keyword groups are checked in order; the first match picks the builder.
_TASK_BUILDERS: tuple[tuple[tuple[str, ...], Callable[[str, AuditResponse, int], System]], ...] = (
    (("strategy", "campaign"), strategy_agent),
    (("call", "client"), client_comms_sop),
    (("qa", "quality", "review"), qa_checklist),
    (("pricing", "proposal", "quote"), pricing_calculator),
)


def system_for_owner_task(task: str, r: AuditResponse, idx: int) -> System:
    lowered = task.lower()
    for keywords, builder in _TASK_BUILDERS:
        if any(k in lowered for k in keywords):
            return builder(task, r, idx)
    return task_sop(task, r, idx)


def _owner_heavy(r: AuditResponse) -> bool:
    return delivery_pct(r) > 40 or r.number("projects_requiring_owner_pct") > 70


@register_rule(
    "owner-tasks",
    SYSTEM_RULES,
    "Owner is buried in delivery: one system per task only the owner does",
    trigger=_owner_heavy,
)
def owner_task_systems(r: AuditResponse, produced: list[Any]) -> list[System]:
    tasks = parse_text_list(r.text("tasks_only_owner"))
    return [system_for_owner_task(task, r, idx) for idx, task in enumerate(tasks)]


# ---------------------------------------------------------------------------
# Owner-only decisions
# ---------------------------------------------------------------------------

def pricing_decision_framework(decision: str, r: AuditResponse, idx: int) -> System:
    return System(
        id="framework-pricing-decisions",
        name="Pricing Decision Framework",
        type=SystemType.DECISION_FRAMEWORK,
        priority=Priority.P0,
        category=SystemCategory.SALES,
        description="Framework for making pricing decisions without owner",
        triggered_by=["decisions_only_owner includes pricing"],
        estimated_build_time="3 hours",
        owner_time_reclaimed=3,
        integrations=[r.text("tools_crm", "CRM")],
        prd=PRD(
            problem="All pricing decisions require owner approval",
            solution="Clear pricing tiers, rules, and escalation criteria",
            inputs=["Project scope", "Client history", "Timeline"],
            outputs=["Approved price or escalation"],
            workflow=[
                "Assess project scope",
                "Check pricing matrix",
                "Apply any adjustments",
                "If within approved range, proceed",
                "If outside range, escalate with recommendation",
            ],
            success_metrics=["70% of pricing done without owner"],
            handoff_process="Create pricing matrix, train sales team",
        ),
    )


def client_qualification_framework(decision: str, r: AuditResponse, idx: int) -> System:
    return System(
        id="framework-client-qualification",
        name="Client Qualification Scorecard",
        type=SystemType.DECISION_FRAMEWORK,
        priority=Priority.P0,
        category=SystemCategory.SALES,
        description="Scorecard to determine if we should take a client",
        triggered_by=["decisions_only_owner includes client acceptance"],
        estimated_build_time="2 hours",
        owner_time_reclaimed=2,
        integrations=[r.text("tools_crm", "CRM")],
        prd=PRD(
            problem="Deciding which clients to accept requires owner",
            solution="Scoring system based on ICP, budget, timeline, red flags",
            inputs=["Lead information", "Discovery notes"],
            outputs=["Score + recommendation (accept/decline/escalate)"],
            workflow=[
                "Complete discovery call",
                "Score lead on criteria",
                "If score > threshold, accept",
                "If score < threshold, decline",
                "If borderline, escalate with notes",
            ],
            success_metrics=["80% of qualification decisions made without owner"],
            handoff_process="Create scorecard, train sales team, review first 10 decisions",
        ),
    )


def scope_change_framework(decision: str, r: AuditResponse, idx: int) -> System:
    return System(
        id="framework-scope-change",
        name="Scope Change Decision Framework",
        type=SystemType.DECISION_FRAMEWORK,
        priority=Priority.P1,
        category=SystemCategory.DELIVERY,
        description="Rules for handling scope changes and client requests",
        triggered_by=["decisions_only_owner includes scope"],
        estimated_build_time="2 hours",
        owner_time_reclaimed=2,
        integrations=[r.text("tools_pm", "PM tool")],
        prd=PRD(
            problem="Scope change decisions require owner",
            solution="Clear rules for what's in scope, out of scope, and pricing for changes",
            inputs=["Client request", "Original scope"],
            outputs=["Approved change or change order"],
            workflow=[
                "Receive change request",
                "Check against scope definition",
                "If minor and within bounds, approve",
                "If requires additional cost, create change order",
                "If major change, escalate",
            ],
            success_metrics=["90% of scope discussions handled by team"],
            handoff_process="Define scope boundaries, create change order template",
        ),
    )


def hiring_framework(decision: str, r: AuditResponse, idx: int) -> System:
    return System(
        id="framework-hiring",
        name="Hiring Decision Framework",
        type=SystemType.DECISION_FRAMEWORK,
        priority=Priority.P2,
        category=SystemCategory.OPERATIONS,
        description="Structured hiring process and criteria",
        triggered_by=["decisions_only_owner includes hiring"],
        estimated_build_time="4 hours",
        owner_time_reclaimed=2,
        prerequisites=["Role descriptions"],
        prd=PRD(
            problem="All hiring decisions require owner",
            solution="Structured hiring process with clear criteria",
            inputs=["Job requirements", "Candidates"],
            outputs=["Hiring recommendation"],
            workflow=[
                "Define role requirements",
                "Source candidates",
                "Initial screen against criteria",
                "Skills assessment",
                "Culture fit interview",
                "Make recommendation",
                "Owner final approval for offers",
            ],
            success_metrics=["Team can screen and recommend, owner only final approval"],
            handoff_process="Create interview guides, scoring rubrics",
        ),
    )


def decision_framework(decision: str, r: AuditResponse, idx: int) -> System:
    return System(
        id=f"framework-decision-{idx}",
        name=f"Decision Framework: {truncate(decision, 40)}",
        type=SystemType.DECISION_FRAMEWORK,
        priority=Priority.P2,
        category=SystemCategory.OPERATIONS,
        description=f"Framework for: {decision}",
        triggered_by=[f'decisions_only_owner includes: "{decision}"'],
        estimated_build_time="2 hours",
        owner_time_reclaimed=1,
        prd=PRD(
            problem=f'"{decision}" requires owner',
            solution="Decision criteria and escalation rules",
            inputs=["Situation requiring decision"],
            outputs=["Decision or escalation"],
            workflow=["Assess situation", "Apply criteria", "Decide or escalate"],
            success_metrics=["Decision can be made without owner"],
            handoff_process="Document criteria, train team",
        ),
    )


_DECISION_BUILDERS: tuple[tuple[tuple[str, ...], Callable[[str, AuditResponse, int], System]], ...] = (
    (("pricing", "price"), pricing_decision_framework),
    (("client", "accept", "take"), client_qualification_framework),
    (("scope", "change"), scope_change_framework),
    (("hire", "hiring"), hiring_framework),
)


def system_for_owner_decision(decision: str, r: AuditResponse, idx: int) -> System:
    lowered = decision.lower()
    for keywords, builder in _DECISION_BUILDERS:
        if any(k in lowered for k in keywords):
            return builder(decision, r, idx)
    return decision_framework(decision, r, idx)


@register_rule(
    "owner-decisions",
    SYSTEM_RULES,
    "One decision framework per decision only the owner makes",
)
def owner_decision_systems(r: AuditResponse, produced: list[Any]) -> list[System]:
    decisions = parse_text_list(r.text("decisions_only_owner"))
    return [system_for_owner_decision(d, r, idx) for idx, d in enumerate(decisions)]


# ---------------------------------------------------------------------------
# Vacation test
# ---------------------------------------------------------------------------

def backup_system(break_point: str, r: AuditResponse, idx: int) -> System:
    return System(
        id=f"backup-{idx}",
        name=f"Backup System: {truncate(break_point, 40)}",
        type=SystemType.SOP,
        priority=Priority.P0,
        category=SystemCategory.OPERATIONS,
        description=f"Backup system to prevent: {break_point}",
        triggered_by=[f'vacation_breaks includes: "{break_point}"'],
        estimated_build_time="3 hours",
        owner_time_reclaimed=2,
        prd=PRD(
            problem=f'If owner is unavailable: "{break_point}"',
            solution="Documented process and designated backup person",
            inputs=["Situation that would normally go to owner"],
            outputs=["Situation handled or properly escalated"],
            workflow=["Identify situation", "Follow backup process", "Document for owner review"],
            success_metrics=["Business continues functioning when owner unavailable"],
            handoff_process="Document process, designate and train backup",
        ),
    )


@register_rule(
    "vacation-breaks",
    SYSTEM_RULES,
    "Backup system for each thing that breaks while the owner is away",
)
def vacation_backup_systems(r: AuditResponse, produced: list[Any]) -> list[System]:
    systems: list[System] = []
    for idx, break_point in enumerate(parse_text_list(r.text("vacation_breaks"))):
        if not system_already_exists(list(produced) + systems, break_point):
            systems.append(backup_system(break_point, r, idx))
    return systems


# ---------------------------------------------------------------------------
# Documentation and quick wins
# ---------------------------------------------------------------------------

def _needs_core_documentation(r: AuditResponse) -> bool:
    if r.equals("has_sops", "Yes"):
        return False
    return r.equals("has_sops", "No") or r.number("documented_pct") < 30


@register_rule(
    "sop-core-process-documentation",
    SYSTEM_RULES,
    "Core processes are not written down",
    trigger=_needs_core_documentation,
)
def core_process_documentation(r: AuditResponse, produced: list[Any]) -> list[System]:
    documented = r.number("documented_pct")
    return [System(
        id="sop-core-process-documentation",
        name="Core Process Documentation",
        type=SystemType.SOP,
        priority=Priority.P0,
        category=SystemCategory.OPERATIONS,
        description=f"Document the core processes that live in the owner's head ({documented:.0f}% documented today)",
        triggered_by=[f"has_sops = {r.text('has_sops', 'Not answered')}", f"documented_pct = {documented:.0f}"],
        estimated_build_time="6 hours",
        owner_time_reclaimed=4,
        prd=PRD(
            problem="Core processes are undocumented, so every question routes back to the owner",
            solution="Written SOPs for the recurring delivery and operations processes",
            inputs=["Owner walkthroughs", "Existing notes and examples"],
            outputs=["SOP library covering core processes"],
            workflow=[
                "List recurring processes",
                "Record owner walkthrough of each",
                "Turn recordings into step-by-step SOPs",
                "Team runs each SOP once and flags gaps",
                "Publish to shared knowledge base",
            ],
            success_metrics=["Core processes documented", "Team answers process questions without owner"],
            handoff_process="Store in shared drive or wiki, assign an owner per SOP",
        ),
    )]


@register_rule(
    "checklist-kickoff",
    SYSTEM_RULES,
    "No project kickoff checklist",
    trigger=lambda r: r.equals("has_kickoff_checklist", "No"),
)
def kickoff_checklist(r: AuditResponse, produced: list[Any]) -> list[System]:
    return [System(
        id="checklist-kickoff",
        name="Project Kickoff Checklist",
        type=SystemType.CHECKLIST,
        priority=Priority.P0,
        category=SystemCategory.DELIVERY,
        description="Standardized checklist for project kickoffs to ensure consistent starts",
        triggered_by=["has_kickoff_checklist = No"],
        estimated_build_time="30 minutes",
        owner_time_reclaimed=2,
        integrations=[r.text("tools_pm", "project management tool")],
        prd=PRD(
            problem="No standard kickoff process - each project starts differently",
            solution="Checklist that covers all kickoff essentials",
            inputs=["Project brief", "Client details", "Team assignments"],
            outputs=["Completed kickoff checklist", "Project setup in PM tool"],
            workflow=[
                "Receive new project notification",
                "Open kickoff checklist",
                "Complete all items",
                "Notify team project is ready",
            ],
            success_metrics=["100% of projects use checklist", "Reduced kickoff time by 50%"],
            handoff_process="Embed in PM tool as project template",
            client_prerequisites=["PM tool access for team"],
        ),
    )]


@register_rule(
    "checklist-qc",
    SYSTEM_RULES,
    "No quality control checklist",
    trigger=lambda r: r.equals("has_qc_checklist", "No"),
)
def qc_checklist(r: AuditResponse, produced: list[Any]) -> list[System]:
    return [System(
        id="checklist-qc",
        name="Quality Control Checklist",
        type=SystemType.CHECKLIST,
        priority=Priority.P0,
        category=SystemCategory.QUALITY,
        description="Pre-delivery quality assurance checklist",
        triggered_by=["has_qc_checklist = No"],
        estimated_build_time="30 minutes",
        owner_time_reclaimed=3,
        integrations=[r.text("tools_pm", "project management tool")],
        prd=PRD(
            problem="Quality review requires owner involvement because there's no standard",
            solution="Checklist defining quality standards anyone can verify",
            inputs=["Deliverable to review", "Project requirements"],
            outputs=["QC pass/fail", "Revision list if needed"],
            workflow=[
                "Team member completes deliverable",
                "Run through QC checklist",
                "Address any failures",
                "Mark ready for client",
            ],
            success_metrics=["Reduced owner QA time by 80%", "Consistent quality scores"],
            handoff_process="Train team on checklist, add to delivery workflow",
        ),
    )]


def missing_comm_templates(r: AuditResponse) -> list[str]:
    have = r.selections("comm_templates")
    return [t for t in REQUIRED_COMM_TEMPLATES if t not in have]


@register_rule(
    "templates-client-comms",
    SYSTEM_RULES,
    "Core client communication templates are missing",
    trigger=lambda r: bool(missing_comm_templates(r)),
)
def client_comm_templates(r: AuditResponse, produced: list[Any]) -> list[System]:
    missing = missing_comm_templates(r)
    return [System(
        id="templates-client-comms",
        name="Client Communication Templates",
        type=SystemType.TEMPLATE,
        priority=Priority.P0,
        category=SystemCategory.CLIENT_COMMS,
        description=f"Create templates for: {', '.join(missing)}",
        triggered_by=["Missing comm_templates"],
        estimated_build_time="1 hour",
        owner_time_reclaimed=5,
        integrations=[r.text("tools_comm", "email")],
        prd=PRD(
            problem="Client communications written from scratch each time",
            solution="Pre-written templates for common scenarios",
            inputs=["Client name", "Project details", "Status info"],
            outputs=["Ready-to-send email"],
            workflow=[
                "Identify communication need",
                "Select appropriate template",
                "Fill in variables",
                "Send",
            ],
            success_metrics=["5+ hours/week saved", "Consistent communication quality"],
            handoff_process="Add to email tool as templates/snippets",
        ),
    )]


# ---------------------------------------------------------------------------
# Team capability gaps
# ---------------------------------------------------------------------------

@register_rule(
    "sop-client-onboarding",
    SYSTEM_RULES,
    "Team cannot onboard clients without the owner",
    trigger=lambda r: team_cannot(r, "onboard"),
)
def onboarding_sop(r: AuditResponse, produced: list[Any]) -> list[System]:
    blocker = r.text("onboard_blocker", "Not specified")
    return [System(
        id="sop-client-onboarding",
        name="Client Onboarding SOP + Automation",
        type=SystemType.SOP,
        priority=Priority.P1,
        category=SystemCategory.ONBOARDING,
        description=f"Full onboarding process documentation. Blocker: {blocker}",
        triggered_by=["team_can_onboard = No/Sometimes", f"onboard_blocker: {blocker}"],
        estimated_build_time="4 hours",
        owner_time_reclaimed=4,
        prerequisites=["Client intake form", "Onboarding email templates"],
        integrations=[
            r.text("tools_crm", "CRM"),
            r.text("tools_pm", "PM tool"),
            r.text("tools_comm", "Email"),
        ],
        prd=PRD(
            problem=r.text("onboard_blocker", "Team cannot onboard clients without owner"),
            solution="Step-by-step onboarding process with automated triggers",
            inputs=["Signed contract", "Client info"],
            outputs=["Fully onboarded client", "Project setup", "Team introductions made"],
            workflow=[
                "Contract signed triggers automation",
                "Welcome email sent automatically",
                "Client questionnaire sent",
                "Project created in PM tool",
                "Team assigned",
                "Kickoff scheduled",
                "Kickoff conducted using checklist",
            ],
            success_metrics=[
                "0 owner hours in onboarding",
                "Client satisfaction with onboarding > 9/10",
            ],
            handoff_process="Train account manager on SOP, set up automations in tools",
            client_prerequisites=["CRM with automation", "PM tool with templates"],
        ),
    )]


@register_rule(
    "sop-delivery-process",
    SYSTEM_RULES,
    "Team cannot deliver without the owner",
    trigger=lambda r: team_cannot(r, "deliver"),
)
def delivery_sop(r: AuditResponse, produced: list[Any]) -> list[System]:
    service = core_service_name(r)
    blocker = r.text("delivery_blocker", "Not specified")
    return [System(
        id="sop-delivery-process",
        name=f"{service} Delivery SOP",
        type=SystemType.SOP,
        priority=Priority.P0,
        category=SystemCategory.DELIVERY,
        description=f"Full delivery process for {service}. Blocker: {blocker}",
        triggered_by=["team_can_deliver = No/Sometimes", f"delivery_blocker: {blocker}"],
        estimated_build_time="8 hours",
        # half of the owner's delivery hours
        owner_time_reclaimed=max(0.0, r.number("time_delivery_hrs")) * 0.5,
        prerequisites=["QC checklist", "Kickoff checklist"],
        integrations=[r.text("tools_pm", "PM tool")],
        prd=PRD(
            problem=r.text("delivery_blocker", "Team cannot deliver without owner involvement"),
            solution="Comprehensive delivery SOP with decision points and escalation rules",
            inputs=["Project brief", "Client requirements", "Timeline"],
            outputs=["Completed deliverable", "Client approval"],
            workflow=[
                "Project kickoff (use checklist)",
                "Discovery/research phase",
                "Strategy development",
                "Execution phase",
                "Internal review (use QC checklist)",
                "Client presentation",
                "Revisions (use revision SOP)",
                "Final delivery",
                "Project close",
            ],
            success_metrics=["80% of projects delivered without owner", "Quality scores maintained"],
            handoff_process=(
                "Document current process, identify owner-dependent steps, create escalation rules"
            ),
            client_prerequisites=["PM tool with workflow automation"],
        ),
    )]


@register_rule(
    "sop-sales-process",
    SYSTEM_RULES,
    "Team cannot close deals without the owner",
    trigger=lambda r: team_cannot(r, "close"),
)
def sales_sop(r: AuditResponse, produced: list[Any]) -> list[System]:
    blocker = r.text("sales_blocker", "Not specified")
    sales_hours = r.number("time_sales_hrs")
    return [System(
        id="sop-sales-process",
        name="Sales Process SOP + Playbook",
        type=SystemType.SOP,
        priority=Priority.P1,
        category=SystemCategory.SALES,
        description=f"Sales process documentation. Blocker: {blocker}",
        triggered_by=["team_can_close = No/Sometimes", f"sales_blocker: {blocker}"],
        estimated_build_time="6 hours",
        owner_time_reclaimed=sales_hours * 0.4 if sales_hours > 0 else 4,
        prerequisites=["Client qualification framework", "Pricing framework"],
        integrations=[r.text("tools_crm", "CRM")],
        prd=PRD(
            problem=r.text("sales_blocker", "Team cannot close deals without owner"),
            solution="Sales playbook with scripts, objection handling, and close criteria",
            inputs=["Lead", "Discovery notes"],
            outputs=["Signed contract or qualified out"],
            workflow=[
                "Lead qualification (use framework)",
                "Discovery call (use script)",
                "Proposal creation (use template)",
                "Pricing (use pricing framework)",
                "Objection handling (use playbook)",
                "Close (use closing checklist)",
                "Handoff to delivery",
            ],
            success_metrics=["50% of deals closed without owner", "Maintained close rate"],
            handoff_process="Train sales team, role play scenarios, shadow then reverse-shadow",
            client_prerequisites=["CRM with pipeline management"],
        ),
    )]


# ---------------------------------------------------------------------------
# Needs the client named themselves
# ---------------------------------------------------------------------------

@register_rule(
    "highest-impact-doc",
    SYSTEM_RULES,
    "Client named the documentation with the highest impact",
    trigger=lambda r: r.has("highest_impact_doc"),
)
def highest_impact_doc(r: AuditResponse, produced: list[Any]) -> list[System]:
    doc = r.text("highest_impact_doc")
    system_id = f"sop-{slugify(doc)}"
    if system_id in _existing_ids(produced):
        return []
    return [System(
        id=system_id,
        name=f"{doc} SOP",
        type=SystemType.SOP,
        priority=Priority.P1,
        category=SystemCategory.OPERATIONS,
        description="Client identified this as highest-impact documentation need",
        triggered_by=[f'highest_impact_doc: "{doc}"'],
        estimated_build_time="4 hours",
        owner_time_reclaimed=3,
        prd=PRD(
            problem=f'"{doc}" is not documented, consuming owner time',
            solution="Comprehensive SOP for this process",
            inputs=[TO_BE_DETERMINED],
            outputs=[TO_BE_DETERMINED],
            workflow=[TO_BE_DETERMINED],
            success_metrics=["Process can be done without owner"],
            handoff_process="Document, train, verify",
        ),
    )]


@register_rule(
    "top-systematize-need",
    SYSTEM_RULES,
    "Client's top systematization priority",
    trigger=lambda r: r.has("top_systematize_need"),
)
def top_systematize_need(r: AuditResponse, produced: list[Any]) -> list[System]:
    need = r.text("top_systematize_need")
    system_id = f"sop-{slugify(need)}"
    if system_id in _existing_ids(produced):
        return []
    return [System(
        id=system_id,
        name=f"{need} System",
        type=SystemType.SOP,
        priority=Priority.P1,
        category=SystemCategory.OPERATIONS,
        description="Client's #1 systematization priority",
        triggered_by=[f'top_systematize_need: "{need}"'],
        estimated_build_time="4 hours",
        owner_time_reclaimed=3,
        prd=PRD(
            problem=f'"{need}" needs to be systematized',
            solution="Full documentation and/or automation",
            inputs=[TO_BE_DETERMINED],
            outputs=[TO_BE_DETERMINED],
            workflow=[TO_BE_DETERMINED],
            success_metrics=["Process runs without owner"],
            handoff_process="Document, train, verify",
        ),
    )]


@register_rule(
    "magic-wand-fix",
    SYSTEM_RULES,
    "The one thing the client would fix with a magic wand",
    trigger=lambda r: r.has("magic_wand_fix"),
)
def magic_wand_fix(r: AuditResponse, produced: list[Any]) -> list[System]:
    fix = r.text("magic_wand_fix")
    system_id = f"system-{slugify(fix)}"
    if system_id in _existing_ids(produced):
        return []
    return [System(
        id=system_id,
        name=f"Priority Fix: {truncate(fix, 50)}",
        type=SystemType.SOP,
        priority=Priority.P0,
        category=SystemCategory.OPERATIONS,
        description="Client's magic wand fix - highest pain point",
        triggered_by=[f'magic_wand_fix: "{fix}"'],
        estimated_build_time="6 hours",
        owner_time_reclaimed=5,
        prd=PRD(
            problem=fix,
            solution="To be designed based on specific pain point",
            inputs=[TO_BE_DETERMINED],
            outputs=["Pain point resolved"],
            workflow=[TO_BE_DETERMINED],
            success_metrics=["Owner reports pain point resolved"],
            handoff_process="Custom based on solution",
        ),
    )]


@register_rule(
    "wish-could-delegate",
    SYSTEM_RULES,
    "The task the owner most wants to hand off",
    trigger=lambda r: r.has("wish_could_delegate"),
)
def wish_could_delegate(r: AuditResponse, produced: list[Any]) -> list[System]:
    wish = r.text("wish_could_delegate")
    system_id = f"system-delegate-{slugify(wish)}"
    if system_id in _existing_ids(produced):
        return []
    return [System(
        id=system_id,
        name=f"Delegate: {truncate(wish, 50)}",
        type=SystemType.SOP,
        priority=Priority.P0,
        category=SystemCategory.DELIVERY,
        description="Owner's #1 delegation wish",
        triggered_by=[f'wish_could_delegate: "{wish}"'],
        estimated_build_time="4 hours",
        owner_time_reclaimed=r.number("wasted_hours_week") or 5,
        prd=PRD(
            problem=f'Owner wants to delegate: "{wish}"',
            solution="SOP + training to enable delegation",
            inputs=["To be determined"],
            outputs=["Task completed by team member"],
            workflow=["To be determined"],
            success_metrics=["Task done without owner"],
            handoff_process="Document, train designated team member, verify quality",
        ),
    )]


# ---------------------------------------------------------------------------
# Workflow systems
# ---------------------------------------------------------------------------

@register_rule(
    "automation-workflow",
    SYSTEM_RULES,
    "A clear multi-step delivery workflow worth automating",
    trigger=lambda r: len(parse_text_list(r.text("core_service_steps"))) >= 3,
)
def workflow_automation(r: AuditResponse, produced: list[Any]) -> list[System]:
    if "automation-workflow" in _existing_ids(produced):
        return []
    steps = parse_text_list(r.text("core_service_steps"))
    return [System(
        id="automation-workflow",
        name="Core Delivery Workflow Automation",
        type=SystemType.AUTOMATION,
        priority=Priority.P1,
        category=SystemCategory.DELIVERY,
        description=f"Automate handoffs and notifications across {len(steps)} delivery steps",
        triggered_by=["core_service_steps provided"],
        estimated_build_time="4 hours",
        owner_time_reclaimed=3,
        prerequisites=["Delivery SOP"],
        integrations=[r.text("tools_pm", "PM tool"), r.text("tools_automation", "Zapier")],
        prd=PRD(
            problem="Manual handoffs between delivery steps cause delays",
            solution="Automated workflow with triggers, assignments, and notifications",
            inputs=["Project status changes"],
            outputs=["Automatic task creation, assignments, notifications"],
            workflow=steps,
            success_metrics=["Zero missed handoffs", "Reduced project cycle time"],
            handoff_process="Build in automation tool, test with sample project",
            client_prerequisites=["PM tool with automation support"],
        ),
    )]


@register_rule(
    "sop-revision-process",
    SYSTEM_RULES,
    "Projects go through too many revision rounds",
    trigger=lambda r: r.text("avg_revision_rounds") in HIGH_REVISION_ROUNDS,
)
def revision_sop(r: AuditResponse, produced: list[Any]) -> list[System]:
    rounds = r.text("avg_revision_rounds")
    return [System(
        id="sop-revision-process",
        name="Revision Management SOP",
        type=SystemType.SOP,
        priority=Priority.P0,
        category=SystemCategory.DELIVERY,
        description="Reduce revision rounds through better briefing and scope control",
        triggered_by=[f'avg_revision_rounds = "{rounds}"'],
        estimated_build_time="3 hours",
        owner_time_reclaimed=4,
        prerequisites=["QC checklist"],
        prd=PRD(
            problem=f"Projects go through {rounds} which extends timelines",
            solution="Better upfront briefing, revision limits, and scope control",
            inputs=["Project brief", "Client feedback"],
            outputs=["Controlled revision process"],
            workflow=[
                "Enhanced briefing process",
                "Clear revision limits in contract",
                "Structured feedback collection",
                "Scope change for out-of-scope requests",
            ],
            success_metrics=["Average revisions reduced to 2-3 rounds"],
            handoff_process="Train team on briefing and scope management",
        ),
    )]


@register_rule(
    "framework-scope-creep",
    SYSTEM_RULES,
    "Out-of-scope revision requests are routinely absorbed",
    trigger=lambda r: r.text("revision_scope_issues") in FREQUENT_SCOPE_ISSUES,
)
def scope_creep_framework(r: AuditResponse, produced: list[Any]) -> list[System]:
    if "framework-scope-change" in _existing_ids(produced):
        return []
    return [System(
        id="framework-scope-change",
        name="Scope Change Decision Framework",
        type=SystemType.DECISION_FRAMEWORK,
        priority=Priority.P0,
        category=SystemCategory.DELIVERY,
        description="Clear rules for handling scope creep with client scripts",
        triggered_by=[f'revision_scope_issues = "{r.text("revision_scope_issues")}"'],
        estimated_build_time="2 hours",
        owner_time_reclaimed=3,
        prd=PRD(
            problem="Scope creep is constant - team does extra work without charging",
            solution="Clear scope boundaries, scripts for pushing back, change order process",
            inputs=["Client request"],
            outputs=["In-scope approval OR change order"],
            workflow=[
                "Receive client request",
                "Compare to original scope",
                "If in scope, proceed",
                "If out of scope, use script to explain and offer change order",
                "Escalate only if client pushes back",
            ],
            success_metrics=["Scope creep reduced by 70%", "Additional revenue from change orders"],
            handoff_process="Train team on scripts and when to use them",
        ),
    )]


@register_rule(
    "sop-client-comms-delegation",
    SYSTEM_RULES,
    "Owner handles all client communication",
    trigger=lambda r: r.equals("who_handles_client_comms", "Me (the owner) - all of it"),
)
def client_comms_delegation(r: AuditResponse, produced: list[Any]) -> list[System]:
    return [System(
        id="sop-client-comms-delegation",
        name="Client Communication Delegation SOP",
        type=SystemType.SOP,
        priority=Priority.P0,
        category=SystemCategory.CLIENT_COMMS,
        description="Transition client communications from owner to team",
        triggered_by=["who_handles_client_comms = owner only"],
        estimated_build_time="4 hours",
        owner_time_reclaimed=6,
        prerequisites=["Client communication templates"],
        integrations=[r.text("tools_comm", "email")],
        prd=PRD(
            problem="Owner handles ALL client communication - massive bottleneck",
            solution="Gradual transition with templates, scripts, and escalation rules",
            inputs=["Client inquiry/need"],
            outputs=["Response handled by team member"],
            workflow=[
                "Categorize communication type",
                "Route to appropriate team member",
                "Use templates/scripts for response",
                "Escalate to owner only for defined situations",
                "Weekly review of escalations to reduce over time",
            ],
            success_metrics=["80% of client comms handled without owner within 4 weeks"],
            handoff_process="Designate client point person, introduce to clients, shadow period",
        ),
    )]


@register_rule(
    "playbook-client-transition",
    SYSTEM_RULES,
    "Clients expect to work with the owner",
    trigger=lambda r: "Clients expect to work with me" in r.selections("delegation_blockers"),
)
def client_transition_playbook(r: AuditResponse, produced: list[Any]) -> list[System]:
    return [System(
        id="playbook-client-transition",
        name="Client Transition Playbook",
        type=SystemType.SOP,
        priority=Priority.P1,
        category=SystemCategory.CLIENT_COMMS,
        description="Process for transitioning client relationships to team members",
        triggered_by=['delegation_blockers includes "Clients expect to work with me"'],
        estimated_build_time="2 hours",
        owner_time_reclaimed=3,
        prd=PRD(
            problem="Clients expect owner involvement - team introduction feels awkward",
            solution="Structured transition process that maintains client confidence",
            inputs=["Client relationship"],
            outputs=["Team member as primary contact"],
            workflow=[
                'Introduce team member in next meeting as "lead" on project',
                "Position team member as expert",
                "CC team member on all communications",
                "Gradually reduce owner involvement",
                "Owner available for escalations only",
            ],
            success_metrics=["Smooth transitions with no client complaints"],
            handoff_process="Prepare team member, practice introductions",
        ),
    )]


def _wants_external_infra(r: AuditResponse) -> bool:
    interested = r.text("interest_in_external_infra") in (
        "Yes, very interested",
        "Curious but not sure how",
    )
    repeatable = r.text("repeatable_client_setup") in ("Yes, all the time", "Sometimes")
    return interested and repeatable


@register_rule(
    "roadmap-external-infra",
    SYSTEM_RULES,
    "Repeatable client setups could become an infrastructure product",
    trigger=_wants_external_infra,
)
def external_infra_roadmap(r: AuditResponse, produced: list[Any]) -> list[System]:
    return [System(
        id="roadmap-external-infra",
        name="External Infrastructure Roadmap",
        type=SystemType.SOP,
        priority=Priority.P2,
        category=SystemCategory.OPERATIONS,
        description="Plan for productizing repeatable client setups into infrastructure",
        triggered_by=["interest_in_external_infra = interested", "repeatable_client_setup = yes"],
        estimated_build_time="4 hours",
        # strategic; saves no owner time at first
        owner_time_reclaimed=0,
        prerequisites=["Internal systems complete"],
        prd=PRD(
            problem="Setting up same systems for multiple clients - opportunity to productize",
            solution="Identify and document repeatable infrastructure for future productization",
            inputs=["Client pain points", "Repeatable setups"],
            outputs=["Infrastructure product roadmap"],
            workflow=[
                "Document what you set up for clients",
                "Identify patterns",
                "Prioritize by value and repeatability",
                "Plan productization approach",
            ],
            success_metrics=["Clear roadmap for post-sprint infrastructure build"],
            handoff_process="Document in Week 4 as handoff planning",
        ),
    )]
