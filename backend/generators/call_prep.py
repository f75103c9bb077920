"""Call prep: what to ask, probe and show on the first sales call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from backend.engine.numeric import format_thousands, round_half_up
from backend.engine.signals import total_weekly_hours
from backend.models.answers import AuditResponse, format_answer_number
from backend.models.serialize import to_camel_dict
from backend.rule_library.red_flags import RED_FLAG_RULES, RedFlag
from backend.rule_library.registry import run_rules

NO_REGULAR_CADENCE = "No regular cadence"
SCOPE_CREEP_ANSWERS = ("Often - we usually just do it", "Almost always - it's a constant battle")
OWNER_ALWAYS_APPROVES = "Me (the owner) - always"


@dataclass(frozen=True)
class CallSection:
    title: str
    duration: str
    goal: str
    questions: list[str]
    listen_for: list[str]


@dataclass(frozen=True)
class BuildHypothesis:
    priority: int
    system: str
    why: str
    hours_reclaimed: Optional[int] = None


@dataclass(frozen=True)
class ShowMeRequest:
    item: str
    why: str


@dataclass(frozen=True)
class TimeBreakdown:
    delivery: float
    sales: float
    mgmt: float
    ops: float
    strategy: float


@dataclass(frozen=True)
class QuickContext:
    revenue: str
    recurring_pct: float
    team_size: float
    owner_hours: float
    time_breakdown: TimeBreakdown
    pain_summary: str


@dataclass(frozen=True)
class MechanismHypothesis:
    signals: list[str]
    probable_core: str


@dataclass(frozen=True)
class CallPrepClient:
    company: str
    contact: str
    email: str
    generated_at: str = ""


@dataclass(frozen=True)
class CallPrepDocument:
    client_info: CallPrepClient
    quick_context: QuickContext
    build_hypothesis: list[BuildHypothesis]
    proprietary_mechanism_hypothesis: MechanismHypothesis
    call_sections: list[CallSection]
    red_flags: list[RedFlag]
    show_me_requests: list[ShowMeRequest]
    quick_wins: list[str]
    post_call_needs: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return to_camel_dict(self)


POST_CALL_NEEDS = [
    "Call transcript for analysis",
    "Any docs/assets they shared or referenced",
    "Your notes on validation (what was confirmed, what changed)",
    "Any follow-up questions that emerged",
]


def _n(value: float) -> str:
    return format_answer_number(value)


def _has_update_cadence(r: AuditResponse) -> bool:
    return r.has("client_update_frequency") and r.text("client_update_frequency") != NO_REGULAR_CADENCE


def pain_summary(r: AuditResponse) -> str:
    total = total_weekly_hours(r)
    owner_pct = r.number("projects_requiring_owner_pct")
    documented = r.number("documented_pct")

    points: list[str] = []
    if total > 50:
        points.append(f"working {_n(total)} hrs/week")
    if owner_pct > 70:
        points.append(f"{_n(owner_pct)}% of projects require owner")
    if r.equals("team_can_close", "No"):
        points.append("team can't close deals")
    if r.equals("team_can_deliver", "No"):
        points.append("team can't deliver without owner")
    if r.equals("has_sops", "No"):
        points.append("no SOPs")
    if documented < 30:
        points.append(f"only {_n(documented)}% documented")
    return ", ".join(points) if points else "No critical pain points identified"


def build_hypotheses(r: AuditResponse) -> list[BuildHypothesis]:
    """Candidate systems to float on the call, ordered by priority."""
    owner_pct = r.number("projects_requiring_owner_pct")
    new_clients = r.number("new_clients_per_month") or 2
    hypotheses: list[BuildHypothesis] = []

    if not r.equals("team_can_onboard", "Yes"):
        cannot = "can't" if r.equals("team_can_onboard", "No") else "sometimes can't"
        hypotheses.append(BuildHypothesis(
            priority=1,
            system="Client Onboarding Flow",
            why=(
                f"Team {cannot} onboard without owner. "
                f"{_n(new_clients)} new clients/month = significant trapped time."
            ),
            hours_reclaimed=int(round_half_up(max(0.0, new_clients * 3))),
        ))

    if r.equals("revision_approval_process", OWNER_ALWAYS_APPROVES) or owner_pct > 50:
        hypotheses.append(BuildHypothesis(
            priority=2,
            system="Delivery QC Checklist + Review Skill",
            why=(
                f"Owner reviews everything before delivery. "
                f"{_n(owner_pct)}% project involvement = delivery bottleneck."
            ),
            hours_reclaimed=int(round_half_up(max(0.0, r.number("time_delivery_hrs") * 0.3))),
        ))

    sales_replaceability = r.number("owner_replaceability_sales") or 10
    if not r.equals("team_can_close", "Yes") or sales_replaceability < 5:
        if r.equals("team_can_close", "No"):
            why = "Team can't close deals. May be qualification problem, not closing problem."
        else:
            why = (
                f"Sales replaceability: {r.text('owner_replaceability_sales', '?')}/10. "
                "Owner dependency in revenue generation."
            )
        hypotheses.append(BuildHypothesis(
            priority=3,
            system="Sales Qualification Framework",
            why=why,
            hours_reclaimed=int(round_half_up(max(0.0, r.number("time_sales_hrs") * 0.5))),
        ))

    client_count = r.number("client_count")
    if client_count > 5 and _has_update_cadence(r):
        hypotheses.append(BuildHypothesis(
            priority=4,
            system="Client Reporting Automation",
            why=(
                f"{_n(client_count)} clients with {r.text('client_update_frequency').lower()} "
                "updates = repeatable, automatable work."
            ),
            hours_reclaimed=int(round_half_up(max(0.0, client_count * 0.5))),
        ))

    if r.text("revision_scope_issues") in SCOPE_CREEP_ANSWERS:
        hypotheses.append(BuildHypothesis(
            priority=5,
            system="Scope Decision Framework",
            why=f"\"{r.text('revision_scope_issues')}\" - needs guardrails for what's in/out.",
        ))

    if r.equals("has_proposal_template", "No") or r.equals("proposal_customization", "Yes"):
        hypotheses.append(BuildHypothesis(
            priority=6,
            system="Proposal Generation Skill",
            why=(
                "No proposal templates - recreating from scratch each time."
                if r.equals("has_proposal_template", "No")
                else "Templates exist but heavily customized each time."
            ),
            hours_reclaimed=int(round_half_up(max(0.0, new_clients * 2))),
        ))

    return sorted(hypotheses, key=lambda h: h.priority)


def mechanism_hypothesis(r: AuditResponse) -> MechanismHypothesis:
    signals: list[str] = []
    if r.text("has_proprietary_method") in ("Yes", "Sort of"):
        signals.append(
            f"Has proprietary method: \"{r.text('proprietary_method_description', 'Not described')}\""
        )
    if r.has("differentiation"):
        signals.append(f"Differentiation: \"{r.text('differentiation')}\"")
    if r.has("client_praise"):
        signals.append(f"Clients rave about: \"{r.text('client_praise')}\"")
    if r.has("unique_strength"):
        signals.append(f"Unique strength: \"{r.text('unique_strength')}\"")

    probable_core = (
        r.text("proprietary_method_description")
        or r.text("unique_strength")
        or r.text("differentiation")
        or "Need to extract on call"
    )
    return MechanismHypothesis(signals=signals, probable_core=probable_core)


def call_sections(r: AuditResponse) -> list[CallSection]:
    owner_pct = r.number("projects_requiring_owner_pct")
    sections: list[CallSection] = []

    if not r.equals("team_can_onboard", "Yes"):
        questions = [
            "Walk me through the last client you onboarded. From signed contract to first "
            "deliverable - what happened step by step?",
            "What do you personally do vs. what does the team do?",
            "What information do you need from the client before you can start? How do you collect it?",
            "What's the first thing that breaks if you hand this to your team tomorrow?",
            "Is there a 'moment' in onboarding where you build the relationship? What happens there?",
        ]
        if r.has("onboard_blocker"):
            questions.append(f"You mentioned \"{r.text('onboard_blocker')}\" - tell me more about that.")
        sections.append(CallSection(
            title="Onboarding Process",
            duration="15 min",
            goal="Extract the actual onboarding sequence so we can build it.",
            questions=questions,
            listen_for=[
                "The step they think requires them but actually doesn't",
                "The thing they do on autopilot that they've never documented",
                "Trust issues vs. process issues",
            ],
        ))

    if owner_pct > 50 or r.equals("revision_approval_process", OWNER_ALWAYS_APPROVES):
        sections.append(CallSection(
            title="Delivery Review & QC",
            duration="10 min",
            goal="Turn their quality eye into a checklist + decision tree.",
            questions=[
                "When you review work before it goes to the client, what are you actually checking?",
                "What's a recent example of something you caught that the team missed?",
                "Is there a pattern to the mistakes? Same 3-4 things, or random?",
                "If something is 'wrong,' how do you decide if it needs small tweaks or a full redo?",
                "What would make you trust your team to ship without your eyes on it?",
            ],
            listen_for=[
                "The repeatable checklist hiding in their head",
                "The quality threshold that's never been defined",
                "Whether this is skill gap or trust gap",
            ],
        ))

    if not r.equals("team_can_close", "Yes"):
        questions = [
            "You said your team can't close without you. When they try, what goes wrong?",
            "Tell me about a deal they lost that you would have won. "
            "What would you have done differently?",
            "What makes you excited about a prospect in the first 5 minutes of a call?",
            "What makes you want to end the call early?",
            'Do you have a defined ICP, or is it more "I know it when I see it"?',
        ]
        if r.has("sales_blocker"):
            questions.append(
                f"You mentioned \"{r.text('sales_blocker')}\" - can you give me a specific example?"
            )
        sections.append(CallSection(
            title="Sales & Qualification",
            duration="10 min",
            goal='Separate "can\'t close" from "taking bad leads."',
            questions=questions,
            listen_for=[
                "Whether this is a closing skill gap or a qualification gap",
                "The intuition they use to filter leads",
                "Objection handling patterns",
            ],
        ))

    if r.equals("has_proprietary_method", "No"):
        opener = (
            "What's your actual process for delivering results? "
            "Walk me through a typical engagement."
        )
    else:
        description = r.text("proprietary_method_description")
        mentioned = f'"{description[:50]}..."' if description else "having a methodology"
        opener = f"You mentioned {mentioned}. Walk me through how it works."
    sections.append(CallSection(
        title="Proprietary Mechanism",
        duration="15 min",
        goal="Extract and name their unique approach.",
        questions=[
            opener,
            "Where did this approach come from? Did you invent it or learn it somewhere?",
            "What do other agencies in your space do wrong that you do right?",
            "If you had to teach this to a new hire, what would take the longest to get right?",
            "Does this approach have a name? If not, what would you call it?",
            "What's the contrarian belief behind how you work?",
        ],
        listen_for=[
            "The framework structure (steps, phases, stages)",
            "The contrarian belief behind it",
            "Language they use that we can codify",
            "What they're protective of",
        ],
    ))

    sections.append(CallSection(
        title="The Clone Test",
        duration="5 min",
        goal="Find what can't be systematized vs. what just hasn't been.",
        questions=[
            "If you had to train a clone of yourself - same skills, same knowledge - "
            "what would be hardest to transfer?",
            "What do you do that you genuinely believe nobody else could do as well?",
            "What would you never want to delegate, even if you could?",
        ],
        listen_for=[
            "Ego vs. reality",
            "What they think is un-delegatable but is actually just undocumented",
            "Their true zone of genius vs. comfortable habits",
        ],
    ))

    core = r.text("core_service")
    named = f' ("{core[:30]}...")' if core else ""
    sections.append(CallSection(
        title="Core Service Walkthrough",
        duration="10 min",
        goal="Map the entire delivery process for their main service.",
        questions=[
            f"For your core service{named}, walk me through a project from start to finish.",
            "What triggers the project to start?",
            "What are the major milestones or phases?",
            "Where are the handoff points between you and the team?",
            "What approvals or sign-offs happen along the way?",
            "What typically goes wrong or causes delays?",
        ],
        listen_for=[
            "Bottleneck points",
            "Decision gates that require owner",
            "Undocumented handoff procedures",
            "Recurring friction points",
        ],
    ))

    return sections


def show_me_requests(r: AuditResponse) -> list[ShowMeRequest]:
    requests = [
        ShowMeRequest("A recent client onboarding doc or welcome email",
                      "See what exists and how systematized it is"),
        ShowMeRequest("How they review a deliverable before it goes to the client",
                      "Watch the actual QC process to extract the checklist"),
        ShowMeRequest("Their CRM/pipeline", "See how leads flow, where deals stall"),
    ]
    if _has_update_cadence(r):
        requests.append(ShowMeRequest("A weekly/monthly client report", "See what's manual vs. templatized"))
    if r.equals("has_proposal_template", "Yes"):
        requests.append(ShowMeRequest("A recent proposal", "See the template structure and customization level"))
    return requests


def call_quick_wins(r: AuditResponse) -> list[str]:
    wins: list[str] = []
    if _has_update_cadence(r):
        wins.append("Your client reporting is probably 80% automatable in week 1")
    if r.number("projects_requiring_owner_pct") > 50:
        wins.append("The delivery QC checklist - we can have v1 documented by end of this call")
    if not r.equals("team_can_onboard", "Yes"):
        wins.append(
            "Your onboarding sequence sounds systematizable. We can have that as a skill within days."
        )
    if r.equals("has_proposal_template", "No"):
        wins.append(
            "Proposal generation is a fast win - we can template your pricing logic and scope definitions"
        )
    return wins or ["Based on your answers, we'll identify quick wins during the call"]


def generate_call_prep(data: Any, generated_at: str = "") -> CallPrepDocument:
    """Assemble the call prep document for one client."""
    r = data if isinstance(data, AuditResponse) else AuditResponse(data)

    context = QuickContext(
        revenue=f"{format_thousands(r.number('revenue_12mo'))}/year",
        recurring_pct=r.number("revenue_recurring_pct"),
        team_size=r.number("team_size_total") or 1,
        owner_hours=total_weekly_hours(r),
        time_breakdown=TimeBreakdown(
            delivery=r.number("time_delivery_hrs"),
            sales=r.number("time_sales_hrs"),
            mgmt=r.number("time_mgmt_hrs"),
            ops=r.number("time_ops_hrs"),
            strategy=r.number("time_strategy_hrs"),
        ),
        pain_summary=pain_summary(r),
    )

    return CallPrepDocument(
        client_info=CallPrepClient(
            company=r.text("company_name", "Unknown Company"),
            contact=r.text("contact_name") or r.text("full_name", "Unknown"),
            email=r.text("contact_email") or r.text("email"),
            generated_at=generated_at,
        ),
        quick_context=context,
        build_hypothesis=build_hypotheses(r),
        proprietary_mechanism_hypothesis=mechanism_hypothesis(r),
        call_sections=call_sections(r),
        red_flags=run_rules(RED_FLAG_RULES, r),
        show_me_requests=show_me_requests(r),
        quick_wins=call_quick_wins(r),
        post_call_needs=list(POST_CALL_NEEDS),
    )


def _short(text: str, limit: int = 60) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def render_call_prep_markdown(prep: CallPrepDocument) -> str:
    """Render the call prep as markdown, sections in call order."""
    lines: list[str] = []
    ctx = prep.quick_context
    t = ctx.time_breakdown

    lines.append(f"# Call Prep: {prep.client_info.company}")
    lines.append("")
    lines.append(f"**Contact:** {prep.client_info.contact} ({prep.client_info.email})")
    if prep.client_info.generated_at:
        lines.append(f"**Generated:** {prep.client_info.generated_at[:10]}")
    lines.append("")

    lines.extend(["---", "", "## Quick Context", ""])
    lines.append(f"- **Revenue:** {ctx.revenue}, {_n(ctx.recurring_pct)}% recurring")
    lines.append(f"- **Team:** {_n(ctx.team_size)} people")
    lines.append(
        f"- **Owner Hours:** {_n(ctx.owner_hours)}/week ({_n(t.delivery)} delivery, "
        f"{_n(t.sales)} sales, {_n(t.mgmt)} mgmt, {_n(t.ops)} ops, {_n(t.strategy)} strategy)"
    )
    lines.append(f"- **Pain Summary:** {ctx.pain_summary}")
    lines.append("")

    lines.extend(["---", "", "## Preliminary Build Hypothesis", ""])
    lines.append("Based on questionnaire answers, I'm thinking we build:")
    lines.append("")
    lines.append("| Priority | System | Why | Hours/Week |")
    lines.append("|----------|--------|-----|------------|")
    for h in prep.build_hypothesis:
        hours = h.hours_reclaimed if h.hours_reclaimed else "?"
        lines.append(f"| {h.priority} | **{h.system}** | {_short(h.why)} | {hours} |")
    lines.append("")

    mechanism = prep.proprietary_mechanism_hypothesis
    lines.extend(["---", "", "## Proprietary Mechanism Hypothesis", ""])
    if mechanism.signals:
        lines.append("**Signals from questionnaire:**")
        lines.extend(f"- {s}" for s in mechanism.signals)
        lines.append("")
    lines.append(f"**Probable Core:** {mechanism.probable_core}")
    lines.append("")

    lines.extend(["---", "", "## Call Questions", ""])
    for idx, section in enumerate(prep.call_sections, start=1):
        lines.append(f"### {idx}. {section.title} ({section.duration})")
        lines.append("")
        lines.append(f"*Goal: {section.goal}*")
        lines.append("")
        lines.extend(f'- "{q}"' for q in section.questions)
        lines.append("")
        lines.append("**Listen for:**")
        lines.extend(f"- {item}" for item in section.listen_for)
        lines.append("")

    if prep.red_flags:
        lines.extend(["---", "", "## Red Flags / Contradictions to Probe", ""])
        for idx, flag in enumerate(prep.red_flags, start=1):
            lines.append(f"{idx}. **{flag.observation}**")
            lines.append(f"   - Probe: {flag.probe}")
            lines.append("")

    lines.extend(["---", "", '## "Show Me" Requests', ""])
    lines.append("If possible, have them share screen for:")
    lines.append("")
    lines.extend(f"- **{sm.item}** - {sm.why}" for sm in prep.show_me_requests)
    lines.append("")

    lines.extend(["---", "", "## Quick Wins to Mention", ""])
    lines.append("To build momentum and show we can move fast:")
    lines.append("")
    lines.extend(f'- "{win}"' for win in prep.quick_wins)
    lines.append("")

    lines.extend(["---", "", "## After the Call", ""])
    lines.append("I'll need:")
    lines.append("")
    lines.extend(f"- {need}" for need in prep.post_call_needs)
    lines.append("")
    lines.append("Once I have the transcript, I'll generate:")
    lines.append("")
    lines.extend([
        "1. Final system list with confirmed priorities",
        "2. Process maps for each workflow",
        "3. Decision frameworks for judgment calls",
        "4. Skill specifications for each automation",
        "5. The named proprietary mechanism with full methodology doc",
        "",
    ])

    return "\n".join(lines)
