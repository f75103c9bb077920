"""Diagnostic report: a data-driven walkthrough of the client's current state.

The report is assembled from fixed text blocks chosen by thresholds on the
answers and the score. There is no randomness and no clock: the same inputs
always produce the same report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend.engine.calculator import score_level
from backend.engine.numeric import round_half_up
from backend.engine.signals import WEEKS_PER_MONTH, percent, team_can, total_weekly_hours
from backend.models.answers import AuditResponse, format_answer_number
from backend.models.enums import DIMENSION_LABELS, Dimension, ScoreLevel
from backend.models.score import ExitLayerScore
from backend.models.serialize import to_camel_dict

TARGET_MULTIPLE = 5
SUSTAINABLE_WEEKLY_HOURS = 60
KNOWLEDGE_TRANSFER_HOURS = 20

NOT_SPECIFIED = "Not specified"

_INDICATORS: dict[ScoreLevel, str] = {
    ScoreLevel.RED: "[RED - CRITICAL]",
    ScoreLevel.YELLOW: "[YELLOW - NEEDS WORK]",
    ScoreLevel.GREEN: "[GREEN - STRONG]",
}

# Narrative catalog: dimension -> band -> block
_DIMENSION_NARRATIVES: dict[Dimension, dict[str, str]] = {
    Dimension.LEVERAGE: {
        "critical": (
            "The business runs through you. Most projects need your hands on them, so every "
            "new client adds to your week instead of your team's."
        ),
        "warning": (
            "Your team carries part of the load, but key work still routes back to you. "
            "Growth will stall at your calendar's limit."
        ),
        "positive": "Your team delivers without you. Protect this leverage as you scale.",
    },
    Dimension.EQUITY_POTENTIAL: {
        "critical": (
            "Very little of what you know is written down. An acquirer would be buying your "
            "labor, not a business."
        ),
        "warning": (
            "Some processes are captured, but the gaps leave value tied to individuals. "
            "Finishing the documentation turns it into transferable IP."
        ),
        "positive": "Documented systems and templates give you real, sellable IP.",
    },
    Dimension.REVENUE_RISK: {
        "critical": (
            "Revenue is fragile. Concentration, churn or one-off projects mean a single bad "
            "month could reset the business."
        ),
        "warning": (
            "Revenue is reasonably stable but exposed. Diversifying clients or adding "
            "recurring revenue would remove the biggest risks."
        ),
        "positive": "Revenue is diversified and predictable.",
    },
    Dimension.PRODUCT_READINESS: {
        "critical": (
            "Services are still custom-built each time. A product needs repeatable delivery "
            "and a sharp position first."
        ),
        "warning": (
            "Delivery is fairly repeatable. Sharpen positioning and formalize your method "
            "before packaging an offer."
        ),
        "positive": "Repeatable delivery and clear positioning put you close to a productized offer.",
    },
    Dimension.IMPLEMENTATION_CAPACITY: {
        "critical": (
            "Your team has no slack to adopt new systems. Free capacity before starting a "
            "build."
        ),
        "warning": (
            "The team can absorb change, but only in small batches. Sequence the build "
            "carefully."
        ),
        "positive": "The team has the capacity and capability to implement new systems.",
    },
}


def narrative_band(score: float) -> str:
    """critical below 50, warning from 50 to 70, positive above 70."""
    if score < 50:
        return "critical"
    if score <= 70:
        return "warning"
    return "positive"


def score_indicator(score: float) -> str:
    return _INDICATORS[score_level(score)]


@dataclass(frozen=True)
class DiagnosticMetrics:
    """Monthly owner-time economics used throughout the report."""

    monthly_revenue: float
    annual_revenue: float
    hourly_rate: float
    hours_per_month: float
    delivery_hours: float
    sales_hours: float
    strategy_hours: float
    ops_hours: float
    mgmt_hours: float
    high_value_hours: float
    low_value_hours: float
    wasted_hours: float
    wasted_value: float
    potential_revenue: float
    monthly_gap: float
    annual_gap: float
    hours_per_client: float
    additional_hours_for_5_clients: float
    total_hours_needed: float
    weekly_hours_needed: float
    scalable: bool
    current_multiple: float
    current_exit_value: float
    target_multiple: float
    target_exit_value: float
    value_gap: float


@dataclass(frozen=True)
class Constraint:
    area: str
    observation: str
    measurement: str
    first_order: list[str]
    second_order: list[str]
    third_order: list[str]
    monthly_hours: int
    monthly_dollars: int


@dataclass(frozen=True)
class DimensionNarrative:
    dimension: Dimension
    label: str
    score: int
    band: str
    indicator: str
    text: str


@dataclass(frozen=True)
class ReportSection:
    title: str
    body: str


@dataclass(frozen=True)
class DiagnosticReport:
    company_name: str
    contact_name: str
    overall: int
    metrics: DiagnosticMetrics
    constraints: list[Constraint]
    narratives: list[DimensionNarrative]
    sections: list[ReportSection] = field(default_factory=list)

    def to_markdown(self) -> str:
        lines: list[str] = [
            "# ExitLayer Diagnostic Report",
            "",
            f"**Client:** {self.company_name}",
            f"**Contact:** {self.contact_name}",
            f"**Overall Score:** {self.overall}/100",
            "",
        ]
        for section in self.sections:
            lines.append(f"## {section.title}")
            lines.append("")
            lines.append(section.body)
            lines.append("")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        data = to_camel_dict(self)
        data["markdown"] = self.to_markdown()
        return data


def _n(value: float) -> str:
    return format_answer_number(value)


def _money(value: float) -> str:
    return f"${int(round_half_up(value)):,}"


def _thousands(value: float) -> str:
    return f"${int(round_half_up(value / 1000)):,}K"


def calculate_diagnostic_metrics(r: AuditResponse, score: ExitLayerScore) -> DiagnosticMetrics:
    fm = score.financial_metrics
    monthly_revenue = fm.monthly_revenue
    annual_revenue = fm.annual_revenue

    hours_per_month = total_weekly_hours(r) * WEEKS_PER_MONTH
    hourly_rate = monthly_revenue / hours_per_month if hours_per_month > 0 else 0.0

    def monthly(key: str) -> float:
        return max(0.0, r.number(key)) * WEEKS_PER_MONTH

    delivery_hours = monthly("time_delivery_hrs")
    sales_hours = monthly("time_sales_hrs")
    strategy_hours = monthly("time_strategy_hrs")
    ops_hours = monthly("time_ops_hrs")
    mgmt_hours = monthly("time_mgmt_hrs")

    low_value_hours = delivery_hours + ops_hours
    wasted_hours = monthly("wasted_hours_week")
    potential_revenue = monthly_revenue + low_value_hours * hourly_rate * 3
    monthly_gap = potential_revenue - monthly_revenue

    client_count = r.number("client_count") or 1
    hours_per_client = delivery_hours / client_count if client_count > 0 else 0.0
    additional = hours_per_client * 5
    total_needed = hours_per_month + additional
    weekly_needed = total_needed / WEEKS_PER_MONTH

    owner_share = percent(r, "projects_requiring_owner_pct") / 100
    current_multiple = 2 + (1 - owner_share) * 2
    current_exit_value = annual_revenue * current_multiple
    target_exit_value = annual_revenue * TARGET_MULTIPLE

    return DiagnosticMetrics(
        monthly_revenue=monthly_revenue,
        annual_revenue=annual_revenue,
        hourly_rate=hourly_rate,
        hours_per_month=hours_per_month,
        delivery_hours=delivery_hours,
        sales_hours=sales_hours,
        strategy_hours=strategy_hours,
        ops_hours=ops_hours,
        mgmt_hours=mgmt_hours,
        high_value_hours=sales_hours + strategy_hours,
        low_value_hours=low_value_hours,
        wasted_hours=wasted_hours,
        wasted_value=wasted_hours * hourly_rate,
        potential_revenue=potential_revenue,
        monthly_gap=monthly_gap,
        annual_gap=monthly_gap * 12,
        hours_per_client=hours_per_client,
        additional_hours_for_5_clients=additional,
        total_hours_needed=total_needed,
        weekly_hours_needed=weekly_needed,
        scalable=weekly_needed <= SUSTAINABLE_WEEKLY_HOURS,
        current_multiple=current_multiple,
        current_exit_value=current_exit_value,
        target_multiple=TARGET_MULTIPLE,
        target_exit_value=target_exit_value,
        value_gap=target_exit_value - current_exit_value,
    )


def identify_constraints(r: AuditResponse, m: DiagnosticMetrics) -> list[Constraint]:
    """Independent threshold checks, each yielding one constraint."""
    constraints: list[Constraint] = []

    weekly_total = total_weekly_hours(r)
    delivery_share = (
        int(round_half_up(max(0.0, r.number("time_delivery_hrs")) / weekly_total * 100))
        if weekly_total > 0 else 0
    )
    owner_pct = r.number("projects_requiring_owner_pct")

    if delivery_share >= 40:
        delivery_value = m.delivery_hours * m.hourly_rate
        constraints.append(Constraint(
            area="Time Allocation",
            observation=(
                f"Owner spends {_n(r.number('time_delivery_hrs'))} hrs/week "
                f"({delivery_share}%) in delivery"
            ),
            measurement=(
                f"{int(round_half_up(m.delivery_hours))} hours/month, "
                f"{_money(delivery_value)} in time value"
            ),
            first_order=[
                f"{int(round_half_up(m.delivery_hours))} hours/month not available for sales or strategy",
                f"{_n(owner_pct)}% of projects blocked without owner involvement",
                f"Team handles {_n(100 - owner_pct)}% of projects independently",
            ],
            second_order=[
                "Team skill development stagnates (owner always handles complex work)",
                f"Sales pipeline receives {int(round_half_up(m.sales_hours))} hrs/month vs needed "
                f"{int(round_half_up(m.hours_per_month * 0.4))} hrs/month",
                "Client service model depends on owner availability",
                "Quality assurance cannot scale beyond owner capacity",
            ],
            third_order=[
                f"Scale ceiling: {int(round_half_up(m.hours_per_month / (m.hours_per_client or 1)))} "
                "clients max at current model",
                f"Exit value: Business valued as owner-dependent ({m.current_multiple:.1f}x vs "
                f"{m.target_multiple}x multiple)",
                f"Burnout trajectory: {_n(weekly_total)} hrs/week unsustainable long-term",
                "Team retention: Limited growth opportunities for senior talent",
            ],
            monthly_hours=int(round_half_up(m.delivery_hours)),
            monthly_dollars=int(round_half_up(delivery_value)),
        ))

    documented = r.number("documented_pct")
    if documented < 50:
        undocumented_knowledge = 100 - r.number("knowledge_documented_pct")
        constraints.append(Constraint(
            area="Process Documentation",
            observation=f"{_n(documented)}% of processes documented, {_n(100 - documented)}% undocumented",
            measurement=(
                f"{_n(undocumented_knowledge)}% of institutional knowledge not captured in systems"
            ),
            first_order=[
                f"~{KNOWLEDGE_TRANSFER_HOURS} hours/month answering repeated questions",
                f"New hire productivity: {r.text('onboard_time_new_hire', 'Unknown')} onboarding time",
                f"Process consistency: {_n(r.number('delivery_consistency'))}/10 across team",
            ],
            second_order=[
                "Vacation/absence creates operational gaps",
                "Quality variance across team members",
                "Decision-making bottlenecks at owner level",
                "Knowledge loss risk with any team member departure",
            ],
            third_order=[
                f"Exit due diligence: {_n(undocumented_knowledge)}% of value tied to individuals, "
                "not systems",
                f"Valuation impact: Multiple reduction from {m.target_multiple}x to "
                f"{m.current_multiple:.1f}x",
                "Scalability: Cannot franchise, license, or replicate without documentation",
            ],
            monthly_hours=KNOWLEDGE_TRANSFER_HOURS,
            monthly_dollars=int(round_half_up(KNOWLEDGE_TRANSFER_HOURS * m.hourly_rate)),
        ))

    top3 = r.number("top3_concentration_pct")
    if top3 >= 50:
        monthly_risk = top3 / 3 / 100 * m.monthly_revenue
        churn = r.text("churn_rate_pct", "Not tracked")
        constraints.append(Constraint(
            area="Revenue Concentration",
            observation=f"{_n(top3)}% of revenue from top 3 clients",
            measurement=(
                f"Single client departure = {int(round_half_up(top3 / 3))}% revenue loss "
                f"({_money(monthly_risk)}/month)"
            ),
            first_order=[
                f"{_n(r.number('client_count'))} total clients, top 3 represent {_n(top3)}% of revenue",
                "Client pricing power: Concentrated revenue limits negotiating leverage",
                f"Churn rate: {churn}% annually",
            ],
            second_order=[
                "Strategic decision-making constrained by client concentration risk",
                "Growth investment limited by need to protect existing revenue",
                "Team morale impacted by revenue volatility perception",
                "Operational flexibility reduced (cannot fire problematic clients)",
            ],
            third_order=[
                "Exit risk: Acquirer discount of ~50% for concentration risk",
                f"Value impact: {_thousands(m.value_gap)} in potential exit value reduction",
                "Transaction risk: Key client departure during sale process",
            ],
            monthly_hours=0,
            monthly_dollars=int(round_half_up(monthly_risk)),
        ))

    approval = r.text("approval_frequency")
    can_deliver = team_can(r, "deliver")
    if not can_deliver or approval in ("Multiple times per day", "Daily"):
        approval_hours = {
            "Multiple times per day": 40,
            "Daily": 20,
            "Few times per week": 10,
        }.get(approval, 5)

        def yes_no(capability: str) -> str:
            return "Yes" if team_can(r, capability) else "No"

        constraints.append(Constraint(
            area="Team Autonomy",
            observation=f"Team requires owner input {approval.lower() or 'frequently'}",
            measurement=(
                f"Owner replaceability: {_n(r.number('owner_replaceability_delivery'))}/10 in delivery, "
                f"{_n(r.number('owner_replaceability_sales'))}/10 in sales"
            ),
            first_order=[
                f"{approval_hours} hours/month in approval cycles",
                f"Team capabilities: Onboarding={yes_no('onboard')}, Delivery={yes_no('deliver')}, "
                f"Sales={yes_no('close')}",
                f"Team utilization: {_n(r.number('team_utilization_score'))}/10 (capacity constraint)",
            ],
            second_order=[
                "Team skill development blocked by lack of decision-making authority",
                "Employee retention risk: Senior talent seeks autonomy",
                "Operational delays during owner unavailability",
                "Timeline slippage from approval bottlenecks",
            ],
            third_order=[
                "Organizational culture: Learned helplessness vs ownership mindset",
                "Talent acquisition: Difficulty attracting senior-level hires",
                "Business continuity: Complete dependency on owner presence",
            ],
            monthly_hours=approval_hours,
            monthly_dollars=int(round_half_up(approval_hours * m.hourly_rate)),
        ))

    recurring = r.number("revenue_recurring_pct")
    if recurring < 30:
        sales_hours_needed = int(round_half_up(m.hours_per_month * 0.4))
        constraints.append(Constraint(
            area="Revenue Model",
            observation=f"Only {_n(recurring)}% recurring revenue",
            measurement=f"{_n(100 - recurring)}% of revenue requires constant new business development",
            first_order=[
                "Constant pressure to close new deals",
                "Revenue volatility month-to-month",
                f"Sales time required: {sales_hours_needed} hrs/month to maintain revenue",
            ],
            second_order=[
                "Strategic planning impossible (uncertain cash flow)",
                "Hiring decisions constrained by revenue uncertainty",
                "Team stability at risk during slow sales periods",
                "Growth investment limited by cash flow volatility",
            ],
            third_order=[
                "Business valuation: Lower multiple for project-based revenue",
                "Exit complexity: Acquirers discount non-recurring revenue",
                "Scale limitation: Linear growth (more clients = more sales effort)",
            ],
            monthly_hours=int(round_half_up(sales_hours_needed * 0.3)),
            monthly_dollars=int(round_half_up(sales_hours_needed * 0.3 * m.hourly_rate)),
        ))

    return constraints


def dimension_narratives(score: ExitLayerScore) -> list[DimensionNarrative]:
    narratives = []
    for dimension, value in score.dimensions.ordered():
        band = narrative_band(value)
        narratives.append(DimensionNarrative(
            dimension=dimension,
            label=DIMENSION_LABELS[dimension],
            score=value,
            band=band,
            indicator=score_indicator(value),
            text=_DIMENSION_NARRATIVES[dimension][band],
        ))
    return narratives


# ---------------------------------------------------------------------------
# Section bodies
# ---------------------------------------------------------------------------

def _bullets(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


def _current_state(r: AuditResponse, m: DiagnosticMetrics) -> str:
    weekly_total = total_weekly_hours(r)
    lines = [
        "### Financial Metrics",
        f"- Monthly Revenue: {_money(m.monthly_revenue)}",
        f"- Annual Revenue: {_money(m.annual_revenue)}",
        f"- Owner Hourly Value: {_money(m.hourly_rate)}/hour",
        f"- Hours Worked/Month: {int(round_half_up(m.hours_per_month))}",
        f"- Hours Worked/Week: {_n(weekly_total)}",
        "",
        "### Operational Metrics",
        f"- Team Size: {_n(r.number('team_size_total'))} ({_n(r.number('team_ft'))} FT, "
        f"{_n(r.number('team_pt'))} PT, {_n(r.number('team_contractors'))} contractors)",
        f"- Client Count: {_n(r.number('client_count'))}",
        f"- Avg Hours/Client: {int(round_half_up(m.hours_per_client))}",
        f"- Top 3 Concentration: {_n(r.number('top3_concentration_pct'))}%",
        f"- Recurring Revenue: {_n(r.number('revenue_recurring_pct'))}%",
        f"- Churn Rate: {r.text('churn_rate_pct', 'Not tracked')}%",
        "",
        "### Time Allocation",
        "| Area | Hours/Week | Share | Target |",
        "|------|------------|-------|--------|",
    ]
    targets = (
        ("Delivery", "time_delivery_hrs", 10),
        ("Sales", "time_sales_hrs", 40),
        ("Management", "time_mgmt_hrs", 20),
        ("Strategy", "time_strategy_hrs", 15),
        ("Operations", "time_ops_hrs", 5),
    )
    for label, key, target in targets:
        hours = max(0.0, r.number(key))
        share = int(round_half_up(hours / weekly_total * 100)) if weekly_total > 0 else 0
        lines.append(f"| {label} | {_n(hours)} | {share}% | {target}% |")
    return "\n".join(lines)


def _score_breakdown(score: ExitLayerScore, narratives: list[DimensionNarrative]) -> str:
    lines = [f"**Overall Score:** {score.overall}/100", ""]
    for n in narratives:
        lines.append(f"- **{n.label}:** {n.score}/100 {n.indicator}")
    lines.append("")
    for n in narratives:
        lines.append(f"**{n.label} ({n.band}):** {n.text}")
        lines.append("")
    if score.primary_constraint is not None:
        lines.append(
            f"**Primary Constraint:** {score.primary_constraint.dimension}. "
            f"{score.primary_constraint.description}"
        )
    if score.highest_opportunity is not None:
        lines.append(
            f"**Highest Opportunity:** {score.highest_opportunity.dimension}. "
            f"{score.highest_opportunity.description}"
        )
    return "\n".join(lines).rstrip()


def _constraints_body(constraints: list[Constraint]) -> str:
    if not constraints:
        return "No primary constraints identified."
    lines = [f"Identified {len(constraints)} primary constraints affecting your business.", ""]
    for i, c in enumerate(constraints, start=1):
        lines.extend([
            f"### Constraint {i}: {c.area}",
            f"**Observation:** {c.observation}",
            "",
            f"**Measurement:** {c.measurement}",
            "",
            "**First-Order Effects (Immediate):**",
            _bullets(c.first_order),
            "",
            "**Second-Order Effects (Within 6 months):**",
            _bullets(c.second_order),
            "",
            "**Third-Order Effects (Long-term/Exit Impact):**",
            _bullets(c.third_order),
            "",
            f"**Monthly Cost:** {c.monthly_hours} hours, {_money(c.monthly_dollars)} "
            f"({_money(c.monthly_dollars * 12)}/year)",
            "",
        ])
    return "\n".join(lines).rstrip()


def _aggregate_body(constraints: list[Constraint], m: DiagnosticMetrics) -> str:
    hours = sum(c.monthly_hours for c in constraints)
    dollars = sum(c.monthly_dollars for c in constraints)
    return "\n".join([
        f"- Total Monthly Cost: {hours} hours, {_money(dollars)}",
        f"- Total Annual Cost: {hours * 12} hours, {_money(dollars * 12)}",
        f"- Exit Value Gap: {_thousands(m.value_gap)}",
        "",
        f"You are losing {_money(dollars * 12)}/year in opportunity cost, plus "
        f"{_thousands(m.value_gap)} in unrealized exit value.",
    ])


def _owner_bottleneck(r: AuditResponse) -> str:
    return "\n".join([
        "### What ONLY You Can Do (Tasks)",
        r.text("tasks_only_owner", NOT_SPECIFIED),
        "",
        "These are Week 3 build priorities. Each one needs an SOP, a checklist and a "
        "decision framework for when to escalate.",
        "",
        "### What ONLY You Can Decide",
        r.text("decisions_only_owner", NOT_SPECIFIED),
        "",
        'These need decision frameworks, not just documentation. Example: "If project value '
        '> $10K, owner approval required".',
        "",
        "### The Vacation Test (What Breaks If You Disappear for 2 Weeks)",
        r.text("vacation_breaks", NOT_SPECIFIED),
        "",
        "This is your critical failure point list. These systems must be built first.",
        "",
        "### What You WISH Someone Else Could Do",
        r.text("wish_could_delegate", NOT_SPECIFIED),
        "",
        "This is your highest pain point and priority #1 for Week 3 systematization.",
    ])


def _team_analysis(r: AuditResponse) -> str:
    utilization = r.number("team_utilization_score")
    onboard = r.text("team_can_onboard", "Unknown")
    return "\n".join([
        "### Team Composition",
        f"- Total team size: {_n(r.number('team_size_total'))}",
        f"- Full-time: {_n(r.number('team_ft'))}",
        f"- Part-time: {_n(r.number('team_pt'))}",
        f"- Contractors: {_n(r.number('team_contractors'))}",
        "",
        "### Team Capability",
        f"- Team capability score: {_n(r.number('team_capability_score'))}/10",
        f"- Team utilization score: {_n(utilization)}/10"
        + (" (team is slammed)" if utilization <= 4 else ""),
        f"- Can onboard clients: {onboard}" + (" (easy win to fix)" if onboard == "No" else ""),
        f"- Can deliver projects: {r.text('team_can_deliver', 'Unknown')}",
        f"- Can close sales: {r.text('team_can_close', 'Unknown')}",
        "",
        "### Team Autonomy Gap",
        f"- Approval frequency: {r.text('approval_frequency', NOT_SPECIFIED)}",
        f"- Decisions the team should make: {r.text('wish_team_could_decide', NOT_SPECIFIED)}",
        f"- Missing skills: {r.text('missing_skills', NOT_SPECIFIED)}",
    ])


def _scale_and_exit(r: AuditResponse, m: DiagnosticMetrics) -> str:
    client_count = r.number("client_count") or 1
    weekly_needed = int(round_half_up(m.weekly_hours_needed))
    max_clients = int(round_half_up(SUSTAINABLE_WEEKLY_HOURS / (m.hours_per_client or 1)))
    if m.scalable:
        feasibility = (
            f"Technically possible but at capacity limit: {weekly_needed} hours/week is near "
            "the burnout threshold, with no buffer for unexpected issues."
        )
    else:
        feasibility = (
            f"Not feasible without structural changes: {weekly_needed} hours/week exceeds "
            f"the sustainable workload ({SUSTAINABLE_WEEKLY_HOURS} hrs max). Systematize before scaling."
        )
    return "\n".join([
        "### What Happens When You Add 5 More Clients?",
        f"- Current clients: {_n(client_count)}",
        f"- Owner hours/month: {int(round_half_up(m.hours_per_month))}",
        f"- Hours per client (avg): {int(round_half_up(m.hours_per_client))}",
        f"- Additional hours needed: +{int(round_half_up(m.additional_hours_for_5_clients))}",
        f"- Hours per week with +5 clients: {weekly_needed}",
        "",
        feasibility,
        "",
        f"Current max capacity: {max_clients} clients at {SUSTAINABLE_WEEKLY_HOURS} hrs/week; "
        f"remaining capacity: {max(0, max_clients - int(client_count))} more clients.",
        "",
        "### Exit Value",
        f"- Current: {_thousands(m.annual_revenue)} revenue x {m.current_multiple:.1f} = "
        f"{_thousands(m.current_exit_value)}",
        f"- Target: {_thousands(m.annual_revenue)} revenue x {m.target_multiple} = "
        f"{_thousands(m.target_exit_value)}",
        f"- **Value Gap:** {_thousands(m.value_gap)}",
        "",
        f"Multiple improvement path: {m.current_multiple:.1f}x to 3.0x by documenting core "
        "processes, 3.0x to 4.0x by building team autonomy, 4.0x to 5.0x by creating a "
        "productized offering.",
    ])


def _recommendations(score: ExitLayerScore) -> str:
    lines = ["### Week 2-4: System Development"]
    for rec in score.week2to4:
        lines.append(f"**Priority {rec.priority}: {rec.system}**")
        lines.append(f"- Rationale: {rec.why}")
        lines.append(f"- Impact: {rec.impact}")
        lines.append("")
    lines.extend([
        "### Post-Sprint: Productization Path",
        score.product_idea,
        "",
        _numbered(score.validation_steps),
    ])
    return "\n".join(lines)


def _their_words(r: AuditResponse) -> str:
    prompts = (
        ("Magic Wand Fix (What They'd Change First)", "magic_wand_fix"),
        ("What They're Most Excited About", "sprint_excitement"),
        ("What They're Most Nervous About", "sprint_anxiety"),
        ("Their Biggest Hope", "sprint_hope"),
        ("Fear About Stepping Back From Delivery", "delivery_exit_fear"),
        ("12-Month Vision", "vision_12mo"),
        ("3-Year Vision", "vision_3yr"),
    )
    lines: list[str] = []
    for title, key in prompts:
        lines.append(f"### {title}")
        lines.append(r.text(key, NOT_SPECIFIED))
        lines.append("")
    return "\n".join(lines).rstrip()


def generate_diagnostic_report(data: Any, score: ExitLayerScore) -> DiagnosticReport:
    """Build the diagnostic report for one client from answers and score."""
    r = data if isinstance(data, AuditResponse) else AuditResponse(data)
    metrics = calculate_diagnostic_metrics(r, score)
    constraints = identify_constraints(r, metrics)
    narratives = dimension_narratives(score)

    sections = [
        ReportSection("Current State", _current_state(r, metrics)),
        ReportSection("Score Breakdown", _score_breakdown(score, narratives)),
        ReportSection("Constraint Analysis", _constraints_body(constraints)),
        ReportSection("Aggregate Constraint Impact", _aggregate_body(constraints, metrics)),
        ReportSection("Owner Bottleneck Analysis", _owner_bottleneck(r)),
        ReportSection("Team & Capability Analysis", _team_analysis(r)),
        ReportSection("Scale & Exit Analysis", _scale_and_exit(r, metrics)),
        ReportSection(
            "Critical Findings",
            _numbered(score.critical_findings) or "No critical findings.",
        ),
        ReportSection("Quick Wins", _numbered(score.quick_wins) or "No quick wins identified."),
        ReportSection("Recommendations", _recommendations(score)),
        ReportSection("Their Words", _their_words(r)),
    ]

    return DiagnosticReport(
        company_name=r.text("company_name", "Unknown"),
        contact_name=r.text("full_name") or r.text("contact_name", "Unknown"),
        overall=score.overall,
        metrics=metrics,
        constraints=constraints,
        narratives=narratives,
        sections=sections,
    )
