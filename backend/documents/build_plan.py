"""Build plan markdown for the operator: ROI, coverage, weekly plan, systems."""

from __future__ import annotations

from backend.engine.numeric import format_currency, round_half_up
from backend.engine.signals import WEEKS_PER_MONTH
from backend.models.answers import format_answer_number
from backend.models.enums import Priority
from backend.models.score import ExitLayerScore
from backend.models.system_spec import System, SystemSpecOutput

SPRINT_COST = 10_000
WEEKS_PER_YEAR = 52
PER_SYSTEM_ROWS = 10

# (priority, heading, detail level)
SYSTEM_DETAIL_GROUPS: tuple[tuple[Priority, str, str], ...] = (
    (Priority.P0, "P0 - Build Immediately", "full"),
    (Priority.P1, "P1 - Week 2-3", "standard"),
    (Priority.P2, "P2 - Week 4 / Post-Sprint", "brief"),
    (Priority.P3, "P3 - Backlog", "brief"),
)


def _n(value: float) -> str:
    return format_answer_number(value)


def _fixed(value: float) -> str:
    return f"{round_half_up(value, 1):.1f}"


def _system_detail(system: System, level: str) -> list[str]:
    lines = [f"#### {system.name}", f"- **Type:** {system.type.value}"]
    if level != "brief":
        lines.append(f"- **Category:** {system.category.value}")
        lines.append(f"- **Build Time:** {system.estimated_build_time}")
        lines.append(f"- **Hours Reclaimed:** {_n(system.owner_time_reclaimed)}/week")
    lines.append(f"- **Description:** {system.description}")
    if level == "full":
        lines.append(f"- **Triggered By:** {', '.join(system.triggered_by)}")
        if system.integrations:
            lines.append(f"- **Integrations:** {', '.join(system.integrations)}")
    lines.append("")
    return lines


def render_build_plan(spec: SystemSpecOutput, score: ExitLayerScore, sprint_cost: float = SPRINT_COST) -> str:
    """Render the build plan.

    Every system appears exactly once under "Systems Detail", grouped by its
    own priority.
    """
    lines: list[str] = []
    summary = spec.summary
    metrics = score.financial_metrics

    lines.append("# ExitLayer Build Plan")
    lines.append("")
    lines.append(f"**Client:** {spec.client_info.company}")
    if spec.client_info.generated_at:
        lines.append(f"**Generated:** {spec.client_info.generated_at[:10]}")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append(f"- **Total Systems to Build:** {summary.total_systems_to_build}")
    lines.append(f"- **P0 (Immediate):** {summary.p0_systems}")
    lines.append(f"- **P1 (Week 2-3):** {summary.p1_systems}")
    lines.append(f"- **Estimated Build Hours:** {_n(round_half_up(summary.estimated_build_hours, 2))}")
    lines.append(f"- **Weekly Hours Reclaimed:** {_n(summary.weekly_hours_reclaimed)}")
    lines.append(f"- **Target Automation Coverage:** {summary.automation_coverage}%")
    lines.append("")

    # ROI
    hourly = metrics.owner_hourly_value
    weekly_hours = summary.weekly_hours_reclaimed
    weekly_value = weekly_hours * hourly
    monthly_value = weekly_value * WEEKS_PER_MONTH
    annual_value = weekly_value * WEEKS_PER_YEAR
    roi_multiple = annual_value / sprint_cost if sprint_cost else 0.0
    payback = f"{_fixed(sprint_cost / weekly_value)} weeks" if weekly_value > 0 else "n/a"

    lines.append("## ROI Analysis")
    lines.append("")
    lines.append("### Your Time Value")
    lines.append(f"- **Owner Hourly Value:** {format_currency(hourly)}/hour")
    lines.append(
        f"  - *Based on {format_currency(metrics.monthly_revenue)}/month revenue / "
        f"{_n(metrics.total_weekly_hours)} hrs/week*"
    )
    lines.append("")
    lines.append("### Time Reclaimed")
    lines.append(f"- **Weekly:** {_n(weekly_hours)} hours = {format_currency(weekly_value)}/week")
    lines.append(
        f"- **Monthly:** {int(round_half_up(weekly_hours * WEEKS_PER_MONTH))} hours = "
        f"{format_currency(monthly_value)}/month"
    )
    lines.append(
        f"- **Annual:** {int(round_half_up(weekly_hours * WEEKS_PER_YEAR))} hours = "
        f"{format_currency(annual_value)}/year"
    )
    lines.append("")
    lines.append("### Sprint ROI")
    lines.append(f"- **Sprint Investment:** {format_currency(sprint_cost)}")
    lines.append(f"- **First Year Value:** {format_currency(annual_value)}")
    lines.append(f"- **ROI Multiple:** {_fixed(roi_multiple)}x return")
    lines.append(f"- **Payback Period:** {payback}")
    lines.append("")
    lines.append("### Per-System Value")
    lines.append("")
    lines.append("| System | Hours/Week | Weekly Value | Annual Value |")
    lines.append("|--------|------------|--------------|--------------|")
    by_value = sorted(
        (s for s in spec.systems if s.owner_time_reclaimed > 0),
        key=lambda s: s.owner_time_reclaimed,
        reverse=True,
    )
    for system in by_value[:PER_SYSTEM_ROWS]:
        system_weekly = system.owner_time_reclaimed * hourly
        lines.append(
            f"| {system.name[:40]} | {_n(system.owner_time_reclaimed)} | "
            f"{format_currency(system_weekly)} | {format_currency(system_weekly * WEEKS_PER_YEAR)} |"
        )
    lines.append("")

    lines.append("## Automation Coverage")
    lines.append("")
    for area in spec.automation_coverage.breakdown:
        lines.append(f"### {area.area}")
        lines.append(f"- Current: {area.current_state}")
        lines.append(f"- Target: {area.target_state}")
        lines.append(f"- Automation: {area.automation_percentage}%")
        if area.systems_required:
            lines.append(f"- Systems: {', '.join(area.systems_required)}")
        lines.append("")

    lines.append("## Week-by-Week Build Plan")
    lines.append("")
    for week in spec.week_by_week_build_plan:
        lines.append(f"### Week {week.week}: {week.focus}")
        lines.append("")
        lines.append("**Systems:**")
        lines.extend(f"- {name}" for name in week.systems)
        lines.append("")
        lines.append("**Deliverables:**")
        lines.extend(f"- {item}" for item in week.deliverables)
        lines.append("")

    lines.append("## Systems Detail")
    lines.append("")
    for priority, heading, level in SYSTEM_DETAIL_GROUPS:
        group = [s for s in spec.systems if s.priority == priority]
        if not group:
            continue
        lines.append(f"### {heading}")
        lines.append("")
        for system in group:
            lines.extend(_system_detail(system, level))

    lines.append("## Integration Requirements")
    lines.append("")
    for integration in spec.integrations:
        lines.append(f"### {integration.tool_category}: {integration.tool}")
        lines.append(f"- **Required:** {'Yes' if integration.required else 'No'}")
        lines.append(f"- **Purpose:** {integration.purpose}")
        lines.append(f"- **API Available:** {'Yes' if integration.api_available else 'No'}")
        if not integration.api_available or integration.tool == "None specified":
            lines.append(f"- **Alternative:** {integration.alternative_if_missing}")
        lines.append("")

    if spec.gaps:
        lines.append("## Information Gaps")
        lines.append("")
        lines.append("*These items need clarification in discovery call:*")
        lines.append("")
        for gap in spec.gaps:
            lines.append(f"### {gap.field}")
            lines.append(f"- **Priority:** {gap.priority.value}")
            lines.append(f"- **Reason:** {gap.reason}")
            lines.append("")

    return "\n".join(lines)
