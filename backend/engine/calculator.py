"""ExitLayer score calculator.

Maps a questionnaire into five 0-100 dimension scores, a weighted overall
score, financial metrics and a short list of findings and recommendations.
Every function here is pure and total: unanswered fields fall back to
neutral values and nothing raises for a well-formed answer mapping.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from backend.engine.numeric import clamp_score, round_half_up
from backend.engine.signals import (
    WEEKS_PER_MONTH,
    delivery_pct,
    percent,
    team_can,
    total_weekly_hours,
)
from backend.models.answers import AuditResponse, format_answer_number
from backend.models.enums import (
    DIMENSION_LABELS,
    Dimension,
    ScoreLevel,
)
from backend.models.score import (
    DimensionHighlight,
    DimensionScores,
    ExitLayerScore,
    FinancialMetrics,
    Recommendation,
)

logger = logging.getLogger(__name__)

DIMENSION_WEIGHTS: dict[Dimension, float] = {
    Dimension.LEVERAGE: 0.30,
    Dimension.PRODUCT_READINESS: 0.25,
    Dimension.REVENUE_RISK: 0.20,
    Dimension.EQUITY_POTENTIAL: 0.15,
    Dimension.IMPLEMENTATION_CAPACITY: 0.10,
}

NEUTRAL_SCORE = 50

# Fields read by the dimension formulas. A response answering none of them
# gets the neutral score on every dimension.
SCORING_FIELDS = frozenset({
    "projects_requiring_owner_pct",
    "time_delivery_hrs",
    "time_sales_hrs",
    "time_mgmt_hrs",
    "time_ops_hrs",
    "time_strategy_hrs",
    "team_can_onboard",
    "team_can_deliver",
    "team_can_close",
    "documented_pct",
    "template_types",
    "has_deliverable_templates",
    "systematization_score",
    "has_proprietary_method",
    "top3_concentration_pct",
    "churn_rate_pct",
    "revenue_recurring_pct",
    "acquisition_channels",
    "delivery_consistency",
    "positioning_clarity",
    "has_audience",
    "creates_content",
    "team_utilization_score",
    "team_capability_score",
    "team_trust_level",
})

_CONSTRAINT_DESCRIPTIONS: dict[Dimension, str] = {
    Dimension.LEVERAGE: "You ARE the bottleneck. Most projects require your direct involvement, limiting scale.",
    Dimension.EQUITY_POTENTIAL: "Limited documented IP. Your business value is tied to your personal labor.",
    Dimension.REVENUE_RISK: "Revenue is fragile. High client concentration or churn creates instability.",
    Dimension.PRODUCT_READINESS: "Not ready for productization. Services lack repeatability or clear positioning.",
    Dimension.IMPLEMENTATION_CAPACITY: "Team is maxed out. No bandwidth to implement new systems.",
}

_OPPORTUNITY_DESCRIPTIONS: dict[Dimension, str] = {
    Dimension.LEVERAGE: "Strong leverage already. Team is capable of autonomous delivery.",
    Dimension.EQUITY_POTENTIAL: "Strong IP foundation. Well-documented systems and processes.",
    Dimension.REVENUE_RISK: "Revenue is stable. Diversified client base and strong retention.",
    Dimension.PRODUCT_READINESS: "Closest to productization. Clear positioning and repeatable services.",
    Dimension.IMPLEMENTATION_CAPACITY: "Bandwidth to execute. Team has capacity and capability.",
}


def _as_response(data: Union[AuditResponse, Mapping[str, Any], None]) -> AuditResponse:
    if isinstance(data, AuditResponse):
        return data
    return AuditResponse(data)


# ---------------------------------------------------------------------------
# Dimension scores
# ---------------------------------------------------------------------------

def leverage_score(r: AuditResponse) -> int:
    """Owner dependency + delivery time share + team replaceability + autonomy."""
    project_dependency = 40 * (1 - percent(r, "projects_requiring_owner_pct") / 100)
    delivery_time = 30 * (1 - delivery_pct(r) / 100)

    can_onboard = team_can(r, "onboard")
    can_deliver = team_can(r, "deliver")
    can_close = team_can(r, "close")
    replaceability = (sum([can_onboard, can_deliver, can_close]) / 3) * 20
    autonomy = (3.3 if can_onboard else 0) + (3.3 if can_deliver else 0) + (3.4 if can_close else 0)

    return clamp_score(project_dependency + delivery_time + replaceability + autonomy)


def equity_potential_score(r: AuditResponse) -> int:
    """Documentation + templates + systematization + proprietary method."""
    documentation = percent(r, "documented_pct") / 100 * 40

    template_types = r.selections("template_types")
    if template_types:
        templates = min(len(template_types) / 5, 1) * 15
    else:
        templates = {"Yes": 15, "Some": 7.5}.get(r.text("has_deliverable_templates"), 0)

    systematization = ((r.number("systematization_score") or 1) / 10) * 30
    proprietary = {"Yes": 15, "Sort of": 7.5}.get(r.text("has_proprietary_method"), 0)

    return clamp_score(documentation + templates + systematization + proprietary)


def revenue_risk_score(r: AuditResponse) -> int:
    """Starts at 100 and subtracts concentration, churn, project and channel risk."""
    score = 100.0
    score -= min(percent(r, "top3_concentration_pct") / 100, 0.7) * (40 / 0.7)

    churn = r.optional_number("churn_rate_pct")
    if churn is None:
        score -= 10
    else:
        score -= min(max(churn, 0) / 100, 0.5) * (30 / 0.5)

    score -= (1 - percent(r, "revenue_recurring_pct") / 100) * 20

    channels = r.selections("acquisition_channels")
    if channels and channels[0] == "Referrals from past clients":
        score -= 10

    return clamp_score(score)


def product_readiness_score(r: AuditResponse) -> int:
    """Repeatability + methodology + positioning + audience."""
    repeatability = ((r.number("delivery_consistency") or 1) / 10) * 30
    methodology = {"Yes": 25, "Sort of": 12.5}.get(r.text("has_proprietary_method"), 0)
    positioning = ((r.number("positioning_clarity") or 1) / 10) * 25

    audience = 0
    if r.text("has_audience") in ("Yes", "Small audience"):
        audience = 20 if r.equals("creates_content", "Yes, consistently") else 10

    return clamp_score(repeatability + methodology + positioning + audience)


def implementation_capacity_score(r: AuditResponse) -> int:
    """Workload headroom + team capability + trust as a readiness proxy."""
    workload = ((r.number("team_utilization_score") or 1) / 10) * 40
    capability = ((r.number("team_capability_score") or 1) / 10) * 30
    readiness = ((r.number("team_trust_level") or 5) / 10) * 30
    return clamp_score(workload + capability + readiness)


def has_scoring_input(r: AuditResponse) -> bool:
    return any(r.has(key) for key in SCORING_FIELDS)


def calculate_dimensions(r: AuditResponse) -> DimensionScores:
    if not has_scoring_input(r):
        return DimensionScores(
            leverage=NEUTRAL_SCORE,
            equity_potential=NEUTRAL_SCORE,
            revenue_risk=NEUTRAL_SCORE,
            product_readiness=NEUTRAL_SCORE,
            implementation_capacity=NEUTRAL_SCORE,
        )
    return DimensionScores(
        leverage=leverage_score(r),
        equity_potential=equity_potential_score(r),
        revenue_risk=revenue_risk_score(r),
        product_readiness=product_readiness_score(r),
        implementation_capacity=implementation_capacity_score(r),
    )


def overall_score(dimensions: DimensionScores) -> int:
    weighted = sum(dimensions.get(d) * w for d, w in DIMENSION_WEIGHTS.items())
    return clamp_score(weighted)


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

def primary_constraint(dimensions: DimensionScores) -> DimensionHighlight:
    """Lowest-scoring dimension; the earlier dimension wins a tie."""
    lowest_key, lowest = dimensions.ordered()[0]
    for key, score in dimensions.ordered()[1:]:
        if score < lowest:
            lowest_key, lowest = key, score
    return DimensionHighlight(
        key=lowest_key,
        dimension=DIMENSION_LABELS[lowest_key],
        score=lowest,
        description=_CONSTRAINT_DESCRIPTIONS[lowest_key],
    )


def highest_opportunity(dimensions: DimensionScores) -> DimensionHighlight:
    """Highest-scoring dimension; the earlier dimension wins a tie."""
    highest_key, highest = dimensions.ordered()[0]
    for key, score in dimensions.ordered()[1:]:
        if score > highest:
            highest_key, highest = key, score
    return DimensionHighlight(
        key=highest_key,
        dimension=DIMENSION_LABELS[highest_key],
        score=highest,
        description=_OPPORTUNITY_DESCRIPTIONS[highest_key],
    )


def critical_findings(r: AuditResponse) -> list[str]:
    findings: list[str] = []

    owner_pct = r.number("projects_requiring_owner_pct")
    if owner_pct >= 70:
        findings.append(
            f"{format_answer_number(owner_pct)}% of projects require YOUR direct involvement. "
            "This is unsustainable."
        )

    share = int(round_half_up(delivery_pct(r)))
    if share >= 40:
        findings.append(f"You spend {share}% of your time in delivery. You ARE the product.")

    if not team_can(r, "deliver") and not team_can(r, "close"):
        findings.append(
            "Your team cannot deliver or close sales without you. The business can't run without you."
        )

    top3 = r.number("top3_concentration_pct")
    if top3 >= 50:
        findings.append(
            f"Top 3 clients = {format_answer_number(top3)}% of revenue. Losing one could be catastrophic."
        )

    churn = r.number("churn_rate_pct")
    if churn >= 30:
        findings.append(
            f"{format_answer_number(churn)}% annual churn. This indicates a delivery or value problem."
        )

    recurring = r.number("revenue_recurring_pct")
    if recurring < 30:
        findings.append(
            f"Only {format_answer_number(recurring)}% recurring revenue. "
            "You're constantly hunting for new business."
        )

    documented = r.number("documented_pct")
    if documented < 30:
        findings.append(
            f"Only {format_answer_number(documented)}% of processes documented. "
            "Your business can't scale or sell."
        )

    positioning = r.number("positioning_clarity")
    if positioning <= 5:
        findings.append(
            f"Positioning clarity: {format_answer_number(positioning)}/10. "
            "Unclear positioning makes growth hard."
        )

    utilization = r.number("team_utilization_score")
    if utilization <= 3:
        findings.append(f"Team utilization: {format_answer_number(utilization)}/10. Everyone is slammed.")

    return findings[:5]


def quick_wins(r: AuditResponse) -> list[str]:
    wins: list[str] = []
    if not r.equals("has_kickoff_checklist", "Yes"):
        wins.append("Build project kickoff checklist (30 min build, immediate impact)")
    if not r.equals("has_qc_checklist", "Yes"):
        wins.append("Build QA/quality control checklist (30 min build, delegate quality assurance)")
    if not r.equals("has_deliverable_templates", "Yes"):
        wins.append("Build client deliverable templates (1 hour build, saves 5+ hours/week)")
    if not r.equals("onboarding_documented", "Yes"):
        wins.append("Document client onboarding process (2 hours, enables team autonomy)")
    if r.has("magic_wand_fix"):
        wins.append(f'Address your #1 pain point: "{r.text("magic_wand_fix")[:60]}..."')
    return wins[:5]


def week2to4_recommendations(
    r: AuditResponse,
    dimensions: DimensionScores,
    constraint: Optional[DimensionHighlight],
) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    constraint_key = constraint.key if constraint else None
    focus = r.text("top_systematize_need")

    if constraint_key == Dimension.LEVERAGE or dimensions.leverage < 50:
        recommendations.append(Recommendation(
            priority=1,
            system=f"Systematize: {focus or 'core delivery process'}",
            why="Owner delivery dependency is your biggest bottleneck",
            impact="Reclaim time for growth activities",
        ))
        if r.has("decisions_only_owner"):
            recommendations.append(Recommendation(
                priority=2,
                system="Build decision frameworks for key judgment calls",
                why="Team needs your approval too frequently",
                impact="Enable team autonomy, reduce approval dependency",
            ))

    if constraint_key == Dimension.EQUITY_POTENTIAL or dimensions.equity_potential < 50:
        recommendations.append(Recommendation(
            priority=len(recommendations) + 1,
            system=f"Document {focus or 'core processes'}",
            why=f"Only {format_answer_number(r.number('documented_pct'))}% of processes documented",
            impact="Create sellable IP, reduce key person dependency",
        ))

    if dimensions.product_readiness >= 60:
        recommendations.append(Recommendation(
            priority=len(recommendations) + 1,
            system=f'Package "{r.text("core_service", "your core service")}" as productized offering',
            why="High repeatability and clear positioning ready for scale",
            impact="Create scalable revenue stream",
        ))

    if not r.equals("has_kickoff_checklist", "Yes"):
        recommendations.append(Recommendation(
            priority=len(recommendations) + 1,
            system="Project kickoff checklist",
            why="Quick win - standardizes project starts",
            impact="Consistent delivery, faster onboarding",
        ))

    return recommendations[:5]


def product_idea(r: AuditResponse) -> str:
    core_service = r.text("core_service", "your core service")
    if r.equals("has_proprietary_method", "Yes") and r.has("proprietary_method_description"):
        return (
            f'Productize your "{r.text("proprietary_method_description")}" methodology applied to '
            f"{core_service}. Package it as a fixed-scope offering with your internal systems "
            "as the delivery engine."
        )
    return (
        f'Productize "{core_service}" as a standardized offering. Use the internal systems we '
        "build as the foundation for predictable, scalable delivery."
    )


def validation_steps(r: AuditResponse) -> list[str]:
    service = r.text("core_service", "your core service")
    return [
        f'Validate demand: Talk to 5 ideal clients about packaged "{service}" offering',
        "Price test: Run pricing experiments (survey or direct conversations)",
        "Pilot offer: Run 3 clients through productized version, gather feedback",
        "Refine delivery: Optimize internal systems based on pilot learnings",
        "Launch: Public announcement, waitlist, first cohort",
    ]


def financial_metrics(r: AuditResponse) -> FinancialMetrics:
    """Revenue, owner time value and exit-multiple gap.

    Owner hourly value is monthly revenue divided by weekly owner hours,
    guarded to 0 when no hours were reported.
    """
    annual = r.optional_number("revenue_12mo")
    monthly_avg = r.optional_number("revenue_monthly_avg")
    if annual is None and monthly_avg is not None:
        annual = monthly_avg * 12
    annual_revenue = max(0.0, annual or 0.0)
    monthly_revenue = round_half_up(annual_revenue / 12)

    weekly_hours = total_weekly_hours(r)
    hourly = monthly_revenue / weekly_hours if weekly_hours > 0 else 0.0
    owner_hourly_value = round_half_up(max(0.0, hourly), 2)

    owner_share = percent(r, "projects_requiring_owner_pct") / 100
    wasted_hours = max(0.0, r.number("time_delivery_hrs")) * owner_share
    wasted_value = wasted_hours * WEEKS_PER_MONTH * owner_hourly_value

    current_multiple = 2 + (1 - owner_share) * 2
    current_exit_value = annual_revenue * current_multiple
    target_exit_value = annual_revenue * 5

    return FinancialMetrics(
        monthly_revenue=monthly_revenue,
        annual_revenue=annual_revenue,
        owner_hourly_value=owner_hourly_value,
        total_weekly_hours=weekly_hours,
        wasted_value=round_half_up(wasted_value),
        current_exit_multiple=round_half_up(current_multiple, 1),
        current_exit_value=round_half_up(current_exit_value),
        target_exit_value=round_half_up(target_exit_value),
        value_gap=round_half_up(target_exit_value - current_exit_value),
    )


def calculate_exit_layer_score(
    data: Union[AuditResponse, Mapping[str, Any], None],
) -> ExitLayerScore:
    """Score one questionnaire. Pure; never raises for a mapping input."""
    r = _as_response(data)
    dimensions = calculate_dimensions(r)

    constraint: Optional[DimensionHighlight] = None
    opportunity: Optional[DimensionHighlight] = None
    if has_scoring_input(r):
        constraint = primary_constraint(dimensions)
        opportunity = highest_opportunity(dimensions)
    else:
        logger.debug("No scoring inputs answered; dimensions set to %d", NEUTRAL_SCORE)

    return ExitLayerScore(
        overall=overall_score(dimensions),
        dimensions=dimensions,
        financial_metrics=financial_metrics(r),
        primary_constraint=constraint,
        highest_opportunity=opportunity,
        critical_findings=critical_findings(r),
        quick_wins=quick_wins(r),
        week2to4=week2to4_recommendations(r, dimensions, constraint),
        product_idea=product_idea(r),
        validation_steps=validation_steps(r),
    )


# ---------------------------------------------------------------------------
# Interpretation helpers
# ---------------------------------------------------------------------------

def score_level(score: float) -> ScoreLevel:
    if score <= 30:
        return ScoreLevel.RED
    if score <= 60:
        return ScoreLevel.YELLOW
    return ScoreLevel.GREEN


def overall_interpretation(score: float) -> str:
    if score <= 40:
        return "Crisis mode. Multiple critical issues need immediate attention."
    if score <= 55:
        return "Significant gaps. Major improvements needed before productization."
    if score <= 70:
        return "On track. Good foundation, need to address key bottlenecks."
    if score <= 85:
        return "Strong position. Ready for productization with minor refinements."
    return "Exceptional. You have strong systems and clear path to scale."
