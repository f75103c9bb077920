"""Valuation quiz engine: SDE x multiple.

SDE (seller's discretionary earnings) = revenue x profit margin + owner pay.
The exit multiple starts from a base of 2.5 and moves with seven factors;
each factor also has a "potential" adjustment describing where it lands once
the business is systematized.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from backend.engine.numeric import clamp, round_half_up
from backend.models.answers import AuditResponse
from backend.models.serialize import to_camel_dict

BASE_MULTIPLE = 2.5
MIN_MULTIPLE = 1.0
MAX_MULTIPLE = 5.0
TOO_EARLY_REVENUE = 300_000

MARGIN_MAP: dict[str, float] = {
    "Less than 10%": 0.05,
    "10-20%": 0.15,
    "20-30%": 0.25,
    "30-40%": 0.35,
    "40%+": 0.50,
    "Not sure": 0.25,
}
DEFAULT_MARGIN = 0.25

NOT_ANSWERED = "Not answered"


@dataclass(frozen=True)
class FactorDefinition:
    """How one quiz answer moves the exit multiple.

    ``adjustments`` maps answer -> (multiple adjustment, severity). The
    description tier is picked from the current adjustment: at or below
    ``poor_max`` uses the first text, below ``moderate_below`` the second,
    otherwise the third.
    """

    id: str
    name: str
    answer_field: str
    adjustments: dict[str, tuple[float, str]]
    fallback: tuple[float, str]
    potential: float
    descriptions: tuple[str, str, str]
    poor_max: float
    moderate_below: float
    potential_by_answer: dict[str, float] = field(default_factory=dict)
    action: str = ""
    action_description: str = ""

    def potential_for(self, answer: str) -> float:
        return self.potential_by_answer.get(answer, self.potential)

    def describe(self, adjustment: float) -> str:
        if adjustment <= self.poor_max:
            return self.descriptions[0]
        if adjustment < self.moderate_below:
            return self.descriptions[1]
        return self.descriptions[2]


FACTORS: tuple[FactorDefinition, ...] = (
    FactorDefinition(
        id="owner-dependency",
        name="Owner Dependency",
        answer_field="without_you",
        adjustments={
            "Everything stops. The business IS me.": (-1.0, "critical"),
            "Major problems — clients would notice": (-0.5, "critical"),
            "Some things would slip, but it'd survive": (0.0, "moderate"),
            "It would run fine without me": (0.5, "good"),
        },
        fallback=(-0.5, "moderate"),
        potential=0.5,
        poor_max=-0.5,
        moderate_below=0.5,
        descriptions=(
            "Your business can't function without you. Acquirers see this as their biggest risk.",
            "Some dependency remains. Reducing it further would increase your multiple.",
            "Low owner dependency. This is what acquirers want to see.",
        ),
        action="Remove yourself as the delivery bottleneck",
        action_description=(
            "Build systems and train your team so the business runs without your daily involvement."
        ),
    ),
    FactorDefinition(
        id="revenue-model",
        name="Revenue Model",
        answer_field="revenue_model",
        adjustments={
            "Mostly project-based": (-0.3, "moderate"),
            "Mix of projects and retainers": (0.0, "moderate"),
            "Mostly retainers / recurring": (0.4, "good"),
        },
        fallback=(0.0, "moderate"),
        potential=0.0,
        potential_by_answer={
            "Mostly retainers / recurring": 0.4,
            "Mix of projects and retainers": 0.4,
        },
        poor_max=-0.3,
        moderate_below=0.4,
        descriptions=(
            "Project-based revenue means starting from zero every month. Retainers are valued far higher.",
            "Mix of project and recurring. Moving toward more retainers would boost your multiple.",
            "Strong recurring revenue. This makes your business predictable and valuable.",
        ),
        action="Shift from project-based to recurring revenue",
        action_description=(
            "Restructure offerings into retainer packages that create predictable monthly income."
        ),
    ),
    FactorDefinition(
        id="client-concentration",
        name="Client Concentration",
        answer_field="top_client_pct",
        adjustments={
            "More than 50%": (-0.5, "critical"),
            "25-50%": (-0.3, "moderate"),
            "10-25%": (0.0, "moderate"),
            "Less than 10%": (0.2, "good"),
        },
        fallback=(0.0, "moderate"),
        potential=0.2,
        potential_by_answer={"More than 50%": -0.3, "25-50%": 0.0},
        poor_max=-0.3,
        moderate_below=0.2,
        descriptions=(
            "Losing your top client could be catastrophic. Acquirers price this risk in heavily.",
            "Moderate concentration. Diversifying would reduce risk and increase your multiple.",
            "Well-diversified client base. Low risk for acquirers.",
        ),
        action="Diversify your client base",
        action_description=(
            "Reduce dependence on top clients by systematizing lead generation and sales."
        ),
    ),
    FactorDefinition(
        id="documentation",
        name="Documentation & Systems",
        answer_field="documented_level",
        adjustments={
            "Nothing is documented": (-0.4, "critical"),
            "A few rough notes here and there": (-0.2, "moderate"),
            "Most processes have some documentation": (0.2, "moderate"),
            "Fully documented with SOPs and templates": (0.4, "good"),
        },
        fallback=(-0.2, "moderate"),
        potential=0.4,
        poor_max=-0.2,
        moderate_below=0.4,
        descriptions=(
            "Without documentation, your business knowledge dies with you. Nothing to transfer in a sale.",
            "Some documentation exists. Full SOPs would significantly increase transferability.",
            "Fully documented. This is a major asset in any acquisition.",
        ),
        action="Document all processes into transferable SOPs",
        action_description=(
            "Create standard operating procedures so anyone can run your delivery without "
            "tribal knowledge."
        ),
    ),
    FactorDefinition(
        id="proprietary-ip",
        name="Proprietary IP",
        answer_field="has_proprietary_method",
        adjustments={
            "No": (-0.2, "moderate"),
            "Sort of": (0.1, "moderate"),
            "Yes": (0.4, "good"),
        },
        fallback=(-0.1, "moderate"),
        potential=0.4,
        poor_max=-0.1,
        moderate_below=0.4,
        descriptions=(
            "No differentiated methodology. You're selling commoditized labor, and labor is what AI replaces.",
            "You have something unique but it's not formalized. Formalizing it creates sellable IP.",
            "Strong proprietary methodology. This is what acquirers pay a premium for.",
        ),
        action="Formalize your methodology into named IP",
        action_description=(
            "Extract and package your unique approach into a defined, repeatable framework."
        ),
    ),
    FactorDefinition(
        id="delivery-involvement",
        name="Delivery Involvement",
        answer_field="owner_project_involvement",
        adjustments={
            "Nearly all (90%+)": (-0.3, "critical"),
            "Most (70-90%)": (-0.2, "critical"),
            "About half (40-70%)": (-0.1, "moderate"),
            "Some (20-40%)": (0.1, "moderate"),
            "Few or none (<20%)": (0.3, "good"),
        },
        fallback=(-0.1, "moderate"),
        potential=0.3,
        poor_max=-0.2,
        moderate_below=0.1,
        descriptions=(
            "You're in the weeds on most projects. Your capacity limits the business's capacity.",
            "You're still involved in too many projects. Delegation would free you for growth work.",
            "Low delivery involvement. Your team handles execution well.",
        ),
        action="Extract yourself from project delivery",
        action_description=(
            "Build delivery systems and train your team to execute without your direct involvement."
        ),
    ),
    FactorDefinition(
        id="sales-dependency",
        name="Sales Dependency",
        answer_field="owner_sales_pct",
        adjustments={
            "I close all of them (100%)": (-0.3, "critical"),
            "I close most (75%+)": (-0.2, "critical"),
            "About half (50%)": (0.0, "moderate"),
            "My team closes most (<25%)": (0.2, "good"),
            "I don't do sales": (0.3, "good"),
        },
        fallback=(-0.1, "moderate"),
        potential=0.2,
        poor_max=-0.2,
        moderate_below=0.2,
        descriptions=(
            "You're the only one who can close deals. Growth is capped by your calendar.",
            "You're still too involved in sales. A sales system would unlock growth.",
            "Sales doesn't depend on you. This is scalable.",
        ),
        action="Systematize your sales process",
        action_description=(
            "Document your sales methodology so others can close deals using your approach."
        ),
    ),
)


@dataclass(frozen=True)
class MultipleFactor:
    id: str
    name: str
    current_adjustment: float
    potential_adjustment: float
    dollar_impact: int
    description: str
    user_answer: str
    severity: str


@dataclass(frozen=True)
class ActionItem:
    rank: int
    action: str
    dollar_impact: int
    factor_id: str
    description: str


@dataclass(frozen=True)
class ValuationResult:
    current_valuation: int
    potential_valuation: int
    valuation_gap: int
    sde: int
    annual_revenue: float
    annual_profit: int
    owner_comp: float
    current_multiple: float
    potential_multiple: float
    factors: list[MultipleFactor]
    action_items: list[ActionItem]
    owner_hours_per_week: float
    team_size: float
    client_count: float
    owner_project_involvement: str
    owner_sales_pct: str
    approval_frequency: str
    stage: int
    stage_label: str
    cta_type: str

    def to_dict(self) -> dict[str, Any]:
        return to_camel_dict(self)


def _evaluate_factor(definition: FactorDefinition, r: AuditResponse, sde: float) -> MultipleFactor:
    answer = r.text(definition.answer_field)
    adjustment, severity = definition.adjustments.get(answer, definition.fallback)
    potential = max(adjustment, definition.potential_for(answer))
    return MultipleFactor(
        id=definition.id,
        name=definition.name,
        current_adjustment=adjustment,
        potential_adjustment=potential,
        dollar_impact=int(round_half_up(abs(potential - adjustment) * sde)),
        description=definition.describe(adjustment),
        user_answer=answer or NOT_ANSWERED,
        severity=severity,
    )


def _bounded_multiple(raw: float) -> float:
    return round_half_up(clamp(raw, MIN_MULTIPLE, MAX_MULTIPLE), 1)


def qualification_stage(r: AuditResponse, annual_revenue: float, team_size: float) -> tuple[int, str, str]:
    """Return (stage, label, cta type) for the valuation quiz.

    0 too early, 1 needs internal systems, 2 needs external product,
    3 already optimized.
    """
    low_dependency = r.text("without_you") in (
        "It would run fine without me",
        "Some things would slip, but it'd survive",
    )
    well_documented = r.text("documented_level") in (
        "Fully documented with SOPs and templates",
        "Most processes have some documentation",
    )
    project_based = r.equals("revenue_model", "Mostly project-based")
    recurring = r.equals("revenue_model", "Mostly retainers / recurring")
    proprietary = r.equals("has_proprietary_method", "Yes")

    if annual_revenue < TOO_EARLY_REVENUE or team_size == 0:
        return 0, "Too Early", "free-guide"
    if low_dependency and well_documented and recurring and proprietary:
        return 3, "Already Optimized", "darwin-group"
    if low_dependency and well_documented and (project_based or not proprietary):
        return 2, "Needs External Product", "book-call"
    return 1, "Needs Internal Systems", "book-call"


def calculate_valuation(data: Mapping[str, Any]) -> ValuationResult:
    """Compute current and potential exit price from valuation quiz answers."""
    r = data if isinstance(data, AuditResponse) else AuditResponse(data)

    annual_revenue = max(0.0, r.number("annual_revenue"))
    owner_comp = max(0.0, r.number("owner_annual_comp"))
    margin = MARGIN_MAP.get(r.text("profit_margin"), DEFAULT_MARGIN)
    annual_profit = annual_revenue * margin
    sde = annual_profit + owner_comp

    factors = [_evaluate_factor(d, r, sde) for d in FACTORS]

    current_multiple = _bounded_multiple(BASE_MULTIPLE + sum(f.current_adjustment for f in factors))
    potential_multiple = _bounded_multiple(BASE_MULTIPLE + sum(f.potential_adjustment for f in factors))

    current_valuation = int(round_half_up(sde * current_multiple))
    potential_valuation = int(round_half_up(sde * potential_multiple))

    definitions = {d.id: d for d in FACTORS}
    ranked = sorted(
        (f for f in factors if f.dollar_impact > 0),
        key=lambda f: f.dollar_impact,
        reverse=True,
    )
    action_items = [
        ActionItem(
            rank=i + 1,
            action=definitions[f.id].action or f"Improve {f.name}",
            dollar_impact=f.dollar_impact,
            factor_id=f.id,
            description=definitions[f.id].action_description or f.description,
        )
        for i, f in enumerate(ranked)
    ]

    team_size = r.number("team_size")
    stage, stage_label, cta_type = qualification_stage(r, annual_revenue, team_size)

    return ValuationResult(
        current_valuation=current_valuation,
        potential_valuation=potential_valuation,
        valuation_gap=potential_valuation - current_valuation,
        sde=int(round_half_up(sde)),
        annual_revenue=annual_revenue,
        annual_profit=int(round_half_up(annual_profit)),
        owner_comp=owner_comp,
        current_multiple=current_multiple,
        potential_multiple=potential_multiple,
        factors=factors,
        action_items=action_items,
        owner_hours_per_week=r.number("owner_hours_per_week"),
        team_size=team_size,
        client_count=r.number("client_count"),
        owner_project_involvement=r.text("owner_project_involvement", NOT_ANSWERED),
        owner_sales_pct=r.text("owner_sales_pct", NOT_ANSWERED),
        approval_frequency=r.text("approval_frequency", NOT_ANSWERED),
        stage=stage,
        stage_label=stage_label,
        cta_type=cta_type,
    )
