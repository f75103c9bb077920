"""Immutable score result structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from backend.models.enums import DIMENSION_ORDER, Dimension
from backend.models.serialize import to_camel_dict


@dataclass(frozen=True)
class DimensionScores:
    """The five 0-100 dimension scores."""

    leverage: int
    equity_potential: int
    revenue_risk: int
    product_readiness: int
    implementation_capacity: int

    def get(self, dimension: Dimension) -> int:
        return {
            Dimension.LEVERAGE: self.leverage,
            Dimension.EQUITY_POTENTIAL: self.equity_potential,
            Dimension.REVENUE_RISK: self.revenue_risk,
            Dimension.PRODUCT_READINESS: self.product_readiness,
            Dimension.IMPLEMENTATION_CAPACITY: self.implementation_capacity,
        }[dimension]

    def ordered(self) -> list[tuple[Dimension, int]]:
        """(dimension, score) pairs in the fixed dimension order."""
        return [(d, self.get(d)) for d in DIMENSION_ORDER]


@dataclass(frozen=True)
class DimensionHighlight:
    """A single dimension singled out as constraint or opportunity."""

    key: Dimension
    dimension: str
    score: int
    description: str


@dataclass(frozen=True)
class FinancialMetrics:
    monthly_revenue: float
    annual_revenue: float
    owner_hourly_value: float
    total_weekly_hours: float
    wasted_value: float
    current_exit_multiple: float
    current_exit_value: float
    target_exit_value: float
    value_gap: float


@dataclass(frozen=True)
class Recommendation:
    priority: int
    system: str
    why: str
    impact: str


@dataclass(frozen=True)
class ExitLayerScore:
    """Full scoring output for one questionnaire."""

    overall: int
    dimensions: DimensionScores
    financial_metrics: FinancialMetrics
    primary_constraint: Optional[DimensionHighlight] = None
    highest_opportunity: Optional[DimensionHighlight] = None
    critical_findings: list[str] = field(default_factory=list)
    quick_wins: list[str] = field(default_factory=list)
    week2to4: list[Recommendation] = field(default_factory=list)
    product_idea: str = ""
    validation_steps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape stored in score_data."""
        return {
            "overall": self.overall,
            "dimensions": to_camel_dict(self.dimensions),
            "analysis": {
                "primaryConstraint": to_camel_dict(self.primary_constraint),
                "highestOpportunity": to_camel_dict(self.highest_opportunity),
                "criticalFindings": list(self.critical_findings),
                "quickWins": list(self.quick_wins),
            },
            "recommendations": {
                "week2to4": to_camel_dict(self.week2to4),
                "postSprint": {
                    "productIdea": self.product_idea,
                    "validationSteps": list(self.validation_steps),
                },
            },
            "financialMetrics": to_camel_dict(self.financial_metrics),
        }
