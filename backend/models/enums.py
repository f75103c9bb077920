from enum import Enum


class Dimension(str, Enum):
    LEVERAGE = "leverage"
    EQUITY_POTENTIAL = "equityPotential"
    REVENUE_RISK = "revenueRisk"
    PRODUCT_READINESS = "productReadiness"
    IMPLEMENTATION_CAPACITY = "implementationCapacity"


# Fixed iteration order; ties resolve to the first dimension listed.
DIMENSION_ORDER: tuple[Dimension, ...] = (
    Dimension.LEVERAGE,
    Dimension.EQUITY_POTENTIAL,
    Dimension.REVENUE_RISK,
    Dimension.PRODUCT_READINESS,
    Dimension.IMPLEMENTATION_CAPACITY,
)

DIMENSION_LABELS: dict[Dimension, str] = {
    Dimension.LEVERAGE: "Leverage",
    Dimension.EQUITY_POTENTIAL: "Equity Potential",
    Dimension.REVENUE_RISK: "Revenue Risk",
    Dimension.PRODUCT_READINESS: "Product Readiness",
    Dimension.IMPLEMENTATION_CAPACITY: "Implementation Capacity",
}


class ScoreLevel(str, Enum):
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class Priority(str, Enum):
    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"


class SystemType(str, Enum):
    AGENT = "agent"
    SOP = "sop"
    TEMPLATE = "template"
    CHECKLIST = "checklist"
    AUTOMATION = "automation"
    DECISION_FRAMEWORK = "decision_framework"
    DASHBOARD = "dashboard"


class SystemCategory(str, Enum):
    DELIVERY = "delivery"
    SALES = "sales"
    OPERATIONS = "operations"
    CLIENT_COMMS = "client_comms"
    QUALITY = "quality"
    ONBOARDING = "onboarding"
    REPORTING = "reporting"


class GapPriority(str, Enum):
    CRITICAL = "critical"
    IMPORTANT = "important"
    NICE_TO_HAVE = "nice_to_have"


class SkillCategory(str, Enum):
    COMMUNICATION = "communication"
    DELIVERY = "delivery"
    OPERATIONS = "operations"
    SALES = "sales"
    QA = "qa"
