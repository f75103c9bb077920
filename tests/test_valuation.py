"""Tests for the valuation quiz calculation."""

import pytest

from backend.engine.valuation import MAX_MULTIPLE, MIN_MULTIPLE, calculate_valuation


@pytest.fixture
def quiz_answers() -> dict:
    return {
        "annual_revenue": 1_000_000,
        "profit_margin": "20-30%",
        "owner_annual_comp": 150_000,
        "revenue_model": "Mostly project-based",
        "without_you": "Major problems — clients would notice",
        "top_client_pct": "25-50%",
        "documented_level": "A few rough notes here and there",
        "has_proprietary_method": "Sort of",
        "owner_project_involvement": "Most (70-90%)",
        "owner_sales_pct": "I close most (75%+)",
        "team_size": 8,
        "client_count": 12,
    }


class TestValuation:
    def test_sde(self, quiz_answers):
        result = calculate_valuation(quiz_answers)
        assert result.annual_profit == 250_000
        assert result.sde == 400_000

    def test_multiples_bounded_and_ordered(self, quiz_answers):
        result = calculate_valuation(quiz_answers)
        assert MIN_MULTIPLE <= result.current_multiple <= result.potential_multiple <= MAX_MULTIPLE
        assert result.valuation_gap == result.potential_valuation - result.current_valuation
        assert result.valuation_gap > 0

    def test_action_items_ranked_by_impact(self, quiz_answers):
        items = calculate_valuation(quiz_answers).action_items
        impacts = [item.dollar_impact for item in items]
        assert impacts == sorted(impacts, reverse=True)
        assert [item.rank for item in items] == list(range(1, len(items) + 1))
        assert all(impact > 0 for impact in impacts)

    def test_factor_records_answer(self, quiz_answers):
        factors = {f.id: f for f in calculate_valuation(quiz_answers).factors}
        owner = factors["owner-dependency"]
        assert owner.current_adjustment == -0.5
        assert owner.potential_adjustment == 0.5
        assert owner.severity == "critical"
        assert owner.dollar_impact == 400_000

    def test_unanswered_factor(self):
        factors = {f.id: f for f in calculate_valuation({"annual_revenue": 500_000}).factors}
        assert factors["documentation"].user_answer == "Not answered"

    def test_unknown_margin_uses_default(self, quiz_answers):
        result = calculate_valuation({**quiz_answers, "profit_margin": "Something else"})
        assert result.annual_profit == 250_000

    def test_empty_answers(self):
        result = calculate_valuation({})
        assert result.current_valuation == 0
        assert result.potential_valuation == 0
        assert (result.stage, result.stage_label, result.cta_type) == (0, "Too Early", "free-guide")

    def test_to_dict_is_camel_case(self, quiz_answers):
        data = calculate_valuation(quiz_answers).to_dict()
        assert {"currentValuation", "potentialValuation", "valuationGap", "actionItems"} <= set(data)
        assert "dollarImpact" in data["factors"][0]


class TestQualificationStage:
    def test_too_early_below_revenue_floor(self, quiz_answers):
        assert calculate_valuation({**quiz_answers, "annual_revenue": 250_000}).stage == 0

    def test_needs_internal_systems(self, quiz_answers):
        result = calculate_valuation(quiz_answers)
        assert (result.stage, result.cta_type) == (1, "book-call")

    def test_needs_external_product(self, quiz_answers):
        result = calculate_valuation({
            **quiz_answers,
            "without_you": "It would run fine without me",
            "documented_level": "Most processes have some documentation",
        })
        assert (result.stage, result.stage_label) == (2, "Needs External Product")

    def test_already_optimized(self, quiz_answers):
        result = calculate_valuation({
            **quiz_answers,
            "without_you": "It would run fine without me",
            "documented_level": "Fully documented with SOPs and templates",
            "revenue_model": "Mostly retainers / recurring",
            "has_proprietary_method": "Yes",
        })
        assert (result.stage, result.cta_type) == (3, "darwin-group")
