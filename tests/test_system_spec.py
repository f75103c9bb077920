"""Tests for the system spec generator and its rule library."""

from backend.generators.system_spec import generate_system_spec
from backend.models.enums import GapPriority, Priority
from backend.models.system_spec import PRIORITY_RANK
from backend.rule_library.registry import get_rule, get_rules
from backend.rule_library.systems import SYSTEM_RULES


def _ids(spec):
    return [s.id for s in spec.systems]


class TestSystemRules:
    def test_rules_registered_in_order(self):
        ids = [rule.id for rule in get_rules(SYSTEM_RULES)]
        assert ids[0] == "owner-tasks"
        assert ids.index("sop-core-process-documentation") < ids.index("checklist-kickoff")

    def test_get_rule_lookup(self):
        rule = get_rule(SYSTEM_RULES, "checklist-kickoff")
        assert rule is not None
        assert get_rule(SYSTEM_RULES, "no-such-rule") is None

    def test_has_sops_suppresses_core_documentation(self, agency_1m):
        spec = generate_system_spec(agency_1m)
        assert "Core Process Documentation" not in [s.name for s in spec.systems]

    def test_missing_sops_adds_core_documentation(self, agency_1m):
        spec = generate_system_spec({**agency_1m, "has_sops": "No"})
        system = next(s for s in spec.systems if s.name == "Core Process Documentation")
        assert system.priority == Priority.P0

    def test_low_documentation_adds_core_documentation(self):
        spec = generate_system_spec({"documented_pct": 20})
        assert "sop-core-process-documentation" in _ids(spec)

    def test_owner_tasks_pick_builder_by_keyword(self, owner_bottleneck):
        ids = _ids(generate_system_spec(owner_bottleneck))
        assert "checklist-qa-0" in ids
        assert "framework-pricing-calculator" in ids
        assert "sop-task-2" in ids

    def test_owner_decisions_pick_framework(self, owner_bottleneck):
        ids = _ids(generate_system_spec(owner_bottleneck))
        assert "framework-pricing-decisions" in ids
        assert "framework-client-qualification" in ids

    def test_team_gaps_add_sops(self, owner_bottleneck):
        ids = _ids(generate_system_spec(owner_bottleneck))
        assert "sop-client-onboarding" in ids
        assert "sop-delivery-process" in ids
        assert "sop-sales-process" in ids


class TestSpecInvariants:
    def test_sorted_by_priority(self, owner_bottleneck):
        ranks = [PRIORITY_RANK[s.priority] for s in generate_system_spec(owner_bottleneck).systems]
        assert ranks == sorted(ranks)

    def test_ids_unique(self, owner_bottleneck):
        ids = _ids(generate_system_spec(owner_bottleneck))
        assert len(ids) == len(set(ids))

    def test_adding_negative_signal_never_reduces_p0(self, agency_1m):
        before = generate_system_spec(agency_1m).summary.p0_systems
        after = generate_system_spec({**agency_1m, "has_kickoff_checklist": "No"}).summary.p0_systems
        assert after == before + 1

    def test_summary_matches_systems(self, owner_bottleneck):
        spec = generate_system_spec(owner_bottleneck)
        assert spec.summary.total_systems_to_build == len(spec.systems)
        assert spec.summary.p0_systems == len(spec.systems_with_priority(Priority.P0))
        assert spec.summary.weekly_hours_reclaimed == sum(s.owner_time_reclaimed for s in spec.systems)

    def test_empty_response_does_not_raise(self):
        spec = generate_system_spec({})
        assert spec.client_info.company == "Unknown"
        assert spec.summary.total_systems_to_build == len(spec.systems)

    def test_generated_at_is_passed_through(self, agency_1m):
        spec = generate_system_spec(agency_1m, generated_at="2026-03-02T10:00:00+00:00")
        assert spec.client_info.generated_at == "2026-03-02T10:00:00+00:00"
        assert generate_system_spec(agency_1m).client_info.generated_at == ""


class TestGaps:
    def test_missing_owner_tasks_is_critical_gap(self, agency_1m):
        gaps = {g.field: g for g in generate_system_spec(agency_1m).gaps}
        assert gaps["tasks_only_owner"].priority == GapPriority.CRITICAL
        assert gaps["tasks_only_owner"].discovery_questions

    def test_detailed_answer_closes_gap(self, agency_1m):
        answers = {**agency_1m, "tasks_only_owner": "Final creative review on every client deliverable"}
        fields = [g.field for g in generate_system_spec(answers).gaps]
        assert "tasks_only_owner" not in fields

    def test_critical_gaps_lead_discovery_agenda(self, agency_1m):
        agenda = generate_system_spec(agency_1m).follow_up_discovery_agenda
        assert agenda[0].topic == "Critical Information Gaps"
        assert any(item.topic == "Core Delivery Process Mapping" for item in agenda)


class TestIntegrationsAndCoverage:
    def test_missing_tools_get_recommendations(self):
        integrations = generate_system_spec({}).integrations
        categories = [i.tool_category for i in integrations]
        assert categories == ["CRM", "Project Management", "Automation"]
        assert integrations[0].tool == "None specified"

    def test_known_tool_has_api(self, owner_bottleneck):
        crm = generate_system_spec(owner_bottleneck).integrations[0]
        assert crm.tool == "HubSpot"
        assert crm.api_available is True

    def test_coverage_respects_caps(self, owner_bottleneck):
        coverage = generate_system_spec(owner_bottleneck).automation_coverage
        assert coverage.delivery_automation <= 85
        assert coverage.sales_automation <= 70
        assert coverage.client_comms_automation <= 80
        assert coverage.operations_automation <= 75
        assert coverage.quality_automation <= 80
        assert [a.area for a in coverage.breakdown] == [
            "Delivery", "Sales", "Client Communications", "Operations", "Quality Assurance",
        ]

    def test_build_plan_covers_weeks_two_to_four(self, owner_bottleneck):
        weeks = generate_system_spec(owner_bottleneck).week_by_week_build_plan
        assert [w.week for w in weeks] == [2, 3, 4]
        assert len(weeks[0].systems) <= 4

    def test_to_dict_is_camel_case(self, agency_1m):
        data = generate_system_spec(agency_1m).to_dict()
        assert "weekByWeekBuildPlan" in data
        assert "automationCoverage" in data
        assert data["systems"][0]["priority"] in ("P0", "P1", "P2", "P3")
