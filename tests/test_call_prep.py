"""Tests for the call prep generator, red flags and its markdown."""

from backend.generators.call_prep import (
    generate_call_prep,
    pain_summary,
    render_call_prep_markdown,
)
from backend.models.answers import AuditResponse


class TestBuildHypotheses:
    def test_hypotheses_sorted_by_priority(self, owner_bottleneck):
        prep = generate_call_prep(owner_bottleneck)
        priorities = [h.priority for h in prep.build_hypothesis]
        assert priorities == sorted(priorities)
        assert priorities[:3] == [1, 2, 3]

    def test_onboarding_hypothesis_uses_new_clients_default(self, owner_bottleneck):
        first = generate_call_prep(owner_bottleneck).build_hypothesis[0]
        assert first.system == "Client Onboarding Flow"
        assert first.hours_reclaimed == 6
        assert "sometimes can't" in first.why

    def test_team_that_can_close_skips_sales_hypothesis(self):
        prep = generate_call_prep({"team_can_onboard": "Yes", "team_can_close": "Yes"})
        assert "Sales Qualification Framework" not in [h.system for h in prep.build_hypothesis]

    def test_scope_creep_hypothesis_has_no_hours(self):
        prep = generate_call_prep({
            "team_can_onboard": "Yes",
            "team_can_close": "Yes",
            "revision_scope_issues": "Often - we usually just do it",
        })
        (hypothesis,) = prep.build_hypothesis
        assert hypothesis.system == "Scope Decision Framework"
        assert hypothesis.hours_reclaimed is None

    def test_negative_hours_reclaim_nothing(self):
        prep = generate_call_prep({
            "team_can_onboard": "Yes",
            "team_can_close": "Yes",
            "projects_requiring_owner_pct": 80,
            "time_delivery_hrs": -20,
        })
        qc = next(h for h in prep.build_hypothesis if h.system == "Delivery QC Checklist + Review Skill")
        assert qc.hours_reclaimed == 0


class TestRedFlags:
    def test_independent_flags_all_fire(self, owner_bottleneck):
        flags = generate_call_prep(owner_bottleneck).red_flags
        observations = [f.observation for f in flags]
        assert observations == [
            "56 hours/week but only 1 hours on strategy",
            "More contractors (3) than FTEs (2)",
        ]

    def test_sops_claim_with_little_documentation(self):
        flags = generate_call_prep({"has_sops": "Yes", "documented_pct": 10}).red_flags
        assert flags[0].observation == 'Says "Yes" to SOPs but only 10% documented'

    def test_clean_answers_have_no_flags(self, agency_1m):
        assert generate_call_prep(agency_1m).red_flags == []


class TestPainSummary:
    def test_no_pain_points(self):
        assert pain_summary(AuditResponse({"documented_pct": 80})) == "No critical pain points identified"

    def test_pain_points_joined(self, owner_bottleneck):
        summary = pain_summary(AuditResponse(owner_bottleneck))
        assert summary.startswith("working 56 hrs/week, 80% of projects require owner")
        assert "no SOPs" in summary


class TestCallPrepDocument:
    def test_quick_context(self, agency_1m):
        ctx = generate_call_prep(agency_1m).quick_context
        assert ctx.revenue == "$1200K/year"
        assert ctx.owner_hours == 45
        assert ctx.team_size == 6

    def test_empty_response_defaults(self):
        prep = generate_call_prep({})
        assert prep.client_info.company == "Unknown Company"
        assert prep.quick_context.team_size == 1
        assert prep.proprietary_mechanism_hypothesis.probable_core == "Need to extract on call"

    def test_to_dict_is_camel_case(self, agency_1m):
        data = generate_call_prep(agency_1m, generated_at="2026-03-02T10:00:00+00:00").to_dict()
        assert data["clientInfo"]["generatedAt"] == "2026-03-02T10:00:00+00:00"
        assert "timeBreakdown" in data["quickContext"]
        assert "proprietaryMechanismHypothesis" in data


class TestCallPrepMarkdown:
    def test_sections_in_call_order(self, owner_bottleneck):
        md = render_call_prep_markdown(generate_call_prep(owner_bottleneck))
        headings = [
            "## Quick Context",
            "## Preliminary Build Hypothesis",
            "## Proprietary Mechanism Hypothesis",
            "## Call Questions",
            "## Red Flags / Contradictions to Probe",
            '## "Show Me" Requests',
            "## Quick Wins to Mention",
            "## After the Call",
        ]
        positions = [md.index(h) for h in headings]
        assert positions == sorted(positions)

    def test_red_flag_section_omitted_without_flags(self, agency_1m):
        md = render_call_prep_markdown(generate_call_prep(agency_1m))
        assert "Red Flags" not in md
        assert md.startswith("# Call Prep: Brightline Studio")
