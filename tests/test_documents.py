"""Tests for the build plan, discovery agenda and diagnostic report markdown."""

import pytest

from backend.documents.build_plan import render_build_plan
from backend.documents.discovery_agenda import item_minutes, render_discovery_agenda
from backend.engine.calculator import calculate_exit_layer_score
from backend.generators.diagnostic_report import generate_diagnostic_report
from backend.generators.system_spec import generate_system_spec
from backend.models.system_spec import AgendaItem


def _build_plan(answers, **kwargs):
    spec = generate_system_spec(answers, generated_at="2026-03-02T10:00:00+00:00")
    return spec, render_build_plan(spec, calculate_exit_layer_score(answers), **kwargs)


class TestBuildPlan:
    def test_sections_in_order(self, owner_bottleneck):
        _, md = _build_plan(owner_bottleneck)
        headings = [
            "## Summary",
            "## ROI Analysis",
            "### Per-System Value",
            "## Automation Coverage",
            "## Week-by-Week Build Plan",
            "## Systems Detail",
            "## Integration Requirements",
            "## Information Gaps",
        ]
        positions = [md.index(h) for h in headings]
        assert positions == sorted(positions)

    def test_each_system_detailed_exactly_once(self, owner_bottleneck):
        spec, md = _build_plan(owner_bottleneck)
        detail = md[md.index("## Systems Detail"):md.index("## Integration Requirements")]
        for system in spec.systems:
            assert detail.count(f"#### {system.name}\n") == 1

    def test_payback_na_without_reclaimed_value(self):
        _, md = _build_plan({})
        assert "- **Payback Period:** n/a" in md

    def test_roi_uses_sprint_cost(self, agency_1m):
        _, md = _build_plan(agency_1m, sprint_cost=20_000)
        assert "- **Sprint Investment:** $20,000" in md
        assert "- **Owner Hourly Value:** $2,222/hour" in md

    def test_generated_date_in_header(self, agency_1m):
        _, md = _build_plan(agency_1m)
        assert "**Generated:** 2026-03-02" in md
        assert "**Client:** Brightline Studio" in md

    def test_repeated_pricing_tasks_yield_one_calculator(self):
        spec, md = _build_plan({
            "time_delivery_hrs": 30,
            "time_sales_hrs": 5,
            "tasks_only_owner": "pricing decisions, proposal writing",
        })
        names = [s.name for s in spec.systems]
        assert names.count("Pricing Calculator") == 1
        assert len(names) == len(set(names))
        detail = md[md.index("## Systems Detail"):md.index("## Integration Requirements")]
        assert detail.count("#### Pricing Calculator\n") == 1


class TestDiscoveryAgenda:
    @pytest.mark.parametrize("duration,minutes", [("20 minutes", 20), ("25 min", 25),
                                                  ("a while", 15), ("0 minutes", 15)])
    def test_item_minutes(self, duration, minutes):
        assert item_minutes(AgendaItem(topic="t", questions=[], duration=duration)) == minutes

    def test_total_duration(self, agency_1m):
        spec = generate_system_spec(agency_1m)
        md = render_discovery_agenda(spec)
        total = sum(item_minutes(item) for item in spec.follow_up_discovery_agenda)
        assert f"**Estimated Duration:** {total} minutes" in md

    def test_only_critical_gaps_listed(self, agency_1m):
        spec = generate_system_spec(agency_1m)
        md = render_discovery_agenda(spec)
        gaps_section = md[md.index("## Critical Information Gaps"):md.index("## Validation Checklist")]
        for gap in spec.gaps:
            heading = f"### {gap.question}"
            if gap.priority.value == "critical":
                assert heading in gaps_section
            else:
                assert heading not in gaps_section

    def test_agenda_items_are_checklists(self, agency_1m):
        md = render_discovery_agenda(generate_system_spec(agency_1m))
        assert "## 1. Critical Information Gaps (20 minutes)" in md
        assert "- [ ] Scheduled Week 2 check-in" in md


class TestDiagnosticReport:
    def test_report_sections(self, owner_bottleneck):
        score = calculate_exit_layer_score(owner_bottleneck)
        md = generate_diagnostic_report(owner_bottleneck, score).to_markdown()
        assert md.startswith("# ExitLayer Diagnostic Report")
        assert f"**Overall Score:** {score.overall}/100" in md
        for title in ("## Current State", "## Score Breakdown", "## Critical Findings", "## Their Words"):
            assert title in md

    def test_empty_response_renders(self):
        score = calculate_exit_layer_score({})
        report = generate_diagnostic_report({}, score)
        assert report.company_name == "Unknown"
        assert "markdown" in report.to_dict()
