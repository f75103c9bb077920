"""Tests for the questionnaire catalog and conditional visibility."""

from backend.questionnaire.catalog import (
    POST_SALE_SECTIONS,
    QUESTION_SECTIONS,
    VALUATION_SECTIONS,
    get_question,
    question_count,
)
from backend.questionnaire.schema import Question, QuestionSection, QuestionType, ShowIf
from backend.questionnaire.visibility import (
    evaluate_show_if,
    is_visible,
    missing_required,
    section_progress,
    visible_questions,
)


def _section():
    return QuestionSection(
        title="Productization",
        description="Past attempts",
        questions=[
            Question(id="tried", question="Tried before?", type=QuestionType.SELECT,
                     field="tried_productization", required=True, options=["Yes", "No"]),
            Question(id="attempt", question="What did you try?", type=QuestionType.TEXTAREA,
                     field="productization_attempt", required=True,
                     show_if=ShowIf(field="tried_productization", equals="Yes")),
            Question(id="audience", question="Audience size?", type=QuestionType.TEXT,
                     field="audience_size",
                     show_if=ShowIf(field="has_audience", not_equals="No")),
        ],
    )


class TestCatalog:
    def test_sections_combined_in_order(self):
        assert QUESTION_SECTIONS == VALUATION_SECTIONS + POST_SALE_SECTIONS
        assert len(VALUATION_SECTIONS) == 4
        assert len(POST_SALE_SECTIONS) == 8

    def test_question_ids_unique(self):
        ids = [q.id for s in QUESTION_SECTIONS for q in s.questions]
        assert len(ids) == len(set(ids))
        assert question_count(QUESTION_SECTIONS) == len(ids)

    def test_field_defaults_to_id(self):
        question = get_question("has_sops")
        assert question.field == "has_sops"
        assert get_question("val_annual_revenue").field == "annual_revenue"
        assert get_question("no_such_question") is None

    def test_show_if_serializes_with_aliases(self):
        data = get_question("sop_list").model_dump(by_alias=True, exclude_none=True)
        assert data["showIf"] == {"field": "has_sops", "notEquals": "No"}


class TestShowIf:
    def test_no_condition_is_visible(self):
        assert evaluate_show_if(None, {}) is True

    def test_equals(self):
        condition = ShowIf(field="tried_productization", equals="Yes")
        assert evaluate_show_if(condition, {"tried_productization": "Yes"})
        assert not evaluate_show_if(condition, {"tried_productization": "No"})
        assert not evaluate_show_if(condition, {})

    def test_not_equals_shows_until_answered(self):
        condition = ShowIf(field="has_audience", not_equals="No")
        assert evaluate_show_if(condition, {})
        assert evaluate_show_if(condition, {"has_audience": "Small audience"})
        assert not evaluate_show_if(condition, {"has_audience": "No"})

    def test_list_membership(self):
        condition = ShowIf(field="has_sops", equals=["Yes", "Some"])
        assert evaluate_show_if(condition, {"has_sops": "Some"})
        assert not evaluate_show_if(condition, {"has_sops": "No"})

    def test_equals_wins_over_not_equals(self):
        condition = ShowIf(field="x", equals="a", not_equals="a")
        assert evaluate_show_if(condition, {"x": "a"})

    def test_alias_population(self):
        condition = ShowIf.model_validate({"field": "x", "notEquals": "b"})
        assert condition.not_equals == "b"


class TestVisibleQuestions:
    def test_hidden_questions_skipped(self):
        visible = visible_questions([_section()], {"has_audience": "No"})
        assert [v.question.id for v in visible] == ["tried"]
        assert visible[0].total_in_section == 1

    def test_indexes(self):
        visible = visible_questions([_section(), _section()], {"tried_productization": "Yes"})
        assert [v.global_index for v in visible] == list(range(6))
        assert [v.index_in_section for v in visible[:3]] == [0, 1, 2]
        assert visible[3].section_index == 1

    def test_visible_in_full_catalog(self):
        item = next(v for v in visible_questions(QUESTION_SECTIONS, {"has_sops": "No"})
                    if v.question.id == "has_sops")
        assert item.section_title
        assert not any(v.question.id == "sop_list"
                       for v in visible_questions(QUESTION_SECTIONS, {"has_sops": "No"}))
        assert is_visible(get_question("sop_list"), {"has_sops": "Yes"})


class TestProgress:
    def test_section_progress(self):
        progress = section_progress(_section(), {"tried_productization": "Yes", "has_audience": "No"})
        assert progress == {"answered": 1, "total": 2, "percentage": 50}

    def test_empty_section_progress(self):
        section = QuestionSection(title="Empty", description="", questions=[])
        assert section_progress(section, {}) == {"answered": 0, "total": 0, "percentage": 0}

    def test_missing_required_only_visible(self):
        assert missing_required([_section()], {}) == ["tried_productization"]
        assert missing_required([_section()], {"tried_productization": "Yes"}) == ["productization_attempt"]
        assert missing_required([_section()], {
            "tried_productization": "Yes",
            "productization_attempt": "   ",
        }) == ["productization_attempt"]
