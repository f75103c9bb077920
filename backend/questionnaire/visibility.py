"""Conditional visibility: which questions a client sees for a set of answers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from backend.engine.numeric import round_half_up
from backend.questionnaire.schema import Question, QuestionSection, ShowIf


def _matches(value: Any, expected: Union[str, list[str]]) -> bool:
    if isinstance(expected, list):
        return value in expected
    return value == expected


def evaluate_show_if(condition: Optional[ShowIf], answers: Mapping[str, Any]) -> bool:
    """``equals`` wins over ``not_equals`` when both are set; no condition means visible.

    An unanswered field never equals anything, so ``not_equals`` conditions
    show their question until the answer matches.
    """
    if condition is None:
        return True
    value = answers.get(condition.field)
    if condition.equals is not None:
        return _matches(value, condition.equals)
    if condition.not_equals is not None:
        return not _matches(value, condition.not_equals)
    return True


def is_visible(question: Question, answers: Mapping[str, Any]) -> bool:
    return evaluate_show_if(question.show_if, answers)


@dataclass(frozen=True)
class VisibleQuestion:
    question: Question
    section_index: int
    section_title: str
    index_in_section: int
    total_in_section: int
    global_index: int


def visible_questions(sections: list[QuestionSection], answers: Mapping[str, Any]) -> list[VisibleQuestion]:
    """Flatten the sections, keeping only the questions visible for ``answers``."""
    flat: list[VisibleQuestion] = []
    for section_index, section in enumerate(sections):
        shown = [question for question in section.questions if is_visible(question, answers)]
        for idx, question in enumerate(shown):
            flat.append(VisibleQuestion(
                question=question,
                section_index=section_index,
                section_title=section.title,
                index_in_section=idx,
                total_in_section=len(shown),
                global_index=len(flat),
            ))
    return flat


def _answered(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def section_progress(section: QuestionSection, answers: Mapping[str, Any]) -> dict[str, int]:
    """Answered / total over the visible questions of one section."""
    shown = [question for question in section.questions if is_visible(question, answers)]
    answered = sum(1 for question in shown if _answered(answers.get(question.field)))
    total = len(shown)
    percentage = int(round_half_up(answered / total * 100)) if total else 0
    return {"answered": answered, "total": total, "percentage": percentage}


def missing_required(sections: list[QuestionSection], answers: Mapping[str, Any]) -> list[str]:
    """Fields of visible required questions that have no answer yet."""
    return [
        item.question.field
        for item in visible_questions(sections, answers)
        if item.question.required and not _answered(answers.get(item.question.field))
    ]
