"""Question definitions shared by the valuation quiz and the full audit."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class QuestionType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    MULTISELECT = "multiselect"
    SLIDER = "slider"
    TEXTAREA = "textarea"
    SERVICES = "services"


class ShowIf(BaseModel):
    """Visibility predicate on another answer.

    ``equals`` and ``not_equals`` accept a single value or a list of values.
    """

    field: str
    equals: Optional[Union[str, list[str]]] = None
    not_equals: Optional[Union[str, list[str]]] = Field(default=None, alias="notEquals")

    model_config = {"populate_by_name": True}


class Question(BaseModel):
    id: str
    question: str
    type: QuestionType
    field: str
    required: bool = False
    options: Optional[list[str]] = None
    min: Optional[float] = None
    max: Optional[float] = None
    placeholder: Optional[str] = None
    help_text: Optional[str] = Field(default=None, alias="helpText")
    show_if: Optional[ShowIf] = Field(default=None, alias="showIf")

    model_config = {"populate_by_name": True}


class QuestionSection(BaseModel):
    title: str
    description: str
    questions: list[Question]
