"""Request bodies for the HTTP API."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

RESERVED_KEYS = ("_analytics", "_analyticsSession", "_session_token", "_valuation")
MAX_EMAIL_LENGTH = 254


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class SubmitPayload(BaseModel):
    """Full questionnaire submission.

    Any answer key is accepted; only the contact fields are checked. At least
    one name (``full_name`` or ``contact_name``) and one email (``email`` or
    ``contact_email``) must be present.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    company_name: str = Field(min_length=2, max_length=160)
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    contact_name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    contact_email: Optional[EmailStr] = None

    analytics: Any = Field(default=None, alias="_analytics")
    analytics_session: Any = Field(default=None, alias="_analyticsSession")
    session_token: Optional[str] = Field(default=None, alias="_session_token")
    valuation: Any = Field(default=None, alias="_valuation")

    @field_validator("company_name", "full_name", "contact_name", "email", "contact_email",
                     "session_token", mode="before")
    @classmethod
    def strip_strings(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("email", "contact_email", mode="before")
    @classmethod
    def limit_email_length(cls, value: Any) -> Any:
        if isinstance(value, str) and len(value) > MAX_EMAIL_LENGTH:
            raise ValueError("Email is too long")
        return value

    @model_validator(mode="after")
    def require_contact(self) -> "SubmitPayload":
        if not self.full_name and not self.contact_name:
            raise ValueError("A contact name is required")
        if not self.email and not self.contact_email:
            raise ValueError("A contact email is required")
        return self

    @property
    def contact_name_value(self) -> str:
        return self.full_name or self.contact_name or ""

    @property
    def contact_email_value(self) -> str:
        return str(self.email or self.contact_email or "")

    def form_data(self) -> dict[str, Any]:
        """Answers as submitted, minus the reserved underscore keys."""
        data: dict[str, Any] = {"company_name": self.company_name}
        for key in ("full_name", "contact_name", "email", "contact_email"):
            value = getattr(self, key)
            if value is not None:
                data[key] = str(value)
        data.update(self.model_extra or {})
        return data


class CreateSessionRequest(BaseModel):
    full_name: str = ""
    email: str = ""
    company_name: str = ""


class SaveDraftRequest(BaseModel):
    session_token: str = ""
    form_data: dict[str, Any] = Field(default_factory=dict)
    current_question_index: int = 0


class LinkAccountRequest(BaseModel):
    session_token: str = ""
    user_id: str = ""


class VisibleQuestionsRequest(BaseModel):
    answers: dict[str, Any] = Field(default_factory=dict)
    flow: str = "all"  # "valuation" | "post_sale" | "all"
