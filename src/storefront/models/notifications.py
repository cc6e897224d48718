"""Email and form submission models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EmailMessage(BaseModel):
    """A rendered transactional email, ready for the email API."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sender: str = Field(..., alias="from", description='Sender, may be "Name <addr>"')
    to: list[str] = Field(..., min_length=1)
    subject: str
    html: str
    cc: list[str] = Field(default_factory=list)
    reply_to: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Request body for the Resend ``POST /emails`` API."""
        payload: dict[str, Any] = {
            "from": self.sender,
            "to": list(self.to),
            "subject": self.subject,
            "html": self.html,
        }
        if self.cc:
            payload["cc"] = list(self.cc)
        if self.reply_to:
            payload["reply_to"] = self.reply_to
        return payload


class FormSubmission(BaseModel):
    """A form submission event as delivered by the hosting platform."""

    form_name: str = ""
    data: dict[str, Any] = Field(default_factory=dict, description="Raw fields")
    human_fields: dict[str, Any] = Field(default_factory=dict, description="Labelled fields")
    site_url: str = ""
    number: int | None = None
    created_at: str = ""

    @field_validator("number", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> int | None:
        if value in (None, ""):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @field_validator("form_name", "site_url", "created_at", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("data", "human_fields", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return value or {}

    def field_value(self, name: str) -> str | None:
        """Case-insensitive lookup across raw and labelled fields."""
        wanted = name.lower()
        for fields in (self.data, self.human_fields):
            for key, value in fields.items():
                if str(key).lower() == wanted and value not in (None, ""):
                    return str(value)
        return None
