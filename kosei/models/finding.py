"""Finding model produced by every lint rule.

A finding carries a ``[start, end)`` span that is paragraph-relative when a
rule emits it and document-absolute once the scheduler projects it onto the
live document. Spans serialise as ``from``/``to`` for editor hosts.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import Severity, ValidationState


class Reference(BaseModel):
    """Citation of the style standard a finding is based on."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    standard: str
    section: str | None = None
    url: str | None = None


class Fix(BaseModel):
    """Suggested replacement for the flagged span."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str
    label_ja: str | None = None
    replacement: str


class Finding(BaseModel):
    """A single lint issue.

    Core fields:
    - rule_id: Identifier of the rule that produced the finding
    - severity: error / warning / info
    - message / message_ja: English and Japanese descriptions
    - start / end: span, ``end`` exclusive

    Optional fields:
    - fix: suggested replacement
    - reference: standard the rule cites
    - original_text: matched text, filled in when the scheduler merges results
    - validation_state: contextual model outcome, set on rendered copies only
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    rule_id: str
    severity: Severity
    message: str
    message_ja: str | None = None
    start: int = Field(alias="from", ge=0)
    end: int = Field(alias="to", ge=0)
    fix: Fix | None = None
    reference: Reference | None = None
    original_text: str | None = None
    validation_state: ValidationState | None = None

    @field_validator("rule_id", mode="before")
    def _strip_rule(cls, value: object) -> str:
        result = str(value or "").strip()
        if not result:
            raise ValueError("rule_id must not be empty")
        return result

    @field_validator("message", mode="before")
    def _strip_message(cls, value: object) -> str:
        return str(value or "").strip()

    @model_validator(mode="after")
    def _check_span(self) -> "Finding":
        if self.end < self.start:
            raise ValueError("end must not precede start")
        return self

    def shifted(self, offset: int, *, extra: int = 0) -> "Finding":
        """Return a copy moved by ``offset`` (plus ``extra`` on both ends)."""

        return self.model_copy(
            update={"start": self.start + offset + extra, "end": self.end + offset + extra}
        )

    def with_updates(self, **changes: Any) -> "Finding":
        return self.model_copy(update=changes)

    def to_payload(self) -> dict[str, Any]:
        """Serialise for an editor host, using ``from``/``to`` span keys."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
