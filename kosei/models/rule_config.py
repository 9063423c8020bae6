"""Externally supplied configuration models.

Rule configuration, ignore records, user dictionary entries and the
correction settings bundle are all pushed into the pipeline by the host, so
they are validated here rather than trusted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import CorrectionModeId, Severity


class RuleConfig(BaseModel):
    """Per-rule switches and options."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = True
    severity: Severity = Severity.WARNING
    skip_dialogue: bool = False
    skip_llm_validation: bool = False
    options: Dict[str, Any] = Field(default_factory=dict)

    def option(self, name: str, default: Any) -> Any:
        value = self.options.get(name)
        return default if value is None else value

    def merged(self, overrides: "RuleConfig | dict[str, Any] | None") -> "RuleConfig":
        """Return a copy with ``overrides`` applied; options are merged key-wise."""

        if overrides is None:
            return self
        if isinstance(overrides, RuleConfig):
            data = overrides.model_dump(exclude_unset=True)
        else:
            data = dict(overrides)
        options = dict(self.options)
        options.update(data.pop("options", None) or {})
        return RuleConfig.model_validate({**self.model_dump(), **data, "options": options})


class IgnoredFinding(BaseModel):
    """A user decision to stop showing a specific finding.

    ``context`` is ``None`` for a global ignore, otherwise the fingerprint
    (see :func:`kosei.utils.hash_string`) of the paragraph it applies to.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    rule_id: str
    text: str
    context: str | None = None
    added_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("rule_id", mode="before")
    def _strip_rule(cls, value: object) -> str:
        result = str(value or "").strip()
        if not result:
            raise ValueError("rule_id must not be empty")
        return result

    @field_validator("context", mode="before")
    def _normalise_context(cls, value: object) -> str | None:
        if value is None:
            return None
        return str(value).strip() or None


class UserDictionaryEntry(BaseModel):
    """Word registered by the author so the tokenizer keeps it whole."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = ""
    word: str
    reading: str | None = None
    part_of_speech: str | None = None
    definition: str | None = None
    examples: List[str] = Field(default_factory=list)
    notes: str | None = None

    @field_validator("word", mode="before")
    def _strip_word(cls, value: object) -> str:
        result = str(value or "").strip()
        if not result:
            raise ValueError("word must not be empty")
        return result


class LlmSettings(BaseModel):
    """Model selection for the contextual validation pass."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    model_id: str | None = None
    cooldown_ms: int = Field(default=60_000, ge=0)
    validation_enabled: bool = True


class CorrectionConfig(BaseModel):
    """Everything the host stores about how a document should be checked."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = True
    mode: CorrectionModeId = CorrectionModeId.NOVEL
    preset: str = "standard"
    guidelines: List[str] = Field(default_factory=list)
    rule_overrides: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    llm: LlmSettings = Field(default_factory=LlmSettings)
    ignored_corrections: List[IgnoredFinding] = Field(default_factory=list)
