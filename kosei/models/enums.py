"""Enumerations shared by the lint models.

Values are the wire names used by editor hosts and stored settings, so they
are kebab-case strings rather than Python identifiers.
"""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """How strongly a finding should be presented."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]

    @property
    def css_class(self) -> str:
        return f"lint-{self.value}"


class ValidationState(str, Enum):
    """Outcome of the contextual model check for a single finding."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    DISMISSED = "dismissed"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


class RuleLevel(str, Enum):
    """Capability tier of a rule.

    Values:
        L1: pattern matching on raw text
        L2: needs morphological analysis
        L3: needs a language model
    """

    L1 = "L1"
    L2 = "L2"
    L3 = "L3"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


class ChangeReason(str, Enum):
    """Why the scheduler is being asked to recompute."""

    TEXT_EDIT = "text-edit"
    VIEWPORT_CHANGE = "viewport-change"
    RULE_CONFIG_CHANGE = "rule-config-change"
    GUIDELINE_CHANGE = "guideline-change"
    MODE_CHANGE = "mode-change"
    MODEL_CHANGE = "model-change"
    IGNORED_CORRECTION = "ignored-correction"
    MANUAL_REFRESH = "manual-refresh"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


class CorrectionModeId(str, Enum):
    """Writing genres with their own rule overrides."""

    NOVEL = "novel"
    OFFICIAL = "official"
    BLOG = "blog"
    ACADEMIC = "academic"
    SNS = "sns"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]
