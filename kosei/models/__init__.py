"""Public model exports for the project.

Import from here rather than from the submodules:
``from kosei.models import Finding, Severity, RuleConfig``.
"""

from __future__ import annotations

from .document import (
    AtomAdjustment,
    DocumentParagraph,
    Paragraph,
    ParagraphFindings,
    SentenceSpan,
    Token,
    Viewport,
)
from .enums import ChangeReason, CorrectionModeId, RuleLevel, Severity, ValidationState
from .finding import Finding, Fix, Reference
from .rule_config import (
    CorrectionConfig,
    IgnoredFinding,
    LlmSettings,
    RuleConfig,
    UserDictionaryEntry,
)

__all__ = [
    "AtomAdjustment",
    "ChangeReason",
    "CorrectionConfig",
    "CorrectionModeId",
    "DocumentParagraph",
    "Finding",
    "Fix",
    "IgnoredFinding",
    "LlmSettings",
    "Paragraph",
    "ParagraphFindings",
    "Reference",
    "RuleConfig",
    "RuleLevel",
    "SentenceSpan",
    "Severity",
    "Token",
    "UserDictionaryEntry",
    "ValidationState",
    "Viewport",
]
