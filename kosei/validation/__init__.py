"""Model-backed validation of findings and contextual rule execution."""

from __future__ import annotations

from .contextual_pass import ContextualPass, build_document_sentences, group_by_paragraph
from .validator import FindingValidator, outcome_key, parse_validation_response

__all__ = [
    "ContextualPass",
    "FindingValidator",
    "build_document_sentences",
    "group_by_paragraph",
    "outcome_key",
    "parse_validation_response",
]
