"""Rule engine: rule variants, the built-in catalog, presets and the runner."""

from __future__ import annotations

from .modes import (
    CORRECTION_MODES,
    GUIDELINES,
    CorrectionMode,
    Guideline,
    active_guidelines,
    get_correction_mode,
    resolve_rule_configs,
)
from .presets import DEFAULT_RULE_CONFIGS, PRESETS, RULE_CATEGORIES, RULE_GUIDELINE_MAP, RULE_NAMES_JA
from .rule import (
    ContextualRule,
    DocumentRule,
    LexicalRule,
    MorphologicalRule,
    Rule,
    RuleKind,
    RuleMetadata,
)
from .rules import BUILTIN_RULES, build_default_rules
from .runner import RuleRunner

__all__ = [
    "BUILTIN_RULES",
    "CORRECTION_MODES",
    "ContextualRule",
    "CorrectionMode",
    "DEFAULT_RULE_CONFIGS",
    "DocumentRule",
    "GUIDELINES",
    "Guideline",
    "LexicalRule",
    "MorphologicalRule",
    "PRESETS",
    "RULE_CATEGORIES",
    "RULE_GUIDELINE_MAP",
    "RULE_NAMES_JA",
    "Rule",
    "RuleKind",
    "RuleMetadata",
    "RuleRunner",
    "active_guidelines",
    "build_default_rules",
    "get_correction_mode",
    "resolve_rule_configs",
]
