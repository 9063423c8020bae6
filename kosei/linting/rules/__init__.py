"""Built-in rule catalog."""

from __future__ import annotations

from ..rule import Rule
from .consistency import ADVERB_FORM_CONSISTENCY, DESU_MASU_CONSISTENCY, NOTATION_CONSISTENCY
from .expressions import (
    CONJUGATION_ERRORS,
    CORRELATIVE_EXPRESSION,
    ERA_YEAR_VALIDATOR,
    REDUNDANT_EXPRESSION,
    VERBOSE_EXPRESSION,
)
from .homophone import HOMOPHONE_DETECTION
from .morphological import (
    CONJUNCTION_OVERUSE,
    COUNTER_WORD_MISMATCH,
    PASSIVE_OVERUSE,
    TAIGEN_DOME_OVERUSE,
    WORD_REPETITION,
)
from .notation import (
    ALPHANUMERIC_HALF_WIDTH,
    BRACKET_SPACING,
    JAPANESE_PUNCTUATION_WIDTH,
    KATAKANA_CHOUON,
    KATAKANA_WIDTH,
    MIXED_WIDTH_SPACING,
    NAKAGURO_USAGE,
    WAVE_DASH_UNIFICATION,
)
from .official import (
    CONJUNCTIVE_GA_OVERUSE,
    CONSECUTIVE_PARTICLE,
    DOUBLE_NEGATIVE,
    ITERATION_MARK,
    LARGE_NUMBER_COMMA,
    NUMBER_FORMAT,
)
from .punctuation import DASH_FORMAT, DIALOGUE_PUNCTUATION, PUNCTUATION_RULES
from .sentence_structure import (
    COMMA_FREQUENCY,
    PARTICLE_NO_REPETITION,
    SENTENCE_ENDING_REPETITION,
    SENTENCE_LENGTH,
)

BUILTIN_RULES: tuple[Rule, ...] = (
    PUNCTUATION_RULES,
    NUMBER_FORMAT,
    ERA_YEAR_VALIDATOR,
    PARTICLE_NO_REPETITION,
    CONJUGATION_ERRORS,
    REDUNDANT_EXPRESSION,
    VERBOSE_EXPRESSION,
    SENTENCE_ENDING_REPETITION,
    CORRELATIVE_EXPRESSION,
    SENTENCE_LENGTH,
    DASH_FORMAT,
    DIALOGUE_PUNCTUATION,
    COMMA_FREQUENCY,
    NOTATION_CONSISTENCY,
    DESU_MASU_CONSISTENCY,
    ADVERB_FORM_CONSISTENCY,
    TAIGEN_DOME_OVERUSE,
    CONJUNCTION_OVERUSE,
    PASSIVE_OVERUSE,
    WORD_REPETITION,
    COUNTER_WORD_MISMATCH,
    HOMOPHONE_DETECTION,
    MIXED_WIDTH_SPACING,
    BRACKET_SPACING,
    KATAKANA_WIDTH,
    KATAKANA_CHOUON,
    JAPANESE_PUNCTUATION_WIDTH,
    ALPHANUMERIC_HALF_WIDTH,
    NAKAGURO_USAGE,
    WAVE_DASH_UNIFICATION,
    ITERATION_MARK,
    LARGE_NUMBER_COMMA,
    DOUBLE_NEGATIVE,
    CONJUNCTIVE_GA_OVERUSE,
    CONSECUTIVE_PARTICLE,
)


def build_default_rules(*, include_contextual: bool = True) -> list[Rule]:
    """Every built-in rule in catalog order."""

    if include_contextual:
        return list(BUILTIN_RULES)
    return [rule for rule in BUILTIN_RULES if rule is not HOMOPHONE_DETECTION]


__all__ = ["BUILTIN_RULES", "build_default_rules"]
