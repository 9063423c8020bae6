"""Rules that need the paragraph's tokens."""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Sequence

from ...models import Finding, Fix, Reference, RuleConfig, RuleLevel, SentenceSpan, Severity, Token
from ..data.counters import COUNTER_MISMATCHES
from ..helpers import (
    find_runs,
    is_in_dialogue,
    make_finding,
    option_int,
    split_into_sentences,
    tokens_in_range,
)
from ..rule import MorphologicalRule, RuleMetadata

STYLE_GUIDE_REF = Reference(standard="日本語スタイルガイド")
KOYO_REF = Reference(standard="文化庁「公用文作成の考え方」(2022)")

CONTENT_POS = frozenset({"名詞", "動詞", "形容詞", "副詞"})
REPETITION_EXCLUDED_DETAILS = frozenset({"非自立", "接尾", "数"})
COUNTER_EXCLUDED_DETAILS = frozenset({"非自立", "接尾", "数", "代名詞"})
NOUN_SEARCH_WINDOW = 10
COUNTER_LOOKAHEAD = 2


def _sentence_runs(
    text: str,
    tokens: Sequence[Token],
    threshold: int,
    predicate: Callable[[Sequence[Token]], bool],
    *,
    skip_dialogue: bool,
) -> list[tuple[SentenceSpan, SentenceSpan, int]]:
    """Find runs of consecutive sentences whose tokens satisfy ``predicate``.

    Dialogue sentences break a run when ``skip_dialogue`` is set.
    """

    sentences = split_into_sentences(text)
    if len(sentences) < threshold:
        return []

    flags = []
    for sentence in sentences:
        if skip_dialogue and is_in_dialogue(sentence.start, text):
            flags.append(False)
            continue
        flags.append(predicate(tokens_in_range(tokens, sentence.start, sentence.end)))

    return [
        (sentences[first], sentences[last], last - first + 1)
        for first, last in find_runs(flags, threshold)
    ]


# ---------------------------------------------------------------------------
# Sentence-run rules
# ---------------------------------------------------------------------------


def ends_with_noun(sentence_tokens: Sequence[Token]) -> bool:
    for token in reversed(sentence_tokens):
        if token.pos != "記号" and token.surface.strip():
            return token.pos == "名詞"
    return False


def starts_with_conjunction(sentence_tokens: Sequence[Token]) -> bool:
    for token in sentence_tokens:
        if token.surface.strip():
            return token.pos == "接続詞"
    return False


def has_passive_voice(sentence_tokens: Sequence[Token]) -> bool:
    for token in sentence_tokens:
        lemma = token.lemma
        if (
            lemma in ("れる", "られる")
            and token.pos == "動詞"
            and token.pos_detail_1 in ("接尾", "非自立")
        ):
            return True
        if lemma in ("される", "させられる"):
            return True
    return False


def lint_taigen_dome(text: str, tokens: Sequence[Token], config: RuleConfig) -> list[Finding]:
    if not text or not tokens:
        return []
    threshold = option_int(config, "threshold", 4)
    runs = _sentence_runs(text, tokens, threshold, ends_with_noun, skip_dialogue=config.skip_dialogue)
    return [
        make_finding(
            "taigen-dome-overuse",
            config,
            first.start,
            last.end,
            f"{count} consecutive sentences end with nouns (taigen-dome)",
            f"日本語スタイルガイドに基づき、{count}文連続で体言止めが使われています",
            reference=STYLE_GUIDE_REF,
        )
        for first, last, count in runs
    ]


def lint_conjunction_overuse(
    text: str, tokens: Sequence[Token], config: RuleConfig
) -> list[Finding]:
    if not text or not tokens:
        return []
    threshold = option_int(config, "threshold", 3)
    runs = _sentence_runs(
        text, tokens, threshold, starts_with_conjunction, skip_dialogue=config.skip_dialogue
    )
    return [
        make_finding(
            "conjunction-overuse",
            config,
            first.start,
            last.end,
            f"{count} consecutive sentences start with conjunctions",
            f"日本語スタイルガイドに基づき、{count}文連続で接続詞から始まっています",
            reference=STYLE_GUIDE_REF,
        )
        for first, last, count in runs
    ]


def lint_passive_overuse(text: str, tokens: Sequence[Token], config: RuleConfig) -> list[Finding]:
    """Dialogue always breaks a passive run, regardless of ``skip_dialogue``."""

    if not text or not tokens:
        return []
    threshold = option_int(config, "threshold", 3)
    runs = _sentence_runs(text, tokens, threshold, has_passive_voice, skip_dialogue=True)
    return [
        make_finding(
            "passive-overuse",
            config,
            first.start,
            last.end,
            f"{count} consecutive sentences use passive voice",
            f"日本語スタイルガイドに基づき、{count}文連続で受動態が使われています",
            reference=STYLE_GUIDE_REF,
        )
        for first, last, count in runs
    ]


# ---------------------------------------------------------------------------
# word-repetition
# ---------------------------------------------------------------------------


def _content_words(sentence_tokens: Sequence[Token]) -> list[Token]:
    words = []
    for token in sentence_tokens:
        if token.pos not in CONTENT_POS:
            continue
        if token.pos_detail_1 in REPETITION_EXCLUDED_DETAILS or token.pos_detail_1 == "固有名詞":
            continue
        if len(token.surface) <= 1:
            continue
        words.append(token)
    return words


def lint_word_repetition(text: str, tokens: Sequence[Token], config: RuleConfig) -> list[Finding]:
    """Flag content words used ``threshold`` or more times within a sliding window.

    The first occurrence in each window is left alone; later ones are
    reported once each even when several windows cover them.
    """

    if not text or not tokens:
        return []

    threshold = option_int(config, "threshold", 3)
    window = option_int(config, "windowSize", 5)
    sentences = split_into_sentences(text)
    per_sentence = [
        _content_words(tokens_in_range(tokens, s.start, s.end)) for s in sentences
    ]

    findings: list[Finding] = []
    flagged: set[tuple[int, int]] = set()
    for window_start in range(len(sentences) - window + 1):
        grouped: dict[str, list[Token]] = defaultdict(list)
        for words in per_sentence[window_start : window_start + window]:
            for token in words:
                grouped[token.lemma].append(token)

        for lemma, occurrences in grouped.items():
            count = len(occurrences)
            if count < threshold:
                continue
            for token in occurrences[1:]:
                key = (token.start, token.end)
                if key in flagged:
                    continue
                flagged.add(key)
                findings.append(
                    make_finding(
                        "word-repetition",
                        config,
                        token.start,
                        token.end,
                        f"'{lemma}' appears {count} times in {window} consecutive sentences",
                        f"日本語スタイルガイドに基づき、「{lemma}」が{window}文中に{count}回使われています",
                        reference=STYLE_GUIDE_REF,
                    )
                )

    findings.sort(key=lambda finding: (finding.start, finding.end))
    return findings


# ---------------------------------------------------------------------------
# counter-word-mismatch
# ---------------------------------------------------------------------------


def _is_number(token: Token) -> bool:
    return token.pos == "名詞" and token.pos_detail_1 == "数"


def _is_counter(token: Token) -> bool:
    return token.pos == "名詞" and token.pos_detail_1 == "接尾" and token.pos_detail_2 == "助数詞"


def _is_content_noun(token: Token) -> bool:
    return token.pos == "名詞" and token.pos_detail_1 not in COUNTER_EXCLUDED_DETAILS


def _nearby_noun(tokens: Sequence[Token], number_index: int, counter_index: int) -> Token | None:
    """Closest content noun before the number, else after the counter."""

    for index in range(number_index - 1, max(number_index - NOUN_SEARCH_WINDOW, 0) - 1, -1):
        if _is_content_noun(tokens[index]):
            return tokens[index]
    stop = min(counter_index + NOUN_SEARCH_WINDOW, len(tokens) - 1)
    for index in range(counter_index + 1, stop + 1):
        if _is_content_noun(tokens[index]):
            return tokens[index]
    return None


def lint_counter_word_mismatch(
    text: str, tokens: Sequence[Token], config: RuleConfig
) -> list[Finding]:
    if not text or not tokens:
        return []

    findings = []
    for index, token in enumerate(tokens):
        if config.skip_dialogue and is_in_dialogue(token.start, text):
            continue
        if not _is_number(token):
            continue

        counter_index = next(
            (
                j
                for j in range(index + 1, min(index + COUNTER_LOOKAHEAD, len(tokens) - 1) + 1)
                if _is_counter(tokens[j])
            ),
            None,
        )
        if counter_index is None:
            continue
        counter = tokens[counter_index]
        noun = _nearby_noun(tokens, index, counter_index)
        if noun is None:
            continue

        for mismatch in COUNTER_MISMATCHES:
            if counter.surface != mismatch.counter:
                continue
            if noun.surface not in mismatch.invalid_nouns and noun.lemma not in mismatch.invalid_nouns:
                continue
            findings.append(
                make_finding(
                    "counter-word-mismatch",
                    config,
                    counter.start,
                    counter.end,
                    f"Counter '{counter.surface}' may be incorrect for '{noun.surface}'; "
                    f"consider '{mismatch.suggestion}'",
                    f"文化庁「公用文作成の考え方」に基づき、「{noun.surface}」に対して助数詞"
                    f"「{counter.surface}」は不適切です。{mismatch.description_ja}",
                    reference=KOYO_REF,
                    fix=Fix(
                        label=f"Replace with '{mismatch.suggestion}'",
                        label_ja=f"「{mismatch.suggestion}」に置換",
                        replacement=mismatch.suggestion,
                    ),
                )
            )
            break
    return findings


TAIGEN_DOME_OVERUSE = MorphologicalRule(
    meta=RuleMetadata(
        id="taigen-dome-overuse",
        name="Taigen-dome Overuse",
        name_ja="体言止めの多用検出",
        description="Flags consecutive sentences ending with nouns",
        description_ja="体言止めが連続している箇所を検出します",
        level=RuleLevel.L2,
        default_config=RuleConfig(severity=Severity.INFO, options={"threshold": 4}),
    ),
    lint=lint_taigen_dome,
)

CONJUNCTION_OVERUSE = MorphologicalRule(
    meta=RuleMetadata(
        id="conjunction-overuse",
        name="Conjunction Overuse",
        name_ja="接続詞の多用検出",
        description="Flags consecutive sentences starting with conjunctions",
        description_ja="接続詞で始まる文が連続している箇所を検出します",
        level=RuleLevel.L2,
        default_config=RuleConfig(severity=Severity.INFO, options={"threshold": 3}),
    ),
    lint=lint_conjunction_overuse,
)

PASSIVE_OVERUSE = MorphologicalRule(
    meta=RuleMetadata(
        id="passive-overuse",
        name="Passive Overuse",
        name_ja="受動態の多用検出",
        description="Flags consecutive passive-voice sentences",
        description_ja="受動態が連続して使われている箇所を検出します",
        level=RuleLevel.L2,
        default_config=RuleConfig(severity=Severity.INFO, options={"threshold": 3}),
    ),
    lint=lint_passive_overuse,
)

WORD_REPETITION = MorphologicalRule(
    meta=RuleMetadata(
        id="word-repetition",
        name="Word Repetition",
        name_ja="近接語句の反復検出",
        description="Detects repeated content words in nearby sentences",
        description_ja="近接する文で同じ語句が繰り返し使われている箇所を検出します",
        level=RuleLevel.L2,
        default_config=RuleConfig(
            severity=Severity.INFO, options={"threshold": 3, "windowSize": 5}
        ),
    ),
    lint=lint_word_repetition,
)

COUNTER_WORD_MISMATCH = MorphologicalRule(
    meta=RuleMetadata(
        id="counter-word-mismatch",
        name="Counter Word Mismatch",
        name_ja="助数詞の誤用検出",
        description="Validates number + counter word combinations",
        description_ja="助数詞と数えられる対象の組み合わせの誤りを検出します",
        level=RuleLevel.L2,
        default_config=RuleConfig(severity=Severity.WARNING),
    ),
    lint=lint_counter_word_mismatch,
)
