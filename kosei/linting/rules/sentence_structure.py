"""Sentence-level checks: comma density, length, repeated endings and の chains."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ...models import Finding, Reference, RuleConfig, RuleLevel, Severity
from ..helpers import (
    MASK_CHAR,
    effective_length,
    is_in_dialogue,
    make_finding,
    mask_dialogue,
    option_float,
    option_int,
    split_into_sentences,
)
from ..rule import LexicalRule, RuleMetadata

STYLE_GUIDE_REF = Reference(standard="日本語スタイルガイド")
KOYO_REF = Reference(standard="文化庁「公用文作成の考え方」(2022)")

MIN_LENGTH_FOR_DENSITY = 8

NO_EXCEPTION_WORDS = ("このまま", "そのまま", "あのまま", "ものの", "もの", "この", "その", "あの", "どの")
_NO_EXCEPTIONS = re.compile(
    "|".join(sorted(NO_EXCEPTION_WORDS, key=len, reverse=True))
)


# ---------------------------------------------------------------------------
# comma-frequency
# ---------------------------------------------------------------------------


def lint_comma_frequency(text: str, config: RuleConfig) -> list[Finding]:
    """Flag sentences with too many commas, and long sentences with none."""

    if not text:
        return []

    max_ratio = option_float(config, "maxCommaRatio", 0.125)
    min_length = option_int(config, "minLengthForComma", 50)

    findings: list[Finding] = []
    for sentence in split_into_sentences(text):
        body = mask_dialogue(sentence.text) if config.skip_dialogue else sentence.text
        commas = body.count("、")
        length = effective_length(body)

        if length >= MIN_LENGTH_FOR_DENSITY and commas > 0 and commas / length > max_ratio:
            ratio = commas / length
            findings.append(
                make_finding(
                    "comma-frequency",
                    config,
                    sentence.start,
                    sentence.end,
                    f"Sentence has {commas} commas in {length} characters (ratio: {ratio:.2f})",
                    f"一文に読点が{commas}個あります（{length}文字中、比率: {ratio:.2f}）",
                    reference=KOYO_REF,
                )
            )

        if length > 0 and commas == 0 and length > min_length:
            findings.append(
                make_finding(
                    "comma-frequency",
                    config,
                    sentence.start,
                    sentence.end,
                    f"Long sentence ({length} characters) has no commas",
                    f"{length}文字の文に読点がありません",
                    reference=KOYO_REF,
                )
            )
    return findings


# ---------------------------------------------------------------------------
# sentence-length
# ---------------------------------------------------------------------------


def lint_sentence_length(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    max_length = option_int(config, "maxLength", 100)
    findings = []
    for sentence in split_into_sentences(text):
        length = len(mask_dialogue(sentence.text).replace(MASK_CHAR, ""))
        if length <= max_length:
            continue
        findings.append(
            make_finding(
                "sentence-length",
                config,
                sentence.start,
                sentence.end,
                f"Sentence is {length} characters long (threshold: {max_length})",
                f"日本語スタイルガイドに基づき、一文が{length}文字あります（推奨上限: {max_length}文字）",
                reference=STYLE_GUIDE_REF,
            )
        )
    return findings


# ---------------------------------------------------------------------------
# sentence-ending-repetition
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Ending:
    start: int
    end: int
    pattern: str | None


def _period_sentences(text: str) -> list[_Ending]:
    """Sentences terminated by 。, each span including its period.

    The ending pattern is the last two characters before the period, ignoring
    one closing 」.
    """

    sentences: list[_Ending] = []
    start = 0
    for index, char in enumerate(text):
        if char != "。":
            continue
        body = text[start:index].strip()
        if not body:
            start = index + 1
            continue
        if body.endswith("」"):
            body = body[:-1]
        pattern = body[-2:] if body else None
        sentences.append(_Ending(start, index + 1, pattern))
        start = index + 1
    return sentences


def lint_sentence_ending_repetition(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    threshold = option_int(config, "threshold", 3)
    sentences = _period_sentences(text)
    if len(sentences) < threshold:
        return []

    findings: list[Finding] = []
    run_start = 0
    run_length = 0
    run_pattern: str | None = None

    def close_run(last: int) -> None:
        if run_pattern is None or run_length < threshold:
            return
        findings.append(
            make_finding(
                "sentence-ending-repetition",
                config,
                sentences[run_start].start,
                sentences[last].end,
                f'Sentence ending repetition: pattern "{run_pattern}" appears {run_length} '
                f"times consecutively (recommended: fewer than {run_length})",
                f"日本語スタイルガイドに基づき、同じ文末表現「{run_pattern}」が{run_length}文連続しています。"
                "文末の変化をお勧めします",
                reference=STYLE_GUIDE_REF,
            )
        )

    for index, sentence in enumerate(sentences):
        if sentence.pattern is None or is_in_dialogue(sentence.start, text):
            close_run(index - 1)
            run_pattern = None
            run_length = 0
            run_start = index + 1
            continue
        if sentence.pattern == run_pattern:
            run_length += 1
            continue
        close_run(index - 1)
        run_pattern = sentence.pattern
        run_start = index
        run_length = 1

    close_run(len(sentences) - 1)
    return findings


# ---------------------------------------------------------------------------
# particle-no-repetition
# ---------------------------------------------------------------------------


def count_particle_no(sentence: str) -> int:
    """Count の outside fixed words such as その and このまま."""

    masked = _NO_EXCEPTIONS.sub(lambda m: MASK_CHAR * len(m.group(0)), sentence)
    return masked.count("の")


def lint_particle_no_repetition(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    threshold = option_int(config, "threshold", 4)
    body = mask_dialogue(text) if config.skip_dialogue else text
    findings = []
    for sentence in split_into_sentences(body):
        count = count_particle_no(sentence.text)
        if count < threshold:
            continue
        findings.append(
            make_finding(
                "particle-no-repetition",
                config,
                sentence.start,
                sentence.end,
                f"Excessive particle の usage: {count} occurrences in one sentence "
                f"(recommended: fewer than {threshold})",
                f"日本語スタイルガイドに基づき、1文中に助詞「の」が{count}回使用されています（推奨: {threshold}回未満）",
                reference=STYLE_GUIDE_REF,
            )
        )
    return findings


COMMA_FREQUENCY = LexicalRule(
    meta=RuleMetadata(
        id="comma-frequency",
        name="Comma Frequency",
        name_ja="読点の頻度チェック",
        description="Flags sentences with too many or too few commas",
        description_ja="読点が多すぎる、または少なすぎる文を検出します",
        level=RuleLevel.L1,
        default_config=RuleConfig(
            severity=Severity.INFO,
            options={"maxCommaRatio": 0.125, "minLengthForComma": 50},
        ),
    ),
    lint=lint_comma_frequency,
)

SENTENCE_LENGTH = LexicalRule(
    meta=RuleMetadata(
        id="sentence-length",
        name="Sentence Length",
        name_ja="長文の検出",
        description="Flags sentences exceeding configurable length threshold",
        description_ja="設定した文字数を超える文を検出します",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.INFO, options={"maxLength": 100}),
    ),
    lint=lint_sentence_length,
)

SENTENCE_ENDING_REPETITION = LexicalRule(
    meta=RuleMetadata(
        id="sentence-ending-repetition",
        name="Sentence ending repetition",
        name_ja="文末表現の重複",
        description="Detect consecutive sentences with the same ending pattern",
        description_ja="同じ文末表現が連続する箇所を検出",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.INFO, options={"threshold": 3}),
    ),
    lint=lint_sentence_ending_repetition,
)

PARTICLE_NO_REPETITION = LexicalRule(
    meta=RuleMetadata(
        id="particle-no-repetition",
        name="Excessive particle の usage",
        name_ja="助詞「の」の連続使用",
        description="Detect excessive use of particle の in a single sentence",
        description_ja="1文中の「の」の多用を検出",
        level=RuleLevel.L1,
        default_config=RuleConfig(
            severity=Severity.INFO, skip_dialogue=True, options={"threshold": 4}
        ),
    ),
    lint=lint_particle_no_repetition,
)
