"""Dictionary-driven wording checks.

These rules scan for fixed phrases: tautologies, wordy constructions,
adverbs missing their required sentence ending, non-standard verb forms
and era/Western year pairs that disagree.
"""

from __future__ import annotations

import re
from typing import Iterable

from ...models import Finding, Fix, Reference, RuleConfig, RuleLevel, Severity
from ..data.expressions import (
    CATEGORY_LABELS,
    CORRELATIVE_PATTERNS,
    ERA_OFFSETS,
    I_NUKI_PAIRS,
    RA_NUKI_STEMS,
    RA_NUKI_SUFFIXES,
    REDUNDANT_EXPRESSIONS,
    SA_IRE_PAIRS,
    VERBOSE_EXPRESSIONS,
    Rewrite,
)
from ..helpers import find_all, make_finding, mask_dialogue, split_into_sentences
from ..rule import LexicalRule, RuleMetadata

STYLE_GUIDE_REF = Reference(standard="日本語スタイルガイド")
KOYO_REF = Reference(standard="文化庁「公用文作成の考え方」(2022)")
KEIGO_REF = Reference(standard="文化庁「敬語の指針」(2007)")
ERA_REF = Reference(standard="元号法 (1979)")

MIN_ENDING_LENGTH = 3

_ERA_WESTERN = re.compile(r"(令和|平成|昭和|大正|明治)(元|\d+)年[（(](\d{4})年[）)]")


def _replace_fix(replacement: str) -> Fix:
    return Fix(
        label=f'Replace with "{replacement}"',
        label_ja=f"「{replacement}」に置換",
        replacement=replacement,
    )


def lint_redundant_expression(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []
    findings = []
    for entry in REDUNDANT_EXPRESSIONS:
        for index in find_all(text, entry.pattern):
            findings.append(
                make_finding(
                    "redundant-expression",
                    config,
                    index,
                    index + len(entry.pattern),
                    f'Redundant expression "{entry.pattern}" can be replaced with "{entry.suggestion}"',
                    f"日本語スタイルガイドに基づき、「{entry.pattern}」は二重表現です。"
                    f"{entry.description_ja}。「{entry.suggestion}」への書き換えを推奨します",
                    reference=STYLE_GUIDE_REF,
                    fix=_replace_fix(entry.suggestion),
                )
            )
    return findings


def _verbose_findings(text: str, entries: Iterable[Rewrite], config: RuleConfig) -> list[Finding]:
    findings = []
    for entry in entries:
        for index in find_all(text, entry.pattern):
            findings.append(
                make_finding(
                    "verbose-expression",
                    config,
                    index,
                    index + len(entry.pattern),
                    f'Verbose expression "{entry.pattern}" can be simplified to "{entry.suggestion}"',
                    f"日本語スタイルガイドに基づき、「{entry.pattern}」は冗長表現です。{entry.description_ja}",
                    reference=STYLE_GUIDE_REF,
                    fix=_replace_fix(entry.suggestion),
                )
            )
    return findings


def lint_verbose_expression(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []
    body = mask_dialogue(text) if config.skip_dialogue else text
    findings = _verbose_findings(body, VERBOSE_EXPRESSIONS, config)
    findings.sort(key=lambda finding: finding.start)
    return findings


def lint_correlative_expression(text: str, config: RuleConfig) -> list[Finding]:
    """Flag correlative adverbs whose sentence lacks the matching ending.

    For example 決して expects a negative ending and まるで a simile.
    """

    if not text:
        return []

    findings = []
    for sentence in split_into_sentences(text):
        body = mask_dialogue(sentence.text) if config.skip_dialogue else sentence.text
        ending = body.rstrip()
        if len(ending) < MIN_ENDING_LENGTH:
            continue
        for pattern in CORRELATIVE_PATTERNS:
            positions = list(find_all(body, pattern.adverb))
            if not positions or pattern.ending.search(ending):
                continue
            label = CATEGORY_LABELS[pattern.category]
            for offset in positions:
                start = sentence.start + offset
                findings.append(
                    make_finding(
                        "correlative-expression",
                        config,
                        start,
                        start + len(pattern.adverb),
                        f'Correlative expression mismatch: "{pattern.adverb}" ({pattern.category}) '
                        f"requires a matching sentence ending ({pattern.expected_ja})",
                        f"文化庁「公用文作成の考え方」に基づき、呼応副詞「{pattern.adverb}」（{label}）"
                        f"に対応する文末表現（{pattern.expected_ja}）がありません",
                        reference=KOYO_REF,
                    )
                )
    return findings


def lint_conjugation_errors(text: str, config: RuleConfig) -> list[Finding]:
    """Detect ら抜き, さ入れ and い抜き forms outside dialogue.

    い抜き is colloquial rather than wrong, so it is always reported as info.
    """

    if not text:
        return []

    body = mask_dialogue(text)
    findings: list[Finding] = []

    for stem in RA_NUKI_STEMS:
        for suffix in RA_NUKI_SUFFIXES:
            wrong = stem + suffix
            right = f"{stem}ら{suffix}"
            for index in find_all(body, wrong):
                findings.append(
                    make_finding(
                        "conjugation-errors",
                        config,
                        index,
                        index + len(wrong),
                        f'"{wrong}" is ra-nuki (ら抜き). Standard form: "{right}"',
                        f"文化庁「敬語の指針」に基づき、「{wrong}」はら抜き言葉です。「{right}」が標準的です",
                        reference=KEIGO_REF,
                        fix=_replace_fix(right),
                    )
                )

    for wrong, right in SA_IRE_PAIRS.items():
        for index in find_all(body, wrong):
            findings.append(
                make_finding(
                    "conjugation-errors",
                    config,
                    index,
                    index + len(wrong),
                    f'"{wrong}" is sa-ire (さ入れ). Standard form: "{right}"',
                    f"文化庁「敬語の指針」に基づき、「{wrong}」はさ入れ言葉です。「{right}」が標準的です",
                    reference=KEIGO_REF,
                    fix=_replace_fix(right),
                )
            )

    info = config.model_copy(update={"severity": Severity.INFO})
    for wrong, right in I_NUKI_PAIRS.items():
        for index in find_all(body, wrong):
            findings.append(
                make_finding(
                    "conjugation-errors",
                    info,
                    index,
                    index + len(wrong),
                    f'"{wrong}" is i-nuki (い抜き). Standard form: "{right}"',
                    f"「{wrong}」はい抜き言葉です。「{right}」が標準的です",
                    reference=KEIGO_REF,
                    fix=_replace_fix(right),
                )
            )
    return findings


def lint_era_year(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings = []
    for match in _ERA_WESTERN.finditer(text):
        era, era_year_text, western_text = match.groups()
        era_year = 1 if era_year_text == "元" else int(era_year_text)
        if era_year <= 0:
            continue
        expected = ERA_OFFSETS[era] + era_year
        stated = int(western_text)
        if expected == stated:
            continue

        matched = match.group(0)
        opener = "（" if "（" in matched else "("
        closer = "）" if "）" in matched else ")"
        replacement = f"{era}{era_year_text}年{opener}{expected}年{closer}"
        findings.append(
            make_finding(
                "era-year-validator",
                config,
                match.start(),
                match.end(),
                f"Era year mismatch: {era} {era_year} should be {expected}, not {stated}.",
                f"元号法 (1979)に基づき、{era}{era_year_text}年は西暦{expected}年です（{stated}年は誤りです）",
                reference=ERA_REF,
                fix=Fix(
                    label=f'Fix to "{replacement}"',
                    label_ja=f"「{replacement}」に修正",
                    replacement=replacement,
                ),
            )
        )
    return findings


REDUNDANT_EXPRESSION = LexicalRule(
    meta=RuleMetadata(
        id="redundant-expression",
        name="Redundant expression detection",
        name_ja="二重表現の検出",
        description="Detect tautological expressions where the same meaning is expressed twice",
        description_ja="意味が重複している冗長な表現を検出",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING, skip_llm_validation=True),
    ),
    lint=lint_redundant_expression,
)

VERBOSE_EXPRESSION = LexicalRule(
    meta=RuleMetadata(
        id="verbose-expression",
        name="Verbose expression simplification",
        name_ja="冗長表現の簡略化",
        description="Detect verbose expressions and suggest concise alternatives",
        description_ja="冗長な表現を検出し、簡潔な言い換えを提案",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.INFO, skip_dialogue=True),
    ),
    lint=lint_verbose_expression,
)

CORRELATIVE_EXPRESSION = LexicalRule(
    meta=RuleMetadata(
        id="correlative-expression",
        name="Correlative expression consistency",
        name_ja="呼応表現の整合性",
        description="Check consistency between correlative adverbs and sentence endings",
        description_ja="副詞と文末表現の対応をチェック",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING, skip_dialogue=True),
    ),
    lint=lint_correlative_expression,
)

CONJUGATION_ERRORS = LexicalRule(
    meta=RuleMetadata(
        id="conjugation-errors",
        name="Conjugation error detection",
        name_ja="活用の誤り検出",
        description="Detect ra-nuki, sa-ire, and i-nuki conjugation errors",
        description_ja="ら抜き・さ入れ・い抜き言葉の検出",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING, skip_dialogue=True),
    ),
    lint=lint_conjugation_errors,
)

ERA_YEAR_VALIDATOR = LexicalRule(
    meta=RuleMetadata(
        id="era-year-validator",
        name="Era/Western year consistency",
        name_ja="元号・西暦の一致チェック",
        description="Validate consistency between Japanese era years and Western calendar years",
        description_ja="元号と西暦の対応が正しいか検証",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING, skip_llm_validation=True),
    ),
    lint=lint_era_year,
)
