"""Rules drawn from 文化庁「公用文作成の考え方」(2022).

Numeral notation, the 々 iteration mark, double negatives and particle
habits the guideline asks official writing to avoid.
"""

from __future__ import annotations

import re
from typing import Sequence

from ...models import (
    DocumentParagraph,
    Finding,
    Fix,
    ParagraphFindings,
    Reference,
    RuleConfig,
    RuleLevel,
    Severity,
    Token,
)
from ..helpers import drop_dialogue, make_finding, mask_dialogue, option_int
from ..rule import DocumentRule, LexicalRule, MorphologicalRule, RuleMetadata

KOYO_REF = Reference(standard="文化庁「公用文作成の考え方」(2022)")

KANJI_DIGITS = "零一二三四五六七八九"
_KANJI_DIGIT_VALUES = {char: value for value, char in enumerate(KANJI_DIGITS) if value}
_KANJI_UNIT_VALUES = {"十": 10, "百": 100, "千": 1000, "万": 10**4, "億": 10**8, "兆": 10**12}
_LARGE_UNIT = 10**4
KANJI_LIMIT = 10**8

# Fixed phrases always written with kanji numerals
KANJI_NUMBER_EXCEPTIONS = frozenset(
    {
        "一つ", "二つ", "三つ", "四つ", "五つ", "六つ", "七つ", "八つ", "九つ",
        "一人", "二人", "三人",
        "一日", "二日", "三日", "四日", "五日", "六日", "七日", "八日", "九日", "十日",
        "二十日", "三十日",
        "一月", "二月", "三月", "四月", "五月", "六月",
        "七月", "八月", "九月", "十月", "十一月", "十二月",
        "一番", "二番", "三番",
        "一度", "二度", "三度",
        "一方", "一般", "一部", "一切", "一応", "一旦", "一層", "一体", "一向",
        "一生懸命", "一所懸命", "一期一会",
        "七五三", "四国", "九州", "四谷", "六本木", "八王子", "三鷹",
        "三日月", "七夕", "七転八倒", "四苦八苦", "五里霧中",
        "十分", "百合", "千鳥", "万歳",
    }
)

_KANJI_NUMBER = re.compile("[一二三四五六七八九十百千万億兆]+")
_ARABIC_NUMBER = re.compile("[0-9]+")
_UNSEPARATED_5_DIGITS = re.compile("[0-9]{5,}")
_UNSEPARATED_4_DIGITS = re.compile("(?<![,0-9])[0-9]{4,}(?![,0-9])")
_THOUSANDS_GAP = re.compile(r"\B(?=(?:[0-9]{3})+(?![0-9]))")

_KANA_ITERATION = re.compile("([ぁ-んァ-ン])々")

# Specific forms first so a span is reported with its most precise advice
DOUBLE_NEGATIVE_PATTERNS = (
    ("ないではない", "二重否定「ないではない」。「ある」などに言い換えてください"),
    ("ないことはない", "二重否定「ないことはない」。直接肯定で表現してください"),
    ("なくはない", "二重否定「なくはない」。「ある」などに言い換えてください"),
    ("ないわけではない", "二重否定「ないわけではない」。「ある」に言い換えてください"),
    ("ないとも言えない", "二重否定「ないとも言えない」。直接的な表現を使ってください"),
    ("ないとは言えない", "二重否定「ないとは言えない」。直接的な表現を使ってください"),
    ("ないとは限らない", "二重否定「ないとは限らない」。直接的な表現を使ってください"),
    ("[なに][いく]ではな[いく]", "二重否定。肯定的な表現に言い換えてください"),
)
_DOUBLE_NEGATIVES = tuple((re.compile(pattern), note) for pattern, note in DOUBLE_NEGATIVE_PATTERNS)

MONITORED_PARTICLES = frozenset({"は", "が", "を", "に", "で", "て", "も", "へ", "から", "より"})
DEFAULT_MAX_CONJUNCTIVE_GA = 2


# ---------------------------------------------------------------------------
# number-format
# ---------------------------------------------------------------------------


def kanji_to_arabic(kanji: str) -> int | None:
    """``"三百五十"`` -> 350. ``None`` when the characters do not form a number.

    Small units (十百千) must appear in decreasing order within a 万 block.
    """

    total = 0
    current = 0
    last_small_unit: int | None = None
    for char in kanji:
        if char in _KANJI_DIGIT_VALUES:
            current = _KANJI_DIGIT_VALUES[char]
            continue
        unit = _KANJI_UNIT_VALUES.get(char)
        if unit is None:
            return None
        if unit >= _LARGE_UNIT:
            total = (total + (current or 1)) * unit
            last_small_unit = None
        else:
            if last_small_unit is not None and unit >= last_small_unit:
                return None
            total += (current or 1) * unit
            last_small_unit = unit
        current = 0
    total += current
    return total or None


def _block_to_kanji(number: int) -> str:
    parts = []
    for unit, name in ((1000, "千"), (100, "百"), (10, "十")):
        count, number = divmod(number, unit)
        if count:
            parts.append(name if count == 1 else KANJI_DIGITS[count] + name)
    if number:
        parts.append(KANJI_DIGITS[number])
    return "".join(parts)


def arabic_to_kanji(number: int) -> str:
    """``1500`` -> ``"千五百"``; ``10000`` -> ``"一万"``.

    Values outside ``1..99999999`` come back as plain digits.
    """

    if number <= 0 or number >= KANJI_LIMIT:
        return str(number)
    man, rest = divmod(number, _LARGE_UNIT)
    text = _block_to_kanji(man) + "万" if man else ""
    return text + _block_to_kanji(rest)


def is_kanji_exception(text: str, start: int, end: int) -> bool:
    """True when an idiomatic phrase overlaps ``text[start:end]``."""

    for phrase in KANJI_NUMBER_EXCEPTIONS:
        index = text.find(phrase, max(0, start - len(phrase) + 1))
        while index != -1 and index < end:
            if index + len(phrase) > start:
                return True
            index = text.find(phrase, index + 1)
    return False


def _kanji_in_horizontal(body: str, text: str, config: RuleConfig) -> list[Finding]:
    findings = []
    for match in _KANJI_NUMBER.finditer(body):
        if is_kanji_exception(text, match.start(), match.end()):
            continue
        value = kanji_to_arabic(match.group())
        if value is None:
            continue
        findings.append(
            make_finding(
                "number-format",
                config,
                match.start(),
                match.end(),
                "In horizontal writing, Arabic numerals are recommended instead of kanji numerals.",
                "文化庁「公用文作成の考え方」に基づき、横書きではアラビア数字の使用が推奨されます",
                reference=KOYO_REF,
                fix=Fix(label=f'Replace with "{value}"', label_ja=f"「{value}」に置換", replacement=str(value)),
            )
        )
    return findings


def _missing_commas(body: str, config: RuleConfig) -> list[Finding]:
    findings = []
    for match in _UNSEPARATED_5_DIGITS.finditer(body):
        formatted = f"{int(match.group()):,}"
        findings.append(
            make_finding(
                "number-format",
                config,
                match.start(),
                match.end(),
                "Large numbers should use comma separators in horizontal writing.",
                "文化庁「公用文作成の考え方」に基づき、横書きの大きな数字には桁区切りのカンマを使用してください",
                reference=KOYO_REF,
                fix=Fix(label=f'Format as "{formatted}"', label_ja=f"「{formatted}」に置換", replacement=formatted),
            )
        )
    return findings


def _arabic_in_vertical(body: str, config: RuleConfig) -> list[Finding]:
    findings = []
    for match in _ARABIC_NUMBER.finditer(body):
        value = int(match.group())
        # Zero has no kanji numeral form here; large values stay as digits
        if value <= 0 or value >= KANJI_LIMIT:
            continue
        kanji = arabic_to_kanji(value)
        findings.append(
            make_finding(
                "number-format",
                config,
                match.start(),
                match.end(),
                "In vertical writing, kanji numerals are recommended instead of Arabic numerals.",
                "文化庁「公用文作成の考え方」に基づき、縦書きでは漢数字の使用が推奨されます",
                reference=KOYO_REF,
                fix=Fix(label=f'Replace with "{kanji}"', label_ja=f"「{kanji}」に置換", replacement=kanji),
            )
        )
    return findings


def lint_number_format(text: str, config: RuleConfig) -> list[Finding]:
    """Kanji numerals in horizontal text, Arabic numerals in vertical text.

    ``isVertical`` selects the direction. Horizontal text also gets the
    five-or-more-digit comma check; four digits are usually years.
    """

    if not text:
        return []

    body = mask_dialogue(text) if config.skip_dialogue else text
    if config.option("isVertical", False):
        return _arabic_in_vertical(body, config)
    findings = _kanji_in_horizontal(body, text, config) + _missing_commas(body, config)
    return sorted(findings, key=lambda finding: finding.start)


# ---------------------------------------------------------------------------
# iteration-mark
# ---------------------------------------------------------------------------


def lint_iteration_mark(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings = []
    for match in _KANA_ITERATION.finditer(text):
        kana = match.group(1)
        hiragana = kana <= "ん"
        kind_ja = "平仮名" if hiragana else "片仮名"
        kind = "hiragana" if hiragana else "katakana"
        position = match.start() + 1
        findings.append(
            make_finding(
                "iteration-mark",
                config,
                position,
                position + 1,
                f'"々" should only follow kanji characters, not {kind} (公用文作成の考え方)',
                f"公用文作成の考え方に基づき、繰り返し符号「々」は漢字の後にのみ使用できます。"
                f"{kind_ja}「{kana}」の後には使用しないでください",
                reference=KOYO_REF,
            )
        )
    if config.skip_dialogue:
        findings = drop_dialogue(findings, text)
    return findings


# ---------------------------------------------------------------------------
# large-number-comma
# ---------------------------------------------------------------------------


def add_thousands_separators(digits: str) -> str:
    """Insert commas every three digits from the right, keeping leading zeros."""

    return _THOUSANDS_GAP.sub(",", digits)


def lint_large_number_comma(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings = []
    for match in _UNSEPARATED_4_DIGITS.finditer(text):
        digits = match.group()
        formatted = add_thousands_separators(digits)
        findings.append(
            make_finding(
                "large-number-comma",
                config,
                match.start(),
                match.end(),
                f'Large number "{digits}" should use comma separators: "{formatted}" (公用文作成の考え方)',
                f"公用文作成の考え方に基づき、大きな数字「{digits}」には桁区切りのカンマを入れてください（例：{formatted}）",
                reference=KOYO_REF,
                fix=Fix(
                    label=f'Add comma separators: "{formatted}"',
                    label_ja=f"「{formatted}」に変換",
                    replacement=formatted,
                ),
            )
        )
    if config.skip_dialogue:
        findings = drop_dialogue(findings, text)
    return findings


# ---------------------------------------------------------------------------
# double-negative
# ---------------------------------------------------------------------------


def lint_double_negative(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings: list[Finding] = []
    seen: set[tuple[int, int]] = set()
    for pattern, note in _DOUBLE_NEGATIVES:
        for match in pattern.finditer(text):
            span = match.span()
            if span in seen:
                continue
            seen.add(span)
            phrase = match.group()
            findings.append(
                make_finding(
                    "double-negative",
                    config,
                    span[0],
                    span[1],
                    f'Double negative detected: "{phrase}". {note}',
                    f"二重否定が検出されました：「{phrase}」。{note}",
                    reference=KOYO_REF,
                )
            )
    return sorted(findings, key=lambda finding: finding.start)


# ---------------------------------------------------------------------------
# consecutive-particle
# ---------------------------------------------------------------------------


def lint_consecutive_particle(text: str, tokens: Sequence[Token], config: RuleConfig) -> list[Finding]:
    findings = []
    for previous, current in zip(tokens, tokens[1:]):
        if previous.pos != "助詞" or current.pos != "助詞":
            continue
        if previous.surface != current.surface or current.surface not in MONITORED_PARTICLES:
            continue
        particle = current.surface
        findings.append(
            make_finding(
                "consecutive-particle",
                config,
                previous.start,
                current.end,
                f'Consecutive identical particle "{particle}{particle}" detected. Restructure the sentence.',
                f"助詞「{particle}」が連続しています（「{particle}{particle}」）。"
                "文の構造を見直してください（公用文作成の考え方）",
                reference=KOYO_REF,
            )
        )
    return findings


# ---------------------------------------------------------------------------
# conjunctive-ga-overuse
# ---------------------------------------------------------------------------


def _conjunctive_ga(tokens: Sequence[Token]) -> list[Token]:
    return [
        token
        for token in tokens
        if token.surface == "が" and token.pos == "助詞" and token.pos_detail_1 == "接続助詞"
    ]


def lint_conjunctive_ga_overuse(
    paragraphs: Sequence[DocumentParagraph], config: RuleConfig
) -> list[ParagraphFindings]:
    """Flag every conjunctive が past ``maxPerParagraph`` in a paragraph."""

    limit = option_int(config, "maxPerParagraph", DEFAULT_MAX_CONJUNCTIVE_GA)
    results = []
    for paragraph in paragraphs:
        occurrences = _conjunctive_ga(paragraph.tokens)
        if len(occurrences) <= limit:
            continue
        count = len(occurrences)
        findings = [
            make_finding(
                "conjunctive-ga-overuse",
                config,
                token.start,
                token.end,
                f'Conjunctive "が" appears {count} times in this paragraph (max {limit}). '
                "Consider splitting the sentence.",
                f"この段落で接続助詞「が」が{count}回使われています（推奨は{limit}回以内）。"
                "文を分割することを検討してください（公用文作成の考え方）",
                reference=KOYO_REF,
            )
            for token in occurrences[limit:]
        ]
        results.append(ParagraphFindings(paragraph_index=paragraph.index, findings=findings))
    return results


NUMBER_FORMAT = LexicalRule(
    meta=RuleMetadata(
        id="number-format",
        name="Number format consistency",
        name_ja="数字表記の統一",
        description="Check for mixed Arabic/Kanji numeral usage",
        description_ja="漢数字とアラビア数字の混在チェック",
        level=RuleLevel.L1,
        default_config=RuleConfig(
            severity=Severity.WARNING,
            skip_dialogue=True,
            skip_llm_validation=True,
            options={"isVertical": False},
        ),
    ),
    lint=lint_number_format,
)

ITERATION_MARK = LexicalRule(
    meta=RuleMetadata(
        id="iteration-mark",
        name="Correct use of kanji iteration mark (々)",
        name_ja="繰り返し符号「々」の制限",
        description="Detects 々 used after hiragana or katakana (invalid usage)",
        description_ja="平仮名・片仮名の後に「々」が使われている無効な用法を検出します",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING, skip_dialogue=True, skip_llm_validation=True),
    ),
    lint=lint_iteration_mark,
)

LARGE_NUMBER_COMMA = LexicalRule(
    meta=RuleMetadata(
        id="large-number-comma",
        name="Use commas in large numbers",
        name_ja="大きな数字の桁区切り",
        description="Detects numbers with 4+ digits that lack comma thousand-separators",
        description_ja="4桁以上の数字に桁区切りのカンマがない場合を検出します",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING, skip_dialogue=True, skip_llm_validation=True),
    ),
    lint=lint_large_number_comma,
)

DOUBLE_NEGATIVE = LexicalRule(
    meta=RuleMetadata(
        id="double-negative",
        name="Double Negative",
        name_ja="二重否定の禁止",
        description="Double negatives create ambiguity and should be avoided in official writing",
        description_ja="二重否定（ないではない・ないことはない等）は公用文では原則として使いません",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING),
    ),
    lint=lint_double_negative,
)

CONSECUTIVE_PARTICLE = MorphologicalRule(
    meta=RuleMetadata(
        id="consecutive-particle",
        name="Consecutive Particle",
        name_ja="同一助詞の連続使用制限",
        description="The same particle should not appear consecutively",
        description_ja="同一の助詞を連続して使うと読みにくくなります。文の構造を見直してください",
        level=RuleLevel.L2,
        default_config=RuleConfig(severity=Severity.WARNING),
    ),
    lint=lint_consecutive_particle,
)

CONJUNCTIVE_GA_OVERUSE = DocumentRule(
    meta=RuleMetadata(
        id="conjunctive-ga-overuse",
        name="Conjunctive が Overuse",
        name_ja="接続助詞「が」の多用禁止",
        description="Limit the use of conjunctive が to avoid long, convoluted sentences",
        description_ja="接続助詞「が」の多用を避け、文を分けてください",
        level=RuleLevel.L2,
        default_config=RuleConfig(
            severity=Severity.WARNING,
            options={"maxPerParagraph": DEFAULT_MAX_CONJUNCTIVE_GA},
        ),
    ),
    lint=lint_conjunctive_ga_overuse,
    needs_tokens=True,
)
