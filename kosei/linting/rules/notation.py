"""Character-level notation checks from the JTF Japanese style guide.

Most of these look at single characters or the space next to them, so they
run on raw paragraph text. ``katakana-chouon`` needs tokens to know where a
katakana word starts and ends.
"""

from __future__ import annotations

import re
import unicodedata
from collections import Counter
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
from ..helpers import drop_dialogue, make_finding
from ..rule import DocumentRule, LexicalRule, MorphologicalRule, RuleMetadata

JTF_STANDARD = "JTF日本語標準スタイルガイド v3.0"


def _jtf(section: str) -> Reference:
    return Reference(standard=JTF_STANDARD, section=section)


_CJK = "\u3000-\u9fff\uff00-\uffef"
_ASCII = "!-~"
_CJK_SPACE_ASCII = re.compile(f"[{_CJK}] [{_ASCII}]")
_ASCII_SPACE_CJK = re.compile(f"[{_ASCII}] [{_CJK}]")
_CJK_CHAR = re.compile(f"[{_CJK}]")

_SPACE_AFTER_OPEN = re.compile(r"[（「『【〔〈《〘〚]\s")
_SPACE_BEFORE_CLOSE = re.compile(r"\s[）」』】〕〉》〙〛]")

_HALF_KATAKANA = re.compile("[\uff66-\uff9f]")
# NFKC turns the half-width sound marks into combining characters
_SOUND_MARKS = {"ﾞ": "゛", "ﾟ": "゜"}

_KATAKANA_WORD = re.compile("^[\u30a0-\u30ff]+$")
_REPEATED_VOWELS = tuple(
    (pair, pair[0] + "ー") for pair in ("アア", "イイ", "ウウ", "エエ", "オオ", "ラア", "リイ", "ルウ", "レエ", "ロオ")
)

_HALF_PUNCTUATION = {"!": "！", "?": "？"}

WAVE_DASH = "〜"
FULLWIDTH_TILDE = "～"
_WAVE_NAMES = {WAVE_DASH: "波ダッシュ（U+301C）", FULLWIDTH_TILDE: "全角チルダ（U+FF5E）"}

_BULLET = re.compile(r"^[　\s]*・")
_SEPARATOR = re.compile(r"\S・\S")

_FULL_WIDTH_ALNUM = re.compile("[\uff10-\uff19\uff21-\uff3a\uff41-\uff5a]")
_FULL_TO_HALF_OFFSET = 0xFEE0

_REMOVE_SPACE = Fix(label="Remove space", label_ja="スペースを削除", replacement="")


# ---------------------------------------------------------------------------
# mixed-width-spacing
# ---------------------------------------------------------------------------


def lint_mixed_width_spacing(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings: list[Finding] = []
    flagged: set[int] = set()
    patterns = (
        (_CJK_SPACE_ASCII, "Japanese and ASCII", "和文とASCII文字"),
        (_ASCII_SPACE_CJK, "ASCII and Japanese", "ASCII文字と和文"),
    )
    for pattern, pair, pair_ja in patterns:
        for match in pattern.finditer(text):
            space = match.start() + 1
            if space in flagged:
                continue
            flagged.add(space)
            findings.append(
                make_finding(
                    "mixed-width-spacing",
                    config,
                    space,
                    space + 1,
                    f"Do not insert a space between {pair} characters (JTF 2.1.6)",
                    f"JTF 2.1.6に基づき、{pair_ja}の間にスペースを入れないでください",
                    reference=_jtf("2.1.6"),
                    fix=_REMOVE_SPACE,
                )
            )
    if config.skip_dialogue:
        findings = drop_dialogue(findings, text)
    return sorted(findings, key=lambda finding: finding.start)


# ---------------------------------------------------------------------------
# bracket-spacing
# ---------------------------------------------------------------------------


def lint_bracket_spacing(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings: list[Finding] = []
    for match in _SPACE_AFTER_OPEN.finditer(text):
        bracket = match.group()[0]
        space = match.start() + 1
        findings.append(
            make_finding(
                "bracket-spacing",
                config,
                space,
                space + 1,
                f'Remove space after opening bracket "{bracket}" (JTF 2.1.7)',
                f"JTF 2.1.7に基づき、括弧「{bracket}」の直後にスペースを入れないでください",
                reference=_jtf("2.1.7"),
                fix=_REMOVE_SPACE,
            )
        )
    flagged = {finding.start for finding in findings}
    for match in _SPACE_BEFORE_CLOSE.finditer(text):
        bracket = match.group()[1]
        space = match.start()
        if space in flagged:
            continue
        findings.append(
            make_finding(
                "bracket-spacing",
                config,
                space,
                space + 1,
                f'Remove space before closing bracket "{bracket}" (JTF 2.1.7)',
                f"JTF 2.1.7に基づき、括弧「{bracket}」の直前にスペースを入れないでください",
                reference=_jtf("2.1.7"),
                fix=_REMOVE_SPACE,
            )
        )
    return sorted(findings, key=lambda finding: finding.start)


# ---------------------------------------------------------------------------
# katakana-width
# ---------------------------------------------------------------------------


def to_full_width_katakana(char: str) -> str:
    return _SOUND_MARKS.get(char) or unicodedata.normalize("NFKC", char)


def lint_katakana_width(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings = []
    for match in _HALF_KATAKANA.finditer(text):
        half = match.group()
        full = to_full_width_katakana(half)
        findings.append(
            make_finding(
                "katakana-width",
                config,
                match.start(),
                match.end(),
                f'Half-width katakana "{half}" should be full-width (JTF 2.2.1)',
                f"JTF 2.2.1に基づき、半角カタカナ「{half}」は全角で記述してください",
                reference=_jtf("2.2.1"),
                fix=Fix(
                    label=f'Replace with full-width "{full}"',
                    label_ja=f"全角「{full}」に変換",
                    replacement=full,
                ),
            )
        )
    if config.skip_dialogue:
        findings = drop_dialogue(findings, text)
    return findings


# ---------------------------------------------------------------------------
# katakana-chouon
# ---------------------------------------------------------------------------


def lint_katakana_chouon(text: str, tokens: Sequence[Token], config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings: list[Finding] = []
    for token in tokens:
        if not _KATAKANA_WORD.match(token.surface):
            continue
        for pair, replacement in _REPEATED_VOWELS:
            index = token.surface.find(pair)
            while index != -1:
                start = token.start + index
                findings.append(
                    make_finding(
                        "katakana-chouon",
                        config,
                        start,
                        start + 2,
                        f"Use long vowel mark (ー) instead of repeated vowel: {pair}→{replacement} (JTF 2.2.2)",
                        f"JTF 2.2.2に基づき、母音の繰り返し「{pair}」は長音記号「{replacement}」で表記してください",
                        reference=_jtf("2.2.2"),
                        fix=Fix(
                            label=f'Replace with "{replacement}"',
                            label_ja=f"「{replacement}」に変換",
                            replacement=replacement,
                        ),
                    )
                )
                index = token.surface.find(pair, index + 2)
    if config.skip_dialogue:
        findings = drop_dialogue(findings, text)
    return sorted(findings, key=lambda finding: finding.start)


# ---------------------------------------------------------------------------
# japanese-punctuation-width
# ---------------------------------------------------------------------------


def lint_japanese_punctuation_width(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings = []
    for index, char in enumerate(text):
        full = _HALF_PUNCTUATION.get(char)
        if full is None:
            continue
        before = text[index - 1] if index > 0 else ""
        after = text[index + 1] if index + 1 < len(text) else ""
        if not (_CJK_CHAR.match(before) or _CJK_CHAR.match(after)):
            continue
        findings.append(
            make_finding(
                "japanese-punctuation-width",
                config,
                index,
                index + 1,
                f'Use full-width "{full}" instead of half-width "{char}" in Japanese text (JTF 2.1.1)',
                f"JTF 2.1.1に基づき、日本語文中では半角「{char}」ではなく全角「{full}」を使用してください",
                reference=_jtf("2.1.1"),
                fix=Fix(
                    label=f'Replace with full-width "{full}"',
                    label_ja=f"全角「{full}」に変換",
                    replacement=full,
                ),
            )
        )
    if config.skip_dialogue:
        findings = drop_dialogue(findings, text)
    return findings


# ---------------------------------------------------------------------------
# alphanumeric-half-width
# ---------------------------------------------------------------------------


def lint_alphanumeric_half_width(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings = []
    for match in _FULL_WIDTH_ALNUM.finditer(text):
        full = match.group()
        half = chr(ord(full) - _FULL_TO_HALF_OFFSET)
        findings.append(
            make_finding(
                "alphanumeric-half-width",
                config,
                match.start(),
                match.end(),
                f'Use half-width "{half}" instead of full-width "{full}" (JTF 2.2.3)',
                f"JTF 2.2.3に基づき、全角「{full}」は半角「{half}」で記述してください",
                reference=_jtf("2.2.3"),
                fix=Fix(
                    label=f'Replace with half-width "{half}"',
                    label_ja=f"半角「{half}」に変換",
                    replacement=half,
                ),
            )
        )
    if config.skip_dialogue:
        findings = drop_dialogue(findings, text)
    return findings


# ---------------------------------------------------------------------------
# wave-dash-unification
# ---------------------------------------------------------------------------


def lint_wave_dash_unification(
    paragraphs: Sequence[DocumentParagraph], config: RuleConfig
) -> list[ParagraphFindings]:
    counts: Counter[str] = Counter()
    for paragraph in paragraphs:
        counts[WAVE_DASH] += paragraph.text.count(WAVE_DASH)
        counts[FULLWIDTH_TILDE] += paragraph.text.count(FULLWIDTH_TILDE)
    if not counts[WAVE_DASH] or not counts[FULLWIDTH_TILDE]:
        return []

    # A tie converts to the full-width tilde
    if counts[WAVE_DASH] > counts[FULLWIDTH_TILDE]:
        majority, minority = WAVE_DASH, FULLWIDTH_TILDE
    else:
        majority, minority = FULLWIDTH_TILDE, WAVE_DASH
    name = _WAVE_NAMES[majority]

    results = []
    for paragraph in paragraphs:
        findings = [
            make_finding(
                "wave-dash-unification",
                config,
                index,
                index + 1,
                f'Mixed wave dash usage: convert to "{majority}" ({name}) for consistency (JTF 2.1.3)',
                f"JTF 2.1.3に基づき、文書内で波ダッシュの種類が混在しています。{name}に統一してください",
                reference=_jtf("2.1.3"),
                fix=Fix(label=f'Replace with "{majority}" ({name})', label_ja=f"{name}に統一", replacement=majority),
            )
            for index, char in enumerate(paragraph.text)
            if char == minority
        ]
        if findings:
            results.append(ParagraphFindings(paragraph_index=paragraph.index, findings=findings))
    return results


# ---------------------------------------------------------------------------
# nakaguro-usage
# ---------------------------------------------------------------------------


def lint_nakaguro_usage(
    paragraphs: Sequence[DocumentParagraph], config: RuleConfig
) -> list[ParagraphFindings]:
    """Flag the minority use of ・ when it serves as both bullet and separator.

    A paragraph starting with ・ counts as a bullet even if it also separates
    words further on.
    """

    bullets: list[DocumentParagraph] = []
    separators: list[DocumentParagraph] = []
    for paragraph in paragraphs:
        if _BULLET.match(paragraph.text):
            bullets.append(paragraph)
        elif _SEPARATOR.search(paragraph.text):
            separators.append(paragraph)
    if not bullets or not separators:
        return []

    if len(bullets) <= len(separators):
        minority = bullets
        message = "・ is used as a bullet here but mostly as a separator elsewhere; unify usage (JTF 2.1.5)"
        message_ja = "JTF 2.1.5に基づき、文書内で中黒（・）が箇条書きと区切り符号に混用されています。用法を統一してください"
    else:
        minority = separators
        message = "・ is used as a separator here but mostly as a bullet elsewhere; unify usage (JTF 2.1.5)"
        message_ja = "JTF 2.1.5に基づき、文書内で中黒（・）が区切り符号と箇条書きに混用されています。用法を統一してください"

    results = []
    for paragraph in minority:
        position = paragraph.text.index("・")
        finding = make_finding(
            "nakaguro-usage", config, position, position + 1, message, message_ja, reference=_jtf("2.1.5")
        )
        results.append(ParagraphFindings(paragraph_index=paragraph.index, findings=[finding]))
    return results


def _meta(
    rule_id: str,
    name: str,
    name_ja: str,
    description: str,
    description_ja: str,
    severity: Severity,
    *,
    level: RuleLevel = RuleLevel.L1,
    skip_dialogue: bool = True,
) -> RuleMetadata:
    return RuleMetadata(
        id=rule_id,
        name=name,
        name_ja=name_ja,
        description=description,
        description_ja=description_ja,
        level=level,
        default_config=RuleConfig(severity=severity, skip_dialogue=skip_dialogue, skip_llm_validation=True),
    )


MIXED_WIDTH_SPACING = LexicalRule(
    meta=_meta(
        "mixed-width-spacing",
        "No space between Japanese and ASCII",
        "和欧文字間のスペース禁止",
        "Detects half-width spaces between Japanese characters and ASCII characters",
        "日本語文字とASCII文字の間にある半角スペースを検出します",
        Severity.ERROR,
    ),
    lint=lint_mixed_width_spacing,
)

BRACKET_SPACING = LexicalRule(
    meta=_meta(
        "bracket-spacing",
        "No space inside brackets",
        "括弧類と隣接する文字間のスペース禁止",
        "Detects spaces immediately inside Japanese bracket characters",
        "日本語括弧類の直内側にあるスペースを検出します",
        Severity.ERROR,
        skip_dialogue=False,
    ),
    lint=lint_bracket_spacing,
)

KATAKANA_WIDTH = LexicalRule(
    meta=_meta(
        "katakana-width",
        "Use full-width katakana",
        "カタカナの全角統一",
        "Detects half-width katakana characters that should be full-width",
        "半角カタカナを検出します。カタカナは全角で記述してください",
        Severity.ERROR,
    ),
    lint=lint_katakana_width,
)

KATAKANA_CHOUON = MorphologicalRule(
    meta=_meta(
        "katakana-chouon",
        "Use long vowel mark in katakana",
        "カタカナ語の長音省略禁止",
        "Detects katakana words using repeated vowels instead of the long vowel mark (ー)",
        "長音記号「ー」の代わりに母音を繰り返しているカタカナ語を検出します",
        Severity.WARNING,
        level=RuleLevel.L2,
    ),
    lint=lint_katakana_chouon,
)

JAPANESE_PUNCTUATION_WIDTH = LexicalRule(
    meta=_meta(
        "japanese-punctuation-width",
        "Use full-width punctuation in Japanese text",
        "和文中の句読点・記号の全角統一",
        "Detects half-width ! and ? adjacent to Japanese characters",
        "日本語文字に隣接する半角の感嘆符・疑問符を検出します",
        Severity.ERROR,
    ),
    lint=lint_japanese_punctuation_width,
)

ALPHANUMERIC_HALF_WIDTH = LexicalRule(
    meta=_meta(
        "alphanumeric-half-width",
        "Use half-width alphanumeric characters",
        "算用数字・アルファベットの半角統一",
        "Detects full-width digits and alphabets that should be half-width",
        "全角の数字・アルファベットを検出します。半角で記述してください",
        Severity.ERROR,
    ),
    lint=lint_alphanumeric_half_width,
)

WAVE_DASH_UNIFICATION = DocumentRule(
    meta=_meta(
        "wave-dash-unification",
        "Unify wave dash usage",
        "波ダッシュの統一",
        "Detects mixed usage of U+301C (〜) and U+FF5E (～) in the document",
        "波ダッシュ（U+301C: 〜）と全角チルダ（U+FF5E: ～）の混在を検出します",
        Severity.ERROR,
        skip_dialogue=False,
    ),
    lint=lint_wave_dash_unification,
)

NAKAGURO_USAGE = DocumentRule(
    meta=_meta(
        "nakaguro-usage",
        "Consistent nakaguro usage",
        "中黒（・）の用法統一",
        "Detects mixed usage of ・ as both bullet marker and word separator",
        "中黒（・）が箇条書きと区切り符号の両方に使われている場合を検出します",
        Severity.WARNING,
        skip_dialogue=False,
    ),
    lint=lint_nakaguro_usage,
)
