"""Punctuation, bracket and dash checks based on JIS X 4051."""

from __future__ import annotations

import re

from ...models import Finding, Fix, Reference, RuleConfig, RuleLevel, Severity
from ..helpers import make_finding
from ..rule import LexicalRule, RuleMetadata

JIS_REF = Reference(standard="JIS X 4051:2004")
BUNKACHO_REF = Reference(standard="文化庁「公用文作成の考え方」(2022)")

BRACKET_PAIRS = (
    ("「", "」", "カギカッコ"),
    ("『", "』", "二重カギカッコ"),
    ("（", "）", "丸カッコ"),
    ("【", "】", "隅付きカッコ"),
)

# (full width, half width, Japanese name, English name)
WIDTH_VARIANTS = (
    ("！", "!", "感嘆符", "exclamation mark"),
    ("？", "?", "疑問符", "question mark"),
)

HORIZONTAL_BAR = "―"
EM_DASH = "—"
LONG_VOWEL = "ー"
PAIRED_DASH = HORIZONTAL_BAR * 2
DASHES = frozenset({HORIZONTAL_BAR, EM_DASH})
_KATAKANA = re.compile(r"[゠-ヿ]")

_SINGLE_ELLIPSIS = re.compile(r"(?<!…)…(?!…)")
_MIDDLE_DOTS = re.compile(r"・{3,}")
_EMPTY_BRACKETS = re.compile(r"「」|『』")

_PAIRED_DASH_FIX = Fix(
    label="Replace with paired dash (――)",
    label_ja="二重ダッシュ（――）に置換",
    replacement=PAIRED_DASH,
)


# ---------------------------------------------------------------------------
# punctuation-rules
# ---------------------------------------------------------------------------


def _bracket_period(text: str, config: RuleConfig) -> list[Finding]:
    findings = []
    for index in (m.start() for m in re.finditer("。」", text)):
        findings.append(
            make_finding(
                "punctuation-rules",
                config,
                index,
                index + 1,
                "Period before closing bracket should be omitted",
                "文化庁「公用文作成の考え方」に基づき、カギカッコ内の文末に句点は不要です",
                reference=BUNKACHO_REF,
                fix=Fix(
                    label="Remove period before closing bracket",
                    label_ja="閉じカッコ前の句点を削除",
                    replacement="",
                ),
            )
        )
    return findings


def _ellipsis(text: str, config: RuleConfig) -> list[Finding]:
    findings = []
    for match in _SINGLE_ELLIPSIS.finditer(text):
        findings.append(
            make_finding(
                "punctuation-rules",
                config,
                match.start(),
                match.end(),
                "Ellipsis should be used in pairs (JIS X 4051:2004)",
                "JIS X 4051:2004に基づき、三点リーダーは偶数個（……）で使用してください",
                reference=JIS_REF,
                fix=Fix(
                    label="Replace with paired ellipsis",
                    label_ja="二重三点リーダーに置換",
                    replacement="……",
                ),
            )
        )
    for match in _MIDDLE_DOTS.finditer(text):
        findings.append(
            make_finding(
                "punctuation-rules",
                config,
                match.start(),
                match.end(),
                "Use ellipsis character instead of middle dots (JIS X 4051:2004)",
                "JIS X 4051:2004に基づき、中点の連続ではなく三点リーダー（……）を使用してください",
                reference=JIS_REF,
                fix=Fix(
                    label="Replace with paired ellipsis",
                    label_ja="三点リーダーに置換",
                    replacement="……",
                ),
            )
        )
    return findings


def _bracket_pairing(text: str, config: RuleConfig) -> list[Finding]:
    findings = []
    for opener, closer, name_ja in BRACKET_PAIRS:
        opened = text.count(opener)
        closed = text.count(closer)
        if opened == closed:
            continue
        findings.append(
            make_finding(
                "punctuation-rules",
                config,
                0,
                len(text),
                f"Mismatched {name_ja}: {opened} open, {closed} close",
                f"JIS X 4051:2004に基づき、{name_ja}の対応が不正です（開き{opened}個、閉じ{closed}個）",
                reference=JIS_REF,
            )
        )
    return findings


def _width_consistency(text: str, config: RuleConfig) -> list[Finding]:
    findings = []
    for full, half, name_ja, name_en in WIDTH_VARIANTS:
        if full not in text or half not in text:
            continue
        for index, char in enumerate(text):
            if char != half:
                continue
            findings.append(
                make_finding(
                    "punctuation-rules",
                    config,
                    index,
                    index + 1,
                    f"{name_en} should be full-width for consistency",
                    f"JIS X 4051:2004に基づき、{name_ja}は全角（{full}）に統一してください",
                    reference=JIS_REF,
                    fix=Fix(label="Convert to full-width", label_ja="全角に変換", replacement=full),
                )
            )
    return findings


def lint_punctuation(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []
    return [
        *_bracket_period(text, config),
        *_ellipsis(text, config),
        *_bracket_pairing(text, config),
        *_width_consistency(text, config),
    ]


# ---------------------------------------------------------------------------
# dash-format
# ---------------------------------------------------------------------------


def lint_dash_format(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings: list[Finding] = []
    for index, char in enumerate(text):
        if char not in DASHES:
            continue
        before = text[index - 1] if index > 0 else ""
        after = text[index + 1] if index + 1 < len(text) else ""
        if before in DASHES or after in DASHES:
            continue
        findings.append(
            make_finding(
                "dash-format",
                config,
                index,
                index + 1,
                "Single em dash should be paired (――)",
                "JIS X 4051:2004に基づき、ダッシュは二つ重ねて使います（――）",
                reference=JIS_REF,
                fix=_PAIRED_DASH_FIX,
            )
        )

    for match in re.finditer("--", text):
        index = match.start()
        # Part of a longer run of hyphens, e.g. a separator line.
        if index + 2 < len(text) and text[index + 2] == "-":
            continue
        if index > 0 and text[index - 1] == "-":
            continue
        findings.append(
            make_finding(
                "dash-format",
                config,
                index,
                index + 2,
                "ASCII double hyphen should be em dash (――)",
                "JIS X 4051:2004に基づき、ハイフン(--)ではなくダッシュ（――）を使用してください",
                reference=JIS_REF,
                fix=_PAIRED_DASH_FIX,
            )
        )

    for index, char in enumerate(text):
        if char != LONG_VOWEL:
            continue
        probe = index - 1
        while probe >= 0 and text[probe] == LONG_VOWEL:
            probe -= 1
        if probe >= 0 and _KATAKANA.match(text[probe]):
            continue
        findings.append(
            make_finding(
                "dash-format",
                config,
                index,
                index + 1,
                "Katakana long vowel mark (ー) may be intended as em dash (――)",
                "JIS X 4051:2004に基づき、長音符（ー）がダッシュ（――）の誤用の可能性があります",
                reference=JIS_REF,
                fix=_PAIRED_DASH_FIX,
            )
        )
    return findings


# ---------------------------------------------------------------------------
# dialogue-punctuation
# ---------------------------------------------------------------------------


def _nested_brackets(text: str, config: RuleConfig) -> list[Finding]:
    findings = []
    depth = 0
    inner_starts: list[int] = []
    for index, char in enumerate(text):
        if char == "「":
            if depth >= 1:
                inner_starts.append(index)
            depth += 1
        elif char == "」":
            depth -= 1
            if depth >= 1 and inner_starts:
                start = inner_starts.pop()
                inner = text[start + 1 : index]
                findings.append(
                    make_finding(
                        "dialogue-punctuation",
                        config,
                        start,
                        index + 1,
                        "Nested dialogue should use double brackets 『』",
                        "JIS X 4051:2004に基づき、カギ括弧内の引用には二重カギ括弧『』を使用してください",
                        reference=JIS_REF,
                        fix=Fix(
                            label="Replace with double brackets",
                            label_ja="二重カギ括弧に変換",
                            replacement=f"『{inner}』",
                        ),
                    )
                )
            depth = max(depth, 0)
    return findings


def lint_dialogue_punctuation(text: str, config: RuleConfig) -> list[Finding]:
    if not text:
        return []

    findings = _nested_brackets(text, config)
    for match in _EMPTY_BRACKETS.finditer(text):
        findings.append(
            make_finding(
                "dialogue-punctuation",
                config,
                match.start(),
                match.end(),
                "Empty brackets detected",
                "JIS X 4051:2004に基づき、空のカギ括弧が検出されました",
                reference=JIS_REF,
            )
        )
    for opener, closer in (("「", "」"), ("『", "』")):
        opened = text.count(opener)
        closed = text.count(closer)
        if opened == closed:
            continue
        findings.append(
            make_finding(
                "dialogue-punctuation",
                config,
                0,
                len(text),
                f"Unmatched {opener}{closer} brackets: {opened} open, {closed} close",
                f"JIS X 4051:2004に基づき、カギ括弧{opener}{closer}の数が一致しません（開き{opened}個、閉じ{closed}個）",
                reference=JIS_REF,
            )
        )
    return findings


PUNCTUATION_RULES = LexicalRule(
    meta=RuleMetadata(
        id="punctuation-rules",
        name="Punctuation conventions",
        name_ja="記号の作法",
        description="Check Japanese punctuation usage following JIS X 4051 and editorial conventions",
        description_ja="JIS X 4051・文化庁基準に基づく句読点・記号チェック",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING, skip_llm_validation=True),
    ),
    lint=lint_punctuation,
)

DASH_FORMAT = LexicalRule(
    meta=RuleMetadata(
        id="dash-format",
        name="Dash Format",
        name_ja="ダッシュの用法",
        description="Detects incorrect dash usage and suggests proper formatting",
        description_ja="ダッシュの誤用を検出し、正しい表記を提案します",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING, skip_llm_validation=True),
    ),
    lint=lint_dash_format,
)

DIALOGUE_PUNCTUATION = LexicalRule(
    meta=RuleMetadata(
        id="dialogue-punctuation",
        name="Dialogue Punctuation",
        name_ja="台詞の約物チェック",
        description="Detects formatting errors in dialogue brackets",
        description_ja="台詞のカギ括弧の書式エラーを検出します",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING, skip_llm_validation=True),
    ),
    lint=lint_dialogue_punctuation,
)
