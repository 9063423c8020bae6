"""Correction modes, the guideline catalog and rule-config resolution.

A correction mode describes a writing genre (novel, official document, blog
and so on). It overrides a handful of rules, picks default guidelines and
gives the validator a one-line instruction about the register to expect.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..models import CorrectionConfig, CorrectionModeId, RuleConfig
from .presets import preset_configs
from .rule import Rule


@dataclass(frozen=True)
class CorrectionMode:
    id: CorrectionModeId
    name_ja: str
    tone_ja: str
    description_ja: str
    default_guidelines: tuple[str, ...]
    rule_overrides: dict[str, dict[str, Any]] = field(default_factory=dict)
    llm_prompt_style_ja: str = ""


@dataclass(frozen=True)
class Guideline:
    id: str
    name_ja: str
    publisher_ja: str
    year: int | None
    license: str
    description_ja: str


CORRECTION_MODES: dict[CorrectionModeId, CorrectionMode] = {
    CorrectionModeId.NOVEL: CorrectionMode(
        id=CorrectionModeId.NOVEL,
        name_ja="小説",
        tone_ja="感性・具象・張力",
        description_ja="小説・フィクション向けの校正モード。文体の個性を尊重します。",
        default_guidelines=("novel-manuscript", "joyo-kanji-2010", "jis-x-4051"),
        rule_overrides={"desu-masu-consistency": {"enabled": False}},
        llm_prompt_style_ja=(
            "小説の文体として自然な表現かどうかを判断してください。"
            "文学的な表現や倒置法は許容します。"
        ),
    ),
    CorrectionModeId.OFFICIAL: CorrectionMode(
        id=CorrectionModeId.OFFICIAL,
        name_ja="公用文",
        tone_ja="厳粛・対等・標準化",
        description_ja="官公庁・公的機関の文書向けモード。内閣告示の各種基準に準拠します。",
        default_guidelines=("koyo-bun-2022", "joyo-kanji-2010", "okurigana-1973", "gairai-1991"),
        rule_overrides={"taigen-dome-overuse": {"enabled": False}},
        llm_prompt_style_ja=(
            "公用文として適切な表現かどうかを判断してください。"
            "擬声語・個人的感情・倒置文は不適切とします。"
        ),
    ),
    CorrectionModeId.BLOG: CorrectionMode(
        id=CorrectionModeId.BLOG,
        name_ja="ブログ",
        tone_ja="親切・共有感・半正式",
        description_ja="ウェブ記事・ブログ向けモード。読みやすさを重視します。",
        default_guidelines=("jtf-style-3", "joyo-kanji-2010"),
        rule_overrides={"sentence-length": {"enabled": True}},
        llm_prompt_style_ja=(
            "ウェブ記事として読みやすく親しみやすい表現かどうかを判断してください。"
            "過度な堅苦しさや難解な語彙は避けてください。"
        ),
    ),
    CorrectionModeId.ACADEMIC: CorrectionMode(
        id=CorrectionModeId.ACADEMIC,
        name_ja="学術",
        tone_ja="冷静・客観・構造化",
        description_ja="論文・学術文書向けモード。客観性と構造的な記述を重視します。",
        default_guidelines=("joyo-kanji-2010", "okurigana-1973", "jis-x-4051"),
        rule_overrides={"taigen-dome-overuse": {"enabled": True, "severity": "warning"}},
        llm_prompt_style_ja=(
            "学術論文として適切な客観的表現かどうかを判断してください。"
            "「私は」などの主観表現や修辞的隠喩は不適切とします。"
        ),
    ),
    CorrectionModeId.SNS: CorrectionMode(
        id=CorrectionModeId.SNS,
        name_ja="SNS",
        tone_ja="簡潔・インパクト",
        description_ja="SNS・短文投稿向けモード。最も寛容な設定です。",
        default_guidelines=("joyo-kanji-2010",),
        rule_overrides={
            "sentence-length": {"enabled": False},
            "taigen-dome-overuse": {"enabled": False},
            "conjunction-overuse": {"enabled": False},
        },
        llm_prompt_style_ja="SNSの短文として自然かどうかを判断してください。",
    ),
}


def _guideline(
    id: str, name_ja: str, publisher_ja: str, year: int | None, license: str, description_ja: str
) -> tuple[str, Guideline]:
    return id, Guideline(id, name_ja, publisher_ja, year, license, description_ja)


GUIDELINES: dict[str, Guideline] = dict(
    [
        _guideline("joyo-kanji-2010", "常用漢字表", "内閣告示", 2010, "Public",
                   "日常的な文書に用いる漢字の標準表"),
        _guideline("okurigana-1973", "送り仮名の付け方", "内閣告示", 1973, "Public",
                   "送り仮名の付け方に関する内閣告示"),
        _guideline("gairai-1991", "外来語の表記", "内閣告示", 1991, "Public",
                   "外来語・外国語の日本語表記基準"),
        _guideline("gendai-kanazukai-1986", "現代仮名遣い", "内閣告示", 1986, "Public",
                   "現代語の仮名遣いに関する基準"),
        _guideline("koyo-bun-2022", "公用文作成の考え方", "文化審議会", 2022, "Public",
                   "官公庁の公文書作成に関する指針"),
        _guideline("jis-x-4051", "JIS X 4051 日本語組版", "JSA", 2004, "Paid",
                   "日本語文書の組版に関するJIS規格"),
        _guideline("kisha-handbook-14", "記者ハンドブック 第14版", "共同通信社", 2022, "Paid",
                   "新聞・報道向けの表記統一基準"),
        _guideline("jtf-style-3", "JTF日本語標準スタイルガイド", "日本翻訳連盟", 2019, "CC BY 4.0",
                   "翻訳・ローカライズ向けの日本語スタイルガイド"),
        _guideline("jtca-style-3", "日本語スタイルガイド 第3版", "JTCA", 2016, "Paid",
                   "テクニカルコミュニケーション向けスタイルガイド"),
        _guideline("editors-rulebook", "日本語表記ルールブック 第2版", "日本エディタースクール", 2012,
                   "Paid", "編集・出版向けの日本語表記ルール集"),
        _guideline("novel-manuscript", "小説原稿作法", "慣習ベース", None, "Public",
                   "小説・フィクション向けの慣用的な原稿作法"),
    ]
)


def get_correction_mode(mode: CorrectionModeId | str) -> CorrectionMode:
    return CORRECTION_MODES[CorrectionModeId(mode)]


def active_guidelines(config: CorrectionConfig) -> list[str]:
    """Explicit guidelines win; otherwise the mode's defaults apply."""

    if config.guidelines:
        return list(config.guidelines)
    return list(get_correction_mode(config.mode).default_guidelines)


def resolve_rule_configs(
    config: CorrectionConfig,
    rules: Iterable[Rule] = (),
    *,
    base: Mapping[str, RuleConfig] | None = None,
) -> dict[str, RuleConfig]:
    """Merge rule defaults, the preset, mode overrides and explicit overrides.

    Later layers win field by field; ``options`` merge key by key. ``base``
    supplies defaults for rules not in ``rules``.
    """

    resolved: dict[str, RuleConfig] = dict(base or {})
    for rule in rules:
        resolved.setdefault(rule.id, rule.meta.default_config)

    mode = get_correction_mode(config.mode)
    layers = (preset_configs(config.preset), mode.rule_overrides, config.rule_overrides)
    for layer in layers:
        for rule_id, overrides in layer.items():
            current = resolved.get(rule_id, RuleConfig())
            resolved[rule_id] = current.merged(overrides)
    return resolved
