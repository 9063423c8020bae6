"""Preset rule configurations and the rule catalog shown to users.

A preset fixes ``enabled``, ``severity`` and the two skip flags for every
rule. Numeric options are not part of a preset; they come from each rule's
own default configuration.
"""

from __future__ import annotations

from typing import Any

# Rule names and descriptions as shown in settings and ``--list-rules``
RULE_NAMES_JA: dict[str, tuple[str, str]] = {
    "punctuation-rules": ("記号の作法", "句読点・記号の使い方をチェック"),
    "era-year-validator": ("元号・西暦の一致チェック", "元号と西暦の対応を検証"),
    "particle-no-repetition": ("助詞「の」の連続使用", "1文中の「の」の多用を検出"),
    "conjugation-errors": ("活用の誤り検出", "ら抜き・さ入れ・い抜き言葉の検出"),
    "redundant-expression": ("二重表現の検出", "意味が重複している冗長な表現を検出"),
    "verbose-expression": ("冗長表現の簡略化", "冗長な表現を検出し簡潔な言い換えを提案"),
    "sentence-ending-repetition": ("文末表現の重複", "同じ文末表現が連続する箇所を検出"),
    "notation-consistency": ("表記ゆれの検出", "文書内の同一語彙の表記ゆれを検出"),
    "correlative-expression": ("呼応表現の整合性", "副詞と文末表現の対応をチェック"),
    "sentence-length": ("長文の検出", "設定した文字数を超える文を検出します"),
    "dash-format": ("ダッシュの用法", "ダッシュの誤用を検出し、正しい表記を提案します"),
    "dialogue-punctuation": ("台詞の約物チェック", "台詞のカギ括弧の書式エラーを検出します"),
    "comma-frequency": ("読点の頻度チェック", "読点が多すぎる、または少なすぎる文を検出します"),
    "desu-masu-consistency": ("敬体・常体の混在検出", "です・ます体と、だ・である体の混在を検出します"),
    "conjunction-overuse": ("接続詞の多用検出", "接続詞で始まる文が連続している箇所を検出します"),
    "word-repetition": ("近接語句の反復検出", "近接する文で同じ語句が繰り返し使われている箇所を検出します"),
    "taigen-dome-overuse": ("体言止めの多用検出", "体言止めが連続している箇所を検出します"),
    "passive-overuse": ("受動態の多用検出", "受動態が連続して使われている箇所を検出します"),
    "counter-word-mismatch": ("助数詞の誤用検出", "助数詞と数えられる対象の組み合わせの誤りを検出します"),
    "adverb-form-consistency": ("副詞の漢字・ひらがな統一", "副詞の漢字表記とひらがな表記の混在を検出します"),
    "homophone-detection": ("同音異義語の検出", "LLMによる文脈分析で、同音異義語の誤用を検出します"),
    "number-format": ("数字表記の統一", "数字の表記揺れを検出"),
    "mixed-width-spacing": ("和欧文字間のスペース禁止", "日本語文字とASCII文字の間にある半角スペースを検出します"),
    "bracket-spacing": ("括弧類と隣接する文字間のスペース禁止", "日本語括弧類の直内側にあるスペースを検出します"),
    "katakana-width": ("カタカナの全角統一", "半角カタカナを検出します"),
    "katakana-chouon": ("カタカナ語の長音省略禁止", "長音記号の代わりに母音を繰り返しているカタカナ語を検出します"),
    "japanese-punctuation-width": ("和文中の句読点・記号の全角統一", "日本語文字に隣接する半角の感嘆符・疑問符を検出します"),
    "alphanumeric-half-width": ("算用数字・アルファベットの半角統一", "全角の数字・アルファベットを検出します"),
    "nakaguro-usage": ("中黒（・）の用法統一", "中黒が箇条書きと区切り符号の両方に使われている箇所を検出します"),
    "wave-dash-unification": ("波ダッシュの統一", "波ダッシュと全角チルダの混在を検出します"),
    "iteration-mark": ("繰り返し符号「々」の制限", "平仮名・片仮名の後の「々」を検出します"),
    "large-number-comma": ("大きな数字の桁区切り", "4桁以上の数字に桁区切りのカンマがない場合を検出します"),
    "double-negative": ("二重否定の禁止", "ないではない・ないことはない等の二重否定を検出します"),
    "consecutive-particle": ("同一助詞の連続使用制限", "同じ助詞が連続している箇所を検出します"),
    "conjunctive-ga-overuse": ("接続助詞「が」の多用禁止", "1段落内の接続助詞「が」の多用を検出します"),
}

# (category id, Japanese label, rule ids)
RULE_CATEGORIES: list[tuple[str, str, list[str]]] = [
    (
        "notation",
        "約物・表記",
        [
            "punctuation-rules",
            "number-format",
            "notation-consistency",
            "dash-format",
            "dialogue-punctuation",
            "comma-frequency",
            "mixed-width-spacing",
            "bracket-spacing",
            "katakana-width",
            "katakana-chouon",
            "japanese-punctuation-width",
            "alphanumeric-half-width",
            "nakaguro-usage",
            "wave-dash-unification",
            "iteration-mark",
            "large-number-comma",
        ],
    ),
    ("kanji", "漢字・用字", ["era-year-validator", "adverb-form-consistency"]),
    (
        "grammar",
        "文法・語法",
        [
            "particle-no-repetition",
            "conjugation-errors",
            "correlative-expression",
            "counter-word-mismatch",
            "passive-overuse",
            "double-negative",
            "consecutive-particle",
        ],
    ),
    (
        "style",
        "文体",
        [
            "redundant-expression",
            "verbose-expression",
            "sentence-ending-repetition",
            "sentence-length",
            "desu-masu-consistency",
            "conjunction-overuse",
            "word-repetition",
            "taigen-dome-overuse",
            "conjunctive-ga-overuse",
        ],
    ),
    ("ai", "AI機能", ["homophone-detection"]),
]


def _c(
    severity: str,
    *,
    enabled: bool = True,
    dialogue: bool = False,
    skip_llm: bool = False,
) -> dict[str, Any]:
    return {
        "enabled": enabled,
        "severity": severity,
        "skip_dialogue": dialogue,
        "skip_llm_validation": skip_llm,
    }


# --- 標準モード ---
DEFAULT_RULE_CONFIGS: dict[str, dict[str, Any]] = {
    "punctuation-rules": _c("warning", skip_llm=True),
    "era-year-validator": _c("warning", skip_llm=True),
    "particle-no-repetition": _c("info", dialogue=True),
    "conjugation-errors": _c("warning", dialogue=True),
    "redundant-expression": _c("warning", dialogue=True, skip_llm=True),
    "verbose-expression": _c("info", dialogue=True),
    "sentence-ending-repetition": _c("info", dialogue=True),
    "notation-consistency": _c("warning", dialogue=True),
    "correlative-expression": _c("warning", dialogue=True),
    "sentence-length": _c("info", dialogue=True),
    "dash-format": _c("warning", skip_llm=True),
    "dialogue-punctuation": _c("warning", skip_llm=True),
    "comma-frequency": _c("info", dialogue=True),
    "desu-masu-consistency": _c("warning", dialogue=True),
    "conjunction-overuse": _c("info", dialogue=True),
    "word-repetition": _c("info", dialogue=True),
    "taigen-dome-overuse": _c("info", dialogue=True),
    "passive-overuse": _c("info", dialogue=True),
    "counter-word-mismatch": _c("warning"),
    "adverb-form-consistency": _c("info"),
    "homophone-detection": _c("warning"),
    "number-format": _c("warning", dialogue=True, skip_llm=True),
    "mixed-width-spacing": _c("error", dialogue=True, skip_llm=True),
    "bracket-spacing": _c("error", skip_llm=True),
    "katakana-width": _c("error", dialogue=True, skip_llm=True),
    "katakana-chouon": _c("warning", dialogue=True, skip_llm=True),
    "japanese-punctuation-width": _c("error", dialogue=True, skip_llm=True),
    "alphanumeric-half-width": _c("error", dialogue=True, skip_llm=True),
    "nakaguro-usage": _c("warning", skip_llm=True),
    "wave-dash-unification": _c("error", skip_llm=True),
    "iteration-mark": _c("warning", dialogue=True, skip_llm=True),
    "large-number-comma": _c("warning", dialogue=True, skip_llm=True),
    "double-negative": _c("warning"),
    "consecutive-particle": _c("warning"),
    "conjunctive-ga-overuse": _c("warning"),
}

# --- 寛容モード ---
_RELAXED: dict[str, dict[str, Any]] = {
    "punctuation-rules": _c("info", skip_llm=True),
    "era-year-validator": _c("info", enabled=False, skip_llm=True),
    "particle-no-repetition": _c("info", enabled=False, dialogue=True),
    "conjugation-errors": _c("warning", dialogue=True),
    "redundant-expression": _c("info", dialogue=True, skip_llm=True),
    "verbose-expression": _c("info", enabled=False, dialogue=True),
    "sentence-ending-repetition": _c("info", enabled=False, dialogue=True),
    "notation-consistency": _c("info", enabled=False, dialogue=True),
    "correlative-expression": _c("info", dialogue=True),
    "sentence-length": _c("info", enabled=False, dialogue=True),
    "dash-format": _c("info", enabled=False, skip_llm=True),
    "dialogue-punctuation": _c("warning", skip_llm=True),
    "comma-frequency": _c("info", enabled=False),
    "desu-masu-consistency": _c("info", enabled=False),
    "conjunction-overuse": _c("info", enabled=False),
    "word-repetition": _c("info", enabled=False),
    "taigen-dome-overuse": _c("info", enabled=False),
    "passive-overuse": _c("info", enabled=False),
    "counter-word-mismatch": _c("info", enabled=False),
    "adverb-form-consistency": _c("info", enabled=False),
    "homophone-detection": _c("info", enabled=False),
    "number-format": _c("info", enabled=False, dialogue=True, skip_llm=True),
    "mixed-width-spacing": _c("info", dialogue=True, skip_llm=True),
    "bracket-spacing": _c("info", skip_llm=True),
    "katakana-width": _c("warning", dialogue=True, skip_llm=True),
    "katakana-chouon": _c("info", enabled=False, dialogue=True, skip_llm=True),
    "japanese-punctuation-width": _c("info", dialogue=True, skip_llm=True),
    "alphanumeric-half-width": _c("info", dialogue=True, skip_llm=True),
    "nakaguro-usage": _c("info", enabled=False, skip_llm=True),
    "wave-dash-unification": _c("info", skip_llm=True),
    "iteration-mark": _c("info", dialogue=True, skip_llm=True),
    "large-number-comma": _c("info", enabled=False, dialogue=True, skip_llm=True),
    "double-negative": _c("info", enabled=False),
    "consecutive-particle": _c("info", enabled=False),
    "conjunctive-ga-overuse": _c("info", enabled=False),
}

# --- 厳格モード ---
_STRICT: dict[str, dict[str, Any]] = {
    "punctuation-rules": _c("error", skip_llm=True),
    "era-year-validator": _c("error", skip_llm=True),
    "particle-no-repetition": _c("warning"),
    "conjugation-errors": _c("error"),
    "redundant-expression": _c("error", skip_llm=True),
    "verbose-expression": _c("warning"),
    "sentence-ending-repetition": _c("warning", dialogue=True),
    "notation-consistency": _c("error"),
    "correlative-expression": _c("error"),
    "sentence-length": _c("warning"),
    "dash-format": _c("error", skip_llm=True),
    "dialogue-punctuation": _c("error", skip_llm=True),
    "comma-frequency": _c("warning"),
    "desu-masu-consistency": _c("error", dialogue=True),
    "conjunction-overuse": _c("warning", dialogue=True),
    "word-repetition": _c("warning"),
    "taigen-dome-overuse": _c("warning", dialogue=True),
    "passive-overuse": _c("warning", dialogue=True),
    "counter-word-mismatch": _c("error"),
    "adverb-form-consistency": _c("warning"),
    "homophone-detection": _c("error"),
    "number-format": _c("error", skip_llm=True),
    "mixed-width-spacing": _c("error", skip_llm=True),
    "bracket-spacing": _c("error", skip_llm=True),
    "katakana-width": _c("error", skip_llm=True),
    "katakana-chouon": _c("error", skip_llm=True),
    "japanese-punctuation-width": _c("error", skip_llm=True),
    "alphanumeric-half-width": _c("error", skip_llm=True),
    "nakaguro-usage": _c("warning", skip_llm=True),
    "wave-dash-unification": _c("error", skip_llm=True),
    "iteration-mark": _c("error", skip_llm=True),
    "large-number-comma": _c("warning", skip_llm=True),
    "double-negative": _c("error"),
    "consecutive-particle": _c("error"),
    "conjunctive-ga-overuse": _c("warning"),
}

# --- 小説モード ---
_NOVEL: dict[str, dict[str, Any]] = {
    **DEFAULT_RULE_CONFIGS,
    "era-year-validator": _c("info", enabled=False, skip_llm=True),
    "sentence-ending-repetition": _c("warning", dialogue=True),
    "comma-frequency": _c("info", enabled=False),
    "desu-masu-consistency": _c("info", enabled=False),
    "conjunction-overuse": _c("info"),
    "word-repetition": _c("info"),
    "taigen-dome-overuse": _c("info"),
    "passive-overuse": _c("info"),
    "counter-word-mismatch": _c("warning", enabled=False),
    "number-format": _c("info", enabled=False, dialogue=True, skip_llm=True),
}

# --- 公用文モード ---
# Official documents rarely contain dialogue, so no rule skips it here
_OFFICIAL: dict[str, dict[str, Any]] = {
    **_STRICT,
    "sentence-ending-repetition": _c("info"),
    "dialogue-punctuation": _c("warning", skip_llm=True),
    "desu-masu-consistency": _c("error"),
    "conjunction-overuse": _c("warning"),
    "word-repetition": _c("info"),
    "taigen-dome-overuse": _c("info"),
    "passive-overuse": _c("warning"),
    "homophone-detection": _c("warning"),
}

# preset id -> (Japanese label, configs)
PRESETS: dict[str, tuple[str, dict[str, dict[str, Any]]]] = {
    "relaxed": ("寛容モード", _RELAXED),
    "standard": ("標準モード", DEFAULT_RULE_CONFIGS),
    "strict": ("厳格モード", _STRICT),
    "novel": ("小説モード", _NOVEL),
    "official": ("公用文モード", _OFFICIAL),
}

# Rules tied to particular guidelines; unlisted rules always run
RULE_GUIDELINE_MAP: dict[str, list[str]] = {
    "desu-masu-consistency": [
        "koyo-bun-2022",
        "jtf-style-3",
        "jtca-style-3",
        "kisha-handbook-14",
    ],
    "dialogue-punctuation": ["novel-manuscript", "jis-x-4051", "editors-rulebook"],
    "number-format": ["koyo-bun-2022", "jtf-style-3", "kisha-handbook-14"],
    "mixed-width-spacing": ["jtf-style-3", "jtca-style-3"],
    "bracket-spacing": ["jtf-style-3", "jis-x-4051"],
    "katakana-width": ["jtf-style-3", "jis-x-4051", "kisha-handbook-14"],
    "katakana-chouon": ["jtf-style-3", "gairai-1991"],
    "japanese-punctuation-width": ["jtf-style-3", "jis-x-4051"],
    "alphanumeric-half-width": ["jtf-style-3", "koyo-bun-2022"],
    "nakaguro-usage": ["jtf-style-3"],
    "wave-dash-unification": ["jtf-style-3"],
    "iteration-mark": ["koyo-bun-2022"],
    "large-number-comma": ["koyo-bun-2022"],
    "double-negative": ["koyo-bun-2022"],
    "consecutive-particle": ["koyo-bun-2022"],
    "conjunctive-ga-overuse": ["koyo-bun-2022"],
}


def preset_configs(preset: str) -> dict[str, dict[str, Any]]:
    """Return a copy of ``preset``'s per-rule configs.

    Raises:
        ValueError: for an unknown preset id.
    """

    try:
        _, configs = PRESETS[preset]
    except KeyError:
        raise ValueError(
            f"Unknown preset '{preset}'. Valid presets: {', '.join(PRESETS)}"
        ) from None
    return {rule_id: dict(config) for rule_id, config in configs.items()}
