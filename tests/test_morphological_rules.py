"""Tests for the token-based rules, using hand-built IPAdic-style tokens."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Sequence

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.linting.rules.morphological import (
    CONJUNCTION_OVERUSE,
    COUNTER_WORD_MISMATCH,
    PASSIVE_OVERUSE,
    TAIGEN_DOME_OVERUSE,
    WORD_REPETITION,
    ends_with_noun,
    has_passive_voice,
    lint_conjunction_overuse,
    lint_counter_word_mismatch,
    lint_passive_overuse,
    lint_taigen_dome,
    lint_word_repetition,
)
from kosei.models import Finding, Token

Row = tuple  # (surface, pos, detail_1, basic_form, detail_2)


def build(rows: Sequence[Row]) -> tuple[str, list[Token]]:
    """Lay tokens end to end and return the text they spell."""

    tokens: list[Token] = []
    position = 0
    for row in rows:
        surface, pos, *rest = row
        detail_1 = rest[0] if len(rest) > 0 else "*"
        basic = rest[1] if len(rest) > 1 else "*"
        detail_2 = rest[2] if len(rest) > 2 else "*"
        tokens.append(
            Token(
                surface=surface,
                pos=pos,
                pos_detail_1=detail_1,
                pos_detail_2=detail_2,
                basic_form=basic,
                start=position,
                end=position + len(surface),
            )
        )
        position += len(surface)
    return "".join(t.surface for t in tokens), tokens


PERIOD = ("。", "記号", "句点")


def _spans(findings: list[Finding]) -> list[tuple[int, int]]:
    return [(f.start, f.end) for f in findings]


class TestTaigenDome:
    SPECS = [
        ("青い", "形容詞", "自立"), ("空", "名詞", "一般"), PERIOD,
        ("白い", "形容詞", "自立"), ("雲", "名詞", "一般"), PERIOD,
        ("遠い", "形容詞", "自立"), ("山", "名詞", "一般"), PERIOD,
        ("静か", "名詞", "形容動詞語幹"), ("な", "助動詞"), ("海", "名詞", "一般"), PERIOD,
    ]

    def test_four_noun_endings_in_a_row(self) -> None:
        text, tokens = build(self.SPECS)

        findings = lint_taigen_dome(text, tokens, TAIGEN_DOME_OVERUSE.meta.default_config)

        assert _spans(findings) == [(0, 16)]
        assert findings[0].message.startswith("4 consecutive")

    def test_three_are_below_threshold(self) -> None:
        text, tokens = build(self.SPECS[:9])

        assert lint_taigen_dome(text, tokens, TAIGEN_DOME_OVERUSE.meta.default_config) == []

    def test_ends_with_noun_skips_symbols(self) -> None:
        _, tokens = build([("雨", "名詞", "一般"), ("…", "記号", "一般")])

        assert ends_with_noun(tokens)


def test_conjunction_overuse() -> None:
    text, tokens = build(
        [
            ("しかし", "接続詞"), ("雨", "名詞", "一般"), ("だ", "助動詞"), PERIOD,
            ("そして", "接続詞"), ("風", "名詞", "一般"), ("だ", "助動詞"), PERIOD,
            ("だから", "接続詞"), ("寒い", "形容詞", "自立"), PERIOD,
        ]
    )

    findings = lint_conjunction_overuse(text, tokens, CONJUNCTION_OVERUSE.meta.default_config)

    assert _spans(findings) == [(0, 17)]


class TestPassiveOveruse:
    SPECS = [
        ("叱ら", "動詞", "自立", "叱る"), ("れ", "動詞", "接尾", "れる"), ("た", "助動詞"), PERIOD,
        ("褒め", "動詞", "自立", "褒める"), ("られ", "動詞", "接尾", "られる"), ("た", "助動詞"), PERIOD,
        ("呼ば", "動詞", "自立", "呼ぶ"), ("れ", "動詞", "接尾", "れる"), ("た", "助動詞"), PERIOD,
    ]

    def test_three_passive_sentences(self) -> None:
        text, tokens = build(self.SPECS)

        findings = lint_passive_overuse(text, tokens, PASSIVE_OVERUSE.meta.default_config)

        assert _spans(findings) == [(0, 15)]

    def test_independent_reru_is_not_passive(self) -> None:
        _, tokens = build([("れる", "動詞", "自立", "れる")])

        assert not has_passive_voice(tokens)


class TestWordRepetition:
    def _rows(self, detail: str) -> list[Row]:
        return [
            ("経済", "名詞", detail), ("が", "助詞", "格助詞"), ("動く", "動詞", "自立", "動く"), PERIOD,
            ("経済", "名詞", detail), ("が", "助詞", "格助詞"), ("回る", "動詞", "自立", "回る"), PERIOD,
            ("経済", "名詞", detail), ("は", "助詞", "係助詞"), ("強い", "形容詞", "自立", "強い"), PERIOD,
            ("空", "名詞", "一般"), ("は", "助詞", "係助詞"), ("青い", "形容詞", "自立", "青い"), PERIOD,
            ("海", "名詞", "一般"), ("は", "助詞", "係助詞"), ("広い", "形容詞", "自立", "広い"), PERIOD,
        ]

    def test_later_occurrences_are_flagged_once(self) -> None:
        text, tokens = build(self._rows("一般"))

        findings = lint_word_repetition(text, tokens, WORD_REPETITION.meta.default_config)

        assert _spans(findings) == [(6, 8), (12, 14)]

    def test_proper_nouns_are_ignored(self) -> None:
        text, tokens = build(self._rows("固有名詞"))

        assert lint_word_repetition(text, tokens, WORD_REPETITION.meta.default_config) == []

    def test_fewer_sentences_than_window(self) -> None:
        text, tokens = build(self._rows("一般")[:12])

        assert lint_word_repetition(text, tokens, WORD_REPETITION.meta.default_config) == []


class TestCounterWordMismatch:
    def _rows(self, noun: str) -> list[Row]:
        return [
            (noun, "名詞", "一般"),
            ("が", "助詞", "格助詞"),
            ("3", "名詞", "数"),
            ("人", "名詞", "接尾", "人", "助数詞"),
            ("いる", "動詞", "自立", "いる"),
            PERIOD,
        ]

    def test_animal_counted_with_people_counter(self) -> None:
        text, tokens = build(self._rows("犬"))

        findings = lint_counter_word_mismatch(text, tokens, COUNTER_WORD_MISMATCH.meta.default_config)

        assert _spans(findings) == [(3, 4)]
        assert findings[0].fix is not None
        assert findings[0].fix.replacement == "匹"

    def test_matching_counter_is_accepted(self) -> None:
        text, tokens = build(self._rows("学生"))

        assert lint_counter_word_mismatch(text, tokens, COUNTER_WORD_MISMATCH.meta.default_config) == []


def test_rules_without_tokens_return_nothing() -> None:
    config = TAIGEN_DOME_OVERUSE.meta.default_config

    assert lint_taigen_dome("青い空。", [], config) == []
