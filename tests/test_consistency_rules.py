"""Tests for the document-wide consistency rules."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.linting.rules.consistency import (
    ADVERB_FORM_CONSISTENCY,
    DESU_MASU_CONSISTENCY,
    NOTATION_CONSISTENCY,
    PLAIN,
    POLITE,
    classify_sentence_style,
    lint_adverb_form_consistency,
    lint_desu_masu_consistency,
    lint_notation_consistency,
    majority_form,
)
from kosei.models import DocumentParagraph, Token


def _paragraph(index: int, rows: list[tuple[str, ...]]) -> DocumentParagraph:
    """Build a paragraph from ``(surface, pos, basic_form, reading)`` rows."""

    tokens: list[Token] = []
    position = 0
    for row in rows:
        surface, pos, *rest = row
        basic = rest[0] if len(rest) > 0 else "*"
        reading = rest[1] if len(rest) > 1 else "*"
        tokens.append(
            Token(
                surface=surface,
                pos=pos,
                basic_form=basic,
                reading=reading,
                start=position,
                end=position + len(surface),
            )
        )
        position += len(surface)
    return DocumentParagraph(index, "".join(t.surface for t in tokens), tokens)


PERIOD = ("。", "記号")


class TestNotationConsistency:
    def test_minority_form_is_flagged(self) -> None:
        paragraphs = [
            DocumentParagraph(0, "サーバーを起動する。サーバーを止める。"),
            DocumentParagraph(1, "サーバーが落ちた。サーバを再起動。"),
        ]

        results = lint_notation_consistency(paragraphs, NOTATION_CONSISTENCY.meta.default_config)

        assert [r.paragraph_index for r in results] == [1]
        finding = results[0].findings[0]
        assert (finding.start, finding.end) == (9, 12)
        assert finding.fix is not None
        assert finding.fix.replacement == "サーバー"

    def test_tie_goes_to_canonical_form_and_longest_match_wins(self) -> None:
        paragraphs = [DocumentParagraph(0, "コンピュータとコンピューター")]

        results = lint_notation_consistency(paragraphs, NOTATION_CONSISTENCY.meta.default_config)

        findings = results[0].findings
        assert [(f.start, f.end) for f in findings] == [(0, 6)]
        assert findings[0].fix is not None
        assert findings[0].fix.replacement == "コンピューター"

    def test_single_form_is_not_flagged(self) -> None:
        paragraphs = [DocumentParagraph(0, "サーバーとサーバー")]

        assert lint_notation_consistency(paragraphs, NOTATION_CONSISTENCY.meta.default_config) == []

    def test_empty_document(self) -> None:
        assert lint_notation_consistency([], NOTATION_CONSISTENCY.meta.default_config) == []


def test_majority_form_tie_break() -> None:
    assert majority_form({"b": 2, "a": 2}, ("a", "b")) == "a"
    assert majority_form({"b": 3, "a": 2}, ("a", "b")) == "b"


class TestDesuMasu:
    def _polite(self, noun: str) -> list[tuple[str, ...]]:
        return [(noun, "名詞"), ("です", "助動詞", "です"), PERIOD]

    def _plain(self, noun: str) -> list[tuple[str, ...]]:
        return [(noun, "名詞"), ("だ", "助動詞", "だ"), PERIOD]

    def test_classify_sentence_style(self) -> None:
        polite = _paragraph(0, self._polite("雨"))
        plain = _paragraph(0, self._plain("雨"))

        assert classify_sentence_style(polite.tokens[:2]) == (POLITE, 1, 3)
        assert classify_sentence_style(plain.tokens[:2]) == (PLAIN, 1, 2)

    def test_plain_sentence_in_polite_document(self) -> None:
        paragraphs = [
            _paragraph(0, self._polite("雨") + self._polite("風")),
            _paragraph(1, self._polite("雪") + self._plain("晴れ")),
        ]

        results = lint_desu_masu_consistency(paragraphs, DESU_MASU_CONSISTENCY.meta.default_config)

        assert [r.paragraph_index for r in results] == [1]
        finding = results[0].findings[0]
        assert (finding.start, finding.end) == (6, 7)
        assert "常体" in (finding.message_ja or "")

    def test_no_clear_majority(self) -> None:
        paragraphs = [_paragraph(0, self._polite("雨") + self._plain("風"))]

        assert lint_desu_masu_consistency(paragraphs, DESU_MASU_CONSISTENCY.meta.default_config) == []

    def test_threshold_option(self) -> None:
        paragraphs = [_paragraph(0, self._polite("雨") + self._polite("雪") + self._plain("風"))]
        strict = DESU_MASU_CONSISTENCY.meta.default_config.merged({"options": {"majorityThreshold": 0.9}})

        assert lint_desu_masu_consistency(paragraphs, strict) == []
        assert lint_desu_masu_consistency(paragraphs, DESU_MASU_CONSISTENCY.meta.default_config) != []


class TestAdverbForm:
    def test_minority_form_is_flagged(self) -> None:
        paragraphs = [
            _paragraph(0, [("全く", "副詞", "全く", "マッタク"), ("違う", "動詞"), PERIOD]),
            _paragraph(1, [("全く", "副詞", "全く", "マッタク"), ("まったく", "副詞", "まったく", "マッタク")]),
        ]

        results = lint_adverb_form_consistency(paragraphs, ADVERB_FORM_CONSISTENCY.meta.default_config)

        assert [r.paragraph_index for r in results] == [1]
        finding = results[0].findings[0]
        assert (finding.start, finding.end) == (2, 6)
        assert finding.fix is not None
        assert finding.fix.replacement == "全く"

    def test_unknown_reading_is_ignored(self) -> None:
        paragraphs = [_paragraph(0, [("ずっと", "副詞", "ずっと", "ズット")])]

        assert lint_adverb_form_consistency(paragraphs, ADVERB_FORM_CONSISTENCY.meta.default_config) == []
