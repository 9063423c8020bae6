from __future__ import annotations

import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.models import Token
from kosei.nlp import (
    FrequencyOptions,
    WordFrequencyResult,
    analyze_word_frequency,
    count_word_frequency,
    merge_frequency_results,
)
from kosei.nlp.frequency import is_punctuation_only


def _tok(surface: str, pos: str, detail: str = "一般", basic: str = "*", reading: str = "*") -> Token:
    return Token(surface=surface, pos=pos, pos_detail_1=detail, basic_form=basic, reading=reading)


SAMPLE = [
    _tok("猫", "名詞", reading="ネコ"),
    _tok("が", "助詞", "格助詞"),
    _tok("走っ", "動詞", "自立", basic="走る"),
    _tok("た", "助動詞"),
    _tok("。", "記号", "句点"),
    _tok("犬", "名詞"),
    _tok("も", "助詞", "係助詞"),
    _tok("走る", "動詞", "自立", basic="走る"),
    _tok("こと", "名詞", "非自立"),
    _tok("猫", "名詞", reading="ネコ"),
    _tok("３", "名詞", "数"),
    _tok("！？", "名詞", "サ変接続"),
]


def test_counts_content_words_by_lemma() -> None:
    result = count_word_frequency(SAMPLE)

    assert [(w.word, w.count) for w in result.words] == [("猫", 2), ("走る", 2), ("犬", 1)]
    assert result.total_words == 5
    assert result.unique_words == 3
    assert result.words[0].reading == "ネコ"
    assert result.words[2].reading is None


def test_ties_keep_first_appearance_order() -> None:
    tokens = [_tok("空", "名詞"), _tok("海", "名詞"), _tok("海", "名詞"), _tok("空", "名詞")]

    result = count_word_frequency(tokens)

    assert [w.word for w in result.words] == ["空", "海"]


def test_custom_options_can_keep_particles() -> None:
    options = FrequencyOptions(excluded_pos=frozenset({"記号"}), excluded_pos_details=frozenset())

    result = count_word_frequency(SAMPLE, options)

    assert "が" in {w.word for w in result.words}
    assert "こと" in {w.word for w in result.words}


def test_punctuation_only_detection() -> None:
    assert is_punctuation_only("！？")
    assert is_punctuation_only("…　")
    assert not is_punctuation_only("コンピューター")
    assert not is_punctuation_only("ー")


def test_merge_frequency_results_sums_counts() -> None:
    first = count_word_frequency([_tok("猫", "名詞"), _tok("犬", "名詞")])
    second = count_word_frequency([_tok("犬", "名詞"), _tok("犬", "名詞")])

    merged = merge_frequency_results([first, second])

    assert [(w.word, w.count) for w in merged.words] == [("犬", 3), ("猫", 1)]
    assert merged.total_words == 4
    assert first.words[1].count == 1


def test_empty_input() -> None:
    assert count_word_frequency([]) == WordFrequencyResult()


def test_analyze_word_frequency_uses_service() -> None:
    class _DummyService:
        async def tokenize(self, text: str) -> list[Token]:
            return [_tok(text, "名詞")]

    result = asyncio.run(analyze_word_frequency(_DummyService(), "語"))  # type: ignore[arg-type]

    assert result.words[0].word == "語"
