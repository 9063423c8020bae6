from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.linting.helpers import (
    effective_length,
    find_all,
    find_runs,
    is_in_dialogue,
    mask_dialogue,
    split_into_sentences,
    tokens_in_range,
)
from kosei.models import Token


class TestMaskDialogue:
    def test_masks_brackets_and_content(self) -> None:
        assert mask_dialogue("彼は「はい」と言った") == "彼は〇〇〇〇と言った"

    def test_nested_quotes_close_at_outer_bracket(self) -> None:
        assert mask_dialogue("「a『b』c」d") == "〇〇〇〇〇〇〇d"

    def test_length_is_preserved(self) -> None:
        text = "「未完の台詞"
        assert len(mask_dialogue(text)) == len(text)


def test_is_in_dialogue() -> None:
    text = "地の文「台詞」地の文"

    assert not is_in_dialogue(0, text)
    assert is_in_dialogue(3, text)
    assert is_in_dialogue(4, text)
    assert not is_in_dialogue(7, text)


class TestSplitIntoSentences:
    def test_spans_exclude_delimiters(self) -> None:
        sentences = split_into_sentences("晴れ。雨！曇り")

        assert [(s.text, s.start, s.end) for s in sentences] == [
            ("晴れ", 0, 2),
            ("雨", 3, 4),
            ("曇り", 5, 7),
        ]

    def test_blank_segments_are_dropped(self) -> None:
        sentences = split_into_sentences("。。 。終わり。")

        assert [s.text for s in sentences] == ["終わり"]

    def test_newline_is_a_delimiter(self) -> None:
        assert [s.text for s in split_into_sentences("一行目\n二行目")] == ["一行目", "二行目"]


def test_find_all_non_overlapping_by_default() -> None:
    assert list(find_all("ああああ", "ああ")) == [0, 2]
    assert list(find_all("ああああ", "ああ", overlapping=True)) == [0, 1, 2]
    assert list(find_all("abc", "")) == []


def test_tokens_in_range() -> None:
    tokens = [
        Token(surface="a", pos="名詞", start=0, end=1),
        Token(surface="bc", pos="名詞", start=1, end=3),
        Token(surface="d", pos="名詞", start=3, end=4),
    ]

    assert [t.surface for t in tokens_in_range(tokens, 1, 3)] == ["bc"]
    assert [t.surface for t in tokens_in_range(tokens, 2, 4)] == ["d"]


def test_effective_length_ignores_mask() -> None:
    assert effective_length(mask_dialogue("「はい」と")) == 1


def test_find_runs() -> None:
    flags = [True, True, False, True, True, True, None, True]

    assert find_runs(flags, 2) == [(0, 1), (3, 5)]
    assert find_runs(flags, 3) == [(3, 5)]
    assert find_runs([True, True, True], 3) == [(0, 2)]
    assert find_runs([], 1) == []
