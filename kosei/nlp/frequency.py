"""Word frequency analysis over tokenized text."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Sequence

from ..models import Token

if TYPE_CHECKING:
    from .tokenizer_service import TokenizationService

EXCLUDED_POS = frozenset({"助詞", "助動詞", "記号", "フィラー", "その他"})
EXCLUDED_POS_DETAILS = frozenset(
    {"非自立", "接尾", "数", "代名詞", "句点", "読点", "空白", "括弧開", "括弧閉"}
)

# ー is a letter modifier (Lm), so katakana words such as コンピューター survive.
_PUNCTUATION_CATEGORIES = ("P", "S", "Z")


@dataclass(frozen=True)
class FrequencyOptions:
    excluded_pos: frozenset[str] = EXCLUDED_POS
    excluded_pos_details: frozenset[str] = EXCLUDED_POS_DETAILS


@dataclass
class WordEntry:
    word: str
    pos: str
    count: int = 0
    reading: str | None = None


@dataclass
class WordFrequencyResult:
    words: list[WordEntry] = field(default_factory=list)
    total_words: int = 0
    unique_words: int = 0


def is_punctuation_only(surface: str) -> bool:
    """True when every character is punctuation, a symbol, or whitespace."""

    for char in surface:
        if char.isspace():
            continue
        category = unicodedata.category(char)
        if category == "Cf" or category[0] in _PUNCTUATION_CATEGORIES:
            continue
        return False
    return True


def count_word_frequency(
    tokens: Iterable[Token], options: FrequencyOptions | None = None
) -> WordFrequencyResult:
    """Group content tokens by dictionary form and count them.

    Entries are sorted by count descending; equal counts keep the order in
    which the words first appeared.
    """

    opts = options or FrequencyOptions()
    entries: dict[str, WordEntry] = {}
    for token in tokens:
        if token.pos in opts.excluded_pos:
            continue
        if token.pos_detail_1 in opts.excluded_pos_details:
            continue
        if not token.surface.strip() or is_punctuation_only(token.surface):
            continue

        key = token.lemma
        entry = entries.get(key)
        if entry is None:
            entry = WordEntry(
                word=key,
                pos=token.pos,
                reading=token.reading if token.reading != "*" else None,
            )
            entries[key] = entry
        entry.count += 1

    # sorted() is stable, so insertion order breaks ties.
    words = sorted(entries.values(), key=lambda entry: entry.count, reverse=True)
    return WordFrequencyResult(
        words=words,
        total_words=sum(entry.count for entry in words),
        unique_words=len(words),
    )


async def analyze_word_frequency(
    service: "TokenizationService",
    text: str,
    options: FrequencyOptions | None = None,
) -> WordFrequencyResult:
    tokens = await service.tokenize(text)
    return count_word_frequency(tokens, options)


def merge_frequency_results(results: Sequence[WordFrequencyResult]) -> WordFrequencyResult:
    """Combine per-paragraph results into a document-wide ranking."""

    entries: dict[str, WordEntry] = {}
    for result in results:
        for word in result.words:
            entry = entries.get(word.word)
            if entry is None:
                entries[word.word] = WordEntry(word.word, word.pos, word.count, word.reading)
            else:
                entry.count += word.count
    words = sorted(entries.values(), key=lambda entry: entry.count, reverse=True)
    return WordFrequencyResult(
        words=words,
        total_words=sum(entry.count for entry in words),
        unique_words=len(words),
    )
