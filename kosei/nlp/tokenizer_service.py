"""Cached tokenization with exact character offsets.

The service wraps a :class:`~kosei.nlp.analyzer.MorphologicalAnalyzer` and
guarantees that every returned token carries a ``[start, end)`` span into the
*original* paragraph text, even though noise characters are removed before
the analyser sees it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Sequence

from ..models import Token, UserDictionaryEntry
from ..utils import BoundedCache, CacheStats
from .analyzer import AnalyzerUnavailableError, MorphologicalAnalyzer

LOGGER = logging.getLogger(__name__)

DEFAULT_NOISE_CHARS = frozenset({"\n", "\r"})
DEFAULT_CACHE_SIZE = 200


def clean_text(text: str, noise_chars: Iterable[str]) -> tuple[str, list[int]]:
    """Remove ``noise_chars`` and map cleaned indices back to ``text``.

    The returned map has one entry per cleaned character plus a trailing
    sentinel equal to ``len(text)``.
    """

    noise = set(noise_chars)
    kept: list[str] = []
    position_map: list[int] = []
    for index, char in enumerate(text):
        if char in noise:
            continue
        kept.append(char)
        position_map.append(index)
    position_map.append(len(text))
    return "".join(kept), position_map


def assign_offsets(tokens: Sequence[Token], position_map: Sequence[int]) -> list[Token]:
    """Recompute spans from cumulative surface lengths and remap them."""

    limit = len(position_map) - 1
    result: list[Token] = []
    cursor = 0
    for token in tokens:
        start = min(cursor, limit)
        end = min(cursor + len(token.surface), limit)
        cursor += len(token.surface)
        original_start = position_map[start]
        original_end = position_map[end - 1] + 1 if end > start else original_start
        result.append(replace(token, start=original_start, end=original_end))
    return result


def merge_user_words(
    tokens: Sequence[Token], entries: Sequence[UserDictionaryEntry]
) -> list[Token]:
    """Collapse runs of tokens that spell a user dictionary word.

    Words are tried longest first at each position; a run only matches when
    its concatenated surfaces equal the word exactly.
    """

    if not entries or not tokens:
        return list(tokens)

    by_word: dict[str, UserDictionaryEntry] = {}
    for entry in entries:
        by_word.setdefault(entry.word, entry)
    words = sorted(by_word, key=len, reverse=True)

    merged: list[Token] = []
    index = 0
    while index < len(tokens):
        match = _match_at(tokens, index, words)
        if match is None:
            merged.append(tokens[index])
            index += 1
            continue
        word, stop = match
        entry = by_word[word]
        merged.append(
            Token(
                surface=word,
                pos=entry.part_of_speech or "名詞",
                pos_detail_1="固有名詞" if not entry.part_of_speech else "*",
                basic_form=word,
                reading=entry.reading or "*",
                pronunciation=entry.reading or "*",
                start=tokens[index].start,
                end=tokens[stop - 1].end,
            )
        )
        index = stop
    return merged


def _match_at(
    tokens: Sequence[Token], index: int, words: Sequence[str]
) -> tuple[str, int] | None:
    for word in words:
        surface = ""
        stop = index
        while stop < len(tokens) and len(surface) < len(word):
            surface += tokens[stop].surface
            stop += 1
        if surface == word:
            return word, stop
    return None


class TokenizationService:
    """Async facade over a synchronous analyser with an LRU token cache."""

    def __init__(
        self,
        analyzer: MorphologicalAnalyzer,
        *,
        dictionary_dir: str | Path | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
        noise_chars: Iterable[str] = DEFAULT_NOISE_CHARS,
        user_dictionary: Sequence[UserDictionaryEntry] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._dictionary_dir = dictionary_dir
        self._noise_chars = frozenset(noise_chars)
        self._user_dictionary = list(user_dictionary)
        self._cache: BoundedCache[str, list[Token]] = BoundedCache(cache_size)
        self._init_task: asyncio.Task[None] | None = None
        self._initialized = False
        self.logger = logger or LOGGER

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Load the analyser once; concurrent callers share the same attempt.

        A failed attempt is forgotten so the next call retries.
        """

        if self._initialized:
            return
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._do_initialize())
        task = self._init_task
        try:
            await asyncio.shield(task)
        except Exception:
            if self._init_task is task:
                self._init_task = None
            raise

    async def _do_initialize(self) -> None:
        try:
            await asyncio.to_thread(self._analyzer.initialize, self._dictionary_dir)
        except AnalyzerUnavailableError:
            self.logger.error("Morphological analyser failed to initialise")
            raise
        except Exception as exc:
            self.logger.exception("Unexpected analyser initialisation failure")
            raise AnalyzerUnavailableError(str(exc)) from exc
        self._initialized = True

    async def tokenize(self, text: str) -> list[Token]:
        """Return tokens for ``text`` with spans relative to ``text``."""

        cached = self._cache.get(text)
        if cached is not None:
            return list(cached)

        await self.initialize()
        tokens = self._tokenize_uncached(text)
        self._cache.set(text, tokens)
        return list(tokens)

    def _tokenize_uncached(self, text: str) -> list[Token]:
        cleaned, position_map = clean_text(text, self._noise_chars)
        if not cleaned:
            return []
        raw = self._analyzer.tokenize(cleaned)
        tokens = assign_offsets(raw, position_map)
        return merge_user_words(tokens, self._user_dictionary)

    def set_user_dictionary(self, entries: Sequence[UserDictionaryEntry]) -> None:
        self._user_dictionary = list(entries)
        self._cache.clear()
        self.logger.debug("User dictionary replaced with %d entries", len(entries))

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def clear_cache(self) -> None:
        self._cache.clear()
