"""Morphological analyser boundary and the fugashi/IPAdic implementation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from ..models import Token

LOGGER = logging.getLogger(__name__)

# IPAdic feature layout: pos, pos1, pos2, pos3, cType, cForm, lemma, reading, pron
IPADIC_FEATURE_COUNT = 9
WHITESPACE_POS = ("記号", "空白")


class AnalyzerUnavailableError(RuntimeError):
    """Raised when the morphological analyser cannot be loaded."""


class MorphologicalAnalyzer(Protocol):
    """Contract for the synchronous analyser wrapped by the tokenization service."""

    def initialize(self, dictionary_dir: str | Path | None = None) -> None:
        """Load dictionaries; calling twice must be harmless."""
        ...

    def tokenize(self, text: str) -> list[Token]:
        """Return raw tokens whose surfaces concatenate back to ``text``."""
        ...


def _pad_features(feature: Any) -> list[str]:
    if isinstance(feature, str):
        values = feature.split(",")
    else:
        values = [str(value) if value is not None else "*" for value in feature]
    values = [value or "*" for value in values]
    if len(values) < IPADIC_FEATURE_COUNT:
        values.extend(["*"] * (IPADIC_FEATURE_COUNT - len(values)))
    return values[:IPADIC_FEATURE_COUNT]


def _whitespace_token(surface: str) -> Token:
    return Token(surface=surface, pos=WHITESPACE_POS[0], pos_detail_1=WHITESPACE_POS[1])


class FugashiAnalyzer:
    """MeCab analyser backed by ``fugashi.GenericTagger`` and the IPAdic package.

    MeCab drops leading whitespace from each word and reports it separately,
    so that whitespace is emitted here as explicit ``記号/空白`` tokens. The
    surfaces of the returned tokens therefore always concatenate back to the
    input text.
    """

    def __init__(self, *, extra_args: str = "") -> None:
        self._extra_args = extra_args
        self._tagger: Any = None

    @property
    def initialized(self) -> bool:
        return self._tagger is not None

    def initialize(self, dictionary_dir: str | Path | None = None) -> None:
        if self._tagger is not None:
            return

        try:
            from fugashi import GenericTagger  # type: ignore
        except ImportError as exc:  # pragma: no cover - depends on environment
            raise AnalyzerUnavailableError(
                "Morphological analysis requires 'fugashi' (MeCab) to be installed."
            ) from exc

        if dictionary_dir is not None:
            args = f'-d "{Path(dictionary_dir)}"'
        else:
            try:
                import ipadic  # type: ignore
            except ImportError as exc:  # pragma: no cover - depends on environment
                raise AnalyzerUnavailableError(
                    "No dictionary directory given and the 'ipadic' package is not installed."
                ) from exc
            args = ipadic.MECAB_ARGS

        if self._extra_args:
            args = f"{args} {self._extra_args}"

        try:
            self._tagger = GenericTagger(args)
        except RuntimeError as exc:
            raise AnalyzerUnavailableError(
                f"Failed to initialise MeCab with arguments: {args}"
            ) from exc
        LOGGER.info("MeCab analyser initialised")

    def tokenize(self, text: str) -> list[Token]:
        if self._tagger is None:
            raise AnalyzerUnavailableError("Analyser used before initialize()")
        if not text:
            return []

        tokens: list[Token] = []
        for word in self._tagger(text):
            white_space = getattr(word, "white_space", "") or ""
            if white_space:
                tokens.append(_whitespace_token(white_space))
            features = _pad_features(word.feature)
            tokens.append(
                Token(
                    surface=word.surface,
                    pos=features[0],
                    pos_detail_1=features[1],
                    pos_detail_2=features[2],
                    pos_detail_3=features[3],
                    conjugation_type=features[4],
                    conjugation_form=features[5],
                    basic_form=features[6],
                    reading=features[7],
                    pronunciation=features[8],
                )
            )

        consumed = sum(len(token.surface) for token in tokens)
        if consumed < len(text):
            # Trailing whitespace is not attached to any word.
            tokens.append(_whitespace_token(text[consumed:]))
        return tokens
