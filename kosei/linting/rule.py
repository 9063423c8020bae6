"""Rule variants.

A rule is one of four frozen records, distinguished by :class:`RuleKind`:

- :class:`LexicalRule`: pattern matching on a paragraph's raw text
- :class:`MorphologicalRule`: needs the paragraph's tokens
- :class:`DocumentRule`: looks across every paragraph at once
- :class:`ContextualRule`: asks a language model, asynchronously

Each variant carries exactly one entry point, so the runner can dispatch on
``rule.kind`` without probing for optional methods.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, ClassVar, Sequence, Union

from ..models import (
    DocumentParagraph,
    Finding,
    ParagraphFindings,
    RuleConfig,
    RuleLevel,
    SentenceSpan,
    Token,
)
from ..utils import CancellationToken

if TYPE_CHECKING:
    from ..llm.provider import ModelClient


class RuleKind(str, Enum):
    LEXICAL = "lexical"
    MORPHOLOGICAL = "morphological"
    DOCUMENT = "document"
    CONTEXTUAL = "contextual"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


@dataclass(frozen=True)
class RuleMetadata:
    id: str
    name: str
    name_ja: str
    description: str
    description_ja: str
    level: RuleLevel
    default_config: RuleConfig
    version: str = "1.0.0"


LexicalLint = Callable[[str, RuleConfig], "list[Finding]"]
MorphologicalLint = Callable[[str, Sequence[Token], RuleConfig], "list[Finding]"]
DocumentLint = Callable[
    [Sequence[DocumentParagraph], RuleConfig], "list[ParagraphFindings]"
]
ContextualLint = Callable[
    [Sequence[SentenceSpan], RuleConfig, "ModelClient", CancellationToken],
    Awaitable["list[Finding]"],
]


@dataclass(frozen=True)
class LexicalRule:
    kind: ClassVar[RuleKind] = RuleKind.LEXICAL

    meta: RuleMetadata
    lint: LexicalLint

    @property
    def id(self) -> str:
        return self.meta.id


@dataclass(frozen=True)
class MorphologicalRule:
    kind: ClassVar[RuleKind] = RuleKind.MORPHOLOGICAL

    meta: RuleMetadata
    lint: MorphologicalLint

    @property
    def id(self) -> str:
        return self.meta.id


@dataclass(frozen=True)
class DocumentRule:
    """Cross-paragraph rule.

    ``needs_tokens`` rules only run when tokens are available.
    """

    kind: ClassVar[RuleKind] = RuleKind.DOCUMENT

    meta: RuleMetadata
    lint: DocumentLint
    needs_tokens: bool = False

    @property
    def id(self) -> str:
        return self.meta.id


@dataclass(frozen=True)
class ContextualRule:
    """Model-backed rule. Cancellation must yield ``[]`` rather than raise."""

    kind: ClassVar[RuleKind] = RuleKind.CONTEXTUAL

    meta: RuleMetadata
    lint: ContextualLint

    @property
    def id(self) -> str:
        return self.meta.id


Rule = Union[LexicalRule, MorphologicalRule, DocumentRule, ContextualRule]
