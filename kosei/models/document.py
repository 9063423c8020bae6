"""Value records describing analysed text and document layout."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Sequence

from .finding import Finding


@dataclass(frozen=True)
class Token:
    """Morphological unit with a character-accurate ``[start, end)`` span.

    Field names follow the IPAdic feature layout. Missing features are ``"*"``.
    """

    surface: str
    pos: str
    pos_detail_1: str = "*"
    pos_detail_2: str = "*"
    pos_detail_3: str = "*"
    conjugation_type: str = "*"
    conjugation_form: str = "*"
    basic_form: str = "*"
    reading: str = "*"
    pronunciation: str = "*"
    start: int = 0
    end: int = 0

    @property
    def lemma(self) -> str:
        """Dictionary form, falling back to the surface."""

        if self.basic_form and self.basic_form != "*":
            return self.basic_form
        return self.surface


@dataclass(frozen=True)
class AtomAdjustment:
    """Inline non-text content sitting just before ``text_pos``.

    ``cumulative_offset`` is the total number of document positions taken by
    all such content up to and including this one.
    """

    text_pos: int
    cumulative_offset: int


@dataclass(frozen=True)
class Paragraph:
    """Unit of incremental work.

    ``start`` is the document position of the first character. ``top`` and
    ``bottom`` are the on-screen extent reported by the host, ``None`` until
    layout has settled.
    """

    text: str
    start: int
    index: int
    atom_offsets: tuple[AtomAdjustment, ...] = ()
    top: float | None = None
    bottom: float | None = None

    @property
    def end(self) -> int:
        extra = self.atom_offsets[-1].cumulative_offset if self.atom_offsets else 0
        return self.start + len(self.text) + extra

    def atom_offset(self, text_pos: int) -> int:
        """Extra document positions before ``text_pos``."""

        if not self.atom_offsets:
            return 0
        positions = [adj.text_pos for adj in self.atom_offsets]
        idx = bisect_right(positions, text_pos)
        if idx == 0:
            return 0
        return self.atom_offsets[idx - 1].cumulative_offset

    def to_document(self, text_pos: int) -> int:
        return self.start + text_pos + self.atom_offset(text_pos)


@dataclass(frozen=True)
class SentenceSpan:
    text: str
    start: int
    end: int


@dataclass(frozen=True)
class DocumentParagraph:
    """Input row for document-level rules."""

    index: int
    text: str
    tokens: Sequence[Token] = ()


@dataclass
class ParagraphFindings:
    """Document-level rule output for one paragraph."""

    paragraph_index: int
    findings: list[Finding] = field(default_factory=list)


@dataclass(frozen=True)
class Viewport:
    """Visible scroll region and caret, in host coordinates."""

    top: float
    bottom: float
    caret: int | None = None
