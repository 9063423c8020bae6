"""Renderable annotations and viewport target selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from ..models import Finding, Paragraph, Viewport


@dataclass(frozen=True)
class Annotation:
    """An inline decoration: a document span, its CSS class and the finding."""

    start: int
    end: int
    css_class: str
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_finding(cls, finding: Finding) -> "Annotation":
        return cls(
            start=finding.start,
            end=finding.end,
            css_class=finding.severity.css_class,
            payload=finding.to_payload(),
        )


def is_visible(paragraph: Paragraph, viewport: Viewport) -> bool:
    if paragraph.top is None or paragraph.bottom is None:
        return False
    return paragraph.top < viewport.bottom and paragraph.bottom > viewport.top


def select_targets(
    paragraphs: Sequence[Paragraph],
    viewport: Viewport | None,
    *,
    full: bool = False,
    buffer: int = 2,
    fallback: int = 5,
) -> list[Paragraph]:
    """Pick the paragraphs a scan should (re)compute.

    Visible paragraphs and the one holding the caret are taken first. When
    none resolve, the first ``fallback`` paragraphs stand in. The set is then
    widened by ``buffer`` paragraphs on either side. Order follows the input.
    """

    if full or not paragraphs:
        return list(paragraphs)

    chosen: set[int] = set()
    if viewport is not None:
        chosen.update(i for i, p in enumerate(paragraphs) if is_visible(p, viewport))
        if viewport.caret is not None:
            for i, paragraph in enumerate(paragraphs):
                if paragraph.start <= viewport.caret <= paragraph.end:
                    chosen.add(i)
                    break

    if not chosen:
        chosen.update(range(min(fallback, len(paragraphs))))

    expanded: set[int] = set()
    for i in chosen:
        expanded.update(range(max(0, i - buffer), min(len(paragraphs), i + buffer + 1)))
    return [paragraphs[i] for i in sorted(expanded)]
