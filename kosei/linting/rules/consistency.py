"""Document-wide consistency rules.

Each rule looks at every paragraph at once, decides which form the author
uses most, and flags the minority. Results are grouped per paragraph with
paragraph-relative spans.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Sequence

from ...models import (
    DocumentParagraph,
    Finding,
    Fix,
    ParagraphFindings,
    Reference,
    RuleConfig,
    RuleLevel,
    Severity,
    Token,
)
from ..data.variants import (
    ADVERB_VARIANT_GROUPS,
    VARIANT_CATEGORY_LABELS,
    VARIANT_CATEGORY_STANDARDS,
    VARIANT_GROUPS,
    VariantGroup,
)
from ..helpers import (
    find_all,
    is_in_dialogue,
    make_finding,
    option_float,
    split_into_sentences,
    tokens_in_range,
)
from ..rule import DocumentRule, RuleMetadata

KOYO_REF = Reference(standard="文化庁「公用文作成の考え方」(2022)")
DEFAULT_MAJORITY_THRESHOLD = 0.6


@dataclass(frozen=True)
class _Occurrence:
    paragraph_index: int
    form: str
    start: int
    end: int


def majority_form(counts: dict[str, int], canonical_order: Sequence[str]) -> str:
    """Most frequent form; ties go to whichever comes first in ``canonical_order``."""

    best = ""
    best_count = 0
    for form in canonical_order:
        count = counts.get(form, 0)
        if count > best_count:
            best, best_count = form, count
    return best


def _group_by_paragraph(findings: list[tuple[int, Finding]]) -> list[ParagraphFindings]:
    grouped: dict[int, list[Finding]] = defaultdict(list)
    for paragraph_index, finding in findings:
        grouped[paragraph_index].append(finding)
    return [
        ParagraphFindings(
            paragraph_index=index,
            findings=sorted(items, key=lambda finding: finding.start),
        )
        for index, items in sorted(grouped.items())
    ]


# ---------------------------------------------------------------------------
# notation-consistency
# ---------------------------------------------------------------------------


def _notation_occurrences(
    paragraphs: Sequence[DocumentParagraph],
) -> dict[str, list[_Occurrence]]:
    """Locate every variant, longest first, without letting a shorter form
    count inside a longer one (コンピュータ inside コンピューター)."""

    variants = sorted(
        ((group, variant) for group in VARIANT_GROUPS for variant in group.variants),
        key=lambda pair: len(pair[1]),
        reverse=True,
    )
    occurrences: dict[str, list[_Occurrence]] = defaultdict(list)
    for paragraph in paragraphs:
        claimed = [False] * len(paragraph.text)
        for group, variant in variants:
            for index in find_all(paragraph.text, variant):
                end = index + len(variant)
                if any(claimed[index:end]):
                    continue
                claimed[index:end] = [True] * len(variant)
                occurrences[group.id].append(
                    _Occurrence(paragraph.index, variant, index, end)
                )
    return occurrences


def _notation_finding(
    group: VariantGroup, occurrence: _Occurrence, majority: str, config: RuleConfig
) -> Finding:
    standard = VARIANT_CATEGORY_STANDARDS[group.category]
    label = VARIANT_CATEGORY_LABELS[group.category]
    return make_finding(
        "notation-consistency",
        config,
        occurrence.start,
        occurrence.end,
        f'Inconsistent notation: "{occurrence.form}" vs "{majority}" ({group.category})',
        f"{standard}に基づき、{label}「{occurrence.form}」と「{majority}」の表記が混在しています。"
        f"「{majority}」への統一を推奨します",
        reference=Reference(standard=standard),
        fix=Fix(
            label=f'Replace with "{majority}"',
            label_ja=f"「{majority}」に統一",
            replacement=majority,
        ),
    )


def lint_notation_consistency(
    paragraphs: Sequence[DocumentParagraph], config: RuleConfig
) -> list[ParagraphFindings]:
    if not paragraphs:
        return []

    occurrences = _notation_occurrences(paragraphs)
    results: list[tuple[int, Finding]] = []
    for group in VARIANT_GROUPS:
        found = occurrences.get(group.id)
        if not found:
            continue
        counts: dict[str, int] = defaultdict(int)
        for occurrence in found:
            counts[occurrence.form] += 1
        if len(counts) < 2:
            continue
        majority = majority_form(counts, group.variants)
        for occurrence in found:
            if occurrence.form == majority:
                continue
            results.append(
                (occurrence.paragraph_index, _notation_finding(group, occurrence, majority, config))
            )
    return _group_by_paragraph(results)


# ---------------------------------------------------------------------------
# desu-masu-consistency
# ---------------------------------------------------------------------------

POLITE = "polite"
PLAIN = "plain"
_POLITE_FORMS = ("です", "ます")


def _polite_follows(sentence_tokens: Sequence[Token], index: int, skip_pos: tuple[str, ...]) -> bool:
    for token in sentence_tokens[index + 1 :]:
        if token.pos in skip_pos:
            continue
        return token.pos == "助動詞" and token.basic_form in _POLITE_FORMS
    return False


def classify_sentence_style(
    sentence_tokens: Sequence[Token],
) -> tuple[str, int, int] | None:
    """Return ``(style, start, end)`` for the token deciding the sentence's register.

    The scan runs backwards from the sentence end, skipping punctuation and
    particles, and gives up at the first content word it cannot classify.
    """

    for index in range(len(sentence_tokens) - 1, -1, -1):
        token = sentence_tokens[index]
        if token.pos in ("記号", "助詞"):
            continue

        if token.pos == "助動詞" and token.basic_form in _POLITE_FORMS:
            return POLITE, token.start, token.end

        if token.pos == "助動詞" and token.basic_form == "だ":
            if not _polite_follows(sentence_tokens, index, ("記号",)):
                return PLAIN, token.start, token.end

        if token.basic_form == "ある" and index > 0:
            previous = sentence_tokens[index - 1]
            if previous.pos == "助動詞" and previous.basic_form == "だ" and previous.surface == "で":
                return PLAIN, previous.start, token.end

        if (
            token.pos in ("動詞", "形容詞")
            and token.conjugation_form
            and ("終止形" in token.conjugation_form or "連体形" in token.conjugation_form)
        ):
            if not _polite_follows(sentence_tokens, index, ("記号", "助詞")):
                return PLAIN, token.start, token.end

        if token.pos in ("動詞", "形容詞", "名詞", "助動詞"):
            break
    return None


def lint_desu_masu_consistency(
    paragraphs: Sequence[DocumentParagraph], config: RuleConfig
) -> list[ParagraphFindings]:
    """Flag sentences whose register differs from a clear (>= 60%) majority.

    Dialogue sentences are ignored; characters naturally speak in a
    different register from the narration.
    """

    if not paragraphs:
        return []

    classified: list[tuple[int, str, int, int]] = []
    for paragraph in paragraphs:
        for sentence in split_into_sentences(paragraph.text):
            if is_in_dialogue(sentence.start, paragraph.text):
                continue
            result = classify_sentence_style(
                tokens_in_range(paragraph.tokens, sentence.start, sentence.end)
            )
            if result is not None:
                classified.append((paragraph.index, *result))

    if len(classified) < 2:
        return []

    threshold = option_float(config, "majorityThreshold", DEFAULT_MAJORITY_THRESHOLD)
    polite = sum(1 for _, style, _, _ in classified if style == POLITE)
    total = len(classified)
    if polite / total >= threshold:
        majority = POLITE
    elif (total - polite) / total >= threshold:
        majority = PLAIN
    else:
        return []

    results: list[tuple[int, Finding]] = []
    for paragraph_index, style, start, end in classified:
        if style == majority:
            continue
        if style == POLITE:
            message = (
                "This sentence uses polite style (です・ます体), but the document "
                "predominantly uses plain style (だ・である体)"
            )
            message_ja = (
                "文化庁「公用文作成の考え方」に基づき、この文は敬体（です・ます体）ですが、"
                "文書全体では常体（だ・である体）が使われています"
            )
        else:
            message = (
                "This sentence uses plain style (だ・である体), but the document "
                "predominantly uses polite style (です・ます体)"
            )
            message_ja = (
                "文化庁「公用文作成の考え方」に基づき、この文は常体（だ・である体）ですが、"
                "文書全体では敬体（です・ます体）が使われています"
            )
        finding = make_finding(
            "desu-masu-consistency", config, start, end, message, message_ja, reference=KOYO_REF
        )
        results.append((paragraph_index, finding))
    return _group_by_paragraph(results)


# ---------------------------------------------------------------------------
# adverb-form-consistency
# ---------------------------------------------------------------------------

_ADVERB_VARIANTS = {group.reading: group.variants for group in ADVERB_VARIANT_GROUPS}


def lint_adverb_form_consistency(
    paragraphs: Sequence[DocumentParagraph], config: RuleConfig
) -> list[ParagraphFindings]:
    if not paragraphs:
        return []

    by_reading: dict[str, list[_Occurrence]] = defaultdict(list)
    for paragraph in paragraphs:
        for token in paragraph.tokens:
            if token.pos != "副詞":
                continue
            variants = _ADVERB_VARIANTS.get(token.reading or "")
            if variants is None or token.surface not in variants:
                continue
            if config.skip_dialogue and is_in_dialogue(token.start, paragraph.text):
                continue
            by_reading[token.reading].append(
                _Occurrence(paragraph.index, token.surface, token.start, token.end)
            )

    results: list[tuple[int, Finding]] = []
    for reading, found in by_reading.items():
        counts: dict[str, int] = defaultdict(int)
        for occurrence in found:
            counts[occurrence.form] += 1
        if len(counts) < 2:
            continue
        majority = majority_form(counts, _ADVERB_VARIANTS[reading])
        for occurrence in found:
            if occurrence.form == majority:
                continue
            surface = occurrence.form
            results.append(
                (
                    occurrence.paragraph_index,
                    make_finding(
                        "adverb-form-consistency",
                        config,
                        occurrence.start,
                        occurrence.end,
                        f"Inconsistent adverb form: '{surface}' used here, "
                        f"but '{majority}' is more common in this document",
                        f"文化庁「公用文作成の考え方」に基づき、「{surface}」と「{majority}」が混在しています。"
                        f"多数派の「{majority}」への統一を検討してください",
                        reference=KOYO_REF,
                        fix=Fix(
                            label=f"Replace with '{majority}'",
                            label_ja=f"「{majority}」に置換",
                            replacement=majority,
                        ),
                    ),
                )
            )
    return _group_by_paragraph(results)


NOTATION_CONSISTENCY = DocumentRule(
    meta=RuleMetadata(
        id="notation-consistency",
        name="Notation consistency",
        name_ja="表記ゆれの検出",
        description="Detect inconsistent notation variants across the document",
        description_ja="文書内の表記ゆれを検出",
        level=RuleLevel.L1,
        default_config=RuleConfig(severity=Severity.WARNING, skip_dialogue=True),
    ),
    lint=lint_notation_consistency,
)

DESU_MASU_CONSISTENCY = DocumentRule(
    meta=RuleMetadata(
        id="desu-masu-consistency",
        name="Desu/Masu Consistency",
        name_ja="敬体・常体の混在検出",
        description="Detects mixing of polite and plain writing styles",
        description_ja="です・ます体と、だ・である体の混在を検出します",
        level=RuleLevel.L2,
        default_config=RuleConfig(
            severity=Severity.WARNING,
            skip_dialogue=True,
            options={"majorityThreshold": DEFAULT_MAJORITY_THRESHOLD},
        ),
    ),
    lint=lint_desu_masu_consistency,
    needs_tokens=True,
)

ADVERB_FORM_CONSISTENCY = DocumentRule(
    meta=RuleMetadata(
        id="adverb-form-consistency",
        name="Adverb Form Consistency",
        name_ja="副詞の漢字・ひらがな統一",
        description="Detects inconsistent kanji/kana forms of adverbs",
        description_ja="副詞の漢字表記とひらがな表記の混在を検出します",
        level=RuleLevel.L2,
        default_config=RuleConfig(severity=Severity.INFO),
    ),
    lint=lint_adverb_form_consistency,
    needs_tokens=True,
)
