"""Text utilities shared by the lint rules."""

from __future__ import annotations

from typing import Iterator, Sequence

from ..models import Finding, Fix, Reference, RuleConfig, SentenceSpan, Token

MASK_CHAR = "〇"
OPEN_BRACKETS = frozenset("「『")
CLOSE_BRACKETS = frozenset("」』")
SENTENCE_DELIMITERS = frozenset("。！？!?\n")


def mask_dialogue(text: str) -> str:
    """Replace everything inside 「」 and 『』, brackets included, with 〇.

    Nesting is tracked so a closing bracket only ends the outermost quote.
    """

    chars: list[str] = []
    depth = 0
    for char in text:
        if char in OPEN_BRACKETS:
            depth += 1
            chars.append(MASK_CHAR)
        elif char in CLOSE_BRACKETS:
            if depth > 0:
                depth -= 1
            chars.append(MASK_CHAR)
        elif depth > 0:
            chars.append(MASK_CHAR)
        else:
            chars.append(char)
    return "".join(chars)


def is_in_dialogue(position: int, text: str) -> bool:
    """True when ``position`` falls inside (or opens) a quotation."""

    if position < len(text) and text[position] in OPEN_BRACKETS:
        return True
    depth = 0
    for char in text[:position]:
        if char in OPEN_BRACKETS:
            depth += 1
        elif char in CLOSE_BRACKETS and depth > 0:
            depth -= 1
    return depth > 0


def split_into_sentences(text: str) -> list[SentenceSpan]:
    """Split on 。！？!? and newlines.

    Delimiters are excluded from the spans and whitespace-only segments are
    dropped. Text after the last delimiter forms a final sentence.
    """

    sentences: list[SentenceSpan] = []
    start = 0
    for index, char in enumerate(text):
        if char in SENTENCE_DELIMITERS:
            segment = text[start:index]
            if segment.strip():
                sentences.append(SentenceSpan(segment, start, index))
            start = index + 1
    if start < len(text):
        segment = text[start:]
        if segment.strip():
            sentences.append(SentenceSpan(segment, start, len(text)))
    return sentences


def find_all(text: str, needle: str, *, overlapping: bool = False) -> Iterator[int]:
    """Yield every index where ``needle`` occurs in ``text``."""

    if not needle:
        return
    step = 1 if overlapping else len(needle)
    index = text.find(needle)
    while index != -1:
        yield index
        index = text.find(needle, index + step)


def tokens_in_range(tokens: Sequence[Token], start: int, end: int) -> list[Token]:
    return [token for token in tokens if token.start >= start and token.end <= end]


def effective_length(text: str) -> int:
    """Length ignoring masked dialogue characters."""

    return len(text) - text.count(MASK_CHAR)


def option_int(config: RuleConfig, name: str, default: int) -> int:
    return int(config.option(name, default))


def option_float(config: RuleConfig, name: str, default: float) -> float:
    return float(config.option(name, default))


def make_finding(
    rule_id: str,
    config: RuleConfig,
    start: int,
    end: int,
    message: str,
    message_ja: str | None = None,
    *,
    reference: Reference | None = None,
    fix: Fix | None = None,
) -> Finding:
    return Finding(
        rule_id=rule_id,
        severity=config.severity,
        message=message,
        message_ja=message_ja,
        start=start,
        end=end,
        reference=reference,
        fix=fix,
    )


def find_runs(
    flags: Sequence[bool | None], threshold: int
) -> list[tuple[int, int]]:
    """Return ``(first, last)`` index pairs of ``True`` runs at least ``threshold`` long.

    ``None`` entries break a run the same way ``False`` does.
    """

    runs: list[tuple[int, int]] = []
    run_start = 0
    run_length = 0
    for index, flag in enumerate(flags):
        if flag:
            if run_length == 0:
                run_start = index
            run_length += 1
            continue
        if run_length >= threshold:
            runs.append((run_start, run_start + run_length - 1))
        run_length = 0
    if run_length >= threshold:
        runs.append((run_start, run_start + run_length - 1))
    return runs


def drop_dialogue(findings: list[Finding], text: str) -> list[Finding]:
    """Remove findings that start inside a quotation."""

    return [finding for finding in findings if not is_in_dialogue(finding.start, text)]
