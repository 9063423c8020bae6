"""Model-backed homophone detection."""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from ...llm.json_utils import parse_json_array
from ...llm.provider import ModelClient
from ...models import Finding, Fix, Reference, RuleConfig, RuleLevel, SentenceSpan, Severity
from ...prompt.render_prompt import render_template
from ...utils import CancellationToken, OperationCancelledError
from ..helpers import make_finding
from ..rule import ContextualRule, RuleMetadata

LOGGER = logging.getLogger(__name__)

MAX_TOKENS = 1024
LLM_REF = Reference(standard="LLM文脈分析", section="同音異義語")


def build_homophone_prompt(sentences: Sequence[SentenceSpan]) -> str:
    return render_template(
        "homophone_detection.md",
        {"sentences": [{"index": i, "text": s.text} for i, s in enumerate(sentences)]},
    )


def _finding_from_item(
    item: Any, sentences: Sequence[SentenceSpan], config: RuleConfig
) -> Finding | None:
    if not isinstance(item, dict):
        return None
    index = item.get("sentenceIndex")
    word = item.get("word")
    suggestion = item.get("suggestion")
    reason = item.get("reason") or ""
    if not isinstance(index, int) or not 0 <= index < len(sentences):
        return None
    if not isinstance(word, str) or not isinstance(suggestion, str) or not word:
        return None

    sentence = sentences[index]
    offset = sentence.text.find(word)
    if offset >= 0:
        start, end = sentence.start + offset, sentence.start + offset + len(word)
    else:
        start, end = sentence.start, sentence.end

    return make_finding(
        "homophone-detection",
        config,
        start,
        end,
        f'Possible homophone misuse: "{word}" may be "{suggestion}" ({reason})',
        f"「{word}」は文脈上「{suggestion}」の誤用の可能性があります（{reason}）",
        reference=LLM_REF,
        fix=Fix(
            label=f'Replace with "{suggestion}"',
            label_ja=f"「{suggestion}」に置換",
            replacement=suggestion,
        ),
    )


def parse_homophone_response(
    text: str, sentences: Sequence[SentenceSpan], config: RuleConfig
) -> list[Finding]:
    try:
        items = parse_json_array(text)
    except (ValueError, json.JSONDecodeError):
        LOGGER.warning("Failed to parse homophone detection response: %s", text[:200])
        return []
    findings = []
    for item in items:
        finding = _finding_from_item(item, sentences, config)
        if finding is not None:
            findings.append(finding)
    return findings


async def lint_homophones(
    sentences: Sequence[SentenceSpan],
    config: RuleConfig,
    client: ModelClient,
    cancellation: CancellationToken,
) -> list[Finding]:
    """Spans in ``sentences`` are kept, so findings share their coordinate space."""

    if not sentences or cancellation.cancelled:
        return []
    try:
        result = await client.infer(
            build_homophone_prompt(sentences), cancellation=cancellation, max_tokens=MAX_TOKENS
        )
    except OperationCancelledError:
        return []
    return parse_homophone_response(result.text, sentences, config)


HOMOPHONE_DETECTION = ContextualRule(
    meta=RuleMetadata(
        id="homophone-detection",
        name="Homophone Detection",
        name_ja="同音異義語の検出",
        description="Detects contextually incorrect homophone usage using LLM analysis",
        description_ja="LLMによる文脈分析で、同音異義語の誤用を検出します",
        level=RuleLevel.L3,
        default_config=RuleConfig(severity=Severity.WARNING),
    ),
    lint=lint_homophones,
)
