from __future__ import annotations

import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.linting.rules.homophone import (
    HOMOPHONE_DETECTION,
    build_homophone_prompt,
    lint_homophones,
    parse_homophone_response,
)
from kosei.llm.provider import InferenceResult
from kosei.models import SentenceSpan
from kosei.utils import CancellationToken, OperationCancelledError

CONFIG = HOMOPHONE_DETECTION.meta.default_config
SENTENCES = [SentenceSpan("意思が固い", 10, 15), SentenceSpan("異常の通り", 16, 21)]


class _DummyClient:
    name = "dummy"

    def __init__(self, text: str = "[]", *, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.prompts: list[str] = []
        self.max_tokens: list[int | None] = []

    def is_available(self) -> bool:
        return True

    async def is_model_loaded(self) -> bool:
        return True

    async def load_model(self, model_id: str) -> None:
        return None

    async def unload_model(self) -> None:
        return None

    async def infer(self, prompt, *, cancellation=None, max_tokens=None) -> InferenceResult:  # type: ignore[no-untyped-def]
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        if self.error is not None:
            raise self.error
        return InferenceResult(text=self.text)


def test_prompt_lists_sentences_with_indices() -> None:
    prompt = build_homophone_prompt(SENTENCES)

    assert "[0] 意思が固い" in prompt
    assert "[1] 異常の通り" in prompt
    assert "日本語校正の専門家" in prompt


def test_parse_locates_word_inside_sentence() -> None:
    response = '```json\n[{"sentenceIndex": 1, "word": "異常", "suggestion": "以上", "reason": "文脈"}]\n```'

    findings = parse_homophone_response(response, SENTENCES, CONFIG)

    assert len(findings) == 1
    finding = findings[0]
    assert (finding.start, finding.end) == (16, 18)
    assert finding.rule_id == "homophone-detection"
    assert finding.fix is not None
    assert finding.fix.replacement == "以上"


def test_parse_falls_back_to_sentence_span_when_word_missing() -> None:
    response = '[{"sentenceIndex": 0, "word": "意志", "suggestion": "意思", "reason": ""}]'

    findings = parse_homophone_response(response, SENTENCES, CONFIG)

    assert [(f.start, f.end) for f in findings] == [(10, 15)]


def test_parse_skips_invalid_items() -> None:
    response = (
        '[{"sentenceIndex": 5, "word": "a", "suggestion": "b"},'
        ' {"sentenceIndex": 0, "word": "", "suggestion": "b"},'
        ' "noise"]'
    )

    assert parse_homophone_response(response, SENTENCES, CONFIG) == []


def test_parse_returns_nothing_for_garbage() -> None:
    assert parse_homophone_response("no problems found", SENTENCES, CONFIG) == []


def test_lint_calls_model_once_for_all_sentences() -> None:
    client = _DummyClient('[{"sentenceIndex": 0, "word": "固い", "suggestion": "堅い", "reason": "意思"}]')

    findings = asyncio.run(lint_homophones(SENTENCES, CONFIG, client, CancellationToken()))

    assert [(f.start, f.end) for f in findings] == [(13, 15)]
    assert len(client.prompts) == 1
    assert client.max_tokens == [1024]


def test_lint_returns_empty_when_cancelled() -> None:
    client = _DummyClient()
    token = CancellationToken()
    token.cancel()

    assert asyncio.run(lint_homophones(SENTENCES, CONFIG, client, token)) == []
    assert client.prompts == []


def test_lint_swallows_cancellation_from_model() -> None:
    client = _DummyClient(error=OperationCancelledError("cancelled"))

    assert asyncio.run(lint_homophones(SENTENCES, CONFIG, client, CancellationToken())) == []


def test_lint_with_no_sentences() -> None:
    client = _DummyClient()

    assert asyncio.run(lint_homophones([], CONFIG, client, CancellationToken())) == []
    assert client.prompts == []
