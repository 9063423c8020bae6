from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.llm.provider import InferenceResult, LLMProviderError
from kosei.models import Finding, Severity
from kosei.utils import CancellationToken, OperationCancelledError
from kosei.validation import FindingValidator, outcome_key, parse_validation_response
from kosei.validation.validator import build_context


def _finding(start: int, end: int, rule_id: str = "redundant-expression") -> Finding:
    return Finding(
        rule_id=rule_id,
        severity=Severity.WARNING,
        message="Redundant expression",
        message_ja="二重表現です",
        start=start,
        end=end,
    )


class _DummyClient:
    name = "dummy"

    def __init__(self, responses: list[str] | None = None, *, error: Exception | None = None, delay: float = 0) -> None:
        self.responses = list(responses or [])
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []
        self.active = 0
        self.peak = 0

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
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            text = self.responses.pop(0) if self.responses else '{"valid": true}'
            return InferenceResult(text=text)
        finally:
            self.active -= 1


class TestParseValidationResponse:
    def test_plain_verdicts(self) -> None:
        assert parse_validation_response('{"valid": true}') is True
        assert parse_validation_response('{"valid": false}') is False

    def test_fenced_and_listed(self) -> None:
        assert parse_validation_response('```json\n{"valid": false}\n```') is False
        assert parse_validation_response('[{"valid": true}]') is True

    def test_unreadable(self) -> None:
        assert parse_validation_response("はい") is None
        assert parse_validation_response('{"valid": "yes"}') is None


def test_context_marks_the_match() -> None:
    text = "今日は頭痛が痛いので休む"

    assert build_context(_finding(3, 8), text, 3) == "...今日は<<頭痛が痛い>>ので休..."


def test_outcome_key_depends_on_paragraph() -> None:
    finding = _finding(0, 2)

    assert outcome_key(finding, "頭痛が痛い") != outcome_key(finding, "頭痛が痛む")
    assert outcome_key(finding, "頭痛が痛い").endswith(":redundant-expression:頭痛")


def test_prompt_includes_rule_name_and_style() -> None:
    validator = FindingValidator(_DummyClient(), style="小説の文体として")

    prompt = validator.build_prompt(_finding(0, 5), "頭痛が痛い。")

    assert "二重表現の検出" in prompt
    assert "二重表現です" in prompt
    assert "<<頭痛が痛い>>" in prompt
    assert "小説の文体として" in prompt


class TestValidateOne:
    def test_verdict_is_cached(self) -> None:
        client = _DummyClient(['{"valid": false}'])
        validator = FindingValidator(client)
        finding = _finding(0, 5)

        async def scenario() -> tuple[bool, bool]:
            first = await validator.validate_one(finding, "頭痛が痛い。")
            second = await validator.validate_one(finding, "頭痛が痛い。")
            return first, second

        assert asyncio.run(scenario()) == (False, False)
        assert len(client.prompts) == 1
        assert validator.cached_outcome(finding, "頭痛が痛い。") is False

    def test_failure_keeps_the_finding(self) -> None:
        validator = FindingValidator(_DummyClient(error=LLMProviderError("down")))
        finding = _finding(0, 5)

        assert asyncio.run(validator.validate_one(finding, "頭痛が痛い。")) is True
        assert validator.cached_outcome(finding, "頭痛が痛い。") is True
        # Not a verdict, so the next pass asks again
        assert not validator.has_outcome(finding, "頭痛が痛い。")

    def test_failed_request_is_retried(self) -> None:
        client = _DummyClient(['{"valid": false}'], error=LLMProviderError("503"))
        validator = FindingValidator(client)
        finding = _finding(0, 5)

        async def scenario() -> tuple[bool, bool]:
            first = await validator.validate_one(finding, "頭痛が痛い。")
            client.error = None
            second = await validator.validate_one(finding, "頭痛が痛い。")
            return first, second

        assert asyncio.run(scenario()) == (True, False)
        assert len(client.prompts) == 2
        assert validator.cached_outcome(finding, "頭痛が痛い。") is False

    def test_unreadable_answer_keeps_the_finding(self) -> None:
        validator = FindingValidator(_DummyClient(["たぶん"]))

        assert asyncio.run(validator.validate_one(_finding(0, 5), "頭痛が痛い。")) is True

    def test_cancellation_is_not_cached(self) -> None:
        validator = FindingValidator(_DummyClient(error=OperationCancelledError("stop")))
        finding = _finding(0, 5)

        with pytest.raises(OperationCancelledError):
            asyncio.run(validator.validate_one(finding, "頭痛が痛い。"))
        assert not validator.has_outcome(finding, "頭痛が痛い。")

    def test_clear_cache(self) -> None:
        validator = FindingValidator(_DummyClient())
        finding = _finding(0, 5)
        asyncio.run(validator.validate_one(finding, "頭痛が痛い。"))

        validator.clear_cache()

        assert validator.cached_outcome(finding, "頭痛が痛い。") is None


class TestValidateMany:
    def test_results_in_input_order_within_concurrency(self) -> None:
        client = _DummyClient(delay=0.01)
        validator = FindingValidator(client, concurrency=2)
        text = "あいうえおかきくけこ"
        items = [(_finding(i, i + 1), text) for i in range(6)]

        results = asyncio.run(validator.validate(items))

        assert results == [True] * 6
        assert client.peak == 2

    def test_cancelled_token_raises(self) -> None:
        validator = FindingValidator(_DummyClient())
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            asyncio.run(validator.validate([(_finding(0, 1), "あ")], token))

    def test_empty_input(self) -> None:
        assert asyncio.run(FindingValidator(_DummyClient()).validate([])) == []

    def test_concurrency_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            FindingValidator(_DummyClient(), concurrency=0)
