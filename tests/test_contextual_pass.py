"""Tests for the debounced validation and contextual-rule pass."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.linting import RuleRunner
from kosei.linting.rules.homophone import HOMOPHONE_DETECTION
from kosei.llm.controller import ModelController
from kosei.llm.provider import InferenceResult, LLMProviderError
from kosei.models import Finding, Paragraph, RuleConfig, Severity, ValidationState
from kosei.utils import run_cancellable
from kosei.validation import ContextualPass, build_document_sentences, group_by_paragraph


def _paragraphs(*texts: str) -> list[Paragraph]:
    paragraphs: list[Paragraph] = []
    position = 0
    for index, text in enumerate(texts):
        paragraphs.append(Paragraph(text=text, start=position, index=index))
        position += len(text) + 1
    return paragraphs


def _finding(start: int, end: int, rule_id: str = "homophone-detection") -> Finding:
    return Finding(rule_id=rule_id, severity=Severity.WARNING, message="m", start=start, end=end)


class _DummyClient:
    name = "dummy"

    def __init__(self, text: str = "[]", *, loaded: bool = True, available: bool = True) -> None:
        self.text = text
        self.loaded = loaded
        self.available = available
        self.prompts: list[str] = []
        self.load_calls: list[str] = []
        self.unload_calls = 0

    def is_available(self) -> bool:
        return self.available

    async def is_model_loaded(self) -> bool:
        return self.loaded

    async def load_model(self, model_id: str) -> None:
        self.load_calls.append(model_id)

    async def unload_model(self) -> None:
        self.unload_calls += 1

    async def infer(self, prompt, *, cancellation=None, max_tokens=None) -> InferenceResult:  # type: ignore[no-untyped-def]
        self.prompts.append(prompt)
        return InferenceResult(text=self.text)


class TestSharedAxis:
    def test_sentences_are_laid_end_to_end(self) -> None:
        sentences, bases = build_document_sentences(_paragraphs("一文。二文。", "三文"))

        assert [(s.text, s.start, s.end) for s in sentences] == [
            ("一文", 0, 2),
            ("二文", 3, 5),
            ("三文", 7, 9),
        ]
        assert [base for base, _ in bases] == [0, 7]

    def test_findings_map_back_to_their_paragraph(self) -> None:
        _, bases = build_document_sentences(_paragraphs("一文。二文。", "三文"))

        grouped = group_by_paragraph([_finding(8, 9), _finding(5, 8), _finding(0, 2)], bases)

        assert [(f.start, f.end) for f in grouped["三文"]] == [(1, 2)]
        assert [(f.start, f.end) for f in grouped["一文。二文。"]] == [(0, 2)]

    def test_every_paragraph_gets_an_entry(self) -> None:
        _, bases = build_document_sentences(_paragraphs("a", "b"))

        assert group_by_paragraph([], bases) == {"a": [], "b": []}


class TestContextualRules:
    RESPONSE = '[{"sentenceIndex": 2, "word": "文", "suggestion": "分", "reason": "test"}]'

    def _pass(self, client: _DummyClient, **kwargs) -> ContextualPass:  # type: ignore[no-untyped-def]
        runner = RuleRunner([HOMOPHONE_DETECTION])
        return ContextualPass(runner, client, debounce_ms=0, validation_enabled=False, **kwargs)

    def test_findings_are_cached_per_paragraph(self) -> None:
        client = _DummyClient(self.RESPONSE)
        updates: list[int] = []

        async def scenario() -> ContextualPass:
            contextual = self._pass(client, on_update=lambda: updates.append(1))
            contextual.schedule(_paragraphs("一文。二文。", "三文"), {})
            await contextual.wait_idle()
            return contextual

        contextual = asyncio.run(scenario())

        assert [(f.start, f.end) for f in contextual.contextual_findings("三文")] == [(1, 2)]
        assert contextual.contextual_findings("一文。二文。") == []
        assert len(updates) == 1

    def test_only_uncached_paragraphs_are_sent(self) -> None:
        client = _DummyClient("[]")

        async def scenario() -> None:
            contextual = self._pass(client)
            contextual.schedule(_paragraphs("一文。", "二文。"), {})
            await contextual.wait_idle()
            contextual.schedule(_paragraphs("一文。", "二文。", "三文。"), {})
            await contextual.wait_idle()

        asyncio.run(scenario())

        assert len(client.prompts) == 2
        assert "[0] 三文" in client.prompts[1]

    def test_new_snapshot_cancels_previous_one(self) -> None:
        client = _DummyClient("[]")

        async def scenario() -> None:
            contextual = self._pass(client)
            contextual.schedule(_paragraphs("古い文。"), {})
            contextual.schedule(_paragraphs("新しい文。"), {})
            await contextual.wait_idle()

        asyncio.run(scenario())

        assert len(client.prompts) == 1
        assert "新しい文" in client.prompts[0]

    def test_unavailable_client_does_nothing(self) -> None:
        client = _DummyClient(available=False)

        async def scenario() -> ContextualPass:
            contextual = self._pass(client)
            contextual.schedule(_paragraphs("一文。"), {})
            await contextual.wait_idle()
            return contextual

        contextual = asyncio.run(scenario())

        assert client.prompts == []
        assert not contextual.running
        assert not contextual.is_validating()


class TestValidation:
    def _pass(self, client: _DummyClient, **kwargs) -> ContextualPass:  # type: ignore[no-untyped-def]
        runner = RuleRunner()
        runner.set_config("skipped", RuleConfig(skip_llm_validation=True))
        return ContextualPass(runner, client, debounce_ms=0, **kwargs)

    def test_states_follow_validator_outcomes(self) -> None:
        client = _DummyClient('{"valid": false}')
        finding = _finding(0, 1, "typo")

        async def scenario() -> ContextualPass:
            contextual = self._pass(client)
            assert contextual.state_of(finding, "誤り") is ValidationState.PENDING
            contextual.schedule(_paragraphs("誤り"), {"誤り": [finding]})
            await contextual.wait_idle()
            return contextual

        contextual = asyncio.run(scenario())

        assert contextual.state_of(finding, "誤り") is ValidationState.DISMISSED
        assert contextual.state_of(_finding(0, 1, "skipped"), "誤り") is ValidationState.CONFIRMED

    def test_unready_model_lifts_gating(self) -> None:
        client = _DummyClient(loaded=False)
        updates: list[int] = []

        async def scenario() -> ContextualPass:
            contextual = self._pass(client, on_update=lambda: updates.append(1))
            assert contextual.is_validating()
            contextual.schedule(_paragraphs("誤り"), {"誤り": [_finding(0, 1, "typo")]})
            await contextual.wait_idle()
            return contextual

        contextual = asyncio.run(scenario())

        assert not contextual.is_validating()
        assert client.prompts == []
        assert updates == [1]

        contextual.clear_validation_cache()
        assert contextual.is_validating()

    def test_set_client_drops_verdicts(self) -> None:
        finding = _finding(0, 1, "typo")

        async def scenario() -> ContextualPass:
            contextual = self._pass(_DummyClient('{"valid": true}'))
            contextual.schedule(_paragraphs("誤り"), {"誤り": [finding]})
            await contextual.wait_idle()
            assert contextual.state_of(finding, "誤り") is ValidationState.CONFIRMED
            contextual.set_client(_DummyClient())
            return contextual

        contextual = asyncio.run(scenario())

        assert contextual.client.name == "dummy"
        assert contextual.state_of(finding, "誤り") is ValidationState.PENDING

    def test_model_switch_happens_at_next_pass(self) -> None:
        client = _DummyClient()

        async def scenario() -> None:
            contextual = self._pass(client)
            contextual.set_model("other-model")
            assert client.load_calls == []
            contextual.schedule(_paragraphs("誤り"), {})
            await contextual.wait_idle()

        asyncio.run(scenario())

        assert client.load_calls == ["other-model"]

    def test_controller_loads_model_on_demand(self) -> None:
        client = _DummyClient('{"valid": true}', loaded=False)

        async def scenario() -> ModelController:
            controller = ModelController(client, "local-model", cooldown_ms=60_000)
            contextual = self._pass(client, controller=controller)
            contextual.schedule(_paragraphs("誤り"), {"誤り": [_finding(0, 1, "typo")]})
            await contextual.wait_idle()
            await controller.unload()
            return controller

        asyncio.run(scenario())

        assert client.load_calls == ["local-model"]
        assert len(client.prompts) == 1
        assert client.unload_calls == 1

    def test_dispose_stops_scheduling(self) -> None:
        client = _DummyClient()

        async def scenario() -> None:
            contextual = self._pass(client)
            contextual.dispose()
            contextual.schedule(_paragraphs("誤り"), {"誤り": [_finding(0, 1, "typo")]})
            await contextual.wait_idle()

        asyncio.run(scenario())

        assert client.prompts == []

    def test_cancel_stops_inference_in_flight(self) -> None:
        class _SlowClient(_DummyClient):
            def __init__(self) -> None:
                super().__init__()
                self.inflight = 0

            async def infer(self, prompt, *, cancellation=None, max_tokens=None) -> InferenceResult:  # type: ignore[no-untyped-def]
                async def body() -> InferenceResult:
                    self.inflight += 1
                    try:
                        await asyncio.sleep(0.3)
                        return InferenceResult(text='{"valid": true}')
                    finally:
                        self.inflight -= 1

                self.prompts.append(prompt)
                return await run_cancellable(body(), cancellation)

        client = _SlowClient()
        finding = _finding(0, 1, "typo")

        async def scenario() -> ContextualPass:
            contextual = self._pass(client)
            contextual.schedule(_paragraphs("誤り"), {"誤り": [finding]})
            await asyncio.sleep(0.1)
            assert client.inflight == 1
            contextual.cancel()
            await asyncio.sleep(0.05)
            return contextual

        contextual = asyncio.run(scenario())

        assert client.inflight == 0
        assert not contextual.running
        assert contextual.state_of(finding, "誤り") is ValidationState.PENDING

    def test_failed_validation_is_shown_and_retried_next_pass(self) -> None:
        class _FlakyClient(_DummyClient):
            async def infer(self, prompt, *, cancellation=None, max_tokens=None) -> InferenceResult:  # type: ignore[no-untyped-def]
                self.prompts.append(prompt)
                if len(self.prompts) == 1:
                    raise LLMProviderError("503 Service Unavailable")
                return InferenceResult(text='{"valid": false}')

        client = _FlakyClient()
        finding = _finding(0, 1, "typo")

        async def scenario() -> list[ValidationState]:
            contextual = self._pass(client)
            states = []
            for _ in range(2):
                contextual.schedule(_paragraphs("誤り"), {"誤り": [finding]})
                await contextual.wait_idle()
                states.append(contextual.state_of(finding, "誤り"))
            return states

        assert asyncio.run(scenario()) == [ValidationState.CONFIRMED, ValidationState.DISMISSED]
        assert len(client.prompts) == 2
