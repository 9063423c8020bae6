from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, cast

import pytest
from mistralai import Mistral

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.llm.mistral_llm import MistralLLM
from kosei.llm.provider import LLMParseError, LLMProviderConfigurationError, LLMQuotaError


class _DummyMessage:
    def __init__(self, content: Any) -> None:
        self.content = content


class _DummyChoice:
    def __init__(self, message: _DummyMessage) -> None:
        self.message = message
        self.finish_reason = "stop"


class _DummyResponse:
    def __init__(self, content: Any) -> None:
        self.choices = [_DummyChoice(_DummyMessage(content))]


class _DummyClient:
    def __init__(self, response: Any = None, *, error: Exception | None = None) -> None:
        # Mirrors the `beta.conversations.start` API used in production
        class _Conversations:
            def __init__(self) -> None:
                self.calls: list[dict[str, object]] = []

            def start(self, **kwargs: object) -> Any:
                self.calls.append(kwargs)
                if error is not None:
                    raise error
                return response if response is not None else _DummyResponse("mock-response")

        class _Beta:
            def __init__(self) -> None:
                self.conversations = _Conversations()

        self.beta = _Beta()

    @property
    def calls(self) -> list[dict[str, object]]:
        return self.beta.conversations.calls


class _QuotaExceededError(Exception):
    """Mock quota exceeded error."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.status_code = 429


def _llm(client: _DummyClient, **kwargs: Any) -> MistralLLM:
    return MistralLLM(system_prompt="System", client=cast(Mistral, client), **kwargs)


def test_generate_sends_instructions_and_joined_prompt() -> None:
    client = _DummyClient()
    llm = _llm(client)

    result = llm.generate(["Line one", "Line two"], max_tokens=60)

    assert isinstance(result, _DummyResponse)
    call = client.calls[0]
    assert call["instructions"] == "System"
    assert call["model"] == MistralLLM.MODEL
    assert call["completion_args"] == {"temperature": 0.2, "max_tokens": 60}
    assert call["tools"] == []
    inputs = cast(list, call["inputs"])
    assert inputs[0].content == "Line one\nLine two"


def test_max_tokens_is_optional() -> None:
    client = _DummyClient()

    _llm(client).generate(["Prompt"])

    assert client.calls[0]["completion_args"] == {"temperature": 0.2}


def test_generate_returns_repaired_json_when_filter_enabled() -> None:
    client = _DummyClient(_DummyResponse('Sure! ```json\n{"valid": true,}\n```'))

    assert _llm(client, filter_json=True).generate(["Prompt"]) == {"valid": True}


def test_outputs_shape_is_supported() -> None:
    response = SimpleNamespace(outputs=[{"content": ""}, SimpleNamespace(content='{"valid": false}')])
    client = _DummyClient(response)

    assert _llm(client, filter_json=True).generate(["Prompt"]) == {"valid": False}


def test_non_string_content_raises_parse_error() -> None:
    client = _DummyClient(_DummyResponse(None))

    with pytest.raises(LLMParseError) as exc_info:
        _llm(client, filter_json=True).generate(["Prompt"])

    assert exc_info.value.prompts == ["Prompt"]


def test_unparseable_json_keeps_response_text() -> None:
    client = _DummyClient(_DummyResponse("no json"))

    with pytest.raises(LLMParseError) as exc_info:
        _llm(client, filter_json=True).generate(["Prompt"])

    assert exc_info.value.response_text == "no json"


def test_quota_errors_are_translated() -> None:
    client = _DummyClient(error=_QuotaExceededError("Too many requests"))

    with pytest.raises(LLMQuotaError):
        _llm(client).generate(["Prompt"])


def test_other_errors_propagate() -> None:
    client = _DummyClient(error=RuntimeError("connection reset"))

    with pytest.raises(RuntimeError, match="connection reset"):
        _llm(client).generate(["Prompt"])


def test_missing_api_key_is_a_configuration_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISTRAL_API_KEY", raising=False)
    empty_env = tmp_path / ".env"
    empty_env.write_text("", encoding="utf-8")

    with pytest.raises(LLMProviderConfigurationError):
        MistralLLM(system_prompt="System", dotenv_path=empty_env)


def test_model_comes_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MISTRAL_MODEL", "mistral-large-latest")

    assert _llm(_DummyClient()).model == "mistral-large-latest"


def test_infer_reads_choices_text() -> None:
    client = _DummyClient(_DummyResponse('{"valid": true}'))

    result = asyncio.run(_llm(client).infer("確認", max_tokens=60))

    assert result.text == '{"valid": true}'
    assert result.token_count == 0
    assert client.calls[0]["completion_args"] == {"temperature": 0.2, "max_tokens": 60}
