from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Protocol, Sequence

from ..utils import CancellationToken

ProviderReporter = Callable[[str, "ProviderStatus", Exception | None], None]

DEFAULT_SYSTEM_PROMPT = "あなたは日本語校正の専門家です。指示された形式だけで簡潔に回答してください。"


class ProviderStatus(str, Enum):
    """Status used when reporting the outcome of a provider call."""

    SUCCESS = "success"
    QUOTA = "quota"
    FAILURE = "failure"
    UNSUPPORTED = "unsupported"


class LLMProviderError(Exception):
    """Generic failure raised by an LLM provider."""


class LLMQuotaError(LLMProviderError):
    """Raised when a provider reports quota or rate-limit exhaustion."""


class LLMProviderConfigurationError(LLMProviderError):
    """Raised when a provider cannot be configured or authenticated."""


class LLMParseError(LLMProviderError):
    """Raised when an LLM response cannot be parsed as expected.

    This exception includes the raw response text and input prompts
    to aid debugging when the LLM returns unexpected content.
    """

    def __init__(
        self,
        message: str,
        *,
        response_text: str | None = None,
        prompts: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.response_text = response_text
        self.prompts = prompts

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.response_text is not None:
            # Truncate very long responses for readability
            text = self.response_text
            if len(text) > 2000:
                text = text[:2000] + "... [truncated]"
            parts.append(f"\n--- LLM Response ---\n{text}")
        if self.prompts:
            prompt_text = "\n".join(self.prompts)
            if len(prompt_text) > 2000:
                prompt_text = prompt_text[:2000] + "... [truncated]"
            parts.append(f"\n--- Input Prompts ---\n{prompt_text}")
        return "".join(parts)


@dataclass(frozen=True)
class InferenceResult:
    text: str
    token_count: int = 0


class ModelClient(Protocol):
    """What the validation pass and contextual rules need from a model."""

    name: str

    def is_available(self) -> bool:
        """True when the client can be used in this environment."""
        ...

    async def is_model_loaded(self) -> bool: ...

    async def load_model(self, model_id: str) -> None: ...

    async def unload_model(self) -> None: ...

    async def infer(
        self,
        prompt: str,
        *,
        cancellation: CancellationToken | None = None,
        max_tokens: int | None = None,
    ) -> InferenceResult:
        """Run one prompt.

        Raises:
            OperationCancelledError: if ``cancellation`` fires first.
        """
        ...


class LLMProvider(ModelClient, Protocol):
    """A remote provider: synchronous SDK call plus the async client surface."""

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool | None = None,
        max_tokens: int | None = None,
    ) -> Any:
        """Produce a single response for the provided prompts."""
        ...

    def health_check(self) -> bool:
        """Optional quick check that returns True when the provider is ready."""
        ...


class ProviderFactory(Protocol):
    def __call__(
        self,
        *,
        system_prompt: str | Path | None,
        filter_json: bool,
        dotenv_path: str | Path | None,
        model: str | None,
    ) -> LLMProvider: ...


def resolve_system_prompt(system_prompt: str | Path | None) -> str:
    """Accept either a prompt string or a path to a file containing one."""

    if system_prompt is None:
        return DEFAULT_SYSTEM_PROMPT
    if not isinstance(system_prompt, (str, Path)):
        raise TypeError(f"system_prompt must be str or Path, got {type(system_prompt)}")
    # Only short single-line strings can be paths
    if isinstance(system_prompt, Path) or (
        "\n" not in system_prompt and len(system_prompt) < 500
    ):
        try:
            prompt_path = Path(system_prompt)
            if prompt_path.exists() and prompt_path.is_file():
                return prompt_path.read_text(encoding="utf-8")
        except (OSError, ValueError):
            pass
    return str(system_prompt)
