from __future__ import annotations

import logging
from typing import Any, Sequence

from ..utils import CancellationToken
from .provider import (
    InferenceResult,
    LLMProvider,
    LLMProviderError,
    LLMQuotaError,
    ProviderReporter,
    ProviderStatus,
)

LOGGER = logging.getLogger(__name__)


class LLMService:
    """Facade that routes LLM requests across a priority-ordered provider list.

    The service is itself a model client, so the validation pass can use a
    chain of providers exactly as it would a single one.
    """

    def __init__(
        self,
        providers: Sequence[LLMProvider],
        *,
        reporter: ProviderReporter | None = None,
    ) -> None:
        self._providers = list(providers)
        self._reporter = reporter

    @property
    def name(self) -> str:
        return "+".join(self.provider_order()) or "llm-service"

    def provider_order(self) -> list[str]:
        """Return the provider names in configured order."""

        return [provider.name for provider in self._providers]

    def health_check(self) -> list[tuple[str, bool]]:
        """Run the optional health check for every provider."""

        return [(provider.name, provider.health_check()) for provider in self._providers]

    def is_available(self) -> bool:
        return any(provider.is_available() for provider in self._providers)

    async def is_model_loaded(self) -> bool:
        for provider in self._providers:
            if await provider.is_model_loaded():
                return True
        return False

    async def load_model(self, model_id: str) -> None:
        """Select ``model_id`` on a provider.

        ``"mistral:mistral-large-latest"`` targets a named provider; a bare id
        goes to the primary provider.
        """

        provider_name, _, model = model_id.rpartition(":")
        if provider_name:
            await self._find_provider(provider_name).load_model(model)
        elif self._providers:
            await self._providers[0].load_model(model)

    async def unload_model(self) -> None:
        for provider in self._providers:
            await provider.unload_model()

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool = False,
        max_tokens: int | None = None,
    ) -> Any:
        """Try each provider until one succeeds or all quotas are exhausted."""

        last_error: LLMQuotaError | None = None
        for provider in self._providers:
            try:
                value = provider.generate(
                    user_prompts, filter_json=filter_json, max_tokens=max_tokens
                )
                self._report(provider.name, ProviderStatus.SUCCESS)
                return value
            except LLMQuotaError as exc:
                last_error = exc
                self._report(provider.name, ProviderStatus.QUOTA, exc)
                continue
            except LLMProviderError as exc:
                self._report(provider.name, ProviderStatus.FAILURE, exc)
                raise
        raise LLMQuotaError("All providers exceeded quota") from last_error

    async def infer(
        self,
        prompt: str,
        *,
        cancellation: CancellationToken | None = None,
        max_tokens: int | None = None,
    ) -> InferenceResult:
        """Async counterpart of :meth:`generate`; cancellation propagates untouched."""

        last_error: LLMQuotaError | None = None
        for provider in self._providers:
            if not provider.is_available():
                self._report(provider.name, ProviderStatus.UNSUPPORTED)
                continue
            try:
                result = await provider.infer(
                    prompt, cancellation=cancellation, max_tokens=max_tokens
                )
            except LLMQuotaError as exc:
                last_error = exc
                LOGGER.warning("Provider %s is out of quota; trying the next one", provider.name)
                self._report(provider.name, ProviderStatus.QUOTA, exc)
                continue
            except LLMProviderError as exc:
                self._report(provider.name, ProviderStatus.FAILURE, exc)
                raise
            self._report(provider.name, ProviderStatus.SUCCESS)
            return result
        raise LLMQuotaError("All providers exceeded quota") from last_error

    def _find_provider(self, provider_name: str) -> LLMProvider:
        provider = next((p for p in self._providers if p.name == provider_name), None)
        if provider is None:
            raise ValueError(f"Provider '{provider_name}' not found in service")
        return provider

    def _report(
        self,
        provider_name: str,
        status: ProviderStatus,
        error: Exception | None = None,
    ) -> None:
        if self._reporter is None:
            return
        self._reporter(provider_name, status, error)
