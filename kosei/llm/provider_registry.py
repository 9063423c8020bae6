"""Build the validation model chain from ``LLM_PRIMARY`` / ``LLM_FALLBACK``.

Each variable holds comma-separated provider names. An entry may pin a model
with the same ``provider:model`` form :meth:`LLMService.load_model` accepts::

    LLM_PRIMARY=gemini:gemini-2.5-flash-lite
    LLM_FALLBACK=mistral

With neither variable set, every known provider is used in table order.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .gemini_llm import GeminiLLM
from .mistral_llm import MistralLLM
from .provider import ProviderFactory, ProviderReporter
from .service import LLMService

LOGGER = logging.getLogger(__name__)

PROVIDERS: dict[str, ProviderFactory] = {
    "gemini": GeminiLLM,
    "mistral": MistralLLM,
}


@dataclass(frozen=True)
class ProviderChoice:
    name: str
    model: str | None = None


def parse_provider_list(value: str | None) -> list[ProviderChoice]:
    """``"Gemini:gemini-2.5-pro, mistral"`` -> two choices; blanks are skipped."""

    choices: list[ProviderChoice] = []
    for chunk in (value or "").split(","):
        name, _, model = chunk.strip().partition(":")
        if name.strip():
            choices.append(ProviderChoice(name.strip().lower(), model.strip() or None))
    return choices


def resolve_provider_order(
    *,
    primary: str | None = None,
    fallbacks: Sequence[str] | None = None,
    dotenv_path: str | Path | None = None,
) -> list[ProviderChoice]:
    """Explicit arguments win over the environment; the first mention of a provider wins.

    Raises:
        ValueError: if a name is not in :data:`PROVIDERS`.
    """

    # The .env file must be loaded before LLM_PRIMARY/LLM_FALLBACK are read
    if dotenv_path is not None:
        load_dotenv(dotenv_path=str(dotenv_path), override=True)

    choices = parse_provider_list(primary or os.environ.get("LLM_PRIMARY"))
    if fallbacks:
        for entry in fallbacks:
            choices.extend(parse_provider_list(entry))
    else:
        choices.extend(parse_provider_list(os.environ.get("LLM_FALLBACK")))
    if not choices:
        choices = [ProviderChoice(name) for name in PROVIDERS]

    ordered: list[ProviderChoice] = []
    seen: set[str] = set()
    for choice in choices:
        if choice.name not in PROVIDERS:
            raise ValueError(
                f"Unknown LLM provider '{choice.name}'. Known providers: {', '.join(PROVIDERS)}"
            )
        if choice.name in seen:
            continue
        seen.add(choice.name)
        ordered.append(choice)
    return ordered


def create_llm_service(
    *,
    system_prompt: str | Path | None = None,
    filter_json: bool = False,
    dotenv_path: str | Path | None = None,
    primary: str | None = None,
    fallbacks: Sequence[str] | None = None,
    reporter: ProviderReporter | None = None,
) -> LLMService:
    """Instantiate the configured providers and wrap them in an :class:`LLMService`.

    Raises:
        LLMProviderConfigurationError: if a provider is missing its API key.
        ValueError: for an unknown provider name.
    """

    order = resolve_provider_order(primary=primary, fallbacks=fallbacks, dotenv_path=dotenv_path)
    providers = [
        PROVIDERS[choice.name](
            system_prompt=system_prompt,
            filter_json=filter_json,
            dotenv_path=dotenv_path,
            model=choice.model,
        )
        for choice in order
    ]
    service = LLMService(providers, reporter=reporter)
    LOGGER.info("Validation providers: %s", service.name)
    return service
