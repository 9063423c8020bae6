"""Model client boundary, hosted providers and the provider chain."""

from __future__ import annotations

from .controller import ModelController, ModelState
from .json_utils import parse_json_array, parse_json_response
from .provider import (
    InferenceResult,
    LLMParseError,
    LLMProvider,
    LLMProviderConfigurationError,
    LLMProviderError,
    LLMQuotaError,
    ModelClient,
    ProviderStatus,
)
from .service import LLMService

__all__ = [
    "InferenceResult",
    "LLMParseError",
    "LLMProvider",
    "LLMProviderConfigurationError",
    "LLMProviderError",
    "LLMQuotaError",
    "LLMService",
    "ModelClient",
    "ModelController",
    "ModelState",
    "ProviderStatus",
    "parse_json_array",
    "parse_json_response",
]
