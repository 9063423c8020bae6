from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Sequence, cast

from dotenv import load_dotenv
from mistralai import Mistral, models

# NOTE: We intentionally avoid marshalled SDK message classes and instead
# use the `inputs`/`instructions` shape via `beta.conversations.start`.
from .json_utils import parse_json_response
from .provider import (
    LLMParseError,
    LLMProviderConfigurationError,
    LLMQuotaError,
    resolve_system_prompt,
)
from .remote import RemoteModelClient


class MistralLLM(RemoteModelClient):
    """Wrapper around the Mistral SDK with system instructions.

    The system prompt can be provided either as a string directly or as a Path to a file.
    """

    name = "mistral"
    MODEL = "mistral-small-latest"

    def __init__(
        self,
        system_prompt: str | Path | None = None,
        *,
        client: Mistral | None = None,
        dotenv_path: str | Path | None = None,
        filter_json: bool = False,
        model: str | None = None,
    ) -> None:
        self._system_prompt = resolve_system_prompt(system_prompt)

        if dotenv_path is not None:
            # Do not override existing environment variables; explicit values win
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        super().__init__(model=model or os.environ.get("MISTRAL_MODEL") or self.MODEL)

        # Mistral SDK does not automatically read MISTRAL_API_KEY from environment
        if client is None:
            api_key = os.environ.get("MISTRAL_API_KEY")
            if not api_key:
                raise LLMProviderConfigurationError(
                    "MISTRAL_API_KEY environment variable is required but not set. "
                    "Please set it in your .env file or environment."
                )
            self._client = Mistral(api_key=api_key)
        else:
            self._client = client

        self._filter_json = filter_json

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool | None = None,
        max_tokens: int | None = None,
    ) -> Any:
        if not user_prompts:
            raise ValueError("user_prompts must not be empty.")

        apply_filter = self._filter_json if filter_json is None else filter_json

        inputs = cast(
            models.ConversationInputs,
            [
                models.MessageInputEntry(
                    role="user",
                    content="\n".join(user_prompts),
                )
            ],
        )
        completion_args: dict[str, Any] = {"temperature": 0.2}
        if max_tokens is not None:
            completion_args["max_tokens"] = max_tokens

        try:
            response = self._client.beta.conversations.start(
                inputs=inputs,
                instructions=self._system_prompt,
                model=self.model,
                completion_args=completion_args,
                tools=[],
            )
        except Exception as exc:
            # Translate SDK rate-limit errors so the service can fall back
            if self._is_quota_error(exc):
                raise LLMQuotaError(
                    "Mistral provider: quota exhausted or rate limited"
                ) from exc
            raise

        if not apply_filter:
            return response

        return self._parse_response_json(response, prompts=list(user_prompts))

    def _response_text(self, response: Any) -> str:
        """Text of the first non-empty output entry.

        Supports the ``outputs`` shape returned by ``beta.conversations.start``
        and the older ``choices[0].message.content`` shape.
        """
        text: str | None = None

        outputs = getattr(response, "outputs", None)
        if isinstance(outputs, list):
            for entry in outputs:
                if isinstance(entry, dict):
                    content_val = entry.get("content")
                else:
                    content_val = getattr(entry, "content", None)
                if isinstance(content_val, str) and content_val.strip():
                    text = content_val
                    break

        if text is None and getattr(response, "choices", None):
            message = getattr(response.choices[0], "message", None)
            maybe = getattr(message, "content", None)
            if isinstance(maybe, str):
                text = maybe

        if not isinstance(text, str):
            raise LLMParseError(
                "Response message content is not a string; expected `outputs` or `choices` shapes.",
                response_text=str(response),
            )
        return text

    def _token_count(self, response: Any) -> int:
        usage = getattr(response, "usage", None)
        return int(getattr(usage, "completion_tokens", 0) or 0)

    def _parse_response_json(self, response: Any, prompts: list[str] | None = None) -> Any:
        """Extract and repair JSON content from a Mistral response.

        Raises:
            LLMParseError: If JSON parsing fails, with response text and prompts attached
        """
        try:
            text = self._response_text(response)
        except LLMParseError as exc:
            exc.prompts = prompts
            raise

        try:
            return parse_json_response(text)
        except (ValueError, json.JSONDecodeError) as exc:
            raise LLMParseError(
                str(exc),
                response_text=text,
                prompts=prompts,
            ) from exc

    def _is_quota_error(self, exc: Exception) -> bool:
        return getattr(exc, "status_code", None) == 429
