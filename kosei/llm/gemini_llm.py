from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any, Sequence

from dotenv import load_dotenv
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .json_utils import parse_json_response
from .provider import LLMParseError, LLMProviderConfigurationError, LLMQuotaError, resolve_system_prompt
from .remote import RemoteModelClient


class GeminiLLM(RemoteModelClient):
    """Wrapper around the Gemini SDK with system instructions.

    The system prompt can be provided either as a string directly or as a Path to a file.
    """

    name = "gemini"
    MODEL = "gemini-2.5-flash"
    # Validation answers are a few tokens long; thinking only adds latency
    THINKING_BUDGET = 0

    def __init__(
        self,
        system_prompt: str | Path | None = None,
        *,
        client: genai.Client | None = None,
        dotenv_path: str | Path | None = None,
        filter_json: bool = False,
        model: str | None = None,
        min_request_interval: float | None = None,
        max_retries: int | None = None,
    ) -> None:
        self._system_prompt = resolve_system_prompt(system_prompt)

        if dotenv_path is not None:
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        super().__init__(model=model or os.environ.get("GEMINI_MODEL") or self.MODEL)

        if client is None:
            try:
                client = genai.Client()
            except ValueError as exc:
                raise LLMProviderConfigurationError(
                    "Gemini provider: GEMINI_API_KEY (or GOOGLE_API_KEY) is not configured"
                ) from exc
        self._client = client
        self._filter_json = filter_json

        if min_request_interval is None:
            min_request_interval = self._read_float_env("GEMINI_MIN_REQUEST_INTERVAL", default=0.0)
        self._min_request_interval = max(0.0, min_request_interval)

        if max_retries is None:
            max_retries = int(self._read_float_env("GEMINI_MAX_RETRIES", default=0))
        self._max_retries = max(0, max_retries)

        # Initialise to 0 so the first request is not rate limited
        self._last_request_time = 0.0

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
        contents = "\n".join(user_prompts)
        config = types.GenerateContentConfig(
            system_instruction=self._system_prompt,
            thinking_config=types.ThinkingConfig(thinking_budget=self.THINKING_BUDGET),
            temperature=0.2,
            max_output_tokens=max_tokens,
        )

        for attempt in range(self._max_retries + 1):
            self._enforce_rate_limit()
            try:
                response = self._client.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=config,
                )
            except genai_errors.APIError as exc:
                self._last_request_time = time.time()
                if getattr(exc, "code", None) != 429:
                    raise
                if attempt < self._max_retries:
                    # Backoff: min_interval * 2^attempt, with a small floor
                    backoff_delay = (self._min_request_interval or 0.1) * 2**attempt
                    time.sleep(backoff_delay)
                    continue
                raise LLMQuotaError("Gemini provider: quota exhausted or rate limited") from exc

            self._last_request_time = time.time()
            if not apply_filter:
                return response
            return self._parse_response_json(response, prompts=list(user_prompts))

        raise LLMQuotaError("Gemini provider: rate limited (exhausted retries)")

    def _response_text(self, response: Any) -> str:
        text = getattr(response, "text", None)
        if not isinstance(text, str):
            raise LLMParseError(
                "Response object does not expose a text attribute.",
                response_text=str(response),
            )
        return text

    def _token_count(self, response: Any) -> int:
        usage = getattr(response, "usage_metadata", None)
        return int(getattr(usage, "candidates_token_count", 0) or 0)

    def _parse_response_json(self, response: Any, prompts: list[str] | None = None) -> Any:
        """Extract and repair JSON content from a Gemini response.

        Raises:
            LLMParseError: If JSON parsing fails, with response text and prompts attached
        """
        text = getattr(response, "text", None)
        if not isinstance(text, str):
            raise LLMParseError(
                "Response object does not expose a text attribute for JSON parsing.",
                response_text=str(response),
                prompts=prompts,
            )

        try:
            return parse_json_response(text)
        except (ValueError, json.JSONDecodeError) as exc:
            raise LLMParseError(
                str(exc),
                response_text=text,
                prompts=prompts,
            ) from exc

    def _enforce_rate_limit(self) -> None:
        if self._min_request_interval <= 0:
            return
        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_request_interval:
            time.sleep(self._min_request_interval - elapsed)

    @staticmethod
    def _read_float_env(var_name: str, *, default: float) -> float:
        try:
            raw = os.environ.get(var_name)
            if raw is None:
                return default
            return float(raw)
        except ValueError:
            return default
