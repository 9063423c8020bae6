"""Async client surface shared by the hosted providers.

Hosted models are always "loaded": ``load_model`` only selects which model
id subsequent requests use, and ``unload_model`` is a no-op. The blocking
SDK call runs in a worker thread so the event loop keeps serving edits.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

from ..utils import CancellationToken, run_cancellable
from .provider import InferenceResult

LOGGER = logging.getLogger(__name__)


class RemoteModelClient:
    name = "remote"
    MODEL = ""

    def __init__(self, *, model: str | None = None) -> None:
        self._model = model or self.MODEL

    @property
    def model(self) -> str:
        return self._model

    def is_available(self) -> bool:
        return self.health_check()

    def health_check(self) -> bool:
        return True

    async def is_model_loaded(self) -> bool:
        return bool(self._model)

    async def load_model(self, model_id: str) -> None:
        if model_id and model_id != self._model:
            LOGGER.info("%s: switching model %s -> %s", self.name, self._model, model_id)
            self._model = model_id

    async def unload_model(self) -> None:
        LOGGER.debug("%s: unload requested; hosted models stay available", self.name)

    def generate(
        self,
        user_prompts: Sequence[str],
        *,
        filter_json: bool | None = None,
        max_tokens: int | None = None,
    ) -> Any:
        raise NotImplementedError

    def _response_text(self, response: Any) -> str:
        raise NotImplementedError

    def _token_count(self, response: Any) -> int:
        return 0

    def _complete(self, prompt: str, max_tokens: int | None) -> InferenceResult:
        response = self.generate([prompt], filter_json=False, max_tokens=max_tokens)
        return InferenceResult(
            text=self._response_text(response), token_count=self._token_count(response)
        )

    async def infer(
        self,
        prompt: str,
        *,
        cancellation: CancellationToken | None = None,
        max_tokens: int | None = None,
    ) -> InferenceResult:
        return await run_cancellable(
            asyncio.to_thread(self._complete, prompt, max_tokens), cancellation
        )
