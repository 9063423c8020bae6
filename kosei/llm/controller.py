"""Model lifecycle with automatic unloading after a cooldown.

State machine::

    IDLE -> LOADING -> READY -> ACTIVE -> COOLING -> UNLOADING -> IDLE

Work is submitted through :meth:`ModelController.request`. The model is
loaded on first use, and unloaded once no work has arrived for
``cooldown_ms``. Loading is serialised so concurrent requests only load once.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, TypeVar

from .provider import ModelClient

T = TypeVar("T")

LOGGER = logging.getLogger(__name__)

DEFAULT_COOLDOWN_MS = 60_000


class ModelState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ACTIVE = "active"
    COOLING = "cooling"
    UNLOADING = "unloading"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


StateListener = Callable[[ModelState], None]


class ModelController:
    def __init__(
        self,
        client: ModelClient,
        model_id: str,
        *,
        cooldown_ms: int = DEFAULT_COOLDOWN_MS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._model_id = model_id
        self._cooldown_ms = cooldown_ms
        self._lock = asyncio.Lock()
        self._state = ModelState.IDLE
        self._active = 0
        self._cooldown_task: asyncio.Task[None] | None = None
        self._listeners: list[StateListener] = []
        self._logger = logger or LOGGER

    @property
    def client(self) -> ModelClient:
        return self._client

    @property
    def state(self) -> ModelState:
        return self._state

    def on_state_change(self, listener: StateListener) -> Callable[[], None]:
        """Subscribe to state changes; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def request(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run ``task`` with the model loaded.

        The cooldown starts when the last concurrent task finishes, whether
        it succeeded or not.
        """

        self._cancel_cooldown()
        async with self._lock:
            # A cooldown may have started while this request waited for the lock
            self._cancel_cooldown()
            if self._state in (ModelState.IDLE, ModelState.UNLOADING):
                await self._load()

        self._active += 1
        self._set_state(ModelState.ACTIVE)
        try:
            return await task()
        finally:
            self._active -= 1
            if self._active == 0:
                self._start_cooldown()

    async def unload(self) -> None:
        """Unload immediately. No-op when already idle."""

        self._cancel_cooldown()
        async with self._lock:
            if self._state is ModelState.IDLE:
                return
            await self._unload()

    async def switch_model(self, model_id: str) -> None:
        """Select a different model; the next request loads it."""

        if model_id == self._model_id:
            return
        await self.unload()
        self._model_id = model_id

    async def _load(self) -> None:
        self._set_state(ModelState.LOADING)
        try:
            await self._client.load_model(self._model_id)
        except Exception:
            self._set_state(ModelState.IDLE)
            raise
        self._set_state(ModelState.READY)

    async def _unload(self) -> None:
        self._set_state(ModelState.UNLOADING)
        try:
            await self._client.unload_model()
        finally:
            self._set_state(ModelState.IDLE)

    def _start_cooldown(self) -> None:
        self._cancel_cooldown()
        self._set_state(ModelState.COOLING)
        self._cooldown_task = asyncio.ensure_future(self._cooldown())

    async def _cooldown(self) -> None:
        await asyncio.sleep(self._cooldown_ms / 1000)
        self._cooldown_task = None
        async with self._lock:
            # A new request may have arrived while we slept
            if self._state is ModelState.COOLING:
                self._logger.info("Unloading %s after %d ms idle", self._model_id, self._cooldown_ms)
                await self._unload()

    def _cancel_cooldown(self) -> None:
        if self._cooldown_task is not None:
            self._cooldown_task.cancel()
            self._cooldown_task = None

    def _set_state(self, state: ModelState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)
