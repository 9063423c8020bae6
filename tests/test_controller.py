from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.llm.controller import ModelController, ModelState
from kosei.llm.provider import InferenceResult


class _DummyClient:
    name = "local"

    def __init__(self, *, fail_load: bool = False) -> None:
        self.fail_load = fail_load
        self.loads: list[str] = []
        self.unloads = 0

    def is_available(self) -> bool:
        return True

    async def is_model_loaded(self) -> bool:
        return bool(self.loads)

    async def load_model(self, model_id: str) -> None:
        await asyncio.sleep(0)
        if self.fail_load:
            raise RuntimeError("out of memory")
        self.loads.append(model_id)

    async def unload_model(self) -> None:
        self.unloads += 1

    async def infer(self, prompt, *, cancellation=None, max_tokens=None) -> InferenceResult:  # type: ignore[no-untyped-def]
        return InferenceResult(text=prompt)


async def _work(value: str = "done") -> str:
    await asyncio.sleep(0)
    return value


def test_full_lifecycle_with_cooldown() -> None:
    client = _DummyClient()
    states: list[ModelState] = []

    async def scenario() -> str:
        controller = ModelController(client, "small", cooldown_ms=10)
        controller.on_state_change(states.append)
        result = await controller.request(_work)
        await asyncio.sleep(0.05)
        assert controller.state is ModelState.IDLE
        return result

    assert asyncio.run(scenario()) == "done"
    assert states == [
        ModelState.LOADING,
        ModelState.READY,
        ModelState.ACTIVE,
        ModelState.COOLING,
        ModelState.UNLOADING,
        ModelState.IDLE,
    ]
    assert client.loads == ["small"]
    assert client.unloads == 1


def test_concurrent_requests_load_once() -> None:
    client = _DummyClient()

    async def scenario() -> list[str]:
        controller = ModelController(client, "small", cooldown_ms=60_000)
        results = await asyncio.gather(
            *(controller.request(lambda i=i: _work(str(i))) for i in range(3))
        )
        assert controller.state is ModelState.COOLING
        await controller.unload()
        return list(results)

    assert asyncio.run(scenario()) == ["0", "1", "2"]
    assert client.loads == ["small"]


def test_request_during_cooldown_keeps_model_loaded() -> None:
    client = _DummyClient()

    async def scenario() -> None:
        controller = ModelController(client, "small", cooldown_ms=30)
        await controller.request(_work)
        await asyncio.sleep(0.01)
        await controller.request(_work)
        assert controller.state is ModelState.COOLING
        await controller.unload()

    asyncio.run(scenario())

    assert client.loads == ["small"]
    assert client.unloads == 1


def test_failed_load_returns_to_idle() -> None:
    client = _DummyClient(fail_load=True)

    async def scenario() -> ModelController:
        controller = ModelController(client, "huge")
        with pytest.raises(RuntimeError, match="out of memory"):
            await controller.request(_work)
        return controller

    assert asyncio.run(scenario()).state is ModelState.IDLE


def test_cooldown_starts_even_when_task_fails() -> None:
    async def failing() -> None:
        raise ValueError("bad prompt")

    async def scenario() -> ModelController:
        controller = ModelController(_DummyClient(), "small", cooldown_ms=60_000)
        with pytest.raises(ValueError):
            await controller.request(failing)
        state = controller.state
        await controller.unload()
        assert state is ModelState.COOLING
        return controller

    assert asyncio.run(scenario()).state is ModelState.IDLE


def test_switch_model_unloads_and_next_request_loads_new_model() -> None:
    client = _DummyClient()

    async def scenario() -> None:
        controller = ModelController(client, "small", cooldown_ms=60_000)
        await controller.request(_work)
        await controller.switch_model("large")
        assert controller.state is ModelState.IDLE
        await controller.switch_model("large")
        await controller.request(_work)
        await controller.unload()

    asyncio.run(scenario())

    assert client.loads == ["small", "large"]
    assert client.unloads == 2


def test_unload_when_idle_is_noop_and_unsubscribe() -> None:
    client = _DummyClient()
    states: list[ModelState] = []

    async def scenario() -> None:
        controller = ModelController(client, "small")
        unsubscribe = controller.on_state_change(states.append)
        await controller.unload()
        unsubscribe()
        await controller.request(_work)
        await controller.unload()

    asyncio.run(scenario())

    assert states == []
    assert client.unloads == 1
