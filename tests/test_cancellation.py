from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.utils import CancellationToken, OperationCancelledError, hash_string, run_cancellable


def test_hash_string_matches_utf16_rolling_hash() -> None:
    assert hash_string("") == "0"
    assert hash_string("a") == "61"
    assert hash_string("ab") == "c21"
    assert hash_string("hello") == "5e918d2"


def test_hash_string_is_stable_for_japanese_text() -> None:
    assert hash_string("吾輩は猫である。") == hash_string("吾輩は猫である。")
    assert hash_string("吾輩は猫である。") != hash_string("吾輩は犬である。")


def test_token_callbacks_run_once() -> None:
    token = CancellationToken()
    calls: list[str] = []
    token.add_callback(lambda: calls.append("first"))

    token.cancel()
    token.cancel()
    token.add_callback(lambda: calls.append("late"))

    assert token.cancelled
    assert calls == ["first", "late"]
    with pytest.raises(OperationCancelledError):
        token.raise_if_cancelled()


def test_run_cancellable_returns_result_without_token() -> None:
    async def work() -> int:
        return 42

    assert asyncio.run(run_cancellable(work(), None)) == 42


def test_run_cancellable_raises_when_already_cancelled() -> None:
    token = CancellationToken()
    token.cancel()

    async def work() -> int:
        return 1

    async def scenario() -> None:
        with pytest.raises(OperationCancelledError):
            await run_cancellable(work(), token)

    asyncio.run(scenario())


def test_run_cancellable_stops_waiting_when_token_fires() -> None:
    token = CancellationToken()
    finished = False

    async def slow() -> int:
        nonlocal finished
        await asyncio.sleep(10)
        finished = True
        return 1

    async def scenario() -> None:
        asyncio.get_running_loop().call_later(0.01, token.cancel)
        with pytest.raises(OperationCancelledError):
            await run_cancellable(slow(), token)

    asyncio.run(scenario())
    assert finished is False


def test_run_cancellable_cancels_work_when_caller_is_cancelled() -> None:
    token = CancellationToken()
    finished: list[bool] = []
    cancelled: list[bool] = []

    async def slow() -> int:
        try:
            await asyncio.sleep(0.3)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise
        finished.append(True)
        return 1

    async def scenario() -> None:
        outer = asyncio.ensure_future(run_cancellable(slow(), token))
        await asyncio.sleep(0.05)
        outer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await outer
        await asyncio.sleep(0.4)

    asyncio.run(scenario())
    assert cancelled == [True]
    assert finished == []
