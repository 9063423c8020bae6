"""Cooperative cancellation for long-running asynchronous work."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class OperationCancelledError(Exception):
    """Raised when an operation observes that its token was cancelled.

    Distinct from ``asyncio.CancelledError`` so that callers can tell an
    advisory cancellation apart from task teardown.
    """


class CancellationToken:
    """Shared, one-shot cancellation flag.

    The token is created outside an event loop and only binds an
    :class:`asyncio.Event` when first awaited.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._event: asyncio.Event | None = None
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._event is not None:
            self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError("operation cancelled")

    async def wait(self) -> None:
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        await self._event.wait()


async def run_cancellable(
    operation: Awaitable[T],
    cancellation: CancellationToken | None,
) -> T:
    """Await ``operation`` unless ``cancellation`` fires first.

    Raises:
        OperationCancelledError: if the token was cancelled before or while
            the operation was running. The operation task is cancelled.
    """

    if cancellation is None:
        return await operation
    if cancellation.cancelled:
        if asyncio.iscoroutine(operation):
            operation.close()
        raise OperationCancelledError("operation cancelled")

    work = asyncio.ensure_future(operation)
    waiter = asyncio.ensure_future(cancellation.wait())
    try:
        done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        # Also reached when the awaiting task itself is cancelled
        if not work.done():
            work.cancel()
    if work in done:
        return work.result()
    raise OperationCancelledError("operation cancelled")
