"""Cooperative cancellation for in-flight requests."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, TypeVar

from zeta_stream.errors import AbortError

T = TypeVar("T")


class AbortSignal:
    """Externally settable flag checked at every suspension point.

    The caller keeps a reference and calls ``abort()`` (for example from a
    Ctrl-C handler); the engine raises ``AbortError`` at the next await.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    def abort(self) -> None:
        self._event.set()

    def raise_if_aborted(self) -> None:
        if self._event.is_set():
            raise AbortError("Request aborted")

    async def wait(self) -> None:
        await self._event.wait()

    async def sleep(self, delay: float) -> None:
        """``asyncio.sleep`` that wakes up early and raises on abort."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        raise AbortError("Request aborted")


async def race(awaitable, signal: AbortSignal | None):
    """Await *awaitable* unless *signal* fires first."""
    if signal is None:
        return await awaitable
    signal.raise_if_aborted()
    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
    if task.done():
        return task.result()
    task.cancel()
    try:
        await task
    except (asyncio.CancelledError, Exception):
        pass
    raise AbortError("Request aborted")


async def guarded(source: AsyncIterator[T], signal: AbortSignal | None) -> AsyncIterator[T]:
    """Re-yield *source*, racing every ``__anext__`` against *signal*."""
    iterator = source.__aiter__()
    while True:
        try:
            item = await race(iterator.__anext__(), signal)
        except StopAsyncIteration:
            return
        yield item
