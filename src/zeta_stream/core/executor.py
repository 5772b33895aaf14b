"""Executor: runs one batch of tool calls concurrently.

Every call gets its own task and its own timeout.  Outcomes are yielded
as calls finish, so a slow call never delays reporting a fast one.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator

from zeta_stream.core.abort import AbortSignal
from zeta_stream.errors import AbortError, ToolTimeoutError
from zeta_stream.tools.base import ToolContext
from zeta_stream.tools.registry import ToolRegistry
from zeta_stream.types import ToolCall

_logger = logging.getLogger(__name__)


def _reap_late(call: ToolCall, task: asyncio.Future) -> None:
    """Collect the outcome of a call that finished after its timeout."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        _logger.debug("Timed-out tool call %s (%s) later failed: %s", call.id, call.name, exc)
    else:
        _logger.debug("Timed-out tool call %s (%s) finished late", call.id, call.name)


@dataclass
class ToolOutcome:
    """Settled result of one tool call."""

    call: ToolCall
    result: Any = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class Executor:
    """Runs tool calls against the registry with all-settled semantics.

    Usage::

        executor = Executor(registry, tool_timeout=15)
        async for outcome in executor.run_batch(calls, context, abort):
            ...
    """

    def __init__(self, registry: ToolRegistry, tool_timeout: float = 15.0) -> None:
        self._registry = registry
        self.tool_timeout = tool_timeout

    async def _run_one(self, call: ToolCall, context: ToolContext) -> ToolOutcome:
        task = asyncio.ensure_future(self._registry.execute(call.name, call.args, context))
        try:
            done, _ = await asyncio.wait({task}, timeout=self.tool_timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if not done:
            # report now; the tool may take its time winding down
            task.cancel()
            task.add_done_callback(functools.partial(_reap_late, call))
            err = ToolTimeoutError(call.name, self.tool_timeout)
            _logger.warning("Tool call %s (%s): %s", call.id, call.name, err)
            return ToolOutcome(call, error=str(err))
        try:
            result = task.result()
        except Exception as e:
            _logger.warning("Tool call %s (%s) failed: %s", call.id, call.name, e)
            return ToolOutcome(call, error=str(e) or type(e).__name__)
        return ToolOutcome(call, result=result)

    async def run_batch(
        self,
        calls: list[ToolCall],
        context: ToolContext,
        abort: AbortSignal | None = None,
    ) -> AsyncIterator[ToolOutcome]:
        """Run *calls* concurrently and yield outcomes in completion order."""
        if not calls:
            return
        if abort is not None:
            abort.raise_if_aborted()

        tasks = [asyncio.ensure_future(self._run_one(c, context)) for c in calls]
        waiter = asyncio.ensure_future(abort.wait()) if abort is not None else None
        pending = set(tasks)
        try:
            while pending:
                watched = (pending | {waiter}) if waiter is not None else pending
                done, _ = await asyncio.wait(watched, return_when=asyncio.FIRST_COMPLETED)
                if waiter is not None and waiter in done:
                    raise AbortError("Request aborted")
                # keep submission order among calls that finished together
                for task in tasks:
                    if task in done:
                        pending.discard(task)
                        yield task.result()
        finally:
            if waiter is not None:
                waiter.cancel()
            for task in tasks:
                if not task.done():
                    task.cancel()
