"""Orchestrator: the bounded tool-calling loop.

    adapter.stream_turn -> tool calls? -> executor -> transcript -> loop

The Orchestrator owns no provider logic itself; it asks the adapter to
stream a turn, runs whatever tools the turn requested and writes the
results back through the adapter before asking for the next turn.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

from zeta_stream.compactor import compact_error, compact_result
from zeta_stream.core.executor import Executor
from zeta_stream.llm.adapters.base import ModelTurn, ProviderAdapter, RequestOptions
from zeta_stream.tools.base import ToolContext
from zeta_stream.tools.registry import ToolRegistry
from zeta_stream.types import ConversationTurn, EventType, StreamEvent, ToolCallStatus

_logger = logging.getLogger(__name__)

TURN_SEPARATOR = "\n\n"


class Orchestrator:
    """Async main loop for one chat request.

    Parameters
    ----------
    registry:
        Tool registry with all available tools.
    max_iterations:
        Maximum model calls per request before the loop is cut off.
    tool_timeout:
        Per-call time budget in seconds.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        max_iterations: int = 10,
        tool_timeout: float = 15.0,
    ) -> None:
        self._registry = registry
        self._executor = Executor(registry, tool_timeout)
        self.max_iterations = max_iterations

    async def run(
        self,
        adapter: ProviderAdapter,
        transcript: ConversationTurn,
        options: RequestOptions,
    ) -> AsyncIterator[StreamEvent]:
        """Drive *adapter* until the model stops calling tools.

        Yields the canonical event sequence, always ending in ``done``
        unless an error or abort propagates.
        """
        context = ToolContext(search_mode=options.search_mode, profile=adapter.search_profile)
        thinking_done_sent = False

        for iteration in range(1, self.max_iterations + 1):
            turn = ModelTurn()
            text_shown = False
            async for event in adapter.stream_turn(transcript, options, turn):
                if event.type is EventType.THINKING_DONE:
                    if thinking_done_sent:
                        continue
                    thinking_done_sent = True
                elif event.type is EventType.TEXT and event.content.strip():
                    text_shown = True
                yield event

            if not turn.tool_calls:
                yield StreamEvent.done()
                return

            adapter.append_tool_request(transcript, turn)
            for call in turn.tool_calls:
                yield StreamEvent.tool_call_start(call)
            for call in turn.tool_calls:
                call.advance(ToolCallStatus.RUNNING)
                yield StreamEvent.tool_call_update(call.id, ToolCallStatus.RUNNING)

            _logger.info(
                "%s round %d: running %d tool call(s)",
                adapter.display_name, iteration, len(turn.tool_calls),
            )
            async for outcome in self._executor.run_batch(turn.tool_calls, context, options.abort):
                call = outcome.call
                if outcome.success:
                    call.advance(ToolCallStatus.COMPLETED, result=outcome.result)
                    yield StreamEvent.tool_call_update(
                        call.id, ToolCallStatus.COMPLETED, result=outcome.result,
                    )
                    text = compact_result(call.name, outcome.result, adapter.compaction)
                else:
                    call.advance(ToolCallStatus.ERROR, error=outcome.error)
                    yield StreamEvent.tool_call_update(
                        call.id, ToolCallStatus.ERROR, error=outcome.error,
                    )
                    text = compact_error(outcome.error or "Unknown error")
                adapter.append_tool_result(transcript, call, text)

            if text_shown:
                yield StreamEvent.text(TURN_SEPARATOR)

        _logger.warning(
            "Reached maximum iterations (%d), stopping tool loop", self.max_iterations,
        )
        yield StreamEvent.done()
