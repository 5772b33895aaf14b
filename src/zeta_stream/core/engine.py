"""Caller-facing entry point."""

from __future__ import annotations

import logging
from typing import AsyncIterator

import httpx

from zeta_stream.config import ZetaConfig
from zeta_stream.core.abort import AbortSignal
from zeta_stream.core.orchestrator import Orchestrator
from zeta_stream.llm.adapters.base import RequestOptions
from zeta_stream.llm.router import ModelRouter
from zeta_stream.tools.exa import ExaClient
from zeta_stream.tools.registry import ToolRegistry
from zeta_stream.tools.search import build_registry
from zeta_stream.types import ChatMessage, SearchMode, StreamEvent

_logger = logging.getLogger(__name__)


class ChatEngine:
    """Streams one chat reply, running tools along the way.

    Usage::

        engine = ChatEngine(load_config())
        async for event in engine.stream_chat("hi", [], "gemini-3-flash-preview"):
            ...
        await engine.close()
    """

    def __init__(
        self,
        config: ZetaConfig,
        registry: ToolRegistry | None = None,
        router: ModelRouter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._exa: ExaClient | None = None
        if registry is None:
            if config.tools.exa_api_key:
                self._exa = ExaClient(config.tools.exa_api_key, config.tools.exa_base_url)
            registry = build_registry(self._exa)
            registry.discover()
        self.registry = registry
        self.router = router or ModelRouter(config, transport=transport)
        self._orchestrator = Orchestrator(
            registry,
            max_iterations=config.engine.max_iterations,
            tool_timeout=config.engine.tool_timeout,
        )

    async def stream_chat(
        self,
        prompt: str,
        history: list[ChatMessage] | None = None,
        model_id: str | None = None,
        *,
        enable_tools: bool = False,
        search_mode: SearchMode | str = SearchMode.AUTO,
        reasoning_enabled: bool = False,
        creative_writing_only: bool = False,
        abort_signal: AbortSignal | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Yield the canonical event sequence for one user message."""
        model_id = model_id or self.config.default_model
        adapter = self.router.get_adapter(model_id)
        mode = SearchMode(search_mode) if isinstance(search_mode, str) else search_mode

        tools = []
        if adapter.supports_tools and (enable_tools or creative_writing_only):
            tools = self.registry.select(creative_only=creative_writing_only)

        options = RequestOptions(
            model=model_id,
            enable_tools=enable_tools,
            search_mode=mode,
            reasoning=reasoning_enabled,
            creative_only=creative_writing_only,
            tools=tools,
            abort=abort_signal,
        )
        _logger.debug(
            "stream_chat model=%s adapter=%s tools=%d mode=%s reasoning=%s",
            model_id, adapter.name, len(tools), mode.value, reasoning_enabled,
        )
        transcript = adapter.build_transcript(prompt, history or [], options)
        async for event in self._orchestrator.run(adapter, transcript, options):
            yield event

    async def close(self) -> None:
        await self.router.close()
        if self._exa is not None:
            await self._exa.close()
