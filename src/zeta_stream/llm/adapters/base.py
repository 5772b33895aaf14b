"""Provider adapter interface.

An adapter owns everything that differs between backends: the transcript
format, the request body, the response field names and how a tool round
is written back into the transcript.  The shared streaming components
and the orchestrator loop stay backend-agnostic.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

import httpx

from zeta_stream.compactor import CompactionPolicy
from zeta_stream.config import ProviderSpec
from zeta_stream.core.abort import AbortSignal, guarded, race
from zeta_stream.errors import NetworkError, TransportError, classify_http_error
from zeta_stream.llm.retry import NETWORK_ERRORS, KeyRotator, RetryPolicy
from zeta_stream.stream.accumulator import PlanningPolicy
from zeta_stream.tools.base import SearchProfile, Tool
from zeta_stream.types import (
    ChatMessage,
    ConversationTurn,
    SearchMode,
    StreamEvent,
    ToolCall,
)

_logger = logging.getLogger(__name__)

FILE_TEMPLATE = "\n\n[Attached File: {name}]\n{content}\n[End of File]"


@dataclass
class RequestOptions:
    """Per-request settings threaded through one ``stream_chat`` call."""

    model: str
    enable_tools: bool = False
    search_mode: SearchMode = SearchMode.AUTO
    reasoning: bool = False
    creative_only: bool = False
    tools: list[Tool] = field(default_factory=list)
    abort: AbortSignal | None = None

    @property
    def tools_active(self) -> bool:
        return (self.enable_tools or self.creative_only) and bool(self.tools)


@dataclass
class ModelTurn:
    """What one model response left behind once its stream is drained."""

    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)


class ProviderAdapter(ABC):
    """Base class for one hosted backend.

    Subclasses set the class attributes and implement the abstract
    methods.  ``_open()`` issues a request through the key rotator and
    retry policy and returns an open response.
    """

    name: str = ""
    display_name: str = ""
    compaction: CompactionPolicy = CompactionPolicy()
    search_profile: SearchProfile = SearchProfile()
    planning_policy: PlanningPolicy | None = None
    supports_tools: bool = True

    def __init__(
        self,
        spec: ProviderSpec,
        retry: RetryPolicy | None = None,
        timeout: float = 120,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.spec = spec
        self.rotator = KeyRotator(spec.api_keys, self.display_name or spec.name)
        self.retry = retry or RetryPolicy()
        self._client = httpx.AsyncClient(
            base_url=spec.base_url,
            headers={"Content-Type": "application/json", **spec.extra_headers},
            timeout=httpx.Timeout(timeout, connect=30, read=60),
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Capability interface
    # ------------------------------------------------------------------

    @abstractmethod
    def build_transcript(
        self,
        prompt: str,
        history: list[ChatMessage],
        options: RequestOptions,
    ) -> ConversationTurn:
        """Provider-native message list for a new request."""

    @abstractmethod
    def build_payload(self, transcript: ConversationTurn, options: RequestOptions) -> dict[str, Any]:
        """JSON body for one model call."""

    @abstractmethod
    def stream_turn(
        self,
        transcript: ConversationTurn,
        options: RequestOptions,
        turn: ModelTurn,
    ) -> AsyncIterator[StreamEvent]:
        """Stream one model response, filling *turn* as a side effect."""

    def append_tool_request(self, transcript: ConversationTurn, turn: ModelTurn) -> None:
        raise NotImplementedError(f"{self.name} does not run client-side tools")

    def append_tool_result(self, transcript: ConversationTurn, call: ToolCall, text: str) -> None:
        raise NotImplementedError(f"{self.name} does not run client-side tools")

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    def auth_headers(self, key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {key}"}

    async def _open(
        self,
        path: str,
        payload: dict[str, Any],
        options: RequestOptions,
        *,
        stream: bool = True,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request with key rotation and retries.

        Only opening the response is retried; the caller owns the
        returned response and must close it.
        """

        async def attempt(key: str) -> httpx.Response:
            request = self._client.build_request(
                "POST", path, json=payload, params=params,
                headers=self.auth_headers(key),
            )
            try:
                resp = await race(self._client.send(request, stream=stream), options.abort)
            except NETWORK_ERRORS as e:
                raise NetworkError(f"{self.display_name} request failed: {e}") from e
            if not resp.is_success:
                body = (await resp.aread()).decode("utf-8", errors="replace")
                await resp.aclose()
                raise classify_http_error(resp.status_code, body, self.display_name)
            return resp

        _logger.debug(
            "%s request model=%s messages=%d",
            self.display_name, payload.get("model", options.model),
            len(payload.get("messages") or payload.get("contents") or []),
        )
        return await self.retry.run(self.rotator, attempt, options.abort)

    async def _iter_bytes(
        self,
        resp: httpx.Response,
        abort: AbortSignal | None,
    ) -> AsyncIterator[bytes]:
        """Body chunks of an open streaming response, abort-aware."""
        try:
            async for chunk in guarded(resp.aiter_bytes(), abort):
                yield chunk
        except NETWORK_ERRORS as e:
            raise TransportError(f"{self.display_name} stream interrupted: {e}") from e
        finally:
            await resp.aclose()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()


# ---------------------------------------------------------------------------
# Shared transcript helpers
# ---------------------------------------------------------------------------

def filter_history(history: list[ChatMessage]) -> list[ChatMessage]:
    """Keep non-empty user and assistant messages only."""
    return [
        m for m in history
        if m.content and m.role in ("user", "model", "assistant")
    ]


def assistant_role(role: str) -> str:
    return "assistant" if role == "model" else role
