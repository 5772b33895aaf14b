"""Adapter for OpenAI-compatible ``/chat/completions`` SSE backends."""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Iterable

from zeta_stream import prompts
from zeta_stream.llm.adapters.base import (
    FILE_TEMPLATE,
    ModelTurn,
    ProviderAdapter,
    RequestOptions,
    assistant_role,
    filter_history,
)
from zeta_stream.stream.accumulator import PlanningBuffer, ToolCallAccumulator
from zeta_stream.stream.framer import SSEFramer, aiter_deltas
from zeta_stream.stream.segmenter import NativeReasoningTracker, ThinkingSegmenter
from zeta_stream.types import (
    Attachment,
    ChatMessage,
    ConversationTurn,
    EventType,
    SearchMode,
    StreamEvent,
    ToolCall,
)

_logger = logging.getLogger(__name__)

IMAGE_NOTE = "\n\n[Image attached: {name} - Note: This model cannot view images directly]"


class OpenAICompatAdapter(ProviderAdapter):
    """Shared streaming pipeline for every OpenAI-style backend.

    Subclasses only choose field names and flags::

        framer -> (native reasoning | tag segmenter) -> planning buffer -> events
                \\-> tool-call accumulator -> ModelTurn.tool_calls
    """

    chat_path = "/chat/completions"
    image_support = True
    max_tokens_field = "max_tokens"
    max_tokens = 4096
    temperature = 0.7
    forced_search_mode: SearchMode | None = None

    # ------------------------------------------------------------------
    # Reasoning toggles
    # ------------------------------------------------------------------

    def reasoning_fields(self, options: RequestOptions) -> tuple[str, ...]:
        """Delta fields carrying native reasoning for this request."""
        return ()

    def inline_reasoning(self, options: RequestOptions) -> bool:
        """Whether the model is asked to wrap reasoning in tags."""
        return options.reasoning

    def reasoning_params(self, options: RequestOptions) -> dict[str, Any]:
        return {}

    # ------------------------------------------------------------------
    # Transcript and payload
    # ------------------------------------------------------------------

    def format_content(self, text: str, attachments: Iterable[Attachment]) -> Any:
        images = []
        for att in attachments:
            if att.is_image and att.url:
                if self.image_support:
                    images.append({"type": "image_url", "image_url": {"url": att.url}})
                else:
                    text += IMAGE_NOTE.format(name=att.name)
            elif att.content:
                text += FILE_TEMPLATE.format(name=att.name, content=att.content)
        if images:
            return [{"type": "text", "text": text}, *images]
        return text

    def build_transcript(
        self,
        prompt: str,
        history: list[ChatMessage],
        options: RequestOptions,
    ) -> ConversationTurn:
        system = prompts.system_prompt(
            tools=options.enable_tools and bool(options.tools),
            mode=self.forced_search_mode or options.search_mode,
            inline_reasoning=self.inline_reasoning(options),
            creative_only=options.creative_only,
        )
        messages: ConversationTurn = [{"role": "system", "content": system}]
        for msg in filter_history(history):
            messages.append({
                "role": assistant_role(msg.role),
                "content": self.format_content(msg.content, msg.attachments),
            })
        messages.append({"role": "user", "content": prompt})
        return messages

    def build_payload(self, transcript: ConversationTurn, options: RequestOptions) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": options.model,
            "messages": transcript,
            "stream": True,
            self.max_tokens_field: self.max_tokens,
            "temperature": self.temperature,
        }
        if options.tools_active and self.supports_tools:
            payload["tools"] = [t.to_openai_schema() for t in options.tools]
            payload["tool_choice"] = "auto"
        payload.update(self.reasoning_params(options))
        return payload

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    async def stream_turn(
        self,
        transcript: ConversationTurn,
        options: RequestOptions,
        turn: ModelTurn,
    ) -> AsyncIterator[StreamEvent]:
        done_sent = False
        async for event in self._turn_events(transcript, options, turn):
            if event.type is EventType.THINKING_DONE:
                if done_sent:
                    continue
                done_sent = True
            yield event

    async def _turn_events(
        self,
        transcript: ConversationTurn,
        options: RequestOptions,
        turn: ModelTurn,
    ) -> AsyncIterator[StreamEvent]:
        payload = self.build_payload(transcript, options)
        resp = await self._open(self.chat_path, payload, options)

        framer = SSEFramer()
        fields = self.reasoning_fields(options)
        tracker = NativeReasoningTracker()
        segmenter = ThinkingSegmenter() if self.inline_reasoning(options) else None
        planning = (
            PlanningBuffer(self.planning_policy)
            if self.planning_policy is not None and options.tools_active
            else None
        )
        accumulator = ToolCallAccumulator()

        def route(events: list[StreamEvent]) -> list[StreamEvent]:
            if planning is None:
                return events
            routed: list[StreamEvent] = []
            for ev in events:
                if ev.type is EventType.TEXT:
                    routed.extend(planning.feed(ev.content))
                else:
                    routed.append(ev)
            return routed

        async for data in aiter_deltas(self._iter_bytes(resp, options.abort), framer):
            choices = data.get("choices") or []
            if not choices:
                continue
            delta = choices[0].get("delta") or {}

            for name in fields:
                reasoning = delta.get(name)
                if reasoning:
                    for ev in tracker.reasoning(reasoning):
                        yield ev
                    break

            tool_fragments = delta.get("tool_calls")
            if tool_fragments:
                for ev in tracker.content():
                    yield ev
                if segmenter is not None:
                    for ev in route(segmenter.drain()):
                        yield ev
                if planning is not None:
                    for ev in planning.tool_call_seen():
                        yield ev
                accumulator.feed_openai(tool_fragments)

            content = delta.get("content")
            if content:
                turn.content += content
                for ev in tracker.content():
                    yield ev
                events = segmenter.feed(content) if segmenter else [StreamEvent.text(content)]
                for ev in route(events):
                    yield ev

        if framer.skipped:
            _logger.debug("%s: skipped %d malformed line(s)", self.display_name, framer.skipped)
        if segmenter is not None:
            for ev in route(segmenter.finish()):
                yield ev
        for ev in tracker.finish():
            yield ev
        if planning is not None:
            for ev in planning.finish():
                yield ev

        turn.tool_calls = accumulator.finalize()
        if turn.tool_calls:
            _logger.debug(
                "%s requested tools: %s",
                self.display_name, ", ".join(c.name for c in turn.tool_calls),
            )

    # ------------------------------------------------------------------
    # Tool round
    # ------------------------------------------------------------------

    def append_tool_request(self, transcript: ConversationTurn, turn: ModelTurn) -> None:
        transcript.append({
            "role": "assistant",
            "content": turn.content or None,
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {
                        "name": call.name,
                        "arguments": call.extra.get("raw_arguments") or json.dumps(call.args),
                    },
                }
                for call in turn.tool_calls
            ],
        })

    def append_tool_result(self, transcript: ConversationTurn, call: ToolCall, text: str) -> None:
        transcript.append({
            "role": "tool",
            "tool_call_id": call.id,
            "name": call.name,
            "content": text,
        })
