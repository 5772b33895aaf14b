"""Gemini ``streamGenerateContent`` adapter.

Gemini has its own message shape (``contents`` of ``parts``), sends
reasoning as parts flagged ``thought: true`` and returns whole function
calls rather than fragments.  Function calls must be echoed back with
their ``thoughtSignature`` for the next turn to be accepted.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator

from zeta_stream import prompts
from zeta_stream.compactor import CompactionPolicy
from zeta_stream.llm.adapters.base import (
    FILE_TEMPLATE,
    ModelTurn,
    ProviderAdapter,
    RequestOptions,
    filter_history,
)
from zeta_stream.stream.accumulator import ToolCallAccumulator
from zeta_stream.stream.framer import SSEFramer, aiter_deltas
from zeta_stream.stream.segmenter import NativeReasoningTracker
from zeta_stream.tools.base import SearchProfile
from zeta_stream.types import Attachment, ChatMessage, ConversationTurn, StreamEvent, ToolCall

_logger = logging.getLogger(__name__)


def _inline_image(att: Attachment) -> dict[str, Any] | None:
    """``data:<mime>;base64,<data>`` -> Gemini ``inlineData`` part."""
    header, _, data = att.url.partition(",")
    if not data:
        return None
    mime = "image/jpeg"
    if header.startswith("data:"):
        mime = header[5:].split(";", 1)[0] or mime
    return {"inlineData": {"mimeType": mime, "data": data}}


class GeminiAdapter(ProviderAdapter):
    name = "gemini"
    display_name = "Gemini"
    max_output_tokens = 8192
    temperature = 1.0
    compaction = CompactionPolicy(max_results=10, max_chars=2000, full_context=True)
    search_profile = SearchProfile(max_results=5, text_chars=3000, max_visit_urls=5, visit_chars=4000)

    def auth_headers(self, key: str) -> dict[str, str]:
        return {"x-goog-api-key": key}

    # ------------------------------------------------------------------
    # Transcript and payload
    # ------------------------------------------------------------------

    def _parts(self, text: str, attachments: list[Attachment]) -> list[dict[str, Any]]:
        parts: list[dict[str, Any]] = [{"text": text}]
        for att in attachments:
            if att.is_image and att.url:
                part = _inline_image(att)
                if part is not None:
                    parts.append(part)
            elif att.content:
                parts.append({"text": FILE_TEMPLATE.format(name=att.name, content=att.content)})
        return parts

    def build_transcript(
        self,
        prompt: str,
        history: list[ChatMessage],
        options: RequestOptions,
    ) -> ConversationTurn:
        contents: ConversationTurn = []
        for msg in filter_history(history):
            role = "user" if msg.role == "user" else "model"
            contents.append({"role": role, "parts": self._parts(msg.content, msg.attachments)})
        contents.append({"role": "user", "parts": [{"text": prompt}]})
        return contents

    def build_payload(self, transcript: ConversationTurn, options: RequestOptions) -> dict[str, Any]:
        system = prompts.system_prompt(
            tools=options.enable_tools and bool(options.tools),
            mode=options.search_mode,
            inline_reasoning=False,
            creative_only=options.creative_only,
        )
        payload: dict[str, Any] = {
            "contents": transcript,
            "systemInstruction": {"parts": [{"text": system}]},
            "generationConfig": {
                "maxOutputTokens": self.max_output_tokens,
                "temperature": self.temperature,
            },
        }
        if options.reasoning:
            payload["generationConfig"]["thinkingConfig"] = {"includeThoughts": True}
        if options.tools_active:
            payload["tools"] = [
                {"functionDeclarations": [t.to_gemini_declaration() for t in options.tools]}
            ]
            payload["toolConfig"] = {"functionCallingConfig": {"mode": "AUTO"}}
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
        payload = self.build_payload(transcript, options)
        resp = await self._open(
            f"/models/{options.model}:streamGenerateContent",
            payload,
            options,
            params={"alt": "sse"},
        )

        tracker = NativeReasoningTracker()
        accumulator = ToolCallAccumulator()
        model_parts: list[dict[str, Any]] = []
        call_index = 0

        async for data in aiter_deltas(self._iter_bytes(resp, options.abort), SSEFramer()):
            candidates = data.get("candidates") or []
            if not candidates:
                continue
            parts = (candidates[0].get("content") or {}).get("parts") or []
            for part in parts:
                text = part.get("text")
                if part.get("thought") is True:
                    if text:
                        for ev in tracker.reasoning(text):
                            yield ev
                    continue
                if "functionCall" in part:
                    fc = part["functionCall"]
                    for ev in tracker.content():
                        yield ev
                    accumulator.feed(
                        call_index,
                        name=fc.get("name"),
                        arguments=json.dumps(fc.get("args") or {}),
                        thought_signature=part.get("thoughtSignature"),
                    )
                    call_index += 1
                    continue
                if text:
                    for ev in tracker.content():
                        yield ev
                    turn.content += text
                    model_parts.append({"text": text})
                    yield StreamEvent.text(text)

        for ev in tracker.finish():
            yield ev

        turn.tool_calls = accumulator.finalize()
        turn.raw["parts"] = model_parts

    # ------------------------------------------------------------------
    # Tool round
    # ------------------------------------------------------------------

    def append_tool_request(self, transcript: ConversationTurn, turn: ModelTurn) -> None:
        parts = list(turn.raw.get("parts") or [])
        for call in turn.tool_calls:
            part: dict[str, Any] = {"functionCall": {"name": call.name, "args": call.args}}
            signature = call.extra.get("thought_signature")
            if signature:
                part["thoughtSignature"] = signature
            parts.append(part)
        transcript.append({"role": "model", "parts": parts})

    def append_tool_result(self, transcript: ConversationTurn, call: ToolCall, text: str) -> None:
        part = {"functionResponse": {"name": call.name, "response": {"result": text}}}
        last = transcript[-1] if transcript else None
        # all responses of one round share a single user turn
        if last and last.get("role") == "user" and all(
            "functionResponse" in p for p in last.get("parts", [])
        ):
            last["parts"].append(part)
        else:
            transcript.append({"role": "user", "parts": [part]})
