"""Groq Compound: server-side tools, single non-streaming response.

The response carries the answer plus an ``executed_tools`` list.  Sources
are scraped out of each tool's free-text output, reported as one
synthetic tool call, and the answer is re-chunked so it streams like the
other backends.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, AsyncIterator

from zeta_stream import prompts
from zeta_stream.llm.adapters.base import ModelTurn, RequestOptions
from zeta_stream.llm.adapters.openai_compat import OpenAICompatAdapter
from zeta_stream.stream.framer import synthetic_stream
from zeta_stream.types import (
    ChatMessage,
    ConversationTurn,
    StreamEvent,
    ToolCall,
    ToolCallStatus,
)

_logger = logging.getLogger(__name__)

FULL_TOOLS = ["web_search", "code_interpreter", "visit_website", "browser_automation", "wolfram_alpha"]
MINI_TOOLS = ["web_search", "code_interpreter", "visit_website"]

_URL_RE = re.compile(r"URL:\s*(https?://\S+)", re.IGNORECASE)
_TITLE_RE = re.compile(r"Title:\s*([^\n]+)", re.IGNORECASE)

_CITE_TITLE_URL = re.compile(r"【([^】]+?),\s*URL:\s*(https?://[^\s】]+)】", re.IGNORECASE)
_CITE_THEN_LINK = re.compile(r"【([^】]+)】\((https?://[^\s)]+)\)", re.IGNORECASE)
_CITE_BARE = re.compile(r"【([^】]+)】")
_TITLE_PREFIX = re.compile(r"^Title:\s*", re.IGNORECASE)


def is_full_compound(model: str) -> bool:
    return model == "groq/compound"


def extract_sources(executed_tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Collect ``{title, url, text}`` records from ``executed_tools``."""
    sources: list[dict[str, Any]] = []
    for tool in executed_tools:
        output = tool.get("output")
        if isinstance(output, str) and output:
            urls = _URL_RE.findall(output)
            titles = _TITLE_RE.findall(output)
            for i, url in enumerate(urls):
                title = titles[i].strip() if i < len(titles) else "Source"
                sources.append({"title": title or "Source", "url": url.strip(), "text": ""})
        structured = (tool.get("search_results") or {}).get("results") or []
        for r in structured:
            sources.append({
                "title": r.get("title") or "Untitled",
                "url": r.get("url", ""),
                "text": r.get("content") or "",
                "score": r.get("score"),
            })
    return sources


def rewrite_citations(text: str) -> str:
    """Turn 【Title, URL: url】, 【Title】(url) and 【Title】 into markdown."""
    text = _CITE_TITLE_URL.sub(
        lambda m: f"[{_TITLE_PREFIX.sub('', m.group(1))}]({m.group(2)})", text
    )
    text = _CITE_THEN_LINK.sub(r"[\1](\2)", text)
    return _CITE_BARE.sub(r"[\1]", text)


class GroqCompoundAdapter(OpenAICompatAdapter):
    name = "compound"
    display_name = "Groq Compound"
    image_support = False
    supports_tools = False
    max_tokens_field = "max_completion_tokens"
    max_tokens = 8192
    temperature = 0.6
    chunk_size = 20
    chunk_delay = 0.005

    def inline_reasoning(self, options: RequestOptions) -> bool:
        return False

    def build_transcript(
        self,
        prompt: str,
        history: list[ChatMessage],
        options: RequestOptions,
    ) -> ConversationTurn:
        messages = super().build_transcript(prompt, history, options)
        messages[0]["content"] = (
            prompts.compound_prompt() if options.enable_tools else prompts.default_prompt()
        )
        return messages

    def build_payload(self, transcript: ConversationTurn, options: RequestOptions) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": options.model,
            "messages": transcript,
            "stream": False,
            self.max_tokens_field: self.max_tokens,
            "temperature": self.temperature,
        }
        if options.enable_tools:
            enabled = FULL_TOOLS if is_full_compound(options.model) else MINI_TOOLS
            payload["compound_custom"] = {"tools": {"enabled_tools": list(enabled)}}
        return payload

    async def stream_turn(
        self,
        transcript: ConversationTurn,
        options: RequestOptions,
        turn: ModelTurn,
    ) -> AsyncIterator[StreamEvent]:
        payload = self.build_payload(transcript, options)
        resp = await self._open(self.chat_path, payload, options, stream=False)
        data = resp.json()
        choices = data.get("choices") or []
        message = choices[0].get("message") if choices else None
        if not message:
            _logger.warning("%s returned no message", self.display_name)
            return

        executed = message.get("executed_tools") or []
        sources = extract_sources(executed)
        if executed:
            _logger.info(
                "%s executed %d tool(s), %d source(s)",
                self.display_name, len(executed), len(sources),
            )

        if options.enable_tools and sources:
            prompt = _last_user_text(transcript)
            call = ToolCall(
                id=f"compound_search_{int(time.time() * 1000)}",
                name="compound_tools" if is_full_compound(options.model) else "web_search",
                args={"query": prompt[:100]},
            )
            yield StreamEvent.tool_call_start(call)
            result = {"results": sources}
            call.advance(ToolCallStatus.COMPLETED, result=result)
            yield StreamEvent.tool_call_update(call.id, ToolCallStatus.COMPLETED, result=result)

        content = rewrite_citations(message.get("content") or "")
        turn.content = content
        async for piece in synthetic_stream(content, self.chunk_size, self.chunk_delay):
            if options.abort is not None:
                options.abort.raise_if_aborted()
            yield StreamEvent.text(piece)


def _last_user_text(transcript: ConversationTurn) -> str:
    for msg in reversed(transcript):
        if msg.get("role") == "user" and isinstance(msg.get("content"), str):
            return msg["content"]
    return ""
