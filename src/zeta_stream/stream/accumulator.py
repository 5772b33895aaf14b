"""Reassembly of streamed tool calls and pre-tool planning text."""

from __future__ import annotations

import enum
import logging
import uuid
from typing import Any

from zeta_stream.errors import ParseError
from zeta_stream.stream.framer import decode_object
from zeta_stream.types import PendingToolCall, StreamEvent, ToolCall

_logger = logging.getLogger(__name__)


def _new_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# ToolCallAccumulator
# ---------------------------------------------------------------------------

class ToolCallAccumulator:
    """Accumulate index-addressed tool call fragments.

    OpenAI-compatible providers send tool calls as incremental chunks:
    each chunk has an ``index``, a ``function.name`` (usually the first
    chunk only), and ``function.arguments`` fragments that are concatenated
    in arrival order.
    """

    def __init__(self) -> None:
        self._slots: dict[int, PendingToolCall] = {}

    def feed(
        self,
        index: int,
        name: str | None = None,
        arguments: str | None = None,
        call_id: str | None = None,
        **extra: Any,
    ) -> None:
        """Record one fragment for slot *index*."""
        slot = self._slots.get(index)
        if slot is None:
            slot = PendingToolCall(index=index)
            self._slots[index] = slot
        # split names arrive in pieces; some providers resend the whole name
        if name and name != slot.name:
            slot.name += name
        if arguments:
            slot.arguments += arguments
        if call_id:
            slot.call_id = call_id
        for key, value in extra.items():
            if value is not None:
                slot.extra[key] = value

    def feed_openai(self, tool_calls: list[dict[str, Any]]) -> None:
        """Process ``delta.tool_calls`` from one OpenAI-style chunk."""
        for position, tc in enumerate(tool_calls):
            func = tc.get("function") or {}
            self.feed(
                tc.get("index", position),
                name=func.get("name"),
                arguments=func.get("arguments"),
                call_id=tc.get("id"),
            )

    def has_fragments(self) -> bool:
        return bool(self._slots)

    @property
    def pending(self) -> list[PendingToolCall]:
        return [self._slots[i] for i in sorted(self._slots)]

    def finalize(self) -> list[ToolCall]:
        """Turn complete slots into ``ToolCall`` records.

        Slots missing a name or arguments are dropped.  Arguments that do
        not parse as a JSON object become ``{}``.
        """
        calls: list[ToolCall] = []
        for slot in self.pending:
            if not slot.name or not slot.arguments:
                _logger.debug("Dropping incomplete tool call slot %d", slot.index)
                continue
            calls.append(
                ToolCall(
                    id=slot.call_id or _new_call_id(),
                    name=slot.name,
                    args=parse_arguments(slot.arguments, slot.name),
                    extra=dict(slot.extra, raw_arguments=slot.arguments),
                )
            )
        return calls


def parse_arguments(raw: str, name: str = "") -> dict[str, Any]:
    """Parse tool arguments, defaulting to ``{}`` on malformed JSON."""
    try:
        return decode_object(raw)
    except ParseError as e:
        _logger.warning("Bad arguments for tool %s (%s): %.200s", name, e, raw)
        return {}


# ---------------------------------------------------------------------------
# PlanningBuffer
# ---------------------------------------------------------------------------

class PlanningPolicy(enum.Enum):
    """What happens to narration buffered before the first tool call."""

    SURFACE = "surface"  # flush as one planning event
    DISCARD = "discard"  # drop it


class PlanningBuffer:
    """Hold back answer text until it is known whether a tool call follows.

    Models often narrate ("I'll search for...") before invoking a tool.
    """

    def __init__(self, policy: PlanningPolicy) -> None:
        self.policy = policy
        self._buffer = ""
        self._released = False

    @property
    def active(self) -> bool:
        return not self._released

    def feed(self, text: str) -> list[StreamEvent]:
        if self._released:
            return [StreamEvent.text(text)] if text else []
        self._buffer += text
        return []

    def tool_call_seen(self) -> list[StreamEvent]:
        """Call on the first tool-call fragment."""
        if self._released:
            return []
        self._released = True
        buffered, self._buffer = self._buffer, ""
        if self.policy is PlanningPolicy.SURFACE and buffered.strip():
            return [StreamEvent.planning(buffered.strip())]
        if buffered.strip():
            _logger.debug("Discarding %d chars of planning text", len(buffered))
        return []

    def finish(self) -> list[StreamEvent]:
        """End of stream: unreleased text is ordinary answer text."""
        if self._released:
            return []
        self._released = True
        buffered, self._buffer = self._buffer, ""
        return [StreamEvent.text(buffered)] if buffered else []
