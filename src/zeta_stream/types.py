"""Shared data types for zeta-stream."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Request options
# ---------------------------------------------------------------------------

class SearchMode(enum.Enum):
    """Search depth requested by the user for search tools."""

    AUTO = "auto"
    FAST = "fast"
    DEEP = "deep"


# ---------------------------------------------------------------------------
# Conversation types
# ---------------------------------------------------------------------------

@dataclass
class Attachment:
    """A file or image attached to a chat message.

    Images carry a ``data:`` URL in ``url``; documents carry their
    already-extracted text in ``content``.
    """

    type: str  # "image" | "file"
    name: str
    url: str = ""
    content: str = ""

    @property
    def is_image(self) -> bool:
        return self.type == "image"


@dataclass
class ChatMessage:
    """One message of the UI-level history."""

    role: str  # "user" | "model" | "assistant" | "system"
    content: str
    attachments: list[Attachment] = field(default_factory=list)


# Provider-native transcript, owned by exactly one in-flight request.
ConversationTurn = list[dict[str, Any]]


# ---------------------------------------------------------------------------
# Tool types
# ---------------------------------------------------------------------------

@dataclass
class ToolParameter:
    """Definition of a tool parameter."""

    name: str
    type: str  # string, integer, boolean, array, object
    description: str
    required: bool = True
    enum: list[str] | None = None
    items: str | None = None  # element type for arrays


class ToolCallStatus(enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def order(self) -> int:
        return _STATUS_ORDER[self]

    @property
    def is_terminal(self) -> bool:
        return self in (ToolCallStatus.COMPLETED, ToolCallStatus.ERROR)


_STATUS_ORDER = {
    ToolCallStatus.PENDING: 0,
    ToolCallStatus.RUNNING: 1,
    ToolCallStatus.COMPLETED: 2,
    ToolCallStatus.ERROR: 2,
}


@dataclass
class ToolCall:
    """A concrete tool invocation requested by the model."""

    id: str
    name: str
    args: dict[str, Any]
    status: ToolCallStatus = ToolCallStatus.PENDING
    result: Any = None
    error: str | None = None
    started_at: float = field(default_factory=time.time)
    completed_at: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def advance(
        self,
        status: ToolCallStatus,
        result: Any = None,
        error: str | None = None,
    ) -> None:
        """Move to *status*.  Transitions only ever go forward."""
        if self.status.is_terminal or status.order <= self.status.order:
            raise ValueError(
                f"Illegal tool call transition {self.status.value} -> {status.value}"
            )
        self.status = status
        if status.is_terminal:
            self.result = result
            self.error = error
            self.completed_at = time.time()


@dataclass
class PendingToolCall:
    """Partially streamed tool call, keyed by the provider's slot index."""

    index: int
    name: str = ""
    arguments: str = ""
    call_id: str = ""
    extra: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Stream events
# ---------------------------------------------------------------------------

class EventType(enum.Enum):
    """Canonical event kinds emitted to the caller."""

    TEXT = "text"
    THINKING = "thinking"
    THINKING_DONE = "thinking_done"
    PLANNING = "planning"
    TOOL_CALL_START = "tool_call_start"
    TOOL_CALL_UPDATE = "tool_call_update"
    DONE = "done"


@dataclass
class StreamEvent:
    """A single element of the canonical output sequence."""

    type: EventType
    content: str = ""
    tool_call: ToolCall | None = None
    id: str = ""
    status: ToolCallStatus | None = None
    result: Any = None
    error: str | None = None

    @classmethod
    def text(cls, content: str) -> StreamEvent:
        return cls(EventType.TEXT, content=content)

    @classmethod
    def thinking(cls, content: str) -> StreamEvent:
        return cls(EventType.THINKING, content=content)

    @classmethod
    def thinking_done(cls) -> StreamEvent:
        return cls(EventType.THINKING_DONE)

    @classmethod
    def planning(cls, content: str) -> StreamEvent:
        return cls(EventType.PLANNING, content=content)

    @classmethod
    def tool_call_start(cls, call: ToolCall) -> StreamEvent:
        return cls(EventType.TOOL_CALL_START, tool_call=call, id=call.id,
                   status=call.status)

    @classmethod
    def tool_call_update(
        cls,
        call_id: str,
        status: ToolCallStatus,
        result: Any = None,
        error: str | None = None,
    ) -> StreamEvent:
        return cls(EventType.TOOL_CALL_UPDATE, id=call_id, status=status,
                   result=result, error=error)

    @classmethod
    def done(cls) -> StreamEvent:
        return cls(EventType.DONE)
