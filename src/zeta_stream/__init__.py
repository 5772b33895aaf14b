"""zeta-stream: streaming chat over hosted LLM backends with tool calling."""

from zeta_stream.config import ZetaConfig, load_config
from zeta_stream.core.abort import AbortSignal
from zeta_stream.core.engine import ChatEngine
from zeta_stream.types import (
    Attachment,
    ChatMessage,
    EventType,
    SearchMode,
    StreamEvent,
    ToolCall,
    ToolCallStatus,
)

__version__ = "0.3.0"

__all__ = [
    "AbortSignal",
    "Attachment",
    "ChatEngine",
    "ChatMessage",
    "EventType",
    "SearchMode",
    "StreamEvent",
    "ToolCall",
    "ToolCallStatus",
    "ZetaConfig",
    "load_config",
]
