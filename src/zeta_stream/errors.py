"""Error taxonomy for zeta-stream.

Parsing faults are recovered where they happen, per-tool faults are
recovered by the orchestrator, and only transport exhaustion or
unexpected failures reach the caller.  ``AbortError`` sits outside the
``ZetaError`` hierarchy so callers that show a fallback message for
``ZetaError`` never show one for a user cancellation.
"""

from __future__ import annotations

import re

# Words in an error body that mark throttling even without a 429.
_RATE_LIMIT_RE = re.compile(r"\brate[\s_-]?limit|\brate\b|\bquota")


class ZetaError(Exception):
    """Base class for every user-visible engine failure."""


class ConfigError(ZetaError):
    """Invalid or incomplete configuration."""


class TransportError(ZetaError):
    """Non-retryable HTTP failure."""

    def __init__(self, message: str, status: int = 0, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class RateLimitError(TransportError):
    """Throttling response; retried with the next credential."""


class NetworkError(ZetaError):
    """Transient connection-level failure; retried with backoff."""


class ExhaustedRetriesError(ZetaError):
    """Every credential and backoff attempt failed."""


class ParseError(ZetaError):
    """Malformed JSON in a stream line or tool arguments."""


class UnknownToolError(ZetaError):
    """The model asked for a tool that is not registered."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        msg = f"Unknown tool: {name}"
        if available:
            msg += f". Available: {', '.join(available)}"
        super().__init__(msg)
        self.name = name


class ToolTimeoutError(ZetaError, TimeoutError):
    """One tool call exceeded its time budget."""

    def __init__(self, name: str, timeout: float) -> None:
        super().__init__(f"{name} timed out after {timeout:g}s")
        self.name = name
        self.timeout = timeout


class AbortError(Exception):
    """Cooperative cancellation.  Never shown to the user."""


def classify_http_error(status: int, body: str, provider: str = "") -> TransportError:
    """Map a non-success HTTP response to ``RateLimitError`` or ``TransportError``."""
    prefix = f"{provider} API error" if provider else "API error"
    message = f"{prefix}: {status} - {body[:500]}"
    if status == 429 or _RATE_LIMIT_RE.search(body.lower()):
        return RateLimitError(message, status=status, body=body)
    return TransportError(message, status=status, body=body)
