"""Provider adapters, routing and retries for zeta-stream."""

from zeta_stream.llm.retry import KeyRotator, RetryPolicy
from zeta_stream.llm.router import ModelRouter

__all__ = ["KeyRotator", "ModelRouter", "RetryPolicy"]
