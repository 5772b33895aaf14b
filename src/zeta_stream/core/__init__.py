"""Core request components for zeta-stream."""

from zeta_stream.core.abort import AbortSignal, guarded
from zeta_stream.core.executor import Executor, ToolOutcome
from zeta_stream.core.orchestrator import Orchestrator

__all__ = [
    "AbortSignal",
    "Executor",
    "Orchestrator",
    "ToolOutcome",
    "guarded",
]
