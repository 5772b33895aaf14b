"""Incremental parsing of provider streams."""

from zeta_stream.stream.accumulator import PlanningBuffer, PlanningPolicy, ToolCallAccumulator
from zeta_stream.stream.framer import SSEFramer, aiter_deltas, synthetic_stream
from zeta_stream.stream.segmenter import NativeReasoningTracker, ThinkingSegmenter

__all__ = [
    "NativeReasoningTracker",
    "PlanningBuffer",
    "PlanningPolicy",
    "SSEFramer",
    "ThinkingSegmenter",
    "ToolCallAccumulator",
    "aiter_deltas",
    "synthetic_stream",
]
