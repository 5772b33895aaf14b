"""Tool system for zeta-stream."""

from zeta_stream.tools.base import SearchProfile, Tool, ToolContext
from zeta_stream.tools.registry import ToolRegistry

__all__ = ["SearchProfile", "Tool", "ToolContext", "ToolRegistry"]
