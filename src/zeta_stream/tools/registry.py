"""Tool registry with plugin discovery for zeta-stream."""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import Any

from zeta_stream.errors import UnknownToolError
from zeta_stream.tools.base import Tool, ToolContext

_logger = logging.getLogger(__name__)

CREATIVE_WRITING = "creative_writing"
PLUGIN_GROUP = "zeta_stream.tools"


def _as_tool(obj: Any) -> Tool | None:
    if isinstance(obj, Tool):
        return obj
    if callable(obj):
        made = obj()
        return made if isinstance(made, Tool) else None
    return None


class ToolRegistry:
    """Registry of available tools with async execution and plugin discovery."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool instance."""
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        """Look up a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> list[Tool]:
        """Return all registered tools."""
        return list(self._tools.values())

    def tool_names(self) -> list[str]:
        """Return list of registered tool names."""
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    async def execute(
        self,
        name: str,
        args: dict[str, Any],
        context: ToolContext | None = None,
    ) -> Any:
        """Execute a tool by name and return its raw result.

        Raises ``UnknownToolError`` for unregistered names; any exception
        the tool raises propagates to the caller.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name, self.tool_names())
        return await tool.execute(args, context or ToolContext())

    def select(self, creative_only: bool = False) -> list[Tool]:
        """Tools to offer the model for one request."""
        if creative_only:
            return [t for t in self._tools.values() if t.name == CREATIVE_WRITING]
        return self.list_tools()

    def discover(self, group: str = PLUGIN_GROUP) -> list[str]:
        """Register tools published under the *group* entry point.

        An entry point may name a ``Tool`` subclass, a ``Tool`` instance or
        a factory returning one.  Plugins that fail to load are logged and
        skipped.  Returns the names of the tools that were added.
        """
        added: list[str] = []
        for ep in entry_points(group=group):
            try:
                tool = _as_tool(ep.load())
            except Exception:
                _logger.exception("Failed to load tool plugin %s", ep.name)
                continue
            if tool is None:
                _logger.warning("Tool plugin %s did not provide a Tool", ep.name)
                continue
            self.register(tool)
            added.append(tool.name)
        if added:
            _logger.info("Loaded plugin tools: %s", ", ".join(added))
        return added
