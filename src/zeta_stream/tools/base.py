"""Async Tool abstract base class for zeta-stream."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from zeta_stream.types import SearchMode, ToolParameter


@dataclass(frozen=True)
class SearchProfile:
    """Per-adapter limits applied when a search tool runs.

    Small-context backends get fewer, shorter results.  ``forced_type``
    overrides the user's search mode (e.g. always ``"fast"``).
    """

    max_results: int = 5
    text_chars: int = 1000
    forced_type: str | None = None
    max_visit_urls: int = 3
    visit_chars: int = 3000
    crawl_subpages: int = 5


@dataclass
class ToolContext:
    """Per-request settings handed to every tool call."""

    search_mode: SearchMode = SearchMode.AUTO
    profile: SearchProfile = field(default_factory=SearchProfile)

    @property
    def search_type(self) -> str:
        return self.profile.forced_type or self.search_mode.value


class Tool(ABC):
    """Base class for all tools.

    Subclasses must set ``name``, ``description``, ``parameters`` as class
    attributes and implement the async ``execute()`` method, which returns
    the raw result or raises.
    """

    name: str
    description: str
    parameters: list[ToolParameter]

    @abstractmethod
    async def execute(self, args: dict[str, Any], context: ToolContext) -> Any:
        """Execute the tool asynchronously."""

    def _properties(self, upper: bool) -> tuple[dict[str, Any], list[str]]:
        properties: dict[str, Any] = {}
        required: list[str] = []
        for p in self.parameters:
            prop: dict[str, Any] = {
                "type": p.type.upper() if upper else p.type,
                "description": p.description,
            }
            if p.enum:
                prop["enum"] = p.enum
            if p.items:
                prop["items"] = {"type": p.items.upper() if upper else p.items}
            properties[p.name] = prop
            if p.required:
                required.append(p.name)
        return properties, required

    def to_openai_schema(self) -> dict[str, Any]:
        """Convert to OpenAI function calling format."""
        properties, required = self._properties(upper=False)
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": properties,
                    "required": required,
                },
            },
        }

    def to_gemini_declaration(self) -> dict[str, Any]:
        """Convert to a Gemini ``functionDeclarations`` entry."""
        properties, required = self._properties(upper=True)
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "OBJECT",
                "properties": properties,
                "required": required,
            },
        }

    def to_compact_description(self) -> str:
        """One-line compact description for token-efficient prompts."""
        params = ", ".join(
            f"{p.name}: {p.type}" + ("?" if not p.required else "")
            for p in self.parameters
        )
        return f"{self.name}({params}) - {self.description}"
