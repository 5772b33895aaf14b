"""Search tools backed by Exa, plus the local creative_writing tool."""

from __future__ import annotations

import logging
import re
from typing import Any

from zeta_stream.tools.base import Tool, ToolContext
from zeta_stream.tools.exa import ExaClient
from zeta_stream.tools.registry import CREATIVE_WRITING, ToolRegistry
from zeta_stream.types import ToolParameter

_logger = logging.getLogger(__name__)

_QUERY = ToolParameter(name="query", type="string", description="The search query")
_NUM_RESULTS = ToolParameter(
    name="numResults", type="number",
    description="Results count (1-10, default 5)", required=False,
)


def _clip(text: str | None, limit: int) -> str | None:
    if text and len(text) > limit:
        return text[:limit] + "..."
    return text


def _slim(data: dict[str, Any], text_chars: int, subpage_chars: int = 200,
          max_subpages: int | None = None) -> dict[str, Any]:
    """Drop bulky fields and clip text so results fit a small context."""
    slimmed = []
    for r in data.get("results") or []:
        item = {k: v for k, v in r.items()
                if k not in ("highlights", "highlightScores", "summary")}
        item["text"] = _clip(r.get("text"), text_chars)
        subpages = r.get("subpages")
        if subpages:
            if max_subpages is not None:
                subpages = subpages[:max_subpages]
            item["subpages"] = [
                dict(sp, text=_clip(sp.get("text"), subpage_chars)) for sp in subpages
            ]
        slimmed.append(item)
    return dict(data, results=slimmed)


def _num_results(args: dict[str, Any], context: ToolContext) -> int:
    try:
        requested = int(args.get("numResults") or context.profile.max_results)
    except (TypeError, ValueError):
        requested = context.profile.max_results
    return max(1, min(requested, context.profile.max_results, 10))


# ---------------------------------------------------------------------------
# Creative writing
# ---------------------------------------------------------------------------

class CreativeWritingTool(Tool):
    """Delivers long-form writing to the user's manuscript view."""

    name = CREATIVE_WRITING
    description = (
        "Use this tool for creative writing tasks like stories, poems, essays, "
        "scripts, articles, or any long-form creative content. The writing is "
        "shown to the user in a manuscript view."
    )
    parameters = [
        ToolParameter(name="title", type="string", required=False,
                      description='Title for the manuscript (e.g. "Short Story", "Poem")'),
        ToolParameter(name="content", type="string",
                      description="The full creative writing content"),
    ]

    async def execute(self, args: dict[str, Any], context: ToolContext) -> Any:
        return {
            "type": CREATIVE_WRITING,
            "title": args.get("title") or "Manuscript",
            "content": args.get("content") or "",
        }


# ---------------------------------------------------------------------------
# Exa-backed search tools
# ---------------------------------------------------------------------------

class _ExaTool(Tool):
    def __init__(self, client: ExaClient) -> None:
        self._client = client


class _CategorySearch(_ExaTool):
    """Search restricted to one Exa category."""

    category: str | None = None
    parameters = [_QUERY, _NUM_RESULTS]

    async def execute(self, args: dict[str, Any], context: ToolContext) -> Any:
        query = args.get("query")
        if not query:
            raise ValueError(f"{self.name} requires a query")
        data = await self._client.search(
            query,
            type=context.search_type,
            num_results=_num_results(args, context),
            category=args.get("category") or self.category,
            text_chars=context.profile.text_chars,
            image_links=2,
        )
        return _slim(data, context.profile.text_chars)


class WebSearchTool(_CategorySearch):
    name = "web_search"
    description = (
        "Search the web for current information. Use for general queries, "
        "facts, or any topic needing up-to-date data."
    )
    parameters = [
        _QUERY,
        ToolParameter(
            name="category", type="string", required=False,
            description='Optional focus: "news", "github", "company", '
                        '"research paper", "tweet", "people"',
        ),
        _NUM_RESULTS,
    ]


class NewsSearchTool(_CategorySearch):
    name = "search_news"
    category = "news"
    description = "Search recent news articles for current events and recent developments."


class PeopleSearchTool(_CategorySearch):
    name = "search_people"
    category = "people"
    description = (
        "Search for people and professionals by role, company or skills, "
        'e.g. "VP of Product at Microsoft".'
    )


class GithubSearchTool(_CategorySearch):
    name = "search_github"
    category = "github"
    description = "Search GitHub for repositories, code, and documentation."


class PaperSearchTool(_CategorySearch):
    name = "search_research_papers"
    category = "research paper"
    description = "Search academic research papers and scientific publications."


class CompanySearchTool(_CategorySearch):
    name = "search_company"
    category = "company"
    description = "Search for company information and business details."


class TweetSearchTool(_CategorySearch):
    name = "search_tweets"
    category = "tweet"
    description = "Search Twitter/X posts for social discussions and opinions."


class CrawlWebsiteTool(_ExaTool):
    name = "crawl_website"
    description = "Crawl a website and its subpages for comprehensive information."
    parameters = [
        ToolParameter(name="url", type="string", description="Website URL to crawl"),
        ToolParameter(name="query", type="string", required=False,
                      description="Optional query to focus the crawl"),
        ToolParameter(name="subpages", type="number", required=False,
                      description="Subpages to crawl (1-10, default 5)"),
        ToolParameter(name="targets", type="array", items="string", required=False,
                      description='Target sections to prioritize (e.g. ["docs", "api"])'),
    ]

    async def execute(self, args: dict[str, Any], context: ToolContext) -> Any:
        url = args.get("url")
        if not url:
            raise ValueError("crawl_website requires a url")
        domain = re.sub(r"^https?://", "", url).rstrip("/")
        try:
            subpages = int(args.get("subpages") or context.profile.crawl_subpages)
        except (TypeError, ValueError):
            subpages = context.profile.crawl_subpages
        subpages = max(1, min(subpages, context.profile.crawl_subpages))
        data = await self._client.search(
            args.get("query") or domain,
            type=context.search_type,
            num_results=1,
            include_domains=[domain],
            text_chars=context.profile.text_chars,
            subpages=subpages,
            subpage_target=args.get("targets") or None,
            livecrawl="preferred",
            livecrawl_timeout=5000,
        )
        return _slim(data, context.profile.text_chars, max_subpages=subpages)


class VisitUrlsTool(_ExaTool):
    name = "visit_urls"
    description = (
        "Get full content from specific URLs. Use after web_search to read "
        "detailed content from results."
    )
    parameters = [
        ToolParameter(name="urls", type="array", items="string",
                      description="URLs to visit (1-5 recommended)"),
    ]

    async def execute(self, args: dict[str, Any], context: ToolContext) -> Any:
        urls = args.get("urls") or []
        if isinstance(urls, str):
            urls = [urls]
        urls = urls[:context.profile.max_visit_urls]
        if not urls:
            raise ValueError("visit_urls requires at least one url")
        _logger.debug("Visiting %d url(s)", len(urls))
        return await self._client.get_contents(urls, max_chars=context.profile.visit_chars)


class QuickAnswerTool(_ExaTool):
    name = "quick_answer"
    description = (
        "Get a direct one-line answer to a simple factual question. For "
        "anything needing explanation, use web_search instead."
    )
    parameters = [
        ToolParameter(name="query", type="string",
                      description="A simple factual question with a short answer"),
    ]

    async def execute(self, args: dict[str, Any], context: ToolContext) -> Any:
        query = args.get("query")
        if not query:
            raise ValueError("quick_answer requires a query")
        return await self._client.answer(query)


SEARCH_TOOLS: tuple[type[_ExaTool], ...] = (
    WebSearchTool,
    NewsSearchTool,
    PeopleSearchTool,
    GithubSearchTool,
    PaperSearchTool,
    CompanySearchTool,
    TweetSearchTool,
    CrawlWebsiteTool,
    VisitUrlsTool,
    QuickAnswerTool,
)


def build_registry(client: ExaClient | None) -> ToolRegistry:
    """Registry with creative_writing and, when a client is given, every search tool."""
    registry = ToolRegistry()
    registry.register(CreativeWritingTool())
    if client is not None:
        for cls in SEARCH_TOOLS:
            registry.register(cls(client))
    else:
        _logger.info("No Exa client configured, search tools disabled")
    return registry
