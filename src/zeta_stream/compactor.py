"""Formatting of raw tool results into text the model can cite.

Every adapter carries its own ``CompactionPolicy``: small-context
backends get a handful of short snippets, large-context backends get the
full formatted results.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from zeta_stream.tools.registry import CREATIVE_WRITING

CITATION_HEADER = (
    "MANDATORY: Cite EVERY fact using [Title](url) format after the sentence.\n"
    "Use > blockquotes for key quotes/findings."
)


@dataclass(frozen=True)
class CompactionPolicy:
    max_results: int = 5
    max_chars: int = 400
    full_context: bool = False
    subpage_chars: int = 500


def compact_error(message: str) -> str:
    return json.dumps({"error": message})


def compact_result(name: str, result: Any, policy: CompactionPolicy) -> str:
    """Render one tool result as text for the transcript."""
    if isinstance(result, dict) and result.get("type") == CREATIVE_WRITING:
        return _manuscript_delivered(result)
    if isinstance(result, dict) and "answer" in result:
        return _format_answer(result)
    if isinstance(result, dict) and "results" in result:
        results = result.get("results") or []
        if policy.full_context:
            return format_full(results, policy)
        return format_compact(results, policy)
    if isinstance(result, str):
        return result[: policy.max_chars * policy.max_results]
    return json.dumps(result, default=str)[: policy.max_chars * policy.max_results]


def _manuscript_delivered(result: dict[str, Any]) -> str:
    return (
        f'SUCCESS: The manuscript "{result.get("title", "Manuscript")}" has been '
        "delivered to the user in the writing canvas.\n"
        "Do NOT repeat the content here. The user can already see it.\n"
        "Reply with at most a one-sentence confirmation, or simply end your response."
    )


def _format_answer(result: dict[str, Any]) -> str:
    lines = [f"Answer: {result.get('answer', '')}"]
    citations = result.get("citations") or []
    if citations:
        lines.append("Sources:")
        for c in citations:
            lines.append(f"- [{c.get('title') or 'Untitled'}]({c.get('url', '')})")
    return "\n".join(lines)


def format_compact(results: list[dict[str, Any]], policy: CompactionPolicy) -> str:
    if not results:
        return "No results found."
    blocks = []
    for i, r in enumerate(results[: policy.max_results], 1):
        block = f"[{i}] {r.get('title') or 'Untitled'}\nURL: {r.get('url', '')}"
        if r.get("text"):
            block += f"\n{r['text'][: policy.max_chars]}"
        blocks.append(block)
    return f"{CITATION_HEADER}\n\nSOURCES:\n" + "\n\n".join(blocks)


def format_full(results: list[dict[str, Any]], policy: CompactionPolicy) -> str:
    """Rich format with author, date, summary and subpages."""
    if not results:
        return "No search results found."
    blocks = []
    for i, r in enumerate(results[: policy.max_results], 1):
        block = f"**Source [{i}]:** [{r.get('title') or 'Untitled'}]({r.get('url', '')})"
        if r.get("author"):
            block += f"\nAuthor: {r['author']}"
        if r.get("publishedDate"):
            block += f"\nPublished: {str(r['publishedDate'])[:10]}"
        text = r.get("text")
        if text:
            if len(text) > policy.max_chars:
                text = text[: policy.max_chars] + "..."
            block += f"\nContent: {text}"
        if r.get("summary"):
            block += f"\nSummary: {r['summary']}"
        subpages = r.get("subpages") or []
        if subpages:
            block += f"\n\nSubpages ({len(subpages)}):"
            for j, sp in enumerate(subpages, 1):
                block += f"\n  [{j}] [{sp.get('title') or 'Untitled'}]({sp.get('url', '')})"
                sub_text = sp.get("text")
                if sub_text:
                    if len(sub_text) > policy.subpage_chars:
                        sub_text = sub_text[: policy.subpage_chars] + "..."
                    block += f"\n      {sub_text}"
        blocks.append(block)
    url_map = "\n".join(
        f"[{i}] {r.get('url', '')}" for i, r in enumerate(results[: policy.max_results], 1)
    )
    return (
        f"{CITATION_HEADER}\n\nAVAILABLE SOURCES:\n{url_map}\n\nSEARCH RESULTS:\n"
        + "\n\n---\n\n".join(blocks)
    )
