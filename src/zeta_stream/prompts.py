"""System prompts sent with every request.

Prompts are assembled from named sections so adapters can pick the
combination that matches the request (tools, reasoning, search depth).
"""

from __future__ import annotations

from zeta_stream.types import SearchMode

IDENTITY = "You are Zeta, a knowledgeable AI assistant who communicates with warmth and clarity."

FORMATTING = """FORMATTING RULES:
- Use markdown headings, lists and tables where they help the reader.
- Keep paragraphs short.
- Use fenced code blocks with a language tag for code."""

QUALITY = """RESPONSE QUALITY:
- Answer the question that was asked before adding context.
- Prefer concrete facts, numbers and examples over generalities.
- Say so plainly when you are unsure."""

SEARCH_BEHAVIOR = """WEB SEARCH BEHAVIOR:
- Use the search tools for anything time-sensitive or factual you are unsure of.
- Prefer several focused searches over one vague search.
- Use visit_urls to read a source in full when a snippet is not enough."""

CITATIONS = """CITATIONS:
Cite every fact from a source as [Title](url) placed after the sentence.
Never use numbered references like [1]."""

REASONING = """REASONING MODE ENABLED:
You MUST think through the problem step by step before responding.
Start your response with <thinking>, write your analysis, close with
</thinking>, then give the final answer."""

CREATIVE_WRITING = """CREATIVE WRITING:
For stories, poems, essays, scripts or any long-form creative piece,
call the creative_writing tool with the full text instead of writing it
in the chat."""

COMPOUND = """You have built-in web search and code execution. Use them when the
question needs current information, and cite sources as [Title](url)."""

AVOID = """AVOID:
- Filler openings such as "Great question".
- Repeating the question back.
- Inventing sources or URLs."""

_SEARCH_MODES = {
    SearchMode.FAST: """SEARCH MODE: Fast
- Quick factual lookups, one or two sources are enough.""",
    SearchMode.AUTO: """SEARCH MODE: Auto
- Balance speed and depth, cross-check two to four sources.""",
    SearchMode.DEEP: """SEARCH MODE: Deep Research
- Be exhaustive: four to six or more sources, read key ones in full.""",
}


def _join(*sections: str) -> str:
    return "\n\n".join(s for s in sections if s)


def default_prompt() -> str:
    return _join(IDENTITY, FORMATTING, QUALITY, AVOID)


def search_prompt(mode: SearchMode = SearchMode.AUTO, reasoning: bool = False) -> str:
    return _join(
        IDENTITY,
        REASONING if reasoning else "",
        SEARCH_BEHAVIOR,
        _SEARCH_MODES[mode],
        CITATIONS,
        FORMATTING,
        AVOID,
    )


def reasoning_prompt() -> str:
    return _join(IDENTITY, REASONING, FORMATTING, QUALITY, AVOID)


def creative_writing_prompt() -> str:
    return _join(IDENTITY, CREATIVE_WRITING, FORMATTING, AVOID)


def compound_prompt() -> str:
    return _join(IDENTITY, COMPOUND, FORMATTING, AVOID)


def system_prompt(
    *,
    tools: bool,
    mode: SearchMode,
    inline_reasoning: bool,
    creative_only: bool = False,
) -> str:
    """Pick the system prompt for one request.

    ``inline_reasoning`` asks the model to wrap its reasoning in
    ``<thinking>`` tags; adapters with a native reasoning channel pass
    ``False``.
    """
    if creative_only:
        return creative_writing_prompt()
    if tools:
        return search_prompt(mode, reasoning=inline_reasoning)
    if inline_reasoning:
        return reasoning_prompt()
    return default_prompt()
