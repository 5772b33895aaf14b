"""Groq chat completions (Kimi K2).

Groq enforces a small tokens-per-minute budget, so search always runs in
fast mode and results are cut down hard before they reach the model.
"""

from __future__ import annotations

from zeta_stream.compactor import CompactionPolicy
from zeta_stream.llm.adapters.openai_compat import OpenAICompatAdapter
from zeta_stream.stream.accumulator import PlanningPolicy
from zeta_stream.tools.base import SearchProfile
from zeta_stream.types import SearchMode


class GroqAdapter(OpenAICompatAdapter):
    name = "groq"
    display_name = "Groq"
    image_support = False
    max_tokens_field = "max_completion_tokens"
    max_tokens = 8192
    temperature = 0.6
    forced_search_mode = SearchMode.FAST
    planning_policy = PlanningPolicy.DISCARD
    compaction = CompactionPolicy(max_results=3, max_chars=250)
    search_profile = SearchProfile(
        max_results=3,
        text_chars=300,
        forced_type="fast",
        max_visit_urls=1,
        visit_chars=1000,
        crawl_subpages=1,
    )
