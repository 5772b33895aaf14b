"""OpenRouter chat completions."""

from __future__ import annotations

from typing import Any

from zeta_stream.compactor import CompactionPolicy
from zeta_stream.llm.adapters.base import RequestOptions
from zeta_stream.llm.adapters.openai_compat import OpenAICompatAdapter
from zeta_stream.stream.accumulator import PlanningPolicy
from zeta_stream.tools.base import SearchProfile


def is_deepseek_r1(model: str) -> bool:
    """R1 variants reason natively; everything else needs thinking tags."""
    lower = model.lower()
    return "deepseek-r1" in lower or "deepseek/r1" in lower


class OpenRouterAdapter(OpenAICompatAdapter):
    name = "openrouter"
    display_name = "OpenRouter"
    max_tokens = 4096
    temperature = 0.7
    planning_policy = PlanningPolicy.SURFACE
    compaction = CompactionPolicy(max_results=5, max_chars=400)
    search_profile = SearchProfile(max_results=5, text_chars=1000)

    def reasoning_fields(self, options: RequestOptions) -> tuple[str, ...]:
        if options.reasoning and is_deepseek_r1(options.model):
            return ("reasoning_content", "reasoning")
        return ()

    def inline_reasoning(self, options: RequestOptions) -> bool:
        return options.reasoning and not is_deepseek_r1(options.model)

    def reasoning_params(self, options: RequestOptions) -> dict[str, Any]:
        if options.reasoning and is_deepseek_r1(options.model):
            return {"reasoning": {"effort": "medium"}}
        return {}
