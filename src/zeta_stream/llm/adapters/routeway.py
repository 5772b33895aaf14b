"""Routeway chat completions.

DeepSeek models on Routeway send reasoning in ``reasoning_content``;
other models fall back to thinking tags, so both paths stay active.
"""

from __future__ import annotations

from zeta_stream.compactor import CompactionPolicy
from zeta_stream.llm.adapters.base import RequestOptions
from zeta_stream.llm.adapters.openai_compat import OpenAICompatAdapter
from zeta_stream.stream.accumulator import PlanningPolicy
from zeta_stream.tools.base import SearchProfile


class RoutewayAdapter(OpenAICompatAdapter):
    name = "routeway"
    display_name = "Routeway"
    max_tokens = 8192
    temperature = 0.7
    planning_policy = PlanningPolicy.SURFACE
    compaction = CompactionPolicy(max_results=5, max_chars=400)
    search_profile = SearchProfile(max_results=5, text_chars=1000)

    def reasoning_fields(self, options: RequestOptions) -> tuple[str, ...]:
        return ("reasoning_content",)
