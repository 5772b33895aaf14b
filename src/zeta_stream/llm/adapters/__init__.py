"""Provider adapters, one per hosted backend."""

from zeta_stream.llm.adapters.base import ModelTurn, ProviderAdapter, RequestOptions
from zeta_stream.llm.adapters.compound import GroqCompoundAdapter
from zeta_stream.llm.adapters.gemini import GeminiAdapter
from zeta_stream.llm.adapters.groq import GroqAdapter
from zeta_stream.llm.adapters.openai_compat import OpenAICompatAdapter
from zeta_stream.llm.adapters.openrouter import OpenRouterAdapter
from zeta_stream.llm.adapters.routeway import RoutewayAdapter

# provider name (config key) -> adapter class
ADAPTERS: dict[str, type[ProviderAdapter]] = {
    "groq": GroqAdapter,
    "compound": GroqCompoundAdapter,
    "openrouter": OpenRouterAdapter,
    "routeway": RoutewayAdapter,
    "gemini": GeminiAdapter,
}

__all__ = [
    "ADAPTERS",
    "GeminiAdapter",
    "GroqAdapter",
    "GroqCompoundAdapter",
    "ModelTurn",
    "OpenAICompatAdapter",
    "OpenRouterAdapter",
    "ProviderAdapter",
    "RequestOptions",
    "RoutewayAdapter",
]
