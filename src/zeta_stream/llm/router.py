"""Model router: model id -> provider adapter.

Adapters are created lazily, one per provider, and shared by every
request to that provider so all of them draw from the same key rotator.
"""

from __future__ import annotations

import logging

import httpx

from zeta_stream.config import ZetaConfig
from zeta_stream.errors import ConfigError
from zeta_stream.llm.adapters import ADAPTERS, ProviderAdapter
from zeta_stream.llm.retry import RetryPolicy

_logger = logging.getLogger(__name__)

# Used when a model id is not in the configured catalogue
_PREFIX_FALLBACKS = (
    ("groq/compound", "compound"),
    ("gemini", "gemini"),
)


class ModelRouter:
    """Catalogue-based adapter selection.

    Parameters
    ----------
    config:
        The full ``ZetaConfig``.
    transport:
        Optional httpx transport handed to every adapter (tests use
        ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: ZetaConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._catalogue = config.catalogue()
        self._adapters: dict[str, ProviderAdapter] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def provider_for(self, model_id: str) -> str:
        """Provider name serving *model_id*."""
        provider = self._catalogue.get(model_id)
        if provider:
            return provider
        for prefix, name in _PREFIX_FALLBACKS:
            if model_id.startswith(prefix):
                return name
        raise ConfigError(f"Unknown model: {model_id}")

    def get_adapter(self, model_id: str) -> ProviderAdapter:
        """Return the (shared) adapter for *model_id*."""
        provider = self.provider_for(model_id)
        adapter = self._adapters.get(provider)
        if adapter is None:
            try:
                cls = ADAPTERS[provider]
            except KeyError:
                raise ConfigError(f"No adapter for provider: {provider}") from None
            engine = self._config.engine
            adapter = cls(
                self._config.provider(provider),
                retry=RetryPolicy(engine.network_retries, engine.backoff_base),
                timeout=engine.request_timeout,
                transport=self._transport,
            )
            self._adapters[provider] = adapter
            _logger.debug("Created %s adapter for %s", provider, model_id)
        return adapter

    @property
    def models(self) -> dict[str, str]:
        """Configured model id -> provider name."""
        return dict(self._catalogue)

    async def close(self) -> None:
        for adapter in self._adapters.values():
            await adapter.close()
        self._adapters.clear()
