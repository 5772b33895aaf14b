"""Credential rotation and retry policy for provider calls."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence, TypeVar

import httpx

from zeta_stream.core.abort import AbortSignal
from zeta_stream.errors import (
    ConfigError,
    ExhaustedRetriesError,
    NetworkError,
    RateLimitError,
)

_logger = logging.getLogger(__name__)

T = TypeVar("T")

# Transient connection failures worth a retry
NETWORK_ERRORS = (httpx.TimeoutException, httpx.TransportError)


class KeyRotator:
    """Round-robin credential source shared by all requests to one provider.

    ``next_key()`` is atomic, so concurrent requests spread across keys
    instead of all starting on the first one.
    """

    def __init__(self, keys: Sequence[str], provider: str = "") -> None:
        cleaned = [k for k in keys if k]
        if not cleaned:
            raise ConfigError(f"No API keys configured for provider {provider or '?'}")
        self.provider = provider
        self._keys = cleaned
        self._cursor = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._keys)

    def next_key(self) -> str:
        with self._lock:
            key = self._keys[self._cursor]
            self._cursor = (self._cursor + 1) % len(self._keys)
        return key


@dataclass
class RetryPolicy:
    """Bounded retries around opening one provider response.

    Rate-limited attempts move to the next credential, at most once per
    credential.  Network failures retry the same credential up to
    ``network_retries`` times with linear backoff.  Anything else
    propagates unretried.
    """

    network_retries: int = 2
    backoff_base: float = 1.0

    async def run(
        self,
        rotator: KeyRotator,
        attempt: Callable[[str], Awaitable[T]],
        abort: AbortSignal | None = None,
    ) -> T:
        rate_limited = 0
        network_failures = 0
        key = rotator.next_key()

        while True:
            if abort is not None:
                abort.raise_if_aborted()
            try:
                return await attempt(key)
            except RateLimitError as e:
                rate_limited += 1
                if rate_limited >= len(rotator):
                    raise ExhaustedRetriesError(
                        f"{rotator.provider} rate limited on all {len(rotator)} key(s)"
                    ) from e
                _logger.warning(
                    "%s rate limited (attempt %d/%d), rotating key",
                    rotator.provider, rate_limited, len(rotator),
                )
                key = rotator.next_key()
            except NetworkError as e:
                network_failures += 1
                if network_failures > self.network_retries:
                    raise ExhaustedRetriesError(
                        f"{rotator.provider} unreachable after "
                        f"{network_failures} attempt(s): {e}"
                    ) from e
                delay = self.backoff_base * network_failures
                _logger.warning(
                    "%s network error (retry %d/%d in %.1fs): %s",
                    rotator.provider, network_failures, self.network_retries, delay, e,
                )
                if abort is not None:
                    await abort.sleep(delay)
                else:
                    await asyncio.sleep(delay)
