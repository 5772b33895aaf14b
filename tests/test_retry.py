"""Tests for credential rotation and the retry policy."""

import threading
from collections import Counter

import pytest

from zeta_stream.core.abort import AbortSignal
from zeta_stream.errors import (
    AbortError,
    ConfigError,
    ExhaustedRetriesError,
    NetworkError,
    RateLimitError,
    TransportError,
    classify_http_error,
)
from zeta_stream.llm.retry import KeyRotator, RetryPolicy


class Script:
    """Attempt callable that fails according to a script, then succeeds."""

    def __init__(self, *failures):
        self.failures = list(failures)
        self.keys: list[str] = []

    async def __call__(self, key: str) -> str:
        self.keys.append(key)
        if self.failures:
            raise self.failures.pop(0)
        return f"ok:{key}"


class TestKeyRotator:
    def test_round_robin(self):
        rot = KeyRotator(["a", "b", "c"])
        assert [rot.next_key() for _ in range(5)] == ["a", "b", "c", "a", "b"]

    def test_empty_keys_rejected(self):
        with pytest.raises(ConfigError, match="groq"):
            KeyRotator(["", ""], "groq")

    def test_concurrent_callers_spread_evenly(self):
        rot = KeyRotator(["a", "b", "c", "d"])
        seen: list[str] = []
        lock = threading.Lock()

        def worker():
            for _ in range(250):
                key = rot.next_key()
                with lock:
                    seen.append(key)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert Counter(seen) == {"a": 500, "b": 500, "c": 500, "d": 500}


class TestRetryPolicy:
    async def test_success_first_try(self):
        script = Script()
        result = await RetryPolicy().run(KeyRotator(["a", "b"]), script)
        assert result == "ok:a"
        assert script.keys == ["a"]

    async def test_rate_limits_rotate_through_keys(self):
        rot = KeyRotator(["a", "b", "c"])
        script = Script(RateLimitError("429"), RateLimitError("429"))
        result = await RetryPolicy().run(rot, script)
        assert result == "ok:c"
        assert script.keys == ["a", "b", "c"]

    async def test_all_keys_rate_limited(self):
        rot = KeyRotator(["a", "b"])
        script = Script(RateLimitError("429"), RateLimitError("429"), RateLimitError("429"))
        with pytest.raises(ExhaustedRetriesError) as exc:
            await RetryPolicy().run(rot, script)
        assert script.keys == ["a", "b"]
        assert isinstance(exc.value.__cause__, RateLimitError)

    async def test_network_errors_retry_same_key(self):
        rot = KeyRotator(["a", "b"])
        script = Script(NetworkError("reset"), NetworkError("reset"))
        result = await RetryPolicy(network_retries=2, backoff_base=0).run(rot, script)
        assert result == "ok:a"
        assert script.keys == ["a", "a", "a"]

    async def test_network_retries_bounded(self):
        rot = KeyRotator(["a"])
        script = Script(*[NetworkError("down")] * 5)
        with pytest.raises(ExhaustedRetriesError):
            await RetryPolicy(network_retries=2, backoff_base=0).run(rot, script)
        assert len(script.keys) == 3

    async def test_other_errors_not_retried(self):
        rot = KeyRotator(["a", "b"])
        script = Script(TransportError("bad request", status=400))
        with pytest.raises(TransportError) as exc:
            await RetryPolicy().run(rot, script)
        assert exc.value.status == 400
        assert script.keys == ["a"]

    async def test_abort_during_backoff(self):
        signal = AbortSignal()

        async def attempt(key):
            signal.abort()
            raise NetworkError("down")

        with pytest.raises(AbortError):
            await RetryPolicy(backoff_base=30).run(KeyRotator(["a"]), attempt, signal)

    async def test_aborted_before_first_attempt(self):
        signal = AbortSignal()
        signal.abort()
        script = Script()
        with pytest.raises(AbortError):
            await RetryPolicy().run(KeyRotator(["a"]), script, signal)
        assert script.keys == []


class TestClassifyHttpError:
    def test_429(self):
        err = classify_http_error(429, "slow down", "Groq")
        assert isinstance(err, RateLimitError)
        assert str(err) == "Groq API error: 429 - slow down"

    def test_quota_keyword(self):
        assert isinstance(classify_http_error(403, "Quota exceeded"), RateLimitError)

    @pytest.mark.parametrize("body", [
        "Rate limit reached for model",
        '{"error": {"code": "rate_limit_exceeded"}}',
        "RESOURCE_EXHAUSTED: quota_exceeded",
    ])
    def test_rate_limit_bodies(self, body):
        assert isinstance(classify_http_error(400, body), RateLimitError)

    @pytest.mark.parametrize("body", [
        "failed to generate a response",
        "separate the messages",
        "content flagged by moderation",
    ])
    def test_words_containing_rate_not_throttling(self, body):
        assert type(classify_http_error(400, body)) is TransportError

    def test_plain_error(self):
        err = classify_http_error(500, "x" * 800)
        assert type(err) is TransportError
        assert err.status == 500
        assert len(err.body) == 800
        assert str(err).endswith("x" * 500)
