"""Shared fixtures and helpers for zeta-stream tests."""

import json
import os
from typing import Any

import httpx
import pytest

from zeta_stream.config import build_config
from zeta_stream.tools.base import Tool, ToolContext
from zeta_stream.types import ToolParameter


# ---------------------------------------------------------------------------
# Wire helpers
# ---------------------------------------------------------------------------

def sse(*payloads: Any, done: bool = True) -> bytes:
    """Encode payloads as a ``data: <json>`` stream body."""
    lines = [f"data: {json.dumps(p)}\n\n" for p in payloads]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


def delta(content: str | None = None, tool_calls: list | None = None, **fields) -> dict:
    """One OpenAI-style streaming chunk."""
    d: dict[str, Any] = dict(fields)
    if content is not None:
        d["content"] = content
    if tool_calls is not None:
        d["tool_calls"] = tool_calls
    return {"choices": [{"index": 0, "delta": d}]}


def tool_fragment(index: int, name: str | None = None, arguments: str | None = None,
                  call_id: str | None = None) -> dict:
    frag: dict[str, Any] = {"index": index, "function": {}}
    if call_id:
        frag["id"] = call_id
    if name:
        frag["function"]["name"] = name
    if arguments is not None:
        frag["function"]["arguments"] = arguments
    return frag


class Recorder:
    """MockTransport handler that replays canned responses in order."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request to {request.url}")
        resp = self._responses.pop(0)
        if callable(resp):
            return resp(request)
        return resp

    def payload(self, i: int = -1) -> dict:
        return json.loads(self.requests[i].content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def ok_stream(body: bytes) -> httpx.Response:
    return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})


# ---------------------------------------------------------------------------
# Test tools
# ---------------------------------------------------------------------------

class EchoTool(Tool):
    name = "echo"
    description = "Echo input"
    parameters = [ToolParameter(name="text", type="string", description="Text to echo")]

    async def execute(self, args: dict, context: ToolContext) -> Any:
        return f"Echo: {args.get('text', '')}"


class FailTool(Tool):
    name = "fail"
    description = "Always fails"
    parameters = []

    async def execute(self, args: dict, context: ToolContext) -> Any:
        raise RuntimeError("boom")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real credentials in the environment out of every test."""
    for name in list(os.environ):
        if "_API_KEY" in name:
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config():
    return build_config({
        "providers": {
            name: {"api_keys": ["key-1", "key-2"]}
            for name in ("groq", "compound", "openrouter", "routeway", "gemini")
        },
        "engine": {"backoff_base": 0},
    })
