"""Tests for the concurrent tool Executor."""

import asyncio

import pytest
from conftest import EchoTool, FailTool

from zeta_stream.core.abort import AbortSignal
from zeta_stream.core.executor import Executor
from zeta_stream.errors import AbortError
from zeta_stream.tools.base import Tool, ToolContext
from zeta_stream.tools.registry import ToolRegistry
from zeta_stream.types import ToolCall, ToolParameter


class SleepTool(Tool):
    name = "sleep"
    description = "Sleep for a while"
    parameters = [ToolParameter(name="seconds", type="number", description="Delay")]

    def __init__(self):
        self.cancelled = False

    async def execute(self, args, context):
        try:
            await asyncio.sleep(args.get("seconds", 0))
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return f"slept {args.get('seconds', 0)}"


class StubbornTool(Tool):
    """Keeps running for a while after being cancelled."""

    name = "stubborn"
    description = "Ignore cancellation"
    parameters = []

    def __init__(self):
        self.finished = asyncio.Event()

    async def execute(self, args, context):
        try:
            await asyncio.sleep(1.0)
        except asyncio.CancelledError:
            await asyncio.sleep(0.3)
        finally:
            self.finished.set()
        return "late"


@pytest.fixture
def sleeper():
    return SleepTool()


@pytest.fixture
def registry(sleeper):
    reg = ToolRegistry()
    reg.register(EchoTool())
    reg.register(FailTool())
    reg.register(sleeper)
    return reg


def _call(i, name, **args):
    return ToolCall(id=f"c{i}", name=name, args=args)


async def _collect(executor, calls, abort=None):
    return [o async for o in executor.run_batch(calls, ToolContext(), abort)]


class TestExecutor:
    async def test_single_success(self, registry):
        outcomes = await _collect(Executor(registry), [_call(1, "echo", text="hi")])
        assert len(outcomes) == 1
        assert outcomes[0].success
        assert outcomes[0].result == "Echo: hi"

    async def test_empty_batch(self, registry):
        assert await _collect(Executor(registry), []) == []

    async def test_completion_order(self, registry):
        calls = [_call(1, "sleep", seconds=0.05), _call(2, "echo", text="fast")]
        outcomes = await _collect(Executor(registry), calls)
        assert [o.call.id for o in outcomes] == ["c2", "c1"]

    async def test_runs_concurrently(self, registry):
        calls = [_call(i, "sleep", seconds=0.1) for i in range(5)]
        loop = asyncio.get_running_loop()
        start = loop.time()
        outcomes = await _collect(Executor(registry), calls)
        assert loop.time() - start < 0.4
        assert all(o.success for o in outcomes)

    async def test_timeout_isolated(self, registry, sleeper):
        calls = [_call(1, "sleep", seconds=5), _call(2, "echo", text="ok")]
        outcomes = await _collect(Executor(registry, tool_timeout=0.05), calls)
        by_id = {o.call.id: o for o in outcomes}
        assert by_id["c2"].success
        assert not by_id["c1"].success
        assert by_id["c1"].error == "sleep timed out after 0.05s"

    async def test_timeout_does_not_wait_for_cancellation(self, registry):
        stubborn = StubbornTool()
        registry.register(stubborn)
        loop = asyncio.get_running_loop()
        start = loop.time()
        outcomes = await _collect(Executor(registry, tool_timeout=0.05), [_call(1, "stubborn")])
        elapsed = loop.time() - start

        assert elapsed < 0.2
        assert outcomes[0].error == "stubborn timed out after 0.05s"
        assert not stubborn.finished.is_set()
        await asyncio.wait_for(stubborn.finished.wait(), timeout=2)

    async def test_failure_isolated(self, registry):
        calls = [_call(1, "fail"), _call(2, "echo", text="ok")]
        outcomes = await _collect(Executor(registry), calls)
        by_id = {o.call.id: o for o in outcomes}
        assert by_id["c1"].error == "boom"
        assert by_id["c2"].result == "Echo: ok"

    async def test_unknown_tool(self, registry):
        outcomes = await _collect(Executor(registry), [_call(1, "nope")])
        assert outcomes[0].error.startswith("Unknown tool: nope")
        assert "echo" in outcomes[0].error

    async def test_abort_cancels_pending(self, registry, sleeper):
        signal = AbortSignal()
        asyncio.get_running_loop().call_later(0.02, signal.abort)
        with pytest.raises(AbortError):
            await _collect(Executor(registry), [_call(1, "sleep", seconds=5)], signal)
        await asyncio.sleep(0.01)
        assert sleeper.cancelled
