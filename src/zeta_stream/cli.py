"""zeta: command-line chat client."""

from __future__ import annotations

import asyncio
import logging
import signal

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from zeta_stream.config import ZetaConfig, load_config
from zeta_stream.core.abort import AbortSignal
from zeta_stream.core.engine import ChatEngine
from zeta_stream.errors import AbortError, ZetaError
from zeta_stream.llm.router import ModelRouter
from zeta_stream.types import EventType, SearchMode, StreamEvent, ToolCallStatus

_logger = logging.getLogger(__name__)

console = Console()

FALLBACK_MESSAGE = "Sorry, something went wrong while generating a response."


class StreamingDisplay:
    """Renders stream events to the terminal in real time."""

    def __init__(self, con: Console):
        self.con = con
        self._streaming = False
        self._names: dict[str, str] = {}

    def handle(self, event: StreamEvent):
        if event.type is EventType.THINKING:
            self.con.print(event.content, style="dim", end="", highlight=False, markup=False)

        elif event.type is EventType.THINKING_DONE:
            self.con.print()

        elif event.type is EventType.PLANNING:
            self.flush()
            self.con.print(event.content, style="italic", highlight=False, markup=False)

        elif event.type is EventType.TEXT:
            self._streaming = True
            self.con.print(event.content, end="", highlight=False, markup=False)

        elif event.type is EventType.TOOL_CALL_START:
            self.flush()
            call = event.tool_call
            self._names[call.id] = call.name
            args = str(call.args)
            if len(args) > 120:
                args = args[:120] + "..."
            self.con.print(f"[yellow]> {call.name}[/yellow] [dim]{escape(args)}[/dim]", highlight=False)

        elif event.type is EventType.TOOL_CALL_UPDATE:
            name = self._names.get(event.id, event.id)
            if event.status is ToolCallStatus.COMPLETED:
                self.con.print(f"  [green]OK[/green] {name}")
            elif event.status is ToolCallStatus.ERROR:
                self.con.print(f"  [red]FAIL[/red] {name}: {escape(str(event.error))}", highlight=False)

        elif event.type is EventType.DONE:
            self.flush()

    def flush(self):
        if self._streaming:
            self.con.print()
            self._streaming = False


async def _run_chat(
    config: ZetaConfig,
    prompt: str,
    model: str | None,
    tools: bool,
    search_mode: str,
    reasoning: bool,
) -> int:
    abort = AbortSignal()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, abort.abort)
    except (NotImplementedError, RuntimeError):
        _logger.debug("SIGINT handler unavailable, Ctrl-C will interrupt hard")

    engine = ChatEngine(config)
    display = StreamingDisplay(console)
    try:
        async for event in engine.stream_chat(
            prompt,
            [],
            model,
            enable_tools=tools,
            search_mode=SearchMode(search_mode),
            reasoning_enabled=reasoning,
            abort_signal=abort,
        ):
            display.handle(event)
    except AbortError:
        display.flush()
        return 130
    except ZetaError as e:
        display.flush()
        _logger.debug("Request failed: %s", e)
        console.print(f"[red]{FALLBACK_MESSAGE}[/red]")
        console.print(str(e), style="dim", highlight=False, markup=False)
        return 1
    finally:
        await engine.close()
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass
    return 0


@click.group()
@click.option("--config", "-c", "config_path", default=None,
              type=click.Path(dir_okay=False), help="Path to config YAML")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool):
    """zeta - streaming chat with tools across hosted LLM backends."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)
    try:
        ctx.obj = load_config(config_path)
    except ZetaError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.argument("prompt")
@click.option("--model", "-m", default=None, help="Model id (default from config)")
@click.option("--tools/--no-tools", default=False, help="Enable web search tools")
@click.option("--search-mode", "-s", default="auto",
              type=click.Choice([m.value for m in SearchMode]), help="Search depth")
@click.option("--reasoning", "-r", is_flag=True, help="Show model reasoning")
@click.pass_obj
def chat(config: ZetaConfig, prompt: str, model: str | None, tools: bool,
         search_mode: str, reasoning: bool):
    """Send PROMPT and stream the reply."""
    code = asyncio.run(_run_chat(config, prompt, model, tools, search_mode, reasoning))
    if code:
        raise SystemExit(code)


@main.command()
@click.pass_obj
def models(config: ZetaConfig):
    """List configured models."""
    router = ModelRouter(config)
    table = Table(title="Models")
    table.add_column("Model")
    table.add_column("Provider")
    table.add_column("Keys", justify="right")
    for model_id, provider in router.models.items():
        keys = len(config.provider(provider).api_keys)
        marker = " *" if model_id == config.default_model else ""
        table.add_row(model_id + marker, provider, str(keys))
    console.print(table)


if __name__ == "__main__":
    main()
