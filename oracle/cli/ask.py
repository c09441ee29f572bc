"""Dispatch one command or question as an actor."""

import asyncio

import typer

from oracle.commands.dispatcher import Dispatcher, build_context
from oracle.errors import OracleError
from oracle.lib.store import open_store
from oracle.models import HandlerResult

from .format import echo_if_output, fail, output_json
from .identity import require_actor


async def _ask(text: str, identity: str | None) -> HandlerResult:
    store = open_store()
    try:
        actor = await require_actor(store, identity)
        dispatcher = Dispatcher(build_context(store))
        return await dispatcher.submit(text, actor)
    finally:
        store.close()


def register(app: typer.Typer) -> None:
    @app.command()
    def ask(
        ctx: typer.Context,
        text: str = typer.Argument(..., help="A /command or a question for the Oracle"),
        identity: str = typer.Option(None, "--as", help="Actor id or full name"),
        json_output: bool = typer.Option(False, "--json", "-j", help="Output in JSON format."),
    ):
        """Run a /command or ask the Oracle a question."""
        if json_output:
            ctx.obj["json_output"] = True
        try:
            result = asyncio.run(_ask(text, identity))
        except (ValueError, OracleError) as e:
            raise fail(e, ctx) from e

        if not output_json(result.to_dict(), ctx):
            if result.success:
                echo_if_output(result.message, ctx)
            else:
                echo_if_output(f"❌ {result.message}", ctx)
                if result.usage:
                    echo_if_output(f"Usage: {result.usage}", ctx)
        if not result.success:
            raise typer.Exit(code=1)
