"""Oracle CLI: thin command wrappers over the command core."""

import asyncio

import typer

from oracle.errors import OracleError
from oracle.lib import config, logs
from oracle.lib.store import open_store

from . import actors, ask, inbox, session
from .format import echo_if_output, fail, init_context, output_json

app = typer.Typer(no_args_is_help=False, add_completion=False)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output in JSON format."),
    quiet_output: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
):
    """Oracle: commands, messaging and presence for accelerator teams."""
    init_context(ctx, json_output, quiet_output)
    if ctx.resilient_parsing:
        return
    logs.setup()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command()
def init(ctx: typer.Context):
    """Write the default config and create the database."""
    path = config.init_config()
    store = open_store()
    try:
        asyncio.run(store.select("profiles", limit=1))
    except OracleError as e:
        raise fail(e, ctx) from e
    finally:
        store.close()
    output_json({"status": "success", "config": str(path), "database": str(store.db_path)}, ctx) or (
        echo_if_output(f"Config: {path}\nDatabase: {store.db_path}", ctx)
    )


actors.register(app)
ask.register(app)
inbox.register(app)
session.register(app)


def main() -> None:
    """Entry point for oracle command."""
    app()
