"""Interactive live session."""

import asyncio

import typer

from oracle.commands.dispatcher import Dispatcher, build_context
from oracle.errors import OracleError
from oracle.lib.store import open_store
from oracle.realtime import LocalTransport, StorePoller
from oracle.session import Console, Session

from .format import fail
from .identity import require_actor


async def _run(identity: str | None) -> None:
    store = open_store()
    try:
        actor = await require_actor(store, identity)
        context = build_context(store)
        names = {p.id: p.full_name for p in await context.directory.actors()}
        transport = LocalTransport()
        session = Session(Dispatcher(context), actor, transport)
        await Console(session, StorePoller(store, transport), names).run()
    finally:
        store.close()


def register(app: typer.Typer) -> None:
    @app.command()
    def session(
        ctx: typer.Context,
        identity: str = typer.Option(None, "--as", help="Actor id or full name"),
    ):
        """Open a live session: commands, questions, incoming messages and presence."""
        try:
            asyncio.run(_run(identity))
        except (ValueError, OracleError) as e:
            raise fail(e, ctx) from e
