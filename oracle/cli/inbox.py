"""Show direct messages for an actor and mark them read."""

import asyncio
from dataclasses import asdict

import typer

from oracle import inbox as inbox_ops
from oracle.errors import OracleError
from oracle.lib.store import open_store
from oracle.lib.uuid7 import short_id
from oracle.models import Message

from .format import echo_if_output, fail, format_local_time, output_json, should_output
from .identity import require_actor


async def _inbox(identity: str | None, show_all: bool) -> tuple[list[Message], list[str], dict[str, str]]:
    store = open_store()
    try:
        actor = await require_actor(store, identity)
        messages = await inbox_ops.messages_for(store, actor, include_read=show_all)
        marked = await inbox_ops.mark_read(store, [m.id for m in messages if m.read_at is None])
        names = {row["id"]: row["full_name"] for row in await store.select("profiles")}
        return messages, marked, names
    finally:
        store.close()


def register(app: typer.Typer) -> None:
    @app.command()
    def inbox(
        ctx: typer.Context,
        identity: str = typer.Option(None, "--as", help="Actor id or full name"),
        show_all: bool = typer.Option(False, "--all", help="Include messages already read"),
        json_output: bool = typer.Option(False, "--json", "-j", help="Output in JSON format."),
    ):
        """Show direct messages; unread ones are marked read."""
        if json_output:
            ctx.obj["json_output"] = True
        try:
            messages, marked, names = asyncio.run(_inbox(identity, show_all))
        except (ValueError, OracleError) as e:
            raise fail(e, ctx) from e

        if not messages:
            output_json([], ctx) or echo_if_output("Inbox empty", ctx)
            return
        if output_json([asdict(m) for m in messages], ctx):
            return
        if not should_output(ctx):
            return

        echo_if_output(f"INBOX ({len(messages)}, {len(marked)} new):", ctx)
        for message in messages:
            marker = "•" if message.id in marked else " "
            sender = names.get(message.sender_id, short_id(message.sender_id))
            echo_if_output(
                f"  {marker} {format_local_time(message.created_at)} {sender}: {message.content}", ctx
            )
