"""List known actors and load them from fixtures."""

import asyncio
from pathlib import Path

import typer

from oracle.errors import OracleError
from oracle.fixtures import load_fixture, read_fixture
from oracle.lib.store import open_store

from .format import echo_if_output, fail, output_json


async def _actors() -> list[dict]:
    store = open_store()
    try:
        teams = {row["id"]: row["name"] for row in await store.select("teams")}
        rows = await store.select("profiles", order_by="full_name")
    finally:
        store.close()
    return [{**row, "team": teams.get(row["team_id"])} for row in rows]


async def _load(path: Path) -> dict[str, int]:
    store = open_store()
    try:
        return await load_fixture(store, read_fixture(path))
    finally:
        store.close()


def register(app: typer.Typer) -> None:
    @app.command()
    def actors(ctx: typer.Context):
        """List everyone in the directory."""
        try:
            rows = asyncio.run(_actors())
        except OracleError as e:
            raise fail(e, ctx) from e
        if not rows:
            output_json([], ctx) or echo_if_output("No actors. Load some with 'oracle load FILE'.", ctx)
            return
        if output_json(rows, ctx):
            return
        for row in rows:
            skills = ", ".join(row["skills"]) if row["skills"] else "-"
            echo_if_output(
                f"  {row['id'][-8:]}  {row['full_name']:<24} {row['role']:<10} "
                f"{row['team'] or '-':<16} {skills}",
                ctx,
            )

    @app.command()
    def load(
        ctx: typer.Context,
        path: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML fixture file"),
    ):
        """Load teams and profiles from a YAML file."""
        try:
            counts = asyncio.run(_load(path))
        except OracleError as e:
            raise fail(e, ctx) from e
        output_json({"status": "success", **counts}, ctx) or echo_if_output(
            f"Loaded {counts['teams']} teams and {counts['profiles']} profiles", ctx
        )
