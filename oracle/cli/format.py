"""CLI output formatting and helpers."""

import json

import typer

from oracle.lib.uuid7 import parse_timestamp


def init_context(ctx: typer.Context, json_output: bool = False, quiet_output: bool = False) -> None:
    if ctx.obj is None or not isinstance(ctx.obj, dict):
        ctx.obj = {}
    ctx.obj["json_output"] = json_output
    ctx.obj["quiet_output"] = quiet_output


def format_local_time(timestamp: str) -> str:
    """Format ISO timestamp as readable local time."""
    try:
        return parse_timestamp(timestamp).astimezone().strftime("%Y-%m-%d %H:%M:%S")
    except (ValueError, TypeError, AttributeError):
        return timestamp


def output_json(data, ctx: typer.Context) -> bool:
    """Output data as JSON if requested. Returns True if output, False otherwise."""
    if ctx.obj and ctx.obj.get("json_output"):
        typer.echo(json.dumps(data, indent=2, default=str))
        return True
    return False


def should_output(ctx: typer.Context) -> bool:
    """Check if output should be printed (not quiet mode)."""
    return not (ctx.obj and ctx.obj.get("quiet_output"))


def echo_if_output(msg: str, ctx: typer.Context) -> None:
    """Echo message only if not in quiet mode."""
    if should_output(ctx):
        typer.echo(msg)


def fail(exc: Exception, ctx: typer.Context) -> typer.Exit:
    """Report an error in the active output mode and return the exit to raise."""
    output_json({"status": "error", "message": str(exc)}, ctx) or echo_if_output(f"❌ {exc}", ctx)
    return typer.Exit(code=1)
