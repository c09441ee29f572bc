import logging

from oracle.errors import StoreError, ValidationError
from oracle.lib.uuid7 import timestamp
from oracle.models import Actor, Command, HandlerResult, SideEffect, UpdateType

logger = logging.getLogger(__name__)

USAGE = "/update <text>"


async def handle(command: Command, actor: Actor, ctx) -> HandlerResult:
    """Append a daily update, then refresh the team's status summary.

    The summary write is best effort: if it fails the update stays recorded
    and the result carries a warning.
    """
    if not actor.team_id:
        raise ValidationError("No team assigned. Join a team before logging progress.", USAGE)
    content = command.text.strip()
    if not content:
        raise ValidationError("Update text is required.", USAGE)

    now = timestamp(ctx.now())
    record = await ctx.store.insert(
        "updates",
        {
            "team_id": actor.team_id,
            "content": content,
            "type": UpdateType.DAILY.value,
            "created_by": actor.id,
            "created_at": now,
        },
    )
    effects = [SideEffect("updates", record["id"])]
    lines = ["✅ Progress update logged."]

    summary_length = int(ctx.setting("status_summary_length", 200))
    try:
        await ctx.store.upsert(
            "team_status",
            {"team_id": actor.team_id, "current_status": content[:summary_length], "last_update": now},
        )
        effects.append(SideEffect("team_status", actor.team_id, "upsert"))
    except StoreError as e:
        logger.warning(f"Team status refresh failed for {actor.team_id}: {e}")
        lines.append("⚠ Team status could not be refreshed; the update itself was saved.")

    return HandlerResult.ok("\n".join(lines), effects, update_id=record["id"], team_id=actor.team_id)
