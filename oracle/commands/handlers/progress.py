from oracle.commands import teams
from oracle.commands.format import bullets, format_time
from oracle.commands.stages import STAGES, assess_readiness
from oracle.models import Actor, Command, HandlerResult

USAGE = "/progress [team]"
RECENT_LIMIT = 5


async def handle(command: Command, actor: Actor, ctx) -> HandlerResult:
    """Stage overview plus whether recent work suggests the team can advance."""
    team = await teams.resolve_team(ctx.store, actor, command.text, USAGE)
    updates = await teams.latest_updates(ctx.store, team.id, limit=RECENT_LIMIT)
    readiness = assess_readiness(team.stage, [u.content for u in updates])
    info = STAGES[readiness.current]

    lines = [f"🚀 {team.name}: {info.title}", f"  {info.description}", "  Focus:"]
    lines.extend(bullets(info.characteristics, indent="    "))

    lines.append("  Recent updates:")
    if updates:
        lines.extend(f"    {format_time(u.created_at)}  {u.content}" for u in updates)
    else:
        lines.append("    None yet. Log one with /update <text>.")

    if readiness.next is None:
        lines.append("🏁 Final stage reached.")
    elif readiness.ready:
        lines.append(
            f"✅ Recent work points to {STAGES[readiness.detected].title}: "
            f"ready to advance to {STAGES[readiness.next].title} "
            f"(confidence {readiness.confidence:.0%})."
        )
    else:
        lines.append(f"⏳ Not ready for {STAGES[readiness.next].title} yet. Next steps:")
        lines.extend(bullets(info.next_actions, indent="    "))

    return HandlerResult.ok(
        "\n".join(lines),
        team_id=team.id,
        stage=readiness.current.value,
        detected_stage=readiness.detected.value,
        next_stage=readiness.next.value if readiness.next else None,
        ready=readiness.ready,
        recent_updates=len(updates),
    )
