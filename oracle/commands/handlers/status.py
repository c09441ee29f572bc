from oracle.commands import teams
from oracle.commands.format import format_time
from oracle.commands.stages import STAGES, parse_stage
from oracle.models import Actor, Command, HandlerResult, Team

USAGE = "/status [@user|team]"


async def _team_status(ctx, team: Team) -> HandlerResult:
    status = await teams.get_status(ctx.store, team.id)
    stage = parse_stage(team.stage)
    current = status.current_status if status and status.current_status else "No status yet"
    last_update = status.last_update if status else None
    lines = [
        f"📊 {team.name}",
        f"  Stage: {STAGES[stage].title}",
        f"  Status: {current}",
        f"  Last update: {format_time(last_update)}",
    ]
    return HandlerResult.ok(
        "\n".join(lines),
        team_id=team.id,
        stage=stage.value,
        current_status=status.current_status if status else None,
        last_update=last_update,
    )


async def _user_status(ctx, mention: str) -> HandlerResult:
    profile = await ctx.directory.resolve_mention(mention)
    team = await teams.get_team(ctx.store, profile.team_id) if profile.team_id else None
    latest = await teams.latest_updates(ctx.store, team.id, limit=1) if team else []

    lines = [f"👤 {profile.full_name} ({profile.role})", f"  Team: {team.name if team else 'none'}"]
    if latest:
        lines.append(f"  Latest update ({format_time(latest[0].created_at)}): {latest[0].content}")
    else:
        lines.append("  Latest update: none")
    return HandlerResult.ok(
        "\n".join(lines),
        user_id=profile.id,
        role=profile.role,
        team_id=team.id if team else None,
    )


async def handle(command: Command, actor: Actor, ctx) -> HandlerResult:
    target = command.text.strip()
    if target.startswith("@"):
        return await _user_status(ctx, target)
    team = await teams.resolve_team(ctx.store, actor, target, USAGE)
    return await _team_status(ctx, team)
