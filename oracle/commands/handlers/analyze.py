from oracle.commands import health, teams
from oracle.commands.stages import STAGES, parse_stage
from oracle.errors import NotFoundError
from oracle.models import Actor, Command, HandlerResult

USAGE = "/analyze [team|overall]"


async def _assess(ctx, team) -> health.TeamHealth:
    members = await ctx.directory.team_members(team.id)
    return await health.assess(ctx.store, team, len(members), ctx.now())


async def _overall(ctx) -> HandlerResult:
    all_teams = await teams.all_teams(ctx.store)
    if not all_teams:
        return HandlerResult.ok("📈 No teams to analyze yet.", teams=[], average=None)

    reports = [await _assess(ctx, team) for team in all_teams]
    reports.sort(key=lambda r: (r.score, r.team.name.lower()))
    average = round(sum(r.score for r in reports) / len(reports), 1)

    lines = ["📈 Program health (lowest first):"]
    lines.extend(f"  {r.score:>3}  {r.team.name} ({r.label})" for r in reports)
    lines.append(f"  Average: {average}")
    return HandlerResult.ok(
        "\n".join(lines),
        teams=[{"team_id": r.team.id, "name": r.team.name, "score": r.score} for r in reports],
        average=average,
    )


async def _single(ctx, team) -> HandlerResult:
    report = await _assess(ctx, team)
    if report.days_since_update is None:
        freshness = "no updates yet"
    else:
        freshness = f"{report.days_since_update:.1f} days ago"
    lines = [
        f"📈 {team.name}: {report.score}/100 ({report.label})",
        f"  Stage: {STAGES[parse_stage(team.stage)].title}",
        f"  Updates in the last 7 days: {report.recent_updates}",
        f"  Last update: {freshness}",
        f"  Members: {report.members}",
    ]
    return HandlerResult.ok("\n".join(lines), team_id=team.id, score=report.score)


async def handle(command: Command, actor: Actor, ctx) -> HandlerResult:
    target = command.text.strip()
    if target.lower() == "overall" or (not target and not actor.team_id):
        return await _overall(ctx)

    if not target:
        team = await teams.get_team(ctx.store, actor.team_id)
    else:
        team = await teams.find_team(ctx.store, target)
    if team is None:
        raise NotFoundError(f"Team not found: {target or actor.team_id}", USAGE)
    return await _single(ctx, team)
