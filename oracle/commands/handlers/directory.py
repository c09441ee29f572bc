from oracle.commands.format import profile_line
from oracle.errors import ValidationError
from oracle.models import Actor, Command, HandlerResult

FIND_USAGE = "/find <name|skill>"
CONNECT_USAGE = "/connect <skills or interests>"


async def find(command: Command, actor: Actor, ctx) -> HandlerResult:
    query = command.text.strip()
    if not query:
        raise ValidationError("Tell me who or what to look for.", FIND_USAGE)

    matches = await ctx.directory.search(query, limit=int(ctx.setting("find_limit", 5)))
    if not matches:
        return HandlerResult.ok(f"🔍 No one matches '{query}'.", matches=[])

    lines = [f"🔍 Found {len(matches)} for '{query}':"]
    lines.extend(f"  {profile_line(p)}" for p in matches)
    return HandlerResult.ok("\n".join(lines), matches=[p.id for p in matches])


async def connect(command: Command, actor: Actor, ctx) -> HandlerResult:
    query = command.text.strip()
    if not query:
        raise ValidationError("Describe the skills you need.", CONNECT_USAGE)

    ranked = await ctx.directory.rank_connections(
        query, exclude=actor.id, limit=int(ctx.setting("connect_limit", 3))
    )
    if not ranked:
        return HandlerResult.ok(f"🤝 No connections found for '{query}'. Try /find.", matches=[])

    lines = [f"🤝 Suggested connections for '{query}':"]
    lines.extend(f"  {profile_line(p, score)}" for p, score in ranked)
    lines.append("Reach out with /message @name <text>.")
    return HandlerResult.ok(
        "\n".join(lines),
        matches=[p.id for p, _ in ranked],
        scores=[score for _, score in ranked],
    )
