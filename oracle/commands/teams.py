"""Team lookups shared by the read-side handlers."""

from oracle.commands.permissions import authorize
from oracle.errors import AuthorizationError, NotFoundError, ValidationError
from oracle.lib.store import from_row
from oracle.models import Actor, Capability, Team, TeamStatus, Update


async def get_team(store, team_id: str) -> Team | None:
    rows = await store.select("teams", {"id": team_id}, limit=1)
    return from_row(rows[0], Team) if rows else None


async def all_teams(store) -> list[Team]:
    return [from_row(row, Team) for row in await store.select("teams", order_by="name")]


async def find_team(store, name: str) -> Team | None:
    """Case-insensitive name match, falling back to the team id."""
    needle = name.strip().lower()
    for team in await all_teams(store):
        if team.name.lower() == needle or team.id == name.strip():
            return team
    return None


async def get_status(store, team_id: str) -> TeamStatus | None:
    rows = await store.select("team_status", {"team_id": team_id}, limit=1)
    return from_row(rows[0], TeamStatus) if rows else None


async def latest_updates(store, team_id: str, limit: int = 5) -> list[Update]:
    rows = await store.select(
        "updates", {"team_id": team_id}, order_by="created_at", desc=True, limit=limit
    )
    return [from_row(row, Update) for row in rows]


async def resolve_team(store, actor: Actor, target: str, usage: str) -> Team:
    """Own team when ``target`` is empty; another team needs viewAllTeams."""
    target = target.strip()
    if not target:
        if not actor.team_id:
            raise ValidationError("No team assigned. Name a team or ask a lead to add you to one.", usage)
        team = await get_team(store, actor.team_id)
        if team is None:
            raise NotFoundError(f"Team not found: {actor.team_id}")
        return team

    team = await find_team(store, target)
    if team is None:
        raise NotFoundError(f"Team not found: {target}", usage)
    if team.id != actor.team_id and not authorize(actor.role, Capability.VIEW_ALL_TEAMS):
        raise AuthorizationError("Insufficient permission to view other teams.")
    return team
