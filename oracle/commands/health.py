"""Deterministic team health scoring."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from oracle.lib.uuid7 import parse_timestamp, timestamp
from oracle.models import Team

HEALTHY_UPDATES_PER_WEEK = 3
STALE_AFTER_DAYS = 14
FULL_TEAM_SIZE = 3

ACTIVITY_WEIGHT = 50
FRESHNESS_WEIGHT = 30
STAFFING_WEIGHT = 20


def health_score(recent_updates: int, days_since_update: float | None, members: int) -> int:
    """0-100. A team that never posted an update counts as fully stale."""
    activity = min(1.0, recent_updates / HEALTHY_UPDATES_PER_WEEK)
    if days_since_update is None:
        staleness = 1.0
    else:
        staleness = min(1.0, max(0.0, days_since_update) / STALE_AFTER_DAYS)
    staffing = min(1.0, members / FULL_TEAM_SIZE)

    score = (
        100
        - ACTIVITY_WEIGHT * (1 - activity)
        - FRESHNESS_WEIGHT * staleness
        - STAFFING_WEIGHT * (1 - staffing)
    )
    return int(round(max(0.0, min(100.0, score))))


def label(score: int) -> str:
    if score >= 70:
        return "healthy"
    if score >= 40:
        return "needs attention"
    return "at risk"


@dataclass
class TeamHealth:
    team: Team
    score: int
    recent_updates: int
    days_since_update: float | None
    members: int

    @property
    def label(self) -> str:
        return label(self.score)


async def assess(store, team: Team, members: int, now: datetime) -> TeamHealth:
    week_ago = timestamp(now - timedelta(days=7))
    recent = await store.select("updates", {"team_id": team.id, "created_at__gte": week_ago})
    latest = await store.select(
        "updates", {"team_id": team.id}, order_by="created_at", desc=True, limit=1
    )
    days_since = None
    if latest:
        elapsed = now - parse_timestamp(latest[0]["created_at"])
        days_since = elapsed.total_seconds() / 86400

    return TeamHealth(
        team=team,
        score=health_score(len(recent), days_since, members),
        recent_updates=len(recent),
        days_since_update=days_since,
        members=members,
    )
