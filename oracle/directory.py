"""Known-actor directory: a bounded-staleness snapshot of the profiles collection."""

import asyncio
import logging
import time
from collections.abc import Callable

from oracle.errors import NotFoundError
from oracle.lib import config
from oracle.lib.store import from_row
from oracle.models import Profile

logger = logging.getLogger(__name__)


def _contains_either_way(needle: str, value: str | None) -> bool:
    if not needle or not value:
        return False
    value = value.lower()
    return needle in value or value in needle


class Directory:
    """Read-through cache over `profiles`.

    The snapshot is reloaded when older than ``ttl`` seconds or on ``refresh()``.
    Concurrent misses share one reload.
    """

    def __init__(self, store, ttl: float | None = None, clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.ttl = float(config.get("directory_ttl_seconds", 60) if ttl is None else ttl)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._profiles: list[Profile] = []
        self._loaded_at: float | None = None
        self.loads = 0

    def _fresh(self) -> bool:
        return self._loaded_at is not None and self._clock() - self._loaded_at < self.ttl

    async def _load(self) -> None:
        rows = await self.store.select("profiles", order_by="full_name")
        self._profiles = [from_row(row, Profile) for row in rows]
        self._loaded_at = self._clock()
        self.loads += 1
        logger.debug(f"Directory loaded {len(self._profiles)} profiles")

    async def actors(self) -> list[Profile]:
        if not self._fresh():
            async with self._lock:
                if not self._fresh():
                    await self._load()
        return list(self._profiles)

    async def refresh(self) -> list[Profile]:
        async with self._lock:
            await self._load()
        return list(self._profiles)

    def invalidate(self) -> None:
        self._loaded_at = None

    async def get(self, actor_id: str) -> Profile | None:
        for profile in await self.actors():
            if profile.id == actor_id:
                return profile
        return None

    async def team_members(self, team_id: str) -> list[Profile]:
        return [p for p in await self.actors() if p.team_id == team_id]

    async def resolve_mention(self, mention: str) -> Profile:
        """Resolve ``@name`` to exactly one profile.

        An exact full-name match wins; otherwise the name must be a substring of
        exactly one profile's full name. Zero or several candidates is NotFound.
        """
        name = mention.lstrip("@").strip()
        needle = name.lower()
        if needle:
            profiles = await self.actors()
            exact = [p for p in profiles if p.full_name.lower() == needle]
            if len(exact) == 1:
                return exact[0]
            partial = [p for p in profiles if needle in p.full_name.lower()]
            if len(partial) == 1:
                return partial[0]
            if partial:
                logger.info(f"Ambiguous mention @{name}: {len(partial)} candidates")
        raise NotFoundError(f"User not found: {name or mention}. Try /find {name}".rstrip())

    async def search(self, query: str, limit: int | None = None) -> list[Profile]:
        """Profiles whose name, skills or bio overlap the query in either direction."""
        needle = query.strip().lower()
        matches = [
            p
            for p in await self.actors()
            if _contains_either_way(needle, p.full_name)
            or _contains_either_way(needle, p.bio)
            or any(_contains_either_way(needle, skill) for skill in p.skills)
        ]
        return matches[:limit] if limit is not None else matches

    async def rank_connections(
        self, query: str, exclude: str | None = None, limit: int | None = None
    ) -> list[tuple[Profile, float]]:
        """Rank by skill overlap: one point per matching skill, half a point for a bio hit."""
        terms = [term for term in query.lower().split() if term]
        ranked: list[tuple[Profile, float]] = []
        for profile in await self.actors():
            if profile.id == exclude:
                continue
            score = float(
                sum(1 for skill in profile.skills if any(_contains_either_way(t, skill) for t in terms))
            )
            if profile.bio and any(t in profile.bio.lower() for t in terms):
                score += 0.5
            if score > 0:
                ranked.append((profile, score))
        ranked.sort(key=lambda pair: (-pair[1], pair[0].full_name.lower()))
        return ranked[:limit] if limit is not None else ranked
