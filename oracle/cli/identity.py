"""Identity resolution for CLI commands."""

import os

from oracle.lib.store import from_row
from oracle.models import Actor, Profile


def resolve_identity(explicit: str | None) -> str | None:
    """Resolve identity from explicit arg or ORACLE_IDENTITY env var."""
    return explicit or os.environ.get("ORACLE_IDENTITY")


async def require_actor(store, explicit: str | None) -> Actor:
    """Look up a profile by id or exact full name (case-insensitive)."""
    identity = resolve_identity(explicit)
    if not identity:
        raise ValueError("Identity required: use --as or set ORACLE_IDENTITY")

    rows = await store.select("profiles", {"id": identity}, limit=1)
    if not rows:
        rows = [
            row
            for row in await store.select("profiles")
            if row["full_name"].lower() == identity.lower()
        ]
    if len(rows) != 1:
        raise ValueError(f"Identity '{identity}' not registered.")
    return from_row(rows[0], Profile).as_actor()
