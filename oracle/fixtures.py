"""Load teams and profiles from a YAML document.

    teams:
      - name: Alpha
        stage: development
    profiles:
      - full_name: Ada Lovelace
        role: builder
        team: Alpha
        skills: [python, ml]

``team`` may name a team from the same document or an existing team; ``team_id``
is used as-is. Records are matched by ``id``, then by name; unmatched ones get a new id.
"""

import logging
from pathlib import Path

import yaml

from oracle.errors import ValidationError
from oracle.models import Role, TeamStage

logger = logging.getLogger(__name__)


def read_fixture(path: Path | str) -> dict:
    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValidationError(f"{path}: not valid YAML") from e
    if not isinstance(data, dict):
        raise ValidationError(f"{path}: expected a mapping with 'teams' and/or 'profiles'")
    return data


def _team_record(raw: dict) -> dict:
    if not raw.get("name"):
        raise ValidationError("Every team needs a name")
    stage = str(raw.get("stage") or TeamStage.IDEATION.value).lower()
    if stage not in {s.value for s in TeamStage}:
        raise ValidationError(f"Unknown stage '{stage}' for team {raw['name']}")
    record = {"name": raw["name"], "stage": stage, "description": raw.get("description")}
    if raw.get("id"):
        record["id"] = str(raw["id"])
    return record


def _profile_record(raw: dict, team_ids: dict[str, str]) -> dict:
    if not raw.get("full_name"):
        raise ValidationError("Every profile needs a full_name")
    role = Role.parse(raw.get("role") or Role.UNASSIGNED.value)
    if role is None:
        raise ValidationError(f"Unknown role '{raw.get('role')}' for {raw['full_name']}")

    team_id = raw.get("team_id")
    if raw.get("team"):
        team_id = team_ids.get(str(raw["team"]).lower())
        if team_id is None:
            raise ValidationError(f"Unknown team '{raw['team']}' for {raw['full_name']}")

    skills = raw.get("skills") or []
    if isinstance(skills, str):
        skills = [s.strip() for s in skills.split(",") if s.strip()]
    record = {
        "full_name": raw["full_name"],
        "role": role.value,
        "team_id": team_id,
        "skills": [str(s) for s in skills],
        "bio": raw.get("bio"),
    }
    if raw.get("id"):
        record["id"] = str(raw["id"])
    return record


def _keep_created_at(record: dict, created: dict[str, str]) -> None:
    if record.get("id") in created:
        record["created_at"] = created[record["id"]]


async def load_fixture(store, data: dict) -> dict[str, int]:
    """Upsert teams, then profiles. Reloaded records keep their original created_at."""
    existing_teams = await store.select("teams")
    team_ids = {row["name"].lower(): row["id"] for row in existing_teams}
    created = {row["id"]: row["created_at"] for row in existing_teams}
    teams = [_team_record(raw) for raw in data.get("teams") or []]
    for record in teams:
        record.setdefault("id", team_ids.get(record["name"].lower()))
        _keep_created_at(record, created)
        saved = await store.upsert("teams", record)
        team_ids[saved["name"].lower()] = saved["id"]

    profiles = [_profile_record(raw, team_ids) for raw in data.get("profiles") or []]
    existing_profiles = await store.select("profiles")
    profile_ids = {row["full_name"].lower(): row["id"] for row in existing_profiles}
    created = {row["id"]: row["created_at"] for row in existing_profiles}
    for record in profiles:
        record.setdefault("id", profile_ids.get(record["full_name"].lower()))
        _keep_created_at(record, created)
        await store.upsert("profiles", record)

    logger.info(f"Loaded {len(teams)} teams and {len(profiles)} profiles")
    return {"teams": len(teams), "profiles": len(profiles)}
