import os
from datetime import datetime, timezone

import pytest
import pytest_asyncio

from oracle.commands.dispatcher import CommandContext, Dispatcher
from oracle.directory import Directory
from oracle.inference import Answer
from oracle.lib import config
from oracle.lib.store import SqliteStore
from oracle.models import Actor, Role

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)

TEAMS = [
    {"id": "t-alpha", "name": "Alpha", "stage": "development", "description": "Scheduling for clinics"},
    {"id": "t-beta", "name": "Beta", "stage": "ideation", "description": None},
]

PROFILES = [
    {
        "id": "u-alice",
        "full_name": "Alice Chen",
        "role": "builder",
        "team_id": "t-alpha",
        "skills": ["react", "python"],
        "bio": "Frontend engineer",
    },
    {
        "id": "u-bob",
        "full_name": "Bob Stone",
        "role": "builder",
        "team_id": "t-alpha",
        "skills": ["go", "postgres"],
        "bio": None,
    },
    {
        "id": "u-carol",
        "full_name": "Carol Diaz",
        "role": "builder",
        "team_id": "t-beta",
        "skills": ["python", "ml"],
        "bio": "Data science and machine learning",
    },
    {
        "id": "u-maya",
        "full_name": "Maya Patel",
        "role": "mentor",
        "team_id": None,
        "skills": ["fundraising", "sales"],
        "bio": "Former founder, two exits",
    },
    {"id": "u-leo", "full_name": "Leo Park", "role": "lead", "team_id": "t-alpha", "skills": ["operations"]},
    {"id": "u-gus", "full_name": "Gus Visitor", "role": "guest", "team_id": None, "skills": []},
    {"id": "u-una", "full_name": "Una Waiting", "role": "unassigned", "team_id": None, "skills": []},
]


class FakeInference:
    """Records calls; raises ``error`` when set."""

    def __init__(self, text: str = "Here is what I found.", resources=None, error: Exception | None = None):
        self.text = text
        self.resources = resources or []
        self.error = error
        self.calls = []

    async def answer(self, query, role, context):
        self.calls.append((query, role, context))
        if self.error:
            raise self.error
        return Answer(self.text, list(self.resources), 0.9)


@pytest.fixture(autouse=True)
def oracle_home(monkeypatch, tmp_path):
    """Isolated ORACLE_HOME and a fresh config cache per test."""
    home = tmp_path / "oracle-home"
    for key in list(os.environ):
        if key.startswith("ORACLE_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("ORACLE_HOME", str(home))
    config.clear_cache()
    yield home
    config.clear_cache()


@pytest.fixture
def store(tmp_path):
    s = SqliteStore(tmp_path / "test.db")
    yield s
    s.close()


@pytest_asyncio.fixture
async def seeded(store):
    await store.insert_many("teams", TEAMS)
    await store.insert_many("profiles", PROFILES)
    return store


@pytest.fixture
def actors() -> dict[str, Actor]:
    return {
        p["id"].removeprefix("u-"): Actor(
            id=p["id"], role=Role(p["role"]), team_id=p["team_id"], name=p["full_name"]
        )
        for p in PROFILES
    }


@pytest.fixture
def inference():
    return FakeInference()


@pytest.fixture
def context(store, inference):
    return CommandContext(
        store=store,
        directory=Directory(store, ttl=60),
        inference=inference,
        clock=lambda: NOW,
        settings=dict(config.load_config()),
    )


@pytest.fixture
def dispatcher(context):
    return Dispatcher(context)


@pytest.fixture
def now() -> datetime:
    return NOW
