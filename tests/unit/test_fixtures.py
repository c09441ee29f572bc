import pytest

from oracle.errors import ValidationError
from oracle.fixtures import load_fixture, read_fixture

COHORT = """
teams:
  - name: Alpha
    stage: Development
  - name: Gamma
profiles:
  - full_name: Ada Lovelace
    role: builder
    team: alpha
    skills: [python, ml]
  - full_name: Grace Hopper
    role: mentor
    skills: "cobol, compilers"
    bio: Rear admiral
  - full_name: Visitor
"""


@pytest.mark.asyncio
async def test_load_cohort(store, tmp_path):
    path = tmp_path / "cohort.yaml"
    path.write_text(COHORT)

    counts = await load_fixture(store, read_fixture(path))

    assert counts == {"teams": 2, "profiles": 3}
    teams = {t["name"]: t for t in await store.select("teams")}
    assert teams["Alpha"]["stage"] == "development"
    assert teams["Gamma"]["stage"] == "ideation"

    profiles = {p["full_name"]: p for p in await store.select("profiles")}
    assert profiles["Ada Lovelace"]["team_id"] == teams["Alpha"]["id"]
    assert profiles["Grace Hopper"]["skills"] == ["cobol", "compilers"]
    assert profiles["Visitor"]["role"] == "unassigned"


@pytest.mark.asyncio
async def test_reload_updates_in_place(store, tmp_path):
    path = tmp_path / "cohort.yaml"
    path.write_text(COHORT)
    await load_fixture(store, read_fixture(path))

    path.write_text(COHORT.replace("stage: Development", "stage: testing"))
    await load_fixture(store, read_fixture(path))

    teams = await store.select("teams")
    assert len(teams) == 2
    assert {t["name"]: t["stage"] for t in teams}["Alpha"] == "testing"
    assert len(await store.select("profiles")) == 3


@pytest.mark.asyncio
async def test_reload_keeps_created_at(store):
    data = {
        "teams": [{"name": "Alpha"}],
        "profiles": [{"full_name": "Ada Lovelace", "role": "builder", "team": "Alpha"}],
    }
    await load_fixture(store, data)
    joined = "2026-01-05T09:00:00.000000+00:00"
    team = (await store.select("teams"))[0]
    profile = (await store.select("profiles"))[0]
    await store.update("teams", team["id"], {"created_at": joined})
    await store.update("profiles", profile["id"], {"created_at": joined})

    await load_fixture(store, data)

    assert [t["created_at"] for t in await store.select("teams")] == [joined]
    assert [p["created_at"] for p in await store.select("profiles")] == [joined]


@pytest.mark.asyncio
async def test_team_may_reference_existing_row(seeded):
    await load_fixture(seeded, {"profiles": [{"full_name": "Newcomer", "role": "builder", "team": "Beta"}]})

    rows = await seeded.select("profiles", {"full_name": "Newcomer"})

    assert rows[0]["team_id"] == "t-beta"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data,message",
    [
        ({"teams": [{"stage": "ideation"}]}, "needs a name"),
        ({"teams": [{"name": "X", "stage": "orbit"}]}, "Unknown stage"),
        ({"profiles": [{"role": "builder"}]}, "needs a full_name"),
        ({"profiles": [{"full_name": "P", "role": "wizard"}]}, "Unknown role"),
        ({"profiles": [{"full_name": "P", "team": "Nowhere"}]}, "Unknown team"),
    ],
)
async def test_invalid_documents(store, data, message):
    with pytest.raises(ValidationError, match=message):
        await load_fixture(store, data)


def test_read_fixture_requires_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ValidationError):
        read_fixture(path)
