import pytest

from oracle.errors import ErrorKind, StoreError


@pytest.mark.asyncio
async def test_update_logs_progress_and_status(seeded, dispatcher, actors):
    result = await dispatcher.submit('/update "Completed login flow"', actors["alice"])

    assert result.success
    updates = await seeded.select("updates")
    assert len(updates) == 1
    assert updates[0]["team_id"] == "t-alpha"
    assert updates[0]["content"] == "Completed login flow"
    assert updates[0]["type"] == "daily"
    assert updates[0]["created_by"] == "u-alice"

    status = await seeded.select("team_status", {"team_id": "t-alpha"})
    assert status[0]["current_status"] == "Completed login flow"
    assert status[0]["last_update"] == updates[0]["created_at"]
    assert result.written("updates") == [updates[0]["id"]]


@pytest.mark.asyncio
async def test_status_summary_is_truncated(seeded, dispatcher, actors):
    content = "x" * 250

    await dispatcher.submit(f"/update {content}", actors["bob"])

    status = await seeded.select("team_status", {"team_id": "t-alpha"})
    assert status[0]["current_status"] == "x" * 200
    updates = await seeded.select("updates")
    assert updates[0]["content"] == content


@pytest.mark.asyncio
async def test_retry_creates_new_record(seeded, dispatcher, actors):
    first = await dispatcher.submit('/update "shipped v1"', actors["alice"])
    second = await dispatcher.submit('/update "shipped v1"', actors["alice"])

    assert first.success and second.success
    updates = await seeded.select("updates", {"team_id": "t-alpha", "content": "shipped v1"})
    assert len(updates) == 2


@pytest.mark.asyncio
async def test_status_is_last_write_wins(seeded, dispatcher, actors):
    await dispatcher.submit("/update first", actors["alice"])
    await dispatcher.submit("/update second", actors["bob"])

    status = await seeded.select("team_status")
    assert len(status) == 1
    assert status[0]["current_status"] == "second"


@pytest.mark.asyncio
async def test_update_requires_team(seeded, dispatcher, actors):
    result = await dispatcher.submit("/update mentoring notes", actors["maya"])

    assert not result.success
    assert result.error == ErrorKind.VALIDATION
    assert "no team" in result.message.lower()
    assert await seeded.select("updates") == []


@pytest.mark.asyncio
async def test_update_requires_text(seeded, dispatcher, actors):
    result = await dispatcher.submit('/update ""', actors["alice"])

    assert not result.success
    assert result.usage == "/update <text>"
    assert await seeded.select("updates") == []


@pytest.mark.asyncio
async def test_status_failure_keeps_update(seeded, dispatcher, actors, monkeypatch):
    async def broken_upsert(*args, **kwargs):
        raise StoreError("locked")

    monkeypatch.setattr(seeded, "upsert", broken_upsert)

    result = await dispatcher.submit("/update payments integrated", actors["alice"])

    assert result.success
    assert "could not be refreshed" in result.message
    assert len(await seeded.select("updates")) == 1
    assert await seeded.select("team_status") == []
    assert result.written("team_status") == []


@pytest.mark.asyncio
async def test_natural_language_update(seeded, dispatcher, actors):
    result = await dispatcher.submit("log progress: wired up stripe", actors["bob"])

    assert result.success
    updates = await seeded.select("updates")
    assert [u["content"] for u in updates] == ["wired up stripe"]
