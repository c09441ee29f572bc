import asyncio
from datetime import timedelta

import pytest

from oracle import inbox
from oracle.lib.uuid7 import timestamp


async def _send(store, receiver_id, content, **extra):
    record = {
        "sender_id": "u-leo",
        "sender_role": "lead",
        "receiver_id": receiver_id,
        "receiver_role": "builder",
        "content": content,
        **extra,
    }
    return await store.insert("messages", record)


@pytest.mark.asyncio
async def test_unread_lists_direct_messages_oldest_first(seeded, actors):
    await _send(seeded, "u-alice", "first")
    await _send(seeded, "u-bob", "not yours")
    await _send(seeded, None, "team broadcast", team_id="t-alpha")
    await _send(seeded, "u-alice", "second")

    messages = await inbox.unread(seeded, actors["alice"])

    assert [m.content for m in messages] == ["first", "second"]


@pytest.mark.asyncio
async def test_mark_read_sets_receipt_once(seeded, actors, now):
    sent = await _send(seeded, "u-alice", "hello")

    first = await inbox.mark_read(seeded, [sent["id"]], now)
    second = await inbox.mark_read(seeded, [sent["id"]], now + timedelta(hours=1))

    assert first == [sent["id"]]
    assert second == []
    rows = await seeded.select("messages", {"id": sent["id"]})
    assert rows[0]["read_at"] == "2026-03-02T12:00:00.000000+00:00"


@pytest.mark.asyncio
async def test_read_messages_leave_unread_view(seeded, actors, now):
    read = await _send(seeded, "u-alice", "old news")
    await _send(seeded, "u-alice", "fresh")
    await inbox.mark_read(seeded, [read["id"]], now)

    unread = await inbox.unread(seeded, actors["alice"])
    everything = await inbox.messages_for(seeded, actors["alice"], include_read=True)

    assert [m.content for m in unread] == ["fresh"]
    assert [m.content for m in everything] == ["old news", "fresh"]


@pytest.mark.asyncio
async def test_mark_read_ignores_unknown_ids(seeded):
    assert await inbox.mark_read(seeded, ["missing"]) == []


@pytest.mark.asyncio
async def test_concurrent_mark_read_keeps_one_receipt(seeded, now):
    sent = await _send(seeded, "u-alice", "hello")
    later = now + timedelta(hours=1)

    results = await asyncio.gather(
        inbox.mark_read(seeded, [sent["id"]], now),
        inbox.mark_read(seeded, [sent["id"]], later),
    )

    winners = [stamp for stamp, marked in zip((now, later), results) if marked]
    assert len(winners) == 1
    rows = await seeded.select("messages", {"id": sent["id"]})
    assert rows[0]["read_at"] == timestamp(winners[0])
