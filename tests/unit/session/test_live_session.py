import pytest

from oracle.models import Message, Origin
from oracle.realtime import LocalTransport
from oracle.session import Session


@pytest.fixture
def transport(seeded):
    transport = LocalTransport()
    detach = transport.attach(seeded)
    yield transport
    detach()


def _realtime(session):
    return [e for e in session.transcript if e.origin == Origin.REALTIME]


@pytest.mark.asyncio
async def test_direct_message_reaches_recipient_session(dispatcher, actors, transport):
    async with Session(dispatcher, actors["alice"], transport) as alice:
        async with Session(dispatcher, actors["bob"], transport) as bob:
            await bob.submit('/message @alice "lunch?"')

    assert [e.content for e in _realtime(alice)] == ["lunch?"]
    assert _realtime(bob) == []


@pytest.mark.asyncio
async def test_own_writes_are_not_echoed(dispatcher, actors, transport):
    async with Session(dispatcher, actors["alice"], transport) as alice:
        result = await alice.submit("/chat standup in 5")

    assert result.success
    assert [e.origin for e in alice.transcript] == [Origin.USER, Origin.HANDLER]
    assert all(alice.transcript.seen(i) for i in result.written("messages"))


@pytest.mark.asyncio
async def test_same_user_from_another_terminal_is_shown(seeded, dispatcher, actors, transport):
    async with Session(dispatcher, actors["alice"], transport) as alice:
        await alice.submit("/chat from the laptop")
        await seeded.insert(
            "messages",
            {
                "sender_id": "u-alice",
                "sender_role": "builder",
                "receiver_role": "builder",
                "team_id": "t-alpha",
                "content": "from the phone",
            },
        )

    assert [e.content for e in _realtime(alice)] == ["from the phone"]


@pytest.mark.asyncio
async def test_overlapping_subscriptions_render_once(dispatcher, actors, transport):
    async with Session(dispatcher, actors["bob"], transport) as bob:
        async with Session(dispatcher, actors["alice"], transport) as alice:
            await alice.submit("/chat standup in 5")

    assert [e.content for e in _realtime(bob)] == ["standup in 5"]
    assert _realtime(bob)[0].metadata["direct"] is False


@pytest.mark.asyncio
async def test_other_team_chat_is_not_delivered_to_mentor(dispatcher, actors, transport):
    async with Session(dispatcher, actors["maya"], transport) as maya:
        async with Session(dispatcher, actors["carol"], transport) as carol:
            await carol.submit("/chat beta only")

    assert _realtime(maya) == []


@pytest.mark.asyncio
async def test_role_message_reaches_every_mentor(dispatcher, actors, transport):
    async with Session(dispatcher, actors["maya"], transport) as maya:
        async with Session(dispatcher, actors["alice"], transport) as alice:
            await alice.submit("/message mentors office hours?")

    assert [e.content for e in _realtime(maya)] == ["office hours?"]


@pytest.mark.asyncio
async def test_mentor_request_reaches_mentor_not_team(dispatcher, actors, transport):
    async with Session(dispatcher, actors["maya"], transport) as maya:
        async with Session(dispatcher, actors["bob"], transport) as bob:
            async with Session(dispatcher, actors["alice"], transport) as alice:
                await alice.submit("/chat --mentor pricing help?")

    assert [e.content for e in _realtime(maya)] == ["[REQUEST] pricing help?"]
    assert _realtime(bob) == []


@pytest.mark.asyncio
async def test_presence_notices(dispatcher, actors, transport):
    async with Session(dispatcher, actors["alice"], transport) as alice:
        async with Session(dispatcher, actors["leo"], transport) as leo:
            assert leo.presence.online_count == 2
        assert alice.presence.online_count == 1

    notices = [e.content for e in alice.transcript if e.origin == Origin.SYSTEM]
    assert notices == ["lead u-leo is online", "lead u-leo went offline"]


@pytest.mark.asyncio
async def test_two_terminals_for_one_user_count_once(dispatcher, actors, transport):
    async with Session(dispatcher, actors["alice"], transport) as alice:
        async with Session(dispatcher, actors["leo"], transport):
            async with Session(dispatcher, actors["leo"], transport):
                assert alice.presence.online_count == 2
            assert alice.presence.online_count == 2

    notices = [e.content for e in alice.transcript if e.origin == Origin.SYSTEM]
    assert notices == ["lead u-leo is online", "lead u-leo went offline"]


@pytest.mark.asyncio
async def test_close_releases_everything(dispatcher, actors, transport):
    session = Session(dispatcher, actors["alice"], transport).open()
    subscriptions = list(session.subscriptions)

    session.close()
    session.close()

    assert not session.is_open
    assert not any(s.active for s in subscriptions)
    assert transport.presence_state("oracle") == {}


@pytest.mark.asyncio
async def test_consume_folds_event_stream(dispatcher, actors, transport):
    session = Session(dispatcher, actors["alice"], transport)

    async def events():
        for message_id in ("m1", "m1", "m2"):
            yield Message(
                id=message_id,
                sender_id="u-leo",
                sender_role="lead",
                receiver_role="builder",
                content=f"note {message_id}",
                created_at="2026-03-02T12:00:00.000000+00:00",
            )

    await session.consume(events())

    assert [e.content for e in session.transcript] == ["note m1", "note m2"]


@pytest.mark.asyncio
async def test_failed_command_is_recorded(dispatcher, actors, transport):
    session = Session(dispatcher, actors["gus"], transport)

    result = await session.submit("/update nope")

    assert not result.success
    assert session.transcript.entries[-1].metadata["success"] is False
