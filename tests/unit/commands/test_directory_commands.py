import pytest

from oracle.errors import ErrorKind


@pytest.mark.asyncio
async def test_find_matches_skills(seeded, dispatcher, actors):
    result = await dispatcher.submit("/find python", actors["alice"])

    assert result.success
    assert result.data["matches"] == ["u-alice", "u-carol"]
    assert "Carol Diaz" in result.message


@pytest.mark.asyncio
async def test_find_matches_bio_and_name(seeded, dispatcher, actors):
    by_bio = await dispatcher.submit("/find machine learning", actors["gus"])
    by_name = await dispatcher.submit("/find maya", actors["gus"])

    assert by_bio.data["matches"] == ["u-carol"]
    assert by_name.data["matches"] == ["u-maya"]


@pytest.mark.asyncio
async def test_find_respects_limit(seeded, dispatcher, actors):
    dispatcher.context.settings["find_limit"] = 1

    result = await dispatcher.submit("/find python", actors["alice"])

    assert result.data["matches"] == ["u-alice"]


@pytest.mark.asyncio
async def test_find_nothing(seeded, dispatcher, actors):
    result = await dispatcher.submit("/find cobol", actors["alice"])

    assert result.success
    assert result.data["matches"] == []


@pytest.mark.asyncio
async def test_find_needs_query(seeded, dispatcher, actors):
    result = await dispatcher.submit("/find", actors["alice"])

    assert not result.success
    assert result.error == ErrorKind.VALIDATION


@pytest.mark.asyncio
async def test_connect_ranks_by_skill_overlap(seeded, dispatcher, actors):
    result = await dispatcher.submit("/connect python go react", actors["leo"])

    assert result.success
    assert result.data["matches"] == ["u-alice", "u-bob", "u-carol"]
    assert result.data["scores"] == [2.0, 1.0, 1.0]


@pytest.mark.asyncio
async def test_connect_excludes_caller(seeded, dispatcher, actors):
    result = await dispatcher.submit("/connect python ml", actors["alice"])

    assert result.data["matches"] == ["u-carol"]
    assert result.data["scores"] == [2.0]


@pytest.mark.asyncio
async def test_connect_bio_hit_is_half_point(seeded, dispatcher, actors):
    result = await dispatcher.submit("/connect founder", actors["alice"])

    assert result.data["matches"] == ["u-maya"]
    assert result.data["scores"] == [0.5]


@pytest.mark.asyncio
async def test_unassigned_can_search(seeded, dispatcher, actors):
    result = await dispatcher.submit("/find sales", actors["una"])

    assert result.success
    assert result.data["matches"] == ["u-maya"]
