import json

import aiosqlite
import pytest

from branches.suggestions.errors import PersistenceError
from branches.suggestions.models import GuildConfig, Suggestion, SuggestionStatus, Vote, VoteTally
from branches.suggestions.store import SuggestionStore


def make_record():
    record = GuildConfig(guild_id=1, channel_id=100, sticky_message_id=555, suggestion_count=2)
    record.suggestions[10] = Suggestion(
        id=10, number=1, author_id=7, channel_id=100, content="add dark mode",
        votes=VoteTally(1, 1), voters={11: Vote.YES, 12: Vote.NO},
    )
    record.suggestions[20] = Suggestion(
        id=20, number=2, author_id=8, channel_id=100, content="more emojis",
        status=SuggestionStatus.APPROVED,
    )
    return record


@pytest.mark.asyncio
async def test_unknown_guild_loads_empty_record(store):
    record = await store.load(42)

    assert record == GuildConfig(guild_id=42)
    assert not record.enabled


@pytest.mark.asyncio
async def test_save_and_load(store):
    record = make_record()

    await store.save(1, record)
    loaded = await store.load(1)

    assert loaded == record


@pytest.mark.asyncio
async def test_save_replaces_deleted_suggestions(store):
    record = make_record()
    await store.save(1, record)

    del record.suggestions[10]
    record.disable()
    await store.save(1, record)

    loaded = await store.load(1)
    assert list(loaded.suggestions) == [20]
    assert loaded.channel_id is None
    assert loaded.sticky_message_id is None
    assert loaded.suggestion_count == 2


@pytest.mark.asyncio
async def test_guilds_are_isolated(store):
    await store.save(1, make_record())
    await store.save(2, GuildConfig(guild_id=2, channel_id=300))

    assert (await store.load(2)).suggestions == {}
    assert len((await store.load(1)).suggestions) == 2


@pytest.mark.asyncio
async def test_inconsistent_tally_is_rebuilt_on_load(store):
    await store.save(1, make_record())

    async with aiosqlite.connect(store.db_path) as db:
        await db.execute(
            "UPDATE suggestions SET yes_votes = 9, no_votes = 0, voters = ? WHERE message_id = 10",
            (json.dumps({"11": "yes", "12": "yes", "13": "no"}),)
        )
        await db.commit()

    loaded = await store.load(1)
    assert loaded.suggestions[10].votes == VoteTally(2, 1)


@pytest.mark.asyncio
async def test_failed_save_keeps_previous_state(store):
    record = make_record()
    await store.save(1, record)

    # Two suggestions with the same number violate UNIQUE (guild_id, number)
    broken = record.copy()
    broken.suggestions[30] = Suggestion(id=30, number=1, author_id=9, channel_id=100, content="duplicate")
    broken.suggestion_count = 3

    with pytest.raises(PersistenceError):
        await store.save(1, broken)

    assert await store.load(1) == record


@pytest.mark.asyncio
async def test_uninitialized_database_raises_persistence_error(tmp_path):
    store = SuggestionStore(str(tmp_path / "missing" / "data.db"))

    with pytest.raises(PersistenceError):
        await store.load(1)
    with pytest.raises(PersistenceError):
        await store.save(1, GuildConfig(guild_id=1))
