import asyncio
import random

import pytest

from branches.suggestions.errors import ConfigurationError, NotFoundError, PersistenceError, TooLongError, ValidationError
from branches.suggestions.models import Suggestion, Vote, VoteTally
from branches.suggestions.registry import SuggestionRegistry
from fakes import CHANNEL_ID, GUILD_ID

USER_A = 11
USER_B = 12


@pytest.mark.asyncio
async def test_submit_without_channel_fails(registry, platform):
    with pytest.raises(ConfigurationError):
        await registry.submit(GUILD_ID, USER_A, "add dark mode")

    record = await registry.get_config(GUILD_ID)
    assert record.suggestion_count == 0
    assert platform.sent == []


@pytest.mark.asyncio
async def test_submit_to_unresolvable_channel_fails(registry):
    async with registry.transaction(GUILD_ID) as record:
        record.channel_id = 424242

    with pytest.raises(ConfigurationError):
        await registry.submit(GUILD_ID, USER_A, "add dark mode")

    record = await registry.get_config(GUILD_ID)
    assert record.suggestion_count == 0
    assert record.suggestions == {}


@pytest.mark.asyncio
async def test_submit_rejects_short_text(configured):
    with pytest.raises(ValidationError):
        await configured.submit(GUILD_ID, USER_A, "  a \x00 ")


@pytest.mark.asyncio
async def test_three_submissions_are_numbered_in_order(configured, platform):
    created = [await configured.submit(GUILD_ID, USER_A, f"idea number {i}") for i in range(3)]

    assert [s.number for s in created] == [1, 2, 3]
    for suggestion in created:
        assert suggestion.votes == VoteTally(0, 0)
        assert suggestion.channel_id == CHANNEL_ID
        assert isinstance(platform.messages()[suggestion.id], Suggestion)

    record = await configured.get_config(GUILD_ID)
    assert record.suggestion_count == 3
    assert set(record.suggestions) == {s.id for s in created}


@pytest.mark.asyncio
async def test_numbers_are_not_reused_after_delete(configured):
    first = await configured.submit(GUILD_ID, USER_A, "first idea")
    second = await configured.submit(GUILD_ID, USER_A, "second idea")

    await configured.delete(GUILD_ID, second.id)
    await configured.delete(GUILD_ID, first.id)
    third = await configured.submit(GUILD_ID, USER_A, "third idea")

    assert third.number == 3


@pytest.mark.asyncio
async def test_delete_is_idempotent(configured):
    suggestion = await configured.submit(GUILD_ID, USER_A, "add dark mode")

    assert await configured.delete(GUILD_ID, suggestion.id) is True
    assert await configured.delete(GUILD_ID, suggestion.id) is False

    with pytest.raises(NotFoundError):
        await configured.get(GUILD_ID, suggestion.id)


@pytest.mark.asyncio
async def test_switching_vote_scenario(configured):
    suggestion = await configured.submit(GUILD_ID, USER_A, "add dark mode")

    await configured.cast_vote(GUILD_ID, suggestion.id, USER_A, Vote.YES)
    await configured.cast_vote(GUILD_ID, suggestion.id, USER_B, Vote.YES)
    tally = await configured.cast_vote(GUILD_ID, suggestion.id, USER_A, Vote.NO)

    assert tally == VoteTally(yes=1, no=1)
    stored = await configured.get(GUILD_ID, suggestion.id)
    assert stored.voters == {USER_A: Vote.NO, USER_B: Vote.YES}


@pytest.mark.asyncio
async def test_repeat_vote_retracts(configured):
    suggestion = await configured.submit(GUILD_ID, USER_A, "add dark mode")

    await configured.cast_vote(GUILD_ID, suggestion.id, USER_A, Vote.NO)
    tally = await configured.cast_vote(GUILD_ID, suggestion.id, USER_A, Vote.NO)

    assert tally == VoteTally(0, 0)
    assert (await configured.get(GUILD_ID, suggestion.id)).voters == {}


@pytest.mark.asyncio
async def test_vote_on_unknown_suggestion(configured):
    with pytest.raises(NotFoundError):
        await configured.cast_vote(GUILD_ID, 31337, USER_A, Vote.YES)


@pytest.mark.asyncio
async def test_random_vote_sequences_keep_one_vote_per_user(configured):
    suggestion = await configured.submit(GUILD_ID, USER_A, "add dark mode")
    rng = random.Random(1234)
    users = [USER_A, USER_B, 13, 14]

    for _ in range(60):
        user = rng.choice(users)
        choice = rng.choice([Vote.YES, Vote.NO])
        tally = await configured.cast_vote(GUILD_ID, suggestion.id, user, choice)

        stored = await configured.get(GUILD_ID, suggestion.id)
        assert tally == stored.votes
        assert stored.votes.yes == sum(1 for v in stored.voters.values() if v is Vote.YES)
        assert stored.votes.no == sum(1 for v in stored.voters.values() if v is Vote.NO)
        assert stored.votes.total == len(stored.voters)
        assert stored.votes.yes >= 0 and stored.votes.no >= 0


@pytest.mark.asyncio
async def test_concurrent_votes_are_not_lost(configured):
    suggestion = await configured.submit(GUILD_ID, USER_A, "add dark mode")

    await asyncio.gather(*(
        configured.cast_vote(GUILD_ID, suggestion.id, user_id, Vote.YES if user_id % 2 else Vote.NO)
        for user_id in range(20)
    ))

    stored = await configured.get(GUILD_ID, suggestion.id)
    assert stored.votes == VoteTally(yes=10, no=10)
    assert len(stored.voters) == 20


@pytest.mark.asyncio
async def test_state_survives_a_new_registry(configured, store, platform):
    suggestion = await configured.submit(GUILD_ID, USER_A, "add dark mode")
    await configured.cast_vote(GUILD_ID, suggestion.id, USER_B, Vote.YES)

    fresh = SuggestionRegistry(store, platform)
    stored = await fresh.get(GUILD_ID, suggestion.id)

    assert stored.number == 1
    assert stored.content == "add dark mode"
    assert stored.voters == {USER_B: Vote.YES}


@pytest.mark.asyncio
async def test_failed_save_discards_vote(configured, store, monkeypatch):
    suggestion = await configured.submit(GUILD_ID, USER_A, "add dark mode")

    async def broken_save(guild_id, record):
        raise PersistenceError("disk full")

    monkeypatch.setattr(store, "save", broken_save)

    with pytest.raises(PersistenceError):
        await configured.cast_vote(GUILD_ID, suggestion.id, USER_A, Vote.YES)

    stored = await configured.get(GUILD_ID, suggestion.id)
    assert stored.votes == VoteTally(0, 0)
    assert stored.voters == {}


@pytest.mark.asyncio
async def test_failed_save_removes_posted_suggestion(configured, store, platform, monkeypatch):
    async def broken_save(guild_id, record):
        raise PersistenceError("disk full")

    monkeypatch.setattr(store, "save", broken_save)

    with pytest.raises(PersistenceError):
        await configured.submit(GUILD_ID, USER_A, "add dark mode")

    assert platform.messages() == {}
    record = await configured.get_config(GUILD_ID)
    assert record.suggestion_count == 0
    assert record.suggestions == {}


@pytest.mark.asyncio
async def test_get_config_returns_a_snapshot(configured):
    snapshot = await configured.get_config(GUILD_ID)
    snapshot.channel_id = None

    assert (await configured.get_config(GUILD_ID)).channel_id == CHANNEL_ID


@pytest.mark.asyncio
async def test_default_settings_accept_short_text(store, platform):
    registry = SuggestionRegistry(store, platform)
    async with registry.transaction(GUILD_ID) as record:
        record.channel_id = CHANNEL_ID

    created = await registry.submit(GUILD_ID, USER_A, "dark mode")

    assert created.content == "dark mode"
    with pytest.raises(ValidationError):
        await registry.submit(GUILD_ID, USER_A, "   ")


@pytest.mark.asyncio
async def test_long_text_is_rejected_not_truncated(store, platform):
    registry = SuggestionRegistry(store, platform)
    async with registry.transaction(GUILD_ID) as record:
        record.channel_id = CHANNEL_ID

    with pytest.raises(TooLongError):
        await registry.submit(GUILD_ID, USER_A, "x" * 5000)
    assert platform.sent == []

    text = "y" * registry.max_length
    created = await registry.submit(GUILD_ID, USER_A, text)
    assert created.content == text


@pytest.mark.asyncio
async def test_configured_max_length_is_enforced(configured, platform):
    with pytest.raises(TooLongError):
        await configured.submit(GUILD_ID, USER_A, "z" * (configured.max_length + 1))

    assert (await configured.get_config(GUILD_ID)).suggestion_count == 0
    assert platform.sent == []


@pytest.mark.asyncio
async def test_get_returns_a_copy_of_one_suggestion(configured):
    suggestion = await configured.submit(GUILD_ID, USER_A, "add dark mode")

    fetched = await configured.get(GUILD_ID, suggestion.id)
    fetched.voters[USER_B] = Vote.YES
    fetched.votes.yes = 5

    stored = await configured.get(GUILD_ID, suggestion.id)
    assert stored.voters == {}
    assert stored.votes == VoteTally(0, 0)


@pytest.mark.asyncio
async def test_channel_and_reminder_accessors(configured, registry):
    assert await configured.channel_for(GUILD_ID) == CHANNEL_ID
    assert await configured.reminder_for(GUILD_ID) == (CHANNEL_ID, None)
    assert await registry.channel_for(424242) is None
