"""
Suggestions Registry
In-memory view of every guild's suggestions, backed by the store.

All mutations go through transaction(), which holds a per-guild lock, hands
out a copy of the guild record and only swaps it in once the store has
accepted it.
"""

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Tuple

from constants import SUGGESTION_MAX_LENGTH
from utils import sanitize_text
from .adapter import MessagePlatform
from .errors import ConfigurationError, NotFoundError, PersistenceError, StateError, TooLongError, ValidationError
from .models import GuildConfig, Suggestion, Vote, VoteTally
from .store import SuggestionStore

logger = logging.getLogger(__name__)


class SuggestionRegistry:
    """Creates suggestions and applies votes to them."""

    def __init__(
        self,
        store: SuggestionStore,
        platform: MessagePlatform,
        min_length: int = 1,
        max_length: int = SUGGESTION_MAX_LENGTH,
    ):
        self.store = store
        self.platform = platform
        self.min_length = min_length
        self.max_length = max_length

        self._records: Dict[int, GuildConfig] = {}
        self._locks: Dict[int, asyncio.Lock] = {}

    def _lock_for(self, guild_id: int) -> asyncio.Lock:
        lock = self._locks.get(guild_id)
        if lock is None:
            lock = self._locks[guild_id] = asyncio.Lock()
        return lock

    async def _load(self, guild_id: int) -> GuildConfig:
        record = self._records.get(guild_id)
        if record is None:
            record = self._records[guild_id] = await self.store.load(guild_id)
        return record

    @asynccontextmanager
    async def transaction(self, guild_id: int) -> AsyncIterator[GuildConfig]:
        """
        Guild-level critical section: load, mutate, save.

        Usage:
            async with registry.transaction(guild_id) as record:
                record.suggestion_count += 1

        If the block raises, or the store rejects the save, the cached record
        is left untouched and the exception propagates.
        """
        async with self._lock_for(guild_id):
            working = (await self._load(guild_id)).copy()
            yield working
            await self.store.save(guild_id, working)
            self._records[guild_id] = working

    async def get_config(self, guild_id: int) -> GuildConfig:
        """Snapshot of a guild's record for read-only use."""
        return (await self._load(guild_id)).copy()

    async def channel_for(self, guild_id: int) -> Optional[int]:
        """The guild's suggestion channel, or None when disabled."""
        return (await self._load(guild_id)).channel_id

    async def reminder_for(self, guild_id: int) -> Tuple[Optional[int], Optional[int]]:
        """(channel_id, sticky_message_id) of the guild's reminder."""
        record = await self._load(guild_id)
        return record.channel_id, record.sticky_message_id

    async def get(self, guild_id: int, suggestion_id: int) -> Suggestion:
        """Copy of one suggestion. Raises NotFoundError if it doesn't exist."""
        suggestion = (await self._load(guild_id)).suggestions.get(suggestion_id)
        if suggestion is None:
            raise NotFoundError(f"Suggestion {suggestion_id} not found in guild {guild_id}")
        return copy.deepcopy(suggestion)

    async def submit(self, guild_id: int, author_id: int, text: str) -> Suggestion:
        """
        Create a new suggestion in the guild's suggestion channel.

        Args:
            guild_id: Guild the suggestion belongs to
            author_id: User submitting the suggestion
            text: Raw suggestion text

        Returns:
            The created suggestion (id is the id of its message)

        Raises:
            ValidationError: Text is empty or shorter than min_length
            TooLongError: Text is longer than max_length (never truncated)
            ConfigurationError: No channel configured, or it can't be resolved
        """
        content = sanitize_text(text, max_length=len(text or ""))
        if len(content) < max(self.min_length, 1):
            raise ValidationError(f"Suggestion must be at least {self.min_length} characters")
        if len(content) > self.max_length:
            raise TooLongError(f"Suggestion is {len(content)} characters, the limit is {self.max_length}")

        posted: Optional[tuple] = None
        try:
            async with self.transaction(guild_id) as record:
                if record.channel_id is None:
                    raise ConfigurationError(f"No suggestion channel configured for guild {guild_id}")

                suggestion = Suggestion(
                    id=0,
                    number=record.next_number(),
                    author_id=author_id,
                    channel_id=record.channel_id,
                    content=content,
                )
                suggestion.id = await self.platform.send_message(record.channel_id, suggestion)
                posted = (record.channel_id, suggestion.id)
                record.suggestions[suggestion.id] = suggestion
        except PersistenceError:
            # Don't leave a rendered suggestion that the store doesn't know about
            if posted is not None:
                await self.platform.delete_message(*posted)
            raise

        logger.info(f"Suggestion #{suggestion.number} ({suggestion.id}) submitted by {author_id} in guild {guild_id}")
        return suggestion

    async def cast_vote(self, guild_id: int, suggestion_id: int, user_id: int, choice: Vote) -> VoteTally:
        """
        Toggle a user's vote on a suggestion.

        Raises:
            NotFoundError: Unknown suggestion (deleted or stale message)
            StateError: Suggestion has been approved or denied
        """
        async with self.transaction(guild_id) as record:
            suggestion = record.suggestions.get(suggestion_id)
            if suggestion is None:
                raise NotFoundError(f"Suggestion {suggestion_id} not found in guild {guild_id}")
            if not suggestion.is_open:
                raise StateError(f"Suggestion #{suggestion.number} is {suggestion.status.value}")

            tally = suggestion.toggle_vote(user_id, choice)

        logger.debug(f"Vote {choice.value} by {user_id} on #{suggestion.number}: {tally.yes}/{tally.no}")
        return tally

    async def delete(self, guild_id: int, suggestion_id: int) -> bool:
        """
        Remove a suggestion record. Deleting an unknown id is a no-op.

        Returns:
            True if a record was removed
        """
        if suggestion_id not in (await self._load(guild_id)).suggestions:
            return False

        async with self.transaction(guild_id) as record:
            removed = record.suggestions.pop(suggestion_id, None)

        if removed is not None:
            logger.info(f"Suggestion #{removed.number} ({suggestion_id}) deleted in guild {guild_id}")
        return removed is not None
