"""
Suggestions Sticky Reminder
Keeps a single "how to suggest" message at the bottom of the suggestion channel.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from .adapter import MessagePlatform
from .errors import PersistenceError
from .registry import SuggestionRegistry

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 5.0


@dataclass
class ChannelStickyState:
    """Process-local repost bookkeeping for one channel."""
    last_repost: Optional[float] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class StickyReminderManager:
    """
    Reposts the reminder whenever channel activity would bury it.

    Reposts are debounced per channel, and a per-channel lock ensures that
    concurrent triggers never create two reminders. Only the reminder's
    message id is persisted; timestamps and locks live in this object.
    """

    def __init__(
        self,
        registry: SuggestionRegistry,
        platform: MessagePlatform,
        text: str,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        pin: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.registry = registry
        self.platform = platform
        self.text = text
        self.debounce_seconds = debounce_seconds
        self.pin = pin
        self.clock = clock

        self._channels: Dict[int, ChannelStickyState] = {}

    def state_for(self, channel_id: int) -> ChannelStickyState:
        state = self._channels.get(channel_id)
        if state is None:
            state = self._channels[channel_id] = ChannelStickyState()
        return state

    def is_debounced(self, channel_id: int) -> bool:
        last = self.state_for(channel_id).last_repost
        return last is not None and self.clock() - last < self.debounce_seconds

    async def _post_reminder(self, channel_id: int) -> int:
        message_id = await self.platform.send_message(channel_id, self.text)
        if self.pin:
            await self.platform.pin_message(channel_id, message_id)
        self.state_for(channel_id).last_repost = self.clock()
        return message_id

    async def _record(self, guild_id: int, channel_id: int, message_id: int) -> bool:
        """Persist a freshly posted reminder, deleting it if it can't be kept."""
        try:
            async with self.registry.transaction(guild_id) as record:
                # Channel was changed or disabled while we were posting
                if record.channel_id != channel_id:
                    stale = True
                else:
                    stale = False
                    record.sticky_message_id = message_id
        except PersistenceError:
            await self.platform.delete_message(channel_id, message_id)
            raise

        if stale:
            await self.platform.delete_message(channel_id, message_id)
            return False
        return True

    async def ensure(self, guild_id: int, channel_id: int) -> bool:
        """
        Make sure the reminder is the latest message in the channel.

        Called after every suggestion and every non-bot message in the
        suggestion channel.

        Returns:
            True if a reminder was posted
        """
        state = self.state_for(channel_id)
        if state.lock.locked():
            logger.debug(f"Reminder update already in progress for channel {channel_id}")
            return False

        async with state.lock:
            configured, previous = await self.registry.reminder_for(guild_id)
            if configured != channel_id:
                return False

            if previous is not None:
                if self.is_debounced(channel_id):
                    return False
                await self.platform.delete_message(channel_id, previous)

            message_id = await self._post_reminder(channel_id)
            posted = await self._record(guild_id, channel_id, message_id)

        if posted:
            logger.debug(f"Reposted reminder in channel {channel_id} (guild {guild_id})")
        return posted

    async def install(self, guild_id: int, channel_id: int) -> int:
        """
        Make channel_id the guild's suggestion channel and post its first reminder.

        Returns:
            The id of the new reminder message
        """
        state = self.state_for(channel_id)
        async with state.lock:
            message_id = await self._post_reminder(channel_id)
            try:
                async with self.registry.transaction(guild_id) as record:
                    old_channel, old_sticky = record.channel_id, record.sticky_message_id
                    record.channel_id = channel_id
                    record.sticky_message_id = message_id
            except PersistenceError:
                await self.platform.delete_message(channel_id, message_id)
                raise

        if old_sticky is not None and old_sticky != message_id:
            await self.platform.delete_message(old_channel, old_sticky)
        if old_channel is not None and old_channel != channel_id:
            self._channels.pop(old_channel, None)

        logger.info(f"Suggestion channel for guild {guild_id} set to {channel_id}")
        return message_id

    async def remove(self, guild_id: int) -> Optional[int]:
        """
        Disable suggestions for a guild and take down the reminder.

        Returns:
            The channel that was configured, if any
        """
        async with self.registry.transaction(guild_id) as record:
            old_channel, old_sticky = record.channel_id, record.sticky_message_id
            record.disable()

        if old_channel is not None:
            if old_sticky is not None:
                await self.platform.delete_message(old_channel, old_sticky)
            self._channels.pop(old_channel, None)

        logger.info(f"Suggestions disabled for guild {guild_id}")
        return old_channel
