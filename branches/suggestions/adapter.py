"""
Suggestions Adapter
The narrow set of chat-platform operations the suggestion core depends on,
and the discord.py implementation of them.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Union

import discord

from .errors import ConfigurationError
from .models import Suggestion

logger = logging.getLogger(__name__)

# A Suggestion renders as its embed + buttons, a str as the sticky reminder
MessageContent = Union[Suggestion, str]


class MessagePlatform(ABC):
    """Message and permission operations on the chat platform."""

    @abstractmethod
    async def send_message(self, channel_id: int, content: MessageContent) -> int:
        """Post a message and return its id. Raises ConfigurationError if the channel is unavailable."""

    @abstractmethod
    async def edit_message(self, channel_id: int, message_id: int, content: MessageContent) -> None:
        ...

    @abstractmethod
    async def delete_message(self, channel_id: int, message_id: int) -> bool:
        """Delete a message. Returns False if it was already gone."""

    @abstractmethod
    async def fetch_message(self, channel_id: int, message_id: int) -> Optional[Any]:
        ...

    @abstractmethod
    async def pin_message(self, channel_id: int, message_id: int) -> bool:
        """Pin a message. Failure is reported, never raised."""

    @abstractmethod
    async def has_moderation_capability(self, actor_id: int, channel_id: int) -> bool:
        ...


class DiscordPlatform(MessagePlatform):
    """MessagePlatform backed by a discord.py client."""

    def __init__(self, bot: discord.Client, colors: dict):
        self.bot = bot
        self.colors = colors

    async def _resolve_channel(self, channel_id: int) -> discord.abc.Messageable:
        channel = self.bot.get_channel(channel_id)
        if channel is not None:
            return channel

        try:
            return await self.bot.fetch_channel(channel_id)
        except (discord.NotFound, discord.Forbidden, discord.InvalidData) as e:
            logger.warning(f"Could not resolve channel {channel_id}: {e}")
            raise ConfigurationError(f"Channel {channel_id} could not be resolved") from e

    def _render(self, content: MessageContent) -> dict:
        # Imported here to avoid circular imports
        from .helpers import build_reminder_embed, build_suggestion_embed
        from .views import SuggestionView

        if isinstance(content, Suggestion):
            return {
                "embed": build_suggestion_embed(content, self.colors),
                "view": SuggestionView(content),
            }
        return {"embed": build_reminder_embed(content, self.colors)}

    async def send_message(self, channel_id: int, content: MessageContent) -> int:
        channel = await self._resolve_channel(channel_id)
        try:
            message = await channel.send(**self._render(content))
        except discord.Forbidden as e:
            raise ConfigurationError(f"Missing permissions to post in channel {channel_id}") from e
        return message.id

    async def edit_message(self, channel_id: int, message_id: int, content: MessageContent) -> None:
        channel = await self._resolve_channel(channel_id)
        await channel.get_partial_message(message_id).edit(**self._render(content))

    async def delete_message(self, channel_id: int, message_id: int) -> bool:
        try:
            channel = await self._resolve_channel(channel_id)
            await channel.get_partial_message(message_id).delete()
            return True
        except (discord.NotFound, ConfigurationError):
            logger.debug(f"Message {message_id} in channel {channel_id} already gone")
            return False

    async def fetch_message(self, channel_id: int, message_id: int) -> Optional[discord.Message]:
        try:
            channel = await self._resolve_channel(channel_id)
            return await channel.fetch_message(message_id)
        except (discord.NotFound, ConfigurationError):
            return None

    async def pin_message(self, channel_id: int, message_id: int) -> bool:
        try:
            channel = await self._resolve_channel(channel_id)
            await channel.get_partial_message(message_id).pin()
            return True
        except (discord.HTTPException, ConfigurationError) as e:
            logger.warning(f"Failed to pin message {message_id} in channel {channel_id}: {e}")
            return False

    async def has_moderation_capability(self, actor_id: int, channel_id: int) -> bool:
        try:
            channel = await self._resolve_channel(channel_id)
        except ConfigurationError:
            return False

        guild = getattr(channel, "guild", None)
        if guild is None:
            return False

        member = guild.get_member(actor_id)
        if member is None:
            try:
                member = await guild.fetch_member(actor_id)
            except discord.HTTPException:
                return False

        return channel.permissions_for(member).manage_channels
