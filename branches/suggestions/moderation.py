"""
Suggestions Moderation
Approve, deny and delete suggestions.
"""

import logging

from .adapter import MessagePlatform
from .errors import NotFoundError, StateError, UnauthorizedError
from .models import Suggestion, SuggestionStatus
from .registry import SuggestionRegistry

logger = logging.getLogger(__name__)


class ModerationWorkflow:
    """
    Moves suggestions out of the open state.

    open -> approved, open -> denied, any -> deleted. Approved and denied are
    final; deletion removes the record entirely.
    """

    def __init__(self, registry: SuggestionRegistry, platform: MessagePlatform):
        self.registry = registry
        self.platform = platform

    async def _require_capability(self, actor_id: int, channel_id: int) -> None:
        if not await self.platform.has_moderation_capability(actor_id, channel_id):
            logger.warning(f"User {actor_id} attempted to moderate suggestions in channel {channel_id} without permission")
            raise UnauthorizedError(f"User {actor_id} cannot moderate suggestions")

    async def _close(self, guild_id: int, suggestion_id: int, actor_id: int, status: SuggestionStatus) -> Suggestion:
        current = await self.registry.get(guild_id, suggestion_id)
        await self._require_capability(actor_id, current.channel_id)

        async with self.registry.transaction(guild_id) as record:
            suggestion = record.suggestions.get(suggestion_id)
            if suggestion is None:
                raise NotFoundError(f"Suggestion {suggestion_id} not found in guild {guild_id}")
            if not suggestion.is_open:
                raise StateError(f"Suggestion #{suggestion.number} is already {suggestion.status.value}")

            suggestion.status = status

        await self.platform.edit_message(suggestion.channel_id, suggestion.id, suggestion)
        logger.info(f"Suggestion #{suggestion.number} {status.value} by {actor_id} in guild {guild_id}")
        return suggestion

    async def approve(self, guild_id: int, suggestion_id: int, actor_id: int) -> Suggestion:
        return await self._close(guild_id, suggestion_id, actor_id, SuggestionStatus.APPROVED)

    async def deny(self, guild_id: int, suggestion_id: int, actor_id: int) -> Suggestion:
        return await self._close(guild_id, suggestion_id, actor_id, SuggestionStatus.DENIED)

    async def delete(self, guild_id: int, suggestion_id: int, actor_id: int) -> bool:
        """
        Delete a suggestion and its message.

        Idempotent: deleting a suggestion that is already gone does nothing
        and returns False.
        """
        try:
            current = await self.registry.get(guild_id, suggestion_id)
        except NotFoundError:
            return False

        await self._require_capability(actor_id, current.channel_id)

        removed = await self.registry.delete(guild_id, suggestion_id)
        await self.platform.delete_message(current.channel_id, suggestion_id)
        return removed
