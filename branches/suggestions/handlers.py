"""
Suggestions Handlers
Handles button interactions for the suggestions system.
"""

import discord
from discord import Interaction
import logging
from typing import Any, Dict

from .errors import SuggestionError
from .models import Vote

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES = {
    "not_configured": "Please configure a suggestions channel first.",
    "too_short": "Your suggestion is too short. Please provide more detail.",
    "too_long": "Your suggestion is too long. Please shorten it and try again.",
    "no_permission": "You don't have permission to manage suggestions.",
    "not_found": "This suggestion no longer exists.",
    "closed": "This suggestion has already been closed.",
    "persistence": "Failed to save your change. Please try again later.",
    "error": "An error occurred.",
    "submitted": "Your suggestion has been submitted as #{number}!",
    "approved": "Suggestion #{number} approved!",
    "denied": "Suggestion #{number} denied!",
    "deleted": "Suggestion deleted.",
}


def describe_error(error: Exception, messages: Dict[str, Any]) -> str:
    """Map an exception to the user-facing message configured for it."""
    key = error.message_key if isinstance(error, SuggestionError) else "error"
    return messages.get(key) or DEFAULT_MESSAGES.get(key, DEFAULT_MESSAGES["error"])


async def reply(interaction: Interaction, content: str) -> None:
    """Send an ephemeral reply whether or not the interaction was already acknowledged."""
    try:
        if interaction.response.is_done():
            await interaction.followup.send(content, ephemeral=True)
        else:
            await interaction.response.send_message(content, ephemeral=True)
    except discord.HTTPException as e:
        logger.error(f"Failed to send response: {e}")


def _get_branch(interaction: Interaction):
    return interaction.client.get_cog("Suggestions")


async def handle_vote_button(interaction: Interaction, choice: Vote):
    """
    Handle upvote/downvote button clicks.

    Args:
        interaction: Discord interaction from button click
        choice: The vote the button stands for
    """
    branch = _get_branch(interaction)
    if branch is None or interaction.guild_id is None:
        await reply(interaction, DEFAULT_MESSAGES["error"])
        return

    message_id = interaction.message.id

    try:
        await branch.registry.cast_vote(interaction.guild_id, message_id, interaction.user.id, choice)
        suggestion = await branch.registry.get(interaction.guild_id, message_id)

        # Local import to avoid circular imports
        from .views import SuggestionView
        await interaction.response.edit_message(view=SuggestionView(suggestion))

    except SuggestionError as e:
        logger.info(f"Vote by {interaction.user.id} on {message_id} rejected: {e}")
        await reply(interaction, describe_error(e, branch.messages))
    except discord.HTTPException as e:
        logger.error(f"Failed to update vote buttons for {message_id}: {e}")
        await reply(interaction, branch.messages.get("vote_failed", "Failed to update vote."))
    except Exception as e:
        logger.error(f"Error handling vote button: {e}", exc_info=True)
        await reply(interaction, describe_error(e, branch.messages))


async def handle_moderation_button(interaction: Interaction, action: str):
    """
    Handle approve/deny/delete button clicks.

    Args:
        interaction: Discord interaction from button click
        action: "approve", "deny" or "delete"
    """
    branch = _get_branch(interaction)
    if branch is None or interaction.guild_id is None:
        await reply(interaction, DEFAULT_MESSAGES["error"])
        return

    message_id = interaction.message.id
    messages = branch.messages

    try:
        if action == "delete":
            removed = await branch.moderation.delete(interaction.guild_id, message_id, interaction.user.id)
            if not removed:
                # Duplicate click on an already deleted suggestion
                await interaction.response.defer()
                return
            await reply(interaction, messages.get("deleted") or DEFAULT_MESSAGES["deleted"])
            return

        if action == "approve":
            suggestion = await branch.moderation.approve(interaction.guild_id, message_id, interaction.user.id)
            template = messages.get("approved") or DEFAULT_MESSAGES["approved"]
        else:
            suggestion = await branch.moderation.deny(interaction.guild_id, message_id, interaction.user.id)
            template = messages.get("denied") or DEFAULT_MESSAGES["denied"]

        await reply(interaction, template.format(number=suggestion.number))

    except SuggestionError as e:
        logger.info(f"{action} by {interaction.user.id} on {message_id} rejected: {e}")
        await reply(interaction, describe_error(e, messages))
    except discord.HTTPException as e:
        logger.error(f"Failed to {action} suggestion {message_id}: {e}")
        await reply(interaction, describe_error(e, messages))
    except Exception as e:
        logger.error(f"Error handling {action} button: {e}", exc_info=True)
        await reply(interaction, describe_error(e, messages))
