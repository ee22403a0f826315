"""
Suggestions Views
Discord UI components (buttons) for the suggestions system.
"""

import discord
from discord import ui, Interaction
import logging
from typing import Optional

from .models import Suggestion, Vote

logger = logging.getLogger(__name__)


class SuggestionView(ui.View):
    """
    Persistent vote and moderation buttons for one suggestion message.

    The same custom_ids are used for every suggestion; the message id tells
    the handlers which suggestion was clicked.
    """

    def __init__(self, suggestion: Optional[Suggestion] = None):
        super().__init__(timeout=None)

        if suggestion is None:
            return

        self.upvote.label = f"👍 {suggestion.votes.yes}"
        self.downvote.label = f"👎 {suggestion.votes.no}"

        # Closed suggestions can only be deleted
        if not suggestion.is_open:
            for item in (self.upvote, self.downvote, self.approve, self.deny):
                item.disabled = True

    @discord.ui.button(label="👍 0", style=discord.ButtonStyle.primary, custom_id="suggestion:upvote")
    async def upvote(self, interaction: Interaction, button: discord.ui.Button):
        from .handlers import handle_vote_button
        await handle_vote_button(interaction, Vote.YES)

    @discord.ui.button(label="👎 0", style=discord.ButtonStyle.primary, custom_id="suggestion:downvote")
    async def downvote(self, interaction: Interaction, button: discord.ui.Button):
        from .handlers import handle_vote_button
        await handle_vote_button(interaction, Vote.NO)

    @discord.ui.button(label="✅ Approve", style=discord.ButtonStyle.success, custom_id="suggestion:approve")
    async def approve(self, interaction: Interaction, button: discord.ui.Button):
        from .handlers import handle_moderation_button
        await handle_moderation_button(interaction, "approve")

    @discord.ui.button(label="❌ Deny", style=discord.ButtonStyle.danger, custom_id="suggestion:deny")
    async def deny(self, interaction: Interaction, button: discord.ui.Button):
        from .handlers import handle_moderation_button
        await handle_moderation_button(interaction, "deny")

    @discord.ui.button(label="🗑️", style=discord.ButtonStyle.secondary, custom_id="suggestion:delete")
    async def delete(self, interaction: Interaction, button: discord.ui.Button):
        from .handlers import handle_moderation_button
        await handle_moderation_button(interaction, "delete")
