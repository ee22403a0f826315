"""
Suggestions Branch Implementation
Handles user suggestions with voting, moderation and a sticky reminder.
"""

import discord
from discord import app_commands
from discord.ext import commands
import logging

from constants import SUGGESTION_MAX_LENGTH
from .adapter import DiscordPlatform
from .errors import SuggestionError, UnauthorizedError
from .handlers import DEFAULT_MESSAGES, describe_error, reply
from .helpers import DEFAULT_COLORS, get_config_path, get_db_path, get_embed_colors
from .moderation import ModerationWorkflow
from .registry import SuggestionRegistry
from .sticky import DEFAULT_DEBOUNCE_SECONDS, StickyReminderManager
from .store import SuggestionStore
from .views import SuggestionView

logger = logging.getLogger(__name__)


# Default configuration for this branch
DEFAULT_CONFIG = {
    "enabled": True,
    "version": "1.0.0",
    "settings": {
        "validation": {
            "min_length": 1,
            "max_length": SUGGESTION_MAX_LENGTH,
        },

        "sticky": {
            "text": "-# To make a suggestion, use the /suggest command.",
            "debounce_seconds": DEFAULT_DEBOUNCE_SECONDS,
            "pin": False,
        },

        "ui": {
            "embed_colors": dict(DEFAULT_COLORS),
        },

        "messages": dict(DEFAULT_MESSAGES),
    }
}


class Suggestions(commands.Cog):
    """Handles user suggestions with voting and moderation."""

    config_group = app_commands.Group(
        name="config",
        description="Configure suggestion settings",
        guild_only=True,
        default_permissions=discord.Permissions(manage_channels=True),
    )

    def __init__(self, bot: commands.Bot):
        self.bot = bot

        # Load config
        self.config = self.load_config()
        settings = self.config.get("settings", {})

        validation = settings.get("validation", {})
        sticky = settings.get("sticky", {})
        self.messages = {**DEFAULT_MESSAGES, **(settings.get("messages") or {})}

        # Wire up the suggestion core
        self.platform = DiscordPlatform(bot, get_embed_colors(self.config))
        self.store = SuggestionStore(get_db_path())
        self.registry = SuggestionRegistry(
            self.store,
            self.platform,
            min_length=validation.get("min_length", 1),
            max_length=min(validation.get("max_length", SUGGESTION_MAX_LENGTH), SUGGESTION_MAX_LENGTH),
        )
        self.moderation = ModerationWorkflow(self.registry, self.platform)
        self.sticky = StickyReminderManager(
            self.registry,
            self.platform,
            text=sticky.get("text", DEFAULT_CONFIG["settings"]["sticky"]["text"]),
            debounce_seconds=float(sticky.get("debounce_seconds", DEFAULT_DEBOUNCE_SECONDS)),
            pin=bool(sticky.get("pin", False)),
        )

        logger.info(f"Suggestions branch initialized (db: {self.store.db_path})")

    async def cog_load(self):
        """Initialize database when branch is loaded."""
        await self.store.initialize()

        # Register persistent view so buttons keep working after a restart
        logger.info("Registering SuggestionView for persistent interactions")
        self.bot.add_view(SuggestionView())

    def load_config(self) -> dict:
        """Load config from config.yml in this branch's folder."""
        from utils import load_branch_config
        return load_branch_config(get_config_path(), DEFAULT_CONFIG, "Suggestions")

    async def _refresh_reminder(self, guild_id: int, channel_id: int) -> None:
        try:
            await self.sticky.ensure(guild_id, channel_id)
        except (SuggestionError, discord.HTTPException) as e:
            logger.warning(f"Failed to refresh reminder in channel {channel_id}: {e}")

    async def _require_manager(self, interaction: discord.Interaction, channel_id: int) -> None:
        if not await self.platform.has_moderation_capability(interaction.user.id, channel_id):
            raise UnauthorizedError(f"User {interaction.user.id} cannot configure suggestions")

    @config_group.command(name="channel", description="Set the channel for suggestions")
    @app_commands.describe(channel="The channel to send suggestions to")
    async def config_channel(self, interaction: discord.Interaction, channel: discord.TextChannel):
        """Set the suggestion channel and post the reminder in it."""
        await interaction.response.defer(ephemeral=True)

        try:
            await self._require_manager(interaction, channel.id)
            await self.sticky.install(interaction.guild_id, channel.id)
        except SuggestionError as e:
            logger.info(f"/config channel by {interaction.user} rejected: {e}")
            await interaction.followup.send(describe_error(e, self.messages), ephemeral=True)
            return

        await interaction.followup.send(f"Suggestions will be sent to {channel.mention}.", ephemeral=True)

    @config_group.command(name="disable", description="Disable the suggestions channel")
    async def config_disable(self, interaction: discord.Interaction):
        """Clear the suggestion channel and remove its reminder."""
        await interaction.response.defer(ephemeral=True)

        try:
            channel_id = await self.registry.channel_for(interaction.guild_id)
            await self._require_manager(interaction, channel_id or interaction.channel_id)
            await self.sticky.remove(interaction.guild_id)
        except SuggestionError as e:
            logger.info(f"/config disable by {interaction.user} rejected: {e}")
            await interaction.followup.send(describe_error(e, self.messages), ephemeral=True)
            return

        await interaction.followup.send("Suggestions channel has been disabled.", ephemeral=True)

    @app_commands.command(name="suggest", description="Submit a suggestion")
    @app_commands.describe(suggestion="Your suggestion")
    @app_commands.guild_only()
    async def suggest(
        self,
        interaction: discord.Interaction,
        suggestion: app_commands.Range[str, 1, SUGGESTION_MAX_LENGTH],
    ):
        """Submit a suggestion to this server's suggestion channel."""
        await interaction.response.defer(ephemeral=True)

        try:
            created = await self.registry.submit(interaction.guild_id, interaction.user.id, suggestion)
        except SuggestionError as e:
            logger.info(f"Suggestion by {interaction.user} rejected: {e}")
            await interaction.followup.send(describe_error(e, self.messages), ephemeral=True)
            return
        except discord.HTTPException as e:
            logger.error(f"Failed to create suggestion: {e}")
            await interaction.followup.send(describe_error(e, self.messages), ephemeral=True)
            return

        await interaction.followup.send(self.messages["submitted"].format(number=created.number), ephemeral=True)
        await self._refresh_reminder(interaction.guild_id, created.channel_id)

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        """Keep the reminder below new messages in the suggestion channel."""
        if message.author.bot or message.guild is None:
            return

        try:
            channel_id = await self.registry.channel_for(message.guild.id)
        except SuggestionError as e:
            logger.error(f"Could not load suggestion settings for guild {message.guild.id}: {e}")
            return

        if channel_id != message.channel.id:
            return

        await self._refresh_reminder(message.guild.id, message.channel.id)

    async def cog_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        logger.error(f"App command error in {interaction.command and interaction.command.name}: {error}", exc_info=error)
        await reply(interaction, describe_error(getattr(error, "original", error), self.messages))

    def cog_unload(self):
        """Called when the branch is unloaded."""
        logger.info("Suggestions branch unloaded")
