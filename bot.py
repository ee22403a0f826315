"""
Sprout - A Discord suggestions bot

Members propose ideas with /suggest, vote on them with buttons, and
moderators approve, deny or delete them.
"""

import discord
from discord.ext import commands
from config import DISCORD_TOKEN, GUILD_ID
from constants import LOG_FORMAT, LOG_DATE_FORMAT, LOGS_DIR
import logging
import sys
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# Intents the suggestion branch cannot work without
REQUIRED_INTENTS = {
    "guilds": "Needed to resolve suggestion channels and their permissions",
    "guild_messages": "Needed to move the reminder below new messages",
}


def setup_logging(level: int = logging.INFO) -> None:
    """Log to logs/sprout_YYYYMMDD.log and to stdout."""
    logs_dir = Path(LOGS_DIR)
    logs_dir.mkdir(exist_ok=True)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[
            logging.FileHandler(logs_dir / f'sprout_{datetime.now().strftime("%Y%m%d")}.log'),
            logging.StreamHandler(sys.stdout)
        ]
    )

    # discord.py is chatty at INFO
    logging.getLogger('discord').setLevel(logging.WARNING)
    logging.getLogger('discord.http').setLevel(logging.WARNING)


def build_intents() -> discord.Intents:
    # Message content is not needed, the reminder only cares that a message arrived
    intents = discord.Intents.none()
    intents.guilds = True
    intents.guild_messages = True

    missing = [name for name in REQUIRED_INTENTS if not getattr(intents, name, False)]
    for name in missing:
        logger.error(f"Missing required intent {name}: {REQUIRED_INTENTS[name]}")
    if missing:
        sys.exit(1)

    return intents


class Sprout(commands.Bot):
    """Sprout - Discord suggestions bot."""

    def __init__(self):
        super().__init__(command_prefix=commands.when_mentioned, intents=build_intents())

    async def setup_hook(self):
        try:
            await self.load_branches()
            logger.info("Sprout setup complete!")
        except Exception as e:
            logger.critical(f"Failed to setup Sprout: {e}", exc_info=True)
            raise

    async def load_branches(self):
        """Load every enabled branch, generating its config on first run."""
        from core.branch_loader import get_branch_loader

        loader = get_branch_loader()
        branch_names = loader.discover_branches()
        logger.info(f"Discovered {len(branch_names)} branch(es)")

        loaded, failed = [], []
        for branch_name in branch_names:
            config = loader.load_config(branch_name)
            if not config.get("enabled", True):
                logger.info(f"⏭️  Skipped {branch_name} (disabled in config)")
                continue

            load_path = loader.get_load_path(branch_name)
            if not load_path:
                failed.append(branch_name)
                logger.error(f"❌ No load path for branch {branch_name}")
                continue

            try:
                await self.load_extension(load_path)
            except commands.ExtensionError as e:
                failed.append(branch_name)
                logger.error(f"❌ Failed to load branch {branch_name}: {e}", exc_info=True)
                continue

            loaded.append(branch_name)
            logger.info(f"✅ Loaded branch: {branch_name}")

        logger.info(f"Loaded {len(loaded)}/{len(branch_names)} branches: {', '.join(loaded) or 'none'}")
        if failed:
            logger.warning(f"Failed branches: {', '.join(failed)}")

    async def on_ready(self):
        logger.info(f"Logged in as {self.user} (ID: {self.user.id}) in {len(self.guilds)} guild(s)")

        try:
            if GUILD_ID:
                guild = discord.Object(id=GUILD_ID)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info(f"Synced {len(synced)} slash commands to guild {GUILD_ID}")
            else:
                synced = await self.tree.sync()
                logger.info(f"Synced {len(synced)} slash commands globally")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync slash commands: {e}")

    async def on_error(self, event_method: str, *args, **kwargs):
        logger.error(f"Error in {event_method}", exc_info=True)


def main():
    setup_logging()

    if not DISCORD_TOKEN:
        logger.critical("DISCORD_TOKEN not found in environment variables!")
        sys.exit(1)

    try:
        logger.info("Starting Sprout...")
        Sprout().run(DISCORD_TOKEN, log_handler=None)  # Logging is set up above
    except KeyboardInterrupt:
        logger.info("Sprout shutting down...")
    except discord.LoginFailure as e:
        logger.critical(f"Login failed, check DISCORD_TOKEN: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
