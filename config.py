"""
Global configuration for the Sprout suggestions bot.

Reads the two process-wide settings from .env; everything else lives in
each branch's config.yml.
"""
from dotenv import load_dotenv
import os
import sys
from typing import Optional

load_dotenv()

PLACEHOLDER_TOKENS = {"your_bot_token_here", "your_token_here", "placeholder"}


def _fail(message: str) -> None:
    print(f"ERROR: {message}")
    print("Please update your .env file (see https://discord.com/developers/applications)")
    sys.exit(1)


def load_token(key: str = "DISCORD_TOKEN") -> str:
    """Bot token; missing or placeholder values stop the process."""
    token = (os.getenv(key) or "").strip()
    if not token:
        _fail(f"Missing required environment variable: {key}")
    if token in PLACEHOLDER_TOKENS:
        _fail(f"{key} is still set to a placeholder value!")
    return token


def load_guild_id(key: str = "GUILD_ID") -> Optional[int]:
    """
    Development guild. When set, slash commands are synced to it only and
    show up instantly; unset, empty or 0 means a global sync.
    """
    value = (os.getenv(key) or "").strip()
    if not value:
        return None
    try:
        guild_id = int(value)
    except ValueError:
        _fail(f"{key} must be a Discord server ID, got: {value}")
    return guild_id or None


DISCORD_TOKEN = load_token()
GUILD_ID = load_guild_id()
