"""
Suggestions Helper Functions
Config access and embed rendering for the suggestions system.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import discord

from constants import (
    BRANCH_CONFIG_FILE,
    BRANCH_DATABASE_FILE,
    truncate_for_embed_description,
    truncate_for_embed_field,
)
from .models import Suggestion, SuggestionStatus

logger = logging.getLogger(__name__)


DEFAULT_COLORS = {
    "open": 0x3498DB,
    "approved": 0x57F287,
    "denied": 0xED4245,
    "reminder": 0x3498DB,
}

STATUS_TITLES = {
    SuggestionStatus.OPEN: "💡 Suggestion #{number}",
    SuggestionStatus.APPROVED: "✅ Suggestion #{number} Approved",
    SuggestionStatus.DENIED: "❌ Suggestion #{number} Denied",
}


def get_db_path() -> str:
    """Get the database path for this branch."""
    return str(Path(__file__).parent / BRANCH_DATABASE_FILE)


def get_config_path() -> Path:
    return Path(__file__).parent / BRANCH_CONFIG_FILE


def get_embed_colors(config: Dict[str, Any]) -> Dict[str, int]:
    """Get embed colors from the branch config, falling back to defaults."""
    embed_colors = config.get("settings", {}).get("ui", {}).get("embed_colors", {}) or {}
    return {key: embed_colors.get(key, default) for key, default in DEFAULT_COLORS.items()}


def build_suggestion_embed(suggestion: Suggestion, colors: Dict[str, int]) -> discord.Embed:
    """Render a suggestion as an embed. Vote counts live on the buttons."""
    embed = discord.Embed(
        title=STATUS_TITLES[suggestion.status].format(number=suggestion.number),
        description=truncate_for_embed_description(suggestion.content),
        color=colors.get(suggestion.status.value, DEFAULT_COLORS[suggestion.status.value]),
    )
    embed.add_field(name="👤 Author", value=f"<@{suggestion.author_id}>", inline=True)
    embed.add_field(
        name="📊 Status",
        value=truncate_for_embed_field(f"**{suggestion.status.value.capitalize()}**"),
        inline=True,
    )
    return embed


def build_reminder_embed(text: str, colors: Dict[str, int]) -> discord.Embed:
    return discord.Embed(description=truncate_for_embed_description(text), color=colors["reminder"])
