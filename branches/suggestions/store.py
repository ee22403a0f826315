"""
Suggestions Store
Durable per-guild record of suggestion settings and suggestions (SQLite).
"""

import json
import logging
from typing import Dict

import aiosqlite

from database import init_branch_database, connect_branch_database
from .errors import PersistenceError
from .models import GuildConfig, Suggestion, SuggestionStatus, Vote, VoteTally

logger = logging.getLogger(__name__)


# Database schema for suggestions
SUGGESTIONS_SCHEMA = """
CREATE TABLE IF NOT EXISTS guild_settings (
    guild_id INTEGER PRIMARY KEY,
    channel_id INTEGER,
    sticky_message_id INTEGER,
    suggestion_count INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS suggestions (
    message_id INTEGER PRIMARY KEY,
    guild_id INTEGER NOT NULL REFERENCES guild_settings(guild_id) ON DELETE CASCADE,
    number INTEGER NOT NULL,
    author_id INTEGER NOT NULL,
    channel_id INTEGER NOT NULL,
    content TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'open',
    yes_votes INTEGER NOT NULL DEFAULT 0,
    no_votes INTEGER NOT NULL DEFAULT 0,
    voters TEXT NOT NULL DEFAULT '{}',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (guild_id, number)
);

CREATE INDEX IF NOT EXISTS idx_suggestions_guild ON suggestions(guild_id);
"""


class SuggestionStore:
    """
    Loads and saves whole guild records.

    A save replaces the guild's row and its suggestions inside a single
    SQLite transaction, so a failed save leaves the previous record intact.
    Callers serialize access per guild (see SuggestionRegistry.transaction).
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def initialize(self) -> None:
        await init_branch_database(self.db_path, SUGGESTIONS_SCHEMA, "Suggestions")

    async def load(self, guild_id: int) -> GuildConfig:
        """Load a guild record, returning an empty one if the guild is unknown."""
        try:
            async with connect_branch_database(self.db_path) as db:
                cursor = await db.execute(
                    "SELECT channel_id, sticky_message_id, suggestion_count FROM guild_settings WHERE guild_id = ?",
                    (guild_id,)
                )
                row = await cursor.fetchone()
                if not row:
                    return GuildConfig(guild_id=guild_id)

                record = GuildConfig(
                    guild_id=guild_id,
                    channel_id=row[0],
                    sticky_message_id=row[1],
                    suggestion_count=row[2],
                )

                cursor = await db.execute(
                    """
                    SELECT message_id, number, author_id, channel_id, content, status, yes_votes, no_votes, voters
                    FROM suggestions WHERE guild_id = ? ORDER BY number
                    """,
                    (guild_id,)
                )
                for row in await cursor.fetchall():
                    suggestion = self._row_to_suggestion(row)
                    suggestion.recount()
                    record.suggestions[suggestion.id] = suggestion

            logger.debug(f"Loaded {len(record.suggestions)} suggestions for guild {guild_id}")
            return record
        except (aiosqlite.Error, ValueError) as e:
            logger.error(f"Failed to load suggestions for guild {guild_id}: {e}")
            raise PersistenceError(f"Could not load guild {guild_id}") from e

    async def save(self, guild_id: int, record: GuildConfig) -> None:
        """Replace the stored record for a guild atomically."""
        try:
            async with connect_branch_database(self.db_path) as db:
                try:
                    await db.execute(
                        """
                        INSERT INTO guild_settings (guild_id, channel_id, sticky_message_id, suggestion_count)
                        VALUES (?, ?, ?, ?)
                        ON CONFLICT(guild_id) DO UPDATE SET
                            channel_id = excluded.channel_id,
                            sticky_message_id = excluded.sticky_message_id,
                            suggestion_count = excluded.suggestion_count
                        """,
                        (guild_id, record.channel_id, record.sticky_message_id, record.suggestion_count)
                    )
                    await db.execute("DELETE FROM suggestions WHERE guild_id = ?", (guild_id,))
                    await db.executemany(
                        """
                        INSERT INTO suggestions
                            (message_id, guild_id, number, author_id, channel_id, content, status, yes_votes, no_votes, voters)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        [self._suggestion_to_row(guild_id, s) for s in record.suggestions.values()]
                    )
                    await db.commit()
                except aiosqlite.Error:
                    await db.rollback()
                    raise
        except aiosqlite.Error as e:
            logger.error(f"Failed to save suggestions for guild {guild_id}: {e}")
            raise PersistenceError(f"Could not save guild {guild_id}") from e

    @staticmethod
    def _row_to_suggestion(row) -> Suggestion:
        message_id, number, author_id, channel_id, content, status, yes_votes, no_votes, voters = row
        raw_voters: Dict[str, str] = json.loads(voters or "{}")
        return Suggestion(
            id=message_id,
            number=number,
            author_id=author_id,
            channel_id=channel_id,
            content=content,
            votes=VoteTally(yes_votes, no_votes),
            voters={int(user_id): Vote(choice) for user_id, choice in raw_voters.items()},
            status=SuggestionStatus(status),
        )

    @staticmethod
    def _suggestion_to_row(guild_id: int, suggestion: Suggestion) -> tuple:
        voters = {str(user_id): choice.value for user_id, choice in suggestion.voters.items()}
        return (
            suggestion.id, guild_id, suggestion.number, suggestion.author_id, suggestion.channel_id, suggestion.content,
            suggestion.status.value, suggestion.votes.yes, suggestion.votes.no, json.dumps(voters)
        )
