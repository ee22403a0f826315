"""
Global constants for the Sprout suggestions bot.

Contains Discord API limits and other constant values used throughout
the bot and branches.
"""

# ============================================================================
# Discord API Limits
# ============================================================================

# Embed Limits (from Discord API documentation)
EMBED_DESCRIPTION_MAX = 4096
EMBED_FIELD_VALUE_MAX = 1024

# ============================================================================
# Sprout Framework Constants
# ============================================================================

# Longest suggestion accepted, leaves room in the embed description
SUGGESTION_MAX_LENGTH = 4000

# Branch Configuration
BRANCHES_DIR = "branches"
BRANCH_CONFIG_FILE = "config.yml"
BRANCH_DATABASE_FILE = "data.db"

# Logging
LOGS_DIR = "logs"
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# ============================================================================
# Helper Functions
# ============================================================================

def _truncate(text: str, limit: int, suffix: str) -> str:
    if not text:
        return ""

    if len(text) <= limit:
        return text

    return text[:limit - len(suffix)] + suffix


def truncate_for_embed_field(text: str, suffix: str = "...") -> str:
    """
    Truncate text to fit in an embed field value.

    Args:
        text: Text to truncate
        suffix: Suffix to add if truncated (default: "...")

    Returns:
        Truncated text that fits within EMBED_FIELD_VALUE_MAX
    """
    return _truncate(text, EMBED_FIELD_VALUE_MAX, suffix)


def truncate_for_embed_description(text: str, suffix: str = "...") -> str:
    """
    Truncate text to fit in an embed description.

    Args:
        text: Text to truncate
        suffix: Suffix to add if truncated (default: "...")

    Returns:
        Truncated text that fits within EMBED_DESCRIPTION_MAX
    """
    return _truncate(text, EMBED_DESCRIPTION_MAX, suffix)
