"""
Suggestions Errors
Exceptions raised by the suggestion registry, moderation workflow and sticky manager.

Every error is caught at the interaction boundary (handlers.py / branch.py)
and turned into an ephemeral reply for the user.
"""


class SuggestionError(Exception):
    """Base class for all suggestion errors."""

    # Key into the "messages" section of the branch config
    message_key = "error"


class ConfigurationError(SuggestionError):
    """No suggestion channel configured, or the channel cannot be resolved."""

    message_key = "not_configured"


class ValidationError(SuggestionError):
    """Suggestion text is empty or too short."""

    message_key = "too_short"


class TooLongError(ValidationError):
    """Suggestion text is longer than the configured maximum."""

    message_key = "too_long"


class UnauthorizedError(SuggestionError):
    """Actor lacks the moderation capability."""

    message_key = "no_permission"


class NotFoundError(SuggestionError):
    """Suggestion (or its message) no longer exists."""

    message_key = "not_found"


class StateError(SuggestionError):
    """Operation not allowed in the suggestion's current status."""

    message_key = "closed"


class PersistenceError(SuggestionError):
    """Store read or write failed; nothing was committed."""

    message_key = "persistence"
