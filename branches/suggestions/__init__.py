"""
Suggestions Branch
Handles user suggestions with voting, moderation and a sticky reminder.

Structure:
- branch.py: Suggestions cog (/config, /suggest, on_message handler)
- registry.py: SuggestionRegistry (submit, votes, per-guild transactions)
- moderation.py: ModerationWorkflow (approve, deny, delete)
- sticky.py: StickyReminderManager (debounced reminder reposting)
- store.py: SuggestionStore (SQLite persistence)
- adapter.py: MessagePlatform interface and its discord.py implementation
- views.py: SuggestionView (persistent buttons)
- handlers.py: handle_vote_button, handle_moderation_button (button logic)
- helpers.py: Config access and embed rendering
- models.py, errors.py: Data structures and exceptions
"""

from .branch import Suggestions
from .views import SuggestionView

__all__ = ['Suggestions', 'SuggestionView', 'setup']

async def setup(bot):
    """Load the Suggestions branch."""
    await bot.add_cog(Suggestions(bot))
