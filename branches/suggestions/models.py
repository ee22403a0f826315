"""
Suggestions Models
Data structures for per-guild suggestion state.
"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class Vote(str, Enum):
    YES = "yes"
    NO = "no"

    @property
    def opposite(self) -> "Vote":
        return Vote.NO if self is Vote.YES else Vote.YES


class SuggestionStatus(str, Enum):
    OPEN = "open"
    APPROVED = "approved"
    DENIED = "denied"


@dataclass
class VoteTally:
    yes: int = 0
    no: int = 0

    def get(self, choice: Vote) -> int:
        return self.yes if choice is Vote.YES else self.no

    def adjust(self, choice: Vote, delta: int) -> None:
        if choice is Vote.YES:
            self.yes += delta
        else:
            self.no += delta

    @property
    def total(self) -> int:
        return self.yes + self.no


@dataclass
class Suggestion:
    """A single suggestion, keyed by the id of the message it is rendered in."""
    id: int
    number: int
    author_id: int
    channel_id: int
    content: str
    votes: VoteTally = field(default_factory=VoteTally)
    voters: Dict[int, Vote] = field(default_factory=dict)
    status: SuggestionStatus = SuggestionStatus.OPEN

    @property
    def is_open(self) -> bool:
        return self.status is SuggestionStatus.OPEN

    def toggle_vote(self, user_id: int, choice: Vote) -> VoteTally:
        """
        Apply a vote button click from a user.

        Clicking the same choice again retracts the vote. Clicking the other
        choice moves the vote. A user never holds more than one vote.

        Returns:
            A copy of the resulting tally
        """
        previous = self.voters.get(user_id)

        if previous is choice:
            self.votes.adjust(choice, -1)
            del self.voters[user_id]
        else:
            if previous is not None:
                self.votes.adjust(previous, -1)
            self.votes.adjust(choice, 1)
            self.voters[user_id] = choice

        return VoteTally(self.votes.yes, self.votes.no)

    def recount(self) -> bool:
        """
        Rebuild the tally from the voters.

        Returns:
            True if the stored tally was wrong and has been corrected
        """
        yes = sum(1 for v in self.voters.values() if v is Vote.YES)
        no = len(self.voters) - yes
        if (yes, no) == (self.votes.yes, self.votes.no):
            return False

        logger.warning(
            f"Suggestion #{self.number} ({self.id}) tally {self.votes.yes}/{self.votes.no} "
            f"did not match voters {yes}/{no}, rebuilt from voters"
        )
        self.votes = VoteTally(yes, no)
        return True


@dataclass
class GuildConfig:
    """Suggestion settings and suggestions for one guild."""
    guild_id: int
    channel_id: Optional[int] = None
    sticky_message_id: Optional[int] = None
    suggestion_count: int = 0
    suggestions: Dict[int, Suggestion] = field(default_factory=dict)

    @property
    def enabled(self) -> bool:
        return self.channel_id is not None

    def next_number(self) -> int:
        self.suggestion_count += 1
        return self.suggestion_count

    def disable(self) -> None:
        # Destination and reminder are always cleared together
        self.channel_id = None
        self.sticky_message_id = None

    def copy(self) -> "GuildConfig":
        return copy.deepcopy(self)
