"""
Suggestions Models
Data types shared by the store, the workflow and the presentation layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class SuggestionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"

    @property
    def tag(self) -> str:
        """Title tag shown on the card, e.g. "[Pending]"."""
        return f"[{self.value.capitalize()}]"

    @property
    def is_terminal(self) -> bool:
        return self is not SuggestionStatus.PENDING


class VoteChoice(str, Enum):
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"


class Decision(str, Enum):
    APPROVE = "approve"
    DENY = "deny"

    @property
    def status(self) -> SuggestionStatus:
        if self is Decision.APPROVE:
            return SuggestionStatus.APPROVED
        return SuggestionStatus.DENIED


@dataclass(frozen=True)
class DisplayRef:
    """Where a suggestion card was posted."""
    channel_id: int
    message_id: int
    jump_url: Optional[str] = None


@dataclass(frozen=True)
class VoteTally:
    upvotes: int
    downvotes: int


@dataclass(frozen=True)
class Actor:
    """
    The user behind an event, with their authorization as an explicit value.

    Built once at the Discord boundary from the interaction's permissions
    and roles, then passed into every lifecycle operation.
    """
    user_id: int
    name: str
    is_admin: bool = False


@dataclass
class Suggestion:
    """A single user-submitted proposal and its vote tallies."""
    id: str
    author_id: int
    display_ref: DisplayRef
    content: str = ""
    status: SuggestionStatus = SuggestionStatus.PENDING
    upvotes: int = 0
    downvotes: int = 0
    voters: Dict[int, VoteChoice] = field(default_factory=dict)

    @property
    def tally(self) -> VoteTally:
        return VoteTally(self.upvotes, self.downvotes)

    def has_voted(self, user_id: int) -> bool:
        return user_id in self.voters
