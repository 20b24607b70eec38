"""
Suggestions Store
In-memory, process-lifetime storage of suggestions keyed by their short ID.

Nothing here awaits: every method runs to completion inside a single event
loop step, so a check followed by a write (one vote per user) cannot be
interleaved with another handler touching the same suggestion.
"""

import logging
import uuid
from typing import Callable, Dict, Optional, Set

from constants import SUGGESTION_ID_LENGTH
from .errors import AlreadyVoted, InvalidTransition, SuggestionNotFound, VotingClosed
from .models import DisplayRef, Suggestion, SuggestionStatus, VoteChoice, VoteTally

logger = logging.getLogger(__name__)


def generate_suggestion_id() -> str:
    """Short, human-friendly ID: the first hex characters of a random UUID4."""
    return uuid.uuid4().hex[:SUGGESTION_ID_LENGTH]


class SuggestionStore:
    """Mapping from suggestion ID to Suggestion. Records are never deleted."""

    def __init__(self, id_factory: Callable[[], str] = generate_suggestion_id):
        self._suggestions: Dict[str, Suggestion] = {}
        # IDs handed out by new_id() whose card is not posted yet
        self._reserved: Set[str] = set()
        self._id_factory = id_factory

    def __len__(self) -> int:
        return len(self._suggestions)

    def __contains__(self, suggestion_id: str) -> bool:
        return suggestion_id in self._suggestions

    def new_id(self) -> str:
        """Reserve an ID not used by any live or reserved suggestion."""
        suggestion_id = self._id_factory()
        while suggestion_id in self._suggestions or suggestion_id in self._reserved:
            logger.warning(f"Suggestion ID collision on {suggestion_id}, drawing another")
            suggestion_id = self._id_factory()
        self._reserved.add(suggestion_id)
        return suggestion_id

    def release(self, suggestion_id: str):
        """Give back a reserved ID whose card could not be posted."""
        self._reserved.discard(suggestion_id)

    def create(self, author_id: int, display_ref: DisplayRef, content: str = "",
               suggestion_id: Optional[str] = None) -> Suggestion:
        """Insert a new pending suggestion with no votes."""
        if suggestion_id is None:
            suggestion_id = self.new_id()
        elif suggestion_id in self._suggestions:
            raise ValueError(f"Suggestion ID {suggestion_id} is already in use")
        self._reserved.discard(suggestion_id)

        suggestion = Suggestion(
            id=suggestion_id,
            author_id=author_id,
            display_ref=display_ref,
            content=content,
        )
        self._suggestions[suggestion_id] = suggestion
        return suggestion

    def get(self, suggestion_id: str) -> Suggestion:
        suggestion = self._suggestions.get(suggestion_id)
        if suggestion is None:
            raise SuggestionNotFound(suggestion_id)
        return suggestion

    def record_vote(self, suggestion_id: str, user_id: int, choice: VoteChoice,
                    allow_closed: bool = True) -> VoteTally:
        """
        Record a user's single vote on a suggestion.

        Args:
            suggestion_id: ID of the suggestion
            user_id: Voting user
            choice: Upvote or downvote
            allow_closed: Whether decided suggestions still accept votes

        Returns:
            The tallies after the vote

        Raises:
            SuggestionNotFound, VotingClosed, AlreadyVoted
        """
        suggestion = self.get(suggestion_id)
        choice = VoteChoice(choice)

        if not allow_closed and suggestion.status.is_terminal:
            raise VotingClosed()
        if suggestion.has_voted(user_id):
            raise AlreadyVoted()

        if choice is VoteChoice.UPVOTE:
            suggestion.upvotes += 1
        else:
            suggestion.downvotes += 1
        suggestion.voters[user_id] = choice

        return suggestion.tally

    def set_status(self, suggestion_id: str, status: SuggestionStatus) -> Suggestion:
        """
        Move a pending suggestion to approved or denied.

        Raises:
            SuggestionNotFound, InvalidTransition
        """
        suggestion = self.get(suggestion_id)
        status = SuggestionStatus(status)

        if suggestion.status.is_terminal:
            raise InvalidTransition(
                f"Suggestion `{suggestion_id}` was already {suggestion.status.value}."
            )
        if not status.is_terminal:
            raise InvalidTransition(f"Cannot move suggestion `{suggestion_id}` back to pending.")

        suggestion.status = status
        return suggestion
