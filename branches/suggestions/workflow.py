"""
Suggestions Workflow
Submission, voting, decisions and channel setup as plain functions.

Each operation takes the branch state plus the event's data, applies the
change to the store (or channel settings) and returns an Outcome listing the
Discord side effects to perform. Nothing here talks to Discord; handlers.py
executes the effects. A failed effect does not undo the state change that
produced it.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from utils import sanitize_text
from .errors import ChannelNotConfigured, InvalidSuggestion, Unauthorized
from .models import Actor, Decision, DisplayRef, Suggestion, SuggestionStatus, VoteChoice
from .state import SuggestionState

logger = logging.getLogger(__name__)


class ChannelKind(str, Enum):
    SUGGESTIONS = "suggestions"
    LOG = "log"


@dataclass(frozen=True)
class Submission:
    """A validated suggestion waiting for its card to be posted."""
    suggestion_id: str
    author: Actor
    content: str
    channel_id: int
    # The raw message it came from, when submitted by posting in the channel
    source: Optional[DisplayRef] = None


# ============================================================================
# Effects
# ============================================================================

@dataclass(frozen=True)
class PostCard:
    submission: Submission


@dataclass(frozen=True)
class RefreshCard:
    display_ref: DisplayRef
    suggestion_id: str
    upvotes: int
    downvotes: int
    status: SuggestionStatus
    voting_open: bool = True

    @classmethod
    def of(cls, suggestion: Suggestion, voting_open: bool = True) -> "RefreshCard":
        return cls(
            display_ref=suggestion.display_ref,
            suggestion_id=suggestion.id,
            upvotes=suggestion.upvotes,
            downvotes=suggestion.downvotes,
            status=suggestion.status,
            voting_open=voting_open,
        )


@dataclass(frozen=True)
class OpenThread:
    display_ref: DisplayRef
    name: str
    greeting: str


@dataclass(frozen=True)
class DeleteMessage:
    message_ref: DisplayRef


@dataclass(frozen=True)
class LogNotice:
    channel_id: int
    title: str
    description: str
    color_key: str


@dataclass(frozen=True)
class Reply:
    content: str
    ephemeral: bool = True


Effect = Union[PostCard, RefreshCard, OpenThread, DeleteMessage, LogNotice, Reply]


@dataclass
class Outcome:
    effects: List[Effect] = field(default_factory=list)
    suggestion: Optional[Suggestion] = None


# ============================================================================
# Operations
# ============================================================================

def is_intake_message(state: SuggestionState, channel_id: int, author_is_bot: bool) -> bool:
    """Whether a plain message should be turned into a suggestion."""
    if author_is_bot:
        return False
    configured = state.channels.suggestion_channel_id
    return configured is not None and channel_id == configured


def submit(state: SuggestionState, author: Actor, content: str,
           source: Optional[DisplayRef] = None) -> Outcome:
    """
    Validate a new suggestion and reserve its ID.

    Args:
        state: Branch state
        author: Submitting user
        content: Raw suggestion text
        source: The raw message, for suggestions posted in the channel;
            None for /suggest

    Returns:
        Outcome with a single PostCard effect. Call card_posted() once the
        card exists.

    Raises:
        ChannelNotConfigured: /suggest used before /set-channel
        InvalidSuggestion: empty or too short after sanitizing
    """
    if source is not None:
        channel_id = source.channel_id
    else:
        channel_id = state.channels.suggestion_channel_id
        if channel_id is None:
            raise ChannelNotConfigured()

    text = sanitize_text(content, max_length=state.max_length)
    if not text:
        raise InvalidSuggestion()
    if len(text) < state.min_length:
        raise InvalidSuggestion(
            f"Your suggestion is too short. Please provide more detail "
            f"(at least {state.min_length} characters)."
        )

    submission = Submission(
        suggestion_id=state.store.new_id(),
        author=author,
        content=text,
        channel_id=channel_id,
        source=source,
    )
    return Outcome(effects=[PostCard(submission)])


def card_posted(state: SuggestionState, submission: Submission, display_ref: DisplayRef) -> Outcome:
    """Create the pending suggestion once its card is visible."""
    suggestion = state.store.create(
        author_id=submission.author.user_id,
        display_ref=display_ref,
        content=submission.content,
        suggestion_id=submission.suggestion_id,
    )
    logger.info(f"New suggestion {suggestion.id} from {submission.author.name} (ID: {submission.author.user_id})")

    effects: List[Effect] = [
        OpenThread(
            display_ref=display_ref,
            name=suggestion.id,
            greeting=f"Discuss this suggestion here <@{submission.author.user_id}>!",
        )
    ]

    if submission.source is not None:
        effects.append(DeleteMessage(submission.source))

    log_channel_id = state.channels.log_channel_id
    if log_channel_id is not None:
        effects.append(LogNotice(
            channel_id=log_channel_id,
            title="New Suggestion",
            description=f"ID: {suggestion.id}\nAuthor: {submission.author.name}",
            color_key="created",
        ))

    if submission.source is None:
        if display_ref.jump_url:
            effects.append(Reply(f"Suggestion posted! [View it here]({display_ref.jump_url})"))
        else:
            effects.append(Reply("Suggestion posted!"))

    return Outcome(effects=effects, suggestion=suggestion)


def cast_vote(state: SuggestionState, suggestion_id: str, user_id: int, choice: VoteChoice) -> Outcome:
    """
    Record one vote and refresh the card counters.

    Raises:
        SuggestionNotFound, AlreadyVoted, VotingClosed
    """
    allow_closed = state.allow_votes_after_decision
    state.store.record_vote(suggestion_id, user_id, choice, allow_closed=allow_closed)
    suggestion = state.store.get(suggestion_id)

    logger.info(f"Vote {VoteChoice(choice).value} on {suggestion_id} by {user_id} "
                f"({suggestion.upvotes} up / {suggestion.downvotes} down)")

    voting_open = allow_closed or not suggestion.status.is_terminal
    return Outcome(
        effects=[RefreshCard.of(suggestion, voting_open), Reply("Vote recorded!")],
        suggestion=suggestion,
    )


def decide(state: SuggestionState, suggestion_id: str, decision: Decision, actor: Actor) -> Outcome:
    """
    Approve or deny a pending suggestion.

    Raises:
        Unauthorized: actor is not an admin (nothing changes)
        SuggestionNotFound: unknown ID
        InvalidTransition: the suggestion was already decided
    """
    if not actor.is_admin:
        logger.warning(f"{actor.name} (ID: {actor.user_id}) tried to {Decision(decision).value} {suggestion_id} without permission")
        raise Unauthorized()

    status = Decision(decision).status
    suggestion = state.store.set_status(suggestion_id, status)
    logger.info(f"Suggestion {suggestion_id} {status.value} by {actor.name} (ID: {actor.user_id})")

    voting_open = state.allow_votes_after_decision
    effects: List[Effect] = [
        RefreshCard.of(suggestion, voting_open),
        Reply(f"Suggestion {status.value}!"),
    ]

    log_channel_id = state.channels.log_channel_id
    if log_channel_id is not None:
        effects.append(LogNotice(
            channel_id=log_channel_id,
            title=f"Suggestion {status.value.capitalize()}",
            description=f"ID: {suggestion_id}\nBy: {actor.name}",
            color_key=status.value,
        ))

    return Outcome(effects=effects, suggestion=suggestion)


def configure_channel(state: SuggestionState, actor: Actor, kind: ChannelKind, channel_id: int) -> Outcome:
    """
    Set the suggestion or log channel.

    Raises:
        Unauthorized: actor is not an admin (nothing changes)
    """
    if not actor.is_admin:
        logger.warning(f"{actor.name} (ID: {actor.user_id}) tried to set the {ChannelKind(kind).value} channel without permission")
        raise Unauthorized()

    kind = ChannelKind(kind)
    effects: List[Effect] = []

    if kind is ChannelKind.SUGGESTIONS:
        state.channels.suggestion_channel_id = channel_id
        effects.append(Reply("Suggestion channel set!"))
        if state.channels.log_channel_id is not None:
            effects.append(LogNotice(
                channel_id=state.channels.log_channel_id,
                title="Config Updated",
                description=f"Suggestion channel set by {actor.name}",
                color_key="config",
            ))
    else:
        state.channels.log_channel_id = channel_id
        effects.append(Reply("Log channel set!"))
        effects.append(LogNotice(
            channel_id=channel_id,
            title="Logging Enabled",
            description=f"Log channel set by {actor.name}",
            color_key="config",
        ))

    logger.info(f"{kind.value.capitalize()} channel set to {channel_id} by {actor.name} (ID: {actor.user_id})")
    return Outcome(effects=effects)
