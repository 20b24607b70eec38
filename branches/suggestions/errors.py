"""
Suggestions Errors
Every error here is recoverable: handlers report `user_message` back to the
user as an ephemeral reply.
"""


class SuggestionError(Exception):
    """Base class for suggestion workflow errors."""

    user_message = "Something went wrong with that suggestion."

    def __init__(self, message: str = None):
        self.user_message = message or self.user_message
        super().__init__(self.user_message)


class SuggestionNotFound(SuggestionError):
    user_message = "Suggestion not found!"

    def __init__(self, suggestion_id: str, message: str = None):
        self.suggestion_id = suggestion_id
        super().__init__(message or f"Suggestion `{suggestion_id}` not found!")


class AlreadyVoted(SuggestionError):
    user_message = "You have already voted!"


class VotingClosed(SuggestionError):
    user_message = "Voting on this suggestion is closed."


class Unauthorized(SuggestionError):
    user_message = "Admin only!"


class ChannelNotConfigured(SuggestionError):
    user_message = "Suggestion channel not set!"


class InvalidTransition(SuggestionError):
    user_message = "This suggestion has already been decided."


class InvalidSuggestion(SuggestionError):
    user_message = "Your suggestion was empty or invalid."
