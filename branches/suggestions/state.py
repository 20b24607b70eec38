"""
Suggestions State
The context object every suggestions handler works on. One instance is built
when the branch loads; there is no other module-level state.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from utils import parse_channel_id
from .store import SuggestionStore


@dataclass
class ChannelSettings:
    """Runtime channel configuration, changed by /set-channel and /set-log."""
    suggestion_channel_id: Optional[int] = None
    log_channel_id: Optional[int] = None


@dataclass
class SuggestionState:
    store: SuggestionStore = field(default_factory=SuggestionStore)
    channels: ChannelSettings = field(default_factory=ChannelSettings)
    allow_votes_after_decision: bool = True
    min_length: int = 1
    max_length: int = 4000
    _locks: Dict[str, asyncio.Lock] = field(default_factory=dict, repr=False)

    def lock_for(self, suggestion_id: str) -> asyncio.Lock:
        """Lock serializing mutation and re-render of one suggestion's card."""
        lock = self._locks.get(suggestion_id)
        if lock is None:
            lock = self._locks[suggestion_id] = asyncio.Lock()
        return lock


def create_state(settings: Dict[str, Any]) -> SuggestionState:
    """Build the branch state from the "settings" section of its config."""
    validation = settings.get("validation", {})
    voting = settings.get("voting", {})

    return SuggestionState(
        channels=ChannelSettings(
            suggestion_channel_id=parse_channel_id(settings.get("channel_id"), "channel_id"),
            log_channel_id=parse_channel_id(settings.get("log_channel_id"), "log_channel_id"),
        ),
        allow_votes_after_decision=voting.get("allow_after_decision", True),
        min_length=validation.get("min_length", 1),
        max_length=validation.get("max_length", 4000),
    )
