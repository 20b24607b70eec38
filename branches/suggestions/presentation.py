"""
Suggestions Presentation
Builds and updates the Discord embeds for suggestion cards and notices.
"""

import copy
import re
from typing import Dict, Tuple

import discord

from constants import (
    COLOR_APPROVED,
    COLOR_CONFIG,
    COLOR_DENIED,
    COLOR_INFO,
    COLOR_PENDING,
    EMBED_FOOTER_MAX,
    truncate_for_embed_description,
)
from utils import truncate_text
from .models import SuggestionStatus, VoteChoice
from .state import ChannelSettings
from .workflow import LogNotice, RefreshCard, Submission

UPVOTES_FIELD = "👍 Upvotes"
DOWNVOTES_FIELD = "👎 Downvotes"

DEFAULT_COLORS = {
    "pending": COLOR_PENDING,
    "approved": COLOR_APPROVED,
    "denied": COLOR_DENIED,
    "created": COLOR_APPROVED,
    "config": COLOR_CONFIG,
    "info": COLOR_INFO,
}

_CUSTOM_ID_RE = re.compile(r"^(upvote|downvote)_([0-9a-f]+)$")
_STATUS_TAG_RE = re.compile(r"\[(Pending|Approved|Denied)\]")


def vote_custom_id(choice: VoteChoice, suggestion_id: str) -> str:
    """Button custom ID carrying both the vote and the suggestion, e.g. "upvote_1a2b3c4d"."""
    return f"{VoteChoice(choice).value}_{suggestion_id}"


def parse_vote_custom_id(custom_id: str) -> Tuple[VoteChoice, str]:
    """Split a vote button custom ID. Raises ValueError for anything else."""
    match = _CUSTOM_ID_RE.match(custom_id or "")
    if not match:
        raise ValueError(f"Not a vote button: {custom_id!r}")
    return VoteChoice(match.group(1)), match.group(2)


def card_title(suggestion_id: str, status: SuggestionStatus) -> str:
    return f"New Suggestion {SuggestionStatus(status).tag} (ID: {suggestion_id})"


def status_color(status: SuggestionStatus, colors: Dict[str, int]) -> int:
    return colors.get(SuggestionStatus(status).value, DEFAULT_COLORS[SuggestionStatus(status).value])


def build_suggestion_embed(submission: Submission, colors: Dict[str, int]) -> discord.Embed:
    """Card for a freshly submitted suggestion."""
    embed = discord.Embed(
        title=card_title(submission.suggestion_id, SuggestionStatus.PENDING),
        description=truncate_for_embed_description(submission.content),
        color=status_color(SuggestionStatus.PENDING, colors),
    )
    embed.add_field(name=UPVOTES_FIELD, value="0", inline=True)
    embed.add_field(name=DOWNVOTES_FIELD, value="0", inline=True)
    embed.set_footer(text=truncate_text(
        f"ID: {submission.suggestion_id} | Author: {submission.author.name}", EMBED_FOOTER_MAX
    ))
    return embed


def refresh_suggestion_embed(embed: discord.Embed, refresh: RefreshCard, colors: Dict[str, int]) -> discord.Embed:
    """
    Copy of an existing card with new counters, status tag and color.

    The description, footer and any other fields are left untouched.
    """
    updated = discord.Embed.from_dict(copy.deepcopy(embed.to_dict()))

    title = updated.title or card_title(refresh.suggestion_id, refresh.status)
    if _STATUS_TAG_RE.search(title):
        title = _STATUS_TAG_RE.sub(refresh.status.tag, title, count=1)
    else:
        title = card_title(refresh.suggestion_id, refresh.status)
    updated.title = title
    updated.color = status_color(refresh.status, colors)

    counters = [(UPVOTES_FIELD, refresh.upvotes), (DOWNVOTES_FIELD, refresh.downvotes)]
    for index, (name, count) in enumerate(counters):
        if index < len(updated.fields):
            updated.set_field_at(index, name=name, value=str(count), inline=True)
        else:
            updated.add_field(name=name, value=str(count), inline=True)

    return updated


def build_log_embed(notice: LogNotice, colors: Dict[str, int]) -> discord.Embed:
    return discord.Embed(
        title=notice.title,
        description=notice.description,
        color=colors.get(notice.color_key, DEFAULT_COLORS.get(notice.color_key, COLOR_INFO)),
    )


def build_config_embed(channels: ChannelSettings, colors: Dict[str, int]) -> discord.Embed:
    embed = discord.Embed(title="Bot Config", color=colors.get("info", COLOR_INFO))
    embed.add_field(
        name="Suggestion Channel",
        value=f"<#{channels.suggestion_channel_id}>" if channels.suggestion_channel_id else "Not set",
        inline=False,
    )
    embed.add_field(
        name="Log Channel",
        value=f"<#{channels.log_channel_id}>" if channels.log_channel_id else "Not set",
        inline=False,
    )
    return embed
