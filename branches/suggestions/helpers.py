"""
Suggestions Helper Functions
Shared utility functions for the suggestions system.
"""

import logging
from typing import Dict, Any, Iterable

import discord

from .models import Actor, DisplayRef
from .presentation import DEFAULT_COLORS

logger = logging.getLogger(__name__)


def get_embed_colors(settings: Dict[str, Any]) -> Dict[str, int]:
    """Get embed colors from the branch settings, falling back to the defaults."""
    embed_colors = settings.get("ui", {}).get("embed_colors", {}) or {}
    colors = dict(DEFAULT_COLORS)
    for key, value in embed_colors.items():
        try:
            colors[key] = int(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring invalid embed color for {key}: {value!r}")
    return colors


def is_manager(user: discord.abc.User, manager_role_ids: Iterable[int]) -> bool:
    """Administrator permission, or one of the configured manager roles."""
    permissions = getattr(user, "guild_permissions", None)
    if permissions is not None and permissions.administrator is True:
        return True

    manager_role_ids = set(manager_role_ids or [])
    if not manager_role_ids:
        return False
    return any(role.id in manager_role_ids for role in getattr(user, "roles", []))


def actor_from_user(user: discord.abc.User, manager_role_ids: Iterable[int]) -> Actor:
    return Actor(user_id=user.id, name=str(user), is_admin=is_manager(user, manager_role_ids))


def display_ref_for(message: discord.Message) -> DisplayRef:
    return DisplayRef(channel_id=message.channel.id, message_id=message.id, jump_url=message.jump_url)
