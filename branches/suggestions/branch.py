"""
Suggestions Branch Implementation
Handles user suggestions with voting and admin approval.
"""

import discord
from discord import app_commands
from discord.ext import commands
import logging
from typing import Any, Dict, Optional

from constants import (
    COLOR_APPROVED,
    COLOR_CONFIG,
    COLOR_DENIED,
    COLOR_INFO,
    COLOR_PENDING,
    THREAD_AUTO_ARCHIVE_ONE_DAY,
)
from utils import merge_config
from .handlers import (
    handle_channel_command,
    handle_decision_command,
    handle_suggest_command,
    handle_suggestion_message,
)
from .helpers import get_embed_colors
from .models import Decision
from .presentation import build_config_embed
from .state import create_state
from .views import VoteButton
from .workflow import ChannelKind

logger = logging.getLogger(__name__)


# Default configuration for this branch
DEFAULT_CONFIG = {
    "enabled": True,
    "version": "1.0.0",
    "settings": {
        # Seed values only; /set-channel and /set-log change them at runtime.
        "channel_id": 0,
        "log_channel_id": 0,
        # Roles allowed to approve/deny besides Administrators
        "manager_role_ids": [],

        "voting": {
            "allow_after_decision": True,
        },

        "validation": {
            "min_length": 1,
            "max_length": 4000,
        },

        "ui": {
            "embed_colors": {
                "pending": COLOR_PENDING,
                "approved": COLOR_APPROVED,
                "denied": COLOR_DENIED,
                "created": COLOR_APPROVED,
                "config": COLOR_CONFIG,
                "info": COLOR_INFO,
            },
            "thread": {
                "auto_archive_minutes": THREAD_AUTO_ARCHIVE_ONE_DAY,
            }
        },

        "messages": {
            "created_error": "Failed to create your suggestion. Please try again later.",
            "vote_failed": "Failed to update vote.",
        }
    }
}


class Suggestions(commands.Cog):
    """Handles user suggestions with voting and admin approval."""

    def __init__(self, bot: commands.Bot, config: Optional[Dict[str, Any]] = None):
        self.bot = bot

        # Load config
        self.config = merge_config(DEFAULT_CONFIG, config) if config is not None else self.load_config()
        settings = self.config.get("settings", {})

        # The only suggestion state in the process; lives as long as the branch
        self.state = create_state(settings)

        self.manager_role_ids = settings.get("manager_role_ids", []) or []
        self.messages: Dict[str, str] = settings.get("messages", {})
        self.colors = get_embed_colors(settings)
        self.thread_auto_archive: int = settings.get("ui", {}).get("thread", {}).get(
            "auto_archive_minutes", THREAD_AUTO_ARCHIVE_ONE_DAY
        )

        logger.info(
            f"Suggestions branch initialized (channel: {self.state.channels.suggestion_channel_id}, "
            f"log: {self.state.channels.log_channel_id})"
        )

    def load_config(self) -> Dict[str, Any]:
        """Load config from config.yml in this branch's folder."""
        from core.branch_loader import get_branch_loader
        return get_branch_loader().load_config("suggestions")

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        """Handle new messages in the suggestions channel."""
        await handle_suggestion_message(message, self)

    @app_commands.command(name="suggest", description="Submit a new suggestion")
    @app_commands.describe(suggestion="Your suggestion")
    @app_commands.guild_only()
    async def suggest(self, interaction: discord.Interaction, suggestion: str):
        await handle_suggest_command(interaction, self, suggestion)

    @app_commands.command(name="set-channel", description="Set the suggestion channel")
    @app_commands.describe(channel="The channel to set as suggestions channel")
    @app_commands.guild_only()
    async def set_channel(self, interaction: discord.Interaction, channel: discord.TextChannel):
        await handle_channel_command(interaction, self, ChannelKind.SUGGESTIONS, channel)

    @app_commands.command(name="set-log", description="Set the log channel for staff")
    @app_commands.describe(channel="The channel to set as log channel")
    @app_commands.guild_only()
    async def set_log(self, interaction: discord.Interaction, channel: discord.TextChannel):
        await handle_channel_command(interaction, self, ChannelKind.LOG, channel)

    @app_commands.command(name="approve", description="Approve a suggestion")
    @app_commands.describe(suggestion_id="The suggestion ID to approve")
    @app_commands.rename(suggestion_id="id")
    @app_commands.guild_only()
    async def approve(self, interaction: discord.Interaction, suggestion_id: str):
        await handle_decision_command(interaction, self, suggestion_id, Decision.APPROVE)

    @app_commands.command(name="deny", description="Deny a suggestion")
    @app_commands.describe(suggestion_id="The suggestion ID to deny")
    @app_commands.rename(suggestion_id="id")
    @app_commands.guild_only()
    async def deny(self, interaction: discord.Interaction, suggestion_id: str):
        await handle_decision_command(interaction, self, suggestion_id, Decision.DENY)

    @app_commands.command(name="config", description="View current bot configuration")
    @app_commands.guild_only()
    async def show_config(self, interaction: discord.Interaction):
        embed = build_config_embed(self.state.channels, self.colors)
        await interaction.response.send_message(embed=embed, ephemeral=True)

    async def cog_load(self):
        # Route vote clicks on every card, not only those posted by this process
        self.bot.add_dynamic_items(VoteButton)

    def cog_unload(self):
        """Called when the branch is unloaded."""
        self.bot.remove_dynamic_items(VoteButton)
        logger.info(f"Suggestions branch unloaded ({len(self.state.store)} suggestions dropped)")
