import discord
from discord import app_commands
from discord.ext import commands
import logging
import time
from typing import Dict, Any, Optional

from constants import COLOR_INFO
from utils import merge_config

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_CONFIG = {
    "enabled": True,
    "version": "1.0.0",
    "settings": {
        "help": {
            "title": "Segvento Help",
            "description": "Bot for managing server suggestions",
            "commands": {
                "/suggest": "Submit a suggestion",
                "/approve": "Approve a suggestion (Admin)",
                "/deny": "Deny a suggestion (Admin)",
                "/set-channel": "Set the suggestion channel (Admin)",
                "/set-log": "Set the staff log channel (Admin)",
                "/config": "View current bot configuration",
            },
            "footer": "Post in the suggestion channel or use /suggest",
            "color": COLOR_INFO
        }
    }
}


class General(commands.Cog):
    """Help menu and latency check."""

    def __init__(self, bot: commands.Bot, config: Optional[Dict[str, Any]] = None) -> None:
        self.bot = bot

        # Load config
        self.config = merge_config(DEFAULT_CONFIG, config) if config is not None else self.load_config()

        help_settings = self.config.get("settings", {}).get("help", {})
        self.help_title: str = help_settings.get("title", "Segvento Help")
        self.help_description: str = help_settings.get("description", "")
        self.help_commands: Dict[str, str] = help_settings.get("commands", {}) or {}
        self.help_footer: str = help_settings.get("footer", "")
        self.help_color: int = help_settings.get("color", COLOR_INFO)

        logger.info("General branch initialized")

    def load_config(self) -> Dict[str, Any]:
        """Load config from config.yml in this branch's folder."""
        from core.branch_loader import get_branch_loader
        return get_branch_loader().load_config("general")

    def build_help_embed(self) -> discord.Embed:
        embed = discord.Embed(
            title=self.help_title,
            description=self.help_description,
            color=self.help_color
        )
        for name, description in self.help_commands.items():
            embed.add_field(name=name, value=description, inline=False)
        if self.help_footer:
            embed.set_footer(text=self.help_footer)
        return embed

    @app_commands.command(name="help", description="Show the help menu")
    async def help_command(self, interaction: discord.Interaction) -> None:
        """Display the command overview."""
        await interaction.response.send_message(embed=self.build_help_embed(), ephemeral=True)

    @app_commands.command(name="ping", description="Check bot latency")
    async def ping(self, interaction: discord.Interaction) -> None:
        """Round-trip time of the reply, plus gateway heartbeat latency."""
        started = time.perf_counter()
        await interaction.response.send_message("Pinging...", ephemeral=True)
        round_trip = (time.perf_counter() - started) * 1000

        await interaction.edit_original_response(
            content=f"Pong! {round_trip:.0f}ms (gateway: {self.bot.latency * 1000:.0f}ms)"
        )
