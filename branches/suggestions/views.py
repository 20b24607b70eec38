"""
Suggestions Views
Vote buttons attached to each suggestion card.
"""

import discord
from discord import ui, Interaction
import logging

from .models import VoteChoice
from .presentation import vote_custom_id

logger = logging.getLogger(__name__)


class VoteButton(ui.DynamicItem[ui.Button], template=r"(?P<choice>upvote|downvote)_(?P<id>[0-9a-f]+)"):
    """
    Upvote or downvote button for one suggestion.

    Registered with the bot when the branch loads, so clicks on any card are
    routed here, including cards posted before a restart whose suggestion
    is no longer in memory.
    """

    def __init__(self, choice: VoteChoice, suggestion_id: str, voting_open: bool = True):
        choice = VoteChoice(choice)
        if choice is VoteChoice.UPVOTE:
            label, style = "👍 Upvote", discord.ButtonStyle.primary
        else:
            label, style = "👎 Downvote", discord.ButtonStyle.danger

        super().__init__(ui.Button(
            label=label,
            style=style,
            custom_id=vote_custom_id(choice, suggestion_id),
            disabled=not voting_open,
        ))
        self.choice = choice
        self.suggestion_id = suggestion_id

    @classmethod
    async def from_custom_id(cls, interaction: Interaction, item: ui.Button, match, /):
        return cls(VoteChoice(match["choice"]), match["id"])

    async def callback(self, interaction: Interaction):
        from .handlers import handle_vote_button, send_ephemeral

        cog = interaction.client.get_cog("Suggestions")
        if cog is None:
            logger.warning(f"Vote on {self.suggestion_id} while the suggestions branch is not loaded")
            await send_ephemeral(interaction, "Suggestion not found!")
            return
        await handle_vote_button(interaction, cog)


class SuggestionView(ui.View):
    """Upvote/downvote buttons for one suggestion card."""

    def __init__(self, suggestion_id: str, voting_open: bool = True):
        super().__init__(timeout=None)
        self.suggestion_id = suggestion_id
        self.add_item(VoteButton(VoteChoice.UPVOTE, suggestion_id, voting_open))
        self.add_item(VoteButton(VoteChoice.DOWNVOTE, suggestion_id, voting_open))
