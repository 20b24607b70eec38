"""
Suggestions Handlers
Turns Discord events into workflow calls and carries out the resulting
effects (cards, threads, log notices, replies).
"""

import discord
from discord import Interaction
import logging
from typing import Dict, Iterable, Optional

from .errors import InvalidSuggestion, SuggestionError
from .helpers import actor_from_user, display_ref_for
from .models import Actor, Decision, DisplayRef
from .presentation import (
    build_log_embed,
    build_suggestion_embed,
    parse_vote_custom_id,
    refresh_suggestion_embed,
)
from .views import SuggestionView
from .workflow import (
    ChannelKind,
    DeleteMessage,
    LogNotice,
    OpenThread,
    PostCard,
    RefreshCard,
    Reply,
    card_posted,
    cast_vote,
    configure_channel,
    decide,
    is_intake_message,
    submit,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred!"


async def send_ephemeral(interaction: Interaction, content: str):
    """Reply to an interaction whether or not it was already acknowledged."""
    try:
        if interaction.response.is_done():
            await interaction.followup.send(content, ephemeral=True)
        else:
            await interaction.response.send_message(content, ephemeral=True)
    except Exception as err:
        logger.error(f"Failed to send response: {err}")


async def resolve_channel(bot, channel_id: int):
    channel = bot.get_channel(channel_id)
    if channel is None:
        channel = await bot.fetch_channel(channel_id)
    return channel


class EffectRunner:
    """Executes workflow effects against Discord for one event."""

    def __init__(self, cog, interaction: Optional[Interaction] = None,
                 messages: Iterable[discord.Message] = ()):
        self.cog = cog
        self.bot = cog.bot
        self.interaction = interaction
        self.messages: Dict[int, discord.Message] = {m.id: m for m in messages}

        # Button presses already carry the card they were clicked on
        if interaction is not None and getattr(interaction, "message", None) is not None:
            self.messages.setdefault(interaction.message.id, interaction.message)

    async def run(self, effects):
        for effect in effects:
            if isinstance(effect, PostCard):
                await self.post_card(effect)
            elif isinstance(effect, RefreshCard):
                await self.refresh_card(effect)
            elif isinstance(effect, OpenThread):
                await self.open_thread(effect)
            elif isinstance(effect, DeleteMessage):
                await self.delete_message(effect)
            elif isinstance(effect, LogNotice):
                await self.log_notice(effect)
            elif isinstance(effect, Reply):
                await self.reply(effect)
            else:
                raise TypeError(f"Unknown effect: {effect!r}")

    async def fetch_message(self, ref: DisplayRef) -> discord.Message:
        message = self.messages.get(ref.message_id)
        if message is None:
            channel = await resolve_channel(self.bot, ref.channel_id)
            message = await channel.fetch_message(ref.message_id)
            self.messages[message.id] = message
        return message

    async def post_card(self, effect: PostCard):
        submission = effect.submission
        try:
            channel = await resolve_channel(self.bot, submission.channel_id)
            message = await channel.send(
                embed=build_suggestion_embed(submission, self.cog.colors),
                view=SuggestionView(submission.suggestion_id),
            )
        except Exception:
            self.cog.state.store.release(submission.suggestion_id)
            raise
        self.messages[message.id] = message

        outcome = card_posted(self.cog.state, submission, display_ref_for(message))
        await self.run(outcome.effects)

    async def refresh_card(self, effect: RefreshCard):
        message = await self.fetch_message(effect.display_ref)
        embed = message.embeds[0] if message.embeds else discord.Embed()
        await message.edit(
            embed=refresh_suggestion_embed(embed, effect, self.cog.colors),
            view=SuggestionView(effect.suggestion_id, voting_open=effect.voting_open),
        )

    async def open_thread(self, effect: OpenThread):
        message = await self.fetch_message(effect.display_ref)
        thread = await message.create_thread(
            name=effect.name,
            auto_archive_duration=self.cog.thread_auto_archive,
        )
        await thread.send(effect.greeting)

    async def delete_message(self, effect: DeleteMessage):
        try:
            message = await self.fetch_message(effect.message_ref)
            await message.delete()
        except discord.NotFound:
            logger.debug(f"Message {effect.message_ref.message_id} was already deleted")
        except discord.Forbidden:
            logger.warning(f"Missing permissions to delete message {effect.message_ref.message_id}")

    async def log_notice(self, effect: LogNotice):
        try:
            channel = await resolve_channel(self.bot, effect.channel_id)
            await channel.send(embed=build_log_embed(effect, self.cog.colors))
        except discord.HTTPException as e:
            logger.error(f"Failed to send log notice '{effect.title}' to {effect.channel_id}: {e}")

    async def reply(self, effect: Reply):
        if self.interaction is None:
            return
        if self.interaction.response.is_done():
            await self.interaction.followup.send(effect.content, ephemeral=effect.ephemeral)
        else:
            await self.interaction.response.send_message(effect.content, ephemeral=effect.ephemeral)


async def handle_vote_button(interaction: Interaction, cog):
    """
    Handle upvote/downvote button clicks.

    Args:
        interaction: Discord interaction from button click
        cog: The loaded Suggestions branch
    """
    try:
        choice, suggestion_id = parse_vote_custom_id(interaction.data.get("custom_id", ""))
    except ValueError:
        await send_ephemeral(interaction, "Suggestion not found!")
        return

    try:
        # Acknowledge before queueing behind other votes on the same card
        await interaction.response.defer(ephemeral=True)
        async with cog.state.lock_for(suggestion_id):
            outcome = cast_vote(cog.state, suggestion_id, interaction.user.id, choice)
            await EffectRunner(cog, interaction).run(outcome.effects)
    except SuggestionError as e:
        await send_ephemeral(interaction, e.user_message)
    except discord.HTTPException as e:
        logger.error(f"Failed to edit message or respond: {e}")
        await send_ephemeral(interaction, cog.messages["vote_failed"])
    except Exception as e:
        logger.error(f"Error handling vote button: {e}", exc_info=True)
        await send_ephemeral(interaction, GENERIC_ERROR)


async def handle_suggest_command(interaction: Interaction, cog, text: str):
    """Handle /suggest."""
    author = actor_from_user(interaction.user, cog.manager_role_ids)

    try:
        outcome = submit(cog.state, author, text)
        await interaction.response.defer(ephemeral=True, thinking=True)
        await EffectRunner(cog, interaction).run(outcome.effects)
    except SuggestionError as e:
        await send_ephemeral(interaction, e.user_message)
    except discord.HTTPException as e:
        logger.error(f"Failed to create suggestion: {e}")
        await send_ephemeral(interaction, cog.messages["created_error"])
    except Exception as e:
        logger.error(f"Unexpected error creating suggestion: {e}", exc_info=True)
        await send_ephemeral(interaction, GENERIC_ERROR)


async def handle_suggestion_message(message: discord.Message, cog):
    """Turn a plain message in the suggestion channel into a suggestion card."""
    if not is_intake_message(cog.state, message.channel.id, message.author.bot):
        return

    author = Actor(user_id=message.author.id, name=str(message.author))
    runner = EffectRunner(cog, messages=[message])

    try:
        outcome = submit(cog.state, author, message.content, source=display_ref_for(message))
        await runner.run(outcome.effects)
    except InvalidSuggestion as e:
        await notify_author(message.author, e.user_message)
        await runner.delete_message(DeleteMessage(display_ref_for(message)))
    except discord.HTTPException as e:
        logger.error(f"Failed to create suggestion: {e}")
        await notify_author(message.author, cog.messages["created_error"])
    except Exception as e:
        logger.error(f"Unexpected error creating suggestion: {e}", exc_info=True)
        await notify_author(message.author, "An error occurred while creating your suggestion.")


async def notify_author(user: discord.abc.User, content: str):
    try:
        await user.send(content)
    except discord.HTTPException as e:
        logger.debug(f"Could not DM {user}: {e}")


async def handle_decision_command(interaction: Interaction, cog, suggestion_id: str, decision: Decision):
    """Handle /approve and /deny."""
    actor = actor_from_user(interaction.user, cog.manager_role_ids)
    suggestion_id = suggestion_id.strip().lower()

    try:
        async with cog.state.lock_for(suggestion_id):
            outcome = decide(cog.state, suggestion_id, decision, actor)
            await interaction.response.defer(ephemeral=True, thinking=True)
            await EffectRunner(cog, interaction).run(outcome.effects)
    except SuggestionError as e:
        await send_ephemeral(interaction, e.user_message)
    except discord.HTTPException as e:
        logger.error(f"Failed to update suggestion {suggestion_id}: {e}")
        await send_ephemeral(interaction, GENERIC_ERROR)
    except Exception as e:
        logger.error(f"Error handling {Decision(decision).value} for {suggestion_id}: {e}", exc_info=True)
        await send_ephemeral(interaction, GENERIC_ERROR)


async def handle_channel_command(interaction: Interaction, cog, kind: ChannelKind, channel: discord.abc.GuildChannel):
    """Handle /set-channel and /set-log."""
    actor = actor_from_user(interaction.user, cog.manager_role_ids)

    try:
        outcome = configure_channel(cog.state, actor, kind, channel.id)
        await EffectRunner(cog, interaction).run(outcome.effects)
    except SuggestionError as e:
        await send_ephemeral(interaction, e.user_message)
    except Exception as e:
        logger.error(f"Error setting {ChannelKind(kind).value} channel: {e}", exc_info=True)
        await send_ephemeral(interaction, GENERIC_ERROR)
