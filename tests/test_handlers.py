"""Tests for the Discord-facing handlers of the suggestions branch."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from branches.suggestions.handlers import (
    handle_channel_command,
    handle_decision_command,
    handle_suggest_command,
    handle_vote_button,
)
from branches.suggestions.helpers import display_ref_for, is_manager
from branches.suggestions.models import Actor, Decision, SuggestionStatus, VoteChoice
from branches.suggestions.presentation import build_suggestion_embed
from branches.suggestions.store import SuggestionStore
from branches.suggestions.views import SuggestionView, VoteButton
from branches.suggestions.workflow import ChannelKind, Submission

from conftest import (
    LOG_CHANNEL_ID,
    SUGGESTION_CHANNEL_ID,
    make_interaction,
    make_message,
    make_user,
)


@pytest.fixture
def card(channels):
    message = make_message(555, channels[SUGGESTION_CHANNEL_ID])
    channels[SUGGESTION_CHANNEL_ID].fetch_message.return_value = message
    return message


@pytest.fixture
def suggestion(cog, card):
    """A pending suggestion whose card is `card`."""
    created = cog.state.store.create(author_id=2, display_ref=display_ref_for(card), content="Add dark mode")
    submission = Submission(created.id, Actor(2, "member#0002"), "Add dark mode", SUGGESTION_CHANNEL_ID)
    card.embeds = [build_suggestion_embed(submission, cog.colors)]
    return created


def edited_embed(message):
    return message.edit.await_args.kwargs["embed"]


class TestVoteButton:
    @pytest.mark.asyncio
    async def test_vote_updates_card(self, cog, card, suggestion):
        interaction = make_interaction(make_user(7), message=card, custom_id=f"upvote_{suggestion.id}")

        await handle_vote_button(interaction, cog)

        assert (suggestion.upvotes, suggestion.downvotes) == (1, 0)
        embed = edited_embed(card)
        assert [f.value for f in embed.fields] == ["1", "0"]
        interaction.response.defer.assert_awaited_once_with(ephemeral=True)
        interaction.followup.send.assert_awaited_once_with("Vote recorded!", ephemeral=True)

    @pytest.mark.asyncio
    async def test_live_card_left_unchanged(self, cog, card, suggestion):
        interaction = make_interaction(make_user(7), message=card, custom_id=f"upvote_{suggestion.id}")

        await handle_vote_button(interaction, cog)

        assert card.embeds[0].fields[0].value == "0"
        assert edited_embed(card).fields[0].value == "1"

    @pytest.mark.asyncio
    async def test_second_vote_rejected(self, cog, card, suggestion):
        voter = make_user(7)
        await handle_vote_button(make_interaction(voter, message=card, custom_id=f"upvote_{suggestion.id}"), cog)

        again = make_interaction(voter, message=card, custom_id=f"downvote_{suggestion.id}")
        await handle_vote_button(again, cog)

        again.followup.send.assert_awaited_once_with("You have already voted!", ephemeral=True)
        assert (suggestion.upvotes, suggestion.downvotes) == (1, 0)
        assert card.edit.await_count == 1

    @pytest.mark.asyncio
    async def test_interleaved_votes_by_same_user(self, cog, card, suggestion):
        async def slow_edit(**kwargs):
            await asyncio.sleep(0)

        card.edit = AsyncMock(side_effect=slow_edit)
        voter = make_user(7)
        first = make_interaction(voter, message=card, custom_id=f"upvote_{suggestion.id}")
        second = make_interaction(voter, message=card, custom_id=f"downvote_{suggestion.id}")

        await asyncio.gather(handle_vote_button(first, cog), handle_vote_button(second, cog))

        assert suggestion.upvotes + suggestion.downvotes == 1
        assert len(suggestion.voters) == 1

    @pytest.mark.asyncio
    async def test_click_acknowledged_while_card_is_busy(self, cog, card, suggestion):
        interaction = make_interaction(make_user(7), message=card, custom_id=f"upvote_{suggestion.id}")

        async with cog.state.lock_for(suggestion.id):
            task = asyncio.create_task(handle_vote_button(interaction, cog))
            for _ in range(5):
                await asyncio.sleep(0)

            interaction.response.defer.assert_awaited_once_with(ephemeral=True)
            assert suggestion.upvotes == 0

        await task
        assert suggestion.upvotes == 1
        interaction.followup.send.assert_awaited_once_with("Vote recorded!", ephemeral=True)

    @pytest.mark.asyncio
    async def test_unknown_suggestion(self, cog, card):
        interaction = make_interaction(make_user(7), message=card, custom_id="upvote_deadbeef")

        await handle_vote_button(interaction, cog)

        interaction.followup.send.assert_awaited_once_with("Suggestion `deadbeef` not found!", ephemeral=True)
        card.edit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_render_failure_keeps_vote(self, cog, card, suggestion):
        card.edit = AsyncMock(side_effect=discord.HTTPException(MagicMock(status=500, reason="boom"), "boom"))
        interaction = make_interaction(make_user(7), message=card, custom_id=f"downvote_{suggestion.id}")

        await handle_vote_button(interaction, cog)

        assert suggestion.downvotes == 1
        interaction.followup.send.assert_awaited_once_with("Failed to update vote.", ephemeral=True)


class TestVoteButtonRouting:
    """Clicks reach the branch through the registered VoteButton item."""

    @pytest.mark.asyncio
    async def test_branch_registers_vote_buttons(self, cog, bot):
        await cog.cog_load()
        bot.add_dynamic_items.assert_called_once_with(VoteButton)

        cog.cog_unload()
        bot.remove_dynamic_items.assert_called_once_with(VoteButton)

    @pytest.mark.asyncio
    async def test_card_from_before_restart_reports_not_found(self, cog, bot, card):
        custom_id = "upvote_0badc0de"
        interaction = make_interaction(make_user(7), message=card, custom_id=custom_id)
        interaction.client = bot
        bot.get_cog = MagicMock(return_value=cog)

        match = VoteButton.__discord_ui_compiled_template__.fullmatch(custom_id)
        button = await VoteButton.from_custom_id(interaction, MagicMock(), match)
        await button.callback(interaction)

        assert (button.choice, button.suggestion_id) == (VoteChoice.UPVOTE, "0badc0de")
        bot.get_cog.assert_called_once_with("Suggestions")
        interaction.followup.send.assert_awaited_once_with("Suggestion `0badc0de` not found!", ephemeral=True)
        card.edit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_branch_not_loaded(self, bot, card):
        interaction = make_interaction(make_user(7), message=card, custom_id="downvote_1a2b3c4d")
        interaction.client = bot
        bot.get_cog = MagicMock(return_value=None)

        await VoteButton(VoteChoice.DOWNVOTE, "1a2b3c4d").callback(interaction)

        interaction.response.send_message.assert_awaited_once_with("Suggestion not found!", ephemeral=True)

    def test_card_buttons(self):
        view = SuggestionView("1a2b3c4d", voting_open=False)

        assert [item.custom_id for item in view.children] == ["upvote_1a2b3c4d", "downvote_1a2b3c4d"]
        assert all(item.item.disabled for item in view.children)


class TestSuggestCommand:
    @pytest.mark.asyncio
    async def test_channel_not_configured(self, cog):
        interaction = make_interaction(make_user(2))

        await handle_suggest_command(interaction, cog, "Add dark mode")

        interaction.response.send_message.assert_awaited_once_with("Suggestion channel not set!", ephemeral=True)
        assert len(cog.state.store) == 0

    @pytest.mark.asyncio
    async def test_posts_card_and_thread(self, cog, channels, card):
        cog.state.store = SuggestionStore(id_factory=lambda: "1a2b3c4d")
        cog.state.channels.suggestion_channel_id = SUGGESTION_CHANNEL_ID
        channels[SUGGESTION_CHANNEL_ID].send.return_value = card
        interaction = make_interaction(make_user(2, "member#0002"))

        await handle_suggest_command(interaction, cog, "Add dark mode")

        suggestion = cog.state.store.get("1a2b3c4d")
        assert suggestion.status is SuggestionStatus.PENDING
        assert suggestion.display_ref.message_id == card.id

        sent = channels[SUGGESTION_CHANNEL_ID].send.await_args.kwargs
        assert sent["embed"].title == f"New Suggestion [Pending] (ID: {suggestion.id})"
        assert [item.custom_id for item in sent["view"].children] == [
            f"upvote_{suggestion.id}",
            f"downvote_{suggestion.id}",
        ]

        card.create_thread.assert_awaited_once_with(name=suggestion.id, auto_archive_duration=1440)
        thread = card.create_thread.return_value
        thread.send.assert_awaited_once_with("Discuss this suggestion here <@2>!")
        interaction.followup.send.assert_awaited_once_with(
            f"Suggestion posted! [View it here]({card.jump_url})", ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_failed_post_releases_id(self, cog, channels):
        draws = iter(["1a2b3c4d", "1a2b3c4d", "feedf00d"])
        cog.state.store = SuggestionStore(id_factory=lambda: next(draws))
        cog.state.channels.suggestion_channel_id = SUGGESTION_CHANNEL_ID
        channels[SUGGESTION_CHANNEL_ID].send.side_effect = discord.HTTPException(
            MagicMock(status=500, reason="boom"), "boom"
        )
        interaction = make_interaction(make_user(2))

        await handle_suggest_command(interaction, cog, "Add dark mode")

        interaction.followup.send.assert_awaited_once_with(
            "Failed to create your suggestion. Please try again later.", ephemeral=True
        )
        assert len(cog.state.store) == 0
        assert cog.state.store.new_id() == "1a2b3c4d"

    @pytest.mark.asyncio
    async def test_logs_new_suggestion(self, cog, channels, card):
        cog.state.channels.suggestion_channel_id = SUGGESTION_CHANNEL_ID
        cog.state.channels.log_channel_id = LOG_CHANNEL_ID
        channels[SUGGESTION_CHANNEL_ID].send.return_value = card

        await handle_suggest_command(make_interaction(make_user(2, "member#0002")), cog, "Add dark mode")

        embed = channels[LOG_CHANNEL_ID].send.await_args.kwargs["embed"]
        assert embed.title == "New Suggestion"
        assert "Author: member#0002" in embed.description


class TestMessageIntake:
    @pytest.mark.asyncio
    async def test_message_in_suggestion_channel_becomes_card(self, cog, channels, card):
        cog.state.store = SuggestionStore(id_factory=lambda: "1a2b3c4d")
        cog.state.channels.suggestion_channel_id = SUGGESTION_CHANNEL_ID
        channels[SUGGESTION_CHANNEL_ID].send.return_value = card
        raw = make_message(9, channels[SUGGESTION_CHANNEL_ID], content="Add feature X", author=make_user(2))

        await cog.on_message(raw)

        suggestion = cog.state.store.get("1a2b3c4d")
        assert suggestion.status is SuggestionStatus.PENDING
        assert suggestion.content == "Add feature X"
        raw.delete.assert_awaited_once()
        card.create_thread.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ignored_without_channel(self, cog, channels):
        raw = make_message(9, channels[SUGGESTION_CHANNEL_ID], content="Add feature X")

        await cog.on_message(raw)

        assert len(cog.state.store) == 0
        raw.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ignores_bots_and_other_channels(self, cog, channels):
        cog.state.channels.suggestion_channel_id = SUGGESTION_CHANNEL_ID
        from_bot = make_message(9, channels[SUGGESTION_CHANNEL_ID], "hi", author=make_user(3, bot=True))
        elsewhere = make_message(10, channels[LOG_CHANNEL_ID], "Add feature X")

        await cog.on_message(from_bot)
        await cog.on_message(elsewhere)

        assert len(cog.state.store) == 0
        channels[SUGGESTION_CHANNEL_ID].send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_message_removed_and_author_told(self, cog, channels):
        cog.state.channels.suggestion_channel_id = SUGGESTION_CHANNEL_ID
        author = make_user(2)
        raw = make_message(9, channels[SUGGESTION_CHANNEL_ID], content="   ", author=author)

        await cog.on_message(raw)

        assert len(cog.state.store) == 0
        author.send.assert_awaited_once_with("Your suggestion was empty or invalid.")
        raw.delete.assert_awaited_once()


class TestDecisionCommand:
    @pytest.mark.asyncio
    async def test_non_admin(self, cog, card, suggestion):
        interaction = make_interaction(make_user(2))

        await handle_decision_command(interaction, cog, suggestion.id, Decision.APPROVE)

        interaction.response.send_message.assert_awaited_once_with("Admin only!", ephemeral=True)
        assert suggestion.status is SuggestionStatus.PENDING
        card.edit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_id(self, cog):
        interaction = make_interaction(make_user(1, admin=True))

        await handle_decision_command(interaction, cog, "deadbeef", Decision.DENY)

        interaction.response.send_message.assert_awaited_once_with("Suggestion `deadbeef` not found!", ephemeral=True)

    @pytest.mark.asyncio
    async def test_approve_rerenders_card(self, cog, channels, card, suggestion):
        cog.state.channels.log_channel_id = LOG_CHANNEL_ID
        interaction = make_interaction(make_user(1, "admin#0001", admin=True))

        await handle_decision_command(interaction, cog, f"  {suggestion.id} ", Decision.APPROVE)

        assert suggestion.status is SuggestionStatus.APPROVED
        embed = edited_embed(card)
        assert embed.title == f"New Suggestion [Approved] (ID: {suggestion.id})"
        assert embed.description == "Add dark mode"
        interaction.followup.send.assert_awaited_once_with("Suggestion approved!", ephemeral=True)
        log_embed = channels[LOG_CHANNEL_ID].send.await_args.kwargs["embed"]
        assert log_embed.title == "Suggestion Approved"

    @pytest.mark.asyncio
    async def test_manager_role_can_deny(self, cog, card, suggestion):
        interaction = make_interaction(make_user(5, role_ids=[777]))

        await handle_decision_command(interaction, cog, suggestion.id, Decision.DENY)

        assert suggestion.status is SuggestionStatus.DENIED
        assert "[Denied]" in edited_embed(card).title

    @pytest.mark.asyncio
    async def test_redecision_rejected(self, cog, card, suggestion):
        admin = make_user(1, admin=True)
        await handle_decision_command(make_interaction(admin), cog, suggestion.id, Decision.DENY)

        again = make_interaction(admin)
        await handle_decision_command(again, cog, suggestion.id, Decision.APPROVE)

        assert suggestion.status is SuggestionStatus.DENIED
        again.response.send_message.assert_awaited_once_with(
            f"Suggestion `{suggestion.id}` was already denied.", ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_render_failure_keeps_decision(self, cog, channels, suggestion):
        channels[SUGGESTION_CHANNEL_ID].fetch_message.side_effect = discord.NotFound(
            MagicMock(status=404, reason="Not Found"), "Unknown Message"
        )
        interaction = make_interaction(make_user(1, admin=True))

        await handle_decision_command(interaction, cog, suggestion.id, Decision.APPROVE)

        assert suggestion.status is SuggestionStatus.APPROVED
        interaction.followup.send.assert_awaited_once_with("An error occurred!", ephemeral=True)


class TestChannelCommands:
    @pytest.mark.asyncio
    async def test_set_channel_requires_admin(self, cog, channels):
        interaction = make_interaction(make_user(2))

        await handle_channel_command(interaction, cog, ChannelKind.SUGGESTIONS, channels[SUGGESTION_CHANNEL_ID])

        interaction.response.send_message.assert_awaited_once_with("Admin only!", ephemeral=True)
        assert cog.state.channels.suggestion_channel_id is None

    @pytest.mark.asyncio
    async def test_set_channel(self, cog, channels):
        interaction = make_interaction(make_user(1, admin=True))

        await handle_channel_command(interaction, cog, ChannelKind.SUGGESTIONS, channels[SUGGESTION_CHANNEL_ID])

        assert cog.state.channels.suggestion_channel_id == SUGGESTION_CHANNEL_ID
        interaction.response.send_message.assert_awaited_once_with("Suggestion channel set!", ephemeral=True)

    @pytest.mark.asyncio
    async def test_set_log_announces_in_log_channel(self, cog, channels):
        interaction = make_interaction(make_user(1, "admin#0001", admin=True))

        await handle_channel_command(interaction, cog, ChannelKind.LOG, channels[LOG_CHANNEL_ID])

        assert cog.state.channels.log_channel_id == LOG_CHANNEL_ID
        embed = channels[LOG_CHANNEL_ID].send.await_args.kwargs["embed"]
        assert embed.title == "Logging Enabled"
        assert embed.description == "Log channel set by admin#0001"

    @pytest.mark.asyncio
    async def test_config_command(self, cog):
        cog.state.channels.suggestion_channel_id = SUGGESTION_CHANNEL_ID
        interaction = make_interaction(make_user(2))

        await cog.show_config.callback(cog, interaction)

        embed = interaction.response.send_message.await_args.kwargs["embed"]
        assert [f.value for f in embed.fields] == [f"<#{SUGGESTION_CHANNEL_ID}>", "Not set"]


class TestIsManager:
    def test_administrator(self):
        assert is_manager(make_user(1, admin=True), [])

    def test_manager_role(self):
        assert is_manager(make_user(1, role_ids=[10, 777]), [777])

    def test_regular_member(self):
        assert not is_manager(make_user(1, role_ids=[10]), [777])
