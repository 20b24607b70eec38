"""Shared pytest fixtures for Segvento tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from branches.suggestions.branch import Suggestions
from branches.suggestions.models import Actor, DisplayRef
from branches.suggestions.state import SuggestionState

SUGGESTION_CHANNEL_ID = 100
LOG_CHANNEL_ID = 200


@pytest.fixture
def state():
    """Fresh branch state with no channels configured."""
    return SuggestionState()


@pytest.fixture
def admin():
    return Actor(user_id=1, name="admin#0001", is_admin=True)


@pytest.fixture
def member():
    return Actor(user_id=2, name="member#0002", is_admin=False)


@pytest.fixture
def card_ref():
    return DisplayRef(channel_id=SUGGESTION_CHANNEL_ID, message_id=555, jump_url="https://discord.com/channels/1/100/555")


def make_user(user_id, name="user", admin=False, bot=False, role_ids=()):
    user = MagicMock()
    user.id = user_id
    user.bot = bot
    user.__str__.return_value = name
    user.guild_permissions.administrator = admin
    user.roles = [MagicMock(id=role_id) for role_id in role_ids]
    user.send = AsyncMock()
    return user


def make_channel(channel_id):
    channel = MagicMock()
    channel.id = channel_id
    channel.send = AsyncMock()
    channel.fetch_message = AsyncMock()
    return channel


def make_message(message_id, channel, content="", author=None):
    message = MagicMock()
    message.id = message_id
    message.channel = channel
    message.content = content
    message.author = author or make_user(99)
    message.jump_url = f"https://discord.com/channels/1/{channel.id}/{message_id}"
    message.embeds = []
    message.delete = AsyncMock()
    message.edit = AsyncMock()
    thread = MagicMock()
    thread.send = AsyncMock()
    message.create_thread = AsyncMock(return_value=thread)
    return message


def make_interaction(user, message=None, custom_id=None):
    """Interaction whose response flips to "done" once acknowledged."""
    interaction = MagicMock()
    interaction.user = user
    interaction.message = message
    interaction.data = {"custom_id": custom_id} if custom_id else {}

    acknowledged = {"done": False}

    async def acknowledge(*args, **kwargs):
        acknowledged["done"] = True

    interaction.response.is_done = MagicMock(side_effect=lambda: acknowledged["done"])
    interaction.response.send_message = AsyncMock(side_effect=acknowledge)
    interaction.response.defer = AsyncMock(side_effect=acknowledge)
    interaction.followup.send = AsyncMock()
    return interaction


@pytest.fixture
def channels():
    """Suggestion and log channels, resolvable through the fake bot."""
    return {
        SUGGESTION_CHANNEL_ID: make_channel(SUGGESTION_CHANNEL_ID),
        LOG_CHANNEL_ID: make_channel(LOG_CHANNEL_ID),
    }


@pytest.fixture
def bot(channels):
    bot = MagicMock()
    bot.get_channel = MagicMock(side_effect=lambda channel_id: channels.get(channel_id))
    bot.fetch_channel = AsyncMock(side_effect=lambda channel_id: channels[channel_id])
    return bot


@pytest.fixture
def cog(bot):
    """Suggestions branch built from in-memory config (no config.yml on disk)."""
    return Suggestions(bot, config={"settings": {"manager_role_ids": [777]}})
