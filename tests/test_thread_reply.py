"""Tests for handle_thread_reply — mode dispatch, filtering and failure handling."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from hint_bot.conversation import ANGLE_REQUEST, statement_message
from hint_bot.domain.errors import NonZeroExit
from hint_bot.domain.models import GeneratedContent, Role
from hint_bot.handlers.thread_reply import APOLOGY, handle_thread_reply


BOT_ID = 999
USER_ID = 1234
OTHER_BOT_ID = 555

_T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _aiter(items):
    for item in items:
        yield item


def _typing():
    cm = MagicMock()
    cm.__aenter__ = AsyncMock()
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm


def _embed(title, description):
    e = MagicMock()
    e.title = title
    e.description = description
    return e


def _discord_message(author_id, content, minute, *, is_bot=None, embeds=(), channel=None):
    msg = MagicMock()
    msg.author = MagicMock()
    msg.author.id = author_id
    msg.author.bot = author_id in (BOT_ID, OTHER_BOT_ID) if is_bot is None else is_bot
    msg.content = content
    msg.created_at = _T0 + timedelta(minutes=minute)
    msg.embeds = list(embeds)
    msg.channel = channel
    return msg


def _make_thread(name, history, *, owner_id=BOT_ID, channel_type=discord.ChannelType.public_thread):
    thread = MagicMock()
    thread.id = 42
    thread.name = name
    thread.type = channel_type
    thread.owner_id = owner_id
    thread.send = AsyncMock()
    thread.typing = MagicMock(return_value=_typing())
    # Discord returns newest first
    thread.history = MagicMock(side_effect=lambda **kw: _aiter(list(reversed(history))))
    return thread


def _reply(thread, history, content, minute):
    """Append a user reply to ``history`` and return it as the triggering message."""
    msg = _discord_message(USER_ID, content, minute, channel=thread)
    history.append(msg)
    return msg


def _generator():
    generator = MagicMock()
    for name in ("refine", "continue_talk", "engage", "refine_engage"):
        setattr(generator, name, AsyncMock())
    return generator


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

class TestIgnoredMessages:
    @pytest.mark.asyncio
    async def test_not_a_thread(self):
        history = []
        thread = _make_thread("topic", history, channel_type=discord.ChannelType.text)
        msg = _reply(thread, history, "hello", 1)
        generator = _generator()
        await handle_thread_reply(msg, generator, BOT_ID)
        thread.history.assert_not_called()
        thread.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bot_authors_ignored(self):
        history = []
        thread = _make_thread("topic", history)
        for author in (BOT_ID, OTHER_BOT_ID):
            msg = _discord_message(author, "beep", 1, channel=thread)
            await handle_thread_reply(msg, _generator(), BOT_ID)
        thread.history.assert_not_called()

    @pytest.mark.asyncio
    async def test_thread_owned_by_someone_else(self):
        history = []
        thread = _make_thread("topic", history, owner_id=USER_ID)
        msg = _reply(thread, history, "hello", 1)
        await handle_thread_reply(msg, _generator(), BOT_ID)
        thread.history.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_history_short_circuits(self):
        thread = _make_thread("topic", [])
        msg = _discord_message(USER_ID, "hello", 1, channel=thread)
        generator = _generator()
        await handle_thread_reply(msg, generator, BOT_ID)
        generator.refine.assert_not_awaited()
        thread.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_history_fetch_failure(self):
        thread = _make_thread("topic", [])
        thread.history = MagicMock(side_effect=discord.HTTPException(MagicMock(status=500, reason="err"), "boom"))
        msg = _discord_message(USER_ID, "hello", 1, channel=thread)
        generator = _generator()
        await handle_thread_reply(msg, generator, BOT_ID)
        generator.refine.assert_not_awaited()
        thread.send.assert_not_awaited()


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------

class TestContentHintThread:
    @pytest.mark.asyncio
    async def test_refines_and_posts_embeds(self):
        history = [
            _discord_message(
                BOT_ID, "**Content generated for:** edge computing", 0,
                embeds=[_embed("LinkedIn Post", "Edge post"), _embed("X (Twitter) Post", "Edge tweet")],
            ),
            _discord_message(BOT_ID, "Reply in this thread to refine the content.", 1),
        ]
        thread = _make_thread("edge computing", history)
        msg = _reply(thread, history, "make it shorter", 2)
        generator = _generator()
        generator.refine.return_value = [GeneratedContent("short post", "short tweet")]

        await handle_thread_reply(msg, generator, BOT_ID)

        transcript = generator.refine.call_args[0][0]
        assert transcript[0].role == Role.ASSISTANT
        assert "[LinkedIn Post]: Edge post" in transcript[0].content
        assert transcript[-1].content == "make it shorter"
        kwargs = thread.send.call_args.kwargs
        assert kwargs["content"] == "**Updated content:**"
        assert [e.title for e in kwargs["embeds"]] == ["LinkedIn Post", "X (Twitter) Post"]
        assert kwargs["embeds"][0].description == "short post"

    @pytest.mark.asyncio
    async def test_other_bot_message_excluded(self):
        history = [
            _discord_message(BOT_ID, "draft", 0),
            _discord_message(OTHER_BOT_ID, "spam from another bot", 1),
        ]
        thread = _make_thread("topic", history)
        msg = _reply(thread, history, "tweak it", 2)
        generator = _generator()
        generator.refine.return_value = [GeneratedContent("a", "b")]

        await handle_thread_reply(msg, generator, BOT_ID)

        contents = [m.content for m in generator.refine.call_args[0][0]]
        assert contents == ["draft", "tweak it"]


class TestTalkThread:
    @pytest.mark.asyncio
    async def test_continue_talk_posts_verbatim(self):
        history = [
            _discord_message(BOT_ID, "", 0),
            _discord_message(BOT_ID, "AI will keep getting better.", 1),
        ]
        thread = _make_thread("[talk] future of AI", history)
        msg = _reply(thread, history, "What about jobs?", 2)
        generator = _generator()
        generator.continue_talk.return_value = "Jobs will change, not vanish."

        await handle_thread_reply(msg, generator, BOT_ID)

        transcript = generator.continue_talk.call_args[0][0]
        assert [m.content for m in transcript] == ["AI will keep getting better.", "What about jobs?"]
        thread.send.assert_awaited_once_with("Jobs will change, not vanish.")
        generator.refine.assert_not_awaited()


class TestEngageThread:
    def _setup(self):
        return [
            _discord_message(BOT_ID, statement_message("AI will replace junior devs"), 0),
            _discord_message(BOT_ID, ANGLE_REQUEST, 1),
        ]

    @pytest.mark.asyncio
    async def test_first_angle_uses_engage_prompt(self):
        history = self._setup()
        thread = _make_thread("[engage] AI will replace junior devs", history)
        msg = _reply(thread, history, "They'll mentor the AI", 2)
        generator = _generator()
        generator.engage.return_value = "Juniors won't vanish, they'll supervise."

        await handle_thread_reply(msg, generator, BOT_ID)

        generator.engage.assert_awaited_once_with("AI will replace junior devs", "They'll mentor the AI")
        generator.refine_engage.assert_not_awaited()
        thread.send.assert_awaited_once_with("Juniors won't vanish, they'll supervise.")

    @pytest.mark.asyncio
    async def test_after_draft_uses_refinement(self):
        history = self._setup() + [
            _discord_message(USER_ID, "They'll mentor the AI", 2),
            _discord_message(BOT_ID, "Juniors won't vanish, they'll supervise.", 3),
        ]
        thread = _make_thread("[engage] AI will replace junior devs", history)
        msg = _reply(thread, history, "less formal", 4)
        generator = _generator()
        generator.refine_engage.return_value = "nah juniors are fine"

        await handle_thread_reply(msg, generator, BOT_ID)

        generator.engage.assert_not_awaited()
        transcript = generator.refine_engage.call_args[0][0]
        assert transcript[-1].content == "less formal"
        thread.send.assert_awaited_once_with("nah juniors are fine")


class TestFailures:
    @pytest.mark.asyncio
    async def test_generation_failure_sends_single_apology(self):
        history = [_discord_message(BOT_ID, "draft", 0)]
        thread = _make_thread("topic", history)
        msg = _reply(thread, history, "again", 1)
        generator = _generator()
        generator.refine.side_effect = NonZeroExit(1, "rate limited")

        await handle_thread_reply(msg, generator, BOT_ID)

        thread.send.assert_awaited_once_with(APOLOGY)

    @pytest.mark.asyncio
    async def test_apology_failure_swallowed(self):
        history = [_discord_message(BOT_ID, "draft", 0)]
        thread = _make_thread("[talk] x", history)
        msg = _reply(thread, history, "again", 1)
        generator = _generator()
        generator.continue_talk.side_effect = RuntimeError("boom")
        thread.send.side_effect = discord.HTTPException(MagicMock(status=404, reason="Not Found"), "gone")

        await handle_thread_reply(msg, generator, BOT_ID)

        thread.send.assert_awaited_once_with(APOLOGY)
