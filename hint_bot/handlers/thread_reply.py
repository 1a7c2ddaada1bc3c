"""Refinement of generated content from replies inside a bot thread."""

import discord

from hint_bot.adapters.discord_adapter import (
    build_embeds,
    is_thread,
    send_text,
    to_thread_message,
)
from hint_bot.conversation import (
    HISTORY_LIMIT,
    build_history,
    classify_thread,
    plan_engage,
)
from hint_bot.domain.models import EngagePhase, ThreadMode
from hint_bot.generator import ContentGenerator
from hint_bot.log import log


APOLOGY = "Sorry, I couldn't process that. Try rephrasing your feedback."


def _log(msg: str, level: str = "info", **fields):
    log("ThreadReply", msg, level, **fields)


async def handle_thread_reply(message: discord.Message, generator: ContentGenerator, bot_id: int) -> None:
    thread = message.channel
    if not is_thread(thread):
        return
    if message.author.id == bot_id or message.author.bot:
        return
    # Only threads this bot created
    if getattr(thread, "owner_id", None) != bot_id:
        return

    try:
        fetched = [m async for m in thread.history(limit=HISTORY_LIMIT)]
    except discord.HTTPException as e:
        _log("Failed to fetch thread history", "error", thread_id=thread.id, error=str(e))
        return

    messages = [to_thread_message(m) for m in fetched]
    history = build_history(messages, bot_id)
    if not history:
        return

    mode = classify_thread(thread.name)
    _log("Processing thread reply", thread_id=thread.id, mode=mode.value, message_count=len(history))

    try:
        async with thread.typing():
            if mode == ThreadMode.ENGAGE:
                plan = plan_engage(messages, bot_id)
                if plan.phase == EngagePhase.AWAITING_FIRST_ANGLE:
                    reply = await generator.engage(plan.statement, message.content)
                else:
                    reply = await generator.refine_engage(history)
                await send_text(thread, reply)
            elif mode == ThreadMode.TALK:
                reply = await generator.continue_talk(history)
                await send_text(thread, reply)
            else:
                variants = await generator.refine(history)
                await thread.send(content="**Updated content:**", embeds=build_embeds(variants[0]))
        _log("Thread reply posted", thread_id=thread.id, mode=mode.value)
    except Exception as e:
        _log("Failed to process thread reply", "error", thread_id=thread.id, error=str(e))
        try:
            await thread.send(APOLOGY)
        except discord.HTTPException as send_err:
            _log("Failed to send apology", "error", thread_id=thread.id, error=str(send_err))
