"""Slash command handlers: /hint, /engage, /talk."""

from typing import List, Optional

import discord

from hint_bot.adapters.discord_adapter import (
    build_embeds,
    create_thread,
    is_text_channel,
    send_text,
)
from hint_bot.conversation import (
    ANGLE_REQUEST,
    ENGAGE_THREAD_PREFIX,
    TALK_THREAD_PREFIX,
    hint_thread_name,
    statement_message,
    thread_name,
)
from hint_bot.domain.models import (
    GeneratedContent,
    GenerationKind,
    GenerationOptions,
    GenerationRequest,
)
from hint_bot.generator import ContentGenerator
from hint_bot.log import log, short
from hint_bot.webhook import WebhookClient


TEXT_CHANNEL_ONLY = "This command can only be used in a text channel."
REFINE_HINT = "Reply in this thread to refine the content. I'll adjust based on your feedback."


def _log(msg: str, level: str = "info", **fields):
    log("Commands", msg, level, **fields)


async def _defer(interaction: discord.Interaction, subject: str) -> bool:
    """Acknowledge the interaction. False means it already expired."""
    try:
        await interaction.response.defer()
        return True
    except discord.HTTPException as e:
        _log("Failed to defer reply (interaction expired)", "error", subject=short(subject), error=str(e))
        return False


async def _report_failure(interaction: discord.Interaction, text: str) -> None:
    try:
        await interaction.edit_original_response(content=text)
    except discord.HTTPException as e:
        _log("Could not report failure, interaction may have expired", "warn", error=str(e))


async def post_variants(channel, topic: str, variants: List[GeneratedContent]) -> None:
    header = f"**Content generated for:** {topic}"
    if len(variants) == 1:
        await channel.send(content=header, embeds=build_embeds(variants[0]))
        return
    await channel.send(header)
    for i, variant in enumerate(variants, 1):
        await channel.send(content=f"**Variant {i}/{len(variants)}**", embeds=build_embeds(variant))


async def execute_hint(
    interaction: discord.Interaction,
    generator: ContentGenerator,
    topic: str,
    tone: Optional[str] = None,
    length: Optional[str] = None,
    examples: Optional[int] = None,
    webhook: Optional[WebhookClient] = None,
) -> None:
    request = GenerationRequest(
        kind=GenerationKind.CONTENT_HINT,
        subject=topic,
        options=GenerationOptions(
            tone=tone or "professional",
            length=length or "medium",
            variant_count=examples or 1,
        ),
    )
    if not await _defer(interaction, topic):
        return

    try:
        await interaction.edit_original_response(
            content=f'Researching **"{topic}"**... This may take a few minutes.'
        )
        variants = await generator.generate(request)

        if webhook is not None:
            await webhook.post_content(topic, variants)
            await interaction.edit_original_response(
                content=f'Done! Content for **"{topic}"** posted via webhook.'
            )
            return

        channel = interaction.channel
        if not is_text_channel(channel):
            embeds = [e for v in variants for e in build_embeds(v)]
            await interaction.edit_original_response(
                content=f"**Content generated for:** {topic}", embeds=embeds
            )
            return

        thread = await create_thread(channel, hint_thread_name(topic), f"Content generation for: {topic}")
        await post_variants(thread, topic, variants)
        await thread.send(REFINE_HINT)

        await interaction.edit_original_response(
            content=f'Done! Content for **"{topic}"** posted in thread: {thread.mention}'
        )
        _log("Hint thread created", topic=short(topic), thread_id=thread.id, variants=len(variants))
    except Exception as e:
        _log("Failed to generate content", "error", topic=short(topic), error=str(e))
        await _report_failure(interaction, f'Failed to generate content for "{short(topic)}". Please try again later.')


async def execute_engage(interaction: discord.Interaction, statement: str) -> None:
    if not await _defer(interaction, statement):
        return

    try:
        channel = interaction.channel
        if not is_text_channel(channel):
            await interaction.edit_original_response(content=TEXT_CHANNEL_ONLY)
            return

        thread = await create_thread(
            channel,
            thread_name(ENGAGE_THREAD_PREFIX, statement),
            f"Engage response for: {statement}",
        )
        await send_text(thread, statement_message(statement))
        await thread.send(ANGLE_REQUEST)

        await interaction.edit_original_response(
            content=f"Thread created! Share your take here: {thread.mention}"
        )
        _log("Engage thread created", statement=short(statement), thread_id=thread.id)
    except Exception as e:
        _log("Failed to create engage thread", "error", statement=short(statement), error=str(e))
        await _report_failure(interaction, "Failed to set up the engage thread. Please try again later.")


async def execute_talk(interaction: discord.Interaction, generator: ContentGenerator, topic: str) -> None:
    if not await _defer(interaction, topic):
        return

    try:
        channel = interaction.channel
        if not is_text_channel(channel):
            await interaction.edit_original_response(content=TEXT_CHANNEL_ONLY)
            return

        thread = await create_thread(
            channel,
            thread_name(TALK_THREAD_PREFIX, topic),
            f"Talk conversation: {topic}",
        )
        async with thread.typing():
            reply = await generator.talk(topic)
        await send_text(thread, reply)

        await interaction.edit_original_response(
            content=f"Thread created! Continue the conversation here: {thread.mention}"
        )
        _log("Talk thread created", topic=short(topic), thread_id=thread.id)
    except Exception as e:
        _log("Failed to create talk thread", "error", topic=short(topic), error=str(e))
        await _report_failure(interaction, "Failed to set up the talk thread. Please try again later.")
