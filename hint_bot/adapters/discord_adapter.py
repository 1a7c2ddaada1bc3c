"""Discord adapter — converts discord.py objects to domain types and back."""

from typing import List

import discord

from hint_bot.domain.errors import PlatformError
from hint_bot.domain.models import EmbedText, GeneratedContent, ThreadMessage


MESSAGE_LIMIT = 2000
EMBED_DESCRIPTION_LIMIT = 4096
THREAD_TYPES = (discord.ChannelType.public_thread, discord.ChannelType.private_thread)
AUTO_ARCHIVE_MINUTES = 1440


def is_thread(channel) -> bool:
    return getattr(channel, "type", None) in THREAD_TYPES


def is_text_channel(channel) -> bool:
    return channel is not None and getattr(channel, "type", None) == discord.ChannelType.text


def to_thread_message(message: discord.Message) -> ThreadMessage:
    """Convert a Discord message to platform-agnostic ThreadMessage."""
    return ThreadMessage(
        author_id=message.author.id,
        is_bot=bool(message.author.bot),
        content=message.content or "",
        created_at=message.created_at,
        embeds=[EmbedText(title=e.title or "", description=e.description or "") for e in message.embeds],
    )


def build_embeds(content: GeneratedContent) -> List[discord.Embed]:
    return [
        discord.Embed(title=title, description=description[:EMBED_DESCRIPTION_LIMIT], color=color)
        for title, description, color in content.embed_fields()
    ]


def split_message(text: str, limit: int = MESSAGE_LIMIT) -> List[str]:
    """Split on line boundaries where possible, hard-cut lines longer than ``limit``."""
    chunks = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks


async def send_text(channel: discord.abc.Messageable, text: str) -> None:
    for chunk in split_message(text):
        await channel.send(chunk)


async def create_thread(channel: discord.TextChannel, name: str, reason: str) -> discord.Thread:
    try:
        return await channel.create_thread(
            name=name,
            auto_archive_duration=AUTO_ARCHIVE_MINUTES,
            type=discord.ChannelType.public_thread,
            reason=reason[:500],
        )
    except discord.HTTPException as e:
        raise PlatformError(f"thread creation failed ({e.status}): {e.text}") from e
