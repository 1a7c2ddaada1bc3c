"""Discord client — slash command tree and thread reply routing."""

from typing import Optional

import discord
from discord import app_commands

from hint_bot.domain.models import LENGTHS, MAX_VARIANTS, MIN_VARIANTS, TONES
from hint_bot.generator import ContentGenerator
from hint_bot.handlers.commands import execute_engage, execute_hint, execute_talk
from hint_bot.handlers.thread_reply import handle_thread_reply
from hint_bot.log import log
from hint_bot.webhook import WebhookClient


MAX_SUBJECT_CHARS = 1000

Subject = app_commands.Range[str, 1, MAX_SUBJECT_CHARS]
VariantCount = app_commands.Range[int, MIN_VARIANTS, MAX_VARIANTS]


def _log(msg: str, level: str = "info", **fields):
    log("Bot", msg, level, **fields)


class HintBot(discord.Client):
    """Discord client exposing /hint, /engage and /talk."""

    def __init__(
        self,
        generator: ContentGenerator,
        webhook: Optional[WebhookClient] = None,
        guild_id: Optional[int] = None,
        **discord_kwargs,
    ):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **discord_kwargs)
        self.generator = generator
        self.webhook = webhook
        self.guild_id = guild_id
        self.tree = app_commands.CommandTree(self)
        self._register_commands()

    def _register_commands(self):
        tone_choices = [app_commands.Choice(name=t, value=t) for t in TONES]
        length_choices = [app_commands.Choice(name=n, value=n) for n in LENGTHS]

        @self.tree.command(name="hint", description="Submit a content hint for AI research and generation")
        @app_commands.describe(
            topic="The topic or thesis to research and create content for",
            tone="Tone of the posts (default: professional)",
            length="Length of the posts (default: medium)",
            examples="Number of variants to generate (1-3)",
        )
        @app_commands.choices(tone=tone_choices, length=length_choices)
        async def hint(
            interaction: discord.Interaction,
            topic: Subject,
            tone: Optional[app_commands.Choice[str]] = None,
            length: Optional[app_commands.Choice[str]] = None,
            examples: Optional[VariantCount] = None,
        ):
            await execute_hint(
                interaction,
                self.generator,
                topic,
                tone=tone.value if tone else None,
                length=length.value if length else None,
                examples=examples,
                webhook=self.webhook,
            )

        @self.tree.command(name="engage", description="Craft a natural reply to a social media post or statement")
        @app_commands.describe(statement="The post or statement you want to respond to")
        async def engage(interaction: discord.Interaction, statement: Subject):
            await execute_engage(interaction, statement)

        @self.tree.command(name="talk", description="Start a free-form conversation with Claude")
        @app_commands.describe(topic="What do you want to talk about?")
        async def talk(interaction: discord.Interaction, topic: Subject):
            await execute_talk(interaction, self.generator, topic)

    async def setup_hook(self):
        if self.guild_id:
            guild = discord.Object(id=self.guild_id)
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
        else:
            synced = await self.tree.sync()
        _log("Slash commands registered", command_count=len(synced), guild_id=self.guild_id)

    async def on_ready(self):
        _log(f"Discord bot ready, logged in as {self.user}")

    async def on_message(self, message: discord.Message):
        if self.user is None:
            return
        await handle_thread_reply(message, self.generator, self.user.id)
