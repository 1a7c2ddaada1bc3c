"""Process entry point: wire config, executor, generator and the Discord client."""

import asyncio
import signal
import sys

from hint_bot.config import CONFIG, validate_config
from hint_bot.discord_bot import HintBot
from hint_bot.domain.errors import ConfigError
from hint_bot.executor import ClaudeExecutor
from hint_bot.generator import ContentGenerator
from hint_bot.log import log
from hint_bot.webhook import WebhookClient


def _log(msg: str, level: str = "info", **fields):
    log("Main", msg, level, **fields)


def _handle_loop_exception(loop: asyncio.AbstractEventLoop, context: dict):
    """Last-resort handler for errors no handler caught."""
    exc = context.get("exception")
    _log("Unhandled error in event loop", "error",
         message=context.get("message", ""), error=repr(exc) if exc else None)


def build_bot(config: dict) -> HintBot:
    generator = ContentGenerator(ClaudeExecutor.from_config(config))
    webhook = WebhookClient(config["discord_webhook_url"]) if config.get("discord_webhook_url") else None
    return HintBot(generator, webhook=webhook, guild_id=config.get("discord_guild_id"))


async def run(config: dict) -> None:
    bot = build_bot(config)
    loop = asyncio.get_running_loop()
    loop.set_exception_handler(_handle_loop_exception)
    try:
        loop.add_signal_handler(signal.SIGTERM, lambda: asyncio.ensure_future(bot.close()))
    except NotImplementedError:
        pass

    async with bot:
        await bot.start(config["discord_token"])
    _log("Shut down")


def main() -> int:
    try:
        validate_config(CONFIG)
    except ConfigError as e:
        _log(str(e), "error")
        return 1
    try:
        asyncio.run(run(CONFIG))
    except KeyboardInterrupt:
        _log("Shutting down...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
