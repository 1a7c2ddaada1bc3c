"""Discord webhook sink for generated content."""

from typing import Any, Dict, List

import aiohttp

from hint_bot.domain.errors import WebhookError
from hint_bot.domain.models import GeneratedContent
from hint_bot.log import log, short


EMBED_DESCRIPTION_LIMIT = 4096


def _log(msg: str, level: str = "info", **fields):
    log("Webhook", msg, level, **fields)


def build_payload(topic: str, contents: List[GeneratedContent]) -> Dict[str, Any]:
    """``{content, embeds}`` body; two embeds per variant."""
    embeds = []
    for content in contents:
        for title, description, color in content.embed_fields():
            embeds.append({
                "title": title,
                "description": description[:EMBED_DESCRIPTION_LIMIT],
                "color": color,
            })
    return {
        "content": f"**Content generated for:** {topic}",
        "embeds": embeds,
    }


class WebhookClient:
    """Posts generated content to a Discord webhook URL."""

    def __init__(self, webhook_url: str, timeout: float = 30.0):
        self.url = webhook_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def post_content(self, topic: str, contents: List[GeneratedContent]) -> None:
        """Raises WebhookError on any non-2xx response."""
        payload = build_payload(topic, contents)
        _log("Posting to Discord webhook", "debug", topic=short(topic))

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(self.url, json=payload) as resp:
                if not 200 <= resp.status < 300:
                    body = await resp.text()
                    raise WebhookError(resp.status, body)

        _log("Content posted to Discord webhook", topic=short(topic))
