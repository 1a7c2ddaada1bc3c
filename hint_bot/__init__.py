"""Hint Bot — Discord slash commands for AI-generated social content."""

from hint_bot.config import CONFIG
from hint_bot.conversation import build_history, classify_thread, plan_engage
from hint_bot.decoder import decode_output
from hint_bot.domain.models import GeneratedContent, GenerationRequest, ThreadMode
from hint_bot.executor import ClaudeExecutor
from hint_bot.generator import ContentGenerator
from hint_bot.webhook import WebhookClient

__all__ = [
    "CONFIG",
    "build_history",
    "classify_thread",
    "plan_engage",
    "decode_output",
    "GeneratedContent",
    "GenerationRequest",
    "ThreadMode",
    "ClaudeExecutor",
    "ContentGenerator",
    "WebhookClient",
]
