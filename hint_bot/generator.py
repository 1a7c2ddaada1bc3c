"""Content generator — prompt building, CLI execution and decoding per mode."""

from typing import List

from hint_bot import prompts
from hint_bot.decoder import decode_content, decode_text
from hint_bot.domain.models import (
    ConversationMessage,
    GeneratedContent,
    GenerationKind,
    GenerationRequest,
)
from hint_bot.executor import ClaudeExecutor
from hint_bot.log import log, short


def _log(msg: str, level: str = "info", **fields):
    log("Generator", msg, level, **fields)


class ContentGenerator:
    """One method per mode; holds no per-request state."""

    def __init__(self, executor: ClaudeExecutor):
        self.executor = executor

    async def generate(self, request: GenerationRequest) -> List[GeneratedContent]:
        if request.kind != GenerationKind.CONTENT_HINT:
            raise ValueError(f"generate() handles content hints, got {request.kind.value}")
        options = request.options.normalized()
        prompt = prompts.build_generation_prompt(request.subject, options)
        raw = await self.executor.execute(prompt)
        variants = decode_content(raw, options.variant_count)
        _log("Content generated", topic=short(request.subject), variants=len(variants))
        return variants

    async def refine(self, history: List[ConversationMessage]) -> List[GeneratedContent]:
        raw = await self.executor.execute(prompts.build_refinement_prompt(history))
        variants = decode_content(raw, 1)
        _log("Content refined", turns=len(history))
        return variants

    async def talk(self, topic: str) -> str:
        raw = await self.executor.execute(prompts.build_freeform_prompt(topic))
        return decode_text(raw)

    async def continue_talk(self, history: List[ConversationMessage]) -> str:
        raw = await self.executor.execute(prompts.build_continue_freeform_prompt(history))
        return decode_text(raw)

    async def engage(self, statement: str, angle: str) -> str:
        raw = await self.executor.execute(prompts.build_engage_prompt(statement, angle))
        reply = decode_text(raw)
        _log("Engage reply drafted", statement=short(statement))
        return reply

    async def refine_engage(self, history: List[ConversationMessage]) -> str:
        raw = await self.executor.execute(prompts.build_refine_engage_prompt(history))
        return decode_text(raw)
