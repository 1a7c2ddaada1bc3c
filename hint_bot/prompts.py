"""Prompt builders for every generation mode. Pure functions, no I/O."""

from typing import Dict, List

from hint_bot.domain.models import (
    ConversationMessage,
    GenerationOptions,
    Role,
)


PERSONA = (
    "You are a social media content creator for a personal brand "
    "focused on AI and agentic coding."
)

# length -> per-platform guidance
LENGTH_GUIDES: Dict[str, Dict[str, str]] = {
    "short": {
        "linkedin": "1 short paragraph, 300-600 characters",
        "x": "max 140 characters",
    },
    "medium": {
        "linkedin": "1-3 paragraphs, 600-1300 characters",
        "x": "max 280 characters",
    },
    "long": {
        "linkedin": "3-5 paragraphs, 1300-2500 characters",
        "x": "max 280 characters, dense and punchy",
    },
}

JSON_ONLY = "Return ONLY valid JSON, no other text."
SINGLE_OBJECT_FORMAT = '{"linkedin": "your linkedin post here", "x": "your tweet here"}'

ENGAGE_STYLE_RULES = """\
- Sound like a real person replying, not a brand account
- Match the energy and register of the original statement
- Be specific; no corporate filler ("Great post!", "Thanks for sharing", "In today's fast-paced world")
- No hashtags and no emojis unless the user explicitly asks for them
- Keep it short enough to post as a reply"""


def _format_instruction(variant_count: int) -> str:
    if variant_count > 1:
        items = ", ".join([SINGLE_OBJECT_FORMAT] * variant_count)
        return (
            f"{JSON_ONLY} Return a JSON array of exactly {variant_count} objects, "
            f"one per variant, in this exact format:\n[{items}]"
        )
    return f"{JSON_ONLY} Use this exact format:\n{SINGLE_OBJECT_FORMAT}"


def format_transcript(transcript: List[ConversationMessage]) -> str:
    lines = []
    for msg in transcript:
        label = "ASSISTANT" if msg.role == Role.ASSISTANT else "USER"
        lines.append(f"{label}: {msg.content}")
    return "\n\n".join(lines)


def build_generation_prompt(topic: str, options: GenerationOptions = GenerationOptions()) -> str:
    """Prompt for /hint: research ``topic`` and write LinkedIn + X posts."""
    opts = options.normalized()
    guide = LENGTH_GUIDES[opts.length]
    if opts.variant_count > 1:
        task = (
            f"Generate {opts.variant_count} distinct variants. Each variant contains two posts, "
            "and variants should differ in angle and hook, not just wording:"
        )
    else:
        task = "Generate two social media posts:"
    return f"""{PERSONA}

Research the following topic and write content about it.

Topic: "{topic}"
Tone: {opts.tone}

{task}
1. A LinkedIn post ({opts.tone} tone, {guide['linkedin']}, thought leadership style)
2. An X/Twitter post ({opts.tone} tone, {guide['x']})

{_format_instruction(opts.variant_count)}"""


def build_refinement_prompt(transcript: List[ConversationMessage]) -> str:
    return f"""{PERSONA}

Below is a conversation about social media content you generated. The user has given feedback.
Revise the content according to the latest feedback.

{format_transcript(transcript)}

Produce an updated version of both posts. {_format_instruction(1)}"""


def build_freeform_prompt(message: str) -> str:
    return f"""You are a helpful, knowledgeable conversation partner.
Respond directly and concisely to the following message. Plain text only, no preamble.

{message}"""


def build_continue_freeform_prompt(transcript: List[ConversationMessage]) -> str:
    return f"""You are a helpful, knowledgeable conversation partner.
Here is the conversation so far:

{format_transcript(transcript)}

Respond to the latest USER message directly and concisely. Plain text only, no preamble."""


def build_engage_prompt(statement: str, user_angle: str) -> str:
    return f"""You help the user reply to social media posts in their own voice.

Statement to respond to:
"{statement}"

The user's take / angle:
"{user_angle}"

Write a reply to the statement that expresses the user's angle.
{ENGAGE_STYLE_RULES}

Return only the reply text, nothing else."""


def build_refine_engage_prompt(transcript: List[ConversationMessage]) -> str:
    return f"""You help the user reply to social media posts in their own voice.
Below is the conversation: the original statement, the user's angle, your drafts and their feedback.

{format_transcript(transcript)}

Rewrite the reply according to the latest feedback.
{ENGAGE_STYLE_RULES}

Return only the reply text, nothing else."""


__all__ = [
    "LENGTH_GUIDES",
    "build_continue_freeform_prompt",
    "build_engage_prompt",
    "build_freeform_prompt",
    "build_generation_prompt",
    "build_refine_engage_prompt",
    "build_refinement_prompt",
    "format_transcript",
]
