"""Thread classification and conversation history reconstruction.

Nothing here talks to Discord: the adapter converts messages into
``ThreadMessage`` first, and the bot's user id is passed in explicitly.
"""

from typing import Iterable, List

from hint_bot.domain.models import (
    ConversationMessage,
    EngagePhase,
    EngagePlan,
    Role,
    ThreadMessage,
    ThreadMode,
)


ENGAGE_THREAD_PREFIX = "[engage] "
TALK_THREAD_PREFIX = "[talk] "
MAX_THREAD_NAME = 100
HISTORY_LIMIT = 50

# Setup messages posted when an engage thread is created
STATEMENT_LABEL = "**Statement to respond to:**"
ANGLE_REQUEST = "What's your take on this? Tell me your angle and I'll draft a reply."


def thread_name(prefix: str, subject: str) -> str:
    """``prefix + subject`` cut so the whole name fits Discord's 100-char limit."""
    return prefix + subject[: MAX_THREAD_NAME - len(prefix)]


def hint_thread_name(topic: str) -> str:
    """Thread name for a /hint topic, without leading mode prefixes."""
    name = topic
    while name.startswith((ENGAGE_THREAD_PREFIX, TALK_THREAD_PREFIX)):
        name = name.split(" ", 1)[1].lstrip()
    return name[:MAX_THREAD_NAME] or topic.strip()[:MAX_THREAD_NAME]


def classify_thread(name: str) -> ThreadMode:
    if name.startswith(ENGAGE_THREAD_PREFIX):
        return ThreadMode.ENGAGE
    if name.startswith(TALK_THREAD_PREFIX):
        return ThreadMode.TALK
    return ThreadMode.CONTENT_HINT


def role_of(author_id: int, bot_id: int) -> Role:
    return Role.ASSISTANT if author_id == bot_id else Role.USER


def statement_message(statement: str) -> str:
    return f"{STATEMENT_LABEL}\n{statement}"


def _is_setup_message(content: str) -> bool:
    return content.startswith(STATEMENT_LABEL) or content == ANGLE_REQUEST


def _flatten(msg: ThreadMessage) -> str:
    content = msg.content
    if msg.embeds:
        embed_text = "\n\n".join(f"[{e.title}]: {e.description}" for e in msg.embeds)
        content = f"{content}\n\n{embed_text}" if content else embed_text
    return content


def _chronological(messages: Iterable[ThreadMessage]) -> List[ThreadMessage]:
    return sorted(messages, key=lambda m: m.created_at)


def build_history(
    messages: Iterable[ThreadMessage],
    bot_id: int,
    limit: int = HISTORY_LIMIT,
) -> List[ConversationMessage]:
    """Replay a thread as a role-tagged transcript, oldest first.

    Other bots are dropped entirely, the bot's embeds are flattened into
    text, and messages left empty are skipped.
    """
    window = _chronological(messages)[-limit:]
    history = []
    for msg in window:
        if msg.is_bot and msg.author_id != bot_id:
            continue
        role = role_of(msg.author_id, bot_id)
        content = _flatten(msg) if role == Role.ASSISTANT else msg.content
        if not content:
            continue
        history.append(ConversationMessage(role=role, content=content))
    return history


def plan_engage(messages: Iterable[ThreadMessage], bot_id: int) -> EngagePlan:
    """Decide whether an engage thread still waits for its first angle.

    The thread is ``drafted`` once the bot has posted anything besides the
    two setup messages.
    """
    ordered = _chronological(messages)
    own = [m for m in ordered if m.author_id == bot_id]

    statement = ""
    for m in own:
        if m.content.startswith(STATEMENT_LABEL):
            statement = m.content[len(STATEMENT_LABEL):].lstrip("\n")
            break

    drafted = any(not _is_setup_message(m.content) for m in own)
    phase = EngagePhase.DRAFTED if drafted else EngagePhase.AWAITING_FIRST_ANGLE
    return EngagePlan(phase=phase, statement=statement)
