"""Domain types — dataclasses and enums shared by every layer."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


LINKEDIN_COLOR = 0x0A66C2
X_COLOR = 0x000000

TONES = ("professional", "casual", "provocative", "educational", "humorous")
LENGTHS = ("short", "medium", "long")
MIN_VARIANTS = 1
MAX_VARIANTS = 3


class GenerationKind(str, Enum):
    CONTENT_HINT = "content_hint"
    ENGAGE = "engage"
    TALK = "talk"
    REFINE = "refine"


class ThreadMode(str, Enum):
    """Conversation mode of a thread, derived from its name on every reply."""

    ENGAGE = "engage"
    TALK = "talk"
    CONTENT_HINT = "content_hint"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class OutputShape(str, Enum):
    JSON_CONTENT = "json_content"
    PLAIN_TEXT = "plain_text"


class EngagePhase(str, Enum):
    AWAITING_FIRST_ANGLE = "awaiting_first_angle"
    DRAFTED = "drafted"


def clamp_variants(count: Optional[int]) -> int:
    if count is None:
        return MIN_VARIANTS
    return max(MIN_VARIANTS, min(MAX_VARIANTS, int(count)))


@dataclass(frozen=True)
class GenerationOptions:
    tone: str = "professional"
    length: str = "medium"
    variant_count: int = 1

    def normalized(self) -> "GenerationOptions":
        """Validate tone/length and clamp the variant count to [1, 3]."""
        tone = (self.tone or "professional").lower()
        length = (self.length or "medium").lower()
        if tone not in TONES:
            raise ValueError(f"unknown tone: {self.tone!r}")
        if length not in LENGTHS:
            raise ValueError(f"unknown length: {self.length!r}")
        return replace(self, tone=tone, length=length, variant_count=clamp_variants(self.variant_count))


@dataclass(frozen=True)
class GenerationRequest:
    """One user invocation. Immutable."""

    kind: GenerationKind
    subject: str
    options: GenerationOptions = field(default_factory=GenerationOptions)


@dataclass
class GeneratedContent:
    """A LinkedIn + X post pair."""

    linkedin: str
    x: str

    def embed_fields(self) -> List[Tuple[str, str, int]]:
        """(title, description, color) for each platform, in posting order."""
        return [
            ("LinkedIn Post", self.linkedin, LINKEDIN_COLOR),
            ("X (Twitter) Post", self.x, X_COLOR),
        ]


@dataclass
class ConversationMessage:
    role: Role
    content: str


@dataclass
class EmbedText:
    title: str = ""
    description: str = ""


@dataclass
class ThreadMessage:
    """Platform-agnostic view of one message in a thread."""

    author_id: int
    is_bot: bool
    content: str
    created_at: datetime
    embeds: List[EmbedText] = field(default_factory=list)


@dataclass
class EngagePlan:
    phase: EngagePhase
    statement: str = ""
