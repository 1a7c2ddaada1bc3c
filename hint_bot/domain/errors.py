"""Error taxonomy. Every error carries only bounded diagnostics."""

EXCERPT_LIMIT = 500


def excerpt(text, limit: int = EXCERPT_LIMIT) -> str:
    """Return at most ``limit`` characters of ``text`` with an ellipsis marker."""
    if text is None:
        return ""
    text = str(text)
    if len(text) <= limit:
        return text
    return text[:limit] + f"... [{len(text) - limit} more chars]"


class HintBotError(Exception):
    """Base class for all hint_bot errors."""


class ConfigError(HintBotError):
    pass


class RunnerError(HintBotError):
    """The generation subprocess failed."""


class SpawnError(RunnerError):
    def __init__(self, command: str, reason: str):
        super().__init__(f"failed to start {command!r}: {reason}")
        self.command = command
        self.reason = reason


class RunnerTimeout(RunnerError):
    def __init__(self, timeout: float):
        super().__init__(f"generation subprocess timed out after {timeout:g}s")
        self.timeout = timeout


class NonZeroExit(RunnerError):
    def __init__(self, returncode: int, stderr: str):
        self.returncode = returncode
        self.stderr_excerpt = excerpt(stderr.strip())
        super().__init__(f"generation subprocess exited with code {returncode}: {self.stderr_excerpt}")


class OutputLimitExceeded(RunnerError):
    def __init__(self, limit: int):
        super().__init__(f"generation subprocess wrote more than {limit} bytes")
        self.limit = limit


class DecodeError(HintBotError):
    def __init__(self, reason: str, raw: str = ""):
        self.reason = reason
        self.raw_excerpt = excerpt(raw)
        super().__init__(f"{reason} (output: {self.raw_excerpt!r})")


class PlatformError(HintBotError):
    """A chat platform operation (thread/message) failed."""


class WebhookError(HintBotError):
    def __init__(self, status: int, body: str):
        self.status = status
        self.body = excerpt(body)
        super().__init__(f"Webhook POST failed ({status}): {self.body}")
