"""Minimal stderr logger with a level threshold taken from CONFIG."""

import sys

from hint_bot.config import CONFIG


_LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}


def log(tag: str, msg: str, level: str = "info", **fields):
    if _LEVELS.get(level, 20) < _LEVELS.get(CONFIG.get("log_level", "info"), 20):
        return
    line = f"[{tag}] {msg}"
    if fields:
        line += " " + " ".join(f"{k}={v!r}" for k, v in fields.items())
    if level in ("warn", "error"):
        line = f"{level.upper()} {line}"
    print(line, file=sys.stderr)


def short(text: str, limit: int = 80) -> str:
    """Truncate user-supplied text for log lines."""
    return text if len(text) <= limit else text[:limit] + "..."
