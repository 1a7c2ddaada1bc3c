"""Environment-driven configuration."""

import os
from typing import Any, Callable, Dict, List, Mapping, Optional

from hint_bot.domain.errors import ConfigError


REQUIRED_VARS = ("DISCORD_TOKEN", "ANTHROPIC_API_KEY")
LOG_LEVELS = ("debug", "info", "warn", "error")

DEFAULT_TIMEOUT_SECONDS = 5 * 60


def _number(env: Mapping[str, str], name: str, parse: Callable[[str], Any],
            default: Any, invalid: List[str]) -> Any:
    """Parse a numeric env var. Unparseable values become None and are recorded in ``invalid``."""
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        invalid.append(name)
        return None


def load_config(env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Build the config dict from environment variables. Does not validate."""
    env = os.environ if env is None else env
    invalid: List[str] = []
    log_level = env.get("LOG_LEVEL", "info").strip().lower()
    if log_level not in LOG_LEVELS:
        log_level = "info"
    return {
        "discord_token": env.get("DISCORD_TOKEN", ""),
        "discord_guild_id": _number(env, "DISCORD_GUILD_ID", int, None, invalid),
        "discord_webhook_url": env.get("DISCORD_WEBHOOK_URL", ""),
        "anthropic_api_key": env.get("ANTHROPIC_API_KEY", ""),
        "claude_binary": env.get("CLAUDE_BINARY", "claude"),
        "claude_runner_image": env.get("CLAUDE_RUNNER_IMAGE", ""),
        "claude_timeout_seconds": _number(
            env, "CLAUDE_TIMEOUT_SECONDS", float, float(DEFAULT_TIMEOUT_SECONDS), invalid
        ),
        "log_level": log_level,
        "invalid": invalid,
    }


def validate_config(config: Dict[str, Any]) -> None:
    """Raise ConfigError naming every required variable that is missing or unparseable."""
    missing = [name for name in REQUIRED_VARS if not config.get(name.lower())]
    missing.extend(config.get("invalid", []))
    if missing:
        raise ConfigError(f"Missing or invalid env vars: {', '.join(missing)}")
    if config["claude_timeout_seconds"] <= 0:
        raise ConfigError("CLAUDE_TIMEOUT_SECONDS must be positive")


CONFIG = load_config()
