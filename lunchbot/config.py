"""
Bot configuration loaded from environment variables.
"""

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

REQUIRED_VARS = ["SLACK_BOT_TOKEN", "SLACK_APP_TOKEN", "LUNCHBOT_CHANNEL"]

DEFAULT_CLEANUP_INTERVAL = 60.0
DEFAULT_BACKUP_INTERVAL = 300.0


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


@dataclass
class BotConfig:
    slack_bot_token: str
    slack_app_token: str
    channel: str
    backup_file: Optional[Path] = None
    cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL
    backup_interval: float = DEFAULT_BACKUP_INTERVAL
    name: str = "lunch-bot"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[dict] = None
    ) -> "BotConfig":
        """
        Build the config from environment variables.

        Args:
            environ: Variables to read, defaults to os.environ
            overrides: Values from a bot config JSON; `channel`, `backup_file`
                and `name` take precedence over the environment

        Raises:
            ConfigError: naming every missing or invalid variable
        """
        env = dict(os.environ if environ is None else environ)
        overrides = overrides or {}

        if overrides.get("channel"):
            env["LUNCHBOT_CHANNEL"] = overrides["channel"]
        if overrides.get("backup_file"):
            env["LUNCHBOT_BACKUP_FILE"] = overrides["backup_file"]

        missing = [var for var in REQUIRED_VARS if not env.get(var)]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        errors = []
        cleanup_interval = _interval(
            env, "LUNCHBOT_CLEANUP_INTERVAL", DEFAULT_CLEANUP_INTERVAL, errors
        )
        backup_interval = _interval(
            env, "LUNCHBOT_BACKUP_INTERVAL", DEFAULT_BACKUP_INTERVAL, errors
        )
        if errors:
            raise ConfigError("; ".join(errors))

        backup_file = env.get("LUNCHBOT_BACKUP_FILE")

        return cls(
            slack_bot_token=env["SLACK_BOT_TOKEN"],
            slack_app_token=env["SLACK_APP_TOKEN"],
            channel=env["LUNCHBOT_CHANNEL"],
            backup_file=Path(backup_file) if backup_file else None,
            cleanup_interval=cleanup_interval,
            backup_interval=backup_interval,
            name=overrides.get("name", "lunch-bot"),
        )


def _interval(env: dict, var: str, default: float, errors: list[str]) -> float:
    raw = env.get(var)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        errors.append(f"{var} must be a number, got {raw!r}")
        return default
    if not math.isfinite(value) or value <= 0:
        errors.append(f"{var} must be a positive finite number, got {raw!r}")
    return value
