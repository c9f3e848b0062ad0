"""Configuration management for notify-mute."""

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    # Fall back to template for defaults
    template_path = Path(__file__).parent.parent / ".env.template"
    if template_path.exists():
        load_dotenv(template_path)


@dataclass
class SlackConfig:
    """Per-call channel settings supplied by the caller."""
    webhook_url: str
    default_snooze: timedelta = timedelta(hours=24)
    data_dir: str | None = None
    timeout: float = 30


class Config:
    """Application configuration."""

    # Slack
    SLACK_WEBHOOK_URL: str = os.getenv("SLACK_WEBHOOK_URL", "")
    SLACK_TIMEOUT: float = float(os.getenv("SLACK_TIMEOUT", "30"))

    # Snooze applied after each successful send
    DEFAULT_SNOOZE_SECONDS: int = int(os.getenv("DEFAULT_SNOOZE_SECONDS", "86400"))

    # Snooze applied when someone presses the Snooze button
    CALLBACK_SNOOZE_DAYS: int = int(os.getenv("CALLBACK_SNOOZE_DAYS", "30"))

    # Slack verification token; empty disables the check (dev mode)
    CALLBACK_TOKEN: str = os.getenv("CALLBACK_TOKEN", "")

    # Storage
    DATA_DIR: str = os.path.expanduser(os.getenv("NOTIFY_MUTE_DATA_DIR", "~/.notify-mute"))

    # Callback server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8080"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def default_snooze(cls) -> timedelta:
        return timedelta(seconds=cls.DEFAULT_SNOOZE_SECONDS)

    @classmethod
    def callback_snooze(cls) -> timedelta:
        return timedelta(days=cls.CALLBACK_SNOOZE_DAYS)

    @classmethod
    def slack_config(cls) -> SlackConfig:
        """Build the channel settings from the environment."""
        return SlackConfig(
            webhook_url=cls.SLACK_WEBHOOK_URL,
            default_snooze=cls.default_snooze(),
            data_dir=cls.DATA_DIR,
            timeout=cls.SLACK_TIMEOUT,
        )


config = Config()
