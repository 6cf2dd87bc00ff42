"""Configuration helpers for Kintai Pulse."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(slots=True)
class Settings:
    """Runtime configuration values loaded from environment variables."""

    slack_bot_token: str
    channel_id: str
    api_key: str
    store_path: Path
    fetch_limit: int = 100
    fetch_retries: int = 3
    retry_base_delay: float = 1.0


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from the environment, optionally from a specific file."""

    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    store_path = Path(os.getenv("KINTAI_STORE_PATH", "kintai_data.json")).expanduser()

    slack_token = os.getenv("SLACK_BOT_TOKEN")
    channel_id = os.getenv("CHANNEL_ID")
    api_key = os.getenv("API_KEY")

    if not slack_token:
        raise RuntimeError("SLACK_BOT_TOKEN must be configured")
    if not channel_id:
        raise RuntimeError("CHANNEL_ID must be configured")
    if not api_key:
        raise RuntimeError("API_KEY must be configured")

    return Settings(
        slack_bot_token=slack_token,
        channel_id=channel_id,
        api_key=api_key,
        store_path=store_path,
        fetch_limit=int(os.getenv("FETCH_LIMIT", "100")),
        fetch_retries=int(os.getenv("FETCH_RETRIES", "3")),
        retry_base_delay=float(os.getenv("RETRY_BASE_DELAY", "1.0")),
    )


__all__ = ["Settings", "load_settings"]
