"""HTTP client for reading channel history from the Slack Web API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

import httpx

from .errors import SourceUnavailable
from .models import RawMessage

SLACK_API_BASE = "https://slack.com/api"


class SlackApiError(SourceUnavailable):
    """Raised when Slack returns an error response."""

    def __init__(self, method: str, error: str) -> None:
        super().__init__(f"Slack API error for {method}: {error}")
        self.method = method
        self.error = error


class MessageSource(Protocol):
    async def fetch_batch(self, older_than: Optional[str], limit: int) -> List[RawMessage]:
        """Return up to ``limit`` messages older than ``older_than``, newest first."""
        ...


class SlackClient:
    """Simple async wrapper around the Slack Web API endpoints Kintai Pulse reads."""

    def __init__(
        self,
        token: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=SLACK_API_BASE,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_history_page(
        self,
        channel_id: str,
        *,
        latest: Optional[str] = None,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """Return one page of `conversations.history`, strictly older than `latest`."""

        method = "conversations.history"
        params: Dict[str, Any] = {"channel": channel_id, "limit": limit, "inclusive": "false"}
        if latest:
            params["latest"] = latest

        try:
            response = await self._client.get(method, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise SlackApiError(method, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise SlackApiError(method, "invalid_json") from exc

        if not data.get("ok"):
            raise SlackApiError(method, data.get("error", "unknown_error"))
        return data.get("messages", [])


class SlackChannelSource:
    """Message source bound to a single Slack channel."""

    def __init__(self, client: SlackClient, channel_id: str) -> None:
        self.client = client
        self.channel_id = channel_id

    async def fetch_batch(self, older_than: Optional[str], limit: int) -> List[RawMessage]:
        page = await self.client.fetch_history_page(
            self.channel_id, latest=older_than, limit=limit
        )
        return [to_raw_message(message) for message in page]


def to_raw_message(message: Dict[str, Any]) -> RawMessage:
    ts = message.get("ts", "0")
    created_at = datetime.fromtimestamp(float(ts), tz=timezone.utc).astimezone()
    return RawMessage(
        id=ts,
        text=message.get("text", ""),
        author=message.get("user") or message.get("bot_id") or "",
        created_at=created_at,
    )


__all__ = [
    "SlackClient",
    "SlackApiError",
    "MessageSource",
    "SlackChannelSource",
    "to_raw_message",
]
