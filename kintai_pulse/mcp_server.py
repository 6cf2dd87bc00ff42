"""MCP server exposing Kintai Pulse attendance tools."""

from __future__ import annotations

from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from .config import load_settings
from .service import KintaiService, default_since, parse_since
from .slack_client import SlackChannelSource, SlackClient
from .store import RecordStore

mcp = FastMCP("kintai-pulse")

_settings = load_settings()
_client = SlackClient(_settings.slack_bot_token)
_service = KintaiService(
    _settings,
    RecordStore(_settings.store_path),
    SlackChannelSource(_client, _settings.channel_id),
)


def _ensure_since(since: Optional[str] = None):
    return parse_since(since) if since else default_since()


@mcp.tool()
async def get_attendance(authors: List[str], since: Optional[str] = None) -> dict:
    """Return attendance records for the given Slack user ids since a date (default: one month ago)."""

    start = _ensure_since(since)
    records = await _service.get_records_since(start, authors)
    return {"since": start.isoformat(), "records": [record.to_dict() for record in records]}


@mcp.tool()
async def get_category_summary(authors: List[str], since: Optional[str] = None) -> dict:
    """Return per-category attendance counts for the given users."""

    return await _service.get_category_summary(_ensure_since(since), authors)


@mcp.tool()
async def list_categories() -> dict:
    """Return the attendance categories with their markers and colours."""

    return {"categories": _service.list_categories()}


@mcp.tool()
async def refresh_cache() -> dict:
    """Pull new channel messages into the local cache."""

    return {"records": await _service.refresh()}


__all__ = [
    "mcp",
    "get_attendance",
    "get_category_summary",
    "list_categories",
    "refresh_cache",
]
