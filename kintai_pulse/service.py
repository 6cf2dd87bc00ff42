"""Core orchestration logic for Kintai Pulse."""

from __future__ import annotations

import calendar
from collections import Counter
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional

from .classifier import get_spec
from .config import Settings
from .errors import InvalidQuery
from .models import AttendanceRecord, Category
from .query import filter_by_authors, search_since
from .slack_client import MessageSource
from .store import RecordRepository
from .sync import CacheSynchronizer


class KintaiService:
    """High-level service that keeps the record cache fresh and answers queries."""

    def __init__(self, settings: Settings, store: RecordRepository, source: MessageSource) -> None:
        self.settings = settings
        self.store = store
        self.source = source
        self.synchronizer = CacheSynchronizer(
            store,
            fetch_limit=settings.fetch_limit,
            fetch_retries=settings.fetch_retries,
            retry_base_delay=settings.retry_base_delay,
        )

    # region Sync helpers
    async def refresh(self) -> int:
        records = await self.synchronizer.refresh(self.source)
        return len(records)

    # endregion

    # region Query helpers
    async def get_records_since(
        self, since: datetime | date, authors: Iterable[str]
    ) -> List[AttendanceRecord]:
        since = _validate_since(since)
        wanted = _validate_authors(authors)
        if not wanted:
            return []

        records = await self.synchronizer.refresh(self.source)
        return filter_by_authors(search_since(records, since), wanted)

    async def get_category_summary(
        self, since: datetime | date, authors: Iterable[str]
    ) -> Dict[str, Any]:
        records = await self.get_records_since(since, authors)
        counts = Counter(record.category for record in records)
        return {
            "since": _validate_since(since).isoformat(),
            "total": len(records),
            "categories": [
                {**describe_category(category), "count": counts.get(category, 0)}
                for category in Category
            ],
        }

    def list_categories(self) -> List[Dict[str, Any]]:
        return [describe_category(category) for category in Category]

    # endregion


def describe_category(category: Category) -> Dict[str, Any]:
    spec = get_spec(category)
    return {
        "category": category.name,
        "aliases": list(spec.aliases),
        "color": spec.display_color,
    }


def parse_since(value: str) -> datetime:
    """Parse ``YYYY-MM-DD`` or an ISO-8601 timestamp into an aware datetime."""

    try:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    except (AttributeError, ValueError) as exc:
        raise InvalidQuery("Invalid date format. Use YYYY-MM-DD or ISO-8601.") from exc
    return _validate_since(parsed)


def default_since(now: Optional[datetime] = None) -> datetime:
    """Return the same wall-clock time one calendar month before ``now``."""

    now = now or datetime.now().astimezone()
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def _validate_since(since: Any) -> datetime:
    if isinstance(since, datetime):
        value = since
    elif isinstance(since, date):
        value = datetime.combine(since, time.min)
    else:
        raise InvalidQuery(f"since must be a date or datetime, got {type(since).__name__}")
    # naive values are read as local time, matching stored records
    return value if value.tzinfo is not None else value.astimezone()


def _validate_authors(authors: Any) -> frozenset[str]:
    if isinstance(authors, str):
        raise InvalidQuery("authors must be a collection of ids, not a single string")
    try:
        wanted = frozenset(authors)
    except TypeError as exc:
        raise InvalidQuery("authors must be iterable") from exc
    if not all(isinstance(author, str) for author in wanted):
        raise InvalidQuery("author ids must be strings")
    return wanted


__all__ = ["KintaiService", "describe_category", "parse_since", "default_since"]
