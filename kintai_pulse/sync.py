"""Incremental synchronisation of the record cache from channel history."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

from .classifier import classify
from .errors import SourceUnavailable
from .models import AttendanceRecord, RawMessage
from .slack_client import MessageSource
from .store import RecordRepository

logger = logging.getLogger("kintai_pulse.sync")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class CacheSynchronizer:
    """Pages backward through a message source until cached history is reached.

    One synchronizer owns one store; ``refresh`` holds a lock for the whole
    load-fetch-merge-save pass so two passes never race on the same file.
    """

    def __init__(
        self,
        store: RecordRepository,
        *,
        fetch_limit: int = 100,
        fetch_retries: int = 3,
        retry_base_delay: float = 1.0,
    ) -> None:
        if fetch_limit < 1:
            raise ValueError("fetch_limit must be positive")
        self.store = store
        self.fetch_limit = fetch_limit
        self.fetch_retries = max(1, fetch_retries)
        self.retry_base_delay = retry_base_delay
        self._lock = asyncio.Lock()

    async def refresh(self, source: MessageSource) -> List[AttendanceRecord]:
        async with self._lock:
            existing = self.store.load()
            return await self.sync(source, existing)

    async def sync(
        self, source: MessageSource, existing: List[AttendanceRecord]
    ) -> List[AttendanceRecord]:
        boundary = existing[0].timestamp if existing else EPOCH
        logger.info("Starting sync pass; %s cached records, boundary %s", len(existing), boundary)

        fresh: List[AttendanceRecord] = []
        cursor: Optional[str] = None
        pages = 0
        reached_cache = False
        while not reached_cache:
            batch = await self._fetch(source, cursor)
            pages += 1
            if not batch:
                logger.debug("Message source exhausted after %s pages", pages)
                break

            for message in batch:
                category = classify(message.text)
                if category is None:
                    continue
                if message.created_at > boundary:
                    fresh.append(
                        AttendanceRecord(
                            timestamp=message.created_at,
                            author=message.author,
                            category=category,
                        )
                    )
                else:
                    reached_cache = True
                    break
            cursor = batch[-1].id

        if reached_cache:
            logger.debug("Reached cached history after %s pages", pages)

        merged = fresh + existing
        self.store.save(merged)
        logger.info("Sync pass complete: %s new records, %s total", len(fresh), len(merged))
        return merged

    async def _fetch(self, source: MessageSource, cursor: Optional[str]) -> List[RawMessage]:
        attempt = 0
        while True:
            try:
                return await source.fetch_batch(cursor, self.fetch_limit)
            except SourceUnavailable as exc:
                attempt += 1
                if attempt >= self.fetch_retries:
                    logger.error("Giving up on batch before %s after %s attempts: %s", cursor, attempt, exc)
                    raise
                delay = self.retry_base_delay * (2 ** (attempt - 1))
                logger.warning(
                    "Fetch failed (attempt %s/%s), retrying in %.1fs: %s",
                    attempt,
                    self.fetch_retries,
                    delay,
                    exc,
                )
                await asyncio.sleep(delay)


__all__ = ["CacheSynchronizer", "EPOCH"]
