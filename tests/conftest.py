from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from kintai_pulse.config import Settings
from kintai_pulse.errors import SourceUnavailable
from kintai_pulse.models import RawMessage
from kintai_pulse.store import RecordStore

BASE_TIME = datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc)


def at(hours: int) -> datetime:
    return BASE_TIME + timedelta(hours=hours)


def message(hours: int, text: str, author: str = "U_X") -> RawMessage:
    return RawMessage(id=f"{hours}.000100", text=text, author=author, created_at=at(hours))


class FakeSource:
    """Serves pre-scripted batches and records every cursor it was asked for."""

    def __init__(self, batches: List[List[RawMessage]], failures: Optional[List[Exception]] = None):
        self.batches = list(batches)
        self.failures = list(failures or [])
        self.calls: List[tuple] = []

    async def fetch_batch(self, older_than, limit):
        self.calls.append((older_than, limit))
        if self.failures:
            raise self.failures.pop(0)
        if self.batches:
            return self.batches.pop(0)
        return []


class BrokenSource(FakeSource):
    async def fetch_batch(self, older_than, limit):
        self.calls.append((older_than, limit))
        if self.batches:
            return self.batches.pop(0)
        raise SourceUnavailable("network down")


@pytest.fixture
def store(tmp_path):
    return RecordStore(tmp_path / "cache" / "kintai_data.json")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        slack_bot_token="xoxb-test",
        channel_id="C123",
        api_key="secret",
        store_path=tmp_path / "cache" / "kintai_data.json",
        fetch_limit=2,
        fetch_retries=2,
        retry_base_delay=0.0,
    )
