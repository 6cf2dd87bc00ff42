"""JSON file persistence for cached attendance records."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, List, Protocol

from .errors import StoreUnreadable, StoreUnwritable
from .models import AttendanceRecord, Category

logger = logging.getLogger("kintai_pulse.store")


class RecordRepository(Protocol):
    """Anything that can hand back and replace the full record list."""

    def load(self) -> List[AttendanceRecord]: ...

    def save(self, records: List[AttendanceRecord]) -> None: ...


class RecordStore:
    """Keeps the record list in a single JSON file, newest record first."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[AttendanceRecord]:
        if not self._path.is_file():
            return []
        try:
            return self._read()
        except StoreUnreadable as exc:
            logger.error("Ignoring unreadable record store %s: %s", self._path, exc)
            return []

    def save(self, records: List[AttendanceRecord]) -> None:
        payload = json.dumps([record.to_dict() for record in records], ensure_ascii=False)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
            raise StoreUnwritable(f"could not write {self._path}: {exc}") from exc
        logger.debug("Saved %s records to %s", len(records), self._path)

    def _read(self) -> List[AttendanceRecord]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreUnreadable(str(exc)) from exc
        if not isinstance(raw, list):
            raise StoreUnreadable(f"expected a list, got {type(raw).__name__}")

        records = [_decode_record(item) for item in raw]
        for newer, older in zip(records, records[1:]):
            if older.timestamp > newer.timestamp:
                raise StoreUnreadable("records are not sorted newest first")
        return records


def _decode_record(item: Any) -> AttendanceRecord:
    try:
        timestamp = datetime.fromisoformat(item["timestamp"])
        author = item["author"]
        category = Category[item["category"]]
    except (KeyError, TypeError, ValueError) as exc:
        raise StoreUnreadable(f"malformed record {item!r}") from exc
    if not isinstance(author, str):
        raise StoreUnreadable(f"malformed author in {item!r}")
    if timestamp.tzinfo is None:
        timestamp = timestamp.astimezone()
    return AttendanceRecord(timestamp=timestamp, author=author, category=category)


__all__ = ["RecordRepository", "RecordStore"]
