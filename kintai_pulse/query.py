"""Range queries over a record list kept newest first."""

from __future__ import annotations

from datetime import datetime
from typing import AbstractSet, List, Sequence

from .models import AttendanceRecord


def search_since(records: Sequence[AttendanceRecord], since: datetime) -> List[AttendanceRecord]:
    """Return the prefix of ``records`` strictly newer than ``since``.

    ``records`` must be sorted by timestamp descending. ``low`` always points
    at a record newer than ``since`` (or the -1 sentinel) and ``high`` at one
    that is not (or the ``len`` sentinel).
    """

    low = -1
    high = len(records)
    while high - low > 1:
        mid = (low + high) // 2
        if records[mid].timestamp > since:
            low = mid
        else:
            high = mid
    return list(records[: low + 1])


def filter_by_authors(
    records: Sequence[AttendanceRecord], authors: AbstractSet[str]
) -> List[AttendanceRecord]:
    return [record for record in records if record.author in authors]


__all__ = ["search_since", "filter_by_authors"]
