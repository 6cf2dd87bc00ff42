"""Dataclasses representing Kintai Pulse domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Category(Enum):
    """Attendance event kinds, in tie-break order."""

    ZANGYO = "zangyo"
    TEIJI = "teiji"
    YUKYU = "yukyu"
    NOMIKAI = "nomikai"


@dataclass(slots=True, frozen=True)
class CategorySpec:
    category: Category
    aliases: tuple[str, ...]
    display_color: str


@dataclass(slots=True, frozen=True)
class AttendanceRecord:
    timestamp: datetime
    author: str
    category: Category

    def to_dict(self) -> dict[str, str]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "author": self.author,
            "category": self.category.name,
        }


@dataclass(slots=True, frozen=True)
class RawMessage:
    """A single channel message as delivered by a message source."""

    id: str
    text: str
    author: str
    created_at: datetime


__all__ = ["Category", "CategorySpec", "AttendanceRecord", "RawMessage"]
