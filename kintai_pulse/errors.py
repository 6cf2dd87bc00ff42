"""Exception types shared across Kintai Pulse."""

from __future__ import annotations


class KintaiError(RuntimeError):
    """Base class for Kintai Pulse failures."""


class SourceUnavailable(KintaiError):
    """Raised when the message source cannot deliver a batch."""


class StoreUnreadable(KintaiError):
    """Raised when the persisted record file cannot be decoded."""


class StoreUnwritable(KintaiError):
    """Raised when the record file cannot be written."""


class InvalidQuery(KintaiError, ValueError):
    """Raised when query arguments are rejected before any sync work."""


__all__ = [
    "KintaiError",
    "SourceUnavailable",
    "StoreUnreadable",
    "StoreUnwritable",
    "InvalidQuery",
]
