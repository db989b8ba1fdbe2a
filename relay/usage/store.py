"""
usage/store.py — In-memory per-user usage counters
==================================================
One ``UsageRecord`` per caller-supplied user id, created lazily on first
lookup. Two independent reset mechanisms act on the counters:

  * the per-record window, checked lazily whenever a record is read
    (``apply_window_policy``), and
  * the wholesale ``clear()``, fired periodically by
    ``UsageResetScheduler`` regardless of individual record ages.

Nothing is persisted; the store is lost on restart. The clock is injected
so callers (and tests) control what "now" means.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Dict, Optional

logger = logging.getLogger("relay.usage")

Clock = Callable[[], datetime]

DEFAULT_WINDOW = timedelta(days=30)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UsageRecord:
    """Admitted generations for one user since ``last_reset``."""

    count: int = 0
    last_reset: datetime = field(default_factory=utcnow)


class UsageStore:
    """Process-local mapping of user id -> UsageRecord.

    All map mutations happen under a single lock so the scheduler's
    ``clear()`` can interleave with request handling without corrupting
    a record.
    """

    def __init__(
        self,
        window: Optional[timedelta] = DEFAULT_WINDOW,
        clock: Clock = utcnow,
    ) -> None:
        self._window = window
        self._clock = clock
        self._records: Dict[str, UsageRecord] = {}
        self._lock = Lock()

    @property
    def window(self) -> Optional[timedelta]:
        return self._window

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._records

    def _expired(self, record: UsageRecord, now: datetime) -> bool:
        return self._window is not None and now - record.last_reset >= self._window

    def get_or_create(self, user_id: str) -> UsageRecord:
        """Return the stored record for ``user_id``, creating a fresh one if unseen."""
        with self._lock:
            record = self._records.get(user_id)
            if record is None:
                record = UsageRecord(count=0, last_reset=self._clock())
                self._records[user_id] = record
            return record

    def apply_window_policy(self, record: UsageRecord) -> UsageRecord:
        """Reset ``record`` in place if its window has elapsed."""
        now = self._clock()
        with self._lock:
            if self._expired(record, now):
                logger.debug("Usage window elapsed (count=%d, last_reset=%s)", record.count, record.last_reset)
                record.count = 0
                record.last_reset = now
        return record

    def increment(self, user_id: str, record: UsageRecord) -> UsageRecord:
        """Count one admitted generation and write the record back under ``user_id``.

        If a wholesale clear discarded ``record`` after it was read, the
        stale count is not resurrected: the increment lands on the user's
        live record (or a fresh one) instead.
        """
        with self._lock:
            live = self._records.get(user_id)
            if live is not record:
                record = live if live is not None else UsageRecord(count=0, last_reset=self._clock())
            record.count += 1
            self._records[user_id] = record
            return record

    def peek(self, user_id: str) -> UsageRecord:
        """Snapshot of the user's usage with the window applied. Mutates nothing."""
        now = self._clock()
        with self._lock:
            record = self._records.get(user_id)
            if record is None or self._expired(record, now):
                return UsageRecord(count=0, last_reset=now)
            return replace(record)

    def clear(self) -> int:
        """Drop every record. Returns how many were dropped."""
        with self._lock:
            dropped = len(self._records)
            self._records.clear()
        return dropped
