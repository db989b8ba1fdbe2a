"""
usage/gate.py — Admission gate for quota-bound generations
==========================================================
``admit`` answers "may this user run one more generation?" against a
fixed limit. It never raises and never increments: a denial is returned
as a value, and the caller commits the increment only after the
protected action succeeded, so a failed generation costs no quota.

``hold`` serialises admit -> generate -> commit per user so two
concurrent requests for the same id cannot both pass the check.
"""
from __future__ import annotations

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

from .store import UsageRecord, UsageStore

logger = logging.getLogger("relay.usage")


@dataclass(frozen=True)
class AdmissionDecision:
    admitted: bool
    current_usage: int  # pre-increment count
    limit: int
    record: Optional[UsageRecord] = field(default=None, repr=False, compare=False)

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.current_usage)


class AdmissionGate:
    def __init__(self, store: UsageStore, limit: int) -> None:
        self.store = store
        self.limit = limit
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def admit(self, user_id: str) -> AdmissionDecision:
        record = self.store.apply_window_policy(self.store.get_or_create(user_id))
        if record.count >= self.limit:
            logger.info("Usage limit reached for user %s (%d/%d)", user_id, record.count, self.limit)
            return AdmissionDecision(admitted=False, current_usage=record.count, limit=self.limit)
        return AdmissionDecision(admitted=True, current_usage=record.count, limit=self.limit, record=record)

    def check(self, user_id: str) -> AdmissionDecision:
        """Same answer as ``admit`` but read-only: no record is created or reset."""
        record = self.store.peek(user_id)
        return AdmissionDecision(
            admitted=record.count < self.limit,
            current_usage=record.count,
            limit=self.limit,
        )

    def commit(self, user_id: str, decision: AdmissionDecision) -> int:
        """Record one successful generation for an admitted decision. Returns the new count."""
        if not decision.admitted or decision.record is None:
            raise RuntimeError(f"cannot commit usage for a denied admission (user {user_id!r})")
        return self.store.increment(user_id, decision.record).count

    @asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[None]:
        """Exclusive section for ``user_id``; other users are never blocked."""
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        async with lock:
            yield
