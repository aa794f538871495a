# Overview: Concurrency helpers; per-collection writer locks and retry on transient store failures.

from __future__ import annotations

import threading
import time
from contextlib import contextmanager

from ..extensions import db
from ..validation import StoreUnavailable, StaleRecordError


class CollectionLocks:
    """
    In-process mutual exclusion for writers, one re-entrant lock per collection.

    Locks are always taken in sorted name order so two composite writers
    (e.g. checkout holding catalog + sales) cannot deadlock each other.
    """

    def __init__(self) -> None:
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, name: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = self._locks[name] = threading.RLock()
            return lock

    @contextmanager
    def hold(self, *names: str):
        locks = [self._lock_for(n) for n in sorted(set(names))]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a store operation with retry on transient failures.

    Retries on StoreUnavailable (SQLite "database is locked") and
    StaleRecordError (optimistic version conflicts). Each failed attempt is
    rolled back before the next one starts.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (StoreUnavailable, StaleRecordError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
