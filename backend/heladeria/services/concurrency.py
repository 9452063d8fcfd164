# Overview: Service-layer helpers for concurrency; write locks, retries and per-store critical sections.

from __future__ import annotations

import threading
import time
import weakref
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import scoped_session
from sqlalchemy.orm.exc import StaleDataError


def begin_write(session) -> None:
    """
    Take the SQLite database write lock up front.

    Without it, two writers can both read under a shared lock and only collide
    on their first INSERT/DELETE. Other dialects rely on row locks instead.

    Accepts a plain Session or the scoped_session proxy Flask-SQLAlchemy hands out.
    """
    if isinstance(session, scoped_session):
        session = session()
    if session.get_bind().dialect.name != "sqlite":
        return
    if session.new or session.dirty or session.deleted:
        # Pending work already owns the transaction
        return
    if session.in_transaction():
        # Close the read-only transaction left by earlier lookups
        session.commit()
    session.execute(text("BEGIN IMMEDIATE"))


def run_with_retry(func, *, session, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). Any other exception rolls the session
    back and propagates.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            session.rollback()
            raise
    if last_exc:
        raise last_exc


class KeyedLocks:
    """
    Registry of exclusive locks keyed by name (one per store).

    Serializes every operation on the same key inside this process while
    leaving unrelated keys free to run concurrently. Keys come from request
    paths, so entries are weak: a lock lives only while someone holds or
    waits on it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()

    def get(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str):
        lock = self.get(key)
        with lock:
            yield
