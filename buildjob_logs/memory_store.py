"""
In-memory implementation of the job log store.

Keeps every job's entries in a dict guarded by a reader/writer lock.
Logs live only as long as the process.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from buildjob_common.errors import JobNotFoundError
from buildjob_common.models import LogEntry, LogLevel
from buildjob_common.store import LogStore


def _new_entry(container: str, message: str, level: LogLevel) -> LogEntry:
    return LogEntry(
        timestamp=datetime.now(UTC), container=container, message=message, level=level
    )


class ReadWriteLock:
    """
    Many concurrent readers or a single writer.

    A waiting writer blocks new readers, so a steady stream of log polls
    cannot starve appenders.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class InMemoryLogStore(LogStore):
    """
    Dict-based log storage keyed by job name.

    The lock covers the whole map: reads share it, writes (create, append,
    delete) hold it exclusively. Nothing inside a critical section does I/O.
    """

    def __init__(self):
        self._logs: dict[str, list[LogEntry]] = {}
        self._lock = ReadWriteLock()

    def create(
        self, job_name: str, container: str, message: str, level: LogLevel
    ) -> LogEntry:
        with self._lock.write_locked():
            entry = _new_entry(container, message, level)
            self._logs.setdefault(job_name, []).append(entry)
            return entry

    def append(
        self, job_name: str, container: str, message: str, level: LogLevel
    ) -> LogEntry:
        with self._lock.write_locked():
            entries = self._logs.get(job_name)
            if entries is None:
                raise JobNotFoundError(job_name)

            entry = _new_entry(container, message, level)
            entries.append(entry)
            return entry

    def read(self, job_name: str) -> tuple[list[LogEntry], bool]:
        with self._lock.read_locked():
            entries = self._logs.get(job_name)
            if entries is None:
                return [], False
            # Entries are frozen, a shallow copy is a consistent snapshot
            return list(entries), True

    def delete(self, job_name: str) -> None:
        with self._lock.write_locked():
            self._logs.pop(job_name, None)

    def exists(self, job_name: str) -> bool:
        with self._lock.read_locked():
            return job_name in self._logs

    def job_names(self) -> list[str]:
        with self._lock.read_locked():
            return list(self._logs)
