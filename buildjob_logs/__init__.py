"""
Build job logs module.

This module contains the in-memory log store and the log service facade
that classifies and records per-job log lines.

The logs layer depends on buildjob_common for domain models and the store
interface, and is used by buildjob_server.
"""

from .memory_store import InMemoryLogStore, ReadWriteLock
from .service import LogService

__all__ = ["InMemoryLogStore", "LogService", "ReadWriteLock"]
