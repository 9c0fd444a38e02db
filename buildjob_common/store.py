"""
Abstract store interface for job logs.

This module defines the contract that any log store implementation must
follow, allowing the in-memory store to be swapped for another backend.
"""

from abc import ABC, abstractmethod

from .models import LogEntry, LogLevel


class LogStore(ABC):
    """
    Abstract base class for per-job log storage.

    Implementations must be thread-safe: independent jobs may be read and
    written in parallel, and operations on the same job must be linearizable.
    """

    @abstractmethod
    def create(
        self, job_name: str, container: str, message: str, level: LogLevel
    ) -> LogEntry:
        """
        Start a job's log sequence with an opening entry, in one step.

        A job is never observable without entries: readers see either no job
        or a job holding at least the opening entry. Creating an existing job
        keeps its entries and appends the opening entry again.

        Args:
            job_name: Job identifier
            container: Logical source of the opening line
            message: Opening log message
            level: Severity of the opening line

        Returns:
            The stored opening entry
        """
        pass

    @abstractmethod
    def append(
        self, job_name: str, container: str, message: str, level: LogLevel
    ) -> LogEntry:
        """
        Append a new entry, stamped with the current time.

        Args:
            job_name: Job identifier
            container: Logical source of the line
            message: Log message
            level: Severity of the line

        Returns:
            The stored entry

        Raises:
            JobNotFoundError: If the job was never created
        """
        pass

    @abstractmethod
    def read(self, job_name: str) -> tuple[list[LogEntry], bool]:
        """
        Return a snapshot of a job's entries in append order.

        Args:
            job_name: Job identifier

        Returns:
            Tuple of (entries, found); unknown jobs give ([], False)
        """
        pass

    @abstractmethod
    def delete(self, job_name: str) -> None:
        """
        Remove all entries for a job. Deleting an unknown job is a no-op.

        Args:
            job_name: Job identifier
        """
        pass

    @abstractmethod
    def exists(self, job_name: str) -> bool:
        """Check whether a job has a log sequence."""
        pass

    @abstractmethod
    def job_names(self) -> list[str]:
        """Return the identifiers of all jobs currently stored."""
        pass
