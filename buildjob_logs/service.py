"""
Log service: the consumer-facing API for a job's log lifecycle.

Combines a LogStore with the message classifier. The store is injected so
that the composing application controls its construction and teardown.
"""

import logging

from buildjob_common.log_level import classify_message
from buildjob_common.models import LogEntry, LogLevel
from buildjob_common.store import LogStore

logger = logging.getLogger(__name__)

SYSTEM_CONTAINER = "system"
JOB_CREATED_MESSAGE = "Build job created successfully"


class LogService:
    """
    Create, append to, read and delete per-job log streams.

    Every existing job has at least one entry (the creation line), so "job
    exists" and "job has logs" are the same observable fact for callers.
    """

    def __init__(self, store: LogStore):
        """
        Initialize the log service.

        Args:
            store: Log store holding every job's entries
        """
        self.store = store

    def create_job_logs(self, job_name: str) -> None:
        """
        Start a job's log stream with a system creation line.

        Calling this again for an existing job keeps its history and
        appends another creation line.

        Args:
            job_name: Job identifier
        """
        self.store.create(
            job_name,
            SYSTEM_CONTAINER,
            JOB_CREATED_MESSAGE,
            classify_message(JOB_CREATED_MESSAGE),
        )
        logger.debug(f"Log stream created for job {job_name}")

    def add_log(
        self,
        job_name: str,
        container: str,
        message: str,
        level: LogLevel | None = None,
    ) -> LogEntry:
        """
        Append a line to a job's log stream.

        Args:
            job_name: Job identifier
            container: Logical source of the line (e.g. "builder")
            message: Log message
            level: Explicit severity; inferred from the message when omitted

        Returns:
            The stored entry

        Raises:
            JobNotFoundError: If create_job_logs was never called for the job
        """
        if level is None:
            level = classify_message(message)
        return self.store.append(job_name, container, message, level)

    def get_job_logs(self, job_name: str) -> tuple[list[LogEntry], bool]:
        """Return (entries, found) for a job, entries in append order."""
        return self.store.read(job_name)

    def delete_job_logs(self, job_name: str) -> None:
        """Drop a job's log stream. Unknown jobs are ignored."""
        self.store.delete(job_name)
        logger.debug(f"Log stream deleted for job {job_name}")

    def list_jobs(self) -> list[str]:
        """Return the names of all jobs with a log stream."""
        return self.store.job_names()
