"""
Build job common module.

This module contains shared domain models, the error taxonomy and the
log store interface used across the build job components (logs, deploy,
server, client).

The common module has no dependencies on other buildjob_* modules, making
it a pure domain layer that can be imported by any component.
"""

from .errors import (
    BuildJobError,
    ConfigurationError,
    JobNotFoundError,
    RenderPersistError,
    SubmissionSoftError,
    ValidationError,
)
from .log_level import classify_message
from .models import BuildSpec, LogEntry, LogLevel
from .store import LogStore

__all__ = [
    "BuildJobError",
    "BuildSpec",
    "ConfigurationError",
    "JobNotFoundError",
    "LogEntry",
    "LogLevel",
    "LogStore",
    "RenderPersistError",
    "SubmissionSoftError",
    "ValidationError",
    "classify_message",
]
