"""
Data models for build jobs and their logs.

These models represent the domain objects used throughout the application,
independent of the underlying storage mechanism or HTTP layer.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def format_timestamp(value: datetime) -> str:
    """Format a datetime as RFC3339 in UTC with second precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class LogLevel(str, Enum):
    """Severity tag attached to every log entry."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class LogEntry:
    """
    A single line in a job's log stream.

    Entries are immutable once created; a job's entries are only ever
    appended, never edited or reordered.
    """

    timestamp: datetime
    container: str  # Logical source, e.g. "system" or "builder"
    message: str
    level: LogLevel

    def to_dict(self) -> dict[str, Any]:
        """Convert entry to dictionary format (for API responses)."""
        return {
            "timestamp": format_timestamp(self.timestamp),
            "container": self.container,
            "message": self.message,
            "level": self.level.value,
        }


@dataclass(frozen=True)
class BuildSpec:
    """
    Everything needed to render a build job manifest.

    The Dockerfile content is opaque text: it is never parsed or validated,
    only embedded into the manifest as-is.
    """

    job_name: str
    dockerfile_content: str
    image_name: str | None = None  # Defaults to the job name
    push: bool = False

    @property
    def image_reference(self) -> str:
        """Name of the produced image, always tagged ``latest``."""
        return f"{self.image_name or self.job_name}:latest"
