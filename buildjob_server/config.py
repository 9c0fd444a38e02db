"""
Environment-based configuration for the build job server.

Environment Variables:
    BUILDJOB_JOBS_DIR: Directory for manifest artifacts (default: jobs)
    BUILDJOB_NAMESPACE: Namespace for created Jobs (default: default)
    BUILDJOB_SUBMITTER: auto, kubernetes or disabled (default: auto)
    BUILDJOB_SUBMIT_TIMEOUT: Seconds per Kubernetes API call (default: 10)
    BUILDJOB_LOG_LEVEL: Logging level (default: INFO)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from buildjob_deploy.manifest import DEFAULT_NAMESPACE
from buildjob_deploy.submitter import DEFAULT_SUBMIT_TIMEOUT

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServerSettings:
    """Settings the request handlers need at runtime."""

    jobs_dir: Path
    namespace: str


def get_jobs_dir() -> Path:
    """
    Get the manifest artifact directory from environment or use default.

    Environment variables:
    - BUILDJOB_JOBS_DIR: Custom directory (useful for testing)
    """
    return Path(os.environ.get("BUILDJOB_JOBS_DIR", "jobs"))


def get_namespace() -> str:
    """Get the namespace for created Jobs (BUILDJOB_NAMESPACE)."""
    return os.environ.get("BUILDJOB_NAMESPACE") or DEFAULT_NAMESPACE


def get_submitter_mode() -> str:
    """Get the submitter mode (BUILDJOB_SUBMITTER): auto, kubernetes or disabled."""
    return os.environ.get("BUILDJOB_SUBMITTER", "auto").strip().lower()


def get_submit_timeout() -> float:
    """
    Get the Kubernetes API timeout from environment.

    Returns:
        Seconds to wait per submission; invalid values fall back to the default
    """
    raw = os.environ.get("BUILDJOB_SUBMIT_TIMEOUT")
    if raw is None:
        return DEFAULT_SUBMIT_TIMEOUT

    try:
        timeout = float(raw)
    except ValueError:
        logger.warning(
            f"Invalid BUILDJOB_SUBMIT_TIMEOUT={raw}, "
            f"using default {DEFAULT_SUBMIT_TIMEOUT}"
        )
        return DEFAULT_SUBMIT_TIMEOUT

    if timeout <= 0:
        logger.warning(
            f"Invalid BUILDJOB_SUBMIT_TIMEOUT={timeout}, "
            f"using default {DEFAULT_SUBMIT_TIMEOUT}"
        )
        return DEFAULT_SUBMIT_TIMEOUT
    return timeout


def get_log_level() -> str:
    """Get the logging level name (BUILDJOB_LOG_LEVEL)."""
    level = os.environ.get("BUILDJOB_LOG_LEVEL", "INFO").upper()
    return level if level in LOG_LEVELS else "INFO"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the server process."""
    logging.basicConfig(
        level=getattr(logging, level or get_log_level()), format=LOG_FORMAT
    )
