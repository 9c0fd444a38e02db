"""
Error taxonomy shared by the build job components.

The HTTP layer maps these to status codes; see buildjob_server.app.
"""


class BuildJobError(Exception):
    """Base class for all build job errors."""


class ValidationError(BuildJobError):
    """A request is missing required fields or carries invalid values."""


class JobNotFoundError(BuildJobError):
    """An operation referenced a job that has no log history."""

    def __init__(self, job_name: str):
        super().__init__(f"Job not found: {job_name}")
        self.job_name = job_name


class RenderPersistError(BuildJobError):
    """The rendered manifest could not be written to storage."""


class SubmissionSoftError(BuildJobError):
    """
    The orchestration API rejected the job or could not be reached.

    Never surfaced to HTTP callers: the manifest artifact already exists,
    so the failure is recorded in the job's log stream instead.
    """


class ConfigurationError(BuildJobError):
    """The service was started with invalid configuration."""
