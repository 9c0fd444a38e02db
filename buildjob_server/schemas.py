"""Request bodies accepted by the build job API."""

from pydantic import BaseModel

from buildjob_common.errors import ValidationError
from buildjob_common.models import BuildSpec


def _check_job_name(job_name: str) -> None:
    # Job names become file names under the jobs directory
    if "/" in job_name or "\\" in job_name or job_name in (".", ".."):
        raise ValidationError(f"Invalid job_name: {job_name!r}")


class BuildJobRequest(BaseModel):
    job_name: str | None = None
    dockerfile_content: str | None = None
    image_name: str | None = None
    push_registry: bool = False

    def to_build_spec(self) -> BuildSpec:
        """
        Validate required fields and convert to a BuildSpec.

        Raises:
            ValidationError: If job_name or dockerfile_content is missing
        """
        if not self.job_name or not self.dockerfile_content:
            raise ValidationError("job_name and dockerfile_content are required")
        _check_job_name(self.job_name)

        return BuildSpec(
            job_name=self.job_name,
            dockerfile_content=self.dockerfile_content,
            image_name=self.image_name or None,
            push=self.push_registry,
        )


class AppendLogRequest(BaseModel):
    message: str | None = None
    container: str = "builder"
