import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from buildjob_common.errors import (
    JobNotFoundError,
    RenderPersistError,
    SubmissionSoftError,
    ValidationError,
)
from buildjob_common.models import BuildSpec, LogLevel, format_timestamp
from buildjob_deploy.manifest import build_job_manifest, write_manifest
from buildjob_deploy.submitter import (
    JobSubmitter,
    SubmissionOutcome,
    create_job_submitter,
)
from buildjob_logs.memory_store import InMemoryLogStore
from buildjob_logs.service import JOB_CREATED_MESSAGE, SYSTEM_CONTAINER, LogService

from .config import (
    ServerSettings,
    get_jobs_dir,
    get_namespace,
    get_submit_timeout,
    get_submitter_mode,
)
from .schemas import AppendLogRequest, BuildJobRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def get_log_service(request: Request) -> LogService:
    """Get the application's log service."""
    return request.app.state.log_service


def get_submitter(request: Request) -> JobSubmitter:
    """Get the application's job submitter."""
    return request.app.state.submitter


def get_settings(request: Request) -> ServerSettings:
    """Get the application's runtime settings."""
    return request.app.state.settings


def create_build_job(
    spec: BuildSpec,
    log_service: LogService,
    submitter: JobSubmitter,
    settings: ServerSettings,
) -> dict[str, Any]:
    """
    Create a build job from a validated request.

    This helper function handles the job creation workflow:
    1. Rendering the manifest and writing it under the jobs directory
    2. Starting the job's log stream
    3. Submitting the Job to the cluster (once, best effort)
    4. Recording the submission outcome in the job's log stream

    Args:
        spec: Build request to create
        log_service: Log service recording the job's lifecycle
        submitter: Submitter delivering the Job to the cluster
        settings: Jobs directory and namespace

    Returns:
        Response dictionary for the created job

    Raises:
        RenderPersistError: If the manifest could not be written; nothing is
                            logged or submitted in that case
    """
    job_name = spec.job_name
    artifact = write_manifest(spec, settings.jobs_dir, settings.namespace)

    log_service.create_job_logs(job_name)

    try:
        result = submitter.submit(
            build_job_manifest(spec, settings.namespace), settings.namespace
        )
    except SubmissionSoftError as e:
        logger.warning(f"Job {job_name} was not deployed: {e}")
        # Explicit level: the error text may itself contain "error"/"failed"
        log_service.add_log(
            job_name,
            SYSTEM_CONTAINER,
            f"Warning: could not deploy to Kubernetes: {e}",
            level=LogLevel.WARN,
        )
    else:
        if result.outcome is SubmissionOutcome.ACCEPTED:
            log_service.add_log(
                job_name, SYSTEM_CONTAINER, result.detail, level=LogLevel.INFO
            )
        else:
            logger.info(f"Job {job_name}: {result.detail} ({artifact.path})")

    created_at = datetime.now(UTC)
    logger.info(f"Build job {job_name} created")

    return {
        "status": "created",
        "message": JOB_CREATED_MESSAGE,
        "job_name": job_name,
        "job_id": f"build-{job_name}-{int(created_at.timestamp())}",
        "namespace": settings.namespace,
        "created_at": format_timestamp(created_at),
    }


@router.post("/api/buildjob", status_code=201)
def submit_build_job(
    body: BuildJobRequest,
    log_service: LogService = Depends(get_log_service),
    submitter: JobSubmitter = Depends(get_submitter),
    settings: ServerSettings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Render a build job manifest and submit it to the cluster.

    Returns 201 once the manifest artifact exists, whether or not the
    cluster accepted the Job; the deployment outcome goes to the job's logs.
    """
    spec = body.to_build_spec()
    return create_build_job(spec, log_service, submitter, settings)


@router.get("/api/buildjobs")
def list_build_jobs(
    log_service: LogService = Depends(get_log_service),
) -> dict[str, Any]:
    """List the names of all jobs with a log stream."""
    jobs = log_service.list_jobs()
    return {"jobs": jobs, "total": len(jobs)}


@router.get("/api/buildjob/{job_name}/logs")
def get_build_job_logs(
    job_name: str,
    log_service: LogService = Depends(get_log_service),
) -> dict[str, Any]:
    """
    Get every log line recorded for a job so far (poll, not stream).

    Raises:
        JobNotFoundError: 404 if the job has no log stream
    """
    entries, found = log_service.get_job_logs(job_name)
    if not found:
        raise JobNotFoundError(job_name)

    return {
        "job_name": job_name,
        "status": "running",
        "logs": [entry.to_dict() for entry in entries],
        "total_lines": len(entries),
    }


@router.post("/api/buildjob/{job_name}/logs/entries", status_code=201)
def append_build_job_log(
    job_name: str,
    body: AppendLogRequest,
    log_service: LogService = Depends(get_log_service),
) -> dict[str, Any]:
    """
    Append a line to a job's logs (used by builders and log shippers).

    The level is always derived from the message text.

    Raises:
        ValidationError: 400 if the message is missing
        JobNotFoundError: 404 if the job has no log stream
    """
    if not body.message:
        raise ValidationError("message is required")

    entry = log_service.add_log(job_name, body.container, body.message)
    return entry.to_dict()


@router.delete("/api/buildjob/{job_name}/logs/entries", status_code=204)
def delete_build_job_logs(
    job_name: str,
    log_service: LogService = Depends(get_log_service),
) -> Response:
    """Delete a job's logs. Deleting unknown jobs succeeds."""
    log_service.delete_job_logs(job_name)
    return Response(status_code=204)


@router.get("/health")
def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Dictionary with status="ok" if server is running
    """
    return {"status": "ok"}


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message}, headers=headers
    )


async def _validation_error_handler(request: Request, exc: ValidationError):
    return _error(400, str(exc))


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
):
    logger.debug(f"Rejected request body for {request.url.path}: {exc.errors()}")
    return _error(400, "Invalid request body")


async def _not_found_handler(request: Request, exc: JobNotFoundError):
    return _error(404, "Job not found")


async def _render_persist_handler(request: Request, exc: RenderPersistError):
    return _error(500, f"Failed to create job manifest: {exc}")


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), headers=exc.headers)


def create_app(
    log_service: LogService | None = None,
    submitter: JobSubmitter | None = None,
    jobs_dir: Path | str | None = None,
    namespace: str | None = None,
) -> FastAPI:
    """
    Compose the build job API.

    Every collaborator can be passed in; anything omitted is built from the
    environment (see buildjob_server.config). The caller owns the returned
    app and its log store.

    Args:
        log_service: Log service; defaults to one over a fresh InMemoryLogStore
        submitter: Job submitter; defaults to create_job_submitter()
        jobs_dir: Manifest artifact directory
        namespace: Namespace for created Jobs

    Returns:
        The FastAPI application

    Raises:
        ConfigurationError: If the submitter configuration is invalid
    """
    if log_service is None:
        log_service = LogService(InMemoryLogStore())
    if submitter is None:
        submitter = create_job_submitter(get_submitter_mode(), get_submit_timeout())

    settings = ServerSettings(
        jobs_dir=Path(jobs_dir) if jobs_dir is not None else get_jobs_dir(),
        namespace=namespace or get_namespace(),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for FastAPI app.

        - Startup: Log the effective configuration
        - Shutdown: Release the submitter's HTTP session
        """
        logger.info("Starting build job API")
        logger.info(f"  Jobs directory: {settings.jobs_dir}")
        logger.info(f"  Namespace: {settings.namespace}")
        logger.info(f"  Submitter: {type(submitter).__name__}")

        yield

        submitter.close()
        logger.info("Build job API stopped")

    app = FastAPI(title="Build Job API", lifespan=lifespan)
    app.state.log_service = log_service
    app.state.submitter = submitter
    app.state.settings = settings

    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(JobNotFoundError, _not_found_handler)
    app.add_exception_handler(RenderPersistError, _render_persist_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)

    app.include_router(router)
    return app
