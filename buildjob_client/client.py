from pathlib import Path
from typing import Any

import requests

DEFAULT_SERVER_URL = "http://localhost:8080"


def _raise_for_error(response: requests.Response) -> None:
    """Raise RuntimeError with the server's error message for non-2xx responses."""
    if response.ok:
        return
    try:
        message = response.json().get("error")
    except ValueError:
        message = None
    raise RuntimeError(
        f"{response.status_code} {message or response.reason or 'request failed'}"
    )


def read_dockerfile(path: Path) -> str:
    """Read Dockerfile content from a file path."""
    try:
        return path.read_text()
    except OSError as e:
        raise RuntimeError(f"Cannot read Dockerfile {path}: {e}")


def submit_build_job(
    job_name: str,
    dockerfile_content: str,
    image_name: str | None = None,
    push: bool = False,
    server_url: str = DEFAULT_SERVER_URL,
) -> dict[str, Any]:
    """
    Create a build job on the server.

    Args:
        job_name: Name of the build job
        dockerfile_content: Dockerfile text to build
        image_name: Optional image repository (defaults to the job name)
        push: Whether BuildKit should push the image
        server_url: Base URL of the build job server

    Returns:
        The server's job creation response

    Raises:
        RuntimeError: If submission fails due to network or server error
    """
    payload: dict[str, Any] = {
        "job_name": job_name,
        "dockerfile_content": dockerfile_content,
    }
    if image_name:
        payload["image_name"] = image_name
    if push:
        payload["push_registry"] = True

    try:
        response = requests.post(
            f"{server_url}/api/buildjob", json=payload, timeout=30
        )
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"Error submitting to build server: {e}")
    _raise_for_error(response)
    return response.json()


def get_job_logs(
    job_name: str, server_url: str = DEFAULT_SERVER_URL
) -> dict[str, Any]:
    """
    Fetch all log lines recorded for a job.

    Returns:
        dict with job_name, status, logs and total_lines

    Raises:
        RuntimeError: If the job is unknown (404) or the request fails
    """
    try:
        response = requests.get(
            f"{server_url}/api/buildjob/{job_name}/logs", timeout=30
        )
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"Error fetching logs: {e}")
    _raise_for_error(response)
    return response.json()


def append_job_log(
    job_name: str,
    message: str,
    container: str = "builder",
    server_url: str = DEFAULT_SERVER_URL,
) -> dict[str, Any]:
    """Append one line to a job's logs and return the stored entry."""
    try:
        response = requests.post(
            f"{server_url}/api/buildjob/{job_name}/logs/entries",
            json={"message": message, "container": container},
            timeout=30,
        )
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"Error appending log: {e}")
    _raise_for_error(response)
    return response.json()


def delete_job_logs(job_name: str, server_url: str = DEFAULT_SERVER_URL) -> None:
    """Delete a job's logs. Unknown jobs are not an error."""
    try:
        response = requests.delete(
            f"{server_url}/api/buildjob/{job_name}/logs/entries", timeout=30
        )
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"Error deleting logs: {e}")
    _raise_for_error(response)


def list_jobs(server_url: str = DEFAULT_SERVER_URL) -> list[str]:
    """
    List the names of all jobs known to the server.

    Raises:
        RuntimeError: If the request fails
    """
    try:
        response = requests.get(f"{server_url}/api/buildjobs", timeout=30)
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"Error listing jobs: {e}")
    _raise_for_error(response)
    return response.json()["jobs"]
