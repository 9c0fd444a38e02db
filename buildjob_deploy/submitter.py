"""
Best-effort submission of build Jobs to a Kubernetes cluster.

Submission is advisory: the manifest artifact is the success criterion for
job creation, so neither a missing cluster nor a rejected Job fails the
request. Two implementations sit behind the JobSubmitter interface and one
is chosen at startup from configuration.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import requests

from buildjob_common.errors import ConfigurationError, SubmissionSoftError

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")
DEFAULT_SUBMIT_TIMEOUT = 10.0
SUBMITTER_MODES = ("auto", "kubernetes", "disabled")


class SubmissionOutcome(str, Enum):
    ACCEPTED = "accepted"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a submission that did not fail."""

    outcome: SubmissionOutcome
    detail: str


class JobSubmitter(ABC):
    """Capability interface for delivering a Job manifest to a cluster."""

    @abstractmethod
    def submit(self, manifest: dict[str, Any], namespace: str) -> SubmissionResult:
        """
        Submit a Job manifest once. No retries are performed.

        Args:
            manifest: Job object as produced by build_job_manifest
            namespace: Namespace to create the Job in

        Returns:
            SubmissionResult describing an accepted or skipped submission

        Raises:
            SubmissionSoftError: If the cluster rejected the Job, timed out
                                 or could not be reached
        """
        pass

    def close(self) -> None:
        """Release any held resources."""


class UnavailableJobSubmitter(JobSubmitter):
    """Used when there is no cluster access; leaves the manifest for manual apply."""

    def submit(self, manifest: dict[str, Any], namespace: str) -> SubmissionResult:
        name = manifest["metadata"]["name"]
        logger.info(f"No cluster access, job {name} not submitted")
        return SubmissionResult(
            outcome=SubmissionOutcome.UNAVAILABLE,
            detail="Deployment ready; apply the manifest manually",
        )


@dataclass(frozen=True)
class ClusterConfig:
    """Connection settings for the Kubernetes API server."""

    host: str  # Base URL, e.g. https://10.0.0.1:443
    token: str
    ca_cert: str | None = None  # CA bundle path, None to use system CAs

    @classmethod
    def in_cluster(
        cls, service_account_dir: Path | None = None
    ) -> "ClusterConfig | None":
        """
        Load the pod's service account configuration.

        Args:
            service_account_dir: Directory holding token and ca.crt
                                 (default: the standard mount path)

        Returns:
            ClusterConfig when running inside a cluster, None otherwise
        """
        service_account_dir = service_account_dir or SERVICE_ACCOUNT_DIR
        host = os.environ.get("KUBERNETES_SERVICE_HOST")
        port = os.environ.get("KUBERNETES_SERVICE_PORT")
        if not host or not port:
            return None

        token_path = service_account_dir / "token"
        try:
            token = token_path.read_text().strip()
        except OSError:
            return None
        if not token:
            return None

        if ":" in host:
            # IPv6 literal
            host = f"[{host}]"

        ca_path = service_account_dir / "ca.crt"
        ca_cert = str(ca_path) if ca_path.exists() else None
        return cls(host=f"https://{host}:{port}", token=token, ca_cert=ca_cert)


class KubernetesJobSubmitter(JobSubmitter):
    """Creates Jobs through the batch/v1 API of a Kubernetes cluster."""

    def __init__(
        self,
        config: ClusterConfig,
        timeout: float = DEFAULT_SUBMIT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        """
        Initialize the submitter.

        Args:
            config: API server location and credentials
            timeout: Seconds to wait for the API server before giving up
            session: Optional requests session (mainly for tests)
        """
        self.config = config
        self.timeout = timeout
        self.session = session or requests.Session()

    def _jobs_url(self, namespace: str) -> str:
        return f"{self.config.host}/apis/batch/v1/namespaces/{namespace}/jobs"

    def submit(self, manifest: dict[str, Any], namespace: str) -> SubmissionResult:
        name = manifest["metadata"]["name"]

        try:
            response = self.session.post(
                self._jobs_url(namespace),
                json=manifest,
                headers={"Authorization": f"Bearer {self.config.token}"},
                verify=self.config.ca_cert or True,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise SubmissionSoftError(
                f"timed out after {self.timeout}s creating job {name}"
            ) from e
        except requests.exceptions.RequestException as e:
            raise SubmissionSoftError(f"failed to reach Kubernetes API: {e}") from e

        if not response.ok:
            raise SubmissionSoftError(
                f"failed to create kubernetes job: {_api_error_message(response)}"
            )

        logger.info(f"Job {name} created in namespace {namespace}")
        return SubmissionResult(
            outcome=SubmissionOutcome.ACCEPTED,
            detail="Successfully deployed to Kubernetes",
        )

    def close(self) -> None:
        self.session.close()


def _api_error_message(response: requests.Response) -> str:
    """Extract the message from a Kubernetes Status object, if any."""
    try:
        status = response.json()
    except ValueError:
        status = None

    if isinstance(status, dict) and status.get("message"):
        return f"{response.status_code} {status['message']}"
    return f"{response.status_code} {response.reason}"


def create_job_submitter(
    mode: str = "auto", timeout: float = DEFAULT_SUBMIT_TIMEOUT
) -> JobSubmitter:
    """
    Select the submitter implementation for this process.

    Args:
        mode: "auto" uses the cluster when in-cluster configuration is found,
              "kubernetes" requires it, "disabled" never submits
        timeout: Seconds to wait for the API server per submission

    Returns:
        A JobSubmitter

    Raises:
        ConfigurationError: If mode is unknown, or "kubernetes" was requested
                            outside a cluster
    """
    if mode not in SUBMITTER_MODES:
        expected = ", ".join(SUBMITTER_MODES)
        raise ConfigurationError(
            f"Unknown submitter mode {mode!r}, expected one of {expected}"
        )

    if mode == "disabled":
        return UnavailableJobSubmitter()

    config = ClusterConfig.in_cluster()
    if config is None:
        if mode == "kubernetes":
            raise ConfigurationError(
                "Kubernetes submitter requested but no in-cluster configuration found"
            )
        logger.info("No in-cluster configuration found, Jobs will not be submitted")
        return UnavailableJobSubmitter()

    logger.info(f"Submitting Jobs to {config.host}")
    return KubernetesJobSubmitter(config, timeout=timeout)
