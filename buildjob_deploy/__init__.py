"""
Build job deploy module.

This module turns build requests into Kubernetes Job manifests, writes them
as file artifacts and submits them to a cluster when one is reachable.

Submission never fails job creation: the manifest artifact is the success
criterion, deployment is advisory.
"""

from .manifest import (
    DEFAULT_NAMESPACE,
    ManifestArtifact,
    build_job_manifest,
    render_manifest,
    write_manifest,
)
from .submitter import (
    ClusterConfig,
    JobSubmitter,
    KubernetesJobSubmitter,
    SubmissionOutcome,
    SubmissionResult,
    UnavailableJobSubmitter,
    create_job_submitter,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "ClusterConfig",
    "JobSubmitter",
    "KubernetesJobSubmitter",
    "ManifestArtifact",
    "SubmissionOutcome",
    "SubmissionResult",
    "UnavailableJobSubmitter",
    "build_job_manifest",
    "create_job_submitter",
    "render_manifest",
    "write_manifest",
]
