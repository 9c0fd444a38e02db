"""
Kubernetes Job manifest generation for image builds.

A build job runs two containers in one pod: a busybox init container that
writes the Dockerfile into a shared emptyDir volume, and a rootless BuildKit
container that builds the image from it.

The manifest is built once as a plain dict. The same object is dumped to
YAML for the file artifact and sent as JSON to the Kubernetes API, so the
two cannot drift apart.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from buildjob_common.errors import RenderPersistError
from buildjob_common.models import BuildSpec

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"

# Heredoc delimiter wrapping the Dockerfile in the init container command.
# Dockerfile content is NOT escaped against it: a line consisting of exactly
# this token ends the heredoc early. Consumers depend on the exact text.
HEREDOC_SENTINEL = "EOFLINE"

PREPARE_IMAGE = "busybox:latest"
BUILDKIT_IMAGE = "moby/buildkit:master-rootless"
TTL_SECONDS_AFTER_FINISHED = 300
BACKOFF_LIMIT = 3
BUILD_UID = 1000
WORKSPACE_PATH = "/workspace"
BUILDKIT_STATE_PATH = "/home/user/.local/share/buildkit"


@dataclass(frozen=True)
class ManifestArtifact:
    """A rendered manifest and where it was written."""

    job_name: str
    content: str
    path: Path


class _ManifestDumper(yaml.SafeDumper):
    """SafeDumper that keeps multi-line strings readable."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    # Literal block style for the embedded Dockerfile; PyYAML falls back to
    # a quoted style on its own when the text cannot be a block scalar.
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_str(data)


_ManifestDumper.add_representer(str, _represent_str)


def dockerfile_command(dockerfile_content: str) -> str:
    """Shell command that writes the Dockerfile into the workspace volume."""
    return (
        f"cat > {WORKSPACE_PATH}/Dockerfile << '{HEREDOC_SENTINEL}'\n"
        f"{dockerfile_content}\n"
        f"{HEREDOC_SENTINEL}"
    )


def _security_context(**extra: Any) -> dict[str, Any]:
    return {**extra, "runAsUser": BUILD_UID, "runAsGroup": BUILD_UID}


def build_job_manifest(
    spec: BuildSpec, namespace: str = DEFAULT_NAMESPACE
) -> dict[str, Any]:
    """
    Build the batch/v1 Job object for a build request.

    Args:
        spec: Build request to render
        namespace: Namespace the Job is created in

    Returns:
        Job manifest as a JSON-compatible dict
    """
    push = "true" if spec.push else "false"

    prepare = {
        "name": "prepare",
        "image": PREPARE_IMAGE,
        "command": ["sh", "-c", dockerfile_command(spec.dockerfile_content)],
        "securityContext": _security_context(),
        "volumeMounts": [{"name": "workspace", "mountPath": WORKSPACE_PATH}],
    }

    buildkit = {
        "name": "buildkit",
        "image": BUILDKIT_IMAGE,
        "imagePullPolicy": "IfNotPresent",
        "env": [
            {"name": "BUILDKITD_FLAGS", "value": "--oci-worker-no-process-sandbox"}
        ],
        "command": ["buildctl-daemonless.sh"],
        "args": [
            "build",
            "--frontend",
            "dockerfile.v0",
            "--local",
            f"context={WORKSPACE_PATH}",
            "--local",
            f"dockerfile={WORKSPACE_PATH}",
            "--output",
            f"type=image,name={spec.image_reference},push={push}",
        ],
        "securityContext": _security_context(
            seccompProfile={"type": "Unconfined"}
        ),
        "volumeMounts": [
            {"name": "workspace", "readOnly": True, "mountPath": WORKSPACE_PATH},
            {"name": "buildkitd", "mountPath": BUILDKIT_STATE_PATH},
        ],
    }

    return {
        "apiVersion": "batch/v1",
        "kind": "Job",
        "metadata": {"name": spec.job_name, "namespace": namespace},
        "spec": {
            "ttlSecondsAfterFinished": TTL_SECONDS_AFTER_FINISHED,
            "backoffLimit": BACKOFF_LIMIT,
            "template": {
                "metadata": {"name": spec.job_name},
                "spec": {
                    "serviceAccountName": "default",
                    "restartPolicy": "Never",
                    "initContainers": [prepare],
                    "containers": [buildkit],
                    "volumes": [
                        {"name": "workspace", "emptyDir": {}},
                        {"name": "buildkitd", "emptyDir": {}},
                    ],
                },
            },
        },
    }


def render_manifest(spec: BuildSpec, namespace: str = DEFAULT_NAMESPACE) -> str:
    """
    Render a build request as YAML manifest text.

    Pure and deterministic: identical inputs give byte-identical text.
    """
    return yaml.dump(
        build_job_manifest(spec, namespace),
        Dumper=_ManifestDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


def manifest_path(jobs_dir: Path | str, job_name: str) -> Path:
    """Path of the manifest artifact for a job."""
    return Path(jobs_dir) / f"{job_name}.yaml"


def write_manifest(
    spec: BuildSpec,
    jobs_dir: Path | str,
    namespace: str = DEFAULT_NAMESPACE,
) -> ManifestArtifact:
    """
    Render a manifest and write it to ``<jobs_dir>/<job_name>.yaml``.

    Args:
        spec: Build request to render
        jobs_dir: Directory for manifest artifacts, created if missing
        namespace: Namespace the Job is created in

    Returns:
        The written ManifestArtifact

    Raises:
        RenderPersistError: If the directory or file cannot be written
    """
    content = render_manifest(spec, namespace)
    path = manifest_path(jobs_dir, spec.job_name)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write manifest for job {spec.job_name}: {e}")
        raise RenderPersistError(f"{path}: {e}") from e

    logger.info(f"Manifest for job {spec.job_name} written to {path}")
    return ManifestArtifact(job_name=spec.job_name, content=content, path=path)
