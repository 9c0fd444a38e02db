"""
Admin CLI for operating the build job service.

Provides commands to run the API server and to render Job manifests
locally without a running server.
"""

import sys
from pathlib import Path

import click
import uvicorn

from buildjob_common.errors import RenderPersistError, ValidationError
from buildjob_deploy.manifest import render_manifest, write_manifest
from buildjob_server.config import (
    LOG_LEVELS,
    configure_logging,
    get_jobs_dir,
    get_log_level,
    get_namespace,
)
from buildjob_server.schemas import BuildJobRequest


@click.group()
def cli():
    """Build Job Admin - Run the build job API and render manifests."""
    pass


@cli.command("serve")
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind address")
@click.option("--port", default=8080, show_default=True, type=int, help="Bind port")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (default: BUILDJOB_LOG_LEVEL env or INFO)",
)
def serve(host: str, port: int, log_level: str | None):
    """Run the build job API server."""
    level = (log_level or get_log_level()).upper()
    configure_logging(level)

    uvicorn.run(
        "buildjob_server.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=level.lower(),
    )


@cli.command("render")
@click.argument("job_name")
@click.option(
    "--dockerfile",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default="Dockerfile",
    show_default=True,
    help="Path to the Dockerfile",
)
@click.option("--image", "image_name", help="Image repository (default: job name)")
@click.option("--push", is_flag=True, help="Push the image after building")
@click.option("--namespace", help="Namespace (default: BUILDJOB_NAMESPACE env)")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to write the manifest to (default: BUILDJOB_JOBS_DIR env)",
)
@click.option("--stdout", "to_stdout", is_flag=True, help="Print instead of writing")
def render(
    job_name: str,
    dockerfile: Path,
    image_name: str | None,
    push: bool,
    namespace: str | None,
    output_dir: Path | None,
    to_stdout: bool,
):
    """Render the Job manifest for JOB_NAME without a running server."""
    request = BuildJobRequest(
        job_name=job_name,
        dockerfile_content=dockerfile.read_text(),
        image_name=image_name,
        push_registry=push,
    )
    try:
        spec = request.to_build_spec()
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    namespace = namespace or get_namespace()

    if to_stdout:
        click.echo(render_manifest(spec, namespace), nl=False)
        return

    try:
        artifact = write_manifest(spec, output_dir or get_jobs_dir(), namespace)
    except RenderPersistError as e:
        click.echo(f"Error: Failed to write manifest: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Manifest written to {artifact.path}")
    click.echo(f"  Apply with: kubectl apply -f {artifact.path}")


if __name__ == "__main__":
    cli()
