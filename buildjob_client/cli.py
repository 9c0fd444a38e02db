import argparse
import json
import os
import sys
import time
from pathlib import Path

from .client import (
    DEFAULT_SERVER_URL,
    append_job_log,
    delete_job_logs,
    get_job_logs,
    list_jobs,
    read_dockerfile,
    submit_build_job,
)


def get_server_url() -> str:
    """
    Get the build server URL from environment variable or use default.

    Returns:
        Server URL string

    Environment variables:
    - BUILDJOB_SERVER_URL: Custom server URL (useful for testing with different ports)
    """
    return os.environ.get("BUILDJOB_SERVER_URL", DEFAULT_SERVER_URL)


def format_entry(entry: dict) -> str:
    """Format a log entry as a single human-readable line."""
    return (
        f"{entry['timestamp']} [{entry['level']:<5}] "
        f"{entry['container']}: {entry['message']}"
    )


def follow_logs(job_name: str, server_url: str, interval: float) -> None:
    """Poll a job's logs, printing only lines not seen before."""
    seen = 0
    while True:
        logs = get_job_logs(job_name, server_url=server_url)["logs"]
        for entry in logs[seen:]:
            print(format_entry(entry), flush=True)
        seen = max(seen, len(logs))
        time.sleep(interval)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build Job CLI")
    subparsers = parser.add_subparsers(dest="command")

    # buildjob submit <name> --dockerfile PATH [--image NAME] [--push]
    submit_parser = subparsers.add_parser("submit", help="Create a build job")
    submit_parser.add_argument("job_name", help="Name of the build job")
    submit_parser.add_argument(
        "--dockerfile",
        type=Path,
        default=Path("Dockerfile"),
        help="Path to the Dockerfile (default: ./Dockerfile)",
    )
    submit_parser.add_argument(
        "--image", dest="image_name", help="Image repository (default: job name)"
    )
    submit_parser.add_argument(
        "--push", action="store_true", help="Push the image after building"
    )

    # buildjob logs <name> [--json] [--follow] [--interval S]
    logs_parser = subparsers.add_parser("logs", help="Show a job's logs")
    logs_parser.add_argument("job_name", help="Name of the build job")
    logs_parser.add_argument(
        "--json", dest="json_mode", action="store_true", help="Output in JSON format"
    )
    logs_parser.add_argument(
        "--follow",
        action="store_true",
        help="Keep polling and print new lines as they arrive",
    )
    logs_parser.add_argument(
        "--interval",
        type=float,
        default=2.0,
        help="Seconds between polls with --follow (default: 2.0)",
    )

    # buildjob log <name> <message> [--container C]
    log_parser = subparsers.add_parser("log", help="Append a line to a job's logs")
    log_parser.add_argument("job_name", help="Name of the build job")
    log_parser.add_argument("message", help="Log message")
    log_parser.add_argument(
        "--container", default="builder", help="Source of the line (default: builder)"
    )

    # buildjob delete <name>
    delete_parser = subparsers.add_parser("delete", help="Delete a job's logs")
    delete_parser.add_argument("job_name", help="Name of the build job")

    # buildjob list [--json]
    list_parser = subparsers.add_parser("list", help="List all jobs")
    list_parser.add_argument(
        "--json", dest="json_mode", action="store_true", help="Output in JSON format"
    )

    return parser


def main(argv: list[str] | None = None):
    """Main entry point for the build job CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Get server URL from environment
    server_url = get_server_url()

    try:
        if args.command == "submit":
            dockerfile_content = read_dockerfile(args.dockerfile)
            result = submit_build_job(
                args.job_name,
                dockerfile_content,
                image_name=args.image_name,
                push=args.push,
                server_url=server_url,
            )
            print(f"Job created: {result['job_id']}")
            print(f"  Namespace: {result['namespace']}")
            print(f"  Created:   {result['created_at']}")
            print(f"Follow the build with: buildjob logs {args.job_name} --follow")
            sys.exit(0)

        elif args.command == "logs":
            if args.follow:
                follow_logs(args.job_name, server_url, args.interval)

            result = get_job_logs(args.job_name, server_url=server_url)
            if args.json_mode:
                print(json.dumps(result, indent=2))
            else:
                for entry in result["logs"]:
                    print(format_entry(entry))
            sys.exit(0)

        elif args.command == "log":
            entry = append_job_log(
                args.job_name,
                args.message,
                container=args.container,
                server_url=server_url,
            )
            print(format_entry(entry))
            sys.exit(0)

        elif args.command == "delete":
            delete_job_logs(args.job_name, server_url=server_url)
            print(f"Logs deleted: {args.job_name}")
            sys.exit(0)

        elif args.command == "list":
            jobs = list_jobs(server_url=server_url)
            if args.json_mode:
                print(json.dumps(jobs, indent=2))
            elif not jobs:
                print("No jobs found.")
            else:
                for job_name in jobs:
                    print(job_name)
            sys.exit(0)

    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nStopped following logs.", file=sys.stderr)
        sys.exit(130)  # Standard exit code for SIGINT

    parser.print_help()
    sys.exit(1)


if __name__ == "__main__":
    main()
