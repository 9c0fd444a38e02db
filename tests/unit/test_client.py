"""
Unit tests for buildjob_client.

Tests the HTTP client functions and the argparse CLI with requests mocked.
"""

import json
from unittest.mock import Mock, patch

import pytest
import requests

from buildjob_client import cli
from buildjob_client.client import (
    append_job_log,
    delete_job_logs,
    get_job_logs,
    list_jobs,
    read_dockerfile,
    submit_build_job,
)

ENTRY = {
    "timestamp": "2024-01-15T10:30:00Z",
    "container": "system",
    "message": "Build job created successfully",
    "level": "info",
}


def make_response(status_code=200, payload=None, reason="OK"):
    """Build a mocked requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    if payload is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = payload
    return response


class TestSubmitBuildJob:
    """Test suite for submit_build_job function."""

    @patch("buildjob_client.client.requests.post")
    def test_successful_submission(self, mock_post):
        """Test that the request body carries the build fields."""
        mock_post.return_value = make_response(
            201, {"status": "created", "job_id": "build-app-1705312200"}
        )

        result = submit_build_job(
            "app",
            "FROM alpine",
            image_name="registry.local/app",
            push=True,
            server_url="http://test-server:8080",
        )

        assert result["job_id"] == "build-app-1705312200"
        args, kwargs = mock_post.call_args
        assert args[0] == "http://test-server:8080/api/buildjob"
        assert kwargs["json"] == {
            "job_name": "app",
            "dockerfile_content": "FROM alpine",
            "image_name": "registry.local/app",
            "push_registry": True,
        }

    @patch("buildjob_client.client.requests.post")
    def test_optional_fields_omitted(self, mock_post):
        """Test that unset optional fields are not sent."""
        mock_post.return_value = make_response(201, {"status": "created"})

        submit_build_job("app", "FROM alpine")

        _, kwargs = mock_post.call_args
        assert kwargs["json"] == {"job_name": "app", "dockerfile_content": "FROM alpine"}

    @patch("buildjob_client.client.requests.post")
    def test_network_error_raises_exception(self, mock_post):
        """Test that network errors are converted to RuntimeError."""
        mock_post.side_effect = requests.exceptions.ConnectionError("Connection failed")

        with pytest.raises(RuntimeError, match="Error submitting to build server"):
            submit_build_job("app", "FROM alpine")

    @patch("buildjob_client.client.requests.post")
    def test_server_error_message_is_surfaced(self, mock_post):
        """Test that the server's error body ends up in the exception."""
        mock_post.return_value = make_response(
            400, {"error": "job_name and dockerfile_content are required"}, "Bad Request"
        )

        with pytest.raises(RuntimeError, match="400 job_name and dockerfile_content"):
            submit_build_job("app", "")

    @patch("buildjob_client.client.requests.post")
    def test_error_without_json_body(self, mock_post):
        """Test that the reason phrase is used when the body is not JSON."""
        mock_post.return_value = make_response(502, None, "Bad Gateway")

        with pytest.raises(RuntimeError, match="502 Bad Gateway"):
            submit_build_job("app", "FROM alpine")


class TestLogFunctions:
    """Test suite for the log client functions."""

    @patch("buildjob_client.client.requests.get")
    def test_get_job_logs(self, mock_get):
        """Test fetching a job's logs."""
        payload = {"job_name": "app", "status": "running", "logs": [ENTRY], "total_lines": 1}
        mock_get.return_value = make_response(200, payload)

        result = get_job_logs("app", server_url="http://test-server:8080")

        assert result == payload
        args, _ = mock_get.call_args
        assert args[0] == "http://test-server:8080/api/buildjob/app/logs"

    @patch("buildjob_client.client.requests.get")
    def test_get_job_logs_not_found(self, mock_get):
        """Test that a 404 is reported as RuntimeError."""
        mock_get.return_value = make_response(404, {"error": "Job not found"}, "Not Found")

        with pytest.raises(RuntimeError, match="404 Job not found"):
            get_job_logs("missing")

    @patch("buildjob_client.client.requests.post")
    def test_append_job_log(self, mock_post):
        """Test appending a line with a container name."""
        mock_post.return_value = make_response(201, ENTRY)

        append_job_log("app", "step 1", container="buildkit")

        args, kwargs = mock_post.call_args
        assert args[0].endswith("/api/buildjob/app/logs/entries")
        assert kwargs["json"] == {"message": "step 1", "container": "buildkit"}

    @patch("buildjob_client.client.requests.delete")
    def test_delete_job_logs(self, mock_delete):
        """Test deleting a job's logs."""
        mock_delete.return_value = make_response(204, None, "No Content")

        delete_job_logs("app")

        args, _ = mock_delete.call_args
        assert args[0].endswith("/api/buildjob/app/logs/entries")

    @patch("buildjob_client.client.requests.get")
    def test_list_jobs(self, mock_get):
        """Test listing job names."""
        mock_get.return_value = make_response(200, {"jobs": ["a", "b"], "total": 2})

        assert list_jobs() == ["a", "b"]
        args, _ = mock_get.call_args
        assert args[0] == "http://localhost:8080/api/buildjobs"

    @patch("buildjob_client.client.requests.get")
    def test_list_jobs_network_error(self, mock_get):
        """Test that network errors are converted to RuntimeError."""
        mock_get.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(RuntimeError, match="Error listing jobs"):
            list_jobs()


class TestReadDockerfile:
    """Test suite for read_dockerfile function."""

    def test_reads_content(self, tmp_path):
        dockerfile = tmp_path / "Dockerfile"
        dockerfile.write_text("FROM alpine\n")

        assert read_dockerfile(dockerfile) == "FROM alpine\n"

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuntimeError, match="Cannot read Dockerfile"):
            read_dockerfile(tmp_path / "Dockerfile")


class TestCli:
    """Test suite for the buildjob CLI entry point."""

    @pytest.fixture(autouse=True)
    def server_url(self, monkeypatch):
        monkeypatch.setenv("BUILDJOB_SERVER_URL", "http://test-server:9000")

    def test_format_entry(self):
        assert cli.format_entry(ENTRY) == (
            "2024-01-15T10:30:00Z [info ] system: Build job created successfully"
        )

    @patch("buildjob_client.cli.submit_build_job")
    def test_submit(self, mock_submit, tmp_path, capsys):
        """Test that submit reads the Dockerfile and prints the job id."""
        dockerfile = tmp_path / "Dockerfile"
        dockerfile.write_text("FROM alpine")
        mock_submit.return_value = {
            "job_id": "build-app-1",
            "namespace": "default",
            "created_at": "2024-01-15T10:30:00Z",
        }

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["submit", "app", "--dockerfile", str(dockerfile), "--push"])

        assert exc_info.value.code == 0
        mock_submit.assert_called_once_with(
            "app",
            "FROM alpine",
            image_name=None,
            push=True,
            server_url="http://test-server:9000",
        )
        assert "Job created: build-app-1" in capsys.readouterr().out

    def test_submit_missing_dockerfile(self, tmp_path, capsys):
        """Test that an unreadable Dockerfile exits with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["submit", "app", "--dockerfile", str(tmp_path / "nope")])

        assert exc_info.value.code == 1
        assert "Error: Cannot read Dockerfile" in capsys.readouterr().err

    @patch("buildjob_client.cli.get_job_logs")
    def test_logs_json(self, mock_logs, capsys):
        """Test printing logs as JSON."""
        payload = {"job_name": "app", "status": "running", "logs": [ENTRY], "total_lines": 1}
        mock_logs.return_value = payload

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["logs", "app", "--json"])

        assert exc_info.value.code == 0
        assert json.loads(capsys.readouterr().out) == payload

    @patch("buildjob_client.cli.get_job_logs")
    def test_logs_not_found(self, mock_logs, capsys):
        """Test that server errors exit with status 1."""
        mock_logs.side_effect = RuntimeError("404 Job not found")

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["logs", "missing"])

        assert exc_info.value.code == 1
        assert "Error: 404 Job not found" in capsys.readouterr().err

    @patch("buildjob_client.cli.time.sleep")
    @patch("buildjob_client.cli.get_job_logs")
    def test_follow_prints_only_new_lines(self, mock_logs, mock_sleep, capsys):
        """Test that following logs never repeats a line."""
        second = {**ENTRY, "container": "builder", "message": "step 1"}
        mock_logs.side_effect = [
            {"logs": [ENTRY]},
            {"logs": [ENTRY, second]},
        ]
        mock_sleep.side_effect = [None, KeyboardInterrupt]

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["logs", "app", "--follow", "--interval", "0.1"])

        assert exc_info.value.code == 130
        out = capsys.readouterr().out.splitlines()
        assert out == [cli.format_entry(ENTRY), cli.format_entry(second)]
        mock_sleep.assert_called_with(0.1)

    @patch("buildjob_client.cli.list_jobs")
    def test_list_empty(self, mock_list, capsys):
        mock_list.return_value = []

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["list"])

        assert exc_info.value.code == 0
        assert "No jobs found." in capsys.readouterr().out

    @patch("buildjob_client.cli.delete_job_logs")
    def test_delete(self, mock_delete, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["delete", "app"])

        assert exc_info.value.code == 0
        mock_delete.assert_called_once_with("app", server_url="http://test-server:9000")

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 1
        assert "usage:" in capsys.readouterr().out
