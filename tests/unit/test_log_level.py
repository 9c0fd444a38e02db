"""
Unit tests for buildjob_common.log_level.

Tests the message classifier that assigns a severity to every log line.
"""

import pytest

from buildjob_common.log_level import classify_message
from buildjob_common.models import LogLevel


class TestClassifyMessage:
    """Test suite for classify_message function."""

    @pytest.mark.parametrize(
        "message",
        [
            "ERROR in dockerfile",
            "Error: failed to build image",
            "step 3 FAILED",
            "errors: 2",
            "pip install failed with exit code 1",
        ],
    )
    def test_error_markers(self, message):
        """Test that 'error' or 'failed' anywhere in a message gives error."""
        assert classify_message(message) == LogLevel.ERROR

    @pytest.mark.parametrize(
        "message",
        ["Warning: deprecated", "WARN pinned base image", "npm warn deprecated"],
    )
    def test_warn_markers(self, message):
        """Test that 'warn' gives warn when no error marker is present."""
        assert classify_message(message) == LogLevel.WARN

    @pytest.mark.parametrize(
        "message", ["Build succeeded", "Step 1/4 : FROM alpine", "", "   "]
    )
    def test_everything_else_is_info(self, message):
        """Test that messages without markers are info."""
        assert classify_message(message) == LogLevel.INFO

    def test_error_takes_precedence_over_warn(self):
        """Test that error markers win over warn markers."""
        assert classify_message("Warning: build failed") == LogLevel.ERROR

    def test_same_message_same_level(self):
        """Test that classification depends on the message alone."""
        message = "Warning: cache miss"
        assert classify_message(message) == classify_message(message)

    def test_level_serializes_as_plain_string(self):
        """Test that levels compare equal to their wire values."""
        assert classify_message("Build succeeded") == "info"
        assert classify_message("Warning: deprecated") == "warn"
        assert classify_message("ERROR in dockerfile") == "error"
