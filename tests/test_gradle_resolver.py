"""Tests for the Gradle report parser and resolver."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from counting.errors import FormatError, ReportFormatError, ResolutionError
from counting.models import Dependency
from counting.resolvers.gradle import GradleResolver, parse_line, parse_report

REPORT = (
    "com.squareup.retrofit2|retrofit|2.9.0|/cache/retrofit-2.9.0.jar\n"
    "com.squareup.okhttp3|okhttp|3.14.9|/cache/okhttp-3.14.9.jar\n"
    "com.squareup.okio|okio|1.17.2|/cache/okio-1.17.2.jar\n"
)


class TestParseReport:
    """Tests for parse_report()."""

    def test_first_line_is_root(self):
        root = parse_report(REPORT)
        assert root.dependency == Dependency("com.squareup.retrofit2", "retrofit", "2.9.0")
        assert root.location == "/cache/retrofit-2.9.0.jar"

    def test_rest_are_flat_dependents(self):
        root = parse_report(REPORT)
        assert [str(d.dependency) for d in root.dependents] == [
            "com.squareup.okhttp3:okhttp:3.14.9",
            "com.squareup.okio:okio:1.17.2",
        ]
        assert all(d.dependents == [] for d in root.dependents)

    def test_counts_start_at_zero(self):
        root = parse_report(REPORT)
        assert all(n.own_methods == 0 and n.own_fields == 0 for n in root.walk())

    def test_stops_at_blank_line(self):
        root = parse_report(REPORT.replace("okhttp-3.14.9.jar\n", "okhttp-3.14.9.jar\n\n"))
        assert len(root.dependents) == 1

    def test_no_trailing_newline(self):
        root = parse_report("g|a|1|/a.jar\ng|b|1|/b.aar")
        assert root.dependents[0].location == "/b.aar"

    def test_crlf(self):
        root = parse_report("g|a|1|/a.jar\r\ng|b|1|/b.jar\r\n")
        assert root.location == "/a.jar"
        assert root.dependents[0].location == "/b.jar"

    def test_empty_location_allowed(self):
        root = parse_report("g|a|1|\n")
        assert root.location == ""

    def test_empty_report(self):
        assert parse_report("") is None
        assert parse_report("\ng|a|1|/a.jar\n") is None

    def test_malformed_line(self):
        with pytest.raises(ReportFormatError) as exc_info:
            parse_report("g|a|1|/a.jar\ng|b|1\n")
        assert exc_info.value.line_number == 2
        assert exc_info.value.line == "g|b|1"

    def test_too_many_fields(self):
        with pytest.raises(FormatError):
            parse_line("g|a|1|/a.jar|extra")


def _completed(returncode=0, stdout="", stderr=""):
    proc = MagicMock()
    proc.returncode = returncode
    proc.stdout = stdout
    proc.stderr = stderr
    return proc


class TestGradleResolver:
    """Tests for GradleResolver.resolve()."""

    DEP = Dependency("com.squareup.retrofit2", "retrofit", "2.9.0")

    def test_command(self):
        resolver = GradleResolver("/ws")
        assert resolver.command(self.DEP) == [
            "/ws/gradlew", "-p", "/ws", "-q", "deps",
            "-PinputDep=com.squareup.retrofit2:retrofit:2.9.0",
        ]

    @patch("counting.resolvers.gradle.subprocess.run")
    def test_resolve_parses_stdout(self, mock_run):
        mock_run.return_value = _completed(stdout=REPORT)
        root = GradleResolver("/ws", timeout=5).resolve(self.DEP)
        assert root.dependency == self.DEP
        assert len(root.dependents) == 2
        _, kwargs = mock_run.call_args
        assert kwargs["timeout"] == 5
        assert kwargs["capture_output"] is True

    @patch("counting.resolvers.gradle.subprocess.run")
    def test_nonzero_exit(self, mock_run):
        mock_run.return_value = _completed(returncode=1, stderr="Could not resolve")
        with pytest.raises(ResolutionError, match="status 1.*Could not resolve"):
            GradleResolver("/ws").resolve(self.DEP)

    @patch("counting.resolvers.gradle.subprocess.run")
    def test_empty_output(self, mock_run):
        mock_run.return_value = _completed(stdout="")
        with pytest.raises(ResolutionError, match="no artifacts"):
            GradleResolver("/ws").resolve(self.DEP)

    @patch("counting.resolvers.gradle.subprocess.run")
    def test_malformed_output(self, mock_run):
        mock_run.return_value = _completed(stdout="garbage\n")
        with pytest.raises(ResolutionError) as exc_info:
            GradleResolver("/ws").resolve(self.DEP)
        assert isinstance(exc_info.value.__cause__, ReportFormatError)

    @patch("counting.resolvers.gradle.subprocess.run")
    def test_missing_gradlew(self, mock_run):
        mock_run.side_effect = FileNotFoundError("gradlew")
        with pytest.raises(ResolutionError, match="Unable to run"):
            GradleResolver("/ws").resolve(self.DEP)

    @patch("counting.resolvers.gradle.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="gradlew", timeout=1)
        with pytest.raises(ResolutionError, match="timed out"):
            GradleResolver("/ws", timeout=1).resolve(self.DEP)
