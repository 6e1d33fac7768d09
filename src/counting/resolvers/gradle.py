"""Gradle-backed dependency resolver."""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Optional

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants

from ..base import DependencyResolver
from ..errors import ReportFormatError, ResolutionError
from ..models import CountNode, Dependency
from .workspace import GRADLEW

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"
FIELD_COUNT = 4


def parse_line(line: str, line_number: Optional[int] = None) -> CountNode:
    """Parse one ``group|artifact|version|location`` record.

    Raises:
        ReportFormatError: If the record does not have exactly four fields.
    """
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) != FIELD_COUNT:
        raise ReportFormatError(
            f"Expected {FIELD_COUNT} '{FIELD_SEPARATOR}'-separated fields, got {len(parts)}: {line!r}",
            line_number=line_number,
            line=line,
        )
    group, artifact, version, location = parts
    return CountNode(
        dependency=Dependency(group=group, artifact=artifact, version=version),
        location=location,
    )


def parse_report(output: str) -> Optional[CountNode]:
    """Build a tree from a resolver report.

    The first record is the root and every following record becomes one of
    its direct dependents. Parsing stops at the first blank line.

    Returns:
        The root node, or None if the report holds no records.

    Raises:
        ReportFormatError: If a record is malformed.
    """
    root: Optional[CountNode] = None
    for number, raw in enumerate(output.splitlines(), start=1):
        line = raw.rstrip("\r")
        if line == "":
            break
        node = parse_line(line, number)
        if root is None:
            root = node
        else:
            root.dependents.append(node)
    return root


class GradleResolver(DependencyResolver):
    """Resolves the transitive closure by running a helper Gradle project.

    All returned nodes have zero counts.
    """

    def __init__(self, workspace_dir: str, timeout: Optional[int] = None):
        """Initialize the resolver.

        Args:
            workspace_dir: Directory holding ``gradlew`` and the deps task.
            timeout: Seconds allowed for one resolution.
        """
        self.workspace_dir = workspace_dir
        self.timeout = timeout if timeout is not None else Constants.RESOLVE_TIMEOUT

    def command(self, dependency: Dependency):
        gradlew = os.path.join(self.workspace_dir, GRADLEW)
        return [
            gradlew,
            "-p", self.workspace_dir,
            "-q",
            "deps",
            f"-PinputDep={dependency}",
        ]

    def resolve(self, dependency: Dependency) -> CountNode:
        cmd = self.command(dependency)
        with Timer() as t:
            try:
                proc = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise ResolutionError(
                    f"Resolving {dependency} timed out after {self.timeout} seconds"
                ) from exc
            except OSError as exc:
                raise ResolutionError(f"Unable to run {cmd[0]}: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "Gradle finished",
                extra=extra_context(
                    event="tool_exit",
                    component="gradle_resolver",
                    action="resolve",
                    target=str(dependency),
                    status_code=proc.returncode,
                    duration_ms=t.duration_ms(),
                ),
            )

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            logger.debug("Gradle failed to resolve %s:\n%s", dependency, stderr)
            raise ResolutionError(
                f"Gradle exited with status {proc.returncode} resolving {dependency}: {stderr}"
            )

        try:
            root = parse_report(proc.stdout or "")
        except ReportFormatError as exc:
            raise ResolutionError(f"Unusable Gradle output for {dependency}: {exc}") from exc
        if root is None:
            raise ResolutionError(f"Gradle reported no artifacts for {dependency}")
        return root
