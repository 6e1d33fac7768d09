"""Exception hierarchy for dependency resolution and dex counting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .models import CountNode, Dependency


class DexCountError(Exception):
    """Base class for every error raised by dexcount."""


class FormatError(DexCountError, ValueError):
    """Malformed input text or binary data."""


class DependencyFormatError(FormatError):
    """A dependency string is not in group:artifact:version form."""


class ReportFormatError(FormatError):
    """A resolver report line could not be parsed."""

    def __init__(self, message: str, line_number: Optional[int] = None, line: Optional[str] = None):
        super().__init__(message)
        self.line_number = line_number
        self.line = line


class DexFormatError(FormatError):
    """A dex blob is too short or does not carry the dex magic."""


class ResolutionError(DexCountError):
    """The resolver failed or produced unusable output."""


class ToolNotFoundError(DexCountError):
    """A required external executable (dx, d8, gradlew) could not be located."""


class ProvisioningError(DexCountError):
    """The helper workspace could not be downloaded or written."""


class CountingError(DexCountError):
    """A single dependency could not be counted."""

    def __init__(self, message: str, dependency: Optional["Dependency"] = None):
        super().__init__(message)
        self.dependency = dependency


class UnsupportedFormatError(CountingError):
    """A resolved location has a format no counter knows how to handle."""


class CountFailedError(DexCountError):
    """At least one unique dependency failed to count.

    Raised only after every counting unit has finished, so ``root`` is the
    fully joined tree and carries every count that did succeed.

    Attributes:
        root: The counted tree, possibly partial.
        failures: Every failure keyed by the dependency that failed.
        error: The surfaced failure (the last one recorded).
    """

    def __init__(
        self,
        root: "CountNode",
        failures: Dict["Dependency", Exception],
        error: Exception,
    ):
        super().__init__(
            f"Failed to count {len(failures)} of the dependencies of {root.dependency}: {error}"
        )
        self.root = root
        self.failures = failures
        self.error = error
