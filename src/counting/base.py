"""Abstract collaborators consumed by the counting service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple

from .models import CountNode, Dependency


class DependencyResolver(ABC):
    """Produces the transitive dependency tree for a root dependency."""

    @abstractmethod
    def resolve(self, dependency: Dependency) -> CountNode:
        """Return a tree rooted at ``dependency`` with all counts at zero.

        Raises:
            ResolutionError: If the closure cannot be obtained.
        """


class ArtifactCounter(ABC):
    """Counts the methods and fields contributed by one resolved artifact."""

    @abstractmethod
    def count_artifact(self, location: str, dependency: Dependency) -> Tuple[int, int]:
        """Return ``(methods, fields)`` for the artifact at ``location``.

        ``dependency`` only keys on-disk caches; implementations must not
        assume anything else about it.

        Raises:
            UnsupportedFormatError: If the location's format is unknown.
            CountingError: If the artifact cannot be counted.
        """


class ProgressObserver:
    """Receives progress notifications from a count.

    Methods may be called from worker threads, concurrently; implementations
    must be thread safe. The defaults do nothing.
    """

    def on_start_resolve(self) -> None:
        """Resolution of the transitive dependencies has started."""

    def on_dependencies_resolved(self, root: CountNode) -> None:
        """The transitive set is known; counts are not filled in yet."""

    def on_dependency_counted(self, node: CountNode) -> None:
        """One unique dependency finished counting, successfully or not."""

    def on_done(self, root: CountNode) -> None:
        """Every unique dependency was counted."""

    def on_error(self, error: Exception) -> None:
        """The count failed; ``error`` may carry a partial tree."""
