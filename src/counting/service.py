"""Counting orchestration: resolve, deduplicate, count in parallel, join."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, Optional

from common.logging_utils import Timer, extra_context, is_debug_enabled

from .base import ArtifactCounter, DependencyResolver, ProgressObserver
from .errors import CountFailedError, CountingError, DexCountError, ResolutionError
from .models import CountNode, Dependency, link_duplicates

logger = logging.getLogger(__name__)

NodeCallback = Callable[[CountNode], None]


class _Accumulator:
    """Failures and completion count shared by the counting workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.failures: Dict[Dependency, Exception] = {}
        self.last_error: Optional[Exception] = None
        self.completed = 0

    def record(self, node: CountNode, error: Optional[Exception]) -> int:
        with self._lock:
            self.completed += 1
            if error is not None:
                self.failures[node.dependency] = error
                self.last_error = error
            return self.completed


class CountingService:
    """Counts every unique dependency of a resolved tree exactly once.

    The resolver supplies the tree and the counter supplies per-artifact
    counts; this class never assumes which concrete strategies it holds.
    """

    def __init__(
        self,
        resolver: DependencyResolver,
        counter: ArtifactCounter,
        max_workers: Optional[int] = None,
    ):
        """Initialize the service.

        Args:
            resolver: Source of the transitive dependency tree.
            counter: Source of per-artifact method/field counts.
            max_workers: Optional cap on concurrent counts. By default one
                worker runs per unique dependency.
        """
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.resolver = resolver
        self.counter = counter
        self.max_workers = max_workers

    def count(
        self,
        dependency: Dependency,
        on_resolved: Optional[NodeCallback] = None,
        on_counted: Optional[NodeCallback] = None,
    ) -> CountNode:
        """Resolve ``dependency`` and count its whole transitive closure.

        Args:
            dependency: Root dependency.
            on_resolved: Called once with the resolved, uncounted tree.
            on_counted: Called once per unique dependency as it finishes,
                possibly from several worker threads at once. Exceptions it
                raises are logged and do not affect the count.

        Returns:
            The root node with every unique dependency's counts populated.

        Raises:
            ResolutionError: If the resolver fails; nothing is counted.
            CountFailedError: If any unique dependency failed. Raised only
                after all counts finished; its ``root`` keeps the partial
                results.
        """
        root = self._resolve(dependency)
        if on_resolved is not None:
            on_resolved(root)

        unique = list(link_duplicates(root).values())
        acc = _Accumulator()
        workers = len(unique)
        if self.max_workers is not None:
            workers = min(workers, self.max_workers)

        with Timer() as t:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="DexCountWorker") as executor:
                futures = [
                    executor.submit(self._count_unit, node, acc, on_counted)
                    for node in unique
                ]
                wait(futures)
            # Re-raises anything that escaped a unit's own error handling
            for future in futures:
                future.result()

        if is_debug_enabled(logger):
            logger.debug(
                "Counting finished",
                extra=extra_context(
                    event="function_exit",
                    component="counting_service",
                    action="count",
                    target=str(dependency),
                    outcome="failed" if acc.failures else "success",
                    count=len(unique),
                    duration_ms=t.duration_ms(),
                ),
            )

        if acc.failures:
            raise CountFailedError(root, acc.failures, acc.last_error) from acc.last_error
        return root

    def run(self, dependency: Dependency, observer: ProgressObserver) -> CountNode:
        """Count ``dependency`` while reporting every stage to ``observer``.

        Errors are reported through ``observer.on_error`` and then re-raised.
        """
        observer.on_start_resolve()
        try:
            root = self.count(
                dependency,
                on_resolved=observer.on_dependencies_resolved,
                on_counted=observer.on_dependency_counted,
            )
        except DexCountError as exc:
            observer.on_error(exc)
            raise
        observer.on_done(root)
        return root

    def _resolve(self, dependency: Dependency) -> CountNode:
        logger.info("Resolving transitive dependencies of %s", dependency)
        try:
            root = self.resolver.resolve(dependency)
        except ResolutionError:
            raise
        except DexCountError as exc:
            raise ResolutionError(f"Unable to resolve {dependency}: {exc}") from exc
        if root is None:
            raise ResolutionError(f"Resolver returned no tree for {dependency}")
        return root

    def _count_unit(
        self,
        node: CountNode,
        acc: _Accumulator,
        on_counted: Optional[NodeCallback],
    ) -> None:
        error: Optional[Exception] = None
        try:
            self._count_node(node)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # Isolated per unit; reported through CountFailedError after the join
            error = exc
            logger.warning("Error checking %s: %s", node.dependency, exc)
        done = acc.record(node, error)
        if is_debug_enabled(logger):
            logger.debug(
                "Dependency counted",
                extra=extra_context(
                    event="progress",
                    component="counting_service",
                    action="count_node",
                    target=str(node.dependency),
                    outcome="error" if error else "success",
                    completed=done,
                ),
            )
        if on_counted is not None:
            try:
                on_counted(node)
            except Exception:  # pylint: disable=broad-exception-caught
                # Progress reporting never decides the outcome of a count
                logger.exception("Progress callback failed for %s", node.dependency)

    def _count_node(self, node: CountNode) -> None:
        if not node.location:
            raise CountingError(f"No path for {node.dependency}", node.dependency)
        try:
            methods, fields = self.counter.count_artifact(node.location, node.dependency)
        except CountingError as exc:
            if exc.dependency is None:
                exc.dependency = node.dependency
            raise
        except (DexCountError, OSError) as exc:
            raise CountingError(f"Error checking {node.dependency}: {exc}", node.dependency) from exc
        node.own_methods = methods
        node.own_fields = fields
