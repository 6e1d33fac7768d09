"""Data models for dependency trees and their dex counts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from .errors import DependencyFormatError


@dataclass(frozen=True)
class Dependency:
    """Immutable group:artifact:version identity; the deduplication key."""
    group: str
    artifact: str
    version: str

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"

    @classmethod
    def parse(cls, text: str) -> "Dependency":
        """Parse ``group:artifact:version``.

        Exactly two colons are required. Parts are not otherwise validated, so
        empty groups, artifacts or versions are accepted here.

        Raises:
            DependencyFormatError: If the text does not split into three parts.
        """
        parts = text.split(":")
        if len(parts) != 3:
            raise DependencyFormatError(
                f"Invalid dependency format '{text}'. Expected 'group:artifact:version'."
            )
        return cls(group=parts[0], artifact=parts[1], version=parts[2])


@dataclass
class Tally:
    """Own method/field counts for one unique dependency."""
    methods: int = 0
    fields: int = 0


@dataclass(frozen=True)
class TotalCounts:
    """Sum of own counts over a deduplicated set of dependencies."""
    methods: int
    fields: int


@dataclass(eq=False)
class CountNode:
    """One position in a resolved dependency tree.

    Several nodes may carry the same dependency (diamonds). After
    :func:`link_duplicates` they all share the representative's
    :class:`Tally`, so counts written through any of them are read back
    through all of them.
    """
    dependency: Dependency
    location: str = ""
    dependents: List["CountNode"] = field(default_factory=list)
    tally: Tally = field(default_factory=Tally)

    @property
    def own_methods(self) -> int:
        return self.tally.methods

    @own_methods.setter
    def own_methods(self, value: int) -> None:
        self.tally.methods = value

    @property
    def own_fields(self) -> int:
        return self.tally.fields

    @own_fields.setter
    def own_fields(self, value: int) -> None:
        self.tally.fields = value

    def walk(self) -> Iterator["CountNode"]:
        """Yield this node and every descendant in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.dependents))

    def flatten(self) -> Dict[Dependency, "CountNode"]:
        return flatten(self)

    def calculate_total(self) -> TotalCounts:
        return calculate_total(self)

    def __str__(self) -> str:
        return str(self.dependency)


def _has_counts(node: CountNode) -> bool:
    return bool(node.own_methods or node.own_fields)


def flatten(root: CountNode) -> Dict[Dependency, CountNode]:
    """Map each distinct dependency in the tree to one representative node.

    The first node met in pre-order wins, unless it holds no counts and a
    later occurrence does; then the first counted occurrence wins. No node
    is modified, so repeated calls on an unchanged tree agree.
    """
    result: Dict[Dependency, CountNode] = {}
    for node in root.walk():
        current = result.get(node.dependency)
        if current is None or (not _has_counts(current) and _has_counts(node)):
            result[node.dependency] = node
    return result


def link_duplicates(root: CountNode) -> Dict[Dependency, CountNode]:
    """Make every occurrence of a dependency share its representative's tally.

    Counts written through any occurrence afterwards are read back through
    all of them. Counts held only by a non-representative occurrence are
    replaced by the representative's.

    Returns:
        The :func:`flatten` mapping the tree was linked against.
    """
    representatives = flatten(root)
    for node in root.walk():
        representative = representatives[node.dependency]
        if representative is not node:
            node.tally = representative.tally
    return representatives


def calculate_total(root: CountNode) -> TotalCounts:
    """Sum own counts once per unique dependency under ``root``."""
    methods = 0
    fields = 0
    for node in flatten(root).values():
        methods += node.own_methods
        fields += node.own_fields
    return TotalCounts(methods=methods, fields=fields)
