"""Dependency resolvers."""

from .gradle import GradleResolver, parse_report
from .workspace import ensure_gradle_workspace

__all__ = [
    "GradleResolver",
    "parse_report",
    "ensure_gradle_workspace",
]
