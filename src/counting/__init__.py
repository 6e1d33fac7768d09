"""Dependency tree resolution and deduplicated dex counting."""

from .base import ArtifactCounter, DependencyResolver, ProgressObserver
from .errors import (
    CountFailedError,
    CountingError,
    DependencyFormatError,
    DexCountError,
    DexFormatError,
    FormatError,
    ProvisioningError,
    ReportFormatError,
    ResolutionError,
    ToolNotFoundError,
    UnsupportedFormatError,
)
from .models import (
    CountNode,
    Dependency,
    Tally,
    TotalCounts,
    calculate_total,
    flatten,
    link_duplicates,
)
from .service import CountingService

__all__ = [
    "ArtifactCounter",
    "DependencyResolver",
    "ProgressObserver",
    "CountFailedError",
    "CountingError",
    "DependencyFormatError",
    "DexCountError",
    "DexFormatError",
    "FormatError",
    "ProvisioningError",
    "ReportFormatError",
    "ResolutionError",
    "ToolNotFoundError",
    "UnsupportedFormatError",
    "CountNode",
    "Dependency",
    "Tally",
    "TotalCounts",
    "calculate_total",
    "flatten",
    "link_duplicates",
    "CountingService",
]
