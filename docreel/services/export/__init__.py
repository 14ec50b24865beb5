"""Artifact approval and export."""

from docreel.services.export.gate import ExportGate
from docreel.services.export.targets import (
    DistributionTarget,
    ExportResult,
    ExportTarget,
    LocalDownloadTarget,
)

__all__ = [
    "DistributionTarget",
    "ExportGate",
    "ExportResult",
    "ExportTarget",
    "LocalDownloadTarget",
]
